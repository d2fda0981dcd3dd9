"""Tests for Reconciler — create / move / leave alone decisions."""

from pathlib import Path

from todoist_mirror.core.identity.index import build_identity_index, scan_notes
from todoist_mirror.core.sync.reconciler import Reconciler, remove_vacated_folders
from todoist_mirror.exceptions import StoreError
from todoist_mirror.models.project import PassReport, RemoteProject
from todoist_mirror.store import VaultStore
from tests.unit.fakes import FailingTaskApi, FakeTodoistApi, vault_files, write_note


def _reconciler(
    store: VaultStore, projects: list[RemoteProject], api: FakeTodoistApi | None = None
) -> Reconciler:
    notes = scan_notes(store)
    index, _duplicates = build_identity_index(notes)
    return Reconciler(store, projects, index, notes, base_folder="Projects", api=api)


def test_creates_note_for_new_project(store: VaultStore, vault: Path) -> None:
    reconciler = _reconciler(store, [RemoteProject("1", "Alpha")])

    handled = reconciler.reconcile_all()

    assert handled == {"1"}
    assert reconciler.report.created == ["Projects/Alpha.md"]
    assert "TodoistId: 1\n" in (vault / "Projects" / "Alpha.md").read_text()


def test_leaves_correctly_placed_note_alone(store: VaultStore, vault: Path) -> None:
    write_note(vault, "Projects/Alpha.md", "1", "my notes")
    reconciler = _reconciler(store, [RemoteProject("1", "Alpha")])

    reconciler.reconcile_all()

    assert reconciler.report.mutations == 0
    assert (vault / "Projects" / "Alpha.md").read_text().endswith("my notes")


def test_moves_note_to_new_name(store: VaultStore, vault: Path) -> None:
    write_note(vault, "Projects/OldName.md", "1", "keep me")
    reconciler = _reconciler(store, [RemoteProject("1", "NewName")])

    reconciler.reconcile_all()

    assert reconciler.report.moved == [("Projects/OldName.md", "Projects/NewName.md")]
    assert (vault / "Projects" / "NewName.md").read_text() == "---\nTodoistId: 1\n---\nkeep me"
    assert reconciler.vacated == {"Projects"}


def test_move_onto_occupied_target_is_a_conflict(store: VaultStore, vault: Path) -> None:
    write_note(vault, "Projects/Old.md", "1", "ours")
    write_note(vault, "Projects/New.md", None, "user file")
    reconciler = _reconciler(store, [RemoteProject("1", "New")])

    reconciler.reconcile_all()

    assert len(reconciler.report.conflicts) == 1
    assert reconciler.report.mutations == 0
    assert (vault / "Projects" / "Old.md").exists()
    assert (vault / "Projects" / "New.md").read_text() == "user file"


def test_sibling_name_clash_is_a_conflict(store: VaultStore, vault: Path) -> None:
    reconciler = _reconciler(
        store, [RemoteProject("1", "Same"), RemoteProject("2", "Same")]
    )

    reconciler.reconcile_all()

    assert reconciler.report.created == ["Projects/Same.md"]
    assert "occupied by project 1" in reconciler.report.conflicts[0]
    assert reconciler.handled == {"1", "2"}


def test_untagged_file_at_target_is_left_alone(store: VaultStore, vault: Path) -> None:
    write_note(vault, "Projects/Alpha.md", None, "hand written")
    reconciler = _reconciler(store, [RemoteProject("1", "Alpha")])

    reconciler.reconcile_all()

    assert reconciler.report.mutations == 0
    assert reconciler.report.conflicts == []


def test_dangling_parent_fails_only_that_project(store: VaultStore, vault: Path) -> None:
    reconciler = _reconciler(
        store,
        [RemoteProject("1", "Lost", "404"), RemoteProject("2", "Fine")],
    )

    handled = reconciler.reconcile_all()

    assert handled == {"1", "2"}
    assert reconciler.report.created == ["Projects/Fine.md"]
    assert len(reconciler.report.errors) == 1
    assert "unknown parent" in reconciler.report.errors[0]


def test_children_are_created_inside_parent_folder(store: VaultStore, vault: Path) -> None:
    projects = [
        RemoteProject("3", "Sink", "2"),
        RemoteProject("2", "Kitchen", "1"),
        RemoteProject("1", "Home"),
    ]
    reconciler = _reconciler(store, projects)

    reconciler.reconcile_all()

    assert vault_files(vault) == [
        "Projects/Home.md",
        "Projects/Home/Kitchen.md",
        "Projects/Home/Kitchen/Sink.md",
    ]


def test_breadcrumb_task_is_created_for_new_notes(store: VaultStore) -> None:
    api = FakeTodoistApi()
    reconciler = _reconciler(store, [RemoteProject("1", "Alpha")], api=api)

    reconciler.reconcile_all()

    assert api.tasks == [
        {"id": "1", "content": "Project note: Projects/Alpha.md", "project_id": "1"}
    ]


def test_breadcrumb_failure_keeps_the_note(store: VaultStore, vault: Path) -> None:
    reconciler = _reconciler(store, [RemoteProject("1", "Alpha")], api=FailingTaskApi())

    reconciler.reconcile_all()

    assert reconciler.report.created == ["Projects/Alpha.md"]
    assert reconciler.report.errors == []


def test_remove_vacated_folders_walks_up_to_base(store: VaultStore, vault: Path) -> None:
    (vault / "Projects" / "A" / "B").mkdir(parents=True)
    write_note(vault, "Projects/keep.md", None)
    report = PassReport()

    remove_vacated_folders(store, {"Projects/A/B"}, "Projects", report)

    assert report.folders_removed == ["Projects/A/B", "Projects/A"]
    assert (vault / "Projects").is_dir()


def test_remove_vacated_folders_never_removes_base(store: VaultStore, vault: Path) -> None:
    (vault / "Projects").mkdir()
    report = PassReport()

    remove_vacated_folders(store, {"Projects"}, "Projects", report)

    assert report.folders_removed == []
    assert (vault / "Projects").is_dir()


class FailingRenameStore(VaultStore):
    """Vault store whose renames fail for one source path."""

    def __init__(self, vault: Path, broken: str) -> None:
        super().__init__(vault)
        self.broken = broken

    def rename(self, path: str, new_path: str) -> None:
        if path == self.broken:
            msg = f"Cannot move {path!r} to {new_path!r}: disk full"
            raise StoreError(msg)
        super().rename(path, new_path)


class CaseInsensitiveStore(VaultStore):
    """Vault store that treats paths differing only in case as one file."""

    def same_file(self, path: str, other: str) -> bool:
        return path.lower() == other.lower() and self.exists(path)


def test_store_error_fails_only_that_project(vault: Path) -> None:
    write_note(vault, "Projects/OldA.md", "1", "a")
    write_note(vault, "Projects/OldB.md", "2", "b")
    store = FailingRenameStore(vault, broken="Projects/OldA.md")
    reconciler = _reconciler(store, [RemoteProject("1", "NewA"), RemoteProject("2", "NewB")])

    handled = reconciler.reconcile_all()

    assert handled == {"1", "2"}
    assert len(reconciler.report.errors) == 1
    assert "disk full" in reconciler.report.errors[0]
    assert reconciler.report.moved == [("Projects/OldB.md", "Projects/NewB.md")]
    assert vault_files(vault) == ["Projects/NewB.md", "Projects/OldA.md"]


def test_case_only_rename_moves_the_note(vault: Path) -> None:
    write_note(vault, "Projects/alpha.md", "1", "keep me")
    store = CaseInsensitiveStore(vault)
    reconciler = _reconciler(store, [RemoteProject("1", "Alpha")])

    reconciler.reconcile_all()

    assert reconciler.report.conflicts == []
    assert reconciler.report.moved == [("Projects/alpha.md", "Projects/Alpha.md")]
    assert vault_files(vault) == ["Projects/Alpha.md"]

    again = _reconciler(store, [RemoteProject("1", "Alpha")])
    again.reconcile_all()
    assert again.report.mutations == 0
    assert again.report.conflicts == []


def test_case_only_folder_difference_is_up_to_date(vault: Path) -> None:
    write_note(vault, "Projects/Home.md", "1")
    write_note(vault, "Projects/home/Kitchen.md", "2")
    store = CaseInsensitiveStore(vault)
    projects = [RemoteProject("1", "Home"), RemoteProject("2", "Kitchen", "1")]
    reconciler = _reconciler(store, projects)

    reconciler.reconcile_all()

    assert reconciler.report.moved == []
    assert reconciler.report.conflicts == []
    assert reconciler.report.errors == []
    assert (vault / "Projects" / "home" / "Kitchen.md").exists()
