"""Reconcile the remote project tree against the notes in the vault."""

from pathlib import PurePosixPath

from loguru import logger

from todoist_mirror.core.tree.resolver import PathResolver
from todoist_mirror.exceptions import ConflictError, MalformedTreeError, StoreError, TransportError
from todoist_mirror.models.project import LocalNote, PassReport, RemoteProject
from todoist_mirror.notes import render_project_note
from todoist_mirror.protocols import NoteStoreProtocol, TodoistApiProtocol


def remove_vacated_folders(
    store: NoteStoreProtocol, folders: set[str], stop_at: str, report: PassReport
) -> None:
    """Remove folders left empty by moves, and their parents while they are empty.

    Only folders strictly below ``stop_at`` are candidates. Called once at the
    end of a pass; deepest folders go first.
    """
    stop = PurePosixPath(stop_at.strip("/"))
    for folder in sorted(folders, key=lambda f: (-f.count("/"), f)):
        current = PurePosixPath(folder)
        while current != stop and stop in current.parents:
            if not store.remove_empty_folder(current.as_posix()):
                break
            report.folders_removed.append(current.as_posix())
            current = current.parent


class Reconciler:
    """Create, move or leave alone the note of every remote project.

    One instance per pass. ``handled`` collects the IDs of all projects seen
    in the remote tree; the archiver uses it to find orphaned notes.
    """

    def __init__(
        self,
        store: NoteStoreProtocol,
        projects: list[RemoteProject],
        index: dict[str, LocalNote],
        notes: list[LocalNote],
        *,
        base_folder: str,
        api: TodoistApiProtocol | None = None,
        report: PassReport | None = None,
    ) -> None:
        self._store = store
        self._projects = projects
        self._index = dict(index)
        self._api = api
        self.base_folder = base_folder.strip("/")
        self.resolver = PathResolver(store, projects, self.base_folder)
        self.report = report if report is not None else PassReport()
        self.handled: set[str] = set()
        # Folders a note was moved out of; candidates for cleanup.
        self.vacated: set[str] = set()
        # vault path -> identity of the note there, kept current as we go.
        self._occupants: dict[str, str] = {n.path: n.todoist_id for n in notes if n.todoist_id}

    def reconcile_all(self) -> set[str]:
        """Reconcile every project. Per-project failures are logged and skipped."""
        for project in self._projects:
            try:
                self.reconcile(project)
            except ConflictError as e:
                logger.warning("Conflict: {}", e)
                self.report.conflicts.append(str(e))
            except (MalformedTreeError, StoreError) as e:
                logger.error("Cannot sync project {!r} ({}): {}", project.name, project.id, e)
                self.report.errors.append(str(e))
        return self.handled

    def reconcile(self, project: RemoteProject) -> None:
        """Bring a single project's note to its canonical path."""
        self.handled.add(project.id)
        target = self.resolver.note_path(project)
        existing = self._index.get(project.id)

        if existing is not None and self._differs_only_in_case(existing.path, target):
            current, wanted = PurePosixPath(existing.path), PurePosixPath(target)
            if current.name == wanted.name:
                # Folder case is left as the file system keeps it.
                logger.debug("Up to date: {!r}", existing.path)
            else:
                renamed = (current.parent / wanted.name).as_posix()
                self._move(project, existing, renamed)
            return

        if self._store.exists(target):
            occupant = self._occupants.get(target)
            if existing is not None and existing.path != target:
                msg = (
                    f"Cannot move {existing.path!r} to {target!r} for project "
                    f"{project.name!r} ({project.id}): target already exists"
                )
                raise ConflictError(msg)
            if occupant is not None and occupant != project.id:
                msg = (
                    f"Cannot place project {project.name!r} ({project.id}) at {target!r}: "
                    f"occupied by project {occupant}"
                )
                raise ConflictError(msg)
            logger.debug("Up to date: {!r}", target)
            return

        if existing is None:
            self._create(project, target)
        else:
            self._move(project, existing, target)

    def _create(self, project: RemoteProject, target: str) -> None:
        self._store.create_file(target, render_project_note(project.id, project.name))
        logger.info("Created {!r}", target)
        self.report.created.append(target)
        self._occupants[target] = project.id
        self._index[project.id] = LocalNote(path=target, todoist_id=project.id)
        if self._api is not None:
            self._leave_breadcrumb(project, target)

    def _differs_only_in_case(self, path: str, target: str) -> bool:
        """True when target differs only in case and names the same file."""
        return (
            path != target
            and path.lower() == target.lower()
            and self._store.same_file(path, target)
        )

    def _move(self, project: RemoteProject, note: LocalNote, target: str) -> None:
        self._store.rename(note.path, target)
        logger.info("Moved {!r} -> {!r}", note.path, target)
        self.report.moved.append((note.path, target))
        self._occupants.pop(note.path, None)
        self._occupants[target] = project.id
        self._index[project.id] = LocalNote(path=target, todoist_id=project.id)

        self.vacated.add(PurePosixPath(note.path).parent.as_posix())

    def _leave_breadcrumb(self, project: RemoteProject, target: str) -> None:
        assert self._api is not None
        try:
            self._api.create_task(f"Project note: {target}", project.id)
        except TransportError as e:
            logger.warning("Could not create breadcrumb task for {!r}: {}", project.name, e)
