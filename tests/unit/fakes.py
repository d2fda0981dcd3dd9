"""Fake implementations for testing the sync engine."""

from datetime import date
from pathlib import Path
from typing import Any

from todoist_mirror.exceptions import TransportError
from todoist_mirror.models.project import RemoteProject


class FakeTodoistApi:
    """In-memory fake for TodoistApi.

    Serves a mutable project list and records created tasks.
    """

    def __init__(self, projects: list[RemoteProject] | None = None) -> None:
        self.projects: list[RemoteProject] = list(projects or [])
        self.tasks: list[dict[str, Any]] = []
        self.list_calls = 0
        self.fail_with: Exception | None = None

    def set_projects(self, *projects: RemoteProject) -> None:
        self.projects = list(projects)

    def rename(self, project_id: str, name: str) -> None:
        self.projects = [
            RemoteProject(p.id, name, p.parent_id) if p.id == project_id else p
            for p in self.projects
        ]

    def list_projects(self) -> list[RemoteProject]:
        self.list_calls += 1
        if self.fail_with is not None:
            raise self.fail_with
        return list(self.projects)

    def create_task(self, content: str, project_id: str) -> dict[str, Any]:
        task = {"id": str(len(self.tasks) + 1), "content": content, "project_id": project_id}
        self.tasks.append(task)
        return task


class FailingTaskApi(FakeTodoistApi):
    """Lists projects fine, but every task creation fails."""

    def create_task(self, content: str, project_id: str) -> dict[str, Any]:
        raise TransportError("task endpoint down")


class FakeClock:
    """Clock returning a fixed date."""

    def __init__(self, day: date) -> None:
        self.day = day

    def today(self) -> date:
        return self.day


TODAY = date(2026, 10, 18)


def write_note(vault: Path, rel_path: str, todoist_id: str | None, body: str = "") -> Path:
    """Create a note in the vault, with a TodoistId frontmatter if given."""
    path = vault / rel_path
    path.parent.mkdir(parents=True, exist_ok=True)
    text = f"---\nTodoistId: {todoist_id}\n---\n{body}" if todoist_id else body
    path.write_text(text, encoding="utf-8")
    return path


def vault_files(vault: Path) -> list[str]:
    """All files in the vault, as sorted relative POSIX paths."""
    return sorted(p.relative_to(vault).as_posix() for p in vault.rglob("*") if p.is_file())
