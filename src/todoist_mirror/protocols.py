"""Protocols for dependency injection in the sync engine."""

from datetime import date
from typing import Any, Protocol, runtime_checkable

from todoist_mirror.models.project import RemoteProject


@runtime_checkable
class TodoistApiProtocol(Protocol):
    """Protocol for Todoist API clients."""

    def list_projects(self) -> list[RemoteProject]:
        """Return every project of the account."""
        ...

    def create_task(self, content: str, project_id: str) -> dict[str, Any]:
        """Create a task in a project and return the API task object."""
        ...


@runtime_checkable
class NoteStoreProtocol(Protocol):
    """Protocol for the local note store. Paths are vault-relative."""

    def exists(self, path: str) -> bool:
        """Check whether a file or folder exists at path."""
        ...

    def create_folder(self, path: str) -> None:
        """Create a folder and its parents. Existing folders are not an error."""
        ...

    def create_file(self, path: str, content: str) -> None:
        """Create a new file. Never overwrites."""
        ...

    def rename(self, path: str, new_path: str) -> None:
        """Move a file. Never overwrites."""
        ...

    def list_markdown_files(self) -> list[str]:
        """List every markdown file in the store, sorted."""
        ...

    def read_metadata(self, path: str) -> dict[str, Any]:
        """Return the frontmatter of a note, or an empty dict."""
        ...

    def same_file(self, path: str, other: str) -> bool:
        """Check whether two paths name the same file."""
        ...

    def remove_empty_folder(self, path: str) -> bool:
        """Remove a folder if it is empty. Returns True if it was removed."""
        ...


@runtime_checkable
class ClockProtocol(Protocol):
    """Protocol for the source of the current date."""

    def today(self) -> date:
        """Return the current local date."""
        ...
