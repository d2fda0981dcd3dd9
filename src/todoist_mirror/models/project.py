"""Domain models for the Todoist mirror."""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class RemoteProject:
    """A single project in the Todoist project hierarchy."""

    id: str
    name: str
    parent_id: str | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "RemoteProject":
        """Build a project from a REST API project object."""
        parent_id = data.get("parent_id")
        return cls(
            id=str(data["id"]),
            name=str(data["name"]),
            parent_id=str(parent_id) if parent_id is not None else None,
        )


@dataclass(frozen=True)
class LocalNote:
    """A markdown note in the vault.

    ``path`` is vault-relative with forward slashes. ``todoist_id`` is the
    identity tag read from the frontmatter, or None for unmanaged notes.
    """

    path: str
    todoist_id: str | None = None


@dataclass
class PassReport:
    """What a single sync pass did."""

    created: list[str] = field(default_factory=list)
    moved: list[tuple[str, str]] = field(default_factory=list)
    archived: list[tuple[str, str]] = field(default_factory=list)
    folders_removed: list[str] = field(default_factory=list)
    conflicts: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def mutations(self) -> int:
        """Number of file-system changes made (or planned, in dry-run mode)."""
        return (
            len(self.created) + len(self.moved) + len(self.archived) + len(self.folders_removed)
        )

    def summary(self) -> str:
        """One-line summary, usable for logs and CLI output."""
        return (
            f"{len(self.created)} created, {len(self.moved)} moved, "
            f"{len(self.archived)} archived, {len(self.folders_removed)} folders removed, "
            f"{len(self.conflicts)} conflicts, {len(self.errors)} errors"
        )
