"""Map Todoist projects to their canonical place in the vault."""

from pathlib import PurePosixPath

from todoist_mirror.exceptions import MalformedTreeError
from todoist_mirror.models.project import RemoteProject
from todoist_mirror.notes import path_segment
from todoist_mirror.protocols import NoteStoreProtocol


def _join(*parts: str) -> str:
    return PurePosixPath(*parts).as_posix()


class PathResolver:
    """Resolve project folders for a single pass.

    A project's folder (``resolve_folder``) holds its children's notes; the
    project's own note lives in its parent's folder (``note_folder``). Folders
    are created on first use, and results are memoized by project ID, so
    shared ancestors are resolved and created once per pass.
    """

    def __init__(
        self,
        store: NoteStoreProtocol,
        projects: list[RemoteProject],
        base_folder: str,
    ) -> None:
        self._store = store
        self._projects = {p.id: p for p in projects}
        self.base_folder = base_folder.strip("/")
        # project id -> folder path, only for folders known to exist.
        self._memo: dict[str, str] = {}
        self._base_ready = False

    def _ensure_base(self) -> str:
        if not self._base_ready:
            self._store.create_folder(self.base_folder)
            self._base_ready = True
        return self.base_folder

    def _parent_of(self, project: RemoteProject) -> RemoteProject | None:
        if project.parent_id is None:
            return None
        parent = self._projects.get(project.parent_id)
        if parent is None:
            msg = (
                f"Project {project.name!r} ({project.id}) references "
                f"unknown parent {project.parent_id!r}"
            )
            raise MalformedTreeError(msg)
        return parent

    def _chain(self, project: RemoteProject) -> list[RemoteProject]:
        """Ancestors of project, root first, followed by project itself."""
        chain = [project]
        seen = {project.id}
        parent = self._parent_of(project)
        while parent is not None:
            if parent.id in seen:
                msg = f"Project {project.name!r} ({project.id}) has a cyclic parent chain"
                raise MalformedTreeError(msg)
            seen.add(parent.id)
            chain.append(parent)
            parent = self._parent_of(parent)
        chain.reverse()
        return chain

    def resolve_folder(self, project: RemoteProject) -> str:
        """Return the folder for this project's children, creating it and its ancestors."""
        if project.id in self._memo:
            return self._memo[project.id]

        folder = self._ensure_base()
        # Validate the whole chain before touching the disk.
        for node in self._chain(project):
            folder = self._memo.get(node.id) or _join(folder, path_segment(node.name))
            if node.id not in self._memo:
                self._store.create_folder(folder)
                self._memo[node.id] = folder
        return folder

    def note_folder(self, project: RemoteProject) -> str:
        """Return the folder holding the project's own note."""
        parent = self._parent_of(project)
        if parent is None:
            return self._ensure_base()
        return self.resolve_folder(parent)

    def note_path(self, project: RemoteProject) -> str:
        """Return the canonical vault path of the project's note."""
        return _join(self.note_folder(project), path_segment(project.name) + ".md")
