"""Move notes of vanished projects into a dated archive."""

from datetime import date
from pathlib import PurePosixPath

from loguru import logger

from todoist_mirror.exceptions import ConflictError, StoreError
from todoist_mirror.models.project import LocalNote, PassReport
from todoist_mirror.protocols import ClockProtocol, NoteStoreProtocol


def quarter_of(day: date) -> int:
    return (day.month - 1) // 3 + 1


class Archiver:
    """Relocate notes whose Todoist project is gone.

    Target: ``<archive_folder>/<year>/Q<quarter>/<category>/<id>.md``, where
    category is the folder the note lived in, relative to the project folder.
    Notes are only ever moved, never deleted or rewritten.
    """

    def __init__(
        self,
        store: NoteStoreProtocol,
        clock: ClockProtocol,
        *,
        base_folder: str,
        archive_folder: str,
        report: PassReport | None = None,
    ) -> None:
        self._store = store
        self._clock = clock
        self.base_folder = base_folder.strip("/")
        self.archive_folder = archive_folder.strip("/")
        self.report = report if report is not None else PassReport()
        self.vacated: set[str] = set()

    def is_archived(self, path: str) -> bool:
        return PurePosixPath(self.archive_folder) in PurePosixPath(path).parents

    def archive_path(self, note: LocalNote, today: date) -> str:
        """Compute where a note goes in the archive."""
        assert note.todoist_id is not None
        parent = PurePosixPath(note.path).parent
        base = PurePosixPath(self.base_folder)
        parts: list[str] = [self.archive_folder, str(today.year), f"Q{quarter_of(today)}"]
        if base in parent.parents:
            parts.extend(parent.relative_to(base).parts)
        parts.append(f"{note.todoist_id}.md")
        return PurePosixPath(*parts).as_posix()

    def archive_orphans(self, notes: list[LocalNote], handled: set[str]) -> list[LocalNote]:
        """Archive every tagged note whose ID was not handled this pass.

        Failures are logged and recorded in the report; they never raise.

        Returns:
            Notes that were archived, with their new paths.
        """
        today = self._clock.today()
        archived: list[LocalNote] = []
        for note in notes:
            if note.todoist_id is None or note.todoist_id in handled:
                continue
            if self.is_archived(note.path):
                logger.debug("Already archived: {!r}", note.path)
                continue

            target = self.archive_path(note, today)
            try:
                self._store.create_folder(PurePosixPath(target).parent.as_posix())
                self._store.rename(note.path, target)
            except ConflictError as e:
                logger.warning("Conflict: {}", e)
                self.report.conflicts.append(str(e))
                continue
            except StoreError as e:
                logger.error("Cannot archive {!r}: {}", note.path, e)
                self.report.errors.append(str(e))
                continue

            logger.info("Archived {!r} -> {!r}", note.path, target)
            self.report.archived.append((note.path, target))
            self.vacated.add(PurePosixPath(note.path).parent.as_posix())
            archived.append(LocalNote(path=target, todoist_id=note.todoist_id))
        return archived
