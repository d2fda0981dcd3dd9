"""Identity index: which local note holds which Todoist project."""

from loguru import logger

from todoist_mirror.exceptions import StoreError
from todoist_mirror.models.project import LocalNote, PassReport
from todoist_mirror.notes import identity_of
from todoist_mirror.protocols import NoteStoreProtocol


def scan_notes(store: NoteStoreProtocol, report: PassReport | None = None) -> list[LocalNote]:
    """Read the identity tag of every markdown note in the store.

    Notes without a tag are returned with ``todoist_id=None``. Notes that
    cannot be read (dangling symlinks, missing permissions, files removed
    mid-scan) are logged, recorded in the report and left out entirely.
    """
    notes: list[LocalNote] = []
    for path in store.list_markdown_files():
        try:
            metadata = store.read_metadata(path)
        except StoreError as e:
            logger.warning("Skipping unreadable note: {}", e)
            if report is not None:
                report.errors.append(str(e))
            continue
        notes.append(LocalNote(path=path, todoist_id=identity_of(metadata)))
    logger.debug(
        "Scanned {} notes, {} with a Todoist ID",
        len(notes),
        sum(1 for n in notes if n.todoist_id),
    )
    return notes


def build_identity_index(
    notes: list[LocalNote],
) -> tuple[dict[str, LocalNote], list[LocalNote]]:
    """Map Todoist project ID to the note holding it.

    When several notes carry the same ID, the first in path order wins. The
    others are returned as duplicates and left alone by the sync.

    Returns:
        (index, duplicates)
    """
    index: dict[str, LocalNote] = {}
    duplicates: list[LocalNote] = []
    for note in sorted(notes, key=lambda n: n.path):
        if note.todoist_id is None:
            continue
        winner = index.get(note.todoist_id)
        if winner is not None:
            logger.warning(
                "Duplicate TodoistId {!r}: {!r} ignored, {!r} is used",
                note.todoist_id,
                note.path,
                winner.path,
            )
            duplicates.append(note)
            continue
        index[note.todoist_id] = note
    return index, duplicates
