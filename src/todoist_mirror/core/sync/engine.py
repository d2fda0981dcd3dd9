"""One complete sync pass: fetch, reconcile, archive."""

from datetime import date

from loguru import logger

from todoist_mirror.config import SyncConfig
from todoist_mirror.core.identity.index import build_identity_index, scan_notes
from todoist_mirror.core.sync.archiver import Archiver
from todoist_mirror.core.sync.reconciler import Reconciler, remove_vacated_folders
from todoist_mirror.models.project import PassReport
from todoist_mirror.protocols import ClockProtocol, NoteStoreProtocol, TodoistApiProtocol


class SystemClock:
    """Clock backed by the local system date."""

    def today(self) -> date:
        return date.today()


class SyncEngine:
    """Run sync passes against injected collaborators.

    The engine holds no state between passes: every pass re-reads the remote
    projects and rescans the vault.
    """

    def __init__(
        self,
        config: SyncConfig,
        api: TodoistApiProtocol,
        store: NoteStoreProtocol,
        clock: ClockProtocol | None = None,
    ) -> None:
        self.config = config
        self._api = api
        self._store = store
        self._clock = clock or SystemClock()

    def run_pass(self) -> PassReport:
        """Execute one pass.

        Raises:
            TransportError: The project list could not be fetched. Nothing in
                the vault has been touched at that point.
        """
        projects = self._api.list_projects()
        report = PassReport()
        notes = scan_notes(self._store, report)
        index, duplicates = build_identity_index(notes)

        report.conflicts.extend(
            f"Duplicate TodoistId {n.todoist_id!r} at {n.path!r}" for n in duplicates
        )

        reconciler = Reconciler(
            self._store,
            projects,
            index,
            notes,
            base_folder=self.config.project_folder,
            api=self._api if self.config.breadcrumb_tasks else None,
            report=report,
        )
        handled = reconciler.reconcile_all()

        archiver = Archiver(
            self._store,
            self._clock,
            base_folder=self.config.project_folder,
            archive_folder=self.config.archive_folder,
            report=report,
        )
        archiver.archive_orphans(notes, handled)

        remove_vacated_folders(
            self._store,
            reconciler.vacated | archiver.vacated,
            self.config.project_folder,
            report,
        )

        if report.mutations or report.conflicts or report.errors:
            logger.info("Sync pass: {}", report.summary())
        else:
            logger.debug("Sync pass: no changes ({} projects)", len(projects))
        return report
