"""Mirror the Todoist project hierarchy into a markdown vault."""

from todoist_mirror.api import TodoistApi
from todoist_mirror.config import SyncConfig, load_config
from todoist_mirror.core.scheduler import Scheduler
from todoist_mirror.core.sync.engine import SyncEngine
from todoist_mirror.protocols import ClockProtocol, NoteStoreProtocol, TodoistApiProtocol
from todoist_mirror.store import VaultStore

__all__ = [
    "ClockProtocol",
    "NoteStoreProtocol",
    "Scheduler",
    "SyncConfig",
    "SyncEngine",
    "TodoistApi",
    "TodoistApiProtocol",
    "VaultStore",
    "load_config",
]
