"""Configuration for todoist-mirror."""

import json
import os
from dataclasses import dataclass, fields
from pathlib import Path, PurePosixPath
from typing import Any

from todoist_mirror.exceptions import ConfigError

# Default location of the JSON configuration file.
DEFAULT_CONFIG_FILE: Path = Path("~/.config/todoist-mirror/config.json").expanduser()

# Environment variable consulted when the config file has no token.
API_TOKEN_ENV: str = "TODOIST_API_TOKEN"

# API token location, used when neither the config file nor the environment
# provides one. First file found is used.
API_TOKEN_FILES: list[Path] = [
    Path("~/.config/todoist-mirror-token.txt").expanduser(),
    Path("~/.config/secret/todoist-token.txt").expanduser(),
]

DEFAULT_PROJECT_FOLDER = "Projects"
DEFAULT_ARCHIVE_FOLDER = "Archive"
DEFAULT_SYNC_FREQUENCY = 60


@dataclass(frozen=True)
class SyncConfig:
    """Immutable settings for one engine / scheduler instance.

    To apply changed settings, build a new config and a new Scheduler.
    """

    vault_path: Path
    api_token: str
    project_folder: str = DEFAULT_PROJECT_FOLDER
    archive_folder: str = DEFAULT_ARCHIVE_FOLDER
    sync_frequency_seconds: int = DEFAULT_SYNC_FREQUENCY
    primary_sync_device: str = ""
    breadcrumb_tasks: bool = False
    dry_run: bool = False

    def __post_init__(self) -> None:
        for name in ("api_token", "project_folder", "archive_folder", "primary_sync_device"):
            if not isinstance(getattr(self, name), str):
                msg = f"{name} must be a string, got {getattr(self, name)!r}"
                raise ConfigError(msg)
        if not isinstance(self.sync_frequency_seconds, int):
            msg = f"sync_frequency_seconds must be an integer, got {self.sync_frequency_seconds!r}"
            raise ConfigError(msg)
        if self.sync_frequency_seconds < 0:
            msg = f"sync_frequency_seconds must be >= 0, got {self.sync_frequency_seconds!r}"
            raise ConfigError(msg)
        for name in ("project_folder", "archive_folder"):
            value = getattr(self, name)
            if not value.strip("/") or Path(value).is_absolute() or ".." in Path(value).parts:
                msg = f"{name} must be a relative folder inside the vault, got {value!r}"
                raise ConfigError(msg)
        project = PurePosixPath(_normalize(self.project_folder))
        archive = PurePosixPath(_normalize(self.archive_folder))
        if project == archive or project in archive.parents or archive in project.parents:
            msg = (
                "project_folder and archive_folder must be separate folders, got "
                f"{self.project_folder!r} and {self.archive_folder!r}"
            )
            raise ConfigError(msg)

    def __repr__(self) -> str:
        # Keep the token out of logs.
        return (
            f"SyncConfig(vault_path={str(self.vault_path)!r}, "
            f"project_folder={self.project_folder!r}, archive_folder={self.archive_folder!r}, "
            f"sync_frequency_seconds={self.sync_frequency_seconds!r}, "
            f"primary_sync_device={self.primary_sync_device!r}, "
            f"breadcrumb_tasks={self.breadcrumb_tasks!r}, dry_run={self.dry_run!r})"
        )


def _normalize(folder: str) -> str:
    return folder.strip("/")


def read_token_file() -> str | None:
    """Return the token from the first readable file in API_TOKEN_FILES."""
    for token_path in API_TOKEN_FILES:
        try:
            token = token_path.read_text(encoding="utf-8").strip()
        except FileNotFoundError:
            continue
        if token:
            return token
    return None


def load_config(path: Path | None = None, **overrides: Any) -> SyncConfig:
    """Load configuration from a JSON file.

    Args:
        path: Config file. Defaults to DEFAULT_CONFIG_FILE; a missing default
            file is allowed when everything required comes from overrides and
            the environment.
        overrides: Values taking precedence over the file (e.g. ``dry_run``).

    Raises:
        ConfigError: The file is unreadable, has unknown keys, or the vault
            path or API token cannot be determined.
    """
    config_path = path or DEFAULT_CONFIG_FILE
    raw: dict[str, Any] = {}
    try:
        raw = json.loads(config_path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        if path is not None:
            msg = f"Config file not found: {str(config_path)!r}"
            raise ConfigError(msg) from None
    except json.JSONDecodeError as e:
        msg = f"Config file {str(config_path)!r} is not valid JSON: {e}"
        raise ConfigError(msg) from e

    if not isinstance(raw, dict):
        msg = f"Config file {str(config_path)!r} must contain a JSON object"
        raise ConfigError(msg)

    known = {f.name for f in fields(SyncConfig)}
    unknown = sorted(set(raw) - known)
    if unknown:
        msg = f"Unknown config keys in {str(config_path)!r}: {unknown!r}"
        raise ConfigError(msg)

    values = {**raw, **{k: v for k, v in overrides.items() if v is not None}}

    if not values.get("api_token"):
        values["api_token"] = os.environ.get(API_TOKEN_ENV) or read_token_file()
    if not values.get("api_token"):
        msg = (
            f"Cannot find Todoist API token: set api_token in {str(config_path)!r}, "
            f"${API_TOKEN_ENV}, or one of {[str(p) for p in API_TOKEN_FILES]!r}"
        )
        raise ConfigError(msg)

    if not values.get("vault_path"):
        msg = f"vault_path is not configured in {str(config_path)!r}"
        raise ConfigError(msg)
    if not isinstance(values["vault_path"], str | Path):
        msg = f"vault_path must be a string, got {values['vault_path']!r}"
        raise ConfigError(msg)
    values["vault_path"] = Path(values["vault_path"]).expanduser()

    try:
        return SyncConfig(**values)
    except TypeError as e:
        msg = f"Invalid configuration: {e}"
        raise ConfigError(msg) from e
