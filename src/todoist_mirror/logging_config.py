"""Logging configuration for todoist-mirror."""

import sys
from pathlib import Path

from loguru import logger

FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {message}"


def configure_logging(*, verbose: bool = False, log_file: Path | None = None) -> None:
    """Configure loguru with appropriate level.

    Args:
        verbose: Log DEBUG messages instead of INFO.
        log_file: Also write timestamped logs to this file, rotated at 1 MB
            and kept for two weeks. Meant for unattended ``watch`` runs.
    """
    logger.remove()
    level = "DEBUG" if verbose else "INFO"
    logger.add(sys.stderr, level=level, format="{level.icon} {message}")
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_file,
            level=level,
            format=FILE_FORMAT,
            rotation="1 MB",
            retention="14 days",
            encoding="utf-8",
        )
