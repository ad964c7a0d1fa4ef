"""Logging setup for the interactive session.

The terminal UI owns stdout, so records go to a rotating file under the
per-user log directory instead of the console.
"""

from __future__ import annotations

import logging
import logging.handlers
from pathlib import Path

from platformdirs import user_log_dir

from .config import APP_NAME

LOG_FILENAME = "navit.log"
LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s [%(threadName)s] %(message)s"
MAX_LOG_BYTES = 2 * 1024 * 1024
LOG_BACKUP_COUNT = 3
LEVEL_NAMES = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def default_log_path() -> Path:
    return Path(user_log_dir(APP_NAME, appauthor=False)) / LOG_FILENAME


def parse_level(level: str | int) -> int:
    """Map a level name (any case) or number to a ``logging`` level."""
    if isinstance(level, int):
        return level
    value = logging.getLevelName(str(level).strip().upper())
    if not isinstance(value, int):
        raise ValueError(f"unknown log level: {level!r}")
    return value


def configure_logging(level: str | int = "WARNING", log_file: Path | None = None) -> Path | None:
    """Attach a rotating file handler to the ``navit`` logger.

    Returns the log path in use, or ``None`` when the file cannot be opened;
    in that case records are dropped rather than written over the screen.
    """
    package_logger = logging.getLogger(APP_NAME)
    package_logger.setLevel(parse_level(level))
    package_logger.propagate = False
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()

    path = Path(log_file) if log_file is not None else default_log_path()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        handler: logging.Handler = logging.handlers.RotatingFileHandler(
            path,
            maxBytes=MAX_LOG_BYTES,
            backupCount=LOG_BACKUP_COUNT,
            encoding="utf-8",
        )
    except OSError:
        package_logger.addHandler(logging.NullHandler())
        return None
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    package_logger.addHandler(handler)
    package_logger.debug("logging to %s at %s", path, logging.getLevelName(package_logger.level))
    return path


__all__ = [
    "LEVEL_NAMES",
    "configure_logging",
    "default_log_path",
    "parse_level",
]
