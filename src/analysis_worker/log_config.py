"""Process-wide logging configuration for CLI entrypoints."""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler

from analysis_worker.config import LoggingSettings
from analysis_worker.processing.task_logging import TaskContextFilter

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s [%(task_id)s] %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_MAX_BYTES = 5 * 1024 * 1024
_BACKUP_COUNT = 3
_NOISY_LOGGERS = ("sqlalchemy", "alembic")


def configure_logging(settings: LoggingSettings, *, force: bool = False) -> None:
    """Install stderr (and optional rotating file) handlers on the root logger.

    Like `logging.basicConfig`, does nothing when the root logger already has
    handlers, unless `force` is set, in which case they are replaced.
    """

    root = logging.getLogger()
    if root.handlers and not force:
        return

    level = settings.level_number
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    context_filter = TaskContextFilter()

    root.setLevel(level)
    for handler in root.handlers[:]:
        root.removeHandler(handler)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(level)
    console.setFormatter(formatter)
    console.addFilter(context_filter)
    root.addHandler(console)

    if settings.log_file is not None:
        settings.log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            settings.log_file,
            maxBytes=_MAX_BYTES,
            backupCount=_BACKUP_COUNT,
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        file_handler.addFilter(context_filter)
        root.addHandler(file_handler)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
