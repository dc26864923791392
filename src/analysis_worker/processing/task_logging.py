"""Per-task diagnostic context for worker log lines.

While a context is open, every record emitted by the current thread can be
attributed to the claimed task: `TaskContextFilter` decorates records with the
task identity, and an optional file handler copies them into a dedicated log
file under ``<logs_dir>/<component_id>/<task_id>.log``.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar, Token
from dataclasses import dataclass, field
from pathlib import Path

from analysis_worker.errors import TaskLoggingError
from analysis_worker.queue.models import TaskDescriptor

logger = logging.getLogger(__name__)

TASK_LOGGER_NAME = "analysis_worker.task"
TASK_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"

_CURRENT: ContextVar[TaskLogContext | None] = ContextVar("analysis_worker_task", default=None)


@dataclass(slots=True)
class TaskLogContext:
    """Identity and start time of the task the current thread is handling."""

    task: TaskDescriptor
    started_at: float = field(default_factory=time.monotonic)

    def elapsed_ms(self) -> int:
        return int((time.monotonic() - self.started_at) * 1000)


def current_task_context() -> TaskLogContext | None:
    """Context opened by `TaskLogging.open` in the current thread, if any."""

    return _CURRENT.get()


class TaskContextFilter(logging.Filter):
    """Attach task identity fields to records so formatters can reference them."""

    def filter(self, record: logging.LogRecord) -> bool:
        context = _CURRENT.get()
        task = context.task if context is not None else None
        record.task_id = task.task_id if task is not None else "-"
        record.task_type = task.task_type if task is not None else "-"
        record.component_id = task.component_id if task is not None else "-"
        return True


class _OwnedByContext(logging.Filter):
    def __init__(self, context: TaskLogContext) -> None:
        super().__init__()
        self._context = context

    def filter(self, record: logging.LogRecord) -> bool:
        return _CURRENT.get() is self._context


class TaskLogging:
    """Opens and closes the diagnostic context around one claimed task."""

    def __init__(
        self,
        *,
        logs_dir: Path | None = None,
        max_logs_per_component: int = 10,
    ) -> None:
        if max_logs_per_component <= 0:
            raise ValueError("max_logs_per_component must be > 0.")
        self.logs_dir = logs_dir
        self.max_logs_per_component = max_logs_per_component
        self._token: Token[TaskLogContext | None] | None = None
        self._context: TaskLogContext | None = None
        self._file_handler: logging.FileHandler | None = None

    def current(self) -> TaskLogContext | None:
        return self._context

    def open(self, task: TaskDescriptor) -> TaskLogContext:
        """Begin attributing log lines of this thread to `task`."""

        if self._context is not None:
            raise TaskLoggingError(
                f"Cannot open context for task {task.task_id}: "
                f"task {self._context.task.task_id} is still open.",
            )
        context = TaskLogContext(task=task)
        path = self.task_log_path(task)
        if path is not None:
            try:
                self._file_handler = _attach_file_handler(path, context)
            except OSError as error:
                raise TaskLoggingError(
                    f"Cannot open log file {path} for task {task.task_id}: {error}",
                ) from error
        self._token = _CURRENT.set(context)
        self._context = context
        logger.debug("Opened log context for task %s", task.task_id)
        return context

    def close(self) -> None:
        """End attribution. A close without a matching open does nothing."""

        context = self._context
        if context is None:
            return
        logger.debug("Closing log context for task %s", context.task.task_id)
        try:
            if self._file_handler is not None:
                logging.getLogger().removeHandler(self._file_handler)
                self._file_handler.close()
                self._purge_component_logs(context.task.component_id)
        finally:
            self._file_handler = None
            if self._token is not None:
                _CURRENT.reset(self._token)
            self._token = None
            self._context = None

    @contextmanager
    def scoped(self, task: TaskDescriptor) -> Iterator[TaskLogContext]:
        """Open the context for `task` and close it on every exit path."""

        context = self.open(task)
        try:
            yield context
        finally:
            self.close()

    def task_log_path(self, task: TaskDescriptor) -> Path | None:
        if self.logs_dir is None:
            return None
        return self.logs_dir / _safe_name(task.component_id) / f"{_safe_name(task.task_id)}.log"

    def _purge_component_logs(self, component_id: str) -> None:
        if self.logs_dir is None:
            return
        component_dir = self.logs_dir / _safe_name(component_id)
        if not component_dir.is_dir():
            return
        log_files = sorted(
            component_dir.glob("*.log"),
            key=lambda path: (path.stat().st_mtime, path.name),
            reverse=True,
        )
        for stale in log_files[self.max_logs_per_component :]:
            stale.unlink(missing_ok=True)


def _attach_file_handler(path: Path, context: TaskLogContext) -> logging.FileHandler:
    """Copy every record logged while `context` is current into `path`."""

    path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(TASK_LOG_FORMAT))
    handler.addFilter(_OwnedByContext(context))
    logging.getLogger().addHandler(handler)
    return handler


def _safe_name(value: str) -> str:
    cleaned = "".join(char if char.isalnum() or char in "-_." else "_" for char in value)
    return cleaned.strip(".") or "_"
