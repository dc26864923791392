"""Worker execution unit: one claim, execute, finalize cycle per call."""

from __future__ import annotations

import logging

from analysis_worker.errors import TaskLoggingError
from analysis_worker.processing.activity import ActivityProfiler
from analysis_worker.processing.registry import HandlerRegistry
from analysis_worker.processing.task_logging import TaskLogContext, TaskLogging
from analysis_worker.queue.models import TaskDescriptor, TaskStatus
from analysis_worker.queue.repository import TaskQueue

logger = logging.getLogger(__name__)


class TaskWorker:
    """Claims at most one task per `run_once` call and records its outcome."""

    def __init__(
        self,
        *,
        queue: TaskQueue,
        registry: HandlerRegistry,
        task_logging: TaskLogging,
        profiler: ActivityProfiler | None = None,
    ) -> None:
        self.queue = queue
        self.registry = registry
        self.task_logging = task_logging
        self.profiler = profiler or ActivityProfiler()

    def run_once(self) -> bool:
        """Process at most one task.

        Returns False when the queue had nothing pending. Handler failures are
        recorded as a FAILED task and never raised to the caller. A task whose
        log context cannot be opened is recorded as FAILED without running.
        """

        task = self.queue.peek()
        if task is None:
            return False

        try:
            context = self.task_logging.open(task)
        except TaskLoggingError as error:
            logger.error("Cannot open log context for task %s", task.task_id, exc_info=True)
            self.queue.remove(task, TaskStatus.FAILED, error)
            return True

        try:
            self._execute(task, context)
        finally:
            self.task_logging.close()
        return True

    def _execute(self, task: TaskDescriptor, context: TaskLogContext) -> None:
        status = TaskStatus.FAILED
        error: Exception | None = None
        started = False
        try:
            handler = self.registry.find(task.task_type)
            if handler is None:
                logger.error(
                    "No handler is registered for task type %s. "
                    "Handler configuration may have changed.",
                    task.task_type,
                )
            else:
                self.profiler.start(context)
                started = True
                handler.execute(task)
                status = TaskStatus.SUCCESS
        except Exception as caught:  # noqa: BLE001
            logger.error("Failed to execute task %s", task.task_id, exc_info=True)
            error = caught

        self.queue.remove(task, status, error)
        if started:
            self.profiler.stop(context, status)
