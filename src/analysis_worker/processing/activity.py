"""Start and completion lines that form the task audit trail."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from analysis_worker.processing.task_logging import TASK_LOGGER_NAME, TaskLogContext
from analysis_worker.queue.models import TaskStatus

ACTIVITY_LOGGER_NAME = "analysis_worker.activity"


def default_sinks() -> tuple[logging.Logger, ...]:
    """Process-wide audit logger and the per-task logger."""

    return (logging.getLogger(ACTIVITY_LOGGER_NAME), logging.getLogger(TASK_LOGGER_NAME))


class ActivityProfiler:
    """Writes one start line and one completion line per sink for a handled task."""

    def __init__(self, sinks: Sequence[logging.Logger] | None = None) -> None:
        self.sinks = tuple(sinks) if sinks is not None else default_sinks()

    def start(self, context: TaskLogContext) -> None:
        message = "Execute task" + _task_fields(context)
        for sink in self.sinks:
            sink.info(message)

    def stop(self, context: TaskLogContext, status: TaskStatus) -> None:
        message = (
            f"Executed task | status={status.name}"
            + _task_fields(context)
            + f" | time={context.elapsed_ms()}ms"
        )
        level = logging.ERROR if status is TaskStatus.FAILED else logging.INFO
        for sink in self.sinks:
            sink.log(level, message)


def _task_fields(context: TaskLogContext) -> str:
    task = context.task
    fields = f" | component={task.component_id} | type={task.task_type} | id={task.task_id}"
    if task.submitter:
        fields += f" | submitter={task.submitter}"
    return fields
