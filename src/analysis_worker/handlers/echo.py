"""Demo handler that only records the task in its log."""

from __future__ import annotations

import logging

from analysis_worker.queue.models import TaskDescriptor

ECHO_TASK_TYPE = "ECHO"

logger = logging.getLogger("analysis_worker.task.echo")


class EchoTaskHandler:
    """Accepts every task and returns without side effects."""

    def execute(self, task: TaskDescriptor) -> None:
        logger.debug("Echo task %s for component %s", task.task_id, task.component_id)
