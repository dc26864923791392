"""Durable task queue and its domain models."""

from analysis_worker.queue.models import (
    QueuedTaskView,
    QueueStatus,
    TaskActivityView,
    TaskDescriptor,
    TaskStatus,
    TaskSubmit,
)
from analysis_worker.queue.repository import TaskQueue, TaskQueueRepository

__all__ = [
    "QueueStatus",
    "QueuedTaskView",
    "TaskActivityView",
    "TaskDescriptor",
    "TaskQueue",
    "TaskQueueRepository",
    "TaskStatus",
    "TaskSubmit",
]
