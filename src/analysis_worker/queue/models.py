"""Domain models for the analysis task queue."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class TaskStatus(str, Enum):
    """Terminal status recorded once a claimed task is removed from the queue."""

    SUCCESS = "success"
    FAILED = "failed"


class QueueStatus(str, Enum):
    """Lifecycle of a task while it still sits in the queue."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"


@dataclass(frozen=True, slots=True)
class TaskDescriptor:
    """Immutable identity of one unit of submitted work."""

    task_id: str
    task_type: str
    component_id: str
    submitter: str | None = None


@dataclass(slots=True)
class TaskSubmit:
    """Input payload for submitting a task."""

    task_type: str
    component_id: str
    submitter: str | None = None
    task_id: str | None = None


@dataclass(slots=True)
class QueuedTaskView:
    """Readable queue row for CLI listings."""

    task_id: str
    task_type: str
    component_id: str
    submitter: str | None
    status: QueueStatus
    worker_id: str | None
    created_at: datetime
    started_at: datetime | None


@dataclass(slots=True)
class TaskActivityView:
    """Finalized task with its outcome and error payload."""

    task_id: str
    task_type: str
    component_id: str
    submitter: str | None
    status: TaskStatus
    worker_id: str | None
    submitted_at: datetime
    started_at: datetime | None
    executed_at: datetime
    execution_time_ms: int | None
    error_type: str | None
    error_message: str | None
    error_stacktrace: str | None
