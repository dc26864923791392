"""Persistent task queue backed by SQLModel + SQLite."""

from __future__ import annotations

import logging
import traceback
from pathlib import Path
from typing import Protocol
from uuid import uuid4

from sqlalchemy import update as sa_update
from sqlmodel import Session, col, select

from analysis_worker.errors import TaskNotFoundError
from analysis_worker.queue.models import (
    QueuedTaskView,
    QueueStatus,
    TaskActivityView,
    TaskDescriptor,
    TaskStatus,
    TaskSubmit,
)
from analysis_worker.storage.alembic_runner import upgrade_head
from analysis_worker.storage.common import (
    build_sqlite_engine,
    to_db_datetime,
    to_utc_aware_datetime,
    utc_now,
)
from analysis_worker.storage.sqlmodel_models import QueuedTask, TaskActivity

logger = logging.getLogger(__name__)


class TaskQueue(Protocol):
    """Queue operations consumed by the worker execution unit."""

    def peek(self) -> TaskDescriptor | None:
        """Claim the next pending task, or return None when the queue is idle."""

    def remove(
        self,
        task: TaskDescriptor,
        status: TaskStatus,
        error: BaseException | None = None,
    ) -> None:
        """Finalize a claimed task with its terminal status."""


class TaskQueueRepository:
    """Queue persistence facade backed by SQLModel + SQLite."""

    def __init__(
        self,
        db_path: Path,
        *,
        worker_id: str = "worker-1",
        sqlite_busy_timeout_ms: int = 5_000,
    ) -> None:
        self.db_path = db_path
        self.worker_id = worker_id
        self.engine = build_sqlite_engine(db_path=db_path, busy_timeout_ms=sqlite_busy_timeout_ms)

    def close(self) -> None:
        """Close underlying DB resources."""

        self.engine.dispose()

    def init_schema(self) -> None:
        """Run schema migrations."""

        upgrade_head(self.db_path)

    def submit(self, payload: TaskSubmit) -> QueuedTaskView:
        """Add a pending task to the queue."""

        if not payload.task_type.strip():
            raise ValueError("Task type must not be empty.")
        if not payload.component_id.strip():
            raise ValueError("Component id must not be empty.")

        now = to_db_datetime(utc_now())
        row = QueuedTask(
            task_id=payload.task_id or uuid4().hex,
            task_type=payload.task_type,
            component_id=payload.component_id,
            submitter=payload.submitter,
            status=QueueStatus.PENDING.value,
            created_at=now,
            updated_at=now,
        )
        with Session(self.engine) as session:
            if (
                session.get(QueuedTask, row.task_id) is not None
                or session.exec(
                    select(TaskActivity.id).where(TaskActivity.task_id == row.task_id),
                ).first()
                is not None
            ):
                raise ValueError(f"Task already exists: {row.task_id}")
            session.add(row)
            session.commit()
            session.refresh(row)
            return _to_queued_view(row)

    def peek(self) -> TaskDescriptor | None:
        """Atomically claim the oldest pending task."""

        while True:
            now = to_db_datetime(utc_now())
            with Session(self.engine) as session:
                candidate = session.exec(
                    select(QueuedTask)
                    .where(QueuedTask.status == QueueStatus.PENDING.value)
                    .order_by(col(QueuedTask.created_at).asc(), col(QueuedTask.task_id).asc())
                    .limit(1),
                ).one_or_none()
                if candidate is None:
                    return None

                result = session.exec(
                    sa_update(QueuedTask)
                    .where(
                        col(QueuedTask.task_id) == candidate.task_id,
                        col(QueuedTask.status) == QueueStatus.PENDING.value,
                    )
                    .values(
                        status=QueueStatus.IN_PROGRESS.value,
                        worker_id=self.worker_id,
                        started_at=now,
                        updated_at=now,
                    ),
                )
                if result.rowcount != 1:
                    # Another worker claimed it first.
                    session.rollback()
                    continue
                claimed = TaskDescriptor(
                    task_id=candidate.task_id,
                    task_type=candidate.task_type,
                    component_id=candidate.component_id,
                    submitter=candidate.submitter,
                )
                session.commit()
                return claimed

    def remove(
        self,
        task: TaskDescriptor,
        status: TaskStatus,
        error: BaseException | None = None,
    ) -> None:
        """Move a claimed task from the queue into the activity history."""

        executed_at = utc_now()
        with Session(self.engine) as session:
            row = session.exec(
                select(QueuedTask).where(
                    QueuedTask.task_id == task.task_id,
                    QueuedTask.status == QueueStatus.IN_PROGRESS.value,
                ),
            ).one_or_none()
            if row is None:
                raise TaskNotFoundError(f"Task is not in progress: {task.task_id}")

            execution_time_ms = None
            if row.started_at is not None:
                elapsed = executed_at - to_utc_aware_datetime(row.started_at)
                execution_time_ms = max(0, int(elapsed.total_seconds() * 1000))

            session.add(
                TaskActivity(
                    task_id=row.task_id,
                    task_type=row.task_type,
                    component_id=row.component_id,
                    submitter=row.submitter,
                    status=status.value,
                    worker_id=row.worker_id,
                    submitted_at=row.created_at,
                    started_at=row.started_at,
                    executed_at=to_db_datetime(executed_at),
                    execution_time_ms=execution_time_ms,
                    error_type=type(error).__name__ if error is not None else None,
                    error_message=str(error) if error is not None else None,
                    error_stacktrace=_format_stacktrace(error) if error is not None else None,
                ),
            )
            session.delete(row)
            session.commit()

    def reset_in_progress(self) -> int:
        """Return tasks abandoned by a stopped worker to the pending state."""

        now = to_db_datetime(utc_now())
        with Session(self.engine) as session:
            result = session.exec(
                sa_update(QueuedTask)
                .where(col(QueuedTask.status) == QueueStatus.IN_PROGRESS.value)
                .values(
                    status=QueueStatus.PENDING.value,
                    worker_id=None,
                    started_at=None,
                    updated_at=now,
                ),
            )
            session.commit()
            reset = int(result.rowcount or 0)
        if reset:
            logger.warning("Reset %d in-progress task(s) to pending", reset)
        return reset

    def list_pending(self, *, limit: int = 50) -> list[QueuedTaskView]:
        """List queued tasks in claim order."""

        with Session(self.engine) as session:
            rows = session.exec(
                select(QueuedTask)
                .order_by(col(QueuedTask.created_at).asc(), col(QueuedTask.task_id).asc())
                .limit(limit),
            ).all()
        return [_to_queued_view(row) for row in rows]

    def get_pending(self, *, task_id: str) -> QueuedTaskView | None:
        """Fetch a task that is still queued or in progress."""

        with Session(self.engine) as session:
            row = session.exec(
                select(QueuedTask).where(QueuedTask.task_id == task_id),
            ).one_or_none()
        return _to_queued_view(row) if row is not None else None

    def list_activity(
        self,
        *,
        status: TaskStatus | None = None,
        limit: int = 50,
    ) -> list[TaskActivityView]:
        """List finalized tasks, most recent first."""

        with Session(self.engine) as session:
            statement = (
                select(TaskActivity)
                .order_by(col(TaskActivity.executed_at).desc(), col(TaskActivity.id).desc())
                .limit(limit)
            )
            if status is not None:
                statement = statement.where(TaskActivity.status == status.value)
            rows = session.exec(statement).all()
        return [_to_activity_view(row) for row in rows]

    def get_activity(self, *, task_id: str) -> TaskActivityView | None:
        """Fetch the finalized record of one task."""

        with Session(self.engine) as session:
            row = session.exec(
                select(TaskActivity).where(TaskActivity.task_id == task_id),
            ).one_or_none()
        return _to_activity_view(row) if row is not None else None


def _format_stacktrace(error: BaseException) -> str:
    return "".join(traceback.format_exception(type(error), error, error.__traceback__))


def _to_queued_view(row: QueuedTask) -> QueuedTaskView:
    return QueuedTaskView(
        task_id=row.task_id,
        task_type=row.task_type,
        component_id=row.component_id,
        submitter=row.submitter,
        status=QueueStatus(row.status),
        worker_id=row.worker_id,
        created_at=to_utc_aware_datetime(row.created_at),
        started_at=to_utc_aware_datetime(row.started_at) if row.started_at is not None else None,
    )


def _to_activity_view(row: TaskActivity) -> TaskActivityView:
    return TaskActivityView(
        task_id=row.task_id,
        task_type=row.task_type,
        component_id=row.component_id,
        submitter=row.submitter,
        status=TaskStatus(row.status),
        worker_id=row.worker_id,
        submitted_at=to_utc_aware_datetime(row.submitted_at),
        started_at=to_utc_aware_datetime(row.started_at) if row.started_at is not None else None,
        executed_at=to_utc_aware_datetime(row.executed_at),
        execution_time_ms=row.execution_time_ms,
        error_type=row.error_type,
        error_message=row.error_message,
        error_stacktrace=row.error_stacktrace,
    )
