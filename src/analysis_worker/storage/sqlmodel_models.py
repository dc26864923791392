"""SQLModel ORM tables for the task queue."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Column, DateTime, Index, Text
from sqlmodel import Field, SQLModel


class QueuedTask(SQLModel, table=True):
    __tablename__ = "task_queue"  # type: ignore[bad-override]
    __table_args__ = (Index("idx_task_queue_status_created", "status", "created_at"),)

    task_id: str = Field(primary_key=True)
    task_type: str = Field(index=True)
    component_id: str = Field(index=True)
    submitter: str | None = None
    status: str = Field(index=True)
    worker_id: str | None = None
    created_at: datetime = Field(sa_column=Column(DateTime(timezone=True), nullable=False))
    started_at: datetime | None = Field(default=None, sa_column=Column(DateTime(timezone=True)))
    updated_at: datetime = Field(sa_column=Column(DateTime(timezone=True), nullable=False))


class TaskActivity(SQLModel, table=True):
    __tablename__ = "task_activity"  # type: ignore[bad-override]
    __table_args__ = (
        Index("idx_task_activity_component_executed", "component_id", "executed_at"),
    )

    id: int | None = Field(default=None, primary_key=True)
    task_id: str = Field(unique=True)
    task_type: str = Field(index=True)
    component_id: str
    submitter: str | None = None
    status: str = Field(index=True)
    worker_id: str | None = None
    submitted_at: datetime = Field(sa_column=Column(DateTime(timezone=True), nullable=False))
    started_at: datetime | None = Field(default=None, sa_column=Column(DateTime(timezone=True)))
    executed_at: datetime = Field(sa_column=Column(DateTime(timezone=True), nullable=False))
    execution_time_ms: int | None = None
    error_type: str | None = None
    error_message: str | None = Field(default=None, sa_column=Column(Text))
    error_stacktrace: str | None = Field(default=None, sa_column=Column(Text))
