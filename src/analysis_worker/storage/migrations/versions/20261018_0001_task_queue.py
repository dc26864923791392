"""Create task queue and task activity tables."""

from __future__ import annotations

import sqlalchemy as sa

from alembic import op

revision = "20261018_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "task_queue",
        sa.Column("task_id", sa.String(), nullable=False),
        sa.Column("task_type", sa.String(), nullable=False),
        sa.Column("component_id", sa.String(), nullable=False),
        sa.Column("submitter", sa.String(), nullable=True),
        sa.Column("status", sa.String(), nullable=False),
        sa.Column("worker_id", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("task_id"),
    )
    op.create_index("ix_task_queue_task_type", "task_queue", ["task_type"], unique=False)
    op.create_index("ix_task_queue_component_id", "task_queue", ["component_id"], unique=False)
    op.create_index("ix_task_queue_status", "task_queue", ["status"], unique=False)
    op.create_index(
        "idx_task_queue_status_created",
        "task_queue",
        ["status", "created_at"],
        unique=False,
    )

    op.create_table(
        "task_activity",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("task_id", sa.String(), nullable=False),
        sa.Column("task_type", sa.String(), nullable=False),
        sa.Column("component_id", sa.String(), nullable=False),
        sa.Column("submitter", sa.String(), nullable=True),
        sa.Column("status", sa.String(), nullable=False),
        sa.Column("worker_id", sa.String(), nullable=True),
        sa.Column("submitted_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("executed_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("execution_time_ms", sa.Integer(), nullable=True),
        sa.Column("error_type", sa.String(), nullable=True),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.Column("error_stacktrace", sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("task_id"),
    )
    op.create_index("ix_task_activity_task_type", "task_activity", ["task_type"], unique=False)
    op.create_index("ix_task_activity_status", "task_activity", ["status"], unique=False)
    op.create_index(
        "idx_task_activity_component_executed",
        "task_activity",
        ["component_id", "executed_at"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index("idx_task_activity_component_executed", table_name="task_activity")
    op.drop_index("ix_task_activity_status", table_name="task_activity")
    op.drop_index("ix_task_activity_task_type", table_name="task_activity")
    op.drop_table("task_activity")
    op.drop_index("idx_task_queue_status_created", table_name="task_queue")
    op.drop_index("ix_task_queue_status", table_name="task_queue")
    op.drop_index("ix_task_queue_component_id", table_name="task_queue")
    op.drop_index("ix_task_queue_task_type", table_name="task_queue")
    op.drop_table("task_queue")
