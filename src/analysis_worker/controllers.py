"""Controllers for analysis worker CLI commands."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path

from analysis_worker.config import Settings
from analysis_worker.handlers import build_registry
from analysis_worker.log_config import configure_logging
from analysis_worker.processing import TaskLogging, TaskWorker, WorkerScheduler
from analysis_worker.queue import TaskQueueRepository, TaskStatus, TaskSubmit


@dataclass(slots=True)
class SubmitTaskCommand:
    """CLI input for task submission."""

    db_path: Path | None
    task_type: str
    component_id: str
    submitter: str | None
    task_id: str | None


@dataclass(slots=True)
class ListPendingCommand:
    """CLI input for queue listing."""

    db_path: Path | None
    limit: int


@dataclass(slots=True)
class ListActivityCommand:
    """CLI input for finalized task listing."""

    db_path: Path | None
    status: str | None
    limit: int


@dataclass(slots=True)
class InspectTaskCommand:
    """CLI input for task inspection."""

    db_path: Path | None
    task_id: str


@dataclass(slots=True)
class WorkerCommand:
    """CLI input for worker execution."""

    db_path: Path | None
    once: bool
    max_tasks: int | None
    max_idle_polls: int = 1


class WorkerCliController:
    """Translates CLI commands into queue and worker calls."""

    def submit(self, command: SubmitTaskCommand) -> list[str]:
        settings = Settings.from_env(db_path=command.db_path)
        with _repository(settings) as repository:
            task = repository.submit(
                TaskSubmit(
                    task_type=command.task_type,
                    component_id=command.component_id,
                    submitter=command.submitter,
                    task_id=command.task_id,
                ),
            )
        return [
            f"Submitted task: {task.task_id}",
            f"Type: {task.task_type}",
            f"Component: {task.component_id}",
            f"Submitter: {task.submitter or '-'}",
        ]

    def list_pending(self, command: ListPendingCommand) -> list[str]:
        settings = Settings.from_env(db_path=command.db_path)
        with _repository(settings) as repository:
            tasks = repository.list_pending(limit=command.limit)

        lines = [f"Queued tasks: {len(tasks)}"]
        for task in tasks:
            lines.append(
                f"  {task.task_id} type={task.task_type} component={task.component_id} "
                f"status={task.status.value} submitter={task.submitter or '-'} "
                f"created_at={task.created_at.isoformat()}",
            )
        return lines

    def list_activity(self, command: ListActivityCommand) -> list[str]:
        settings = Settings.from_env(db_path=command.db_path)
        status_filter = TaskStatus(command.status.lower()) if command.status else None
        with _repository(settings) as repository:
            activity = repository.list_activity(status=status_filter, limit=command.limit)

        lines = [f"Finished tasks: {len(activity)}"]
        for entry in activity:
            lines.append(
                f"  {entry.task_id} type={entry.task_type} component={entry.component_id} "
                f"status={entry.status.value} time={_format_ms(entry.execution_time_ms)} "
                f"executed_at={entry.executed_at.isoformat()}",
            )
        return lines

    def inspect_task(self, command: InspectTaskCommand) -> list[str]:
        settings = Settings.from_env(db_path=command.db_path)
        with _repository(settings) as repository:
            entry = repository.get_activity(task_id=command.task_id)
            queued = repository.get_pending(task_id=command.task_id) if entry is None else None

        if queued is not None:
            return [
                f"Task: {queued.task_id}",
                f"Type: {queued.task_type}",
                f"Component: {queued.component_id}",
                f"Submitter: {queued.submitter or '-'}",
                f"Status: {queued.status.value}",
                f"Worker: {queued.worker_id or '-'}",
            ]
        if entry is None:
            return [f"Task not found: {command.task_id}"]

        error = f"{entry.error_type}: {entry.error_message}" if entry.error_type else "-"
        return [
            f"Task: {entry.task_id}",
            f"Type: {entry.task_type}",
            f"Component: {entry.component_id}",
            f"Submitter: {entry.submitter or '-'}",
            f"Status: {entry.status.value}",
            f"Worker: {entry.worker_id or '-'}",
            f"Execution time: {_format_ms(entry.execution_time_ms)}",
            f"Error: {error}",
        ]

    def run_worker(self, command: WorkerCommand) -> list[str]:
        settings = Settings.from_env(db_path=command.db_path)
        settings.validate()
        configure_logging(settings.logging)
        registry = build_registry(settings.worker.handlers)
        task_logging = TaskLogging(
            logs_dir=settings.logging.task_logs_dir,
            max_logs_per_component=settings.logging.max_task_logs_per_component,
        )
        with _repository(settings) as repository:
            worker = TaskWorker(queue=repository, registry=registry, task_logging=task_logging)
            if command.once:
                processed = 1 if worker.run_once() else 0
                return [f"Worker summary: processed={processed} idle_polls={1 - processed}"]

            scheduler = WorkerScheduler(
                worker=worker,
                poll_interval_seconds=settings.worker.poll_interval_seconds,
                recover_in_progress=repository.reset_in_progress,
            )
            summary = scheduler.run_loop(
                max_tasks=command.max_tasks,
                max_idle_polls=command.max_idle_polls,
            )

        lines = [
            "Worker summary: "
            f"processed={summary.processed} idle_polls={summary.idle_polls} "
            f"reset_in_progress={summary.reset_in_progress}",
        ]
        if summary.stop_signal is not None:
            lines.append(f"Stopped by: {summary.stop_signal}")
        return lines

    def list_handlers(self) -> list[str]:
        settings = Settings.from_env()
        registry = build_registry(settings.worker.handlers)
        task_types = registry.task_types()
        lines = [f"Registered task types: {len(task_types)}"]
        lines.extend(f"  {task_type}" for task_type in task_types)
        return lines


def _format_ms(value: int | None) -> str:
    return f"{value}ms" if value is not None else "-"


@contextmanager
def _repository(settings: Settings) -> Iterator[TaskQueueRepository]:
    repository = TaskQueueRepository(
        db_path=settings.db_path,
        worker_id=settings.worker.worker_id,
        sqlite_busy_timeout_ms=settings.worker.sqlite_busy_timeout_ms,
    )
    repository.init_schema()
    try:
        yield repository
    finally:
        repository.close()
