"""CLI entrypoint for analysis-worker."""

from collections.abc import Callable
from pathlib import Path
from typing import TypeVar

import rich_click as click

from analysis_worker import __version__
from analysis_worker.controllers import (
    InspectTaskCommand,
    ListActivityCommand,
    ListPendingCommand,
    SubmitTaskCommand,
    WorkerCliController,
    WorkerCommand,
)
from analysis_worker.errors import AnalysisWorkerError

T = TypeVar("T")

click.rich_click.USE_MARKDOWN = True
CONTROLLER = WorkerCliController()


@click.group()
@click.version_option(version=__version__, prog_name="analysis-worker")
def analysis_worker() -> None:
    """Analysis task queue and worker CLI."""


@analysis_worker.group()
def queue() -> None:
    """Task queue commands."""


@queue.command("submit")
@click.option("--db-path", type=click.Path(path_type=Path), default=None, help="SQLite DB path.")
@click.option("--task-type", required=True, help="Task type tag, for example REPORT.")
@click.option("--component", "component_id", required=True, help="Component the task targets.")
@click.option("--submitter", default=None, help="Login of the submitting user.")
@click.option("--task-id", default=None, help="Explicit task id (generated when omitted).")
def queue_submit(
    db_path: Path | None,
    task_type: str,
    component_id: str,
    submitter: str | None,
    task_id: str | None,
) -> None:
    """Submit one task to the queue."""

    _emit_lines(
        _run(
            CONTROLLER.submit,
            SubmitTaskCommand(
                db_path=db_path,
                task_type=task_type,
                component_id=component_id,
                submitter=submitter,
                task_id=task_id,
            ),
        ),
    )


@queue.command("pending")
@click.option("--db-path", type=click.Path(path_type=Path), default=None, help="SQLite DB path.")
@click.option(
    "--limit",
    type=click.IntRange(min=1, max=1000),
    default=50,
    show_default=True,
    help="Maximum rows to show.",
)
def queue_pending(db_path: Path | None, limit: int) -> None:
    """List queued and in-progress tasks in claim order."""

    _emit_lines(CONTROLLER.list_pending(ListPendingCommand(db_path=db_path, limit=limit)))


@queue.command("activity")
@click.option("--db-path", type=click.Path(path_type=Path), default=None, help="SQLite DB path.")
@click.option(
    "--status",
    type=click.Choice(["success", "failed"], case_sensitive=False),
    default=None,
    help="Optional status filter.",
)
@click.option(
    "--limit",
    type=click.IntRange(min=1, max=1000),
    default=50,
    show_default=True,
    help="Maximum rows to show.",
)
def queue_activity(db_path: Path | None, status: str | None, limit: int) -> None:
    """List finished tasks, most recent first."""

    _emit_lines(
        CONTROLLER.list_activity(
            ListActivityCommand(db_path=db_path, status=status, limit=limit),
        ),
    )


@queue.command("inspect")
@click.argument("task_id")
@click.option("--db-path", type=click.Path(path_type=Path), default=None, help="SQLite DB path.")
def queue_inspect(task_id: str, db_path: Path | None) -> None:
    """Show one task, queued or finished."""

    _emit_lines(CONTROLLER.inspect_task(InspectTaskCommand(db_path=db_path, task_id=task_id)))


@analysis_worker.command("worker")
@click.option("--db-path", type=click.Path(path_type=Path), default=None, help="SQLite DB path.")
@click.option(
    "--once/--loop",
    default=True,
    show_default=True,
    help="Run one claim-execute-finalize cycle or loop until idle.",
)
@click.option(
    "--max-tasks",
    type=click.IntRange(min=1),
    default=None,
    help="Optional cap for processed tasks in loop mode.",
)
@click.option(
    "--max-idle-polls",
    type=click.IntRange(min=1),
    default=1,
    show_default=True,
    help="Consecutive empty polls before the loop exits.",
)
def worker(
    db_path: Path | None,
    once: bool,
    max_tasks: int | None,
    max_idle_polls: int,
) -> None:
    """Run the task worker."""

    _emit_lines(
        _run(
            CONTROLLER.run_worker,
            WorkerCommand(
                db_path=db_path,
                once=once,
                max_tasks=max_tasks,
                max_idle_polls=max_idle_polls,
            ),
        ),
    )


@analysis_worker.command("handlers")
def handlers() -> None:
    """List task types that have a registered handler."""

    _emit_lines(_run(lambda _: CONTROLLER.list_handlers(), None))


def _run(action: Callable[[T], list[str]], command: T) -> list[str]:
    try:
        return action(command)
    except (AnalysisWorkerError, ValueError) as error:
        raise click.ClickException(str(error)) from error


def _emit_lines(lines: list[str]) -> None:
    for line in lines:
        click.echo(line)


if __name__ == "__main__":  # pragma: no cover
    analysis_worker()
