from __future__ import annotations

from pathlib import Path

import allure
import pytest
from click.testing import CliRunner

from analysis_worker.main import analysis_worker

pytestmark = [
    allure.epic("Task Worker"),
    allure.feature("CLI"),
]


@pytest.fixture
def runner(monkeypatch: pytest.MonkeyPatch) -> CliRunner:
    monkeypatch.delenv("ANALYSIS_WORKER_HANDLERS", raising=False)
    monkeypatch.delenv("ANALYSIS_WORKER_TASK_LOGS_DIR", raising=False)
    return CliRunner()


def _invoke(runner: CliRunner, *args: str) -> str:
    result = runner.invoke(analysis_worker, list(args))
    assert result.exit_code == 0, result.output
    return result.output


def test_submit_run_and_inspect_echo_task(runner: CliRunner, tmp_path: Path) -> None:
    db_path = str(tmp_path / "cli.db")

    output = _invoke(
        runner,
        "queue",
        "submit",
        "--db-path",
        db_path,
        "--task-type",
        "ECHO",
        "--component",
        "PROJECT_1",
        "--submitter",
        "alice",
        "--task-id",
        "TASK_1",
    )
    assert "Submitted task: TASK_1" in output

    assert "Queued tasks: 1" in _invoke(runner, "queue", "pending", "--db-path", db_path)

    output = _invoke(runner, "worker", "--db-path", db_path, "--once")
    assert "Worker summary: processed=1 idle_polls=0" in output

    output = _invoke(runner, "queue", "activity", "--db-path", db_path)
    assert "Finished tasks: 1" in output
    assert "TASK_1 type=ECHO component=PROJECT_1 status=success" in output

    output = _invoke(runner, "queue", "inspect", "TASK_1", "--db-path", db_path)
    assert "Status: success" in output
    assert "Submitter: alice" in output
    assert "Error: -" in output


def test_task_without_handler_is_recorded_as_failed(runner: CliRunner, tmp_path: Path) -> None:
    db_path = str(tmp_path / "cli.db")
    _invoke(
        runner,
        "queue",
        "submit",
        "--db-path",
        db_path,
        "--task-type",
        "UNKNOWN",
        "--component",
        "PROJECT_1",
        "--task-id",
        "TASK_2",
    )

    output = _invoke(runner, "worker", "--db-path", db_path, "--loop", "--max-idle-polls", "1")
    assert "processed=1" in output

    output = _invoke(runner, "queue", "activity", "--db-path", db_path, "--status", "failed")
    assert "TASK_2 type=UNKNOWN component=PROJECT_1 status=failed" in output


def test_worker_once_on_empty_queue(runner: CliRunner, tmp_path: Path) -> None:
    output = _invoke(runner, "worker", "--db-path", str(tmp_path / "cli.db"), "--once")
    assert "Worker summary: processed=0 idle_polls=1" in output


def test_inspect_unknown_task(runner: CliRunner, tmp_path: Path) -> None:
    output = _invoke(runner, "queue", "inspect", "MISSING", "--db-path", str(tmp_path / "cli.db"))
    assert "Task not found: MISSING" in output


def test_duplicate_submit_is_reported_as_cli_error(runner: CliRunner, tmp_path: Path) -> None:
    args = [
        "queue",
        "submit",
        "--db-path",
        str(tmp_path / "cli.db"),
        "--task-type",
        "ECHO",
        "--component",
        "PROJECT_1",
        "--task-id",
        "TASK_1",
    ]
    _invoke(runner, *args)

    result = runner.invoke(analysis_worker, args)

    assert result.exit_code != 0
    assert "Task already exists: TASK_1" in result.output


def test_handlers_lists_builtin_and_configured_types(
    runner: CliRunner,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv(
        "ANALYSIS_WORKER_HANDLERS",
        "REPORT=analysis_worker.handlers.echo:EchoTaskHandler",
    )

    output = _invoke(runner, "handlers")

    assert "Registered task types: 2" in output
    assert "  ECHO" in output
    assert "  REPORT" in output


def test_invalid_handler_config_is_reported(
    runner: CliRunner,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("ANALYSIS_WORKER_HANDLERS", "REPORT=missing_module_xyz:Handler")

    result = runner.invoke(analysis_worker, ["handlers"])

    assert result.exit_code != 0
    assert "Cannot import handler module" in result.output
