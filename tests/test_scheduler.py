from __future__ import annotations

import allure

from analysis_worker.processing import WorkerScheduler

pytestmark = [
    allure.epic("Task Worker"),
    allure.feature("Worker Loop"),
]


class _ScriptedWorker:
    """Returns the scripted `run_once` results, then reports an idle queue."""

    def __init__(self, results: list[bool]) -> None:
        self.results = list(results)
        self.calls = 0

    def run_once(self) -> bool:
        self.calls += 1
        if self.results:
            return self.results.pop(0)
        return False


def test_run_loop_processes_until_idle() -> None:
    worker = _ScriptedWorker([True, True, True])
    scheduler = WorkerScheduler(worker=worker, poll_interval_seconds=0)  # type: ignore[arg-type]

    summary = scheduler.run_loop()

    assert summary.processed == 3
    assert summary.idle_polls == 1
    assert summary.stop_signal is None
    assert worker.calls == 4


def test_run_loop_honors_max_tasks() -> None:
    worker = _ScriptedWorker([True] * 5)
    scheduler = WorkerScheduler(worker=worker, poll_interval_seconds=0)  # type: ignore[arg-type]

    summary = scheduler.run_loop(max_tasks=2)

    assert summary.processed == 2
    assert summary.idle_polls == 0
    assert worker.calls == 2


def test_run_loop_counts_consecutive_idle_polls() -> None:
    worker = _ScriptedWorker([False, True, False, False, False])
    scheduler = WorkerScheduler(worker=worker, poll_interval_seconds=0)  # type: ignore[arg-type]

    summary = scheduler.run_loop(max_idle_polls=3)

    assert summary.processed == 1
    assert summary.idle_polls == 4


def test_run_loop_recovers_abandoned_tasks_once() -> None:
    recoveries: list[int] = []

    def _recover() -> int:
        recoveries.append(1)
        return 2

    scheduler = WorkerScheduler(
        worker=_ScriptedWorker([True]),  # type: ignore[arg-type]
        poll_interval_seconds=0,
        recover_in_progress=_recover,
    )

    summary = scheduler.run_loop()

    assert recoveries == [1]
    assert summary.reset_in_progress == 2


def test_request_stop_ends_loop_after_current_cycle() -> None:
    class _StoppingWorker(_ScriptedWorker):
        def run_once(self) -> bool:
            result = super().run_once()
            scheduler.request_stop(signal_name="SIGTERM")
            return result

    worker = _StoppingWorker([True, True, True])
    scheduler = WorkerScheduler(worker=worker, poll_interval_seconds=0)  # type: ignore[arg-type]

    summary = scheduler.run_loop()

    assert scheduler.stop_requested
    assert summary.processed == 1
    assert summary.stop_signal == "SIGTERM"
    assert worker.calls == 1
