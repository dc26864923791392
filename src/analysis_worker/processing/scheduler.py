"""Polling loop that drives the worker one cycle at a time."""

from __future__ import annotations

import logging
import signal
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass

from analysis_worker.processing.worker import TaskWorker

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class WorkerRunSummary:
    """Aggregate loop counters for CLI reporting."""

    processed: int = 0
    idle_polls: int = 0
    reset_in_progress: int = 0
    stop_signal: str | None = None


class WorkerScheduler:
    """Calls `TaskWorker.run_once` until the queue stays idle or a stop is requested."""

    def __init__(
        self,
        *,
        worker: TaskWorker,
        poll_interval_seconds: float = 2.0,
        recover_in_progress: Callable[[], int] | None = None,
    ) -> None:
        self.worker = worker
        self.poll_interval_seconds = poll_interval_seconds
        self.recover_in_progress = recover_in_progress
        self._stop_requested = False
        self._stop_signal_name: str | None = None

    @property
    def stop_requested(self) -> bool:
        return self._stop_requested

    def request_stop(self, *, signal_name: str = "manual") -> None:
        """Stop after the cycle in flight completes."""

        self._stop_requested = True
        self._stop_signal_name = signal_name

    def run_loop(
        self,
        *,
        max_tasks: int | None = None,
        max_idle_polls: int = 1,
    ) -> WorkerRunSummary:
        """Run cycles until idle or `max_tasks` reached.

        Args:
            max_tasks: Stop after processing this many tasks (None = unlimited).
            max_idle_polls: How many consecutive empty polls before exiting.
        """

        summary = WorkerRunSummary()
        if self.recover_in_progress is not None:
            summary.reset_in_progress = self.recover_in_progress()

        consecutive_idle = 0
        with self._signal_handlers():
            while True:
                if self._stop_requested:
                    break
                if max_tasks is not None and summary.processed >= max_tasks:
                    break

                if not self.worker.run_once():
                    summary.idle_polls += 1
                    consecutive_idle += 1
                    if consecutive_idle >= max_idle_polls:
                        break
                    self._sleep_with_stop(self.poll_interval_seconds)
                    continue

                summary.processed += 1
                consecutive_idle = 0

        summary.stop_signal = self._stop_signal_name
        if summary.stop_signal is not None:
            logger.info(
                "Worker stopped by %s after %d task(s)",
                summary.stop_signal,
                summary.processed,
            )
        return summary

    def _sleep_with_stop(self, seconds: float) -> None:
        deadline = time.monotonic() + seconds
        while not self._stop_requested and time.monotonic() < deadline:
            time.sleep(min(0.1, max(0.0, deadline - time.monotonic())))

    @contextmanager
    def _signal_handlers(self) -> Iterator[None]:
        if not hasattr(signal, "SIGINT"):
            yield
            return

        original_sigint = signal.getsignal(signal.SIGINT)
        original_sigterm = signal.getsignal(signal.SIGTERM)

        def _handler(signum: int, _: object | None) -> None:
            try:
                name = signal.Signals(signum).name
            except ValueError:
                name = str(signum)
            self.request_stop(signal_name=name)

        installed = False
        try:
            signal.signal(signal.SIGINT, _handler)
            signal.signal(signal.SIGTERM, _handler)
            installed = True
        except ValueError:
            # Signal handlers can only be installed in main thread.
            pass
        try:
            yield
        finally:
            if installed:
                signal.signal(signal.SIGINT, original_sigint)
                signal.signal(signal.SIGTERM, original_sigterm)
