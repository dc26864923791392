"""Shared test fixtures."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path

import pytest

from analysis_worker.queue import TaskQueueRepository


@pytest.fixture()
def repository(tmp_path: Path) -> Iterator[TaskQueueRepository]:
    """Migrated queue repository on a throwaway SQLite file."""

    repo = TaskQueueRepository(tmp_path / "queue.db", worker_id="test-worker")
    repo.init_schema()
    try:
        yield repo
    finally:
        repo.close()


@pytest.fixture()
def worker_logs(caplog: pytest.LogCaptureFixture):
    """Capture INFO and above and return a reader for worker messages at one level."""

    caplog.set_level(logging.INFO)

    def _messages(level: int) -> list[str]:
        return [
            record.getMessage()
            for record in caplog.records
            if record.levelno == level and record.name.startswith("analysis_worker")
        ]

    return _messages
