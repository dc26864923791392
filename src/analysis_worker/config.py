"""Runtime configuration for the analysis worker."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


@dataclass(slots=True)
class WorkerSettings:
    """Worker loop and queue access settings."""

    worker_id: str = "worker-1"
    poll_interval_seconds: float = 2.0
    sqlite_busy_timeout_ms: int = 5_000
    handlers: dict[str, str] = field(default_factory=dict)


@dataclass(slots=True)
class LoggingSettings:
    """Process logging and per-task log file settings."""

    level: str = "INFO"
    log_file: Path | None = None
    task_logs_dir: Path | None = None
    max_task_logs_per_component: int = 10

    @property
    def level_number(self) -> int:
        return logging.getLevelName(self.level)


@dataclass(slots=True)
class Settings:
    """Application settings grouped by concern."""

    db_path: Path = Path(".analysis_worker.db")
    worker: WorkerSettings = field(default_factory=WorkerSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)

    @classmethod
    def from_env(cls, db_path: Path | None = None) -> Settings:
        """Load settings from environment with sane defaults for local development."""

        return cls(
            db_path=db_path or Path(os.getenv("ANALYSIS_WORKER_DB_PATH", ".analysis_worker.db")),
            worker=WorkerSettings(
                worker_id=os.getenv("ANALYSIS_WORKER_ID", "worker-1").strip() or "worker-1",
                poll_interval_seconds=_env_float("ANALYSIS_WORKER_POLL_INTERVAL_SECONDS", 2.0),
                sqlite_busy_timeout_ms=_env_int("ANALYSIS_WORKER_SQLITE_BUSY_TIMEOUT_MS", 5000),
                handlers=_collect_handler_refs(),
            ),
            logging=LoggingSettings(
                level=os.getenv("ANALYSIS_WORKER_LOG_LEVEL", "INFO").strip().upper(),
                log_file=_env_path("ANALYSIS_WORKER_LOG_FILE"),
                task_logs_dir=_env_path("ANALYSIS_WORKER_TASK_LOGS_DIR"),
                max_task_logs_per_component=_env_int(
                    "ANALYSIS_WORKER_MAX_TASK_LOGS_PER_COMPONENT",
                    10,
                ),
            ),
        )

    def validate(self) -> None:
        """Raise configuration error for out-of-range values."""

        if self.worker.poll_interval_seconds < 0:
            raise ValueError("ANALYSIS_WORKER_POLL_INTERVAL_SECONDS must be >= 0.")
        if self.worker.sqlite_busy_timeout_ms <= 0:
            raise ValueError("ANALYSIS_WORKER_SQLITE_BUSY_TIMEOUT_MS must be > 0.")
        if self.logging.level not in _LOG_LEVELS:
            raise ValueError(
                f"Invalid ANALYSIS_WORKER_LOG_LEVEL: {self.logging.level!r}. "
                f"Expected one of {', '.join(sorted(_LOG_LEVELS))}.",
            )
        if self.logging.max_task_logs_per_component <= 0:
            raise ValueError("ANALYSIS_WORKER_MAX_TASK_LOGS_PER_COMPONENT must be > 0.")


def _collect_handler_refs() -> dict[str, str]:
    raw = os.getenv("ANALYSIS_WORKER_HANDLERS", "").strip()
    if not raw:
        return {}

    refs: dict[str, str] = {}
    for part in raw.split(","):
        token = part.strip()
        if not token:
            continue
        if "=" not in token:
            raise ValueError(
                "Invalid ANALYSIS_WORKER_HANDLERS entry: "
                f"{token!r}. Expected format '<task_type>=<module>:<attribute>'.",
            )
        task_type, reference = token.split("=", 1)
        task_type = task_type.strip()
        reference = reference.strip()
        if not task_type or ":" not in reference:
            raise ValueError(
                "Invalid ANALYSIS_WORKER_HANDLERS entry: "
                f"{token!r}. Expected format '<task_type>=<module>:<attribute>'.",
            )
        if task_type in refs:
            raise ValueError(f"Duplicate ANALYSIS_WORKER_HANDLERS task type: {task_type!r}")
        refs[task_type] = reference
    return refs


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError as error:
        raise ValueError(f"Invalid integer value for {name}: {value!r}") from error


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return float(value)
    except ValueError as error:
        raise ValueError(f"Invalid number value for {name}: {value!r}") from error


def _env_path(name: str) -> Path | None:
    value = os.getenv(name, "").strip()
    return Path(value) if value else None
