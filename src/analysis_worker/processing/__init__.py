"""Task processing: handler lookup, diagnostic context and the worker cycle."""

from analysis_worker.processing.activity import ActivityProfiler
from analysis_worker.processing.registry import HandlerRegistry, TaskHandler, load_handler
from analysis_worker.processing.scheduler import WorkerRunSummary, WorkerScheduler
from analysis_worker.processing.task_logging import TaskContextFilter, TaskLogContext, TaskLogging
from analysis_worker.processing.worker import TaskWorker

__all__ = [
    "ActivityProfiler",
    "HandlerRegistry",
    "TaskContextFilter",
    "TaskHandler",
    "TaskLogContext",
    "TaskLogging",
    "TaskWorker",
    "WorkerRunSummary",
    "WorkerScheduler",
    "load_handler",
]
