"""Exception types raised by the worker packages."""

from __future__ import annotations


class AnalysisWorkerError(RuntimeError):
    """Base class for analysis worker failures."""


class HandlerRegistrationError(AnalysisWorkerError, ValueError):
    """A handler could not be registered or loaded."""


class TaskLoggingError(AnalysisWorkerError):
    """Diagnostic context was used out of order."""


class TaskNotFoundError(AnalysisWorkerError, LookupError):
    """Queue has no in-progress row for the given task."""
