"""Flat lookup table from task type to the handler that executes it."""

from __future__ import annotations

import importlib
import inspect
from collections.abc import Mapping
from typing import Protocol

from analysis_worker.errors import HandlerRegistrationError
from analysis_worker.queue.models import TaskDescriptor


class TaskHandler(Protocol):
    """Capability that executes tasks of the types it is registered for."""

    def execute(self, task: TaskDescriptor) -> None:
        """Run the task. Any raised exception fails the task."""


class HandlerRegistry:
    """Resolves a task type tag to zero or one handler."""

    def __init__(self, handlers: Mapping[str, TaskHandler] | None = None) -> None:
        self._handlers: dict[str, TaskHandler] = {}
        for task_type, handler in (handlers or {}).items():
            self.register(task_type, handler)

    def register(self, task_type: str, handler: TaskHandler) -> None:
        if not task_type or not task_type.strip():
            raise HandlerRegistrationError("Task type must not be empty.")
        if not callable(getattr(handler, "execute", None)):
            raise HandlerRegistrationError(
                f"Handler for task type {task_type!r} has no callable execute().",
            )
        if task_type in self._handlers:
            raise HandlerRegistrationError(
                f"Task type {task_type!r} is already handled by "
                f"{type(self._handlers[task_type]).__name__}.",
            )
        self._handlers[task_type] = handler

    def find(self, task_type: str) -> TaskHandler | None:
        return self._handlers.get(task_type)

    def task_types(self) -> tuple[str, ...]:
        return tuple(sorted(self._handlers))

    def __contains__(self, task_type: object) -> bool:
        return task_type in self._handlers

    def __len__(self) -> int:
        return len(self._handlers)


def load_handler(reference: str) -> TaskHandler:
    """Import a handler from ``package.module:attribute``.

    Classes are instantiated without arguments; any other attribute is used
    as the handler object itself.
    """

    module_name, separator, attribute = reference.strip().partition(":")
    if not separator or not module_name or not attribute:
        raise HandlerRegistrationError(
            f"Invalid handler reference {reference!r}. Expected 'package.module:attribute'.",
        )
    try:
        module = importlib.import_module(module_name)
    except ImportError as error:
        raise HandlerRegistrationError(
            f"Cannot import handler module {module_name!r}: {error}",
        ) from error

    target = module
    for part in attribute.split("."):
        try:
            target = getattr(target, part)
        except AttributeError as error:
            raise HandlerRegistrationError(
                f"Handler {attribute!r} not found in module {module_name!r}.",
            ) from error

    handler = target() if inspect.isclass(target) else target
    if not callable(getattr(handler, "execute", None)):
        raise HandlerRegistrationError(f"Handler {reference!r} has no callable execute().")
    return handler
