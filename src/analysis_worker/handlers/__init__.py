"""Built-in task handlers and registry assembly from configuration."""

from __future__ import annotations

from collections.abc import Mapping

from analysis_worker.handlers.echo import ECHO_TASK_TYPE, EchoTaskHandler
from analysis_worker.processing.registry import HandlerRegistry, TaskHandler, load_handler


def builtin_handlers() -> dict[str, TaskHandler]:
    return {ECHO_TASK_TYPE: EchoTaskHandler()}


def build_registry(handler_refs: Mapping[str, str] | None = None) -> HandlerRegistry:
    """Registry with the built-in handlers plus ``task type -> module:attr`` references."""

    registry = HandlerRegistry(builtin_handlers())
    for task_type, reference in (handler_refs or {}).items():
        registry.register(task_type, load_handler(reference))
    return registry


__all__ = ["ECHO_TASK_TYPE", "EchoTaskHandler", "build_registry", "builtin_handlers"]
