"""Execution: scoped project environments and the subprocess back end."""

from .backend import ExecutionInstance, SubprocessBackend
from .environment import (
    EnvironmentExecutor,
    ExecutionContext,
    Placement,
    current_instance_name,
)
from .tooling import DEFAULT_HOOKS, DIRENV, MISE, ToolingHook, detect_active_tooling

__all__ = [
    "DEFAULT_HOOKS",
    "DIRENV",
    "MISE",
    "EnvironmentExecutor",
    "ExecutionContext",
    "ExecutionInstance",
    "Placement",
    "SubprocessBackend",
    "ToolingHook",
    "current_instance_name",
    "detect_active_tooling",
]
