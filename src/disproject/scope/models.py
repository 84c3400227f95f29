"""Scope: the immutable state snapshot threaded through a menu session."""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from typing import Any

from ..commands.models import CommandSpec
from ..projects.models import Project


def normalize_key(key: str) -> str:
    """Accept both ``selected-project`` and ``selected_project`` spellings."""
    name = key.replace("-", "_")
    if name not in SCOPE_KEYS:
        raise KeyError(key)
    return name


@dataclass(frozen=True)
class Scope:
    default_project: Project | None = None
    selected_project: Project | None = None
    prefer_other_window: bool = False
    custom_commands: tuple[CommandSpec, ...] = ()

    def get(self, key: str) -> Any:
        return getattr(self, normalize_key(key))

    def replace(self, **changes: Any) -> Scope:
        return replace(self, **changes)

    def find_command(self, key: str) -> CommandSpec | None:
        for spec in self.custom_commands:
            if spec.key == key:
                return spec
        return None


SCOPE_KEYS = tuple(f.name for f in fields(Scope))
