"""CustomCommandRegistry: load and validate per-project custom commands."""

from __future__ import annotations

import logging
from typing import Any

from rich.console import Console
from rich.markup import escape

from ..core.config import project_settings_paths
from ..core.utils import read_json
from ..projects.models import Project
from .models import CommandSpec
from .schema import iter_schema_errors
from .trust import TrustStore

console = Console()
logger = logging.getLogger(__name__)

SETTINGS_KEY = "customCommands"
_MISSING = object()


def _preview(value: Any, limit: int = 120) -> str:
    text = repr(value)
    return text if len(text) <= limit else text[: limit - 3] + "..."


def read_project_commands(project: Project) -> tuple[Any, str]:
    """Raw ``customCommands`` value from a project's settings (later files win)."""
    value: Any = _MISSING
    source = ""
    for path in project_settings_paths(project.root):
        data = read_json(path)
        if SETTINGS_KEY in data:
            value = data[SETTINGS_KEY]
            source = str(path)
    return value, source


class CustomCommandRegistry:
    """Turn raw ``customCommands`` values into CommandSpecs.

    A value either validates completely or is rejected completely; rejected
    values fall back to the default set with a warning.
    """

    def __init__(self, trust: TrustStore, defaults: Any = None):
        self.trust = trust
        self.defaults: tuple[CommandSpec, ...] = ()
        if defaults is not None:
            self.defaults = self.parse(defaults, "global settings") or ()

    def parse(self, raw: Any, source: str) -> tuple[CommandSpec, ...] | None:
        """Validate *raw*; returns None (after warning) when it does not conform."""
        errors = list(iter_schema_errors(raw))
        if errors:
            where, message = errors[0]
            console.print(
                f"[yellow]warning:[/yellow] ignoring invalid custom commands in {escape(source)}: "
                f"{escape(_preview(raw))}"
            )
            console.print(f"  [dim]{escape(where or '<root>')}: {escape(message)}[/dim]")
            logger.warning("rejected customCommands from %s: %s", source, errors)
            return None
        return tuple(CommandSpec.from_dict(entry) for entry in raw)

    def load(self, project: Project | None) -> tuple[CommandSpec, ...]:
        if project is None:
            return self.defaults
        raw, source = read_project_commands(project)
        if raw is _MISSING:
            return self.defaults
        if not self.trust.is_trusted(project.root):
            console.print(
                f"[dim]ignoring custom commands of untrusted project {escape(project.name)}[/dim]"
            )
            return self.defaults
        specs = self.parse(raw, source)
        if specs is None:
            return self.defaults
        logger.debug("loaded %d custom command(s) for %s", len(specs), project.root)
        return specs
