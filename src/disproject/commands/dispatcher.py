"""CommandDispatcher: run a CommandSpec according to its command type."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from rich.console import Console
from rich.markup import escape

from .models import CommandConfigError, CommandSpec, CommandType

if TYPE_CHECKING:
    from ..execution.backend import SubprocessBackend
    from ..execution.environment import EnvironmentExecutor
    from ..projects.models import Project
    from ..scope.models import Scope

console = Console()
logger = logging.getLogger(__name__)


def instance_name(project: Project, identifier: str) -> str:
    """Execution-instance name; commands sharing it are mutually exclusive."""
    return f"{project.name}-command|{identifier}"


class CommandDispatcher:
    """Interpret ``bare-call`` / ``call`` / ``compile`` specs.

    The dispatcher only decides names, directory and placement. Whether a
    second run under a live name is allowed is up to the back end.
    """

    def __init__(self, executor: EnvironmentExecutor, backend: SubprocessBackend):
        self.executor = executor
        self.backend = backend

    def _config_error(self, spec: CommandSpec, message: str) -> None:
        console.print(
            f"[bold red]error:[/bold red] custom command [bold]{escape(spec.key)}[/bold] "
            f"({escape(spec.description)}): {escape(message)}"
        )
        logger.warning("command %r not run: %s", spec.key, message)

    def name_for(self, spec: CommandSpec, project: Project) -> str:
        return instance_name(project, spec.instance_identifier)

    def invoke(self, spec: CommandSpec, scope: Scope) -> Any:
        if spec.command_type not in (t.value for t in CommandType):
            self._config_error(spec, f"unknown command type {spec.command_type!r}")
            return None
        try:
            payload = spec.command.resolve()
        except CommandConfigError as e:
            self._config_error(spec, str(e))
            return None

        if spec.command_type == CommandType.BARE_CALL:
            if not callable(payload):
                self._config_error(spec, "bare-call needs a callable command")
                return None
            return payload()

        project = scope.selected_project
        if project is None:
            raise ValueError("no project selected")
        name = self.name_for(spec, project)

        if spec.command_type == CommandType.CALL:
            if not callable(payload):
                self._config_error(spec, "call needs a callable command")
                return None
            with self.executor.environment(project, scope.prefer_other_window, name) as ctx:
                return self.backend.call(payload, ctx)

        with self.executor.environment(project, scope.prefer_other_window, name) as ctx:
            command = payload(ctx) if callable(payload) else payload
            if not isinstance(command, str) or not command.strip():
                self._config_error(spec, f"compile command must be a string, got {command!r}")
                return None
            return self.backend.run_shell(command, ctx)
