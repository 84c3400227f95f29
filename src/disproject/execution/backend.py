"""Execution back end: run shell commands into named output targets."""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.markup import escape

from ..core.utils import safe_filename, short_path
from .environment import ExecutionContext, Placement

console = Console()
logger = logging.getLogger(__name__)


@dataclass
class ExecutionInstance:
    """A named command run and where its output went."""

    name: str
    command: str
    cwd: Path
    process: subprocess.Popen | None = None
    output_path: Path | None = None
    returncode: int | None = None

    @property
    def alive(self) -> bool:
        return self.process is not None and self.process.poll() is None


class SubprocessBackend:
    """Runs commands with subprocess, one live process per instance name.

    Default placement runs attached to the terminal and waits; other-window
    placement runs detached with output in ``<output_dir>/<name>.log``.
    Starting a name that is still running asks to kill the old process and
    refuses to start if the answer is no.
    """

    def __init__(
        self,
        output_dir: Path,
        shell: str = "/bin/sh",
        confirm: Callable[[str], bool] | None = None,
    ):
        self.output_dir = output_dir
        self.shell = shell
        self.confirm = confirm
        self.instances: dict[str, ExecutionInstance] = {}

    def live_instances(self) -> list[ExecutionInstance]:
        return [i for i in self.instances.values() if i.alive]

    def open_paths(self) -> list[Path]:
        """Directories of every instance started this session, newest first."""
        return [i.cwd for i in reversed(list(self.instances.values()))]

    def _claim(self, name: str) -> bool:
        existing = self.instances.get(name)
        if existing is None or not existing.alive:
            return True
        console.print(f"[yellow]{escape(name)}[/yellow] is still running")
        if self.confirm is None or not self.confirm(f"kill {name}?"):
            console.print("not started", style="dim")
            return False
        proc = existing.process
        proc.terminate()
        try:
            proc.wait(timeout=5)
        except subprocess.TimeoutExpired:
            proc.kill()
            proc.wait()
        existing.returncode = proc.returncode
        return True

    def run_shell(self, command: str, ctx: ExecutionContext) -> ExecutionInstance | None:
        name = ctx.instance_name or command
        if not self._claim(name):
            return None
        instance = ExecutionInstance(name=name, command=command, cwd=ctx.cwd)
        logger.debug("run %r in %s as %s", command, ctx.cwd, name)

        if ctx.placement is Placement.OTHER_WINDOW:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            instance.output_path = self.output_dir / f"{safe_filename(name)}.log"
            with open(instance.output_path, "w", encoding="utf-8") as out:
                out.write(f"# {command}\n# cwd: {ctx.cwd}\n\n")
                out.flush()
                instance.process = subprocess.Popen(
                    command,
                    shell=True,
                    cwd=ctx.cwd,
                    env=ctx.env,
                    stdin=subprocess.DEVNULL,
                    stdout=out,
                    stderr=subprocess.STDOUT,
                    start_new_session=True,
                )
            self.instances[name] = instance
            console.print(
                f"started [bold]{escape(name)}[/bold]  "
                f"[dim]{short_path(instance.output_path)}[/dim]"
            )
            return instance

        console.rule(f"[bold]{escape(name)}[/bold]  [dim]{escape(command)}[/dim]", style="dim")
        instance.process = subprocess.Popen(command, shell=True, cwd=ctx.cwd, env=ctx.env)
        self.instances[name] = instance
        try:
            instance.returncode = instance.process.wait()
        except KeyboardInterrupt:
            instance.process.terminate()
            instance.returncode = instance.process.wait()
            raise
        style = "dim" if instance.returncode == 0 else "bold red"
        console.print(f"exit {instance.returncode}", style=style)
        return instance

    def call(self, func: Callable[[ExecutionContext], Any], ctx: ExecutionContext) -> Any:
        return func(ctx)

    def interactive_shell(self, ctx: ExecutionContext) -> int:
        """Run an interactive shell attached to the terminal in ``ctx.cwd``."""
        instance = ExecutionInstance(
            name=ctx.instance_name or self.shell, command=self.shell, cwd=ctx.cwd
        )
        self.instances[instance.name] = instance
        instance.returncode = subprocess.run([self.shell], cwd=ctx.cwd, env=ctx.env).returncode
        return instance.returncode
