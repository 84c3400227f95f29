"""EnvironmentExecutor: run work inside a project's execution context."""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any, TypeVar

from .tooling import DEFAULT_HOOKS, ToolingHook, detect_active_tooling

if TYPE_CHECKING:
    from ..core.config import Config
    from ..projects.models import Project

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Placement(str, Enum):
    DEFAULT = "default"
    OTHER_WINDOW = "other-window"


@dataclass
class ExecutionContext:
    """Working directory, output placement and environment for running commands."""

    cwd: Path
    placement: Placement = Placement.DEFAULT
    env: dict[str, str] = field(default_factory=dict)
    tooling: frozenset[str] = frozenset()
    project: Project | None = None
    instance_name: str | None = None
    # scratch space for the work running in this context only
    locals: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def ambient(
        cls,
        config: Config,
        environ: Mapping[str, str] | None = None,
        hooks: tuple[ToolingHook, ...] = DEFAULT_HOOKS,
    ) -> ExecutionContext:
        env = dict(os.environ if environ is None else environ)
        tooling = detect_active_tooling(
            env, hooks, allowed={"envrc": config.envrc, "mise": config.mise}
        )
        return cls(cwd=config.cwd, env=env, tooling=tooling)


class EnvironmentExecutor:
    """Owns the ambient context and swaps in per-project contexts.

    Nothing process-wide is touched: the process cwd and ``os.environ`` stay
    as they are, and back ends read ``ctx.cwd``/``ctx.env`` instead.
    """

    def __init__(self, ambient: ExecutionContext, hooks: tuple[ToolingHook, ...] = DEFAULT_HOOKS):
        self.ambient = ambient
        self.hooks = hooks
        self._current = ambient

    @property
    def current(self) -> ExecutionContext:
        return self._current

    @contextmanager
    def environment(
        self,
        project: Project,
        prefer_other_window: bool,
        instance_name: str | None = None,
    ) -> Iterator[ExecutionContext]:
        previous = self._current
        ctx = ExecutionContext(
            cwd=project.root,
            placement=Placement.OTHER_WINDOW if prefer_other_window else Placement.DEFAULT,
            env=dict(previous.env),
            tooling=previous.tooling,
            project=project,
            instance_name=instance_name,
        )
        ctx.env["PWD"] = str(project.root)
        for hook in self.hooks:
            # only propagate tools the caller already had switched on
            if hook.name in previous.tooling:
                hook.activate(ctx)
        self._current = ctx
        logger.debug("entered %s (%s)", project.root, ctx.placement.value)
        try:
            yield ctx
        finally:
            self._current = previous
            logger.debug("restored %s", previous.cwd)

    def run(
        self,
        project: Project,
        prefer_other_window: bool,
        work: Callable[[ExecutionContext], T],
        instance_name: str | None = None,
    ) -> T:
        with self.environment(project, prefer_other_window, instance_name) as ctx:
            return work(ctx)


def current_instance_name(executor: EnvironmentExecutor) -> str | None:
    """Instance name of the command currently running under *executor*, if any."""
    return executor.current.instance_name
