"""Directory-scoped tooling hooks: direnv and mise environment loaders."""

from __future__ import annotations

import json
import logging
import subprocess
from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .environment import ExecutionContext

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ToolingHook:
    """An external tool that exports a directory's environment as JSON."""

    name: str
    marker_env: str  # set in the environment when the tool is active
    command: tuple[str, ...]
    timeout: int = 10

    def is_active(self, environ: Mapping[str, str]) -> bool:
        return bool(environ.get(self.marker_env))

    def activate(self, ctx: ExecutionContext) -> bool:
        """Merge the tool's exported environment for ``ctx.cwd`` into ``ctx.env``."""
        try:
            r = subprocess.run(
                list(self.command),
                cwd=ctx.cwd,
                env=ctx.env,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except (OSError, subprocess.SubprocessError) as e:
            logger.warning("%s: could not run %s: %s", self.name, self.command[0], e)
            return False
        if r.returncode != 0:
            logger.warning("%s: exit %d: %s", self.name, r.returncode, r.stderr.strip())
            return False
        out = r.stdout.strip()
        if not out:
            return True
        try:
            exported = json.loads(out)
        except json.JSONDecodeError as e:
            logger.warning("%s: unreadable output: %s", self.name, e)
            return False
        if not isinstance(exported, dict):
            return False
        for key, value in exported.items():
            if value is None:
                ctx.env.pop(key, None)
            else:
                ctx.env[key] = str(value)
        return True


DIRENV = ToolingHook("envrc", "DIRENV_DIR", ("direnv", "export", "json"))
MISE = ToolingHook("mise", "MISE_SHELL", ("mise", "env", "--json"))
DEFAULT_HOOKS = (DIRENV, MISE)


def detect_active_tooling(
    environ: Mapping[str, str],
    hooks: tuple[ToolingHook, ...] = DEFAULT_HOOKS,
    allowed: Mapping[str, bool] | None = None,
) -> frozenset[str]:
    """Names of hooks already active in *environ* and not disabled in settings."""
    allowed = allowed or {}
    return frozenset(
        h.name for h in hooks if allowed.get(h.name, True) and h.is_active(environ)
    )
