"""Trust decisions for directory-local command definitions."""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path

from rich.console import Console

from ..core.utils import read_json, write_json

console = Console()
logger = logging.getLogger(__name__)

# answers accepted from the trust prompt
TRUST_ONCE = "y"
TRUST_ALWAYS = "!"
TRUST_NO = "n"


class TrustStore:
    """Answer "may this project's settings define runnable commands?".

    Roots trusted permanently live in ``trusted.json``. Anything else is
    asked at most once per store, which lives as long as a session.
    """

    def __init__(self, path: Path, ask: Callable[[Path], str | None] | None = None):
        self.path = path
        self.ask = ask
        self._session: dict[str, bool] = {}

    def _persisted(self) -> list[str]:
        raw = read_json(self.path).get("trusted", [])
        return [r for r in raw if isinstance(r, str)] if isinstance(raw, list) else []

    def is_trusted(self, root: Path) -> bool:
        key = str(root)
        if key in self._session:
            return self._session[key]
        if key in self._persisted():
            self._session[key] = True
            return True
        answer = self.ask(root) if self.ask else None
        trusted = answer in (TRUST_ONCE, TRUST_ALWAYS)
        if answer == TRUST_ALWAYS:
            self.trust(root)
        self._session[key] = trusted
        return trusted

    def trust(self, root: Path) -> None:
        roots = self._persisted()
        if str(root) in roots:
            return
        try:
            write_json(self.path, {"trusted": [*roots, str(root)]})
        except OSError as e:
            console.print(f"[yellow]warning:[/yellow] could not save trust for {root}: {e}")
            logger.warning("trust write to %s failed: %s", self.path, e)
