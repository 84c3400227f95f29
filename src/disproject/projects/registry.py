"""Known projects registry: a persisted list of project roots."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from pathlib import Path

from rich.console import Console

from ..core.utils import write_json

console = Console()
logger = logging.getLogger(__name__)


class KnownProjectsRegistry:
    """Persisted set of project roots stored as ``{"projects": [...]}``.

    Every mutation re-reads the file and merges into what is on disk, so two
    sessions writing the same registry only ever add to or remove from each
    other's entries. ``persist`` never writes an uninitialised value, and
    never writes an empty list over a non-empty file unless the caller says
    the emptiness is intentional.
    """

    def __init__(self, path: Path):
        self.path = path
        self._roots: list[str] | None = None

    def _read(self) -> list[str] | None:
        """Roots on disk. None when the file exists but is not a usable registry."""
        if not self.path.exists():
            return []
        try:
            data = json.loads(self.path.read_text())
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("cannot read registry %s: %s", self.path, e)
            return None
        if not isinstance(data, dict):
            return None
        raw = data.get("projects", [])
        if not isinstance(raw, list):
            return None
        return [r for r in raw if isinstance(r, str)]

    def _warn_unreadable(self) -> None:
        console.print(
            f"[yellow]warning:[/yellow] {self.path} is not a readable project list; "
            "leaving it untouched"
        )
        logger.warning("refused to write over unreadable registry %s", self.path)

    def roots(self) -> list[Path]:
        """Known roots, most recently remembered first."""
        if self._roots is None:
            self._roots = self._read() or []
        return [Path(r) for r in self._roots]

    def reload(self) -> None:
        self._roots = None

    def __contains__(self, root: Path) -> bool:
        return str(root) in {str(r) for r in self.roots()}

    def persist(self, roots: list[str] | None, allow_empty: bool = False) -> bool:
        """Write *roots* to disk. Returns False when the write was refused or failed."""
        if roots is None:
            console.print(
                "[yellow]warning:[/yellow] refusing to save an uninitialised project list"
            )
            logger.warning("refused to persist uninitialised registry to %s", self.path)
            return False
        on_disk = self._read()
        if on_disk is None:
            self._warn_unreadable()
            return False
        if not roots and not allow_empty and on_disk:
            console.print(
                f"[yellow]warning:[/yellow] refusing to overwrite {self.path} with an empty list"
            )
            logger.warning("refused to persist empty registry over %s", self.path)
            return False
        try:
            write_json(self.path, {"projects": roots})
        except OSError as e:
            console.print(f"[yellow]warning:[/yellow] could not save known projects: {e}")
            logger.warning("registry write to %s failed: %s", self.path, e)
            return False
        self._roots = list(roots)
        return True

    def remember(self, root: Path) -> bool:
        """Add *root* (idempotent). Returns True if it was not known before."""
        return self.remember_many([root]) > 0

    def remember_many(self, roots: Iterable[Path]) -> int:
        current = self._read()
        if current is None:
            self._warn_unreadable()
            return 0
        known = set(current)
        added = [str(r) for r in roots if str(r) not in known]
        # dedupe while keeping discovery order
        added = list(dict.fromkeys(added))
        if not added:
            self._roots = current
            return 0
        if not self.persist(added + current):
            return 0
        logger.debug("remembered %s", ", ".join(added))
        return len(added)

    def forget_many(self, roots: Iterable[Path]) -> list[Path]:
        """Remove *roots*; returns the ones that were actually known."""
        drop = {str(r) for r in roots}
        current = self._read()
        if current is None:
            self._warn_unreadable()
            return []
        kept = [r for r in current if r not in drop]
        removed = [Path(r) for r in current if r in drop]
        if not removed:
            self._roots = current
            return []
        if not self.persist(kept, allow_empty=True):
            return []
        return removed
