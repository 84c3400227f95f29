"""Project data models: Project, VCSBackend."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class VCSBackend(str, Enum):
    GIT = "git"
    HG = "hg"
    SVN = "svn"
    BZR = "bzr"
    FOSSIL = "fossil"
    NONE = "none"


@dataclass(frozen=True)
class Project:
    """A resolved workspace root. Equal when the canonical roots are equal."""

    root: Path
    backend: VCSBackend = field(default=VCSBackend.NONE, compare=False)

    @property
    def name(self) -> str:
        return self.root.name or str(self.root)

    def is_vcs(self, kind: VCSBackend | str | None = None) -> bool:
        """True for any VCS backend, or for the given *kind* only."""
        if kind is None:
            return self.backend is not VCSBackend.NONE
        return self.backend == VCSBackend(kind)

    def __str__(self) -> str:
        return str(self.root)
