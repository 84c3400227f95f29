"""Workspace boundary: project root detection, backend tags, file listing."""

from __future__ import annotations

import os
import subprocess
from collections.abc import Iterable
from pathlib import Path

from .models import VCSBackend

# marker -> backend; checked in order, so VCS markers win over plain ones
VCS_MARKERS: dict[str, VCSBackend] = {
    ".git": VCSBackend.GIT,
    ".hg": VCSBackend.HG,
    ".svn": VCSBackend.SVN,
    ".bzr": VCSBackend.BZR,
    ".fslckout": VCSBackend.FOSSIL,
    "_FOSSIL_": VCSBackend.FOSSIL,
}
PLAIN_MARKERS = (".disproject", ".project")

_WALK_SKIP = {".git", ".hg", ".svn", ".bzr", "node_modules", "__pycache__", ".venv", "venv"}


class Workspace:
    """Marker-based project detection, the way ``project.el``-style tools do it."""

    def __init__(self, extra_markers: Iterable[str] = ()):
        self.markers = tuple(VCS_MARKERS) + PLAIN_MARKERS + tuple(extra_markers)

    def is_root(self, path: Path) -> bool:
        return any((path / m).exists() for m in self.markers)

    def find_project_root(self, path: Path) -> Path | None:
        """Nearest ancestor of *path* (inclusive) holding a marker."""
        start = path if path.is_dir() else path.parent
        for candidate in (start, *start.parents):
            if self.is_root(candidate):
                return candidate
        return None

    def backend_for(self, root: Path) -> VCSBackend:
        for marker, backend in VCS_MARKERS.items():
            if (root / marker).exists():
                return backend
        return VCSBackend.NONE

    def discover(self, base: Path, max_depth: int = 3) -> list[Path]:
        """Project roots at or below *base*, not descending into found roots."""
        found: list[Path] = []
        base_depth = len(base.parts)
        for dirpath, dirnames, _ in os.walk(base):
            current = Path(dirpath)
            if self.is_root(current):
                found.append(current)
                dirnames.clear()
                continue
            if len(current.parts) - base_depth >= max_depth:
                dirnames.clear()
                continue
            dirnames[:] = sorted(d for d in dirnames if d not in _WALK_SKIP)
        return found

    def list_project_files(self, root: Path) -> list[str]:
        """List project files respecting .gitignore. Tries rg, then git, then a walk."""
        return _list_rg(root) or _list_git(root) or _list_walk(root)


def _list_rg(cwd: Path) -> list[str] | None:
    try:
        r = subprocess.run(
            ["rg", "--files", "--sort=path", "--no-messages"],
            capture_output=True,
            text=True,
            timeout=5,
            cwd=cwd,
        )
        if r.returncode <= 1 and r.stdout.strip():
            return r.stdout.strip().splitlines()
    except (OSError, subprocess.SubprocessError):
        pass
    return None


def _list_git(cwd: Path) -> list[str] | None:
    try:
        r = subprocess.run(
            ["git", "ls-files", "--cached", "--others", "--exclude-standard"],
            capture_output=True,
            text=True,
            timeout=5,
            cwd=cwd,
        )
        if r.returncode == 0 and r.stdout.strip():
            return sorted(r.stdout.strip().splitlines())
    except (OSError, subprocess.SubprocessError):
        pass
    return None


def _list_walk(cwd: Path) -> list[str]:
    files: list[str] = []
    for dirpath, dirnames, filenames in os.walk(cwd):
        dirnames[:] = sorted(d for d in dirnames if d not in _WALK_SKIP)
        rel = Path(dirpath).relative_to(cwd)
        files.extend(str(rel / f) if str(rel) != "." else f for f in sorted(filenames))
    return files
