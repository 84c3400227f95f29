"""Path helpers, atomic JSON files, git branch lookup."""

from __future__ import annotations

import json
import os
import subprocess
import tempfile
from pathlib import Path

def canonical_path(path: str | Path) -> Path:
    """Absolute, symlink-free form of *path* (``~`` expanded)."""
    return Path(path).expanduser().resolve()


def is_under(path: Path, parent: Path) -> bool:
    return path == parent or parent in path.parents


def read_json(path: Path) -> dict:
    """Read a JSON object from *path*; missing or unreadable files give ``{}``."""
    if not path.exists():
        return {}
    try:
        data = json.loads(path.read_text())
    except (json.JSONDecodeError, OSError):
        return {}
    return data if isinstance(data, dict) else {}


def atomic_write_text(path: Path, content: str) -> None:
    """Write *content* to *path* via a temp file in the same dir + ``os.replace``."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.tmp.", dir=str(path.parent))
    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, path)
    finally:
        try:
            if tmp_path.exists():
                tmp_path.unlink()
        except FileNotFoundError:
            pass


def write_json(path: Path, data: dict) -> None:
    atomic_write_text(path, json.dumps(data, indent=2) + "\n")


def git_branch(cwd: Path | None = None) -> str | None:
    """Return current git branch name, or None if not in a repo."""
    try:
        r = subprocess.run(
            ["git", "rev-parse", "--abbrev-ref", "HEAD"],
            capture_output=True,
            text=True,
            timeout=2,
            cwd=cwd,
        )
        return r.stdout.strip() if r.returncode == 0 else None
    except (OSError, subprocess.SubprocessError):
        return None


def short_path(p: Path) -> str:
    """Return path relative to home directory, using ~ prefix."""
    try:
        rel = p.relative_to(Path.home())
        return f"~/{rel}" if str(rel) != "." else "~"
    except ValueError:
        return str(p)


def safe_filename(name: str) -> str:
    """Map an instance name like ``proj-command|make`` to a file-safe stem."""
    return "".join(c if c.isalnum() or c in "-_." else "_" for c in name)
