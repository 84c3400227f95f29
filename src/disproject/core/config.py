"""Configuration: env, global settings, defaults."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

from .utils import read_json

# Directory holding per-project settings, relative to a project root.
PROJECT_DIR_NAME = ".disproject"

_TRUTHY = ("1", "true", "yes", "on")


def _default_global_dir() -> Path:
    if home := os.getenv("DISPROJECT_HOME"):
        return Path(home).expanduser()
    return Path.home() / ".disproject"


def _default_shell() -> str:
    return os.getenv("SHELL") or "/bin/sh"


@dataclass
class Config:
    cwd: Path = field(default_factory=Path.cwd)
    global_dir: Path = field(default_factory=_default_global_dir)
    verbose: bool = False
    prefer_other_window: bool = False
    compile_command: str = "make -k"
    shell_command: str = field(default_factory=_default_shell)
    # raw value; validated by the custom command registry
    custom_commands: list | None = None
    # allow propagating an already-active direnv / mise into command contexts
    envrc: bool = True
    mise: bool = True
    project_markers: list[str] = field(default_factory=list)

    @property
    def settings_path(self) -> Path:
        return self.global_dir / "settings.json"

    @property
    def registry_path(self) -> Path:
        return self.global_dir / "projects.json"

    @property
    def trust_path(self) -> Path:
        return self.global_dir / "trusted.json"

    @property
    def output_dir(self) -> Path:
        return self.global_dir / "output"

    @property
    def history_path(self) -> Path:
        return self.global_dir / "history"


def project_settings_paths(root: Path) -> list[Path]:
    """Directory-local settings files for a project root, lowest priority first."""
    pdir = root / PROJECT_DIR_NAME
    return [pdir / "settings.json", pdir / "settings.local.json"]


def _apply_settings(config: Config, path: Path) -> None:
    """Apply a single settings.json file to config."""
    data = read_json(path)
    if not data:
        return
    if isinstance(data.get("preferOtherWindow"), bool):
        config.prefer_other_window = data["preferOtherWindow"]
    if "customCommands" in data:
        config.custom_commands = data["customCommands"]
    if isinstance(data.get("compileCommand"), str):
        config.compile_command = data["compileCommand"]
    if isinstance(data.get("shellCommand"), str):
        config.shell_command = data["shellCommand"]
    if isinstance(data.get("envrc"), bool):
        config.envrc = data["envrc"]
    if isinstance(data.get("mise"), bool):
        config.mise = data["mise"]
    if isinstance(data.get("projectMarkers"), list):
        config.project_markers = [m for m in data["projectMarkers"] if isinstance(m, str)]


def load_config(
    cwd: Path | None = None,
    prefer_other_window: bool | None = None,
    verbose: bool = False,
) -> Config:
    """Load config with priority: CLI args > env > .env > settings.json > defaults."""
    load_dotenv()

    config = Config()
    config.verbose = verbose
    if cwd is not None:
        config.cwd = cwd

    _apply_settings(config, config.settings_path)

    if env_pow := os.getenv("DISPROJECT_PREFER_OTHER_WINDOW"):
        config.prefer_other_window = env_pow.strip().lower() in _TRUTHY

    if prefer_other_window is not None:
        config.prefer_other_window = prefer_other_window

    return config
