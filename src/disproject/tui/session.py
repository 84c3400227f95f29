"""MenuSession: nested dispatch menus over a shared, refreshable scope."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

from rich.markup import escape

from ..commands.models import CallableCommand, CommandSpec, CommandType, LiteralCommand
from ..core.utils import short_path
from ..projects.models import Project, VCSBackend
from .renderer import console, render_files, render_projects

if TYPE_CHECKING:
    from ..commands.dispatcher import CommandDispatcher
    from ..core.config import Config
    from ..execution.backend import SubprocessBackend
    from ..projects.resolver import ProjectResolver
    from ..scope.models import Scope
    from ..scope.store import ScopeStore
    from .prompts import TerminalPrompter

logger = logging.getLogger(__name__)


class MenuId(str, Enum):
    MAIN = "main"
    CUSTOM = "custom"
    VCS = "vcs"
    MANAGE = "manage"


MENU_TITLES = {
    MenuId.MAIN: "disproject",
    MenuId.CUSTOM: "custom commands",
    MenuId.VCS: "version control",
    MenuId.MANAGE: "manage projects",
}

VCS_COMMANDS: dict[VCSBackend, dict[str, str]] = {
    VCSBackend.GIT: {
        "status": "git status",
        "log": "git log --oneline --decorate -n 30",
        "diff": "git diff",
        "fetch": "git fetch --all --prune",
    },
    VCSBackend.HG: {
        "status": "hg status",
        "log": "hg log -l 30",
        "diff": "hg diff",
        "fetch": "hg pull",
    },
    VCSBackend.SVN: {
        "status": "svn status",
        "log": "svn log -l 30",
        "diff": "svn diff",
        "fetch": "svn update",
    },
    VCSBackend.BZR: {
        "status": "bzr status",
        "log": "bzr log -l 30",
        "diff": "bzr diff",
        "fetch": "bzr pull",
    },
    VCSBackend.FOSSIL: {
        "status": "fossil changes",
        "log": "fossil timeline -n 30",
        "diff": "fossil diff",
        "fetch": "fossil pull",
    },
}

# key, action, description
VCS_ACTIONS = (
    ("s", "status", "status"),
    ("l", "log", "log"),
    ("d", "diff", "diff"),
    ("f", "fetch", "fetch / pull"),
)

_OTHER_DIRECTORY = object()


def _project_detail(project: Project) -> str:
    if project.is_vcs():
        return f"{short_path(project.root)}  [{project.backend.value}]"
    return short_path(project.root)


@dataclass
class MenuItem:
    key: str
    description: str
    action: Callable[[], Any]
    visible: bool = True


class MenuSession:
    """State machine over menus, each bound to a ScopeStore.

    Drilling into CUSTOM or VCS makes a child store and forces a selected
    project; MANAGE reuses the current store. Project switches update the
    store in place (and write back to its ancestors) without leaving the
    current menu.
    """

    def __init__(
        self,
        config: Config,
        resolver: ProjectResolver,
        store: ScopeStore,
        dispatcher: CommandDispatcher,
        backend: SubprocessBackend,
        prompter: TerminalPrompter,
    ):
        self.config = config
        self.resolver = resolver
        self.dispatcher = dispatcher
        self.backend = backend
        self.prompter = prompter
        self.stack: list[tuple[MenuId, ScopeStore]] = [(MenuId.MAIN, store)]
        self.closed = False

    # ── state ───────────────────────────────────────────────────────

    @property
    def menu(self) -> MenuId:
        return self.stack[-1][0]

    @property
    def store(self) -> ScopeStore:
        return self.stack[-1][1]

    @property
    def scope(self) -> Scope:
        return self.store.scope

    @property
    def title(self) -> str:
        return " > ".join(MENU_TITLES[m] for m, _ in self.stack)

    # ── navigation ──────────────────────────────────────────────────

    def open(self, menu: MenuId) -> bool:
        if menu is MenuId.MANAGE:
            self.stack.append((menu, self.store))
            return True
        child = self.store.child()
        project = child.ensure_selected_project(self.prompt_project)
        if project is None:
            console.print("cancelled", style="dim")
            return False
        if menu is MenuId.VCS and not project.is_vcs():
            console.print(f"{escape(project.name)} is not under version control", style="dim")
            return False
        if menu is MenuId.CUSTOM and not child.scope.custom_commands:
            console.print("no custom commands for this project", style="dim")
        self.stack.append((menu, child))
        return True

    def back(self) -> None:
        if self.stack:
            self.stack.pop()
        if not self.stack:
            self.closed = True

    def close(self) -> None:
        self.stack.clear()
        self.closed = True

    # ── prompts ─────────────────────────────────────────────────────

    def prompt_project(
        self, candidates: list[Project] | None = None, title: str = "select project"
    ) -> Project | None:
        if candidates is None:
            candidates = self._known_projects()
            include_other = True
        else:
            include_other = False
        if not candidates and include_other:
            return self._read_project_directory()
        options: list[tuple[Any, str, str]] = [
            (p, p.name, _project_detail(p)) for p in candidates
        ]
        if include_other:
            options.append((_OTHER_DIRECTORY, "other directory...", ""))
        current = self.store.current.selected_project if self.store.current else None
        choice = self.prompter.choose(title, options, current=current)
        if choice is _OTHER_DIRECTORY:
            return self._read_project_directory()
        return choice

    def _read_project_directory(self) -> Project | None:
        path = self.prompter.read("project directory: ", default=str(self.config.cwd))
        if not path:
            return None
        project = self.resolver.resolve(path)
        if project is None:
            console.print(f"no project found at {escape(path)}", style="dim")
        return project

    # ── menus ───────────────────────────────────────────────────────

    def items(self, menu: MenuId | None = None) -> list[MenuItem]:
        menu = menu or self.menu
        if menu is MenuId.CUSTOM:
            return self._custom_items()
        if menu is MenuId.VCS:
            return self._vcs_items()
        if menu is MenuId.MANAGE:
            return self._manage_items()
        return self._main_items()

    def _main_items(self) -> list[MenuItem]:
        selected = self.scope.selected_project
        other = "on" if self.scope.prefer_other_window else "off"
        return [
            MenuItem("p", "switch project", self.switch_project),
            MenuItem("a", "switch to active project", self.switch_active_project),
            MenuItem("o", f"prefer other window [{other}]", self.toggle_other_window),
            MenuItem("f", "list project files", self.list_files),
            MenuItem("s", "shell", self.shell),
            MenuItem("!", "run shell command", self.shell_command),
            MenuItem("c", "compile", self.compile),
            MenuItem("x", "custom commands", lambda: self.open(MenuId.CUSTOM)),
            MenuItem(
                "v",
                "version control",
                lambda: self.open(MenuId.VCS),
                visible=selected is None or selected.is_vcs(),
            ),
            MenuItem("m", "manage projects", lambda: self.open(MenuId.MANAGE)),
            MenuItem("q", "quit", self.close),
        ]

    def _navigation(self) -> list[MenuItem]:
        # custom command keys may not use these, see commands.schema.RESERVED_KEYS
        return [
            MenuItem("P", "switch project", self.switch_project),
            MenuItem("q", "back", self.back),
        ]

    def _custom_items(self) -> list[MenuItem]:
        items = [
            MenuItem(spec.key, spec.description, lambda spec=spec: self.dispatch(spec))
            for spec in self.scope.custom_commands
        ]
        items.append(MenuItem("R", "reload custom commands", self.reload_commands))
        return items + self._navigation()

    def _vcs_items(self) -> list[MenuItem]:
        items = [
            MenuItem(key, description, lambda action=action: self.vcs(action))
            for key, action, description in VCS_ACTIONS
        ]
        return items + self._navigation()

    def _manage_items(self) -> list[MenuItem]:
        return [
            MenuItem("l", "list known projects", self.list_known),
            MenuItem("f", "forget a project", self.forget_project),
            MenuItem("u", "forget projects under a directory", self.forget_under),
            MenuItem("z", "forget projects that no longer exist", self.forget_zombies),
            MenuItem("r", "remember projects under a directory", self.remember_under),
            MenuItem("q", "back", self.back),
        ]

    def handle_key(self, key: str) -> bool:
        """Run the visible item bound to *key*. False when nothing matches."""
        for item in self.items():
            if item.visible and item.key == key:
                item.action()
                return True
        return False

    # ── scope mutation ──────────────────────────────────────────────

    def switch_project(self) -> Project | None:
        project = self.prompt_project(title="switch project")
        if project is None:
            return None
        self.store.set("selected_project", project, write_back=True)
        console.print(f"project: [bold]{escape(project.name)}[/bold]")
        return project

    def switch_active_project(self) -> Project | None:
        open_paths = [self.config.cwd, *self.backend.open_paths()]
        candidates = self.resolver.active_projects(open_paths)
        if not candidates:
            console.print("no active projects", style="dim")
            return None
        project = self.prompt_project(candidates, title="switch to active project")
        if project is None:
            return None
        self.store.set("selected_project", project, write_back=True)
        console.print(f"project: [bold]{escape(project.name)}[/bold]")
        return project

    def reload_commands(self) -> int:
        """Re-read the selected project's custom commands from its settings files."""
        scope = self.store.refresh(write_back=True)
        console.print(f"{len(scope.custom_commands)} custom command(s)", style="dim")
        return len(scope.custom_commands)

    def toggle_other_window(self) -> bool:
        value = not self.scope.prefer_other_window
        self.store.set("prefer_other_window", value, write_back=True)
        return value

    # ── dispatch ────────────────────────────────────────────────────

    def _require_project(self) -> Project | None:
        project = self.store.ensure_selected_project(self.prompt_project)
        if project is None:
            console.print("cancelled", style="dim")
        return project

    def dispatch(self, spec: CommandSpec) -> Any:
        if spec.command_type != CommandType.BARE_CALL and self._require_project() is None:
            return None
        return self.dispatcher.invoke(spec, self.scope)

    def run_custom(self, key: str) -> Any:
        spec = self.scope.find_command(key)
        if spec is None:
            console.print(f"no custom command bound to {escape(key)!r}", style="dim")
            return None
        return self.dispatch(spec)

    def compile(self) -> Any:
        if self._require_project() is None:
            return None
        command = self.prompter.read("compile: ", default=self.config.compile_command)
        if command is None:
            return None
        spec = CommandSpec("c", "compile", CommandType.COMPILE, LiteralCommand(command), "compile")
        return self.dispatch(spec)

    def shell_command(self) -> Any:
        if self._require_project() is None:
            return None
        command = self.prompter.read("shell command: ")
        if command is None:
            return None
        spec = CommandSpec(
            "!", "shell command", CommandType.COMPILE, LiteralCommand(command), "shell-command"
        )
        return self.dispatch(spec)

    def shell(self) -> Any:
        spec = CommandSpec(
            "s",
            "shell",
            CommandType.CALL,
            CallableCommand(func=self.backend.interactive_shell),
            "shell",
        )
        return self.dispatch(spec)

    def vcs(self, action: str) -> Any:
        project = self._require_project()
        if project is None:
            return None
        command = VCS_COMMANDS.get(project.backend, {}).get(action)
        if command is None:
            console.print(f"{escape(project.name)} is not under version control", style="dim")
            return None
        spec = CommandSpec(
            action[0], action, CommandType.COMPILE, LiteralCommand(command), f"vcs-{action}"
        )
        return self.dispatch(spec)

    def list_files(self) -> list[str]:
        project = self._require_project()
        if project is None:
            return []
        files = self.resolver.workspace.list_project_files(project.root)
        render_files(files, project.root)
        return files

    # ── project management ──────────────────────────────────────────

    def _known_projects(self) -> list[Project]:
        # another session may have changed the registry since it was cached
        self.resolver.registry.reload()
        return self.resolver.known_projects()

    def list_known(self) -> None:
        render_projects(self._known_projects(), self.scope.selected_project)

    def forget_project(self) -> Project | None:
        project = self.prompt_project(self._known_projects(), title="forget project")
        if project is None:
            return None
        if self.resolver.forget(project):
            console.print(f"forgot [bold]{escape(project.name)}[/bold]")
        return project

    def forget_under(self) -> list:
        path = self.prompter.read("forget projects under: ")
        if path is None:
            return []
        removed = self.resolver.forget_under(path)
        console.print(f"forgot {len(removed)} project(s)", style="dim")
        return removed

    def forget_zombies(self) -> list:
        removed = self.resolver.forget_zombies()
        for root in removed:
            console.print(f"  forgot [dim]{escape(str(root))}[/dim]")
        console.print(f"forgot {len(removed)} missing project(s)", style="dim")
        return removed

    def remember_under(self) -> list:
        path = self.prompter.read("remember projects under: ", default=str(self.config.cwd))
        if path is None:
            return []
        added = self.resolver.remember_under(path)
        for root in added:
            console.print(f"  [green]+[/green] {escape(short_path(root))}")
        console.print(f"remembered {len(added)} new project(s)", style="dim")
        return added
