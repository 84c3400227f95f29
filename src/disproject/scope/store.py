"""ScopeStore: builds, updates and nests Scope snapshots for a session."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from pathlib import Path
from typing import Any

from ..commands.registry import CustomCommandRegistry
from ..projects.models import Project
from ..projects.resolver import ProjectResolver
from .models import SCOPE_KEYS, Scope, normalize_key

logger = logging.getLogger(__name__)


class ScopeStore:
    """The one writable reference to a session's current Scope.

    ``build`` computes a fresh snapshot with override precedence
    ``overrides > previous scope > ambient``. ``set`` swaps in a copy with a
    single key changed. Child stores start from a copy of their parent's
    scope and only touch the parent when asked to write back.
    """

    def __init__(
        self,
        resolver: ProjectResolver,
        commands: CustomCommandRegistry,
        invoking_path: Path,
        prefer_other_window: bool = False,
        parent: ScopeStore | None = None,
    ):
        self.resolver = resolver
        self.commands = commands
        self.invoking_path = invoking_path
        self.prefer_other_window_default = prefer_other_window
        self.parent = parent
        self.current: Scope | None = None

    def _previous(self) -> Scope | None:
        if self.current is not None:
            return self.current
        if self.parent is not None:
            return self.parent.current
        return None

    def build(self, overrides: Mapping[str, Any] | None = None) -> Scope:
        given = {normalize_key(k): v for k, v in (overrides or {}).items()}
        previous = self._previous()

        if "default_project" in given:
            default = given["default_project"]
        elif previous is not None:
            default = previous.default_project
        else:
            default = self.resolver.resolve(self.invoking_path)

        selected = given.get("selected_project")
        if selected is None and previous is not None:
            selected = previous.selected_project
        if selected is None:
            selected = default

        if given.get("prefer_other_window") is not None:
            prefer_other_window = bool(given["prefer_other_window"])
        elif previous is not None:
            prefer_other_window = previous.prefer_other_window
        else:
            prefer_other_window = self.prefer_other_window_default

        for project in {default, selected} - {None}:
            self.resolver.remember(project)

        if "custom_commands" in given:
            custom = tuple(given["custom_commands"])
        elif previous is not None and previous.selected_project == selected:
            custom = previous.custom_commands
        else:
            custom = self.commands.load(selected)

        self.current = Scope(
            default_project=default,
            selected_project=selected,
            prefer_other_window=prefer_other_window,
            custom_commands=custom,
        )
        return self.current

    @property
    def scope(self) -> Scope:
        return self.current if self.current is not None else self.build()

    def get(self, key: str) -> Any:
        return self.scope.get(key)

    def set(self, key: str, value: Any, write_back: bool = False) -> Scope:
        """Replace one key in place; a new selected project refreshes its commands."""
        key = normalize_key(key)
        scope = self.scope
        changes: dict[str, Any] = {key: value}
        if key == "selected_project" and value != scope.selected_project:
            if value is not None:
                self.resolver.remember(value)
            changes["custom_commands"] = self.commands.load(value)
            logger.debug("selected project -> %s", value)
        self.current = scope.replace(**changes)
        if write_back:
            keys = set(changes)
            if key == "selected_project":
                # ancestors may hold another project with other commands
                keys.add("custom_commands")
            self.write_back(keys)
        return self.current

    def refresh(self, write_back: bool = False) -> Scope:
        """Re-read custom commands for the selected project."""
        scope = self.scope
        self.current = scope.replace(custom_commands=self.commands.load(scope.selected_project))
        if write_back:
            self.write_back(["custom_commands"])
        return self.current

    def child(self, overrides: Mapping[str, Any] | None = None) -> ScopeStore:
        store = ScopeStore(
            self.resolver,
            self.commands,
            self.invoking_path,
            prefer_other_window=self.prefer_other_window_default,
            parent=self,
        )
        if self.current is None:
            self.build()
        store.build(overrides)
        return store

    def write_back(self, keys: Iterable[str] | None = None) -> None:
        """Copy *keys* (all of them when None) of this scope into every ancestor.

        Values are copied, not recomputed, so a selected project's commands
        are loaded once however deep the store sits.
        """
        scope = self.scope
        names = SCOPE_KEYS if keys is None else [normalize_key(k) for k in keys]
        values = {name: getattr(scope, name) for name in names}
        node = self.parent
        while node is not None:
            node.current = node.scope.replace(**values)
            node = node.parent

    def ensure_selected_project(
        self, prompt: Callable[[], Project | None]
    ) -> Project | None:
        """Selected project, prompting once if there is none.

        The answer is written back to all ancestors, so a session prompts at
        most once however many commands it dispatches.
        """
        selected = self.scope.selected_project
        if selected is not None:
            return selected
        project = prompt()
        if project is None:
            return None
        self.set("selected_project", project, write_back=True)
        return project
