"""Tests for Scope snapshots and ScopeStore override/nesting behaviour."""

import json
from unittest.mock import MagicMock

import pytest

from disproject.commands import CustomCommandRegistry, TrustStore
from disproject.projects import KnownProjectsRegistry, Project, ProjectResolver, VCSBackend
from disproject.scope import Scope, ScopeStore, normalize_key

MAKE = {"key": "m", "description": "make", "command-type": "compile", "command": "make"}
LINT = {"key": "l", "description": "lint", "command-type": "compile", "command": "ruff ."}


def _project(tmp_path, name, commands=None):
    root = tmp_path / name
    (root / ".git").mkdir(parents=True)
    if commands is not None:
        (root / ".disproject").mkdir()
        (root / ".disproject" / "settings.json").write_text(
            json.dumps({"customCommands": commands})
        )
    return Project(root.resolve(), VCSBackend.GIT)


def _store(tmp_path, invoking=None, defaults=None, prefer_other_window=False):
    home = tmp_path / "home"
    resolver = ProjectResolver(KnownProjectsRegistry(home / "projects.json"))
    trust = TrustStore(home / "trusted.json", ask=lambda root: "y")
    commands = CustomCommandRegistry(trust, defaults=defaults)
    if invoking is None:
        invoking = tmp_path / "nowhere"
        invoking.mkdir(exist_ok=True)
    return ScopeStore(resolver, commands, invoking, prefer_other_window=prefer_other_window)


class TestScope:
    def test_get_accepts_both_spellings(self):
        scope = Scope(prefer_other_window=True)
        assert scope.get("prefer-other-window") is True
        assert scope.get("prefer_other_window") is True

    def test_unknown_key(self):
        with pytest.raises(KeyError):
            Scope().get("colour")
        with pytest.raises(KeyError):
            normalize_key("nope")

    def test_replace_is_a_copy(self):
        scope = Scope()
        changed = scope.replace(prefer_other_window=True)
        assert scope.prefer_other_window is False
        assert changed.prefer_other_window is True


class TestBuild:
    def test_ambient_project(self, tmp_path):
        a = _project(tmp_path, "a")
        store = _store(tmp_path, invoking=a.root / ".git")
        scope = store.build()
        assert scope.default_project == a
        assert scope.selected_project == a
        assert a.root in store.resolver.registry

    def test_no_ambient_project(self, tmp_path):
        scope = _store(tmp_path).build()
        assert scope.default_project is None
        assert scope.selected_project is None

    def test_override_wins_over_previous(self, tmp_path):
        a = _project(tmp_path, "a")
        b = _project(tmp_path, "b")
        store = _store(tmp_path, invoking=a.root)
        store.build()
        scope = store.build({"selected-project": b})
        assert scope.selected_project == b
        assert scope.default_project == a

    def test_previous_kept_without_override(self, tmp_path):
        a = _project(tmp_path, "a")
        b = _project(tmp_path, "b")
        store = _store(tmp_path, invoking=a.root)
        store.build({"selected-project": b, "prefer-other-window": True})
        scope = store.build()
        assert scope.selected_project == b
        assert scope.prefer_other_window is True

    def test_configured_placement_default(self, tmp_path):
        assert _store(tmp_path, prefer_other_window=True).build().prefer_other_window is True

    def test_overridden_project_is_remembered(self, tmp_path):
        b = _project(tmp_path, "b")
        store = _store(tmp_path)
        store.build({"selected-project": b})
        assert b.root in store.resolver.registry

    def test_commands_loaded_for_selected(self, tmp_path):
        a = _project(tmp_path, "a", commands=[LINT])
        store = _store(tmp_path, invoking=a.root, defaults=[MAKE])
        assert [s.key for s in store.build().custom_commands] == ["l"]

    def test_commands_reused_for_same_project(self, tmp_path):
        a = _project(tmp_path, "a", commands=[LINT])
        store = _store(tmp_path, invoking=a.root)
        first = store.build()
        store.commands.load = MagicMock()
        assert store.build().custom_commands is first.custom_commands
        store.commands.load.assert_not_called()

    def test_scope_property_builds_lazily(self, tmp_path):
        store = _store(tmp_path)
        assert store.current is None
        assert store.scope is store.current


class TestSet:
    def test_new_project_refreshes_commands(self, tmp_path):
        a = _project(tmp_path, "a")
        b = _project(tmp_path, "b", commands=[LINT])
        store = _store(tmp_path, invoking=a.root, defaults=[MAKE])
        store.build({"prefer-other-window": True})
        scope = store.set("selected-project", b)
        assert [s.key for s in scope.custom_commands] == ["l"]
        assert scope.prefer_other_window is True
        assert scope.default_project == a

    def test_other_key_keeps_commands(self, tmp_path):
        store = _store(tmp_path, defaults=[MAKE])
        before = store.scope.custom_commands
        store.commands.load = MagicMock()
        scope = store.set("prefer_other_window", True)
        assert scope.custom_commands is before
        store.commands.load.assert_not_called()

    def test_refresh_rereads(self, tmp_path):
        a = _project(tmp_path, "a")
        store = _store(tmp_path, invoking=a.root, defaults=[MAKE])
        assert [s.key for s in store.scope.custom_commands] == ["m"]
        (a.root / ".disproject").mkdir()
        (a.root / ".disproject" / "settings.json").write_text(
            json.dumps({"customCommands": [LINT]})
        )
        assert [s.key for s in store.refresh().custom_commands] == ["l"]


class TestChild:
    def test_child_copies_parent(self, tmp_path):
        a = _project(tmp_path, "a")
        parent = _store(tmp_path, invoking=a.root)
        child = parent.child()
        assert child.scope == parent.scope
        assert child.parent is parent

    def test_child_override_does_not_touch_parent(self, tmp_path):
        a = _project(tmp_path, "a")
        b = _project(tmp_path, "b")
        parent = _store(tmp_path, invoking=a.root)
        child = parent.child({"selected-project": b})
        assert child.scope.selected_project == b
        assert parent.scope.selected_project == a

    def test_write_back(self, tmp_path):
        a = _project(tmp_path, "a")
        b = _project(tmp_path, "b")
        root = _store(tmp_path, invoking=a.root)
        grandchild = root.child().child({"selected-project": b})
        grandchild.write_back()
        assert root.scope.selected_project == b
        assert grandchild.parent.scope.selected_project == b

    def test_set_with_write_back(self, tmp_path):
        parent = _store(tmp_path)
        child = parent.child()
        child.set("prefer-other-window", True, write_back=True)
        assert parent.scope.prefer_other_window is True

    def test_set_without_write_back(self, tmp_path):
        parent = _store(tmp_path)
        child = parent.child()
        child.set("prefer-other-window", True)
        assert parent.scope.prefer_other_window is False

    def test_written_back_project_loads_commands_once(self, tmp_path):
        b = _project(tmp_path, "b", commands=[LINT])
        root = _store(tmp_path, defaults=[MAKE])
        grandchild = root.child().child()
        grandchild.commands.load = MagicMock(wraps=grandchild.commands.load)
        scope = grandchild.set("selected-project", b, write_back=True)
        grandchild.commands.load.assert_called_once_with(b)
        assert root.scope.selected_project == b
        assert root.scope.custom_commands is scope.custom_commands
        assert grandchild.parent.scope.custom_commands is scope.custom_commands

    def test_refresh_with_write_back(self, tmp_path):
        a = _project(tmp_path, "a")
        parent = _store(tmp_path, invoking=a.root, defaults=[MAKE])
        child = parent.child()
        (a.root / ".disproject").mkdir()
        (a.root / ".disproject" / "settings.json").write_text(
            json.dumps({"customCommands": [LINT]})
        )
        child.refresh()
        assert [s.key for s in parent.scope.custom_commands] == ["m"]
        child.refresh(write_back=True)
        assert [s.key for s in parent.scope.custom_commands] == ["l"]


class TestEnsureSelectedProject:
    def test_prompts_once_per_session(self, tmp_path):
        a = _project(tmp_path, "a")
        root = _store(tmp_path)
        prompt = MagicMock(return_value=a)
        assert root.child().ensure_selected_project(prompt) == a
        assert root.child().ensure_selected_project(prompt) == a
        assert root.ensure_selected_project(prompt) == a
        prompt.assert_called_once()

    def test_no_prompt_when_selected(self, tmp_path):
        a = _project(tmp_path, "a")
        prompt = MagicMock()
        assert _store(tmp_path, invoking=a.root).ensure_selected_project(prompt) == a
        prompt.assert_not_called()

    def test_cancelled(self, tmp_path):
        root = _store(tmp_path)
        assert root.ensure_selected_project(lambda: None) is None
        assert root.scope.selected_project is None
