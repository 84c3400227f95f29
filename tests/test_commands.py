"""Tests for custom command models, schema validation, trust and the registry."""

import json
import os.path
from unittest.mock import MagicMock, patch

import pytest

from disproject.commands import (
    CallableCommand,
    CommandConfigError,
    CommandSpec,
    CustomCommandRegistry,
    LiteralCommand,
    TrustStore,
    iter_schema_errors,
    parse_payload,
    read_project_commands,
)
from disproject.projects import Project, VCSBackend

MAKE = {"key": "m", "description": "make", "command-type": "compile", "command": "make -k"}
TEST = {
    "key": "t",
    "description": "run tests",
    "command-type": "call",
    "command": {"callable": "builtins:repr"},
    "identifier": "tests",
}


def _project(tmp_path, name="a", commands=None, local=None):
    root = tmp_path / name
    (root / ".git").mkdir(parents=True)
    settings_dir = root / ".disproject"
    if commands is not None:
        settings_dir.mkdir(exist_ok=True)
        (settings_dir / "settings.json").write_text(json.dumps({"customCommands": commands}))
    if local is not None:
        settings_dir.mkdir(exist_ok=True)
        (settings_dir / "settings.local.json").write_text(json.dumps({"customCommands": local}))
    return Project(root.resolve(), VCSBackend.GIT)


def _registry(tmp_path, answer="y", defaults=None):
    ask = MagicMock(return_value=answer)
    trust = TrustStore(tmp_path / "home" / "trusted.json", ask=ask)
    return CustomCommandRegistry(trust, defaults=defaults), ask


class TestPayload:
    def test_string_is_literal(self):
        assert parse_payload("make") == LiteralCommand("make")

    def test_callable_ref(self):
        assert parse_payload({"callable": "os.path:join"}) == CallableCommand(ref="os.path:join")

    def test_python_callable(self):
        payload = parse_payload(len)
        assert payload.resolve() is len
        assert payload.describe() == "len"

    def test_unsupported(self):
        with pytest.raises(CommandConfigError):
            parse_payload(42)

    def test_resolve_ref(self):
        assert CallableCommand(ref="os.path:join").resolve() is os.path.join

    def test_resolve_dotted_attr(self):
        assert CallableCommand(ref="os:path.join").resolve() is os.path.join

    @pytest.mark.parametrize(
        "ref",
        ["no-colon", "missing_module_xyz:func", "os:no_such_attr", "os:sep"],
    )
    def test_bad_refs(self, ref):
        with pytest.raises(CommandConfigError):
            CallableCommand(ref=ref).resolve()


class TestCommandSpec:
    def test_from_dict(self):
        spec = CommandSpec.from_dict(TEST)
        assert spec.key == "t"
        assert spec.command_type == "call"
        assert spec.command == CallableCommand(ref="builtins:repr")
        assert spec.instance_identifier == "tests"

    def test_identifier_defaults_to_description(self):
        assert CommandSpec.from_dict(MAKE).instance_identifier == "make"


class TestSchema:
    def test_valid(self):
        assert list(iter_schema_errors([MAKE, TEST])) == []

    def test_empty_list_is_valid(self):
        assert list(iter_schema_errors([])) == []

    def test_not_a_list(self):
        assert list(iter_schema_errors({"key": "m"}))

    def test_missing_command_type(self):
        entry = {k: v for k, v in MAKE.items() if k != "command-type"}
        errors = list(iter_schema_errors([TEST, entry]))
        assert any("command-type" in message for _, message in errors)

    def test_unknown_command_type(self):
        assert list(iter_schema_errors([{**MAKE, "command-type": "spawn"}]))

    def test_call_rejects_shell_string(self):
        assert list(iter_schema_errors([{**TEST, "command": "pytest"}]))

    def test_compile_accepts_callable(self):
        entry = {**MAKE, "command": {"callable": "mymod:build_command"}}
        assert list(iter_schema_errors([entry])) == []

    def test_bad_callable_ref(self):
        assert list(iter_schema_errors([{**TEST, "command": {"callable": "not a ref"}}]))

    def test_extra_property(self):
        assert list(iter_schema_errors([{**MAKE, "shell": True}]))

    def test_duplicate_keys(self):
        errors = list(iter_schema_errors([MAKE, {**MAKE, "description": "again"}]))
        assert errors == [("1.key", "duplicate key 'm'")]

    @pytest.mark.parametrize("key", ["q", "P", "R"])
    def test_navigation_keys_are_reserved(self, key):
        errors = list(iter_schema_errors([{**MAKE, "key": key}]))
        assert errors == [("0.key", f"key {key!r} is reserved for menu navigation")]


class TestTrustStore:
    def test_asks_once_per_session(self, tmp_path):
        ask = MagicMock(return_value="y")
        store = TrustStore(tmp_path / "trusted.json", ask=ask)
        assert store.is_trusted(tmp_path / "a") is True
        assert store.is_trusted(tmp_path / "a") is True
        ask.assert_called_once()
        assert not (tmp_path / "trusted.json").exists()

    def test_always_persists(self, tmp_path):
        path = tmp_path / "trusted.json"
        TrustStore(path, ask=lambda root: "!").is_trusted(tmp_path / "a")
        ask = MagicMock()
        assert TrustStore(path, ask=ask).is_trusted(tmp_path / "a") is True
        ask.assert_not_called()

    def test_refused(self, tmp_path):
        store = TrustStore(tmp_path / "trusted.json", ask=lambda root: "n")
        assert store.is_trusted(tmp_path / "a") is False

    def test_no_prompt_means_untrusted(self, tmp_path):
        assert TrustStore(tmp_path / "trusted.json").is_trusted(tmp_path / "a") is False

    def test_cancelled_prompt(self, tmp_path):
        store = TrustStore(tmp_path / "trusted.json", ask=lambda root: None)
        assert store.is_trusted(tmp_path / "a") is False


class TestReadProjectCommands:
    def test_local_file_wins(self, tmp_path):
        project = _project(tmp_path, commands=[MAKE], local=[TEST])
        value, source = read_project_commands(project)
        assert value == [TEST]
        assert source.endswith("settings.local.json")


class TestCustomCommandRegistry:
    def test_loads_project_commands(self, tmp_path):
        registry, ask = _registry(tmp_path)
        specs = registry.load(_project(tmp_path, commands=[MAKE, TEST]))
        assert [s.key for s in specs] == ["m", "t"]
        ask.assert_called_once()

    def test_no_project_gives_defaults(self, tmp_path):
        registry, _ = _registry(tmp_path, defaults=[MAKE])
        assert [s.key for s in registry.load(None)] == ["m"]

    def test_no_setting_gives_defaults_without_asking(self, tmp_path):
        registry, ask = _registry(tmp_path, defaults=[MAKE])
        assert [s.key for s in registry.load(_project(tmp_path))] == ["m"]
        ask.assert_not_called()

    def test_invalid_entry_rejects_whole_list(self, tmp_path):
        broken = {k: v for k, v in TEST.items() if k != "command-type"}
        registry, _ = _registry(tmp_path, defaults=[MAKE])
        with patch("disproject.commands.registry.console") as mock_console:
            specs = registry.load(_project(tmp_path, commands=[{**MAKE, "key": "x"}, broken]))
        assert [s.key for s in specs] == ["m"]
        printed = " ".join(str(c) for c in mock_console.print.call_args_list)
        assert "command-type" in printed
        assert "settings.json" in printed

    def test_untrusted_project_gives_defaults(self, tmp_path):
        registry, _ = _registry(tmp_path, answer="n", defaults=[MAKE])
        with patch("disproject.commands.registry.console"):
            specs = registry.load(_project(tmp_path, commands=[TEST]))
        assert [s.key for s in specs] == ["m"]

    def test_invalid_defaults_are_empty(self, tmp_path):
        with patch("disproject.commands.registry.console"):
            registry, _ = _registry(tmp_path, defaults="make")
        assert registry.defaults == ()
        assert registry.load(None) == ()
