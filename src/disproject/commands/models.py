"""Custom command data models: CommandSpec and its payload union."""

from __future__ import annotations

import importlib
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any, Union


class CommandConfigError(Exception):
    """A custom command that cannot be executed as configured."""


class CommandType(str, Enum):
    BARE_CALL = "bare-call"
    CALL = "call"
    COMPILE = "compile"


COMMAND_TYPES = tuple(t.value for t in CommandType)


@dataclass(frozen=True)
class LiteralCommand:
    """A plain shell command string."""

    value: str

    def resolve(self) -> str:
        return self.value

    def describe(self) -> str:
        return self.value


@dataclass(frozen=True)
class CallableCommand:
    """A callable, given directly or as a ``"package.module:attr"`` reference."""

    ref: str = ""
    func: Callable[..., Any] | None = None

    def resolve(self) -> Callable[..., Any]:
        if self.func is not None:
            return self.func
        module_name, sep, attr_path = self.ref.partition(":")
        if not sep or not module_name or not attr_path:
            raise CommandConfigError(f"invalid callable reference {self.ref!r}")
        try:
            target: Any = importlib.import_module(module_name)
        except ImportError as e:
            raise CommandConfigError(f"cannot import {module_name!r}: {e}") from e
        for attr in attr_path.split("."):
            try:
                target = getattr(target, attr)
            except AttributeError as e:
                raise CommandConfigError(f"{self.ref!r}: no attribute {attr!r}") from e
        if not callable(target):
            raise CommandConfigError(f"{self.ref!r} is not callable")
        return target

    def describe(self) -> str:
        if self.ref:
            return self.ref
        return getattr(self.func, "__qualname__", repr(self.func))


CommandPayload = Union[LiteralCommand, CallableCommand]


def parse_payload(raw: Any) -> CommandPayload:
    if isinstance(raw, str):
        return LiteralCommand(raw)
    if isinstance(raw, dict) and isinstance(raw.get("callable"), str):
        return CallableCommand(ref=raw["callable"])
    if callable(raw):
        return CallableCommand(func=raw)
    raise CommandConfigError(f"unsupported command payload {raw!r}")


@dataclass(frozen=True)
class CommandSpec:
    key: str
    description: str
    command_type: str
    command: CommandPayload
    identifier: str | None = None

    @property
    def instance_identifier(self) -> str:
        """Identifier used for execution-instance naming."""
        return self.identifier or self.description

    @classmethod
    def from_dict(cls, raw: dict) -> CommandSpec:
        """Build from an already schema-validated settings entry."""
        return cls(
            key=raw["key"],
            description=raw["description"],
            command_type=raw["command-type"],
            command=parse_payload(raw["command"]),
            identifier=raw.get("identifier"),
        )
