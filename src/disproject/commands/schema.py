"""JSON Schema for the ``customCommands`` settings value."""

from __future__ import annotations

from functools import lru_cache
from typing import Any, Iterator, Tuple

from jsonschema import Draft202012Validator

from .models import COMMAND_TYPES

# bound by the custom commands menu itself: switch project, reload, back
RESERVED_KEYS = ("P", "R", "q")

CUSTOM_COMMANDS_SCHEMA: dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "array",
    "items": {
        "type": "object",
        "required": ["key", "description", "command-type", "command"],
        "additionalProperties": False,
        "properties": {
            "key": {"type": "string", "minLength": 1},
            "description": {"type": "string", "minLength": 1},
            "command-type": {"enum": list(COMMAND_TYPES)},
            "command": {
                "oneOf": [
                    {"type": "string", "minLength": 1},
                    {"$ref": "#/$defs/callable"},
                ]
            },
            "identifier": {"type": "string", "minLength": 1},
        },
        # only compile accepts a literal shell string
        "if": {
            "required": ["command-type"],
            "properties": {"command-type": {"enum": ["bare-call", "call"]}},
        },
        "then": {"properties": {"command": {"$ref": "#/$defs/callable"}}},
    },
    "$defs": {
        "callable": {
            "type": "object",
            "required": ["callable"],
            "additionalProperties": False,
            "properties": {
                "callable": {
                    "type": "string",
                    "pattern": r"^[A-Za-z_][\w.]*:[A-Za-z_][\w.]*$",
                }
            },
        }
    },
}


@lru_cache(maxsize=1)
def _validator() -> Draft202012Validator:
    return Draft202012Validator(CUSTOM_COMMANDS_SCHEMA)


def iter_schema_errors(value: Any) -> Iterator[Tuple[str, str]]:
    """Yield (path, message) pairs for problems in a ``customCommands`` value."""
    for error in _validator().iter_errors(value):
        path = ".".join(str(item) for item in error.absolute_path)
        yield path, error.message
    if isinstance(value, list):
        seen: set[str] = set()
        for i, entry in enumerate(value):
            key = entry.get("key") if isinstance(entry, dict) else None
            if not isinstance(key, str):
                continue
            if key in RESERVED_KEYS:
                yield f"{i}.key", f"key {key!r} is reserved for menu navigation"
            elif key in seen:
                yield f"{i}.key", f"duplicate key {key!r}"
            seen.add(key)


__all__ = ["CUSTOM_COMMANDS_SCHEMA", "RESERVED_KEYS", "iter_schema_errors"]
