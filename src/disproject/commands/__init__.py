"""Commands: custom command specs, validation, trust, and dispatch."""

from .dispatcher import CommandDispatcher, instance_name
from .models import (
    COMMAND_TYPES,
    CallableCommand,
    CommandConfigError,
    CommandSpec,
    CommandType,
    LiteralCommand,
    parse_payload,
)
from .registry import CustomCommandRegistry, read_project_commands
from .schema import CUSTOM_COMMANDS_SCHEMA, RESERVED_KEYS, iter_schema_errors
from .trust import TRUST_ALWAYS, TRUST_NO, TRUST_ONCE, TrustStore

__all__ = [
    "COMMAND_TYPES",
    "CUSTOM_COMMANDS_SCHEMA",
    "RESERVED_KEYS",
    "TRUST_ALWAYS",
    "TRUST_NO",
    "TRUST_ONCE",
    "CallableCommand",
    "CommandConfigError",
    "CommandDispatcher",
    "CommandSpec",
    "CommandType",
    "CustomCommandRegistry",
    "LiteralCommand",
    "TrustStore",
    "instance_name",
    "iter_schema_errors",
    "parse_payload",
    "read_project_commands",
]
