# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""The fixed set of SQL commands exposed as MCP tools.

Each Command carries its tool name, description and read_only flag.
Only ``query`` is read-only; it runs inside a READ ONLY transaction that
is always rolled back. Every other command runs in a read-write
transaction that is committed on success.

The set is closed: adding a command means adding an enum member.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, StrictStr, ValidationError, field_validator

from .errors import InvalidArgumentError, UnknownCommandError

SQL_INPUT_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "sql": {"type": "string", "description": "SQL statement to execute"},
    },
    "required": ["sql"],
}

INVALID_SQL_MESSAGE = 'The "sql" argument must be a non-empty string.'


class Command(str, Enum):
    """SQL tool with its static description and transaction mode."""

    description: str
    read_only: bool

    def __new__(cls, tool_name: str, description: str, read_only: bool) -> Command:
        member = str.__new__(cls, tool_name)
        member._value_ = tool_name
        member.description = description
        member.read_only = read_only
        return member

    QUERY = ("query", "Run a read-only SQL query", True)
    INSERT = ("insert", "Execute an INSERT statement", False)
    UPDATE = ("update", "Execute an UPDATE statement", False)
    DELETE = ("delete", "Execute a DELETE statement", False)
    FUNCTION_CALL = ("function_call", "Invoke a stored function (SELECT or CALL)", False)
    FUNCTION_CREATE = ("function_create", "Create or replace a stored function", False)

    @classmethod
    def lookup(cls, name: Any) -> Command:
        """Return the command named name.

        Raises:
            UnknownCommandError: If name is not one of the fixed commands.
        """
        try:
            return cls(name)
        except ValueError:
            raise UnknownCommandError(name) from None


class SqlArguments(BaseModel):
    """Arguments accepted by every command: a single non-blank "sql" string."""

    model_config = ConfigDict(extra="ignore")

    sql: StrictStr

    @field_validator("sql")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value

    @classmethod
    def parse(cls, arguments: Any) -> SqlArguments:
        """Validate raw tool arguments.

        Raises:
            InvalidArgumentError: If "sql" is missing, not a string, or blank.
        """
        if arguments is None:
            arguments = {}
        try:
            return cls.model_validate(arguments)
        except ValidationError:
            raise InvalidArgumentError(INVALID_SQL_MESSAGE) from None


__all__ = ["Command", "INVALID_SQL_MESSAGE", "SQL_INPUT_SCHEMA", "SqlArguments"]
