# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Exception hierarchy for the pgmcp server.

Every error raised on purpose by pgmcp derives from PgMcpError, so callers
can catch the whole family at once. Per-request errors (everything except
ConfigurationError) are surfaced to the MCP client as an error result for
that single call.

Components:
    PgMcpError: Root of the hierarchy.
    ConfigurationError: Missing or invalid startup configuration.
    InvalidArgumentError: Malformed tool arguments (no query attempted).
    UnknownCommandError: Tool name outside the fixed command set.
    InvalidResourceURIError: Resource URI not of the form <table>/schema.
    DatabaseError: Statement or transaction-control failure.
"""

from __future__ import annotations


class PgMcpError(Exception):
    """Base class for all pgmcp errors."""


class ConfigurationError(PgMcpError):
    """Startup configuration is missing or invalid. Fatal."""


class InvalidArgumentError(PgMcpError, ValueError):
    """The "sql" argument is missing, not a string, or blank."""


class UnknownCommandError(PgMcpError, LookupError):
    """Raised when a tool name is not one of the fixed commands."""

    def __init__(self, name: object):
        self.name = name
        super().__init__(f"Unknown tool: {name}")


class InvalidResourceURIError(PgMcpError, ValueError):
    """Resource URI does not point at a <table>/schema path."""

    def __init__(self, uri: str):
        self.uri = uri
        super().__init__(f"Invalid resource URI: {uri}")


class DatabaseError(PgMcpError):
    """Statement, BEGIN or COMMIT failed on the database.

    Attributes:
        sqlstate: Five-character SQLSTATE code reported by the server,
            or None when the failure did not come from the server
            (e.g. a dropped connection).

    The driver exception is chained as ``__cause__``.
    """

    def __init__(self, message: str, sqlstate: str | None = None):
        super().__init__(message)
        self.sqlstate = sqlstate

    @classmethod
    def from_driver(cls, exc: BaseException) -> DatabaseError:
        """Wrap a driver exception, keeping its message and SQLSTATE."""
        message = str(exc).strip() or exc.__class__.__name__
        error = cls(message, sqlstate=getattr(exc, "sqlstate", None))
        error.__cause__ = exc
        return error


__all__ = [
    "ConfigurationError",
    "DatabaseError",
    "InvalidArgumentError",
    "InvalidResourceURIError",
    "PgMcpError",
    "UnknownCommandError",
]
