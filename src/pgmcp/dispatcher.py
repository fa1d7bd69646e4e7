# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Protocol-independent dispatch of tools and resources.

CommandDispatcher maps tool calls onto SqlExecutor with the command's
read_only flag, and resource requests onto SchemaCatalog. It returns
plain Python values; the MCP layer (server.py) and the CLI (cli.py)
turn them into protocol objects or console output.

Validation happens before any connection is leased: an unknown command
or a blank "sql" argument never touches the pool.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from .commands import SQL_INPUT_SCHEMA, Command, SqlArguments
from .resources import ResourceLocator
from .sql import SchemaCatalog, SqlExecutor

if TYPE_CHECKING:
    from .config import ServerConfig

RESOURCE_MIME_TYPE = "application/json"


@dataclass(frozen=True)
class ToolDescriptor:
    """One invokable command as advertised to clients."""

    name: str
    description: str
    input_schema: dict[str, Any] = field(default_factory=lambda: copy.deepcopy(SQL_INPUT_SCHEMA))


@dataclass(frozen=True)
class ResourceDescriptor:
    """One readable table-schema resource."""

    uri: str
    name: str
    mime_type: str = RESOURCE_MIME_TYPE


class CommandDispatcher:
    """Routes tool invocations and resource reads.

    Attributes:
        executor: SqlExecutor running tool statements.
        catalog: SchemaCatalog answering resource requests.
        locator: ResourceLocator building and parsing resource URIs.
    """

    def __init__(
        self, executor: SqlExecutor, catalog: SchemaCatalog, locator: ResourceLocator
    ):
        self.executor = executor
        self.catalog = catalog
        self.locator = locator

    @classmethod
    def from_config(cls, config: ServerConfig) -> CommandDispatcher:
        """Wire executor, catalog and locator from a ServerConfig.

        Raises:
            ConfigurationError: If the connection string is invalid.
        """
        locator = ResourceLocator.from_database_url(config.database_url)
        executor = SqlExecutor.from_url(
            config.database_url,
            pool_size=config.pool_size,
            connect_timeout=config.connect_timeout,
        )
        return cls(executor, SchemaCatalog(executor, schema=config.schema), locator)

    # -------------------------------------------------------------------------
    # Tools
    # -------------------------------------------------------------------------

    def list_tools(self) -> list[ToolDescriptor]:
        """Return every command with its description and input schema."""
        return [ToolDescriptor(name=c.value, description=c.description) for c in Command]

    async def call_tool(self, name: Any, arguments: Any) -> Any:
        """Run a command and shape its result.

        Args:
            name: Tool name, one of the Command values.
            arguments: Raw arguments mapping; must contain a non-blank "sql".

        Returns:
            Row list for read-only commands, or
            {"rowCount", "rows", "command"} for mutating ones.

        Raises:
            UnknownCommandError: Unknown tool name.
            InvalidArgumentError: Missing, non-string or blank "sql".
            DatabaseError: Execution failed (transaction rolled back).
        """
        command = Command.lookup(name)
        args = SqlArguments.parse(arguments)

        result = await self.executor.execute(args.sql, read_only=command.read_only)
        if command.read_only:
            return result.rows
        return {
            "rowCount": result.row_count,
            "rows": result.rows,
            "command": result.command,
        }

    # -------------------------------------------------------------------------
    # Resources
    # -------------------------------------------------------------------------

    async def list_resources(self) -> list[ResourceDescriptor]:
        """Return one schema resource per table."""
        tables = await self.catalog.list_tables()
        return [
            ResourceDescriptor(
                uri=self.locator.uri_for(table),
                name=f'"{table}" database schema',
            )
            for table in tables
        ]

    async def read_resource(self, uri: str) -> list[dict[str, Any]]:
        """Return the column list of the table a resource URI points at.

        Raises:
            InvalidResourceURIError: URI path is not <table>/schema.
        """
        table = self.locator.table_from_uri(uri)
        return await self.catalog.describe_table(table)


__all__ = [
    "CommandDispatcher",
    "RESOURCE_MIME_TYPE",
    "ResourceDescriptor",
    "ToolDescriptor",
]
