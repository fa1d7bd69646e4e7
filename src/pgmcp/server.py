# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""MCP server exposing SQL tools and table-schema resources.

This module binds a CommandDispatcher to the MCP low-level server:

    resources/list   one "<table>/schema" resource per table
    resources/read   JSON array of {column_name, data_type}
    tools/list       the six SQL commands, each taking {"sql": string}
    tools/call       JSON rows (read-only) or {rowCount, rows, command}

Errors raised by the dispatcher are turned into per-call error results
by the mcp library; the server keeps running.

Example:
    Run over stdio (what MCP clients launch)::

        config = config_from_env("postgresql://app@localhost/app")
        asyncio.run(serve_stdio(CommandDispatcher.from_config(config)))
"""

from __future__ import annotations

import datetime
import json
import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

import mcp.types as types
from mcp.server.lowlevel import Server
from mcp.server.lowlevel.helper_types import ReadResourceContents
from mcp.server.stdio import stdio_server

from . import __version__
from .dispatcher import RESOURCE_MIME_TYPE
from .errors import PgMcpError

if TYPE_CHECKING:
    from pydantic import AnyUrl

    from .dispatcher import CommandDispatcher

logger = logging.getLogger(__name__)

SERVER_NAME = "pgmcp"


def _json_default(value: Any) -> Any:
    """Convert database values JSON does not know about."""
    if isinstance(value, (datetime.date, datetime.time)):
        return value.isoformat()
    if isinstance(value, (bytes, bytearray, memoryview)):
        return "\\x" + bytes(value).hex()
    # Decimal, UUID, timedelta, network addresses, ranges...
    return str(value)


def to_json(payload: Any) -> str:
    """Serialize a tool or resource payload (2-space indent)."""
    return json.dumps(payload, indent=2, default=_json_default)


def build_server(dispatcher: CommandDispatcher) -> Server:
    """Create the MCP server and register its handlers on dispatcher."""
    server: Server = Server(SERVER_NAME, version=__version__)

    @server.list_resources()
    async def list_resources() -> list[types.Resource]:
        return [
            types.Resource(uri=r.uri, name=r.name, mimeType=r.mime_type)
            for r in await dispatcher.list_resources()
        ]

    @server.read_resource()
    async def read_resource(uri: AnyUrl) -> Iterable[ReadResourceContents]:
        columns = await dispatcher.read_resource(str(uri))
        return [ReadResourceContents(content=to_json(columns), mime_type=RESOURCE_MIME_TYPE)]

    @server.list_tools()
    async def list_tools() -> list[types.Tool]:
        return [
            types.Tool(name=t.name, description=t.description, inputSchema=t.input_schema)
            for t in dispatcher.list_tools()
        ]

    # Argument checks belong to the dispatcher so the error taxonomy stays ours
    @server.call_tool(validate_input=False)
    async def call_tool(name: str, arguments: dict[str, Any] | None) -> list[types.TextContent]:
        try:
            payload = await dispatcher.call_tool(name, arguments)
        except PgMcpError as e:
            logger.info("Tool %s failed: %s", name, e)
            raise
        return [types.TextContent(type="text", text=to_json(payload))]

    return server


async def serve_stdio(dispatcher: CommandDispatcher) -> None:
    """Open the pool, serve MCP over stdin/stdout, close the pool on exit.

    Raises:
        TimeoutError: Pool did not open within the connect timeout.
        ConnectionError: Pool could not connect.
    """
    server = build_server(dispatcher)
    try:
        await dispatcher.executor.open()
        async with stdio_server() as (read_stream, write_stream):
            logger.info("%s %s serving on stdio", SERVER_NAME, __version__)
            await server.run(
                read_stream, write_stream, server.create_initialization_options()
            )
    finally:
        await dispatcher.executor.shutdown()


__all__ = ["SERVER_NAME", "build_server", "serve_stdio", "to_json"]
