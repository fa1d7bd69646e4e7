# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Command-line interface (pgmcp command).

Usage:
    pgmcp serve [DATABASE_URL]              # MCP server on stdio
    pgmcp tables [DATABASE_URL]             # list tables
    pgmcp describe TABLE [DATABASE_URL]     # columns of a table
    pgmcp run COMMAND SQL [DATABASE_URL]    # run one command

DATABASE_URL in the environment (or in a .env file) takes precedence over
the positional argument. Logs go to stderr: stdout belongs to the MCP
protocol when serving.
"""

from __future__ import annotations

import asyncio
import logging
import sys
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import click
from dotenv import find_dotenv, load_dotenv
from rich.console import Console
from rich.table import Table

from . import __version__
from .commands import Command
from .config import ServerConfig, config_from_env
from .dispatcher import CommandDispatcher
from .errors import PgMcpError
from .server import serve_stdio, to_json

console = Console()

T = TypeVar("T")

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _print_result(result: Any) -> None:
    """Print command result with rich formatting."""
    if isinstance(result, list) and result and isinstance(result[0], dict):
        # List of dicts → table
        table = Table(show_header=True, header_style="bold cyan")
        keys = list(result[0].keys())
        for key in keys:
            table.add_column(key)
        for row in result:
            table.add_row(*[str(row.get(k, "")) for k in keys])
        console.print(table)
    elif isinstance(result, dict):
        console.print(to_json(result), highlight=False, markup=False)
    elif isinstance(result, list):
        for item in result:
            console.print(f"  • {item}", highlight=False, markup=False)
    else:
        console.print(result)


def _configure_logging(level: str) -> None:
    logging.basicConfig(stream=sys.stderr, level=level.upper(), format=LOG_FORMAT, force=True)


def _load_config(database_url: str | None, log_level: str | None) -> ServerConfig:
    """Resolve configuration or exit(1) with a diagnostic on stderr."""
    load_dotenv(find_dotenv(usecwd=True), override=False)
    try:
        config = config_from_env(database_url)
    except PgMcpError as e:
        raise click.ClickException(str(e)) from e
    _configure_logging(log_level or config.log_level)
    return config


def _build_dispatcher(config: ServerConfig) -> CommandDispatcher:
    try:
        return CommandDispatcher.from_config(config)
    except PgMcpError as e:
        raise click.ClickException(str(e)) from e


def _run_once(config: ServerConfig, action: Callable[[CommandDispatcher], Awaitable[T]]) -> T:
    """Run one dispatcher action and close the pool afterwards."""
    dispatcher = _build_dispatcher(config)

    async def runner() -> T:
        try:
            return await action(dispatcher)
        finally:
            await dispatcher.executor.shutdown()

    try:
        return asyncio.run(runner())
    except (PgMcpError, TimeoutError, ConnectionError) as e:
        raise click.ClickException(str(e)) from e


log_level_option = click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default=None,
    help="Logging level (default: PGMCP_LOG_LEVEL or INFO).",
)
database_url_argument = click.argument("database_url", required=False, default=None)


@click.command("serve")
@database_url_argument
@log_level_option
def serve(database_url: str | None, log_level: str | None) -> None:
    """Start the MCP server on stdin/stdout."""
    config = _load_config(database_url, log_level)
    dispatcher = _build_dispatcher(config)
    try:
        asyncio.run(serve_stdio(dispatcher))
    except (TimeoutError, ConnectionError) as e:
        raise click.ClickException(str(e)) from e
    except KeyboardInterrupt:
        pass


@click.group()
@click.version_option(__version__, prog_name="pgmcp")
def cli() -> None:
    """PostgreSQL MCP server."""


cli.add_command(serve)


@cli.command("tables")
@database_url_argument
@log_level_option
def tables_cmd(database_url: str | None, log_level: str | None) -> None:
    """List tables exposed as resources."""
    config = _load_config(database_url, log_level)
    _print_result(_run_once(config, lambda d: d.catalog.list_tables()))


@cli.command("describe")
@click.argument("table")
@database_url_argument
@log_level_option
def describe_cmd(table: str, database_url: str | None, log_level: str | None) -> None:
    """Show column names and types of TABLE."""
    config = _load_config(database_url, log_level)
    columns = _run_once(config, lambda d: d.catalog.describe_table(table))
    if not columns:
        console.print(f"No columns found for table '{table}'", highlight=False, markup=False)
        return
    _print_result(columns)


@cli.command("run")
@click.argument("command", type=click.Choice([c.value for c in Command]))
@click.argument("sql")
@database_url_argument
@log_level_option
def run_cmd(command: str, sql: str, database_url: str | None, log_level: str | None) -> None:
    """Run SQL through COMMAND with its transaction mode."""
    config = _load_config(database_url, log_level)
    _print_result(_run_once(config, lambda d: d.call_tool(command, {"sql": sql})))


def main() -> None:
    """CLI entry point."""
    cli()


__all__ = ["cli", "console", "main", "serve"]
