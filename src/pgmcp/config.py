# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Server configuration dataclass and environment loader.

Configuration via environment variables:
    DATABASE_URL: PostgreSQL connection string (URL or libpq key=value DSN)
    PGMCP_POOL_SIZE: Maximum pooled connections (default: 10)
    PGMCP_CONNECT_TIMEOUT: Seconds to wait for the pool to open (default: 10)
    PGMCP_SCHEMA: Schema exposed as resources (default: public)
    PGMCP_LOG_LEVEL: Logging level name (default: INFO)

DATABASE_URL takes precedence over the command-line argument; the
argument is used only when the variable is absent.

Usage:
    # From environment + optional CLI argument:
    config = config_from_env(sys.argv[1] if len(sys.argv) > 1 else None)

    # Explicit configuration:
    config = ServerConfig(database_url="postgresql://app@localhost/app")
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

from .errors import ConfigurationError

DATABASE_URL_ENV = "DATABASE_URL"

MISSING_URL_MESSAGE = (
    "Please set DATABASE_URL in the environment or provide a database URL "
    "as a command-line argument"
)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class ServerConfig:
    """Configuration for the pgmcp server.

    Attributes:
        database_url: Connection string handed to the pool.
        pool_size: Maximum number of pooled connections.
        connect_timeout: Seconds to wait for the pool to open at startup.
        schema: Schema whose tables are listed as resources.
        log_level: Logging level name for the stderr handler.
    """

    database_url: str
    pool_size: int = 10
    connect_timeout: float = 10.0
    schema: str = "public"
    log_level: str = "INFO"


def _parse_number(env: Mapping[str, str], name: str, default: float, kind: type) -> float:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = kind(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got '{raw}'") from None
    if value <= 0:
        raise ConfigurationError(f"{name} must be positive, got '{raw}'")
    return value


def resolve_database_url(argument: str | None, env: Mapping[str, str] | None = None) -> str:
    """Pick the connection string: DATABASE_URL first, then argument.

    The argument is used only when DATABASE_URL is absent. A present but
    blank variable still wins and is reported as missing.

    Raises:
        ConfigurationError: If no non-blank connection string results.
    """
    env = os.environ if env is None else env
    url = env.get(DATABASE_URL_ENV)
    if url is None:
        url = argument
    if not url or not url.strip():
        raise ConfigurationError(MISSING_URL_MESSAGE)
    return url.strip()


def config_from_env(
    argument: str | None = None, env: Mapping[str, str] | None = None
) -> ServerConfig:
    """Build ServerConfig from environment variables and an optional CLI argument.

    Args:
        argument: Connection string given on the command line, if any.
        env: Mapping to read instead of os.environ (tests).

    Returns:
        ServerConfig populated from environment.

    Raises:
        ConfigurationError: If no connection string is available or a
            numeric setting is invalid.
    """
    env = os.environ if env is None else env
    database_url = resolve_database_url(argument, env)
    log_level = (env.get("PGMCP_LOG_LEVEL") or "INFO").upper()
    if log_level not in LOG_LEVELS:
        raise ConfigurationError(f"PGMCP_LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}")
    return ServerConfig(
        database_url=database_url,
        pool_size=int(_parse_number(env, "PGMCP_POOL_SIZE", 10, int)),
        connect_timeout=float(_parse_number(env, "PGMCP_CONNECT_TIMEOUT", 10.0, float)),
        schema=env.get("PGMCP_SCHEMA") or "public",
        log_level=log_level,
    )


__all__ = ["DATABASE_URL_ENV", "MISSING_URL_MESSAGE", "ServerConfig", "config_from_env"]
