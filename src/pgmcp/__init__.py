# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""pgmcp: MCP server running transaction-safe SQL against PostgreSQL."""

__version__ = "0.1.0"

from .config import ServerConfig, config_from_env  # noqa: E402
from .dispatcher import CommandDispatcher  # noqa: E402

__all__ = ["CommandDispatcher", "ServerConfig", "config_from_env"]
