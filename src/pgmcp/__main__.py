# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Entry point for ``python -m pgmcp``: runs the MCP server on stdio.

Usage:
    python -m pgmcp postgresql://user@localhost/app
    DATABASE_URL=postgresql://user@localhost/app python -m pgmcp
"""

from .cli import serve


def main() -> None:
    """Serve MCP on stdio."""
    serve()


if __name__ == "__main__":
    main()
