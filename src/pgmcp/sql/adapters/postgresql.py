# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""PostgreSQL async adapter using psycopg3 with connection pooling.

Uses connection-per-request model: acquire() gets from pool,
release() returns to pool. Each request gets an isolated connection
and runs its own explicit transaction on it.
"""

from __future__ import annotations

import asyncio
import logging
import re
from typing import Any

import psycopg
from psycopg.rows import dict_row
from psycopg_pool import AsyncConnectionPool

from ...errors import DatabaseError
from .base import DbAdapter, ExecutionResult

logger = logging.getLogger(__name__)


def command_tag(status: str | None) -> str:
    """Return the verb of a server status message ("INSERT 0 1" -> "INSERT")."""
    if not status:
        return ""
    return status.split(None, 1)[0].upper()


class PostgresAdapter(DbAdapter):
    """PostgreSQL async adapter with connection pooling.

    Uses :name placeholders converted to %(name)s for catalog queries.
    Caller SQL passed to run() is sent verbatim without placeholder
    processing. Pool connections are opened in autocommit mode so that
    begin()/commit()/rollback() are the only transaction control.

    Pool is initialized lazily on first acquire(), or eagerly via open().
    """

    def __init__(self, dsn: str, pool_size: int = 10, connect_timeout: float = 10.0):
        self.dsn = dsn
        self.pool_size = pool_size
        self.connect_timeout = connect_timeout
        self._pool: AsyncConnectionPool | None = None

    def _convert_placeholders(self, query: str) -> str:
        """Convert :name placeholders to %(name)s for psycopg."""
        return re.sub(r"(?<!:):([a-zA-Z_][a-zA-Z0-9_]*)", r"%(\1)s", query)

    async def _ensure_pool(self) -> AsyncConnectionPool:
        """Initialize connection pool if not already open."""
        if self._pool is not None:
            return self._pool

        pool = AsyncConnectionPool(
            self.dsn,
            min_size=1,
            max_size=self.pool_size,
            open=False,
            kwargs={"autocommit": True},
        )
        try:
            await asyncio.wait_for(
                pool.open(wait=True, timeout=self.connect_timeout),
                timeout=self.connect_timeout + 1,
            )
        except asyncio.TimeoutError:
            await pool.close()
            raise TimeoutError(
                f"PostgreSQL connection timed out after {self.connect_timeout}s. "
                "Check credentials and server availability."
            ) from None
        except Exception as e:
            await pool.close()
            raise ConnectionError(f"PostgreSQL connection failed: {e}") from e

        logger.info("Connection pool opened (max_size=%d)", self.pool_size)
        self._pool = pool
        return pool

    async def open(self) -> None:
        """Open the connection pool now instead of on first acquire()."""
        await self._ensure_pool()

    async def acquire(self) -> Any:
        """Acquire connection from pool."""
        pool = await self._ensure_pool()
        try:
            return await pool.getconn()
        except psycopg.Error as e:
            raise DatabaseError.from_driver(e) from e

    async def release(self, conn: Any) -> None:
        """Return connection to pool.

        The pool rolls back (or discards) a connection that comes back
        with a transaction still open.
        """
        if self._pool:
            await self._pool.putconn(conn)

    async def shutdown(self) -> None:
        """Close connection pool (application shutdown)."""
        if self._pool:
            await self._pool.close()
            self._pool = None
            logger.info("Connection pool closed")

    async def _control(self, conn: Any, statement: str) -> None:
        try:
            await conn.execute(statement)
        except psycopg.Error as e:
            raise DatabaseError.from_driver(e) from e

    async def begin(self, conn: Any, read_only: bool = False) -> None:
        """Open a transaction; READ ONLY makes the server reject any write."""
        await self._control(conn, "BEGIN TRANSACTION READ ONLY" if read_only else "BEGIN")

    async def commit(self, conn: Any) -> None:
        """Commit transaction on connection."""
        await self._control(conn, "COMMIT")

    async def rollback(self, conn: Any) -> None:
        """Rollback transaction on connection."""
        await self._control(conn, "ROLLBACK")

    async def run(self, conn: Any, sql: str, read_only: bool = False) -> ExecutionResult:
        """Execute caller SQL once and collect rows, row count and command tag.

        Read-only SQL is prepared, which goes through the extended protocol:
        the server rejects several statements in one text, so a
        "COMMIT; INSERT ..." cannot escape the READ ONLY transaction.
        Mutating SQL is never prepared: it uses the simple protocol and may
        hold several statements.
        """
        try:
            async with conn.cursor(row_factory=dict_row) as cur:
                # No params: psycopg sends the text as-is, '%' included.
                await cur.execute(sql, prepare=read_only)
                rows = await cur.fetchall() if cur.description else []
                return ExecutionResult(
                    rows=rows,
                    row_count=max(cur.rowcount, 0),
                    command=command_tag(cur.statusmessage),
                )
        except psycopg.Error as e:
            raise DatabaseError.from_driver(e) from e

    async def fetch_all(
        self, conn: Any, query: str, params: dict[str, Any] | None = None
    ) -> list[dict[str, Any]]:
        """Execute query, return all rows as list of dicts."""
        query = self._convert_placeholders(query)
        try:
            async with conn.cursor(row_factory=dict_row) as cur:
                await cur.execute(query, params or {})
                return await cur.fetchall()
        except psycopg.Error as e:
            raise DatabaseError.from_driver(e) from e
