# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Transaction-safe SQL execution over pooled connection leases.

SqlExecutor runs one caller-supplied statement per call inside its own
transaction, choosing the transaction mode from the read_only flag:

    read_only=True   BEGIN TRANSACTION READ ONLY ... ROLLBACK
    read_only=False  BEGIN ... COMMIT

On any failure before the transaction is closed, a ROLLBACK is attempted.
A failing rollback is logged as a warning and dropped: the caller always
sees the original error. The connection lease is returned to the pool on
every exit path, cancellation included.

Example:
    ::

        executor = SqlExecutor.from_url("postgresql://app@localhost/app")
        rows = (await executor.execute("SELECT 1 AS x", read_only=True)).rows
        result = await executor.execute("INSERT INTO t(v) VALUES (1)")
        assert result.command == "INSERT"
        await executor.shutdown()
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any

from .adapters import DbAdapter, ExecutionResult, get_adapter

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

logger = logging.getLogger(__name__)


class SqlExecutor:
    """Runs SQL statements with per-call transactions and scoped leases.

    Attributes:
        adapter: DbAdapter owning the connection pool. Injected, so tests
            can pass a fake adapter and several components can share one pool.
    """

    def __init__(self, adapter: DbAdapter):
        self.adapter = adapter

    @classmethod
    def from_url(
        cls, connection_string: str, pool_size: int = 10, connect_timeout: float = 10.0
    ) -> SqlExecutor:
        """Build an executor with the adapter matching connection_string."""
        return cls(get_adapter(connection_string, pool_size, connect_timeout))

    @asynccontextmanager
    async def lease(self) -> AsyncIterator[Any]:
        """Borrow one connection for the duration of the block.

        Usage:
            async with executor.lease() as conn:
                rows = await executor.adapter.fetch_all(conn, "SELECT 1")
        """
        conn = await self.adapter.acquire()
        logger.debug("Lease acquired")
        try:
            yield conn
        finally:
            await self.adapter.release(conn)
            logger.debug("Lease released")

    async def execute(self, sql: str, read_only: bool = False) -> ExecutionResult:
        """Run sql once inside a transaction matching read_only.

        Args:
            sql: Statement text, sent verbatim.
            read_only: Open a READ ONLY transaction and roll it back on success.

        Returns:
            ExecutionResult with rows, row count and command tag.

        Raises:
            DatabaseError: BEGIN, the statement, or COMMIT failed.
        """
        async with self.lease() as conn:
            return await self._run_in_transaction(conn, sql, read_only)

    async def _run_in_transaction(self, conn: Any, sql: str, read_only: bool) -> ExecutionResult:
        try:
            await self.adapter.begin(conn, read_only=read_only)
            result = await self.adapter.run(conn, sql, read_only=read_only)
            if read_only:
                await self.adapter.rollback(conn)
            else:
                await self.adapter.commit(conn)
        except Exception:
            # Transaction still open (or in an unknown state)
            await self._rollback_after_failure(conn)
            raise

        logger.debug(
            "%s done (read_only=%s, rows=%d)",
            result.command or "statement",
            read_only,
            result.row_count,
        )
        return result

    async def _rollback_after_failure(self, conn: Any) -> Exception | None:
        """Attempt ROLLBACK after a failure; return the rollback error, if any.

        The returned error is only logged. Callers re-raise the original
        failure regardless of the outcome here.
        """
        try:
            await self.adapter.rollback(conn)
        except Exception as e:
            logger.warning("Could not roll back transaction: %s", e)
            return e
        return None

    async def open(self) -> None:
        """Open the connection pool (fail fast at startup)."""
        await self.adapter.open()

    async def shutdown(self) -> None:
        """Close connection pool (application shutdown)."""
        await self.adapter.shutdown()


__all__ = ["SqlExecutor"]
