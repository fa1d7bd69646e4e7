# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Base adapter class for async database backends."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class ExecutionResult:
    """Outcome of one statement execution.

    Attributes:
        rows: Returned rows as column-name -> value dicts (empty when the
            statement produces no result set).
        row_count: Rows returned or affected, as reported by the database.
        command: Command tag verb reported by the server ("SELECT", "INSERT", ...).
    """

    rows: list[dict[str, Any]] = field(default_factory=list)
    row_count: int = 0
    command: str = ""


class DbAdapter(ABC):
    """Abstract base class for async database adapters.

    Provides a unified interface with:
    - Connection management (open, acquire, release, shutdown)
    - Transaction control (begin, commit, rollback on connection)
    - Statement execution (run for caller SQL, fetch_all for catalog queries)

    Connection model:
    - acquire(): Returns a connection from the pool
    - release(conn): Returns connection to pool
    - shutdown(): Closes connection pool (application shutdown only)

    Connections are in autocommit mode: transactions exist only between an
    explicit begin() and the matching commit()/rollback().

    Every method that talks to the database raises DatabaseError on
    driver failures.
    """

    async def open(self) -> None:
        """Open the underlying pool eagerly. Default: no-op."""

    @abstractmethod
    async def acquire(self) -> Any:
        """Acquire a connection from the pool.

        Returns:
            Database connection object.
        """
        ...

    @abstractmethod
    async def release(self, conn: Any) -> None:
        """Return a connection to the pool."""
        ...

    @abstractmethod
    async def shutdown(self) -> None:
        """Close connection pool (application shutdown)."""
        ...

    # -------------------------------------------------------------------------
    # Connection-bound operations
    # -------------------------------------------------------------------------

    @abstractmethod
    async def begin(self, conn: Any, read_only: bool = False) -> None:
        """Open a transaction; read_only=True makes the server reject writes."""
        ...

    @abstractmethod
    async def commit(self, conn: Any) -> None:
        """Commit transaction on connection."""
        ...

    @abstractmethod
    async def rollback(self, conn: Any) -> None:
        """Rollback transaction on connection."""
        ...

    @abstractmethod
    async def run(self, conn: Any, sql: str, read_only: bool = False) -> ExecutionResult:
        """Execute caller-supplied SQL verbatim (no parameter processing).

        With read_only=True the text must be a single statement, so it cannot
        end the surrounding READ ONLY transaction.
        """
        ...

    @abstractmethod
    async def fetch_all(
        self, conn: Any, query: str, params: dict[str, Any] | None = None
    ) -> list[dict[str, Any]]:
        """Execute parameterized query, return all rows as list of dicts."""
        ...

