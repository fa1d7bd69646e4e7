# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Shared fixtures: an in-memory DbAdapter that records transaction steps.

FakeAdapter lets executor, catalog, dispatcher, server and CLI tests run
without PostgreSQL. Every call is appended to ``calls`` in order, e.g.::

    ["acquire", "BEGIN READ ONLY", "RUN", "ROLLBACK", "release"]

A step listed in ``failures`` raises the mapped exception instead.
"""

from __future__ import annotations

import asyncio
from typing import Any

import pytest

from pgmcp.dispatcher import CommandDispatcher
from pgmcp.resources import ResourceLocator
from pgmcp.sql import DbAdapter, ExecutionResult, SchemaCatalog, SqlExecutor


class FakeAdapter(DbAdapter):
    """Recording adapter with scripted results and failures."""

    def __init__(self, result: ExecutionResult | None = None):
        self.result = result or ExecutionResult()
        self.calls: list[str] = []
        self.statements: list[str] = []
        self.run_modes: list[bool] = []
        self.fetches: list[tuple[str, dict[str, Any] | None]] = []
        self.fetch_rows: list[dict[str, Any]] = []
        self.failures: dict[str, BaseException] = {}
        self.block_run = False
        self.run_started = asyncio.Event()
        self.opened = False

    def _step(self, name: str) -> None:
        self.calls.append(name)
        if name in self.failures:
            raise self.failures[name]

    @property
    def acquired(self) -> int:
        return self.calls.count("acquire")

    @property
    def released(self) -> int:
        return self.calls.count("release")

    async def open(self) -> None:
        self.opened = True

    async def acquire(self) -> Any:
        self._step("acquire")
        return object()

    async def release(self, conn: Any) -> None:
        self.calls.append("release")

    async def shutdown(self) -> None:
        self.calls.append("shutdown")

    async def begin(self, conn: Any, read_only: bool = False) -> None:
        self._step("BEGIN READ ONLY" if read_only else "BEGIN")

    async def commit(self, conn: Any) -> None:
        self._step("COMMIT")

    async def rollback(self, conn: Any) -> None:
        self._step("ROLLBACK")

    async def run(self, conn: Any, sql: str, read_only: bool = False) -> ExecutionResult:
        self.statements.append(sql)
        self.run_modes.append(read_only)
        self._step("RUN")
        if self.block_run:
            self.run_started.set()
            await asyncio.Event().wait()
        return self.result

    async def fetch_all(
        self, conn: Any, query: str, params: dict[str, Any] | None = None
    ) -> list[dict[str, Any]]:
        self.fetches.append((query, params))
        self._step("FETCH")
        return list(self.fetch_rows)


@pytest.fixture
def fake_adapter() -> FakeAdapter:
    return FakeAdapter()


@pytest.fixture
def executor(fake_adapter: FakeAdapter) -> SqlExecutor:
    return SqlExecutor(fake_adapter)


@pytest.fixture
def dispatcher(executor: SqlExecutor) -> CommandDispatcher:
    """Dispatcher over FakeAdapter, with resources on localhost:5432."""
    return CommandDispatcher(
        executor, SchemaCatalog(executor), ResourceLocator(host="localhost", port="5432")
    )
