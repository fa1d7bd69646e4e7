# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Schema catalog reader over information_schema.

Lists the tables of one schema and the columns of a table. Queries are
read-only and always reflect the catalog at call time (nothing cached).
Each call takes its own short-lived lease from the executor and runs in
the connection's autocommit mode, without an explicit transaction.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .executor import SqlExecutor

LIST_TABLES_SQL = """
    SELECT table_name
    FROM information_schema.tables
    WHERE table_schema = :schema
    ORDER BY table_name
"""

DESCRIBE_TABLE_SQL = """
    SELECT column_name, data_type
    FROM information_schema.columns
    WHERE table_schema = :schema AND table_name = :table
    ORDER BY ordinal_position
"""


class SchemaCatalog:
    """Reads table and column metadata for one schema.

    Attributes:
        executor: SqlExecutor whose pool provides the leases.
        schema: Schema to browse (default "public").
    """

    def __init__(self, executor: SqlExecutor, schema: str = "public"):
        self.executor = executor
        self.schema = schema

    async def list_tables(self) -> list[str]:
        """Return table names in the schema, alphabetically."""
        async with self.executor.lease() as conn:
            rows = await self.executor.adapter.fetch_all(
                conn, LIST_TABLES_SQL, {"schema": self.schema}
            )
        return [row["table_name"] for row in rows]

    async def describe_table(self, name: str) -> list[dict[str, Any]]:
        """Return [{column_name, data_type}, ...] in column order.

        An unknown table yields an empty list, not an error. The name is
        bound as a parameter, never interpolated.
        """
        async with self.executor.lease() as conn:
            rows = await self.executor.adapter.fetch_all(
                conn, DESCRIBE_TABLE_SQL, {"schema": self.schema, "table": name}
            )
        return [{"column_name": r["column_name"], "data_type": r["data_type"]} for r in rows]


__all__ = ["SchemaCatalog"]
