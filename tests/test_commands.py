# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Tests for commands module - fixed command set and argument validation."""

from __future__ import annotations

import pytest

from pgmcp.commands import INVALID_SQL_MESSAGE, SQL_INPUT_SCHEMA, Command, SqlArguments
from pgmcp.errors import InvalidArgumentError, UnknownCommandError


class TestCommand:
    """Tests for the Command enumeration."""

    def test_fixed_set_of_six(self):
        assert [c.value for c in Command] == [
            "query",
            "insert",
            "update",
            "delete",
            "function_call",
            "function_create",
        ]

    def test_only_query_is_read_only(self):
        assert [c for c in Command if c.read_only] == [Command.QUERY]

    def test_descriptions(self):
        assert Command.QUERY.description == "Run a read-only SQL query"
        assert Command.FUNCTION_CALL.description == "Invoke a stored function (SELECT or CALL)"
        assert Command.FUNCTION_CREATE.description == "Create or replace a stored function"

    def test_lookup_by_name(self):
        assert Command.lookup("delete") is Command.DELETE

    def test_members_compare_as_strings(self):
        assert Command.INSERT == "insert"

    @pytest.mark.parametrize("name", ["drop", "QUERY", "", None, 42, "query "])
    def test_lookup_unknown_raises(self, name):
        with pytest.raises(UnknownCommandError) as exc_info:
            Command.lookup(name)
        assert exc_info.value.name == name
        assert str(exc_info.value) == f"Unknown tool: {name}"


class TestSqlArguments:
    """Tests for SqlArguments validation."""

    def test_valid_sql(self):
        assert SqlArguments.parse({"sql": "SELECT 1"}).sql == "SELECT 1"

    def test_sql_kept_verbatim(self):
        """Surrounding whitespace is not stripped from valid SQL."""
        assert SqlArguments.parse({"sql": "  SELECT 1\n"}).sql == "  SELECT 1\n"

    def test_extra_keys_ignored(self):
        assert SqlArguments.parse({"sql": "SELECT 1", "limit": 5}).sql == "SELECT 1"

    @pytest.mark.parametrize(
        "arguments",
        [
            None,
            {},
            {"sql": ""},
            {"sql": "   \n\t"},
            {"sql": None},
            {"sql": 1},
            {"sql": ["SELECT 1"]},
            {"query": "SELECT 1"},
            "SELECT 1",
        ],
    )
    def test_invalid_arguments_raise(self, arguments):
        with pytest.raises(InvalidArgumentError, match='"sql" argument must be a non-empty'):
            SqlArguments.parse(arguments)

    def test_invalid_argument_is_value_error(self):
        with pytest.raises(ValueError):
            SqlArguments.parse({"sql": " "})


def test_input_schema_requires_sql_string():
    assert SQL_INPUT_SCHEMA["type"] == "object"
    assert SQL_INPUT_SCHEMA["properties"]["sql"]["type"] == "string"
    assert SQL_INPUT_SCHEMA["required"] == ["sql"]
    assert INVALID_SQL_MESSAGE == 'The "sql" argument must be a non-empty string.'
