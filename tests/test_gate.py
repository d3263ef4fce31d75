"""Tests for the read-only query gate."""

from __future__ import annotations

import pytest

from qgo.errors import EmptyQuery, InvalidQuery, WriteOrUnsafeQuery
from qgo.gate import check_query, is_read_only


@pytest.mark.parametrize(
    "query",
    [
        "SELECT 1",
        "  select * from users",
        "\n\tShow tables",
        "DESCRIBE users",
        "explain select 1",
        "WITH t AS (SELECT 1) SELECT * FROM t",
        # prefix check only; the backend rejects the rest
        "selectivity",
    ],
)
def test_allowed_queries_pass(query: str) -> None:
    check_query(query)
    assert is_read_only(query)


@pytest.mark.parametrize(
    "query",
    [
        "DELETE FROM users",
        "insert into t values (1)",
        "UPDATE t SET a = 1",
        "DROP TABLE users",
        "PRAGMA table_info(users)",
        "-- comment\nSELECT 1",
    ],
)
def test_write_queries_are_rejected(query: str) -> None:
    with pytest.raises(WriteOrUnsafeQuery) as excinfo:
        check_query(query)

    assert str(excinfo.value) == "Only SELECT, SHOW, DESCRIBE, EXPLAIN, and WITH queries are allowed"
    assert not is_read_only(query)


@pytest.mark.parametrize("query", ["", "   ", "\n\t"])
def test_blank_queries_are_empty(query: str) -> None:
    with pytest.raises(EmptyQuery) as excinfo:
        check_query(query)

    assert isinstance(excinfo.value, InvalidQuery)
    assert str(excinfo.value) == "Query cannot be empty"
