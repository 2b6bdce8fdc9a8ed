"""Tests for the database_query tool."""

import asyncio
import json
import time

import pytest

from toolhub.core import ToolContext, ToolRegistry
from toolhub.tools.database_tool import (
    DatabaseError,
    DatabasePool,
    QueryResult,
    create_database_tool,
    format_query_result,
)
from toolhub.types import Failure

CREATE_USERS = (
    "CREATE TABLE users ("
    "id INTEGER PRIMARY KEY, name TEXT, email TEXT, status TEXT)"
)


async def _seed(registry: ToolRegistry) -> None:
    await registry.invoke("database_query", {"query_type": "raw", "query": CREATE_USERS})
    for name, status in [("Alice", "active"), ("Bob", "inactive"), ("Carol", "active")]:
        result = await registry.invoke("database_query", {
            "query_type": "structured",
            "query": "insert",
            "table_name": "users",
            "fields": json.dumps({"name": name, "email": f"{name.lower()}@example.com", "status": status}),
        })
        assert result.ok, result


def _rows(text: str):
    header, _, body = text.partition("\n")
    assert header.startswith("Returned")
    return json.loads(body)


def test_pool_requires_databases():
    with pytest.raises(ValueError):
        DatabasePool({})


def test_format_write_result():
    assert format_query_result(QueryResult()) == "Statement executed"
    assert format_query_result(QueryResult(rowcount=2)) == "Rows affected: 2"
    assert format_query_result(QueryResult(rowcount=1, lastrowid=7)) == (
        "Rows affected: 1\nLast inserted row id: 7"
    )


def test_format_rows():
    text = format_query_result(QueryResult(columns=["id"], rows=[{"id": 1}], truncated=True))
    assert text.startswith("Returned 1 row(s) (truncated)\n")


@pytest.mark.asyncio
async def test_structured_queries():
    """Test insert, select, count, update and delete end to end."""
    async with DatabasePool({"default": ":memory:"}) as pool:
        registry = ToolRegistry()
        registry.register_tool(create_database_tool(pool))
        await _seed(registry)

        result = await registry.invoke("database_query", {
            "query_type": "structured",
            "query": "select",
            "table_name": "users",
            "fields": "id, name",
            "where_conditions": "id>1,status=active",
            "order_by": "id ASC",
            "limit": 3,
        })
        assert _rows(result.text) == [{"id": 3, "name": "Carol"}]

        result = await registry.invoke("database_query", {
            "query_type": "structured",
            "query": "count",
            "table_name": "users",
            "group_by": "status",
        })
        assert _rows(result.text) == [
            {"status": "active", "count": 2},
            {"status": "inactive", "count": 1},
        ]

        result = await registry.invoke("database_query", {
            "query_type": "structured",
            "query": "update",
            "table_name": "users",
            "fields": '{"status": "updated"}',
            "where_conditions": '{"email": "bob@example.com"}',
        })
        assert result.text.startswith("Rows affected: 1")

        result = await registry.invoke("database_query", {
            "query_type": "structured",
            "query": "delete",
            "table_name": "users",
            "where_conditions": "status=active",
        })
        assert result.text == "Rows affected: 2"

        result = await registry.invoke("database_query", {
            "query_type": "raw",
            "query": "SELECT name, status FROM users",
        })
        assert _rows(result.text) == [{"name": "Bob", "status": "updated"}]


@pytest.mark.asyncio
async def test_insert_reports_row_id():
    async with DatabasePool({"default": ":memory:"}) as pool:
        registry = ToolRegistry()
        registry.register_tool(create_database_tool(pool))
        await registry.invoke("database_query", {"query_type": "raw", "query": CREATE_USERS})

        result = await registry.invoke("database_query", {
            "query_type": "structured",
            "query": "insert",
            "table_name": "users",
            "fields": '{"name": "Dave"}',
        })

        assert result.text == "Rows affected: 1\nLast inserted row id: 1"


@pytest.mark.asyncio
async def test_errors_are_failures():
    """SQL errors, bad structured input and unknown databases become Failures."""
    async with DatabasePool({"default": ":memory:"}) as pool:
        registry = ToolRegistry()
        registry.register_tool(create_database_tool(pool))

        result = await registry.invoke("database_query", {"query_type": "raw", "query": "SELECT * FROM missing"})
        assert not result.ok
        assert result.message.startswith("Database error: no such table")

        result = await registry.invoke("database_query", {
            "query_type": "structured",
            "query": "select",
            "table_name": "users; DROP TABLE users",
        })
        assert not result.ok
        assert "Invalid table name" in result.message

        result = await registry.invoke("database_query", {
            "query_type": "raw",
            "query": "SELECT 1",
            "database": "analytics",
        })
        assert result.message == "Unknown database 'analytics'. Available: default"

        result = await registry.invoke("database_query", {"query_type": "raw", "query": "   "})
        assert result.message == "Query cannot be empty"

        result = await registry.invoke("database_query", {"query_type": "sql", "query": "SELECT 1"})
        assert "query_type" in result.message


@pytest.mark.asyncio
async def test_failed_statement_is_rolled_back():
    async with DatabasePool({"default": ":memory:"}) as pool:
        await pool.execute("default", CREATE_USERS)
        await pool.execute("default", "CREATE UNIQUE INDEX users_email ON users (email)")
        await pool.execute("default", "INSERT INTO users (email) VALUES (?)", ("a@example.com",))

        with pytest.raises(DatabaseError, match="UNIQUE"):
            await pool.execute("default", "INSERT INTO users (email) VALUES (?)", ("a@example.com",))

        result = await pool.execute("default", "SELECT COUNT(*) AS n FROM users")
        assert result.rows == [{"n": 1}]


@pytest.mark.asyncio
async def test_timed_out_write_does_not_commit(tmp_path):
    """A write cut off by the call deadline is rolled back under the connection lock."""
    finished = []

    def slow():
        time.sleep(0.3)
        finished.append(True)
        return 1

    async with DatabasePool({"default": str(tmp_path / "slow.db")}) as pool:
        await pool.execute("default", "CREATE TABLE t (v INTEGER)")
        pool._connections["default"].create_function("slow", 0, slow)
        registry = ToolRegistry()
        registry.register_tool(create_database_tool(pool))

        call = asyncio.create_task(registry.invoke(
            "database_query",
            {"query_type": "raw", "query": "INSERT INTO t (v) VALUES (slow())"},
            ToolContext(timeout=0.05),
        ))
        await asyncio.sleep(0.15)
        assert pool._locks["default"].locked()
        assert not call.done()

        result = await call

        assert result == Failure(message="Tool call timed out after 0.05 seconds")
        assert finished == [True]
        assert not pool._locks["default"].locked()
        count = await pool.execute("default", "SELECT COUNT(*) AS n FROM t")
        assert count.rows == [{"n": 0}]


@pytest.mark.asyncio
async def test_max_rows(tmp_path):
    """Rows beyond max_rows are dropped and flagged."""
    path = str(tmp_path / "numbers.db")
    async with DatabasePool({"main": path}, max_rows=2) as pool:
        await pool.execute("main", "CREATE TABLE n (v INTEGER)")
        for v in range(5):
            await pool.execute("main", "INSERT INTO n (v) VALUES (?)", (v,))

        result = await pool.execute("main", "SELECT v FROM n ORDER BY v")

    assert result.rows == [{"v": 0}, {"v": 1}]
    assert result.truncated


@pytest.mark.asyncio
async def test_read_only(tmp_path):
    """Test that read-only pools refuse writes to file databases."""
    path = str(tmp_path / "app.db")
    async with DatabasePool({"default": path}) as pool:
        await pool.execute("default", "CREATE TABLE t (v INTEGER)")

    async with DatabasePool({"default": path}, read_only=True) as pool:
        assert (await pool.execute("default", "SELECT COUNT(*) AS n FROM t")).rows == [{"n": 0}]
        with pytest.raises(DatabaseError, match="readonly"):
            await pool.execute("default", "INSERT INTO t (v) VALUES (1)")


@pytest.mark.asyncio
async def test_multiple_databases(tmp_path):
    databases = {"a": str(tmp_path / "a.db"), "b": str(tmp_path / "b.db")}
    async with DatabasePool(databases) as pool:
        await pool.execute("a", "CREATE TABLE only_in_a (v INTEGER)")

        with pytest.raises(DatabaseError, match="no such table"):
            await pool.execute("b", "SELECT * FROM only_in_a")
