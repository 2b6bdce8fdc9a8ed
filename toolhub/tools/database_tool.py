"""Database Query Tool for toolhub.

This module provides the database_query tool over SQLite databases.

Two query types are supported:
    - raw: ``query`` is a single SQL statement executed as given
    - structured: ``query`` names an operation (select, count, insert, update,
      delete) and the statement is built from table_name, fields,
      where_conditions, order_by, group_by and limit

Public Interface:
    - DatabasePool: Owns one connection per configured database
    - create_database_tool(): Create the database_query tool definition
    - database_query_handler(): Handle database_query tool calls

Examples:
    >>> async with DatabasePool({"default": "app.db"}) as pool:
    ...     registry.register_tool(create_database_tool(pool))
    ...     await registry.invoke("database_query", {
    ...         "query_type": "structured",
    ...         "query": "select",
    ...         "table_name": "users",
    ...         "where_conditions": "status=active",
    ...         "limit": 3,
    ...     })
"""

import asyncio
import json
import logging
import sqlite3
import threading
from dataclasses import dataclass, field
from functools import partial
from typing import Any, Dict, List, Optional, Sequence

from toolhub.core.context import ToolContext
from toolhub.core.errors import ToolError
from toolhub.tools.sql_builder import OPERATIONS, build_structured_query
from toolhub.types import ArgumentSet, Tool, ToolParameter

logger = logging.getLogger(__name__)

DEFAULT_MAX_ROWS = 1000


class DatabaseError(ToolError):
    """Raised when there is an error executing a database query."""
    pass


@dataclass
class QueryResult:
    """Outcome of a single statement.

    Attributes:
        columns: Column names for row-returning statements
        rows: Returned rows as dictionaries
        rowcount: Rows affected by a write statement
        lastrowid: Row id of the last inserted row, if any
        truncated: Whether rows beyond the row limit were dropped
    """
    columns: List[str] = field(default_factory=list)
    rows: List[Dict[str, Any]] = field(default_factory=list)
    rowcount: int = -1
    lastrowid: Optional[int] = None
    truncated: bool = False

    @property
    def returns_rows(self) -> bool:
        return bool(self.columns)


def _commit(conn: sqlite3.Connection, abort: threading.Event) -> None:
    if abort.is_set():
        raise sqlite3.OperationalError("interrupted")
    conn.commit()


class DatabasePool:
    """Owns one SQLite connection per configured database name.

    Access to each connection is serialized with an asyncio.Lock and the
    blocking sqlite3 calls run in a worker thread. A cancelled call interrupts
    its statement, rolls back and keeps the lock until the worker thread has
    stopped, so a cancelled write never commits. Connections are opened
    lazily and closed by close() or on leaving the async context.

    Attributes:
        databases: Database names mapped to SQLite paths
        read_only: Open file databases read-only
        max_rows: Maximum rows returned by a single statement
    """

    def __init__(
        self,
        databases: Dict[str, str],
        read_only: bool = False,
        max_rows: int = DEFAULT_MAX_ROWS,
    ) -> None:
        if not databases:
            raise ValueError("At least one database must be configured")
        self.databases = dict(databases)
        self.read_only = read_only
        self.max_rows = max_rows
        self._connections: Dict[str, sqlite3.Connection] = {}
        self._locks: Dict[str, asyncio.Lock] = {name: asyncio.Lock() for name in self.databases}

    async def __aenter__(self) -> "DatabasePool":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def _connect(self, name: str) -> sqlite3.Connection:
        path = self.databases[name]
        if self.read_only and path != ":memory:":
            conn = sqlite3.connect(f"file:{path}?mode=ro", uri=True, check_same_thread=False)
        else:
            conn = sqlite3.connect(path, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        logger.info("Opened database", extra={"database": name, "read_only": self.read_only})
        return conn

    def _run(self, name: str, sql: str, params: Sequence[Any], abort: threading.Event) -> QueryResult:
        conn = self._connections.get(name)
        if conn is None:
            conn = self._connections[name] = self._connect(name)

        try:
            cursor = conn.execute(sql, tuple(params))
            if cursor.description is not None:
                columns = [column[0] for column in cursor.description]
                fetched = cursor.fetchmany(self.max_rows + 1)
                # Statements like INSERT ... RETURNING still need a commit
                if conn.in_transaction:
                    _commit(conn, abort)
                return QueryResult(
                    columns=columns,
                    rows=[dict(row) for row in fetched[:self.max_rows]],
                    truncated=len(fetched) > self.max_rows,
                )
            _commit(conn, abort)
            # sqlite3 reports the connection's last insert id after any statement
            inserted = sql.lstrip().upper().startswith(("INSERT", "REPLACE"))
            return QueryResult(
                rowcount=cursor.rowcount,
                lastrowid=cursor.lastrowid if inserted else None,
            )
        except Exception:
            if conn.in_transaction:
                conn.rollback()
            raise

    async def execute(self, database: str, sql: str, params: Sequence[Any] = ()) -> QueryResult:
        """Execute one statement against a named database.

        Raises:
            DatabaseError: If the database is unknown or SQLite reports an error
        """
        if database not in self.databases:
            raise DatabaseError(
                f"Unknown database '{database}'. "
                f"Available: {', '.join(sorted(self.databases))}"
            )

        async with self._locks[database]:
            abort = threading.Event()
            worker = asyncio.ensure_future(
                asyncio.to_thread(self._run, database, sql, params, abort)
            )
            try:
                return await asyncio.shield(worker)
            except asyncio.CancelledError:
                abort.set()
                conn = self._connections.get(database)
                if conn is not None:
                    conn.interrupt()
                # The lock is held until the statement has stopped
                await asyncio.gather(worker, return_exceptions=True)
                logger.info("Cancelled query stopped", extra={"database": database})
                raise
            except (sqlite3.Error, sqlite3.Warning) as e:
                raise DatabaseError(f"Database error: {str(e)}")

    async def close(self) -> None:
        """Close every open connection."""
        for name, conn in list(self._connections.items()):
            async with self._locks[name]:
                conn.close()
            del self._connections[name]
            logger.info("Closed database", extra={"database": name})


def format_query_result(result: QueryResult) -> str:
    """Render a QueryResult as text for the caller."""
    if result.returns_rows:
        header = f"Returned {len(result.rows)} row(s)"
        if result.truncated:
            header += " (truncated)"
        return header + "\n" + json.dumps(result.rows, indent=2, ensure_ascii=False, default=str)

    if result.rowcount < 0:
        return "Statement executed"
    text = f"Rows affected: {result.rowcount}"
    if result.lastrowid:
        text += f"\nLast inserted row id: {result.lastrowid}"
    return text


async def database_query_handler(args: ArgumentSet, context: ToolContext, *, pool: DatabasePool) -> str:
    """Handle database_query tool execution.

    Args:
        args: Validated arguments containing:
            - query_type: "raw" or "structured"
            - query: SQL text (raw) or operation name (structured)
            - table_name, fields, where_conditions, order_by, group_by, limit:
              structured query parts
            - database: Name of the configured database
        context: Call context
        pool: The database pool that owns the connections

    Returns:
        Rows as JSON, or the number of affected rows

    Raises:
        DatabaseError: If execution fails
        QueryBuildError: If a structured query cannot be built
    """
    query = args["query"].strip()
    if not query:
        raise DatabaseError("Query cannot be empty")

    if args["query_type"] == "raw":
        sql, params = query, ()
    else:
        built = build_structured_query(
            operation=query,
            table=args.get("table_name"),
            fields=args.get("fields"),
            where=args.get("where_conditions"),
            order_by=args.get("order_by"),
            group_by=args.get("group_by"),
            limit=args.get("limit"),
        )
        sql, params = built.sql, built.params

    logger.debug("Executing query", extra={"database": args["database"], "sql": sql})
    result = await context.run(pool.execute(args["database"], sql, params))
    return format_query_result(result)


def create_database_tool(pool: DatabasePool) -> Tool:
    """Create the database_query tool definition.

    Args:
        pool: The database pool the tool queries
    """
    return Tool(
        name="database_query",
        description=(
            "Query a SQL database. Use query_type 'raw' with a SQL statement, or "
            "'structured' with an operation and table_name."
        ),
        parameters={
            "query_type": ToolParameter(
                type="string",
                description="'raw' for SQL text, 'structured' for a built query",
                required=True,
                enum=["raw", "structured"]
            ),
            "query": ToolParameter(
                type="string",
                description=(
                    "SQL statement (raw) or operation (structured): "
                    + ", ".join(OPERATIONS)
                ),
                required=True
            ),
            "table_name": ToolParameter(
                type="string",
                description="Table to query (structured)"
            ),
            "fields": ToolParameter(
                type="string",
                description=(
                    "Comma-separated columns for select, or a JSON object of "
                    "column values for insert and update"
                )
            ),
            "where_conditions": ToolParameter(
                type="string",
                description="Conditions such as 'id>1,status=active' or a JSON object"
            ),
            "order_by": ToolParameter(
                type="string",
                description="Ordering such as 'created_at DESC'"
            ),
            "group_by": ToolParameter(
                type="string",
                description="Grouping columns for count"
            ),
            "limit": ToolParameter(
                type="number",
                description="Maximum number of rows for select"
            ),
            "database": ToolParameter(
                type="string",
                description="Name of the configured database",
                default="default"
            )
        },
        handler=partial(database_query_handler, pool=pool)
    )
