#!/usr/bin/env python3
"""
Demo MCP client for the toolhub server.

Starts the server as a subprocess over stdio, lists its tools and calls a few
of them: the calculator, a series of database queries against a scratch
table, and a web search.

Usage:
    python examples/client_demo.py
"""

import asyncio
import logging
import os
import sys
from typing import Any, Dict

from dotenv import load_dotenv
from mcp import ClientSession, StdioServerParameters
from mcp.client.stdio import stdio_client

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


async def call(session: ClientSession, name: str, arguments: Dict[str, Any]) -> None:
    """Call a tool and print its result."""
    print(f"\n--- {name} {arguments} ---")
    result = await session.call_tool(name, arguments)
    text = "\n".join(item.text for item in result.content if item.type == "text")
    label = "Error" if result.isError else "Result"
    print(f"{label}:\n{text}")


async def demonstrate_calculator(session: ClientSession) -> None:
    print("\n=== Calculator ===")
    await call(session, "calculator", {"operation": "multiply", "x": 199999349349, "y": 4384535757535})
    await call(session, "calculator", {"operation": "add", "x": 15.5, "y": 24.3})
    await call(session, "calculator", {"operation": "divide", "x": 10, "y": 0})


async def demonstrate_database(session: ClientSession) -> None:
    print("\n=== Database queries ===")
    await call(session, "database_query", {
        "query_type": "raw",
        "query": (
            "CREATE TABLE IF NOT EXISTS users ("
            "id INTEGER PRIMARY KEY, name TEXT, email TEXT, status TEXT, "
            "created_at TEXT DEFAULT CURRENT_TIMESTAMP)"
        ),
    })
    for name, email, status in [
        ("Alice", "alice@example.com", "active"),
        ("Bob", "bob@example.com", "inactive"),
        ("Carol", "carol@example.com", "active"),
    ]:
        await call(session, "database_query", {
            "query_type": "structured",
            "query": "insert",
            "table_name": "users",
            "fields": f'{{"name": "{name}", "email": "{email}", "status": "{status}"}}',
        })

    await call(session, "database_query", {
        "query_type": "structured",
        "query": "select",
        "table_name": "users",
        "fields": "id, name, email",
        "where_conditions": "id>1,status=active",
        "order_by": "id ASC",
        "limit": 3,
    })
    await call(session, "database_query", {
        "query_type": "structured",
        "query": "count",
        "table_name": "users",
        "group_by": "status",
    })
    await call(session, "database_query", {
        "query_type": "structured",
        "query": "update",
        "table_name": "users",
        "fields": '{"status": "updated"}',
        "where_conditions": '{"email": "bob@example.com"}',
    })
    await call(session, "database_query", {
        "query_type": "raw",
        "query": "SELECT id, name, status FROM users ORDER BY id",
    })


async def demonstrate_search(session: ClientSession) -> None:
    print("\n=== Web search ===")
    await call(session, "web_search", {"query": "Python programming language", "limit": 5})


async def main() -> None:
    load_dotenv()
    server_params = StdioServerParameters(
        command=sys.executable,
        args=["-m", "toolhub.server"],
        env=dict(os.environ),
    )

    async with stdio_client(server_params) as (read_stream, write_stream):
        async with ClientSession(read_stream, write_stream) as session:
            init = await session.initialize()
            logger.info(f"Connected to {init.serverInfo.name} {init.serverInfo.version}")

            tools = await session.list_tools()
            print(f"Server provides {len(tools.tools)} tools:")
            for i, tool in enumerate(tools.tools, 1):
                print(f"  {i}. {tool.name} - {tool.description}")

            await demonstrate_calculator(session)
            await demonstrate_database(session)
            await demonstrate_search(session)

    print("\nClient demo finished")


if __name__ == "__main__":
    asyncio.run(main())
