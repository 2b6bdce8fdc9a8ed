"""toolhub: named, schema-validated tools served over MCP.

This package provides a tool registry that maps tool names to parameter
schemas and handlers, validates untyped call arguments, dispatches to the
handler and always answers with a Success or Failure result. A set of
built-in tools (calculator, files, directory scan, HTTP fetch, web search,
ping, port scan, SQLite queries) and an MCP stdio server are included.

Key Components:
    - Core Types: Tool, ToolParameter, ArgumentSet, Success, Failure
    - ToolRegistry: Registration, introspection and fault-isolated invocation
    - ToolContext: Cancellation and deadlines for handlers
    - toolhub.mcp: Resource/prompt registries and the MCP server bridge

Example:
    ```python
    from toolhub import ToolRegistry, Tool, ToolParameter

    async def add(args, context):
        return str(args["x"] + args["y"])

    registry = ToolRegistry()
    registry.register_tool(Tool(
        name="add",
        description="Add two numbers",
        parameters={
            "x": ToolParameter(type="number", required=True),
            "y": ToolParameter(type="number", required=True),
        },
        handler=add,
    ))

    result = await registry.invoke("add", {"x": 2, "y": 3})
    assert result.ok and result.text == "5.0"
    ```
"""

from toolhub.core import ToolContext, ToolError, ToolRegistry
from toolhub.types import (
    ArgumentSet,
    Failure,
    Success,
    Tool,
    ToolHandler,
    ToolParameter,
    ToolResult,
)

__all__ = [
    "ArgumentSet",
    "Failure",
    "Success",
    "Tool",
    "ToolContext",
    "ToolError",
    "ToolHandler",
    "ToolParameter",
    "ToolRegistry",
    "ToolResult",
]

__version__ = "0.1.0"
