"""MCP server bridge for toolhub.

This module exposes a ToolRegistry (plus optional resource and prompt
registries) through the ``mcp`` library's low-level Server. The transport
itself (stdio framing, JSON-RPC) belongs to ``mcp``; this module only
translates between its types and ours.

A tool Failure is raised as ToolCallFailed inside the call handler. The
``mcp`` server turns that into a CallToolResult with ``isError=True``, which
is a normal response rather than a protocol error.

Example:
    ```python
    server = create_server(registry, resources, prompts, name="toolhub")
    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())
    ```
"""

import logging
from typing import Any, Dict, List, Optional

import mcp.types as types
from mcp.server.lowlevel import Server

from toolhub.core.context import ToolContext
from toolhub.core.errors import ToolError
from toolhub.core.registry import ToolRegistry
from toolhub.mcp.prompt_registry import Prompt, PromptRegistry
from toolhub.mcp.resource_registry import Resource, ResourceRegistry
from toolhub.types import Tool

logger = logging.getLogger(__name__)


class ToolCallFailed(ToolError):
    """Carries a tool Failure message back through the mcp call handler."""
    pass


def to_mcp_tool(tool: Tool) -> types.Tool:
    """Convert a Tool into an MCP tool description."""
    return types.Tool(
        name=tool.name,
        description=tool.description,
        inputSchema=tool.input_schema(),
    )


def to_mcp_resource(resource: Resource) -> types.Resource:
    """Convert a Resource into an MCP resource description."""
    return types.Resource(
        uri=resource.uri,
        name=resource.name,
        description=resource.description or None,
        mimeType=resource.mime_type,
    )


def to_mcp_prompt(prompt: Prompt) -> types.Prompt:
    """Convert a Prompt into an MCP prompt description."""
    return types.Prompt(
        name=prompt.name,
        description=prompt.description or None,
        arguments=[
            types.PromptArgument(name=name, description=arg.description or None, required=arg.required)
            for name, arg in prompt.arguments.items()
        ],
    )


def _request_id(server: Server) -> Optional[str]:
    try:
        return str(server.request_context.request_id)
    except LookupError:
        return None


def create_server(
    registry: ToolRegistry,
    resources: Optional[ResourceRegistry] = None,
    prompts: Optional[PromptRegistry] = None,
    name: str = "toolhub",
) -> Server:
    """Create an MCP server backed by the given registries.

    Args:
        registry: Tools to expose
        resources: Optional resources to expose
        prompts: Optional prompts to expose
        name: Server name advertised to clients

    Returns:
        A configured mcp Server, ready to run on a transport
    """
    server = Server(name)

    @server.list_tools()
    async def list_tools() -> List[types.Tool]:
        return [to_mcp_tool(tool) for tool in registry.list_tools()]

    @server.call_tool()
    async def call_tool(tool_name: str, arguments: Optional[Dict[str, Any]]) -> List[types.TextContent]:
        context = ToolContext(request_id=_request_id(server))
        result = await registry.invoke(tool_name, arguments or {}, context)
        if not result.ok:
            raise ToolCallFailed(result.message, tool_name=tool_name)
        return [types.TextContent(type="text", text=result.text)]

    if resources is not None:
        @server.list_resources()
        async def list_resources() -> List[types.Resource]:
            return [to_mcp_resource(resource) for resource in resources.list_resources()]

        @server.read_resource()
        async def read_resource(uri: Any) -> str:
            key = str(uri)
            if key not in resources.resources:
                key = key.rstrip("/")
            return await resources.read(key)

    if prompts is not None:
        @server.list_prompts()
        async def list_prompts() -> List[types.Prompt]:
            return [to_mcp_prompt(prompt) for prompt in prompts.list_prompts()]

        @server.get_prompt()
        async def get_prompt(prompt_name: str, arguments: Optional[Dict[str, str]]) -> types.GetPromptResult:
            text = prompts.render(prompt_name, arguments)
            return types.GetPromptResult(
                description=prompts.prompts[prompt_name].description or None,
                messages=[
                    types.PromptMessage(
                        role="user",
                        content=types.TextContent(type="text", text=text),
                    )
                ],
            )

    logger.debug(
        "MCP server created",
        extra={
            "server_name": name,
            "num_tools": len(registry),
            "num_resources": len(resources.resources) if resources else 0,
            "num_prompts": len(prompts.prompts) if prompts else 0,
        },
    )
    return server
