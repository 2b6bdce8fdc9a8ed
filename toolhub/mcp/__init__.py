"""MCP surface for toolhub: resource and prompt registries and the server bridge."""

from toolhub.mcp.prompt_registry import Prompt, PromptArgument, PromptRegistry
from toolhub.mcp.resource_registry import Resource, ResourceRegistry
from toolhub.mcp.server import create_server, to_mcp_tool

__all__ = [
    "Prompt",
    "PromptArgument",
    "PromptRegistry",
    "Resource",
    "ResourceRegistry",
    "create_server",
    "to_mcp_tool",
]
