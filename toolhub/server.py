"""toolhub MCP server entry point.

Builds the registries from settings and serves them over stdio:

    toolhub-server --log-level DEBUG
    python -m toolhub.server
"""

import argparse
import asyncio
import json
import logging
import sys
from typing import Optional, Sequence

from mcp.server.stdio import stdio_server
from pydantic import ValidationError

from toolhub.core.errors import RegistrationError
from toolhub.core.registry import ToolRegistry
from toolhub.logging_config import setup_logging
from toolhub.mcp.prompt_registry import Prompt, PromptArgument, PromptRegistry
from toolhub.mcp.resource_registry import Resource, ResourceRegistry
from toolhub.mcp.server import create_server
from toolhub.settings import ToolhubSettings
from toolhub.tools import (
    DatabasePool,
    create_calculator_tool,
    create_database_tool,
    create_http_fetch_tool,
    create_ping_tool,
    create_port_scan_tool,
    create_read_file_tool,
    create_scan_directory_tool,
    create_web_search_tool,
    create_write_file_tool,
)

logger = logging.getLogger(__name__)


def build_registry(settings: ToolhubSettings, pool: DatabasePool) -> ToolRegistry:
    """Register every built-in tool.

    Raises:
        RegistrationError: If a tool definition is invalid or duplicated
    """
    registry = ToolRegistry()
    for tool in (
        create_calculator_tool(),
        create_read_file_tool(settings.fs_root, settings.max_read_bytes),
        create_write_file_tool(settings.fs_root),
        create_scan_directory_tool(settings.fs_root),
        create_http_fetch_tool(settings.http_timeout, settings.http_max_bytes, settings.http_max_retries),
        create_web_search_tool(settings.search_api_url, settings.search_timeout),
        create_ping_tool(settings.ping_timeout),
        create_port_scan_tool(settings.max_scan_ports, settings.scan_concurrency),
        create_database_tool(pool),
    ):
        registry.register_tool(tool)
    logger.info("Tools registered", extra={"tools": [tool.name for tool in registry.list_tools()]})
    return registry


def build_resources(registry: ToolRegistry) -> ResourceRegistry:
    """Register the built-in resources."""
    resources = ResourceRegistry()
    resources.register_resource(Resource(
        uri="toolhub://tools",
        name="tools",
        description="Definitions of every registered tool",
        mime_type="application/json",
        reader=lambda: json.dumps(registry.list_definitions(), indent=2, ensure_ascii=False),
    ))
    return resources


def build_prompts() -> PromptRegistry:
    """Register the built-in prompts."""
    prompts = PromptRegistry()
    prompts.register_prompt(Prompt(
        name="query_database",
        description="Answer a question using the database_query tool",
        arguments={
            "question": PromptArgument(description="Question to answer", required=True),
            "table": PromptArgument(description="Table to start from"),
        },
        template=(
            "Answer the following question using the database_query tool. "
            "Prefer structured queries over raw SQL. Start with table '{table}' "
            "if given.\n\nQuestion: {question}"
        ),
    ))
    prompts.register_prompt(Prompt(
        name="summarize_file",
        description="Summarize a file using the read_file tool",
        arguments={
            "path": PromptArgument(description="File to summarize", required=True),
        },
        template="Read the file at {path} with the read_file tool and summarize its contents.",
    ))
    return prompts


async def serve(settings: ToolhubSettings) -> None:
    """Run the MCP server on stdio until the client disconnects."""
    async with DatabasePool(settings.databases, read_only=settings.database_read_only) as pool:
        registry = build_registry(settings, pool)
        server = create_server(
            registry,
            build_resources(registry),
            build_prompts(),
            name=settings.server_name,
        )
        logger.info("Serving on stdio", extra={"server_name": settings.server_name})
        async with stdio_server() as (read_stream, write_stream):
            await server.run(read_stream, write_stream, server.create_initialization_options())


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Serve toolhub tools over MCP stdio")
    parser.add_argument("--log-level", help="Override TOOLHUB_LOG_LEVEL")
    parser.add_argument("--log-dir", help="Override TOOLHUB_LOG_DIR")
    parser.add_argument("--env-file", default=".env", help="Settings file (default: .env)")
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Console script entry point."""
    args = parse_args(argv)
    overrides = {}
    if args.log_level:
        overrides["log_level"] = args.log_level
    if args.log_dir:
        overrides["log_dir"] = args.log_dir

    try:
        settings = ToolhubSettings(_env_file=args.env_file, **overrides)
    except ValidationError as e:
        print(f"Invalid configuration:\n{e}", file=sys.stderr)
        return 2

    setup_logging(settings.log_level, settings.log_dir)
    try:
        asyncio.run(serve(settings))
    except RegistrationError:
        logger.critical("Tool registration failed", exc_info=True)
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted")
    return 0


if __name__ == "__main__":
    sys.exit(main())
