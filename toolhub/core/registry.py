"""Tool Registry for the toolhub framework.

This module provides a registry for managing tool definitions and dispatching
tool calls to their handlers.
"""

import asyncio
import inspect
import json
import logging
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import ValidationError

from toolhub.core.context import ToolContext
from toolhub.core.errors import (
    DuplicateToolError,
    InvalidDefinitionError,
    ToolError,
    ToolNotFoundError,
)
from toolhub.core.validation import validate_arguments
from toolhub.types import ArgumentSet, Failure, Success, Tool, ToolResult
from toolhub.utils.log_utils import sanitize_log_message, summarize_arguments

logger = logging.getLogger(__name__)


class ToolRegistry:
    """Registry for managing tool definitions.

    The registry maintains a collection of tools keyed by name. It ensures that
    tool names are unique, validates call arguments against each tool's
    parameters and dispatches to the tool's handler.

    Tools are registered once during startup. After that the registry is only
    read, so concurrent ``invoke`` calls need no locking.
    """

    def __init__(self) -> None:
        """Initialize an empty tool registry."""
        self._tools: Dict[str, Tool] = {}

    def register_tool(self, tool: Union[Tool, Dict[str, Any]]) -> None:
        """Register a new tool in the registry.

        Args:
            tool: The tool definition to register (either a Tool object or dict)

        Raises:
            InvalidDefinitionError: If the definition is malformed or has no handler
            DuplicateToolError: If a tool with the same name already exists
        """
        # Convert dict to Tool if needed
        if isinstance(tool, dict):
            try:
                tool = Tool(**tool)
            except ValidationError as e:
                raise InvalidDefinitionError(f"Invalid tool definition: {e}") from e

        if not isinstance(tool, Tool):
            raise InvalidDefinitionError(f"Expected a Tool, got {type(tool).__name__}")
        if tool.handler is None or not callable(tool.handler):
            raise InvalidDefinitionError(f"Tool '{tool.name}' has no handler")
        if tool.name in self._tools:
            raise DuplicateToolError(tool.name)

        self._tools[tool.name] = tool
        logger.debug(
            "Tool registered",
            extra={"tool_name": tool.name, "num_parameters": len(tool.parameters)},
        )

    def get_tool(self, name: str) -> Tool:
        """Get a tool definition by name.

        Args:
            name: The name of the tool to retrieve

        Returns:
            The tool definition

        Raises:
            KeyError: If no tool with the given name exists
        """
        if name not in self._tools:
            raise KeyError(f"No tool named '{name}' is registered")
        return self._tools[name]

    def list_tools(self) -> List[Tool]:
        """Get a list of all registered tools.

        Returns:
            List of all registered tool definitions
        """
        return list(self._tools.values())

    def list_definitions(self) -> List[Dict[str, Any]]:
        """Describe all registered tools without their handlers.

        Returns:
            List of {name, description, parameters} dictionaries
        """
        return [tool.definition() for tool in self._tools.values()]

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    async def invoke(
        self,
        name: str,
        arguments: Optional[Mapping[str, Any]] = None,
        context: Optional[ToolContext] = None,
    ) -> ToolResult:
        """Validate arguments and run a tool.

        This method never raises for tool-level problems. Unknown tools,
        invalid arguments and handler exceptions all come back as a Failure.
        Only cancelling the task that runs invoke raises CancelledError.

        Args:
            name: The name of the tool to invoke
            arguments: Raw (untyped) arguments for the tool
            context: Cancellation/deadline context; a fresh one is used if omitted

        Returns:
            Success with the handler's text, or Failure with an error message
        """
        context = context or ToolContext()

        tool = self._tools.get(name)
        if tool is None:
            error = ToolNotFoundError(name)
            logger.warning("Unknown tool requested", extra={"tool_name": name})
            return Failure(message=str(error))

        try:
            context.check()
            args = validate_arguments(tool, arguments)
        except ToolError as e:
            logger.info(
                "Tool call rejected",
                extra={"tool_name": name, "error": str(e)},
            )
            return Failure(message=str(e))

        logger.debug(
            "Invoking tool",
            extra={
                "tool_name": name,
                "request_id": context.request_id,
                "arguments": summarize_arguments(args),
            },
        )

        try:
            result = await self._call_handler(tool, args, context)
        except ToolError as e:
            logger.warning(
                "Tool call failed",
                extra={"tool_name": name, "error": sanitize_log_message(str(e))},
            )
            return Failure(message=str(e))
        except asyncio.CancelledError:
            # Only a cancel request against this task propagates
            if asyncio.current_task().cancelling():
                raise
            logger.warning(
                "Tool handler raised CancelledError",
                extra={"tool_name": name, "request_id": context.request_id},
            )
            return Failure(message=f"Error executing tool '{name}': operation was cancelled")
        except Exception as e:
            logger.error(
                "Unexpected error in tool handler",
                extra={"tool_name": name, "error_type": type(e).__name__},
                exc_info=True,
            )
            return Failure(message=f"Error executing tool '{name}': {str(e)}")

        return result

    async def _call_handler(self, tool: Tool, args: ArgumentSet, context: ToolContext) -> ToolResult:
        handler = tool.handler
        if inspect.iscoroutinefunction(handler):
            output = await handler(args, context)
        else:
            try:
                output = await asyncio.to_thread(handler, args, context)
            except (asyncio.CancelledError, Exception):
                raise
            except BaseException as e:
                # SystemExit or KeyboardInterrupt from the worker thread ends only this call
                raise RuntimeError(f"handler raised {type(e).__name__}: {e}") from e
            if inspect.isawaitable(output):
                output = await output
        return _to_result(output)


def _to_result(output: Any) -> ToolResult:
    """Normalize a handler's return value into a ToolResult."""
    if isinstance(output, (Success, Failure)):
        return output
    if output is None:
        return Success(text="")
    if isinstance(output, str):
        return Success(text=output)
    return Success(text=json.dumps(output, ensure_ascii=False, default=str))
