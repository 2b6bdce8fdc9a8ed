"""Common test fixtures for the entire test suite."""

import os
from typing import Any, Callable, Dict, List, Optional

import pytest

from toolhub.core import ToolRegistry
from toolhub.types import ArgumentSet, Tool, ToolParameter


@pytest.fixture
def base_tool_parameter():
    """Base fixture for creating tool parameters.

    Returns:
        Callable: A factory function that creates ToolParameter instances with the given configuration.

    Example:
        def test_something(base_tool_parameter):
            param = base_tool_parameter(
                param_type="string",
                required=True,
                enum=["option1", "option2"]
            )
    """
    def _make_parameter(
        param_type: str = "string",
        description: str = "Test parameter",
        required: bool = True,
        enum: Optional[List[str]] = None,
        default: Any = None
    ) -> ToolParameter:
        return ToolParameter(
            type=param_type,
            description=description,
            required=required,
            enum=enum,
            default=default
        )
    return _make_parameter


@pytest.fixture
def echo_handler() -> Callable:
    """Async handler that echoes its validated arguments as a sorted string."""
    async def _handler(args: ArgumentSet, context) -> str:
        return ", ".join(f"{key}={args[key]!r}" for key in sorted(args))
    return _handler


@pytest.fixture
def base_tool(echo_handler):
    """Base fixture for creating tools.

    Returns:
        Callable: A factory function that creates Tool instances; the handler
        defaults to one that echoes its arguments.

    Example:
        def test_something(base_tool, base_tool_parameter):
            tool = base_tool(
                name="test_tool",
                parameters={"input": base_tool_parameter()}
            )
    """
    def _make_tool(
        name: str,
        description: str = "A test tool",
        parameters: Optional[Dict[str, ToolParameter]] = None,
        handler: Optional[Callable] = None
    ) -> Tool:
        return Tool(
            name=name,
            description=description,
            parameters=parameters or {},
            handler=handler or echo_handler
        )
    return _make_tool


@pytest.fixture
def registry() -> ToolRegistry:
    """An empty tool registry."""
    return ToolRegistry()


@pytest.fixture(autouse=True)
def clear_env(monkeypatch):
    """Fixture to ensure no toolhub environment variables affect tests.

    This fixture runs automatically for all tests to ensure a clean environment.
    """
    for var in list(os.environ):
        if var.upper().startswith("TOOLHUB_"):
            monkeypatch.delenv(var, raising=False)
