from toolhub.types.models import (
    ArgumentSet,
    Failure,
    ParameterType,
    Success,
    Tool,
    ToolHandler,
    ToolParameter,
    ToolResult,
    coerce_value,
)

__all__ = [
    "ArgumentSet",
    "Failure",
    "ParameterType",
    "Success",
    "Tool",
    "ToolHandler",
    "ToolParameter",
    "ToolResult",
    "coerce_value",
]
