"""Error classes for the toolhub framework."""

from typing import Any, List, Optional


class RegistrationError(ValueError):
    """Base exception for invalid registrations. Fatal at startup."""
    pass


class DuplicateToolError(RegistrationError):
    """Raised when a tool name is registered twice."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Tool '{name}' is already registered")


class InvalidDefinitionError(RegistrationError):
    """Raised when a tool definition is malformed."""
    pass


class ToolError(Exception):
    """Base exception for all per-call tool failures."""

    def __init__(self, message: str, *, tool_name: Optional[str] = None):
        self.tool_name = tool_name
        super().__init__(message)


class ToolNotFoundError(ToolError):
    """Raised when no tool is registered under the requested name."""

    def __init__(self, name: str):
        super().__init__(f"No tool named '{name}' is registered", tool_name=name)


class ArgumentError(ToolError):
    """Base exception for argument validation failures."""

    def __init__(self, message: str, *, parameter: str, tool_name: Optional[str] = None):
        self.parameter = parameter
        super().__init__(message, tool_name=tool_name)


class MissingParameterError(ArgumentError):
    """Raised when a required parameter is absent."""

    def __init__(self, parameter: str, *, tool_name: Optional[str] = None):
        suffix = f" for tool '{tool_name}'" if tool_name else ""
        super().__init__(
            f"Missing required parameter '{parameter}'{suffix}",
            parameter=parameter,
            tool_name=tool_name,
        )


class TypeMismatchError(ArgumentError):
    """Raised when a parameter value has the wrong type."""

    def __init__(self, parameter: str, expected: str, value: Any, *, tool_name: Optional[str] = None):
        self.expected = expected
        self.value = value
        super().__init__(
            f"Parameter '{parameter}' must be a {expected}, got {type(value).__name__}",
            parameter=parameter,
            tool_name=tool_name,
        )


class InvalidEnumValueError(ArgumentError):
    """Raised when a value is outside a parameter's enum."""

    def __init__(self, parameter: str, value: Any, allowed: List[str], *, tool_name: Optional[str] = None):
        self.value = value
        self.allowed = list(allowed)
        super().__init__(
            f"Invalid value {value!r} for parameter '{parameter}'. "
            f"Allowed values: {', '.join(self.allowed)}",
            parameter=parameter,
            tool_name=tool_name,
        )


class ToolCancelledError(ToolError):
    """Raised when a tool call's context was cancelled."""
    pass


class ToolTimeoutError(ToolError):
    """Raised when a tool call's context deadline passed."""
    pass
