"""Core module for toolhub."""

from .context import ToolContext
from .errors import (
    ArgumentError,
    DuplicateToolError,
    InvalidDefinitionError,
    InvalidEnumValueError,
    MissingParameterError,
    RegistrationError,
    ToolCancelledError,
    ToolError,
    ToolNotFoundError,
    ToolTimeoutError,
    TypeMismatchError,
)
from .registry import ToolRegistry
from .validation import validate_arguments

__all__ = [
    "ArgumentError",
    "DuplicateToolError",
    "InvalidDefinitionError",
    "InvalidEnumValueError",
    "MissingParameterError",
    "RegistrationError",
    "ToolCancelledError",
    "ToolContext",
    "ToolError",
    "ToolNotFoundError",
    "ToolRegistry",
    "ToolTimeoutError",
    "TypeMismatchError",
    "validate_arguments",
]
