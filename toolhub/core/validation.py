"""Argument validation for tool calls.

Converts an untyped argument mapping (usually decoded JSON) into an
ArgumentSet according to a tool's declared parameters.
"""

import logging
from typing import Any, Dict, Mapping, Optional

from toolhub.core.errors import (
    ArgumentError,
    InvalidEnumValueError,
    MissingParameterError,
    TypeMismatchError,
)
from toolhub.types import ArgumentSet, Tool, coerce_value

logger = logging.getLogger(__name__)


def validate_arguments(tool: Tool, arguments: Optional[Mapping[str, Any]]) -> ArgumentSet:
    """Validate raw arguments against a tool definition.

    Parameters are checked in declaration order and the first failure wins.
    Keys not declared by the tool are dropped. An explicit null counts as
    absent.

    Args:
        tool: The tool definition
        arguments: Raw argument mapping; None is treated as empty

    Returns:
        The validated arguments

    Raises:
        MissingParameterError: If a required parameter is absent
        TypeMismatchError: If a value does not match its declared type
        InvalidEnumValueError: If a value is outside the parameter's enum
        ArgumentError: If arguments is not a mapping
    """
    if arguments is None:
        arguments = {}
    if not isinstance(arguments, Mapping):
        raise ArgumentError(
            f"Arguments for tool '{tool.name}' must be an object, "
            f"got {type(arguments).__name__}",
            parameter="*",
            tool_name=tool.name,
        )

    values: Dict[str, Any] = {}
    for name, param in tool.parameters.items():
        if arguments.get(name) is None:
            if param.required:
                raise MissingParameterError(name, tool_name=tool.name)
            if param.default is not None:
                values[name] = param.default
            continue

        raw = arguments[name]
        try:
            value = coerce_value(param.type, raw)
        except TypeError:
            raise TypeMismatchError(name, param.type, raw, tool_name=tool.name)

        if param.enum is not None and value not in param.enum:
            raise InvalidEnumValueError(name, value, param.enum, tool_name=tool.name)

        values[name] = value

    ignored = [key for key in arguments if key not in tool.parameters]
    if ignored:
        logger.debug(
            "Ignoring undeclared arguments",
            extra={"tool_name": tool.name, "ignored": ignored},
        )

    return ArgumentSet(values)
