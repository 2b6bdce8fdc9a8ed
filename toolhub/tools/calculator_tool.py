"""Calculator Tool for toolhub.

This module provides a simple two-operand calculator tool.

Public Interface:
    - create_calculator_tool(): Create the calculator tool definition
    - calculator_handler(): Handle calculator tool calls
    - calculate(): Apply an operation to two numbers

Examples:
    >>> format_number(calculate("add", 15.5, 24.3))
    '39.8'
    >>> calculate("divide", 10, 4)
    2.5
    >>> format_number(calculate("multiply", 6, 7))
    '42'
"""

import math
import operator
from typing import Callable, Dict, Final

from toolhub.core.context import ToolContext
from toolhub.core.errors import ToolError
from toolhub.types import ArgumentSet, Tool, ToolParameter


class CalculatorError(ToolError):
    """Raised when there is an error performing a calculation."""
    pass


# Supported operations
_OPERATIONS: Final[Dict[str, Callable[[float, float], float]]] = {
    "add": operator.add,
    "subtract": operator.sub,
    "multiply": operator.mul,
    "divide": operator.truediv,
    "power": operator.pow,
    "modulo": operator.mod,
}


def calculate(operation: str, x: float, y: float) -> float:
    """Apply a named operation to two numbers.

    Args:
        operation: One of add, subtract, multiply, divide, power, modulo
        x: Left operand
        y: Right operand

    Returns:
        The result as a float

    Raises:
        CalculatorError: On an unknown operation, division by zero or overflow
    """
    func = _OPERATIONS.get(operation)
    if func is None:
        raise CalculatorError(f"Unsupported operation: {operation}")

    try:
        result = func(float(x), float(y))
    except ZeroDivisionError:
        raise CalculatorError("Division by zero")
    except OverflowError:
        raise CalculatorError("Result is too large")

    if isinstance(result, complex):
        raise CalculatorError("Result is not a real number")
    if math.isnan(result) or math.isinf(result):
        raise CalculatorError("Result is not a finite number")
    return result


def format_number(value: float) -> str:
    """Render a result to 15 significant digits; integral values print without '.0'."""
    if value.is_integer() and abs(value) < 1e16:
        return str(int(value))
    return f"{value:.15g}"


def create_calculator_tool() -> Tool:
    """Create a calculator tool definition.

    Returns:
        Tool definition for basic arithmetic
    """
    return Tool(
        name="calculator",
        description="Perform basic arithmetic on two numbers",
        parameters={
            "operation": ToolParameter(
                type="string",
                description="Operation to perform",
                required=True,
                enum=list(_OPERATIONS)
            ),
            "x": ToolParameter(
                type="number",
                description="First operand",
                required=True
            ),
            "y": ToolParameter(
                type="number",
                description="Second operand",
                required=True
            )
        },
        handler=calculator_handler
    )


async def calculator_handler(args: ArgumentSet, context: ToolContext) -> str:
    """Handle calculator tool execution.

    Args:
        args: Validated arguments containing:
            - operation: Operation to perform
            - x: First operand
            - y: Second operand
        context: Call context

    Returns:
        The result, e.g. "Result: 39.8"

    Raises:
        CalculatorError: If the calculation fails
    """
    result = calculate(args["operation"], args["x"], args["y"])
    return f"Result: {format_number(result)}"
