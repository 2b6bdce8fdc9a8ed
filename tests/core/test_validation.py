"""Tests for argument validation."""

import pytest

from toolhub.core import (
    ArgumentError,
    InvalidEnumValueError,
    MissingParameterError,
    TypeMismatchError,
    validate_arguments,
)
from toolhub.types import ArgumentSet


@pytest.fixture
def search_tool(base_tool, base_tool_parameter):
    """Tool with a mix of required, optional, enum and typed parameters."""
    return base_tool(
        "search",
        parameters={
            "query": base_tool_parameter("string"),
            "limit": base_tool_parameter("number", required=False, default=10),
            "mode": base_tool_parameter("string", required=False, enum=["fast", "deep"], default="fast"),
            "safe": base_tool_parameter("boolean", required=False),
        },
    )


def test_valid_arguments(search_tool):
    """Test validation of a complete argument set."""
    args = validate_arguments(search_tool, {"query": "python", "limit": 5, "mode": "deep", "safe": True})

    assert isinstance(args, ArgumentSet)
    assert dict(args) == {"query": "python", "limit": 5.0, "mode": "deep", "safe": True}


def test_defaults_applied(search_tool):
    """Test that absent optional parameters receive their defaults."""
    args = validate_arguments(search_tool, {"query": "python"})

    assert args["limit"] == 10.0
    assert args["mode"] == "fast"
    assert "safe" not in args


def test_null_counts_as_absent(search_tool):
    """An explicit null behaves like an omitted key."""
    args = validate_arguments(search_tool, {"query": "python", "limit": None})
    assert args["limit"] == 10.0

    with pytest.raises(MissingParameterError):
        validate_arguments(search_tool, {"query": None})


def test_missing_required(search_tool):
    """Test that a missing required parameter is reported by name."""
    with pytest.raises(MissingParameterError) as exc_info:
        validate_arguments(search_tool, {})

    assert exc_info.value.parameter == "query"
    assert exc_info.value.tool_name == "search"
    assert str(exc_info.value) == "Missing required parameter 'query' for tool 'search'"


@pytest.mark.parametrize("arguments,parameter", [
    ({"query": 42}, "query"),
    ({"query": "x", "limit": "5"}, "limit"),
    ({"query": "x", "limit": False}, "limit"),
    ({"query": "x", "safe": "yes"}, "safe"),
    ({"query": "x", "safe": 1}, "safe"),
])
def test_type_mismatch(search_tool, arguments, parameter):
    """Test that values of the wrong type are rejected."""
    with pytest.raises(TypeMismatchError) as exc_info:
        validate_arguments(search_tool, arguments)

    assert exc_info.value.parameter == parameter


def test_invalid_enum(search_tool):
    """Test that enum values are enforced and the allowed set is listed."""
    with pytest.raises(InvalidEnumValueError) as exc_info:
        validate_arguments(search_tool, {"query": "x", "mode": "slow"})

    message = str(exc_info.value)
    assert "'mode'" in message
    assert "fast, deep" in message


def test_first_failure_in_declaration_order(search_tool):
    """Parameters are checked in declaration order."""
    with pytest.raises(MissingParameterError):
        validate_arguments(search_tool, {"limit": "not a number"})


def test_undeclared_keys_dropped(search_tool):
    """Test that keys not declared by the tool are ignored."""
    args = validate_arguments(search_tool, {"query": "x", "verbose": True})

    assert "verbose" not in args


def test_none_arguments_treated_as_empty(base_tool, base_tool_parameter):
    """None behaves like an empty mapping."""
    tool = base_tool("opt", parameters={"a": base_tool_parameter(required=False)})

    assert len(validate_arguments(tool, None)) == 0


def test_non_mapping_arguments(search_tool):
    """Test that non-object arguments are rejected."""
    with pytest.raises(ArgumentError) as exc_info:
        validate_arguments(search_tool, ["query", "x"])

    assert "must be an object" in str(exc_info.value)


def test_argument_set_is_read_only(search_tool):
    """ArgumentSet exposes a mapping interface without mutation."""
    args = validate_arguments(search_tool, {"query": "x"})

    with pytest.raises(TypeError):
        args["query"] = "y"
    assert args.get("missing") is None
