"""Tests for the core type definitions."""

import pytest
from pydantic import TypeAdapter, ValidationError

from toolhub.types import Failure, Success, Tool, ToolParameter, ToolResult, coerce_value


class TestToolParameter:
    """Tests for ToolParameter."""

    def test_minimal(self):
        param = ToolParameter(type="string")
        assert param.required is False
        assert param.description == ""
        assert param.enum is None

    def test_invalid_type(self):
        """Test that unsupported parameter types are rejected."""
        with pytest.raises(ValidationError):
            ToolParameter(type="integer")

    def test_enum_requires_string_type(self):
        with pytest.raises(ValidationError, match="only supported for string"):
            ToolParameter(type="number", enum=["1", "2"])

    def test_empty_enum(self):
        with pytest.raises(ValidationError, match="cannot be empty"):
            ToolParameter(type="string", enum=[])

    def test_default_must_match_type(self):
        with pytest.raises(ValidationError, match="Invalid default"):
            ToolParameter(type="boolean", default="yes")

    def test_numeric_default_is_float(self):
        assert ToolParameter(type="number", default=10).default == 10.0

    def test_default_must_be_in_enum(self):
        with pytest.raises(ValidationError):
            ToolParameter(type="string", enum=["a", "b"], default="c")

    def test_json_schema(self):
        param = ToolParameter(
            type="string",
            description="Operation",
            enum=["add", "subtract"],
            default="add",
        )
        assert param.json_schema() == {
            "type": "string",
            "description": "Operation",
            "enum": ["add", "subtract"],
            "default": "add",
        }

    def test_frozen(self):
        param = ToolParameter(type="string")
        with pytest.raises(ValidationError):
            param.required = True


class TestTool:
    """Tests for Tool."""

    def test_name_is_stripped(self):
        assert Tool(name="  calc  ").name == "calc"

    def test_blank_name(self):
        with pytest.raises(ValidationError, match="Tool name cannot be empty"):
            Tool(name="   ")

    def test_blank_parameter_name(self):
        with pytest.raises(ValidationError):
            Tool(name="t", parameters={" ": ToolParameter(type="string")})

    def test_definition_excludes_handler(self):
        tool = Tool(
            name="echo",
            description="Echo input",
            parameters={"text": ToolParameter(type="string", required=True)},
            handler=lambda args, context: args["text"],
        )

        assert tool.definition() == {
            "name": "echo",
            "description": "Echo input",
            "parameters": {
                "text": {
                    "type": "string",
                    "description": "",
                    "required": True,
                    "default": None,
                    "enum": None,
                }
            },
        }

    def test_parameters_are_read_only(self):
        """A constructed tool's parameter declarations cannot be changed."""
        declared = {"x": ToolParameter(type="number", required=True, enum=None)}
        tool = Tool(name="calc", parameters=declared)

        with pytest.raises(TypeError):
            tool.parameters["y"] = ToolParameter(type="string")
        declared["z"] = ToolParameter(type="boolean")

        assert list(tool.parameters) == ["x"]
        assert Tool(name="bare").parameters == {}
        with pytest.raises(TypeError):
            Tool(name="bare").parameters["x"] = ToolParameter(type="string")

    def test_enum_is_immutable(self):
        param = ToolParameter(type="string", enum=["a", "b"])

        assert param.enum == ("a", "b")
        assert param.json_schema()["enum"] == ["a", "b"]
        assert param.model_dump(mode="json")["enum"] == ["a", "b"]

    def test_input_schema(self):
        tool = Tool(
            name="calc",
            parameters={
                "x": ToolParameter(type="number", required=True),
                "precise": ToolParameter(type="boolean"),
            },
        )

        schema = tool.input_schema()
        assert schema["type"] == "object"
        assert list(schema["properties"]) == ["x", "precise"]
        assert schema["required"] == ["x"]


class TestCoerceValue:
    """Tests for coerce_value."""

    @pytest.mark.parametrize("kind,value,expected", [
        ("string", "abc", "abc"),
        ("boolean", False, False),
        ("number", 3, 3.0),
        ("number", 2.5, 2.5),
    ])
    def test_accepts(self, kind, value, expected):
        result = coerce_value(kind, value)
        assert result == expected
        assert type(result) is type(expected)

    @pytest.mark.parametrize("kind,value", [
        ("string", 1),
        ("number", True),
        ("number", "1"),
        ("number", 10 ** 400),
        ("boolean", 0),
        ("object", {}),
    ])
    def test_rejects(self, kind, value):
        with pytest.raises(TypeError):
            coerce_value(kind, value)


class TestResults:
    """Tests for Success and Failure."""

    def test_ok_flags(self):
        assert Success(text="done").ok
        assert not Failure(message="broken").ok

    def test_discriminated_union(self):
        adapter = TypeAdapter(ToolResult)

        assert adapter.validate_python({"status": "success", "text": "hi"}) == Success(text="hi")
        assert adapter.validate_python({"status": "failure", "message": "no"}) == Failure(message="no")
        with pytest.raises(ValidationError):
            adapter.validate_python({"status": "maybe", "text": "?"})
