"""Type definitions for the toolhub framework.

This module contains the core type definitions used throughout the framework,
including Tool, ToolParameter, ArgumentSet and the Success/Failure results
returned by every tool invocation.
"""

from collections.abc import Mapping
from types import MappingProxyType
from typing import (
    TYPE_CHECKING,
    Annotated,
    Any,
    Awaitable,
    Callable,
    Dict,
    Iterator,
    List,
    Literal,
    Optional,
    Tuple,
    Union,
)

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    SerializerFunctionWrapHandler,
    ValidationInfo,
    field_serializer,
    field_validator,
    model_validator,
)

if TYPE_CHECKING:
    from toolhub.core.context import ToolContext


ParameterType = Literal["string", "number", "boolean"]

_JSON_TYPES: Dict[str, str] = {
    "string": "string",
    "number": "number",
    "boolean": "boolean",
}


def coerce_value(kind: str, value: Any) -> Any:
    """Check that a value matches a parameter type and return its canonical form.

    Numbers accept both integer and floating representations and are always
    returned as ``float``. Booleans are never accepted as numbers even though
    ``bool`` subclasses ``int``.

    Args:
        kind: One of "string", "number" or "boolean"
        value: The raw value

    Returns:
        The value in canonical form

    Raises:
        TypeError: If the value does not match the type
    """
    if kind == "string":
        if isinstance(value, str):
            return value
    elif kind == "boolean":
        if isinstance(value, bool):
            return value
    elif kind == "number":
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            try:
                return float(value)
            except OverflowError:
                raise TypeError(f"number out of range: {value}")
    else:
        raise TypeError(f"unknown parameter type '{kind}'")
    raise TypeError(f"expected {kind}, got {type(value).__name__}")


class ToolParameter(BaseModel):
    """Definition of a tool parameter.

    Attributes:
        type: The data type of the parameter (string, number or boolean)
        description: A human-readable description of the parameter
        required: Whether the parameter is required (default: False)
        default: Default value used when the parameter is absent
        enum: Optional allowed values (string parameters only)
    """

    model_config = ConfigDict(frozen=True)

    type: ParameterType
    description: str = ""
    required: bool = False
    default: Optional[Any] = None
    enum: Optional[Tuple[str, ...]] = None

    @field_validator("default")
    @classmethod
    def default_matches_type(cls, v: Any, info: ValidationInfo) -> Any:
        """Validate the default against the declared type."""
        kind = info.data.get("type")
        if v is None or kind is None:
            return v
        try:
            return coerce_value(kind, v)
        except TypeError as e:
            raise ValueError(f"Invalid default: {e}")

    @field_validator("enum")
    @classmethod
    def enum_only_for_strings(cls, v: Optional[Tuple[str, ...]], info: ValidationInfo) -> Optional[Tuple[str, ...]]:
        """Validate that enum constraints are only declared on string parameters."""
        if v is None:
            return v
        if info.data.get("type") != "string":
            raise ValueError("enum is only supported for string parameters")
        if not v:
            raise ValueError("enum cannot be empty")
        return v

    @model_validator(mode="after")
    def default_in_enum(self) -> "ToolParameter":
        if self.enum is not None and self.default is not None and self.default not in self.enum:
            raise ValueError(f"Default '{self.default}' is not one of {list(self.enum)}")
        return self

    def json_schema(self) -> Dict[str, Any]:
        """Render this parameter as a JSON Schema property."""
        schema: Dict[str, Any] = {"type": _JSON_TYPES[self.type]}
        if self.description:
            schema["description"] = self.description
        if self.enum is not None:
            schema["enum"] = list(self.enum)
        if self.default is not None:
            schema["default"] = self.default
        return schema


class Tool(BaseModel):
    """Definition of a tool that can be invoked through a registry.

    Attributes:
        name: The name of the tool
        description: A human-readable description of what the tool does
        parameters: Read-only mapping of parameter names to ToolParameter objects, in declaration order
        handler: Function implementing the tool, taking (ArgumentSet, ToolContext)
    """

    model_config = ConfigDict(frozen=True)

    name: str
    description: str = ""
    parameters: Dict[str, ToolParameter] = Field(default_factory=dict, validate_default=True)
    handler: Optional[Callable[..., Any]] = Field(default=None, exclude=True, repr=False)

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, v: str) -> str:
        """Validate that the tool name is not blank."""
        v = v.strip()
        if not v:
            raise ValueError("Tool name cannot be empty")
        return v

    @field_validator("parameters")
    @classmethod
    def parameter_names_not_empty(cls, v: Dict[str, ToolParameter]) -> Mapping:
        """Validate parameter names and store them as a read-only mapping."""
        if any(not name.strip() for name in v):
            raise ValueError("Parameter names cannot be empty")
        return MappingProxyType(dict(v))

    @field_serializer("parameters", mode="wrap")
    def serialize_parameters(self, v: Mapping, handler: SerializerFunctionWrapHandler) -> Dict[str, Any]:
        return handler(dict(v))

    def definition(self) -> Dict[str, Any]:
        """Return the serializable definition (name, description, parameters)."""
        return self.model_dump(mode="json")

    def input_schema(self) -> Dict[str, Any]:
        """Return a JSON Schema object describing the tool's arguments."""
        return {
            "type": "object",
            "properties": {
                name: param.json_schema() for name, param in self.parameters.items()
            },
            "required": [name for name, param in self.parameters.items() if param.required],
        }


class ArgumentSet(Mapping):
    """Typed, validated arguments for a single tool call.

    Only declared parameter names are present. Instances are read-only.
    """

    __slots__ = ("_values",)

    def __init__(self, values: Optional[Dict[str, Any]] = None) -> None:
        self._values: Dict[str, Any] = dict(values or {})

    def __getitem__(self, key: str) -> Any:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"ArgumentSet({self._values!r})"


class Success(BaseModel):
    """A successful tool result carrying a text payload."""

    model_config = ConfigDict(frozen=True)

    status: Literal["success"] = "success"
    text: str

    @property
    def ok(self) -> bool:
        return True


class Failure(BaseModel):
    """A failed tool result carrying a human-readable message.

    Failures are ordinary return values. They are delivered to the caller as
    a normal response whose payload signals the error.
    """

    model_config = ConfigDict(frozen=True)

    status: Literal["failure"] = "failure"
    message: str

    @property
    def ok(self) -> bool:
        return False


ToolResult = Annotated[Union[Success, Failure], Field(discriminator="status")]

# Handlers may be sync or async and may return a ToolResult, a string, or any
# JSON-serializable value.
SyncToolHandler = Callable[[ArgumentSet, "ToolContext"], Any]
AsyncToolHandler = Callable[[ArgumentSet, "ToolContext"], Awaitable[Any]]
ToolHandler = Union[SyncToolHandler, AsyncToolHandler]
