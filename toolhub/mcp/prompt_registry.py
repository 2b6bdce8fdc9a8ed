"""Prompt Registry for toolhub.

This module provides a registry of prompt templates exposed over MCP. Like the
tool registry it maps a name to a definition, validates the caller's
arguments and renders the result.

Example:
    ```python
    registry = PromptRegistry()
    registry.register_prompt(Prompt(
        name="summarize_file",
        description="Ask for a summary of a file",
        arguments={"path": PromptArgument(description="File to summarize", required=True)},
        template="Read {path} with the read_file tool and summarize it.",
    ))

    text = registry.render("summarize_file", {"path": "README.md"})
    ```
"""

import logging
import string
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from toolhub.core.errors import MissingParameterError, RegistrationError

logger = logging.getLogger(__name__)


class DuplicatePromptError(RegistrationError):
    """Raised when a prompt name is registered twice."""
    pass


class PromptArgument(BaseModel):
    """Definition of a prompt argument."""

    model_config = ConfigDict(frozen=True)

    description: str = ""
    required: bool = False


class Prompt(BaseModel):
    """Definition of a prompt template.

    Attributes:
        name: Unique prompt name
        description: Human-readable description
        arguments: Argument names mapped to their definitions
        template: ``str.format`` template using the argument names
    """

    model_config = ConfigDict(frozen=True)

    name: str
    description: str = ""
    arguments: Dict[str, PromptArgument] = Field(default_factory=dict)
    template: str

    @model_validator(mode="after")
    def placeholders_declared(self) -> "Prompt":
        if not self.name.strip():
            raise ValueError("Prompt name cannot be empty")
        for _, field_name, _, _ in string.Formatter().parse(self.template):
            if field_name is not None and field_name not in self.arguments:
                raise ValueError(f"Template placeholder '{field_name}' is not a declared argument")
        return self


class PromptRegistry:
    """Manages the registration and rendering of prompts.

    Attributes:
        prompts (Dict[str, Prompt]): Prompts indexed by name
    """

    def __init__(self):
        """Initialize an empty prompt registry."""
        self.prompts: Dict[str, Prompt] = {}

    def register_prompt(self, prompt: Prompt) -> None:
        """Register a prompt.

        Raises:
            DuplicatePromptError: If the name is already registered
        """
        if prompt.name in self.prompts:
            raise DuplicatePromptError(f"Prompt '{prompt.name}' is already registered")
        self.prompts[prompt.name] = prompt
        logger.debug("Prompt registered", extra={"prompt_name": prompt.name})

    def list_prompts(self) -> List[Prompt]:
        """Get all registered prompts."""
        return list(self.prompts.values())

    def render(self, name: str, arguments: Optional[Dict[str, str]] = None) -> str:
        """Render a prompt with the given arguments.

        Optional arguments that are not supplied render as empty strings and
        undeclared arguments are ignored.

        Raises:
            KeyError: If no prompt is registered under the name
            MissingParameterError: If a required argument is missing
        """
        prompt = self.prompts.get(name)
        if prompt is None:
            raise KeyError(f"No prompt named '{name}' is registered")

        arguments = arguments or {}
        values = {}
        for arg_name, arg in prompt.arguments.items():
            value = arguments.get(arg_name)
            if value is None or value == "":
                if arg.required:
                    raise MissingParameterError(arg_name)
                value = ""
            values[arg_name] = str(value)
        return prompt.template.format(**values)
