"""Resource Registry for toolhub.

This module provides a registry for read-only resources exposed over MCP. It
has the same shape as the tool registry: each URI maps to a definition whose
reader produces the resource content.

Example:
    ```python
    registry = ResourceRegistry()
    registry.register_resource(Resource(
        uri="toolhub://tools",
        name="tools",
        mime_type="application/json",
        reader=lambda: json.dumps(tools.list_definitions()),
    ))

    text = await registry.read("toolhub://tools")
    ```
"""

import inspect
import logging
from typing import Any, Callable, Dict, List

from pydantic import BaseModel, ConfigDict, Field, field_validator

from toolhub.core.errors import RegistrationError

logger = logging.getLogger(__name__)


class DuplicateResourceError(RegistrationError):
    """Raised when a resource URI is registered twice."""
    pass


class Resource(BaseModel):
    """Definition of a readable resource.

    Attributes:
        uri: Unique resource URI
        name: Short name
        description: Human-readable description
        mime_type: MIME type of the content
        reader: Sync or async callable returning the content as text
    """

    model_config = ConfigDict(frozen=True)

    uri: str
    name: str
    description: str = ""
    mime_type: str = "text/plain"
    reader: Callable[[], Any] = Field(exclude=True, repr=False)

    @field_validator("uri", "name")
    @classmethod
    def not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Resource uri and name cannot be empty")
        return v.strip()


class ResourceRegistry:
    """Manages the registration and reading of resources.

    Attributes:
        resources (Dict[str, Resource]): Resources indexed by URI
    """

    def __init__(self):
        """Initialize an empty resource registry."""
        self.resources: Dict[str, Resource] = {}

    def register_resource(self, resource: Resource) -> None:
        """Register a resource.

        Args:
            resource: The resource definition

        Raises:
            DuplicateResourceError: If the URI is already registered
        """
        if resource.uri in self.resources:
            raise DuplicateResourceError(f"Resource '{resource.uri}' is already registered")
        self.resources[resource.uri] = resource
        logger.debug("Resource registered", extra={"uri": resource.uri})

    def list_resources(self) -> List[Resource]:
        """Get all registered resources."""
        return list(self.resources.values())

    async def read(self, uri: str) -> str:
        """Read a resource's content.

        Args:
            uri: URI of the resource

        Returns:
            The resource content

        Raises:
            KeyError: If no resource is registered under the URI
        """
        resource = self.resources.get(uri)
        if resource is None:
            raise KeyError(f"No resource registered for '{uri}'")

        content = resource.reader()
        if inspect.isawaitable(content):
            content = await content
        return content if isinstance(content, str) else str(content)
