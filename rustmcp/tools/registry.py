"""Tool and resource registries.

Both are filled once at startup, frozen, and then only read. Lookups are
plain dict accesses so dispatch never blocks on them.
"""

from typing import Any

from rustmcp.tools.base import ResourceDescriptor, ToolDescriptor
from rustmcp.utils.exceptions import ConfigurationError


class ToolRegistry:
    """
    Registry for invocable tools.

    Registration order is preserved for ``tools/list``.
    """

    def __init__(self) -> None:
        self._tools: dict[str, ToolDescriptor] = {}
        self._frozen = False

    def register(self, tool: ToolDescriptor) -> None:
        """Register a tool. Names are unique and the registry must not be frozen."""
        if self._frozen:
            raise ConfigurationError(f"Cannot register tool '{tool.name}': registry is frozen", tool.name)
        if tool.name in self._tools:
            raise ConfigurationError(f"Tool '{tool.name}' is already registered", tool.name)
        self._tools[tool.name] = tool

    def freeze(self) -> "ToolRegistry":
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    def get(self, name: str) -> ToolDescriptor | None:
        """Get a tool by name."""
        return self._tools.get(name)

    def get_definitions(self) -> list[dict[str, Any]]:
        """Get all tool definitions as advertised by ``tools/list``."""
        return [tool.to_schema() for tool in self._tools.values()]

    @property
    def tool_names(self) -> list[str]:
        return list(self._tools)

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools


class ResourceTable:
    """Registry for static resources, addressable by name or uri."""

    def __init__(self) -> None:
        self._by_name: dict[str, ResourceDescriptor] = {}
        self._by_uri: dict[str, ResourceDescriptor] = {}
        self._frozen = False

    def register(self, resource: ResourceDescriptor) -> None:
        if self._frozen:
            raise ConfigurationError(f"Cannot register resource '{resource.name}': table is frozen", resource.name)
        if resource.name in self._by_name or resource.uri in self._by_uri:
            raise ConfigurationError(f"Resource '{resource.name}' is already registered", resource.name)
        self._by_name[resource.name] = resource
        self._by_uri[resource.uri] = resource

    def freeze(self) -> "ResourceTable":
        self._frozen = True
        return self

    def get(self, key: str) -> ResourceDescriptor | None:
        """Look a resource up by name first, then by uri."""
        return self._by_name.get(key) or self._by_uri.get(key)

    def get_summaries(self) -> list[dict[str, Any]]:
        return [resource.to_summary() for resource in self._by_name.values()]

    def get_definitions(self) -> list[dict[str, Any]]:
        return [resource.to_schema() for resource in self._by_name.values()]

    def __len__(self) -> int:
        return len(self._by_name)

    def __contains__(self, key: object) -> bool:
        return key in self._by_name or key in self._by_uri
