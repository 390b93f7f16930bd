"""Tool registry, catalog and handlers."""

from rustmcp.tools.base import ResourceDescriptor, ToolDescriptor
from rustmcp.tools.registry import ResourceTable, ToolRegistry

__all__ = ["ResourceDescriptor", "ResourceTable", "ToolDescriptor", "ToolRegistry"]
