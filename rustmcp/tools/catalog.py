"""The default tool and resource catalog."""

from __future__ import annotations

from typing import Any

from rustmcp.tools.base import ResourceDescriptor, ToolDescriptor
from rustmcp.tools.handlers import AnalysisTools
from rustmcp.tools.registry import ResourceTable, ToolRegistry
from rustmcp.tools.resources_data import DEFAULT_RESOURCES

_CODE = {"type": "string", "description": "The Rust code to process"}
_FILE_NAME = {"type": "string", "description": "The name of the source file (for error reporting)"}

ANALYZE_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "code": _CODE,
        "fileName": _FILE_NAME,
        "position": {
            "type": "object",
            "properties": {
                "line": {"type": "integer", "minimum": 0},
                "character": {"type": "integer", "minimum": 0},
            },
            "required": ["line", "character"],
            "description": "Cursor position in the file (for focused analysis)",
        },
    },
    "required": ["code"],
}

SUGGEST_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {"code": _CODE, "fileName": _FILE_NAME},
    "required": ["code"],
}

EXPLAIN_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "code": _CODE,
        "fileName": _FILE_NAME,
        "focus": {"type": "string", "description": "Specific part of the code to focus the explanation on"},
    },
    "required": ["code"],
}

HISTORY_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "limit": {
            "type": "integer",
            "minimum": 1,
            "maximum": 50,
            "description": "Maximum number of history entries to retrieve",
        },
    },
}


def build_tool_registry(tools: AnalysisTools) -> ToolRegistry:
    """Register the rust.* tools and freeze the registry."""
    registry = ToolRegistry()
    registry.register(
        ToolDescriptor(
            name="rust.analyze",
            description=(
                "Analyzes Rust code for errors, warnings, and potential issues. "
                "Returns diagnostics with severity levels, positions and suggested fixes."
            ),
            input_schema=ANALYZE_SCHEMA,
            handler=tools.analyze,
            legacy_result_type="rust.analysis.result",
        )
    )
    registry.register(
        ToolDescriptor(
            name="rust.suggest",
            description=(
                "Recommends improvements to Rust code that may already be correct: "
                "more idiomatic style, better error handling and simpler expressions."
            ),
            input_schema=SUGGEST_SCHEMA,
            handler=tools.suggest,
            legacy_result_type="rust.suggestion.result",
        )
    )
    registry.register(
        ToolDescriptor(
            name="rust.explain",
            description=(
                "Explains Rust code patterns, compiler errors and concepts such as "
                "borrowing, lifetimes, traits and generics."
            ),
            input_schema=EXPLAIN_SCHEMA,
            handler=tools.explain,
            legacy_result_type="rust.explanation.result",
        )
    )
    registry.register(
        ToolDescriptor(
            name="rust.history",
            description="Retrieves recent analyses with timestamps, file names and summary statistics.",
            input_schema=HISTORY_SCHEMA,
            handler=tools.recent_history,
            legacy_result_type="rust.history.result",
        )
    )
    return registry.freeze()


def build_resource_table(resources: tuple[ResourceDescriptor, ...] = DEFAULT_RESOURCES) -> ResourceTable:
    table = ResourceTable()
    for resource in resources:
        table.register(resource)
    return table.freeze()
