"""Pytest hooks and fixtures."""

import asyncio
import stat

import pytest

from rustmcp.bridge.process import ProcessBridge
from rustmcp.config.schema import ServerInfoConfig
from rustmcp.protocol.dispatcher import Dispatcher
from rustmcp.tools.base import ToolDescriptor
from rustmcp.tools.catalog import build_resource_table, build_tool_registry
from rustmcp.tools.handlers import AnalysisTools
from rustmcp.tools.history import AnalysisHistory
from rustmcp.tools.registry import ToolRegistry


@pytest.fixture
def make_analyzer(tmp_path):
    """Write an executable /bin/sh analyzer stub and return its path."""

    def _make(body: str, name: str = "analyzer") -> str:
        path = tmp_path / name
        path.write_text("#!/bin/sh\n" + body + "\n")
        path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return str(path)

    return _make


@pytest.fixture
def catalog_dispatcher():
    """Dispatcher with the real rust.* catalog and no analyzer configured."""
    tools = AnalysisTools(ProcessBridge(None), AnalysisHistory(max_entries=20))
    return Dispatcher(build_tool_registry(tools), build_resource_table(), ServerInfoConfig())


ECHO_SCHEMA = {
    "type": "object",
    "properties": {"text": {"type": "string"}, "delay": {"type": "number", "minimum": 0}},
    "required": ["text"],
}


class EchoHandlers:
    """Handlers for throwaway tools: one echoes after an optional delay, one always fails."""

    def __init__(self):
        self.calls = []

    async def echo(self, params):
        self.calls.append(params)
        await asyncio.sleep(params.get("delay", 0))
        return {"text": params["text"]}

    async def fail(self, params):
        raise RuntimeError("analyzer state corrupted")


@pytest.fixture
def handlers():
    return EchoHandlers()


@pytest.fixture
def echo_dispatcher(handlers):
    registry = ToolRegistry()
    registry.register(ToolDescriptor("test.echo", "Echo text", ECHO_SCHEMA, handlers.echo))
    registry.register(ToolDescriptor("test.fail", "Always fails", {"type": "object"}, handlers.fail))
    return Dispatcher(registry.freeze(), build_resource_table())
