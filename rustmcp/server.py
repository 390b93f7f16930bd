"""Server assembly: wire config, bridge, registries, dispatcher and transports."""

from __future__ import annotations

import asyncio

from loguru import logger

from rustmcp.bridge.process import ProcessBridge
from rustmcp.config.schema import Config
from rustmcp.protocol.dispatcher import Dispatcher
from rustmcp.session import Session
from rustmcp.tools.catalog import build_resource_table, build_tool_registry
from rustmcp.tools.handlers import AnalysisTools
from rustmcp.tools.history import AnalysisHistory
from rustmcp.transports.stdio import StreamTransport
from rustmcp.transports.websocket import WebSocketConnection, WebSocketTransport
from rustmcp.utils.exceptions import ConfigurationError


def build_bridge(config: Config) -> ProcessBridge:
    return ProcessBridge(
        config.bridge.binary_path,
        timeout=config.bridge.timeout_seconds,
        capability=config.bridge.capability,
    )


def build_dispatcher(config: Config, *, bridge: ProcessBridge | None = None) -> Dispatcher:
    """Create the dispatcher with the default rust.* catalog."""
    tools = AnalysisTools(bridge or build_bridge(config), AnalysisHistory(config.history.max_entries))
    return Dispatcher(build_tool_registry(tools), build_resource_table(), config.server)


def build_websocket_transport(config: Config, dispatcher: Dispatcher) -> WebSocketTransport:
    async def run_session(connection: WebSocketConnection) -> None:
        await Session(connection, dispatcher).run()

    return WebSocketTransport(
        run_session,
        host=config.websocket.host,
        port=config.websocket.port,
        path=config.websocket.path,
    )


async def run_stdio(config: Config, dispatcher: Dispatcher, stream: StreamTransport | None = None) -> None:
    stream = stream or StreamTransport(max_line_bytes=config.stdio.max_line_bytes)
    await stream.start()
    try:
        await Session(stream, dispatcher, drain_on_close=True).run()
    finally:
        await stream.close()


async def serve(config: Config, *, dispatcher: Dispatcher | None = None) -> None:
    """Run every enabled transport until all of them have finished."""
    dispatcher = dispatcher or build_dispatcher(config)
    jobs = []
    if config.stdio.enabled:
        jobs.append(run_stdio(config, dispatcher))
    if config.websocket.enabled:
        jobs.append(build_websocket_transport(config, dispatcher).serve())
    if not jobs:
        raise ConfigurationError("No transport enabled; enable stdio or websocket", "transports")

    logger.info(
        "{} {} serving {} tools (stdio={}, websocket={})",
        config.server.name,
        config.server.version,
        len(dispatcher.tools),
        config.stdio.enabled,
        config.websocket.enabled,
    )
    await asyncio.gather(*jobs)
