"""WebSocket transport: a FastAPI app served by uvicorn, one channel per connection."""

from __future__ import annotations

import asyncio
import json
import uuid
from typing import Any, AsyncIterator, Awaitable, Callable

import uvicorn
from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from loguru import logger
from starlette.websockets import WebSocketState

from rustmcp import __version__
from rustmcp.transports.base import Channel, InboundFrame, TransportEvent, TransportFault


class WebSocketConnection(Channel):
    """A single accepted WebSocket. Replies are written only to this socket."""

    def __init__(self, websocket: WebSocket, connection_id: str):
        self.websocket = websocket
        self.connection_id = connection_id
        self._send_lock = asyncio.Lock()
        self._closed = False

    async def events(self) -> AsyncIterator[TransportEvent]:
        while not self._closed:
            try:
                message = await self.websocket.receive()
            except WebSocketDisconnect:
                return
            except RuntimeError as e:
                yield TransportFault(e, self.connection_id, recoverable=False)
                return
            if message.get("type") == "websocket.disconnect":
                return
            raw = message.get("text")
            if raw is None:
                raw = message.get("bytes")
            if raw:
                yield InboundFrame(raw, self.connection_id)

    async def send(self, message: dict[str, Any]) -> None:
        text = json.dumps(message, ensure_ascii=False, default=str)
        async with self._send_lock:
            await self.websocket.send_text(text)

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if (
            self.websocket.application_state != WebSocketState.DISCONNECTED
            and self.websocket.client_state != WebSocketState.DISCONNECTED
        ):
            await self.websocket.close()


SessionFactory = Callable[[WebSocketConnection], Awaitable[None]]


class WebSocketTransport:
    """Accept connections on ``path`` and hand each one to ``session_factory``.

    The factory runs for the lifetime of the connection, so every connection
    is consumed by its own task.
    """

    def __init__(
        self,
        session_factory: SessionFactory,
        *,
        host: str = "127.0.0.1",
        port: int = 3000,
        path: str = "/",
    ):
        self.session_factory = session_factory
        self.host = host
        self.port = port
        self.path = path
        self._connections: dict[str, WebSocketConnection] = {}
        self._server: uvicorn.Server | None = None
        self.app = FastAPI(title="rustmcp", version=__version__)
        self.app.add_api_route("/health", self.health, methods=["GET"])
        self.app.add_api_websocket_route(path, self._endpoint)

    @property
    def connection_count(self) -> int:
        return len(self._connections)

    async def send_to(self, connection_id: str, message: dict[str, Any]) -> bool:
        """Send to one live connection. Unknown ids are logged and dropped."""
        connection = self._connections.get(connection_id)
        if connection is None:
            logger.warning("[ws] dropping message for unknown connection {}", connection_id)
            return False
        await connection.send(message)
        return True

    async def health(self) -> dict[str, Any]:
        """Health check endpoint."""
        return {"ok": True, "service": "rustmcp", "connections": self.connection_count}

    async def _endpoint(self, websocket: WebSocket) -> None:
        await websocket.accept()
        connection = WebSocketConnection(websocket, uuid.uuid4().hex[:12])
        self._connections[connection.connection_id] = connection
        logger.info("[ws] connection {} opened from {}", connection.connection_id, websocket.client)
        try:
            await self.session_factory(connection)
        finally:
            self._connections.pop(connection.connection_id, None)
            await connection.close()
            logger.info("[ws] connection {} closed", connection.connection_id)

    async def serve(self) -> None:
        config = uvicorn.Config(self.app, host=self.host, port=self.port, log_level="warning")
        self._server = uvicorn.Server(config)
        logger.info("[ws] listening on ws://{}:{}{}", self.host, self.port, self.path)
        await self._server.serve()

    async def close(self) -> None:
        if self._server is not None:
            self._server.should_exit = True
        for connection in list(self._connections.values()):
            await connection.close()
