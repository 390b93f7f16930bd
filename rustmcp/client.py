"""Minimal WebSocket client for talking to a running server."""

from __future__ import annotations

import asyncio
import json
import uuid
from typing import Any, Callable

import websockets
from loguru import logger


class RpcSocketClient:
    """Send one RPC request per connection and wait for the reply with the same id."""

    def __init__(self, url: str, *, timeout: float = 15.0, connect: Callable[..., Any] | None = None):
        self.url = url
        self.timeout = timeout
        self._connect = connect or websockets.connect

    async def request(self, method: str, params: Any = None, *, request_id: Any = None) -> dict[str, Any]:
        if request_id is None:
            request_id = uuid.uuid4().hex
        frame: dict[str, Any] = {"version": "2.0", "id": request_id, "method": method}
        if params is not None:
            frame["params"] = params

        async with self._connect(self.url) as ws:
            await ws.send(json.dumps(frame))
            while True:
                raw = await asyncio.wait_for(ws.recv(), timeout=self.timeout)
                try:
                    reply = json.loads(raw)
                except json.JSONDecodeError:
                    logger.debug("[client] skipping non-JSON frame")
                    continue
                if isinstance(reply, dict) and reply.get("id") == request_id:
                    return reply
