"""Per-channel session: feed frames to the dispatcher and send replies back."""

from __future__ import annotations

import asyncio

from loguru import logger

from rustmcp.protocol.dispatcher import Dispatcher
from rustmcp.transports.base import Channel, InboundFrame, TransportFault

_PREVIEW_CHARS = 200


class Session:
    """Consume one channel's events, handling every frame in its own task.

    Replies leave in completion order, not arrival order; clients correlate
    them by id. With ``drain_on_close`` the session waits for in-flight
    requests after the peer stops sending (stdin EOF still allows writing);
    otherwise in-flight requests are cancelled when the channel ends.
    """

    def __init__(self, channel: Channel, dispatcher: Dispatcher, *, drain_on_close: bool = False):
        self.channel = channel
        self.dispatcher = dispatcher
        self.drain_on_close = drain_on_close
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def run(self) -> None:
        cid = self.channel.connection_id
        logger.debug("[session] {} started", cid)
        try:
            async for event in self.channel.events():
                if isinstance(event, TransportFault):
                    if event.recoverable:
                        logger.warning("[session] {} transport fault: {}", cid, event.error)
                        continue
                    logger.error("[session] {} transport failed: {}", cid, event.error)
                    break
                self._spawn(event)
            if self.drain_on_close and self._tasks:
                await asyncio.gather(*list(self._tasks), return_exceptions=True)
        finally:
            await self._cancel_pending()
            logger.debug("[session] {} ended", cid)

    def _spawn(self, frame: InboundFrame) -> None:
        task = asyncio.create_task(self._serve(frame))
        self._tasks.add(task)
        task.add_done_callback(self._on_done)

    def _on_done(self, task: asyncio.Task[None]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.opt(exception=exc).error("[session] {} request task crashed", self.channel.connection_id)

    async def _serve(self, frame: InboundFrame) -> None:
        cid = self.channel.connection_id
        logger.debug("[session] {} <- {}", cid, _preview(frame.raw))
        reply = await self.dispatcher.dispatch(frame.raw)
        if reply is None:
            return
        try:
            await self.channel.send(reply)
        except Exception as e:
            logger.warning("[session] {} could not deliver reply id={}: {}", cid, reply.get("id"), e)
            return
        logger.debug("[session] {} -> id={}", cid, reply.get("id"))

    async def _cancel_pending(self) -> None:
        pending = [task for task in self._tasks if not task.done()]
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)


def _preview(raw: str | bytes) -> str:
    text = raw.decode("utf-8", errors="replace") if isinstance(raw, (bytes, bytearray)) else raw
    return text if len(text) <= _PREVIEW_CHARS else text[:_PREVIEW_CHARS] + "..."
