"""Newline-delimited JSON over a byte stream (stdin/stdout by default)."""

from __future__ import annotations

import asyncio
import json
import sys
from typing import Any, AsyncIterator, Protocol

from loguru import logger

from rustmcp.transports.base import Channel, InboundFrame, TransportEvent, TransportFault

DEFAULT_MAX_LINE_BYTES = 4 * 1024 * 1024


class LineWriter(Protocol):
    def write(self, data: bytes) -> None: ...

    async def drain(self) -> None: ...

    def close(self) -> None: ...


async def open_stdio(limit: int = DEFAULT_MAX_LINE_BYTES) -> tuple[asyncio.StreamReader, asyncio.StreamWriter]:
    """Wrap the process's stdin/stdout in asyncio streams."""
    loop = asyncio.get_running_loop()
    reader = asyncio.StreamReader(limit=limit)
    await loop.connect_read_pipe(lambda: asyncio.StreamReaderProtocol(reader), sys.stdin)
    transport, protocol = await loop.connect_write_pipe(asyncio.streams.FlowControlMixin, sys.stdout)
    writer = asyncio.StreamWriter(transport, protocol, reader, loop)
    return reader, writer


class StreamTransport(Channel):
    """One frame per line in both directions.

    Blank lines are ignored. A line over the reader's limit is reported as a
    recoverable fault and reading continues with the next line. EOF ends the
    event stream.
    """

    def __init__(
        self,
        reader: asyncio.StreamReader | None = None,
        writer: LineWriter | None = None,
        *,
        max_line_bytes: int = DEFAULT_MAX_LINE_BYTES,
        connection_id: str = "stdio",
    ):
        self.connection_id = connection_id
        self.max_line_bytes = max_line_bytes
        self._reader = reader
        self._writer = writer
        self._write_lock = asyncio.Lock()
        self._closed = False

    async def start(self) -> None:
        if self._reader is None or self._writer is None:
            self._reader, self._writer = await open_stdio(self.max_line_bytes)
        logger.info("[stdio] transport ready")

    async def events(self) -> AsyncIterator[TransportEvent]:
        if self._reader is None:
            await self.start()
        while not self._closed:
            try:
                line = await self._reader.readuntil(b"\n")
            except asyncio.IncompleteReadError as e:
                line = e.partial
                if not line:
                    logger.info("[stdio] input closed")
                    return
            except asyncio.LimitOverrunError as e:
                yield TransportFault(
                    ValueError(f"line exceeds {self.max_line_bytes} bytes, skipped"),
                    self.connection_id,
                    recoverable=True,
                )
                if not await self._discard_line(e.consumed):
                    logger.info("[stdio] input closed")
                    return
                continue
            except OSError as e:
                yield TransportFault(e, self.connection_id, recoverable=False)
                return
            frame = line.strip()
            if frame:
                yield InboundFrame(frame, self.connection_id)

    async def _discard_line(self, consumed: int) -> bool:
        """Drop the rest of an over-long line, however many chunks it arrives in.

        Returns False when input ends before the line does.
        """
        while True:
            await self._reader.read(consumed)
            try:
                await self._reader.readuntil(b"\n")
                return True
            except asyncio.LimitOverrunError as e:
                consumed = e.consumed
            except asyncio.IncompleteReadError:
                return False

    async def send(self, message: dict[str, Any]) -> None:
        if self._closed or self._writer is None:
            raise ConnectionError("stdio transport is closed")
        data = (json.dumps(message, ensure_ascii=False, default=str) + "\n").encode("utf-8")
        async with self._write_lock:
            self._writer.write(data)
            await self._writer.drain()

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._writer is not None:
            self._writer.close()
