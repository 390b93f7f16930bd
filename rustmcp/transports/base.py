"""Transport channel contract.

A channel is one bidirectional message path: the stdio stream or a single
WebSocket connection. Inbound traffic is consumed as an async iterator of
events instead of callbacks; outbound replies go through ``send``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, AsyncIterator


@dataclass(slots=True, frozen=True)
class InboundFrame:
    """One raw message; decoding is left to the dispatcher."""

    raw: str | bytes
    connection_id: str


@dataclass(slots=True, frozen=True)
class TransportFault:
    """An I/O problem on a channel. Non-recoverable faults end the channel's session."""

    error: BaseException
    connection_id: str
    recoverable: bool = True


TransportEvent = InboundFrame | TransportFault


class Channel(ABC):
    """Abstract message channel consumed by a session."""

    connection_id: str

    @abstractmethod
    def events(self) -> AsyncIterator[TransportEvent]:
        """Yield inbound frames and faults until the peer goes away."""

    @abstractmethod
    async def send(self, message: dict[str, Any]) -> None:
        """Write one JSON value as one frame."""

    @abstractmethod
    async def close(self) -> None:
        """Release the underlying resource. Safe to call more than once."""
