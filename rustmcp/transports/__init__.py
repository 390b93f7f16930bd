"""Transports: stdio stream and WebSocket server."""

from rustmcp.transports.base import Channel, InboundFrame, TransportEvent, TransportFault
from rustmcp.transports.stdio import StreamTransport
from rustmcp.transports.websocket import WebSocketConnection, WebSocketTransport

__all__ = [
    "Channel",
    "InboundFrame",
    "StreamTransport",
    "TransportEvent",
    "TransportFault",
    "WebSocketConnection",
    "WebSocketTransport",
]
