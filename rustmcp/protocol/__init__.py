"""Envelope decoding, dispatch and reply encoding."""

from rustmcp.protocol.dispatcher import Dispatcher
from rustmcp.protocol.envelope import Dialect, DialectTag, LegacyEnvelope, RpcEnvelope

__all__ = ["Dialect", "DialectTag", "Dispatcher", "LegacyEnvelope", "RpcEnvelope"]
