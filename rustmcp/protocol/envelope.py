"""Inbound envelope decoding and dialect classification.

Two request shapes share every channel:

- RPC: ``{"version": "2.0", "id": ..., "method": ..., "params": ...}``
  (``jsonrpc`` is accepted in place of ``version``)
- legacy: ``{"type": ..., "data": ...}`` with an optional ``id``

The dialect is fixed here, once, and travels with the request as a
:class:`DialectTag` so the reply is always encoded in the same shape.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any

from rustmcp.utils.exceptions import InvalidRequestError, ParseError

RPC_VERSION = "2.0"
VERSION_KEYS = ("version", "jsonrpc")
NOTIFICATION_PREFIX = "notifications/"


class Dialect(str, Enum):
    RPC = "rpc"
    LEGACY = "legacy"


@dataclass(slots=True, frozen=True)
class DialectTag:
    dialect: Dialect
    id: Any = None
    has_id: bool = False
    version_key: str = "version"
    legacy_type: str | None = None


@dataclass(slots=True, frozen=True)
class RpcEnvelope:
    method: str
    params: Any = None
    id: Any = None
    has_id: bool = False
    version_key: str = "version"

    @property
    def tag(self) -> DialectTag:
        return DialectTag(Dialect.RPC, self.id, self.has_id, self.version_key)

    @property
    def is_notification(self) -> bool:
        return not self.has_id and self.method.startswith(NOTIFICATION_PREFIX)


@dataclass(slots=True, frozen=True)
class LegacyEnvelope:
    type: str
    data: Any = None
    id: Any = None
    has_id: bool = False

    @property
    def tag(self) -> DialectTag:
        return DialectTag(Dialect.LEGACY, self.id, self.has_id, legacy_type=self.type)


Envelope = RpcEnvelope | LegacyEnvelope


def decode_frame(raw: str | bytes | bytearray) -> Any:
    """Parse exactly one JSON value from a transport frame."""
    if isinstance(raw, (bytes, bytearray)):
        try:
            raw = bytes(raw).decode("utf-8")
        except UnicodeDecodeError as e:
            raise ParseError(f"frame is not valid UTF-8 ({e.reason})") from e
    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        raise ParseError(f"{e.msg} at line {e.lineno} column {e.colno}") from e


def is_valid_id(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, bool):
        return False
    return isinstance(value, (str, int, float))


def request_id_of(message: Any) -> Any:
    """Best-effort id for replies to messages that could not be classified."""
    if isinstance(message, dict) and is_valid_id(message.get("id")):
        return message.get("id")
    return None


def classify(message: Any) -> Envelope:
    """Resolve the dialect of a decoded message or raise :class:`InvalidRequestError`.

    RPC needs ``"2.0"`` under a version key and a non-empty ``method``; failing
    that, a string ``type`` makes the message legacy.
    """
    if not isinstance(message, dict):
        raise InvalidRequestError(f"expected a JSON object, got {type(message).__name__}")

    version_key = next((key for key in VERSION_KEYS if key in message), None)
    method = message.get("method")
    has_method = isinstance(method, str) and bool(method)
    if version_key is not None and message[version_key] == RPC_VERSION and has_method:
        request_id = message.get("id")
        if not is_valid_id(request_id):
            raise InvalidRequestError("id must be a string, a number or null")
        return RpcEnvelope(
            method=method,
            params=message.get("params"),
            id=request_id,
            has_id="id" in message,
            version_key=version_key,
        )

    msg_type = message.get("type")
    if isinstance(msg_type, str) and msg_type:
        request_id = message.get("id")
        has_id = "id" in message and is_valid_id(request_id)
        return LegacyEnvelope(
            type=msg_type,
            data=message.get("data"),
            id=request_id if has_id else None,
            has_id=has_id,
        )

    if version_key is None:
        raise InvalidRequestError()
    if message[version_key] != RPC_VERSION:
        raise InvalidRequestError(f"unsupported {version_key} {message[version_key]!r}")
    raise InvalidRequestError("method must be a non-empty string")
