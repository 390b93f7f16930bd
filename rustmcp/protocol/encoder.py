"""Reply encoding. Pure functions of the request's dialect tag and the outcome."""

from __future__ import annotations

from typing import Any

from rustmcp.protocol.envelope import RPC_VERSION, Dialect, DialectTag

LEGACY_ERROR_TYPE = "error"


def encode_response(
    tag: DialectTag,
    ok: bool,
    payload: Any,
    error: dict[str, Any] | None,
    *,
    result_type: str | None = None,
) -> dict[str, Any]:
    """Build the reply for one request in the request's own dialect.

    The id is copied as-is; numbers stay numbers and strings stay strings.
    """
    if tag.dialect is Dialect.RPC:
        message: dict[str, Any] = {tag.version_key: RPC_VERSION, "id": tag.id}
        if ok:
            message["result"] = payload
        else:
            message["error"] = error or {}
        return message

    if ok:
        message = {"type": result_type or f"{tag.legacy_type}.result", "data": payload}
    else:
        message = {"type": LEGACY_ERROR_TYPE, "data": _legacy_error_data(error or {})}
    if tag.has_id:
        message["id"] = tag.id
    return message


def encode_rpc_error(error: dict[str, Any], request_id: Any = None) -> dict[str, Any]:
    """RPC-shape error reply for frames whose dialect could not be determined."""
    return encode_response(DialectTag(Dialect.RPC, request_id, True), False, None, error)


def _legacy_error_data(error: dict[str, Any]) -> dict[str, Any]:
    data: dict[str, Any] = {"message": str(error.get("message", ""))}
    if error.get("data") is not None:
        data["details"] = error["data"]
    return data
