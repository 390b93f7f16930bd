"""Common error-boundary helpers for request dispatch."""

from __future__ import annotations

from typing import Any, Callable

from rustmcp.utils.exceptions import (
    InternalError,
    MethodNotFoundError,
    ProtocolError,
    classify_exception,
    sanitize_error_message,
)

RpcResult = tuple[bool, Any | None, dict[str, Any] | None]


def unknown_method_result(*, method: str) -> RpcResult:
    """Build standardized unknown-method response."""
    return False, None, MethodNotFoundError(method).to_rpc_error()


def protocol_error_result(
    *,
    method: str,
    exc: ProtocolError,
    log_warning: Callable[..., None],
) -> RpcResult:
    """Map a ProtocolError to its wire error object."""
    log_warning("Request {} failed with {}: {}", method, exc.code, exc.message)
    return False, None, exc.to_rpc_error()


def unhandled_exception_result(
    *,
    method: str,
    exc: Exception,
    log_exception: Callable[..., None],
) -> RpcResult:
    """Map unexpected exceptions to INTERNAL_ERROR responses without leaking secrets."""
    code, category = classify_exception(exc)
    sanitized = sanitize_error_message(str(exc)) or type(exc).__name__
    log_exception("Request {} failed with [{}]: {}", method, code, sanitized)
    error = InternalError(sanitized)
    error.data = {"errorCode": code, "category": category.value}
    return False, None, error.to_rpc_error()
