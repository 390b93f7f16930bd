"""Sequential method-handler pipeline for RPC requests."""

from __future__ import annotations

import inspect
from typing import Awaitable, Callable, Iterable

from rustmcp.protocol.envelope import RpcEnvelope
from rustmcp.protocol.error_boundary import RpcResult

HandlerResult = RpcResult | None
MethodHandler = Callable[[RpcEnvelope], Awaitable[HandlerResult] | HandlerResult]


async def run_method_pipeline(handlers: Iterable[MethodHandler], request: RpcEnvelope) -> HandlerResult:
    """Offer the request to each handler in order; the first non-None result wins."""
    for handler in handlers:
        outcome = handler(request)
        result = await outcome if inspect.isawaitable(outcome) else outcome
        if result is not None:
            return result
    return None
