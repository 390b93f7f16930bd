"""Built-in RPC methods. Each handler returns None when the method is unrelated."""

from __future__ import annotations

from typing import Any, Awaitable, Callable

from rustmcp.config.schema import ServerInfoConfig
from rustmcp.protocol.envelope import RpcEnvelope
from rustmcp.protocol.error_boundary import RpcResult
from rustmcp.tools.registry import ResourceTable, ToolRegistry
from rustmcp.utils.exceptions import InvalidParamsError


def try_handle_lifecycle_method(
    request: RpcEnvelope,
    *,
    server_info: ServerInfoConfig,
    tools: ToolRegistry,
    resources: ResourceTable,
) -> RpcResult | None:
    """Handle ``initialize`` and ``ping``."""
    if request.method == "initialize":
        return True, {
            "protocolVersion": server_info.protocol_version,
            "serverInfo": {"name": server_info.name, "version": server_info.version},
            "capabilities": {"tools": len(tools) > 0, "resources": len(resources) > 0},
        }, None

    if request.method == "ping":
        return True, {}, None

    return None


def try_handle_catalog_method(
    request: RpcEnvelope,
    *,
    tools: ToolRegistry,
    resources: ResourceTable,
) -> RpcResult | None:
    """Handle ``tools/list``, ``resources/list`` and ``resources/read``."""
    if request.method == "tools/list":
        return True, {"tools": tools.get_definitions()}, None

    if request.method == "resources/list":
        return True, {"resources": resources.get_summaries()}, None

    if request.method == "resources/read":
        params = request.params if isinstance(request.params, dict) else {}
        key = params.get("name") or params.get("uri")
        if not isinstance(key, str) or not key:
            return False, None, InvalidParamsError("resources/read requires a resource name or uri").to_rpc_error()
        resource = resources.get(key)
        if resource is None:
            return False, None, InvalidParamsError(f"Resource not found: {key}").to_rpc_error()
        return True, resource.to_schema(), None

    return None


async def try_handle_tool_call(
    request: RpcEnvelope,
    *,
    invoke_tool: Callable[[str, Any], Awaitable[Any]],
) -> RpcResult | None:
    """Handle ``tools/call``; tool arguments live in ``params.params`` (or ``params.arguments``)."""
    if request.method != "tools/call":
        return None

    params = request.params
    if not isinstance(params, dict):
        return False, None, InvalidParamsError("tools/call params must be an object").to_rpc_error()
    name = params.get("name")
    if not isinstance(name, str) or not name:
        return False, None, InvalidParamsError("tools/call requires a tool name").to_rpc_error()

    arguments = params["params"] if "params" in params else params.get("arguments")
    if arguments is None:
        arguments = {}
    return True, await invoke_tool(name, arguments), None
