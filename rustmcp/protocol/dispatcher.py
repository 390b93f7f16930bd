"""Protocol dispatcher: one raw frame in, at most one reply out.

The dispatcher holds no per-message state. Every reply is built from the
request's dialect tag and the handler outcome alone, so concurrent requests
cannot see each other's data.
"""

from __future__ import annotations

from functools import partial
from typing import Any

from loguru import logger

from rustmcp.config.schema import ServerInfoConfig
from rustmcp.protocol.encoder import encode_response, encode_rpc_error
from rustmcp.protocol.envelope import (
    Envelope,
    LegacyEnvelope,
    RpcEnvelope,
    classify,
    decode_frame,
    request_id_of,
)
from rustmcp.protocol.error_boundary import (
    RpcResult,
    protocol_error_result,
    unhandled_exception_result,
    unknown_method_result,
)
from rustmcp.protocol.methods import (
    try_handle_catalog_method,
    try_handle_lifecycle_method,
    try_handle_tool_call,
)
from rustmcp.protocol.pipeline import run_method_pipeline
from rustmcp.tools.base import ToolDescriptor
from rustmcp.tools.registry import ResourceTable, ToolRegistry
from rustmcp.utils.exceptions import (
    METHOD_NOT_FOUND,
    InvalidParamsError,
    InvalidRequestError,
    MethodNotFoundError,
    ParseError,
    ProtocolError,
)

SCHEMA_MESSAGE_TYPE = "mcp.schema"
SCHEMA_RESULT_TYPE = "mcp.schema.result"


class Dispatcher:
    """Route decoded envelopes to built-in methods or registered tools."""

    def __init__(
        self,
        tools: ToolRegistry,
        resources: ResourceTable,
        server_info: ServerInfoConfig | None = None,
    ):
        self.tools = tools
        self.resources = resources
        self.server_info = server_info or ServerInfoConfig()
        self._method_handlers = (
            partial(try_handle_lifecycle_method, server_info=self.server_info, tools=tools, resources=resources),
            partial(try_handle_catalog_method, tools=tools, resources=resources),
            partial(try_handle_tool_call, invoke_tool=self.invoke_tool),
        )

    async def dispatch(self, raw: str | bytes) -> dict[str, Any] | None:
        """Handle one transport frame. Returns the reply, or None for notifications."""
        try:
            message = decode_frame(raw)
        except ParseError as e:
            logger.warning("[dispatch] {}", e.message)
            return encode_rpc_error(e.to_rpc_error())

        try:
            envelope = classify(message)
        except InvalidRequestError as e:
            logger.warning("[dispatch] {}", e.message)
            return encode_rpc_error(e.to_rpc_error(), request_id_of(message))

        return await self.handle(envelope)

    async def handle(self, envelope: Envelope) -> dict[str, Any] | None:
        if isinstance(envelope, LegacyEnvelope):
            return await self._handle_legacy(envelope)

        ok, payload, error = await self._handle_rpc(envelope)
        if envelope.is_notification:
            logger.debug("[dispatch] notification {} accepted", envelope.method)
            return None
        return encode_response(envelope.tag, ok, payload, error)

    async def invoke_tool(self, name: str, arguments: Any) -> Any:
        """Resolve, validate and run one tool. Raises ProtocolError subclasses."""
        tool = self.tools.get(name)
        if tool is None:
            raise MethodNotFoundError(name)
        return await self._invoke(tool, arguments)

    def schema_payload(self) -> dict[str, Any]:
        return {
            "version": self.server_info.version,
            "tools": self.tools.get_definitions(),
            "resources": self.resources.get_definitions(),
        }

    async def _invoke(self, tool: ToolDescriptor, arguments: Any) -> Any:
        errors = tool.validate_params(arguments)
        if errors:
            raise InvalidParamsError("; ".join(errors), data={"tool": tool.name, "errors": errors})
        return await tool.handler(arguments)

    async def _handle_rpc(self, request: RpcEnvelope) -> RpcResult:
        try:
            result = await run_method_pipeline(self._method_handlers, request)
        except ProtocolError as e:
            return protocol_error_result(method=request.method, exc=e, log_warning=logger.warning)
        except Exception as e:
            return unhandled_exception_result(method=request.method, exc=e, log_exception=logger.exception)
        if result is None:
            logger.warning("[dispatch] unknown method {}", request.method)
            return unknown_method_result(method=request.method)
        return result

    async def _handle_legacy(self, request: LegacyEnvelope) -> dict[str, Any]:
        tag = request.tag
        if request.type == SCHEMA_MESSAGE_TYPE:
            return encode_response(tag, True, self.schema_payload(), None, result_type=SCHEMA_RESULT_TYPE)

        tool = self.tools.get(request.type)
        if tool is None:
            logger.warning("[dispatch] unsupported message type {}", request.type)
            error = {"code": METHOD_NOT_FOUND, "message": f"Unsupported message type: {request.type}"}
            return encode_response(tag, False, None, error)

        arguments = request.data if request.data is not None else {}
        try:
            ok, payload, error = True, await self._invoke(tool, arguments), None
        except ProtocolError as e:
            ok, payload, error = protocol_error_result(method=request.type, exc=e, log_warning=logger.warning)
        except Exception as e:
            ok, payload, error = unhandled_exception_result(
                method=request.type, exc=e, log_exception=logger.exception
            )
        return encode_response(tag, ok, payload, error, result_type=tool.legacy_result_type)
