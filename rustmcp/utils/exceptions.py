"""
Exception hierarchy and error handling utilities for rustmcp.

Provides:
- Custom exception classes with error codes
- JSON-RPC protocol errors that know their wire code
- Safe error message formatting (no sensitive data leak)
- Classification of arbitrary exceptions
"""

from __future__ import annotations

import asyncio
import json
import re
from enum import Enum
from typing import Any

PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603


class ErrorCategory(Enum):
    """Error categories for classification."""
    RECOVERABLE = "recoverable"
    FATAL = "fatal"
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    PERMISSION = "permission"
    TIMEOUT = "timeout"
    PROTOCOL = "protocol"


class RustMcpError(Exception):
    """Base exception for all rustmcp errors."""

    def __init__(
        self,
        message: str,
        code: str = "UNKNOWN_ERROR",
        category: ErrorCategory = ErrorCategory.FATAL,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.code,
            "message": self.message,
            "category": self.category.value,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


class ConfigurationError(RustMcpError):
    """Invalid startup wiring (duplicate tool, registry mutated after freeze, bad config)."""

    def __init__(self, message: str, setting: str | None = None):
        details = {"setting": setting} if setting else {}
        super().__init__(message, code="CONFIGURATION_ERROR", category=ErrorCategory.FATAL, details=details)


class ProtocolError(RustMcpError):
    """Error that is reported to the client as a JSON-RPC error object."""

    rpc_code: int = INTERNAL_ERROR
    label: str = "INTERNAL_ERROR"
    category_default: ErrorCategory = ErrorCategory.PROTOCOL

    def __init__(self, message: str, data: Any = None):
        super().__init__(message, code=self.label, category=self.category_default)
        self.data = data

    def to_rpc_error(self) -> dict[str, Any]:
        error: dict[str, Any] = {"code": self.rpc_code, "message": self.message}
        if self.data is not None:
            error["data"] = self.data
        return error


class ParseError(ProtocolError):
    """Inbound frame is not valid JSON."""
    rpc_code = PARSE_ERROR
    label = "PARSE_ERROR"

    def __init__(self, detail: str):
        super().__init__(f"Parse error: {detail}")


class InvalidRequestError(ProtocolError):
    """Inbound JSON matches neither envelope dialect."""
    rpc_code = INVALID_REQUEST
    label = "INVALID_REQUEST"

    def __init__(self, detail: str = "message is neither an RPC request nor a typed message"):
        super().__init__(f"Invalid Request: {detail}")


class MethodNotFoundError(ProtocolError):
    """Unknown method or tool name."""
    rpc_code = METHOD_NOT_FOUND
    label = "METHOD_NOT_FOUND"
    category_default = ErrorCategory.NOT_FOUND

    def __init__(self, method: str):
        super().__init__(f"Method not found: {method}")
        self.method = method


class InvalidParamsError(ProtocolError):
    """Parameters failed schema validation or are structurally wrong."""
    rpc_code = INVALID_PARAMS
    label = "INVALID_PARAMS"
    category_default = ErrorCategory.VALIDATION

    def __init__(self, detail: str, data: Any = None):
        super().__init__(f"Invalid params: {detail}", data=data)


class InternalError(ProtocolError):
    """A handler failed unexpectedly."""
    rpc_code = INTERNAL_ERROR
    label = "INTERNAL_ERROR"
    category_default = ErrorCategory.FATAL

    def __init__(self, detail: str):
        super().__init__(f"Internal error: {detail}")


_SENSITIVE_PATTERNS = [
    re.compile(r"(api[_-]?key|token|secret|password|auth)[=:]\s*['\"]?([^\s'\"]+)['\"]?", re.IGNORECASE),
    re.compile(r"bearer\s+[a-zA-Z0-9\-._~+/]+=*", re.IGNORECASE),
    re.compile(r"[a-zA-Z0-9]{32,}"),
    re.compile(r"sk-[a-zA-Z0-9]{20,}"),
]


def sanitize_error_message(message: str, replacement: str = "[REDACTED]") -> str:
    """Remove sensitive information from error messages."""
    sanitized = message
    for pattern in _SENSITIVE_PATTERNS:
        sanitized = pattern.sub(replacement, sanitized)
    return sanitized


def classify_exception(exc: BaseException) -> tuple[str, ErrorCategory]:
    """Classify an exception and return (error_code, category)."""
    if isinstance(exc, RustMcpError):
        return exc.code, exc.category

    if isinstance(exc, FileNotFoundError):
        return "FILE_NOT_FOUND", ErrorCategory.NOT_FOUND

    if isinstance(exc, PermissionError):
        return "PERMISSION_DENIED", ErrorCategory.PERMISSION

    if isinstance(exc, asyncio.TimeoutError):
        return "TIMEOUT", ErrorCategory.TIMEOUT

    if isinstance(exc, json.JSONDecodeError):
        return "JSON_PARSE_ERROR", ErrorCategory.VALIDATION

    if isinstance(exc, (ValueError, KeyError, TypeError)):
        return type(exc).__name__.upper(), ErrorCategory.VALIDATION

    if isinstance(exc, (ConnectionError, OSError)):
        return "IO_ERROR", ErrorCategory.RECOVERABLE

    exc_str = str(exc).lower()
    if "timeout" in exc_str or "timed out" in exc_str:
        return "TIMEOUT", ErrorCategory.TIMEOUT

    return "INTERNAL_ERROR", ErrorCategory.FATAL
