# /bundler_resilience/core/errors.py
from enum import IntEnum
from typing import Any


class RpcErrorCode(IntEnum):
    """Reserved JSON-RPC error codes (EIP-1474)."""
    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603
    INVALID_INPUT = -32000
    RESOURCE_NOT_FOUND = -32001
    RESOURCE_UNAVAILABLE = -32002
    TRANSACTION_REJECTED = -32003
    METHOD_NOT_SUPPORTED = -32004
    LIMIT_EXCEEDED = -32005
    JSONRPC_VERSION_NOT_SUPPORTED = -32006


class RpcError(Exception):
    """Structured JSON-RPC error carrying an optional numeric code and payload."""

    def __init__(self, message: str, code: int | None = None, data: Any = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.data = data

    def __repr__(self) -> str:
        return f"RpcError({self.message!r}, code={self.code!r})"


class WaitTimeoutError(TimeoutError):
    """Raised by wait_for() when the probe never produced a value in time."""
    pass


def require_cond(cond: bool, msg: str, code: int | None = None, data: Any = None) -> None:
    if not cond:
        raise RpcError(msg, code, data)
