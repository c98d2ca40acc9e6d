"""JSON-RPC matchers and response handlers."""

from .jsonrpc import (
    RpcCallMatcher,
    RpcErrorResponseHandler,
    RpcResponseHandler,
    call_data,
    error_response,
    first_param,
    int_to_hex,
    request_id,
    success_response,
)

__all__ = [
    "RpcCallMatcher",
    "RpcErrorResponseHandler",
    "RpcResponseHandler",
    "call_data",
    "error_response",
    "first_param",
    "int_to_hex",
    "request_id",
    "success_response",
]
