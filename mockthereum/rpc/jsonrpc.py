"""
JSON-RPC 2.0 building blocks on top of the mock server.

- RpcCallMatcher: match by method name and positional params
- RpcResponseHandler / RpcErrorResponseHandler: reply with a result or error
  envelope, echoing the request id
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

from mockthereum.server.handlers import HandlerContext, HandlerResult, RequestHandler, streamed_json
from mockthereum.server.matchers import JsonBodyFlexibleMatcher
from mockthereum.server.requests import CompletedRequest

logger = logging.getLogger(__name__)


DEFAULT_ERROR_CODE = -32099
DEFAULT_ERROR_DATA = "0x"


def success_response(id: Any, result: Any) -> dict:
    return {"jsonrpc": "2.0", "id": id, "result": result}


def error_response(
    id: Any,
    message: str,
    code: int = DEFAULT_ERROR_CODE,
    data: Any = DEFAULT_ERROR_DATA,
    name: Optional[str] = None,
) -> dict:
    error = {"code": code, "message": message, "data": data}
    if name is not None:
        error["name"] = name
    return {"jsonrpc": "2.0", "id": id, "error": error}


def int_to_hex(value: int) -> str:
    return hex(value)


# ---------------------------------------------------------------------------
# Request accessors
# ---------------------------------------------------------------------------

def request_id(request: CompletedRequest) -> Any:
    body = request.json()
    return body.get("id") if isinstance(body, dict) else None


def first_param(request: CompletedRequest) -> dict:
    """The first positional param if it is an object (call/tx params), else {}."""
    body = request.json()
    if not isinstance(body, dict):
        return {}
    params = body.get("params")
    if isinstance(params, list) and params and isinstance(params[0], dict):
        return params[0]
    return {}


def call_data(request: CompletedRequest) -> Optional[str]:
    """Hex call-data of an eth_call / eth_sendTransaction request."""
    params = first_param(request)
    data = params.get("data", params.get("input"))
    return data if isinstance(data, str) else None


# ---------------------------------------------------------------------------
# Matchers & handlers
# ---------------------------------------------------------------------------

class RpcCallMatcher(JsonBodyFlexibleMatcher):
    """Match a JSON-RPC call by method and (optionally) leading params.

    Object params match partially: only the given keys are compared.
    """

    def __init__(self, method: str, params: Sequence[Any] = ()) -> None:
        expected: dict[str, Any] = {"jsonrpc": "2.0", "method": method}
        if params:
            expected["params"] = list(params)
        super().__init__(expected)
        self.method = method


class RpcResponseHandler(RequestHandler):
    def __init__(self, result: Any) -> None:
        self.result = result

    async def handle(self, request: CompletedRequest, context: HandlerContext) -> HandlerResult:
        return HandlerResult(streamed_json(success_response(request_id(request), self.result)))


class RpcErrorResponseHandler(RequestHandler):
    def __init__(
        self,
        message: str,
        code: int = DEFAULT_ERROR_CODE,
        data: Any = DEFAULT_ERROR_DATA,
        name: Optional[str] = None,
    ) -> None:
        self.message = message
        self.code = code
        self.data = data
        self.name = name

    async def handle(self, request: CompletedRequest, context: HandlerContext) -> HandlerResult:
        logger.debug("Responding to request %s with error: %s", request.id, self.message)
        return HandlerResult(streamed_json(error_response(
            request_id(request), self.message, code=self.code, data=self.data, name=self.name
        )))
