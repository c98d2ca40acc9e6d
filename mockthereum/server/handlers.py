"""
Request handlers.

A handler turns a matched request into a HandlerResult: the HTTP response
to send, plus any follow-up rules the server must register before that
response goes out.
"""

from __future__ import annotations

import asyncio
import inspect
import json
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Union

import httpx
from starlette.responses import PlainTextResponse, Response, StreamingResponse

from mockthereum.server.requests import CompletedRequest

if TYPE_CHECKING:
    from mockthereum.server.rules import RequestRule

logger = logging.getLogger(__name__)


@dataclass
class HandlerContext:
    # Set once the owning server begins shutting down
    stopping: asyncio.Event


@dataclass
class HandlerResult:
    response: Response
    follow_up_rules: list[RequestRule] = field(default_factory=list)


class RequestHandler:
    async def handle(self, request: CompletedRequest, context: HandlerContext) -> HandlerResult:
        raise NotImplementedError


def streamed_json(payload: Any, status_code: int = 200) -> StreamingResponse:
    """JSON response sent with chunked transfer encoding, like a real node."""
    body = json.dumps(payload).encode()

    async def _chunks():
        yield body

    return StreamingResponse(_chunks(), status_code=status_code, media_type="application/json")


class CallbackHandler(RequestHandler):
    """Build the result with a (sync or async) callback."""

    def __init__(
        self,
        callback: Callable[[CompletedRequest], Union[HandlerResult, Awaitable[HandlerResult]]],
    ) -> None:
        self.callback = callback

    async def handle(self, request: CompletedRequest, context: HandlerContext) -> HandlerResult:
        result = self.callback(request)
        if inspect.isawaitable(result):
            result = await result
        return result


class _AbortConnectionResponse(Response):
    """Start the response and return without a body.

    uvicorn closes the transport when an app returns mid-response, so the
    client sees the connection drop instead of a reply.
    """

    def __init__(self) -> None:
        super().__init__(status_code=200)

    async def __call__(self, scope, receive, send) -> None:
        await send({"type": "http.response.start", "status": 200, "headers": []})


class CloseConnectionHandler(RequestHandler):
    async def handle(self, request: CompletedRequest, context: HandlerContext) -> HandlerResult:
        return HandlerResult(_AbortConnectionResponse())


class TimeoutHandler(RequestHandler):
    """Never respond. The connection is only released (and dropped) on shutdown."""

    async def handle(self, request: CompletedRequest, context: HandlerContext) -> HandlerResult:
        await context.stopping.wait()
        return HandlerResult(_AbortConnectionResponse())


class ForwardHandler(RequestHandler):
    """Proxy the raw request body to another HTTP server."""

    def __init__(self, target_url: str, timeout: float = 30.0) -> None:
        self.target_url = target_url
        self.timeout = timeout

    async def handle(self, request: CompletedRequest, context: HandlerContext) -> HandlerResult:
        if request.path in ("", "/"):
            url = self.target_url
        else:
            url = self.target_url.rstrip("/") + request.path
        headers = {"content-type": request.headers.get("content-type", "application/json")}

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                upstream = await client.request(
                    request.method, url, content=request.body, headers=headers
                )
        except httpx.HTTPError as exc:
            logger.warning("Failed to forward request to %s: %s", url, exc)
            return HandlerResult(
                PlainTextResponse(f"Error forwarding request to {url}: {exc}", status_code=502)
            )

        return HandlerResult(Response(
            content=upstream.content,
            status_code=upstream.status_code,
            media_type=upstream.headers.get("content-type"),
        ))
