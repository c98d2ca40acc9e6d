"""
Rule-based mock HTTP server.

Every inbound request is offered to the registered listeners, then to the
registered rules in priority order (most recently added first within a
priority level). The first rule whose matchers all pass handles it.

Served by uvicorn as a task on the caller's event loop.
"""

from __future__ import annotations

import asyncio
import inspect
import itertools
import logging
import socket
from dataclasses import dataclass
from typing import Any, Callable, Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse, Response

from mockthereum.common.config import DEFAULT_HOST
from mockthereum.server.handlers import ForwardHandler, HandlerContext
from mockthereum.server.requests import CompletedRequest
from mockthereum.server.rules import MockedEndpoint, RequestRule, RulePriority

logger = logging.getLogger(__name__)


HTTP_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "HEAD"]

EVENTS = ("request",)


@dataclass
class _RegisteredRule:
    rule: RequestRule
    endpoint: MockedEndpoint
    order: int


class MockServer:
    """HTTP server answering requests from a mutable set of rules."""

    def __init__(self, host: str = DEFAULT_HOST) -> None:
        self.host = host
        self.app = FastAPI(
            title="mockthereum mock server", docs_url=None, redoc_url=None, openapi_url=None
        )
        self._rules: list[_RegisteredRule] = []
        self._order = itertools.count()
        self._listeners: dict[str, list[Callable[[CompletedRequest], Any]]] = {
            event: [] for event in EVENTS
        }
        self._server: Optional[uvicorn.Server] = None
        self._serve_task: Optional[asyncio.Task] = None
        self._stopping: Optional[asyncio.Event] = None
        self._port: Optional[int] = None
        self._setup_routes()

    def _setup_routes(self) -> None:
        @self.app.api_route("/{path:path}", methods=HTTP_METHODS)
        async def handle_any(request: Request) -> Response:
            return await self._dispatch(request)

    # -----------------------------------------------------------------
    # Lifecycle
    # -----------------------------------------------------------------

    @property
    def running(self) -> bool:
        return self._server is not None

    @property
    def port(self) -> int:
        if self._port is None:
            raise RuntimeError("Mock server is not running")
        return self._port

    @property
    def url(self) -> str:
        return f"http://{self.host}:{self.port}"

    async def start(self, port: Optional[int] = None) -> None:
        if self._server is not None:
            raise RuntimeError("Mock server is already running")

        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            sock.bind((self.host, port or 0))
        except OSError:
            sock.close()
            raise

        config = uvicorn.Config(
            self.app,
            log_level="warning",
            log_config=None,
            access_log=False,
            lifespan="off",
            loop="asyncio",
            timeout_graceful_shutdown=5,
        )
        self._stopping = asyncio.Event()
        self._server = uvicorn.Server(config)
        self._port = sock.getsockname()[1]
        self._serve_task = asyncio.create_task(self._server.serve(sockets=[sock]))

        while not self._server.started:
            if self._serve_task.done():
                task = self._serve_task
                self._clear_lifecycle()
                sock.close()
                task.result()
                raise RuntimeError("Mock server exited during startup")
            await asyncio.sleep(0.01)

        logger.info("Mock server listening on %s", self.url)

    async def stop(self) -> None:
        if self._server is None:
            return

        # Release held (timeout) connections so uvicorn can drain them
        self._stopping.set()
        self._server.should_exit = True
        task = self._serve_task
        try:
            await task
        finally:
            self._clear_lifecycle()
            self._rules.clear()
        logger.info("Mock server stopped")

    async def reset(self) -> None:
        self._rules.clear()
        logger.debug("Mock server rules cleared")

    def _clear_lifecycle(self) -> None:
        self._server = None
        self._serve_task = None
        self._port = None

    # -----------------------------------------------------------------
    # Rules & listeners
    # -----------------------------------------------------------------

    async def add_request_rule(self, rule: RequestRule) -> MockedEndpoint:
        endpoint = MockedEndpoint()
        self._rules.append(_RegisteredRule(rule=rule, endpoint=endpoint, order=next(self._order)))
        logger.debug(
            "Registered %s rule %s (%d matcher(s), %s)",
            rule.priority.name, endpoint.id, len(rule.matchers), type(rule.handler).__name__,
        )
        return endpoint

    async def add_request_rules(self, *rules: RequestRule) -> list[MockedEndpoint]:
        return [await self.add_request_rule(rule) for rule in rules]

    def for_unmatched_request(self) -> UnmatchedRequestRuleBuilder:
        return UnmatchedRequestRuleBuilder(self)

    def on(self, event: str, callback: Callable[[CompletedRequest], Any]) -> None:
        if event not in self._listeners:
            raise ValueError(f"Unknown event: {event!r} (expected one of {EVENTS})")
        self._listeners[event].append(callback)

    # -----------------------------------------------------------------
    # Dispatch
    # -----------------------------------------------------------------

    async def _dispatch(self, request: Request) -> Response:
        completed = CompletedRequest(
            method=request.method,
            path=request.url.path,
            headers=dict(request.headers),
            body=await request.body(),
        )

        for listener in list(self._listeners["request"]):
            result = listener(completed)
            if inspect.isawaitable(result):
                await result

        registered = await self._find_rule(completed)
        if registered is None:
            logger.warning(
                "No rule matched %s %s: %s", completed.method, completed.path, completed.body[:200]
            )
            return PlainTextResponse(
                "No rules were found matching this request.\n"
                f"This request was: {completed.method} {completed.path}\n",
                status_code=503,
            )

        logger.debug("Request %s handled by rule %s", completed.id, registered.endpoint.id)
        registered.endpoint.record(completed)
        result = await registered.rule.handler.handle(
            completed, HandlerContext(stopping=self._stopping)
        )

        # Follow-up rules must exist before the client sees this response
        if result.follow_up_rules:
            await self.add_request_rules(*result.follow_up_rules)
        return result.response

    async def _find_rule(self, request: CompletedRequest) -> Optional[_RegisteredRule]:
        candidates = sorted(
            self._rules, key=lambda r: (r.rule.priority, r.order), reverse=True
        )
        for registered in candidates:
            if await registered.rule.matches(request):
                return registered
        return None


class UnmatchedRequestRuleBuilder:
    """Builds the catch-all FALLBACK rule for requests no other rule handles."""

    def __init__(self, server: MockServer) -> None:
        self._server = server

    async def then_forward_to(self, url: str) -> MockedEndpoint:
        return await self._server.add_request_rule(RequestRule(
            matchers=[], handler=ForwardHandler(url), priority=RulePriority.FALLBACK
        ))
