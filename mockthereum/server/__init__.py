"""Generic rule-based HTTP mocking server."""

from mockthereum.server.handlers import (
    CallbackHandler,
    CloseConnectionHandler,
    ForwardHandler,
    HandlerContext,
    HandlerResult,
    RequestHandler,
    TimeoutHandler,
    streamed_json,
)
from mockthereum.server.matchers import CallbackMatcher, JsonBodyFlexibleMatcher, RequestMatcher
from mockthereum.server.requests import CompletedRequest
from mockthereum.server.rules import MockedEndpoint, RequestRule, RulePriority
from mockthereum.server.server import MockServer

__all__ = [
    "CallbackHandler",
    "CallbackMatcher",
    "CloseConnectionHandler",
    "CompletedRequest",
    "ForwardHandler",
    "HandlerContext",
    "HandlerResult",
    "JsonBodyFlexibleMatcher",
    "MockServer",
    "MockedEndpoint",
    "RequestHandler",
    "RequestMatcher",
    "RequestRule",
    "RulePriority",
    "TimeoutHandler",
    "streamed_json",
]
