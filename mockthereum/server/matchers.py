"""
Request matchers.

A rule matches a request only if every one of its matchers does.
"""

from __future__ import annotations

import inspect
from typing import Any, Awaitable, Callable, Union

from mockthereum.server.requests import CompletedRequest


class RequestMatcher:
    async def matches(self, request: CompletedRequest) -> bool:
        raise NotImplementedError


class JsonBodyFlexibleMatcher(RequestMatcher):
    """Match requests whose JSON body contains ``expected``.

    Dict keys absent from ``expected`` are wildcards; lists match
    position by position over the expected prefix.
    """

    def __init__(self, expected: Any) -> None:
        self.expected = expected

    async def matches(self, request: CompletedRequest) -> bool:
        body = request.json()
        if body is None:
            return False
        return is_subset_match(body, self.expected)

    def __repr__(self) -> str:
        return f"JsonBodyFlexibleMatcher({self.expected!r})"


class CallbackMatcher(RequestMatcher):
    """Match requests with an arbitrary (sync or async) predicate."""

    def __init__(
        self,
        callback: Callable[[CompletedRequest], Union[bool, Awaitable[bool]]],
    ) -> None:
        self.callback = callback

    async def matches(self, request: CompletedRequest) -> bool:
        result = self.callback(request)
        if inspect.isawaitable(result):
            result = await result
        return bool(result)


def is_subset_match(actual: Any, expected: Any) -> bool:
    if isinstance(expected, dict):
        if not isinstance(actual, dict):
            return False
        return all(
            key in actual and is_subset_match(actual[key], value)
            for key, value in expected.items()
        )
    if isinstance(expected, list):
        if not isinstance(actual, list) or len(actual) < len(expected):
            return False
        return all(is_subset_match(a, e) for a, e in zip(actual, expected))
    return actual == expected
