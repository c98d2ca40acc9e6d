"""
Matcher accumulation and the terminal steps shared by every rule builder.

A RuleChain collects the matchers of the rule being built. A terminal step
turns the chain plus a handler into one RequestRule and registers it.
"""

from __future__ import annotations

from typing import Awaitable, Callable, Iterable

from mockthereum.server.handlers import CloseConnectionHandler, RequestHandler, TimeoutHandler
from mockthereum.server.matchers import RequestMatcher
from mockthereum.server.rules import MockedEndpoint, RequestRule


RegisterRule = Callable[[RequestRule], Awaitable[MockedEndpoint]]


class ArgumentError(ValueError):
    """A rule builder was called without the information it needs."""


class RuleChain:
    def __init__(self, register: RegisterRule, matchers: Iterable[RequestMatcher] = ()) -> None:
        self.register = register
        self.matchers: list[RequestMatcher] = list(matchers)

    def add(self, matcher: RequestMatcher) -> None:
        self.matchers.append(matcher)

    def build(self, handler: RequestHandler) -> RequestRule:
        return RequestRule(matchers=tuple(self.matchers), handler=handler)


async def respond(chain: RuleChain, handler: RequestHandler) -> MockedEndpoint:
    return await chain.register(chain.build(handler))


async def timeout(chain: RuleChain) -> MockedEndpoint:
    return await respond(chain, TimeoutHandler())


async def close_connection(chain: RuleChain) -> MockedEndpoint:
    return await respond(chain, CloseConnectionHandler())
