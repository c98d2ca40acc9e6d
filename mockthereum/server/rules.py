"""Rule definitions and the endpoint handles returned when rules are registered."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Sequence

from mockthereum.server.handlers import RequestHandler
from mockthereum.server.matchers import RequestMatcher
from mockthereum.server.requests import CompletedRequest


class RulePriority(IntEnum):
    FALLBACK = 0
    NORMAL = 1


@dataclass(frozen=True)
class RequestRule:
    matchers: Sequence[RequestMatcher]
    handler: RequestHandler
    priority: RulePriority = RulePriority.NORMAL

    async def matches(self, request: CompletedRequest) -> bool:
        for matcher in self.matchers:
            if not await matcher.matches(request):
                return False
        return True


@dataclass
class MockedEndpoint:
    """Handle for a registered rule, recording every request it handled."""

    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    _seen: list[CompletedRequest] = field(default_factory=list, repr=False)

    def record(self, request: CompletedRequest) -> None:
        self._seen.append(request)

    async def get_seen_requests(self) -> list[CompletedRequest]:
        return list(self._seen)
