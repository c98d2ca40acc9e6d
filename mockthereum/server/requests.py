"""Buffered view of an inbound HTTP request, shared by matchers, handlers and listeners."""

from __future__ import annotations

import json
import time
import uuid
from dataclasses import dataclass, field
from typing import Any


_UNPARSED = object()


@dataclass
class CompletedRequest:
    method: str
    path: str
    headers: dict[str, str]
    body: bytes
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: float = field(default_factory=time.time)
    _json: Any = field(default=_UNPARSED, repr=False, compare=False)

    def json(self) -> Any:
        """Parsed JSON body, or None if the body is not valid JSON."""
        if self._json is _UNPARSED:
            try:
                self._json = json.loads(self.body)
            except (json.JSONDecodeError, UnicodeDecodeError):
                self._json = None
        return self._json
