"""
Mock node configuration.

Selects what happens to requests that no user rule matches: answer them
with deterministic stub values, or forward them to a real node.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Union


STUB = "stub"

DEFAULT_HOST = "127.0.0.1"


@dataclass(frozen=True)
class ProxyConfig:
    proxy_to: str


@dataclass
class NodeOptions:
    unmatched_requests: Union[str, ProxyConfig, Mapping[str, Any]] = STUB
    host: str = DEFAULT_HOST

    def __post_init__(self) -> None:
        self.unmatched_requests = _normalize_unmatched(self.unmatched_requests)

    @property
    def proxy(self) -> ProxyConfig | None:
        if isinstance(self.unmatched_requests, ProxyConfig):
            return self.unmatched_requests
        return None


def _normalize_unmatched(value: Any) -> Union[str, ProxyConfig]:
    if value == STUB or isinstance(value, ProxyConfig):
        return value
    if isinstance(value, Mapping) and isinstance(value.get("proxy_to"), str):
        return ProxyConfig(proxy_to=value["proxy_to"])
    raise ValueError(
        f"unmatched_requests must be 'stub' or {{'proxy_to': <url>}}, got {value!r}"
    )
