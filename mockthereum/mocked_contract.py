"""
Mocked contracts.

Returned when a contract call or transaction rule is registered, and used to
inspect the requests that rule has handled.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Sequence

from mockthereum.common.abi import decode_abi
from mockthereum.rpc.jsonrpc import call_data, first_param
from mockthereum.server.requests import CompletedRequest
from mockthereum.server.rules import MockedEndpoint


@dataclass
class MockedContractRequest:
    raw_request: CompletedRequest
    to: Optional[str]
    from_: Optional[str]
    value: Optional[Any]
    # Decoded call params, when param types are known
    params: Optional[list]


class MockedContract:
    def __init__(self, endpoint: MockedEndpoint, param_types: Optional[Sequence[str]] = None) -> None:
        self.endpoint = endpoint
        self.param_types = list(param_types) if param_types is not None else None

    async def get_requests(self) -> list[MockedContractRequest]:
        """Requests seen by this rule, in arrival order.

        For each request this includes the ``to`` and ``from_`` addresses and
        the ``value`` sent (None where absent, e.g. ``from_``/``value`` for
        most eth_call requests), plus the call params decoded with the types
        given to ``for_function`` or ``with_params``.
        """
        requests = await self.endpoint.get_seen_requests()
        return [self._describe(request) for request in requests]

    def _describe(self, request: CompletedRequest) -> MockedContractRequest:
        tx = first_param(request)
        data = call_data(request)

        params = None
        if self.param_types is not None and data:
            params = decode_abi(self.param_types, "0x" + data[10:])

        return MockedContractRequest(
            raw_request=request,
            to=tx.get("to"),
            from_=tx.get("from"),
            value=tx.get("value"),
            params=params,
        )
