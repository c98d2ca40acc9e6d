"""
Mock Ethereum node.

Wraps a MockServer with Ethereum JSON-RPC rule builders, default ("stub")
answers for the common queries, or a forwarding rule to a real node, and a
log of every request received.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from mockthereum.builders.call import CallRuleBuilder
from mockthereum.builders.single_value import (
    SingleValueRuleBuilder,
    balance_rule,
    block_number_rule,
    gas_price_rule,
)
from mockthereum.builders.transaction import TransactionReceiptRuleBuilder, TransactionRuleBuilder
from mockthereum.common.config import NodeOptions
from mockthereum.rpc.jsonrpc import RpcCallMatcher, RpcErrorResponseHandler, RpcResponseHandler
from mockthereum.server.handlers import RequestHandler
from mockthereum.server.requests import CompletedRequest
from mockthereum.server.rules import RequestRule, RulePriority
from mockthereum.server.server import MockServer

logger = logging.getLogger(__name__)


UNMATCHED_CALL_MESSAGE = "No Mockthereum rules found matching Ethereum contract call"
UNMATCHED_TRANSACTION_MESSAGE = "No Mockthereum rules found matching Ethereum transaction"

DEFAULT_BLOCK_NUMBER = "0x1"
DEFAULT_GAS_PRICE = "0x3e8"  # 1000 wei


def _fallback(method: str, handler: RequestHandler) -> RequestRule:
    return RequestRule(
        matchers=(RpcCallMatcher(method),), handler=handler, priority=RulePriority.FALLBACK
    )


def stub_rules() -> list[RequestRule]:
    """Lowest-priority answers used when no user rule matches."""
    return [
        _fallback("eth_call", RpcErrorResponseHandler(UNMATCHED_CALL_MESSAGE)),
        _fallback("eth_sendTransaction", RpcErrorResponseHandler(UNMATCHED_TRANSACTION_MESSAGE)),
        _fallback("eth_sendRawTransaction", RpcErrorResponseHandler(UNMATCHED_TRANSACTION_MESSAGE)),
        _fallback("eth_getTransactionReceipt", RpcResponseHandler(None)),
        _fallback("eth_getBalance", RpcResponseHandler("0x0")),
        _fallback("eth_blockNumber", RpcResponseHandler(DEFAULT_BLOCK_NUMBER)),
        _fallback("eth_getBlockByNumber", RpcResponseHandler(None)),
        _fallback("eth_gasPrice", RpcResponseHandler(DEFAULT_GAS_PRICE)),
    ]


class NodeState(Enum):
    STOPPED = "stopped"
    STARTING = "starting"
    RUNNING = "running"


@dataclass
class SeenRequest:
    raw_request: CompletedRequest
    id: Any
    method: Optional[str]
    params: Any


class MockthereumNode:
    """Mock Ethereum node built on a MockServer."""

    def __init__(self, server: MockServer, options: Optional[NodeOptions] = None) -> None:
        self._server = server
        self.options = options or NodeOptions()
        self.state = NodeState.STOPPED
        self._seen_requests: list[CompletedRequest] = []
        self._server.on("request", self._seen_requests.append)

    # -----------------------------------------------------------------
    # Lifecycle
    # -----------------------------------------------------------------

    async def start(self, port: Optional[int] = None) -> None:
        if self.state is not NodeState.STOPPED:
            raise RuntimeError(f"Mock node cannot start while {self.state.value}")

        self.state = NodeState.STARTING
        self._seen_requests.clear()
        try:
            await self._server.reset()
            await self._server.start(port)
            await self._add_base_rules()
        except BaseException:
            await self._server.stop()
            self.state = NodeState.STOPPED
            raise
        self.state = NodeState.RUNNING

    async def stop(self) -> None:
        await self._server.stop()
        self.state = NodeState.STOPPED

    async def reset(self) -> None:
        """Drop all user rules and the request log, keeping the server running."""
        await self._server.reset()
        self._seen_requests.clear()
        if self.state is NodeState.RUNNING:
            await self._add_base_rules()

    @property
    def url(self) -> str:
        return self._server.url

    async def _add_base_rules(self) -> None:
        proxy = self.options.proxy
        if proxy is not None:
            logger.debug("Forwarding unmatched requests to %s", proxy.proxy_to)
            await self._server.for_unmatched_request().then_forward_to(proxy.proxy_to)
        else:
            rules = stub_rules()
            await self._server.add_request_rules(*rules)
            logger.debug("Installed %d default stub rules", len(rules))

    # -----------------------------------------------------------------
    # Request history
    # -----------------------------------------------------------------

    async def get_seen_requests(self) -> list[SeenRequest]:
        """Every request received since start/reset, in arrival order."""
        seen = []
        for request in self._seen_requests:
            body = request.json()
            if not isinstance(body, dict):
                body = {}
            seen.append(SeenRequest(
                raw_request=request,
                id=body.get("id"),
                method=body.get("method"),
                params=body.get("params"),
            ))
        return seen

    async def get_seen_method_calls(self, method: str) -> list[SeenRequest]:
        return [r for r in await self.get_seen_requests() if r.method == method]

    # -----------------------------------------------------------------
    # Rule builders
    # -----------------------------------------------------------------

    def for_balance(self, address: Optional[str] = None) -> SingleValueRuleBuilder:
        return balance_rule(self._server.add_request_rule, address)

    def for_call(self, address: Optional[str] = None) -> CallRuleBuilder:
        return CallRuleBuilder(self._server.add_request_rule, address)

    def for_send_transaction(self) -> TransactionRuleBuilder:
        return TransactionRuleBuilder(self._server.add_request_rule)

    def for_send_transaction_to(self, address: str) -> TransactionRuleBuilder:
        return TransactionRuleBuilder(self._server.add_request_rule, address)

    def for_transaction_receipt(self, tx_hash: str) -> TransactionReceiptRuleBuilder:
        return TransactionReceiptRuleBuilder(self._server.add_request_rule, tx_hash)

    def for_block_number(self) -> SingleValueRuleBuilder:
        return block_number_rule(self._server.add_request_rule)

    def for_gas_price(self) -> SingleValueRuleBuilder:
        return gas_price_rule(self._server.add_request_rule)
