"""
Rule builders for eth_sendTransaction and eth_getTransactionReceipt.

A mocked successful (or reverted) submission replies with a fresh random
transaction hash, and registers a receipt rule for that hash before the
reply is sent, so the client can poll for its receipt straight away.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Sequence

from mockthereum.builders.contract import ContractMatching
from mockthereum.builders.rule_chain import (
    RegisterRule,
    RuleChain,
    close_connection,
    respond,
    timeout,
)
from mockthereum.common.crypto import random_hex
from mockthereum.mocked_contract import MockedContract
from mockthereum.rpc.jsonrpc import (
    DEFAULT_ERROR_CODE,
    DEFAULT_ERROR_DATA,
    RpcCallMatcher,
    RpcErrorResponseHandler,
    RpcResponseHandler,
    first_param,
    request_id,
    success_response,
)
from mockthereum.server.handlers import (
    HandlerContext,
    HandlerResult,
    RequestHandler,
    streamed_json,
)
from mockthereum.server.requests import CompletedRequest
from mockthereum.server.rules import MockedEndpoint, RequestRule

logger = logging.getLogger(__name__)


SUCCEEDED_RECEIPT_FIELDS = {"status": "0x1"}
REVERTED_RECEIPT_FIELDS = {"status": "0x", "type": "0x2"}


def default_receipt(tx_hash: str, sender: Optional[str], to: Optional[str]) -> dict:
    return {
        "status": "0x1",
        "transactionHash": tx_hash,
        "blockNumber": "0x100",
        "blockHash": "0x1",
        "from": sender,
        "to": to,
        "cumulativeGasUsed": "0x1",
        "gasUsed": "0x1",
        "effectiveGasPrice": "0x0",
        "contractAddress": None,
        "logs": [],
        "logsBloom": "0x0",
        "type": "0x0",
    }


def transaction_receipt_rule(tx_hash: str, receipt: Optional[Mapping[str, Any]]) -> RequestRule:
    return RequestRule(
        matchers=(RpcCallMatcher("eth_getTransactionReceipt", [tx_hash]),),
        handler=RpcResponseHandler(dict(receipt) if receipt is not None else None),
    )


class TransactionSubmissionHandler(RequestHandler):
    """Accept a transaction, answering with a new hash plus a receipt rule for it."""

    def __init__(self, receipt_fields: Mapping[str, Any], overrides: Mapping[str, Any]) -> None:
        self.receipt_fields = dict(receipt_fields)
        self.overrides = dict(overrides)

    async def handle(self, request: CompletedRequest, context: HandlerContext) -> HandlerResult:
        tx_hash = random_hex(32)
        tx = first_param(request)
        receipt = {
            **default_receipt(tx_hash, tx.get("from"), tx.get("to")),
            **self.receipt_fields,
            **self.overrides,
        }
        logger.debug("Accepted transaction %s with status %s", tx_hash, receipt["status"])
        return HandlerResult(
            streamed_json(success_response(request_id(request), tx_hash)),
            follow_up_rules=[transaction_receipt_rule(tx_hash, receipt)],
        )


class TransactionRuleBuilder:
    """Mock ``eth_sendTransaction`` for one recipient address, or all of them."""

    def __init__(self, register: RegisterRule, target_address: Optional[str] = None) -> None:
        params = [{"to": target_address}] if target_address else []
        self._chain = RuleChain(register, [RpcCallMatcher("eth_sendTransaction", params)])
        self._contract = ContractMatching(self._chain)

    def for_function(self, signature: str) -> TransactionRuleBuilder:
        self._contract.for_function(signature)
        return self

    def with_params(
        self, values: Sequence[Any], types: Optional[Sequence[str]] = None
    ) -> TransactionRuleBuilder:
        self._contract.with_params(values, types)
        return self

    async def then_succeed(self, receipt: Optional[Mapping[str, Any]] = None) -> MockedContract:
        """Accept the transaction; its receipt shows success, plus any ``receipt`` overrides."""
        return await self._respond(
            TransactionSubmissionHandler(SUCCEEDED_RECEIPT_FIELDS, receipt or {})
        )

    async def then_revert(self, receipt: Optional[Mapping[str, Any]] = None) -> MockedContract:
        """Accept the transaction; its receipt shows it reverted."""
        return await self._respond(
            TransactionSubmissionHandler(REVERTED_RECEIPT_FIELDS, receipt or {})
        )

    async def then_fail_immediately(
        self,
        message: str,
        *,
        code: int = DEFAULT_ERROR_CODE,
        data: Any = DEFAULT_ERROR_DATA,
        name: Optional[str] = None,
    ) -> MockedContract:
        """Reject the submission itself. No transaction hash or receipt is created."""
        return await self._respond(RpcErrorResponseHandler(message, code=code, data=data, name=name))

    async def then_timeout(self) -> MockedContract:
        return self._mocked(await timeout(self._chain))

    async def then_close_connection(self) -> MockedContract:
        return self._mocked(await close_connection(self._chain))

    async def _respond(self, handler: RequestHandler) -> MockedContract:
        return self._mocked(await respond(self._chain, handler))

    def _mocked(self, endpoint: MockedEndpoint) -> MockedContract:
        return MockedContract(endpoint, self._contract.param_types)


class TransactionReceiptRuleBuilder:
    def __init__(self, register: RegisterRule, tx_hash: str) -> None:
        self.tx_hash = tx_hash
        self._chain = RuleChain(register, [RpcCallMatcher("eth_getTransactionReceipt", [tx_hash])])

    async def then_return(self, receipt: Optional[Mapping[str, Any]]) -> MockedEndpoint:
        return await respond(
            self._chain, RpcResponseHandler(dict(receipt) if receipt is not None else None)
        )

    async def then_error(self, message: str) -> MockedEndpoint:
        return await respond(self._chain, RpcErrorResponseHandler(message))

    async def then_timeout(self) -> MockedEndpoint:
        return await timeout(self._chain)

    async def then_close_connection(self) -> MockedEndpoint:
        return await close_connection(self._chain)
