"""
Builders for RPC methods answered by a single numeric value.

eth_getBalance, eth_blockNumber and eth_gasPrice all share one builder,
configured with the method (and optional positional params) to match.
"""

from __future__ import annotations

from typing import Any, Optional, Sequence

from mockthereum.builders.rule_chain import (
    ArgumentError,
    RegisterRule,
    RuleChain,
    close_connection,
    respond,
    timeout,
)
from mockthereum.rpc.jsonrpc import (
    RpcCallMatcher,
    RpcErrorResponseHandler,
    RpcResponseHandler,
    int_to_hex,
)
from mockthereum.server.rules import MockedEndpoint


class SingleValueRuleBuilder:
    def __init__(self, register: RegisterRule, method: str, params: Sequence[Any] = ()) -> None:
        self.method = method
        self._chain = RuleChain(register, [RpcCallMatcher(method, params)])

    async def then_return(self, value: int) -> MockedEndpoint:
        """Reply with ``value`` as a hex quantity."""
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise ArgumentError(
                f"{self.method} can only return a non-negative integer, got {value!r}"
            )
        return await respond(self._chain, RpcResponseHandler(int_to_hex(value)))

    async def then_error(self, message: str) -> MockedEndpoint:
        return await respond(self._chain, RpcErrorResponseHandler(message))

    async def then_timeout(self) -> MockedEndpoint:
        return await timeout(self._chain)

    async def then_close_connection(self) -> MockedEndpoint:
        return await close_connection(self._chain)


def balance_rule(register: RegisterRule, address: Optional[str] = None) -> SingleValueRuleBuilder:
    params = [address] if address else []
    return SingleValueRuleBuilder(register, "eth_getBalance", params)


def block_number_rule(register: RegisterRule) -> SingleValueRuleBuilder:
    return SingleValueRuleBuilder(register, "eth_blockNumber")


def gas_price_rule(register: RegisterRule) -> SingleValueRuleBuilder:
    return SingleValueRuleBuilder(register, "eth_gasPrice")
