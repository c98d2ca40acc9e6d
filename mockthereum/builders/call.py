"""Rule builder for eth_call."""

from __future__ import annotations

from typing import Any, Optional, Sequence

from mockthereum.builders.contract import ContractMatching
from mockthereum.builders.rule_chain import (
    ArgumentError,
    RegisterRule,
    RuleChain,
    close_connection,
    respond,
    timeout,
)
from mockthereum.common.abi import encode_abi, function_selector
from mockthereum.mocked_contract import MockedContract
from mockthereum.rpc.jsonrpc import RpcCallMatcher, RpcErrorResponseHandler, RpcResponseHandler
from mockthereum.server.handlers import RequestHandler
from mockthereum.server.rules import MockedEndpoint


REVERT_REASON_SELECTOR = function_selector("Error(string)")


class CallRuleBuilder:
    """Mock ``eth_call`` results for one contract address, or all of them."""

    def __init__(self, register: RegisterRule, target_address: Optional[str] = None) -> None:
        params = [{"to": target_address}] if target_address else []
        self._chain = RuleChain(register, [RpcCallMatcher("eth_call", params)])
        self._contract = ContractMatching(self._chain)

    def for_function(self, signature: str) -> CallRuleBuilder:
        """Only match calls to this function, e.g. ``"balanceOf(address) returns (uint256)"``."""
        self._contract.for_function(signature)
        return self

    def with_params(self, values: Sequence[Any], types: Optional[Sequence[str]] = None) -> CallRuleBuilder:
        """Only match calls with exactly these params."""
        self._contract.with_params(values, types)
        return self

    async def then_return(self, *values: Any) -> MockedContract:
        """Return ``values``, encoded with the return types from ``for_function``."""
        return_types = self._contract.return_types
        if return_types is None:
            raise ArgumentError(
                "then_return(): must call for_function with a return signature, or supply "
                "explicit types via then_return_value() or then_return_typed()"
            )
        return await self.then_return_typed(return_types, values)

    async def then_return_value(self, output_type: str, value: Any) -> MockedContract:
        return await self.then_return_typed([output_type], [value])

    async def then_return_typed(
        self, output_types: Sequence[str], values: Sequence[Any]
    ) -> MockedContract:
        return await self._respond(RpcResponseHandler(encode_abi(output_types, values)))

    async def then_revert(self, message: str) -> MockedContract:
        return await self._respond(RpcErrorResponseHandler(
            f"VM Exception while processing transaction: revert {message}",
            name="CallError",
            data=REVERT_REASON_SELECTOR + encode_abi(["string"], [message])[2:],
        ))

    async def then_timeout(self) -> MockedContract:
        return self._mocked(await timeout(self._chain))

    async def then_close_connection(self) -> MockedContract:
        return self._mocked(await close_connection(self._chain))

    async def _respond(self, handler: RequestHandler) -> MockedContract:
        return self._mocked(await respond(self._chain, handler))

    def _mocked(self, endpoint: MockedEndpoint) -> MockedContract:
        return MockedContract(endpoint, self._contract.param_types)
