"""Function-signature and parameter matching for contract calls and transactions."""

from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

from mockthereum.builders.rule_chain import ArgumentError, RuleChain
from mockthereum.common.abi import encode_abi, parse_function_signature
from mockthereum.rpc.jsonrpc import call_data
from mockthereum.server.matchers import CallbackMatcher
from mockthereum.server.requests import CompletedRequest

logger = logging.getLogger(__name__)


class ContractMatching:
    """Adds call-data matchers to a RuleChain and remembers the ABI types
    they imply, for encoding return values and decoding seen requests."""

    def __init__(self, chain: RuleChain) -> None:
        self.chain = chain
        self.param_types: Optional[list[str]] = None
        # None unless the signature had a returns clause
        self.return_types: Optional[list[str]] = None

    def for_function(self, signature: str) -> None:
        func = parse_function_signature(signature)
        self.param_types = list(func.inputs)
        self.return_types = list(func.outputs) if func.outputs is not None else None

        selector = func.selector
        logger.debug("Matching function %s (selector %s)", func.canonical, selector)

        def has_selector(request: CompletedRequest) -> bool:
            data = call_data(request)
            return data is not None and data.lower().startswith(selector)

        self.chain.add(CallbackMatcher(has_selector))

    def with_params(self, values: Sequence[Any], types: Optional[Sequence[str]] = None) -> None:
        if types is None:
            types = self.param_types
        if types is None:
            raise ArgumentError(
                "If no function signature was provided with for_function, with_params "
                "must be called with explicit parameter types"
            )
        self.param_types = list(types)

        encoded_params = encode_abi(types, values)[2:].lower()

        def has_params(request: CompletedRequest) -> bool:
            data = call_data(request)
            return data is not None and data[10:].lower() == encoded_params

        self.chain.add(CallbackMatcher(has_params))
