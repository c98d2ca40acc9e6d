"""
mockthereum — mock Ethereum JSON-RPC nodes for testing.

    node = mockthereum.get_local()
    await node.start()
    await node.for_balance("0x...").then_return(1000)
"""

from __future__ import annotations

from typing import Any, Mapping, Union

from mockthereum.builders.rule_chain import ArgumentError
from mockthereum.common.abi import DecodingError, EncodingError
from mockthereum.common.config import DEFAULT_HOST, STUB, NodeOptions, ProxyConfig
from mockthereum.mocked_contract import MockedContract, MockedContractRequest
from mockthereum.node import MockthereumNode, NodeState, SeenRequest
from mockthereum.server.server import MockServer


def get_local(
    unmatched_requests: Union[str, ProxyConfig, Mapping[str, Any]] = STUB,
    host: str = DEFAULT_HOST,
) -> MockthereumNode:
    """Create a mock node served from this process."""
    options = NodeOptions(unmatched_requests=unmatched_requests, host=host)
    return MockthereumNode(MockServer(host=options.host), options)


__all__ = [
    "ArgumentError",
    "DecodingError",
    "EncodingError",
    "MockServer",
    "MockedContract",
    "MockedContractRequest",
    "MockthereumNode",
    "NodeOptions",
    "NodeState",
    "ProxyConfig",
    "SeenRequest",
    "get_local",
]
