"""Test fixtures for mock node tests."""

from .addresses import (
    CONTRACT_ADDRESS,
    FROM_ADDRESS,
    OTHER_ADDRESS,
    WALLET_ADDRESS,
)
from .rpc_client import RpcClient

__all__ = [
    "CONTRACT_ADDRESS",
    "FROM_ADDRESS",
    "OTHER_ADDRESS",
    "WALLET_ADDRESS",
    "RpcClient",
]
