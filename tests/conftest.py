"""Pytest configuration and shared fixtures for all tests."""

import pytest_asyncio

import mockthereum
from tests.fixtures.rpc_client import RpcClient


# =============================================================================
# Mock node fixtures
# =============================================================================

@pytest_asyncio.fixture
async def mock_node():
    """A running stub-mode mock node on an ephemeral port."""
    node = mockthereum.get_local()
    await node.start()
    yield node
    await node.stop()


@pytest_asyncio.fixture
async def rpc(mock_node):
    """JSON-RPC client pointed at ``mock_node``."""
    client = RpcClient(mock_node.url)
    yield client
    await client.aclose()
