"""
Tests for contract eth_call mocking.
"""

import asyncio

import httpx
import pytest

from mockthereum import ArgumentError, EncodingError
from mockthereum.common.abi import decode_abi, encode_abi, function_selector
from mockthereum.node import UNMATCHED_CALL_MESSAGE
from tests.fixtures.addresses import CONTRACT_ADDRESS, FROM_ADDRESS, OTHER_ADDRESS


FOOBAR_SELECTOR = "0x7fddde58"  # foobar(string,bool)


def call_params(to, data=None):
    tx = {"to": to}
    if data is not None:
        tx["data"] = data
    return [tx, "latest"]


# ===================================================================
# Matching
# ===================================================================

class TestCallMatching:
    @pytest.mark.asyncio
    async def test_unmatched_call_errors_by_default(self, rpc):
        body = await rpc.request("eth_call", call_params(CONTRACT_ADDRESS))
        assert body["error"]["message"] == UNMATCHED_CALL_MESSAGE
        assert body["error"]["code"] == -32099
        assert body["error"]["data"] == "0x"

    @pytest.mark.asyncio
    async def test_match_by_to_address(self, mock_node, rpc):
        await mock_node.for_call(CONTRACT_ADDRESS).then_return_value("string", "mock result")

        result = await rpc.result("eth_call", call_params(CONTRACT_ADDRESS))
        assert decode_abi(["string"], result) == ["mock result"]

        body = await rpc.request("eth_call", call_params(OTHER_ADDRESS))
        assert body["error"]["message"] == UNMATCHED_CALL_MESSAGE

    @pytest.mark.asyncio
    async def test_match_by_function_signature(self, mock_node, rpc):
        await (
            mock_node.for_call()
            .for_function("function foobar(string, bool)")
            .then_return_value("string", "mock result")
        )
        params = encode_abi(["string", "bool"], ["test", True])[2:]

        result = await rpc.result("eth_call", call_params(CONTRACT_ADDRESS, FOOBAR_SELECTOR + params))
        assert decode_abi(["string"], result) == ["mock result"]

        body = await rpc.request("eth_call", call_params(CONTRACT_ADDRESS, "0x99999999" + params))
        assert "error" in body

    @pytest.mark.asyncio
    async def test_match_by_params(self, mock_node, rpc):
        await (
            mock_node.for_call(CONTRACT_ADDRESS)
            .for_function("function foobar(bool, string) returns (int256)")
            .with_params([True, "test"])
            .then_return(1234)
        )
        selector = function_selector("foobar(bool,string)")

        matching = selector + encode_abi(["bool", "string"], [True, "test"])[2:]
        result = await rpc.result("eth_call", call_params(CONTRACT_ADDRESS, matching))
        assert decode_abi(["int256"], result) == [1234]

        other = selector + encode_abi(["bool", "string"], [False, "test"])[2:]
        body = await rpc.request("eth_call", call_params(CONTRACT_ADDRESS, other))
        assert body["error"]["message"] == UNMATCHED_CALL_MESSAGE

    @pytest.mark.asyncio
    async def test_match_by_explicit_param_types(self, mock_node, rpc):
        await (
            mock_node.for_call()
            .with_params([5], types=["uint256"])
            .then_return_value("bool", True)
        )
        data = "0x12345678" + encode_abi(["uint256"], [5])[2:]
        result = await rpc.result("eth_call", call_params(CONTRACT_ADDRESS, data))
        assert decode_abi(["bool"], result) == [True]

    @pytest.mark.asyncio
    async def test_match_input_field(self, mock_node, rpc):
        await mock_node.for_call().for_function("foobar(string,bool)").then_return_value("uint8", 7)
        data = FOOBAR_SELECTOR + encode_abi(["string", "bool"], ["x", False])[2:]

        result = await rpc.result("eth_call", [{"to": CONTRACT_ADDRESS, "input": data}, "latest"])
        assert decode_abi(["uint8"], result) == [7]

    @pytest.mark.asyncio
    async def test_selector_match_ignores_case(self, mock_node, rpc):
        await mock_node.for_call().for_function("transfer(address,uint256)").then_return_value("bool", True)
        data = "0xA9059CBB" + encode_abi(["address", "uint256"], [FROM_ADDRESS, 1])[2:]

        result = await rpc.result("eth_call", call_params(CONTRACT_ADDRESS, data))
        assert decode_abi(["bool"], result) == [True]


# ===================================================================
# Results
# ===================================================================

class TestCallResults:
    @pytest.mark.asyncio
    async def test_return_multiple_declared_values(self, mock_node, rpc):
        await (
            mock_node.for_call()
            .for_function("function reserves() returns (uint112, uint112, uint32)")
            .then_return(10, 20, 30)
        )
        data = function_selector("reserves()")
        result = await rpc.result("eth_call", call_params(CONTRACT_ADDRESS, data))
        assert decode_abi(["uint112", "uint112", "uint32"], result) == [10, 20, 30]

    @pytest.mark.asyncio
    async def test_return_typed(self, mock_node, rpc):
        await mock_node.for_call().then_return_typed(["string", "uint256[]"], ["a", [1, 2]])
        result = await rpc.result("eth_call", call_params(CONTRACT_ADDRESS))
        assert decode_abi(["string", "uint256[]"], result) == ["a", [1, 2]]

    @pytest.mark.asyncio
    async def test_then_return_without_return_types(self, mock_node):
        with pytest.raises(ArgumentError, match="must call for_function with a return signature"):
            await mock_node.for_call().then_return(1)

        with pytest.raises(ArgumentError):
            await mock_node.for_call().for_function("foobar(string,bool)").then_return(1)

    @pytest.mark.asyncio
    async def test_with_params_without_types(self, mock_node):
        with pytest.raises(ArgumentError):
            mock_node.for_call().with_params([1])

    @pytest.mark.asyncio
    async def test_encoding_errors_propagate(self, mock_node):
        with pytest.raises(EncodingError):
            await mock_node.for_call().then_return_value("uint8", 1000)

        with pytest.raises(EncodingError):
            mock_node.for_call().for_function("foobar(string,bool)").with_params(["only one"])

    @pytest.mark.asyncio
    async def test_revert(self, mock_node, rpc):
        await mock_node.for_call(CONTRACT_ADDRESS).then_revert("Mock revert")

        error = (await rpc.request("eth_call", call_params(CONTRACT_ADDRESS)))["error"]
        assert error["message"] == "VM Exception while processing transaction: revert Mock revert"
        assert error["name"] == "CallError"
        assert error["data"] == "0x08c379a0" + encode_abi(["string"], ["Mock revert"])[2:]
        assert decode_abi(["string"], "0x" + error["data"][10:]) == ["Mock revert"]

    @pytest.mark.asyncio
    async def test_timeout(self, mock_node, rpc):
        await mock_node.for_call().then_timeout()
        with pytest.raises(asyncio.TimeoutError):
            await asyncio.wait_for(rpc.post("eth_call", call_params(CONTRACT_ADDRESS)), 0.5)

    @pytest.mark.asyncio
    async def test_close_connection(self, mock_node, rpc):
        await mock_node.for_call().then_close_connection()
        with pytest.raises(httpx.TransportError):
            await rpc.post("eth_call", call_params(CONTRACT_ADDRESS))


# ===================================================================
# Mocked contract history
# ===================================================================

class TestMockedContract:
    @pytest.mark.asyncio
    async def test_decoded_requests(self, mock_node, rpc):
        contract = await (
            mock_node.for_call(CONTRACT_ADDRESS)
            .for_function("function foobar(string, bool) returns (bool)")
            .then_return(True)
        )
        data = FOOBAR_SELECTOR + encode_abi(["string", "bool"], ["hi", True])[2:]
        await rpc.post("eth_call", [{"to": CONTRACT_ADDRESS, "from": FROM_ADDRESS, "data": data}, "latest"])

        requests = await contract.get_requests()
        assert len(requests) == 1
        assert requests[0].to == CONTRACT_ADDRESS
        assert requests[0].from_ == FROM_ADDRESS
        assert requests[0].value is None
        assert requests[0].params == ["hi", True]
        assert requests[0].raw_request.json()["method"] == "eth_call"

    @pytest.mark.asyncio
    async def test_params_undecoded_without_types(self, mock_node, rpc):
        contract = await mock_node.for_call().then_return_value("bool", True)
        await rpc.post("eth_call", call_params(CONTRACT_ADDRESS, FOOBAR_SELECTOR))

        requests = await contract.get_requests()
        assert requests[0].params is None

    @pytest.mark.asyncio
    async def test_no_requests_seen(self, mock_node, rpc):
        contract = await (
            mock_node.for_call().for_function("foobar(string,bool)").then_return_value("bool", True)
        )
        assert await contract.get_requests() == []
