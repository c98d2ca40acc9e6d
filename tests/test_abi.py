"""
Tests for ABI encoding helpers and function signature parsing.
"""

import pytest

from mockthereum.common.abi import (
    DecodingError,
    EncodingError,
    FunctionSignature,
    decode_abi,
    encode_abi,
    function_selector,
    parse_function_signature,
)


# ===================================================================
# Encoding / decoding
# ===================================================================

class TestEncoding:
    def test_encode_decode_string(self):
        encoded = encode_abi(["string"], ["hello"])
        assert encoded.startswith("0x")
        assert decode_abi(["string"], encoded) == ["hello"]

    def test_encode_decode_numbers(self):
        encoded = encode_abi(["uint8", "int256"], [123, -456])
        assert decode_abi(["uint8", "int256"], encoded) == [123, -456]

    def test_encode_decode_bytes(self):
        encoded = encode_abi(["bytes"], [b"\x01\x02\x03\x04"])
        assert decode_abi(["bytes"], encoded) == [b"\x01\x02\x03\x04"]

    def test_arrays_decode_as_lists(self):
        encoded = encode_abi(["uint256[]", "bool"], [[1, 2, 3], True])
        assert decode_abi(["uint256[]", "bool"], encoded) == [[1, 2, 3], True]

    def test_uint_word_layout(self):
        assert encode_abi(["uint256"], [1]) == "0x" + "00" * 31 + "01"

    def test_empty_encoding(self):
        assert encode_abi([], []) == "0x"
        assert decode_abi([], "0x") == []

    def test_arity_mismatch(self):
        with pytest.raises(EncodingError):
            encode_abi(["uint256", "bool"], [1])

    def test_value_out_of_range(self):
        with pytest.raises(EncodingError):
            encode_abi(["uint8"], [256])

    def test_wrong_value_type(self):
        with pytest.raises(EncodingError):
            encode_abi(["bool"], ["yes"])

    def test_unknown_type(self):
        with pytest.raises(EncodingError):
            encode_abi(["uint7"], [1])

    def test_decode_invalid_hex(self):
        with pytest.raises(DecodingError):
            decode_abi(["uint256"], "0xzz")

    def test_decode_short_data(self):
        with pytest.raises(DecodingError):
            decode_abi(["uint256"], "0x01")

    def test_errors_are_value_errors(self):
        assert issubclass(EncodingError, ValueError)
        assert issubclass(DecodingError, ValueError)


# ===================================================================
# Function signatures
# ===================================================================

class TestFunctionSignature:
    def test_selector(self):
        assert function_selector("foobar(string,bool)") == "0x7fddde58"

    @pytest.mark.parametrize("signature", [
        "foobar(string, bool)",
        "function foobar(string, bool)",
        "  function foobar( string,bool )  ",
        "function foobar(string name, bool flag)",
        "function foobar(string memory name, bool) public view returns (bool)",
    ])
    def test_selector_ignores_formatting(self, signature):
        assert function_selector(signature) == "0x7fddde58"

    def test_well_known_selectors(self):
        assert function_selector("transfer(address,uint256)") == "0xa9059cbb"
        assert function_selector("balanceOf(address)") == "0x70a08231"
        assert function_selector("Error(string)") == "0x08c379a0"

    def test_type_aliases_normalized(self):
        assert function_selector("transfer(address to, uint amount)") == "0xa9059cbb"

    def test_parse_inputs_and_outputs(self):
        func = parse_function_signature("function getText(string key) returns (string)")
        assert func == FunctionSignature(name="getText", inputs=("string",), outputs=("string",))
        assert func.canonical == "getText(string)"

    def test_no_returns_clause_means_no_outputs(self):
        func = parse_function_signature("foobar(string,bool)")
        assert func.outputs is None

    def test_empty_returns_clause(self):
        func = parse_function_signature("function ping() returns ()")
        assert func.inputs == ()
        assert func.outputs == ()

    def test_multiple_outputs(self):
        func = parse_function_signature(
            "function reserves() external view returns (uint112 a, uint112 b, uint32 ts)"
        )
        assert func.outputs == ("uint112", "uint112", "uint32")

    def test_tuple_params(self):
        func = parse_function_signature(
            "function submit((uint256 id, address owner)[] calldata orders, bytes data)"
        )
        assert func.inputs == ("(uint256,address)[]", "bytes")
        assert func.canonical == "submit((uint256,address)[],bytes)"

    def test_selector_from_parsed_signature(self):
        func = parse_function_signature("foobar(string,bool)")
        assert function_selector(func) == func.selector == "0x7fddde58"

    @pytest.mark.parametrize("signature", [
        "",
        "(uint256)",
        "foobar",
        "foobar(uint256",
        "foobar(uint256,)",
    ])
    def test_invalid_signatures(self, signature):
        with pytest.raises(ValueError):
            parse_function_signature(signature)
