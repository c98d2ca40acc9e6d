"""
ABI encoding helpers.

Adapter over eth_abi working in 0x-prefixed hex strings, plus a small
parser for human-written function signatures such as::

    function getText(string key) public view returns (string)

Signatures are canonicalized (keyword, parameter names, modifiers and the
return clause dropped, type aliases expanded) before hashing, so any surface
formatting of the same function yields the same 4-byte selector.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Optional, Sequence, Union

import eth_abi
from eth_abi import exceptions as abi_exceptions
from eth_abi.grammar import normalize
from eth_utils import decode_hex, encode_hex

from mockthereum.common.crypto import keccak256


class EncodingError(ValueError):
    """Values do not fit the declared ABI types."""


class DecodingError(ValueError):
    """Data could not be decoded as the declared ABI types."""


# ---------------------------------------------------------------------------
# Encoding / decoding
# ---------------------------------------------------------------------------

def encode_abi(types: Sequence[str], values: Sequence[Any]) -> str:
    """ABI-encode ``values`` as ``types``, returning a 0x-prefixed hex string."""
    types = list(types)
    values = list(values)
    if len(types) != len(values):
        raise EncodingError(
            f"Expected {len(types)} value(s) for types {types}, got {len(values)}"
        )
    try:
        encoded = eth_abi.encode(types, values)
    except (abi_exceptions.EncodingError, abi_exceptions.ParseError, ValueError, TypeError) as exc:
        raise EncodingError(str(exc)) from exc
    return encode_hex(encoded)


def decode_abi(types: Sequence[str], data: str) -> list:
    """Decode 0x-prefixed hex ``data`` as ``types``.

    Tuples produced by eth_abi (arrays, structs) are returned as lists.
    """
    try:
        raw = decode_hex(data)
    except (ValueError, TypeError) as exc:
        raise DecodingError(f"Invalid hex data: {data!r}") from exc
    try:
        decoded = eth_abi.decode(list(types), raw)
    except (abi_exceptions.DecodingError, abi_exceptions.ParseError, ValueError, TypeError) as exc:
        raise DecodingError(str(exc)) from exc
    return [_untuple(value) for value in decoded]


def _untuple(value: Any) -> Any:
    if isinstance(value, (tuple, list)):
        return [_untuple(v) for v in value]
    return value


# ---------------------------------------------------------------------------
# Function signatures
# ---------------------------------------------------------------------------

_FUNCTION_KEYWORD_RE = re.compile(r"^function\s+")
_IDENTIFIER_RE = re.compile(r"[A-Za-z_$][A-Za-z0-9_$]*")
_RETURNS_RE = re.compile(r"\breturns\s*\(")
_ARRAY_SUFFIX_RE = re.compile(r"^\s*((?:\[\s*\d*\s*\]\s*)*)")


@dataclass(frozen=True)
class FunctionSignature:
    name: str
    inputs: tuple[str, ...]
    # None when the signature has no returns clause at all
    outputs: Optional[tuple[str, ...]] = None

    @property
    def canonical(self) -> str:
        return f"{self.name}({','.join(self.inputs)})"

    @property
    def selector(self) -> str:
        return encode_hex(keccak256(self.canonical.encode())[:4])


def parse_function_signature(signature: str) -> FunctionSignature:
    """Parse a Solidity-style function signature.

    Accepts an optional leading ``function`` keyword, parameter names, data
    locations, visibility/mutability modifiers and an optional ``returns``
    clause. Raises ValueError for anything that is not a function signature.
    """
    source = _FUNCTION_KEYWORD_RE.sub("", signature.strip())
    match = _IDENTIFIER_RE.match(source)
    if match is None:
        raise ValueError(f"Invalid function signature: {signature!r}")
    name = match.group(0)

    rest = source[match.end():].lstrip()
    if not rest.startswith("("):
        raise ValueError(f"Invalid function signature: {signature!r}")
    inner, end = _read_group(rest, 0, signature)
    inputs = tuple(_canonical_type(p, signature) for p in _split_top_level(inner))

    outputs = None
    returns_match = _RETURNS_RE.search(rest, end)
    if returns_match is not None:
        inner, _ = _read_group(rest, returns_match.end() - 1, signature)
        outputs = tuple(_canonical_type(p, signature) for p in _split_top_level(inner))

    return FunctionSignature(name=name, inputs=inputs, outputs=outputs)


def function_selector(signature: Union[str, FunctionSignature]) -> str:
    """Return the 4-byte selector ("0x" + 8 hex chars) for a signature."""
    if isinstance(signature, str):
        signature = parse_function_signature(signature)
    return signature.selector


def _read_group(text: str, start: int, signature: str) -> tuple[str, int]:
    """Return the contents of the parenthesized group opening at ``start``
    and the index just past its closing parenthesis."""
    depth = 0
    for i in range(start, len(text)):
        if text[i] == "(":
            depth += 1
        elif text[i] == ")":
            depth -= 1
            if depth == 0:
                return text[start + 1:i], i + 1
    raise ValueError(f"Unbalanced parentheses in function signature: {signature!r}")


def _split_top_level(params: str) -> list[str]:
    if not params.strip():
        return []
    parts: list[str] = []
    depth = 0
    current = []
    for ch in params:
        if ch == "," and depth == 0:
            parts.append("".join(current))
            current = []
            continue
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
        current.append(ch)
    parts.append("".join(current))
    return parts


def _canonical_type(param: str, signature: str) -> str:
    param = param.strip()
    if not param:
        raise ValueError(f"Empty parameter in function signature: {signature!r}")

    if param.startswith("(") or param.startswith("tuple("):
        inner, end = _read_group(param, param.index("("), signature)
        components = [_canonical_type(p, signature) for p in _split_top_level(inner)]
        suffix = re.sub(r"\s+", "", _ARRAY_SUFFIX_RE.match(param[end:]).group(1))
        return "(" + ",".join(components) + ")" + suffix

    # Drop the parameter name and any data location / payable qualifiers
    type_str = param.split()[0]
    return normalize(type_str)
