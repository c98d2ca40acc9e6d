"""
Hashing and randomness helpers.

- keccak256 hashing (function selectors)
- random hex identifiers (synthetic transaction hashes)
"""

from __future__ import annotations

import os

from Crypto.Hash import keccak as _keccak_mod


def keccak256(data: bytes) -> bytes:
    """Compute Keccak-256 hash (NOT SHA3-256)."""
    h = _keccak_mod.new(digest_bits=256)
    h.update(data)
    return h.digest()


def random_hex(num_bytes: int) -> str:
    """Return ``num_bytes`` of random data as a 0x-prefixed hex string."""
    return "0x" + os.urandom(num_bytes).hex()
