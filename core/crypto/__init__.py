"""
Core cryptographic utilities.

Byte/hex helpers live in hashing; the Pedersen and Poseidon leaf and
node hash functions are imported from core.crypto.hashes.
"""
from .hashing import (
    NODE_SIZE,
    to_hex,
    from_hex,
    to_bytes,
    padded_hex,
    compare_bytes,
)

__all__ = [
    "NODE_SIZE",
    "to_hex",
    "from_hex",
    "to_bytes",
    "padded_hex",
    "compare_bytes",
]
