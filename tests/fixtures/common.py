"""
Common test fixtures: leaf hashes, typed values and prebuilt trees.
"""

import hashlib

from core.merkle import StandardMerkleTree

# 32 zero bytes
ZERO: bytes = bytes(32)

ENCODING: tuple[str, ...] = ("ContractAddress", "u256")


def make_leaf(label: str) -> bytes:
    """A 32-byte leaf derived from label, below 2**250 so it is a field element."""
    digest = int.from_bytes(hashlib.sha256(label.encode()).digest(), "big")
    return (digest >> 6).to_bytes(32, "big")


def make_leaves(n: int) -> list[bytes]:
    """n distinct 32-byte leaf hashes."""
    return [make_leaf(f"leaf{i}") for i in range(n)]


def make_values(n: int) -> list[list[int]]:
    """n distinct (ContractAddress, u256) value tuples."""
    return [[0x1000 + i, (i + 1) * 10**18] for i in range(n)]


def make_standard_tree(n: int = 5) -> StandardMerkleTree:
    """A StandardMerkleTree over make_values(n)."""
    return StandardMerkleTree.of(make_values(n), list(ENCODING))
