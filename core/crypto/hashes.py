"""
Leaf and Node Hash Functions
Pluggable hash functions consumed by the Merkle tree engine.

Commitment Rules:
1. Every node is a field element stored as 32 big-endian bytes
2. Node hashing is commutative: children are put in byte order before
   hashing, so no left/right sidedness is tracked anywhere
   - standard: compute_hash_on_elements([min, max]) (Pedersen chain)
   - poseidon: poseidon_hash_many([min, max])
3. Leaf hashing runs over the felts produced by core.schemas.serde.serialize()
   - standard: pedersen_hash(0, compute_hash_on_elements(felts))
   - poseidon: poseidon_hash_many([poseidon_hash_many(felts)])
   - The outer hash keeps leaves distinct from two-child node preimages
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Sequence

from poseidon_py.poseidon_hash import poseidon_hash_many
from starknet_py.hash.utils import compute_hash_on_elements, pedersen_hash

from core.crypto.hashing import NODE_SIZE, BytesLike, compare_bytes, to_bytes
from core.schemas.errors import InvalidArgumentException
from core.schemas.serde import FELT_MAX, serialize

NodeHash = Callable[[bytes, bytes], bytes]
LeafHash = Callable[[Sequence[str], Sequence[Any]], bytes]


def to_felt(node: BytesLike) -> int:
    """Read a node as a field element."""
    value = int.from_bytes(to_bytes(node), "big")
    if value > FELT_MAX:
        raise InvalidArgumentException(
            "Node is not a field element",
            details={"node": hex(value)},
        )
    return value


def from_felt(value: int) -> bytes:
    return value.to_bytes(NODE_SIZE, "big")


def _sorted_felts(a: BytesLike, b: BytesLike) -> list[int]:
    left, right = to_bytes(a), to_bytes(b)
    if compare_bytes(left, right) > 0:
        left, right = right, left
    return [to_felt(left), to_felt(right)]


def serialize_felts(types: Sequence[str], value: Sequence[Any]) -> list[int]:
    """Serialize a typed value into the felts fed to the leaf hash."""
    return [int(element, 16) for element in serialize(types, value)]


# =============================================================================
# Pedersen ("standard")
# =============================================================================

def standard_node_hash(a: BytesLike, b: BytesLike) -> bytes:
    """
    Combine two node hashes into their parent hash.

    Args:
        a: First child hash
        b: Second child hash

    Returns:
        32-byte parent hash, identical for (a, b) and (b, a)

    Raises:
        InvalidArgumentException: If a child is not a field element
    """
    return from_felt(compute_hash_on_elements(_sorted_felts(a, b)))


def standard_leaf_hash(types: Sequence[str], value: Sequence[Any]) -> bytes:
    """
    Hash a typed value tuple into a leaf.

    Example:
        >>> len(standard_leaf_hash(["u8", "bool"], [7, True]))
        32
    """
    return from_felt(pedersen_hash(0, compute_hash_on_elements(serialize_felts(types, value))))


# =============================================================================
# Poseidon
# =============================================================================

def poseidon_node_hash(a: BytesLike, b: BytesLike) -> bytes:
    return from_felt(poseidon_hash_many(_sorted_felts(a, b)))


def poseidon_leaf_hash(types: Sequence[str], value: Sequence[Any]) -> bytes:
    return from_felt(poseidon_hash_many([poseidon_hash_many(serialize_felts(types, value))]))


@dataclass(frozen=True)
class MerkleHasher:
    """
    The hashing capability injected into a tree.

    Attributes:
        name: Registry name of this hasher
        leaf_hash: (types, value) -> 32-byte leaf hash
        node_hash: (a, b) -> 32-byte parent hash, order-insensitive
    """
    name: str
    leaf_hash: LeafHash
    node_hash: NodeHash


STANDARD_HASHER = MerkleHasher(
    name="standard",
    leaf_hash=standard_leaf_hash,
    node_hash=standard_node_hash,
)

POSEIDON_HASHER = MerkleHasher(
    name="poseidon",
    leaf_hash=poseidon_leaf_hash,
    node_hash=poseidon_node_hash,
)

_HASHERS: dict[str, MerkleHasher] = {
    STANDARD_HASHER.name: STANDARD_HASHER,
    POSEIDON_HASHER.name: POSEIDON_HASHER,
}


def get_hasher(name: str) -> MerkleHasher:
    """Look up a registered hasher by name."""
    try:
        return _HASHERS[name]
    except KeyError:
        raise InvalidArgumentException(
            f"Unknown hasher '{name}'",
            details={"available": sorted(_HASHERS)},
        ) from None


__all__ = [
    "NodeHash",
    "LeafHash",
    "to_felt",
    "from_felt",
    "serialize_felts",
    "standard_node_hash",
    "standard_leaf_hash",
    "poseidon_node_hash",
    "poseidon_leaf_hash",
    "MerkleHasher",
    "STANDARD_HASHER",
    "POSEIDON_HASHER",
    "get_hasher",
]
