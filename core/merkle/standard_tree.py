"""
Merkle Tree Wrappers
Class-based interfaces that bundle a hash function with the tree engine.

This module provides:
- MerkleTree: values + leaf hash + node hash over the flat tree engine
- StandardMerkleTree: typed value tuples hashed with the standard hasher,
  with dump()/load() in the "standard-v1" format

Leaves and proofs cross this boundary as 0x-prefixed hex strings;
the engine underneath works on raw bytes.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Generic, Iterator, Sequence, TypeVar

from pydantic import ValidationError

from core.crypto.hashes import STANDARD_HASHER, MerkleHasher, NodeHash
from core.crypto.hashing import BytesLike, to_bytes, to_hex
from core.merkle.merkle_tree import (
    MultiProof,
    get_multi_proof,
    get_proof,
    is_leaf_node,
    is_valid_merkle_tree,
    make_merkle_tree,
    process_multi_proof,
    process_proof,
    render_merkle_tree,
)
from core.schemas.errors import InvalidArgumentException, invariant, validate_argument
from core.schemas.serde import check_leaf_encoding
from core.schemas.tree_data import IndexedValue, StandardMerkleTreeData
from core.schemas.versioning import STANDARD_FORMAT, is_supported_format


logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class IndexedLeaf(Generic[T]):
    """An input value and the tree index of its leaf."""
    value: T
    tree_index: int


class MerkleTree(Generic[T]):
    """
    A Merkle tree over application values.

    Holds the flat tree array together with the original values, so
    proofs can be requested by value or by value index.
    """

    def __init__(
        self,
        tree: Sequence[bytes],
        values: Sequence[IndexedLeaf[T]],
        leaf_hash: Callable[[T], bytes],
        node_hash: NodeHash,
    ) -> None:
        self._tree = list(tree)
        self._values = list(values)
        self._leaf_hash = leaf_hash
        self._node_hash = node_hash
        # built on first lookup so unvalidated loads never hash values
        self._hash_lookup: dict[bytes, int] | None = None

    @staticmethod
    def prepare(
        values: Sequence[T],
        leaf_hash: Callable[[T], bytes],
        node_hash: NodeHash,
    ) -> tuple[list[bytes], list[IndexedLeaf[T]]]:
        """
        Hash values into leaves and build the tree.

        Input order is preserved: value k sits at tree index len - 1 - k.
        """
        leaves = [leaf_hash(value) for value in values]
        tree = make_merkle_tree(leaves, node_hash)
        indexed = [
            IndexedLeaf(value=value, tree_index=len(tree) - 1 - k)
            for k, value in enumerate(values)
        ]
        return tree, indexed

    # -------------------------------------------------------------------------
    # Accessors
    # -------------------------------------------------------------------------

    @property
    def root(self) -> str:
        """The root hash as hex."""
        return to_hex(self._tree[0])

    @property
    def tree(self) -> list[bytes]:
        """A copy of the flat tree array."""
        return list(self._tree)

    def __len__(self) -> int:
        return len(self._values)

    def at(self, index: int) -> T | None:
        """The value at a value index, or None when out of range."""
        if 0 <= index < len(self._values):
            return self._values[index].value
        return None

    def entries(self) -> Iterator[tuple[int, T]]:
        """Yield (value_index, value) pairs in input order."""
        for value_index, entry in enumerate(self._values):
            yield value_index, entry.value

    def __iter__(self) -> Iterator[tuple[int, T]]:
        return self.entries()

    def render(self) -> str:
        return render_merkle_tree(self._tree)

    def leaf_hash(self, leaf: T) -> str:
        return to_hex(self._leaf_hash(leaf))

    def leaf_lookup(self, leaf: T) -> int:
        """
        Find the value index of a value.

        Raises:
            InvalidArgumentException: If the value is not in the tree
        """
        if self._hash_lookup is None:
            self._hash_lookup = {
                self._leaf_hash(entry.value): value_index
                for value_index, entry in enumerate(self._values)
            }
        value_index = self._hash_lookup.get(self._leaf_hash(leaf))
        if value_index is None:
            raise InvalidArgumentException("Leaf is not in tree")
        return value_index

    # -------------------------------------------------------------------------
    # Validation
    # -------------------------------------------------------------------------

    def validate(self) -> None:
        """
        Check every value against its leaf and the tree against itself.

        Raises:
            InvalidArgumentException: If a value does not match its leaf
                or the tree is not a valid Merkle tree
        """
        for value_index in range(len(self._values)):
            self._validate_value(value_index)
        if not is_valid_merkle_tree(self._tree, self._node_hash):
            raise InvalidArgumentException("Merkle tree is invalid")

    def _check_bounds(self, value_index: int) -> None:
        if not 0 <= value_index < len(self._values):
            raise InvalidArgumentException(
                "Index out of bounds",
                details={"index": value_index, "length": len(self._values)},
            )

    def _validate_value(self, value_index: int) -> bytes:
        self._check_bounds(value_index)
        entry = self._values[value_index]
        validate_argument(
            is_leaf_node(self._tree, entry.tree_index),
            "Index is not a leaf",
            tree_index=entry.tree_index,
        )
        leaf = self._leaf_hash(entry.value)
        validate_argument(
            leaf == self._tree[entry.tree_index],
            "Merkle tree does not contain the expected value",
            value_index=value_index,
        )
        return leaf

    def _value_index(self, leaf: T | int) -> int:
        if isinstance(leaf, int) and not isinstance(leaf, bool):
            return leaf
        return self.leaf_lookup(leaf)

    # -------------------------------------------------------------------------
    # Proofs
    # -------------------------------------------------------------------------

    def get_proof(self, leaf: T | int) -> list[str]:
        """
        Single proof for a value, given the value or its value index.

        Returns:
            Sibling hashes as hex, bottom-up
        """
        value_index = self._value_index(leaf)
        leaf_hash = self._validate_value(value_index)

        proof = get_proof(self._tree, self._values[value_index].tree_index)
        invariant(
            self._verify(leaf_hash, proof),
            "Unable to prove value",
            value_index=value_index,
        )
        return [to_hex(node) for node in proof]

    def get_multi_proof(self, leaves: Sequence[T | int]) -> MultiProof[T]:
        """
        Multiproof for several values, given values or value indices.

        Returns:
            MultiProof whose leaves are the values, in replay order,
            and whose proof items are hex strings
        """
        value_indices = [self._value_index(leaf) for leaf in leaves]
        for value_index in value_indices:
            self._validate_value(value_index)

        multiproof = get_multi_proof(
            self._tree,
            [self._values[i].tree_index for i in value_indices],
        )
        invariant(
            self._verify_multi_proof(multiproof),
            "Unable to prove values",
            value_indices=value_indices,
        )

        # engine leaves come back in descending tree index order
        by_tree_index = {self._values[i].tree_index: i for i in value_indices}

        return MultiProof(
            leaves=[self._values[by_tree_index[i]].value for i in sorted(by_tree_index, reverse=True)],
            proof=[to_hex(node) for node in multiproof.proof],
            proof_flags=list(multiproof.proof_flags),
        )

    def verify(self, leaf: T | int, proof: Sequence[BytesLike]) -> bool:
        """Check a single proof for a value (or value index) against this root."""
        if isinstance(leaf, int) and not isinstance(leaf, bool):
            self._check_bounds(leaf)
            leaf = self._values[leaf].value
        return self._verify(self._leaf_hash(leaf), [to_bytes(node) for node in proof])

    def verify_multi_proof(self, multiproof: MultiProof[T | int]) -> bool:
        """Check a multiproof of values (or value indices) against this root."""
        leaves = []
        for leaf in multiproof.leaves:
            if isinstance(leaf, int) and not isinstance(leaf, bool):
                self._check_bounds(leaf)
                leaf = self._values[leaf].value
            leaves.append(self._leaf_hash(leaf))
        return self._verify_multi_proof(
            MultiProof(
                leaves=leaves,
                proof=[to_bytes(node) for node in multiproof.proof],
                proof_flags=list(multiproof.proof_flags),
            )
        )

    def _verify(self, leaf_hash: bytes, proof: Sequence[bytes]) -> bool:
        return process_proof(leaf_hash, proof, self._node_hash) == self._tree[0]

    def _verify_multi_proof(self, multiproof: MultiProof[bytes]) -> bool:
        return process_multi_proof(multiproof, self._node_hash) == self._tree[0]


class StandardMerkleTree(MerkleTree[list[Any]]):
    """
    Merkle tree over typed value tuples.

    Every value is a tuple matching leaf_encoding, e.g. ["ContractAddress",
    "u256"]. Leaves are hashed with the standard hasher unless another is
    injected.

    Example:
        >>> tree = StandardMerkleTree.of([[1, 100], [2, 200]], ["ContractAddress", "u256"])
        >>> proof = tree.get_proof(0)
        >>> StandardMerkleTree.verify_leaf_in_root(tree.root, ["ContractAddress", "u256"], [1, 100], proof)
        True
    """

    def __init__(
        self,
        tree: Sequence[bytes],
        values: Sequence[IndexedLeaf[list[Any]]],
        leaf_encoding: Sequence[str],
        hasher: MerkleHasher = STANDARD_HASHER,
    ) -> None:
        check_leaf_encoding(leaf_encoding)
        self._leaf_encoding = list(leaf_encoding)
        self._hasher = hasher
        super().__init__(
            tree,
            values,
            leaf_hash=lambda value: hasher.leaf_hash(self._leaf_encoding, value),
            node_hash=hasher.node_hash,
        )

    @property
    def leaf_encoding(self) -> list[str]:
        return list(self._leaf_encoding)

    @classmethod
    def of(
        cls,
        values: Sequence[Sequence[Any]],
        leaf_encoding: Sequence[str],
        hasher: MerkleHasher = STANDARD_HASHER,
    ) -> "StandardMerkleTree":
        """
        Build a tree from typed value tuples.

        Raises:
            InvalidArgumentException: If values is empty or a value does
                not match leaf_encoding
        """
        check_leaf_encoding(leaf_encoding)
        tree, indexed = cls.prepare(
            [list(value) for value in values],
            leaf_hash=lambda value: hasher.leaf_hash(leaf_encoding, value),
            node_hash=hasher.node_hash,
        )
        logger.debug(
            "Built %s tree over %d values, root %s",
            hasher.name, len(indexed), to_hex(tree[0]),
        )
        return cls(tree, indexed, leaf_encoding, hasher)

    @classmethod
    def load(
        cls,
        data: StandardMerkleTreeData | dict[str, Any],
        hasher: MerkleHasher = STANDARD_HASHER,
        validate: bool = True,
    ) -> "StandardMerkleTree":
        """
        Rebuild a tree from its dump and validate it.

        Pass validate=False only for dumps from a trusted source; proofs
        from an unvalidated tree are still re-checked against its root.

        Raises:
            InvalidArgumentException: On unknown format, missing leaf
                encoding, or a dump that does not validate
        """
        if isinstance(data, dict):
            fmt = data.get("format")
            validate_argument(is_supported_format(fmt), f"Unknown format '{fmt}'")
            try:
                data = StandardMerkleTreeData.model_validate(data)
            except ValidationError as e:
                raise InvalidArgumentException(
                    f"Malformed tree dump: {e.error_count()} validation error(s)",
                    details={"errors": [err["msg"] for err in e.errors()]},
                ) from e

        validate_argument(is_supported_format(data.format), f"Unknown format '{data.format}'")
        validate_argument(data.leaf_encoding is not None, "Expected leaf encoding")

        tree = cls(
            [to_bytes(node) for node in data.tree],
            [IndexedLeaf(value=entry.value, tree_index=entry.tree_index) for entry in data.values],
            data.leaf_encoding,
            hasher,
        )
        if validate:
            tree.validate()
        logger.debug("Loaded %s tree with %d values", data.format, len(tree))
        return tree

    @staticmethod
    def verify_leaf_in_root(
        root: BytesLike,
        leaf_encoding: Sequence[str],
        leaf: Sequence[Any],
        proof: Sequence[BytesLike],
        hasher: MerkleHasher = STANDARD_HASHER,
    ) -> bool:
        """Check a single proof for a value against a trusted root."""
        computed = process_proof(
            hasher.leaf_hash(leaf_encoding, leaf),
            [to_bytes(node) for node in proof],
            hasher.node_hash,
        )
        return computed == to_bytes(root)

    @staticmethod
    def verify_leaves_in_root(
        root: BytesLike,
        leaf_encoding: Sequence[str],
        multiproof: MultiProof[Sequence[Any]],
        hasher: MerkleHasher = STANDARD_HASHER,
    ) -> bool:
        """Check a multiproof of values against a trusted root."""
        computed = process_multi_proof(
            MultiProof(
                leaves=[hasher.leaf_hash(leaf_encoding, leaf) for leaf in multiproof.leaves],
                proof=[to_bytes(node) for node in multiproof.proof],
                proof_flags=list(multiproof.proof_flags),
            ),
            hasher.node_hash,
        )
        return computed == to_bytes(root)

    def dump(self) -> StandardMerkleTreeData:
        """Persisted form: format tag, hex tree, values with tree indices."""
        return StandardMerkleTreeData(
            format=STANDARD_FORMAT,
            leaf_encoding=self._leaf_encoding,
            tree=[to_hex(node) for node in self._tree],
            values=[
                IndexedValue(value=entry.value, tree_index=entry.tree_index)
                for entry in self._values
            ],
        )


__all__ = [
    "IndexedLeaf",
    "MerkleTree",
    "StandardMerkleTree",
]
