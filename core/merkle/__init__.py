"""
Merkle Tree and Proofs
Flat-array Merkle tree construction, single and multi-leaf proofs,
validation and rendering, plus value-level tree wrappers.

This module provides:
- make_merkle_tree / build_tree: build the flat tree array
- get_proof / process_proof: single-leaf proofs
- get_multi_proof / process_multi_proof: multi-leaf proofs with flags
- is_valid_merkle_tree: self-consistency check that never raises
- render_merkle_tree: indented debug dump
- MerkleTree / StandardMerkleTree: values + hashes + load/dump

Usage:
    from core.merkle import StandardMerkleTree

    tree = StandardMerkleTree.of([[1, 100], [2, 200]], ["ContractAddress", "u256"])
    proof = tree.get_proof([2, 200])
    assert tree.verify([2, 200], proof)

    data = tree.dump()
    assert StandardMerkleTree.load(data).root == tree.root
"""
from .merkle_tree import (
    MultiProof,
    build_tree,
    get_multi_proof,
    get_proof,
    is_valid_merkle_tree,
    make_merkle_tree,
    process_multi_proof,
    process_proof,
    render_merkle_tree,
)

from .standard_tree import (
    IndexedLeaf,
    MerkleTree,
    StandardMerkleTree,
)


__all__ = [
    # Core types
    "MultiProof",
    # Engine
    "build_tree",
    "make_merkle_tree",
    "get_proof",
    "get_multi_proof",
    "process_proof",
    "process_multi_proof",
    "is_valid_merkle_tree",
    "render_merkle_tree",
    # Wrappers
    "IndexedLeaf",
    "MerkleTree",
    "StandardMerkleTree",
]
