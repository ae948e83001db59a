"""
Test fixtures package for Merkle tree tests.

This package provides factory functions for creating test objects:
- common.py: leaf hashes, typed values and prebuilt trees

Usage:
    from fixtures import make_leaves, make_values

    def test_something():
        tree = make_merkle_tree(make_leaves(4))
"""

from .common import (
    ENCODING,
    ZERO,
    make_leaf,
    make_leaves,
    make_standard_tree,
    make_values,
)

__all__ = [
    "ENCODING",
    "ZERO",
    "make_leaf",
    "make_leaves",
    "make_standard_tree",
    "make_values",
]
