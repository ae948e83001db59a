"""
Schemas & Encoding
File: tree_data.py

Purpose: Persisted/transport shape of a standard Merkle tree.
A record holds the format tag, the flat tree array as hex strings,
and the original values keyed by their tree index.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .versioning import STANDARD_FORMAT


class IndexedValue(BaseModel):
    """An original value and the tree index of its leaf."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    value: list[Any] = Field(
        ...,
        description="The original typed value tuple",
    )
    tree_index: int = Field(
        ...,
        alias="treeIndex",
        description="Index of the value's leaf in the flat tree array",
        ge=0,
    )


class StandardMerkleTreeData(BaseModel):
    """
    Dump of a StandardMerkleTree.

    Reloading this record and validating it reproduces the outcome of
    validating the freshly built tree.
    """

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    format: str = Field(
        default=STANDARD_FORMAT,
        description="Dump format tag",
    )
    leaf_encoding: list[str] | None = Field(
        default=None,
        alias="leafEncoding",
        description="Value type of each position in a value tuple",
    )
    tree: list[str] = Field(
        ...,
        description="Flat tree array as 0x-prefixed hex strings, root first",
    )
    values: list[IndexedValue] = Field(
        default_factory=list,
        description="Original values in input order",
    )

    @field_validator("tree")
    @classmethod
    def _lowercase_hex(cls, tree: list[str]) -> list[str]:
        return [node.lower() for node in tree]

    def to_json(self, indent: int | None = 2) -> str:
        """Serialize with camelCase keys."""
        return self.model_dump_json(by_alias=True, indent=indent)
