"""
Schemas & Encoding
File: __init__.py

Purpose: Export the public API for the schemas module.
serde is imported directly (core.schemas.serde) since it depends on core.crypto.
"""

# Format tags
from .versioning import (
    STANDARD_FORMAT,
    SUPPORTED_FORMATS,
    is_supported_format,
)

# Error models and exceptions
from .errors import (
    ErrorCodes,
    InvalidArgumentException,
    InvariantViolationException,
    MerkleTreeError,
    MerkleTreeException,
    invariant,
    validate_argument,
)

# Persisted tree shape
from .tree_data import (
    IndexedValue,
    StandardMerkleTreeData,
)

__all__ = [
    "STANDARD_FORMAT",
    "SUPPORTED_FORMATS",
    "is_supported_format",
    "ErrorCodes",
    "InvalidArgumentException",
    "InvariantViolationException",
    "MerkleTreeError",
    "MerkleTreeException",
    "invariant",
    "validate_argument",
    "IndexedValue",
    "StandardMerkleTreeData",
]
