"""
Schemas & Encoding
File: versioning.py

Purpose: Centralize the dump format tags.
No imports from other schema files to avoid circular dependencies.
"""

# Format tag written by StandardMerkleTree.dump()
STANDARD_FORMAT: str = "standard-v1"

SUPPORTED_FORMATS: frozenset[str] = frozenset({STANDARD_FORMAT})


def is_supported_format(fmt: str) -> bool:
    """Check if a dump format tag is supported without raising."""
    return fmt in SUPPORTED_FORMATS
