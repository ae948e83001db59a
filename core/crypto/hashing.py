"""
Hashing & Byte Utilities
Byte and hex helpers shared by the tree engine and the hash functions.

This module provides:
- Node width and byte-like inputs
- Hex encoding/decoding with 0x prefix
- 32-byte left padded hex for integer values
- Lexicographic byte comparison

Determinism Notes:
- Nodes are compared as raw bytes, never as text
- Hex output is always lowercase
"""
from __future__ import annotations

from core.schemas.errors import InvalidArgumentException

# Width of every node in the tree
NODE_SIZE: int = 32

BytesLike = bytes | bytearray | str


def to_hex(data: BytesLike) -> str:
    """
    Convert bytes to hexadecimal string with 0x prefix.

    Hex strings are normalized (lowercased) and returned as-is.

    Example:
        >>> to_hex(bytes.fromhex("deadbeef"))
        '0xdeadbeef'
    """
    if isinstance(data, str):
        return to_hex(from_hex(data))
    return "0x" + bytes(data).hex()


def from_hex(hex_string: str) -> bytes:
    """
    Convert hexadecimal string (with 0x prefix) to bytes.

    Raises:
        InvalidArgumentException: If string doesn't start with 0x, has odd
            length, or contains invalid hex characters
    """
    if not hex_string.startswith("0x"):
        raise InvalidArgumentException(
            f"Hex string must start with '0x' prefix, got: {hex_string[:10]}..."
        )

    hex_content = hex_string[2:]

    if len(hex_content) % 2 != 0:
        raise InvalidArgumentException(
            f"Hex string must have even length after 0x prefix, "
            f"got length {len(hex_content)}"
        )

    try:
        return bytes.fromhex(hex_content)
    except ValueError as e:
        raise InvalidArgumentException(f"Invalid hex characters in string: {e}") from e


def to_bytes(value: BytesLike) -> bytes:
    """Accept raw bytes or a 0x-prefixed hex string and return bytes."""
    if isinstance(value, str):
        return from_hex(value)
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    raise InvalidArgumentException(
        f"Expected bytes or hex string, got {type(value).__name__}"
    )


def parse_int(value: int | str) -> int:
    """Parse an int, or a numeric string in decimal or 0x-hex form."""
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value, 0)
        except ValueError as e:
            raise InvalidArgumentException(f"Invalid numeric string: {value!r}") from e
    raise InvalidArgumentException(f"Expected an integer value, got {type(value).__name__}")


def padded_hex(value: int | str) -> str:
    """
    Encode an integer as 0x-prefixed hex, left padded to 32 bytes.

    Example:
        >>> padded_hex(255)
        '0x00000000000000000000000000000000000000000000000000000000000000ff'
    """
    number = parse_int(value)
    if number < 0:
        raise InvalidArgumentException(f"Cannot encode negative value: {number}")
    if number.bit_length() > NODE_SIZE * 8:
        raise InvalidArgumentException(f"Value does not fit in {NODE_SIZE} bytes: {number}")
    return "0x" + format(number, f"0{NODE_SIZE * 2}x")


def compare_bytes(a: bytes, b: bytes) -> int:
    """Lexicographic byte comparison: -1, 0 or 1."""
    return (a > b) - (a < b)


__all__ = [
    "NODE_SIZE",
    "BytesLike",
    "to_hex",
    "from_hex",
    "to_bytes",
    "parse_int",
    "padded_hex",
    "compare_bytes",
]
