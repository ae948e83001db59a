"""
Schemas & Encoding
File: serde.py

Purpose: Typed value encoding for leaf hashing.
Each typed value is range-checked and encoded as one or more 32-byte
left padded hex elements, the payload consumed by the leaf hash.
"""

from __future__ import annotations

from typing import Any, Literal, Sequence, get_args

from core.crypto.hashing import padded_hex, parse_int
from core.schemas.errors import InvalidArgumentException

ValueType = Literal[
    "felt252",
    "ContractAddress",
    "u8",
    "u16",
    "u32",
    "u64",
    "u128",
    "u256",
    "bool",
]

VALUE_TYPES: frozenset[str] = frozenset(get_args(ValueType))

# Largest value a field element can hold (P - 1)
FELT_MAX: int = 2**251 + 17 * 2**192

MAX_VALUES: dict[str, int] = {
    "felt252": FELT_MAX,
    "ContractAddress": FELT_MAX,
    "u8": 2**8 - 1,
    "u16": 2**16 - 1,
    "u32": 2**32 - 1,
    "u64": 2**64 - 1,
    "u128": 2**128 - 1,
    "u256": 2**256 - 1,
}

_U128_MASK = 2**128 - 1


def serialize(types: Sequence[str], values: Sequence[Any]) -> list[str]:
    """
    Encode a tuple of typed values into a flat list of hex elements.

    Args:
        types: Value type of each position (see ValueType)
        values: Values matching types position by position

    Returns:
        Flat list of 0x-prefixed hex elements

    Raises:
        InvalidArgumentException: On length mismatch, unknown type,
            negative value or overflow
    """
    if len(types) != len(values):
        raise InvalidArgumentException(
            "types/values length mismatch",
            details={"types": len(types), "values": len(values)},
        )
    encoded: list[str] = []
    for value_type, value in zip(types, values):
        encoded.extend(serialize_single(value_type, value))
    return encoded


def serialize_single(value_type: str, value: Any) -> list[str]:
    """Encode one typed value."""
    if value_type == "bool":
        return ["0x01" if value else "0x00"]

    number = check_overflow(value, value_type)
    if value_type == "u256":
        # [low, high]
        return [padded_hex(number & _U128_MASK), padded_hex(number >> 128)]
    return [padded_hex(number)]


def check_overflow(value: Any, value_type: str) -> int:
    """Range check value against value_type and return it as an int."""
    if value_type not in MAX_VALUES:
        raise InvalidArgumentException(f"Unknown type '{value_type}'")

    number = parse_int(value)
    if number < 0:
        raise InvalidArgumentException(f"Value is negative for type {value_type}")
    if number > MAX_VALUES[value_type]:
        raise InvalidArgumentException(f"Value is too large for type {value_type}")
    return number


def check_leaf_encoding(types: Sequence[str]) -> None:
    """Reject encodings that name unknown value types."""
    for value_type in types:
        if value_type not in VALUE_TYPES:
            raise InvalidArgumentException(f"Unknown type '{value_type}'")


__all__ = [
    "ValueType",
    "VALUE_TYPES",
    "FELT_MAX",
    "serialize",
    "serialize_single",
    "check_overflow",
    "check_leaf_encoding",
]
