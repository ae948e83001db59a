"""
Schemas & Encoding
File: errors.py

Purpose: Standard error taxonomy for the Merkle tree engine.
Defines both Pydantic models for structured error communication
and Python exceptions for control flow.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Error Codes (Machine-Readable Constants)
# =============================================================================

class ErrorCodes:
    """Stable machine-readable error codes used across the engine."""

    # Caller misuse
    INVALID_ARGUMENT = "INVALID_ARGUMENT"

    # Structural inconsistencies discovered mid-algorithm
    INVARIANT_VIOLATION = "INVARIANT_VIOLATION"


# =============================================================================
# Pydantic Error Models (Structured Communication)
# =============================================================================

class MerkleTreeError(BaseModel):
    """
    Base error model for structured error communication.

    Used by the CLI to report failures as JSON without a traceback.
    """

    model_config = ConfigDict(
        extra="forbid",
        frozen=False,
        validate_assignment=True,
    )

    code: str = Field(
        ...,
        description="Stable machine-readable error code",
        examples=[ErrorCodes.INVALID_ARGUMENT],
    )
    message: str = Field(
        ...,
        description="Human-readable error message",
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional structured details about the error",
    )
    retryable: bool = Field(
        default=False,
        description="Whether the operation can be retried",
    )


# =============================================================================
# Python Exceptions (Control Flow)
# =============================================================================

class MerkleTreeException(Exception):
    """
    Base exception for all Merkle tree errors.

    Carries structured error information and can be converted
    to a MerkleTreeError model.
    """

    def __init__(
        self,
        message: str,
        code: str = "MERKLE_TREE_ERROR",
        details: dict[str, Any] | None = None,
        retryable: bool = False,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}
        self.retryable = retryable

    def to_error_model(self) -> MerkleTreeError:
        """Convert this exception to a MerkleTreeError model."""
        return MerkleTreeError(
            code=self.code,
            message=self.message,
            details=self.details,
            retryable=self.retryable,
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


class InvalidArgumentException(MerkleTreeException, ValueError):
    """
    Raised on caller misuse: empty leaf sets, duplicated or non-leaf
    indices, malformed nodes, unknown formats and bad value encodings.
    """

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.INVALID_ARGUMENT,
            details=details,
            retryable=False,
        )


class InvariantViolationException(MerkleTreeException):
    """
    Raised when an internal invariant does not hold, e.g. a multiproof
    whose flags cannot be replayed against its leaves and proof.
    """

    def __init__(
        self,
        message: str = "Invariant violation",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.INVARIANT_VIOLATION,
            details=details,
            retryable=False,
        )


def validate_argument(condition: bool, message: str, **details: Any) -> None:
    """Raise InvalidArgumentException unless condition holds."""
    if not condition:
        raise InvalidArgumentException(message, details=details or None)


def invariant(condition: bool, message: str = "Invariant violation", **details: Any) -> None:
    """Raise InvariantViolationException unless condition holds."""
    if not condition:
        raise InvariantViolationException(message, details=details or None)
