"""
Error Taxonomy
File: errors.py

Purpose: Standard error taxonomy for the Merkle tree engine and its callers.
Defines both Pydantic models for structured error communication
and Python exceptions for control flow.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Error Codes (Machine-Readable Constants)
# =============================================================================

class ErrorCodes:
    """Stable machine-readable error codes used across the project."""

    # Configuration Errors
    CONFIG_ERROR = "CONFIG_ERROR"

    # Per-operation Errors
    TREE_NOT_FOUND = "TREE_NOT_FOUND"
    OUT_OF_RANGE = "OUT_OF_RANGE"
    INVALID_LEAF_SIZE = "INVALID_LEAF_SIZE"

    # Storage Errors
    PERSISTENCE_ERROR = "PERSISTENCE_ERROR"
    CORRUPT_SNAPSHOT = "CORRUPT_SNAPSHOT"
    CORRUPT_METADATA = "CORRUPT_METADATA"

    # Proof Errors
    HASH_PATH_INVALID = "HASH_PATH_INVALID"


# =============================================================================
# Pydantic Error Models (Structured Communication)
# =============================================================================

class MerkleError(BaseModel):
    """
    Base error model for structured error communication.

    Used by the HTTP layer and the CLI JSON output to report failures
    without leaking exception objects.
    """

    model_config = ConfigDict(
        extra="forbid",
        frozen=False,
        validate_assignment=True,
    )

    code: str = Field(
        ...,
        description="Stable machine-readable error code",
        examples=[ErrorCodes.OUT_OF_RANGE],
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

    def to_exception(self) -> "MerkleTreeException":
        """Convert this error model to a raised exception."""
        return MerkleTreeException(
            code=self.code,
            message=self.message,
            details=self.details,
            retryable=self.retryable,
        )


# =============================================================================
# Python Exceptions (Control Flow)
# =============================================================================

class MerkleTreeException(Exception):
    """
    Base exception for all Merkle tree errors.

    This exception carries structured error information and can be
    converted to/from MerkleError models.
    """

    def __init__(
        self,
        message: str,
        code: str = "MERKLE_ERROR",
        details: dict[str, Any] | None = None,
        retryable: bool = False,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}
        self.retryable = retryable

    def to_error_model(self) -> MerkleError:
        """Convert this exception to a MerkleError model."""
        return MerkleError(
            code=self.code,
            message=self.message,
            details=self.details,
            retryable=self.retryable,
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


class ConfigError(MerkleTreeException):
    """Invalid tree configuration (depth out of range, bad name). Fatal."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.CONFIG_ERROR,
            details=details,
            retryable=False,
        )


class TreeNotFoundError(MerkleTreeException):
    """No tree with the requested name has been created."""

    def __init__(
        self,
        name: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=f"Tree not found: {name}",
            code=ErrorCodes.TREE_NOT_FOUND,
            details={"name": name, **(details or {})},
            retryable=False,
        )


class OutOfRangeError(MerkleTreeException, IndexError):
    """Leaf index outside ``[0, 2**depth)``."""

    def __init__(
        self,
        message: str,
        index: int | None = None,
        depth: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if index is not None:
            full_details["index"] = index
        if depth is not None:
            full_details["depth"] = depth
        super().__init__(
            message=message,
            code=ErrorCodes.OUT_OF_RANGE,
            details=full_details,
            retryable=False,
        )


class InvalidLeafSizeError(MerkleTreeException, ValueError):
    """Leaf value is not exactly LEAF_BYTES long."""

    def __init__(
        self,
        message: str,
        expected: int | None = None,
        actual: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if expected is not None:
            full_details["expected"] = expected
        if actual is not None:
            full_details["actual"] = actual
        super().__init__(
            message=message,
            code=ErrorCodes.INVALID_LEAF_SIZE,
            details=full_details,
            retryable=False,
        )


class PersistenceError(MerkleTreeException):
    """Wraps any failure raised by the storage backend."""

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if operation:
            full_details["operation"] = operation
        super().__init__(
            message=message,
            code=ErrorCodes.PERSISTENCE_ERROR,
            details=full_details,
            retryable=True,
        )


class CorruptSnapshotError(MerkleTreeException):
    """A decoded snapshot does not match the expected shape, depth or root."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.CORRUPT_SNAPSHOT,
            details=details,
            retryable=False,
        )


class CorruptMetadataError(MerkleTreeException):
    """Stored metadata record has the wrong length or layout."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.CORRUPT_METADATA,
            details=details,
            retryable=False,
        )


class HashPathFormatError(MerkleTreeException, ValueError):
    """Hash path entries or encoding are malformed."""

    def __init__(
        self,
        message: str,
        length: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if length is not None:
            full_details["length"] = length
        super().__init__(
            message=message,
            code=ErrorCodes.HASH_PATH_INVALID,
            details=full_details,
            retryable=False,
        )


__all__ = [
    "ErrorCodes",
    "MerkleError",
    "MerkleTreeException",
    "ConfigError",
    "TreeNotFoundError",
    "OutOfRangeError",
    "InvalidLeafSizeError",
    "PersistenceError",
    "CorruptSnapshotError",
    "CorruptMetadataError",
    "HashPathFormatError",
]
