"""
Schemas
File: __init__.py

Purpose: Export the error taxonomy shared by the core, the CLI and the API.
"""

from .errors import (
    ErrorCodes,
    MerkleError,
    MerkleTreeException,
    ConfigError,
    TreeNotFoundError,
    OutOfRangeError,
    InvalidLeafSizeError,
    PersistenceError,
    CorruptSnapshotError,
    CorruptMetadataError,
    HashPathFormatError,
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
