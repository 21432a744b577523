"""
Core cryptographic utilities.

Provides the hash primitive consumed by the Merkle tree engine.
"""
from .hashing import (
    HASH_BYTES,
    Hasher,
    Sha256Hasher,
    sha256,
    hash_concat,
    to_hex,
    from_hex,
)

__all__ = [
    "HASH_BYTES",
    "Hasher",
    "Sha256Hasher",
    "sha256",
    "hash_concat",
    "to_hex",
    "from_hex",
]
