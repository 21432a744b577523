"""
Hashing Utilities
Hash primitive used by the Merkle tree engine.

This module provides:
- SHA-256 hashing for raw bytes
- Sha256Hasher: the leaf hash / node compression pair used by MerkleTree
- Hex encoding/decoding with 0x prefix

Commitment Rules:
1. Leaf hashing: node = sha256(leaf)
2. Node compression: parent = sha256(left + right)
"""
from __future__ import annotations

import hashlib
from typing import Protocol


HASH_BYTES = 32


class Hasher(Protocol):
    """Hashing collaborator required by the tree engine."""

    def hash(self, data: bytes) -> bytes:
        ...

    def compress(self, left: bytes, right: bytes) -> bytes:
        ...


def sha256(data: bytes) -> bytes:
    """
    Compute SHA-256 hash of raw bytes.

    Args:
        data: Raw bytes to hash

    Returns:
        32-byte SHA-256 digest

    Example:
        >>> sha256(b"hello").hex()
        '2cf24dba5fb0a30e26e83b2ac5b9e29e1b161e5c1fa7425e73043362938b9824'
    """
    return hashlib.sha256(data).digest()


def hash_concat(left: bytes, right: bytes) -> bytes:
    """
    Hash the concatenation of two byte sequences.

    This is used for computing Merkle parent hashes:
    parent = sha256(left + right)

    Args:
        left: Left child hash (32 bytes)
        right: Right child hash (32 bytes)

    Returns:
        32-byte SHA-256 digest of concatenation
    """
    return sha256(left + right)


class Sha256Hasher:
    """
    SHA-256 based hasher.

    ``hash`` digests an arbitrary byte string (a 64-byte leaf in practice),
    ``compress`` mixes two 32-byte node hashes into their parent.
    """

    def hash(self, data: bytes) -> bytes:
        return sha256(data)

    def compress(self, left: bytes, right: bytes) -> bytes:
        return hash_concat(left, right)

    def __repr__(self) -> str:
        return "Sha256Hasher()"


def to_hex(data: bytes) -> str:
    """
    Convert bytes to hexadecimal string with 0x prefix.

    Example:
        >>> to_hex(bytes.fromhex("deadbeef"))
        '0xdeadbeef'
    """
    return "0x" + data.hex()


def from_hex(hex_string: str) -> bytes:
    """
    Convert hexadecimal string to bytes.

    The 0x prefix is optional so values can be pasted from either
    ``to_hex`` output or plain ``bytes.hex()`` output.

    Raises:
        ValueError: If the string has odd length or contains invalid
                   hex characters

    Example:
        >>> from_hex("0xdeadbeef").hex()
        'deadbeef'
    """
    hex_content = hex_string[2:] if hex_string.startswith(("0x", "0X")) else hex_string

    if len(hex_content) % 2 != 0:
        raise ValueError(
            f"Hex string must have even length, got length {len(hex_content)}"
        )

    try:
        return bytes.fromhex(hex_content)
    except ValueError as e:
        raise ValueError(f"Invalid hex characters in string: {e}") from e


__all__ = [
    "HASH_BYTES",
    "Hasher",
    "Sha256Hasher",
    "sha256",
    "hash_concat",
    "to_hex",
    "from_hex",
]
