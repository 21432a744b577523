"""
Metadata and Snapshot Codecs
File: codec.py

Purpose: Fixed binary layouts for the two records a tree persists.

Metadata record (40 bytes, keyed by tree name):
    root    32 bytes
    depth   uint32 little-endian
    pad     4 zero bytes

Snapshot record (keyed by snapshot_key(name)):
    magic     b"HPSN"
    version   uint8
    depth     uint32 little-endian
    levels    depth + 1 times: count uint32 LE, count * 32-byte hashes
    checksum  sha256 over every preceding byte

Trailing zero-hash slots are never written; they are reconstructed from
the zero-hash table on load.
"""
from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import Sequence

from core.crypto.hashing import HASH_BYTES, sha256
from core.schemas.errors import ConfigError, CorruptMetadataError, CorruptSnapshotError


METADATA_BYTES = 40
SNAPSHOT_MAGIC = b"HPSN"
SNAPSHOT_VERSION = 1
SNAPSHOT_KEY_PREFIX = b"\x00snapshot:"

_METADATA = struct.Struct("<32sI4x")
_SNAPSHOT_HEADER = struct.Struct("<4sBI")
_COUNT = struct.Struct("<I")


@dataclass(frozen=True)
class Metadata:
    """
    Durable identity of a tree.

    Attributes:
        root: Current 32-byte root hash
        depth: Fixed tree depth
    """
    root: bytes
    depth: int

    def __post_init__(self) -> None:
        if len(self.root) != HASH_BYTES:
            raise ValueError(f"Root must be {HASH_BYTES} bytes, got {len(self.root)}")
        if self.depth < 0 or self.depth > 0xFFFFFFFF:
            raise ValueError(f"Depth {self.depth} does not fit in uint32")


def tree_key(name: str) -> bytes:
    """Storage key of the metadata record for ``name``."""
    if not name:
        raise ConfigError("Tree name must not be empty")
    if name.startswith("\x00"):
        raise ConfigError(
            "Tree name must not start with a NUL character",
            details={"name": repr(name)},
        )
    return name.encode("utf-8")


def snapshot_key(name: str) -> bytes:
    """Reserved storage key of the snapshot record for ``name``."""
    return SNAPSHOT_KEY_PREFIX + tree_key(name)


def encode_metadata(metadata: Metadata) -> bytes:
    return _METADATA.pack(metadata.root, metadata.depth)


def decode_metadata(data: bytes) -> Metadata:
    """
    Decode a 40-byte metadata record.

    Raises:
        CorruptMetadataError: If the record length or padding is wrong
    """
    if len(data) != METADATA_BYTES:
        raise CorruptMetadataError(
            f"Metadata must be {METADATA_BYTES} bytes, got {len(data)}",
            details={"length": len(data)},
        )
    if data[36:] != b"\x00\x00\x00\x00":
        raise CorruptMetadataError("Metadata padding bytes must be zero")
    root, depth = _METADATA.unpack(data)
    return Metadata(root=root, depth=depth)


def encode_snapshot(levels: Sequence[Sequence[bytes]]) -> bytes:
    """Serialize populated level prefixes, appending a SHA-256 checksum."""
    depth = len(levels) - 1
    parts = [_SNAPSHOT_HEADER.pack(SNAPSHOT_MAGIC, SNAPSHOT_VERSION, depth)]
    for nodes in levels:
        parts.append(_COUNT.pack(len(nodes)))
        parts.extend(nodes)
    body = b"".join(parts)
    return body + sha256(body)


def _expected_counts(leaf_count: int, depth: int) -> list[int]:
    if leaf_count == 0:
        return [0] * depth + [1]
    counts = [leaf_count]
    for _ in range(depth):
        counts.append((counts[-1] + 1) // 2)
    return counts


def decode_snapshot(data: bytes, depth: int) -> list[list[bytes]]:
    """
    Decode a snapshot record into populated level prefixes.

    Validates magic, version, depth, checksum, exact length and the
    per-level node counts implied by the leaf count.

    Args:
        data: Raw snapshot bytes
        depth: Depth the snapshot must have

    Returns:
        List of depth + 1 node lists

    Raises:
        CorruptSnapshotError: On any mismatch
    """
    minimum = _SNAPSHOT_HEADER.size + HASH_BYTES
    if len(data) < minimum:
        raise CorruptSnapshotError(
            f"Snapshot too short: {len(data)} bytes",
            details={"length": len(data)},
        )

    body, checksum = data[:-HASH_BYTES], data[-HASH_BYTES:]
    if sha256(body) != checksum:
        raise CorruptSnapshotError("Snapshot checksum mismatch")

    magic, version, stored_depth = _SNAPSHOT_HEADER.unpack_from(body, 0)
    if magic != SNAPSHOT_MAGIC:
        raise CorruptSnapshotError(f"Bad snapshot magic: {magic!r}")
    if version != SNAPSHOT_VERSION:
        raise CorruptSnapshotError(
            f"Unsupported snapshot version: {version}",
            details={"version": version},
        )
    if stored_depth != depth:
        raise CorruptSnapshotError(
            f"Snapshot depth {stored_depth} does not match tree depth {depth}",
            details={"snapshot_depth": stored_depth, "depth": depth},
        )

    levels: list[list[bytes]] = []
    offset = _SNAPSHOT_HEADER.size
    for level in range(depth + 1):
        if offset + _COUNT.size > len(body):
            raise CorruptSnapshotError(f"Snapshot truncated at level {level}")
        (count,) = _COUNT.unpack_from(body, offset)
        offset += _COUNT.size
        end = offset + count * HASH_BYTES
        if end > len(body):
            raise CorruptSnapshotError(f"Snapshot truncated at level {level}")
        levels.append([body[i:i + HASH_BYTES] for i in range(offset, end, HASH_BYTES)])
        offset = end

    if offset != len(body):
        raise CorruptSnapshotError(
            f"Snapshot has {len(body) - offset} trailing bytes"
        )

    counts = [len(nodes) for nodes in levels]
    if counts[0] > (1 << depth) or counts != _expected_counts(counts[0], depth):
        raise CorruptSnapshotError(
            "Snapshot level sizes are inconsistent",
            details={"counts": counts},
        )

    return levels


__all__ = [
    "METADATA_BYTES",
    "SNAPSHOT_MAGIC",
    "SNAPSHOT_VERSION",
    "SNAPSHOT_KEY_PREFIX",
    "Metadata",
    "tree_key",
    "snapshot_key",
    "encode_metadata",
    "decode_metadata",
    "encode_snapshot",
    "decode_snapshot",
]
