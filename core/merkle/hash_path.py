"""
Hash Path Value Object
Ordered sibling pairs proving a leaf's inclusion under a root.

A hash path for a tree of depth d holds d (left, right) pairs. Pair l
contains the node on the leaf's path at level l and its sibling, in
left/right order; compressing pair l gives the path node at level l + 1,
and compressing the last pair gives the root.

Wire format (to_bytes):
    count   uint32 little-endian
    pairs   count * (left 32 bytes + right 32 bytes)
"""
from __future__ import annotations

import struct
from typing import Any, Iterator, Sequence

from core.crypto.hashing import HASH_BYTES, Hasher, Sha256Hasher, from_hex, to_hex
from core.schemas.errors import HashPathFormatError


_COUNT = struct.Struct("<I")
_PAIR_BYTES = 2 * HASH_BYTES


class HashPath:
    """
    Sibling pairs from the leaf level (first) up to just below the root.

    Example:
        >>> path = tree.get_hash_path(2)
        >>> path.compute_root() == tree.get_root()
        True
    """

    def __init__(self, data: Sequence[tuple[bytes, bytes]] | None = None) -> None:
        self.data: list[tuple[bytes, bytes]] = [
            (bytes(left), bytes(right)) for left, right in (data or [])
        ]
        for left, right in self.data:
            if len(left) != HASH_BYTES or len(right) != HASH_BYTES:
                raise HashPathFormatError(
                    f"Hash path entries must be {HASH_BYTES}-byte hashes"
                )

    def __len__(self) -> int:
        return len(self.data)

    def __iter__(self) -> Iterator[tuple[bytes, bytes]]:
        return iter(self.data)

    def __getitem__(self, level: int) -> tuple[bytes, bytes]:
        return self.data[level]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, HashPath):
            return NotImplemented
        return self.data == other.data

    def __repr__(self) -> str:
        return f"HashPath(depth={len(self.data)})"

    def compute_root(self, hasher: Hasher | None = None) -> bytes:
        """
        Compress the pairs from level 0 upwards and return the root.

        Each compressed pair must appear in the pair above it.

        Raises:
            ValueError: If the path is empty
            HashPathFormatError: If a level does not feed the next one
        """
        if not self.data:
            raise ValueError("Cannot compute root of an empty hash path")
        hasher = hasher or Sha256Hasher()
        current = hasher.compress(*self.data[0])
        for level, (left, right) in enumerate(self.data[1:], start=1):
            if current != left and current != right:
                raise HashPathFormatError(
                    f"Hash path level {level - 1} does not compress into level {level}",
                    length=len(self.data),
                    details={"level": level},
                )
            current = hasher.compress(left, right)
        return current

    def verify(
        self,
        leaf_hash: bytes,
        index: int,
        root: bytes,
        hasher: Hasher | None = None,
    ) -> bool:
        """
        Check that this path links ``leaf_hash`` at ``index`` to ``root``.

        Algorithm:
        1. Start with the leaf hash as the current node
        2. For each pair (bottom-up):
           - The current node must sit on the side given by index parity
             (even = left, odd = right)
           - The parent is compress(left, right)
           - Move up: index = index // 2
        3. The final parent must equal the claimed root

        Returns:
            True if the path is valid, False otherwise
        """
        if not self.data or index < 0 or index >= (1 << len(self.data)):
            return False

        hasher = hasher or Sha256Hasher()
        current = leaf_hash
        position = index
        for left, right in self.data:
            on_path = left if position % 2 == 0 else right
            if on_path != current:
                return False
            current = hasher.compress(left, right)
            position //= 2

        return current == root

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_bytes(self) -> bytes:
        parts = [_COUNT.pack(len(self.data))]
        for left, right in self.data:
            parts.append(left)
            parts.append(right)
        return b"".join(parts)

    @classmethod
    def from_bytes(cls, data: bytes) -> "HashPath":
        if len(data) < _COUNT.size:
            raise HashPathFormatError("Hash path buffer too short", length=len(data))
        (count,) = _COUNT.unpack_from(data, 0)
        expected = _COUNT.size + count * _PAIR_BYTES
        if len(data) != expected:
            raise HashPathFormatError(
                f"Hash path buffer length {len(data)} does not match "
                f"{count} pairs (expected {expected})",
                length=len(data),
            )
        pairs = []
        offset = _COUNT.size
        for _ in range(count):
            left = data[offset:offset + HASH_BYTES]
            right = data[offset + HASH_BYTES:offset + _PAIR_BYTES]
            pairs.append((left, right))
            offset += _PAIR_BYTES
        return cls(pairs)

    def to_dict(self) -> dict[str, Any]:
        return {
            "depth": len(self.data),
            "pairs": [[to_hex(left), to_hex(right)] for left, right in self.data],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "HashPath":
        try:
            pairs = [(from_hex(left), from_hex(right)) for left, right in data["pairs"]]
        except (KeyError, TypeError, ValueError) as e:
            raise HashPathFormatError(f"Malformed hash path: {e}") from e
        return cls(pairs)


__all__ = [
    "HashPath",
]
