"""
Tree Persistence Adapter
File: tree_store.py

Purpose: Read and write a tree's metadata and snapshot records over any
KeyValueStore. Backend failures surface as PersistenceError; a missing
record is reported as None.
"""

from __future__ import annotations

import logging
from typing import Sequence

from core.schemas.errors import PersistenceError
from core.storage.base import KeyValueStore
from core.storage.codec import (
    Metadata,
    decode_metadata,
    decode_snapshot,
    encode_metadata,
    encode_snapshot,
    snapshot_key,
    tree_key,
)

logger = logging.getLogger(__name__)


class TreeStore:
    """
    Persistence adapter used by MerkleTree.

    Example:
        >>> store = TreeStore(MemoryStore())
        >>> store.get_metadata("accounts") is None
        True
    """

    def __init__(self, kv: KeyValueStore) -> None:
        self.kv = kv

    def _read(self, key: bytes, operation: str) -> bytes | None:
        try:
            return self.kv.get(key)
        except Exception as e:
            raise PersistenceError(
                f"Storage read failed during {operation}: {e}",
                operation=operation,
            ) from e

    def _write(self, items: list[tuple[bytes, bytes]], operation: str) -> None:
        try:
            if len(items) == 1:
                self.kv.put(*items[0])
            else:
                self.kv.write_batch(items)
        except Exception as e:
            raise PersistenceError(
                f"Storage write failed during {operation}: {e}",
                operation=operation,
            ) from e

    # ------------------------------------------------------------------
    # Metadata
    # ------------------------------------------------------------------

    def get_metadata(self, name: str) -> Metadata | None:
        """
        Load ``(root, depth)`` for ``name``.

        Raises:
            CorruptMetadataError: If the stored record is malformed
            PersistenceError: If the backend read fails
        """
        data = self._read(tree_key(name), "get_metadata")
        if data is None:
            return None
        return decode_metadata(data)

    def put_metadata(self, name: str, metadata: Metadata) -> None:
        self._write([(tree_key(name), encode_metadata(metadata))], "put_metadata")

    # ------------------------------------------------------------------
    # Snapshot
    # ------------------------------------------------------------------

    def get_snapshot(self, name: str, depth: int) -> list[list[bytes]] | None:
        """
        Load the populated level prefixes for ``name``.

        Raises:
            CorruptSnapshotError: If the record fails validation
            PersistenceError: If the backend read fails
        """
        data = self._read(snapshot_key(name), "get_snapshot")
        if data is None:
            return None
        return decode_snapshot(data, depth)

    def put_snapshot(self, name: str, levels: Sequence[Sequence[bytes]]) -> None:
        self._write([(snapshot_key(name), encode_snapshot(levels))], "put_snapshot")

    # ------------------------------------------------------------------
    # Combined
    # ------------------------------------------------------------------

    def put_state(
        self,
        name: str,
        metadata: Metadata,
        levels: Sequence[Sequence[bytes]] | None = None,
    ) -> None:
        """
        Persist metadata and, if given, the snapshot in one atomic batch.

        The snapshot is staged ahead of the metadata, so a backend that
        applies batch items in order never exposes a root without the
        snapshot that produced it.
        """
        items: list[tuple[bytes, bytes]] = []
        if levels is not None:
            items.append((snapshot_key(name), encode_snapshot(levels)))
        items.append((tree_key(name), encode_metadata(metadata)))
        self._write(items, "put_state")
        logger.debug(
            f"Persisted state for tree {name!r} "
            f"(root={metadata.root.hex()[:16]}..., snapshot={levels is not None})"
        )


__all__ = [
    "TreeStore",
]
