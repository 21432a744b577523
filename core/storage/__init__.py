"""
Storage backends and the tree persistence adapter.

Usage:
    from core.storage import open_store, TreeStore

    kv = open_store(config.storage)
    store = TreeStore(kv)
"""
from __future__ import annotations

from core.config.runtime import StorageConfig
from core.schemas.errors import ConfigError

from .base import KeyValueStore
from .codec import Metadata, snapshot_key, tree_key
from .memory import MemoryStore
from .sqlite_store import SQLiteStore
from .tree_store import TreeStore


def open_store(config: StorageConfig) -> KeyValueStore:
    """Build the key-value backend described by ``config``."""
    backend = config.backend.lower()
    if backend == "memory":
        return MemoryStore()
    if backend == "sqlite":
        return SQLiteStore(config.path)
    raise ConfigError(
        f"Unknown storage backend: {config.backend!r}",
        details={"backend": config.backend, "supported": ["memory", "sqlite"]},
    )


__all__ = [
    "KeyValueStore",
    "MemoryStore",
    "SQLiteStore",
    "TreeStore",
    "Metadata",
    "open_store",
    "snapshot_key",
    "tree_key",
]
