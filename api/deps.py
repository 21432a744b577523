"""
API Dependencies

Dependency injection for the API.
Provides the process-wide registry of open trees.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Optional

from core.config.runtime import RuntimeConfig
from core.merkle import MerkleTree
from core.schemas.errors import TreeNotFoundError
from core.storage import KeyValueStore, TreeStore, open_store

logger = logging.getLogger(__name__)


def _load_runtime_config() -> RuntimeConfig:
    """Load RuntimeConfig from config file, then overlay environment variables.

    Search order for config file:
      1. ./hashpath.yaml
      2. ./hashpath.json
      3. ~/.config/hashpath/config.yaml

    Environment variables ALWAYS override config file values.
    The .env file is loaded automatically by core.config.runtime on import.
    """
    search_paths = [
        Path.cwd() / "hashpath.yaml",
        Path.cwd() / "hashpath.json",
        Path.home() / ".config" / "hashpath" / "config.yaml",
    ]

    config: RuntimeConfig | None = None

    for path in search_paths:
        if path.exists():
            try:
                config = RuntimeConfig.from_file(path)
                logger.info(f"Loaded config from {path}")
                break
            except Exception as e:
                logger.warning(f"Failed to parse {path}: {e}")

    if config is None:
        # No config file found, start with defaults
        config = RuntimeConfig()

    # Always apply environment variable overrides
    return config.with_env_overrides()


class TreeRegistry:
    """
    Open trees keyed by name, sharing one key-value store.

    Trees are not safe for concurrent use, so every request that touches
    a tree holds ``lock(name)`` for its whole duration.
    """

    def __init__(self, kv: KeyValueStore, config: RuntimeConfig | None = None) -> None:
        self.kv = kv
        self.store = TreeStore(kv)
        self.config = config or RuntimeConfig()
        self._trees: dict[str, MerkleTree] = {}
        self._locks: dict[str, threading.Lock] = {}
        self._guard = threading.Lock()

    def lock(self, name: str) -> threading.Lock:
        with self._guard:
            return self._locks.setdefault(name, threading.Lock())

    def open(self, name: str, depth: int | None = None) -> MerkleTree:
        """Return the tree called ``name``, creating it if it does not exist."""
        tree = self._trees.get(name)
        if tree is not None:
            return tree

        tree = MerkleTree.open(
            self.store,
            name,
            depth if depth is not None else self.config.tree.depth,
            snapshot=self.config.tree.snapshot,
            incremental=self.config.tree.incremental,
        )
        self._trees[name] = tree
        return tree

    def get(self, name: str) -> MerkleTree:
        """
        Return an existing tree.

        Raises:
            TreeNotFoundError: If no tree called ``name`` has been created
        """
        tree = self._trees.get(name)
        if tree is not None:
            return tree
        if self.store.get_metadata(name) is None:
            raise TreeNotFoundError(name)
        return self.open(name)

    def close(self) -> None:
        self._trees.clear()
        self.kv.close()


_registry: Optional[TreeRegistry] = None
_registry_guard = threading.Lock()


def get_registry() -> TreeRegistry:
    """Get the process-wide tree registry, building it from config on first use."""
    global _registry
    with _registry_guard:
        if _registry is None:
            config = _load_runtime_config()
            _registry = TreeRegistry(open_store(config.storage), config)
            logger.info(
                f"Tree registry ready (backend={config.storage.backend}, "
                f"path={config.storage.path})"
            )
        return _registry


def set_registry(registry: Optional[TreeRegistry]) -> None:
    """Replace (or with None, reset) the process-wide tree registry."""
    global _registry
    with _registry_guard:
        _registry = registry


def close_registry() -> None:
    global _registry
    with _registry_guard:
        if _registry is not None:
            _registry.close()
            _registry = None
