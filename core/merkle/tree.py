"""
Persistent Merkle Tree
A named, fixed-depth tree whose root and node hashes survive restarts.

The tree is layered over a TreeStore:
- metadata (root, depth) is written on creation and after every update
- a full snapshot of the node hashes is written alongside when enabled
- on restore only the metadata is read; the snapshot is loaded lazily
  the first time node hashes are needed

Usage:
    from core.merkle import MerkleTree
    from core.storage import MemoryStore

    tree = MerkleTree.open(MemoryStore(), "accounts", depth=20)
    root = tree.update_element(2, value)
    path = tree.get_hash_path(2)
    assert path.compute_root() == tree.get_root()

Instances are not safe for concurrent use; callers serialize access.
"""
from __future__ import annotations

import logging

from core.crypto.hashing import Hasher, Sha256Hasher
from core.merkle.hash_path import HashPath
from core.merkle.merkle_tree import (
    MAX_DEPTH,
    ZERO_LEAF,
    LevelMap,
    build_hash_path,
    build_levels,
    build_tree,
    build_zero_hashes,
    check_depth,
    check_index,
    check_leaf,
    empty_level_map,
    update_levels,
)
from core.schemas.errors import CorruptSnapshotError, PersistenceError
from core.storage.base import KeyValueStore
from core.storage.codec import Metadata, tree_key
from core.storage.tree_store import TreeStore

logger = logging.getLogger(__name__)


class MerkleTree:
    """
    The merkle tree, in summary, is a data structure with a number of
    indexable elements, and the property that it is possible to provide a
    succinct proof (HashPath) that a given piece of data exists at a
    certain index, for a given merkle tree root.

    Use ``MerkleTree.open`` to create or restore an instance.
    """

    def __init__(
        self,
        store: TreeStore,
        name: str,
        depth: int,
        *,
        root: bytes | None = None,
        hasher: Hasher | None = None,
        snapshot: bool = True,
        incremental: bool = True,
    ) -> None:
        """
        Build an in-memory tree.

        Args:
            store: Persistence adapter
            name: Tree name, used as the storage key
            depth: Tree depth, between 1 and MAX_DEPTH
            root: Restored root; node hashes are then loaded lazily.
                  Without it the tree starts empty and keeps its leaf
                  values in memory.
            hasher: Hash primitive (defaults to SHA-256)
            snapshot: Persist the full node map with every update
            incremental: Recompute only the updated leaf's path

        Raises:
            ConfigError: If depth or name is invalid
        """
        tree_key(name)
        self._store = store
        self._name = name
        self._depth = check_depth(depth)
        self._hasher = hasher or Sha256Hasher()
        self._snapshot = snapshot
        self._incremental = incremental
        self._zero_hashes = build_zero_hashes(self._depth, self._hasher)

        self._levels: LevelMap | None = None
        self._leaves: list[bytes] | None = None

        if root is not None:
            self._root = bytes(root)
        else:
            self._leaves = []
            self._levels = empty_level_map(self._zero_hashes)
            self._root = self._levels.root

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def open(
        cls,
        store: TreeStore | KeyValueStore,
        name: str,
        depth: int = MAX_DEPTH,
        *,
        hasher: Hasher | None = None,
        snapshot: bool = True,
        incremental: bool = True,
    ) -> "MerkleTree":
        """
        Construct or restore the tree called ``name``.

        If ``store`` holds metadata for ``name`` the root and depth are
        restored from it (the stored depth wins over ``depth``).
        Otherwise a fresh empty tree is created at ``depth`` and its
        metadata is persisted immediately.

        Raises:
            ConfigError: If the requested or stored depth is invalid
            PersistenceError: If the store cannot be read or written
        """
        tree_store = store if isinstance(store, TreeStore) else TreeStore(store)
        options = {"hasher": hasher, "snapshot": snapshot, "incremental": incremental}

        metadata = tree_store.get_metadata(name)
        if metadata is not None:
            if metadata.depth != depth:
                logger.debug(
                    f"Tree {name!r} restored with stored depth {metadata.depth} "
                    f"(requested {depth})"
                )
            tree = cls(tree_store, name, metadata.depth, root=metadata.root, **options)
            logger.info(f"Restored tree {name!r} (depth={tree.depth}, root={tree.get_root().hex()[:16]}...)")
            return tree

        tree = cls(tree_store, name, depth, **options)
        tree._persist(tree._levels)
        logger.info(f"Created tree {name!r} (depth={tree.depth})")
        return tree

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def name(self) -> str:
        return self._name

    @property
    def depth(self) -> int:
        return self._depth

    @property
    def hasher(self) -> Hasher:
        return self._hasher

    @property
    def zero_hashes(self) -> tuple[bytes, ...]:
        return self._zero_hashes

    @property
    def capacity(self) -> int:
        return 1 << self._depth

    @property
    def is_resident(self) -> bool:
        """Whether node hashes are currently held in memory."""
        return self._levels is not None

    @property
    def leaf_count(self) -> int:
        """Populated leaf slots, i.e. one past the highest index ever set."""
        return self._ensure_levels().leaf_count

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_root(self) -> bytes:
        return self._root

    def get_hash_path(self, index: int) -> HashPath:
        """
        Returns the hash path for ``index``.

        e.g. To return the HashPath for index 2, return the nodes marked
        ``*`` at each layer.

            d0:                      [ root ]
            d1:          [*]                       [*]
            d2:    [*]         [*]          [ ]          [ ]
            d3: [ ]   [ ]   [*]   [*]    [ ]   [ ]    [ ]   [ ]

        Raises:
            OutOfRangeError: If index is outside the tree
            CorruptSnapshotError: If node hashes are not resident and no
                                  usable snapshot exists
        """
        check_index(index, self._depth)
        return build_hash_path(self._ensure_levels(), index)

    def verify(self, index: int, value: bytes, path: HashPath) -> bool:
        """Check ``path`` proves ``value`` at ``index`` under the current root."""
        check_index(index, self._depth)
        leaf_hash = self._hasher.hash(check_leaf(value))
        return path.verify(leaf_hash, index, self._root, self._hasher)

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def update_element(self, index: int, value: bytes) -> bytes:
        """
        Updates the tree with ``value`` at ``index``. Returns the new tree root.

        Leaves between the current frontier and ``index`` read as zero
        leaves. The new state is computed on copies and only installed
        once it has been persisted, so a storage failure leaves the tree
        at its previous root.

        Raises:
            OutOfRangeError: If index is outside the tree
            InvalidLeafSizeError: If value is not LEAF_BYTES long
            PersistenceError: If the new state cannot be written
        """
        check_index(index, self._depth)
        value = check_leaf(value)
        levels = self._ensure_levels()

        new_leaves: list[bytes] | None = None
        if self._leaves is not None:
            new_leaves = list(self._leaves)
            if index >= len(new_leaves):
                new_leaves.extend([ZERO_LEAF] * (index + 1 - len(new_leaves)))
            new_leaves[index] = value

        if self._incremental:
            new_levels = update_levels(levels, index, self._hasher.hash(value), self._hasher)
        elif new_leaves is not None:
            new_levels = build_tree(new_leaves, self._zero_hashes, self._hasher)
        else:
            # leaf values are unknown after a restore; rebuild from leaf hashes
            level0 = list(levels.levels[0])
            if index >= len(level0):
                level0.extend([self._zero_hashes[0]] * (index + 1 - len(level0)))
            level0[index] = self._hasher.hash(value)
            new_levels = build_levels(level0, self._zero_hashes, self._hasher)

        try:
            self._persist(new_levels)
        except PersistenceError:
            logger.warning(
                f"Update of leaf {index} in tree {self._name!r} not persisted; "
                f"keeping root {self._root.hex()[:16]}..."
            )
            raise

        self._levels = new_levels
        self._leaves = new_leaves
        self._root = new_levels.root
        logger.debug(f"Tree {self._name!r}: leaf {index} updated, root={self._root.hex()[:16]}...")
        return self._root

    def unload(self) -> None:
        """Drop the in-memory node hashes; they are reloaded on demand."""
        self._levels = None

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _persist(self, levels: LevelMap) -> None:
        metadata = Metadata(root=levels.root, depth=self._depth)
        snapshot = levels.levels if self._snapshot else None
        self._store.put_state(self._name, metadata, snapshot)

    def _load_snapshot(self) -> LevelMap | None:
        try:
            stored = self._store.get_snapshot(self._name, self._depth)
        except CorruptSnapshotError as e:
            logger.warning(f"Ignoring corrupt snapshot for tree {self._name!r}: {e}")
            return None
        if stored is None:
            return None

        levels = LevelMap(stored, self._zero_hashes)
        if levels.root != self._root:
            logger.warning(
                f"Ignoring stale snapshot for tree {self._name!r}: "
                f"snapshot root {levels.root.hex()[:16]}... does not match "
                f"metadata root {self._root.hex()[:16]}..."
            )
            return None
        return levels

    def _ensure_levels(self) -> LevelMap:
        """Return resident node hashes, restoring or rebuilding them if needed."""
        if self._levels is not None:
            return self._levels

        levels = self._load_snapshot()
        if levels is None and self._leaves is not None:
            levels = build_tree(self._leaves, self._zero_hashes, self._hasher)
        if levels is None and self._root == self._zero_hashes[self._depth]:
            levels = empty_level_map(self._zero_hashes)
        if levels is None:
            raise CorruptSnapshotError(
                f"No usable snapshot for tree {self._name!r} and no leaf data to rebuild from",
                details={"name": self._name, "root": self._root.hex()},
            )

        logger.debug(f"Tree {self._name!r}: node hashes restored ({levels.leaf_count} leaves)")
        self._levels = levels
        return levels

    def __repr__(self) -> str:
        return (
            f"MerkleTree(name={self._name!r}, depth={self._depth}, "
            f"root={self._root.hex()[:16]}...)"
        )


__all__ = [
    "MerkleTree",
]
