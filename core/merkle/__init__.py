"""
Fixed-Depth Merkle Tree
Zero-hash precomputation, tree materialization, single-leaf updates and
hash-path (inclusion proof) generation over a persistent key-value store.

This module provides:
- MerkleTree: Named, persistent tree (open / update_element / get_hash_path)
- HashPath: Ordered sibling pairs proving one leaf under a root
- build_zero_hashes: Empty-subtree roots, one per level
- build_tree / build_levels: Full materialization into a LevelMap
- build_hash_path: Sibling pairs for a leaf index

Canonical Commitment Rules:
1. Leaf hashing: sha256(leaf), leaves are exactly 64 bytes
2. Parent hashing: sha256(left + right)
3. Missing right child at level l: zero_hashes[l]
4. Empty tree: root = zero_hashes[depth]

Usage:
    from core.merkle import MerkleTree
    from core.storage import SQLiteStore

    tree = MerkleTree.open(SQLiteStore("trees.db"), "accounts", depth=16)
    tree.update_element(2, value)
    path = tree.get_hash_path(2)
    assert tree.verify(2, value, path)
"""
from .merkle_tree import (
    MAX_DEPTH,
    LEAF_BYTES,
    ZERO_LEAF,
    LevelMap,
    check_depth,
    check_index,
    check_leaf,
    leaf_from_text,
    build_zero_hashes,
    empty_level_map,
    build_levels,
    build_tree,
    update_levels,
    build_hash_path,
)

from .hash_path import HashPath

from .tree import MerkleTree


__all__ = [
    # Constants
    "MAX_DEPTH",
    "LEAF_BYTES",
    "ZERO_LEAF",
    # Core types
    "LevelMap",
    "HashPath",
    "MerkleTree",
    # Core functions
    "check_depth",
    "check_index",
    "check_leaf",
    "leaf_from_text",
    "build_zero_hashes",
    "empty_level_map",
    "build_levels",
    "build_tree",
    "update_levels",
    "build_hash_path",
]
