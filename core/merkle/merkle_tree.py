"""
Fixed-Depth Merkle Tree Computation
Zero-hash precomputation, level materialization and hash-path derivation.

This module provides:
- build_zero_hashes: Roots of all-empty subtrees, one per level
- LevelMap: Level-indexed node hashes with zero-hash fallback
- build_tree / build_levels: Full materialization from leaves or leaf hashes
- build_hash_path: Sibling pairs from a leaf up to the root

Commitment Rules (Hard Contracts):
1. Leaf node: node = hash(leaf), leaves are exactly LEAF_BYTES long
2. Parent node: parent = compress(left, right)
3. Empty subtree of height l: ZERO[l], with ZERO[0] = hash(64 zero bytes)
   and ZERO[l + 1] = compress(ZERO[l], ZERO[l])
4. Missing right child at level l is always ZERO[l]
5. Empty tree: root = ZERO[depth]

Every slot beyond the populated frontier of a level resolves to the
zero hash of that level; there is no "absent node" state.
"""
from __future__ import annotations

from typing import Iterable, Sequence

from core.crypto.hashing import Hasher, Sha256Hasher
from core.merkle.hash_path import HashPath
from core.schemas.errors import ConfigError, InvalidLeafSizeError, OutOfRangeError


MAX_DEPTH = 32
LEAF_BYTES = 64  # All leaf values are 64 bytes.

ZERO_LEAF: bytes = bytes(LEAF_BYTES)

_DEFAULT_HASHER = Sha256Hasher()


def check_depth(depth: int) -> int:
    """Validate ``1 <= depth <= MAX_DEPTH`` and return it."""
    if isinstance(depth, bool) or not isinstance(depth, int):
        raise ConfigError(
            f"Tree depth must be an integer, got {type(depth).__name__}",
            details={"depth": repr(depth)},
        )
    if not 1 <= depth <= MAX_DEPTH:
        raise ConfigError(
            f"Bad depth: {depth} (must be between 1 and {MAX_DEPTH})",
            details={"depth": depth, "max_depth": MAX_DEPTH},
        )
    return depth


def check_index(index: int, depth: int) -> int:
    """Validate ``0 <= index < 2**depth`` and return it."""
    if isinstance(index, bool) or not isinstance(index, int):
        raise OutOfRangeError(
            f"Leaf index must be an integer, got {type(index).__name__}",
            depth=depth,
        )
    if index < 0 or index >= (1 << depth):
        raise OutOfRangeError(
            f"Leaf index {index} out of range for depth {depth} "
            f"(capacity {1 << depth})",
            index=index,
            depth=depth,
        )
    return index


def check_leaf(value: bytes) -> bytes:
    """Validate a leaf value is exactly LEAF_BYTES and return it as bytes."""
    if not isinstance(value, (bytes, bytearray, memoryview)):
        raise InvalidLeafSizeError(
            f"Leaf value must be bytes, got {type(value).__name__}",
            expected=LEAF_BYTES,
        )
    value = bytes(value)
    if len(value) != LEAF_BYTES:
        raise InvalidLeafSizeError(
            f"Leaf value must be {LEAF_BYTES} bytes, got {len(value)}",
            expected=LEAF_BYTES,
            actual=len(value),
        )
    return value


def leaf_from_text(text: str) -> bytes:
    """UTF-8 encode ``text`` and right-pad it with zero bytes to LEAF_BYTES."""
    data = text.encode("utf-8")
    if len(data) > LEAF_BYTES:
        raise InvalidLeafSizeError(
            f"Text encodes to {len(data)} bytes, more than {LEAF_BYTES}",
            expected=LEAF_BYTES,
            actual=len(data),
        )
    return data.ljust(LEAF_BYTES, b"\x00")


def build_zero_hashes(depth: int, hasher: Hasher | None = None) -> tuple[bytes, ...]:
    """
    Compute the zero-hash table for a tree of the given depth.

    Entry ``l`` is the root of an all-empty subtree of height ``l``;
    entry ``depth`` is therefore the root of an empty tree.

    Args:
        depth: Tree depth (1..MAX_DEPTH)
        hasher: Hash primitive (defaults to SHA-256)

    Returns:
        Tuple of depth + 1 hashes

    Example:
        >>> zero = build_zero_hashes(2)
        >>> len(zero)
        3
    """
    check_depth(depth)
    hasher = hasher or _DEFAULT_HASHER

    current = hasher.hash(ZERO_LEAF)
    hashes = [current]
    for _ in range(depth):
        current = hasher.compress(current, current)
        hashes.append(current)

    return tuple(hashes)


class LevelMap:
    """
    Node hashes of a fixed-depth tree, indexed by level.

    ``levels[0]`` holds the leaf hashes and ``levels[depth]`` holds the
    single root. Level ``l`` conceptually has ``2**(depth - l)`` slots; only
    the populated prefix is stored and every other slot reads as
    ``zero_hashes[l]`` through ``node_at``.
    """

    def __init__(
        self,
        levels: Sequence[list[bytes]],
        zero_hashes: Sequence[bytes],
    ) -> None:
        if len(zero_hashes) < 2:
            raise ConfigError("Zero-hash table must cover at least one level")
        if len(levels) != len(zero_hashes):
            raise ConfigError(
                f"Level count {len(levels)} does not match zero-hash table "
                f"length {len(zero_hashes)}"
            )
        self.levels: list[list[bytes]] = [list(level) for level in levels]
        self.zero_hashes: tuple[bytes, ...] = tuple(zero_hashes)

    @property
    def depth(self) -> int:
        return len(self.zero_hashes) - 1

    @property
    def leaf_count(self) -> int:
        """Number of populated leaf slots (including zero-filled gaps)."""
        return len(self.levels[0])

    @property
    def root(self) -> bytes:
        return self.node_at(self.depth, 0)

    def node_at(self, level: int, index: int) -> bytes:
        """Return the node at ``(level, index)``, or the level's zero hash."""
        nodes = self.levels[level]
        if index < len(nodes):
            return nodes[index]
        return self.zero_hashes[level]

    def copy(self) -> "LevelMap":
        return LevelMap(self.levels, self.zero_hashes)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, LevelMap):
            return NotImplemented
        return self.levels == other.levels and self.zero_hashes == other.zero_hashes

    def __repr__(self) -> str:
        return f"LevelMap(depth={self.depth}, leaf_count={self.leaf_count})"


def empty_level_map(zero_hashes: Sequence[bytes]) -> LevelMap:
    """Level map of a tree with no leaves: only the root slot is set."""
    depth = len(zero_hashes) - 1
    levels: list[list[bytes]] = [[] for _ in range(depth)]
    levels.append([zero_hashes[depth]])
    return LevelMap(levels, zero_hashes)


def build_levels(
    leaf_hashes: Iterable[bytes],
    zero_hashes: Sequence[bytes],
    hasher: Hasher | None = None,
) -> LevelMap:
    """
    Materialize every level from already-hashed leaves.

    Algorithm:
    1. Level 0 is the leaf hashes as given
    2. Level l + 1 pairs consecutive nodes (2i, 2i + 1) of level l;
       a missing right child is zero_hashes[l]
    3. Repeat until level depth, which always holds exactly one node

    Args:
        leaf_hashes: Level-0 node hashes in leaf order
        zero_hashes: Table from build_zero_hashes
        hasher: Hash primitive (defaults to SHA-256)

    Returns:
        Fully materialized LevelMap

    Raises:
        OutOfRangeError: If there are more leaves than 2**depth slots
    """
    hasher = hasher or _DEFAULT_HASHER
    depth = len(zero_hashes) - 1
    level0 = list(leaf_hashes)

    if len(level0) > (1 << depth):
        raise OutOfRangeError(
            f"{len(level0)} leaves exceed capacity {1 << depth} of depth {depth}",
            depth=depth,
        )
    if not level0:
        return empty_level_map(zero_hashes)

    levels: list[list[bytes]] = [level0]
    for level in range(depth):
        nodes = levels[level]
        zero = zero_hashes[level]
        parents: list[bytes] = []
        for i in range(0, len(nodes), 2):
            right = nodes[i + 1] if i + 1 < len(nodes) else zero
            parents.append(hasher.compress(nodes[i], right))
        levels.append(parents)

    return LevelMap(levels, zero_hashes)


def build_tree(
    leaves: Iterable[bytes],
    zero_hashes: Sequence[bytes],
    hasher: Hasher | None = None,
) -> LevelMap:
    """
    Materialize a tree from raw leaf values.

    Each leaf is validated to be LEAF_BYTES long and hashed to form
    level 0; see build_levels for the remaining levels.
    """
    hasher = hasher or _DEFAULT_HASHER
    return build_levels(
        (hasher.hash(check_leaf(leaf)) for leaf in leaves),
        zero_hashes,
        hasher,
    )


def update_levels(
    tree: LevelMap,
    index: int,
    leaf_hash: bytes,
    hasher: Hasher | None = None,
) -> LevelMap:
    """
    Return a new LevelMap with leaf ``index`` set to ``leaf_hash``.

    Only the sibling chain from ``index`` to the root is recomputed.
    Levels are copied, so ``tree`` is left untouched. Gaps between the
    old frontier and ``index`` are filled with the zero hash of their
    level, which is exactly what full materialization would produce
    for zero-valued leaves there.
    """
    hasher = hasher or _DEFAULT_HASHER
    depth = tree.depth
    check_index(index, depth)

    updated = tree.copy()
    levels = updated.levels
    zero = updated.zero_hashes

    if not levels[0]:
        # empty tree stores its root only; drop it before regrowing
        levels[depth] = []

    node = leaf_hash
    position = index
    for level in range(depth + 1):
        nodes = levels[level]
        if position >= len(nodes):
            nodes.extend([zero[level]] * (position + 1 - len(nodes)))
        nodes[position] = node
        if level == depth:
            break
        if position % 2 == 0:
            node = hasher.compress(node, updated.node_at(level, position + 1))
        else:
            node = hasher.compress(updated.node_at(level, position - 1), node)
        position //= 2

    return updated


def build_hash_path(tree: LevelMap, index: int) -> HashPath:
    """
    Collect the sibling pairs proving leaf ``index`` against ``tree.root``.

    At each level the current node and its sibling are recorded in
    left/right order: an even index is the left node, an odd index the
    right node. Siblings beyond the populated frontier are zero hashes.

    Args:
        tree: Materialized tree
        index: Leaf index (0 <= index < 2**depth)

    Returns:
        HashPath with exactly depth pairs, leaf level first

    Example:
        >>> zero = build_zero_hashes(2)
        >>> path = build_hash_path(empty_level_map(zero), 2)
        >>> len(path)
        2
    """
    check_index(index, tree.depth)

    pairs: list[tuple[bytes, bytes]] = []
    current = index
    for level in range(tree.depth):
        node = tree.node_at(level, current)
        if current % 2 == 0:
            pairs.append((node, tree.node_at(level, current + 1)))
        else:
            pairs.append((tree.node_at(level, current - 1), node))
        current //= 2

    return HashPath(pairs)


__all__ = [
    "MAX_DEPTH",
    "LEAF_BYTES",
    "ZERO_LEAF",
    "LevelMap",
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
