"""
Hash Path Unit Tests
Tests for core/merkle/hash_path.py

Tests:
- verify accepts genuine paths and rejects tampering
- Binary and JSON encodings
- Malformed input raises HashPathFormatError
"""
import struct

import pytest

from core.crypto.hashing import sha256
from core.merkle import HashPath, build_hash_path, build_tree, build_zero_hashes
from core.schemas.errors import HashPathFormatError
from fixtures import make_leaves


def _tree_and_path(index: int = 2, depth: int = 3, leaf_count: int = 5):
    zero = build_zero_hashes(depth)
    leaves = make_leaves(leaf_count)
    tree = build_tree(leaves, zero)
    return tree, leaves, build_hash_path(tree, index)


class TestVerify:
    """Tests for HashPath.verify()."""

    def test_genuine_path_verifies(self):
        tree, leaves, path = _tree_and_path()

        assert path.verify(sha256(leaves[2]), 2, tree.root)

    def test_wrong_leaf_fails(self):
        tree, leaves, path = _tree_and_path()

        assert not path.verify(sha256(leaves[1]), 2, tree.root)

    def test_wrong_index_fails(self):
        """Same pairs claimed at the sibling index put the leaf on the wrong side."""
        tree, leaves, path = _tree_and_path()

        assert not path.verify(sha256(leaves[2]), 3, tree.root)

    def test_wrong_root_fails(self):
        tree, leaves, path = _tree_and_path()

        assert not path.verify(sha256(leaves[2]), 2, sha256(b"other root"))

    def test_tampered_sibling_fails(self):
        tree, leaves, path = _tree_and_path()
        left, right = path[1]
        tampered = HashPath([path[0], (left, sha256(b"tampered")), path[2]])

        assert not tampered.verify(sha256(leaves[2]), 2, tree.root)

    def test_index_beyond_path_capacity_fails(self):
        tree, leaves, path = _tree_and_path()

        assert not path.verify(sha256(leaves[2]), 8, tree.root)
        assert not path.verify(sha256(leaves[2]), -1, tree.root)

    def test_empty_path_fails(self):
        assert not HashPath().verify(sha256(b"x"), 0, sha256(b"root"))

    def test_compute_root_of_empty_path_raises(self):
        with pytest.raises(ValueError):
            HashPath().compute_root()


class TestComputeRoot:
    """Tests for HashPath.compute_root()."""

    def test_compresses_to_tree_root(self):
        tree, _, path = _tree_and_path()

        assert path.compute_root() == tree.root

    def test_single_level(self):
        tree, _, path = _tree_and_path(index=1, depth=1, leaf_count=2)

        assert path.compute_root() == tree.root

    def test_broken_lower_level_raises(self):
        """Garbage below an intact top pair is not accepted as a root."""
        _, _, path = _tree_and_path()
        garbage = (sha256(b"left"), sha256(b"right"))
        broken = HashPath([garbage, path[1], path[2]])

        with pytest.raises(HashPathFormatError) as exc_info:
            broken.compute_root()

        assert exc_info.value.details["level"] == 1

    def test_broken_middle_level_raises(self):
        _, _, path = _tree_and_path()
        left, _ = path[1]
        broken = HashPath([path[0], (left, sha256(b"tampered")), path[2]])

        with pytest.raises(HashPathFormatError):
            broken.compute_root()


class TestBinaryEncoding:
    """Tests for to_bytes() / from_bytes()."""

    def test_layout(self):
        _, _, path = _tree_and_path()
        data = path.to_bytes()

        assert struct.unpack_from("<I", data, 0) == (3,)
        assert len(data) == 4 + 3 * 64
        assert data[4:36] == path[0][0]
        assert data[36:68] == path[0][1]

    def test_decode(self):
        _, _, path = _tree_and_path()

        assert HashPath.from_bytes(path.to_bytes()) == path

    def test_truncated_buffer(self):
        _, _, path = _tree_and_path()

        with pytest.raises(HashPathFormatError):
            HashPath.from_bytes(path.to_bytes()[:-1])

    def test_too_short_for_count(self):
        with pytest.raises(HashPathFormatError):
            HashPath.from_bytes(b"\x01\x00")


class TestJsonEncoding:
    """Tests for to_dict() / from_dict()."""

    def test_hex_pairs(self):
        _, _, path = _tree_and_path()
        data = path.to_dict()

        assert data["depth"] == 3
        assert data["pairs"][0][0] == "0x" + path[0][0].hex()
        assert HashPath.from_dict(data) == path

    def test_missing_pairs_key(self):
        with pytest.raises(HashPathFormatError):
            HashPath.from_dict({"depth": 1})

    def test_bad_hex(self):
        with pytest.raises(HashPathFormatError):
            HashPath.from_dict({"pairs": [["0xzz", "0x00"]]})


class TestConstruction:
    """Tests for HashPath entry validation."""

    def test_short_hash_rejected(self):
        with pytest.raises(HashPathFormatError):
            HashPath([(b"\x00" * 31, b"\x00" * 32)])

    def test_format_error_is_value_error(self):
        with pytest.raises(ValueError):
            HashPath([(b"", b"")])
