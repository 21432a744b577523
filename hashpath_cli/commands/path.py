"""
CLI Hash Path Commands

Produce the hash path (inclusion proof) for a leaf, and check one.

Usage:
    hashpath path INDEX [--out path.bin|path.json] [--json]
    hashpath verify INDEX VALUE --path path.bin [--root HEX] [--utf8] [--json]

Exit codes for verify: 0 valid, 1 error, 2 verification failed.
"""

from __future__ import annotations

import json
import logging
import sys
from argparse import Namespace
from pathlib import Path

from core.crypto.hashing import from_hex, to_hex
from core.merkle import HashPath, check_leaf
from core.schemas.errors import MerkleTreeException
from hashpath_cli.commands.common import (
    EXIT_RUNTIME_ERROR,
    EXIT_SUCCESS,
    EXIT_VERIFICATION_FAILED,
    open_tree,
    parse_leaf,
    print_error,
)


logger = logging.getLogger(__name__)


def save_hash_path(path: HashPath, out: Path) -> None:
    """Write a hash path as JSON (.json suffix) or binary."""
    if out.suffix.lower() == ".json":
        out.write_text(json.dumps(path.to_dict(), indent=2))
    else:
        out.write_bytes(path.to_bytes())


def load_hash_path(source: Path) -> HashPath:
    """Read a hash path written by save_hash_path."""
    if source.suffix.lower() == ".json":
        return HashPath.from_dict(json.loads(source.read_text()))
    return HashPath.from_bytes(source.read_bytes())


def print_path_human(index: int, root: bytes, path: HashPath) -> None:
    print(f"index: {index}")
    print(f"root: {to_hex(root)}")
    for level, (left, right) in enumerate(path):
        print(f"  d{level}: {to_hex(left)} {to_hex(right)}")


def path_cmd(args: Namespace) -> int:
    """Execute the path command."""
    try:
        with open_tree(args) as tree:
            path = tree.get_hash_path(args.index)
            root = tree.get_root()
    except MerkleTreeException as e:
        print_error(e, args.json)
        return EXIT_RUNTIME_ERROR

    if args.out:
        out = Path(args.out)
        save_hash_path(path, out)
        logger.info(f"Wrote hash path for index {args.index} to {out}")

    if args.json:
        data = {"index": args.index, "root": to_hex(root), **path.to_dict()}
        print(json.dumps(data, indent=2))
    elif not args.out:
        print_path_human(args.index, root, path)
    return EXIT_SUCCESS


def verify_cmd(args: Namespace) -> int:
    """
    Execute the verify command.

    Checks the stored hash path against ``--root`` if given, otherwise
    against the current root of the tree.
    """
    source = Path(args.path)
    if not source.exists():
        print(f"Error: Hash path file not found: {source}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    try:
        value = check_leaf(parse_leaf(args.value, utf8=args.utf8))
        path = load_hash_path(source)
        claimed_root = from_hex(args.root) if args.root else None
    except MerkleTreeException as e:
        print_error(e, args.json)
        return EXIT_RUNTIME_ERROR
    except (ValueError, KeyError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    try:
        with open_tree(args) as tree:
            root = claimed_root if claimed_root is not None else tree.get_root()
            leaf_hash = tree.hasher.hash(value)
            ok = path.verify(leaf_hash, args.index, root, tree.hasher)
    except MerkleTreeException as e:
        print_error(e, args.json)
        return EXIT_RUNTIME_ERROR

    if args.json:
        print(json.dumps({"ok": ok, "index": args.index, "root": to_hex(root)}, indent=2))
    else:
        print(f"index: {args.index}")
        print(f"root: {to_hex(root)}")
        print(f"valid: {str(ok).lower()}")

    if ok:
        logger.info("Hash path verified")
        return EXIT_SUCCESS
    logger.warning("Hash path verification failed")
    return EXIT_VERIFICATION_FAILED
