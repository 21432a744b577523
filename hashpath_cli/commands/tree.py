"""
CLI Tree Commands

Create/restore a tree, read its root, and update single leaves.

Usage:
    hashpath init [--tree NAME] [--depth N] [--json]
    hashpath root [--tree NAME] [--json]
    hashpath update INDEX VALUE [--utf8] [--tree NAME] [--json]
"""

from __future__ import annotations

import json
import logging
import sys
from argparse import Namespace
from dataclasses import dataclass, asdict
from typing import Any

from core.crypto.hashing import to_hex
from core.schemas.errors import MerkleTreeException
from hashpath_cli.commands.common import (
    EXIT_RUNTIME_ERROR,
    EXIT_SUCCESS,
    open_tree,
    parse_leaf,
    print_error,
)


logger = logging.getLogger(__name__)


@dataclass
class TreeSummary:
    """Summary of a tree's state for CLI output."""
    name: str = ""
    depth: int = 0
    root: str = ""
    index: int | None = None
    previous_root: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {k: v for k, v in asdict(self).items() if v is not None}


def print_summary_human(summary: TreeSummary) -> None:
    """Print summary in human-readable format."""
    print(f"tree: {summary.name}")
    print(f"depth: {summary.depth}")
    if summary.index is not None:
        print(f"index: {summary.index}")
    if summary.previous_root is not None:
        print(f"previous_root: {summary.previous_root}")
    print(f"root: {summary.root}")


def print_summary(summary: TreeSummary, output_json: bool) -> None:
    if output_json:
        print(json.dumps(summary.to_dict(), indent=2))
    else:
        print_summary_human(summary)


def _show_tree(args: Namespace, create: bool = False) -> int:
    try:
        with open_tree(args, create=create) as tree:
            summary = TreeSummary(
                name=tree.name,
                depth=tree.depth,
                root=to_hex(tree.get_root()),
            )
    except MerkleTreeException as e:
        print_error(e, args.json)
        return EXIT_RUNTIME_ERROR

    print_summary(summary, args.json)
    return EXIT_SUCCESS


def init_cmd(args: Namespace) -> int:
    """
    Execute the init command: create the tree, or restore it if it exists.

    An existing tree keeps its stored depth; --depth only applies to a
    new tree.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code
    """
    return _show_tree(args, create=True)


def root_cmd(args: Namespace) -> int:
    """Execute the root command."""
    return _show_tree(args)


def update_cmd(args: Namespace) -> int:
    """
    Execute the update command.

    The value is 64 bytes of hex, or text with --utf8 (zero-padded).
    """
    try:
        value = parse_leaf(args.value, utf8=args.utf8)
    except MerkleTreeException as e:
        print_error(e, args.json)
        return EXIT_RUNTIME_ERROR
    except ValueError as e:
        print(f"Error: invalid leaf value: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    try:
        with open_tree(args) as tree:
            previous = tree.get_root()
            root = tree.update_element(args.index, value)
            summary = TreeSummary(
                name=tree.name,
                depth=tree.depth,
                root=to_hex(root),
                index=args.index,
                previous_root=to_hex(previous),
            )
    except MerkleTreeException as e:
        print_error(e, args.json)
        return EXIT_RUNTIME_ERROR

    logger.info(f"Updated leaf {args.index} of tree {summary.name!r}")
    print_summary(summary, args.json)
    return EXIT_SUCCESS
