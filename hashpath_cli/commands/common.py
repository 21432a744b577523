"""
Shared helpers for CLI commands: opening the configured tree,
parsing leaf values from the command line, and reporting errors.
"""

from __future__ import annotations

import json
import sys
from argparse import Namespace
from contextlib import contextmanager
from typing import Iterator

from core.config.runtime import RuntimeConfig
from core.crypto.hashing import from_hex
from core.merkle import MerkleTree, leaf_from_text
from core.schemas.errors import MerkleTreeException, TreeNotFoundError
from core.storage import TreeStore, open_store


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1
EXIT_VERIFICATION_FAILED = 2


@contextmanager
def open_tree(args: Namespace, create: bool = False) -> Iterator[MerkleTree]:
    """
    Open the tree named on the command line (or in config).

    Only ``init`` passes ``create=True``; every other command needs an
    existing tree, so a mistyped --tree never writes to the database.

    Raises:
        TreeNotFoundError: If the tree does not exist and ``create`` is False
    """
    config: RuntimeConfig = args.cli_config
    name = getattr(args, "tree", None) or config.tree.name
    depth = getattr(args, "depth", None)
    if depth is None:
        depth = config.tree.depth

    kv = open_store(config.storage)
    try:
        store = TreeStore(kv)
        if not create and store.get_metadata(name) is None:
            raise TreeNotFoundError(name)
        yield MerkleTree.open(
            store,
            name,
            depth,
            snapshot=config.tree.snapshot,
            incremental=config.tree.incremental,
        )
    finally:
        kv.close()


def parse_leaf(raw: str, utf8: bool = False) -> bytes:
    """
    Parse a leaf value.

    Hex input is decoded as-is; the tree rejects anything that is not
    LEAF_BYTES long. With ``utf8`` the text is encoded and right-padded
    with zero bytes.
    """
    if utf8:
        return leaf_from_text(raw)
    return from_hex(raw)


def print_error(e: MerkleTreeException, output_json: bool) -> None:
    if output_json:
        print(json.dumps({"ok": False, "error": e.to_error_model().model_dump()}, indent=2))
    else:
        print(f"Error: {e.message}", file=sys.stderr)
