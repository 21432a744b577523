"""
CLI Main Entry Point

Parses command-line arguments and dispatches to subcommands.

Usage:
    python -m hashpath_cli init [--tree NAME] [--depth N] [--json]
    python -m hashpath_cli root [--tree NAME] [--json]
    python -m hashpath_cli update INDEX VALUE [--utf8] [--json]
    python -m hashpath_cli path INDEX [--out FILE] [--json]
    python -m hashpath_cli verify INDEX VALUE --path FILE [--root HEX] [--json]
    python -m hashpath_cli config --init

Environment Variables:
    HASHPATH_TREE_NAME          Default tree name
    HASHPATH_TREE_DEPTH         Depth used when creating a tree (default: 32)
    HASHPATH_SNAPSHOT           Persist full-tree snapshots (default: true)
    HASHPATH_INCREMENTAL        Sibling-chain updates (default: true)
    HASHPATH_STORAGE_BACKEND    sqlite or memory (default: sqlite)
    HASHPATH_DB_PATH            SQLite database path
    HASHPATH_LOG_LEVEL          Log level (default: INFO)
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import traceback
from pathlib import Path
from typing import Sequence

from hashpath_cli import __version__
from hashpath_cli.commands import tree, path
from hashpath_cli.commands.common import EXIT_RUNTIME_ERROR, EXIT_SUCCESS
from hashpath_cli.config import load_config, get_default_config_template


def setup_logging(level: str = "INFO", log_file: str | None = None) -> None:
    """Configure logging for the CLI."""
    log_level = getattr(logging, level.upper(), logging.INFO)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]

    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=handlers,
        force=True,
    )


def _add_tree_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--tree", "-t",
        type=str,
        default=None,
        help="Tree name (default: from config)",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        default=False,
        help="Output machine-readable JSON",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        default=False,
        help="Print tracebacks on unexpected errors",
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="hashpath",
        description="Persistent fixed-depth Merkle trees - update leaves, read roots, produce hash paths.",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        default=None,
        help="Path to configuration file (default: ./hashpath.yaml or ~/.config/hashpath/config.yaml)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (overrides config)",
    )
    parser.add_argument(
        "--db",
        type=str,
        default=None,
        help="SQLite database path (overrides config)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # --- init command ---
    init_parser = subparsers.add_parser(
        "init",
        help="Create a tree (or restore an existing one)",
        description="Create an empty tree and persist its metadata, or report an existing tree.",
    )
    init_parser.add_argument(
        "--depth", "-d",
        type=int,
        default=None,
        help="Tree depth for a new tree, 1-32 (default: from config)",
    )
    _add_tree_args(init_parser)
    init_parser.set_defaults(func=tree.init_cmd)

    # --- root command ---
    root_parser = subparsers.add_parser(
        "root",
        help="Print the current root",
    )
    _add_tree_args(root_parser)
    root_parser.set_defaults(func=tree.root_cmd)

    # --- update command ---
    update_parser = subparsers.add_parser(
        "update",
        help="Set one leaf and print the new root",
        description="Set the leaf at INDEX to a 64-byte VALUE (hex, or text with --utf8).",
    )
    update_parser.add_argument("index", type=int, help="Leaf index")
    update_parser.add_argument("value", type=str, help="Leaf value: 64 bytes as hex")
    update_parser.add_argument(
        "--utf8",
        action="store_true",
        default=False,
        help="Treat VALUE as text, zero-padded to 64 bytes",
    )
    _add_tree_args(update_parser)
    update_parser.set_defaults(func=tree.update_cmd)

    # --- path command ---
    path_parser = subparsers.add_parser(
        "path",
        help="Print the hash path for a leaf",
        description="Produce the sibling pairs proving the leaf at INDEX under the current root.",
    )
    path_parser.add_argument("index", type=int, help="Leaf index")
    path_parser.add_argument(
        "--out", "-o",
        type=str,
        default=None,
        help="Write the hash path to a file (JSON if .json extension, otherwise binary)",
    )
    _add_tree_args(path_parser)
    path_parser.set_defaults(func=path.path_cmd)

    # --- verify command ---
    verify_parser = subparsers.add_parser(
        "verify",
        help="Verify a saved hash path",
        description="Check that a hash path proves VALUE at INDEX under a root.",
    )
    verify_parser.add_argument("index", type=int, help="Leaf index")
    verify_parser.add_argument("value", type=str, help="Leaf value: 64 bytes as hex")
    verify_parser.add_argument(
        "--path", "-p",
        type=str,
        required=True,
        help="Hash path file written by 'hashpath path --out'",
    )
    verify_parser.add_argument(
        "--root",
        type=str,
        default=None,
        help="Root to verify against (default: current tree root)",
    )
    verify_parser.add_argument(
        "--utf8",
        action="store_true",
        default=False,
        help="Treat VALUE as text, zero-padded to 64 bytes",
    )
    _add_tree_args(verify_parser)
    verify_parser.set_defaults(func=path.verify_cmd)

    # --- config command ---
    config_parser = subparsers.add_parser(
        "config",
        help="Manage CLI configuration",
        description="Initialize or display configuration.",
    )
    config_parser.add_argument(
        "--init",
        action="store_true",
        default=False,
        help="Create a template configuration file",
    )
    config_parser.add_argument(
        "--show",
        action="store_true",
        default=False,
        help="Show current configuration",
    )
    config_parser.add_argument(
        "--path",
        type=str,
        default="hashpath.yaml",
        help="Path for config file (default: hashpath.yaml)",
    )
    config_parser.set_defaults(func=config_cmd)

    return parser


def config_cmd(args: argparse.Namespace) -> int:
    """Handle config command."""
    if args.init:
        config_path = Path(args.path)
        if config_path.exists():
            print(f"Error: Config file already exists: {config_path}", file=sys.stderr)
            return EXIT_RUNTIME_ERROR

        config_path.write_text(get_default_config_template())
        print(f"Created configuration file: {config_path}")
        print("\nEdit this file to configure your settings.")
        print("You can also use environment variables (HASHPATH_* prefix).")
        return EXIT_SUCCESS

    if args.show:
        print(json.dumps(args.cli_config.to_dict(), indent=2))
        return EXIT_SUCCESS

    # Default: show help
    print("Usage: hashpath config [--init|--show]")
    print("  --init  Create a template configuration file")
    print("  --show  Show current configuration")
    return EXIT_SUCCESS


def main(argv: Sequence[str] | None = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0=success, 1=error, 2=verification failed)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return EXIT_RUNTIME_ERROR

    # Load configuration
    try:
        config = load_config(args.config)
    except Exception as e:
        print(f"Error loading configuration: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    if args.db:
        config.storage.backend = "sqlite"
        config.storage.path = args.db

    # Setup logging
    log_level = args.log_level or config.log_level
    setup_logging(level=log_level, log_file=config.log_file)

    # Attach config to args for commands to use
    args.cli_config = config

    try:
        return args.func(args)
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return EXIT_RUNTIME_ERROR
    except Exception as e:
        if getattr(args, "debug", False):
            traceback.print_exc()
        else:
            print(f"Error: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR


if __name__ == "__main__":
    sys.exit(main())
