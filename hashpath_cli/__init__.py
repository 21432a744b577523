"""
hashpath CLI

Command-line interface for persistent fixed-depth Merkle trees.

Usage:
    python -m hashpath_cli init --depth 16
    python -m hashpath_cli update 2 0x<128 hex chars>
    python -m hashpath_cli root
    python -m hashpath_cli path 2 --out path.bin
    python -m hashpath_cli verify 2 0x<128 hex chars> --path path.bin
"""

__version__ = "0.1.0"
