"""
CLI command modules.
"""

from hashpath_cli.commands import tree, path

__all__ = ["tree", "path"]
