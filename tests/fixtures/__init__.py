"""
Test fixtures package for hashpath tests.

This package provides factory functions for creating test objects:
- common.py: Leaf factories and failure-injecting stores

Usage:
    from fixtures import make_leaf, FailingStore

    def test_something():
        leaf = make_leaf(7)
"""

from .common import (
    make_leaf,
    make_leaves,
    FailingStore,
)

__all__ = [
    "make_leaf",
    "make_leaves",
    "FailingStore",
]
