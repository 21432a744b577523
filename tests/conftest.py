"""
Pytest configuration and shared fixtures for hashpath tests.

This conftest.py:
1. Adds project root to sys.path for imports
2. Provides commonly-used fixtures via pytest's autodiscovery
3. Configures pytest markers and settings
"""

import sys
from pathlib import Path

import pytest

# =============================================================================
# Path Setup - Must happen before any local imports
# =============================================================================

# Get the project root (parent of tests/)
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_TESTS_ROOT = Path(__file__).resolve().parent

# Add both project root and tests root to sys.path
for _path in [str(_PROJECT_ROOT), str(_TESTS_ROOT)]:
    if _path not in sys.path:
        sys.path.insert(0, _path)

# =============================================================================
# Import fixtures using importlib (more robust for pytest loading)
# =============================================================================

import importlib

_common = importlib.import_module("fixtures.common")

make_leaf = _common.make_leaf
make_leaves = _common.make_leaves
FailingStore = _common.FailingStore

from core.storage import MemoryStore, SQLiteStore


# =============================================================================
# Pytest Fixtures (autodiscovered by pytest)
# =============================================================================

@pytest.fixture
def memory_store():
    """Provide an empty in-memory key-value store."""
    return MemoryStore()


@pytest.fixture
def sqlite_store(tmp_path):
    """Provide a SQLite key-value store in a temporary directory."""
    store = SQLiteStore(tmp_path / "trees.db")
    yield store
    store.close()


@pytest.fixture
def failing_store():
    """Provide a MemoryStore whose writes can be made to fail."""
    return FailingStore()


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch):
    """Keep HASHPATH_* variables from the developer's shell out of tests."""
    import os
    for key in list(os.environ):
        if key.startswith("HASHPATH_"):
            monkeypatch.delenv(key, raising=False)


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
