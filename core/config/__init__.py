"""
Runtime Configuration Module

Provides configuration loading and management for hashpath.
"""

from .runtime import (
    RuntimeConfig,
    StorageConfig,
    TreeConfig,
    get_default_config,
    set_default_config,
)

__all__ = [
    "RuntimeConfig",
    "StorageConfig",
    "TreeConfig",
    "get_default_config",
    "set_default_config",
]
