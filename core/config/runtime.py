"""
Runtime Configuration

Central configuration for tree parameters, storage backend and logging.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, Optional
from pathlib import Path

from dotenv import load_dotenv

# Matches core.merkle.merkle_tree.MAX_DEPTH
MAX_DEPTH = 32

load_dotenv()


ENV_PREFIX = "HASHPATH_"


def _env_bool(name: str, default: str = "true") -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes", "on")


@dataclass
class TreeConfig:
    """Configuration for the tree a caller opens by default."""
    name: str = "default"
    depth: int = MAX_DEPTH
    snapshot: bool = True
    incremental: bool = True


@dataclass
class StorageConfig:
    """Configuration for the key-value backend."""
    backend: str = "sqlite"  # "sqlite" or "memory"
    path: str = "hashpath.db"


@dataclass
class RuntimeConfig:
    """
    Complete runtime configuration.

    Can be loaded from:
    - Environment variables
    - YAML file
    - JSON file
    - Programmatic construction
    """
    tree: TreeConfig = field(default_factory=TreeConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    log_level: str = "INFO"
    log_file: Optional[str] = None
    extra: dict[str, Any] = field(default_factory=dict)

    @staticmethod
    def _get_env_overrides() -> dict[str, Any]:
        """
        Get configuration overrides from environment variables.

        This is the SINGLE source of truth for all env var reading.

        Supported variables:
        - HASHPATH_TREE_NAME: Default tree name
        - HASHPATH_TREE_DEPTH: Depth used when creating a tree
        - HASHPATH_SNAPSHOT: Persist full-tree snapshots (true/false)
        - HASHPATH_INCREMENTAL: Use sibling-chain updates (true/false)
        - HASHPATH_STORAGE_BACKEND: sqlite or memory
        - HASHPATH_DB_PATH: SQLite database path
        - HASHPATH_LOG_LEVEL: Log level
        - HASHPATH_LOG_FILE: Optional log file
        """
        overrides: dict[str, Any] = {}

        # Tree settings
        if os.getenv(f"{ENV_PREFIX}TREE_NAME"):
            overrides.setdefault("tree", {})["name"] = os.getenv(f"{ENV_PREFIX}TREE_NAME")
        if os.getenv(f"{ENV_PREFIX}TREE_DEPTH"):
            overrides.setdefault("tree", {})["depth"] = int(os.getenv(f"{ENV_PREFIX}TREE_DEPTH", str(MAX_DEPTH)))
        if os.getenv(f"{ENV_PREFIX}SNAPSHOT"):
            overrides.setdefault("tree", {})["snapshot"] = _env_bool(f"{ENV_PREFIX}SNAPSHOT")
        if os.getenv(f"{ENV_PREFIX}INCREMENTAL"):
            overrides.setdefault("tree", {})["incremental"] = _env_bool(f"{ENV_PREFIX}INCREMENTAL")

        # Storage settings
        if os.getenv(f"{ENV_PREFIX}STORAGE_BACKEND"):
            overrides.setdefault("storage", {})["backend"] = os.getenv(f"{ENV_PREFIX}STORAGE_BACKEND")
        if os.getenv(f"{ENV_PREFIX}DB_PATH"):
            overrides.setdefault("storage", {})["path"] = os.getenv(f"{ENV_PREFIX}DB_PATH")

        # Logging
        if os.getenv(f"{ENV_PREFIX}LOG_LEVEL"):
            overrides["log_level"] = os.getenv(f"{ENV_PREFIX}LOG_LEVEL")
        if os.getenv(f"{ENV_PREFIX}LOG_FILE"):
            overrides["log_file"] = os.getenv(f"{ENV_PREFIX}LOG_FILE")

        return overrides

    @classmethod
    def from_env(cls) -> "RuntimeConfig":
        """
        Load configuration purely from environment variables.

        Uses defaults for any values not specified in env vars.
        """
        return cls.from_dict(cls._get_env_overrides())

    @classmethod
    def from_yaml(cls, path: str | Path) -> "RuntimeConfig":
        """Load configuration from a YAML file."""
        import yaml
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path) as f:
            data = yaml.safe_load(f) or {}

        return cls.from_dict(data)

    @classmethod
    def from_json(cls, path: str | Path) -> "RuntimeConfig":
        """Load configuration from a JSON file."""
        import json
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path) as f:
            data = json.load(f)

        return cls.from_dict(data)

    @classmethod
    def from_file(cls, path: str | Path) -> "RuntimeConfig":
        """Load configuration from a YAML or JSON file, chosen by suffix."""
        if Path(path).suffix.lower() in (".yaml", ".yml"):
            return cls.from_yaml(path)
        return cls.from_json(path)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RuntimeConfig":
        """Load configuration from a dictionary (supports partial data)."""
        tree_data = data.get("tree", {})
        storage_data = data.get("storage", {})

        tree = TreeConfig(**tree_data) if tree_data else TreeConfig()
        storage = StorageConfig(**storage_data) if storage_data else StorageConfig()

        return cls(
            tree=tree,
            storage=storage,
            log_level=data.get("log_level", "INFO"),
            log_file=data.get("log_file"),
            extra=data.get("extra", {}),
        )

    def with_env_overrides(self) -> "RuntimeConfig":
        """
        Return a new config with environment variable overrides applied.

        This allows loading from a config file first, then overlaying env vars.
        """
        overrides = self._get_env_overrides()
        if not overrides:
            return self

        import copy
        new_config = copy.deepcopy(self)

        if "tree" in overrides:
            for key, value in overrides["tree"].items():
                setattr(new_config.tree, key, value)

        if "storage" in overrides:
            for key, value in overrides["storage"].items():
                setattr(new_config.storage, key, value)

        if "log_level" in overrides:
            new_config.log_level = overrides["log_level"]
        if "log_file" in overrides:
            new_config.log_file = overrides["log_file"]

        return new_config

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to a dictionary."""
        return {
            "tree": {
                "name": self.tree.name,
                "depth": self.tree.depth,
                "snapshot": self.tree.snapshot,
                "incremental": self.tree.incremental,
            },
            "storage": {
                "backend": self.storage.backend,
                "path": self.storage.path,
            },
            "log_level": self.log_level,
            "log_file": self.log_file,
            "extra": self.extra,
        }


# Global default configuration
_default_config: Optional[RuntimeConfig] = None


def get_default_config() -> RuntimeConfig:
    """Get the default runtime configuration."""
    global _default_config
    if _default_config is None:
        _default_config = RuntimeConfig.from_env()
    return _default_config


def set_default_config(config: Optional[RuntimeConfig]) -> None:
    """Set (or with None, reset) the default runtime configuration."""
    global _default_config
    _default_config = config
