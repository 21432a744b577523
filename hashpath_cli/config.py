"""
CLI Configuration

Locates the configuration file and merges it with environment variables.
Supports YAML and JSON files.
"""

from __future__ import annotations

from pathlib import Path

from core.config.runtime import RuntimeConfig


DEFAULT_CONFIG_NAMES = ("hashpath.yaml", "hashpath.yml", "hashpath.json")


def default_config_paths() -> list[Path]:
    """Config locations searched when no path is given, in order."""
    paths = [Path.cwd() / name for name in DEFAULT_CONFIG_NAMES]
    paths.append(Path.home() / ".config" / "hashpath" / "config.yaml")
    return paths


def load_config(config_path: Path | None = None) -> RuntimeConfig:
    """
    Load configuration from file and/or environment.

    Environment variables override file settings.

    Args:
        config_path: Optional path to config file

    Returns:
        Merged configuration

    Raises:
        FileNotFoundError: If config_path is given but does not exist
    """
    config = RuntimeConfig()

    if config_path is not None:
        config = RuntimeConfig.from_file(config_path)
    else:
        for default_path in default_config_paths():
            if default_path.exists():
                config = RuntimeConfig.from_file(default_path)
                break

    return config.with_env_overrides()


def get_default_config_template() -> str:
    """Get a template configuration file."""
    return """\
# hashpath configuration
tree:
  name: default
  depth: 32
  snapshot: true
  incremental: true

storage:
  backend: sqlite   # sqlite or memory
  path: hashpath.db

log_level: INFO
log_file: null
"""
