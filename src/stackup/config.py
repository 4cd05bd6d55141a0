"""stackup configuration management.

Handles global (~/.config/stackup/) and project-local (.stackup/) configuration,
plus the stack's key=value environment file.
"""

import copy
from pathlib import Path
from typing import Any, Optional

import yaml
from dotenv import dotenv_values

# Default configuration values
DEFAULT_CONFIG = {
    "git": {
        "remote": "origin",
        "primary_branch": "main",
    },
    "compose": {
        # None: detect "docker compose" or "docker-compose"
        "command": None,
        "file": None,
    },
    "markers": {
        "user": "config/image_version",
        "seed": "seed/image_version",
        "previous": "config/image_version.previous",
    },
    "environment": {
        "file": ".env",
        "data_keys": [],
    },
    "logging": {
        "dir": ".stackup/logs",
    },
}


def get_global_config_dir() -> Path:
    """Get the global configuration directory path."""
    return Path.home() / ".config" / "stackup"


def get_local_config_dir(project_dir: Optional[Path] = None) -> Path:
    """Get the local configuration directory path (project root)."""
    return (project_dir or Path.cwd()) / ".stackup"


def load_config(project_dir: Optional[Path] = None) -> dict[str, Any]:
    """Load merged configuration (global + local).

    Priority (highest first):
    1. Local project config (.stackup/config.yaml)
    2. Global config (~/.config/stackup/config.yaml)
    3. Default values

    Returns:
        Merged configuration dictionary
    """
    config = copy.deepcopy(DEFAULT_CONFIG)

    # Load global config
    global_config_file = get_global_config_dir() / "config.yaml"
    if global_config_file.exists():
        with open(global_config_file) as f:
            global_config = yaml.safe_load(f) or {}
            config = _deep_merge(config, global_config)

    # Load local config (overrides global)
    local_config_file = get_local_config_dir(project_dir) / "config.yaml"
    if local_config_file.exists():
        with open(local_config_file) as f:
            local_config = yaml.safe_load(f) or {}
            config = _deep_merge(config, local_config)

    return config


def _deep_merge(base: dict, override: dict) -> dict:
    """Deep merge two dictionaries.

    Args:
        base: Base dictionary
        override: Dictionary with overriding values

    Returns:
        Merged dictionary
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def load_environment(env_file: Path) -> dict[str, str]:
    """Read the stack's environment file without touching os.environ.

    Args:
        env_file: Path to a key=value file (usually .env)

    Returns:
        Mapping of variable names to values; empty if the file does not exist.
        Variables declared without a value are left out.
    """
    if not env_file.exists():
        return {}
    values = dotenv_values(env_file)
    return {key: value for key, value in values.items() if value is not None}


def resolve_data_dirs(
    environment: dict[str, str],
    data_keys: list[str],
    project_dir: Path,
) -> tuple[list[tuple[str, Path]], list[str]]:
    """Map the configured data-directory variables to paths.

    Relative values are resolved against the project directory.

    Returns:
        (resolved, unset): resolved (key, path) pairs in configuration order,
        and the keys that are missing or blank in the environment.
    """
    resolved = []
    unset = []
    for key in data_keys:
        value = environment.get(key, "").strip()
        if not value:
            unset.append(key)
            continue
        path = Path(value).expanduser()
        if not path.is_absolute():
            path = project_dir / path
        resolved.append((key, path))
    return resolved, unset
