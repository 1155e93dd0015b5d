"""Configuration loading utilities."""

import os
from pathlib import Path
from typing import Optional, Union

import yaml
from dotenv import load_dotenv


def get_config_path(
    config_path: Optional[Union[str, Path]] = None,
    env_var: str = "NETKEEPER_CONFIG",
) -> Optional[Path]:
    """Resolve the settings file to use.

    Args:
        config_path: Explicit path. Takes precedence when given.
        env_var: Environment variable consulted when no path is given.

    Returns:
        Path to the settings file, or None if neither source names one.
    """
    if config_path is None:
        config_path = os.environ.get(env_var)
    if not config_path:
        return None
    return Path(config_path)


def load_yaml_config(
    config_path: Union[str, Path],
    load_env: bool = True,
) -> dict:
    """Load YAML configuration file.

    Args:
        config_path: Path to config file.
        load_env: Whether to load .env file first.

    Returns:
        Configuration dictionary.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        yaml.YAMLError: If config file is invalid YAML.
    """
    if load_env:
        load_dotenv()

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r") as f:
        return yaml.safe_load(f) or {}
