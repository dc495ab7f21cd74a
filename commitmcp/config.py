"""Configuration module for commitmcp.

This module provides access to user configuration stored in one of these locations:
1. $COMMITMCP_CONFIG_DIR/commitmcprc if $COMMITMCP_CONFIG_DIR is defined
2. $XDG_CONFIG_HOME/commitmcp/commitmcprc if $XDG_CONFIG_HOME is defined
3. $HOME/.commitmcprc

The configuration is stored in TOML format, for example::

    [logger]
    verbosity = "DEBUG"

    [prompt]
    template = "Suggest a commit message {scope}for:\\n\\n{diff}"
"""

import copy
import logging
import os
from pathlib import Path
from typing import Any

import tomli

__all__ = [
    "get_config_path",
    "load_config",
    "get_logger_verbosity",
    "get_logger_path",
    "get_prompt_template",
    "get_conventional_prompt_template",
]

# Default configuration values
DEFAULT_CONFIG: dict[str, Any] = {
    "logger": {
        "verbosity": "INFO",
        "path": str(Path.home() / ".commitmcp"),
    },
    "prompt": {
        "template": None,  # None means the built-in template
        "conventional_template": None,
    },
}


def get_config_path() -> Path:
    """Return the path to the user's config file.

    Checks the following locations in order:
    1. $COMMITMCP_CONFIG_DIR/commitmcprc if $COMMITMCP_CONFIG_DIR is defined
    2. $XDG_CONFIG_HOME/commitmcp/commitmcprc if $XDG_CONFIG_HOME is defined
    3. Fallback to $HOME/.commitmcprc

    Returns:
        Path to the config file
    """
    if "COMMITMCP_CONFIG_DIR" in os.environ:
        path = Path(os.environ["COMMITMCP_CONFIG_DIR"]) / "commitmcprc"
        if path.exists():
            return path

    if "XDG_CONFIG_HOME" in os.environ:
        path = Path(os.environ["XDG_CONFIG_HOME"]) / "commitmcp" / "commitmcprc"
        if path.exists():
            return path

    return Path.home() / ".commitmcprc"


def load_config() -> dict[str, Any]:
    """Load configuration from the config file.

    Returns:
        Dict containing the merged configuration (defaults + user config).
    """
    config = copy.deepcopy(DEFAULT_CONFIG)
    config_path = get_config_path()

    if config_path.exists():
        try:
            with open(config_path, "rb") as f:
                user_config = tomli.load(f)

            _merge_configs(config, user_config)
        except (OSError, tomli.TOMLDecodeError) as e:
            # Logging may not be configured yet when this runs
            logging.warning(f"Error loading config from {config_path}: {e}")

    return config


def _merge_configs(base: dict[str, Any], override: dict[str, Any]) -> None:
    """Recursively merge override dict into base dict.

    Args:
        base: The base configuration dictionary to merge into.
        override: The override configuration dictionary to merge from.

    """
    for key, value in override.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            nested_value: dict[str, Any] = value
            _merge_configs(base[key], nested_value)
        else:
            base[key] = value


def get_logger_verbosity() -> str:
    """Get the configured logger verbosity level.

    Returns:
        String representing the logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).

    """
    config = load_config()
    return config["logger"]["verbosity"]


def get_logger_path() -> str:
    """Get the configured logger path.

    Returns:
        String representing the path where logs should be stored.

    """
    config = load_config()
    return config["logger"]["path"]


def get_prompt_template() -> str | None:
    """Get the commit prompt template from the config file, if any."""
    config = load_config()
    return config["prompt"]["template"] or None


def get_conventional_prompt_template() -> str | None:
    """Get the conventional-commit prompt template from the config file, if any."""
    config = load_config()
    return config["prompt"]["conventional_template"] or None
