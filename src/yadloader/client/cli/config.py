"""Configuration utilities for the yadloader CLI.

This module provides shared configuration functions used across CLI commands.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from yadloader.core.config import ClientConfig


def get_config_dir() -> Path:
    """Get the configuration directory for yadloader.

    Returns:
        Path to ~/.yadloader or equivalent.
    """
    return Path.home() / ".yadloader"


def get_config_file() -> Path:
    """Get the path to the config file."""
    return get_config_dir() / "config.json"


def load_config(path: Path | None = None) -> dict[str, Any]:
    """Load settings from a JSON config file.

    Args:
        path: Explicit config file; defaults to ~/.yadloader/config.json.

    Returns:
        Settings found in the file, or an empty dict if the default file is absent.

    Raises:
        ValueError: If the file is not a JSON object.
    """
    config_file = path or get_config_file()
    if not config_file.exists():
        return {}
    try:
        data = json.loads(config_file.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ValueError(f"{config_file} is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise ValueError(f"{config_file} must contain a JSON object")
    return dict(data)


def build_client_config(
    file_settings: dict[str, Any],
    **overrides: Any,
) -> ClientConfig:
    """Merge config file settings with command-line overrides.

    Overrides set to None (option not given) leave the file value in place.

    Raises:
        ValueError: On unknown keys or invalid values.
    """
    settings = dict(file_settings)
    settings.update({k: v for k, v in overrides.items() if v is not None})
    return ClientConfig.from_dict(settings)
