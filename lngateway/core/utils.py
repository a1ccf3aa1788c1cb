"""Small shared helpers."""

from pathlib import Path
from typing import Any

GATEWAY_DIR_NAME = ".lngateway"


def get_gateway_dir() -> Path:
    """Get ~/.lngateway (global config directory)."""
    return Path.home() / GATEWAY_DIR_NAME


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge dicts. Override values take precedence.

    Merge rules:
    - Dicts are recursively merged
    - Lists and all other values are replaced

    Returns:
        New merged dictionary (original dicts not modified).
    """
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result
