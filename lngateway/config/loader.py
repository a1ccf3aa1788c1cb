"""Configuration loading with layered merging.

Layers, later ones overriding earlier ones:
1. ~/.lngateway/config.json
2. <cwd>/.lngateway/config.json

An explicit path (argument or LNGATEWAY_CONFIG) is loaded on its own.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from lngateway.config.schema import Config
from lngateway.core.errors import ConfigError
from lngateway.core.utils import GATEWAY_DIR_NAME, deep_merge, get_gateway_dir

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "LNGATEWAY_CONFIG"


def read_config_file(path: Path) -> dict[str, Any]:
    """Read one JSON config file. An empty file counts as ``{}``.

    Raises:
        ConfigError: If the file is missing, unreadable, not JSON, or not
            a JSON object.
    """
    try:
        text = path.read_text(encoding="utf-8-sig").strip()
    except FileNotFoundError:
        raise ConfigError(f"Config file not found: {path}") from None
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e

    if not text:
        return {}
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Config in {path} must be an object, got {type(data).__name__}")
    return data


def _validate(data: dict[str, Any], source: str) -> Config:
    try:
        return Config.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Config validation failed ({source}): {e}") from e


def load_config(path: Path | None = None, cwd: Path | None = None) -> Config:
    """Load and validate the gateway configuration.

    Args:
        path: Explicit config file. Skips layering when given.
        cwd: Directory holding the local ``.lngateway`` layer. Defaults to
            the current directory.

    Raises:
        ConfigError: If a file is invalid or the merged result fails validation.
    """
    if path is None and os.environ.get(CONFIG_ENV_VAR):
        path = Path(os.environ[CONFIG_ENV_VAR])
    if path is not None:
        logger.info("Config loaded from: %s", path)
        return _validate(read_config_file(path), str(path))

    layers = [
        get_gateway_dir() / "config.json",
        (cwd or Path.cwd()) / GATEWAY_DIR_NAME / "config.json",
    ]
    merged: dict[str, Any] = {}
    sources: list[str] = []
    for layer in dict.fromkeys(p.resolve() for p in layers):
        if not layer.is_file():
            logger.debug("No config layer at %s", layer)
            continue
        merged = deep_merge(merged, read_config_file(layer))
        sources.append(str(layer))

    if not sources:
        logger.debug("No config files found, using defaults")
        return Config()

    logger.info("Config loaded from: %s", sources)
    return _validate(merged, "merged from " + ", ".join(sources))
