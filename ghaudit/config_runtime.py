"""Runtime configuration for ghaudit - centralized configuration management."""

import copy
import json
import os
from pathlib import Path
from typing import Any

from ghaudit.utils.logging import logger

CONFIG_DIR = ".ghaudit"
CONFIG_FILE = "config.json"

DEFAULTS = {
    "analysis": {
        "disabled_policies": [],
        "min_severity": "info",
        "workers": 1,
        "max_file_size": 1024 * 1024,
    },
    "output": {
        "format": "text",
    },
}

OUTPUT_FORMATS = ("text", "json")


def load_runtime_config(root: str = ".", config_path: str | Path | None = None) -> dict[str, Any]:
    """
    Load runtime configuration from .ghaudit/config.json and environment variables.

    Config priority (highest to lowest):
    1. Environment variables (GHAUDIT_<SECTION>_<KEY>)
    2. The config file (``config_path`` or <root>/.ghaudit/config.json)
    3. Built-in defaults

    Args:
        root: Root directory to look for config file
        config_path: Explicit config file, overrides the default location

    Returns:
        Configuration dictionary with merged values
    """
    cfg = copy.deepcopy(DEFAULTS)

    path = Path(config_path) if config_path else Path(root) / CONFIG_DIR / CONFIG_FILE
    try:
        if path.exists():
            with open(path, encoding="utf-8") as f:
                user = json.load(f)

            if isinstance(user, dict):
                _merge_file_values(cfg, user, path)
            else:
                logger.warning("Ignoring config file {path}: top level must be an object", path=path)
    except (json.JSONDecodeError, OSError) as e:
        logger.warning(
            "Could not load config file from {path}: {err}. Continuing with default configuration",
            path=path,
            err=str(e),
        )

    for section in cfg:
        for key in cfg[section]:
            env_var = f"GHAUDIT_{section.upper()}_{key.upper()}"
            if env_var in os.environ:
                value = os.environ[env_var]
                try:
                    cfg[section][key] = _parse_env_value(value, cfg[section][key])
                except ValueError as e:
                    logger.warning(
                        "Invalid value for environment variable {var}: '{value}' - {err}. "
                        "Using {current!r}",
                        var=env_var,
                        value=value,
                        err=str(e),
                        current=cfg[section][key],
                    )

    if cfg["output"]["format"] not in OUTPUT_FORMATS:
        logger.warning(
            "Unknown output format {fmt!r}, using 'text'", fmt=cfg["output"]["format"]
        )
        cfg["output"]["format"] = "text"

    return cfg


def _merge_file_values(cfg: dict[str, Any], user: dict[str, Any], path: Path) -> None:
    for section, values in user.items():
        if section not in cfg or not isinstance(values, dict):
            logger.warning("Unknown config section {section!r} in {path}", section=section, path=path)
            continue
        for key, value in values.items():
            if key not in cfg[section]:
                logger.warning("Unknown config key {section}.{key} in {path}", section=section, key=key, path=path)
            elif isinstance(value, type(cfg[section][key])) and not isinstance(value, bool):
                cfg[section][key] = value
            else:
                logger.warning(
                    "Ignoring {section}.{key}: expected {expected}, got {actual}",
                    section=section,
                    key=key,
                    expected=type(cfg[section][key]).__name__,
                    actual=type(value).__name__,
                )


def _parse_env_value(value: str, default: Any) -> Any:
    if isinstance(default, int):
        return int(value)
    if isinstance(default, list):
        return [v.strip() for v in value.split(",") if v.strip()]
    return value
