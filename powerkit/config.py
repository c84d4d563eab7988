"""Configuration management for powerkit."""

import copy
import json
import logging
import os
from pathlib import Path
from typing import Any, Optional

log = logging.getLogger(__name__)

# Default configuration values
DEFAULTS = {
    "polling": {
        "check_interval_seconds": 60,  # Connection liveness check
    },

    # Which system services may be used
    "backends": {
        "logind": True,
        "consolekit": True,
        "upower": True,
    },

    "logging": {
        "level": "WARNING",
    },
}


def get_config_dir() -> Path:
    """Get the configuration directory."""
    xdg_config = os.environ.get("XDG_CONFIG_HOME", "")
    if xdg_config:
        return Path(xdg_config) / "powerkit"
    return Path.home() / ".config" / "powerkit"


def get_config_path() -> Path:
    """Get the path to the configuration file."""
    return get_config_dir() / "config.json"


def _deep_merge(base: dict, override: dict) -> dict:
    """Deep merge override into base, returning new dict."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def load_config(path: Optional[Path] = None) -> dict:
    """Load configuration from file, merging with defaults.

    A missing file is not an error; the defaults are returned as-is.
    """
    config_path = path or get_config_path()

    if not config_path.exists():
        return copy.deepcopy(DEFAULTS)

    try:
        with open(config_path, "r") as f:
            user_config = json.load(f)
    except (json.JSONDecodeError, OSError) as e:
        log.warning("Could not load config from %s: %s", config_path, e)
        return copy.deepcopy(DEFAULTS)

    if not isinstance(user_config, dict):
        log.warning("Ignoring config %s: top level must be an object", config_path)
        return copy.deepcopy(DEFAULTS)
    return _deep_merge(copy.deepcopy(DEFAULTS), user_config)


def save_config(config: dict, path: Optional[Path] = None) -> bool:
    """Save configuration to file."""
    config_path = path or get_config_path()

    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, "w") as f:
            json.dump(config, f, indent=2)
        return True
    except OSError as e:
        log.error("Could not save config to %s: %s", config_path, e)
        return False


def get(config: dict, key: str, default: Any = None) -> Any:
    """Get a config value using dot notation (e.g., 'polling.check_interval_seconds')."""
    value = config
    for k in key.split("."):
        if isinstance(value, dict) and k in value:
            value = value[k]
        else:
            return default
    return value


class Config:
    """Configuration accessor with attribute-style access."""

    def __init__(self, path: Optional[Path] = None):
        self._path = path
        self._config = load_config(path)

    def reload(self) -> dict:
        """Reload configuration from file."""
        self._config = load_config(self._path)
        return self._config

    def save(self) -> bool:
        return save_config(self._config, self._path)

    def as_dict(self) -> dict:
        return copy.deepcopy(self._config)

    @property
    def check_interval(self) -> int:
        return int(self["polling.check_interval_seconds"])

    @property
    def backends(self) -> dict:
        return self._config.get("backends", DEFAULTS["backends"])

    @property
    def log_level(self) -> str:
        return str(self["logging.level"]).upper()

    def __getitem__(self, key: str) -> Any:
        return get(self._config, key, get(DEFAULTS, key))

    def __setitem__(self, key: str, value: Any):
        """Set a value in memory using dot notation; call save() to persist."""
        keys = key.split(".")
        target = self._config
        for k in keys[:-1]:
            if not isinstance(target.get(k), dict):
                target[k] = {}
            target = target[k]
        target[keys[-1]] = value
