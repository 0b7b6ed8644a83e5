"""Configuration file loading and caching.

Handles:
- YAML file parsing
- Environment variable overrides
- Config caching with reset support
- Conversion from dict to typed Config dataclass
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import yaml

from filelifecycle.config.merge import merge_configs
from filelifecycle.config.paths import get_config_paths
from filelifecycle.config.schema import (
    MIN_POLL_INTERVAL,
    Config,
    LoggingConfig,
    NotFoundPolicy,
    WatchBackend,
    WatchConfig,
)

# Module logger (may not be configured yet at import time)
_log = logging.getLogger("filelifecycle.config")

_cached_config: Config | None = None


class ConfigError(ValueError):
    """Raised when a configuration value cannot be interpreted."""


def load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a YAML file, returning empty dict if not found or invalid.

    Args:
        path: Path to the YAML file.

    Returns:
        Parsed YAML as dict, or empty dict on error.
    """
    if not path.exists():
        return {}

    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
            return data if isinstance(data, dict) else {}
    except yaml.YAMLError as e:
        _log.warning("Invalid YAML in %s: %s", path, e)
        return {}
    except PermissionError:
        _log.debug("Permission denied reading %s", path)
        return {}
    except OSError as e:
        _log.warning("Error reading %s: %s", path, e)
        return {}


def env_overrides() -> dict[str, Any]:
    """Build config dict from environment variables.

    Returns:
        Config dict with values from FILELIFECYCLE_* variables.
    """
    overrides: dict[str, Any] = {}

    log_path = os.environ.get("FILELIFECYCLE_LOG")
    if log_path:
        overrides.setdefault("logging", {})["file"] = log_path

    backend = os.environ.get("FILELIFECYCLE_BACKEND")
    if backend:
        overrides.setdefault("watch", {})["backend"] = backend

    poll_interval = os.environ.get("FILELIFECYCLE_POLL_INTERVAL")
    if poll_interval:
        overrides.setdefault("watch", {})["poll_interval"] = poll_interval

    return overrides


def _parse_enum(enum_cls: type[Any], value: Any, key: str) -> Any:
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).lower())
    except ValueError:
        choices = ", ".join(member.value for member in enum_cls)
        raise ConfigError(f"{key}: expected one of {choices}, got {value!r}") from None


def _parse_interval(value: Any) -> float:
    try:
        interval = float(value)
    except (TypeError, ValueError):
        raise ConfigError(f"watch.poll_interval: not a number: {value!r}") from None
    return max(MIN_POLL_INTERVAL, interval)


def dict_to_config(data: dict[str, Any]) -> Config:
    """Convert merged dict to typed Config dataclass.

    Args:
        data: Merged configuration dictionary.

    Returns:
        Typed Config object.

    Raises:
        ConfigError: If an enum or numeric value is invalid.
    """
    defaults = WatchConfig()

    watch_data = data.get("watch") or {}
    watch = WatchConfig(
        backend=_parse_enum(
            WatchBackend, watch_data.get("backend", defaults.backend), "watch.backend"
        ),
        poll_interval=_parse_interval(watch_data.get("poll_interval", defaults.poll_interval)),
        modification_not_found=_parse_enum(
            NotFoundPolicy,
            watch_data.get("modification_not_found", defaults.modification_not_found),
            "watch.modification_not_found",
        ),
    )

    log_data = data.get("logging") or {}
    verbose = log_data.get("verbose")
    logging_config = LoggingConfig(
        level=log_data.get("level"),
        verbose=int(verbose) if verbose is not None else None,
        file=log_data.get("file"),
    )

    known_keys = {"watch", "logging"}
    extra = {k: v for k, v in data.items() if k not in known_keys}

    return Config(watch=watch, logging=logging_config, extra=extra)


def load_config(project_root: str | Path | None = None, reload: bool = False) -> Config:
    """Load and merge config from all sources.

    Priority order (highest to lowest):
    1. Environment variables
    2. Project config ($project_root/.filelifecycle.yaml)
    3. User config
    4. System config

    Args:
        project_root: Project directory for project-level config.
        reload: Force reload even if cached.

    Returns:
        Merged Config object.
    """
    global _cached_config

    if _cached_config is not None and not reload and project_root is None:
        return _cached_config

    layers: list[dict[str, Any]] = []
    for path in get_config_paths(project_root):
        layer = load_yaml_file(path)
        if layer:
            _log.debug("Loaded config from %s", path)
            layers.append(layer)

    layers.append(env_overrides())

    config = dict_to_config(merge_configs(*layers))

    # Cache only global config (no project_root)
    if project_root is None:
        _cached_config = config

    return config


def get_config() -> Config:
    """Get the cached global config, loading it on first use."""
    if _cached_config is None:
        return load_config()
    return _cached_config


def reset_config() -> None:
    """Reset cached config.

    Useful for testing or forcing a reload.
    """
    global _cached_config
    _cached_config = None
