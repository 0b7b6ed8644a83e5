"""Configuration management for filelifecycle.

Provides hierarchical YAML-based configuration with:
- System-level config (/etc/filelifecycle/ or %PROGRAMDATA%)
- User-level config (~/.config/filelifecycle/ or %APPDATA%)
- Project-level config ($project_root/.filelifecycle.yaml)
- Environment variable overrides (highest priority)

Example usage:
    from filelifecycle.config import load_config

    config = load_config(project_root="/path/to/project")
    print(config.watch.backend)
"""

from filelifecycle.config.loader import (
    ConfigError,
    get_config,
    load_config,
    reset_config,
)
from filelifecycle.config.paths import (
    get_config_paths,
    get_project_config_path,
    get_system_config_path,
    get_user_config_path,
)
from filelifecycle.config.schema import (
    Config,
    LoggingConfig,
    NotFoundPolicy,
    WatchBackend,
    WatchConfig,
)

__all__ = [
    # Main API
    "Config",
    "ConfigError",
    "load_config",
    "get_config",
    "reset_config",
    # Schema types
    "LoggingConfig",
    "NotFoundPolicy",
    "WatchBackend",
    "WatchConfig",
    # Path utilities
    "get_config_paths",
    "get_system_config_path",
    "get_user_config_path",
    "get_project_config_path",
]
