"""filelifecycle: verified modified/moved/removed events for a single file."""

__version__ = "0.1.0"

# Public API
from filelifecycle.config import Config, get_config, load_config
from filelifecycle.logging import get_logger, setup_logging
from filelifecycle.watching import (
    LifecycleHandlers,
    Modified,
    Moved,
    ProbeFailedError,
    Removed,
    WatchError,
    WatchSession,
    open_watch,
    register_file_lifecycle,
)

__all__ = [
    # Main entry points
    "register_file_lifecycle",
    "open_watch",
    "WatchSession",
    "LifecycleHandlers",
    # Events
    "Modified",
    "Moved",
    "Removed",
    # Errors
    "WatchError",
    "ProbeFailedError",
    # Config
    "Config",
    "load_config",
    "get_config",
    # Logging
    "setup_logging",
    "get_logger",
]
