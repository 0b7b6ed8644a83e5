"""Configuration schema dataclasses for filelifecycle.

Defines the structure of configuration at all levels (system, user, project).
All fields have defaults so partial configs merge together.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class WatchBackend(Enum):
    """Raw notification source used by new sessions."""

    POLLING = "polling"
    WATCHDOG = "watchdog"


class NotFoundPolicy(Enum):
    """What a modification check does when the file vanished mid-check."""

    IGNORE = "ignore"  # Leave it to the rename/removal path
    RAISE = "raise"  # Treat as a session failure


MIN_POLL_INTERVAL = 0.05


@dataclass
class WatchConfig:
    """Watch session configuration.

    Example config.yaml:
        watch:
          backend: watchdog
          poll_interval: 0.25
          modification_not_found: ignore
    """

    backend: WatchBackend = WatchBackend.POLLING
    poll_interval: float = 0.5  # Seconds between polls (polling backend only)
    modification_not_found: NotFoundPolicy = NotFoundPolicy.IGNORE


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str | None = None  # DEBUG, INFO, WARNING, ERROR
    verbose: int | None = None  # 0-4, overrides level
    file: str | None = None  # Log file path


@dataclass
class Config:
    """Root configuration object."""

    watch: WatchConfig = field(default_factory=WatchConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    extra: dict[str, Any] = field(default_factory=dict)  # Unknown top-level keys
