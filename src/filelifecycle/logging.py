"""Logging for filelifecycle.

Every module logs through a child of the ``filelifecycle`` logger. The library
installs no handlers itself; an application that wants the output calls
``setup_logging`` once. Two extra levels sit around the standard ones:
VERBOSE for lifecycle decisions and TRACE for suppressed notifications.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from filelifecycle.config.schema import LoggingConfig

TRACE = 5
VERBOSE = 15

logging.addLevelName(TRACE, "TRACE")
logging.addLevelName(VERBOSE, "VERBOSE")

LOG_FILE_ENV = "FILELIFECYCLE_LOG"

logger = logging.getLogger("filelifecycle")
logger.addHandler(logging.NullHandler())

_installed: logging.Handler | None = None

_LEVEL_NAMES = {
    "TRACE": TRACE,
    "DEBUG": logging.DEBUG,
    "VERBOSE": VERBOSE,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

# verbose: 0 = errors only ... 4 = everything
_VERBOSITY = (logging.ERROR, logging.WARNING, logging.INFO, VERBOSE, TRACE)


class _LowercaseLevelFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        record.levelname = record.levelname.lower()
        return super().format(record)


def resolve_level(config: LoggingConfig | None) -> int:
    """Pick the effective log level from a LoggingConfig.

    ``verbose`` takes precedence over ``level``; INFO when neither is set.
    """
    if config is None:
        return logging.INFO
    if config.verbose is not None:
        return _VERBOSITY[min(max(config.verbose, 0), len(_VERBOSITY) - 1)]
    if config.level:
        return _LEVEL_NAMES.get(config.level.upper(), logging.INFO)
    return logging.INFO


def _log_file(config: LoggingConfig | None) -> str | None:
    if config is not None and config.file:
        return os.path.expanduser(config.file)
    env = os.environ.get(LOG_FILE_ENV)
    return os.path.expanduser(env) if env else None


def setup_logging(config: LoggingConfig | None = None) -> None:
    """Send filelifecycle logs to a file or stderr.

    The file comes from ``logging.file`` or ``FILELIFECYCLE_LOG``; without
    one, records go to stderr. Only the first call has an effect.

    Raises:
        OSError: If the log file cannot be opened.
    """
    global _installed
    if _installed is not None:
        return

    path = _log_file(config)
    if path:
        handler: logging.Handler = logging.FileHandler(path, mode="a", encoding="utf-8")
    else:
        handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        _LowercaseLevelFormatter(
            "%(asctime)s %(levelname)s: %(name)s: %(message)s", datefmt="%H:%M:%S"
        )
    )

    logger.setLevel(resolve_level(config))
    logger.addHandler(handler)
    _installed = handler


def reset_logging() -> None:
    """Remove the handler installed by setup_logging (used by tests)."""
    global _installed
    if _installed is not None:
        logger.removeHandler(_installed)
        _installed.close()
        _installed = None
    logger.setLevel(logging.NOTSET)


def get_logger(name: str | None = None) -> logging.Logger:
    """Return the package logger, or its child ``name`` (e.g. "session")."""
    if name:
        return logger.getChild(name)
    return logger
