"""Exceptions raised by watch sessions."""

from __future__ import annotations

from pathlib import Path


class WatchError(Exception):
    """Base class for watch session failures."""


class ProbeFailedError(WatchError):
    """A filesystem probe failed with something other than "not found".

    The underlying ``OSError`` is available as ``error`` and ``__cause__``.
    """

    def __init__(self, path: Path, operation: str, error: OSError) -> None:
        self.path = path
        self.operation = operation
        self.error = error
        super().__init__(f"{operation} failed for {path}: {error}")


class FileVanishedError(WatchError):
    """The watched file disappeared during a modification check.

    Only raised when ``watch.modification_not_found`` is ``raise``.
    """

    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f"{path} disappeared while checking for modification")
