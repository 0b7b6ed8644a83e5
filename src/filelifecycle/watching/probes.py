"""Filesystem probes with a typed outcome.

Probes never raise for ordinary I/O trouble. They return a ProbeResult whose
status tells the caller whether the path was found, is missing, or could not
be inspected.
"""

from __future__ import annotations

import asyncio
import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Protocol

from filelifecycle.watching.errors import ProbeFailedError


class ProbeStatus(Enum):
    FOUND = "found"
    NOT_FOUND = "not_found"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class ProbeResult:
    """Outcome of one probe.

    Attributes:
        status: FOUND, NOT_FOUND, or ERROR.
        modification_time: ``st_mtime`` when FOUND by a timestamp read.
        error: The underlying OSError when status is ERROR.
    """

    status: ProbeStatus
    modification_time: float | None = None
    error: OSError | None = None

    def __post_init__(self) -> None:
        if (self.status is ProbeStatus.ERROR) != (self.error is not None):
            raise ValueError("ProbeResult.error must be set exactly when status is ERROR")

    @classmethod
    def found(cls, modification_time: float | None = None) -> ProbeResult:
        return cls(ProbeStatus.FOUND, modification_time=modification_time)

    @classmethod
    def not_found(cls) -> ProbeResult:
        return cls(ProbeStatus.NOT_FOUND)

    @classmethod
    def failed(cls, error: OSError) -> ProbeResult:
        return cls(ProbeStatus.ERROR, error=error)

    @property
    def exists(self) -> bool:
        return self.status is ProbeStatus.FOUND

    def raise_for_error(self, path: Path, operation: str) -> None:
        """Raise ProbeFailedError if this result is an ERROR."""
        if self.error is not None:
            raise ProbeFailedError(path, operation, self.error) from self.error


class FileProbe(Protocol):
    """Protocol for inspecting the filesystem.

    Implementations:
    - OSFileProbe: os.stat in a worker thread
    - FakeProbe (tests): scripted results with call counters
    """

    async def read_modification_time(self, path: Path) -> ProbeResult:
        """Read the modification time of ``path``."""
        ...

    async def read_existence(self, path: Path) -> ProbeResult:
        """Check whether ``path`` exists."""
        ...


# ENOTDIR means a path component is now a file, which is "gone" for our purposes
_MISSING_ERRORS = (FileNotFoundError, NotADirectoryError)


def stat_probe(path: Path) -> ProbeResult:
    """Synchronously stat ``path`` and classify the outcome."""
    try:
        stat = os.stat(path)
    except _MISSING_ERRORS:
        return ProbeResult.not_found()
    except OSError as e:
        return ProbeResult.failed(e)
    return ProbeResult.found(stat.st_mtime)


class OSFileProbe:
    """FileProbe backed by ``os.stat``, run off the event loop."""

    async def read_modification_time(self, path: Path) -> ProbeResult:
        return await asyncio.to_thread(stat_probe, path)

    async def read_existence(self, path: Path) -> ProbeResult:
        return await asyncio.to_thread(stat_probe, path)
