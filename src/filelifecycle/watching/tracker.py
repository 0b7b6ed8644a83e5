"""Baseline modification time for one watched file."""

from __future__ import annotations

import asyncio

from filelifecycle.logging import get_logger
from filelifecycle.watching.events import WatchTarget
from filelifecycle.watching.probes import FileProbe, ProbeResult

log = get_logger("tracker")


class TimestampTracker:
    """Holds the last confirmed modification time.

    The initial read is started when the session opens so that it reflects the
    file as it was before any change notification, but nothing waits on it
    until the first modification check asks for the baseline.
    """

    def __init__(self, target: WatchTarget, probe: FileProbe) -> None:
        self._target = target
        self._probe = probe
        self._baseline: float | None = None
        self._resolved = False
        self._initial: asyncio.Task[ProbeResult] | None = None

    @property
    def current(self) -> float | None:
        """Last known modification time, or None before it is resolved."""
        return self._baseline

    def start(self) -> asyncio.Task[ProbeResult]:
        """Begin the initial timestamp read. Idempotent."""
        if self._initial is None:
            self._initial = asyncio.create_task(
                self._probe.read_modification_time(self._target.path)
            )
        return self._initial

    async def baseline(self) -> float | None:
        """Return the previous modification time.

        Falls back to the initial read until a check has advanced the
        baseline. None means the file was missing when the session opened.

        Raises:
            ProbeFailedError: If the initial read failed with an I/O error.
        """
        if self._resolved:
            return self._baseline
        result = await asyncio.shield(self.start())
        result.raise_for_error(self._target.path, "initial modification time read")
        return result.modification_time

    def advance(self, modification_time: float | None) -> None:
        """Replace the baseline with a freshly read value."""
        self._baseline = modification_time
        self._resolved = True

    def close(self) -> None:
        if self._initial is not None and not self._initial.done():
            log.debug("Abandoning initial read for %s", self._target.path)
            self._initial.cancel()
