"""Turns raw content-change notifications into confirmed modifications.

Watch primitives over-notify: one write can produce several change events,
and some arrive with nothing actually changed. A modification is only
reported when the file's modification time differs from the baseline.
"""

from __future__ import annotations

import asyncio

from filelifecycle.config.schema import NotFoundPolicy
from filelifecycle.logging import TRACE, VERBOSE, get_logger
from filelifecycle.watching.errors import FileVanishedError
from filelifecycle.watching.events import Modified, WatchTarget
from filelifecycle.watching.handlers import LifecycleHandlers
from filelifecycle.watching.probes import FileProbe, ProbeStatus
from filelifecycle.watching.tracker import TimestampTracker

log = get_logger("disambiguator")


class ModificationDisambiguator:
    """Decides whether a content-change event is a genuine modification."""

    def __init__(
        self,
        target: WatchTarget,
        probe: FileProbe,
        tracker: TimestampTracker,
        handlers: LifecycleHandlers,
        not_found_policy: NotFoundPolicy = NotFoundPolicy.IGNORE,
    ) -> None:
        self._target = target
        self._probe = probe
        self._tracker = tracker
        self._handlers = handlers
        self._not_found_policy = not_found_policy

    @property
    def enabled(self) -> bool:
        return self._handlers.wants_modifications

    async def check(self) -> Modified | None:
        """Compare the current modification time against the baseline.

        Returns:
            Modified with the new time, or None if nothing changed or no
            on_modified handler is registered.

        Raises:
            ProbeFailedError: If either timestamp read hit an I/O error.
            FileVanishedError: If the file is gone and the policy is RAISE.
        """
        if not self.enabled:
            return None

        path = self._target.path
        previous, current = await asyncio.gather(
            self._tracker.baseline(),
            self._probe.read_modification_time(path),
        )

        if current.status is ProbeStatus.NOT_FOUND:
            if self._not_found_policy is NotFoundPolicy.RAISE:
                raise FileVanishedError(path)
            log.debug("%s vanished during modification check; leaving it to removal", path)
            return None
        current.raise_for_error(path, "modification time read")

        self._tracker.advance(current.modification_time)

        if previous is not None and previous == current.modification_time:
            log.log(TRACE, "Duplicate change notification for %s suppressed", path)
            return None

        log.log(VERBOSE, "%s modified at %s", path, current.modification_time)
        return Modified(modification_time=current.modification_time)
