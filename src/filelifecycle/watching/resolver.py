"""Turns rename-class notifications into moves or removals.

Native watchers report a single "rename" event for both a move and a delete.
The event may carry the new filename; when it does not, or when the name is
the watched file's own, the only question is whether the file still exists.
"""

from __future__ import annotations

from pathlib import Path

from filelifecycle.logging import VERBOSE, get_logger
from filelifecycle.watching.events import Moved, RawEvent, Removed, WatchTarget
from filelifecycle.watching.handlers import LifecycleHandlers
from filelifecycle.watching.probes import FileProbe, ProbeStatus

log = get_logger("resolver")


def sibling_path(target: WatchTarget, name_hint: str) -> Path:
    """Candidate destination for a rename hint.

    Some platforms report only the bare filename even when the file moved
    into a subdirectory (``a.txt`` -> ``sub/b.txt`` is reported as ``b.txt``).
    Joining the hint with the watched file's directory finds the file when it
    stayed beside its old location. Moves further away look like removals,
    and a same-named sibling cannot be told apart from a delete followed by a
    recreate.
    """
    return target.parent_dir / name_hint


class MoveResolver:
    """Classifies a rename-class event as Moved, Removed, or nothing."""

    def __init__(
        self,
        target: WatchTarget,
        probe: FileProbe,
        handlers: LifecycleHandlers,
    ) -> None:
        self._target = target
        self._probe = probe
        self._handlers = handlers

    @property
    def enabled(self) -> bool:
        return self._handlers.wants_renames

    async def resolve(self, event: RawEvent) -> Moved | Removed | None:
        """Verify a rename-class event against the filesystem.

        Raises:
            ProbeFailedError: If an existence probe hit an I/O error.
        """
        if not self.enabled:
            return None

        hint = event.name_hint
        if hint is None or hint == self._target.base_name:
            return await self._confirm_removed()
        return await self._confirm_moved(hint)

    async def _confirm_removed(self) -> Removed | None:
        if self._handlers.on_removed is None:
            return None

        path = self._target.path
        result = await self._probe.read_existence(path)
        if result.status is ProbeStatus.NOT_FOUND:
            log.log(VERBOSE, "%s removed", path)
            return Removed()
        result.raise_for_error(path, "existence probe")

        log.debug("Rename event for %s but the file is still there", path)
        return None

    async def _confirm_moved(self, name_hint: str) -> Moved | Removed | None:
        # Without on_moved a different-name rename is not verified at all
        if self._handlers.on_moved is None:
            return None

        candidate = sibling_path(self._target, name_hint)
        result = await self._probe.read_existence(candidate)
        result.raise_for_error(candidate, "existence probe")

        if result.exists:
            log.log(VERBOSE, "%s moved to %s", self._target.path, candidate)
            return Moved(new_path=candidate)

        # Hint named a file that does not exist: the watched file was deleted
        if self._handlers.on_removed is None:
            return None
        log.log(VERBOSE, "%s removed (no file at %s)", self._target.path, candidate)
        return Removed()
