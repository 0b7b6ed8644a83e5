"""Raw notification sources for a single watched file.

A source subscribes to one path and calls ``emit`` with a RawEvent for every
notification, always on the event loop thread. Sources do not keep the
process alive: the polling backend is an asyncio task and the watchdog
backend runs its observer as a daemon thread.
"""

from __future__ import annotations

import asyncio
import os
from collections.abc import Callable
from pathlib import Path
from typing import Protocol

from watchdog.events import (
    FileDeletedEvent,
    FileModifiedEvent,
    FileMovedEvent,
    FileSystemEvent,
    FileSystemEventHandler,
)
from watchdog.observers import Observer

from filelifecycle.config.schema import MIN_POLL_INTERVAL, WatchBackend, WatchConfig
from filelifecycle.logging import TRACE, get_logger
from filelifecycle.watching.events import RawEvent

log = get_logger("sources")

Emit = Callable[[RawEvent], None]


class Subscription(Protocol):
    def close(self) -> None:
        """Stop delivering events. Safe to call more than once."""
        ...


class WatchSource(Protocol):
    """Protocol for subscribing to raw notifications.

    Implementations:
    - PollingWatchSource: stat polling, no native watcher
    - WatchdogWatchSource: native events through watchdog
    - FakeWatchSource (tests): events pushed by hand
    """

    def subscribe(self, path: Path, emit: Emit) -> Subscription:
        """Start watching ``path``.

        Raises:
            FileNotFoundError: If ``path`` does not exist.
        """
        ...


# -----------------------------------------------------------------------------
# Polling
# -----------------------------------------------------------------------------


class _PollingSubscription:
    def __init__(self, path: Path, emit: Emit, poll_interval: float) -> None:
        self._path = path
        self._emit = emit
        self._poll_interval = poll_interval
        stat = os.stat(path)
        self._signature: tuple[float, int] = (stat.st_mtime, stat.st_size)
        self._task: asyncio.Task[None] | None = asyncio.create_task(
            self._poll_loop(), name=f"filelifecycle-poll:{path}"
        )

    async def _poll_loop(self) -> None:
        try:
            while True:
                await asyncio.sleep(self._poll_interval)
                if not self._poll_once():
                    break
        except asyncio.CancelledError:
            log.log(TRACE, "Polling cancelled for %s", self._path)
            raise

    def _poll_once(self) -> bool:
        """Stat the file once. Returns False when polling should stop."""
        try:
            stat = os.stat(self._path)
        except FileNotFoundError:
            # Same report a native watcher gives for an unlink; the inode
            # is gone so there is nothing left to watch
            self._emit(RawEvent.rename(self._path.name))
            return False
        except OSError as e:
            log.warning("Error polling %s: %s", self._path, e)
            return True

        signature = (stat.st_mtime, stat.st_size)
        if signature != self._signature:
            self._signature = signature
            self._emit(RawEvent.change())
        return True

    def close(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None


class PollingWatchSource:
    """Watches a file by polling ``os.stat``.

    Must be subscribed from within a running event loop.
    """

    def __init__(self, poll_interval: float = 0.5) -> None:
        self._poll_interval = max(MIN_POLL_INTERVAL, poll_interval)

    @property
    def poll_interval(self) -> float:
        return self._poll_interval

    def subscribe(self, path: Path, emit: Emit) -> _PollingSubscription:
        return _PollingSubscription(path, emit, self._poll_interval)


# -----------------------------------------------------------------------------
# Watchdog
# -----------------------------------------------------------------------------


def _same_path(raw: bytes | str, path: Path) -> bool:
    return os.path.normcase(os.path.abspath(os.fsdecode(raw))) == os.path.normcase(str(path))


class _TargetEventHandler(FileSystemEventHandler):
    """Filters directory events down to the watched file.

    Runs on the observer thread; ``deliver`` must be thread safe.
    """

    def __init__(self, path: Path, deliver: Emit) -> None:
        super().__init__()
        self._path = path
        self._deliver = deliver

    def on_modified(self, event: FileSystemEvent) -> None:
        if isinstance(event, FileModifiedEvent) and _same_path(event.src_path, self._path):
            self._deliver(RawEvent.change())

    def on_deleted(self, event: FileSystemEvent) -> None:
        if isinstance(event, FileDeletedEvent) and _same_path(event.src_path, self._path):
            self._deliver(RawEvent.rename(self._path.name))

    def on_moved(self, event: FileSystemEvent) -> None:
        if not isinstance(event, FileMovedEvent):
            return
        if _same_path(event.src_path, self._path):
            # Only the bare name, like the native rename report
            self._deliver(RawEvent.rename(os.path.basename(os.fsdecode(event.dest_path))))
        elif _same_path(event.dest_path, self._path):
            # Atomic save: a temp file replaced the watched one
            self._deliver(RawEvent.change())


class _WatchdogSubscription:
    def __init__(self, path: Path, emit: Emit, join_timeout: float) -> None:
        if not path.exists():
            raise FileNotFoundError(f"No such file: {path}")
        self._path = path
        self._emit = emit
        self._join_timeout = join_timeout
        self._loop = asyncio.get_running_loop()
        self._closed = False
        self._stopped: asyncio.Future[None] | None = None

        self._observer = Observer()
        self._observer.daemon = True
        self._observer.schedule(
            _TargetEventHandler(path, self._deliver_threadsafe),
            str(path.parent),
            recursive=False,
        )
        self._observer.start()
        log.debug("Watchdog observer started for %s", path)

    def _deliver_threadsafe(self, event: RawEvent) -> None:
        if self._closed or self._loop.is_closed():
            return
        try:
            self._loop.call_soon_threadsafe(self._deliver, event)
        except RuntimeError:
            # Loop shut down between the check and the call
            log.log(TRACE, "Dropped %s for %s: loop closed", event.kind.value, self._path)

    def _deliver(self, event: RawEvent) -> None:
        if not self._closed:
            self._emit(event)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._observer.stop()
        # Joining blocks; keep it off the loop thread
        if not self._loop.is_closed():
            self._stopped = self._loop.run_in_executor(
                None, self._observer.join, self._join_timeout
            )
        log.debug("Watchdog observer stopping for %s", self._path)

    async def wait_stopped(self) -> None:
        """Wait for the observer thread to exit, at most the join timeout."""
        if self._stopped is not None:
            await self._stopped


class WatchdogWatchSource:
    """Watches a file with watchdog's native observer on its directory.

    Must be subscribed from within a running event loop.
    """

    def __init__(self, join_timeout: float = 1.0) -> None:
        self._join_timeout = join_timeout

    def subscribe(self, path: Path, emit: Emit) -> _WatchdogSubscription:
        return _WatchdogSubscription(path, emit, self._join_timeout)


def create_watch_source(config: WatchConfig) -> WatchSource:
    """Build the source selected by ``watch.backend``."""
    if config.backend is WatchBackend.WATCHDOG:
        return WatchdogWatchSource()
    return PollingWatchSource(poll_interval=config.poll_interval)
