"""Watch session for one file.

A WatchSession subscribes to a raw notification source, queues each raw
event, and verifies them one at a time so the baseline and the move/removal
decisions never interleave. Verified lifecycle events go to the caller's
handlers until the session is cancelled or fails.
"""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Awaitable, Callable
from enum import Enum
from pathlib import Path

from filelifecycle.config import Config, get_config
from filelifecycle.logging import TRACE, get_logger
from filelifecycle.watching.disambiguator import ModificationDisambiguator
from filelifecycle.watching.events import (
    LifecycleEvent,
    Modified,
    Moved,
    RawEvent,
    RawEventKind,
    Removed,
    WatchTarget,
)
from filelifecycle.watching.handlers import Handler, LifecycleHandlers
from filelifecycle.watching.probes import FileProbe, OSFileProbe
from filelifecycle.watching.resolver import MoveResolver
from filelifecycle.watching.sources import Subscription, WatchSource, create_watch_source
from filelifecycle.watching.tracker import TimestampTracker

log = get_logger("session")


class SessionState(Enum):
    """Session lifecycle: NEW -> ACTIVE -> CLOSED."""

    NEW = "new"
    ACTIVE = "active"
    CLOSED = "closed"


class WatchSession:
    """Lifecycle watch over a single file.

    Example:
        async def on_moved(event: Moved) -> None:
            print(f"now at {event.new_path}")

        async with WatchSession("/tmp/a.txt", LifecycleHandlers(on_moved=on_moved)):
            ...

    Only a running event loop can open a session. Handlers run on the loop,
    one at a time, in the order raw events arrived; a coroutine handler is
    awaited before the next raw event is verified.
    """

    def __init__(
        self,
        path: str | Path,
        handlers: LifecycleHandlers | None = None,
        *,
        source: WatchSource | None = None,
        probe: FileProbe | None = None,
        config: Config | None = None,
    ) -> None:
        """Initialize the session without subscribing.

        Args:
            path: File to watch; made absolute once here.
            handlers: Lifecycle callbacks. Missing ones disable their probes.
            source: Raw notification source. Defaults to the configured backend.
            probe: Filesystem probe. Defaults to OSFileProbe.
            config: Configuration. Defaults to the cached global config.
        """
        config = config or get_config()

        self.target = WatchTarget(Path(path))
        self.handlers = handlers or LifecycleHandlers()

        self._source = source or create_watch_source(config.watch)
        self._probe = probe or OSFileProbe()
        self._tracker = TimestampTracker(self.target, self._probe)
        self._modifications = ModificationDisambiguator(
            self.target,
            self._probe,
            self._tracker,
            self.handlers,
            not_found_policy=config.watch.modification_not_found,
        )
        self._moves = MoveResolver(self.target, self._probe, self.handlers)

        self._state = SessionState.NEW
        self._queue: asyncio.Queue[RawEvent] = asyncio.Queue()
        self._subscription: Subscription | None = None
        self._worker: asyncio.Task[None] | None = None
        self._closed = asyncio.Event()
        self.failure: BaseException | None = None

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_active(self) -> bool:
        return self._state is SessionState.ACTIVE

    @property
    def pending(self) -> int:
        """Raw events waiting for verification."""
        return self._queue.qsize()

    def open(self) -> WatchSession:
        """Subscribe to the source and start processing raw events.

        Raises:
            RuntimeError: If the session was already opened or there is no
                running event loop.
            FileNotFoundError: If the watched file does not exist.
        """
        if self._state is not SessionState.NEW:
            raise RuntimeError(f"WatchSession for {self.target.path} already opened")

        loop = asyncio.get_running_loop()
        if self._modifications.enabled:
            self._tracker.start()
        self._worker = loop.create_task(
            self._process_events(), name=f"filelifecycle-session:{self.target.path}"
        )
        self._state = SessionState.ACTIVE

        try:
            self._subscription = self._source.subscribe(self.target.path, self._on_raw_event)
        except BaseException:
            self._close()
            raise

        log.debug("Watching %s", self.target.path)
        return self

    def cancel(self) -> None:
        """Stop watching. No handler is called after this returns.

        Safe to call multiple times and from inside a handler.
        """
        if self._state is SessionState.CLOSED:
            return
        log.debug("Watch on %s cancelled", self.target.path)
        self._close()

    async def wait_closed(self) -> None:
        """Wait until the session closes.

        Raises:
            WatchError: The failure that closed the session, if any.
        """
        await self._closed.wait()
        if self.failure is not None:
            raise self.failure

    async def __aenter__(self) -> WatchSession:
        return self.open()

    async def __aexit__(self, *args: object) -> None:
        self.cancel()

    def _on_raw_event(self, event: RawEvent) -> None:
        """Classify a raw event and queue it if anything listens for it."""
        if self._state is not SessionState.ACTIVE:
            log.log(TRACE, "Ignoring %s for closed watch on %s", event.kind.value, self.target.path)
            return

        if event.kind is RawEventKind.CONTENT_CHANGE:
            wanted = self._modifications.enabled
        else:
            wanted = self._moves.enabled
        if not wanted:
            return

        self._queue.put_nowait(event)

    async def _resolve(self, event: RawEvent) -> LifecycleEvent | None:
        if event.kind is RawEventKind.CONTENT_CHANGE:
            return await self._modifications.check()
        return await self._moves.resolve(event)

    async def _process_events(self) -> None:
        """Verify queued raw events strictly one after another."""
        # A handler may cancel the session from inside this task
        while self._state is SessionState.ACTIVE:
            event = await self._queue.get()
            try:
                outcome = await self._resolve(event)
            except Exception as e:
                await self._fail(e)
                return
            finally:
                self._queue.task_done()

            if outcome is not None:
                await self._deliver(outcome)

    async def _deliver(self, event: LifecycleEvent) -> None:
        # Verification may have finished after cancel(); drop the result
        if self._state is not SessionState.ACTIVE:
            log.debug("Dropping %s for closed watch on %s", type(event).__name__, self.target.path)
            return

        handler = self.handlers.handler_for(event)
        if handler is None:
            return
        await _invoke(handler, event, what=type(event).__name__, path=self.target.path)

    async def _fail(self, error: BaseException) -> None:
        """Close the session because its invariants may no longer hold."""
        if self._state is SessionState.CLOSED:
            return
        log.error("Watch on %s failed: %s", self.target.path, error)
        self.failure = error
        self._close()

        if self.handlers.on_error is not None:
            await _invoke(self.handlers.on_error, error, what="error", path=self.target.path)

    def _close(self) -> None:
        self._state = SessionState.CLOSED
        if self._subscription is not None:
            self._subscription.close()
            self._subscription = None
        self._tracker.close()
        try:
            current = asyncio.current_task()
        except RuntimeError:
            current = None
        if self._worker is not None and self._worker is not current:
            self._worker.cancel()
        self._worker = None
        self._closed.set()


async def _invoke(
    handler: Handler,
    event: LifecycleEvent | BaseException,
    *,
    what: str,
    path: Path,
) -> None:
    try:
        result = handler(event)
        if inspect.isawaitable(result):
            await result
    except Exception as e:
        log.error("Error in %s handler for %s: %s", what, path, e)


def open_watch(
    path: str | Path,
    handlers: LifecycleHandlers | None = None,
    *,
    source: WatchSource | None = None,
    probe: FileProbe | None = None,
    config: Config | None = None,
) -> WatchSession:
    """Create and open a WatchSession."""
    return WatchSession(path, handlers, source=source, probe=probe, config=config).open()


def register_file_lifecycle(
    path: str | Path,
    *,
    on_modified: Callable[[Modified], Awaitable[None] | None] | None = None,
    on_moved: Callable[[Moved], Awaitable[None] | None] | None = None,
    on_removed: Callable[[Removed], Awaitable[None] | None] | None = None,
    on_error: Callable[[BaseException], Awaitable[None] | None] | None = None,
    source: WatchSource | None = None,
    probe: FileProbe | None = None,
    config: Config | None = None,
) -> Callable[[], None]:
    """Watch ``path`` and return a function that stops the watch.

    A probe failure ends the watch and is reported only through ``on_error``.
    Callers that want to await the failure instead should use ``open_watch``
    and ``await session.wait_closed()``, which re-raises it.

    Example:
        stop = register_file_lifecycle(
            "settings.yaml",
            on_modified=lambda e: reload(),
            on_removed=lambda e: print("settings.yaml deleted"),
        )
        ...
        stop()
    """
    handlers = LifecycleHandlers(
        on_modified=on_modified,
        on_moved=on_moved,
        on_removed=on_removed,
        on_error=on_error,
    )
    session = open_watch(path, handlers, source=source, probe=probe, config=config)
    return session.cancel
