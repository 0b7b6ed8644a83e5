"""Shared fakes for filelifecycle tests."""

from __future__ import annotations

import asyncio
from pathlib import Path

from filelifecycle.watching.events import RawEvent
from filelifecycle.watching.probes import ProbeResult


async def settle(rounds: int = 50) -> None:
    """Let queued session work run to completion.

    The fakes never block on real I/O, so a bounded number of loop
    iterations is enough for every pending verification to finish.
    """
    for _ in range(rounds):
        await asyncio.sleep(0)


class FakeSubscription:
    def __init__(self, source: FakeWatchSource, path: Path, emit) -> None:
        self.source = source
        self.path = path
        self.emit = emit
        self.close_calls = 0

    @property
    def closed(self) -> bool:
        return self.close_calls > 0

    def close(self) -> None:
        self.close_calls += 1


class FakeWatchSource:
    """In-memory watch primitive; tests push raw events by hand.

    ``emit`` keeps delivering after close() so tests can simulate a
    notification racing with cancellation.
    """

    def __init__(self, missing: bool = False) -> None:
        self.missing = missing
        self.subscriptions: list[FakeSubscription] = []

    @property
    def subscription(self) -> FakeSubscription:
        return self.subscriptions[-1]

    def subscribe(self, path: Path, emit) -> FakeSubscription:
        if self.missing:
            raise FileNotFoundError(f"No such file: {path}")
        sub = FakeSubscription(self, path, emit)
        self.subscriptions.append(sub)
        return sub

    def change(self) -> None:
        self.subscription.emit(RawEvent.change())

    def rename(self, name_hint: str | None = None) -> None:
        self.subscription.emit(RawEvent.rename(name_hint))


class FakeProbe:
    """Scripted filesystem with probe-call counters.

    Attributes:
        files: Existing paths mapped to their modification time.
        errors: Paths whose probes fail with the given OSError.
        gate: When set, every probe waits on it before answering.
    """

    def __init__(self, files: dict[Path, float] | None = None) -> None:
        self.files: dict[Path, float] = dict(files or {})
        self.errors: dict[Path, OSError] = {}
        self.gate: asyncio.Event | None = None
        self.mtime_calls: list[Path] = []
        self.existence_calls: list[Path] = []

    @property
    def total_calls(self) -> int:
        return len(self.mtime_calls) + len(self.existence_calls)

    def touch(self, path: Path, mtime: float) -> None:
        self.files[path] = mtime

    def remove(self, path: Path) -> None:
        self.files.pop(path, None)

    def move(self, src: Path, dst: Path) -> None:
        self.files[dst] = self.files.pop(src)

    async def _answer(self, path: Path) -> ProbeResult:
        if self.gate is not None:
            await self.gate.wait()
        if path in self.errors:
            return ProbeResult.failed(self.errors[path])
        if path in self.files:
            return ProbeResult.found(self.files[path])
        return ProbeResult.not_found()

    async def read_modification_time(self, path: Path) -> ProbeResult:
        self.mtime_calls.append(path)
        return await self._answer(path)

    async def read_existence(self, path: Path) -> ProbeResult:
        self.existence_calls.append(path)
        return await self._answer(path)


class Recorder:
    """Collects lifecycle events delivered to handlers."""

    def __init__(self) -> None:
        self.modified: list = []
        self.moved: list = []
        self.removed: list = []
        self.errors: list[BaseException] = []

    @property
    def all(self) -> list:
        return self.modified + self.moved + self.removed

    def on_modified(self, event) -> None:
        self.modified.append(event)

    def on_moved(self, event) -> None:
        self.moved.append(event)

    def on_removed(self, event) -> None:
        self.removed.append(event)

    def on_error(self, error: BaseException) -> None:
        self.errors.append(error)
