"""Caller-supplied lifecycle handlers."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from filelifecycle.watching.events import LifecycleEvent, Modified, Moved, Removed

# Handlers may be plain functions or coroutine functions
Handler = Callable[[Any], Awaitable[None] | None]


@dataclass(frozen=True)
class LifecycleHandlers:
    """Optional callbacks, one per lifecycle class.

    A missing handler switches off verification for its class: the session
    makes no filesystem probe whose only purpose would be to feed it.

    Attributes:
        on_modified: Receives Modified after a confirmed content change.
        on_moved: Receives Moved when the file was found under a new name.
        on_removed: Receives Removed when the file is confirmed gone.
        on_error: Receives the exception that closed the session.
    """

    on_modified: Callable[[Modified], Awaitable[None] | None] | None = None
    on_moved: Callable[[Moved], Awaitable[None] | None] | None = None
    on_removed: Callable[[Removed], Awaitable[None] | None] | None = None
    on_error: Callable[[BaseException], Awaitable[None] | None] | None = None

    @property
    def wants_modifications(self) -> bool:
        return self.on_modified is not None

    @property
    def wants_renames(self) -> bool:
        return self.on_moved is not None or self.on_removed is not None

    def handler_for(self, event: LifecycleEvent) -> Handler | None:
        """Return the handler registered for ``event``'s class, if any."""
        if isinstance(event, Modified):
            return self.on_modified
        if isinstance(event, Moved):
            return self.on_moved
        return self.on_removed
