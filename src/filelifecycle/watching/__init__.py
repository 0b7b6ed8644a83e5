"""Single-file lifecycle watching.

Turns the noisy change/rename notifications of a file-watch primitive into
verified modified, moved, and removed events.
"""

from filelifecycle.watching.errors import FileVanishedError, ProbeFailedError, WatchError
from filelifecycle.watching.events import (
    LifecycleEvent,
    Modified,
    Moved,
    RawEvent,
    RawEventKind,
    Removed,
    WatchTarget,
)
from filelifecycle.watching.handlers import LifecycleHandlers
from filelifecycle.watching.probes import FileProbe, OSFileProbe, ProbeResult, ProbeStatus
from filelifecycle.watching.session import (
    SessionState,
    WatchSession,
    open_watch,
    register_file_lifecycle,
)
from filelifecycle.watching.sources import (
    PollingWatchSource,
    Subscription,
    WatchdogWatchSource,
    WatchSource,
    create_watch_source,
)

__all__ = [
    "FileProbe",
    "FileVanishedError",
    "LifecycleEvent",
    "LifecycleHandlers",
    "Modified",
    "Moved",
    "OSFileProbe",
    "PollingWatchSource",
    "ProbeFailedError",
    "ProbeResult",
    "ProbeStatus",
    "RawEvent",
    "RawEventKind",
    "Removed",
    "SessionState",
    "Subscription",
    "WatchError",
    "WatchSession",
    "WatchSource",
    "WatchTarget",
    "WatchdogWatchSource",
    "create_watch_source",
    "open_watch",
    "register_file_lifecycle",
]
