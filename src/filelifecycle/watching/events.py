"""Event models for a single-file watch.

Raw events come from the watch backend and are ambiguous; lifecycle events are
what handlers receive after verification against the filesystem.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class RawEventKind(Enum):
    """Coarse classification reported by the watch primitive."""

    CONTENT_CHANGE = "change"
    RENAME = "rename"  # Covers both moves and deletes


@dataclass(frozen=True, slots=True)
class RawEvent:
    """An unverified notification for the watched path.

    Attributes:
        kind: Content change or rename-class.
        name_hint: For RENAME, the new bare filename if the platform reported
            one. It may equal the watched file's own name and may omit any
            subdirectory the file moved into.
    """

    kind: RawEventKind
    name_hint: str | None = None

    @classmethod
    def change(cls) -> RawEvent:
        return cls(RawEventKind.CONTENT_CHANGE)

    @classmethod
    def rename(cls, name_hint: str | None = None) -> RawEvent:
        return cls(RawEventKind.RENAME, name_hint or None)


@dataclass(frozen=True, slots=True)
class WatchTarget:
    """The watched path with its parent directory and base name precomputed."""

    path: Path
    parent_dir: Path = field(init=False)
    base_name: str = field(init=False)

    def __post_init__(self) -> None:
        resolved = Path(os.path.abspath(self.path))
        object.__setattr__(self, "path", resolved)
        object.__setattr__(self, "parent_dir", resolved.parent)
        object.__setattr__(self, "base_name", resolved.name)


@dataclass(frozen=True, slots=True)
class Modified:
    """The file's content changed; carries the new modification time."""

    modification_time: float


@dataclass(frozen=True, slots=True)
class Moved:
    """The file was relocated to ``new_path``."""

    new_path: Path


@dataclass(frozen=True, slots=True)
class Removed:
    """The file no longer exists at the watched path."""


LifecycleEvent = Modified | Moved | Removed
