"""Tests for MoveResolver and the sibling-path heuristic."""

from __future__ import annotations

import errno
from pathlib import Path

import pytest

from filelifecycle.watching.errors import ProbeFailedError
from filelifecycle.watching.events import Moved, RawEvent, Removed, WatchTarget
from filelifecycle.watching.handlers import LifecycleHandlers
from filelifecycle.watching.resolver import MoveResolver, sibling_path
from tests.utils import FakeProbe

BOTH = LifecycleHandlers(on_moved=lambda event: None, on_removed=lambda event: None)


@pytest.fixture
def target(tmp_path: Path) -> WatchTarget:
    return WatchTarget(tmp_path / "a.txt")


@pytest.fixture
def probe(target: WatchTarget) -> FakeProbe:
    return FakeProbe({target.path: 1.0})


class TestSiblingPath:
    def test_joins_parent_and_hint(self, target: WatchTarget) -> None:
        assert sibling_path(target, "b.txt") == target.parent_dir / "b.txt"

    def test_target_fields(self, tmp_path: Path) -> None:
        target = WatchTarget(tmp_path / "dir" / "file.log")
        assert target.parent_dir == tmp_path / "dir"
        assert target.base_name == "file.log"


class TestRemovalCandidate:
    """Rename events without a hint or naming the file itself."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("hint", [None, "a.txt"])
    async def test_gone_file_is_removed(self, target, probe, hint) -> None:
        probe.remove(target.path)
        resolver = MoveResolver(target, probe, BOTH)

        assert await resolver.resolve(RawEvent.rename(hint)) == Removed()
        assert probe.existence_calls == [target.path]

    @pytest.mark.asyncio
    async def test_file_still_present_emits_nothing(self, target, probe) -> None:
        resolver = MoveResolver(target, probe, BOTH)
        assert await resolver.resolve(RawEvent.rename("a.txt")) is None

    @pytest.mark.asyncio
    async def test_probe_error_propagates(self, target, probe) -> None:
        probe.errors[target.path] = PermissionError(errno.EACCES, "denied")
        resolver = MoveResolver(target, probe, BOTH)

        with pytest.raises(ProbeFailedError):
            await resolver.resolve(RawEvent.rename())

    @pytest.mark.asyncio
    async def test_only_on_moved_skips_removal_probe(self, target, probe) -> None:
        probe.remove(target.path)
        resolver = MoveResolver(target, probe, LifecycleHandlers(on_moved=lambda event: None))

        assert await resolver.resolve(RawEvent.rename()) is None
        assert probe.total_calls == 0


class TestMoveCandidate:
    """Rename events naming a different file."""

    @pytest.mark.asyncio
    async def test_existing_sibling_is_a_move(self, target, probe) -> None:
        probe.move(target.path, target.parent_dir / "b.txt")
        resolver = MoveResolver(target, probe, BOTH)

        result = await resolver.resolve(RawEvent.rename("b.txt"))
        assert result == Moved(new_path=target.parent_dir / "b.txt")
        assert probe.existence_calls == [target.parent_dir / "b.txt"]

    @pytest.mark.asyncio
    async def test_missing_sibling_is_a_removal(self, target, probe) -> None:
        probe.remove(target.path)
        resolver = MoveResolver(target, probe, BOTH)

        assert await resolver.resolve(RawEvent.rename("b.txt")) == Removed()

    @pytest.mark.asyncio
    async def test_missing_sibling_without_on_removed(self, target, probe) -> None:
        probe.remove(target.path)
        resolver = MoveResolver(target, probe, LifecycleHandlers(on_moved=lambda event: None))

        assert await resolver.resolve(RawEvent.rename("b.txt")) is None

    @pytest.mark.asyncio
    async def test_only_on_removed_skips_sibling_probe(self, target, probe) -> None:
        probe.remove(target.path)
        resolver = MoveResolver(target, probe, LifecycleHandlers(on_removed=lambda event: None))

        assert await resolver.resolve(RawEvent.rename("b.txt")) is None
        assert probe.total_calls == 0

    @pytest.mark.asyncio
    async def test_move_into_subdirectory_looks_like_removal(self, target, probe) -> None:
        """Bare-name hint for sub/b.txt: the heuristic cannot find it."""
        probe.move(target.path, target.parent_dir / "sub" / "b.txt")
        resolver = MoveResolver(target, probe, BOTH)

        assert await resolver.resolve(RawEvent.rename("b.txt")) == Removed()

    @pytest.mark.asyncio
    async def test_sibling_probe_error_propagates(self, target, probe) -> None:
        sibling = target.parent_dir / "b.txt"
        probe.errors[sibling] = OSError(errno.EIO, "I/O error")
        resolver = MoveResolver(target, probe, BOTH)

        with pytest.raises(ProbeFailedError) as exc_info:
            await resolver.resolve(RawEvent.rename("b.txt"))
        assert exc_info.value.path == sibling


class TestNoHandlers:
    @pytest.mark.asyncio
    async def test_no_rename_handlers_means_no_probe(self, target, probe) -> None:
        resolver = MoveResolver(target, probe, LifecycleHandlers(on_modified=lambda event: None))

        assert resolver.enabled is False
        assert await resolver.resolve(RawEvent.rename("b.txt")) is None
        assert await resolver.resolve(RawEvent.rename()) is None
        assert probe.total_calls == 0
