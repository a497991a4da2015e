"""Tests for infrastructure/runtime.py."""

import threading

import pytest

from easyprof.infrastructure import runtime
from easyprof.infrastructure.runtime import ContentionRecorder, ProcessSetting
from tests.factories import make_frame


class TestProcessSetting:
    """Reference-counted process-wide setting."""

    def test_starts_at_zero(self) -> None:
        setting = ProcessSetting("rate")
        assert setting.value == 0
        assert setting.lease_count == 0

    def test_acquire_sets_value(self) -> None:
        setting = ProcessSetting("rate")
        setting.acquire(5)
        assert setting.value == 5

    def test_last_release_resets(self) -> None:
        setting = ProcessSetting("rate")
        first = setting.acquire(5)
        second = setting.acquire(7)
        setting.release(first)
        assert setting.value == 7
        setting.release(second)
        assert setting.value == 0
        assert setting.lease_count == 0

    def test_newest_lease_wins(self) -> None:
        setting = ProcessSetting("rate")
        setting.acquire(5)
        setting.acquire(3)
        assert setting.value == 3

    def test_double_release(self) -> None:
        setting = ProcessSetting("rate")
        lease = setting.acquire(1)
        setting.release(lease)
        with pytest.raises(KeyError):
            setting.release(lease)

    def test_non_positive_acquire(self) -> None:
        with pytest.raises(ValueError, match="rate"):
            ProcessSetting("rate").acquire(0)

    def test_value_changes_only_through_leases(self) -> None:
        setting = ProcessSetting("rate")
        lease = setting.acquire(4)
        with pytest.raises(AttributeError):
            setting.value = 0  # type: ignore[misc]
        assert not hasattr(setting, "set")
        assert setting.value == 4
        setting.release(lease)
        assert setting.value == 0

    def test_concurrent_leases(self) -> None:
        setting = ProcessSetting("rate")

        def cycle() -> None:
            for _ in range(200):
                setting.release(setting.acquire(2))

        threads = [threading.Thread(target=cycle) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert setting.value == 0
        assert setting.lease_count == 0


class TestContentionRecorder:
    """Tests for ContentionRecorder."""

    def test_aggregates_per_stack(self) -> None:
        recorder = ContentionRecorder("mutex")
        stack = (make_frame("wait"), make_frame("main"))
        recorder.add(stack, 100)
        recorder.add(stack, 50)
        profile = recorder.snapshot()
        assert profile.name == "mutex"
        assert len(profile.samples) == 1
        assert profile.samples[0].values == (2, 150)

    def test_snapshot_is_copy(self) -> None:
        recorder = ContentionRecorder("block")
        recorder.add((make_frame(),), 10)
        profile = recorder.snapshot()
        recorder.add((make_frame(),), 10)
        assert profile.total() == 1

    def test_clear(self) -> None:
        recorder = ContentionRecorder("block")
        recorder.add((make_frame(),), 10)
        recorder.clear()
        assert recorder.snapshot().samples == ()


class TestStacks:
    """Tests for capture_stack()."""

    def test_innermost_first(self) -> None:
        def inner() -> tuple:
            return runtime.capture_stack()

        stack = inner()
        assert stack[0].function.endswith("inner")
        assert stack[1].function.endswith("test_innermost_first")

    def test_skip(self) -> None:
        def inner() -> tuple:
            return runtime.capture_stack(skip=1)

        assert inner()[0].function.endswith("test_skip")

    def test_depth_bounded(self) -> None:
        def recurse(n: int) -> tuple:
            return recurse(n - 1) if n else runtime.capture_stack()

        assert len(recurse(runtime.MAX_STACK_DEPTH + 10)) == runtime.MAX_STACK_DEPTH


class TestRecording:
    """Tests for record_mutex_contention() and record_blocking()."""

    def test_mutex_off(self) -> None:
        assert runtime.record_mutex_contention(1000) is False
        assert runtime.mutex_events.snapshot().samples == ()

    def test_mutex_fraction_one_records_all(self) -> None:
        lease = runtime.mutex_profile_fraction.acquire(1)
        try:
            assert runtime.record_mutex_contention(1000) is True
        finally:
            runtime.mutex_profile_fraction.release(lease)
        assert runtime.mutex_events.snapshot().total(1) == 1000

    def test_block_off(self) -> None:
        assert runtime.record_blocking(10**9) is False

    def test_block_long_wait_always_recorded(self) -> None:
        lease = runtime.block_profile_rate.acquire(100)
        try:
            assert runtime.record_blocking(1000) is True
        finally:
            runtime.block_profile_rate.release(lease)

    def test_block_zero_delay_ignored(self) -> None:
        lease = runtime.block_profile_rate.acquire(1)
        try:
            assert runtime.record_blocking(0) is False
        finally:
            runtime.block_profile_rate.release(lease)
