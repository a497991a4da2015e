"""Tests for application/strategies."""

import gzip
import io
from unittest.mock import MagicMock

import pytest

from easyprof.application.resolver import resolve_config
from easyprof.application.strategies import (
    ContinuousCapture,
    ExternalSampler,
    RateToggle,
    SnapshotOnly,
    write_profile,
)
from easyprof.infrastructure import runtime
from easyprof.infrastructure.encoding import GZIP_MAGIC
from easyprof.infrastructure.runtime import ProcessSetting
from easyprof.infrastructure.sampler import WallClockSampler
from tests.factories import make_config, make_frame, make_profile


class TestWriteProfile:
    """Tests for write_profile()."""

    def test_binary(self) -> None:
        sink = io.BytesIO()
        write_profile(make_profile(), sink, text=False)
        assert sink.getvalue().startswith(GZIP_MAGIC)

    def test_text(self) -> None:
        sink = io.BytesIO()
        write_profile(make_profile(), sink, text=True)
        assert sink.getvalue().startswith(b"heap profile: total ")


class TestContinuousCapture:
    """Tests for ContinuousCapture."""

    def test_start_passes_sink(self) -> None:
        capture = MagicMock(spec=["stop"])
        factory = MagicMock(return_value=capture)
        sink = io.BytesIO()
        strategy = ContinuousCapture(factory)
        assert strategy.start(resolve_config(make_config(mode="cpu")), sink) is capture
        factory.assert_called_once_with(sink)

    def test_stop_stops_capture(self) -> None:
        capture = MagicMock(spec=["stop"])
        ContinuousCapture(MagicMock()).stop(resolve_config(make_config()), io.BytesIO(), capture)
        capture.stop.assert_called_once_with()

    def test_stop_accepts_plain_handle(self) -> None:
        class Handle:
            stopped = 0

            def stop(self) -> None:
                self.stopped += 1

        handle = Handle()
        ContinuousCapture(MagicMock()).stop(resolve_config(make_config()), io.BytesIO(), handle)
        assert handle.stopped == 1

    def test_stop_not_callable(self) -> None:
        handle = MagicMock(spec=["stop"])
        handle.stop = "not callable"
        with pytest.raises(TypeError, match="stop"):
            ContinuousCapture(MagicMock()).stop(resolve_config(make_config()), io.BytesIO(), handle)

    def test_bad_handle(self) -> None:
        with pytest.raises(TypeError, match="stop"):
            ContinuousCapture(MagicMock()).stop(resolve_config(make_config()), io.BytesIO(), 42)


class TestRateToggle:
    """Tests for RateToggle."""

    def make(self, setting: ProcessSetting) -> RateToggle:
        return RateToggle(setting, lambda config: config.mutex_profile_fraction, "mutex")

    def test_start_enables_setting(self) -> None:
        setting = ProcessSetting("fraction")
        config = resolve_config(make_config(mode="mutex", mutex_profile_fraction=5))
        self.make(setting).start(config, io.BytesIO())
        assert setting.value == 5

    def test_stop_resets_and_writes_snapshot(self) -> None:
        setting = ProcessSetting("fraction")
        strategy = self.make(setting)
        config = resolve_config(make_config(mode="mutex", mutex_profile_fraction=5))
        sink = io.BytesIO()
        runtime.mutex_events.add((make_frame("contended"),), 1000)

        strategy.stop(config, sink, strategy.start(config, sink))

        assert setting.value == 0
        assert b"contended" in gzip.decompress(sink.getvalue())

    def test_text_rendering(self) -> None:
        setting = ProcessSetting("fraction")
        strategy = self.make(setting)
        config = resolve_config(make_config(mode="mutex", use_text_format=True))
        sink = io.BytesIO()
        strategy.stop(config, sink, strategy.start(config, sink))
        assert sink.getvalue().startswith(b"mutex profile: total 0")

    def test_reset_even_if_write_fails(self) -> None:
        setting = ProcessSetting("fraction")
        strategy = self.make(setting)
        config = resolve_config(make_config(mode="mutex"))
        sink = MagicMock()
        sink.write.side_effect = OSError(28, "No space left on device")
        with pytest.raises(OSError):
            strategy.stop(config, sink, strategy.start(config, sink))
        assert setting.value == 0

    def test_bad_handle(self) -> None:
        with pytest.raises(TypeError, match="lease"):
            self.make(ProcessSetting("x")).stop(resolve_config(make_config()), io.BytesIO(), None)


class TestSnapshotOnly:
    """Tests for SnapshotOnly."""

    def test_start_is_noop(self) -> None:
        sink = io.BytesIO()
        assert SnapshotOnly("heap").start(resolve_config(make_config()), sink) is None
        assert sink.getvalue() == b""

    def test_stop_writes_snapshot(self) -> None:
        sink = io.BytesIO()
        config = resolve_config(make_config(mode="goroutine", use_text_format=True))
        SnapshotOnly("goroutine").stop(config, sink, None)
        assert sink.getvalue().startswith(b"goroutine profile: total ")


class TestExternalSampler:
    """Tests for ExternalSampler."""

    def test_runs_sampler_for_session(self) -> None:
        sink = io.BytesIO()
        config = resolve_config(make_config(mode="sampling_profiler", sampling_hz=100))
        strategy = ExternalSampler()
        handle = strategy.start(config, sink)
        assert isinstance(handle, WallClockSampler)
        strategy.stop(config, sink, handle)
        assert sink.getvalue().startswith(GZIP_MAGIC)

    def test_bad_handle(self) -> None:
        with pytest.raises(TypeError, match="WallClockSampler"):
            ExternalSampler().stop(resolve_config(make_config()), io.BytesIO(), object())
