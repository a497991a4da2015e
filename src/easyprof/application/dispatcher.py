"""Mode dispatcher: strategy table keyed by ProfileMode.

Two-phase per session:
    handle = dispatcher.start(mode, sink, config)
    ...
    dispatcher.stop(mode, sink, config, handle)

Write failures surface as FlushError, chained to the OSError.
"""

from __future__ import annotations

from operator import attrgetter
from typing import TYPE_CHECKING, BinaryIO

from easyprof.application.strategies import (
    ContinuousCapture,
    ExternalSampler,
    RateToggle,
    SnapshotOnly,
)
from easyprof.domain.exceptions import EasyProfError, FlushError
from easyprof.domain.model.mode import STRATEGY_BY_MODE, ProfileMode
from easyprof.infrastructure import runtime
from easyprof.infrastructure.cpu import CpuCapture
from easyprof.infrastructure.logging import get_logger
from easyprof.infrastructure.trace import ExecutionTrace

if TYPE_CHECKING:
    from collections.abc import Mapping

    from easyprof.application.strategies import StopHandle, Strategy
    from easyprof.domain.model.configuration import ProfilerConfig

log = get_logger(__name__)


def default_strategies() -> dict[ProfileMode, Strategy]:
    """Strategy table covering every ProfileMode."""
    return {
        ProfileMode.CPU: ContinuousCapture(CpuCapture.start),
        ProfileMode.TRACE: ContinuousCapture(ExecutionTrace.start),
        ProfileMode.MUTEX: RateToggle(
            runtime.mutex_profile_fraction,
            attrgetter("mutex_profile_fraction"),
            "mutex",
        ),
        ProfileMode.BLOCK: RateToggle(
            runtime.block_profile_rate,
            attrgetter("block_profile_rate"),
            "block",
        ),
        ProfileMode.HEAP: SnapshotOnly("heap"),
        ProfileMode.ALLOCS: SnapshotOnly("allocs"),
        ProfileMode.THREAD_CREATE: SnapshotOnly("thread_create"),
        ProfileMode.GOROUTINE: SnapshotOnly("goroutine"),
        ProfileMode.SAMPLING_PROFILER: ExternalSampler(),
    }


class ModeDispatcher:
    """Routes start/stop to the strategy of a mode.

    Stateless between calls: per-session state travels in the stop handle.
    """

    def __init__(self, strategies: Mapping[ProfileMode, Strategy] | None = None) -> None:
        """Initialize.

        Args:
            strategies: Strategy table. None = default_strategies().

        Raises:
            ValueError: Table does not cover every ProfileMode.
        """
        table = dict(strategies) if strategies is not None else default_strategies()
        missing = set(ProfileMode) - table.keys()
        if missing:
            names = ", ".join(sorted(m.value for m in missing))
            raise ValueError(f"strategy table missing modes: {names}")
        self._strategies = table

    def strategy_for(self, mode: ProfileMode) -> Strategy:
        """Strategy registered for mode."""
        return self._strategies[mode]

    def start(self, mode: ProfileMode, sink: BinaryIO, config: ProfilerConfig) -> StopHandle:
        """Arm instrumentation for mode.

        Raises:
            AlreadyActiveError: Exclusive capture already running.
            FlushError: Writing the stream header failed.
        """
        try:
            handle = self._strategies[mode].start(config, sink)
        except OSError as err:
            if isinstance(err, EasyProfError):
                raise
            raise FlushError(mode.value, err.strerror or str(err)) from err
        log.debug("%s instrumentation started (%s)", mode.value, STRATEGY_BY_MODE[mode].name.lower())
        return handle

    def stop(
        self,
        mode: ProfileMode,
        sink: BinaryIO,
        config: ProfilerConfig,
        handle: StopHandle,
    ) -> None:
        """Halt instrumentation and write collected data.

        Raises:
            FlushError: Serializing or flushing into the sink failed.
        """
        try:
            self._strategies[mode].stop(config, sink, handle)
            sink.flush()
        except OSError as err:
            if isinstance(err, EasyProfError):
                raise
            raise FlushError(mode.value, err.strerror or str(err)) from err
        log.debug("%s instrumentation stopped", mode.value)
