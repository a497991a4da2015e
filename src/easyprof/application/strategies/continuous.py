"""Continuous capture: the capture writes into the sink for the whole session."""

from __future__ import annotations

from typing import TYPE_CHECKING, BinaryIO, Protocol

if TYPE_CHECKING:
    from collections.abc import Callable

    from easyprof.domain.model.configuration import ProfilerConfig


class Capture(Protocol):
    """Running capture owned by the session."""

    def stop(self) -> object:
        """Finalize and flush the stream into the sink."""
        ...


class ContinuousCapture:
    """Starts a process-exclusive capture bound to the sink.

    The capture object is the stop handle. A second start while one is
    running fails in the capture's start (AlreadyActiveError).
    """

    def __init__(self, start_capture: Callable[[BinaryIO], Capture]) -> None:
        """Initialize.

        Args:
            start_capture: Factory starting a capture on a sink,
                e.g. CpuCapture.start or ExecutionTrace.start.
        """
        self._start_capture = start_capture

    def start(self, config: ProfilerConfig, sink: BinaryIO) -> Capture:
        """Start streaming into sink.

        Raises:
            AlreadyActiveError: Capture of this kind already running.
        """
        return self._start_capture(sink)

    def stop(self, config: ProfilerConfig, sink: BinaryIO, handle: object) -> None:
        """Signal end of capture; the capture flushes into sink."""
        stop = getattr(handle, "stop", None)
        if not callable(stop):
            raise TypeError(f"continuous capture handle must have stop(), got {type(handle).__name__}")
        stop()
