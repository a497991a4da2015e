"""CPU capture: cProfile deterministic profiler, process-exclusive.

On stop the collected statistics are marshalled into the sink in the
format pstats.Stats loads (same as cProfile.Profile.dump_stats).
"""

from __future__ import annotations

import cProfile
import marshal
import threading
from typing import TYPE_CHECKING

from easyprof.domain.exceptions import AlreadyActiveError
from easyprof.infrastructure.logging import get_logger

if TYPE_CHECKING:
    from typing import BinaryIO

log = get_logger(__name__)

_active_lock = threading.Lock()
_active: CpuCapture | None = None


def is_active() -> bool:
    """Is a CPU capture running in this process."""
    return _active is not None


class CpuCapture:
    """One cProfile capture writing into a sink.

    Lifecycle:
        capture = CpuCapture.start(sink)
        # ... profiled work ...
        capture.stop()
    """

    def __init__(self, sink: BinaryIO) -> None:
        self._sink = sink
        self._profiler = cProfile.Profile()
        self._running = False

    @classmethod
    def start(cls, sink: BinaryIO) -> CpuCapture:
        """Start a CPU capture.

        Raises:
            AlreadyActiveError: Another CPU capture (or another profiling
                tool owning the interpreter profiler hook) is active.
        """
        global _active

        with _active_lock:
            if _active is not None:
                raise AlreadyActiveError("cpu")
            capture = cls(sink)
            try:
                capture._profiler.enable()
            except ValueError as err:
                # 3.12+: "Another profiling tool is already active"
                raise AlreadyActiveError("cpu") from err
            capture._running = True
            _active = capture

        log.debug("cpu capture started")
        return capture

    def stop(self) -> None:
        """Disable profiler and write statistics into the sink.

        Releases process exclusivity before writing, so a write failure
        does not block later captures.

        Raises:
            RuntimeError: Not running.
            OSError: Sink write failed.
        """
        global _active

        with _active_lock:
            if not self._running:
                raise RuntimeError("cpu capture not running")
            self._profiler.disable()
            self._running = False
            _active = None

        self._profiler.create_stats()
        marshal.dump(self._profiler.stats, self._sink)  # type: ignore[attr-defined]
        log.debug("cpu capture stopped, %d functions", len(self._profiler.stats))  # type: ignore[attr-defined]
