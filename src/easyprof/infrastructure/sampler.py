"""Wall-clock sampling profiler.

A background thread periodically records the stacks of all other threads,
whether running or waiting (on-CPU and off-CPU time alike). Samples are
buffered in memory and written to the sink when the sampler is stopped.

The collection loop runs inside a single-worker executor; its Future is the
completion result. stop() sets the stop event and joins the future, so any
error from the loop or from the final write surfaces as a return value of
the future instead of disappearing with the thread.
"""

from __future__ import annotations

import sys
import threading
import time
from collections import Counter
from concurrent.futures import Future, ThreadPoolExecutor
from typing import TYPE_CHECKING, Final

from easyprof.domain.model.mode import SamplerFormat
from easyprof.domain.model.profile import Frame, Profile, Sample, SampleType
from easyprof.infrastructure import encoding, runtime
from easyprof.infrastructure.logging import get_logger

if TYPE_CHECKING:
    from typing import BinaryIO

log = get_logger(__name__)

SAMPLER_THREAD_NAME: Final = "easyprof-sampler"


class WallClockSampler:
    """Background stack sampler writing into a sink at stop.

    Lifecycle:
        sampler = WallClockSampler.start(sink, hz=99, fmt=SamplerFormat.BINARY)
        # ... profiled work ...
        sampler.stop()  # raises whatever the loop or the flush raised
    """

    def __init__(self, sink: BinaryIO, hz: int, fmt: SamplerFormat) -> None:
        """Initialize without starting.

        Args:
            sink: Destination, written once at stop.
            hz: Samples per second, > 0.
            fmt: Output encoding.
        """
        if hz <= 0:
            raise ValueError(f"hz must be > 0, got {hz}")
        self._sink = sink
        self._interval = 1.0 / hz
        self._interval_ns = 1_000_000_000 // hz
        self._format = fmt
        self._stop_event = threading.Event()
        self._counts: Counter[tuple[Frame, ...]] = Counter()
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix=SAMPLER_THREAD_NAME)
        self._future: Future[int] | None = None

    @classmethod
    def start(cls, sink: BinaryIO, hz: int, fmt: SamplerFormat) -> WallClockSampler:
        """Create and start a sampler."""
        sampler = cls(sink, hz, fmt)
        sampler._future = sampler._executor.submit(sampler._run)
        log.debug("sampler started at %d Hz", hz)
        return sampler

    @property
    def is_running(self) -> bool:
        """Loop started and not finished."""
        return self._future is not None and not self._future.done()

    def stop(self) -> int:
        """Stop sampling, flush samples into the sink.

        Returns:
            Number of stack samples taken.

        Raises:
            RuntimeError: Not started.
            OSError: Flush failed.
        """
        if self._future is None:
            raise RuntimeError("sampler not started")
        self._stop_event.set()
        try:
            taken = self._future.result()
        finally:
            self._executor.shutdown(wait=True)
        log.debug("sampler stopped, %d samples", taken)
        return taken

    def _run(self) -> int:
        """Collection loop then flush. Runs in the executor thread."""
        own = threading.get_ident()
        start_ns = time.time_ns()
        started = time.monotonic_ns()
        taken = 0
        while not self._stop_event.wait(self._interval):
            for ident, top in sys._current_frames().items():
                if ident == own:
                    continue
                self._counts[runtime.stack_from(top)] += 1
                taken += 1

        profile = Profile(
            name="sampling_profiler",
            sample_types=(SampleType("samples", "count"), SampleType("time", "nanoseconds")),
            samples=tuple(
                Sample(stack=stack, values=(n, n * self._interval_ns))
                for stack, n in self._counts.items()
            ),
            time_ns=start_ns,
            duration_ns=time.monotonic_ns() - started,
            period=self._interval_ns,
        )
        match self._format:
            case SamplerFormat.FOLDED:
                encoding.write_folded(profile, self._sink)
            case SamplerFormat.BINARY:
                encoding.write_binary(profile, self._sink)
        return taken

