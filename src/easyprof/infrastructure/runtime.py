"""Process-wide contention profiling state.

Two global settings control event capture by the instrumented primitives
in easyprof.infrastructure.sync (exported as easyprof.sync):

- mutex profile fraction: on average 1 of N contended lock acquisitions
  is recorded. 0 = off.
- block profile rate: one sample per N nanoseconds spent blocked. Events
  blocking at least N ns are always recorded. 0 = off.

Settings are shared by every session in the process. ProcessSetting hands out
leases: the newest lease's value is in force, and releasing the last lease
resets the setting to zero. Recorded events accumulate for the lifetime of
the process and are read with snapshot().
"""

from __future__ import annotations

import random
import sys
import threading
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Final

from easyprof.domain.model.profile import Frame, Profile, Sample, SampleType

if TYPE_CHECKING:
    from types import FrameType

MAX_STACK_DEPTH: Final = 64

CONTENTION_SAMPLE_TYPES: Final = (
    SampleType("contentions", "count"),
    SampleType("delay", "nanoseconds"),
)


class ProcessSetting:
    """Reference-counted process-wide integer setting.

    Thread-safe. Lifecycle:
        lease = setting.acquire(10)  # value is now 10
        ...
        setting.release(lease)       # last lease out → value 0
    """

    def __init__(self, name: str) -> None:
        """Initialize with value 0 and no leases."""
        self.name = name
        self._lock = threading.Lock()
        self._value = 0
        self._leases: set[int] = set()
        self._next_lease = 0

    @property
    def value(self) -> int:
        """Current value. Read without locking (single int load)."""
        return self._value

    @property
    def lease_count(self) -> int:
        """Number of outstanding leases."""
        with self._lock:
            return len(self._leases)

    def acquire(self, value: int) -> int:
        """Set value and take a lease.

        Args:
            value: New value, must be positive.

        Returns:
            Lease token for release().
        """
        if value <= 0:
            raise ValueError(f"{self.name} must be > 0, got {value}")
        with self._lock:
            self._next_lease += 1
            lease = self._next_lease
            self._leases.add(lease)
            self._value = value
            return lease

    def release(self, lease: int) -> None:
        """Return a lease. Resets value to 0 when no leases remain.

        Raises:
            KeyError: Unknown or already released lease.
        """
        with self._lock:
            self._leases.remove(lease)
            if not self._leases:
                self._value = 0


@dataclass(slots=True)
class _Bucket:
    count: int = 0
    delay_ns: int = 0


@dataclass(slots=True)
class ContentionRecorder:
    """Accumulates (count, delay) per stack. Thread-safe."""

    name: str
    _buckets: dict[tuple[Frame, ...], _Bucket] = field(default_factory=dict)
    _lock: threading.Lock = field(default_factory=threading.Lock)

    def add(self, stack: tuple[Frame, ...], delay_ns: int) -> None:
        """Record one event."""
        with self._lock:
            bucket = self._buckets.get(stack)
            if bucket is None:
                bucket = self._buckets[stack] = _Bucket()
            bucket.count += 1
            bucket.delay_ns += delay_ns

    def snapshot(self, period: int = 0) -> Profile:
        """Immutable copy of everything recorded so far."""
        with self._lock:
            samples = tuple(
                Sample(stack=stack, values=(b.count, b.delay_ns))
                for stack, b in self._buckets.items()
            )
        return Profile(
            name=self.name,
            sample_types=CONTENTION_SAMPLE_TYPES,
            samples=samples,
            time_ns=time.time_ns(),
            period=period,
        )

    def clear(self) -> None:
        """Drop all records."""
        with self._lock:
            self._buckets.clear()


mutex_profile_fraction = ProcessSetting("mutex_profile_fraction")
block_profile_rate = ProcessSetting("block_profile_rate")

mutex_events = ContentionRecorder("mutex")
block_events = ContentionRecorder("block")


def capture_stack(skip: int = 0) -> tuple[Frame, ...]:
    """Stack of the calling thread, innermost first.

    Args:
        skip: Extra frames to drop above the caller of capture_stack.
    """
    return stack_from(sys._getframe(skip + 1))


def stack_from(frame: FrameType | None) -> tuple[Frame, ...]:
    """Walk f_back links from frame, innermost first, up to MAX_STACK_DEPTH."""
    frames: list[Frame] = []
    while frame is not None and len(frames) < MAX_STACK_DEPTH:
        frames.append(frame_of(frame))
        frame = frame.f_back
    return tuple(frames)


def frame_of(frame: FrameType) -> Frame:
    """Convert interpreter frame to domain Frame."""
    code = frame.f_code
    return Frame(function=code.co_qualname, filename=code.co_filename, line=frame.f_lineno or 0)


def record_mutex_contention(delay_ns: int, skip: int = 0) -> bool:
    """Record a contended lock acquisition, sampled by mutex fraction.

    Returns:
        True if the event was recorded.
    """
    fraction = mutex_profile_fraction.value
    if fraction <= 0:
        return False
    if fraction > 1 and random.randrange(fraction) != 0:
        return False
    mutex_events.add(capture_stack(skip + 1), delay_ns)
    return True


def record_blocking(delay_ns: int, skip: int = 0) -> bool:
    """Record a blocking wait, sampled by block rate.

    Events of at least rate ns are always kept, shorter ones with
    probability delay/rate.

    Returns:
        True if the event was recorded.
    """
    rate = block_profile_rate.value
    if rate <= 0 or delay_ns <= 0:
        return False
    if delay_ns < rate and random.random() * rate >= delay_ns:
        return False
    block_events.add(capture_stack(skip + 1), delay_ns)
    return True
