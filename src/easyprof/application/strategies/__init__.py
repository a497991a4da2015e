"""Collection strategies, one start/stop pair each.

- ContinuousCapture: cpu, trace
- RateToggle: mutex, block
- SnapshotOnly: heap, allocs, thread_create, goroutine
- ExternalSampler: sampling_profiler
"""

from easyprof.application.strategies.base import StopHandle, Strategy, write_profile
from easyprof.application.strategies.continuous import Capture, ContinuousCapture
from easyprof.application.strategies.sampler import ExternalSampler
from easyprof.application.strategies.snapshot import SnapshotOnly
from easyprof.application.strategies.toggle import RateToggle

__all__ = [
    "Capture",
    "ContinuousCapture",
    "ExternalSampler",
    "RateToggle",
    "SnapshotOnly",
    "StopHandle",
    "Strategy",
    "write_profile",
]
