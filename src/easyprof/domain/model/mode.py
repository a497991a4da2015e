"""Profile modes, collection strategies and sampler output formats."""

from __future__ import annotations

from enum import Enum, StrEnum, auto
from types import MappingProxyType
from typing import Final


class ProfileMode(StrEnum):
    """Kind of profiling data captured by a session.

    Closed set. Value is used verbatim in the artifact file name.
    """

    CPU = "cpu"
    TRACE = "trace"
    HEAP = "heap"
    ALLOCS = "allocs"
    MUTEX = "mutex"
    BLOCK = "block"
    THREAD_CREATE = "thread_create"
    GOROUTINE = "goroutine"
    SAMPLING_PROFILER = "sampling_profiler"


class CollectionStrategy(Enum):
    """How a mode collects data between start and stop."""

    CONTINUOUS = auto()  # writer owns the stream
    RATE_TOGGLE = auto()  # process-wide rate on, snapshot at stop
    SNAPSHOT = auto()  # no start action, snapshot at stop
    EXTERNAL_SAMPLER = auto()  # background sampler thread


class SamplerFormat(StrEnum):
    """Output encoding of the sampling profiler."""

    BINARY = "binary"
    FOLDED = "folded"


# Alternate spellings accepted by the resolver
MODE_ALIASES: Final = MappingProxyType(
    {
        "threadcreate": ProfileMode.THREAD_CREATE,
        "fgprof": ProfileMode.SAMPLING_PROFILER,
    }
)

STRATEGY_BY_MODE: Final = MappingProxyType(
    {
        ProfileMode.CPU: CollectionStrategy.CONTINUOUS,
        ProfileMode.TRACE: CollectionStrategy.CONTINUOUS,
        ProfileMode.MUTEX: CollectionStrategy.RATE_TOGGLE,
        ProfileMode.BLOCK: CollectionStrategy.RATE_TOGGLE,
        ProfileMode.HEAP: CollectionStrategy.SNAPSHOT,
        ProfileMode.ALLOCS: CollectionStrategy.SNAPSHOT,
        ProfileMode.THREAD_CREATE: CollectionStrategy.SNAPSHOT,
        ProfileMode.GOROUTINE: CollectionStrategy.SNAPSHOT,
        ProfileMode.SAMPLING_PROFILER: CollectionStrategy.EXTERNAL_SAMPLER,
    }
)
