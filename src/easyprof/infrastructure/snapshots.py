"""Point-in-time collectors for snapshot profiles.

Each collector reads live process state and returns an immutable Profile.
Lookup by mode name with collect(); unknown names raise KeyError (modes are
validated long before a snapshot is taken).
"""

from __future__ import annotations

import gc
import sys
import threading
import time
import tracemalloc
from collections import Counter
from typing import TYPE_CHECKING, Final

from easyprof.domain.model.profile import Frame, Profile, Sample, SampleType
from easyprof.infrastructure import runtime
from easyprof.infrastructure.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

log = get_logger(__name__)

HEAP_SAMPLE_TYPES: Final = (SampleType("inuse_objects", "count"), SampleType("inuse_space", "bytes"))
ALLOCS_SAMPLE_TYPES: Final = (SampleType("alloc_objects", "count"), SampleType("alloc_space", "bytes"))
COUNT_SAMPLE_TYPES: Final = (SampleType("threads", "count"),)


def heap_profile() -> Profile:
    """Live objects tracked by the garbage collector, grouped by type.

    Values: object count, total shallow size (sys.getsizeof).
    Frame per type: function = type qualname, filename = defining module.
    """
    counts: Counter[type] = Counter()
    sizes: Counter[type] = Counter()
    for obj in gc.get_objects():
        kind = type(obj)
        counts[kind] += 1
        sizes[kind] += sys.getsizeof(obj, 0)

    samples = tuple(
        Sample(
            stack=(Frame(function=kind.__qualname__, filename=kind.__module__ or "?"),),
            values=(count, sizes[kind]),
        )
        for kind, count in counts.items()
    )
    return Profile(
        name="heap",
        sample_types=HEAP_SAMPLE_TYPES,
        samples=samples,
        time_ns=time.time_ns(),
    )


def allocs_profile() -> Profile:
    """Memory blocks traced by tracemalloc, grouped by allocation traceback.

    Requires tracemalloc.start() (or PYTHONTRACEMALLOC) before the
    allocations of interest. Not tracing → empty profile and a warning.
    """
    samples: tuple[Sample, ...] = ()
    if tracemalloc.is_tracing():
        snapshot = tracemalloc.take_snapshot().filter_traces(
            (tracemalloc.Filter(inclusive=False, filename_pattern=tracemalloc.__file__),)
        )
        samples = tuple(
            Sample(
                # tracemalloc stores most recent frame last
                stack=tuple(
                    Frame(function="", filename=f.filename, line=f.lineno or 0)
                    for f in reversed(stat.traceback)
                ),
                values=(stat.count, stat.size),
            )
            for stat in snapshot.statistics("traceback")
        )
    else:
        log.warning("allocs profile is empty: tracemalloc is not tracing")

    return Profile(
        name="allocs",
        sample_types=ALLOCS_SAMPLE_TYPES,
        samples=samples,
        time_ns=time.time_ns(),
    )


def thread_create_profile() -> Profile:
    """Live threads grouped by entry function.

    Entry function is the Thread target, or the run() method for Thread
    subclasses and threads without a target (main thread, dummy threads).
    """
    counts: Counter[Frame] = Counter()
    for thread in threading.enumerate():
        counts[_entry_frame(thread)] += 1

    return Profile(
        name="thread_create",
        sample_types=COUNT_SAMPLE_TYPES,
        samples=tuple(Sample(stack=(frame,), values=(n,)) for frame, n in counts.items()),
        time_ns=time.time_ns(),
    )


def goroutine_profile() -> Profile:
    """Current stacks of all threads, identical stacks aggregated."""
    current = threading.get_ident()
    counts: Counter[tuple[Frame, ...]] = Counter()
    for ident, top in sys._current_frames().items():
        # drop this collector's own frame
        frame = top.f_back if ident == current else top
        counts[runtime.stack_from(frame)] += 1

    return Profile(
        name="goroutine",
        sample_types=COUNT_SAMPLE_TYPES,
        samples=tuple(Sample(stack=stack, values=(n,)) for stack, n in counts.items()),
        time_ns=time.time_ns(),
    )


def mutex_profile() -> Profile:
    """Contended acquisitions of easyprof.sync locks."""
    return runtime.mutex_events.snapshot()


def block_profile() -> Profile:
    """Blocking waits on easyprof.sync primitives."""
    return runtime.block_events.snapshot()


COLLECTORS: Final[Mapping[str, Callable[[], Profile]]] = {
    "heap": heap_profile,
    "allocs": allocs_profile,
    "thread_create": thread_create_profile,
    "goroutine": goroutine_profile,
    "mutex": mutex_profile,
    "block": block_profile,
}


def collect(name: str) -> Profile:
    """Take the named snapshot.

    Raises:
        KeyError: Unknown snapshot name.
    """
    return COLLECTORS[name]()


def _entry_frame(thread: threading.Thread) -> Frame:
    target = getattr(thread, "_target", None)
    if target is None:
        target = type(thread).run
    code = getattr(target, "__code__", None)
    if code is None:
        # builtins, partials, callable instances
        name = getattr(target, "__qualname__", type(target).__qualname__)
        return Frame(function=name, filename=getattr(target, "__module__", None) or "?")
    return Frame(function=code.co_qualname, filename=code.co_filename, line=code.co_firstlineno)
