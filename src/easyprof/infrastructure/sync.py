"""Instrumented synchronization primitives.

Drop-in replacements for threading.Lock, RLock, Condition and Event that
report contention and blocking to easyprof.infrastructure.runtime. Only
primitives created from this module are observed by the mutex and block
profiles.

Recording happens only on the slow path: an uncontended acquire costs one
extra non-blocking attempt.
"""

from __future__ import annotations

import _thread
import threading
import time

from easyprof.infrastructure import runtime


def _record(delay_ns: int, *, contended_lock: bool) -> None:
    # skip: _record and the primitive method itself
    if contended_lock:
        runtime.record_mutex_contention(delay_ns, skip=2)
    runtime.record_blocking(delay_ns, skip=2)


def _check_acquire_args(blocking: bool, timeout: float) -> None:
    # same argument errors as _thread.lock.acquire, raised before the fast path
    if not blocking and timeout != -1:
        raise ValueError("can't specify a timeout for a non-blocking call")
    if timeout < 0 and timeout != -1:
        raise ValueError("timeout value must be a non-negative number")


class Lock:
    """Non-reentrant lock reporting contention."""

    __slots__ = ("_lock",)

    def __init__(self) -> None:
        self._lock = _thread.allocate_lock()

    def acquire(self, blocking: bool = True, timeout: float = -1) -> bool:
        """Acquire like threading.Lock.acquire."""
        _check_acquire_args(blocking, timeout)
        if self._lock.acquire(False):
            return True
        if not blocking:
            return False
        start = time.monotonic_ns()
        acquired = self._lock.acquire(True, timeout)
        _record(time.monotonic_ns() - start, contended_lock=True)
        return acquired

    def release(self) -> None:
        """Release like threading.Lock.release."""
        self._lock.release()

    def locked(self) -> bool:
        """Return True if held."""
        return self._lock.locked()

    __enter__ = acquire

    def __exit__(self, *exc_info: object) -> None:
        self._lock.release()


class RLock:
    """Reentrant lock reporting contention.

    Provides the private hooks threading.Condition uses to fully release
    and restore a reentrant lock around wait().
    """

    __slots__ = ("_lock",)

    def __init__(self) -> None:
        self._lock = threading.RLock()

    def acquire(self, blocking: bool = True, timeout: float = -1) -> bool:
        """Acquire like threading.RLock.acquire."""
        _check_acquire_args(blocking, timeout)
        if self._lock.acquire(False):
            return True
        if not blocking:
            return False
        start = time.monotonic_ns()
        acquired = self._lock.acquire(True, timeout)
        _record(time.monotonic_ns() - start, contended_lock=True)
        return acquired

    def release(self) -> None:
        """Release like threading.RLock.release."""
        self._lock.release()

    __enter__ = acquire

    def __exit__(self, *exc_info: object) -> None:
        self._lock.release()

    def _is_owned(self) -> bool:
        return self._lock._is_owned()  # type: ignore[attr-defined]

    def _release_save(self) -> object:
        return self._lock._release_save()  # type: ignore[attr-defined]

    def _acquire_restore(self, state: object) -> None:
        self._lock._acquire_restore(state)  # type: ignore[attr-defined]


class Condition(threading.Condition):
    """Condition variable reporting time spent in wait().

    Default lock is an instrumented RLock.
    """

    def __init__(self, lock: Lock | RLock | None = None) -> None:
        super().__init__(lock if lock is not None else RLock())

    def wait(self, timeout: float | None = None) -> bool:
        """Wait like threading.Condition.wait."""
        start = time.monotonic_ns()
        notified = super().wait(timeout)
        _record(time.monotonic_ns() - start, contended_lock=False)
        return notified


class Event(threading.Event):
    """Event reporting time spent in wait()."""

    def wait(self, timeout: float | None = None) -> bool:
        """Wait like threading.Event.wait. Returns immediately if set."""
        if self.is_set():
            return True
        start = time.monotonic_ns()
        flag = super().wait(timeout)
        _record(time.monotonic_ns() - start, contended_lock=False)
        return flag
