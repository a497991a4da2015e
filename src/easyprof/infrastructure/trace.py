"""Execution trace: sys.monitoring (PEP 669) event stream.

Streams Python function entry/exit events from all threads into the sink
while the capture is active. Text line format, fixed:

    # easyprof trace v1 start_ns=<ns> pid=<pid>
    <ts_ns>\t<thread_id>\t<event>\t<qualname>\t<file>:<line>
    ...
    # end events=<n> duration_ns=<ns>

Events: call (PY_START), return (PY_RETURN), unwind (PY_UNWIND).
Timestamps are monotonic nanoseconds relative to start_ns.
Callbacks run with monitoring disabled for the tool, so writing to the
sink does not generate events.
"""

from __future__ import annotations

import os
import sys
import threading
import time
from typing import TYPE_CHECKING, Final

from easyprof.domain.exceptions import AlreadyActiveError
from easyprof.infrastructure.logging import get_logger

if TYPE_CHECKING:
    import types
    from typing import BinaryIO

log = get_logger(__name__)

# sys.monitoring tool IDs 3 and 4 are free for user tools
TRACE_TOOL_ID: Final = 4
TRACE_TOOL_NAME: Final = "easyprof-trace"

_EVENTS: Final = {
    "call": sys.monitoring.events.PY_START,
    "return": sys.monitoring.events.PY_RETURN,
    "unwind": sys.monitoring.events.PY_UNWIND,
}


class ExecutionTrace:
    """One execution trace writing into a sink.

    Thread-safe: events from all threads are serialized by a lock.

    Lifecycle:
        trace = ExecutionTrace.start(sink)
        # ... traced work ...
        trace.stop()
    """

    def __init__(self, sink: BinaryIO) -> None:
        self._sink = sink
        self._lock = threading.Lock()
        self._start_ns = 0
        self._events = 0
        self._write_error: OSError | None = None
        self._running = False

    @classmethod
    def start(cls, sink: BinaryIO) -> ExecutionTrace:
        """Register the monitoring tool and start streaming.

        Raises:
            AlreadyActiveError: Tool ID in use (trace already active).
            OSError: Header write failed.
        """
        try:
            sys.monitoring.use_tool_id(TRACE_TOOL_ID, TRACE_TOOL_NAME)
        except ValueError as err:
            raise AlreadyActiveError("trace") from err

        trace = cls(sink)
        trace._start_ns = time.monotonic_ns()
        try:
            sink.write(
                f"# easyprof trace v1 start_ns={time.time_ns()} pid={os.getpid()}\n".encode()
            )
        except OSError:
            sys.monitoring.free_tool_id(TRACE_TOOL_ID)
            raise

        events = 0
        for name, event in _EVENTS.items():
            sys.monitoring.register_callback(TRACE_TOOL_ID, event, trace._callback_for(name))
            events |= event
        trace._running = True
        sys.monitoring.set_events(TRACE_TOOL_ID, events)

        log.debug("trace capture started")
        return trace

    def stop(self) -> None:
        """Disable events, free the tool ID and write the trailer.

        Raises:
            RuntimeError: Not running.
            OSError: A write failed during capture or while writing the trailer.
        """
        if not self._running:
            raise RuntimeError("trace capture not running")

        sys.monitoring.set_events(TRACE_TOOL_ID, 0)
        for event in _EVENTS.values():
            sys.monitoring.register_callback(TRACE_TOOL_ID, event, None)
        sys.monitoring.free_tool_id(TRACE_TOOL_ID)

        with self._lock:
            self._running = False
            if self._write_error is not None:
                raise self._write_error
            duration = time.monotonic_ns() - self._start_ns
            self._sink.write(f"# end events={self._events} duration_ns={duration}\n".encode())

        log.debug("trace capture stopped, %d events", self._events)

    @property
    def event_count(self) -> int:
        """Events written so far."""
        return self._events

    def _callback_for(self, name: str) -> object:
        """Build the monitoring callback for one event kind.

        PY_START passes (code, offset); PY_RETURN and PY_UNWIND pass a third
        argument (return value / exception) which is ignored.
        """

        def callback(code: types.CodeType, offset: int, *_: object) -> None:
            self._write(name, code)

        return callback

    def _write(self, name: str, code: types.CodeType) -> None:
        ts = time.monotonic_ns() - self._start_ns
        line = (
            f"{ts}\t{threading.get_ident()}\t{name}\t"
            f"{code.co_qualname}\t{code.co_filename}:{code.co_firstlineno}\n"
        )
        with self._lock:
            if not self._running or self._write_error is not None:
                return
            try:
                self._sink.write(line.encode())
            except OSError as err:
                # surfaced from stop(); callbacks must not raise into traced code
                self._write_error = err
                return
            self._events += 1
