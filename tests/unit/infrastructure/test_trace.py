"""Tests for infrastructure/trace.py."""

import io

import pytest

from easyprof.domain.exceptions import AlreadyActiveError
from easyprof.infrastructure.trace import ExecutionTrace


def traced_function() -> int:
    return 42


def failing_function() -> None:
    raise KeyError("boom")


class TestExecutionTrace:
    """Tests for ExecutionTrace lifecycle and stream format."""

    def test_header_and_trailer(self) -> None:
        sink = io.BytesIO()
        ExecutionTrace.start(sink).stop()
        lines = sink.getvalue().decode().splitlines()
        assert lines[0].startswith("# easyprof trace v1 start_ns=")
        assert lines[-1].startswith("# end events=")

    def test_records_call_and_return(self) -> None:
        sink = io.BytesIO()
        trace = ExecutionTrace.start(sink)
        traced_function()
        trace.stop()
        events = [line.split("\t") for line in sink.getvalue().decode().splitlines() if not line.startswith("#")]
        names = [(kind, qualname) for _, _, kind, qualname, _ in events]
        assert ("call", "traced_function") in names
        assert ("return", "traced_function") in names
        assert trace.event_count == len(events)

    def test_records_unwind(self) -> None:
        sink = io.BytesIO()
        trace = ExecutionTrace.start(sink)
        with pytest.raises(KeyError):
            failing_function()
        trace.stop()
        assert "\tunwind\tfailing_function\t" in sink.getvalue().decode()

    def test_exclusive(self) -> None:
        trace = ExecutionTrace.start(io.BytesIO())
        try:
            with pytest.raises(AlreadyActiveError) as exc_info:
                ExecutionTrace.start(io.BytesIO())
            assert exc_info.value.capture == "trace"
        finally:
            trace.stop()

    def test_restart_after_stop(self) -> None:
        ExecutionTrace.start(io.BytesIO()).stop()
        ExecutionTrace.start(io.BytesIO()).stop()

    def test_stop_twice(self) -> None:
        trace = ExecutionTrace.start(io.BytesIO())
        trace.stop()
        with pytest.raises(RuntimeError, match="not running"):
            trace.stop()

    def test_no_events_after_stop(self) -> None:
        sink = io.BytesIO()
        trace = ExecutionTrace.start(sink)
        trace.stop()
        size = len(sink.getvalue())
        traced_function()
        assert len(sink.getvalue()) == size
