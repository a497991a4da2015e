"""Session lifecycle controller: Profiler.

Orchestrates resolve → open sink → start instrumentation → stop → close.

Contracts:
    - FAIL-FIRST: resolution and sink errors raise before any session exists
    - Exactly-once stop: second stop() raises AlreadyStoppedError
    - Sink never leaked: close runs in finally, even after FlushError
    - Disabled session: no sink, no dispatcher calls
"""

from __future__ import annotations

import asyncio
import contextlib
import threading
import time
from datetime import datetime
from typing import TYPE_CHECKING, BinaryIO, Self

from easyprof.application.dispatcher import ModeDispatcher
from easyprof.application.resolver import resolve_config
from easyprof.domain.exceptions import AlreadyStoppedError, EasyProfError, FlushError
from easyprof.domain.model.configuration import ProfilerConfig
from easyprof.domain.model.session import SessionReport, SessionState
from easyprof.infrastructure.logging import get_logger
from easyprof.infrastructure.sink import open_sink

if TYPE_CHECKING:
    from pathlib import Path
    from types import TracebackType

    from easyprof.application.strategies import StopHandle
    from easyprof.domain.model.mode import ProfileMode

log = get_logger(__name__)


class Profiler:
    """One profiling session, started on construction.

    Usage:
        profiler = Profiler(ProfilerConfig(mode="heap", output_dir="out"))
        do_work()
        report = profiler.stop()

        with Profiler(ProfilerConfig(mode="cpu")) as profiler:
            do_work()

    Thread-safe stop: concurrent stop() calls are serialized, exactly one
    performs the stop sequence, the others raise AlreadyStoppedError.
    """

    def __init__(
        self,
        config: ProfilerConfig | None = None,
        *,
        dispatcher: ModeDispatcher | None = None,
    ) -> None:
        """Resolve configuration and start the session.

        Args:
            config: Session configuration. None = defaults (cpu in ".").
            dispatcher: Mode dispatcher. None = default strategy table.

        Raises:
            InvalidModeError: Unrecognized mode.
            InvalidFormatError: Unrecognized sampler format.
            DirectoryCreationError: Output directory cannot be created.
            SinkOpenError: Artifact cannot be opened.
            AlreadyActiveError: Exclusive capture already running.
            FlushError: Stream header could not be written.
        """
        self._config = resolve_config(config or ProfilerConfig())
        self._mode = self._config.profile_mode
        self._dispatcher = dispatcher or ModeDispatcher()
        self._stop_lock = threading.Lock()
        self._sink: BinaryIO | None = None
        self._path: Path | None = None
        self._handle: StopHandle = None
        self._report: SessionReport | None = None
        self._started_at = datetime.now()
        self._started_ns = time.monotonic_ns()

        if self._config.disabled:
            log.info("profiler disabled, %s session is a no-op", self._mode.value)
            self._state = SessionState.ACTIVE
            return

        self._sink, self._path = open_sink(self._config, self._started_at)
        try:
            self._handle = self._dispatcher.start(self._mode, self._sink, self._config)
        except BaseException:
            # no partial session: drop the empty artifact
            self._sink.close()
            self._path.unlink(missing_ok=True)
            raise

        self._state = SessionState.ACTIVE
        log.info("%s profiling started, writing to %s", self._mode.value, self._path)

    @property
    def config(self) -> ProfilerConfig:
        """Resolved configuration."""
        return self._config

    @property
    def mode(self) -> ProfileMode:
        """Resolved profile mode."""
        return self._mode

    @property
    def path(self) -> Path | None:
        """Artifact path. None for disabled sessions."""
        return self._path

    @property
    def state(self) -> SessionState:
        """Current session state."""
        return self._state

    @property
    def is_active(self) -> bool:
        """Session started and not yet stopped."""
        return self._state is SessionState.ACTIVE

    @property
    def report(self) -> SessionReport | None:
        """Report of the stopped session. None while active."""
        return self._report

    def stop(self) -> SessionReport:
        """Stop instrumentation, flush captured data, close the sink.

        Returns:
            SessionReport for the finished session.

        Raises:
            AlreadyStoppedError: Session already stopped.
            FlushError: Captured data could not be written or the sink
                could not be closed. The sink is closed regardless.
        """
        with self._stop_lock:
            if self._state is SessionState.STOPPED:
                raise AlreadyStoppedError
            self._state = SessionState.STOPPED

            if self._sink is not None:
                self._stop_and_close(self._sink)

            self._report = self._build_report()

        log.info(
            "%s profiling stopped after %.3fs%s",
            self._mode.value,
            self._report.duration_s,
            f", {self._report.bytes_written} bytes in {self._path}" if self._path else "",
        )
        return self._report

    def wait(
        self,
        cancel: threading.Event | None = None,
        timeout: float | None = None,
    ) -> SessionReport:
        """Block until cancel is set or timeout elapses, then stop.

        Cancellation only ends the wait; stop then runs to completion.

        Args:
            cancel: Event ending the wait when set.
            timeout: Seconds to wait at most.

        Raises:
            ValueError: Neither cancel nor timeout given.
            AlreadyStoppedError: Session already stopped.
            FlushError: See stop().
        """
        if cancel is None and timeout is None:
            raise ValueError("wait() needs a cancel event or a timeout")
        if cancel is None:
            cancel = threading.Event()
        cancel.wait(timeout)
        return self.stop()

    async def wait_async(
        self,
        cancel: asyncio.Event | None = None,
        timeout: float | None = None,
    ) -> SessionReport:
        """Asyncio variant of wait(). Suspends the task, not the thread.

        Raises:
            ValueError: Neither cancel nor timeout given.
            AlreadyStoppedError: Session already stopped.
            FlushError: See stop().
        """
        if cancel is None and timeout is None:
            raise ValueError("wait_async() needs a cancel event or a timeout")
        if cancel is None:
            await asyncio.sleep(timeout or 0)
        else:
            with contextlib.suppress(TimeoutError):
                await asyncio.wait_for(cancel.wait(), timeout)
        return self.stop()

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if not self.is_active:
            return
        if exc is None:
            self.stop()
            return
        # the body's exception propagates; a stop failure is only logged
        try:
            self.stop()
        except EasyProfError as err:
            log.error("%s session stop failed while handling %s: %s", self._mode.value, type(exc).__name__, err)

    def __repr__(self) -> str:
        return f"Profiler(mode={self._mode.value!r}, state={self._state.name}, path={self._path!s})"

    def _stop_and_close(self, sink: BinaryIO) -> None:
        """Dispatcher stop then close. A close failure never masks a flush error."""
        try:
            self._dispatcher.stop(self._mode, sink, self._config, self._handle)
        except BaseException:
            self._close_after_failure(sink)
            raise
        try:
            sink.close()
        except OSError as err:
            raise FlushError(self._mode.value, f"close failed: {err}") from err

    def _close_after_failure(self, sink: BinaryIO) -> None:
        try:
            sink.close()
        except OSError as err:
            # the stop error is propagating; the close error is only logged
            log.error("closing %s after failed stop: %s", self._path, err)

    def _build_report(self) -> SessionReport:
        bytes_written = 0
        if self._path is not None and self._path.exists():
            bytes_written = self._path.stat().st_size
        return SessionReport(
            mode=self._mode,
            path=self._path,
            bytes_written=bytes_written,
            started_at=self._started_at,
            duration_s=(time.monotonic_ns() - self._started_ns) / 1e9,
            disabled=self._config.disabled,
        )
