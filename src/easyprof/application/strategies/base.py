"""Strategy protocol: one start/stop pair per collection strategy."""

from __future__ import annotations

from typing import TYPE_CHECKING, BinaryIO, Protocol

from easyprof.infrastructure import encoding

if TYPE_CHECKING:
    from easyprof.domain.model.configuration import ProfilerConfig
    from easyprof.domain.model.profile import Profile

# Opaque per-session state returned by start() and passed back to stop()
type StopHandle = object | None


class Strategy(Protocol):
    """Collection strategy.

    start() arms instrumentation; stop() halts it and writes the captured
    data into the sink. Both receive the resolved configuration.
    """

    def start(self, config: ProfilerConfig, sink: BinaryIO) -> StopHandle:
        """Arm instrumentation. Returns state needed by stop()."""
        ...

    def stop(self, config: ProfilerConfig, sink: BinaryIO, handle: StopHandle) -> None:
        """Halt instrumentation and flush into sink.

        Raises:
            OSError: Write failure (wrapped into FlushError by the dispatcher).
        """
        ...


def write_profile(profile: Profile, sink: BinaryIO, *, text: bool) -> None:
    """Serialize a snapshot: binary by default, readable text on request."""
    if text:
        encoding.write_text(profile, sink)
    else:
        encoding.write_binary(profile, sink)
