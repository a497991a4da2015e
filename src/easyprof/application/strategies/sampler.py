"""External sampler: background wall-clock sampler with its own format."""

from __future__ import annotations

from typing import TYPE_CHECKING, BinaryIO

from easyprof.infrastructure.sampler import WallClockSampler

if TYPE_CHECKING:
    from easyprof.domain.model.configuration import ProfilerConfig


class ExternalSampler:
    """Runs a WallClockSampler for the session.

    use_text_format does not apply; encoding follows
    config.sampling_profiler_format.
    """

    def start(self, config: ProfilerConfig, sink: BinaryIO) -> WallClockSampler:
        """Start the background sampler."""
        return WallClockSampler.start(sink, hz=config.sampling_hz, fmt=config.sampler_format)

    def stop(self, config: ProfilerConfig, sink: BinaryIO, handle: object) -> None:
        """Stop the sampler. Returns once samples are flushed.

        Raises:
            OSError: Flush failed in the sampler thread.
        """
        if not isinstance(handle, WallClockSampler):
            raise TypeError(f"sampler handle must be a WallClockSampler, got {type(handle).__name__}")
        handle.stop()
