"""Rate/fraction toggle: enable process-wide sampling, snapshot at stop."""

from __future__ import annotations

from typing import TYPE_CHECKING, BinaryIO

from easyprof.application.strategies.base import write_profile
from easyprof.infrastructure import snapshots

if TYPE_CHECKING:
    from collections.abc import Callable

    from easyprof.domain.model.configuration import ProfilerConfig
    from easyprof.infrastructure.runtime import ProcessSetting


class RateToggle:
    """Leases a process-wide setting for the session.

    Start: acquire a lease with the configured rate (capture enabled).
    Stop: release the lease first (last lease resets the setting to zero),
    then serialize the named snapshot. The reset happens even if the
    snapshot write fails.
    """

    def __init__(
        self,
        setting: ProcessSetting,
        rate_of: Callable[[ProfilerConfig], int],
        snapshot_name: str,
    ) -> None:
        """Initialize.

        Args:
            setting: Process-wide setting (mutex fraction or block rate).
            rate_of: Reads the session's rate from the resolved config.
            snapshot_name: Collector name in infrastructure.snapshots.
        """
        self._setting = setting
        self._rate_of = rate_of
        self._snapshot_name = snapshot_name

    def start(self, config: ProfilerConfig, sink: BinaryIO) -> int:
        """Enable capture. Returns the lease token."""
        return self._setting.acquire(self._rate_of(config))

    def stop(self, config: ProfilerConfig, sink: BinaryIO, handle: object) -> None:
        """Disable capture, then write the snapshot."""
        if not isinstance(handle, int):
            raise TypeError(f"rate toggle handle must be a lease token, got {type(handle).__name__}")
        self._setting.release(handle)
        profile = snapshots.collect(self._snapshot_name)
        write_profile(profile, sink, text=config.use_text_format)
