"""Snapshot-only: nothing to arm, read live process state at stop."""

from __future__ import annotations

from typing import TYPE_CHECKING, BinaryIO

from easyprof.application.strategies.base import write_profile
from easyprof.infrastructure import snapshots

if TYPE_CHECKING:
    from easyprof.domain.model.configuration import ProfilerConfig


class SnapshotOnly:
    """Takes the named snapshot when the session stops."""

    def __init__(self, snapshot_name: str) -> None:
        self._snapshot_name = snapshot_name

    def start(self, config: ProfilerConfig, sink: BinaryIO) -> None:
        """No-op."""
        return None

    def stop(self, config: ProfilerConfig, sink: BinaryIO, handle: object) -> None:
        """Serialize the snapshot into sink."""
        write_profile(snapshots.collect(self._snapshot_name), sink, text=config.use_text_format)
