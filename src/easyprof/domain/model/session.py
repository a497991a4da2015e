"""Session state and session report."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import datetime
    from pathlib import Path

    from easyprof.domain.model.mode import ProfileMode


class SessionState(Enum):
    """Profiling session state. ACTIVE → STOPPED, never back."""

    ACTIVE = auto()
    STOPPED = auto()


@dataclass(frozen=True, slots=True)
class SessionReport:
    """Outcome of a stopped session.

    Attributes:
        mode: Profile mode.
        path: Artifact path. None for disabled sessions.
        bytes_written: Artifact size after close.
        started_at: Local time the session started.
        duration_s: Seconds between start and stop.
        disabled: Session was a no-op.
    """

    mode: ProfileMode
    path: Path | None
    bytes_written: int
    started_at: datetime
    duration_s: float
    disabled: bool = False

    def __post_init__(self) -> None:
        """Validate invariants. FAIL-FIRST."""
        if self.bytes_written < 0:
            raise ValueError(f"bytes_written must be >= 0, got {self.bytes_written}")
        if self.duration_s < 0:
            raise ValueError(f"duration_s must be >= 0, got {self.duration_s}")
        if self.disabled and self.path is not None:
            raise ValueError("disabled session has no artifact path")
