"""Domain exceptions: all public errors of easyprof.

All exceptions visible to users are defined in domain.
Infrastructure/Application use these, not define their own public exceptions.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path


class EasyProfError(Exception):
    """Base for all easyprof exceptions.

    Allows: except EasyProfError to catch all library errors.
    """


class InvalidModeError(EasyProfError, ValueError):
    """Profile mode is not one of the recognized modes.

    Caller configuration bug. Not retried.

    Attributes:
        mode: The offending mode string.
    """

    def __init__(self, mode: str) -> None:
        """Initialize with the unrecognized mode."""
        self.mode = mode
        super().__init__(f"Unknown profile mode: {mode!r}")


class InvalidFormatError(EasyProfError, ValueError):
    """Sampling profiler output format is not recognized.

    Attributes:
        value: The offending format string.
    """

    def __init__(self, value: str) -> None:
        """Initialize with the unrecognized format."""
        self.value = value
        super().__init__(f"Unknown sampling profiler format: {value!r}")


class DirectoryCreationError(EasyProfError, OSError):
    """Output directory could not be created.

    Attributes:
        path: Directory that failed.
    """

    def __init__(self, path: Path, reason: str) -> None:
        """Initialize with directory and OS error description."""
        self.path = path
        super().__init__(f"Cannot create output directory {path}: {reason}")


class SinkOpenError(EasyProfError, OSError):
    """Output file could not be opened for writing.

    Attributes:
        path: File that failed.
    """

    def __init__(self, path: Path, reason: str) -> None:
        """Initialize with file path and OS error description."""
        self.path = path
        super().__init__(f"Cannot open output file {path}: {reason}")


class AlreadyActiveError(EasyProfError, RuntimeError):
    """Process-wide capture already active, cannot start again.

    Inherits RuntimeError for semantic correctness (invalid state).

    Attributes:
        capture: Name of the exclusive capture (cpu, trace).
    """

    def __init__(self, capture: str) -> None:
        """Initialize with capture name."""
        self.capture = capture
        super().__init__(f"{capture} capture already active")


class AlreadyStoppedError(EasyProfError, RuntimeError):
    """Profiling session already stopped.

    Stop executes exactly once per session. A second call is a caller error.
    """

    def __init__(self) -> None:
        """Initialize with fixed message."""
        super().__init__("Profiling session already stopped")


class FlushError(EasyProfError, OSError):
    """Captured data could not be written to the sink.

    Raised from stop. The original OSError is chained as __cause__.

    Attributes:
        mode: Profile mode being flushed.
    """

    def __init__(self, mode: str, reason: str) -> None:
        """Initialize with mode and failure description."""
        self.mode = mode
        super().__init__(f"Failed to flush {mode} profile: {reason}")
