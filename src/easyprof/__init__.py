"""easyprof - one-call profiling sessions writing a single artifact per run."""

__version__ = "0.1.0"

from easyprof.application.session import Profiler
from easyprof.domain.exceptions import (
    AlreadyActiveError,
    AlreadyStoppedError,
    DirectoryCreationError,
    EasyProfError,
    FlushError,
    InvalidFormatError,
    InvalidModeError,
    SinkOpenError,
)
from easyprof.domain.model import ProfileMode, ProfilerConfig, SamplerFormat, SessionReport
from easyprof.infrastructure import sync
from easyprof.presentation.api import arun, must_start, run, start

__all__ = [
    "AlreadyActiveError",
    "AlreadyStoppedError",
    "DirectoryCreationError",
    "EasyProfError",
    "FlushError",
    "InvalidFormatError",
    "InvalidModeError",
    "ProfileMode",
    "Profiler",
    "ProfilerConfig",
    "SamplerFormat",
    "SessionReport",
    "SinkOpenError",
    "__version__",
    "arun",
    "must_start",
    "run",
    "start",
    "sync",
]
