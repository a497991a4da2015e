"""Application layer: configuration resolution, dispatch, session lifecycle."""

from easyprof.application.dispatcher import ModeDispatcher, default_strategies
from easyprof.application.resolver import resolve_config, resolve_format, resolve_mode
from easyprof.application.session import Profiler

__all__ = [
    "ModeDispatcher",
    "Profiler",
    "default_strategies",
    "resolve_config",
    "resolve_format",
    "resolve_mode",
]
