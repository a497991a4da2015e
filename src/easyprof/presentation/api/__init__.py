"""Public API functions."""

from easyprof.presentation.api.session import arun, must_start, run, start

__all__ = ["arun", "must_start", "run", "start"]
