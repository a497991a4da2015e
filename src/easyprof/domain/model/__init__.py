"""Domain model: configuration, modes, profiles, session state."""

from easyprof.domain.model.configuration import ProfilerConfig
from easyprof.domain.model.mode import (
    MODE_ALIASES,
    STRATEGY_BY_MODE,
    CollectionStrategy,
    ProfileMode,
    SamplerFormat,
)
from easyprof.domain.model.profile import Frame, Profile, Sample, SampleType
from easyprof.domain.model.session import SessionReport, SessionState

__all__ = [
    "MODE_ALIASES",
    "STRATEGY_BY_MODE",
    "CollectionStrategy",
    "Frame",
    "Profile",
    "ProfileMode",
    "ProfilerConfig",
    "Sample",
    "SampleType",
    "SamplerFormat",
    "SessionReport",
    "SessionState",
]
