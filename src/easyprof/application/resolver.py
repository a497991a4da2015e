"""Configuration resolver: raw ProfilerConfig → effective ProfilerConfig.

Pure transformation, no side effects.
"""

from __future__ import annotations

import dataclasses

from easyprof.domain.exceptions import InvalidFormatError, InvalidModeError
from easyprof.domain.model.configuration import (
    DEFAULT_BLOCK_PROFILE_RATE,
    DEFAULT_MUTEX_PROFILE_FRACTION,
    DEFAULT_OUTPUT_DIR,
    DEFAULT_SAMPLING_HZ,
    ProfilerConfig,
)
from easyprof.domain.model.mode import MODE_ALIASES, ProfileMode, SamplerFormat


def resolve_mode(value: ProfileMode | str | None) -> ProfileMode:
    """Normalize a mode value. Empty → cpu.

    Raises:
        InvalidModeError: Not a recognized mode or alias.
    """
    if isinstance(value, ProfileMode):
        return value
    if not value:
        return ProfileMode.CPU
    name = str(value).strip().lower()
    if name in MODE_ALIASES:
        return MODE_ALIASES[name]
    try:
        return ProfileMode(name)
    except ValueError:
        raise InvalidModeError(str(value)) from None


def resolve_format(value: SamplerFormat | str | None) -> SamplerFormat:
    """Normalize a sampler format. Empty → binary.

    Raises:
        InvalidFormatError: Not a recognized format.
    """
    if isinstance(value, SamplerFormat):
        return value
    if not value:
        return SamplerFormat.BINARY
    try:
        return SamplerFormat(str(value).strip().lower())
    except ValueError:
        raise InvalidFormatError(str(value)) from None


def resolve_config(raw: ProfilerConfig) -> ProfilerConfig:
    """Fill defaults and validate enums.

    Idempotent: resolving a resolved config returns an equal config.

    Args:
        raw: User-supplied configuration.

    Returns:
        New fully-defaulted configuration.

    Raises:
        InvalidModeError: Unrecognized mode.
        InvalidFormatError: Unrecognized sampler format.
    """
    return dataclasses.replace(
        raw,
        mode=resolve_mode(raw.mode),
        output_dir=raw.output_dir or DEFAULT_OUTPUT_DIR,
        sampling_profiler_format=resolve_format(raw.sampling_profiler_format),
        mutex_profile_fraction=raw.mutex_profile_fraction or DEFAULT_MUTEX_PROFILE_FRACTION,
        block_profile_rate=raw.block_profile_rate or DEFAULT_BLOCK_PROFILE_RATE,
        sampling_hz=raw.sampling_hz or DEFAULT_SAMPLING_HZ,
    )
