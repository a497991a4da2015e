"""Profiler configuration.

User-supplied record. Fields left at their zero value are filled in by
application.resolver.resolve_config().
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path
from typing import TYPE_CHECKING, Final

from easyprof.domain.model.mode import ProfileMode, SamplerFormat

if TYPE_CHECKING:
    from collections.abc import Mapping

DEFAULT_OUTPUT_DIR: Final = "."
DEFAULT_MUTEX_PROFILE_FRACTION: Final = 10
DEFAULT_BLOCK_PROFILE_RATE: Final = 10_000  # nanoseconds blocked per sample
DEFAULT_SAMPLING_HZ: Final = 99


@dataclass(frozen=True, slots=True)
class ProfilerConfig:
    """Configuration of a single profiling session.

    Immutable configuration object with FAIL-FIRST validation of numeric fields.
    Mode and format are validated by the resolver (typed error carrying the
    offending string).

    Attributes:
        disabled: Session does nothing: no sink, no instrumentation.
        mode: Profile mode. None/empty = cpu.
        output_dir: Directory for the artifact. None/empty = ".".
        file_prefix: Optional file name prefix, joined with "_".
        use_text_format: Textual rendering for snapshot modes.
        mutex_profile_fraction: Sample 1 of N contended lock acquisitions. 0 = 10.
        block_profile_rate: One sample per N nanoseconds blocked. 0 = 10000.
        sampling_profiler_format: binary or folded. None = binary.
        sampling_hz: Sampling profiler frequency. 0 = 99.
    """

    disabled: bool = False
    mode: ProfileMode | str | None = None
    output_dir: Path | str | None = None
    file_prefix: str = ""
    use_text_format: bool = False
    mutex_profile_fraction: int = 0
    block_profile_rate: int = 0
    sampling_profiler_format: SamplerFormat | str | None = None
    sampling_hz: int = 0

    def __post_init__(self) -> None:
        """Validate invariants. FAIL-FIRST."""
        if self.mutex_profile_fraction < 0:
            raise ValueError(
                f"mutex_profile_fraction must be >= 0, got {self.mutex_profile_fraction}"
            )
        if self.block_profile_rate < 0:
            raise ValueError(f"block_profile_rate must be >= 0, got {self.block_profile_rate}")
        if self.sampling_hz < 0:
            raise ValueError(f"sampling_hz must be >= 0, got {self.sampling_hz}")
        if self.file_prefix is None:
            raise TypeError("file_prefix must be a string, got None")

    @property
    def profile_mode(self) -> ProfileMode:
        """Mode as enum. Only valid on a resolved config.

        Raises:
            ValueError: Mode is not a recognized value (config not resolved).
        """
        return ProfileMode(self.mode)

    @property
    def sampler_format(self) -> SamplerFormat:
        """Sampler format as enum. Only valid on a resolved config."""
        return SamplerFormat(self.sampling_profiler_format)

    @property
    def output_path(self) -> Path:
        """Output directory as Path."""
        return Path(self.output_dir or DEFAULT_OUTPUT_DIR)

    @classmethod
    def from_mapping(cls, values: Mapping[str, object]) -> ProfilerConfig:
        """Create a configuration from a mapping.

        Unknown keys are ignored.

        Args:
            values: Field name to value mapping.

        Returns:
            New ProfilerConfig (unresolved).
        """
        known = {f.name for f in fields(cls)}
        return cls(**{key: value for key, value in values.items() if key in known})  # type: ignore[arg-type]
