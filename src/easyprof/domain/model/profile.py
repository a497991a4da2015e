"""Profile: point-in-time sample set.

Produced by snapshot collectors and the sampling profiler,
consumed by infrastructure.encoding.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Frame:
    """Single stack frame.

    Attributes:
        function: Qualified function name (or type name for heap census).
        filename: Source file (or module name).
        line: Line number. 0 = unknown.
    """

    function: str
    filename: str
    line: int = 0

    def __post_init__(self) -> None:
        """Validate invariants. FAIL-FIRST."""
        if self.line < 0:
            raise ValueError(f"line must be >= 0, got {self.line}")

    def __str__(self) -> str:
        """Format as function file:line."""
        return f"{self.function} {self.filename}:{self.line}"


@dataclass(frozen=True, slots=True)
class SampleType:
    """What a sample value measures, e.g. ("delay", "nanoseconds")."""

    type: str
    unit: str


@dataclass(frozen=True, slots=True)
class Sample:
    """Aggregated sample: stack plus one value per sample type.

    Attributes:
        stack: Frames, innermost first.
        values: One value per Profile.sample_types entry.
    """

    stack: tuple[Frame, ...]
    values: tuple[int, ...]


@dataclass(frozen=True, slots=True)
class Profile:
    """Immutable profile.

    Attributes:
        name: Profile name (mode value).
        sample_types: Meaning of Sample.values, in order.
        samples: Aggregated samples.
        time_ns: Capture time, nanoseconds since epoch.
        duration_ns: Collection window. 0 for instantaneous snapshots.
        period: Sampling period (e.g. sampler interval in ns). 0 = not sampled.
    """

    name: str
    sample_types: tuple[SampleType, ...]
    samples: tuple[Sample, ...]
    time_ns: int
    duration_ns: int = 0
    period: int = 0

    def __post_init__(self) -> None:
        """Validate invariants. FAIL-FIRST."""
        if not self.name:
            raise ValueError("name must not be empty")
        if not self.sample_types:
            raise ValueError("sample_types must not be empty")
        width = len(self.sample_types)
        for sample in self.samples:
            if len(sample.values) != width:
                raise ValueError(
                    f"sample has {len(sample.values)} values, expected {width}"
                )

    def total(self, index: int = 0) -> int:
        """Sum of values of the sample type at index."""
        return sum(sample.values[index] for sample in self.samples)
