"""pytest fixtures for profiling inside tests.

The factory fixture owns every session it starts: whatever a test leaves
running is stopped at teardown.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Callable, Iterator
from typing import TYPE_CHECKING

import pytest

from easyprof.application.session import Profiler
from easyprof.domain.model.configuration import ProfilerConfig

if TYPE_CHECKING:
    from pathlib import Path

type ProfilerFactory = Callable[..., Profiler]


def _get_ini_value(config: pytest.Config, name: str, default: str) -> str:
    """Get ini value from pytest config with fallback."""
    value = config.getini(name)
    if value:
        return str(value)
    return default


@pytest.fixture
def easyprof_session(
    request: pytest.FixtureRequest,
    tmp_path: Path,
) -> Iterator[ProfilerFactory]:
    """Factory starting profiling sessions for the current test.

    Usage:
        def test_hot_path(easyprof_session):
            profiler = easyprof_session("cpu")
            hot_path()
            report = profiler.stop()

    Artifacts go to tmp_path unless output_dir is overridden. The
    easyprof_prefix ini option provides the default file prefix.

    Yields:
        Callable (mode, **overrides) -> Profiler
    """
    started: list[Profiler] = []
    prefix = _get_ini_value(request.config, "easyprof_prefix", "")

    def factory(mode: str = "", **overrides: object) -> Profiler:
        base = ProfilerConfig(mode=mode, output_dir=str(tmp_path), file_prefix=prefix)
        config = dataclasses.replace(base, **overrides)  # type: ignore[arg-type]
        profiler = Profiler(config)
        started.append(profiler)
        return profiler

    yield factory

    for profiler in started:
        if profiler.is_active:
            profiler.stop()
