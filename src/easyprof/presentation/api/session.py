"""Caller-facing convenience functions around Profiler."""

from __future__ import annotations

import dataclasses
from typing import TYPE_CHECKING

from easyprof.application.session import Profiler
from easyprof.domain.exceptions import EasyProfError
from easyprof.domain.model.configuration import ProfilerConfig
from easyprof.infrastructure.logging import get_logger

if TYPE_CHECKING:
    import asyncio
    import threading

    from easyprof.domain.model.session import SessionReport

log = get_logger(__name__)


def _config_of(config: ProfilerConfig | None, overrides: dict[str, object]) -> ProfilerConfig:
    base = config or ProfilerConfig()
    return dataclasses.replace(base, **overrides) if overrides else base  # type: ignore[arg-type]


def start(config: ProfilerConfig | None = None, **overrides: object) -> Profiler:
    """Start a profiling session.

    Usage:
        profiler = easyprof.start(mode="heap", output_dir="profiles")
        ...
        profiler.stop()

    Args:
        config: Base configuration. None = defaults.
        overrides: ProfilerConfig fields replacing those of config.

    Returns:
        Active (or disabled no-op) Profiler.
    """
    return Profiler(_config_of(config, overrides))


def run(
    config: ProfilerConfig | None = None,
    *,
    cancel: threading.Event | None = None,
    timeout: float | None = None,
) -> SessionReport:
    """Start a session, block until cancel/timeout, stop.

    Meant to run in a dedicated thread while the profiled work runs
    elsewhere in the process.

    Raises:
        ValueError: Neither cancel nor timeout given.
        EasyProfError: Any start or stop failure.
    """
    if cancel is None and timeout is None:
        raise ValueError("run() needs a cancel event or a timeout")
    return Profiler(config).wait(cancel, timeout)


async def arun(
    config: ProfilerConfig | None = None,
    *,
    cancel: asyncio.Event | None = None,
    timeout: float | None = None,
) -> SessionReport:
    """Asyncio variant of run(): awaits cancel/timeout instead of blocking.

    Raises:
        ValueError: Neither cancel nor timeout given.
        EasyProfError: Any start or stop failure.
    """
    if cancel is None and timeout is None:
        raise ValueError("arun() needs a cancel event or a timeout")
    return await Profiler(config).wait_async(cancel, timeout)


def must_start(config: ProfilerConfig | None = None, **overrides: object) -> Profiler:
    """Start a session or terminate the process.

    Fail-fast at the program boundary: a profiling run that cannot produce
    its artifact is not worth continuing.

    Raises:
        SystemExit: Session could not be started (exit code 1).
    """
    try:
        return start(config, **overrides)
    except EasyProfError as err:
        log.critical("cannot start profiler: %s", err)
        raise SystemExit(1) from err
