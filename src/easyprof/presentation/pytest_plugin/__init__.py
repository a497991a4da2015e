"""pytest plugin for easyprof.

Provides:
    --easyprof-mode=MODE: profile the whole test session
    --easyprof-dir=DIR: artifact directory for the session profile
    easyprof_session: factory fixture starting sessions inside a test

Configuration (pytest.ini or pyproject.toml):
    easyprof_output_dir: Artifact directory (default: ".")
    easyprof_prefix: Artifact file prefix (default: none)

Enable with `pytest_plugins = ["easyprof.presentation.pytest_plugin"]`
in a conftest.py or with `-p easyprof.presentation.pytest_plugin`.
"""

from __future__ import annotations

import pytest

from easyprof.application.reporters.console import ConsoleConfig, ConsoleReporter
from easyprof.application.resolver import resolve_mode
from easyprof.application.session import Profiler
from easyprof.domain.exceptions import InvalidModeError
from easyprof.domain.model.configuration import ProfilerConfig
from easyprof.presentation.pytest_plugin.fixtures import _get_ini_value, easyprof_session

__all__ = ["easyprof_session"]

SESSION_PROFILER_KEY = pytest.StashKey[Profiler]()


def pytest_addoption(parser: pytest.Parser) -> None:
    """Register command-line and ini options."""
    group = parser.getgroup("easyprof", "session profiling")
    group.addoption(
        "--easyprof-mode",
        action="store",
        default=None,
        metavar="MODE",
        help="profile the whole test session in MODE (cpu, heap, mutex, ...)",
    )
    group.addoption(
        "--easyprof-dir",
        action="store",
        default=None,
        metavar="DIR",
        help="directory for the session profile (overrides easyprof_output_dir)",
    )
    parser.addini("easyprof_output_dir", "directory for easyprof artifacts", default="")
    parser.addini("easyprof_prefix", "file prefix for easyprof artifacts", default="")


def pytest_configure(config: pytest.Config) -> None:
    """Register the easyprof marker, reject an unknown --easyprof-mode early."""
    config.addinivalue_line(
        "markers",
        "easyprof: test uses easyprof profiling sessions",
    )
    mode = config.getoption("easyprof_mode")
    if mode:
        try:
            resolve_mode(mode)
        except InvalidModeError as err:
            raise pytest.UsageError(str(err)) from err


def pytest_sessionstart(session: pytest.Session) -> None:
    """Start the session profile when --easyprof-mode is given."""
    config = session.config
    mode = config.getoption("easyprof_mode")
    if not mode:
        return
    output_dir = config.getoption("easyprof_dir") or _get_ini_value(
        config, "easyprof_output_dir", "."
    )
    config.stash[SESSION_PROFILER_KEY] = Profiler(
        ProfilerConfig(
            mode=mode,
            output_dir=output_dir,
            file_prefix=_get_ini_value(config, "easyprof_prefix", ""),
        )
    )


def pytest_sessionfinish(session: pytest.Session) -> None:
    """Stop the session profile."""
    profiler = session.config.stash.get(SESSION_PROFILER_KEY, None)
    if profiler is not None and profiler.is_active:
        profiler.stop()


def pytest_terminal_summary(terminalreporter: pytest.TerminalReporter, config: pytest.Config) -> None:
    """Write the session profile summary."""
    profiler = config.stash.get(SESSION_PROFILER_KEY, None)
    if profiler is None or profiler.report is None:
        return
    reporter = ConsoleReporter(ConsoleConfig(color=False, title="easyprof session profile"))
    terminalreporter.write_sep("=", "easyprof")
    terminalreporter.write(reporter.report(profiler.report))
    terminalreporter.write_line(f"profile written to {profiler.report.path}")
