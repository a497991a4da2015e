"""Shared pytest configuration.

Loads the easyprof plugin (fixtures, options) and pytester for plugin tests.
Resets process-wide profiling state around every test.
"""

from collections.abc import Iterator

import pytest

from easyprof.infrastructure import runtime

pytest_plugins = ["pytester", "easyprof.presentation.pytest_plugin"]


@pytest.fixture(autouse=True)
def _reset_contention_state() -> Iterator[None]:
    """Recorded contention events and settings do not leak between tests."""
    runtime.mutex_events.clear()
    runtime.block_events.clear()
    yield
    runtime.mutex_events.clear()
    runtime.block_events.clear()
