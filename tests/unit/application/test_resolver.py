"""Tests for application/resolver.py."""

import pytest

from easyprof.application.resolver import resolve_config, resolve_format, resolve_mode
from easyprof.domain.exceptions import InvalidFormatError, InvalidModeError
from easyprof.domain.model.configuration import (
    DEFAULT_BLOCK_PROFILE_RATE,
    DEFAULT_MUTEX_PROFILE_FRACTION,
    DEFAULT_SAMPLING_HZ,
    ProfilerConfig,
)
from easyprof.domain.model.mode import ProfileMode, SamplerFormat


class TestResolveMode:
    """Tests for resolve_mode()."""

    @pytest.mark.parametrize("value", [None, ""])
    def test_empty_is_cpu(self, value: str | None) -> None:
        assert resolve_mode(value) is ProfileMode.CPU

    @pytest.mark.parametrize("mode", list(ProfileMode))
    def test_every_mode_by_name(self, mode: ProfileMode) -> None:
        assert resolve_mode(mode.value) is mode

    def test_enum_passthrough(self) -> None:
        assert resolve_mode(ProfileMode.BLOCK) is ProfileMode.BLOCK

    def test_case_and_whitespace(self) -> None:
        assert resolve_mode(" Heap ") is ProfileMode.HEAP

    @pytest.mark.parametrize(
        ("alias", "mode"),
        [("threadcreate", ProfileMode.THREAD_CREATE), ("fgprof", ProfileMode.SAMPLING_PROFILER)],
    )
    def test_aliases(self, alias: str, mode: ProfileMode) -> None:
        assert resolve_mode(alias) is mode

    def test_unknown(self) -> None:
        with pytest.raises(InvalidModeError) as exc_info:
            resolve_mode("bogus")
        assert exc_info.value.mode == "bogus"
        assert exc_info.value.__cause__ is None


class TestResolveFormat:
    """Tests for resolve_format()."""

    @pytest.mark.parametrize("value", [None, ""])
    def test_empty_is_binary(self, value: str | None) -> None:
        assert resolve_format(value) is SamplerFormat.BINARY

    def test_folded(self) -> None:
        assert resolve_format("FOLDED") is SamplerFormat.FOLDED

    def test_unknown(self) -> None:
        with pytest.raises(InvalidFormatError) as exc_info:
            resolve_format("svg")
        assert exc_info.value.value == "svg"


class TestResolveConfig:
    """Tests for resolve_config()."""

    def test_empty_config_is_cpu(self) -> None:
        assert resolve_config(ProfilerConfig()).mode is ProfileMode.CPU

    @pytest.mark.parametrize("mode", list(ProfileMode))
    def test_defaults_filled(self, mode: ProfileMode) -> None:
        config = resolve_config(ProfilerConfig(mode=mode.value))
        assert config.mode is mode
        assert config.disabled is False
        assert config.file_prefix == ""
        assert config.use_text_format is False
        assert config.output_dir == "."
        assert config.sampling_profiler_format is SamplerFormat.BINARY
        assert config.mutex_profile_fraction == DEFAULT_MUTEX_PROFILE_FRACTION
        assert config.block_profile_rate == DEFAULT_BLOCK_PROFILE_RATE
        assert config.sampling_hz == DEFAULT_SAMPLING_HZ

    def test_explicit_values_kept(self) -> None:
        raw = ProfilerConfig(
            mode="mutex",
            output_dir="out",
            file_prefix="t",
            mutex_profile_fraction=5,
            block_profile_rate=7,
            sampling_hz=250,
            use_text_format=True,
        )
        config = resolve_config(raw)
        assert config.mode is ProfileMode.MUTEX
        assert config.output_dir == "out"
        assert config.file_prefix == "t"
        assert config.mutex_profile_fraction == 5
        assert config.block_profile_rate == 7
        assert config.sampling_hz == 250
        assert config.use_text_format is True

    def test_idempotent(self) -> None:
        once = resolve_config(ProfilerConfig(mode="fgprof", sampling_profiler_format="folded"))
        assert resolve_config(once) == once

    def test_input_untouched(self) -> None:
        raw = ProfilerConfig()
        resolve_config(raw)
        assert raw.mode is None

    def test_disabled_still_validated(self) -> None:
        with pytest.raises(InvalidModeError):
            resolve_config(ProfilerConfig(disabled=True, mode="bogus"))
