"""Tests for infrastructure/sink.py."""

from datetime import datetime
from pathlib import Path

import pytest

from easyprof.application.resolver import resolve_config
from easyprof.domain.exceptions import DirectoryCreationError, SinkOpenError
from easyprof.infrastructure.sink import artifact_extension, build_filename, open_sink
from tests.factories import FIXED_TIME, make_config


def resolved(**kwargs: object):
    return resolve_config(make_config(**kwargs))  # type: ignore[arg-type]


class TestArtifactExtension:
    """Extension reflects the artifact encoding."""

    @pytest.mark.parametrize("mode", ["heap", "allocs", "thread_create", "mutex", "block", "goroutine"])
    def test_binary_document(self, mode: str) -> None:
        assert artifact_extension(resolved(mode=mode)) == "json.gz"

    def test_cpu_stats(self) -> None:
        assert artifact_extension(resolved(mode="cpu")) == "pstats"

    def test_trace(self) -> None:
        assert artifact_extension(resolved(mode="trace")) == "trace"

    @pytest.mark.parametrize("mode", ["heap", "thread_create", "mutex", "block"])
    def test_text_format(self, mode: str) -> None:
        assert artifact_extension(resolved(mode=mode, use_text_format=True)) == "txt"

    def test_text_format_ignored_for_cpu(self) -> None:
        assert artifact_extension(resolved(mode="cpu", use_text_format=True)) == "pstats"

    def test_folded_sampler(self) -> None:
        config = resolved(mode="sampling_profiler", sampling_profiler_format="folded")
        assert artifact_extension(config) == "txt"

    def test_binary_sampler(self) -> None:
        assert artifact_extension(resolved(mode="sampling_profiler")) == "json.gz"


class TestBuildFilename:
    """Tests for build_filename()."""

    def test_without_prefix(self) -> None:
        assert build_filename(resolved(mode="heap"), FIXED_TIME) == "heap_20240309-14:05:07.json.gz"

    def test_with_prefix(self) -> None:
        name = build_filename(resolved(mode="mutex", file_prefix="t"), FIXED_TIME)
        assert name == "t_mutex_20240309-14:05:07.json.gz"

    def test_deterministic_within_second(self) -> None:
        config = resolved(mode="cpu")
        later = FIXED_TIME.replace(microsecond=999_999)
        assert build_filename(config, FIXED_TIME) == build_filename(config, later)

    def test_differs_across_seconds(self) -> None:
        config = resolved(mode="cpu")
        later = datetime(2024, 3, 9, 14, 5, 8)
        assert build_filename(config, FIXED_TIME) != build_filename(config, later)


class TestOpenSink:
    """Tests for open_sink()."""

    def test_creates_nested_directory(self, tmp_path: Path) -> None:
        target = tmp_path / "a" / "b"
        sink, path = open_sink(resolved(mode="heap", output_dir=target), FIXED_TIME)
        sink.close()
        assert path == target / "heap_20240309-14:05:07.json.gz"
        assert path.exists()

    def test_existing_directory_is_fine(self, tmp_path: Path) -> None:
        config = resolved(mode="heap", output_dir=tmp_path)
        open_sink(config, FIXED_TIME)[0].close()
        sink, path = open_sink(config, FIXED_TIME)
        sink.close()
        assert path.exists()

    def test_existing_file_truncated(self, tmp_path: Path) -> None:
        config = resolved(mode="heap", output_dir=tmp_path)
        sink, path = open_sink(config, FIXED_TIME)
        sink.write(b"old content")
        sink.close()
        open_sink(config, FIXED_TIME)[0].close()
        assert path.read_bytes() == b""

    def test_directory_is_a_file(self, tmp_path: Path) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("x")
        with pytest.raises(DirectoryCreationError) as exc_info:
            open_sink(resolved(mode="heap", output_dir=blocker / "sub"), FIXED_TIME)
        assert exc_info.value.path == blocker / "sub"
        assert isinstance(exc_info.value.__cause__, OSError)

    def test_artifact_path_is_a_directory(self, tmp_path: Path) -> None:
        (tmp_path / "heap_20240309-14:05:07.json.gz").mkdir()
        with pytest.raises(SinkOpenError) as exc_info:
            open_sink(resolved(mode="heap", output_dir=tmp_path), FIXED_TIME)
        assert exc_info.value.path.name == "heap_20240309-14:05:07.json.gz"

    def test_default_time_is_now(self, tmp_path: Path) -> None:
        sink, path = open_sink(resolved(mode="cpu", output_dir=tmp_path))
        sink.close()
        assert path.name.startswith(f"cpu_{datetime.now():%Y%m%d}")

