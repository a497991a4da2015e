"""Output sink factory: deterministic artifact path, directory, open file."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, BinaryIO, Final

from easyprof.domain.exceptions import DirectoryCreationError, SinkOpenError
from easyprof.domain.model.mode import (
    STRATEGY_BY_MODE,
    CollectionStrategy,
    ProfileMode,
    SamplerFormat,
)
from easyprof.infrastructure.logging import get_logger

if TYPE_CHECKING:
    from pathlib import Path

    from easyprof.domain.model.configuration import ProfilerConfig

log = get_logger(__name__)

TIMESTAMP_FORMAT: Final = "%Y%m%d-%H:%M:%S"

# gzip-compressed easyprof JSON document (infrastructure.encoding.write_binary)
BINARY_EXTENSION: Final = "json.gz"
# marshalled cProfile statistics, loadable with pstats.Stats
CPU_EXTENSION: Final = "pstats"
TEXT_EXTENSION: Final = "txt"
TRACE_EXTENSION: Final = "trace"


def artifact_extension(config: ProfilerConfig) -> str:
    """File extension reflecting the artifact encoding.

    Args:
        config: Resolved configuration.
    """
    mode = config.profile_mode
    if mode is ProfileMode.TRACE:
        return TRACE_EXTENSION
    if mode is ProfileMode.CPU:
        return CPU_EXTENSION
    match STRATEGY_BY_MODE[mode]:
        case CollectionStrategy.SNAPSHOT | CollectionStrategy.RATE_TOGGLE if config.use_text_format:
            return TEXT_EXTENSION
        case CollectionStrategy.EXTERNAL_SAMPLER if config.sampler_format is SamplerFormat.FOLDED:
            return TEXT_EXTENSION
        case _:
            return BINARY_EXTENSION


def build_filename(config: ProfilerConfig, now: datetime) -> str:
    """Compute "{prefix_}{mode}_{YYYYMMDD-HH:MM:SS}.{ext}".

    Deterministic: same config and same second give the same name.

    Args:
        config: Resolved configuration.
        now: Local creation time. Sub-second part is ignored.
    """
    prefix = f"{config.file_prefix}_" if config.file_prefix else ""
    stamp = now.strftime(TIMESTAMP_FORMAT)
    return f"{prefix}{config.profile_mode.value}_{stamp}.{artifact_extension(config)}"


def open_sink(config: ProfilerConfig, now: datetime | None = None) -> tuple[BinaryIO, Path]:
    """Create output directory and open the artifact for writing.

    Pre-existing directory is not an error. Existing file is truncated.

    Args:
        config: Resolved configuration.
        now: Creation time. None = current local time.

    Returns:
        (open binary file, artifact path)

    Raises:
        DirectoryCreationError: output_dir cannot be created.
        SinkOpenError: artifact cannot be opened for writing.
    """
    directory = config.output_path
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as err:
        raise DirectoryCreationError(directory, err.strerror or str(err)) from err

    path = directory / build_filename(config, now or datetime.now())
    try:
        sink = path.open("wb")
    except OSError as err:
        raise SinkOpenError(path, err.strerror or str(err)) from err

    log.debug("opened sink %s", path)
    return sink, path
