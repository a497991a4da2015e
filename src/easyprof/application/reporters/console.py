"""Console reporter: SessionReport → rich formatted string."""

from __future__ import annotations

from dataclasses import dataclass
from io import StringIO
from typing import TYPE_CHECKING

from rich.console import Console
from rich.table import Table

if TYPE_CHECKING:
    from easyprof.domain.model.session import SessionReport


@dataclass(frozen=True, slots=True)
class ConsoleConfig:
    """Configuration for console reporter.

    Attributes:
        width: Console width in characters.
        color: Emit ANSI colors.
        title: Table title.
    """

    width: int = 100
    color: bool = True
    title: str = "PROFILING SESSION"

    def __post_init__(self) -> None:
        """Validate invariants. FAIL-FIRST."""
        if self.width < 20:
            raise ValueError(f"width must be >= 20, got {self.width}")


class ConsoleReporter:
    """Renders session summaries.

    Output is str, not print(). Caller decides destination.
    Summarizes the session only; profile contents are not parsed.
    """

    def __init__(self, config: ConsoleConfig | None = None) -> None:
        """Initialize reporter.

        Args:
            config: Reporter configuration. Uses defaults if None.
        """
        self._config = config or ConsoleConfig()

    def report(self, *reports: SessionReport) -> str:
        """Format one or more session reports as a table.

        Args:
            reports: Finished sessions, rendered one row each.

        Returns:
            Formatted string.
        """
        output = StringIO()
        console = Console(
            file=output,
            force_terminal=self._config.color,
            no_color=not self._config.color,
            width=self._config.width,
        )

        table = Table(title=self._config.title)
        table.add_column("Mode", style="cyan")
        table.add_column("Artifact")
        table.add_column("Size", justify="right")
        table.add_column("Duration", justify="right")
        table.add_column("Started")

        for item in reports:
            table.add_row(
                item.mode.value,
                "[dim]disabled[/dim]" if item.disabled else str(item.path),
                format_size(item.bytes_written),
                f"{item.duration_s:.3f}s",
                item.started_at.strftime("%Y-%m-%d %H:%M:%S"),
            )

        console.print(table)
        return output.getvalue()


def format_size(size: int) -> str:
    """Human-readable byte count: 512 B, 1.5 KiB, 3.2 MiB."""
    if size < 1024:
        return f"{size} B"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f} KiB"
    return f"{size / (1024 * 1024):.1f} MiB"
