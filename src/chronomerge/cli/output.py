"""
Output formatters for CLI.
"""

from rich.console import Console
from rich.table import Table

from chronomerge.domain.entities import MergeStats

__all__ = ["render_stats"]


def render_stats(stats: list[MergeStats], console: Console, title: str = "Merge Statistics") -> None:
    """
    Render merge statistics as a Rich table.

    Args:
        stats: One MergeStats per merge run
        console: Rich Console for output
        title: Table title
    """
    table = Table(title=title, show_header=True, header_style="bold magenta")
    table.add_column("Mode", style="cyan", no_wrap=True)
    table.add_column("Entries", justify="right")
    table.add_column("Rounds", justify="right")
    table.add_column("Fetches", justify="right")
    table.add_column("Refills", justify="right")
    table.add_column("Peak", justify="right")
    table.add_column("Elapsed", justify="right")
    table.add_column("Rate/s", justify="right", style="green")

    for item in stats:
        table.add_row(
            item.mode,
            str(item.emitted),
            str(item.fetch_rounds),
            str(item.fetches),
            str(item.refills),
            str(max(item.peak_depth)) if item.peak_depth else "-",
            f"{item.elapsed_seconds:.3f}s",
            f"{item.entries_per_second:,.0f}",
        )

    console.print(table)
