"""
CLI commands using the application layer use cases.

This module provides the CLI command implementations that wire up the
infrastructure adapters to the merge use cases.
"""

from rich.console import Console
from rich.markup import escape

from chronomerge import merge
from chronomerge.core.config import MergeConfig
from chronomerge.core.exceptions import ChronoMergeError
from chronomerge.domain.entities import MergeStats
from chronomerge.infrastructure import (
    CollectingSink,
    ConsoleSink,
    FileLogSource,
    JsonLinesSink,
    OrderCheckingSink,
    SyntheticLogSource,
)
from chronomerge.cli.output import render_stats

__all__ = ["build_config", "merge_command", "simulate_command"]


def build_config(
    max_depth: int,
    low_water: int,
    medium: int | None,
    fetch_timeout: float | None,
) -> MergeConfig:
    """
    Build a MergeConfig from CLI options.

    Raises:
        ConfigurationError: If the options do not form a valid policy
    """
    return MergeConfig(
        max_depth=max_depth,
        low_water=low_water,
        medium=medium,
        fetch_timeout=fetch_timeout,
    )


def merge_command(
    files: tuple[str, ...],
    mode: str,
    config: MergeConfig,
    output_format: str,
    check_order: bool,
    show_stats: bool,
    console: Console,
    error_console: Console,
) -> int:
    """
    Execute the merge command.

    Merged entries go to stdout; statistics and errors go to stderr.

    Returns:
        Exit code (0 = success, 1 = error)
    """
    if output_format == "json":
        sink = JsonLinesSink()
    else:
        sink = ConsoleSink(console, show_summary=False)
    if check_order:
        sink = OrderCheckingSink(sink)

    sources: list[FileLogSource] = []
    try:
        for file_path in files:
            sources.append(FileLogSource(file_path))
        stats = merge(sources, sink, mode=mode, config=config)
    except OSError as e:
        error_console.print(f"[red]Error reading input:[/red] {escape(str(e))}")
        return 1
    except ChronoMergeError as e:
        error_console.print(f"[red]Merge failed:[/red] {escape(str(e))}")
        return 1
    finally:
        for source in sources:
            source.close()

    if show_stats:
        render_stats([stats], error_console)
    return 0


def _synthetic_sources(
    count: int,
    entries: int,
    max_latency: float,
    seed: int,
) -> list[SyntheticLogSource]:
    return [
        SyntheticLogSource(
            name=f"source-{index:03d}",
            count=entries,
            seed=seed + index,
            max_latency=max_latency,
        )
        for index in range(count)
    ]


def simulate_command(
    sources: int,
    entries: int,
    max_latency: float,
    seed: int,
    modes: tuple[str, ...],
    config: MergeConfig,
    console: Console,
    error_console: Console,
) -> int:
    """
    Execute the simulate command.

    Runs every requested mode over identical synthetic sources, prints a
    statistics table and checks that all modes produced the same order.

    Returns:
        Exit code (0 = success, 1 = error or diverging output)
    """
    results: list[MergeStats] = []
    orders: dict[str, list] = {}

    for mode in modes:
        sink = CollectingSink()
        try:
            stats = merge(
                _synthetic_sources(sources, entries, max_latency, seed),
                sink,
                mode=mode,
                config=config,
            )
        except ChronoMergeError as e:
            error_console.print(f"[red]{mode} merge failed:[/red] {escape(str(e))}")
            return 1
        results.append(stats)
        orders[mode] = [(entry.timestamp, entry.source) for entry in sink.entries]

    render_stats(
        results,
        console,
        title=f"{sources} sources x {entries} entries, latency <= {max_latency * 1000:g}ms",
    )

    reference_mode, reference = next(iter(orders.items()))
    for mode, order in orders.items():
        if order != reference:
            error_console.print(
                f"[red]Output of {mode} differs from {reference_mode}[/red]"
            )
            return 1

    if len(orders) > 1:
        console.print(f"[green]All {len(orders)} modes produced identical output[/green]")
    return 0
