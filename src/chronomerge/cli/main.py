"""
Main CLI entry point for chronomerge.

Uses the application layer use cases with file and synthetic source
adapters.
"""

import click
from rich.console import Console
from rich.markup import escape

from chronomerge import __version__
from chronomerge.application import MERGE_MODES
from chronomerge.core.config import DEFAULT_LOW_WATER, DEFAULT_MAX_DEPTH
from chronomerge.core.exceptions import ConfigurationError
from chronomerge.core.logging import configure_logging

console = Console()
error_console = Console(stderr=True)

MODE_CHOICE = click.Choice(sorted(MERGE_MODES))


def tuning_options(func):
    """Attach the refill tuning options shared by merge and simulate."""
    options = [
        click.option(
            "--max-depth", type=int, default=DEFAULT_MAX_DEPTH, show_default=True,
            help="Maximum buffered entries per source",
        ),
        click.option(
            "--low-water", type=int, default=DEFAULT_LOW_WATER, show_default=True,
            help="Refill when a source drops below this many buffered entries",
        ),
        click.option(
            "--medium", type=int, default=None,
            help="Sources below this depth join a refill (default: midpoint)",
        ),
        click.option(
            "--fetch-timeout", type=float, default=None,
            help="Fail the merge if a single fetch takes longer (seconds)",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _config_or_exit(ctx: click.Context, **options):
    from chronomerge.cli.commands import build_config

    try:
        return build_config(**options)
    except ConfigurationError as e:
        error_console.print(f"[red]Invalid configuration:[/red] {escape(str(e))}")
        ctx.exit(1)


@click.group()
@click.version_option(version=__version__, prog_name="chronomerge")
@click.option("--quiet", "-q", is_flag=True, help="Only log errors")
@click.option("--verbose", "-v", is_flag=True, help="Log merge progress to stderr")
@click.option("--log-json", is_flag=True, help="Emit log records as JSON")
@click.pass_context
def cli(ctx: click.Context, quiet: bool, verbose: bool, log_json: bool) -> None:
    """
    chronomerge - merge pre-sorted logs into one chronological stream

    Sources are prefetched in concurrent batches with a bounded number of
    buffered entries per source.

    Examples:

    \b
        chronomerge merge app.log nginx.log db.log
        chronomerge merge --output json --check-order *.log
        chronomerge merge --mode serial app.log web.log
        chronomerge simulate --sources 50 --entries 200 --max-latency 0.005
    """
    level = "ERROR" if quiet else "DEBUG" if verbose else "WARNING"
    configure_logging(json_output=log_json, level=level)
    ctx.ensure_object(dict)
    ctx.obj["console"] = console
    ctx.obj["error_console"] = error_console


@cli.command()
@click.argument("files", nargs=-1, type=click.Path(exists=True, dir_okay=False), required=True)
@click.option(
    "--mode", "-m", type=MODE_CHOICE, default="prefetch", show_default=True,
    help="Merge strategy",
)
@tuning_options
@click.option(
    "--output", "-o", "output_format",
    type=click.Choice(["compact", "json"]),
    default="compact",
    help="Output format (default: compact)",
)
@click.option(
    "--check-order/--no-check-order", default=False,
    help="Fail if any entry is emitted out of chronological order",
)
@click.option(
    "--stats/--no-stats", "show_stats", default=False,
    help="Print merge statistics to stderr",
)
@click.pass_context
def merge(
    ctx: click.Context,
    files: tuple[str, ...],
    mode: str,
    max_depth: int,
    low_water: int,
    medium: int | None,
    fetch_timeout: float | None,
    output_format: str,
    check_order: bool,
    show_stats: bool,
) -> None:
    """
    Merge log files into one chronological stream.

    Each file must already be in chronological order. Lines without a
    leading timestamp are attached to the entry before them.

    Examples:

    \b
        chronomerge merge app.log nginx.log
        chronomerge merge --max-depth 64 --low-water 8 *.log
        chronomerge merge --output json --stats app.log db.log
    """
    from chronomerge.cli.commands import merge_command

    config = _config_or_exit(
        ctx,
        max_depth=max_depth,
        low_water=low_water,
        medium=medium,
        fetch_timeout=fetch_timeout,
    )
    exit_code = merge_command(
        files=files,
        mode=mode,
        config=config,
        output_format=output_format,
        check_order=check_order,
        show_stats=show_stats,
        console=ctx.obj["console"],
        error_console=ctx.obj["error_console"],
    )
    ctx.exit(exit_code)


@cli.command()
@click.option("--sources", "-s", type=int, default=20, show_default=True, help="Number of sources")
@click.option("--entries", "-n", type=int, default=100, show_default=True, help="Entries per source")
@click.option(
    "--max-latency", type=float, default=0.001, show_default=True,
    help="Upper bound of the random per-fetch latency (seconds)",
)
@click.option("--seed", type=int, default=0, show_default=True, help="Random seed")
@click.option(
    "--mode", "-m", "modes", type=MODE_CHOICE, multiple=True,
    help="Merge strategy to run (repeatable; default: prefetch and serial)",
)
@tuning_options
@click.pass_context
def simulate(
    ctx: click.Context,
    sources: int,
    entries: int,
    max_latency: float,
    seed: int,
    modes: tuple[str, ...],
    max_depth: int,
    low_water: int,
    medium: int | None,
    fetch_timeout: float | None,
) -> None:
    """
    Benchmark merge strategies on synthetic sources.

    Every mode merges identical random sources; the command fails if their
    outputs differ.

    Examples:

    \b
        chronomerge simulate
        chronomerge simulate --sources 100 --entries 50 --max-latency 0.01
        chronomerge simulate -m prefetch -m serial -m sync
    """
    from chronomerge.cli.commands import simulate_command

    config = _config_or_exit(
        ctx,
        max_depth=max_depth,
        low_water=low_water,
        medium=medium,
        fetch_timeout=fetch_timeout,
    )
    exit_code = simulate_command(
        sources=sources,
        entries=entries,
        max_latency=max_latency,
        seed=seed,
        modes=modes or ("prefetch", "serial"),
        config=config,
        console=ctx.obj["console"],
        error_console=ctx.obj["error_console"],
    )
    ctx.exit(exit_code)


if __name__ == "__main__":
    cli()
