"""
Console and stream sinks for chronomerge.
"""

import json
import sys
import time
from typing import Any, TextIO

from rich.console import Console
from rich.markup import escape

from chronomerge.infrastructure.sinks.base import BaseSink

__all__ = ["ConsoleSink", "JsonLinesSink", "SOURCE_STYLES"]


# Rotating styles so interleaved sources are easy to tell apart
SOURCE_STYLES = ["cyan", "magenta", "green", "yellow", "blue", "bright_red"]


class ConsoleSink(BaseSink):
    """
    Sink that prints each entry as one compact Rich line.

    On completion prints the entry count, elapsed time and rate, measured
    from construction.

    Example:
        sink = ConsoleSink()
        merge(sources, sink)
    """

    def __init__(
        self,
        console: Console | None = None,
        show_source: bool = True,
        show_summary: bool = True,
    ):
        """
        Initialize console sink.

        Args:
            console: Rich console to print to (default: stdout)
            show_source: Prefix each line with its source name
            show_summary: Print totals on completion
        """
        super().__init__()
        self.console = console or Console()
        self.show_source = show_source
        self.show_summary = show_summary
        self._styles: dict[str, str] = {}
        self._started = time.perf_counter()
        self.elapsed_seconds = 0.0

    def _style_for(self, source: str) -> str:
        if source not in self._styles:
            self._styles[source] = SOURCE_STYLES[len(self._styles) % len(SOURCE_STYLES)]
        return self._styles[source]

    def _write(self, entry: Any) -> None:
        ts = entry.formatted_timestamp()

        prefix = ""
        source = getattr(entry, "source", None)
        if self.show_source and source:
            style = self._style_for(source)
            prefix = f"[{style}]{escape(source)}[/{style}] "

        self.console.print(
            f"[dim]{ts}[/dim] {prefix}{escape(entry.message)}",
            highlight=False,
            soft_wrap=True,
        )

    def _finish(self) -> None:
        self.elapsed_seconds = time.perf_counter() - self._started
        if not self.show_summary:
            return
        rate = self.emitted / self.elapsed_seconds if self.elapsed_seconds > 0 else 0.0
        self.console.print(
            f"\n[dim]Total: {self.emitted} entries in {self.elapsed_seconds:.3f}s "
            f"({rate:,.0f} entries/s)[/dim]"
        )


class JsonLinesSink(BaseSink):
    """Sink that writes each entry as one JSON object per line."""

    def __init__(self, stream: TextIO | None = None):
        """
        Initialize JSON lines sink.

        Args:
            stream: Text stream to write to (default: stdout at emit time)
        """
        super().__init__()
        self.stream = stream

    def _write(self, entry: Any) -> None:
        stream = self.stream or sys.stdout
        stream.write(json.dumps(entry.to_dict(), default=str) + "\n")

    def _finish(self) -> None:
        (self.stream or sys.stdout).flush()
