"""
Domain entities for chronomerge.

These are the objects that flow through a merge. They have no
dependencies on infrastructure.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

__all__ = [
    "LogEntry",
    "BufferedItem",
    "MergeStats",
]


@dataclass
class LogEntry:
    """
    One timestamped record from a source.

    The merge itself only ever looks at ``timestamp``; everything else is
    carried along for the sink.
    """
    timestamp: datetime
    message: str = ""
    source: str | None = None
    line_number: int | None = None
    raw: str = ""

    def formatted_timestamp(self, fmt: str = "%Y-%m-%d %H:%M:%S.%f") -> str:
        """Return formatted timestamp string, trimmed to milliseconds for the default format."""
        text = self.timestamp.strftime(fmt)
        if fmt.endswith(".%f"):
            return text[:-3]
        return text

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for JSON export."""
        result: dict[str, Any] = {
            "timestamp": self.timestamp.isoformat(),
            "message": self.message,
        }
        if self.source is not None:
            result["source"] = self.source
        if self.line_number is not None:
            result["line_number"] = self.line_number
        return result


@dataclass(frozen=True)
class BufferedItem:
    """A source paired with one of its entries, as held by the priority buffer."""
    source: Any
    entry: Any


@dataclass
class MergeStats:
    """Summary of one completed merge."""
    mode: str
    emitted: int = 0
    fetch_rounds: int = 0
    fetches: int = 0
    refills: int = 0
    peak_depth: list[int] = field(default_factory=list)
    elapsed_seconds: float = 0.0

    @property
    def entries_per_second(self) -> float:
        """Emission rate over the whole merge."""
        if self.elapsed_seconds <= 0:
            return 0.0
        return self.emitted / self.elapsed_seconds

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for JSON export."""
        return {
            "mode": self.mode,
            "emitted": self.emitted,
            "fetch_rounds": self.fetch_rounds,
            "fetches": self.fetches,
            "refills": self.refills,
            "peak_depth": max(self.peak_depth, default=0),
            "elapsed_seconds": round(self.elapsed_seconds, 6),
            "entries_per_second": round(self.entries_per_second, 1),
        }
