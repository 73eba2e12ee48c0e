"""
Synthetic source adapter for chronomerge.

Generates random, chronologically ordered entries with random fetch
latency. Used by the ``simulate`` command and by tests that need many
independently paced sources.
"""

import random
from datetime import datetime, timedelta
from typing import Iterator

from chronomerge.domain.entities import LogEntry
from chronomerge.infrastructure.sources.memory_source import IterableLogSource

__all__ = ["SyntheticLogSource", "generate_entries"]

DEFAULT_START = datetime(2026, 1, 1)

_MESSAGES = [
    "request accepted",
    "cache miss",
    "query completed",
    "connection reset by peer",
    "retrying upstream call",
    "user session refreshed",
    "job finished",
]


def generate_entries(
    count: int,
    rng: random.Random,
    start: datetime = DEFAULT_START,
    max_gap: timedelta = timedelta(hours=1),
    name: str | None = None,
) -> Iterator[LogEntry]:
    """
    Yield ``count`` entries with non-decreasing random timestamps.

    Args:
        count: Number of entries
        rng: Random generator (seeded for reproducible output)
        start: Timestamp lower bound
        max_gap: Largest gap between consecutive entries
        name: Source name recorded on each entry
    """
    timestamp = start
    gap_seconds = max_gap.total_seconds()
    for index in range(count):
        timestamp += timedelta(seconds=rng.uniform(0, gap_seconds))
        yield LogEntry(
            timestamp=timestamp,
            message=f"{rng.choice(_MESSAGES)} #{index}",
            source=name,
            line_number=index + 1,
        )


class SyntheticLogSource(IterableLogSource):
    """
    Source with random entries and random per-fetch latency.

    Example:
        sources = [SyntheticLogSource(f"src-{i}", count=100, seed=i) for i in range(50)]
    """

    def __init__(
        self,
        name: str,
        count: int,
        seed: int | None = None,
        start: datetime = DEFAULT_START,
        max_gap: timedelta = timedelta(hours=1),
        max_latency: float = 0.0,
    ):
        """
        Initialize synthetic source.

        Args:
            name: Display name
            count: Number of entries to produce
            seed: Seed for entries and latency
            start: Timestamp lower bound
            max_gap: Largest gap between consecutive entries
            max_latency: Upper bound in seconds of the uniform fetch delay
        """
        self.rng = random.Random(seed)
        self._latency_rng = random.Random(seed)
        self.max_latency = max_latency
        super().__init__(
            generate_entries(count, self.rng, start=start, max_gap=max_gap, name=name),
            name=name,
            latency=self._random_latency,
        )

    def _random_latency(self) -> float:
        if self.max_latency <= 0:
            return 0.0
        return self._latency_rng.uniform(0, self.max_latency)
