"""
Pytest fixtures for chronomerge tests.
"""

from datetime import datetime, timedelta

import pytest

from chronomerge.domain.entities import LogEntry
from chronomerge.infrastructure.sinks import BaseSink, CollectingSink
from chronomerge.infrastructure.sources import IterableLogSource


BASE_TIME = datetime(2026, 1, 27, 10, 0, 0)


def at(seconds: float) -> datetime:
    """Timestamp ``seconds`` after BASE_TIME."""
    return BASE_TIME + timedelta(seconds=seconds)


def make_entries(times: list[float], source: str | None = None) -> list[LogEntry]:
    """Build entries whose timestamps are offsets in seconds from BASE_TIME."""
    return [
        LogEntry(timestamp=at(t), message=f"{source or 'entry'} @ {t}", source=source)
        for t in times
    ]


def make_source(times: list[float], name: str, latency: float = 0.0) -> IterableLogSource:
    """Build an in-memory source named ``name`` over offset timestamps."""
    return IterableLogSource(make_entries(times, name), name=name, latency=latency)


def offsets(entries: list[LogEntry]) -> list[float]:
    """Turn emitted entries back into offsets from BASE_TIME."""
    return [(entry.timestamp - BASE_TIME).total_seconds() for entry in entries]


class CountingSink(CollectingSink):
    """Collecting sink that records how often complete() was called."""

    def __init__(self):
        super().__init__()
        self.complete_calls = 0

    def complete(self) -> None:
        self.complete_calls += 1
        super().complete()


class ObservingSink(BaseSink):
    """
    Sink that snapshots the merge's buffer state on every emit.

    Attach a use case after construction; each snapshot maps source name
    to (buffered count, exhausted).
    """

    def __init__(self):
        super().__init__()
        self.use_case = None
        self.entries: list[LogEntry] = []
        self.snapshots: list[dict[str, tuple[int, bool]]] = []
        self.buffer_sizes: list[int] = []

    def _write(self, entry: LogEntry) -> None:
        self.entries.append(entry)
        if self.use_case is None:
            return
        capacity = self.use_case.capacity
        self.snapshots.append({
            source.name: (capacity.count(source), source.exhausted)
            for source in self.use_case.sources
        })
        self.buffer_sizes.append(len(self.use_case.buffer))


class FailingSource(IterableLogSource):
    """Source whose advance() raises after ``fail_after`` successful fetches."""

    def __init__(self, entries, name: str, fail_after: int = 0, error: Exception | None = None):
        super().__init__(entries, name=name)
        self.fail_after = fail_after
        self.error = error or RuntimeError("connection lost")

    async def advance(self):
        if self.fetch_count >= self.fail_after:
            raise self.error
        return await super().advance()

    def pop(self):
        if self.fetch_count >= self.fail_after:
            self.fetch_count += 1
            raise self.error
        return super().pop()


class LazySource(IterableLogSource):
    """Source that holds no entry until its first advance()."""

    def __init__(self, entries, name: str):
        self._pending = list(entries)
        self._started = False
        super().__init__([], name=name)
        self._exhausted = not self._pending

    def _load_next(self):
        if not self._started:
            return None
        return super()._load_next()

    def pop(self):
        if not self._started:
            self._started = True
            self._iter = iter(self._pending)
            self._exhausted = False
        return super().pop()


@pytest.fixture
def scenario_a_sources() -> list[IterableLogSource]:
    """Three interleaved sources: [1,4,7], [2,5,8], [3,6,9]."""
    return [
        make_source([1, 4, 7], "a"),
        make_source([2, 5, 8], "b"),
        make_source([3, 6, 9], "c"),
    ]


@pytest.fixture
def collecting_sink() -> CountingSink:
    return CountingSink()


@pytest.fixture
def observing_sink() -> ObservingSink:
    return ObservingSink()


@pytest.fixture
def sample_log_lines() -> list[str]:
    """Mixed-format log lines, chronologically ordered."""
    return [
        "2026-01-27 10:15:32,123 INFO app started",
        "2026-01-27 10:15:33,456 ERROR request failed",
        "Traceback (most recent call last):",
        '  File "app.py", line 10, in handle',
        "ValueError: bad input",
        "",
        "2026-01-27 10:15:35,000 INFO recovered",
    ]
