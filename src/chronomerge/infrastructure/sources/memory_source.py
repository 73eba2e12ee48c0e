"""
In-memory source adapter for chronomerge.

Wraps any iterable of timestamped entries as a source, optionally with
simulated fetch latency.
"""

import asyncio
from typing import Any, Callable, Iterable, Iterator

__all__ = ["IterableLogSource"]

Latency = float | Callable[[], float]


class IterableLogSource:
    """
    Source adapter over an iterable of entries.

    Implements both LogSourcePort (``advance``) and SyncLogSourcePort
    (``pop``). The first entry is read eagerly so ``latest`` is populated
    as soon as the source exists.

    Example:
        source = IterableLogSource(entries, name="app", latency=0.01)
        while not source.exhausted:
            print(source.latest)
            await source.advance()
    """

    def __init__(
        self,
        entries: Iterable[Any],
        name: str | None = None,
        latency: Latency = 0.0,
    ):
        """
        Initialize the source.

        Args:
            entries: Entries in non-decreasing timestamp order
            name: Display name (used in logs and errors)
            latency: Seconds to wait inside each ``advance()``, or a
                zero-argument callable returning that delay
        """
        self.name = name
        self.latency = latency
        self.fetch_count = 0
        self._iter: Iterator[Any] = iter(entries)
        self._latest: Any | None = None
        self._exhausted = False
        self._load_next()

    @property
    def latest(self) -> Any | None:
        return self._latest

    @property
    def exhausted(self) -> bool:
        return self._exhausted

    def _load_next(self) -> Any | None:
        if self._exhausted:
            return None
        entry = next(self._iter, None)
        self._latest = entry
        if entry is None:
            self._exhausted = True
        return entry

    def _delay(self) -> float:
        if callable(self.latency):
            return self.latency()
        return self.latency

    def pop(self) -> Any | None:
        """Move to the next entry; returns it, or None once exhausted."""
        self.fetch_count += 1
        return self._load_next()

    async def advance(self) -> Any | None:
        """Move to the next entry after the simulated latency."""
        delay = self._delay()
        if delay > 0:
            await asyncio.sleep(delay)
        return self.pop()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, exhausted={self._exhausted})"
