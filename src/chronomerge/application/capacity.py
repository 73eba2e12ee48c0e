"""
Per-merge capacity tracking.

Counts, per source, how many of its entries currently sit in the priority
buffer. One tracker belongs to exactly one merge.
"""

from typing import Any, Iterable

from chronomerge.core.exceptions import MergeStateError

__all__ = ["CapacityTracker"]


class CapacityTracker:
    """
    Mapping from source to its number of buffered, unemitted entries.

    Sources are identified by object identity, so they need not be
    hashable. The count must equal the number of that source's items in
    the buffer at every instant; callers increment on insert and
    decrement on removal.

    Example:
        tracker = CapacityTracker(sources)
        tracker.increment(source)
        if tracker.decrement(source) < low_water:
            ...
    """

    def __init__(self, sources: Iterable[Any]):
        self._counts: dict[int, int] = {}
        self._peaks: dict[int, int] = {}
        for source in sources:
            key = id(source)
            if key in self._counts:
                raise MergeStateError("Source registered twice with the same tracker")
            self._counts[key] = 0
            self._peaks[key] = 0

    def _key(self, source: Any) -> int:
        key = id(source)
        if key not in self._counts:
            raise MergeStateError(
                "Source is not part of this merge",
                {"source": getattr(source, "name", repr(source))},
            )
        return key

    def count(self, source: Any) -> int:
        """Number of entries of ``source`` currently buffered."""
        return self._counts[self._key(source)]

    def increment(self, source: Any) -> int:
        """Record one more buffered entry; returns the new count."""
        key = self._key(source)
        self._counts[key] += 1
        if self._counts[key] > self._peaks[key]:
            self._peaks[key] = self._counts[key]
        return self._counts[key]

    def decrement(self, source: Any) -> int:
        """Record one entry leaving the buffer; returns the new count."""
        key = self._key(source)
        if self._counts[key] == 0:
            raise MergeStateError(
                "Capacity underflow: source has no buffered entries",
                {"source": getattr(source, "name", repr(source))},
            )
        self._counts[key] -= 1
        return self._counts[key]

    def peak(self, source: Any) -> int:
        """Highest count ever reached by ``source``."""
        return self._peaks[self._key(source)]

    def peaks(self) -> list[int]:
        """High-water marks in registration order."""
        return list(self._peaks.values())

    @property
    def total(self) -> int:
        """Total buffered entries across all sources."""
        return sum(self._counts.values())

    def __len__(self) -> int:
        return len(self._counts)
