"""
Ordered priority buffer.

A binary min-heap generic over a key function. Insertion and removal are
O(log n); this is the only structure touched once per emitted entry.
"""

import heapq
import itertools
from typing import Any, Callable, Generic, TypeVar

__all__ = ["PriorityBuffer"]

T = TypeVar("T")
KeyFunction = Callable[[T], Any]


def _identity(item: Any) -> Any:
    return item


class PriorityBuffer(Generic[T]):
    """
    Min-priority queue ordered by ``key(item)``.

    Items with equal keys leave the buffer in insertion order, so entries
    of one source keep their relative order even when timestamps tie.
    Items themselves never need to be comparable.

    Example:
        buffer = PriorityBuffer(key=operator.attrgetter("entry.timestamp"))
        buffer.insert(BufferedItem(source, entry))
        earliest = buffer.remove_min()
    """

    def __init__(self, key: KeyFunction | None = None):
        self._key = key or _identity
        self._heap: list[tuple[Any, int, T]] = []
        # insertion counter breaks ties between equal keys
        self._sequence = itertools.count()

    def insert(self, item: T) -> None:
        """Add an item, sifting it up into place."""
        heapq.heappush(self._heap, (self._key(item), next(self._sequence), item))

    def remove_min(self) -> T:
        """
        Remove and return the item with the smallest key.

        Raises:
            IndexError: If the buffer is empty
        """
        if not self._heap:
            raise IndexError("remove_min from an empty PriorityBuffer")
        return heapq.heappop(self._heap)[2]

    def peek(self) -> T:
        """
        Return the item with the smallest key without removing it.

        Raises:
            IndexError: If the buffer is empty
        """
        if not self._heap:
            raise IndexError("peek into an empty PriorityBuffer")
        return self._heap[0][2]

    def is_empty(self) -> bool:
        return not self._heap

    def __len__(self) -> int:
        return len(self._heap)

    def __bool__(self) -> bool:
        return bool(self._heap)

    def __iter__(self):
        # unordered snapshot, for inspection only
        return iter([item for _, _, item in self._heap])
