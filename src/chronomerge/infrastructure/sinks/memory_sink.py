"""
In-memory and wrapping sinks for chronomerge.
"""

from datetime import datetime
from typing import Any

from chronomerge.core.exceptions import OrderViolationError
from chronomerge.domain.services import LogSinkPort
from chronomerge.infrastructure.sinks.base import BaseSink

__all__ = ["CollectingSink", "OrderCheckingSink"]


class CollectingSink(BaseSink):
    """
    Sink that keeps every emitted entry in memory.

    Example:
        sink = CollectingSink()
        await MergeLogsUseCase(sources, sink).execute()
        print(sink.timestamps)
    """

    def __init__(self):
        super().__init__()
        self.entries: list[Any] = []

    def _write(self, entry: Any) -> None:
        self.entries.append(entry)

    @property
    def timestamps(self) -> list[datetime]:
        return [entry.timestamp for entry in self.entries]


class OrderCheckingSink(BaseSink):
    """
    Sink wrapper that verifies chronological order.

    Passes every entry through to ``inner`` and raises OrderViolationError
    as soon as a timestamp is earlier than the previous one. Useful when a
    source might not honor the non-decreasing precondition.
    """

    def __init__(self, inner: LogSinkPort):
        super().__init__()
        self.inner = inner
        self._previous: datetime | None = None

    def _write(self, entry: Any) -> None:
        if self._previous is not None and entry.timestamp < self._previous:
            raise OrderViolationError(self._previous, entry.timestamp)
        self._previous = entry.timestamp
        self.inner.emit(entry)

    def _finish(self) -> None:
        self.inner.complete()
