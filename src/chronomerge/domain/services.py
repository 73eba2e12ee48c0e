"""
Port protocols for chronomerge.

These define the contracts the merge relies on. Infrastructure adapters
implement them; the application layer only talks to these protocols.
"""

from datetime import datetime
from typing import Any, Protocol, runtime_checkable

__all__ = [
    "TimestampedEntry",
    "LogSourcePort",
    "SyncLogSourcePort",
    "LogSinkPort",
]


@runtime_checkable
class TimestampedEntry(Protocol):
    """
    Anything the merge can order.

    The merge never looks at an entry beyond its timestamp.
    """

    timestamp: datetime


@runtime_checkable
class LogSourcePort(Protocol):
    """
    Port for asynchronous log sources.

    A source is an ordered, exhaustible stream of entries whose timestamps
    never decrease. Implementations provide:
    - ``latest``: the most recently fetched entry not yet consumed, without
      consuming it (None once exhausted)
    - ``exhausted``: flips from False to True exactly once
    - ``advance()``: fetches the next entry, updating ``latest`` and
      ``exhausted`` together, and resolves to that entry or None

    Distinct sources must not share mutable state, because the merge calls
    ``advance()`` on many of them concurrently. A freshly opened source
    should already hold its first entry in ``latest``.
    """

    @property
    def latest(self) -> Any | None:
        ...

    @property
    def exhausted(self) -> bool:
        ...

    async def advance(self) -> Any | None:
        """Fetch the next entry; None signals exhaustion."""
        ...


@runtime_checkable
class SyncLogSourcePort(Protocol):
    """
    Port for synchronous log sources.

    Same contract as LogSourcePort, with a blocking ``pop()`` in place
    of ``advance()``.
    """

    @property
    def latest(self) -> Any | None:
        ...

    @property
    def exhausted(self) -> bool:
        ...

    def pop(self) -> Any | None:
        """Fetch the next entry; None signals exhaustion."""
        ...


@runtime_checkable
class LogSinkPort(Protocol):
    """
    Port for merge output.

    ``emit`` is called once per entry in non-decreasing timestamp order;
    ``complete`` is called exactly once, after the last ``emit``.
    """

    def emit(self, entry: Any) -> None:
        ...

    def complete(self) -> None:
        ...
