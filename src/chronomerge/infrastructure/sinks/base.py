"""
Base sink class for chronomerge sinks.
"""

from abc import ABC, abstractmethod
from typing import Any

from chronomerge.core.exceptions import MergeStateError

__all__ = ["BaseSink"]


class BaseSink(ABC):
    """
    Base class for all sinks.

    Enforces the sink lifecycle: any number of ``emit`` calls followed by
    exactly one ``complete``. Emitting after completion, or completing
    twice, raises MergeStateError.

    Subclasses must implement:
        - _write(entry) -> None

    Optionally override:
        - _finish() -> None
    """

    def __init__(self):
        """Initialize the sink."""
        self.emitted = 0
        self.completed = False

    def emit(self, entry: Any) -> None:
        """Render one entry."""
        if self.completed:
            raise MergeStateError(f"{type(self).__name__} received an entry after completion")
        self._write(entry)
        self.emitted += 1

    def complete(self) -> None:
        """Signal that the merged stream has ended."""
        if self.completed:
            raise MergeStateError(f"{type(self).__name__} completed more than once")
        self.completed = True
        self._finish()

    @abstractmethod
    def _write(self, entry: Any) -> None:
        """Write a single entry."""
        pass

    def _finish(self) -> None:
        """Hook called once on completion."""
        pass
