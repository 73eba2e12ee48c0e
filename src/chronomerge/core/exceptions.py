"""
Custom exceptions for chronomerge.
"""

from typing import Any

__all__ = [
    "ChronoMergeError",
    "ConfigurationError",
    "SourceFetchError",
    "FetchTimeoutError",
    "MergeStateError",
    "OrderViolationError",
    "ParseError",
]


class ChronoMergeError(Exception):
    """Base exception for all chronomerge errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} - {self.details}"
        return self.message


class ConfigurationError(ChronoMergeError):
    """Raised when merge configuration is invalid."""

    def __init__(self, message: str, config_key: str | None = None):
        details = {}
        if config_key is not None:
            details["config_key"] = config_key
        super().__init__(message, details)
        self.config_key = config_key


class SourceFetchError(ChronoMergeError):
    """
    Raised when a source fails to produce its next entry.

    A failing source fails the whole merge. The original exception is
    chained as ``__cause__``.
    """

    def __init__(self, message: str, source_name: str | None = None):
        details = {}
        if source_name is not None:
            details["source"] = source_name
        super().__init__(message, details)
        self.source_name = source_name


class FetchTimeoutError(SourceFetchError):
    """Raised when a single fetch exceeds the configured fetch timeout."""

    def __init__(self, source_name: str | None, timeout: float):
        super().__init__(
            f"Fetch did not complete within {timeout:g}s",
            source_name=source_name,
        )
        self.details["timeout"] = timeout
        self.timeout = timeout


class MergeStateError(ChronoMergeError):
    """Raised when a merge, its per-merge state or a sink is misused."""


class OrderViolationError(ChronoMergeError):
    """Raised when an entry is emitted with a timestamp earlier than its predecessor."""

    def __init__(self, previous: Any, current: Any):
        super().__init__(
            "Entry emitted out of chronological order",
            {"previous": str(previous), "current": str(current)},
        )
        self.previous = previous
        self.current = current


class ParseError(ChronoMergeError):
    """Raised when a log line cannot be turned into a timestamped entry."""

    def __init__(
        self,
        message: str,
        line: str | None = None,
        line_number: int | None = None,
        source_name: str | None = None,
    ):
        details = {}
        if line is not None:
            details["line"] = line[:100] + "..." if len(line) > 100 else line
        if line_number is not None:
            details["line_number"] = line_number
        if source_name is not None:
            details["source"] = source_name
        super().__init__(message, details)
        self.line = line
        self.line_number = line_number
        self.source_name = source_name
