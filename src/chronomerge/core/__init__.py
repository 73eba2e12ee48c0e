"""
Core utilities for chronomerge: exceptions, configuration, logging and
timestamp parsing.
"""

from chronomerge.core.exceptions import (
    ChronoMergeError,
    ConfigurationError,
    SourceFetchError,
    FetchTimeoutError,
    MergeStateError,
    OrderViolationError,
    ParseError,
)
from chronomerge.core.config import (
    DEFAULT_MAX_DEPTH,
    DEFAULT_LOW_WATER,
    DEFAULT_FETCH_TIMEOUT,
    MergeConfig,
)
from chronomerge.core.logging import configure_logging, get_logger
from chronomerge.core.timestamps import parse_timestamp, split_timestamp

__all__ = [
    # Exceptions
    "ChronoMergeError",
    "ConfigurationError",
    "SourceFetchError",
    "FetchTimeoutError",
    "MergeStateError",
    "OrderViolationError",
    "ParseError",
    # Configuration
    "DEFAULT_MAX_DEPTH",
    "DEFAULT_LOW_WATER",
    "DEFAULT_FETCH_TIMEOUT",
    "MergeConfig",
    # Logging
    "configure_logging",
    "get_logger",
    # Timestamps
    "parse_timestamp",
    "split_timestamp",
]
