"""
chronomerge - Merge many pre-sorted log sources into one chronological stream.

Sources are fetched asynchronously and in batches: the merge keeps a bounded
number of entries per source in a heap and refills many sources in one
concurrent round, so fetch latency is paid per batch rather than per entry.

Usage:
    from chronomerge import merge, merge_files, MergeConfig

    # Merge log files to the console
    merge_files(["app.log", "nginx.log"])

    # Merge your own sources into your own sink
    from chronomerge import IterableLogSource, CollectingSink
    sink = CollectingSink()
    stats = merge([IterableLogSource(a), IterableLogSource(b)], sink)
    print(stats.emitted, stats.fetch_rounds)

    # Inside a running event loop
    from chronomerge import MergeLogsUseCase
    stats = await MergeLogsUseCase(sources, sink, MergeConfig(max_depth=32)).execute()
"""

__version__ = "0.1.0"

import asyncio
from pathlib import Path
from typing import Any, Iterable

from chronomerge.core.exceptions import (
    ChronoMergeError,
    ConfigurationError,
    SourceFetchError,
    FetchTimeoutError,
    MergeStateError,
    OrderViolationError,
    ParseError,
)
from chronomerge.core.config import MergeConfig
from chronomerge.core.logging import configure_logging

# Domain
from chronomerge.domain.entities import LogEntry, BufferedItem, MergeStats
from chronomerge.domain.heap import PriorityBuffer
from chronomerge.domain.services import LogSourcePort, SyncLogSourcePort, LogSinkPort

# Application
from chronomerge.application import (
    MERGE_MODES,
    CapacityTracker,
    PrefetchScheduler,
    MergeLogsUseCase,
    SerialMergeLogsUseCase,
    SyncMergeLogsUseCase,
    create_merge,
)

# Infrastructure adapters
from chronomerge.infrastructure import (
    # Sources
    IterableLogSource,
    FileLogSource,
    SyntheticLogSource,
    # Sinks
    BaseSink,
    CollectingSink,
    OrderCheckingSink,
    ConsoleSink,
    JsonLinesSink,
)

__all__ = [
    # Version
    "__version__",
    # Exceptions
    "ChronoMergeError",
    "ConfigurationError",
    "SourceFetchError",
    "FetchTimeoutError",
    "MergeStateError",
    "OrderViolationError",
    "ParseError",
    # Configuration
    "MergeConfig",
    "configure_logging",
    # Domain
    "LogEntry",
    "BufferedItem",
    "MergeStats",
    "PriorityBuffer",
    "LogSourcePort",
    "SyncLogSourcePort",
    "LogSinkPort",
    # Application
    "MERGE_MODES",
    "CapacityTracker",
    "PrefetchScheduler",
    "MergeLogsUseCase",
    "SerialMergeLogsUseCase",
    "SyncMergeLogsUseCase",
    "create_merge",
    # Sources
    "IterableLogSource",
    "FileLogSource",
    "SyntheticLogSource",
    # Sinks
    "BaseSink",
    "CollectingSink",
    "OrderCheckingSink",
    "ConsoleSink",
    "JsonLinesSink",
    # Convenience functions
    "merge",
    "merge_files",
]


def merge(
    sources: Iterable[Any],
    sink: LogSinkPort,
    mode: str = "prefetch",
    config: MergeConfig | None = None,
) -> MergeStats:
    """
    Merge sources into a sink, blocking until the merge completes.

    Starts its own event loop for the async modes, so it cannot be called
    from inside a running loop; await the use case's ``execute()`` there.

    Args:
        sources: Sources to merge
        sink: Destination for merged entries
        mode: "prefetch" (default), "serial" or "sync"
        config: Refill policy for the prefetching merge

    Returns:
        MergeStats for the completed merge
    """
    use_case = create_merge(mode, sources, sink, config)
    if use_case.is_async:
        return asyncio.run(use_case.execute())
    return use_case.execute()


def merge_files(
    paths: Iterable[str | Path],
    sink: LogSinkPort | None = None,
    mode: str = "prefetch",
    config: MergeConfig | None = None,
    encoding: str = "utf-8",
) -> MergeStats:
    """
    Merge log files chronologically.

    Args:
        paths: Log files, each already in chronological order
        sink: Destination (default: ConsoleSink printing to stdout)
        mode: "prefetch" (default), "serial" or "sync"
        config: Refill policy for the prefetching merge
        encoding: File encoding

    Returns:
        MergeStats for the completed merge

    Example:
        stats = merge_files(["app.log", "db.log"], sink=JsonLinesSink())
    """
    sources: list[FileLogSource] = []
    try:
        for path in paths:
            sources.append(FileLogSource(path, encoding=encoding))
        return merge(sources, sink or ConsoleSink(), mode=mode, config=config)
    finally:
        for source in sources:
            source.close()
