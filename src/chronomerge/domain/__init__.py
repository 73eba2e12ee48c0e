"""
Domain layer for chronomerge.

Contains the entities that flow through a merge, the port protocols for
sources and sinks, and the priority buffer that orders buffered entries.
This layer has no dependencies on infrastructure.
"""

from chronomerge.domain.entities import (
    LogEntry,
    BufferedItem,
    MergeStats,
)
from chronomerge.domain.heap import PriorityBuffer
from chronomerge.domain.services import (
    TimestampedEntry,
    LogSourcePort,
    SyncLogSourcePort,
    LogSinkPort,
)

__all__ = [
    # Entities
    "LogEntry",
    "BufferedItem",
    "MergeStats",
    # Data structures
    "PriorityBuffer",
    # Ports
    "TimestampedEntry",
    "LogSourcePort",
    "SyncLogSourcePort",
    "LogSinkPort",
]
