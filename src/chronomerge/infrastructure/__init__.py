"""
Infrastructure layer for chronomerge.

Contains adapters that implement the ports defined in the domain layer:
sources that produce entries and sinks that consume the merged stream.
"""

from chronomerge.infrastructure.sources import (
    IterableLogSource,
    FileLogSource,
    SyntheticLogSource,
    generate_entries,
    read_entries,
)
from chronomerge.infrastructure.sinks import (
    BaseSink,
    CollectingSink,
    OrderCheckingSink,
    ConsoleSink,
    JsonLinesSink,
)

__all__ = [
    # Sources
    "IterableLogSource",
    "FileLogSource",
    "SyntheticLogSource",
    "generate_entries",
    "read_entries",
    # Sinks
    "BaseSink",
    "CollectingSink",
    "OrderCheckingSink",
    "ConsoleSink",
    "JsonLinesSink",
]
