"""
Source adapters for chronomerge.

These implement the LogSourcePort and SyncLogSourcePort protocols.
"""

from chronomerge.infrastructure.sources.memory_source import IterableLogSource
from chronomerge.infrastructure.sources.file_source import FileLogSource, read_entries
from chronomerge.infrastructure.sources.synthetic import SyntheticLogSource, generate_entries

__all__ = [
    "IterableLogSource",
    "FileLogSource",
    "read_entries",
    "SyntheticLogSource",
    "generate_entries",
]
