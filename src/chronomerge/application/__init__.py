"""
Application layer for chronomerge.

Contains the merge use cases and the per-merge state they own: the
capacity tracker and the prefetch scheduler.
"""

from chronomerge.application.capacity import CapacityTracker
from chronomerge.application.prefetch import PrefetchScheduler
from chronomerge.application.merge_logs import (
    MERGE_MODES,
    MergeLogsUseCase,
    SerialMergeLogsUseCase,
    SyncMergeLogsUseCase,
    create_merge,
)

__all__ = [
    "CapacityTracker",
    "PrefetchScheduler",
    "MERGE_MODES",
    "MergeLogsUseCase",
    "SerialMergeLogsUseCase",
    "SyncMergeLogsUseCase",
    "create_merge",
]
