"""
Merge logs use cases.

Orchestrates chronological merging of many pre-sorted sources into a sink.

Three strategies are provided:
1. MergeLogsUseCase - capacity-managed heap with batched concurrent prefetch
2. SerialMergeLogsUseCase - naive async merge, one fetch per emitted entry
3. SyncMergeLogsUseCase - heap merge over synchronous sources

All three emit the same entries in the same order when timestamps are
distinct; they differ only in how fetch latency is paid.
"""

import operator
import time
from typing import Any, Iterable

import structlog

from chronomerge.application.capacity import CapacityTracker
from chronomerge.application.prefetch import PrefetchScheduler, source_name
from chronomerge.core.config import MergeConfig
from chronomerge.core.exceptions import ConfigurationError, MergeStateError, SourceFetchError
from chronomerge.domain.entities import BufferedItem, MergeStats
from chronomerge.domain.heap import PriorityBuffer
from chronomerge.domain.services import LogSinkPort, LogSourcePort, SyncLogSourcePort

__all__ = [
    "MERGE_MODES",
    "MergeLogsUseCase",
    "SerialMergeLogsUseCase",
    "SyncMergeLogsUseCase",
    "create_merge",
]

logger = structlog.get_logger(__name__)


class _MergeUseCase:
    """Shared bookkeeping: one instance runs exactly one merge."""

    mode = "base"
    is_async = True

    def __init__(self, sources: Iterable[Any], sink: LogSinkPort):
        self.sources = list(sources)
        self.sink = sink

        seen: set[int] = set()
        for source in self.sources:
            if id(source) in seen:
                raise ConfigurationError(
                    f"Source {source_name(source)!r} passed more than once",
                    config_key="sources",
                )
            seen.add(id(source))

        self._executed = False

    def _start(self) -> float:
        if self._executed:
            raise MergeStateError(f"{type(self).__name__} has already been executed")
        self._executed = True
        return time.perf_counter()


class MergeLogsUseCase(_MergeUseCase):
    """
    Use case: merge asynchronous sources with batched prefetch.

    The merge runs in two phases:
    - priming: every source is filled to ``max_depth`` buffered entries
    - draining: the earliest buffered entry is removed and emitted; when its
      source's count drops below ``low_water``, every source below the
      ``medium`` threshold is topped up by ``low_water`` entries in one
      concurrent batch

    The hysteresis between ``low_water`` and ``medium`` lets many sources
    cross their low-water mark around the same time, so one batch refills
    them all. A source with an empty buffer is invisible to the heap, so
    no non-exhausted source is ever left with zero buffered entries while
    emission continues.

    Example:
        use_case = MergeLogsUseCase(sources, ConsoleSink(), MergeConfig())
        stats = await use_case.execute()
        print(f"{stats.emitted} entries in {stats.fetch_rounds} rounds")
    """

    mode = "prefetch"

    def __init__(
        self,
        sources: Iterable[LogSourcePort],
        sink: LogSinkPort,
        config: MergeConfig | None = None,
    ):
        """
        Initialize the use case.

        Args:
            sources: Sources to merge, each exclusively owned by this merge
            sink: Destination for merged entries
            config: Refill policy (defaults to MergeConfig())
        """
        super().__init__(sources, sink)
        self.config = config or MergeConfig()
        self.buffer: PriorityBuffer[BufferedItem] = PriorityBuffer(
            key=operator.attrgetter("entry.timestamp")
        )
        self.capacity = CapacityTracker(self.sources)
        self.scheduler = PrefetchScheduler(
            self.buffer,
            self.capacity,
            max_depth=self.config.max_depth,
            fetch_timeout=self.config.fetch_timeout,
        )
        self.refills = 0

    async def execute(self) -> MergeStats:
        """
        Execute the merge.

        Returns:
            MergeStats for the completed merge

        Raises:
            SourceFetchError: If any source fails to fetch; the sink is not
                completed in that case
            MergeStateError: If this use case has already been executed
        """
        started = self._start()
        emitted = 0

        logger.debug(
            "merge.priming",
            sources=len(self.sources),
            **self.config.to_dict(),
        )
        await self.scheduler.fill_times(self.sources, self.config.max_depth)

        while self.buffer:
            item = self.buffer.remove_min()
            self.sink.emit(item.entry)
            emitted += 1

            if self.capacity.decrement(item.source) < self.config.low_water:
                await self._refill()

        self.sink.complete()

        stats = MergeStats(
            mode=self.mode,
            emitted=emitted,
            fetch_rounds=self.scheduler.rounds,
            fetches=self.scheduler.fetches,
            refills=self.refills,
            peak_depth=self.capacity.peaks(),
            elapsed_seconds=time.perf_counter() - started,
        )
        logger.debug("merge.complete", **stats.to_dict())
        return stats

    async def _refill(self) -> None:
        """Top up every live source below the medium threshold in one batch."""
        low = [
            source for source in self.sources
            if not source.exhausted and self.capacity.count(source) < self.config.medium
        ]
        if not low:
            return

        self.refills += 1
        logger.debug("merge.refill", refill=self.refills, sources=len(low))
        await self.scheduler.fill_times(low, self.config.low_water)


class SerialMergeLogsUseCase(_MergeUseCase):
    """
    Use case: naive asynchronous merge.

    Repeatedly picks the live source with the earliest current entry,
    emits it, and waits for that source's next fetch before choosing
    again. Every emitted entry pays one full fetch latency; this is the
    reference ordering the prefetching merge must reproduce.
    """

    mode = "serial"

    async def execute(self) -> MergeStats:
        started = self._start()
        emitted = 0
        fetches = 0

        for source in self.sources:
            if source.latest is None and not source.exhausted:
                await self._advance(source)
                fetches += 1

        active = [source for source in self.sources if not source.exhausted]
        while active:
            source = min(active, key=lambda s: s.latest.timestamp)
            self.sink.emit(source.latest)
            emitted += 1

            await self._advance(source)
            fetches += 1
            if source.exhausted:
                logger.debug("source.exhausted", source=source_name(source))
                active.remove(source)

        self.sink.complete()
        return MergeStats(
            mode=self.mode,
            emitted=emitted,
            fetch_rounds=fetches,
            fetches=fetches,
            elapsed_seconds=time.perf_counter() - started,
        )

    async def _advance(self, source: LogSourcePort) -> Any:
        try:
            return await source.advance()
        except SourceFetchError:
            raise
        except Exception as e:
            raise SourceFetchError(f"Fetch failed: {e}", source_name=source_name(source)) from e


class SyncMergeLogsUseCase(_MergeUseCase):
    """
    Use case: heap merge over synchronous sources.

    The heap holds sources keyed by their current entry. After a source's
    entry is emitted it is popped and, unless exhausted, pushed back.
    """

    mode = "sync"
    is_async = False

    def execute(self) -> MergeStats:
        started = self._start()
        emitted = 0
        fetches = 0

        heap: PriorityBuffer[SyncLogSourcePort] = PriorityBuffer(
            key=operator.attrgetter("latest.timestamp")
        )
        for source in self.sources:
            if source.latest is None and not source.exhausted:
                self._pop(source)
                fetches += 1
            if not source.exhausted:
                heap.insert(source)

        while heap:
            source = heap.remove_min()
            self.sink.emit(source.latest)
            emitted += 1

            self._pop(source)
            fetches += 1
            if source.exhausted:
                logger.debug("source.exhausted", source=source_name(source))
            else:
                heap.insert(source)

        self.sink.complete()
        return MergeStats(
            mode=self.mode,
            emitted=emitted,
            fetch_rounds=fetches,
            fetches=fetches,
            elapsed_seconds=time.perf_counter() - started,
        )

    def _pop(self, source: SyncLogSourcePort) -> Any:
        try:
            return source.pop()
        except SourceFetchError:
            raise
        except Exception as e:
            raise SourceFetchError(f"Fetch failed: {e}", source_name=source_name(source)) from e


MERGE_MODES: dict[str, type[_MergeUseCase]] = {
    MergeLogsUseCase.mode: MergeLogsUseCase,
    SerialMergeLogsUseCase.mode: SerialMergeLogsUseCase,
    SyncMergeLogsUseCase.mode: SyncMergeLogsUseCase,
}


def create_merge(
    mode: str,
    sources: Iterable[Any],
    sink: LogSinkPort,
    config: MergeConfig | None = None,
) -> _MergeUseCase:
    """
    Build the merge use case for ``mode``.

    Args:
        mode: One of MERGE_MODES ("prefetch", "serial", "sync")
        sources: Sources to merge
        sink: Destination for merged entries
        config: Refill policy; only used by the prefetching merge

    Raises:
        ConfigurationError: If the mode is unknown
    """
    if mode not in MERGE_MODES:
        raise ConfigurationError(
            f"Unknown merge mode: {mode} (expected one of {', '.join(MERGE_MODES)})",
            config_key="mode",
        )
    if mode == MergeLogsUseCase.mode:
        return MergeLogsUseCase(sources, sink, config)
    return MERGE_MODES[mode](sources, sink)
