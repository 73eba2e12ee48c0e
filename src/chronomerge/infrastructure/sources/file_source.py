"""
File source adapter for chronomerge.

Streams a log file line by line and turns it into timestamped entries,
without loading the file into memory.
"""

import asyncio
import threading
from pathlib import Path
from typing import Iterator

from chronomerge.core.exceptions import ParseError
from chronomerge.core.timestamps import split_timestamp
from chronomerge.domain.entities import LogEntry
from chronomerge.infrastructure.sources.memory_source import IterableLogSource

__all__ = ["FileLogSource", "read_entries"]


def read_entries(
    lines: Iterator[str],
    source_name: str | None = None,
) -> Iterator[LogEntry]:
    """
    Group raw lines into timestamped entries.

    Lines without a leading timestamp (tracebacks, wrapped messages) are
    appended to the previous entry. Blank lines are skipped.

    Args:
        lines: Raw lines, without trailing newlines
        source_name: Name recorded on each entry

    Yields:
        LogEntry objects in file order

    Raises:
        ParseError: If the first non-blank line carries no timestamp
    """
    pending: LogEntry | None = None

    for line_number, line in enumerate(lines, 1):
        if not line.strip():
            continue

        timestamp, rest = split_timestamp(line)
        if timestamp is None:
            if pending is None:
                raise ParseError(
                    "No timestamp found before first continuation line",
                    line=line,
                    line_number=line_number,
                    source_name=source_name,
                )
            pending.message = f"{pending.message}\n{line}"
            pending.raw = f"{pending.raw}\n{line}"
            continue

        if pending is not None:
            yield pending
        pending = LogEntry(
            timestamp=timestamp,
            message=rest,
            source=source_name,
            line_number=line_number,
            raw=line,
        )

    if pending is not None:
        yield pending


class FileLogSource(IterableLogSource):
    """
    Source adapter for a text log file.

    ``advance()`` reads in a worker thread so that many files can be
    fetched concurrently without blocking the event loop. The file is
    closed when the source is exhausted or ``close()`` is called.

    A fetch abandoned by a timeout keeps reading in its thread; ``close()``
    waits for that read to finish. Reads that start after ``close()`` return
    None without touching the file and leave the source exhausted.

    Example:
        source = FileLogSource("/var/log/app.log")
        print(source.latest.timestamp, source.latest.message)
    """

    def __init__(
        self,
        path: str | Path,
        encoding: str = "utf-8",
        errors: str = "replace",
        name: str | None = None,
    ):
        """
        Initialize file source.

        Args:
            path: Path to log file
            encoding: File encoding (default: utf-8)
            errors: How to handle encoding errors (default: replace)
            name: Display name (default: the file name)

        Raises:
            FileNotFoundError: If the file does not exist
            ParseError: If the file does not start with a timestamped line
        """
        self.path = Path(path)
        self.encoding = encoding
        self.errors = errors

        if not self.path.exists():
            raise FileNotFoundError(f"File not found: {self.path}")

        # held by reads in worker threads and by close()
        self._lock = threading.RLock()
        self._file = open(self.path, "r", encoding=self.encoding, errors=self.errors)
        source_name = name or self.path.name
        lines = (line.rstrip("\n\r") for line in self._file)
        try:
            super().__init__(read_entries(lines, source_name), name=source_name)
        except ParseError:
            self._file.close()
            raise
        if self.exhausted:
            self.close()

    def pop(self) -> LogEntry | None:
        with self._lock:
            if self._file.closed:
                self._latest = None
                self._exhausted = True
                return None
            entry = super().pop()
            if entry is None:
                self.close()
            return entry

    async def advance(self) -> LogEntry | None:
        return await asyncio.to_thread(self.pop)

    def close(self) -> None:
        """Close the underlying file, waiting for a read in progress."""
        with self._lock:
            if not self._file.closed:
                self._file.close()

    def metadata(self) -> dict[str, str]:
        """Get source metadata."""
        stat = self.path.stat()
        return {
            "source_type": "file",
            "path": str(self.path.absolute()),
            "name": self.name,
            "size_bytes": str(stat.st_size),
        }
