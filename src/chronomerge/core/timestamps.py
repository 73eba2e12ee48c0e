"""
Timestamp recognition for log lines.

Aware values are converted to UTC and stripped of tzinfo; naive values are
kept as they are, so entries from different sources always compare.
"""

import json
import re
from datetime import datetime, timezone

from dateutil import parser as dateutil_parser

__all__ = ["TIMESTAMP_FORMATS", "parse_timestamp", "split_timestamp"]


# Common timestamp formats to try
TIMESTAMP_FORMATS = [
    # ISO 8601 variants
    "%Y-%m-%dT%H:%M:%S.%f%z",
    "%Y-%m-%dT%H:%M:%S%z",
    "%Y-%m-%dT%H:%M:%S.%f",
    "%Y-%m-%dT%H:%M:%S",
    # Common log formats
    "%Y-%m-%d %H:%M:%S.%f",
    "%Y-%m-%d %H:%M:%S,%f",  # Python logging
    "%Y-%m-%d %H:%M:%S",
    # Apache/Nginx CLF format
    "%d/%b/%Y:%H:%M:%S %z",
    "%d/%b/%Y:%H:%M:%S",
    # Nginx error log
    "%Y/%m/%d %H:%M:%S",
]

# Keys checked, in order, when a line is a JSON object
JSON_TIMESTAMP_KEYS = ("timestamp", "time", "@timestamp", "ts")

_LEADING_PATTERNS = [
    # 2026-01-27T10:15:32.123Z, 2026-01-27 10:15:32,123 +02:00
    re.compile(
        r"^\[?(\d{4}-\d{2}-\d{2}[T ]\d{2}:\d{2}:\d{2}(?:[.,]\d+)?"
        r"(?:Z|\s?[+-]\d{2}:?\d{2})?)\]?\s*"
    ),
    # 2026/01/27 10:15:32
    re.compile(r"^\[?(\d{4}/\d{2}/\d{2} \d{2}:\d{2}:\d{2})\]?\s*"),
    # 192.168.1.1 - - [27/Jan/2026:10:15:32 +0000] "GET / HTTP/1.1"
    re.compile(r"^(?P<prefix>.*?)\[(\d{2}/\w{3}/\d{4}:\d{2}:\d{2}:\d{2}(?: [+-]\d{4})?)\]\s*"),
    # Jan 27 10:15:32
    re.compile(r"^([A-Z][a-z]{2} +\d{1,2} \d{2}:\d{2}:\d{2})\s*"),
]

_EPOCH_PATTERN = re.compile(r"^(\d{10}(?:\.\d+)?|\d{13})\s+")

# Integer epochs by digit count: milliseconds, microseconds, nanoseconds
_EPOCH_DIVISORS = {13: 1_000, 16: 1_000_000, 19: 1_000_000_000}


def _normalize(value: datetime) -> datetime:
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def parse_timestamp(value: str) -> datetime | None:
    """
    Try to parse a timestamp string using multiple formats.

    Args:
        value: Timestamp string to parse

    Returns:
        Naive datetime, or None if parsing fails
    """
    if not value:
        return None

    value = value.strip()
    if value.endswith("Z"):
        value = value[:-1] + "+0000"

    # Try explicit formats first (faster)
    for fmt in TIMESTAMP_FORMATS:
        try:
            return _normalize(datetime.strptime(value, fmt))
        except ValueError:
            continue

    # Fall back to dateutil for everything else
    try:
        return _normalize(dateutil_parser.parse(value))
    except (ValueError, OverflowError, TypeError):
        return None


def _split_json(line: str) -> tuple[datetime | None, str]:
    try:
        data = json.loads(line)
    except json.JSONDecodeError:
        return None, line
    if not isinstance(data, dict):
        return None, line

    for key in JSON_TIMESTAMP_KEYS:
        value = data.get(key)
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            timestamp = _from_epoch(str(value))
            if timestamp is not None:
                return timestamp, line
            continue
        if isinstance(value, str):
            timestamp = parse_timestamp(value)
            if timestamp is not None:
                return timestamp, line
    return None, line


def _from_epoch(value: str) -> datetime | None:
    try:
        if value.isdigit() and len(value) in _EPOCH_DIVISORS:
            seconds = int(value) / _EPOCH_DIVISORS[len(value)]
        else:
            seconds = float(value)
        return datetime.fromtimestamp(seconds, tz=timezone.utc).replace(tzinfo=None)
    except (ValueError, OverflowError, OSError):
        return None


def split_timestamp(line: str) -> tuple[datetime | None, str]:
    """
    Split a log line into its leading timestamp and the remaining text.

    JSON lines keep their full text as the message.

    Args:
        line: Raw log line

    Returns:
        (timestamp, rest) where timestamp is None if none was recognized
    """
    if line.startswith("{"):
        return _split_json(line)

    for pattern in _LEADING_PATTERNS:
        match = pattern.match(line)
        if not match:
            continue
        timestamp = parse_timestamp(match.group(match.lastindex))
        if timestamp is None:
            continue
        prefix = match.groupdict().get("prefix") or ""
        return timestamp, prefix + line[match.end():]

    match = _EPOCH_PATTERN.match(line)
    if match:
        timestamp = _from_epoch(match.group(1))
        if timestamp is not None:
            return timestamp, line[match.end():]

    return None, line
