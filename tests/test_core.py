"""
Tests for core utilities: configuration, exceptions, timestamps and logging.
"""

import io
import json
import logging
from datetime import datetime

import pytest
import structlog

from chronomerge.core import (
    DEFAULT_LOW_WATER,
    DEFAULT_MAX_DEPTH,
    ChronoMergeError,
    ConfigurationError,
    FetchTimeoutError,
    MergeConfig,
    OrderViolationError,
    ParseError,
    SourceFetchError,
    configure_logging,
    get_logger,
    parse_timestamp,
    split_timestamp,
)


class TestMergeConfig:
    """Tests for MergeConfig."""

    def test_defaults(self):
        config = MergeConfig()
        assert config.max_depth == DEFAULT_MAX_DEPTH
        assert config.low_water == DEFAULT_LOW_WATER
        assert config.medium == (DEFAULT_LOW_WATER + DEFAULT_MAX_DEPTH) // 2
        assert config.fetch_timeout is None

    def test_medium_defaults_to_midpoint(self):
        assert MergeConfig(max_depth=32, low_water=8).medium == 20

    def test_smallest_policy(self):
        """MAX=2, LOW=1 is valid and puts medium at LOW."""
        config = MergeConfig(max_depth=2, low_water=1)
        assert config.medium == 1

    def test_explicit_medium(self):
        assert MergeConfig(max_depth=10, low_water=2, medium=10).medium == 10

    @pytest.mark.parametrize(
        "options, key",
        [
            ({"low_water": 0}, "low_water"),
            ({"max_depth": 4, "low_water": 4}, "max_depth"),
            ({"max_depth": 4, "low_water": 6}, "max_depth"),
            ({"max_depth": 10, "low_water": 2, "medium": 1}, "medium"),
            ({"max_depth": 10, "low_water": 2, "medium": 11}, "medium"),
            ({"fetch_timeout": 0}, "fetch_timeout"),
            ({"fetch_timeout": -1.5}, "fetch_timeout"),
        ],
    )
    def test_invalid(self, options, key):
        with pytest.raises(ConfigurationError) as exc_info:
            MergeConfig(**options)
        assert exc_info.value.config_key == key

    def test_to_dict(self):
        assert MergeConfig(max_depth=8, low_water=2, fetch_timeout=1.0).to_dict() == {
            "max_depth": 8,
            "low_water": 2,
            "medium": 5,
            "fetch_timeout": 1.0,
        }


class TestExceptions:
    """Tests for the exception hierarchy."""

    def test_base_message(self):
        error = ChronoMergeError("boom")
        assert str(error) == "boom"
        assert error.details == {}

    def test_details_in_str(self):
        error = ChronoMergeError("boom", {"source": "a"})
        assert str(error) == "boom - {'source': 'a'}"

    def test_hierarchy(self):
        assert issubclass(FetchTimeoutError, SourceFetchError)
        for cls in (ConfigurationError, SourceFetchError, OrderViolationError, ParseError):
            assert issubclass(cls, ChronoMergeError)

    def test_source_fetch_error(self):
        error = SourceFetchError("Fetch failed", source_name="app.log")
        assert error.source_name == "app.log"
        assert error.details == {"source": "app.log"}

    def test_fetch_timeout_error(self):
        error = FetchTimeoutError("db", 2.5)
        assert error.message == "Fetch did not complete within 2.5s"
        assert error.details == {"source": "db", "timeout": 2.5}

    def test_order_violation_error(self):
        previous, current = datetime(2026, 1, 2), datetime(2026, 1, 1)
        error = OrderViolationError(previous, current)
        assert error.previous == previous
        assert error.current == current
        assert "out of chronological order" in str(error)

    def test_parse_error_truncates_line(self):
        error = ParseError("bad", line="x" * 150, line_number=7, source_name="a.log")
        assert error.details["line"] == "x" * 100 + "..."
        assert error.details["line_number"] == 7
        assert error.details["source"] == "a.log"


class TestParseTimestamp:
    """Tests for parse_timestamp."""

    @pytest.mark.parametrize(
        "value, expected",
        [
            ("2026-01-27T10:15:32", datetime(2026, 1, 27, 10, 15, 32)),
            ("2026-01-27T10:15:32.123", datetime(2026, 1, 27, 10, 15, 32, 123000)),
            ("2026-01-27 10:15:32", datetime(2026, 1, 27, 10, 15, 32)),
            ("2026-01-27 10:15:32,500", datetime(2026, 1, 27, 10, 15, 32, 500000)),
            ("2026/01/27 10:15:32", datetime(2026, 1, 27, 10, 15, 32)),
            ("27/Jan/2026:10:15:32", datetime(2026, 1, 27, 10, 15, 32)),
        ],
    )
    def test_naive_formats(self, value, expected):
        assert parse_timestamp(value) == expected

    def test_zulu_becomes_naive_utc(self):
        assert parse_timestamp("2026-01-27T10:15:32Z") == datetime(2026, 1, 27, 10, 15, 32)

    def test_offset_converted_to_utc(self):
        result = parse_timestamp("27/Jan/2026:12:15:32 +0200")
        assert result == datetime(2026, 1, 27, 10, 15, 32)
        assert result.tzinfo is None

    def test_dateutil_fallback(self):
        assert parse_timestamp("January 27, 2026 10:15") == datetime(2026, 1, 27, 10, 15)

    @pytest.mark.parametrize("value", ["", "not a timestamp"])
    def test_unparseable(self, value):
        assert parse_timestamp(value) is None


class TestSplitTimestamp:
    """Tests for split_timestamp."""

    def test_iso_prefix(self):
        timestamp, rest = split_timestamp("2026-01-27T10:15:32.123Z INFO started")
        assert timestamp == datetime(2026, 1, 27, 10, 15, 32, 123000)
        assert rest == "INFO started"

    def test_python_logging_prefix(self):
        timestamp, rest = split_timestamp("2026-01-27 10:15:32,123 ERROR failed")
        assert timestamp == datetime(2026, 1, 27, 10, 15, 32, 123000)
        assert rest == "ERROR failed"

    def test_bracketed_prefix(self):
        timestamp, rest = split_timestamp("[2026-01-27 10:15:32] worker ready")
        assert timestamp == datetime(2026, 1, 27, 10, 15, 32)
        assert rest == "worker ready"

    def test_nginx_error_prefix(self):
        timestamp, rest = split_timestamp("2026/01/27 10:15:32 [error] 123#0: upstream timed out")
        assert timestamp == datetime(2026, 1, 27, 10, 15, 32)
        assert rest.startswith("[error]")

    def test_clf_keeps_client_prefix(self):
        line = '192.168.1.1 - - [27/Jan/2026:10:15:32 +0000] "GET / HTTP/1.1" 200 512'
        timestamp, rest = split_timestamp(line)
        assert timestamp == datetime(2026, 1, 27, 10, 15, 32)
        assert rest == '192.168.1.1 - - "GET / HTTP/1.1" 200 512'

    def test_syslog_prefix(self):
        timestamp, rest = split_timestamp("Jan 27 10:15:32 host sshd[42]: accepted")
        assert (timestamp.month, timestamp.day, timestamp.hour) == (1, 27, 10)
        assert rest == "host sshd[42]: accepted"

    def test_epoch_seconds(self):
        timestamp, rest = split_timestamp("1769508932 job done")
        assert timestamp == datetime(2026, 1, 27, 10, 15, 32)
        assert rest == "job done"

    def test_epoch_milliseconds(self):
        timestamp, rest = split_timestamp("1769508932500 job done")
        assert timestamp == datetime(2026, 1, 27, 10, 15, 32, 500000)

    def test_json_line_keeps_full_text(self):
        line = json.dumps({"timestamp": "2026-01-27T10:15:32Z", "message": "hi"})
        timestamp, rest = split_timestamp(line)
        assert timestamp == datetime(2026, 1, 27, 10, 15, 32)
        assert rest == line

    def test_json_alternate_key(self):
        timestamp, _ = split_timestamp('{"@timestamp": "2026-01-27T10:15:32", "msg": "x"}')
        assert timestamp == datetime(2026, 1, 27, 10, 15, 32)

    def test_json_numeric_epoch(self):
        timestamp, _ = split_timestamp('{"ts": 1769508932, "msg": "x"}')
        assert timestamp == datetime(2026, 1, 27, 10, 15, 32)

    @pytest.mark.parametrize("value", ["1769508932500000", "1769508932500000000"])
    def test_json_sub_second_epochs(self, value):
        """Microsecond and nanosecond epochs are scaled to seconds."""
        timestamp, _ = split_timestamp(f'{{"ts": {value}, "msg": "x"}}')
        assert timestamp == datetime(2026, 1, 27, 10, 15, 32, 500000)

    def test_json_out_of_range_epoch(self):
        line = '{"ts": 99999999999999999999, "msg": "x"}'
        assert split_timestamp(line) == (None, line)

    def test_json_out_of_range_epoch_falls_through(self):
        timestamp, _ = split_timestamp(
            '{"timestamp": 99999999999999999999, "ts": 1769508932, "msg": "x"}'
        )
        assert timestamp == datetime(2026, 1, 27, 10, 15, 32)

    def test_json_without_timestamp(self):
        assert split_timestamp('{"message": "no time"}')[0] is None

    def test_invalid_json(self):
        assert split_timestamp("{not json")[0] is None

    @pytest.mark.parametrize(
        "line",
        [
            "Traceback (most recent call last):",
            '  File "app.py", line 10, in handle',
            "ValueError: bad input",
        ],
    )
    def test_continuation_lines(self, line):
        timestamp, rest = split_timestamp(line)
        assert timestamp is None
        assert rest == line


class TestLogging:
    """Tests for logging configuration."""

    def teardown_method(self):
        configure_logging(stream=io.StringIO())

    def test_console_output(self):
        stream = io.StringIO()
        configure_logging(level="DEBUG", stream=stream)

        get_logger("chronomerge.test").info("merge.refill", sources=3)

        output = stream.getvalue()
        assert "merge.refill" in output
        assert "sources=3" in output

    def test_json_output(self):
        stream = io.StringIO()
        configure_logging(json_output=True, level="DEBUG", stream=stream)

        get_logger("chronomerge.test").warning("prefetch.fetch_failed", source="a")

        record = json.loads(stream.getvalue().strip().splitlines()[-1])
        assert record["event"] == "prefetch.fetch_failed"
        assert record["source"] == "a"
        assert record["level"] == "warning"

    def test_level_filters_debug(self):
        stream = io.StringIO()
        configure_logging(level="WARNING", stream=stream)

        get_logger("chronomerge.test").debug("prefetch.round", round=1)

        assert stream.getvalue() == ""

    def test_stdlib_records_are_rendered(self):
        stream = io.StringIO()
        configure_logging(json_output=True, stream=stream)

        logging.getLogger("third.party").error("plain %s", "message")

        record = json.loads(stream.getvalue().strip())
        assert record["event"] == "plain message"

    def test_asyncio_logger_quiet_in_debug(self):
        configure_logging(level="DEBUG", stream=io.StringIO())
        assert logging.getLogger("asyncio").level == logging.WARNING

    def test_structlog_loggers_not_cached(self):
        configure_logging(stream=io.StringIO())
        assert structlog.get_config()["cache_logger_on_first_use"] is False
