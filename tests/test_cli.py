"""
Tests for CLI interface.
"""

import json

import pytest
from click.testing import CliRunner

from chronomerge import __version__
from chronomerge.cli.main import cli


@pytest.fixture
def runner():
    """Create a CLI test runner."""
    return CliRunner()


@pytest.fixture
def log_files(tmp_path):
    """Two interleaved log files."""
    app = tmp_path / "app.log"
    app.write_text(
        "2026-01-27 10:00:01 INFO app started\n"
        "2026-01-27 10:00:03 ERROR app failed\n"
        "Traceback (most recent call last):\n"
        "ValueError: bad input\n"
        "2026-01-27 10:00:05 INFO app recovered\n"
    )
    web = tmp_path / "web.log"
    web.write_text(
        '10.0.0.1 - - [27/Jan/2026:10:00:02 +0000] "GET / HTTP/1.1" 200 512\n'
        '10.0.0.2 - - [27/Jan/2026:10:00:04 +0000] "GET /api HTTP/1.1" 500 12\n'
    )
    return app, web


def json_records(output: str) -> list[dict]:
    return [json.loads(line) for line in output.splitlines() if line.startswith("{")]


class TestCLI:
    """Tests for CLI commands."""

    def test_cli_version(self, runner):
        """Test --version flag."""
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_cli_help(self, runner):
        """Test --help flag."""
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "merge" in result.output
        assert "simulate" in result.output

    def test_merge_help(self, runner):
        result = runner.invoke(cli, ["merge", "--help"])
        assert result.exit_code == 0
        assert "--max-depth" in result.output
        assert "--low-water" in result.output
        assert "--check-order" in result.output


class TestMergeCommand:
    """Tests for merge command."""

    def test_merge_compact(self, runner, log_files):
        result = runner.invoke(cli, ["merge", *map(str, log_files)])

        assert result.exit_code == 0
        lines = [line for line in result.output.splitlines() if line.startswith("2026-")]
        assert len(lines) == 5
        assert "app started" in lines[0]
        assert "GET / HTTP/1.1" in lines[1]
        assert "app failed" in lines[2]
        assert "Traceback" in result.output

    def test_merge_json(self, runner, log_files):
        result = runner.invoke(cli, ["merge", "--output", "json", *map(str, log_files)])

        assert result.exit_code == 0
        records = json_records(result.output)
        assert [record["timestamp"][-2:] for record in records] == ["01", "02", "03", "04", "05"]
        assert [record["source"] for record in records] == [
            "app.log", "web.log", "app.log", "web.log", "app.log",
        ]

    @pytest.mark.parametrize("mode", ["prefetch", "serial", "sync"])
    def test_merge_modes(self, runner, log_files, mode):
        result = runner.invoke(
            cli, ["merge", "--mode", mode, "--output", "json", *map(str, log_files)]
        )
        assert result.exit_code == 0
        assert len(json_records(result.output)) == 5

    def test_merge_small_depth(self, runner, log_files):
        result = runner.invoke(
            cli,
            ["merge", "--max-depth", "2", "--low-water", "1", "-o", "json", *map(str, log_files)],
        )
        assert result.exit_code == 0
        assert len(json_records(result.output)) == 5

    def test_merge_stats(self, runner, log_files):
        result = runner.invoke(cli, ["merge", "--stats", *map(str, log_files)])
        assert result.exit_code == 0
        assert "Merge Statistics" in result.output

    def test_check_order_passes(self, runner, log_files):
        result = runner.invoke(cli, ["merge", "--check-order", *map(str, log_files)])
        assert result.exit_code == 0

    def test_check_order_detects_unsorted_file(self, runner, tmp_path):
        unsorted = tmp_path / "unsorted.log"
        unsorted.write_text(
            "2026-01-27 10:00:05 late\n"
            "2026-01-27 10:00:01 early\n"
        )
        result = runner.invoke(cli, ["merge", "--check-order", str(unsorted)])
        assert result.exit_code == 1
        assert "out of chronological order" in result.output

    def test_unparseable_file(self, runner, tmp_path):
        bad = tmp_path / "bad.log"
        bad.write_text("no timestamp at all\n")
        result = runner.invoke(cli, ["merge", str(bad)])
        assert result.exit_code == 1
        assert "Merge failed" in result.output

    def test_out_of_range_epoch_file(self, runner, tmp_path):
        bad = tmp_path / "bad.jsonl"
        bad.write_text('{"ts": 99999999999999999999, "msg": "x"}\n')
        result = runner.invoke(cli, ["merge", str(bad)])
        assert result.exit_code == 1
        assert "Merge failed" in result.output

    def test_microsecond_epoch_file(self, runner, tmp_path):
        events = tmp_path / "events.jsonl"
        events.write_text(
            '{"ts": 1769508932500000, "msg": "first"}\n'
            '{"ts": 1769508933000000, "msg": "second"}\n'
        )
        result = runner.invoke(cli, ["merge", "-o", "json", str(events)])
        assert result.exit_code == 0
        records = json_records(result.output)
        assert len(records) == 2
        assert records[0]["timestamp"].startswith("2026-01-27")

    def test_missing_file(self, runner, tmp_path):
        result = runner.invoke(cli, ["merge", str(tmp_path / "missing.log")])
        assert result.exit_code != 0

    def test_requires_files(self, runner):
        result = runner.invoke(cli, ["merge"])
        assert result.exit_code != 0

    def test_invalid_config(self, runner, log_files):
        result = runner.invoke(
            cli, ["merge", "--max-depth", "2", "--low-water", "4", *map(str, log_files)]
        )
        assert result.exit_code == 1
        assert "Invalid configuration" in result.output

    def test_unknown_mode(self, runner, log_files):
        result = runner.invoke(cli, ["merge", "--mode", "parallel", *map(str, log_files)])
        assert result.exit_code != 0

    def test_verbose_json_logging(self, runner, log_files):
        result = runner.invoke(
            cli, ["--verbose", "--log-json", "merge", "-o", "json", *map(str, log_files)]
        )
        assert result.exit_code == 0
        events = [record.get("event") for record in json_records(result.output)]
        assert "merge.priming" in events
        assert "merge.complete" in events


class TestSimulateCommand:
    """Tests for simulate command."""

    def test_simulate_modes_agree(self, runner):
        result = runner.invoke(
            cli,
            ["simulate", "--sources", "5", "--entries", "10", "--max-latency", "0"],
        )
        assert result.exit_code == 0
        assert "prefetch" in result.output
        assert "serial" in result.output
        assert "identical output" in result.output

    def test_simulate_all_modes(self, runner):
        result = runner.invoke(
            cli,
            [
                "simulate", "-s", "4", "-n", "8", "--max-latency", "0",
                "-m", "prefetch", "-m", "serial", "-m", "sync",
                "--max-depth", "3", "--low-water", "1",
            ],
        )
        assert result.exit_code == 0
        assert "All 3 modes" in result.output

    def test_simulate_single_mode(self, runner):
        result = runner.invoke(
            cli, ["simulate", "-s", "3", "-n", "5", "--max-latency", "0", "-m", "sync"]
        )
        assert result.exit_code == 0
        assert "identical output" not in result.output

    def test_simulate_invalid_config(self, runner):
        result = runner.invoke(cli, ["simulate", "--low-water", "0"])
        assert result.exit_code == 1
