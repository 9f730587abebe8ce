"""Tests for progress reporting."""

import io
import logging
from unittest.mock import MagicMock

from rich.console import Console

from treedoc.llm.cost import ModelSpec
from treedoc.llm.registry import ModelRecord
from treedoc.progress import ConsoleProgress, ProgressReporter, SafeReporter, Status


def _console():
    return Console(file=io.StringIO(), width=120, force_terminal=False)


class TestProgressReporter:
    """Tests for the in-memory reporter."""

    def test_records_events_in_order(self):
        reporter = ProgressReporter()

        reporter.update("Processing 3 files...")
        reporter.succeed("Processing 3 files...")
        reporter.stop()

        assert [e.status for e in reporter.get_events()] == [
            Status.RUNNING,
            Status.SUCCESS,
            Status.COMPLETE,
        ]
        assert reporter.messages(Status.RUNNING) == ["Processing 3 files..."]
        assert all(e.timestamp is not None for e in reporter.get_events())

    def test_report_keeps_models(self):
        reporter = ProgressReporter()
        record = ModelRecord(ModelSpec("m", 10))

        reporter.report([record])

        assert reporter.reported == [record]


class TestConsoleProgress:
    """Tests for the rich console reporter."""

    def test_succeed_prints_check_line(self):
        console = _console()
        progress = ConsoleProgress(console)

        progress.update("Processing 1 files...")
        progress.succeed("Processing 1 files...")
        progress.stop()

        assert "Processing 1 files..." in console.file.getvalue()

    def test_report_prints_table(self):
        console = _console()
        record = ModelRecord(ModelSpec("gpt-4", 8190, 0.03, 0.06))
        record.record_success(1000, 1000)

        ConsoleProgress(console).report([record])

        out = console.file.getvalue()
        assert "gpt-4" in out
        assert "Estimated cost" not in out

    def test_estimate_report(self):
        console = _console()
        record = ModelRecord(ModelSpec("gpt-4", 8190, 0.03, 0.06))
        record.record_success(1000, 1000)

        ConsoleProgress(console, estimate=True).report([record])

        assert "Estimated cost: $0.09" in console.file.getvalue()


class TestSafeReporter:
    """Tests for SafeReporter."""

    def test_forwards_calls(self):
        inner = ProgressReporter()
        safe = SafeReporter(inner)

        safe.update("a")
        safe.succeed("a")
        safe.stop()
        safe.report([])

        assert len(inner.get_events()) == 3
        assert inner.reported == []

    def test_swallows_and_logs_failures(self, caplog):
        inner = MagicMock()
        inner.update.side_effect = RuntimeError("broken pipe")
        safe = SafeReporter(inner)

        with caplog.at_level(logging.WARNING):
            safe.update("a")
            safe.stop()

        assert "broken pipe" in caplog.text
        inner.stop.assert_called_once_with()
