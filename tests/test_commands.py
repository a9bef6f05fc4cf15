"""Tests for the usage statistics commands."""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

from agent_pro.commands import (
    NO_USAGE_MESSAGE,
    RESET_ACTION,
    format_usage_summary,
    reset_usage_statistics,
    show_usage_statistics,
)
from agent_pro.state_store import TOOL_STATS_KEY, MemoryStateStore
from agent_pro.telemetry import TelemetryReporter, ToolStatRecord


NOW = datetime(2024, 6, 10, 12, 0, tzinfo=timezone.utc)


def _record(total, success, days_ago, reasons=None):
    return ToolStatRecord(
        total=total,
        success=success,
        failures=total - success,
        first_used=NOW - timedelta(days=days_ago),
        last_used=NOW,
        failure_reasons=reasons or {},
    )


class TestFormatUsageSummary:
    def test_sorted_by_total_descending(self):
        stats = {
            "testGenerator": _record(2, 2, 1),
            "codeAnalyzer": _record(10, 8, 5, {"no_editor": 2}),
            "documentationBuilder": _record(4, 1, 0, {"error": 3}),
        }
        text = format_usage_summary(stats, NOW)
        lines = text.splitlines()

        assert lines[0] == "Tool Usage Statistics"
        assert lines[2] == "codeAnalyzer: 10 calls, 80.0% success, first used 5 days ago"
        assert lines[3] == "  failures: no_editor x2"
        assert lines[4] == "documentationBuilder: 4 calls, 25.0% success, first used 0 days ago"
        assert lines[6] == "testGenerator: 2 calls, 100.0% success, first used 1 day ago"
        assert lines[-1] == "Total: 16 calls across 3 tools"

    def test_singular_forms(self):
        text = format_usage_summary({"x": _record(1, 1, 1)}, NOW)
        assert "x: 1 call, 100.0% success, first used 1 day ago" in text
        assert text.endswith("Total: 1 call across 1 tool")


class TestShowUsageStatistics:
    async def test_empty_table(self, ui):
        await show_usage_statistics(TelemetryReporter(MemoryStateStore()), ui)
        assert ui.infos == [(NO_USAGE_MESSAGE, False)]

    async def test_modal_summary(self, ui):
        reporter = TelemetryReporter(MemoryStateStore())
        await reporter.log_usage("codeAnalyzer", True)
        await show_usage_statistics(reporter, ui)

        (message, modal), = ui.infos
        assert modal is True
        assert "codeAnalyzer: 1 call, 100.0% success" in message

    async def test_read_failure_shows_error(self, ui):
        reporter = TelemetryReporter(MemoryStateStore())
        reporter.get_stats = AsyncMock(side_effect=RuntimeError("boom"))
        await show_usage_statistics(reporter, ui)
        assert ui.errors == ["Agent Pro: Failed to read usage statistics: boom"]
        assert ui.infos == []

    async def test_stored_naive_timestamp(self, ui):
        store = MemoryStateStore()
        await store.update(
            TOOL_STATS_KEY,
            {"codeAnalyzer": {"total": 1, "success": 1, "failures": 0, "firstUsed": "2024-06-01T12:00:00"}},
        )
        await show_usage_statistics(TelemetryReporter(store), ui, now=NOW)

        assert ui.errors == []
        (message, modal), = ui.infos
        assert "codeAnalyzer: 1 call, 100.0% success, first used 9 days ago" in message

    async def test_format_failure_shows_error(self, ui):
        reporter = TelemetryReporter(MemoryStateStore())
        reporter.get_stats = AsyncMock(return_value={"x": None})
        await show_usage_statistics(reporter, ui)
        assert len(ui.errors) == 1
        assert ui.errors[0].startswith("Agent Pro: Failed to read usage statistics:")
        assert ui.infos == []


class TestResetUsageStatistics:
    async def test_confirmed_reset_clears(self, ui):
        reporter = TelemetryReporter(MemoryStateStore())
        await reporter.log_usage("x", True)

        assert await reset_usage_statistics(reporter, ui) is True
        assert await reporter.get_stats() == {}
        assert ui.confirmations[0][1] == RESET_ACTION

    async def test_declined_reset_keeps_stats(self, ui):
        ui.confirm_answer = False
        reporter = TelemetryReporter(MemoryStateStore())
        await reporter.log_usage("x", True)

        assert await reset_usage_statistics(reporter, ui) is False
        assert (await reporter.get_stats())["x"].total == 1
        assert ui.infos == []

    async def test_reset_failure_shows_error(self, ui):
        reporter = TelemetryReporter(MemoryStateStore())
        reporter.reset_stats = AsyncMock(side_effect=OSError("read-only"))
        assert await reset_usage_statistics(reporter, ui) is False
        assert ui.errors == ["Agent Pro: Failed to reset usage statistics: read-only"]
