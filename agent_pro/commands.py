"""User-facing commands that read and reset tool usage statistics."""

import logging
from datetime import datetime, timezone
from typing import Optional

from agent_pro.host import HostUI
from agent_pro.telemetry import TelemetryReporter, ToolStatsTable

logger = logging.getLogger(__name__)

SHOW_USAGE_STATISTICS = "agentPro.showUsageStatistics"
RESET_USAGE_STATISTICS = "agentPro.resetUsageStatistics"

NO_USAGE_MESSAGE = "No tool usage recorded yet."
RESET_CONFIRMATION = "Reset all tool usage statistics? This cannot be undone."
RESET_ACTION = "Reset"


def _plural(count: int, word: str) -> str:
    return f"{count} {word}" if count == 1 else f"{count} {word}s"


def format_usage_summary(stats: ToolStatsTable, now: Optional[datetime] = None) -> str:
    """Render the stats table, most used tool first."""
    now = now or datetime.now(timezone.utc)
    ordered = sorted(stats.items(), key=lambda item: (-item[1].total, item[0]))

    lines = ["Tool Usage Statistics", ""]
    for name, record in ordered:
        lines.append(
            f"{name}: {_plural(record.total, 'call')}, "
            f"{record.success_rate:.1f}% success, "
            f"first used {_plural(record.age_days(now), 'day')} ago"
        )
        if record.failure_reasons:
            reasons = ", ".join(
                f"{reason} x{count}"
                for reason, count in sorted(record.failure_reasons.items())
            )
            lines.append(f"  failures: {reasons}")

    total_calls = sum(record.total for record in stats.values())
    lines.append("")
    lines.append(f"Total: {_plural(total_calls, 'call')} across {_plural(len(stats), 'tool')}")
    return "\n".join(lines)


async def show_usage_statistics(
    reporter: TelemetryReporter, ui: HostUI, now: Optional[datetime] = None
) -> None:
    try:
        stats = await reporter.get_stats()
        summary = format_usage_summary(stats, now) if stats else None
    except Exception as e:
        logger.error(f"Failed to read usage statistics: {e}")
        await ui.show_error(f"Agent Pro: Failed to read usage statistics: {e}")
        return

    if summary is None:
        await ui.show_information(NO_USAGE_MESSAGE)
        return

    await ui.show_information(summary, modal=True)


async def reset_usage_statistics(reporter: TelemetryReporter, ui: HostUI) -> bool:
    """Clear the table after confirmation. Returns True if it was cleared."""
    if not await ui.confirm(RESET_CONFIRMATION, RESET_ACTION):
        logger.debug("Usage statistics reset cancelled")
        return False

    try:
        await reporter.reset_stats()
    except Exception as e:
        logger.error(f"Failed to reset usage statistics: {e}")
        await ui.show_error(f"Agent Pro: Failed to reset usage statistics: {e}")
        return False

    await ui.show_information("Tool usage statistics have been reset.")
    return True
