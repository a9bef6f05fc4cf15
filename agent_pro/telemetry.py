"""Local usage statistics for the exposed tools.

Every tool invocation ends in exactly one ``log_usage`` call. The reporter
keeps a single table in the persistent state store, keyed by tool name:

    {
        "codeAnalyzer": {
            "total": 3, "success": 2, "failures": 1,
            "firstUsed": "2024-05-01T10:00:00+00:00",
            "lastUsed": "2024-05-03T09:30:00+00:00",
            "failureReasons": {"no_editor": 1}
        }
    }

Telemetry is advisory. Failures while recording are logged and swallowed so
they can never change the outcome of the tool that triggered them.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Mapping, Optional

from agent_pro.errors import TelemetryWriteError
from agent_pro.state_store import TOOL_STATS_KEY, StateStore

logger = logging.getLogger(__name__)

# Failure reason used when metadata does not name one
DEFAULT_FAILURE_REASON = "error"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class ToolStatRecord:
    """Aggregate invocation counts for one tool.

    Invariant: ``total == success + failures``.
    """

    total: int = 0
    success: int = 0
    failures: int = 0
    first_used: Optional[datetime] = None
    last_used: Optional[datetime] = None
    failure_reasons: Dict[str, int] = field(default_factory=dict)

    def record(self, success: bool, when: datetime, reason: Optional[str] = None) -> None:
        if self.first_used is None:
            self.first_used = when
        self.last_used = when
        self.total += 1
        if success:
            self.success += 1
        else:
            self.failures += 1
            key = reason or DEFAULT_FAILURE_REASON
            self.failure_reasons[key] = self.failure_reasons.get(key, 0) + 1

    @property
    def success_rate(self) -> float:
        """Percentage of successful invocations (0-100)."""
        if self.total == 0:
            return 0.0
        return self.success / self.total * 100

    def age_days(self, now: Optional[datetime] = None) -> int:
        """Whole days since the first invocation."""
        if self.first_used is None:
            return 0
        now = now or _utcnow()
        return max(0, (now - self.first_used).days)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the persisted (camelCase) layout."""
        return {
            "total": self.total,
            "success": self.success,
            "failures": self.failures,
            "firstUsed": self.first_used.isoformat() if self.first_used else None,
            "lastUsed": self.last_used.isoformat() if self.last_used else None,
            "failureReasons": dict(self.failure_reasons),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ToolStatRecord":
        """Create from the persisted layout."""

        def _parse(value: Optional[str]) -> Optional[datetime]:
            if not value:
                return None
            parsed = datetime.fromisoformat(value)
            # Naive timestamps are taken as UTC
            if parsed.tzinfo is None:
                parsed = parsed.replace(tzinfo=timezone.utc)
            return parsed

        return cls(
            total=int(data.get("total", 0)),
            success=int(data.get("success", 0)),
            failures=int(data.get("failures", 0)),
            first_used=_parse(data.get("firstUsed")),
            last_used=_parse(data.get("lastUsed")),
            failure_reasons={
                str(k): int(v) for k, v in (data.get("failureReasons") or {}).items()
            },
        )


ToolStatsTable = Dict[str, ToolStatRecord]


class TelemetryReporter:
    """Records tool outcomes into the persistent state store.

    The ``enabled`` flag is read once at construction. When disabled, nothing
    is read from or written to the store.

    Updates from one reporter are serialized through an ``asyncio.Lock``, so
    overlapping invocations in the same process never lose an increment.
    Separate processes sharing a store are not coordinated.
    """

    def __init__(
        self,
        store: StateStore,
        enabled: bool = True,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self._store = store
        self._enabled = enabled
        self._clock = clock
        self._lock = asyncio.Lock()

    @property
    def enabled(self) -> bool:
        return self._enabled

    async def _load_table(self) -> ToolStatsTable:
        raw = await self._store.get(TOOL_STATS_KEY, {})
        if not isinstance(raw, dict):
            logger.warning(f"Ignoring malformed tool stats table: {type(raw).__name__}")
            return {}

        table: ToolStatsTable = {}
        for name, data in raw.items():
            try:
                table[name] = ToolStatRecord.from_dict(data)
            except (TypeError, ValueError, AttributeError) as e:
                logger.warning(f"Skipping malformed stats record for '{name}': {e}")
        return table

    async def _save_table(self, table: ToolStatsTable) -> None:
        await self._store.update(
            TOOL_STATS_KEY, {name: record.to_dict() for name, record in table.items()}
        )

    async def log_usage(
        self,
        name: str,
        success: bool,
        metadata: Optional[Mapping[str, Any]] = None,
    ) -> None:
        """Record one invocation of ``name``. Never raises."""
        if not self._enabled:
            return

        metadata = dict(metadata or {})
        try:
            async with self._lock:
                table = await self._load_table()
                record = table.setdefault(name, ToolStatRecord())
                record.record(success, self._clock(), metadata.get("reason"))
                try:
                    await self._save_table(table)
                except Exception as e:
                    raise TelemetryWriteError(str(e)) from e
            logger.debug(
                f"Tool usage: {name} success={success} metadata={metadata}"
            )
        except Exception as e:
            logger.error(f"Failed to log usage for '{name}': {e}")

    async def get_stats(self) -> ToolStatsTable:
        """Return the current stats table (empty when telemetry is disabled)."""
        if not self._enabled:
            return {}
        return await self._load_table()

    async def reset_stats(self) -> None:
        """Clear all records."""
        if not self._enabled:
            logger.debug("Telemetry disabled, nothing to reset")
            return
        async with self._lock:
            await self._store.update(TOOL_STATS_KEY, {})
        logger.info("Tool usage statistics reset")
