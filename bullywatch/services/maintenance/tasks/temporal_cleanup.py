"""
BullyWatch - Temporal Data Cleanup Task
=======================================

Evict message history, targeting events, and (optionally) user activity
older than the retention horizon.
"""

from typing import TYPE_CHECKING, Any, Dict

import psutil

from bullywatch.core.logger import logger
from bullywatch.utils.async_utils import yield_to_loop
from bullywatch.utils.time_format import format_duration_ms
from ..base import MaintenanceTask

if TYPE_CHECKING:
    from bullywatch.services.temporal.service import TemporalAnalysisService


def _process_memory_mb() -> float:
    try:
        return psutil.Process().memory_info().rss / (1024 * 1024)
    except psutil.Error:
        return 0.0


def sweep_temporal_data(engine: "TemporalAnalysisService") -> Dict[str, int]:
    """
    Run one synchronous sweep over every temporal structure.

    Returns:
        Counts of removed messages, events, and activity records.
    """
    config = engine.config
    cutoff = engine.now() - config.retention_ms

    messages = engine.store.sweep(cutoff)
    events = engine.ledger.sweep(cutoff)
    activity = engine.activity.sweep(cutoff) if config.sweep_activity else 0

    return {"messages": messages, "events": events, "activity": activity}


class TemporalCleanupTask(MaintenanceTask):
    """
    Sweep the engine's in-memory state.

    Groups are swept one at a time and the task yields to the event loop
    between groups, so scoring is never paused for longer than one
    group's sweep.
    """

    name = "Temporal Cleanup"

    async def should_run(self) -> bool:
        """Nothing to sweep on a closed engine."""
        return not self.engine.closed

    async def run(self) -> Dict[str, Any]:
        """Delete expired temporal data."""
        config = self.engine.config
        cutoff = self.engine.now() - config.retention_ms

        messages = 0
        for group_id in self.engine.store.group_ids():
            messages += self.engine.store.sweep_group(group_id, cutoff)
            await yield_to_loop()

        events = self.engine.ledger.sweep(cutoff)
        await yield_to_loop()

        activity = self.engine.activity.sweep(cutoff) if config.sweep_activity else 0

        total = messages + events + activity
        logger.tree("Temporal Cleanup Complete", [
            ("Messages", str(messages)),
            ("Targeting Events", str(events)),
            ("Activity Records", str(activity) if config.sweep_activity else "skipped"),
            ("Groups Left", str(self.engine.store.group_count())),
            ("Target Keys Left", str(self.engine.ledger.key_count())),
            ("Retention", format_duration_ms(config.retention_ms)),
            ("Memory", f"{_process_memory_mb():.1f} MB"),
        ], emoji="🧹")

        return {
            "success": True,
            "deleted": total,
            "messages": messages,
            "events": events,
            "activity": activity,
            "groups": self.engine.store.group_count(),
            "keys": self.engine.ledger.key_count(),
        }

    def format_result(self, result: Dict[str, Any]) -> str:
        """Format result for summary."""
        if not result.get("success", False):
            return "failed"
        deleted = result.get("deleted", 0)
        return f"{deleted} deleted" if deleted > 0 else "clean"


__all__ = ["TemporalCleanupTask", "sweep_temporal_data"]
