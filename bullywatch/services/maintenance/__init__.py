"""
BullyWatch - Maintenance Service
================================

Runs registered maintenance tasks on a fixed interval in the background.
"""

import asyncio
from typing import TYPE_CHECKING, List, Optional

from bullywatch.core.logger import logger
from bullywatch.utils.async_utils import create_safe_task

from .base import MaintenanceTask
from .tasks import TemporalCleanupTask, sweep_temporal_data

if TYPE_CHECKING:
    from bullywatch.services.temporal.service import TemporalAnalysisService


class MaintenanceService:
    """
    Interval scheduler for maintenance tasks.

    Each task is modular; a failing task is logged and the rest still run.
    """

    def __init__(
        self,
        engine: "TemporalAnalysisService",
        interval_seconds: Optional[float] = None,
    ) -> None:
        self.engine = engine
        self.interval_seconds = (
            interval_seconds if interval_seconds is not None
            else engine.config.cleanup_interval_seconds
        )
        self._running = False
        self._task: Optional[asyncio.Task] = None
        self.runs = 0

        self._tasks: List[MaintenanceTask] = [
            TemporalCleanupTask(engine),
        ]

        logger.tree("Maintenance Service Loaded", [
            ("Schedule", f"Every {self.interval_seconds}s"),
            ("Tasks", ", ".join(t.name for t in self._tasks)),
            ("Total", str(len(self._tasks))),
        ], emoji="🔧")

    @property
    def running(self) -> bool:
        return self._running

    def start(self) -> None:
        """
        Start the maintenance scheduler on the running event loop.

        Raises:
            RuntimeError: If called without a running event loop. The
                scheduler stays stopped and can be started again later.
        """
        if self._running:
            return

        try:
            asyncio.get_running_loop()
        except RuntimeError:
            logger.warning("Maintenance Scheduler Not Started", [
                ("Reason", "No running event loop"),
            ])
            raise

        self._running = True
        self._task = create_safe_task(self._scheduler_loop(), "Maintenance Scheduler")
        logger.info("Maintenance Scheduler Started")

    async def stop(self) -> None:
        """Stop the maintenance scheduler."""
        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.info("Maintenance Scheduler Stopped")

    async def _scheduler_loop(self) -> None:
        """Sleep for one interval, run all tasks, repeat."""
        while self._running:
            try:
                await asyncio.sleep(self.interval_seconds)
                await self.run_all_tasks()
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error("Maintenance Scheduler Error", [
                    ("Error Type", type(e).__name__),
                    ("Error", str(e)[:100]),
                ])

    async def run_all_tasks(self) -> List[str]:
        """
        Run all maintenance tasks once.

        Returns:
            Summary strings, one per task that ran.
        """
        results: List[str] = []

        for task in self._tasks:
            try:
                if not await task.should_run():
                    logger.debug("Task Skipped", [("Task", task.name), ("Reason", "Conditions not met")])
                    continue

                result = await task.run()
                results.append(f"{task.name} ({task.format_result(result)})")

            except Exception as e:
                logger.error("Maintenance Task Failed", [
                    ("Task", task.name),
                    ("Error Type", type(e).__name__),
                    ("Error", str(e)[:100]),
                ])
                results.append(f"{task.name} (error)")

        self.runs += 1
        logger.debug("Maintenance Run Complete", [
            ("Run", str(self.runs)),
            ("Results", ", ".join(results) if results else "None"),
        ])
        return results


__all__ = [
    "MaintenanceService",
    "MaintenanceTask",
    "TemporalCleanupTask",
    "sweep_temporal_data",
]
