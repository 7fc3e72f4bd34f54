"""
BullyWatch - Maintenance Task Base Class
========================================

Base class for all periodic maintenance tasks.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Dict

if TYPE_CHECKING:
    from bullywatch.services.temporal.service import TemporalAnalysisService


class MaintenanceTask(ABC):
    """
    Abstract base class for maintenance tasks.

    All maintenance tasks should inherit from this class and implement
    the required methods.
    """

    # Task name for logging (override in subclass)
    name: str = "Unknown Task"

    def __init__(self, engine: "TemporalAnalysisService") -> None:
        self.engine = engine

    @abstractmethod
    async def should_run(self) -> bool:
        """
        Check if this task should run.

        Returns:
            True if the task should run, False otherwise.
        """
        pass

    @abstractmethod
    async def run(self) -> Dict[str, Any]:
        """
        Execute the maintenance task.

        Returns:
            Dict with task results for logging. Should include at minimum:
            - "success": bool
            - Any other relevant stats (e.g., "deleted": 5)
        """
        pass

    def format_result(self, result: Dict[str, Any]) -> str:
        """
        Format the task result for the summary log.

        Args:
            result: The dict returned by run()

        Returns:
            Short string describing the result (e.g., "3 deleted")
        """
        if not result.get("success", False):
            return "failed"

        if "deleted" in result:
            return f"{result['deleted']} deleted"
        if "cleaned" in result:
            return f"{result['cleaned']} cleaned"

        return "done"


__all__ = ["MaintenanceTask"]
