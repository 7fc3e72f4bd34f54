"""
BullyWatch - Async Utilities
============================

Helpers for running background work on the event loop with proper
error logging, so failures in periodic jobs are never silent.
"""

import asyncio
from typing import Any, Coroutine

from bullywatch.core.logger import logger


# =============================================================================
# Safe Background Tasks
# =============================================================================

def create_safe_task(
    coro: Coroutine[Any, Any, Any],
    name: str = "Background Task",
) -> asyncio.Task:
    """
    Create a background task with automatic error logging.

    Unlike raw asyncio.create_task(), this catches and logs any exceptions
    instead of letting them silently disappear.

    Args:
        coro: The coroutine to run as a background task.
        name: Name for logging purposes.

    Returns:
        The created asyncio.Task.
    """
    async def wrapped():
        try:
            await coro
        except asyncio.CancelledError:
            # Expected during shutdown
            pass
        except Exception as e:
            logger.error("Background Task Failed", [
                ("Task", name),
                ("Error Type", type(e).__name__),
                ("Error", str(e)[:200]),
            ])

    return asyncio.create_task(wrapped(), name=name)


async def yield_to_loop() -> None:
    """Give other coroutines a turn between chunks of synchronous work."""
    await asyncio.sleep(0)


# =============================================================================
# Module Export
# =============================================================================

__all__ = [
    "create_safe_task",
    "yield_to_loop",
]
