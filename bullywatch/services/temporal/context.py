"""
Temporal Analysis - Context Extractor
=====================================

Returns the messages surrounding one message, for deep inspection
before escalating to a human or an LLM reviewer.
"""

from typing import Sequence

from .models import ContextWindow, MessageRecord


def extract_context_window(
    history: Sequence[MessageRecord],
    message_id: str,
    radius: int,
) -> ContextWindow:
    """
    Slice up to radius messages on each side of message_id.

    Args:
        history: A group's stored history, oldest first.
        message_id: Id of the message to centre on.
        radius: Messages to include before and after (negative counts as 0).

    Returns:
        ContextWindow; unknown ids give an empty window with current=None.
    """
    index = next((i for i, m in enumerate(history) if m.id == message_id), -1)
    if index == -1:
        return ContextWindow()

    radius = max(0, int(radius))
    start = max(0, index - radius)
    end = min(len(history), index + radius + 1)

    return ContextWindow(
        before=list(history[start:index]),
        current=history[index],
        after=list(history[index + 1:end]),
    )


__all__ = ["extract_context_window"]
