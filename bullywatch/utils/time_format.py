"""
BullyWatch - Time Formatting Utils
==================================

Time formatting utilities for human-readable duration display in
reports and log summaries.
"""

import math

from bullywatch.core.constants import MS_PER_MINUTE


def format_duration(total_minutes: int) -> str:
    """
    Format minutes into a human-readable duration string.

    Args:
        total_minutes: Total number of minutes to format

    Returns:
        Formatted string like "2h 5m" or "1d 1h". Zero and negative
        values return "0m".
    """
    if not total_minutes or total_minutes < 0:
        return "0m"

    days: int = total_minutes // (24 * 60)
    remaining: int = total_minutes % (24 * 60)
    hours: int = remaining // 60
    minutes: int = remaining % 60

    parts: list[str] = []

    if days > 0:
        parts.append(f"{days}d")
    if hours > 0:
        parts.append(f"{hours}h")
    # Always show minutes if it's the only component
    if minutes > 0 or (days == 0 and hours == 0):
        parts.append(f"{minutes}m")

    return " ".join(parts)


def format_duration_ms(duration_ms: int) -> str:
    """
    Format a millisecond duration, rounding down to whole minutes.

    Sub-minute durations are shown in seconds, unbounded ones as "all time".
    """
    if duration_ms is None:
        return "0m"
    if not math.isfinite(duration_ms):
        return "all time" if duration_ms > 0 else "0m"
    if duration_ms <= 0:
        return "0m"
    if duration_ms < MS_PER_MINUTE:
        return f"{duration_ms // 1000}s"
    return format_duration(int(duration_ms // MS_PER_MINUTE))


__all__ = ["format_duration", "format_duration_ms"]
