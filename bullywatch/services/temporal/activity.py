"""
Temporal Analysis - User Activity Tracker
=========================================

Last-seen group, message count, and last message time per user.
Used only to infer whether a harassed user has gone quiet.
"""

import threading
from dataclasses import replace
from typing import Dict, Optional

from .models import UserActivity


class UserActivityTracker:
    """One activity record per user across all groups (last group wins)."""

    def __init__(self) -> None:
        self._activity: Dict[str, UserActivity] = {}
        self._lock = threading.Lock()

    def touch(self, user_id: str, group_id: str, timestamp: int) -> None:
        """Count a message from user_id and move their last-seen to group_id."""
        with self._lock:
            activity = self._activity.get(user_id)
            if activity is None:
                activity = UserActivity(group_id=group_id)
                self._activity[user_id] = activity
            activity.group_id = group_id
            activity.message_count += 1
            activity.last_message_time = timestamp

    def get(self, user_id: str) -> Optional[UserActivity]:
        """Copy of the user's activity, or None if never seen."""
        with self._lock:
            activity = self._activity.get(user_id)
            return replace(activity) if activity else None

    def sweep(self, cutoff: int) -> int:
        """
        Drop users whose last message is older than cutoff.

        Returns:
            Number of user records removed.
        """
        with self._lock:
            stale = [
                user_id for user_id, activity in self._activity.items()
                if activity.last_message_time < cutoff
            ]
            for user_id in stale:
                del self._activity[user_id]
        return len(stale)

    def __len__(self) -> int:
        with self._lock:
            return len(self._activity)

    def clear(self) -> None:
        with self._lock:
            self._activity.clear()


__all__ = ["UserActivityTracker"]
