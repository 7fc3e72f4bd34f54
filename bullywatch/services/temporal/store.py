"""
Temporal Analysis - Message Store
=================================

Bounded, time-pruned per-group message history.

DESIGN:
    Each group owns a ring buffer (deque with maxlen) guarded by its own
    lock, so writers in different groups never wait on each other. The
    top-level group map has a separate lock that is only held long enough
    to look up, create, or delete a group entry.
"""

import threading
from collections import deque
from typing import Callable, Deque, Dict, List, Optional

from .models import MessageRecord


class GroupHistory:
    """Chronological ring buffer of one group's recent messages."""

    __slots__ = ("messages", "lock", "retired")

    def __init__(self, capacity: int) -> None:
        self.messages: Deque[MessageRecord] = deque(maxlen=capacity)
        self.lock = threading.Lock()
        self.retired = False  # set once removed from the group map


class MessageStore:
    """
    Per-group message history with a fixed capacity per group.

    Attributes:
        capacity: Maximum number of messages kept per group.
    """

    def __init__(self, capacity: int, clock: Callable[[], int]) -> None:
        """
        Args:
            capacity: Messages kept per group before the oldest is dropped.
            clock: Returns the current time in epoch milliseconds.
        """
        self.capacity = capacity
        self._clock = clock
        self._groups: Dict[str, GroupHistory] = {}
        self._groups_lock = threading.Lock()

    # =========================================================================
    # Group Lookup
    # =========================================================================

    def _get(self, group_id: str) -> Optional[GroupHistory]:
        with self._groups_lock:
            return self._groups.get(group_id)

    def _get_or_create(self, group_id: str) -> GroupHistory:
        with self._groups_lock:
            history = self._groups.get(group_id)
            if history is None:
                history = GroupHistory(self.capacity)
                self._groups[group_id] = history
            return history

    # =========================================================================
    # Read / Write
    # =========================================================================

    def record(self, group_id: str, message: MessageRecord) -> None:
        """Append a message, dropping the oldest once capacity is reached."""
        while True:
            history = self._get_or_create(group_id)
            with history.lock:
                if not history.retired:
                    history.messages.append(message)
                    return
            # Swept away between lookup and lock, pick up the fresh entry

    def recent(
        self,
        group_id: str,
        window_ms: float,
        now: Optional[int] = None,
    ) -> List[MessageRecord]:
        """
        Get messages no older than window_ms, oldest first.

        Args:
            group_id: Group to read.
            window_ms: Window length in milliseconds (may be float("inf")).
            now: Reference time, defaults to the store clock.

        Returns:
            Messages with now - timestamp <= window_ms. Unknown groups
            return an empty list.
        """
        history = self._get(group_id)
        if history is None:
            return []
        now = self._clock() if now is None else now
        with history.lock:
            return [m for m in history.messages if now - m.timestamp <= window_ms]

    def history(self, group_id: str) -> List[MessageRecord]:
        """Snapshot of a group's full stored history."""
        history = self._get(group_id)
        if history is None:
            return []
        with history.lock:
            return list(history.messages)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def group_ids(self) -> List[str]:
        with self._groups_lock:
            return list(self._groups.keys())

    def group_count(self) -> int:
        with self._groups_lock:
            return len(self._groups)

    def sweep_group(self, group_id: str, cutoff: int) -> int:
        """
        Drop a group's messages older than cutoff.

        The group is removed entirely once nothing is left.

        Returns:
            Number of messages removed.
        """
        history = self._get(group_id)
        if history is None:
            return 0

        with history.lock:
            before = len(history.messages)
            kept = [m for m in history.messages if m.timestamp >= cutoff]
            history.messages.clear()
            history.messages.extend(kept)
            removed = before - len(kept)
            empty = not kept

        if empty:
            with self._groups_lock, history.lock:
                # A writer may have appended after we released the group lock
                if self._groups.get(group_id) is history and not history.messages:
                    history.retired = True
                    del self._groups[group_id]

        return removed

    def sweep(self, cutoff: int) -> int:
        """Sweep every group, one group lock at a time."""
        return sum(self.sweep_group(group_id, cutoff) for group_id in self.group_ids())

    def clear(self) -> None:
        with self._groups_lock:
            self._groups.clear()


__all__ = ["MessageStore", "GroupHistory"]
