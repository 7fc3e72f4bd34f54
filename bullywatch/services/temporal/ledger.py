"""
Temporal Analysis - Targeting Ledger
====================================

Rolling record of who targeted whom, keyed by (group, target).
"""

import threading
from typing import Dict, List, Tuple

from .models import TargetingEvent

LedgerKey = Tuple[str, str]


class TargetingLedger:
    """
    Append-ordered targeting events per (group_id, target_id).

    Events are pruned from the front once they fall outside the lookback
    window, so every list only holds the trailing lookback period after
    a write.
    """

    def __init__(self, lookback_ms: int) -> None:
        self.lookback_ms = lookback_ms
        self._events: Dict[LedgerKey, List[TargetingEvent]] = {}
        self._lock = threading.Lock()

    def record_targeting(
        self,
        group_id: str,
        target_id: str,
        attacker_id: str,
        timestamp: int,
        score: float,
    ) -> List[TargetingEvent]:
        """
        Append a targeting event and prune the key's expired events.

        Returns:
            Copy of the key's events inside the lookback window, oldest
            first, including the new one.
        """
        key = (group_id, target_id)
        event = TargetingEvent(timestamp=timestamp, attacker_id=attacker_id, score=score)

        with self._lock:
            events = self._events.setdefault(key, [])
            events.append(event)
            drop = 0
            while drop < len(events) and timestamp - events[drop].timestamp > self.lookback_ms:
                drop += 1
            if drop:
                del events[:drop]
            return list(events)

    def events(self, group_id: str, target_id: str) -> List[TargetingEvent]:
        with self._lock:
            return list(self._events.get((group_id, target_id), []))

    def sweep(self, cutoff: int) -> int:
        """
        Drop events older than cutoff and remove emptied keys.

        Returns:
            Number of events removed.
        """
        removed = 0
        with self._lock:
            keys = list(self._events.keys())
        for key in keys:
            with self._lock:
                events = self._events.get(key)
                if events is None:
                    continue
                kept = [e for e in events if e.timestamp >= cutoff]
                removed += len(events) - len(kept)
                if kept:
                    self._events[key] = kept
                else:
                    del self._events[key]
        return removed

    def key_count(self) -> int:
        with self._lock:
            return len(self._events)

    def clear(self) -> None:
        with self._lock:
            self._events.clear()


__all__ = ["TargetingLedger", "LedgerKey"]
