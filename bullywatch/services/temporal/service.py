"""
BullyWatch - Temporal Analysis Service
======================================

Main service class that stores each incoming message, runs the pattern
detectors, and serves context windows and reports.

DESIGN:
    All state lives in injected, explicitly owned stores (message history,
    user activity, targeting ledger) so tests and embedders can create
    isolated engines. Scoring is synchronous and in-memory; only the
    periodic cleanup runs on the event loop.

    Callers must not analyze messages for the same group concurrently.
    Different groups may be analyzed from different threads.
"""

import math
import time
from typing import Any, Callable, Dict, Mapping, Optional, Union

from bullywatch.core.config import TemporalConfig, get_config
from bullywatch.core.constants import (
    CONTEXT_DEFAULT_RADIUS,
    MS_PER_HOUR,
    REPORT_DEFAULT_RANGE_MS,
    TARGETING_LOG_EVENTS,
)
from bullywatch.core.logger import logger
from bullywatch.services.maintenance import MaintenanceService, sweep_temporal_data

from .activity import UserActivityTracker
from .context import extract_context_window
from .detectors import (
    detect_pile_on,
    detect_targeted_harassment,
    detect_velocity,
    detect_victim_silencing,
    max_attackers,
    recent_patterns,
)
from .ledger import TargetingLedger
from .models import (
    ChatMessage,
    ContextWindow,
    GroupReport,
    MessageRecord,
    ScoreBreakdown,
    TemporalReport,
    TemporalScoreResult,
)
from .report import build_group_report, generate_report
from .resolver import MentionTargetResolver, TargetResolver
from .store import MessageStore

MessageInput = Union[ChatMessage, Mapping[str, Any]]


def _epoch_ms() -> int:
    return int(time.time() * 1000)


def _coerce_score(value: Any) -> float:
    """Numeric base score, or 0 for anything unusable."""
    try:
        score = float(value)
    except (TypeError, ValueError):
        return 0.0
    return score if math.isfinite(score) else 0.0


def _coerce_message(message: MessageInput) -> ChatMessage:
    if isinstance(message, ChatMessage):
        return message
    if isinstance(message, Mapping):
        return ChatMessage.from_payload(message)
    # Duck-typed objects from other transports
    return ChatMessage.from_payload({
        "id": getattr(message, "id", ""),
        "sender": getattr(message, "sender", ""),
        "text": getattr(message, "text", ""),
        "quoted_sender": getattr(message, "quoted_sender", None),
    })


class TemporalAnalysisService:
    """
    Temporal abuse-pattern detection engine.

    Features:
    - Pile-on detection (many users on one target)
    - Message velocity spikes
    - Victim silencing
    - Repeated targeting of one user
    - Context windows for deep inspection
    - Group reports with severity and recommendations
    - Hourly eviction of expired data
    """

    def __init__(
        self,
        config: Optional[TemporalConfig] = None,
        clock: Optional[Callable[[], int]] = None,
        resolver: Optional[TargetResolver] = None,
    ) -> None:
        """
        Initialize the engine.

        Args:
            config: Thresholds and windows, defaults to get_config().
            clock: Returns current time in epoch milliseconds.
            resolver: Target resolution strategy.
        """
        self.config = config or get_config()
        self._clock = clock or _epoch_ms
        self.resolver: TargetResolver = resolver or MentionTargetResolver(
            self.config.max_text_scan_length
        )

        self.store = MessageStore(self.config.history_capacity, self._clock)
        self.activity = UserActivityTracker()
        self.ledger = TargetingLedger(self.config.targeting_lookback_ms)

        self.maintenance = MaintenanceService(self)
        self.closed = False

        if self.config.error_webhook_url:
            logger.set_webhook(self.config.error_webhook_url)

        logger.tree("Temporal Analysis Service Loaded", [
            ("History", f"{self.config.history_capacity} msgs / group"),
            ("Retention", f"{self.config.retention_ms // MS_PER_HOUR}h"),
            ("Silencing Policy", self.config.silencing_policy),
            ("Resolver", type(self.resolver).__name__),
        ], emoji="🛡️")

    def now(self) -> int:
        """Current engine time in epoch milliseconds."""
        return self._clock()

    # =========================================================================
    # Scoring
    # =========================================================================

    def analyze(
        self,
        message: MessageInput,
        group_id: str,
        base_score: Any,
    ) -> TemporalScoreResult:
        """
        Store a message and score the group's temporal patterns.

        Not idempotent: analyzing the same message twice stores it twice.

        Args:
            message: ChatMessage or a mapping with id/sender/text/quotedMessage.
            group_id: Group the message was sent in.
            base_score: Externally computed abuse score for this message.

        Returns:
            TemporalScoreResult with the summed score, per-detector
            breakdown, and a snapshot of the last 15 minutes.
        """
        msg = _coerce_message(message)
        group_id = str(group_id)
        now = self.now()
        config = self.config

        record = MessageRecord(
            id=msg.id,
            sender=msg.sender,
            timestamp=now,
            base_score=_coerce_score(base_score),
            text=msg.text,
            quoted_sender=msg.quoted_sender,
        )
        self.store.record(group_id, record)

        pile_on_history = self.store.recent(group_id, config.pile_on_window_ms, now)
        breakdown = ScoreBreakdown(
            pile_on=detect_pile_on(pile_on_history, self.resolver, config),
            velocity=detect_velocity(
                self.store.recent(group_id, config.velocity_window_ms, now), config,
            ),
            silencing=detect_victim_silencing(
                self.store.recent(group_id, config.silencing_window_ms, now),
                group_id, msg.sender, now, self.activity, self.resolver, config,
            ),
            targeting=detect_targeted_harassment(
                record, group_id, self.ledger, self.resolver, config,
            ),
        )

        self.activity.touch(msg.sender, group_id, now)

        patterns = recent_patterns(
            self.store.recent(group_id, config.patterns_window_ms, now), config,
        )

        if breakdown.total > 0:
            self._log_detections(group_id, record, breakdown, pile_on_history)

        return TemporalScoreResult(
            temporal_score=breakdown.total,
            breakdown=breakdown,
            patterns=patterns,
        )

    def _log_detections(
        self,
        group_id: str,
        record: MessageRecord,
        breakdown: ScoreBreakdown,
        pile_on_history,
    ) -> None:
        config = self.config

        if breakdown.pile_on:
            severe = breakdown.pile_on >= config.pile_on_severe_score
            logger.tree("Severe Pile-On Detected" if severe else "Pile-On Detected", [
                ("Group", group_id),
                ("Attackers", str(max_attackers(pile_on_history, self.resolver))),
                ("Score", str(breakdown.pile_on)),
            ], emoji="🚨" if severe else "⚠️")

        if breakdown.velocity:
            logger.tree("Message Velocity Spike", [
                ("Group", group_id),
                ("Score", str(breakdown.velocity)),
            ], emoji="🚨" if breakdown.velocity >= config.velocity_high_score else "⚠️")

        if breakdown.silencing:
            logger.tree("Victim Silencing Detected", [
                ("Group", group_id),
                ("Policy", config.silencing_policy),
                ("Score", str(breakdown.silencing)),
            ], emoji="🚨")

        events = breakdown.targeting // max(config.targeting_score_per_event, 1)
        if events >= TARGETING_LOG_EVENTS:
            logger.tree("Repeated Targeting", [
                ("Group", group_id),
                ("Sender", record.sender),
                ("Score", str(breakdown.targeting)),
            ], emoji="⚠️")

    # =========================================================================
    # Context & Reports
    # =========================================================================

    def window(
        self,
        group_id: str,
        message_id: str,
        radius: int = CONTEXT_DEFAULT_RADIUS,
    ) -> ContextWindow:
        """
        Messages around message_id in a group's stored history.

        Unknown groups or ids give an empty window with current=None.
        """
        return extract_context_window(self.store.history(str(group_id)), message_id, radius)

    def report(
        self,
        group_id: str,
        time_range_ms: int = REPORT_DEFAULT_RANGE_MS,
    ) -> TemporalReport:
        """Summarize a group's traffic over the last time_range_ms."""
        now = self.now()
        history = self.store.recent(str(group_id), time_range_ms, now)
        return generate_report(history, time_range_ms, now, self.resolver, self.config)

    def group_report(
        self,
        group_id: str,
        time_range_ms: int = REPORT_DEFAULT_RANGE_MS,
    ) -> GroupReport:
        """Admin-facing report with anonymized users and recommended actions."""
        report = self.report(group_id, time_range_ms)
        group_report = build_group_report(str(group_id), report, self.config)

        logger.tree("Group Report Generated", [
            ("Group", str(group_id)),
            ("Messages", str(report.total_messages)),
            ("Flagged", group_report.flagged_percentage),
            ("Severity", report.severity.value),
        ], emoji="📊")

        return group_report

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def force_cleanup(self) -> Dict[str, int]:
        """
        Run the retention sweep immediately, without the event loop.

        Returns:
            Counts of removed messages, events, and activity records.
        """
        result = sweep_temporal_data(self)
        logger.debug("Forced Temporal Cleanup", [
            (key.title(), str(value)) for key, value in result.items()
        ])
        return result

    def start(self) -> None:
        """
        Start the periodic cleanup on the running event loop.

        Raises:
            RuntimeError: If no event loop is running.
        """
        if self.closed:
            return
        self.maintenance.start()

    async def stop(self) -> None:
        """Stop the periodic cleanup."""
        await self.maintenance.stop()

    async def close(self) -> None:
        """Stop background work and drop all in-memory state."""
        await self.stop()
        self.store.clear()
        self.ledger.clear()
        self.activity.clear()
        self.closed = True
        logger.info("Temporal Analysis Service Closed")


__all__ = ["TemporalAnalysisService", "MessageInput"]
