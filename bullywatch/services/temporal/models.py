"""
Temporal Analysis Data Models
=============================

Dataclasses for incoming messages, stored records, activity, targeting
events, and the result objects handed back to the moderation layer.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple


# =============================================================================
# Input
# =============================================================================

@dataclass(frozen=True)
class ChatMessage:
    """A chat message as normalized by the upstream transport layer."""
    id: str
    sender: str
    text: str = ""
    quoted_sender: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "ChatMessage":
        """
        Build a message from a loosely shaped mapping.

        Accepts `quotedMessage` / `quoted_message` (with a nested `sender`)
        or a flat `quoted_sender`. Missing optional fields become empty.
        """
        quoted = payload.get("quotedMessage") or payload.get("quoted_message")
        quoted_sender = payload.get("quoted_sender")
        if quoted_sender is None and isinstance(quoted, Mapping):
            quoted_sender = quoted.get("sender")

        text = payload.get("text")
        return cls(
            id=str(payload.get("id", "")),
            sender=str(payload.get("sender", "")),
            text=text if isinstance(text, str) else "",
            quoted_sender=str(quoted_sender) if quoted_sender else None,
        )


# =============================================================================
# Stored State
# =============================================================================

@dataclass(frozen=True)
class MessageRecord:
    """Record of a message kept in a group's sliding history."""
    id: str
    sender: str
    timestamp: int  # epoch milliseconds
    base_score: float
    text: str = ""
    quoted_sender: Optional[str] = None


@dataclass
class UserActivity:
    """Last-seen state for one user (last group wins)."""
    group_id: str
    message_count: int = 0
    last_message_time: int = 0


@dataclass(frozen=True)
class TargetingEvent:
    """One message aimed at a target within a group."""
    timestamp: int
    attacker_id: str
    score: float


# =============================================================================
# Results
# =============================================================================

@dataclass
class ScoreBreakdown:
    """Per-detector sub-scores for one analyzed message."""
    pile_on: int = 0
    velocity: int = 0
    silencing: int = 0
    targeting: int = 0

    @property
    def total(self) -> int:
        return self.pile_on + self.velocity + self.silencing + self.targeting


@dataclass
class RecentPatterns:
    """Snapshot statistics over the trailing patterns window."""
    total_messages: int = 0
    negative_messages: int = 0
    unique_senders: int = 0
    average_score: float = 0.0


@dataclass
class TemporalScoreResult:
    """Composite temporal score returned by analyze()."""
    temporal_score: int
    breakdown: ScoreBreakdown
    patterns: RecentPatterns

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the camelCase shape used by the scoring layer."""
        return {
            "temporalScore": self.temporal_score,
            "breakdown": {
                "pileOn": self.breakdown.pile_on,
                "velocity": self.breakdown.velocity,
                "silencing": self.breakdown.silencing,
                "targeting": self.breakdown.targeting,
            },
            "patterns": {
                "totalMessages": self.patterns.total_messages,
                "negativeMessages": self.patterns.negative_messages,
                "uniqueSenders": self.patterns.unique_senders,
                "averageScore": self.patterns.average_score,
            },
        }


@dataclass
class ContextWindow:
    """Messages surrounding one message in a group's history."""
    before: List[MessageRecord] = field(default_factory=list)
    current: Optional[MessageRecord] = None
    after: List[MessageRecord] = field(default_factory=list)


class Severity(str, Enum):
    """Group-level severity derived from the share of flagged messages."""
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


@dataclass
class TemporalReport:
    """Windowed summary of a group's recent traffic."""
    time_range_ms: int
    total_messages: int
    negative_messages: int
    negative_percentage: float
    top_senders: List[Tuple[str, int]]
    top_targets: List[Tuple[str, int]]
    severity: Severity
    timestamp: int


@dataclass
class Recommendation:
    """Suggested moderator action derived from a report."""
    priority: str
    action: str
    description: str


@dataclass
class RankedUser:
    """Anonymized entry in a group report's offender or target list."""
    user_id: str
    count: int
    percentage: str


@dataclass
class GroupReport:
    """Admin-facing report built on top of a TemporalReport."""
    group_id: str
    time_range: str
    generated_at: str
    total_messages: int
    flagged_messages: int
    flagged_percentage: str
    severity: Severity
    top_offenders: List[RankedUser]
    top_targets: List[RankedUser]
    recommendations: List[Recommendation]


__all__ = [
    "ChatMessage",
    "MessageRecord",
    "UserActivity",
    "TargetingEvent",
    "ScoreBreakdown",
    "RecentPatterns",
    "TemporalScoreResult",
    "ContextWindow",
    "Severity",
    "TemporalReport",
    "Recommendation",
    "RankedUser",
    "GroupReport",
]
