"""
BullyWatch - Temporal Analysis Package
======================================

Streaming detection of pile-ons, velocity spikes, victim silencing, and
repeated targeting over per-group chat history.
"""

from .models import (
    ChatMessage,
    ContextWindow,
    GroupReport,
    MessageRecord,
    RecentPatterns,
    ScoreBreakdown,
    Severity,
    TargetingEvent,
    TemporalReport,
    TemporalScoreResult,
    UserActivity,
)
from .resolver import MentionTargetResolver, TargetResolver
from .service import TemporalAnalysisService

__all__ = [
    "TemporalAnalysisService",
    "ChatMessage",
    "ContextWindow",
    "GroupReport",
    "MessageRecord",
    "RecentPatterns",
    "ScoreBreakdown",
    "Severity",
    "TargetingEvent",
    "TemporalReport",
    "TemporalScoreResult",
    "UserActivity",
    "MentionTargetResolver",
    "TargetResolver",
]
