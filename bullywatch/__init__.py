"""
BullyWatch
==========

Temporal abuse-pattern detection for group chats.

Usage:
    from bullywatch import TemporalAnalysisService

    engine = TemporalAnalysisService()
    result = engine.analyze(
        {"id": "m1", "sender": "972500000001", "text": "@972500000002 ..."},
        group_id="120363",
        base_score=4,
    )
    result.temporal_score
"""

from bullywatch.core.config import TemporalConfig, load_config
from bullywatch.services.temporal import (
    ChatMessage,
    Severity,
    TemporalAnalysisService,
)

__version__ = "1.0.0"

__all__ = [
    "TemporalAnalysisService",
    "TemporalConfig",
    "ChatMessage",
    "Severity",
    "load_config",
]
