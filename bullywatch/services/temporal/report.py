"""
Temporal Analysis - Report Generator
====================================

Windowed harassment summaries for a group: counts, top senders and
targets of harassment-grade messages, a severity level, and an
admin-facing report with anonymized users and recommended actions.
"""

from collections import Counter
from datetime import datetime
from typing import List, Sequence, Tuple

from bullywatch.core.config import TemporalConfig
from bullywatch.core.constants import (
    ANONYMIZE_VISIBLE_CHARS,
    OFFENDER_WARN_COUNT,
    TARGET_CHECK_IN_COUNT,
)
from bullywatch.utils.time_format import format_duration_ms

from .detectors import target_of
from .models import (
    GroupReport,
    MessageRecord,
    RankedUser,
    Recommendation,
    Severity,
    TemporalReport,
)
from .resolver import TargetResolver


# =============================================================================
# Severity
# =============================================================================

def calculate_severity(negative_count: int, total_count: int, config: TemporalConfig) -> Severity:
    """
    Classify the share of flagged messages.

    A ratio exactly on a threshold stays at the lower level.
    """
    ratio = negative_count / max(total_count, 1)

    if ratio > config.severity_critical:
        return Severity.CRITICAL
    if ratio > config.severity_high:
        return Severity.HIGH
    if ratio > config.severity_medium:
        return Severity.MEDIUM
    return Severity.LOW


def _top(counter: Counter, n: int) -> List[Tuple[str, int]]:
    # Counter keeps first-seen order and sorted() is stable, so ties keep it too
    return sorted(counter.items(), key=lambda item: item[1], reverse=True)[:n]


# =============================================================================
# Report
# =============================================================================

def generate_report(
    history: Sequence[MessageRecord],
    time_range_ms: int,
    now: int,
    resolver: TargetResolver,
    config: TemporalConfig,
) -> TemporalReport:
    """
    Summarize a group's messages inside the report window.

    Args:
        history: Group messages already limited to time_range_ms.
        time_range_ms: Window the history was taken from.
        now: Report time in epoch milliseconds.
    """
    flagged = [m for m in history if m.base_score > config.harassment_score]
    senders: Counter = Counter()
    targets: Counter = Counter()

    for msg in flagged:
        senders[msg.sender] += 1
        target = target_of(msg, resolver)
        if target:
            targets[target] += 1

    total = len(history)
    return TemporalReport(
        time_range_ms=time_range_ms,
        total_messages=total,
        negative_messages=len(flagged),
        negative_percentage=round(len(flagged) / max(total, 1) * 100, 1),
        top_senders=_top(senders, config.report_top_n),
        top_targets=_top(targets, config.report_top_n),
        severity=calculate_severity(len(flagged), total, config),
        timestamp=now,
    )


# =============================================================================
# Group Report (Admin Facing)
# =============================================================================

def anonymize_user_id(user_id: str) -> str:
    """Keep only the first few characters of a user id."""
    return f"{str(user_id)[:ANONYMIZE_VISIBLE_CHARS]}***"


def _rank(entries: List[Tuple[str, int]], flagged: int) -> List[RankedUser]:
    return [
        RankedUser(
            user_id=anonymize_user_id(user_id),
            count=count,
            percentage=f"{count / max(flagged, 1) * 100:.1f}%",
        )
        for user_id, count in entries
    ]


def generate_recommendations(report: TemporalReport) -> List[Recommendation]:
    """
    Suggest moderator actions for a report.

    Always returns at least one recommendation.
    """
    recommendations: List[Recommendation] = []

    if report.severity is Severity.CRITICAL:
        recommendations.append(Recommendation(
            priority="HIGH",
            action="Immediate intervention required",
            description="Over 30% of messages are flagged as potentially harmful. "
                        "Consider immediate admin review.",
        ))
    elif report.severity is Severity.HIGH:
        recommendations.append(Recommendation(
            priority="MEDIUM",
            action="Monitor closely",
            description="15-30% of messages flagged. Increase monitoring frequency.",
        ))

    if report.top_targets and report.top_targets[0][1] >= TARGET_CHECK_IN_COUNT:
        recommendations.append(Recommendation(
            priority="HIGH",
            action="Check on targeted user",
            description=f"One user has been targeted {report.top_targets[0][1]} times. "
                        "Reach out privately to check their wellbeing.",
        ))

    if report.top_senders and report.top_senders[0][1] >= OFFENDER_WARN_COUNT:
        recommendations.append(Recommendation(
            priority="MEDIUM",
            action="Warn repeat offender",
            description=f"One user has {report.top_senders[0][1]} flagged messages. "
                        "Consider a warning or temporary restriction.",
        ))

    if not recommendations:
        recommendations.append(Recommendation(
            priority="LOW",
            action="Continue monitoring",
            description="No immediate action required. Continue routine monitoring.",
        ))

    return recommendations


def build_group_report(group_id: str, report: TemporalReport, config: TemporalConfig) -> GroupReport:
    """Wrap a TemporalReport for admins: anonymized users plus recommendations."""
    generated_at = datetime.fromtimestamp(report.timestamp / 1000, tz=config.tz)
    return GroupReport(
        group_id=group_id,
        time_range=format_duration_ms(report.time_range_ms),
        generated_at=generated_at.isoformat(),
        total_messages=report.total_messages,
        flagged_messages=report.negative_messages,
        flagged_percentage=f"{report.negative_percentage:.1f}%",
        severity=report.severity,
        top_offenders=_rank(report.top_senders, report.negative_messages),
        top_targets=_rank(report.top_targets, report.negative_messages),
        recommendations=generate_recommendations(report),
    )


__all__ = [
    "calculate_severity",
    "generate_report",
    "anonymize_user_id",
    "generate_recommendations",
    "build_group_report",
]
