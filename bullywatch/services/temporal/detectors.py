"""
Temporal Analysis - Pattern Detectors
=====================================

Functions that score pile-ons, velocity spikes, victim silencing, and
repeated targeting over data already held by the store, activity tracker,
and ledger. Every detector returns a non-negative int and never raises on
malformed input.
"""

from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Sequence, Set

from bullywatch.core.config import TemporalConfig
from bullywatch.core.constants import SILENCING_POLICY_SUM

from .activity import UserActivityTracker
from .ledger import TargetingLedger
from .models import MessageRecord, RecentPatterns
from .resolver import TargetResolver


# =============================================================================
# Shared Helpers
# =============================================================================

def target_of(message: MessageRecord, resolver: TargetResolver) -> Optional[str]:
    """Resolve the user a stored message is aimed at."""
    return resolver.resolve(message.text, message.quoted_sender)


def count_negative(history: Iterable[MessageRecord], threshold: float) -> int:
    """Count messages whose base score is strictly above threshold."""
    return sum(1 for m in history if m.base_score > threshold)


def attackers_by_target(
    history: Iterable[MessageRecord],
    resolver: TargetResolver,
) -> Dict[str, Set[str]]:
    """Map each resolvable target to the distinct senders aiming at it."""
    attackers: Dict[str, Set[str]] = defaultdict(set)
    for msg in history:
        target = target_of(msg, resolver)
        if target:
            attackers[target].add(msg.sender)
    return attackers


def max_attackers(history: Iterable[MessageRecord], resolver: TargetResolver) -> int:
    """Largest distinct-sender count on any single target."""
    attackers = attackers_by_target(history, resolver)
    return max((len(senders) for senders in attackers.values()), default=0)


# =============================================================================
# Pile-On
# =============================================================================

def detect_pile_on(
    history: Sequence[MessageRecord],
    resolver: TargetResolver,
    config: TemporalConfig,
) -> int:
    """
    Score several distinct users targeting the same person.

    Args:
        history: Group messages inside the pile-on window.

    Returns:
        pile_on_severe_score for >= pile_on_severe_attackers distinct
        attackers, pile_on_score for >= pile_on_attackers, else 0.
    """
    if len(history) < config.pile_on_min_messages:
        return 0

    attackers = max_attackers(history, resolver)

    if attackers >= config.pile_on_severe_attackers:
        return config.pile_on_severe_score
    if attackers >= config.pile_on_attackers:
        return config.pile_on_score
    return 0


# =============================================================================
# Message Velocity
# =============================================================================

def detect_velocity(history: Sequence[MessageRecord], config: TemporalConfig) -> int:
    """
    Score bursts of messages that carry negative base scores.

    Both the message count and the negative count must clear a tier;
    the higher tier is checked first.
    """
    total = len(history)
    negative = count_negative(history, config.negative_score)

    if total >= config.velocity_high_messages and negative >= config.velocity_high_negative:
        return config.velocity_high_score
    if total >= config.velocity_messages and negative >= config.velocity_negative:
        return config.velocity_score
    return 0


# =============================================================================
# Victim Silencing
# =============================================================================

def silenced_victims(
    history: Sequence[MessageRecord],
    group_id: str,
    sender_id: str,
    now: int,
    activity: UserActivityTracker,
    resolver: TargetResolver,
    config: TemporalConfig,
) -> List[str]:
    """
    List previously active targets that went quiet after being harassed.

    Harassment-grade messages are those above config.harassment_score.
    Self-targeting and the current sender are never counted as victims.
    Victims are returned in the order they were first harassed.
    """
    last_harassed: Dict[str, int] = {}

    for msg in history:
        if msg.base_score <= config.harassment_score:
            continue
        target = target_of(msg, resolver)
        if not target or target == msg.sender or target == sender_id:
            continue
        last_harassed[target] = max(last_harassed.get(target, 0), msg.timestamp)

    victims: List[str] = []
    for target, harassed_at in last_harassed.items():
        record = activity.get(target)
        if record is None or record.group_id != group_id:
            continue
        if record.message_count <= config.silencing_min_activity:
            continue
        if (now - harassed_at > config.silencing_quiet_ms
                and now - record.last_message_time > config.silencing_quiet_ms):
            victims.append(target)
    return victims


def detect_victim_silencing(
    history: Sequence[MessageRecord],
    group_id: str,
    sender_id: str,
    now: int,
    activity: UserActivityTracker,
    resolver: TargetResolver,
    config: TemporalConfig,
) -> int:
    """
    Score harassed users who stopped talking.

    With the default first_match policy one flat silencing_score is awarded
    no matter how many victims qualify; the sum policy awards it per victim.
    """
    if len(history) < config.silencing_min_messages:
        return 0

    victims = silenced_victims(history, group_id, sender_id, now, activity, resolver, config)
    if not victims:
        return 0
    if config.silencing_policy == SILENCING_POLICY_SUM:
        return config.silencing_score * len(victims)
    return config.silencing_score


# =============================================================================
# Targeted Harassment
# =============================================================================

def detect_targeted_harassment(
    message: MessageRecord,
    group_id: str,
    ledger: TargetingLedger,
    resolver: TargetResolver,
    config: TemporalConfig,
) -> int:
    """
    Score the same person being targeted repeatedly.

    Records the current message in the ledger when it has a target, then
    scores targeting_score_per_event for every event in the lookback
    window, capped at targeting_max_score.
    """
    target = target_of(message, resolver)
    if not target:
        return 0

    events = ledger.record_targeting(
        group_id, target, message.sender, message.timestamp, message.base_score,
    )
    return min(len(events) * config.targeting_score_per_event, config.targeting_max_score)


# =============================================================================
# Recent Patterns Snapshot
# =============================================================================

def recent_patterns(history: Sequence[MessageRecord], config: TemporalConfig) -> RecentPatterns:
    """Summary statistics over the patterns window."""
    total = len(history)
    return RecentPatterns(
        total_messages=total,
        negative_messages=count_negative(history, config.negative_score),
        unique_senders=len({m.sender for m in history}),
        average_score=sum(m.base_score for m in history) / max(total, 1),
    )


# =============================================================================
# Module Export
# =============================================================================

__all__ = [
    "target_of",
    "count_negative",
    "attackers_by_target",
    "max_attackers",
    "detect_pile_on",
    "detect_velocity",
    "silenced_victims",
    "detect_victim_silencing",
    "detect_targeted_harassment",
    "recent_patterns",
]
