"""
Tests for the pattern detectors
===============================

Each detector is exercised directly on stored records, with the
engine-level behaviour covered in test_service.py.
"""

from dataclasses import replace

import pytest

from bullywatch.core.constants import MS_PER_MINUTE, SILENCING_POLICY_SUM
from bullywatch.services.temporal.activity import UserActivityTracker
from bullywatch.services.temporal.detectors import (
    detect_pile_on,
    detect_targeted_harassment,
    detect_velocity,
    detect_victim_silencing,
    max_attackers,
    recent_patterns,
    silenced_victims,
)
from bullywatch.services.temporal.ledger import TargetingLedger
from bullywatch.services.temporal.resolver import MentionTargetResolver

from conftest import START_MS, make_record


@pytest.fixture
def resolver():
    return MentionTargetResolver()


# =============================================================================
# Pile-On
# =============================================================================

class TestPileOn:
    """Distinct attackers on one target."""

    def _attack(self, senders, target="victim"):
        return [
            make_record(i, sender, timestamp=START_MS + i, quoted_sender=target)
            for i, sender in enumerate(senders)
        ]

    def test_two_attackers_no_score(self, resolver, config):
        history = self._attack(["a", "b"]) + [make_record("n", "c", text="hello")]
        assert detect_pile_on(history, resolver, config) == 0

    def test_three_attackers(self, resolver, config):
        assert detect_pile_on(self._attack(["a", "b", "c"]), resolver, config) == 5

    def test_five_attackers(self, resolver, config):
        assert detect_pile_on(self._attack(["a", "b", "c", "d", "e"]), resolver, config) == 10

    def test_repeat_sender_counted_once(self, resolver, config):
        assert detect_pile_on(self._attack(["a", "a", "a", "b"]), resolver, config) == 0

    def test_needs_minimum_messages(self, resolver, config):
        tight = replace(config, pile_on_attackers=2)
        assert detect_pile_on(self._attack(["a", "b"]), resolver, tight) == 0

    def test_mentions_and_quotes_mix(self, resolver, config):
        history = [
            make_record(1, "a", text="@555 go away"),
            make_record(2, "b", quoted_sender="555"),
            make_record(3, "c", text="yeah @555"),
        ]
        assert max_attackers(history, resolver) == 3
        assert detect_pile_on(history, resolver, config) == 5

    def test_split_targets(self, resolver, config):
        history = self._attack(["a", "b"], "v1") + self._attack(["c", "d"], "v2")
        assert detect_pile_on(history, resolver, config) == 0


# =============================================================================
# Velocity
# =============================================================================

class TestVelocity:
    """Message bursts with negative content."""

    def _burst(self, total, negative):
        return [
            make_record(i, f"user{i}", base_score=1 if i < negative else 0)
            for i in range(total)
        ]

    def test_high_tier(self, config):
        assert detect_velocity(self._burst(10, 5), config) == 5

    def test_low_tier(self, config):
        assert detect_velocity(self._burst(5, 3), config) == 3

    def test_ten_messages_few_negative_falls_to_low_tier(self, config):
        assert detect_velocity(self._burst(10, 4), config) == 3

    def test_too_few_messages(self, config):
        assert detect_velocity(self._burst(4, 4), config) == 0

    def test_not_enough_negative(self, config):
        assert detect_velocity(self._burst(8, 2), config) == 0

    def test_zero_score_is_not_negative(self, config):
        assert detect_velocity(self._burst(10, 0), config) == 0


# =============================================================================
# Targeted Harassment
# =============================================================================

class TestTargetedHarassment:
    """Repeated targeting of one user within the lookback."""

    def test_score_grows_and_caps(self, resolver, config):
        ledger = TargetingLedger(config.targeting_lookback_ms)
        scores = [
            detect_targeted_harassment(
                make_record(i, "bully", timestamp=START_MS + i * MS_PER_MINUTE, text="@555"),
                "g1", ledger, resolver, config,
            )
            for i in range(4)
        ]
        assert scores == [3, 6, 9, 9]

    def test_untargeted_message_not_recorded(self, resolver, config):
        ledger = TargetingLedger(config.targeting_lookback_ms)
        score = detect_targeted_harassment(
            make_record(1, "a", text="hello"), "g1", ledger, resolver, config,
        )
        assert score == 0
        assert ledger.key_count() == 0

    def test_old_events_expire(self, resolver, config):
        ledger = TargetingLedger(config.targeting_lookback_ms)
        detect_targeted_harassment(
            make_record(1, "a", timestamp=START_MS, quoted_sender="v"), "g1", ledger, resolver, config,
        )
        score = detect_targeted_harassment(
            make_record(2, "a", timestamp=START_MS + 31 * MS_PER_MINUTE, quoted_sender="v"),
            "g1", ledger, resolver, config,
        )
        assert score == 3


# =============================================================================
# Victim Silencing
# =============================================================================

class TestVictimSilencing:
    """Harassed users who stopped talking."""

    NOW = START_MS + 15 * MS_PER_MINUTE

    def _setup(self, victims, victim_messages=6):
        """Victims chat at START_MS, then get harassed one minute later."""
        activity = UserActivityTracker()
        history = []
        for victim in victims:
            for i in range(victim_messages):
                activity.touch(victim, "g1", START_MS + i)
                history.append(make_record(f"{victim}-{i}", victim, timestamp=START_MS + i))
        for victim in victims:
            history.append(make_record(
                f"h-{victim}", "bully", timestamp=START_MS + MS_PER_MINUTE,
                base_score=5, quoted_sender=victim,
            ))
        return history, activity

    def test_single_victim(self, resolver, config):
        history, activity = self._setup(["v1"])
        assert detect_victim_silencing(
            history, "g1", "bystander", self.NOW, activity, resolver, config,
        ) == 5

    def test_first_match_policy_scores_once(self, resolver, config):
        history, activity = self._setup(["v1", "v2"])
        assert silenced_victims(
            history, "g1", "bystander", self.NOW, activity, resolver, config,
        ) == ["v1", "v2"]
        assert detect_victim_silencing(
            history, "g1", "bystander", self.NOW, activity, resolver, config,
        ) == 5

    def test_sum_policy_scores_each_victim(self, resolver, config):
        history, activity = self._setup(["v1", "v2"])
        summed = replace(config, silencing_policy=SILENCING_POLICY_SUM)
        assert detect_victim_silencing(
            history, "g1", "bystander", self.NOW, activity, resolver, summed,
        ) == 10

    def test_victim_not_active_enough(self, resolver, config):
        history, activity = self._setup(["v1"], victim_messages=5)
        assert detect_victim_silencing(
            history, "g1", "bystander", self.NOW, activity, resolver, config,
        ) == 0

    def test_harassment_too_recent(self, resolver, config):
        history, activity = self._setup(["v1"])
        soon = START_MS + 5 * MS_PER_MINUTE
        assert detect_victim_silencing(
            history, "g1", "bystander", soon, activity, resolver, config,
        ) == 0

    def test_victim_spoke_recently(self, resolver, config):
        history, activity = self._setup(["v1"])
        activity.touch("v1", "g1", self.NOW - MS_PER_MINUTE)
        assert detect_victim_silencing(
            history, "g1", "bystander", self.NOW, activity, resolver, config,
        ) == 0

    def test_victim_moved_to_other_group(self, resolver, config):
        history, activity = self._setup(["v1"])
        activity.touch("v1", "g2", START_MS + 10)
        assert detect_victim_silencing(
            history, "g1", "bystander", self.NOW, activity, resolver, config,
        ) == 0

    def test_current_sender_is_not_a_victim(self, resolver, config):
        history, activity = self._setup(["v1"])
        assert detect_victim_silencing(
            history, "g1", "v1", self.NOW, activity, resolver, config,
        ) == 0

    def test_self_targeting_ignored(self, resolver, config):
        activity = UserActivityTracker()
        history = []
        for i in range(6):
            activity.touch("v1", "g1", START_MS + i)
            history.append(make_record(i, "v1", timestamp=START_MS + i))
        history.append(make_record("self", "v1", timestamp=START_MS + 10, base_score=5, quoted_sender="v1"))
        assert detect_victim_silencing(
            history, "g1", "bystander", self.NOW, activity, resolver, config,
        ) == 0

    def test_low_score_is_not_harassment(self, resolver, config):
        history, activity = self._setup(["v1"])
        softened = [replace(m, base_score=3) if m.sender == "bully" else m for m in history]
        assert detect_victim_silencing(
            softened, "g1", "bystander", self.NOW, activity, resolver, config,
        ) == 0

    def test_short_history(self, resolver, config):
        history, activity = self._setup(["v1"])
        assert detect_victim_silencing(
            history[-4:], "g1", "bystander", self.NOW, activity, resolver, config,
        ) == 0


# =============================================================================
# Recent Patterns
# =============================================================================

class TestRecentPatterns:
    """Snapshot statistics."""

    def test_snapshot(self, config):
        history = [
            make_record(1, "a", base_score=1),
            make_record(2, "b", base_score=2),
            make_record(3, "a", base_score=0),
        ]
        patterns = recent_patterns(history, config)
        assert patterns.total_messages == 3
        assert patterns.negative_messages == 2
        assert patterns.unique_senders == 2
        assert patterns.average_score == pytest.approx(1.0)

    def test_empty(self, config):
        patterns = recent_patterns([], config)
        assert patterns.total_messages == 0
        assert patterns.average_score == 0
