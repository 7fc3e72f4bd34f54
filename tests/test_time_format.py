"""
Tests for bullywatch/utils/time_format.py

Covers the human-readable durations used in reports and log summaries.
"""

import pytest

from bullywatch.core.constants import MS_PER_DAY, MS_PER_HOUR, MS_PER_MINUTE, MS_PER_SECOND
from bullywatch.utils.time_format import format_duration, format_duration_ms


# =============================================================================
# format_duration() Tests
# =============================================================================

class TestFormatDuration:
    """Minute-based formatting."""

    def test_minutes_only(self):
        assert format_duration(1) == "1m"
        assert format_duration(45) == "45m"

    def test_hours_and_minutes(self):
        assert format_duration(60) == "1h"
        assert format_duration(125) == "2h 5m"

    def test_days(self):
        assert format_duration(24 * 60) == "1d"
        assert format_duration(25 * 60 + 1) == "1d 1h 1m"

    @pytest.mark.parametrize("value", [0, -5, None])
    def test_empty_values(self, value):
        assert format_duration(value) == "0m"


# =============================================================================
# format_duration_ms() Tests
# =============================================================================

class TestFormatDurationMs:
    """Millisecond-based formatting."""

    def test_windows(self):
        assert format_duration_ms(5 * MS_PER_MINUTE) == "5m"
        assert format_duration_ms(30 * MS_PER_MINUTE) == "30m"
        assert format_duration_ms(24 * MS_PER_HOUR) == "1d"
        assert format_duration_ms(7 * MS_PER_DAY) == "7d"

    def test_rounds_down_to_minutes(self):
        assert format_duration_ms(90 * MS_PER_SECOND) == "1m"

    def test_sub_minute(self):
        assert format_duration_ms(30 * MS_PER_SECOND) == "30s"

    @pytest.mark.parametrize("value", [0, -1, None, float("nan"), float("-inf")])
    def test_empty_values(self, value):
        assert format_duration_ms(value) == "0m"

    def test_unbounded(self):
        assert format_duration_ms(float("inf")) == "all time"
