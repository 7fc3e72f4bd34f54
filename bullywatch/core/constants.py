"""
BullyWatch - Constants
======================

Default windows, thresholds, and limits for temporal pattern detection.
All values are overridable through TemporalConfig.
"""

from typing import Dict


# =============================================================================
# Time Units
# =============================================================================

MS_PER_SECOND = 1000
MS_PER_MINUTE = 60 * MS_PER_SECOND
MS_PER_HOUR = 60 * MS_PER_MINUTE
MS_PER_DAY = 24 * MS_PER_HOUR


# =============================================================================
# History Bounds
# =============================================================================

HISTORY_CAPACITY = 500  # messages kept per group
RETENTION_HORIZON_MS = 24 * MS_PER_HOUR
CLEANUP_INTERVAL_SECONDS = 3600  # lifecycle sweep every hour


# =============================================================================
# Pile-On
# =============================================================================

PILE_ON_WINDOW_MS = 5 * MS_PER_MINUTE
PILE_ON_MIN_MESSAGES = 3
PILE_ON_ATTACKERS = 3  # 3+ distinct senders on one target
PILE_ON_SEVERE_ATTACKERS = 5
PILE_ON_SCORE = 5
PILE_ON_SEVERE_SCORE = 10


# =============================================================================
# Message Velocity
# =============================================================================

VELOCITY_WINDOW_MS = 5 * MS_PER_MINUTE
VELOCITY_MESSAGES = 5
VELOCITY_NEGATIVE = 3
VELOCITY_SCORE = 3
VELOCITY_HIGH_MESSAGES = 10
VELOCITY_HIGH_NEGATIVE = 5
VELOCITY_HIGH_SCORE = 5


# =============================================================================
# Victim Silencing
# =============================================================================

SILENCING_WINDOW_MS = 30 * MS_PER_MINUTE
SILENCING_MIN_MESSAGES = 5
SILENCING_MIN_ACTIVITY = 5  # victim must have sent more than this
SILENCING_QUIET_MS = 10 * MS_PER_MINUTE
SILENCING_SCORE = 5


# =============================================================================
# Targeted Harassment
# =============================================================================

TARGETING_LOOKBACK_MS = 30 * MS_PER_MINUTE
TARGETING_SCORE_PER_EVENT = 3
TARGETING_MAX_SCORE = 9
TARGETING_LOG_EVENTS = 3  # log repeated targeting from this count


# =============================================================================
# Score Classification
# =============================================================================

HARASSMENT_SCORE = 3  # base score above this is harassment-grade
NEGATIVE_SCORE = 0  # base score above this counts as negative
PATTERNS_WINDOW_MS = 15 * MS_PER_MINUTE


# =============================================================================
# Mention Extraction
# =============================================================================

MAX_TEXT_SCAN_LENGTH = 2000  # characters scanned for mentions
MENTION_PATTERN = r"@(\d+)"
ADDRESS_PATTERN = r"אתה|את|יא"  # Hebrew second-person address forms


# =============================================================================
# Reports
# =============================================================================

REPORT_DEFAULT_RANGE_MS = 24 * MS_PER_HOUR
REPORT_TOP_N = 5
CONTEXT_DEFAULT_RADIUS = 5

# Ratio strictly above each value moves to the next level
SEVERITY_THRESHOLDS: Dict[str, float] = {
    "CRITICAL": 0.30,
    "HIGH": 0.15,
    "MEDIUM": 0.05,
}

TARGET_CHECK_IN_COUNT = 5  # recommend checking on a user targeted this often
OFFENDER_WARN_COUNT = 10  # recommend warning a sender flagged this often
ANONYMIZE_VISIBLE_CHARS = 4


# =============================================================================
# Silencing Policies
# =============================================================================

SILENCING_POLICY_FIRST_MATCH = "first_match"
SILENCING_POLICY_SUM = "sum"
SILENCING_POLICIES = (SILENCING_POLICY_FIRST_MATCH, SILENCING_POLICY_SUM)
