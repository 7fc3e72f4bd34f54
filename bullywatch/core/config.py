"""
BullyWatch - Configuration Module
=================================

Centralized configuration for the temporal analysis engine.

DESIGN:
    Every window, threshold, and score used by the detectors is a named
    field on TemporalConfig, with defaults equal to the tuned production
    values. Overrides come from BULLYWATCH_* environment variables (or a
    .env file) and are range-checked once at load time.

    Key patterns:
    - get_config() returns one lazily loaded process-wide instance
    - The engine also accepts an injected TemporalConfig so tests and
      embedders can run isolated instances
"""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from bullywatch.core import constants as c


# =============================================================================
# Configuration Dataclass
# =============================================================================

@dataclass(frozen=True)
class TemporalConfig:
    """
    Tunable parameters for temporal pattern detection.

    All durations are milliseconds unless the name says seconds.
    """

    # -------------------------------------------------------------------------
    # History & Retention
    # -------------------------------------------------------------------------

    history_capacity: int = c.HISTORY_CAPACITY
    retention_ms: int = c.RETENTION_HORIZON_MS
    cleanup_interval_seconds: int = c.CLEANUP_INTERVAL_SECONDS
    sweep_activity: bool = True  # apply retention to per-user activity too

    # -------------------------------------------------------------------------
    # Pile-On
    # -------------------------------------------------------------------------

    pile_on_window_ms: int = c.PILE_ON_WINDOW_MS
    pile_on_min_messages: int = c.PILE_ON_MIN_MESSAGES
    pile_on_attackers: int = c.PILE_ON_ATTACKERS
    pile_on_severe_attackers: int = c.PILE_ON_SEVERE_ATTACKERS
    pile_on_score: int = c.PILE_ON_SCORE
    pile_on_severe_score: int = c.PILE_ON_SEVERE_SCORE

    # -------------------------------------------------------------------------
    # Velocity
    # -------------------------------------------------------------------------

    velocity_window_ms: int = c.VELOCITY_WINDOW_MS
    velocity_messages: int = c.VELOCITY_MESSAGES
    velocity_negative: int = c.VELOCITY_NEGATIVE
    velocity_score: int = c.VELOCITY_SCORE
    velocity_high_messages: int = c.VELOCITY_HIGH_MESSAGES
    velocity_high_negative: int = c.VELOCITY_HIGH_NEGATIVE
    velocity_high_score: int = c.VELOCITY_HIGH_SCORE

    # -------------------------------------------------------------------------
    # Victim Silencing
    # -------------------------------------------------------------------------

    silencing_window_ms: int = c.SILENCING_WINDOW_MS
    silencing_min_messages: int = c.SILENCING_MIN_MESSAGES
    silencing_min_activity: int = c.SILENCING_MIN_ACTIVITY
    silencing_quiet_ms: int = c.SILENCING_QUIET_MS
    silencing_score: int = c.SILENCING_SCORE
    silencing_policy: str = c.SILENCING_POLICY_FIRST_MATCH

    # -------------------------------------------------------------------------
    # Targeted Harassment
    # -------------------------------------------------------------------------

    targeting_lookback_ms: int = c.TARGETING_LOOKBACK_MS
    targeting_score_per_event: int = c.TARGETING_SCORE_PER_EVENT
    targeting_max_score: int = c.TARGETING_MAX_SCORE

    # -------------------------------------------------------------------------
    # Classification & Snapshots
    # -------------------------------------------------------------------------

    harassment_score: float = c.HARASSMENT_SCORE
    negative_score: float = c.NEGATIVE_SCORE
    patterns_window_ms: int = c.PATTERNS_WINDOW_MS
    max_text_scan_length: int = c.MAX_TEXT_SCAN_LENGTH

    # -------------------------------------------------------------------------
    # Reports
    # -------------------------------------------------------------------------

    report_top_n: int = c.REPORT_TOP_N
    severity_critical: float = c.SEVERITY_THRESHOLDS["CRITICAL"]
    severity_high: float = c.SEVERITY_THRESHOLDS["HIGH"]
    severity_medium: float = c.SEVERITY_THRESHOLDS["MEDIUM"]

    # -------------------------------------------------------------------------
    # Logging
    # -------------------------------------------------------------------------

    timezone: str = "Asia/Jerusalem"
    error_webhook_url: Optional[str] = None

    @property
    def tz(self) -> ZoneInfo:
        """Timezone object for report timestamps."""
        return ZoneInfo(self.timezone)


# =============================================================================
# Validation
# =============================================================================

class ConfigValidationError(Exception):
    """Raised when configuration is invalid and cannot fall back to a default."""

    pass


def _parse_int_with_default(
    value: Optional[str],
    default: int,
    name: str,
    min_val: Optional[int] = None,
    max_val: Optional[int] = None,
) -> int:
    """
    Parse optional integer with default and range validation.

    Args:
        value: String value from environment variable.
        default: Default value if not set or invalid.
        name: Variable name for warning messages.
        min_val: Minimum allowed value (inclusive).
        max_val: Maximum allowed value (inclusive).

    Returns:
        Parsed integer within valid range, or default.
    """
    if not value:
        return default
    from bullywatch.core.logger import logger
    try:
        parsed = int(value)
    except ValueError:
        logger.warning(f"Config {name}='{value}' invalid, using default {default}")
        return default
    if min_val is not None and parsed < min_val:
        logger.warning(f"Config {name}={parsed} below min {min_val}, using {min_val}")
        return min_val
    if max_val is not None and parsed > max_val:
        logger.warning(f"Config {name}={parsed} above max {max_val}, using {max_val}")
        return max_val
    return parsed


def _parse_bool(value: Optional[str], default: bool) -> bool:
    if not value:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _validate_url(value: Optional[str], name: str) -> Optional[str]:
    """
    Validate URL format for webhooks.

    Returns:
        URL if valid, None if invalid or empty.
    """
    if not value:
        return None
    if not value.startswith(("https://", "http://")):
        from bullywatch.core.logger import logger
        logger.warning(f"Config {name} invalid URL format, ignoring")
        return None
    return value


def _validate_timezone(value: str) -> str:
    try:
        ZoneInfo(value)
    except (ZoneInfoNotFoundError, ValueError):
        raise ConfigValidationError(f"Unknown timezone for BULLYWATCH_TZ: {value}")
    return value


def _validate_policy(value: str) -> str:
    policy = value.strip().lower()
    if policy not in c.SILENCING_POLICIES:
        raise ConfigValidationError(
            f"Invalid BULLYWATCH_SILENCING_POLICY: {value} "
            f"(expected one of {', '.join(c.SILENCING_POLICIES)})"
        )
    return policy


# =============================================================================
# Configuration Loading
# =============================================================================

def load_config(env_file: Optional[str] = None) -> TemporalConfig:
    """
    Load and validate configuration from environment variables.

    Args:
        env_file: Optional path to a .env file loaded before reading.

    Returns:
        Validated TemporalConfig.

    Raises:
        ConfigValidationError: If the silencing policy or timezone is unknown.
    """
    if env_file:
        load_dotenv(env_file)

    defaults = TemporalConfig()

    return TemporalConfig(
        history_capacity=_parse_int_with_default(
            os.getenv("BULLYWATCH_HISTORY_CAPACITY"), defaults.history_capacity,
            "BULLYWATCH_HISTORY_CAPACITY", min_val=10, max_val=10000,
        ),
        retention_ms=_parse_int_with_default(
            os.getenv("BULLYWATCH_RETENTION_HOURS"), defaults.retention_ms // c.MS_PER_HOUR,
            "BULLYWATCH_RETENTION_HOURS", min_val=1, max_val=168,
        ) * c.MS_PER_HOUR,
        cleanup_interval_seconds=_parse_int_with_default(
            os.getenv("BULLYWATCH_CLEANUP_INTERVAL"), defaults.cleanup_interval_seconds,
            "BULLYWATCH_CLEANUP_INTERVAL", min_val=60, max_val=86400,
        ),
        sweep_activity=_parse_bool(os.getenv("BULLYWATCH_SWEEP_ACTIVITY"), defaults.sweep_activity),
        silencing_policy=_validate_policy(
            os.getenv("BULLYWATCH_SILENCING_POLICY", defaults.silencing_policy)
        ),
        max_text_scan_length=_parse_int_with_default(
            os.getenv("BULLYWATCH_MAX_TEXT_SCAN"), defaults.max_text_scan_length,
            "BULLYWATCH_MAX_TEXT_SCAN", min_val=64, max_val=100000,
        ),
        timezone=_validate_timezone(os.getenv("BULLYWATCH_TZ", defaults.timezone)),
        error_webhook_url=_validate_url(
            os.getenv("BULLYWATCH_ERROR_WEBHOOK_URL"), "BULLYWATCH_ERROR_WEBHOOK_URL"
        ),
    )


# =============================================================================
# Global Config Instance
# =============================================================================

_config: Optional[TemporalConfig] = None


def get_config() -> TemporalConfig:
    """
    Get the global configuration instance, loading if needed.

    Raises:
        ConfigValidationError: On first call if config is invalid.
    """
    global _config
    if _config is None:
        _config = load_config()
    return _config


def validate_and_log_config(config: Optional[TemporalConfig] = None) -> TemporalConfig:
    """
    Validate configuration and log a summary at startup.

    Returns:
        The validated config.
    """
    from bullywatch.core.logger import logger
    from bullywatch.utils.time_format import format_duration_ms

    config = config or get_config()

    logger.tree_nested("Configuration Validated", [
        ("History", [
            ("Capacity", f"{config.history_capacity} msgs / group"),
            ("Retention", format_duration_ms(config.retention_ms)),
            ("Sweep Interval", f"{config.cleanup_interval_seconds}s"),
            ("Sweep Activity", "Yes" if config.sweep_activity else "No"),
        ]),
        ("Detectors", [
            ("Pile-On Window", format_duration_ms(config.pile_on_window_ms)),
            ("Velocity Window", format_duration_ms(config.velocity_window_ms)),
            ("Silencing Policy", config.silencing_policy),
            ("Targeting Lookback", format_duration_ms(config.targeting_lookback_ms)),
        ]),
        ("Logging", [
            ("Timezone", config.timezone),
            ("Error Webhook", "Set" if config.error_webhook_url else "Not set"),
        ]),
    ], emoji="⚙️")

    return config


# =============================================================================
# Module Export
# =============================================================================

__all__ = [
    "TemporalConfig",
    "ConfigValidationError",
    "load_config",
    "get_config",
    "validate_and_log_config",
]
