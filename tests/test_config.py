"""
Tests for bullywatch/core/config.py

Covers environment parsing, range clamping, and validation errors.
"""

import os

import pytest

from bullywatch.core.config import (
    ConfigValidationError,
    TemporalConfig,
    load_config,
    validate_and_log_config,
)
from bullywatch.core.constants import MS_PER_HOUR

ENV_KEYS = [
    "BULLYWATCH_HISTORY_CAPACITY",
    "BULLYWATCH_RETENTION_HOURS",
    "BULLYWATCH_CLEANUP_INTERVAL",
    "BULLYWATCH_SWEEP_ACTIVITY",
    "BULLYWATCH_SILENCING_POLICY",
    "BULLYWATCH_MAX_TEXT_SCAN",
    "BULLYWATCH_TZ",
    "BULLYWATCH_ERROR_WEBHOOK_URL",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


# =============================================================================
# Defaults
# =============================================================================

class TestDefaults:
    """Values with no environment overrides."""

    def test_defaults_match_dataclass(self):
        assert load_config() == TemporalConfig()

    def test_default_values(self):
        config = TemporalConfig()
        assert config.history_capacity == 500
        assert config.retention_ms == 24 * MS_PER_HOUR
        assert config.cleanup_interval_seconds == 3600
        assert config.silencing_policy == "first_match"
        assert config.sweep_activity is True
        assert config.tz.key == "Asia/Jerusalem"


# =============================================================================
# Environment Overrides
# =============================================================================

class TestEnvironmentOverrides:
    """BULLYWATCH_* variables."""

    def test_integers(self, monkeypatch):
        monkeypatch.setenv("BULLYWATCH_HISTORY_CAPACITY", "50")
        monkeypatch.setenv("BULLYWATCH_RETENTION_HOURS", "48")
        monkeypatch.setenv("BULLYWATCH_CLEANUP_INTERVAL", "600")

        config = load_config()
        assert config.history_capacity == 50
        assert config.retention_ms == 48 * MS_PER_HOUR
        assert config.cleanup_interval_seconds == 600

    def test_invalid_integer_uses_default(self, monkeypatch):
        monkeypatch.setenv("BULLYWATCH_HISTORY_CAPACITY", "lots")
        assert load_config().history_capacity == 500

    def test_values_clamped(self, monkeypatch):
        monkeypatch.setenv("BULLYWATCH_HISTORY_CAPACITY", "5")
        monkeypatch.setenv("BULLYWATCH_RETENTION_HOURS", "1000")
        monkeypatch.setenv("BULLYWATCH_MAX_TEXT_SCAN", "1")

        config = load_config()
        assert config.history_capacity == 10
        assert config.retention_ms == 168 * MS_PER_HOUR
        assert config.max_text_scan_length == 64

    @pytest.mark.parametrize("value,expected", [
        ("false", False),
        ("0", False),
        ("yes", True),
        ("TRUE", True),
    ])
    def test_sweep_activity_flag(self, monkeypatch, value, expected):
        monkeypatch.setenv("BULLYWATCH_SWEEP_ACTIVITY", value)
        assert load_config().sweep_activity is expected

    def test_policy_normalized(self, monkeypatch):
        monkeypatch.setenv("BULLYWATCH_SILENCING_POLICY", " SUM ")
        assert load_config().silencing_policy == "sum"

    def test_webhook_url(self, monkeypatch):
        monkeypatch.setenv("BULLYWATCH_ERROR_WEBHOOK_URL", "https://hooks.example.com/x")
        assert load_config().error_webhook_url == "https://hooks.example.com/x"

    def test_bad_webhook_url_ignored(self, monkeypatch):
        monkeypatch.setenv("BULLYWATCH_ERROR_WEBHOOK_URL", "ftp://hooks.example.com/x")
        assert load_config().error_webhook_url is None

    def test_env_file(self, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("BULLYWATCH_HISTORY_CAPACITY=77\n")
        try:
            assert load_config(str(env_file)).history_capacity == 77
        finally:
            os.environ.pop("BULLYWATCH_HISTORY_CAPACITY", None)


# =============================================================================
# Validation Errors
# =============================================================================

class TestValidationErrors:
    """Settings with no safe fallback."""

    def test_unknown_policy(self, monkeypatch):
        monkeypatch.setenv("BULLYWATCH_SILENCING_POLICY", "loudest")
        with pytest.raises(ConfigValidationError):
            load_config()

    def test_unknown_timezone(self, monkeypatch):
        monkeypatch.setenv("BULLYWATCH_TZ", "Mars/Olympus_Mons")
        with pytest.raises(ConfigValidationError):
            load_config()

    def test_validate_and_log_returns_config(self):
        config = TemporalConfig(history_capacity=42)
        assert validate_and_log_config(config) is config
