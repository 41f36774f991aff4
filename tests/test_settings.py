"""
Tests for application settings.
"""

import pytest
from pydantic import ValidationError

from config import Settings, get_settings


class TestSettings:
    """Test defaults and environment overrides."""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("PROGRESS_ENVIRONMENT", raising=False)
        settings = Settings(_env_file=None)
        assert settings.yellow_threshold == 2
        assert settings.red_threshold == 3
        assert settings.attention_rate_threshold == 50
        assert settings.default_period_months == 12
        assert settings.period_options_months == 24
        assert settings.fiscal_anchor_offset == 2
        assert settings.environment == "development"

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("PROGRESS_RED_THRESHOLD", "5")
        monkeypatch.setenv("PROGRESS_LOG_LEVEL", "debug")
        settings = Settings(_env_file=None)
        assert settings.red_threshold == 5
        assert settings.log_level == "DEBUG"

    def test_unknown_log_level(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, log_level="LOUD")

    def test_thresholds_must_be_ordered(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, yellow_threshold=4, red_threshold=3)

    def test_get_settings_cached(self):
        assert get_settings() is get_settings()
