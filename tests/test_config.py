"""
Tests for environment-driven settings.
"""

import pytest
from pydantic import ValidationError

from priority_scheduler.config import Settings
from priority_scheduler.core import SchedulerConfig


class TestSettings:
    """Test cases for scheduler settings."""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("SCHEDULER_LOG_LEVEL", raising=False)
        settings = Settings(_env_file=None)

        assert settings.default_duration_minutes == 60
        assert settings.search_step_minutes == 15
        assert settings.working_hours_start == 9
        assert settings.working_hours_end == 17
        assert settings.log_level == "INFO"
        assert settings.environment == "test"

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("SCHEDULER_DEFAULT_DURATION_MINUTES", "45")
        monkeypatch.setenv("SCHEDULER_LOG_LEVEL", "warning")
        settings = Settings(_env_file=None)

        assert settings.default_duration_minutes == 45
        assert settings.log_level == "WARNING"

    def test_scheduler_config(self, monkeypatch):
        monkeypatch.setenv("SCHEDULER_SEARCH_STEP_MINUTES", "5")
        config = Settings(_env_file=None).scheduler_config()

        assert config == SchedulerConfig(default_duration_minutes=60, search_step_minutes=5)

    def test_invalid_log_level(self, monkeypatch):
        monkeypatch.setenv("SCHEDULER_LOG_LEVEL", "chatty")
        with pytest.raises(ValidationError):
            Settings(_env_file=None)

    def test_invalid_working_hours(self, monkeypatch):
        monkeypatch.setenv("SCHEDULER_WORKING_HOURS_START", "18")
        with pytest.raises(ValidationError):
            Settings(_env_file=None)

    def test_invalid_environment(self, monkeypatch):
        monkeypatch.setenv("SCHEDULER_ENVIRONMENT", "qa")
        with pytest.raises(ValidationError):
            Settings(_env_file=None)
