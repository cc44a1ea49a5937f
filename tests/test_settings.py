"""Tests for configuration loading."""

import pytest
from pydantic import ValidationError

from fintracker.config.settings import (
    AppSettings,
    InsightSettings,
    VoiceSettings,
    get_settings,
    validate_all_settings,
)


@pytest.fixture(autouse=True)
def fresh_settings(monkeypatch, tmp_path):
    """Isolate each test from the developer's .env and cached settings."""
    monkeypatch.chdir(tmp_path)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestDefaults:
    """Tests for default values."""

    def test_insight_defaults(self):
        """Test the documented thresholds."""
        settings = InsightSettings()
        assert settings.min_confidence == 0.5
        assert settings.max_results == 7
        assert settings.health_min_transactions == 5
        assert settings.panel_min_transactions == 3
        assert settings.unusual_spending_max_alerts is None

    def test_voice_defaults(self):
        """Test the capture timeout and history size."""
        settings = VoiceSettings()
        assert settings.capture_timeout_seconds == 10.0
        assert settings.history_limit == 10
        assert settings.history_path is None

    def test_app_defaults(self):
        """Test the in-memory backend is the default."""
        settings = AppSettings()
        assert settings.storage_backend == "memory"
        assert settings.currency_symbol == "$"


class TestEnvironment:
    """Tests for environment overrides."""

    def test_env_override(self, monkeypatch):
        """Test prefixed variables override defaults."""
        monkeypatch.setenv("INSIGHTS_MAX_RESULTS", "3")
        monkeypatch.setenv("VOICE_CAPTURE_TIMEOUT_SECONDS", "5")
        assert InsightSettings().max_results == 3
        assert VoiceSettings().capture_timeout_seconds == 5.0

    def test_invalid_value_rejected(self, monkeypatch):
        """Test that out-of-range values fail validation."""
        monkeypatch.setenv("INSIGHTS_MIN_CONFIDENCE", "1.5")
        with pytest.raises(ValidationError):
            InsightSettings()

    def test_unknown_backend_rejected(self, monkeypatch):
        """Test the storage backend pattern."""
        monkeypatch.setenv("STORAGE_BACKEND", "postgres")
        with pytest.raises(ValidationError):
            AppSettings()

    def test_get_settings_is_cached(self):
        """Test that get_settings returns one instance until cleared."""
        assert get_settings() is get_settings()


class TestValidateAllSettings:
    """Tests for validate_all_settings."""

    def test_sheets_missing(self, monkeypatch):
        """Test that missing Sheets settings are reported, not raised."""
        monkeypatch.delenv("GOOGLE_SHEETS_CREDENTIALS_PATH", raising=False)
        monkeypatch.delenv("GOOGLE_SHEETS_SPREADSHEET_ID", raising=False)

        status = validate_all_settings()
        assert status["insights"] is True
        assert status["voice"] is True
        assert status["app"] is True
        assert status["google_sheets"] is False
        assert "google_sheets_error" in status

    def test_sheets_configured(self, monkeypatch, tmp_path):
        """Test a complete Sheets configuration."""
        credentials = tmp_path / "credentials.json"
        credentials.write_text("{}")
        monkeypatch.setenv("GOOGLE_SHEETS_CREDENTIALS_PATH", str(credentials))
        monkeypatch.setenv("GOOGLE_SHEETS_SPREADSHEET_ID", "sheet-123")

        assert validate_all_settings()["google_sheets"] is True


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
