"""
Configuration Management for the Finance Tracker

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All tunable thresholds live here.
The defaults reproduce the documented behaviour of the insight engine
and the voice interpreter exactly; overriding them is an explicit act.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class InsightSettings(BaseSettings):
    """Insight engine thresholds."""

    model_config = SettingsConfigDict(
        env_prefix="INSIGHTS_",
        extra="ignore"
    )

    min_confidence: float = Field(
        default=0.5,
        ge=0.0,
        le=1.0,
        description="Insights must have a confidence strictly above this value"
    )
    max_results: int = Field(
        default=7,
        ge=1,
        description="Maximum number of ranked insights returned"
    )
    health_min_transactions: int = Field(
        default=5,
        ge=0,
        description="Transactions required before a health score is produced"
    )
    panel_min_transactions: int = Field(
        default=3,
        ge=0,
        description="Transactions required before the dashboard shows insights"
    )
    unusual_spending_max_alerts: Optional[int] = Field(
        default=None,
        ge=1,
        description="Cap on large-transaction alerts per pass (unset = one per outlier)"
    )

    # Budget tip limits
    food_spend_limit: float = Field(
        default=300.0,
        ge=0.0,
        description="Total food spend above which a meal-planning tip is shown"
    )
    impulse_spend_limit: float = Field(
        default=200.0,
        ge=0.0,
        description="Total impulse-category spend above which a tip is shown"
    )
    subscription_count_limit: int = Field(
        default=3,
        ge=0,
        description="Subscription transactions above which a tip is shown"
    )


class VoiceSettings(BaseSettings):
    """Voice command interpreter configuration."""

    model_config = SettingsConfigDict(
        env_prefix="VOICE_",
        extra="ignore"
    )

    capture_timeout_seconds: float = Field(
        default=10.0,
        gt=0.0,
        description="Listening auto-stops after this many seconds without an utterance"
    )
    history_limit: int = Field(
        default=10,
        ge=1,
        le=100,
        description="Number of recent commands kept in the history log"
    )
    history_path: Optional[Path] = Field(
        default=None,
        description="JSON file for the command history (unset = in memory only)"
    )
    language: str = Field(
        default="en-US",
        description="Recognition language passed to capture backends"
    )


class GoogleSheetsSettings(BaseSettings):
    """Google Sheets storage configuration."""

    model_config = SettingsConfigDict(
        env_prefix="GOOGLE_SHEETS_",
        extra="ignore"
    )

    credentials_path: str = Field(
        ...,
        description="Path to Google service account credentials JSON"
    )
    spreadsheet_id: str = Field(
        ...,
        description="ID of the Google Sheets spreadsheet to use"
    )
    transactions_sheet_name: str = Field(
        default="Transactions",
        description="Name of the sheet for transactions"
    )

    @field_validator('credentials_path')
    @classmethod
    def validate_credentials_path(cls, v: str) -> str:
        """Warn if credentials file doesn't exist (but don't fail - might be mounted later)."""
        if not Path(v).exists():
            import warnings
            warnings.warn(
                f"Google credentials file not found at {v}. "
                "Make sure it exists before running the application."
            )
        return v


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    storage_backend: str = Field(
        default="memory",
        pattern="^(memory|google_sheets)$",
        description="Transaction store backend"
    )
    currency_symbol: str = Field(
        default="$",
        max_length=5,
        description="Symbol used in insight and voice messages"
    )
    user_id: str = Field(
        default="default",
        min_length=1,
        description="User whose transactions the dashboard shows"
    )


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Sub-settings are loaded lazily so the Sheets group is only
    # required when that backend is selected

    @property
    def insights(self) -> InsightSettings:
        return InsightSettings()

    @property
    def voice(self) -> VoiceSettings:
        return VoiceSettings()

    @property
    def google_sheets(self) -> GoogleSheetsSettings:
        return GoogleSheetsSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings groups.

    Returns a dict of {setting_name: is_valid} plus "<name>_error"
    entries for the groups that failed. Useful for startup checks.
    """
    results = {}
    settings = get_settings()

    for name in ("insights", "voice", "google_sheets", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
