"""Configuration package."""

from fintracker.config.settings import (
    AppSettings,
    GoogleSheetsSettings,
    InsightSettings,
    Settings,
    VoiceSettings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "GoogleSheetsSettings",
    "InsightSettings",
    "Settings",
    "VoiceSettings",
    "get_settings",
    "validate_all_settings",
]
