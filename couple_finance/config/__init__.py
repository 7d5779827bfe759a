"""Configuration package."""

from couple_finance.config.settings import (
    AppSettings,
    ConfigurationError,
    HouseholdSettings,
    SessionSettings,
    Settings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "ConfigurationError",
    "HouseholdSettings",
    "SessionSettings",
    "Settings",
    "get_settings",
    "validate_all_settings",
]
