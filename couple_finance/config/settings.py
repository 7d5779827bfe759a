"""
Configuration Management for Couple Finance

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
The household identity and the shared password used to live as constants
in the client; they are now ordinary settings so nothing is hard-coded.
"""

from functools import lru_cache
from typing import Optional
from uuid import UUID

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class HouseholdSettings(BaseSettings):
    """The single household (couple) this installation serves."""

    model_config = SettingsConfigDict(
        env_prefix="HOUSEHOLD_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    couple_id: UUID = Field(
        ...,
        description="Identifier of the couple record in the backend"
    )
    person_a_id: UUID = Field(
        ...,
        description="Identifier of the first person"
    )
    person_b_id: UUID = Field(
        ...,
        description="Identifier of the second person"
    )
    person_a_name: str = Field(
        default="Person A",
        min_length=1,
        description="Display name of the first person"
    )
    person_b_name: str = Field(
        default="Person B",
        min_length=1,
        description="Display name of the second person"
    )

    # Shared login user
    user_email: str = Field(
        default="household@example.com",
        description="Email shown for the shared login"
    )
    user_name: Optional[str] = Field(
        default=None,
        description="Display name for the shared login (defaults to 'A & B')"
    )

    currency: str = Field(
        default="BRL",
        min_length=3,
        max_length=3,
        description="ISO currency code used for display"
    )
    # Informational only: month filtering uses calendar months
    closing_day: int = Field(
        default=1,
        ge=1,
        le=31,
        description="Credit card closing day"
    )

    @field_validator('currency', mode='before')
    @classmethod
    def normalize_currency(cls, v):
        # Runs before the length check so padded codes like " brl " load
        if isinstance(v, str):
            return v.strip().upper()
        return v


class SessionSettings(BaseSettings):
    """Shared-password session gate configuration."""

    model_config = SettingsConfigDict(
        env_prefix="SESSION_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    shared_password: SecretStr = Field(
        ...,
        description="The one password both people use to unlock the app"
    )


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

    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode (turns on aggregation traces)"
    )
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Minimum log level"
    )
    log_json: bool = Field(
        default=True,
        description="Render logs as JSON (console rendering otherwise)"
    )

    # Dashboard shape
    category_breakdown_limit: int = Field(
        default=7,
        ge=1,
        le=50,
        description="How many categories the breakdown keeps"
    )
    recent_transactions_limit: int = Field(
        default=5,
        ge=0,
        le=100,
        description="How many recent transactions the dashboard lists"
    )
    default_proportion: int = Field(
        default=50,
        ge=0,
        le=100,
        description="Share (%) assumed when a proportional split has no value"
    )

    # Validation thresholds
    future_date_tolerance_days: int = Field(
        default=7,
        ge=0,
        description="How many days in the future a transaction date can be"
    )
    max_amount: float = Field(
        default=1000000.0,
        gt=0,
        description="Maximum reasonable amount (for sanity checking)"
    )

    @property
    def effective_log_level(self) -> str:
        """Debug mode always wins over the configured level."""
        return "DEBUG" if self.debug_mode else self.log_level


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

    # Loaded lazily to allow partial configuration

    @property
    def household(self) -> HouseholdSettings:
        return HouseholdSettings()

    @property
    def session(self) -> SessionSettings:
        return SessionSettings()

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


SECTIONS = ("household", "session", "app")


class ConfigurationError(RuntimeError):
    """Raised at startup when a settings section cannot be loaded."""

    def __init__(self, results: dict):
        self.results = results
        failed = [name for name in SECTIONS if not results.get(name)]
        super().__init__(f"Invalid settings: {', '.join(failed)}")


def validate_all_settings(settings: Optional[Settings] = None) -> dict:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, plus an
    "<name>_error" entry for every section that failed.
    Checks get_settings() unless a settings root is given.
    """
    results = {}
    settings = settings or get_settings()

    for name in SECTIONS:
        try:
            getattr(settings, name)
            results[name] = True
        except ValueError as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
