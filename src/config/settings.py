"""
Configuration Management for Currency Split

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
This makes it easy to see what external dependencies exist and
ensures all required configuration is validated at startup.
"""

from functools import lru_cache

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ExchangeRateSettings(BaseSettings):
    """ExchangeRate-API provider configuration."""

    model_config = SettingsConfigDict(
        env_prefix="EXCHANGE_RATE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    api_key: str = Field(
        ...,
        description="ExchangeRate-API key"
    )
    base_url: str = Field(
        default="https://v6.exchangerate-api.com/v6",
        description="Base URL of the ExchangeRate-API v6 endpoints"
    )
    timeout_seconds: float = Field(
        default=10.0,
        ge=1.0,
        le=60.0,
        description="HTTP timeout for a single provider request"
    )
    max_retries: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Attempts per provider request before giving up"
    )

    @field_validator('base_url')
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Endpoints are joined with '/', so drop any trailing slash."""
        return v.rstrip("/")


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
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Minimum level for structured logs"
    )

    # Split defaults
    default_base_currency: str = Field(
        default="USD",
        min_length=1,
        description="Base currency selected when a session starts"
    )
    default_participant_currency: str = Field(
        default="USD",
        min_length=1,
        description="Currency given to newly added participants"
    )
    initial_participant_currencies: str = Field(
        default="NGN,USD,GBP",
        description="Comma-separated currencies of the starting participant rows"
    )

    @property
    def initial_currencies_list(self) -> list[str]:
        """Get initial participant currencies as a list."""
        return [
            code.strip()
            for code in self.initial_participant_currencies.split(",")
            if code.strip()
        ]


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

    # Note: These are loaded lazily to allow partial configuration

    @property
    def exchange_rate(self) -> ExchangeRateSettings:
        return ExchangeRateSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, object]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, plus
    {setting_name}_error entries holding the message for failures.
    Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    try:
        _ = settings.exchange_rate
        results["exchange_rate"] = True
    except ValidationError as e:
        results["exchange_rate"] = False
        results["exchange_rate_error"] = str(e)

    try:
        _ = settings.app
        results["app"] = True
    except ValidationError as e:
        results["app"] = False
        results["app_error"] = str(e)

    return results
