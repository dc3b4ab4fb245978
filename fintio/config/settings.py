"""
Configuration Management for the Fintio Dashboard Client

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
This makes it easy to see which backend we talk to, how long each
resource stays fresh in the cache, and where the session comes from.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ApiSettings(BaseSettings):
    """REST backend configuration."""

    model_config = SettingsConfigDict(
        env_prefix="FINTIO_API_",
        extra="ignore"
    )

    base_url: str = Field(
        default="http://localhost:3000",
        description="Base URL of the Fintio backend (paths start with /api)"
    )
    timeout_seconds: float = Field(
        default=10.0,
        gt=0.0,
        le=120.0,
        description="Transport timeout for every request"
    )
    fetch_style: str = Field(
        default="strict",
        pattern="^(strict|lenient)$",
        description="How read requests treat non-2xx responses"
    )

    @field_validator('base_url')
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Keys carry absolute paths, so the base URL must not end with '/'."""
        return v.rstrip("/")


class CacheSettings(BaseSettings):
    """
    Response cache configuration.

    Dedupe intervals are in seconds. Slow-changing aggregates get long
    windows, fast-changing lists get short ones.
    """

    model_config = SettingsConfigDict(
        env_prefix="FINTIO_CACHE_",
        extra="ignore"
    )

    accounts_dedupe_seconds: float = Field(default=2.0, ge=0.0, le=300.0)
    account_transactions_dedupe_seconds: float = Field(default=2.0, ge=0.0, le=300.0)
    transactions_dedupe_seconds: float = Field(default=2.0, ge=0.0, le=300.0)
    categories_dedupe_seconds: float = Field(default=5.0, ge=0.0, le=300.0)
    recurring_transactions_dedupe_seconds: float = Field(default=5.0, ge=0.0, le=300.0)
    subscriptions_dedupe_seconds: float = Field(default=30.0, ge=0.0, le=300.0)
    savings_goals_dedupe_seconds: float = Field(default=30.0, ge=0.0, le=300.0)
    breakdown_dedupe_seconds: float = Field(default=30.0, ge=0.0, le=300.0)
    calendar_transactions_dedupe_seconds: float = Field(default=10.0, ge=0.0, le=300.0)
    alerts_dedupe_seconds: float = Field(default=60.0, ge=0.0, le=600.0)
    upcoming_payments_dedupe_seconds: float = Field(default=300.0, ge=0.0, le=600.0)
    budgets_dedupe_seconds: float = Field(default=5.0, ge=0.0, le=300.0)
    user_dedupe_seconds: float = Field(default=30.0, ge=0.0, le=300.0)

    max_entries: int = Field(
        default=1024,
        ge=1,
        description="Keys kept before idle, expired entries are dropped"
    )


class SessionSettings(BaseSettings):
    """
    Session configuration.

    Authentication itself belongs to the identity provider. This only
    lets a local deployment pin the signed-in user.
    """

    model_config = SettingsConfigDict(
        env_prefix="FINTIO_SESSION_",
        extra="ignore"
    )

    user_id: Optional[str] = Field(
        default=None,
        description="User ID reported by the environment-backed session"
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
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        description="Minimum level for structured logs"
    )

    @field_validator('log_level')
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level


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

    @property
    def api(self) -> ApiSettings:
        return ApiSettings()

    @property
    def cache(self) -> CacheSettings:
        return CacheSettings()

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


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, plus a
    "<name>_error" entry for every section that failed.
    """
    results = {}

    settings = get_settings()

    for name in ("api", "cache", "session", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
