"""Configuration package."""

from fintio.config.settings import (
    ApiSettings,
    AppSettings,
    CacheSettings,
    SessionSettings,
    Settings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "ApiSettings",
    "AppSettings",
    "CacheSettings",
    "SessionSettings",
    "Settings",
    "get_settings",
    "validate_all_settings",
]
