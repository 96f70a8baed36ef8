"""Configuration package."""

from weekly_allowance.config.settings import (
    AllowanceSettings,
    AppSettings,
    LedgerSettings,
    Settings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AllowanceSettings",
    "AppSettings",
    "LedgerSettings",
    "Settings",
    "get_settings",
    "validate_all_settings",
]
