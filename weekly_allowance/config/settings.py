"""
Configuration Management for the Weekly Allowance wallet

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Money precision, the allowance calendar and logging output are
all tunable without touching the ledger code.
"""

from functools import lru_cache
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LedgerSettings(BaseSettings):
    """Money handling for balances and transactions."""

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_",
        extra="ignore"
    )

    amount_decimal_places: int = Field(
        default=2,
        ge=0,
        le=4,
        description="Minor-unit precision of every stored amount"
    )


class AllowanceSettings(BaseSettings):
    """Weekly allowance scheduler configuration."""

    model_config = SettingsConfigDict(
        env_prefix="ALLOWANCE_",
        extra="ignore"
    )

    timezone: str = Field(
        default="UTC",
        description="IANA timezone used to decide what 'today' is"
    )
    payment_description: str = Field(
        default="Weekly allowance",
        max_length=200,
        description="Description written on every allowance transaction"
    )
    skip_if_paid_today: bool = Field(
        default=True,
        description="Do not credit an allowance twice on the same calendar day"
    )
    reset_last_payment_on_update: bool = Field(
        default=False,
        description="Clear last_payment_date when an allowance is replaced"
    )

    @field_validator('timezone')
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        """Reject timezone names the zoneinfo database does not know."""
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown timezone: {v}") from e
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

    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Level for the stdlib logger structlog writes through"
    )
    json_logs: bool = Field(
        default=True,
        description="Render log lines as JSON (False = human friendly console)"
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

    @property
    def ledger(self) -> LedgerSettings:
        return LedgerSettings()

    @property
    def allowance(self) -> AllowanceSettings:
        return AllowanceSettings()

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


def validate_all_settings(settings: Optional[Settings] = None) -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, plus a
    "<name>_error" entry for every section that failed.
    """
    results = {}
    settings = settings or get_settings()

    for name in ("ledger", "allowance", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except ValueError as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
