"""
Configuration Management for the Ledger Engine

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: The engine CONSUMES configuration, it does not own it.
Current limits are only used to stamp NEW entries. The numeric core never
reads them when judging historical entries.
"""

from decimal import Decimal
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LedgerSettings(BaseSettings):
    """Currency, limits and locale supplied by the settings collaborator."""

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_",
        extra="ignore"
    )

    default_currency: str = Field(
        default="TRY",
        min_length=3,
        max_length=3,
        description="ISO currency code amounts are reported in"
    )
    daily_limit: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        description="Current daily spending limit (0 = no limit)"
    )
    monthly_limit: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        description="Current monthly spending limit (0 = no limit)"
    )
    yearly_limit: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        description="Current yearly spending limit (0 = no limit)"
    )
    locale: str = Field(
        default="en_US",
        description="Locale for the presentation layer (unused by the numeric core)"
    )
    default_entry_status: str = Field(
        default="confirmed",
        pattern="^(confirmed|pending)$",
        description="Status given to entries created by a user action"
    )

    @field_validator('default_currency')
    @classmethod
    def normalize_currency(cls, v: str) -> str:
        return v.upper()

    @property
    def has_any_limit(self) -> bool:
        return any(
            limit > 0
            for limit in (self.daily_limit, self.monthly_limit, self.yearly_limit)
        )


class RecurrenceSettings(BaseSettings):
    """Horizons used when materializing recurring occurrences."""

    model_config = SettingsConfigDict(
        env_prefix="RECURRENCE_",
        extra="ignore"
    )

    default_horizon_months: int = Field(
        default=3,
        ge=1,
        le=24,
        description="How far ahead upcoming occurrences are generated"
    )
    open_ended_horizon_years: int = Field(
        default=1,
        ge=1,
        le=10,
        description="Cap for templates without an end date"
    )


class PlanningSettings(BaseSettings):
    """Defaults for financial plans."""

    model_config = SettingsConfigDict(
        env_prefix="PLANNING_",
        extra="ignore"
    )

    default_annual_rate: float = Field(
        default=0.05,
        ge=0.0,
        le=1.0,
        description="Annual interest rate as a decimal fraction"
    )
    default_compounding_frequency: int = Field(
        default=12,
        ge=1,
        le=365,
        description="Compounding periods per year"
    )
    max_duration_months: int = Field(
        default=120,
        ge=1,
        description="Longest plan accepted by validation (10 years)"
    )
    debt_payoff_max_months: int = Field(
        default=1000,
        ge=1,
        description="Iteration cap for debt payoff schedules"
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

    # Validation thresholds
    max_entry_amount: float = Field(
        default=1000000.0,
        description="Maximum reasonable entry amount (for sanity checking)"
    )
    future_date_tolerance_days: int = Field(
        default=7,
        description="How many days in the future a one-off entry can be dated"
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
    def recurrence(self) -> RecurrenceSettings:
        return RecurrenceSettings()

    @property
    def planning(self) -> PlanningSettings:
        return PlanningSettings()

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

    Returns a dict of {setting_name: is_valid} plus an
    ``<name>_error`` entry for each failure. Useful for startup checks.
    """
    results = {}
    settings = get_settings()

    for name in ("ledger", "recurrence", "planning", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except ValueError as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
