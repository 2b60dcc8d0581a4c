"""Configuration package."""

from ledger_engine.config.settings import (
    AppSettings,
    LedgerSettings,
    PlanningSettings,
    RecurrenceSettings,
    Settings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "LedgerSettings",
    "PlanningSettings",
    "RecurrenceSettings",
    "Settings",
    "get_settings",
    "validate_all_settings",
]
