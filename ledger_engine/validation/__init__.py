"""Entry and plan validation package."""

from ledger_engine.validation.validator import EntryValidator, validate_plan_input

__all__ = ["EntryValidator", "validate_plan_input"]
