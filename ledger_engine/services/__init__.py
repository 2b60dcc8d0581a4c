"""Workflow services package."""

from ledger_engine.services.ledger import (
    EntryRejectedError,
    LedgerService,
    create_services,
)
from ledger_engine.services.recurring import EntryNotPendingError, RecurringService

__all__ = [
    "EntryNotPendingError",
    "EntryRejectedError",
    "LedgerService",
    "RecurringService",
    "create_services",
]
