"""Shared fixtures for ledger engine tests."""

from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Optional

import pytest

from ledger_engine.config import get_settings
from ledger_engine.models.entry import (
    LedgerEntry,
    LimitSnapshot,
    RecurrenceKind,
    RecurrenceRule,
)
from ledger_engine.models.taxonomy import CategoryId


@pytest.fixture(autouse=True)
def fresh_settings():
    """Settings are cached; reload them around every test."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def build_entry(
    amount: str,
    on: date,
    category: CategoryId = CategoryId.FOOD,
    limits: Optional[LimitSnapshot] = None,
    kind: RecurrenceKind = RecurrenceKind.NONE,
    interval: int = 1,
    end_date: Optional[date] = None,
    created_at: Optional[datetime] = None,
    **fields,
) -> LedgerEntry:
    """Entry with sensible defaults for tests."""
    if created_at is not None:
        fields["created_at"] = created_at
    return LedgerEntry.create(
        amount=Decimal(amount),
        currency=fields.pop("currency", "TRY"),
        category_id=category,
        transaction_date=on,
        current_limits=limits or LimitSnapshot(),
        recurrence=RecurrenceRule(kind=kind, interval=interval, end_date=end_date),
        description=fields.pop("description", "test entry"),
        subcategory_id=fields.pop("subcategory_id", "restaurant"),
        **fields,
    )


def at(year: int, month: int, day: int, hour: int = 12) -> datetime:
    return datetime(year, month, day, hour, tzinfo=timezone.utc)


@pytest.fixture
def make_entry():
    return build_entry
