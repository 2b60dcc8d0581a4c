"""
Limit Snapshot Policy

CRITICAL: Over-limit decisions about an entry use the limits FROZEN on that
entry when it was created, never the limits configured today. Changing the
monthly limit must not turn last month's green days red.

Current limits are read exactly once per new entry (``stamp``). Nothing in
this module re-stamps an existing entry.
"""

from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from dateutil.relativedelta import relativedelta

from ledger_engine.config import LedgerSettings, get_settings
from ledger_engine.models.entry import LedgerEntry, LimitPeriod, LimitSnapshot


def period_bounds(day: date, period: LimitPeriod) -> tuple[date, date]:
    """First and last day of the period containing ``day``."""
    if period == LimitPeriod.DAILY:
        return day, day
    if period == LimitPeriod.MONTHLY:
        start = day.replace(day=1)
        return start, start + relativedelta(months=1, days=-1)
    return date(day.year, 1, 1), date(day.year, 12, 31)


def _creation_order(entry: LedgerEntry) -> tuple:
    return (entry.created_at, str(entry.id))


def _ledger_order(entry: LedgerEntry) -> tuple:
    return (entry.transaction_date, entry.created_at, str(entry.id))


class LimitSnapshotPolicy:
    """
    Stamps new entries and judges existing ones against their snapshots.

    Usage:
        policy = LimitSnapshotPolicy()
        entry = LedgerEntry.create(..., current_limits=policy.stamp())
        policy.is_entry_over_limit(entry, month_entries, LimitPeriod.MONTHLY)
    """

    def __init__(self, settings: Optional[LedgerSettings] = None):
        self._settings = settings or get_settings().ledger

    @property
    def default_currency(self) -> str:
        return self._settings.default_currency

    def stamp(self, current: Optional[LimitSnapshot] = None) -> LimitSnapshot:
        """
        Snapshot for a NEW entry.

        Uses the caller-supplied current limits, or the configured ones.
        """
        if current is not None:
            return current
        return LimitSnapshot(
            daily=self._settings.daily_limit,
            monthly=self._settings.monthly_limit,
            yearly=self._settings.yearly_limit,
        )

    @staticmethod
    def limit_for(entry: LedgerEntry, period: LimitPeriod) -> Decimal:
        return entry.limits.for_period(period)

    def period_limit(
        self,
        entries: Iterable[LedgerEntry],
        period: LimitPeriod,
        fallback: Decimal = Decimal("0"),
    ) -> Decimal:
        """
        Limit in force for a period: the snapshot of the earliest-created
        entry in it. ``fallback`` applies only when the period is empty.
        """
        counted = [e for e in entries if e.counts_towards_totals]
        if not counted:
            return fallback
        earliest = min(counted, key=_creation_order)
        return earliest.limits.for_period(period)

    def period_total(
        self,
        entries: Iterable[LedgerEntry],
        day: date,
        period: LimitPeriod,
    ) -> Decimal:
        start, end = period_bounds(day, period)
        return sum(
            (
                e.amount_in(self.default_currency)
                for e in entries
                if e.counts_towards_totals and start <= e.transaction_date <= end
            ),
            Decimal("0"),
        )

    def is_entry_over_limit(
        self,
        entry: LedgerEntry,
        entries: Iterable[LedgerEntry],
        period: LimitPeriod,
    ) -> bool:
        """
        Whether the running period total up to and including ``entry``
        exceeds the limit frozen on ``entry``. A zero limit never trips.
        """
        limit = entry.limits.for_period(period)
        if limit <= 0:
            return False

        start, end = period_bounds(entry.transaction_date, period)
        in_period = {
            e.id: e for e in entries
            if e.counts_towards_totals and start <= e.transaction_date <= end
        }
        in_period[entry.id] = entry

        running = Decimal("0")
        for candidate in sorted(in_period.values(), key=_ledger_order):
            running += candidate.amount_in(self.default_currency)
            if candidate.id == entry.id:
                break
        return running > limit
