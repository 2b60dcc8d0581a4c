"""
Daily/Period Aggregator

DESIGN DECISION: Aggregation is DETERMINISTIC and side-effect free.
Given the same entries, the same range and the same limit it always
returns the same summary.

GUARANTEES:
- Every division by a possibly-zero denominator resolves to 0
- Cancelled entries never count
- Amounts are reported in the default currency when a rate is recorded
- Limits come from the entries' own snapshots, not from today's settings
"""

from collections import defaultdict
from datetime import date, timedelta
from decimal import Decimal
from statistics import median
from typing import Iterable, Optional

from ledger_engine.analytics.bucketizer import BucketWidth, bucketize
from ledger_engine.limits.policy import LimitSnapshotPolicy, period_bounds
from ledger_engine.models.entry import (
    LedgerEntry,
    LimitPeriod,
    LimitSnapshot,
    RecurrenceKind,
)
from ledger_engine.models.summary import (
    CategoryShare,
    DailyRecord,
    LimitUsage,
    PeriodSummary,
    SpendingSummary,
    SpendingTrends,
)
from ledger_engine.models.taxonomy import CategoryId


ZERO = Decimal("0")


def _in_range(entries: Iterable[LedgerEntry], start: date, end: date) -> list[LedgerEntry]:
    return [
        e for e in entries
        if e.counts_towards_totals and start <= e.transaction_date <= end
    ]


def _days(start: date, end: date) -> list[date]:
    return [start + timedelta(days=i) for i in range((end - start).days + 1)]


class PeriodAggregator:
    """
    Computes period summaries and derived daily/trend records.

    Usage:
        aggregator = PeriodAggregator()
        summary = aggregator.summarize(entries, date(2024, 3, 1), date(2024, 3, 31),
                                       period=LimitPeriod.MONTHLY)
    """

    def __init__(self, policy: Optional[LimitSnapshotPolicy] = None):
        self._policy = policy or LimitSnapshotPolicy()

    @property
    def currency(self) -> str:
        return self._policy.default_currency

    def _amount(self, entry: LedgerEntry) -> Decimal:
        return entry.amount_in(self.currency)

    def _total(self, entries: Iterable[LedgerEntry]) -> Decimal:
        return sum((self._amount(e) for e in entries), ZERO)

    def _limit(
        self,
        entries: list[LedgerEntry],
        period: LimitPeriod,
        current: Optional[LimitSnapshot] = None,
    ) -> Decimal:
        fallback = self._policy.stamp(current).for_period(period)
        return self._policy.period_limit(entries, period, fallback)

    # -------------------------------------------------------------------------
    # Period summary
    # -------------------------------------------------------------------------

    def summarize(
        self,
        entries: Iterable[LedgerEntry],
        start: date,
        end: date,
        period: LimitPeriod = LimitPeriod.MONTHLY,
        limit: Optional[Decimal] = None,
        savings_target: Optional[Decimal] = None,
        income: Optional[Decimal] = None,
    ) -> PeriodSummary:
        """
        Summarize all entries dated within [start, end].

        Args:
            entries: Candidate entries (filtered here by date and status)
            start: First day of the range (inclusive)
            end: Last day of the range (inclusive)
            period: Which snapshot limit applies when ``limit`` is None
            limit: Explicit limit, overriding the snapshot lookup
            savings_target: Savings target for the range
            income: Income for the range; actual savings = income - total

        Returns:
            PeriodSummary with only finite numbers in it
        """
        selected = _in_range(entries, start, end)
        if limit is None:
            limit = self._limit(selected, period)

        total = self._total(selected)
        count = len(selected)

        progress_ratio = min(float(total / limit), 1.0) if limit > 0 else 0.0
        is_over_limit = total > limit and limit > 0

        if limit > 0:
            efficiency = float((limit - total) / limit * 100)
            efficiency = min(max(efficiency, 0.0), 100.0)
        else:
            efficiency = 0.0

        average = total / count if count > 0 else ZERO

        largest = smallest = None
        if selected:
            # Ties on amount go to the earliest date
            largest = min(
                selected,
                key=lambda e: (-self._amount(e), e.transaction_date, e.created_at),
            )
            smallest = min(
                selected,
                key=lambda e: (self._amount(e), e.transaction_date, e.created_at),
            )

        return PeriodSummary(
            start=start,
            end=end,
            total_amount=total,
            entry_count=count,
            limit=limit,
            progress_ratio=progress_ratio,
            is_over_limit=is_over_limit,
            category_breakdown=self.category_breakdown(selected),
            largest_entry=largest,
            smallest_entry=smallest,
            average_amount=average,
            efficiency_score=efficiency,
            savings_target=savings_target or ZERO,
            actual_savings=(income - total) if income is not None else ZERO,
        )

    def category_breakdown(self, entries: Iterable[LedgerEntry]) -> list[CategoryShare]:
        """Per-category totals and shares, largest first."""
        grouped: dict[CategoryId, Decimal] = defaultdict(lambda: ZERO)
        for entry in entries:
            if entry.counts_towards_totals:
                grouped[entry.category_id] += self._amount(entry)

        total = sum(grouped.values(), ZERO)
        shares = [
            CategoryShare(
                category_id=category_id,
                amount=amount,
                percentage=float(amount / total) if total > 0 else 0.0,
            )
            for category_id, amount in grouped.items()
        ]
        shares.sort(key=lambda s: (-s.amount, s.category_id.value))
        return shares

    # -------------------------------------------------------------------------
    # Daily history
    # -------------------------------------------------------------------------

    def _daily_record(self, day: date, day_entries: list[LedgerEntry]) -> DailyRecord:
        # Recurring entries are fixed costs; limit progress tracks the rest
        discretionary = [
            e for e in day_entries if e.recurrence.kind == RecurrenceKind.NONE
        ]
        return DailyRecord(
            day=day,
            total_amount=self._total(day_entries),
            progress_amount=self._total(discretionary),
            entry_count=len(day_entries),
            daily_limit=self._limit(day_entries, LimitPeriod.DAILY),
        )

    def daily_records(
        self,
        entries: Iterable[LedgerEntry],
        start: date,
        end: date,
    ) -> list[DailyRecord]:
        """One record per calendar day in [start, end], including empty days."""
        by_day: dict[date, list[LedgerEntry]] = defaultdict(list)
        for entry in _in_range(entries, start, end):
            by_day[entry.transaction_date].append(entry)
        return [self._daily_record(day, by_day.get(day, [])) for day in _days(start, end)]

    def weekly_history(
        self,
        entries: Iterable[LedgerEntry],
        selected_date: date,
        week_offset: int = 0,
    ) -> list[list[DailyRecord]]:
        """
        Three weeks of daily records (previous, displayed, next).

        Weeks start on Monday. ``week_offset`` moves the displayed week
        relative to the week containing ``selected_date``.
        """
        monday = selected_date - timedelta(days=selected_date.weekday())
        displayed = monday + timedelta(weeks=week_offset)
        first = displayed - timedelta(weeks=1)
        records = self.daily_records(entries, first, first + timedelta(days=20))
        return [records[i:i + 7] for i in range(0, 21, 7)]

    def daily_totals(
        self,
        entries: Iterable[LedgerEntry],
        start: date,
        end: date,
    ) -> dict[date, Decimal]:
        """Totals for days that have entries."""
        totals: dict[date, Decimal] = defaultdict(lambda: ZERO)
        for entry in _in_range(entries, start, end):
            totals[entry.transaction_date] += self._amount(entry)
        return dict(sorted(totals.items()))

    def subcategory_totals(
        self,
        entries: Iterable[LedgerEntry],
        start: date,
        end: date,
    ) -> dict[str, Decimal]:
        totals: dict[str, Decimal] = defaultdict(lambda: ZERO)
        for entry in _in_range(entries, start, end):
            totals[entry.subcategory_id] += self._amount(entry)
        return dict(totals)

    def median_amount(self, entries: Iterable[LedgerEntry]) -> Decimal:
        amounts = [self._amount(e) for e in entries if e.counts_towards_totals]
        if not amounts:
            return ZERO
        return Decimal(median(amounts))

    # -------------------------------------------------------------------------
    # Current spending and trends
    # -------------------------------------------------------------------------

    def spending_summary(
        self,
        entries: Iterable[LedgerEntry],
        today: date,
        current_limits: Optional[LimitSnapshot] = None,
    ) -> SpendingSummary:
        """
        Spending today, this month and this year against their limits.

        ``current_limits`` is only used for a period that has no entries yet.
        """
        entries = list(entries)
        usages = {}
        for period in LimitPeriod:
            start, end = period_bounds(today, period)
            selected = _in_range(entries, start, end)
            usages[period] = LimitUsage(
                spent=self._total(selected),
                limit=self._limit(selected, period, current_limits),
            )

        return SpendingSummary(
            reference_date=today,
            currency=self.currency,
            today=usages[LimitPeriod.DAILY],
            this_month=usages[LimitPeriod.MONTHLY],
            this_year=usages[LimitPeriod.YEARLY],
        )

    def spending_trends(
        self,
        entries: Iterable[LedgerEntry],
        today: date,
        months: int = 6,
    ) -> SpendingTrends:
        """Monthly totals for the last ``months`` months, oldest first."""
        points = bucketize(entries, BucketWidth.MONTH, months, today, self.currency)
        return SpendingTrends(monthly_totals=points, currency=self.currency)
