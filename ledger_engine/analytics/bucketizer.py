"""
Time-Series Bucketizer

Groups entries into fixed-width time buckets for trend charts.

CRITICAL: One truncation rule (``truncate``) decides both which buckets
exist and which bucket an entry lands in. Iterating buckets and grouping
entries can therefore never disagree about a boundary.
"""

from datetime import date, timedelta
from decimal import Decimal
from enum import Enum
from typing import Iterable, Optional

from dateutil.relativedelta import relativedelta

from ledger_engine.models.entry import LedgerEntry
from ledger_engine.models.summary import SeriesPoint


class BucketWidth(str, Enum):
    DAY = "day"
    MONTH = "month"
    QUARTER = "quarter"


class TimeRange(str, Enum):
    """Chart ranges, each a bucket width times a bucket count."""
    LAST_30_DAYS = "last_30_days"
    LAST_3_MONTHS = "last_3_months"
    LAST_6_MONTHS = "last_6_months"
    LAST_YEAR = "last_year"

    @property
    def width(self) -> BucketWidth:
        if self is TimeRange.LAST_30_DAYS:
            return BucketWidth.DAY
        return BucketWidth.MONTH

    @property
    def bucket_count(self) -> int:
        return _BUCKET_COUNTS[self]


_BUCKET_COUNTS = {
    TimeRange.LAST_30_DAYS: 30,
    TimeRange.LAST_3_MONTHS: 3,
    TimeRange.LAST_6_MONTHS: 6,
    TimeRange.LAST_YEAR: 12,
}


def truncate(day: date, width: BucketWidth) -> date:
    """Start of the bucket containing ``day``."""
    if width == BucketWidth.DAY:
        return day
    if width == BucketWidth.MONTH:
        return day.replace(day=1)
    first_month = (day.month - 1) // 3 * 3 + 1
    return date(day.year, first_month, 1)


def shift(bucket_start: date, width: BucketWidth, buckets: int) -> date:
    """Move a bucket start by a whole number of buckets (negative = back)."""
    if width == BucketWidth.DAY:
        return bucket_start + timedelta(days=buckets)
    months = buckets if width == BucketWidth.MONTH else buckets * 3
    return bucket_start + relativedelta(months=months)


def _amount(entry: LedgerEntry, currency: Optional[str]) -> Decimal:
    return entry.amount_in(currency) if currency else entry.amount


def bucketize(
    entries: Iterable[LedgerEntry],
    width: BucketWidth,
    count: int,
    end: date,
    currency: Optional[str] = None,
) -> list[SeriesPoint]:
    """
    Totals for ``count`` consecutive buckets, the last one containing ``end``.

    Buckets without entries are present with a zero total. Cancelled entries
    are ignored. Amounts are converted to ``currency`` when given.
    """
    if count < 1:
        return []

    last = truncate(end, width)
    first = shift(last, width, -(count - 1))
    starts = [shift(first, width, i) for i in range(count)]
    totals = {start: Decimal("0") for start in starts}

    for entry in entries:
        if not entry.counts_towards_totals:
            continue
        key = truncate(entry.transaction_date, width)
        if key in totals:
            totals[key] += _amount(entry, currency)

    return [
        SeriesPoint(bucket_start=start, total_amount=totals[start])
        for start in starts
    ]


def series(
    entries: Iterable[LedgerEntry],
    time_range: TimeRange,
    today: date,
    currency: Optional[str] = None,
) -> list[SeriesPoint]:
    """Series for a chart range, ending with the bucket that holds today."""
    return bucketize(
        entries, time_range.width, time_range.bucket_count, today, currency
    )


def comparison_series(
    entries: Iterable[LedgerEntry],
    time_range: TimeRange,
    today: date,
    currency: Optional[str] = None,
) -> list[SeriesPoint]:
    """
    The previous period of the same length.

    The window is shifted back by ``bucket_count`` buckets and has exactly
    as many points as ``series``; point i lines up with point i there.
    """
    width = time_range.width
    count = time_range.bucket_count
    previous_end = shift(truncate(today, width), width, -count)
    return bucketize(entries, width, count, previous_end, currency)
