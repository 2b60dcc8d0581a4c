"""Tests for the time-series bucketizer."""

import pytest
from datetime import date
from decimal import Decimal

from ledger_engine.analytics import (
    BucketWidth,
    TimeRange,
    bucketize,
    comparison_series,
    series,
    shift,
    truncate,
)
from ledger_engine.models.entry import EntryStatus

from tests.conftest import build_entry


class TestTruncate:
    """Tests for the single truncation rule."""

    def test_truncate(self):
        day = date(2024, 8, 17)
        assert truncate(day, BucketWidth.DAY) == day
        assert truncate(day, BucketWidth.MONTH) == date(2024, 8, 1)
        assert truncate(day, BucketWidth.QUARTER) == date(2024, 7, 1)

    @pytest.mark.parametrize("month,quarter_start", [(1, 1), (3, 1), (4, 4), (9, 7), (12, 10)])
    def test_quarter_starts(self, month, quarter_start):
        assert truncate(date(2024, month, 5), BucketWidth.QUARTER) == date(2024, quarter_start, 1)

    def test_shift(self):
        assert shift(date(2024, 3, 1), BucketWidth.MONTH, -3) == date(2023, 12, 1)
        assert shift(date(2024, 1, 1), BucketWidth.QUARTER, -1) == date(2023, 10, 1)
        assert shift(date(2024, 3, 1), BucketWidth.DAY, -1) == date(2024, 2, 29)


class TestSeries:
    """Tests for chart series."""

    @pytest.mark.parametrize("time_range,count", [
        (TimeRange.LAST_30_DAYS, 30),
        (TimeRange.LAST_3_MONTHS, 3),
        (TimeRange.LAST_6_MONTHS, 6),
        (TimeRange.LAST_YEAR, 12),
    ])
    def test_bucket_counts(self, time_range, count):
        """Test that every range yields exactly its bucket count."""
        points = series([], time_range, date(2024, 3, 15))
        assert len(points) == count == time_range.bucket_count
        assert all(p.total_amount == Decimal("0") for p in points)

    def test_last_30_days_ends_today(self):
        today = date(2024, 3, 15)
        points = series([], TimeRange.LAST_30_DAYS, today)
        assert points[-1].bucket_start == today
        assert points[0].bucket_start == date(2024, 2, 15)

    def test_month_buckets_end_with_current_month(self):
        points = series([], TimeRange.LAST_YEAR, date(2024, 3, 15))
        assert points[0].bucket_start == date(2023, 4, 1)
        assert points[-1].bucket_start == date(2024, 3, 1)

    def test_entries_land_in_their_bucket(self):
        entries = [
            build_entry("10", date(2024, 1, 31)),
            build_entry("20", date(2024, 2, 1)),
            build_entry("5", date(2024, 2, 29)),
            build_entry("99", date(2023, 12, 31)),
            build_entry("7", date(2024, 3, 1)).with_status(EntryStatus.CANCELLED),
        ]
        points = series(entries, TimeRange.LAST_3_MONTHS, date(2024, 3, 15))
        assert [p.total_amount for p in points] == [
            Decimal("10"), Decimal("25"), Decimal("0"),
        ]

    def test_bucketize_quarters(self):
        entries = [
            build_entry("10", date(2024, 2, 10)),
            build_entry("20", date(2024, 5, 1)),
        ]
        points = bucketize(entries, BucketWidth.QUARTER, 4, date(2024, 6, 30))
        assert [p.bucket_start for p in points] == [
            date(2023, 7, 1), date(2023, 10, 1), date(2024, 1, 1), date(2024, 4, 1),
        ]
        assert [p.total_amount for p in points] == [
            Decimal("0"), Decimal("0"), Decimal("10"), Decimal("20"),
        ]

    def test_same_input_same_output(self):
        entries = [build_entry("12.34", date(2024, 3, 3)), build_entry("5", date(2024, 3, 10))]
        today = date(2024, 3, 15)
        assert series(entries, TimeRange.LAST_30_DAYS, today) == series(
            entries, TimeRange.LAST_30_DAYS, today
        )

    def test_bucketize_zero_count(self):
        assert bucketize([], BucketWidth.DAY, 0, date(2024, 1, 1)) == []

    def test_currency_conversion(self):
        entries = [build_entry("2", date(2024, 3, 1), currency="EUR", exchange_rate=Decimal("35"))]
        points = series(entries, TimeRange.LAST_3_MONTHS, date(2024, 3, 15), currency="TRY")
        assert points[-1].total_amount == Decimal("70")


class TestComparisonSeries:
    """Tests for the previous-period series."""

    @pytest.mark.parametrize("time_range", list(TimeRange))
    def test_same_length_as_current(self, time_range):
        today = date(2024, 3, 15)
        assert len(comparison_series([], time_range, today)) == len(series([], time_range, today))

    def test_previous_window_is_adjacent(self):
        today = date(2024, 3, 15)
        current = series([], TimeRange.LAST_3_MONTHS, today)
        previous = comparison_series([], TimeRange.LAST_3_MONTHS, today)
        assert [p.bucket_start for p in previous] == [
            date(2023, 10, 1), date(2023, 11, 1), date(2023, 12, 1),
        ]
        assert shift(previous[-1].bucket_start, BucketWidth.MONTH, 1) == current[0].bucket_start

    def test_points_align_by_position(self):
        entries = [
            build_entry("40", date(2024, 2, 14)),
            build_entry("15", date(2024, 1, 15)),
        ]
        today = date(2024, 3, 15)
        current = series(entries, TimeRange.LAST_30_DAYS, today)
        previous = comparison_series(entries, TimeRange.LAST_30_DAYS, today)

        assert current[0].bucket_start == date(2024, 2, 15)
        assert previous[-1].bucket_start == date(2024, 2, 14)
        assert previous[-1].total_amount == Decimal("40")
        assert previous[0].bucket_start == date(2024, 1, 16)
        assert sum(p.total_amount for p in current) == Decimal("0")
