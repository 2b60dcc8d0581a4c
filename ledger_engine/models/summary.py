"""
Derived Summary Records

Plain records produced by the aggregator and the bucketizer.
They are never persisted; they are recomputed on demand.

CRITICAL: Every ratio in here is finite. Divisions by a possibly-zero
denominator are resolved to 0 by the code that builds these records.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from ledger_engine.models.entry import LedgerEntry
from ledger_engine.models.taxonomy import CategoryId


class TrendDirection(str, Enum):
    """Direction of spending between two consecutive periods."""
    INCREASING = "increasing"
    DECREASING = "decreasing"
    STABLE = "stable"


class CategoryShare(BaseModel):
    """One row of a category breakdown."""
    model_config = ConfigDict(frozen=True)

    category_id: CategoryId
    amount: Decimal
    percentage: float = Field(
        ge=0.0,
        le=1.0,
        description="Share of the period total (0-1)"
    )


class PeriodSummary(BaseModel):
    """Aggregate of all entries in a closed date range."""
    model_config = ConfigDict(frozen=True)

    start: date
    end: date
    total_amount: Decimal
    entry_count: int = Field(ge=0)
    limit: Decimal = Field(ge=0)
    progress_ratio: float = Field(ge=0.0, le=1.0)
    is_over_limit: bool
    category_breakdown: list[CategoryShare] = Field(default_factory=list)
    largest_entry: Optional[LedgerEntry] = None
    smallest_entry: Optional[LedgerEntry] = None
    average_amount: Decimal
    efficiency_score: float = Field(ge=0.0, le=100.0)

    # Savings
    savings_target: Decimal = Decimal("0")
    actual_savings: Decimal = Decimal("0")

    @property
    def remaining(self) -> Decimal:
        """Amount left before hitting the limit (never negative)."""
        if self.limit <= 0:
            return Decimal("0")
        return max(self.limit - self.total_amount, Decimal("0"))

    @property
    def savings_gap(self) -> Decimal:
        """How far actual savings are from the target (positive = short)."""
        return self.savings_target - self.actual_savings


class DailyRecord(BaseModel):
    """
    One day of history.

    ``progress_amount`` excludes recurring entries: limit progress tracks
    discretionary spending, while ``total_amount`` includes everything.
    """
    model_config = ConfigDict(frozen=True)

    day: date
    total_amount: Decimal
    progress_amount: Decimal
    entry_count: int = Field(ge=0)
    daily_limit: Decimal = Field(ge=0)

    @property
    def progress_ratio(self) -> float:
        if self.daily_limit <= 0:
            return 0.0
        return min(float(self.progress_amount / self.daily_limit), 1.0)

    @property
    def is_over_limit(self) -> bool:
        return self.daily_limit > 0 and self.progress_amount > self.daily_limit


class LimitUsage(BaseModel):
    """Spending for one period against its limit."""
    model_config = ConfigDict(frozen=True)

    spent: Decimal
    limit: Decimal = Field(ge=0)

    @property
    def usage_percentage(self) -> float:
        """Percentage of the limit used, capped at 100."""
        if self.limit <= 0:
            return 0.0
        return min(float(self.spent / self.limit) * 100, 100.0)

    @property
    def is_exceeded(self) -> bool:
        return self.limit > 0 and self.spent > self.limit


class SpendingSummary(BaseModel):
    """Today / this month / this year at a glance."""
    model_config = ConfigDict(frozen=True)

    reference_date: date
    currency: str
    today: LimitUsage
    this_month: LimitUsage
    this_year: LimitUsage


class SeriesPoint(BaseModel):
    """One bucket of a trend series."""
    model_config = ConfigDict(frozen=True)

    bucket_start: date
    total_amount: Decimal


class SpendingTrends(BaseModel):
    """Monthly totals over a trailing window, oldest first."""
    model_config = ConfigDict(frozen=True)

    monthly_totals: list[SeriesPoint] = Field(default_factory=list)
    currency: str

    @property
    def trend(self) -> TrendDirection:
        """Compare the last two months with a +/-10% dead band."""
        if len(self.monthly_totals) < 2:
            return TrendDirection.STABLE

        recent = self.monthly_totals[-1].total_amount
        previous = self.monthly_totals[-2].total_amount

        if recent > previous * Decimal("1.1"):
            return TrendDirection.INCREASING
        if recent < previous * Decimal("0.9"):
            return TrendDirection.DECREASING
        return TrendDirection.STABLE
