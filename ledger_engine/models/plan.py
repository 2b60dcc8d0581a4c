"""
Financial Plan Models

A FinancialPlan is the one long-lived, explicitly MUTATED record in the
engine: allocations and actuals are updated by planning operations.
Every mutation goes through a named method that reassigns the map (so
pydantic re-validates it) and bumps ``updated_at``.

DESIGN DECISION: Interest math uses plain floats. The formulas are exact
for double precision and no rounding is applied; callers format for display.
"""

from datetime import date, datetime
from enum import Enum
from uuid import UUID, uuid4

from dateutil.relativedelta import relativedelta
from pydantic import BaseModel, ConfigDict, Field, model_validator

from ledger_engine.errors import InvalidCompoundingFrequencyError
from ledger_engine.models.entry import utcnow
from ledger_engine.models.taxonomy import CategoryId


class InterestType(str, Enum):
    """Interest model for savings projections."""
    SIMPLE = "simple"
    COMPOUND = "compound"

    def calculate_amount(
        self,
        principal: float,
        rate: float,
        time: float,
        compounding_frequency: int = 1,
    ) -> float:
        """
        Total amount including interest.

        Args:
            principal: Initial amount
            rate: Annual rate as a decimal fraction (0.05 = 5%)
            time: Time in years (fractional allowed)
            compounding_frequency: Periods per year, compound interest only

        Raises:
            InvalidCompoundingFrequencyError: If compounding frequency < 1
        """
        if self is InterestType.SIMPLE:
            # A = P(1 + rt)
            return principal * (1 + rate * time)

        if compounding_frequency < 1:
            raise InvalidCompoundingFrequencyError(compounding_frequency)
        # A = P(1 + r/n)^(nt)
        n = float(compounding_frequency)
        return principal * (1 + rate / n) ** (n * time)

    def calculate_interest(
        self,
        principal: float,
        rate: float,
        time: float,
        compounding_frequency: int = 1,
    ) -> float:
        """Interest earned only (amount minus principal)."""
        return self.calculate_amount(
            principal, rate, time, compounding_frequency
        ) - principal


class FinancialPlan(BaseModel):
    """
    A savings/budget plan over a date range.

    Per-category maps are keyed by CategoryId; a missing key means zero.
    Month-keyed maps use "YYYY-MM".
    """
    model_config = ConfigDict(validate_assignment=True, str_strip_whitespace=True)

    id: UUID = Field(default_factory=uuid4)
    name: str = Field(..., min_length=1, max_length=200)
    description: str = Field(default="", max_length=1000)
    start_date: date
    end_date: date

    total_income: float = Field(default=0.0, ge=0)
    total_budget: float = Field(default=0.0, ge=0)
    savings_goal: float = Field(default=0.0, ge=0)
    emergency_fund_goal: float = Field(default=0.0, ge=0)

    interest_type: InterestType = InterestType.COMPOUND
    annual_interest_rate: float = Field(default=0.05, ge=0)
    compounding_frequency: int = Field(default=12, ge=1)
    currency: str = Field(default="TRY", min_length=3, max_length=3)
    is_active: bool = True

    category_allocations: dict[CategoryId, float] = Field(default_factory=dict)
    actual_spend: dict[CategoryId, float] = Field(default_factory=dict)
    monthly_income_breakdown: dict[str, float] = Field(default_factory=dict)
    fixed_expenses: dict[str, float] = Field(default_factory=dict)
    savings_contributions: dict[str, float] = Field(default_factory=dict)

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @model_validator(mode='after')
    def validate_dates(self) -> 'FinancialPlan':
        if self.end_date < self.start_date:
            raise ValueError("Plan end date cannot be before start date")
        return self

    # -------------------------------------------------------------------------
    # Lookups (missing key = zero)
    # -------------------------------------------------------------------------

    def allocation_for(self, category_id: CategoryId) -> float:
        return self.category_allocations.get(category_id, 0.0)

    def actual_for(self, category_id: CategoryId) -> float:
        return self.actual_spend.get(category_id, 0.0)

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def _touch(self) -> None:
        self.updated_at = utcnow()

    def set_allocation(self, category_id: CategoryId, amount: float) -> None:
        if amount < 0:
            raise ValueError("Allocation cannot be negative")
        self.category_allocations = {**self.category_allocations, category_id: amount}
        self._touch()

    def record_actual_spend(self, category_id: CategoryId, amount: float) -> None:
        if amount < 0:
            raise ValueError("Actual spend cannot be negative")
        self.actual_spend = {**self.actual_spend, category_id: amount}
        self._touch()

    def replace_actual_spend(self, totals: dict[CategoryId, float]) -> None:
        """Swap in a full set of actuals; categories left out read as zero."""
        if any(amount < 0 for amount in totals.values()):
            raise ValueError("Actual spend cannot be negative")
        self.actual_spend = dict(totals)
        self._touch()

    def record_monthly_income(self, month: str, amount: float) -> None:
        self.monthly_income_breakdown = {**self.monthly_income_breakdown, month: amount}
        self._touch()

    def add_fixed_expense(self, description: str, amount: float) -> None:
        self.fixed_expenses = {**self.fixed_expenses, description: amount}
        self._touch()

    def remove_fixed_expense(self, description: str) -> None:
        remaining = dict(self.fixed_expenses)
        remaining.pop(description, None)
        self.fixed_expenses = remaining
        self._touch()

    def record_savings_contribution(self, month: str, amount: float) -> None:
        self.savings_contributions = {**self.savings_contributions, month: amount}
        self._touch()

    # -------------------------------------------------------------------------
    # Derived values
    # -------------------------------------------------------------------------

    @property
    def duration_in_years(self) -> float:
        # 365.25 accounts for leap years
        return (self.end_date - self.start_date).days / 365.25

    @property
    def duration_in_months(self) -> int:
        delta = relativedelta(self.end_date, self.start_date)
        return delta.years * 12 + delta.months

    @property
    def average_monthly_income(self) -> float:
        months = self.duration_in_months
        return self.total_income / months if months > 0 else 0.0

    @property
    def average_monthly_budget(self) -> float:
        months = self.duration_in_months
        return self.total_budget / months if months > 0 else 0.0

    @property
    def target_monthly_savings(self) -> float:
        months = self.duration_in_months
        return self.savings_goal / months if months > 0 else 0.0

    @property
    def total_fixed_expenses(self) -> float:
        return sum(self.fixed_expenses.values())

    @property
    def total_allocated(self) -> float:
        return sum(self.category_allocations.values())

    @property
    def actual_savings(self) -> float:
        return sum(self.savings_contributions.values())

    @property
    def savings_rate(self) -> float:
        """Target monthly savings as a percentage of monthly income."""
        income = self.average_monthly_income
        if income <= 0:
            return 0.0
        return self.target_monthly_savings / income * 100

    def is_current(self, today: date) -> bool:
        return self.is_active and self.start_date <= today <= self.end_date

    def progress_percentage(self, today: date) -> float:
        """Elapsed share of the plan's date range (0-100)."""
        if today < self.start_date:
            return 0.0
        if today >= self.end_date:
            return 100.0
        total_days = (self.end_date - self.start_date).days
        return (today - self.start_date).days / total_days * 100


class PlanMonthlyBreakdown(BaseModel):
    """One projected month of a plan."""
    model_config = ConfigDict(frozen=True)

    plan_id: UUID
    month_index: int = Field(ge=0)
    month_start: date
    projected_income: float
    fixed_expenses: float
    average_expenses: float
    total_projected_expenses: float
    net_amount: float
    interest_earned: float = 0.0
    cumulative_net: float

    @property
    def savings_rate(self) -> float:
        if self.projected_income <= 0:
            return 0.0
        return self.net_amount / self.projected_income

    @property
    def expense_ratio(self) -> float:
        if self.projected_income <= 0:
            return 0.0
        return self.total_projected_expenses / self.projected_income


class DebtPayoff(BaseModel):
    """Result of a debt payoff simulation."""
    model_config = ConfigDict(frozen=True)

    months: int = Field(ge=0)
    total_interest: float = Field(ge=0)
    is_paid_off: bool


class EmergencyFundStatus(BaseModel):
    """Progress towards the emergency fund goal."""
    model_config = ConfigDict(frozen=True)

    percentage: float = Field(ge=0.0, le=100.0)
    remaining: float = Field(ge=0.0)


class CategoryVariance(BaseModel):
    """Allocated vs. actual spend for one category."""
    model_config = ConfigDict(frozen=True)

    category_id: CategoryId
    allocated: float
    actual: float

    @property
    def variance(self) -> float:
        """Positive = overspent, negative = under budget."""
        return self.actual - self.allocated

    @property
    def is_over_budget(self) -> bool:
        return self.actual > self.allocated
