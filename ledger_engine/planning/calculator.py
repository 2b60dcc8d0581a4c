"""
Financial Plan Calculator

Plan-level projections built on ``InterestType``: variance against
allocations, goal progress, savings projections, debt payoff and monthly
breakdowns.

GUARANTEES:
- Pure functions; the plan is only changed by ``sync_actual_spend``
- No division by zero: degenerate inputs resolve to 0 (or an empty result)
- Plain floats, no rounding
"""

import math
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from dateutil.relativedelta import relativedelta

from ledger_engine.config import get_settings
from ledger_engine.models.entry import LedgerEntry
from ledger_engine.models.plan import (
    CategoryVariance,
    DebtPayoff,
    EmergencyFundStatus,
    FinancialPlan,
    InterestType,
    PlanMonthlyBreakdown,
)
from ledger_engine.models.taxonomy import CategoryId


# 50/30/20 rule
NEEDS_SHARE = 0.50
WANTS_SHARE = 0.30
SAVINGS_SHARE = 0.20

# Balance below which a debt counts as repaid
_PAID_OFF_THRESHOLD = 0.01


def month_key(day: date) -> str:
    return day.strftime("%Y-%m")


# =============================================================================
# Variance and progress
# =============================================================================

def allocation_variance(plan: FinancialPlan) -> list[CategoryVariance]:
    """
    Actual minus allocated for every category that has either.

    A category missing from one of the maps counts as zero there.
    """
    keys = set(plan.category_allocations) | set(plan.actual_spend)
    return [
        CategoryVariance(
            category_id=category_id,
            allocated=plan.allocation_for(category_id),
            actual=plan.actual_for(category_id),
        )
        for category_id in sorted(keys, key=lambda c: c.value)
    ]


def goal_progress(actual: float, goal: float) -> float:
    """Progress towards a goal, clamped to [0, 1]. A goal <= 0 gives 0."""
    if goal <= 0:
        return 0.0
    return min(max(actual / goal, 0.0), 1.0)


def savings_progress(plan: FinancialPlan) -> float:
    return goal_progress(plan.actual_savings, plan.savings_goal)


def emergency_fund_progress(plan: FinancialPlan, current_amount: float) -> float:
    return goal_progress(current_amount, plan.emergency_fund_goal)


def emergency_fund_status(plan: FinancialPlan, current_amount: float) -> EmergencyFundStatus:
    if plan.emergency_fund_goal <= 0:
        return EmergencyFundStatus(percentage=0.0, remaining=0.0)
    return EmergencyFundStatus(
        percentage=min(max(current_amount / plan.emergency_fund_goal * 100, 0.0), 100.0),
        remaining=max(plan.emergency_fund_goal - current_amount, 0.0),
    )


# =============================================================================
# Savings projections
# =============================================================================

def future_value_of_savings(
    plan: FinancialPlan,
    principal: float = 0.0,
    monthly_contribution: Optional[float] = None,
    years: Optional[float] = None,
) -> float:
    """
    Future value of a starting balance plus monthly contributions.

    The principal grows with the plan's interest type. Contributions are an
    ordinary annuity at ``annual_interest_rate / 12``.

    Args:
        plan: Supplies rate, interest type and compounding frequency
        principal: Starting balance
        monthly_contribution: Defaults to the plan's target monthly savings
        years: Defaults to the plan duration
    """
    contribution = plan.target_monthly_savings if monthly_contribution is None else monthly_contribution
    time = plan.duration_in_years if years is None else years

    principal_fv = plan.interest_type.calculate_amount(
        principal,
        plan.annual_interest_rate,
        time,
        plan.compounding_frequency,
    )

    if contribution <= 0 or plan.annual_interest_rate <= 0:
        return principal_fv + contribution * 12 * time

    monthly_rate = plan.annual_interest_rate / 12
    total_months = time * 12
    annuity_fv = contribution * (((1 + monthly_rate) ** total_months - 1) / monthly_rate)
    return principal_fv + annuity_fv


def required_monthly_savings(plan: FinancialPlan) -> float:
    """Monthly contribution that reaches the savings goal by the end date."""
    if plan.duration_in_years <= 0 or plan.annual_interest_rate <= 0:
        return plan.savings_goal / max(plan.duration_in_months, 1)

    monthly_rate = plan.annual_interest_rate / 12
    total_months = plan.duration_in_years * 12
    factor = ((1 + monthly_rate) ** total_months - 1) / monthly_rate
    return plan.savings_goal / factor


def recommended_allocation(plan: FinancialPlan) -> dict[str, float]:
    """Split of the average monthly income by the 50/30/20 rule."""
    income = plan.average_monthly_income
    return {
        "needs": income * NEEDS_SHARE,
        "wants": income * WANTS_SHARE,
        "savings": income * SAVINGS_SHARE,
    }


def net_worth_projection(
    plan: FinancialPlan,
    current_net_worth: float,
    monthly_net_income: float,
) -> list[float]:
    """
    Month-by-month net worth, starting with the current value.

    Each month adds the net income, then grows by one month of interest.
    """
    monthly_rate = plan.annual_interest_rate / 12
    projections = [current_net_worth]
    value = current_net_worth
    for _ in range(plan.duration_in_months):
        value = (value + monthly_net_income) * (1 + monthly_rate)
        projections.append(value)
    return projections


def monthly_breakdowns(
    plan: FinancialPlan,
    average_expenses: float = 0.0,
) -> list[PlanMonthlyBreakdown]:
    """
    Projected income, expenses and savings for each month of the plan.

    Income comes from ``monthly_income_breakdown`` when the month is recorded
    there, otherwise the average monthly income. Interest accrues monthly on
    the balance carried in from earlier months: on everything for compound
    plans, on contributions only for simple ones.
    """
    monthly_rate = plan.annual_interest_rate / 12
    fixed = plan.total_fixed_expenses
    total_expenses = fixed + average_expenses

    rows = []
    contributed = 0.0
    cumulative = 0.0
    for index in range(plan.duration_in_months):
        month_start = plan.start_date + relativedelta(months=index)
        income = plan.monthly_income_breakdown.get(
            month_key(month_start), plan.average_monthly_income
        )
        net = income - total_expenses

        base = cumulative if plan.interest_type == InterestType.COMPOUND else contributed
        interest = max(base, 0.0) * monthly_rate

        contributed += net
        cumulative += net + interest
        rows.append(PlanMonthlyBreakdown(
            plan_id=plan.id,
            month_index=index,
            month_start=month_start,
            projected_income=income,
            fixed_expenses=fixed,
            average_expenses=average_expenses,
            total_projected_expenses=total_expenses,
            net_amount=net,
            interest_earned=interest,
            cumulative_net=cumulative,
        ))
    return rows


# =============================================================================
# Debt
# =============================================================================

def debt_payoff(
    debt_amount: float,
    monthly_payment: float,
    annual_rate: float,
    max_months: Optional[int] = None,
) -> DebtPayoff:
    """
    Simulate paying a debt down month by month.

    Stops when the balance is repaid, when the payment no longer covers the
    interest, or at ``max_months`` (from settings by default).
    """
    if debt_amount <= 0:
        return DebtPayoff(months=0, total_interest=0.0, is_paid_off=True)
    if monthly_payment <= 0:
        return DebtPayoff(months=0, total_interest=0.0, is_paid_off=False)
    if annual_rate <= 0:
        return DebtPayoff(
            months=math.ceil(debt_amount / monthly_payment),
            total_interest=0.0,
            is_paid_off=True,
        )

    if max_months is None:
        max_months = get_settings().planning.debt_payoff_max_months

    monthly_rate = annual_rate / 12
    balance = debt_amount
    months = 0
    total_interest = 0.0

    while balance > _PAID_OFF_THRESHOLD and months < max_months:
        interest = balance * monthly_rate
        principal = min(monthly_payment - interest, balance)
        if principal <= 0:
            # Payment doesn't cover the interest
            break
        total_interest += interest
        balance -= principal
        months += 1

    return DebtPayoff(
        months=months,
        total_interest=total_interest,
        is_paid_off=balance <= _PAID_OFF_THRESHOLD,
    )


# =============================================================================
# Actuals from the ledger
# =============================================================================

def actual_spend_from_entries(
    plan: FinancialPlan,
    entries: Iterable[LedgerEntry],
) -> dict[CategoryId, float]:
    """Per-category totals of the entries dated within the plan's range."""
    totals: dict[CategoryId, Decimal] = {}
    for entry in entries:
        if not entry.counts_towards_totals:
            continue
        if not plan.start_date <= entry.transaction_date <= plan.end_date:
            continue
        amount = entry.amount_in(plan.currency)
        totals[entry.category_id] = totals.get(entry.category_id, Decimal("0")) + amount
    return {category_id: float(amount) for category_id, amount in totals.items()}


def sync_actual_spend(
    plan: FinancialPlan,
    entries: Iterable[LedgerEntry],
) -> dict[CategoryId, float]:
    """Replace the plan's actual spend with the ledger's per-category totals."""
    totals = actual_spend_from_entries(plan, entries)
    plan.replace_actual_spend(totals)
    return totals
