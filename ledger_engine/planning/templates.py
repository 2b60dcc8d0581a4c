"""
Plan templates

Ready-made plans for a given monthly income.
"""

import math
from datetime import date

from dateutil.relativedelta import relativedelta

from ledger_engine.models.plan import FinancialPlan, InterestType


def basic_plan(
    name: str,
    monthly_income: float,
    start_date: date,
    duration_months: int = 12,
) -> FinancialPlan:
    """80% spending, 20% savings, six months of emergency fund."""
    total_income = monthly_income * duration_months
    return FinancialPlan(
        name=name,
        description="Balanced plan: 80% expenses, 20% savings",
        start_date=start_date,
        end_date=start_date + relativedelta(months=duration_months),
        total_income=total_income,
        total_budget=total_income * 0.8,
        savings_goal=total_income * 0.2,
        emergency_fund_goal=monthly_income * 6,
        interest_type=InterestType.COMPOUND,
        annual_interest_rate=0.05,
        compounding_frequency=12,
    )


def aggressive_savings_plan(
    name: str,
    monthly_income: float,
    start_date: date,
    savings_rate: float = 0.5,
    duration_months: int = 60,
) -> FinancialPlan:
    total_income = monthly_income * duration_months
    return FinancialPlan(
        name=name,
        description=f"Aggressive savings plan: {savings_rate:.0%} of income saved",
        start_date=start_date,
        end_date=start_date + relativedelta(months=duration_months),
        total_income=total_income,
        total_budget=total_income * (1 - savings_rate),
        savings_goal=monthly_income * savings_rate * duration_months,
        emergency_fund_goal=monthly_income * 12,
        interest_type=InterestType.COMPOUND,
        annual_interest_rate=0.07,
        compounding_frequency=12,
    )


def debt_payoff_plan(
    name: str,
    monthly_income: float,
    total_debt: float,
    start_date: date,
    debt_payment_percentage: float = 0.3,
) -> FinancialPlan:
    """
    Plan sized to repay ``total_debt`` from a share of income.

    Raises:
        ValueError: If the payment share or the income is not positive
    """
    monthly_payment = monthly_income * debt_payment_percentage
    if monthly_payment <= 0:
        raise ValueError("Monthly debt payment must be greater than zero")

    months = math.ceil(total_debt / monthly_payment)
    total_income = monthly_income * months
    return FinancialPlan(
        name=name,
        description="Debt payoff plan",
        start_date=start_date,
        end_date=start_date + relativedelta(months=months),
        total_income=total_income,
        total_budget=total_income * (1 - debt_payment_percentage),
        savings_goal=0.0,
        emergency_fund_goal=monthly_income * 3,
        interest_type=InterestType.SIMPLE,
        annual_interest_rate=0.03,
        compounding_frequency=12,
    )
