"""Financial planning package."""

from ledger_engine.planning.calculator import (
    actual_spend_from_entries,
    allocation_variance,
    debt_payoff,
    emergency_fund_progress,
    emergency_fund_status,
    future_value_of_savings,
    goal_progress,
    monthly_breakdowns,
    net_worth_projection,
    recommended_allocation,
    required_monthly_savings,
    savings_progress,
    sync_actual_spend,
)
from ledger_engine.planning.templates import (
    aggressive_savings_plan,
    basic_plan,
    debt_payoff_plan,
)

__all__ = [
    "actual_spend_from_entries",
    "aggressive_savings_plan",
    "allocation_variance",
    "basic_plan",
    "debt_payoff",
    "debt_payoff_plan",
    "emergency_fund_progress",
    "emergency_fund_status",
    "future_value_of_savings",
    "goal_progress",
    "monthly_breakdowns",
    "net_worth_projection",
    "recommended_allocation",
    "required_monthly_savings",
    "savings_progress",
    "sync_actual_spend",
]
