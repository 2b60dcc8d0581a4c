"""Spending limit policy package."""

from ledger_engine.limits.policy import LimitSnapshotPolicy, period_bounds

__all__ = ["LimitSnapshotPolicy", "period_bounds"]
