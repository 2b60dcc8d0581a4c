"""
Analytics Package

Period aggregation and time-series bucketing over ledger entries.
"""

from ledger_engine.analytics.aggregator import PeriodAggregator
from ledger_engine.analytics.bucketizer import (
    BucketWidth,
    TimeRange,
    bucketize,
    comparison_series,
    series,
    shift,
    truncate,
)

__all__ = [
    "BucketWidth",
    "PeriodAggregator",
    "TimeRange",
    "bucketize",
    "comparison_series",
    "series",
    "shift",
    "truncate",
]
