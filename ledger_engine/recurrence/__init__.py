"""Recurrence expansion package."""

from ledger_engine.recurrence.expander import (
    OccurrenceSequence,
    deterministic_occurrence_id,
    expand,
    occurrence_dates,
)
from ledger_engine.recurrence.groups import RecurrenceGroupIndex

__all__ = [
    "OccurrenceSequence",
    "RecurrenceGroupIndex",
    "deterministic_occurrence_id",
    "expand",
    "occurrence_dates",
]
