"""
Recurrence Group Index

An arena over stored entries keyed by recurrence group id. Occurrences
reference their template by id instead of holding it, so all group lookups
go through this index.
"""

from collections import defaultdict
from datetime import date
from typing import Iterable, Optional
from uuid import UUID

from ledger_engine.models.entry import EntryStatus, LedgerEntry


class RecurrenceGroupIndex:
    """
    Index of templates and occurrences by group.

    The template's own date counts as occupied: the template IS the entry
    for its anchor date, so no occurrence is materialized there.
    """

    def __init__(self, entries: Iterable[LedgerEntry] = ()):
        self._templates: dict[UUID, LedgerEntry] = {}
        self._occurrences: dict[UUID, list[LedgerEntry]] = defaultdict(list)
        self._dates: dict[UUID, set[date]] = defaultdict(set)
        for entry in entries:
            self.add(entry)

    def add(self, entry: LedgerEntry) -> None:
        if entry.is_template:
            self._templates[entry.group_key] = entry
            self._dates[entry.group_key].add(entry.transaction_date)
        elif entry.is_occurrence and entry.recurrence_group_id is not None:
            group_id = entry.recurrence_group_id
            self._occurrences[group_id].append(entry)
            self._dates[group_id].add(entry.transaction_date)

    @property
    def group_ids(self) -> list[UUID]:
        return list(self._templates)

    def templates(self) -> list[LedgerEntry]:
        return list(self._templates.values())

    def template_for(self, group_id: UUID) -> Optional[LedgerEntry]:
        return self._templates.get(group_id)

    def has_occurrence(self, group_id: UUID, on: date) -> bool:
        return on in self._dates.get(group_id, ())

    def occurrences(self, group_id: UUID) -> list[LedgerEntry]:
        """Occurrences of a group ordered by date."""
        return sorted(
            self._occurrences.get(group_id, []),
            key=lambda e: e.transaction_date,
        )

    def future_pending(self, group_id: UUID, after: date) -> list[LedgerEntry]:
        """Pending occurrences dated strictly after ``after``."""
        return [
            e for e in self.occurrences(group_id)
            if e.status == EntryStatus.PENDING and e.transaction_date > after
        ]

    def __len__(self) -> int:
        return len(self._templates)

    def __contains__(self, group_id: object) -> bool:
        return group_id in self._templates
