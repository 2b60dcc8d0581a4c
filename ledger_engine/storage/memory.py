"""
In-Memory Storage

Thread-safe dict-backed implementations of the storage interfaces.
Writes are serialized with a lock; reads return copies of the lists.
"""

import threading
from datetime import date
from typing import Optional
from uuid import UUID

from ledger_engine.models.audit import AuditEvent
from ledger_engine.models.entry import EntryStatus, LedgerEntry
from ledger_engine.models.taxonomy import CategoryId
from ledger_engine.storage.interface import (
    AuditStorageInterface,
    DuplicateError,
    LedgerStorageInterface,
    NotFoundError,
)


class InMemoryLedgerStorage(LedgerStorageInterface):
    """Entries keyed by id."""

    def __init__(self):
        self._entries: dict[UUID, LedgerEntry] = {}
        self._lock = threading.Lock()

    def save_entry(self, entry: LedgerEntry) -> bool:
        with self._lock:
            if entry.id in self._entries:
                raise DuplicateError(f"Entry {entry.id} already exists")
            self._entries[entry.id] = entry
        return True

    def get_entry(self, entry_id: UUID) -> Optional[LedgerEntry]:
        return self._entries.get(entry_id)

    def update_entry(self, entry: LedgerEntry) -> bool:
        with self._lock:
            if entry.id not in self._entries:
                raise NotFoundError(f"Entry {entry.id} not found")
            self._entries[entry.id] = entry
        return True

    def delete_entry(self, entry_id: UUID) -> bool:
        with self._lock:
            return self._entries.pop(entry_id, None) is not None

    def list_entries(
        self,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        category: Optional[CategoryId] = None,
        status: Optional[EntryStatus] = None,
        recurrence_group_id: Optional[UUID] = None,
    ) -> list[LedgerEntry]:
        with self._lock:
            entries = list(self._entries.values())

        if date_from:
            entries = [e for e in entries if e.transaction_date >= date_from]
        if date_to:
            entries = [e for e in entries if e.transaction_date <= date_to]
        if category:
            entries = [e for e in entries if e.category_id == category]
        if status:
            entries = [e for e in entries if e.status == status]
        if recurrence_group_id:
            entries = [e for e in entries if e.recurrence_group_id == recurrence_group_id]

        return sorted(entries, key=lambda e: (e.transaction_date, e.created_at))

    def __len__(self) -> int:
        return len(self._entries)


class InMemoryAuditStorage(AuditStorageInterface):
    """Append-only list of events."""

    def __init__(self):
        self._events: list[AuditEvent] = []
        self._lock = threading.Lock()

    def append_event(self, event: AuditEvent) -> bool:
        with self._lock:
            self._events.append(event)
        return True

    def get_events_by_correlation_id(self, correlation_id: UUID) -> list[AuditEvent]:
        return [e for e in self._events if e.correlation_id == correlation_id]

    def get_events_by_entity(self, entity_type: str, entity_id: UUID) -> list[AuditEvent]:
        return [
            e for e in self._events
            if e.entity_type == entity_type and e.entity_id == entity_id
        ]

    def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        return list(reversed(self._events[-limit:])) if limit > 0 else []
