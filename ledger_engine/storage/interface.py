"""
Abstract Storage Interface

DESIGN DECISION: The engine never owns persistence. Callers hand it entries
and store what it returns. This interface is the seam the workflow services
use, so they can run against:
1. An in-memory store in tests
2. Any durable backend the host application provides

The interface is intentionally simple - we're not building a full ORM.
Just the operations the recurring and ledger workflows need.

Unlike the engine, storage calls may fail; failures are StorageError.
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import Optional
from uuid import UUID

from ledger_engine.models.audit import AuditEvent
from ledger_engine.models.entry import EntryStatus, LedgerEntry
from ledger_engine.models.taxonomy import CategoryId


class LedgerStorageInterface(ABC):
    """
    Abstract interface for ledger entry storage.

    Entries are stored by id; saving a new version of an existing id goes
    through ``update_entry``.
    """

    @abstractmethod
    def save_entry(self, entry: LedgerEntry) -> bool:
        """
        Save a new entry.

        Raises:
            DuplicateError: If an entry with this id already exists
        """
        pass

    @abstractmethod
    def get_entry(self, entry_id: UUID) -> Optional[LedgerEntry]:
        """Return the entry, or None if it doesn't exist."""
        pass

    @abstractmethod
    def update_entry(self, entry: LedgerEntry) -> bool:
        """
        Replace the stored version of an entry.

        Raises:
            NotFoundError: If the entry doesn't exist
        """
        pass

    @abstractmethod
    def delete_entry(self, entry_id: UUID) -> bool:
        """Delete an entry. Returns False if it didn't exist."""
        pass

    @abstractmethod
    def list_entries(
        self,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        category: Optional[CategoryId] = None,
        status: Optional[EntryStatus] = None,
        recurrence_group_id: Optional[UUID] = None,
    ) -> list[LedgerEntry]:
        """
        List entries with optional filters, ordered by date.

        Args:
            date_from: Entries on or after this date
            date_to: Entries on or before this date
            category: Filter by category
            status: Filter by status
            recurrence_group_id: Only entries of this recurrence group
        """
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    def append_event(self, event: AuditEvent) -> bool:
        pass

    @abstractmethod
    def get_events_by_correlation_id(self, correlation_id: UUID) -> list[AuditEvent]:
        """Events of one workflow run in chronological order."""
        pass

    @abstractmethod
    def get_events_by_entity(self, entity_type: str, entity_id: UUID) -> list[AuditEvent]:
        pass

    @abstractmethod
    def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        """Most recent events, newest first."""
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class DuplicateError(StorageError):
    """Attempted to insert a duplicate entity."""
    pass
