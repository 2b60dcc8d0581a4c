"""Tests for in-memory storage and the audit logger."""

import pytest
from datetime import date
from uuid import uuid4

from ledger_engine.audit import AuditLogger, create_correlation_id
from ledger_engine.models.audit import AuditEventBuilder, AuditEventType, AuditSeverity
from ledger_engine.models.entry import EntryStatus, RecurrenceKind
from ledger_engine.models.taxonomy import CategoryId
from ledger_engine.storage import (
    DuplicateError,
    InMemoryAuditStorage,
    InMemoryLedgerStorage,
    NotFoundError,
    StorageError,
)

from tests.conftest import at, build_entry


class BrokenAuditStorage(InMemoryAuditStorage):
    def append_event(self, event):
        raise StorageError("audit table locked")


class TestInMemoryLedgerStorage:
    """Tests for the dict-backed entry store."""

    def test_save_and_get(self):
        storage = InMemoryLedgerStorage()
        entry = build_entry("10", date(2024, 1, 1))
        assert storage.save_entry(entry)
        assert storage.get_entry(entry.id) == entry
        assert storage.get_entry(uuid4()) is None

    def test_save_twice_rejected(self):
        storage = InMemoryLedgerStorage()
        entry = build_entry("10", date(2024, 1, 1))
        storage.save_entry(entry)
        with pytest.raises(DuplicateError):
            storage.save_entry(entry)

    def test_update_unknown_rejected(self):
        with pytest.raises(NotFoundError):
            InMemoryLedgerStorage().update_entry(build_entry("10", date(2024, 1, 1)))

    def test_delete(self):
        storage = InMemoryLedgerStorage()
        entry = build_entry("10", date(2024, 1, 1))
        storage.save_entry(entry)
        assert storage.delete_entry(entry.id)
        assert not storage.delete_entry(entry.id)
        assert len(storage) == 0

    def test_list_filters_and_order(self):
        storage = InMemoryLedgerStorage()
        late = build_entry("1", date(2024, 1, 3), created_at=at(2024, 1, 1))
        early = build_entry("2", date(2024, 1, 2), created_at=at(2024, 1, 5))
        same_day = build_entry("3", date(2024, 1, 2), created_at=at(2024, 1, 6), category=CategoryId.PETS)
        template = build_entry("4", date(2024, 1, 1), kind=RecurrenceKind.MONTHLY)
        for entry in (late, early, same_day, template):
            storage.save_entry(entry)
        storage.update_entry(late.with_status(EntryStatus.CANCELLED))

        assert [e.id for e in storage.list_entries()] == [template.id, early.id, same_day.id, late.id]
        assert [e.id for e in storage.list_entries(date_from=date(2024, 1, 2), date_to=date(2024, 1, 2))] == [
            early.id, same_day.id,
        ]
        assert [e.id for e in storage.list_entries(category=CategoryId.PETS)] == [same_day.id]
        assert [e.id for e in storage.list_entries(status=EntryStatus.CANCELLED)] == [late.id]
        assert [e.id for e in storage.list_entries(
            recurrence_group_id=template.recurrence_group_id
        )] == [template.id]


class TestAuditLogger:
    """Tests for audit logging and persistence."""

    def test_log_without_storage(self):
        event = AuditEventBuilder.entry_deleted(entry_id=uuid4())
        assert AuditLogger().log(event) is True

    def test_log_persists_event(self):
        storage = InMemoryAuditStorage()
        entry_id = uuid4()
        AuditLogger(storage).log_entry_deleted(entry_id)

        events = storage.get_events_by_entity("entry", entry_id)
        assert [e.event_type for e in events] == [AuditEventType.ENTRY_DELETED]

    def test_storage_failure_does_not_raise(self):
        """Test that a failing audit store never breaks the workflow."""
        logger = AuditLogger(BrokenAuditStorage())
        assert logger.log(AuditEventBuilder.entry_deleted(entry_id=uuid4())) is False

    def test_configuration_error_event(self):
        storage = InMemoryAuditStorage()
        correlation_id = create_correlation_id()
        AuditLogger(storage).log_configuration_error(
            error_type="InvalidRecurrenceIntervalError",
            error_message="Recurrence interval must be at least 1 day (got 0)",
            correlation_id=correlation_id,
        )

        [event] = storage.get_events_by_correlation_id(correlation_id)
        assert event.event_type == AuditEventType.CONFIGURATION_ERROR
        assert event.severity == AuditSeverity.ERROR

    def test_recent_events_newest_first(self):
        storage = InMemoryAuditStorage()
        logger = AuditLogger(storage)
        ids = [uuid4() for _ in range(3)]
        for entry_id in ids:
            logger.log_entry_deleted(entry_id)

        recent = storage.get_recent_events(limit=2)
        assert [e.entity_id for e in recent] == [ids[2], ids[1]]
        assert storage.get_recent_events(limit=0) == []

    def test_correlation_ids_are_unique(self):
        assert create_correlation_id() != create_correlation_id()
