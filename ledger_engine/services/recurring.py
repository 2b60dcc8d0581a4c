"""
Recurring Occurrence Workflow

Materializes occurrences of recurring templates into storage and moves them
through their lifecycle:

    (generated) -> PENDING -> CONFIRMED
                           -> CANCELLED (skipped)

DESIGN DECISION: Materialization is idempotent. Occurrence ids are derived
from (group, date), and every date already occupied in a group (by the
template itself or a stored occurrence) is skipped. Running it twice saves
nothing the second time.
"""

from datetime import date
from typing import Optional
from uuid import UUID

from dateutil.relativedelta import relativedelta

from ledger_engine.audit import AuditLogger, create_correlation_id
from ledger_engine.config import RecurrenceSettings, get_settings
from ledger_engine.errors import ConfigurationError, LedgerError
from ledger_engine.models.entry import EntryStatus, LedgerEntry
from ledger_engine.recurrence import (
    RecurrenceGroupIndex,
    deterministic_occurrence_id,
    expand,
)
from ledger_engine.storage.interface import (
    DuplicateError,
    LedgerStorageInterface,
    NotFoundError,
)


class EntryNotPendingError(LedgerError):
    """Only pending occurrences can be confirmed or skipped."""

    def __init__(self, entry_id: UUID, status: EntryStatus):
        self.entry_id = entry_id
        self.status = status
        super().__init__(f"Entry {entry_id} is {status.value}, not pending")


class RecurringService:
    """
    Generates, confirms, skips and deletes recurring occurrences.

    Usage:
        service = RecurringService(storage, audit_logger)
        service.materialize(today)
        service.confirm_occurrence(entry_id)
    """

    def __init__(
        self,
        storage: LedgerStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
        settings: Optional[RecurrenceSettings] = None,
    ):
        self._storage = storage
        self._audit_logger = audit_logger
        self._settings = settings or get_settings().recurrence

    def _index(self) -> RecurrenceGroupIndex:
        return RecurrenceGroupIndex(self._storage.list_entries())

    def horizon_end(
        self,
        template: LedgerEntry,
        today: date,
        horizon_months: Optional[int] = None,
    ) -> date:
        """
        Last date to generate occurrences for.

        The horizon is capped by the rule's end date, and for open-ended
        rules by ``open_ended_horizon_years``.
        """
        months = horizon_months or self._settings.default_horizon_months
        end = today + relativedelta(months=months)
        if template.recurrence.end_date is not None:
            return min(end, template.recurrence.end_date)
        return min(end, today + relativedelta(years=self._settings.open_ended_horizon_years))

    def _missing_occurrences(
        self,
        index: RecurrenceGroupIndex,
        template: LedgerEntry,
        window_start: date,
        window_end: date,
    ) -> list[LedgerEntry]:
        return [
            occurrence
            for occurrence in expand(
                template, window_start, window_end, deterministic_occurrence_id
            )
            if not index.has_occurrence(template.group_key, occurrence.transaction_date)
        ]

    def upcoming_occurrences(
        self,
        today: date,
        horizon_months: Optional[int] = None,
    ) -> list[LedgerEntry]:
        """
        Occurrences due after today that are not stored yet.

        Nothing is saved; use ``materialize`` for that.
        """
        index = self._index()
        upcoming = []
        for template in index.templates():
            end = self.horizon_end(template, today, horizon_months)
            missing = self._missing_occurrences(
                index, template, today + relativedelta(days=1), end
            )
            if self._audit_logger:
                self._audit_logger.log_occurrences_expanded(
                    group_id=template.group_key,
                    window=(today.isoformat(), end.isoformat()),
                    count=len(missing),
                )
            upcoming.extend(missing)
        return sorted(upcoming, key=lambda e: (e.transaction_date, str(e.group_key)))

    def materialize(
        self,
        today: date,
        until: Optional[date] = None,
        correlation_id: Optional[UUID] = None,
    ) -> list[LedgerEntry]:
        """
        Save every missing occurrence from each template's anchor up to
        ``until`` (the default horizon if None).

        Returns:
            The newly saved occurrences, oldest first
        """
        correlation_id = correlation_id or create_correlation_id()
        index = self._index()
        saved = []

        for template in index.templates():
            end = until or self.horizon_end(template, today)
            skipped = 0
            group_saved = 0
            try:
                occurrences = expand(
                    template, template.transaction_date, end, deterministic_occurrence_id
                )
            except ConfigurationError as e:
                if self._audit_logger:
                    self._audit_logger.log_configuration_error(
                        error_type=type(e).__name__,
                        error_message=str(e),
                        details={"group_id": str(template.group_key)},
                        correlation_id=correlation_id,
                    )
                raise

            for occurrence in occurrences:
                if index.has_occurrence(template.group_key, occurrence.transaction_date):
                    skipped += 1
                    continue
                try:
                    self._storage.save_entry(occurrence)
                except DuplicateError:
                    # Stored under the same derived id by a concurrent run
                    skipped += 1
                    continue
                index.add(occurrence)
                saved.append(occurrence)
                group_saved += 1

            if self._audit_logger:
                self._audit_logger.log_occurrences_materialized(
                    group_id=template.group_key,
                    saved=group_saved,
                    skipped_existing=skipped,
                    correlation_id=correlation_id,
                )

        return sorted(saved, key=lambda e: e.transaction_date)

    def pending_occurrences(self, through: Optional[date] = None) -> list[LedgerEntry]:
        """Pending occurrences, optionally only those dated on or before ``through``."""
        return [
            e for e in self._storage.list_entries(date_to=through, status=EntryStatus.PENDING)
            if e.is_occurrence
        ]

    def _transition(self, entry_id: UUID, status: EntryStatus) -> LedgerEntry:
        entry = self._storage.get_entry(entry_id)
        if entry is None:
            raise NotFoundError(f"Entry {entry_id} not found")
        if entry.status != EntryStatus.PENDING:
            raise EntryNotPendingError(entry_id, entry.status)

        updated = entry.with_status(status)
        self._storage.update_entry(updated)
        return updated

    def confirm_occurrence(
        self,
        entry_id: UUID,
        correlation_id: Optional[UUID] = None,
    ) -> LedgerEntry:
        """
        Mark a pending occurrence as confirmed.

        Raises:
            NotFoundError: If the entry doesn't exist
            EntryNotPendingError: If it was already confirmed or skipped
        """
        confirmed = self._transition(entry_id, EntryStatus.CONFIRMED)
        if self._audit_logger:
            self._audit_logger.log_occurrence_confirmed(
                entry_id=entry_id,
                group_id=confirmed.group_key,
                correlation_id=correlation_id,
            )
        return confirmed

    def skip_occurrence(
        self,
        entry_id: UUID,
        correlation_id: Optional[UUID] = None,
    ) -> LedgerEntry:
        """
        Cancel a pending occurrence. It stays stored so it is not regenerated.

        Raises:
            NotFoundError: If the entry doesn't exist
            EntryNotPendingError: If it was already confirmed or skipped
        """
        skipped = self._transition(entry_id, EntryStatus.CANCELLED)
        if self._audit_logger:
            self._audit_logger.log_occurrence_skipped(
                entry_id=entry_id,
                group_id=skipped.group_key,
                correlation_id=correlation_id,
            )
        return skipped

    def delete_group(
        self,
        group_id: UUID,
        today: date,
        correlation_id: Optional[UUID] = None,
    ) -> int:
        """
        Stop a recurrence: delete the template and every pending occurrence
        dated after ``today``. Past and confirmed occurrences are kept.

        Returns:
            Number of occurrences deleted
        """
        index = self._index()
        future = index.future_pending(group_id, today)
        for occurrence in future:
            self._storage.delete_entry(occurrence.id)

        template = index.template_for(group_id)
        if template is not None:
            self._storage.delete_entry(template.id)

        if self._audit_logger:
            self._audit_logger.log_recurrence_group_deleted(
                group_id=group_id,
                deleted=len(future),
                correlation_id=correlation_id,
            )
        return len(future)
