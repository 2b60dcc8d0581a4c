"""
Ledger Entry Workflow

Ties the engine together for a single user action:

    draft -> validate -> stamp current limits -> save -> check limits

DESIGN DECISION: The workflow enforces the boundaries:
- Nothing is saved unless validation passes
- Limits are stamped exactly once, at creation
- Limit checks judge the new entry against its own snapshot
- Every step is audited
"""

from datetime import date
from typing import Iterable, Optional
from uuid import UUID

from ledger_engine.audit import AuditLogger, create_correlation_id
from ledger_engine.config import get_settings
from ledger_engine.errors import LedgerError
from ledger_engine.limits import LimitSnapshotPolicy, period_bounds
from ledger_engine.models.entry import (
    EntryDraft,
    EntryStatus,
    LedgerEntry,
    LimitPeriod,
    LimitSnapshot,
)
from ledger_engine.models.plan import FinancialPlan
from ledger_engine.models.taxonomy import CategoryId
from ledger_engine.models.validation import ValidationResult
from ledger_engine.planning import sync_actual_spend
from ledger_engine.services.recurring import RecurringService
from ledger_engine.storage import (
    AuditStorageInterface,
    InMemoryLedgerStorage,
    LedgerStorageInterface,
    NotFoundError,
    StorageError,
)
from ledger_engine.validation import EntryValidator


class EntryRejectedError(LedgerError):
    """The draft failed validation; ``result`` holds the issues."""

    def __init__(self, result: ValidationResult):
        self.result = result
        super().__init__(
            f"Entry rejected with {result.error_count} error(s)"
        )


class LedgerService:
    """
    Records, revises and deletes entries.

    Human input arrives as an EntryDraft. The service never fixes a draft;
    a draft with errors is rejected with the full validation result.
    """

    def __init__(
        self,
        storage: LedgerStorageInterface,
        validator: Optional[EntryValidator] = None,
        policy: Optional[LimitSnapshotPolicy] = None,
        audit_logger: Optional[AuditLogger] = None,
        recurring: Optional[RecurringService] = None,
    ):
        self._storage = storage
        self._validator = validator or EntryValidator(storage)
        self._policy = policy or LimitSnapshotPolicy()
        self._audit_logger = audit_logger
        self._recurring = recurring or RecurringService(storage, audit_logger)

    def _exceeded_periods(
        self,
        entry: LedgerEntry,
        correlation_id: Optional[UUID],
    ) -> list[LimitPeriod]:
        exceeded = []
        for period in LimitPeriod:
            start, end = period_bounds(entry.transaction_date, period)
            period_entries = self._storage.list_entries(date_from=start, date_to=end)
            if not self._policy.is_entry_over_limit(entry, period_entries, period):
                continue

            exceeded.append(period)
            if self._audit_logger:
                self._audit_logger.log_limit_exceeded(
                    entry_id=entry.id,
                    period=period.value,
                    total=str(self._policy.period_total(
                        period_entries, entry.transaction_date, period
                    )),
                    limit=str(entry.limits.for_period(period)),
                    correlation_id=correlation_id,
                )
        return exceeded

    def record_entry(
        self,
        draft: EntryDraft,
        today: Optional[date] = None,
        current_limits: Optional[LimitSnapshot] = None,
        correlation_id: Optional[UUID] = None,
    ) -> tuple[LedgerEntry, list[LimitPeriod]]:
        """
        Validate and save a new entry.

        Args:
            draft: User input
            today: Reference date for validation
            current_limits: Limits in force right now (settings if None)
            correlation_id: For tracking

        Returns:
            (saved entry, periods whose limit the entry pushed over)

        Raises:
            EntryRejectedError: If validation found errors
        """
        correlation_id = correlation_id or create_correlation_id()

        result = self._validator.validate(draft, today=today)
        if not result.is_valid:
            if self._audit_logger:
                self._audit_logger.log_entry_rejected(
                    issues=result.to_issue_dicts(),
                    correlation_id=correlation_id,
                )
            raise EntryRejectedError(result)

        ledger_settings = get_settings().ledger
        entry = draft.to_entry(
            current_limits=self._policy.stamp(current_limits),
            default_currency=ledger_settings.default_currency,
            status=EntryStatus(ledger_settings.default_entry_status),
        )
        try:
            self._storage.save_entry(entry)
        except StorageError as e:
            if self._audit_logger:
                self._audit_logger.log_error(
                    error_type=type(e).__name__,
                    error_message=str(e),
                    details={"entry_id": str(entry.id)},
                    correlation_id=correlation_id,
                )
            raise

        if self._audit_logger:
            self._audit_logger.log_entry_saved(
                entry_id=entry.id,
                amount=str(entry.amount),
                currency=entry.currency,
                correlation_id=correlation_id,
            )

        return entry, self._exceeded_periods(entry, correlation_id)

    def revise_entry(
        self,
        entry_id: UUID,
        correlation_id: Optional[UUID] = None,
        **changes,
    ) -> LedgerEntry:
        """
        Store a new version of an entry. The limit snapshot is kept.

        Raises:
            NotFoundError: If the entry doesn't exist
            ValueError: If the changes touch the id or the limit snapshot
        """
        entry = self._storage.get_entry(entry_id)
        if entry is None:
            raise NotFoundError(f"Entry {entry_id} not found")

        revised = entry.revised(**changes)
        self._storage.update_entry(revised)

        if self._audit_logger:
            self._audit_logger.log_entry_revised(
                entry_id=entry_id,
                changed_fields=sorted(changes),
                correlation_id=correlation_id,
            )
        return revised

    def delete_entry(
        self,
        entry_id: UUID,
        today: date,
        correlation_id: Optional[UUID] = None,
    ) -> bool:
        """
        Delete an entry. Deleting a recurring template also deletes the
        group's pending occurrences after ``today``.
        """
        entry = self._storage.get_entry(entry_id)
        if entry is None:
            return False

        if entry.is_template:
            self._recurring.delete_group(entry.group_key, today, correlation_id)
        else:
            self._storage.delete_entry(entry_id)

        if self._audit_logger:
            self._audit_logger.log_entry_deleted(
                entry_id=entry_id,
                correlation_id=correlation_id,
            )
        return True

    def sync_plan(
        self,
        plan: FinancialPlan,
        entries: Optional[Iterable[LedgerEntry]] = None,
    ) -> dict[CategoryId, float]:
        """Update a plan's actual spend from the stored entries in its range."""
        if entries is None:
            entries = self._storage.list_entries(
                date_from=plan.start_date, date_to=plan.end_date
            )
        totals = sync_actual_spend(plan, entries)

        if self._audit_logger:
            self._audit_logger.log_plan_updated(
                plan_id=plan.id,
                change="actual spend synced",
                details={c.value: amount for c, amount in totals.items()},
            )
        return totals


def create_services(
    ledger_storage: Optional[LedgerStorageInterface] = None,
    audit_storage: Optional[AuditStorageInterface] = None,
) -> tuple[LedgerService, RecurringService]:
    """
    Factory function to wire the workflow services.

    Args:
        ledger_storage: Entry storage. In-memory if None.
        audit_storage: Audit storage. Local-only logging if None.

    Returns:
        (ledger_service, recurring_service)
    """
    if ledger_storage is None:
        ledger_storage = InMemoryLedgerStorage()
    audit_logger = AuditLogger(audit_storage)

    recurring = RecurringService(ledger_storage, audit_logger)
    ledger = LedgerService(
        ledger_storage,
        audit_logger=audit_logger,
        recurring=recurring,
    )
    return ledger, recurring
