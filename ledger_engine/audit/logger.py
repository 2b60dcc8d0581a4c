"""
Audit Logger

DESIGN DECISION: Every workflow step that changes the ledger is logged.
This provides:
1. Complete traceability of generated occurrences
2. Debugging capability when configuration is rejected
3. A history of exceeded limits

The audit logger:
- Is synchronous, like the engine it wraps
- Gracefully handles storage failures (never breaks the workflow)
- Supports correlation IDs to trace related events
"""

from typing import Optional
from uuid import UUID, uuid4

import structlog

from ledger_engine.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity
from ledger_engine.storage.interface import AuditStorageInterface, StorageError


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. Audit storage, when one is configured
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Args:
            storage: Storage backend for persistence.
                     If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger("ledger_engine.audit")

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if the storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        elif event.severity == AuditSeverity.DEBUG:
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return self._storage.append_event(event)
            except StorageError as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    def log_occurrences_materialized(
        self,
        group_id: UUID,
        saved: int,
        skipped_existing: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.occurrences_materialized(
            group_id=group_id,
            saved=saved,
            skipped_existing=skipped_existing,
            correlation_id=correlation_id,
        ))

    def log_occurrence_confirmed(
        self,
        entry_id: UUID,
        group_id: UUID,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.occurrence_confirmed(
            entry_id=entry_id,
            group_id=group_id,
            correlation_id=correlation_id,
        ))

    def log_occurrence_skipped(
        self,
        entry_id: UUID,
        group_id: UUID,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.occurrence_skipped(
            entry_id=entry_id,
            group_id=group_id,
            correlation_id=correlation_id,
        ))

    def log_recurrence_group_deleted(
        self,
        group_id: UUID,
        deleted: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.recurrence_group_deleted(
            group_id=group_id,
            deleted=deleted,
            correlation_id=correlation_id,
        ))

    def log_entry_saved(
        self,
        entry_id: UUID,
        amount: str,
        currency: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.entry_saved(
            entry_id=entry_id,
            amount=amount,
            currency=currency,
            correlation_id=correlation_id,
        ))

    def log_entry_revised(
        self,
        entry_id: UUID,
        changed_fields: list[str],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.entry_revised(
            entry_id=entry_id,
            changed_fields=changed_fields,
            correlation_id=correlation_id,
        ))

    def log_entry_deleted(
        self,
        entry_id: UUID,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.entry_deleted(
            entry_id=entry_id,
            correlation_id=correlation_id,
        ))

    def log_entry_rejected(
        self,
        issues: list[dict],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.entry_rejected(
            issues=issues,
            correlation_id=correlation_id,
        ))

    def log_limit_exceeded(
        self,
        entry_id: UUID,
        period: str,
        total: str,
        limit: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.limit_exceeded(
            entry_id=entry_id,
            period=period,
            total=total,
            limit=limit,
            correlation_id=correlation_id,
        ))

    def log_occurrences_expanded(
        self,
        group_id: UUID,
        window: tuple[str, str],
        count: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.occurrences_expanded(
            group_id=group_id,
            window=window,
            count=count,
            correlation_id=correlation_id,
        ))

    def log_plan_updated(
        self,
        plan_id: UUID,
        change: str,
        details: Optional[dict] = None,
    ) -> None:
        self.log(AuditEventBuilder.plan_updated(
            plan_id=plan_id,
            change=change,
            details=details,
        ))

    def log_configuration_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.configuration_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        ))

    def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a workflow run (e.g., one materialization).
    Pass it through all subsequent operations.
    """
    return uuid4()
