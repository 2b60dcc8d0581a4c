"""
Audit Models for the Ledger Engine

Workflow steps around the engine (materializing occurrences, confirming or
skipping them, plan updates, rejected configuration) are logged as audit
events. This provides:
1. Traceability of every entry the engine generated
2. Debugging information when a configuration is rejected
3. A record of which limit was exceeded, and when

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from ledger_engine.models.entry import utcnow


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Recurrence
    OCCURRENCES_EXPANDED = "occurrences_expanded"
    OCCURRENCES_MATERIALIZED = "occurrences_materialized"
    OCCURRENCE_CONFIRMED = "occurrence_confirmed"
    OCCURRENCE_SKIPPED = "occurrence_skipped"
    RECURRENCE_GROUP_DELETED = "recurrence_group_deleted"

    # Entries
    ENTRY_SAVED = "entry_saved"
    ENTRY_REVISED = "entry_revised"
    ENTRY_DELETED = "entry_deleted"
    ENTRY_REJECTED = "entry_rejected"

    # Limits
    LIMIT_EXCEEDED = "limit_exceeded"

    # Planning
    PLAN_UPDATED = "plan_updated"

    # System events
    CONFIGURATION_ERROR = "configuration_error"
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """A single audit event."""

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'entry', 'recurrence_group', 'plan')"
    )
    entity_id: Optional[UUID] = None

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., one materialization run)"
    )

    description: str = Field(..., max_length=500)
    details: dict[str, Any] = Field(default_factory=dict)

    # Error information (if applicable)
    error_code: Optional[str] = None
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """Convert to a dictionary suitable for structured logging."""
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": str(self.entity_id) if self.entity_id else None,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_code": self.error_code,
            "error_message": self.error_message,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.occurrences_materialized(group_id, 3, correlation_id)
    """

    @staticmethod
    def occurrences_expanded(
        group_id: UUID,
        window: tuple[str, str],
        count: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.OCCURRENCES_EXPANDED,
            severity=AuditSeverity.DEBUG,
            entity_type="recurrence_group",
            entity_id=group_id,
            correlation_id=correlation_id,
            description=f"Expanded {count} occurrences between {window[0]} and {window[1]}",
            details={
                "window_start": window[0],
                "window_end": window[1],
                "count": count,
            },
        )

    @staticmethod
    def occurrences_materialized(
        group_id: UUID,
        saved: int,
        skipped_existing: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.OCCURRENCES_MATERIALIZED,
            entity_type="recurrence_group",
            entity_id=group_id,
            correlation_id=correlation_id,
            description=f"Materialized {saved} occurrences ({skipped_existing} already stored)",
            details={
                "saved": saved,
                "skipped_existing": skipped_existing,
            },
        )

    @staticmethod
    def occurrence_confirmed(
        entry_id: UUID,
        group_id: UUID,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.OCCURRENCE_CONFIRMED,
            entity_type="entry",
            entity_id=entry_id,
            correlation_id=correlation_id,
            description="Pending occurrence confirmed",
            details={"recurrence_group_id": str(group_id)},
        )

    @staticmethod
    def occurrence_skipped(
        entry_id: UUID,
        group_id: UUID,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.OCCURRENCE_SKIPPED,
            entity_type="entry",
            entity_id=entry_id,
            correlation_id=correlation_id,
            description="Occurrence skipped",
            details={"recurrence_group_id": str(group_id)},
        )

    @staticmethod
    def recurrence_group_deleted(
        group_id: UUID,
        deleted: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECURRENCE_GROUP_DELETED,
            entity_type="recurrence_group",
            entity_id=group_id,
            correlation_id=correlation_id,
            description=f"Deleted {deleted} pending future occurrences",
            details={"deleted": deleted},
        )

    @staticmethod
    def entry_saved(
        entry_id: UUID,
        amount: str,
        currency: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ENTRY_SAVED,
            entity_type="entry",
            entity_id=entry_id,
            correlation_id=correlation_id,
            description=f"Entry saved: {amount} {currency}",
            details={
                "amount": amount,
                "currency": currency,
            },
        )

    @staticmethod
    def entry_revised(
        entry_id: UUID,
        changed_fields: list[str],
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ENTRY_REVISED,
            entity_type="entry",
            entity_id=entry_id,
            correlation_id=correlation_id,
            description=f"Entry revised: {', '.join(changed_fields)}",
            details={"changed_fields": changed_fields},
        )

    @staticmethod
    def entry_deleted(
        entry_id: UUID,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ENTRY_DELETED,
            entity_type="entry",
            entity_id=entry_id,
            correlation_id=correlation_id,
            description="Entry deleted",
        )

    @staticmethod
    def entry_rejected(
        issues: list[dict],
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ENTRY_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type="entry",
            correlation_id=correlation_id,
            description=f"Entry rejected with {len(issues)} issues",
            details={"issues": issues},
        )

    @staticmethod
    def limit_exceeded(
        entry_id: UUID,
        period: str,
        total: str,
        limit: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LIMIT_EXCEEDED,
            severity=AuditSeverity.WARNING,
            entity_type="entry",
            entity_id=entry_id,
            correlation_id=correlation_id,
            description=f"{period.capitalize()} limit exceeded: {total} > {limit}",
            details={
                "period": period,
                "total": total,
                "limit": limit,
            },
        )

    @staticmethod
    def plan_updated(
        plan_id: UUID,
        change: str,
        details: Optional[dict] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PLAN_UPDATED,
            entity_type="plan",
            entity_id=plan_id,
            description=f"Plan updated: {change}",
            details=details or {},
        )

    @staticmethod
    def configuration_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CONFIGURATION_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"Configuration rejected: {error_type}",
            error_code=error_type,
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )
