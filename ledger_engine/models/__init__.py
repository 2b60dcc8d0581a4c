"""
Data Models Package

This package contains all Pydantic models used by the ledger engine.
All records flowing into and out of the engine conform to these schemas.
"""

from ledger_engine.models.taxonomy import (
    FALLBACK_CATEGORY,
    Category,
    CategoryId,
    SubCategory,
    Taxonomy,
    default_taxonomy,
)
from ledger_engine.models.entry import (
    EntryDraft,
    EntryStatus,
    LedgerEntry,
    LimitPeriod,
    LimitSnapshot,
    RecurrenceKind,
    RecurrenceRule,
)
from ledger_engine.models.summary import (
    CategoryShare,
    DailyRecord,
    LimitUsage,
    PeriodSummary,
    SeriesPoint,
    SpendingSummary,
    SpendingTrends,
    TrendDirection,
)
from ledger_engine.models.plan import (
    CategoryVariance,
    DebtPayoff,
    EmergencyFundStatus,
    FinancialPlan,
    InterestType,
    PlanMonthlyBreakdown,
)
from ledger_engine.models.validation import ValidationIssue, ValidationResult
from ledger_engine.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Taxonomy
    "FALLBACK_CATEGORY",
    "Category",
    "CategoryId",
    "SubCategory",
    "Taxonomy",
    "default_taxonomy",
    # Entries
    "EntryDraft",
    "EntryStatus",
    "LedgerEntry",
    "LimitPeriod",
    "LimitSnapshot",
    "RecurrenceKind",
    "RecurrenceRule",
    # Derived summaries
    "CategoryShare",
    "DailyRecord",
    "LimitUsage",
    "PeriodSummary",
    "SeriesPoint",
    "SpendingSummary",
    "SpendingTrends",
    "TrendDirection",
    # Planning
    "CategoryVariance",
    "DebtPayoff",
    "EmergencyFundStatus",
    "FinancialPlan",
    "InterestType",
    "PlanMonthlyBreakdown",
    # Validation
    "ValidationIssue",
    "ValidationResult",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
