"""
Tests for the Ledger Engine models

Test strategy:
1. Unit tests for individual components (models, engine functions)
2. Workflow tests against in-memory storage
3. No real I/O in tests
"""

import pytest
from datetime import date
from decimal import Decimal
from uuid import uuid4

from ledger_engine.errors import ConfigurationError, InvalidRecurrenceIntervalError
from ledger_engine.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
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
    DailyRecord,
    LimitUsage,
    SeriesPoint,
    SpendingTrends,
    TrendDirection,
)
from ledger_engine.models.taxonomy import (
    FALLBACK_CATEGORY,
    Category,
    CategoryId,
    SubCategory,
    Taxonomy,
    default_taxonomy,
)
from ledger_engine.models.validation import ValidationIssue, ValidationResult


class TestLedgerEntry:
    """Tests for the LedgerEntry model."""

    def test_entry_creation(self, make_entry):
        """Test LedgerEntry creation with defaults."""
        entry = make_entry("42.50", date(2024, 3, 1))
        assert entry.amount == Decimal("42.50")
        assert entry.currency == "TRY"
        assert entry.status == EntryStatus.CONFIRMED
        assert not entry.recurrence.is_recurring
        assert entry.recurrence_group_id is None

    def test_entry_rejects_negative_amount(self, make_entry):
        """Test that negative amounts are rejected."""
        with pytest.raises(ValueError):
            make_entry("-1", date(2024, 3, 1))

    def test_entry_allows_zero_amount(self, make_entry):
        """Amount >= 0 is the invariant; zero is allowed."""
        entry = make_entry("0", date(2024, 3, 1))
        assert entry.amount == Decimal("0")

    def test_entry_currency_upper_cased(self, make_entry):
        """Test that currency codes are normalized."""
        entry = make_entry("10", date(2024, 3, 1), currency="usd")
        assert entry.currency == "USD"

    def test_entry_is_frozen(self, make_entry):
        """Test that entries cannot be mutated in place."""
        entry = make_entry("10", date(2024, 3, 1))
        with pytest.raises(ValueError):
            entry.amount = Decimal("20")

    def test_create_stamps_limits(self, make_entry):
        """Test that the creation-time limits are kept on the entry."""
        limits = LimitSnapshot(daily=Decimal("100"), monthly=Decimal("2000"))
        entry = make_entry("10", date(2024, 3, 1), limits=limits)
        assert entry.limits == limits
        assert entry.limits.for_period(LimitPeriod.MONTHLY) == Decimal("2000")
        assert entry.limits.for_period(LimitPeriod.YEARLY) == Decimal("0")

    def test_create_assigns_group_to_recurring_template(self, make_entry):
        """Test that a recurring template gets a recurrence group."""
        entry = make_entry("10", date(2024, 3, 1), kind=RecurrenceKind.MONTHLY)
        assert entry.recurrence_group_id is not None
        assert entry.is_template
        assert not entry.is_occurrence
        assert entry.group_key == entry.recurrence_group_id

    def test_revised_keeps_id_and_limits(self, make_entry):
        """Test that a revision is a new version with the same id."""
        limits = LimitSnapshot(daily=Decimal("50"))
        entry = make_entry("10", date(2024, 3, 1), limits=limits)
        revised = entry.revised(amount=Decimal("15"), description="lunch")

        assert revised.id == entry.id
        assert revised.amount == Decimal("15")
        assert revised.limits == limits
        assert revised.created_at == entry.created_at
        assert revised.updated_at >= entry.updated_at
        assert entry.amount == Decimal("10")

    def test_revised_refuses_limit_changes(self, make_entry):
        """Test that the limit snapshot cannot be re-stamped."""
        entry = make_entry("10", date(2024, 3, 1))
        with pytest.raises(ValueError, match="limits"):
            entry.revised(limits=LimitSnapshot(daily=Decimal("1")))

    def test_amount_in_default_currency(self, make_entry):
        """Test conversion with a recorded exchange rate."""
        entry = make_entry(
            "10", date(2024, 3, 1), currency="USD", exchange_rate=Decimal("32.5")
        )
        assert entry.amount_in("TRY") == Decimal("325.0")
        assert entry.amount_in("USD") == Decimal("10")

    def test_amount_without_rate_is_unconverted(self, make_entry):
        entry = make_entry("10", date(2024, 3, 1), currency="EUR")
        assert entry.amount_in("TRY") == Decimal("10")

    def test_cancelled_entry_does_not_count(self, make_entry):
        entry = make_entry("10", date(2024, 3, 1)).with_status(EntryStatus.CANCELLED)
        assert not entry.counts_towards_totals


class TestRecurrenceRule:
    """Tests for recurrence rule normalization."""

    def test_none_drops_interval_and_end_date(self):
        """Test that NONE rules ignore interval and end date."""
        rule = RecurrenceRule(
            kind=RecurrenceKind.NONE, interval=5, end_date=date(2024, 12, 31)
        )
        assert rule.interval == 1
        assert rule.end_date is None
        assert not rule.is_recurring

    def test_interval_only_used_by_custom(self):
        rule = RecurrenceRule(kind=RecurrenceKind.WEEKLY, interval=3)
        assert rule.interval == 1

    def test_custom_interval_kept(self):
        rule = RecurrenceRule(kind=RecurrenceKind.CUSTOM, interval=10)
        assert rule.interval == 10

    @pytest.mark.parametrize("interval", [0, -3])
    def test_custom_interval_below_one_rejected(self, interval):
        """Test that a bad custom interval is a configuration error."""
        with pytest.raises(InvalidRecurrenceIntervalError, match="at least 1 day") as exc_info:
            RecurrenceRule(kind=RecurrenceKind.CUSTOM, interval=interval)
        assert isinstance(exc_info.value, ConfigurationError)
        assert exc_info.value.interval == interval

    def test_custom_interval_from_raw_string_kind(self):
        with pytest.raises(ConfigurationError):
            RecurrenceRule(kind="custom", interval=0)

    def test_interval_error_message(self):
        error = InvalidRecurrenceIntervalError(0)
        assert error.interval == 0
        assert isinstance(error, ValueError)


class TestEntryDraft:
    """Tests for building entries from drafts."""

    def test_draft_to_entry(self):
        draft = EntryDraft(
            amount=Decimal("99.90"),
            category_id=CategoryId.HOUSING,
            subcategory_id="rent",
            description="  Rent  ",
            transaction_date=date(2024, 3, 1),
            recurrence_kind=RecurrenceKind.MONTHLY,
        )
        limits = LimitSnapshot(monthly=Decimal("5000"))
        entry = draft.to_entry(limits, default_currency="TRY")

        assert entry.currency == "TRY"
        assert entry.description == "Rent"
        assert entry.limits == limits
        assert entry.is_template

    def test_incomplete_draft_cannot_build(self):
        draft = EntryDraft(description="no amount")
        with pytest.raises(ValueError):
            draft.to_entry(LimitSnapshot(), default_currency="TRY")

    def test_missing_category_resolved_from_subcategory(self):
        draft = EntryDraft(
            amount=Decimal("1200"),
            subcategory_id="rent",
            description="Rent",
            transaction_date=date(2024, 3, 1),
        )
        entry = draft.to_entry(LimitSnapshot(), default_currency="TRY")
        assert entry.category_id == CategoryId.HOUSING

    def test_unknown_subcategory_uses_fallback_category(self):
        draft = EntryDraft(
            amount=Decimal("5"),
            subcategory_id="spaceship",
            description="Mystery",
            transaction_date=date(2024, 3, 1),
        )
        entry = draft.to_entry(LimitSnapshot(), default_currency="TRY")
        assert entry.category_id == FALLBACK_CATEGORY

    def test_explicit_category_wins_over_subcategory(self):
        draft = EntryDraft(
            amount=Decimal("5"),
            category_id=CategoryId.PETS,
            subcategory_id="rent",
            description="Kennel",
            transaction_date=date(2024, 3, 1),
        )
        assert draft.to_entry(LimitSnapshot(), default_currency="TRY").category_id == CategoryId.PETS


class TestTaxonomy:
    """Tests for categories and subcategory resolution."""

    def test_all_default_categories_exist(self):
        """Test that all expected categories exist."""
        taxonomy = default_taxonomy()
        ids = {c.id for c in taxonomy.categories}
        assert ids == set(CategoryId)

    def test_resolve_by_id_and_name(self):
        taxonomy = default_taxonomy()
        assert taxonomy.resolve_category("rent") == CategoryId.HOUSING
        assert taxonomy.resolve_category("Public transport") == CategoryId.TRANSPORTATION

    def test_unknown_subcategory_falls_back(self):
        """Test that lookup misses resolve to the fallback category."""
        taxonomy = default_taxonomy()
        assert taxonomy.resolve_category("spaceship") == FALLBACK_CATEGORY
        assert taxonomy.resolve_category("") == FALLBACK_CATEGORY
        assert taxonomy.resolve_category(None) == FALLBACK_CATEGORY

    def test_subcategory_with_unknown_category_rejected(self):
        with pytest.raises(ValueError, match="unknown category"):
            Taxonomy(
                [Category(id=CategoryId.FOOD, name="Food")],
                [SubCategory(id="fuel", name="Fuel", category_id=CategoryId.TRANSPORTATION)],
            )

    def test_inactive_categories_filtered(self):
        taxonomy = Taxonomy(
            [
                Category(id=CategoryId.FOOD, name="Food", budget_allocation_percentage=30),
                Category(id=CategoryId.PETS, name="Pets", is_active=False),
            ],
            [],
        )
        assert [c.id for c in taxonomy.active_categories] == [CategoryId.FOOD]
        assert taxonomy.budget_allocations() == {CategoryId.FOOD: 30}


class TestSummaryRecords:
    """Tests for derived record helpers."""

    def test_daily_record_zero_limit(self):
        record = DailyRecord(
            day=date(2024, 3, 1),
            total_amount=Decimal("50"),
            progress_amount=Decimal("50"),
            entry_count=1,
            daily_limit=Decimal("0"),
        )
        assert record.progress_ratio == 0.0
        assert not record.is_over_limit

    def test_daily_record_over_limit(self):
        record = DailyRecord(
            day=date(2024, 3, 1),
            total_amount=Decimal("150"),
            progress_amount=Decimal("120"),
            entry_count=2,
            daily_limit=Decimal("100"),
        )
        assert record.progress_ratio == 1.0
        assert record.is_over_limit

    def test_limit_usage_capped(self):
        usage = LimitUsage(spent=Decimal("300"), limit=Decimal("200"))
        assert usage.usage_percentage == 100.0
        assert usage.is_exceeded

    def test_trend_direction(self):
        def trends(*totals):
            return SpendingTrends(
                monthly_totals=[
                    SeriesPoint(bucket_start=date(2024, i + 1, 1), total_amount=Decimal(t))
                    for i, t in enumerate(totals)
                ],
                currency="TRY",
            )

        assert trends("100", "120").trend == TrendDirection.INCREASING
        assert trends("100", "80").trend == TrendDirection.DECREASING
        assert trends("100", "105").trend == TrendDirection.STABLE
        assert trends("100").trend == TrendDirection.STABLE


class TestAuditModels:
    """Tests for audit models."""

    def test_audit_event_creation(self):
        """Test AuditEvent creation."""
        event = AuditEvent(
            event_type=AuditEventType.ENTRY_SAVED,
            description="Entry saved",
        )
        assert event.event_type == AuditEventType.ENTRY_SAVED
        assert event.severity == AuditSeverity.INFO
        assert event.event_id is not None

    def test_audit_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        entity_id = uuid4()
        event = AuditEvent(
            event_type=AuditEventType.ENTRY_SAVED,
            entity_type="entry",
            entity_id=entity_id,
            description="Entry saved",
        )
        log_dict = event.to_log_dict()
        assert log_dict["event_type"] == "entry_saved"
        assert log_dict["entity_id"] == str(entity_id)

    def test_builder_limit_exceeded(self):
        """Test the limit exceeded builder."""
        entry_id = uuid4()
        event = AuditEventBuilder.limit_exceeded(
            entry_id=entry_id,
            period="monthly",
            total="2100",
            limit="2000",
        )
        assert event.event_type == AuditEventType.LIMIT_EXCEEDED
        assert event.severity == AuditSeverity.WARNING
        assert event.details["period"] == "monthly"
        assert "Monthly limit exceeded" in event.description

    def test_builder_occurrences_materialized(self):
        group_id = uuid4()
        correlation_id = uuid4()
        event = AuditEventBuilder.occurrences_materialized(
            group_id, saved=3, skipped_existing=1, correlation_id=correlation_id
        )
        assert event.entity_id == group_id
        assert event.correlation_id == correlation_id
        assert event.details == {"saved": 3, "skipped_existing": 1}


class TestValidationResult:
    """Tests for validation result model."""

    def test_validation_result_has_errors(self):
        """Test has_errors property."""
        result = ValidationResult(
            schema_valid=False,
            semantic_valid=False,
            is_valid=False,
            issues=[
                ValidationIssue(
                    field="amount",
                    issue_type="missing",
                    message="Amount is required",
                    severity="error",
                ),
            ],
        )
        assert result.has_errors
        assert result.error_count == 1
        assert len(result.issues_for("amount")) == 1

    def test_validation_result_warnings_only(self):
        """Test result with only warnings."""
        result = ValidationResult(
            schema_valid=True,
            semantic_valid=True,
            is_valid=True,
            issues=[
                ValidationIssue(
                    field="amount",
                    issue_type="suspicious_value",
                    message="Amount seems high",
                    severity="warning",
                ),
            ],
            warnings=["Amount seems high"],
        )
        assert not result.has_errors
        assert result.error_count == 0

    def test_issue_severity_pattern(self):
        with pytest.raises(ValueError):
            ValidationIssue(field="x", issue_type="y", message="z", severity="fatal")
