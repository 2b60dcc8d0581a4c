"""
Two-Stage Validation Pipeline

DESIGN DECISION: Validation happens in two distinct stages:

STAGE 1 - SCHEMA VALIDATION:
- Required field presence (amount, description, subcategory; category unless
  it resolves from the subcategory)
- Amount must be positive
- This catches incomplete forms

STAGE 2 - SEMANTIC VALIDATION:
- Recurrence consistency (end date after start, custom interval >= 1)
- Future date detection for one-off entries
- Absurd amount detection
- Currency conversion sanity
- Duplicate detection (optional, needs storage)
- This catches logically impossible or suspicious data

Stage 2 only runs if stage 1 passes.

IMPORTANT: Validation NEVER silently fixes issues.
It reports them so the caller can decide.
"""

from datetime import date, timedelta
from decimal import Decimal
from typing import Optional

from ledger_engine.config import get_settings
from ledger_engine.models.entry import EntryDraft, RecurrenceKind
from ledger_engine.models.validation import ValidationIssue, ValidationResult
from ledger_engine.storage.interface import LedgerStorageInterface, StorageError


# Accepted inflation assumption for plans, in percent
MIN_INFLATION_RATE = -50.0
MAX_INFLATION_RATE = 100.0


def _is_valid(issues: list[ValidationIssue]) -> bool:
    return not any(issue.severity == "error" for issue in issues)


class EntryValidator:
    """
    Validates entry drafts through a two-stage pipeline.

    Stage 1: Schema validation (can run without storage)
    Stage 2: Semantic validation (may need storage for duplicate checks)
    """

    def __init__(
        self,
        storage: Optional[LedgerStorageInterface] = None,
    ):
        """
        Args:
            storage: Storage interface for duplicate checking.
                     If None, duplicate checking is skipped.
        """
        self._storage = storage
        settings = get_settings()
        self._app = settings.app
        self._ledger = settings.ledger

    def _validate_schema(self, draft: EntryDraft) -> tuple[bool, list[ValidationIssue]]:
        issues = []

        if draft.amount is None:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="missing",
                message="Amount is required",
                severity="error",
            ))
        elif draft.amount <= 0:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_value",
                message="Amount must be greater than zero",
                severity="error",
                suggested_fix="Enter a positive amount",
            ))

        if not draft.description:
            issues.append(ValidationIssue(
                field="description",
                issue_type="missing",
                message="Description is required",
                severity="error",
            ))

        if draft.category_id is None and not draft.subcategory_id:
            issues.append(ValidationIssue(
                field="category_id",
                issue_type="missing",
                message="Category is required",
                severity="error",
            ))

        if not draft.subcategory_id:
            issues.append(ValidationIssue(
                field="subcategory_id",
                issue_type="missing",
                message="Subcategory is required",
                severity="error",
            ))

        if draft.transaction_date is None:
            issues.append(ValidationIssue(
                field="transaction_date",
                issue_type="missing",
                message="Date is required",
                severity="error",
            ))

        return _is_valid(issues), issues

    def _validate_semantic(
        self,
        draft: EntryDraft,
        today: date,
    ) -> tuple[bool, list[ValidationIssue]]:
        issues = []

        if draft.recurrence_kind != RecurrenceKind.NONE:
            if (
                draft.recurrence_end_date is not None
                and draft.recurrence_end_date <= draft.transaction_date
            ):
                issues.append(ValidationIssue(
                    field="recurrence_end_date",
                    issue_type="inconsistent",
                    message="Recurrence end date must be after the entry date",
                    severity="error",
                    suggested_fix="Pick a later end date or remove it",
                ))

            if (
                draft.recurrence_kind == RecurrenceKind.CUSTOM
                and draft.recurrence_interval < 1
            ):
                issues.append(ValidationIssue(
                    field="recurrence_interval",
                    issue_type="invalid_value",
                    message=(
                        f"Custom recurrence interval must be at least 1 day "
                        f"(got {draft.recurrence_interval})"
                    ),
                    severity="error",
                ))
        else:
            # Recurring templates are dated in the future on purpose
            max_future_date = today + timedelta(days=self._app.future_date_tolerance_days)
            if draft.transaction_date > max_future_date:
                issues.append(ValidationIssue(
                    field="transaction_date",
                    issue_type="future_date",
                    message=f"Entry date ({draft.transaction_date}) is in the future",
                    severity="warning",
                    suggested_fix="Please verify the date is correct",
                ))

        max_amount = Decimal(str(self._app.max_entry_amount))
        if draft.amount > max_amount:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="suspicious_value",
                message=f"Amount ({draft.amount:,.2f}) seems unusually high",
                severity="warning",
                suggested_fix="Please verify this amount is correct",
            ))

        currency = (draft.currency or self._ledger.default_currency).upper()
        if len(currency) != 3 or not currency.isalpha():
            issues.append(ValidationIssue(
                field="currency",
                issue_type="invalid_format",
                message=f"Currency code '{currency}' is not a 3-letter code",
                severity="error",
            ))
        elif currency != self._ledger.default_currency and draft.exchange_rate is None:
            issues.append(ValidationIssue(
                field="exchange_rate",
                issue_type="missing",
                message=(
                    f"No exchange rate to {self._ledger.default_currency}; "
                    f"the amount will be counted unconverted"
                ),
                severity="warning",
            ))

        if draft.exchange_rate is not None and draft.exchange_rate <= 0:
            issues.append(ValidationIssue(
                field="exchange_rate",
                issue_type="invalid_value",
                message="Exchange rate must be greater than zero",
                severity="error",
            ))

        return _is_valid(issues), issues

    def _check_duplicates(self, draft: EntryDraft) -> list[ValidationIssue]:
        """Flag an entry with the same date, amount and description."""
        if self._storage is None:
            return []

        try:
            same_day = self._storage.list_entries(
                date_from=draft.transaction_date,
                date_to=draft.transaction_date,
            )
        except StorageError as e:
            return [ValidationIssue(
                field="duplicate",
                issue_type="check_skipped",
                message=f"Duplicate check could not run: {e}",
                severity="info",
            )]

        for existing in same_day:
            if (
                existing.amount == draft.amount
                and existing.description.lower() == draft.description.lower()
            ):
                return [ValidationIssue(
                    field="duplicate",
                    issue_type="potential_duplicate",
                    message=(
                        f"An entry '{existing.description}' of {existing.amount} "
                        f"on {draft.transaction_date} already exists"
                    ),
                    severity="warning",
                    suggested_fix="Please verify this isn't a duplicate entry",
                )]
        return []

    def validate(
        self,
        draft: EntryDraft,
        today: Optional[date] = None,
        check_duplicates: bool = True,
    ) -> ValidationResult:
        """
        Run the full two-stage validation pipeline.

        Args:
            draft: The entry input to validate
            today: Reference date for the future-date check
            check_duplicates: Whether to check for duplicates (requires storage)
        """
        today = today or date.today()
        all_issues = []

        schema_valid, schema_issues = self._validate_schema(draft)
        all_issues.extend(schema_issues)

        semantic_valid = False
        if schema_valid:
            semantic_valid, semantic_issues = self._validate_semantic(draft, today)
            all_issues.extend(semantic_issues)

            if check_duplicates:
                all_issues.extend(self._check_duplicates(draft))

        return ValidationResult(
            schema_valid=schema_valid,
            semantic_valid=semantic_valid,
            is_valid=schema_valid and semantic_valid,
            issues=all_issues,
            warnings=[i.message for i in all_issues if i.severity == "warning"],
        )


def validate_plan_input(
    name: str,
    monthly_income: float,
    duration_months: int,
    inflation_rate: float = 0.0,
) -> ValidationResult:
    """
    Validate the inputs for creating a financial plan.

    Inflation is a percentage; duration is capped by the planning settings.
    """
    max_months = get_settings().planning.max_duration_months
    issues = []

    if not name.strip():
        issues.append(ValidationIssue(
            field="name",
            issue_type="missing",
            message="Plan name is required",
            severity="error",
        ))

    if monthly_income <= 0:
        issues.append(ValidationIssue(
            field="monthly_income",
            issue_type="invalid_value",
            message="Monthly income must be greater than zero",
            severity="error",
        ))

    if duration_months < 1 or duration_months > max_months:
        issues.append(ValidationIssue(
            field="duration_months",
            issue_type="out_of_range",
            message=f"Duration must be between 1 and {max_months} months",
            severity="error",
        ))

    if not MIN_INFLATION_RATE <= inflation_rate <= MAX_INFLATION_RATE:
        issues.append(ValidationIssue(
            field="inflation_rate",
            issue_type="out_of_range",
            message=(
                f"Inflation rate must be between {MIN_INFLATION_RATE:g}% "
                f"and {MAX_INFLATION_RATE:g}%"
            ),
            severity="error",
        ))

    is_valid = _is_valid(issues)
    return ValidationResult(
        schema_valid=is_valid,
        semantic_valid=is_valid,
        is_valid=is_valid,
        issues=issues,
    )
