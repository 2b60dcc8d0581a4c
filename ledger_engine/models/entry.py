"""
Ledger Entry Model

The canonical transaction record and its recurrence descriptor.

DESIGN DECISION: Entries are immutable (frozen pydantic models).
An edit produces a NEW version with the same id via ``revised()``.
Nothing in the engine mutates an entry in place.

DESIGN DECISION: The limits in force when an entry was created live in an
explicit ``LimitSnapshot`` sub-structure. ``revised()`` refuses to touch it,
so the historical-accuracy guarantee is visible in the type itself.
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, Optional
from uuid import UUID, uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)

from ledger_engine.errors import InvalidRecurrenceIntervalError
from ledger_engine.models.taxonomy import CategoryId, Taxonomy, default_taxonomy


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# =============================================================================
# ENUMS
# =============================================================================

class RecurrenceKind(str, Enum):
    """How often a recurring template materializes."""
    NONE = "none"          # One-off entry
    DAILY = "daily"        # Every calendar day
    WEEKLY = "weekly"      # Every 7 days from the anchor
    MONTHLY = "monthly"    # Same day-of-month, clamped to month end
    WEEKDAYS = "weekdays"  # Monday to Friday
    CUSTOM = "custom"      # Every N days


class EntryStatus(str, Enum):
    """
    Entry status.

    Generated occurrences start as PENDING until the user confirms them.
    CANCELLED (skipped) entries never count towards totals.
    """
    CONFIRMED = "confirmed"
    PENDING = "pending"
    CANCELLED = "cancelled"


class LimitPeriod(str, Enum):
    """Which limit of a snapshot applies."""
    DAILY = "daily"
    MONTHLY = "monthly"
    YEARLY = "yearly"


# =============================================================================
# VALUE OBJECTS
# =============================================================================

class LimitSnapshot(BaseModel):
    """Daily/monthly/yearly limits frozen onto an entry at creation time."""
    model_config = ConfigDict(frozen=True)

    daily: Decimal = Field(default=Decimal("0"), ge=0)
    monthly: Decimal = Field(default=Decimal("0"), ge=0)
    yearly: Decimal = Field(default=Decimal("0"), ge=0)

    def for_period(self, period: LimitPeriod) -> Decimal:
        if period == LimitPeriod.DAILY:
            return self.daily
        if period == LimitPeriod.MONTHLY:
            return self.monthly
        return self.yearly


class RecurrenceRule(BaseModel):
    """
    Kind + interval + optional inclusive end date.

    ``interval`` is only meaningful for CUSTOM rules; for every other kind it
    is normalised to 1. For NONE the end date is dropped as well.
    """
    model_config = ConfigDict(frozen=True)

    kind: RecurrenceKind = RecurrenceKind.NONE
    interval: int = 1
    end_date: Optional[date] = None

    def __init__(self, **data: Any):
        # Checked ahead of validation so the typed error is not wrapped
        # into a pydantic ValidationError
        interval = data.get("interval", 1)
        if (
            data.get("kind") == RecurrenceKind.CUSTOM
            and isinstance(interval, int)
            and interval < 1
        ):
            raise InvalidRecurrenceIntervalError(interval)
        super().__init__(**data)

    @model_validator(mode='before')
    @classmethod
    def normalize(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        kind = RecurrenceKind(data.get("kind", RecurrenceKind.NONE))

        if kind == RecurrenceKind.NONE:
            data["interval"] = 1
            data["end_date"] = None
        elif kind == RecurrenceKind.CUSTOM:
            interval = int(data.get("interval", 1))
            if interval < 1:
                raise InvalidRecurrenceIntervalError(interval)
        else:
            data["interval"] = 1

        return data

    @property
    def is_recurring(self) -> bool:
        return self.kind != RecurrenceKind.NONE


# =============================================================================
# CORE ENTRY MODEL
# =============================================================================

# Fields a revision may never change
_FROZEN_ON_REVISION = frozenset({"id", "limits", "created_at"})


class LedgerEntry(BaseModel):
    """
    A single monetary transaction.

    A recurring TEMPLATE has a non-none rule and no parent. Each OCCURRENCE
    generated from it points back through ``parent_entry_id`` and shares the
    template's ``recurrence_group_id``.
    """
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    # Identity
    id: UUID = Field(
        default_factory=uuid4,
        description="Unique entry ID (kept across revisions)"
    )

    # Money
    amount: Annotated[
        Decimal,
        Field(ge=0, decimal_places=2, description="Amount in the entry currency")
    ]
    currency: str = Field(
        ...,
        min_length=3,
        max_length=3,
        description="ISO currency code"
    )
    exchange_rate: Optional[Decimal] = Field(
        default=None,
        gt=0,
        description="Rate to the default currency, if recorded in another one"
    )

    # Classification
    category_id: CategoryId
    subcategory_id: str = Field(default="", max_length=100)
    description: str = Field(default="", max_length=500)
    tags: tuple[str, ...] = Field(default_factory=tuple)
    notes: Optional[str] = Field(default=None, max_length=1000)

    # When
    transaction_date: date
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    # Historical limits (never recomputed)
    limits: LimitSnapshot = Field(default_factory=LimitSnapshot)

    # Recurrence
    recurrence: RecurrenceRule = Field(default_factory=RecurrenceRule)
    recurrence_group_id: Optional[UUID] = None
    parent_entry_id: Optional[UUID] = None

    status: EntryStatus = EntryStatus.CONFIRMED

    @field_validator('currency')
    @classmethod
    def normalize_currency(cls, v: str) -> str:
        return v.upper()

    @classmethod
    def create(
        cls,
        *,
        amount: Decimal,
        currency: str,
        category_id: CategoryId,
        transaction_date: date,
        current_limits: LimitSnapshot,
        recurrence: Optional[RecurrenceRule] = None,
        **fields: Any,
    ) -> "LedgerEntry":
        """
        Create a NEW entry from a user action.

        The caller supplies the limits configured right now; they are frozen
        onto the entry. A recurring template gets a fresh group id.
        """
        recurrence = recurrence or RecurrenceRule()
        if recurrence.is_recurring and fields.get("recurrence_group_id") is None:
            fields["recurrence_group_id"] = uuid4()
        return cls(
            amount=amount,
            currency=currency,
            category_id=category_id,
            transaction_date=transaction_date,
            limits=current_limits,
            recurrence=recurrence,
            **fields,
        )

    # -------------------------------------------------------------------------
    # Derived views
    # -------------------------------------------------------------------------

    @property
    def is_template(self) -> bool:
        return self.recurrence.is_recurring and self.parent_entry_id is None

    @property
    def is_occurrence(self) -> bool:
        return self.parent_entry_id is not None

    @property
    def group_key(self) -> UUID:
        """Recurrence group this entry belongs to (its own id if none)."""
        return self.recurrence_group_id or self.id

    @property
    def counts_towards_totals(self) -> bool:
        return self.status != EntryStatus.CANCELLED

    def amount_in(self, default_currency: str) -> Decimal:
        """Amount converted to the default currency when a rate is known."""
        if self.currency == default_currency.upper() or self.exchange_rate is None:
            return self.amount
        return self.amount * self.exchange_rate

    # -------------------------------------------------------------------------
    # Versioning
    # -------------------------------------------------------------------------

    def revised(self, **changes: Any) -> "LedgerEntry":
        """
        Return a new version of this entry with the same id.

        Raises:
            ValueError: If a change touches the id, the creation timestamp
                        or the limit snapshot.
        """
        forbidden = _FROZEN_ON_REVISION.intersection(changes)
        if forbidden:
            raise ValueError(
                f"Cannot revise {', '.join(sorted(forbidden))} of an existing entry"
            )
        data = self.model_dump()
        data.update(changes)
        data["updated_at"] = utcnow()
        return type(self).model_validate(data)

    def with_status(self, status: EntryStatus) -> "LedgerEntry":
        return self.revised(status=status)


# =============================================================================
# DRAFT (unvalidated user input)
# =============================================================================

class EntryDraft(BaseModel):
    """
    Raw input for a new entry, before validation.

    Every field is optional or loosely typed so the validator can report
    what is wrong instead of failing on the first bad field.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    amount: Optional[Decimal] = None
    currency: Optional[str] = None
    exchange_rate: Optional[Decimal] = None
    category_id: Optional[CategoryId] = None
    subcategory_id: str = ""
    description: str = ""
    tags: list[str] = Field(default_factory=list)
    notes: Optional[str] = None
    transaction_date: Optional[date] = None

    recurrence_kind: RecurrenceKind = RecurrenceKind.NONE
    recurrence_interval: int = 1
    recurrence_end_date: Optional[date] = None

    def to_entry(
        self,
        current_limits: LimitSnapshot,
        default_currency: str,
        status: EntryStatus = EntryStatus.CONFIRMED,
        taxonomy: Optional[Taxonomy] = None,
    ) -> LedgerEntry:
        """
        Build the entry. Call only after the draft passed validation.

        A missing category is resolved from the subcategory through the
        taxonomy, falling back to FALLBACK_CATEGORY for unknown keys.

        Raises:
            ValueError: If a required field is still missing
        """
        category_id = self.category_id
        if category_id is None and self.subcategory_id:
            category_id = (taxonomy or default_taxonomy()).resolve_category(self.subcategory_id)

        if self.amount is None or category_id is None or self.transaction_date is None:
            raise ValueError("Draft is missing amount, category or date")

        return LedgerEntry.create(
            amount=self.amount,
            currency=self.currency or default_currency,
            category_id=category_id,
            transaction_date=self.transaction_date,
            current_limits=current_limits,
            recurrence=RecurrenceRule(
                kind=self.recurrence_kind,
                interval=self.recurrence_interval,
                end_date=self.recurrence_end_date,
            ),
            exchange_rate=self.exchange_rate,
            subcategory_id=self.subcategory_id,
            description=self.description,
            tags=tuple(self.tags),
            notes=self.notes,
            status=status,
        )
