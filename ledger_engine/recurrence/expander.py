"""
Recurrence Expansion Engine

Turns a recurring template into the concrete occurrences that fall inside a
date window.

DESIGN DECISION: Monthly occurrences are always computed from the ANCHOR
(template date + k months), never from the previous occurrence. A template
anchored on Jan 31 yields Feb 28/29, Mar 31, Apr 30, ... instead of drifting
to the 28th forever.

DESIGN DECISION: ``expand`` returns a restartable sequence. Iterating it
twice produces the same dates; nothing is generated until it is iterated.
"""

from datetime import date, timedelta
from typing import Callable, Iterator, Optional
from uuid import UUID, NAMESPACE_URL, uuid4, uuid5

from dateutil.relativedelta import relativedelta

from ledger_engine.errors import (
    InvalidRecurrenceIntervalError,
    NonRecurringTemplateError,
)
from ledger_engine.models.entry import (
    EntryStatus,
    LedgerEntry,
    RecurrenceKind,
    RecurrenceRule,
)


IdFactory = Callable[[date, UUID], UUID]

# Fixed day steps per kind. MONTHLY and WEEKDAYS are handled separately.
_DAY_STEPS = {
    RecurrenceKind.DAILY: 1,
    RecurrenceKind.WEEKLY: 7,
}


def deterministic_occurrence_id(occurrence_date: date, group_id: UUID) -> UUID:
    """
    Stable id for the occurrence of a group on a given date.

    Expanding the same window twice with this factory yields identical ids,
    which makes repeated materialization idempotent at the storage level.
    """
    return uuid5(NAMESPACE_URL, f"ledger-occurrence:{group_id}:{occurrence_date.isoformat()}")


def _step_days(rule: RecurrenceRule) -> int:
    if rule.kind == RecurrenceKind.CUSTOM:
        if rule.interval < 1:
            raise InvalidRecurrenceIntervalError(rule.interval)
        return rule.interval
    return _DAY_STEPS[rule.kind]


def _clip(
    rule: RecurrenceRule,
    anchor: date,
    start: date,
    end: date,
) -> tuple[date, date]:
    lower = max(anchor, start)
    upper = end if rule.end_date is None else min(rule.end_date, end)
    return lower, upper


def _fixed_step_dates(step: int, anchor: date, lower: date, upper: date) -> Iterator[date]:
    # Jump straight to the first anchor-aligned date inside the window
    offset = (lower - anchor).days
    k = -(-offset // step)
    current = anchor + timedelta(days=k * step)
    while current <= upper:
        yield current
        current += timedelta(days=step)


def _monthly_dates(anchor: date, lower: date, upper: date) -> Iterator[date]:
    k = max(0, (lower.year - anchor.year) * 12 + lower.month - anchor.month - 1)
    while True:
        current = anchor + relativedelta(months=k)
        if current > upper:
            return
        if current >= lower:
            yield current
        k += 1


def _weekday_dates(lower: date, upper: date) -> Iterator[date]:
    current = lower
    while current <= upper:
        if current.weekday() < 5:
            yield current
        current += timedelta(days=1)


def occurrence_dates(
    rule: RecurrenceRule,
    anchor: date,
    start: date,
    end: date,
) -> Iterator[date]:
    """
    Dates on which ``rule`` anchored at ``anchor`` fires within [start, end].

    The window is clipped to [max(anchor, start), min(rule.end_date, end)].
    Dates are produced in ascending order, each at most once.

    Raises:
        NonRecurringTemplateError: If the rule kind is NONE
        InvalidRecurrenceIntervalError: If a custom interval is below 1
    """
    if not rule.is_recurring:
        raise NonRecurringTemplateError("Cannot expand a non-recurring rule")

    lower, upper = _clip(rule, anchor, start, end)

    if rule.kind == RecurrenceKind.MONTHLY:
        dates = _monthly_dates(anchor, lower, upper)
    elif rule.kind == RecurrenceKind.WEEKDAYS:
        dates = _weekday_dates(lower, upper)
    else:
        # Validate before the window check so a bad interval always raises
        step = _step_days(rule)
        dates = _fixed_step_dates(step, anchor, lower, upper)

    if lower > upper:
        return iter(())
    return dates


def _build_occurrence(
    template: LedgerEntry,
    occurrence_date: date,
    group_id: UUID,
    id_factory: Optional[IdFactory],
) -> LedgerEntry:
    occurrence_id = id_factory(occurrence_date, group_id) if id_factory else uuid4()
    return LedgerEntry(
        id=occurrence_id,
        amount=template.amount,
        currency=template.currency,
        exchange_rate=template.exchange_rate,
        category_id=template.category_id,
        subcategory_id=template.subcategory_id,
        description=template.description,
        tags=template.tags,
        transaction_date=occurrence_date,
        limits=template.limits,
        recurrence=template.recurrence,
        recurrence_group_id=group_id,
        parent_entry_id=template.id,
        status=EntryStatus.PENDING,
    )


class OccurrenceSequence:
    """
    Lazy, finite, restartable sequence of occurrences of one template.

    Each iteration re-runs the expansion. With the default id factory every
    pass produces fresh ids; pass ``deterministic_occurrence_id`` for stable
    ones.
    """

    def __init__(
        self,
        template: LedgerEntry,
        window_start: date,
        window_end: date,
        id_factory: Optional[IdFactory] = None,
    ):
        if not template.recurrence.is_recurring:
            raise NonRecurringTemplateError(
                f"Entry {template.id} has no recurrence rule"
            )
        # Surface a bad custom interval at call time, not on first iteration
        if template.recurrence.kind == RecurrenceKind.CUSTOM:
            _step_days(template.recurrence)

        self.template = template
        self.window_start = window_start
        self.window_end = window_end
        self.group_id = template.group_key
        self._id_factory = id_factory

    def dates(self) -> Iterator[date]:
        return occurrence_dates(
            self.template.recurrence,
            self.template.transaction_date,
            self.window_start,
            self.window_end,
        )

    def __iter__(self) -> Iterator[LedgerEntry]:
        seen: set[date] = set()
        for occurrence_date in self.dates():
            if occurrence_date in seen:
                continue
            seen.add(occurrence_date)
            yield _build_occurrence(
                self.template, occurrence_date, self.group_id, self._id_factory
            )

    def __len__(self) -> int:
        return sum(1 for _ in self.dates())

    def __repr__(self) -> str:
        return (
            f"OccurrenceSequence(group={self.group_id}, "
            f"window={self.window_start}..{self.window_end})"
        )


def expand(
    template: LedgerEntry,
    window_start: date,
    window_end: date,
    id_factory: Optional[IdFactory] = None,
) -> OccurrenceSequence:
    """
    Expand a recurring template into occurrences within a window.

    Args:
        template: Entry carrying a non-NONE recurrence rule
        window_start: First date of interest (inclusive)
        window_end: Last date of interest (inclusive)
        id_factory: Optional ``(date, group_id) -> UUID``; random ids if None

    Returns:
        OccurrenceSequence that can be iterated any number of times

    Raises:
        NonRecurringTemplateError: If the template does not recur
        InvalidRecurrenceIntervalError: If a custom interval is below 1
    """
    return OccurrenceSequence(template, window_start, window_end, id_factory)
