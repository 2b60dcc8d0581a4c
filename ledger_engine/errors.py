"""
Error Taxonomy for the Ledger Engine

DESIGN DECISION: Only precondition violations are errors.

- Configuration errors (bad recurrence interval, bad compounding frequency)
  are raised at the call that supplies them and are never coerced.
- Degenerate inputs (zero limit, zero total, empty entry set) are NOT errors.
  They resolve to documented neutral values inside the aggregator.
- Lookup misses (unknown subcategory) resolve to the fallback category.

The engine performs no I/O, so there is no retryable error class.
"""


class LedgerError(Exception):
    """Base exception for all ledger engine errors."""
    pass


class ConfigurationError(LedgerError, ValueError):
    """A rule or calculation was configured with an invalid parameter."""
    pass


class InvalidRecurrenceIntervalError(ConfigurationError):
    """Custom recurrence interval is zero or negative."""

    def __init__(self, interval: int):
        self.interval = interval
        super().__init__(
            f"Recurrence interval must be at least 1 day (got {interval})"
        )


class InvalidCompoundingFrequencyError(ConfigurationError):
    """Compounding frequency is zero or negative."""

    def __init__(self, frequency: int):
        self.frequency = frequency
        super().__init__(
            f"Compounding frequency must be at least 1 per year (got {frequency})"
        )


class NonRecurringTemplateError(ConfigurationError):
    """Tried to expand an entry that has no recurrence rule."""
    pass
