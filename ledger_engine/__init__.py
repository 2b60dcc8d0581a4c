"""
Ledger Engine

Computation core of a personal finance ledger: recurring transactions,
historically snapshotted spending limits, period analytics, trend series
and savings plan projections.

DESIGN PRINCIPLES:
1. Entries are immutable; edits produce new versions
2. Past entries are judged by the limits in force when they were created
3. Degenerate inputs resolve to neutral values, never to errors or NaN
4. Configuration errors fail early and visibly
5. Storage is the caller's; the engine performs no I/O
"""

__version__ = "1.0.0"
__author__ = "Ledger Engine Team"
