"""
Sign normalization for transaction-like records.

Stored amounts are not signed consistently across data sources: some rows
record expenses as negative numbers, some as positive numbers with an expense
type. Everything that turns a row into a figure (totals, coloured amounts,
chart buckets, daily buckets) must go through :func:`signed_amount` so the
figures cannot drift apart.

Precedence table (first match wins):

    ===  ============================  ==================
    #    declared ``type``             signed value
    ===  ============================  ==================
    1    ignore set (principal)        0
    2    income set                    +abs(amount)
    3    expense set                   -abs(amount)
    4    anything else                 sign of raw amount
    ===  ============================  ==================
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Mapping

from .kinds import K
from .money import to_number

INCOME_TYPES = K.income_kinds()
EXPENSE_TYPES = K.expense_kinds()
IGNORE_IN_PNL = K.ignore_kinds()


class TxnClass(Enum):
    """Profit/loss classification of a declared transaction type."""

    IGNORE = "ignore"
    INCOME = "income"
    EXPENSE = "expense"
    UNCLASSIFIED = "unclassified"


# Ordered: earlier rows take precedence over later ones
PRECEDENCE: tuple[tuple[TxnClass, frozenset[str]], ...] = (
    (TxnClass.IGNORE, IGNORE_IN_PNL),
    (TxnClass.INCOME, INCOME_TYPES),
    (TxnClass.EXPENSE, EXPENSE_TYPES),
)


def _field(record: Any, name: str):
    if isinstance(record, Mapping):
        return record.get(name)
    return getattr(record, name, None)


def classify(txn_type) -> TxnClass:
    """Map a free-form type string onto its profit/loss class."""
    key = str(txn_type or "").strip().lower()
    for cls, members in PRECEDENCE:
        if key in members:
            return cls
    return TxnClass.UNCLASSIFIED


def signed_amount(record: Any) -> float:
    """
    Canonical signed amount of a transaction-like record.

    ``record`` may be a :class:`~proplab.core.records.Transaction`, any object
    with ``type``/``amount`` attributes, or a mapping with those keys.

    **Example:**
        ```python
        signed_amount({"type": "expense", "amount": 150})    # -150.0
        signed_amount({"type": "expense", "amount": -150})   # -150.0
        signed_amount({"type": "principal", "amount": 900})  # 0.0
        signed_amount({"type": "refund", "amount": -20})     # -20.0
        ```
    """
    if record is None:
        return 0.0
    raw = to_number(_field(record, "amount"))
    magnitude = abs(raw)
    if magnitude == 0:
        return 0.0

    cls = classify(_field(record, "type"))
    if cls is TxnClass.IGNORE:
        return 0.0
    if cls is TxnClass.INCOME:
        return magnitude
    if cls is TxnClass.EXPENSE:
        return -magnitude
    return magnitude if raw > 0 else -magnitude


def split_signed(value: float) -> tuple[float, float]:
    """Split a signed amount into (income, expense) magnitudes."""
    if value > 0:
        return value, 0.0
    if value < 0:
        return 0.0, -value
    return 0.0, 0.0
