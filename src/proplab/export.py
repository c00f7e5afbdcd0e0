"""
CSV export of ledger views.

The daily CSV layout (``Date, Income, Expenses, Net, Details``) is a stable
file format consumed outside this package; do not reorder its columns.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from datetime import date
from pathlib import Path
from typing import IO, Any

import pandas as pd

from proplab.core.ledger import DailyLedger, LedgerRows, RangeTooLarge
from proplab.core.money import Currency, format_amount
from proplab.core.records import Transaction
from proplab.core.sign import signed_amount

DAILY_COLUMNS = ["Date", "Income", "Expenses", "Net", "Details"]
LIST_COLUMNS = [
    "Date",
    "Property",
    "Type",
    "Category",
    "Description",
    "Amount",
    "Signed Amount",
    "Payee",
    "Auto Generated",
]

_UNSAFE = re.compile(r"[^A-Za-z0-9]+")


def _detail(t: Transaction, currency: Currency | str | None) -> str:
    text = t.description or t.category or t.type
    if t.is_auto_generated and t.original_amount is not None and t.original_frequency:
        return (
            f"{text} ({format_amount(t.original_amount, currency)} "
            f"{t.original_frequency} = {format_amount(t.amount, currency)} daily)"
        )
    return text


def daily_ledger_rows(
    ledger: DailyLedger, currency: Currency | str | None = None
) -> list[dict[str, str]]:
    """
    Daily ledger as CSV-ready rows.

    Amounts carry two decimals (half-up) and dates are ISO formatted. Details
    join the contributing rows with ``"; "``; projected rows also show their
    original amount and frequency.

    Raises:
        ValueError: If given a :class:`RangeTooLarge` signal instead of a ledger
    """
    if isinstance(ledger, RangeTooLarge):
        raise ValueError(ledger.message)
    return [
        {
            "Date": entry.date.isoformat(),
            "Income": format_amount(entry.income, currency),
            "Expenses": format_amount(entry.expenses, currency),
            "Net": format_amount(entry.net, currency),
            "Details": "; ".join(_detail(t, currency) for t in entry.transactions),
        }
        for entry in ledger.entries
    ]


def write_daily_csv(
    ledger: DailyLedger,
    path_or_buffer: str | Path | IO[str] | None = None,
    currency: Currency | str | None = None,
) -> str | None:
    """Write the daily CSV; returns the text when no target is given."""
    df = pd.DataFrame(daily_ledger_rows(ledger, currency), columns=DAILY_COLUMNS)
    return df.to_csv(path_or_buffer, index=False)


def list_rows(
    rows: LedgerRows,
    property_labels: Mapping[str, str] | None = None,
    currency: Currency | str | None = None,
) -> list[dict[str, Any]]:
    labels = property_labels or {}
    return [
        {
            "Date": t.date.isoformat() if t.date else "",
            "Property": labels.get(t.property_id, t.property_id or ""),
            "Type": t.type,
            "Category": t.category,
            "Description": t.description,
            "Amount": format_amount(t.amount, currency),
            "Signed Amount": format_amount(signed_amount(t), currency),
            "Payee": t.payee or "",
            "Auto Generated": "yes" if t.is_auto_generated else "no",
        }
        for t in rows
    ]


def write_list_csv(
    rows: LedgerRows,
    path_or_buffer: str | Path | IO[str] | None = None,
    property_labels: Mapping[str, str] | None = None,
    currency: Currency | str | None = None,
) -> str | None:
    """Write the flat list CSV; returns the text when no target is given."""
    df = pd.DataFrame(
        list_rows(rows, property_labels, currency), columns=LIST_COLUMNS
    )
    return df.to_csv(path_or_buffer, index=False)


def daily_export_filename(
    property_label: str | None, date_from: date, date_to: date
) -> str:
    """
    File name for a daily export.

    **Example:**
        ```python
        daily_export_filename("12 Oak St", date(2024, 7, 1), date(2024, 7, 31))
        # 'DailyLedger_12_Oak_St_2024-07-01_2024-07-31.csv'
        ```
    """
    label = _UNSAFE.sub("_", (property_label or "").strip()).strip("_") or "All"
    return f"DailyLedger_{label}_{date_from.isoformat()}_{date_to.isoformat()}.csv"


__all__ = [
    "DAILY_COLUMNS",
    "LIST_COLUMNS",
    "daily_export_filename",
    "daily_ledger_rows",
    "list_rows",
    "write_daily_csv",
    "write_list_csv",
]
