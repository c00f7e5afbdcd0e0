"""
Tests for the CSV exporters.
"""

import io
from datetime import date

import pandas as pd
import pytest
from proplab.core.ledger import Ledger, LedgerQuery
from proplab.core.records import Property, Rental, Transaction
from proplab.export import (
    DAILY_COLUMNS,
    LIST_COLUMNS,
    daily_export_filename,
    daily_ledger_rows,
    write_daily_csv,
    write_list_csv,
)


def _make_ledger() -> Ledger:
    return Ledger(
        properties=[Property(id="p1", address="1 High St")],
        rentals=[
            Rental(
                id="r1",
                property_id="p1",
                tenant_name="Sam",
                amount=700,
                frequency="weekly",
                start_date=date(2024, 1, 1),
            )
        ],
        transactions=[
            Transaction(
                id="t1",
                property_id="p1",
                type="expense",
                category="Repairs",
                description="Plumber",
                amount=50,
                date=date(2024, 1, 2),
                payee="Pipes Ltd",
            )
        ],
    )


def _daily():
    return _make_ledger().daily(
        LedgerQuery(
            view="daily",
            direction="asc",
            date_from=date(2024, 1, 1),
            date_to=date(2024, 1, 2),
        )
    )


def test_daily_rows_format():
    rows = daily_ledger_rows(_daily())
    assert rows == [
        {
            "Date": "2024-01-01",
            "Income": "100.00",
            "Expenses": "0.00",
            "Net": "100.00",
            "Details": "Rent - Sam (700.00 weekly = 100.00 daily)",
        },
        {
            "Date": "2024-01-02",
            "Income": "100.00",
            "Expenses": "50.00",
            "Net": "50.00",
            "Details": "Plumber; Rent - Sam (700.00 weekly = 100.00 daily)",
        },
    ]


def test_write_daily_csv_text():
    text = write_daily_csv(_daily())
    lines = text.splitlines()
    assert lines[0] == ",".join(DAILY_COLUMNS)
    assert lines[1] == "2024-01-01,100.00,0.00,100.00,Rent - Sam (700.00 weekly = 100.00 daily)"
    assert len(lines) == 3


def test_write_daily_csv_file(tmp_path):
    path = tmp_path / "daily.csv"
    assert write_daily_csv(_daily(), path) is None
    df = pd.read_csv(path, dtype=str)
    assert list(df.columns) == DAILY_COLUMNS
    assert list(df["Net"]) == ["100.00", "50.00"]


def test_range_too_large_is_not_exported():
    result = _make_ledger().daily(
        LedgerQuery(view="daily", date_from=date(2024, 1, 1), date_to=date(2025, 6, 30))
    )
    with pytest.raises(ValueError, match="too large"):
        daily_ledger_rows(result)


def test_write_list_csv():
    rows = _make_ledger().list(
        LedgerQuery(direction="asc", date_from=date(2024, 1, 1), date_to=date(2024, 1, 2))
    )
    text = write_list_csv(rows, property_labels={"p1": "1 High St"})
    df = pd.read_csv(io.StringIO(text), dtype=str, keep_default_na=False)
    assert list(df.columns) == LIST_COLUMNS
    assert list(df["Signed Amount"]) == ["700.00", "-50.00"]
    assert list(df["Auto Generated"]) == ["yes", "no"]
    assert list(df["Property"]) == ["1 High St", "1 High St"]
    assert list(df["Payee"]) == ["Sam", "Pipes Ltd"]


def test_daily_export_filename():
    assert (
        daily_export_filename("12 Oak St", date(2024, 7, 1), date(2024, 7, 31))
        == "DailyLedger_12_Oak_St_2024-07-01_2024-07-31.csv"
    )
    assert (
        daily_export_filename(None, date(2024, 7, 1), date(2024, 7, 31))
        == "DailyLedger_All_2024-07-01_2024-07-31.csv"
    )
