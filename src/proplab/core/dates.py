"""
Date utility functions for PropLab.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import NamedTuple

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)


class DateWindow(NamedTuple):
    """Inclusive [start, end] date interval."""

    start: date
    end: date

    @property
    def is_empty(self) -> bool:
        return self.end < self.start

    @property
    def span_days(self) -> int:
        """Inclusive number of calendar days covered (0 when empty)."""
        return max((self.end - self.start).days + 1, 0)

    def contains(self, d: date) -> bool:
        return self.start <= d <= self.end


def parse_date(value) -> date | None:
    """
    Parse a loosely typed date, returning None when it cannot be parsed.

    Accepts ``date``, ``datetime``, ``np.datetime64``, ``pd.Timestamp`` and ISO
    style strings ("2024-01-31", "2024-01-31T10:00:00Z").

    **Example:**
        ```python
        parse_date("2024-02-29")   # date(2024, 2, 29)
        parse_date("not a date")   # None
        parse_date(None)           # None
        ```
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, np.datetime64):
        if np.isnat(value):
            return None
        return pd.Timestamp(value).date()

    text = str(value).strip()
    if not text:
        return None
    ts = pd.to_datetime(text, errors="coerce")
    if ts is pd.NaT or pd.isna(ts):
        logger.debug("Unparseable date %r", value)
        return None
    return ts.date()


def add_months(d: date, months: int) -> date:
    """Add calendar months, clamping to the last day of shorter months."""
    return (pd.Timestamp(d) + pd.DateOffset(months=months)).date()


def clip_window(
    start: date | None, end: date | None, window: DateWindow
) -> DateWindow:
    """
    Intersect an activity interval with a query window.

    A missing ``start`` means the activity is not clippable and yields an empty
    window; a missing ``end`` is open-ended and only bounded by the window.

    **Example:**
        ```python
        clip_window(date(2024, 1, 1), date(2024, 1, 10),
                    DateWindow(date(2024, 1, 5), date(2024, 1, 20)))
        # DateWindow(start=date(2024, 1, 5), end=date(2024, 1, 10))
        ```
    """
    if start is None:
        return DateWindow(window.start, window.start - timedelta(days=1))
    lo = max(start, window.start)
    hi = window.end if end is None else min(end, window.end)
    return DateWindow(lo, hi)


def day_range(window: DateWindow) -> list[date]:
    """All calendar days in an inclusive window."""
    if window.is_empty:
        return []
    return [ts.date() for ts in pd.date_range(window.start, window.end, freq="D")]


def financial_year_window(
    reference: date | int, fy_start: tuple[int, int] = (7, 1)
) -> DateWindow:
    """
    Financial year containing ``reference``.

    ``reference`` may be a date or a year; a year N means the financial year
    that starts in N.

    **Example:**
        ```python
        financial_year_window(date(2025, 3, 1))  # 2024-07-01 .. 2025-06-30
        financial_year_window(2025)              # 2025-07-01 .. 2026-06-30
        ```
    """
    month, day = fy_start
    if isinstance(reference, int):
        start_year = reference
    else:
        start_year = (
            reference.year
            if (reference.month, reference.day) >= (month, day)
            else reference.year - 1
        )
    start = date(start_year, month, day)
    end = add_months(start, 12) - timedelta(days=1)
    return DateWindow(start, end)
