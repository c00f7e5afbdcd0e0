"""
Payment frequency canonicalization and daily-equivalent conversion.

Every component that needs a period length, a periods-per-year count or a
daily rate goes through this module so that the whole engine shares a single
day-count convention: a 365-day year, with

    daily_amount = amount * periods_per_year / 365

and periods_per_year = 365 (daily), 365/7 (weekly), 365/14 (fortnightly),
12 (monthly), 4 (quarterly) and 1 (annual). Weekly and fortnightly therefore
reduce exactly to amount / 7 and amount / 14.
"""

from __future__ import annotations

import logging
from datetime import date, timedelta
from enum import Enum
from typing import NamedTuple

from .dates import add_months
from .money import to_number

logger = logging.getLogger(__name__)


class Frequency(str, Enum):
    """Canonical payment frequencies."""

    DAILY = "daily"
    WEEKLY = "weekly"
    FORTNIGHTLY = "fortnightly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    ANNUAL = "annual"

    def __str__(self) -> str:
        return self.value


# Labels are compared after case folding and stripping whitespace, '-' and '_'
_LABELS: dict[Frequency, frozenset[str]] = {
    Frequency.WEEKLY: frozenset({"weekly", "week", "perweek", "pw", "p/w", "wk"}),
    Frequency.FORTNIGHTLY: frozenset(
        {"fortnightly", "fortnight", "perfortnight", "fn", "pfn", "biweekly"}
    ),
    Frequency.MONTHLY: frozenset({"monthly", "month", "permonth", "pcm", "pm"}),
    Frequency.DAILY: frozenset({"daily", "day", "perday", "pd"}),
    Frequency.ANNUAL: frozenset(
        {"annual", "annually", "yearly", "year", "peryear", "pa", "py"}
    ),
    Frequency.QUARTERLY: frozenset(
        {"quarterly", "quarter", "perquarter", "pq", "qtr"}
    ),
}

_LOOKUP: dict[str, Frequency] = {
    label: freq for freq, labels in _LABELS.items() for label in labels
}

# Day-stepped frequencies and their period length in days
_STEP_DAYS: dict[Frequency, int] = {
    Frequency.DAILY: 1,
    Frequency.WEEKLY: 7,
    Frequency.FORTNIGHTLY: 14,
}

# Month-stepped frequencies and their period length in months
_STEP_MONTHS: dict[Frequency, int] = {
    Frequency.MONTHLY: 1,
    Frequency.QUARTERLY: 3,
    Frequency.ANNUAL: 12,
}


class NormalizedAmount(NamedTuple):
    """A periodic amount resolved to its canonical frequency and daily rate."""

    canonical: Frequency
    daily_amount: float


def normalize_frequency(label, default: Frequency = Frequency.WEEKLY) -> Frequency:
    """
    Canonicalize a loosely formatted frequency label.

    Unrecognized or missing labels fall back to ``default`` (weekly unless the
    caller says otherwise).

    **Example:**
        ```python
        normalize_frequency("Per Week")   # Frequency.WEEKLY
        normalize_frequency("pcm")        # Frequency.MONTHLY
        normalize_frequency("bi-weekly")  # Frequency.FORTNIGHTLY
        normalize_frequency("sometimes")  # Frequency.WEEKLY (fallback)
        ```
    """
    if isinstance(label, Frequency):
        return label
    if label is None:
        return default

    key = "".join(str(label).lower().split()).replace("-", "").replace("_", "")
    freq = _LOOKUP.get(key)
    if freq is None:
        logger.warning(
            "Unrecognized frequency %r, falling back to %s", label, default.value
        )
        return default
    return freq


def periods_per_year(freq: Frequency, days_per_year: int = 365) -> float:
    """Number of payment periods in a year for a canonical frequency."""
    if freq in _STEP_DAYS:
        return days_per_year / _STEP_DAYS[freq]
    return 12 / _STEP_MONTHS[freq]


def daily_amount(amount, freq: Frequency, days_per_year: int = 365) -> float:
    """
    Convert a periodic amount into its daily equivalent.

    Negative or non-finite amounts normalize to 0.
    """
    value = to_number(amount)
    if value < 0:
        logger.warning("Negative periodic amount %r normalized to 0", amount)
        return 0.0
    if freq in _STEP_DAYS:
        return value / _STEP_DAYS[freq]
    return value * periods_per_year(freq, days_per_year) / days_per_year


def normalize(label, amount, days_per_year: int = 365) -> NormalizedAmount:
    """Canonicalize ``label`` and convert ``amount`` to its daily equivalent."""
    freq = normalize_frequency(label)
    return NormalizedAmount(freq, daily_amount(amount, freq, days_per_year))


def periodic_rate(annual_rate_pct, freq: Frequency, days_per_year: int = 365) -> float:
    """Per-period interest rate for an annual percentage rate."""
    rate = to_number(annual_rate_pct)
    if rate <= 0:
        return 0.0
    return rate / 100.0 / periods_per_year(freq, days_per_year)


def step_date(anchor: date, freq: Frequency, k: int) -> date:
    """
    Return the k-th occurrence of a schedule anchored at ``anchor``.

    Month-based frequencies are computed from the anchor every time, so a
    schedule starting on the 31st lands on month ends without drifting.
    """
    if freq in _STEP_DAYS:
        return anchor + timedelta(days=_STEP_DAYS[freq] * k)
    return add_months(anchor, _STEP_MONTHS[freq] * k)


def first_step_on_or_after(anchor: date, freq: Frequency, target: date) -> int:
    """Smallest k >= 0 such that step_date(anchor, freq, k) >= target."""
    if target <= anchor:
        return 0
    if freq in _STEP_DAYS:
        step = _STEP_DAYS[freq]
        return -(-(target - anchor).days // step)
    months = _STEP_MONTHS[freq]
    elapsed = (target.year - anchor.year) * 12 + (target.month - anchor.month)
    k = max(elapsed // months - 1, 0)
    while step_date(anchor, freq, k) < target:
        k += 1
    return k
