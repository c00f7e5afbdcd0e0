"""
Number parsing and precision handling for PropLab.
"""

from __future__ import annotations

import logging
import re
from decimal import ROUND_HALF_EVEN, ROUND_HALF_UP, Decimal, InvalidOperation
from enum import Enum

import numpy as np

logger = logging.getLogger(__name__)

_NON_NUMERIC = re.compile(r"[^\d.\-]")


class RoundingPolicy(Enum):
    """Rounding policies for currency output."""

    BANKERS = ROUND_HALF_EVEN
    HALF_UP = ROUND_HALF_UP


class Currency:
    """
    Currency definition with precision and rounding rules.

    The engine never converts between currencies; the code only drives how many
    decimals an exported amount carries.

    Attributes:
        code: ISO currency code (e.g., 'AUD', 'USD', 'JPY')
        decimals: Number of decimal places for this currency
        rounding: Rounding policy for output
    """

    def __init__(
        self,
        code: str,
        decimals: int = 2,
        rounding: RoundingPolicy = RoundingPolicy.HALF_UP,
    ):
        self.code = code.upper()
        self.decimals = decimals
        self.rounding = rounding

    def quantize(self, amount: Decimal) -> Decimal:
        """Quantize amount to currency precision."""
        quantum = Decimal("1").scaleb(-self.decimals)  # e.g., 0.01 for 2 dp, 1 for 0 dp
        return amount.quantize(quantum, rounding=self.rounding.value)

    def __str__(self) -> str:
        return self.code

    def __repr__(self) -> str:
        return f"Currency('{self.code}', decimals={self.decimals})"


# Standard currency definitions
AUD = Currency("AUD", decimals=2)
USD = Currency("USD", decimals=2)
EUR = Currency("EUR", decimals=2)
GBP = Currency("GBP", decimals=2)
JPY = Currency("JPY", decimals=0)

# Currency registry
CURRENCIES: dict[str, Currency] = {
    "AUD": AUD,
    "USD": USD,
    "EUR": EUR,
    "GBP": GBP,
    "JPY": JPY,
}


def get_currency(code: str) -> Currency:
    """Get currency by code."""
    code = (code or "USD").upper()
    if code not in CURRENCIES:
        # Default to 2 decimal places for unknown currencies
        return Currency(code, decimals=2)
    return CURRENCIES[code]


def to_number(value) -> float:
    """
    Coerce a loosely typed amount into a finite float.

    Numbers pass through when finite. Strings keep only digits, '.' and '-'
    before parsing, so "$1,200.50" becomes 1200.5. Anything else, or anything
    that does not parse to a finite number, becomes 0.0.

    **Example:**
        ```python
        to_number("$1,200")   # 1200.0
        to_number(None)       # 0.0
        to_number(float("nan"))  # 0.0
        ```
    """
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float, np.integer, np.floating, Decimal)):
        number = float(value)
        return number if np.isfinite(number) else 0.0

    cleaned = _NON_NUMERIC.sub("", str(value))
    # parseFloat semantics: take the longest valid numeric prefix
    match = re.match(r"-?\d*\.?\d+|-?\d+\.?", cleaned)
    if not match:
        if str(value).strip():
            logger.debug("Unparseable amount %r treated as 0", value)
        return 0.0
    number = float(match.group(0))
    return number if np.isfinite(number) else 0.0


def quantize(
    value: float, decimals: int = 2, rounding: RoundingPolicy = RoundingPolicy.HALF_UP
) -> Decimal:
    """Round a float to a fixed number of decimals using Decimal arithmetic."""
    return _quantize_with(Currency("XXX", decimals=decimals, rounding=rounding), value)


def format_amount(value: float, currency: Currency | str | None = None) -> str:
    """Format an amount for export: plain digits, no grouping, fixed decimals."""
    if isinstance(currency, str) or currency is None:
        currency = get_currency(currency or "USD")
    return str(_quantize_with(currency, value))


def _quantize_with(currency: Currency, value) -> Decimal:
    try:
        amount = currency.quantize(Decimal(repr(to_number(value))))
    except InvalidOperation:
        amount = currency.quantize(Decimal("0"))
    # avoid "-0.00" in output
    return amount if amount != 0 else abs(amount)
