"""
Loan amortization projection.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence
from datetime import date, timedelta
from typing import NamedTuple

import pandas as pd

from proplab.core.dates import DateWindow, clip_window, day_range
from proplab.core.frequency import (
    Frequency,
    daily_amount,
    normalize_frequency,
    periodic_rate,
    periods_per_year,
    step_date,
)
from proplab.core.interfaces import Granularity
from proplab.core.kinds import K
from proplab.core.money import to_number
from proplab.core.records import Loan, LoanStatus, Property, Rental, Transaction
from proplab.core.settings import DEFAULT_SETTINGS, EngineSettings

logger = logging.getLogger(__name__)

INTEREST_CATEGORY = "Loan Interest"
PRINCIPAL_CATEGORY = "Loan Principal"
FEE_CATEGORY = "Loan Fees"

SCHEDULE_COLUMNS = [
    "date",
    "opening_balance",
    "interest",
    "principal",
    "fee",
    "closing_balance",
]


class AmortizationPeriod(NamedTuple):
    """One payment of the amortization walk."""

    date: date
    prev_date: date  # previous payment date (loan start for the first payment)
    opening_balance: float
    interest: float
    principal: float
    fee: float
    closing_balance: float


def annuity_payment(principal: float, rate: float, n: int) -> float:
    """
    Level payment that repays ``principal`` over ``n`` periods at ``rate``.

    **Example:**
        ```python
        annuity_payment(100_000, 0.06 / 12, 360)  # ~599.55
        annuity_payment(12_000, 0.0, 12)          # 1000.0
        ```
    """
    if n <= 0 or principal <= 0:
        return 0.0
    if rate > 0:
        return principal * (rate * (1 + rate) ** n) / ((1 + rate) ** n - 1)
    return principal / n


class LoanAmortizationProjector:
    """
    Expand loans into synthetic interest, principal and fee rows.

    The walk seeds the balance with the original amount at the loan start and
    steps at the payment frequency; the first payment falls one period after
    the start. At each step:

        interest  = balance * periodic_rate
        principal = min(max(payment - interest, 0), balance)
        balance  -= principal

    and the walk stops once the balance is at or below the settings' tolerance.
    Only rows dated inside the query window are emitted, but the walk always
    starts at the loan's true start so balances are correct mid-term.

    **Row types:**
        - ``interest``: expense, counted in profit/loss
        - ``principal``: balance transfer, ignored in profit/loss
        - ``fees``: per-payment fee, when the loan has one

    **Payment derivation:**
        When no regular payment is recorded but a term is, the payment is the
        annuity over ``term_years * periods_per_year`` periods.

    **Status:**
        Paid-off or refinanced loans without an end date are not projected.
    """

    def __init__(self, settings: EngineSettings = DEFAULT_SETTINGS):
        self.settings = settings

    def project(
        self,
        properties: Sequence[Property],
        rentals: Sequence[Rental],
        loans: Sequence[Loan],
        window: DateWindow,
        granularity: Granularity = Granularity.PERIOD,
    ) -> list[Transaction]:
        by_id = {p.id: p for p in properties}
        rows: list[Transaction] = []
        for loan in loans:
            rows.extend(
                self.project_loan(
                    loan, window, granularity, prop=by_id.get(loan.property_id)
                )
            )
        rows.sort(key=lambda t: t.date)
        return rows

    def frequency(self, loan: Loan) -> Frequency:
        return normalize_frequency(loan.frequency, Frequency.MONTHLY)

    def periodic_payment(self, loan: Loan) -> float:
        """Recorded regular payment, or the annuity derived from the term."""
        payment = to_number(loan.payment_amount)
        if payment > 0:
            return payment
        term = to_number(loan.term_years)
        if term <= 0:
            return 0.0
        freq = self.frequency(loan)
        dpy = self.settings.days_per_year
        n = int(round(term * periods_per_year(freq, dpy)))
        return annuity_payment(
            to_number(loan.original_amount),
            periodic_rate(loan.interest_rate, freq, dpy),
            n,
        )

    def is_projectable(self, loan: Loan) -> bool:
        if loan.start_date is None:
            logger.warning("Loan %s has no usable start date; skipped", loan.id)
            return False
        if to_number(loan.original_amount) <= 0:
            logger.warning("Loan %s has no principal; skipped", loan.id)
            return False
        if loan.status is not LoanStatus.ACTIVE and loan.end_date is None:
            logger.debug("Loan %s is %s with no end date", loan.id, loan.status.value)
            return False
        return True

    def walk(self, loan: Loan, until: date) -> Iterator[AmortizationPeriod]:
        """Yield payments from the loan start up to ``until`` (inclusive)."""
        if not self.is_projectable(loan):
            return
        freq = self.frequency(loan)
        rate = periodic_rate(loan.interest_rate, freq, self.settings.days_per_year)
        payment = self.periodic_payment(loan)
        if payment <= 0:
            logger.warning(
                "Loan %s has no payment amount or term; projecting interest only",
                loan.id,
            )
        fee = max(to_number(loan.fee_amount), 0.0)
        tolerance = self.settings.balance_tolerance

        balance = to_number(loan.original_amount)
        prev = loan.start_date
        k = 1
        while True:
            d = step_date(loan.start_date, freq, k)
            if d > until:
                break
            interest = balance * rate
            principal = min(max(payment - interest, 0.0), balance)
            closing = balance - principal
            yield AmortizationPeriod(d, prev, balance, interest, principal, fee, closing)
            balance = closing
            if balance <= tolerance:
                break
            prev = d
            k += 1

    def schedule(self, loan: Loan, until: date | None = None) -> pd.DataFrame:
        """
        Amortization table for ``loan``.

        Args:
            loan: The loan to walk
            until: Last date to include (defaults to the loan end or open-end sentinel)

        Returns:
            DataFrame with columns date, opening_balance, interest, principal,
            fee, closing_balance (empty when the loan cannot be projected)
        """
        end = loan.end_date or self.settings.open_end_date
        if until is not None:
            end = min(end, until)
        periods = list(self.walk(loan, end))
        return pd.DataFrame([_row(p) for p in periods], columns=SCHEDULE_COLUMNS)

    def project_loan(
        self,
        loan: Loan,
        window: DateWindow,
        granularity: Granularity = Granularity.PERIOD,
        *,
        prop: Property | None = None,
    ) -> list[Transaction]:
        """Project one loan into ``window``; bad loans yield no rows."""
        if window.is_empty:
            return []
        if loan.start_date is None:
            logger.warning("Loan %s has no usable start date; skipped", loan.id)
            return []
        end = loan.end_date or self.settings.open_end_date
        span = clip_window(loan.start_date, end, window)
        if span.is_empty:
            return []

        freq = self.frequency(loan)
        rows: list[Transaction] = []
        if granularity is Granularity.DAY:
            # the payment straddling the window end still accrues inside it
            for period in self.walk(loan, step_date(span.end, freq, 1)):
                days = clip_window(period.prev_date + timedelta(days=1), period.date, span)
                for d in day_range(days):
                    rows.extend(self._rows(loan, prop, period, d, freq, per_day=True))
        else:
            for period in self.walk(loan, span.end):
                if span.contains(period.date):
                    rows.extend(self._rows(loan, prop, period, period.date, freq))
        logger.debug(
            "Loan %s: %d rows in %s..%s", loan.id, len(rows), span.start, span.end
        )
        return rows

    def _rows(
        self,
        loan: Loan,
        prop: Property | None,
        period: AmortizationPeriod,
        d: date,
        freq: Frequency,
        *,
        per_day: bool = False,
    ) -> list[Transaction]:
        label = loan.lender or f"Loan {loan.id}"
        if prop is not None:
            label = f"{label} ({prop.label})"
        components = (
            (K.INTEREST, INTEREST_CATEGORY, "Loan interest", period.interest),
            (K.PRINCIPAL, PRINCIPAL_CATEGORY, "Loan principal", period.principal),
            (K.FEES, FEE_CATEGORY, "Loan fees", period.fee),
        )
        rows = []
        for kind, category, title, original in components:
            if original <= 0:
                continue
            amount = (
                daily_amount(original, freq, self.settings.days_per_year)
                if per_day
                else original
            )
            rows.append(
                Transaction(
                    id=f"loan-{loan.id}-{kind}-{d.isoformat()}",
                    property_id=loan.property_id,
                    type=kind,
                    category=category,
                    description=f"{title} - {label}",
                    amount=amount,
                    date=d,
                    payee=loan.lender or None,
                    is_auto_generated=True,
                    original_amount=original,
                    original_frequency=freq.value,
                    daily_equivalent=amount if per_day else None,
                    source_id=loan.id,
                )
            )
        return rows


def _row(period: AmortizationPeriod) -> tuple:
    return (
        period.date,
        period.opening_balance,
        period.interest,
        period.principal,
        period.fee,
        period.closing_balance,
    )


__all__ = [
    "AmortizationPeriod",
    "LoanAmortizationProjector",
    "annuity_payment",
]
