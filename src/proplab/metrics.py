"""
Summary metrics for properties and portfolios.

Cash-flow figures are read from a list-mode :class:`~proplab.core.ledger.Ledger`
over the requested window, so a summary always agrees with the transaction
table for the same window. Balance-sheet figures (value, purchase price, loan
balances) come straight from the records.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import date, timedelta
from typing import NamedTuple

import numpy as np
import pandas as pd

from proplab.core.dates import DateWindow, financial_year_window
from proplab.core.frequency import daily_amount, normalize_frequency, periods_per_year
from proplab.core.ledger import Ledger, LedgerQuery
from proplab.core.money import to_number
from proplab.core.portfolio_loader import Portfolio
from proplab.core.records import Loan, LoanStatus, Property, Rental
from proplab.core.settings import DEFAULT_SETTINGS, EngineSettings
from proplab.projection.loan import LoanAmortizationProjector

__all__ = [
    "PortfolioMetrics",
    "PropertyMetrics",
    "Reminder",
    "active_loans",
    "active_rentals",
    "annual_rental_income",
    "financial_year_window",
    "portfolio_frame",
    "portfolio_metrics",
    "property_metrics",
    "purchase_price",
    "upcoming_reminders",
]


@dataclass(frozen=True)
class PropertyMetrics:
    """Cash-flow and balance-sheet summary of one property over a window."""

    property_id: str
    label: str
    income: float
    expenses: float
    net_cash_flow: float
    yield_pct: float
    purchase_price: float
    current_value: float
    total_loan_amount: float
    total_repayment: float  # annualized regular repayments of active loans
    equity: float
    loan_count: int


@dataclass(frozen=True)
class PortfolioMetrics:
    """Portfolio-wide totals over a window."""

    property_count: int
    total_value: float
    total_purchase_price: float
    total_income: float
    total_expenses: float
    net_cash_flow: float
    average_yield_pct: float
    total_loan_amount: float
    total_repayment: float
    active_loan_count: int
    properties_with_loans: int


class Reminder(NamedTuple):
    """A dated follow-up attached to a transaction or a lease."""

    date: date
    kind: str  # "transaction" or "rental"
    record_id: str
    property_id: str | None
    description: str


def purchase_price(prop: Property) -> float:
    """
    Total purchase price: base property cost plus every acquisition cost.

    Args:
        prop: Property record

    Returns:
        Base cost + sum of acquisition cost amounts
    """
    return to_number(prop.purchase_price) + sum(
        to_number(c.amount) for c in prop.acquisition_costs
    )


def active_rentals(
    rentals: list[Rental], on: date, settings: EngineSettings = DEFAULT_SETTINGS
) -> list[Rental]:
    """Leases running on ``on`` (open-ended leases run until the sentinel)."""
    return [
        r
        for r in rentals
        if r.start_date is not None
        and r.start_date <= on <= (r.end_date or settings.open_end_date)
    ]


def annual_rental_income(
    rentals: list[Rental], on: date, settings: EngineSettings = DEFAULT_SETTINGS
) -> float:
    """
    Annualized rent of the leases active on ``on``.

    Each lease contributes daily equivalent * days per year.
    """
    dpy = settings.days_per_year
    return sum(
        daily_amount(
            r.amount, normalize_frequency(r.frequency, settings.default_frequency), dpy
        )
        * dpy
        for r in active_rentals(rentals, on, settings)
    )


def active_loans(
    loans: list[Loan], on: date, settings: EngineSettings = DEFAULT_SETTINGS
) -> list[Loan]:
    """Loans with status active whose end (or the sentinel) is after ``on``."""
    return [
        ln
        for ln in loans
        if ln.status is LoanStatus.ACTIVE
        and (ln.end_date or settings.open_end_date) > on
    ]


def _loan_amount(loan: Loan) -> float:
    if loan.current_balance is not None:
        return to_number(loan.current_balance)
    return to_number(loan.original_amount)


def _annual_repayment(loan: Loan, projector: LoanAmortizationProjector) -> float:
    freq = projector.frequency(loan)
    return projector.periodic_payment(loan) * periods_per_year(
        freq, projector.settings.days_per_year
    )


def _query(
    date_from: date | None, date_to: date | None, today: date | None
) -> tuple[LedgerQuery, date]:
    return LedgerQuery(date_from=date_from, date_to=date_to), today or date.today()


def _property_metrics(
    ledger: Ledger,
    portfolio: Portfolio,
    prop: Property,
    query: LedgerQuery,
    today: date,
) -> PropertyMetrics:
    settings = portfolio.settings
    rows = ledger.list(
        LedgerQuery(
            property_id=prop.id, date_from=query.date_from, date_to=query.date_to
        ),
        today=today,
    )
    price = purchase_price(prop)
    loans = active_loans(portfolio.loans_for(prop.id), today, settings)
    projector = LoanAmortizationProjector(settings)
    loan_amount = sum(_loan_amount(ln) for ln in loans)
    value = to_number(prop.current_value)
    return PropertyMetrics(
        property_id=prop.id,
        label=prop.label,
        income=rows.totals.income,
        expenses=rows.totals.expense,
        net_cash_flow=rows.totals.net,
        yield_pct=rows.totals.income / price * 100.0 if price > 0 else 0.0,
        purchase_price=price,
        current_value=value,
        total_loan_amount=loan_amount,
        total_repayment=sum(_annual_repayment(ln, projector) for ln in loans),
        equity=value - loan_amount,
        loan_count=len(loans),
    )


def property_metrics(
    portfolio: Portfolio,
    property_id: str,
    date_from: date | None = None,
    date_to: date | None = None,
    *,
    today: date | None = None,
) -> PropertyMetrics:
    """
    Summary of one property over a window (default: current financial year).

    Raises:
        KeyError: If the property is not in the portfolio
    """
    prop = portfolio.property(property_id)
    if prop is None:
        raise KeyError(property_id)
    query, today = _query(date_from, date_to, today)
    ledger = Ledger.from_portfolio(portfolio)
    return _property_metrics(ledger, portfolio, prop, query, today)


def portfolio_frame(
    portfolio: Portfolio,
    date_from: date | None = None,
    date_to: date | None = None,
    *,
    today: date | None = None,
) -> pd.DataFrame:
    """
    One row per property with every :class:`PropertyMetrics` field.

    Returns:
        DataFrame indexed by property_id (empty when there are no properties)
    """
    query, today = _query(date_from, date_to, today)
    return _frame(Ledger.from_portfolio(portfolio), portfolio, query, today)


def _frame(
    ledger: Ledger, portfolio: Portfolio, query: LedgerQuery, today: date
) -> pd.DataFrame:
    records = [
        asdict(_property_metrics(ledger, portfolio, prop, query, today))
        for prop in portfolio.properties
    ]
    columns = list(PropertyMetrics.__dataclass_fields__)
    df = pd.DataFrame(records, columns=columns)
    return df.set_index("property_id")


def portfolio_metrics(
    portfolio: Portfolio,
    date_from: date | None = None,
    date_to: date | None = None,
    *,
    today: date | None = None,
) -> PortfolioMetrics:
    """
    Portfolio totals over a window (default: current financial year).

    Average yield is the mean over properties with a positive purchase price.
    Cash-flow totals come from one ledger query over the whole portfolio, so
    rows without a listed property are counted too.
    """
    query, today = _query(date_from, date_to, today)
    ledger = Ledger.from_portfolio(portfolio)
    df = _frame(ledger, portfolio, query, today)
    totals = ledger.list(query, today=today).totals
    priced = df[df["purchase_price"] > 0]
    avg_yield = float(np.mean(priced["yield_pct"])) if len(priced) else 0.0
    return PortfolioMetrics(
        property_count=len(df),
        total_value=float(df["current_value"].sum()),
        total_purchase_price=float(df["purchase_price"].sum()),
        total_income=totals.income,
        total_expenses=totals.expense,
        net_cash_flow=totals.net,
        average_yield_pct=avg_yield,
        total_loan_amount=float(df["total_loan_amount"].sum()),
        total_repayment=float(df["total_repayment"].sum()),
        active_loan_count=int(df["loan_count"].sum()),
        properties_with_loans=int((df["loan_count"] > 0).sum()),
    )


def upcoming_reminders(
    portfolio: Portfolio, today: date | None = None, days: int = 30
) -> list[Reminder]:
    """Transaction and lease reminders due within ``days`` days of ``today``."""
    today = today or date.today()
    horizon = DateWindow(today, today + timedelta(days=days))
    out: list[Reminder] = []
    for t in portfolio.transactions:
        if t.reminder_date is not None and horizon.contains(t.reminder_date):
            out.append(
                Reminder(
                    t.reminder_date,
                    "transaction",
                    t.id,
                    t.property_id,
                    t.description or t.category,
                )
            )
    for r in portfolio.all_rentals():
        if r.reminder_date is not None and horizon.contains(r.reminder_date):
            out.append(
                Reminder(r.reminder_date, "rental", r.id, r.property_id, r.label)
            )
    out.sort(key=lambda rem: rem.date)
    return out
