"""
Tests for property and portfolio summary metrics.
"""

from datetime import date

import pytest
from proplab.core.ledger import Ledger, LedgerQuery
from proplab.core.portfolio_loader import load_portfolio
from proplab.core.records import AcquisitionCost, Loan, LoanStatus, Property, Rental
from proplab.metrics import (
    active_loans,
    active_rentals,
    annual_rental_income,
    portfolio_frame,
    portfolio_metrics,
    property_metrics,
    purchase_price,
    upcoming_reminders,
)

JULY = {"date_from": date(2024, 7, 1), "date_to": date(2024, 7, 31)}
TODAY = date(2024, 7, 15)


def _make_portfolio():
    return load_portfolio(
        {
            "properties": [
                {
                    "id": "p1",
                    "address": "1 High St",
                    "basePropertyCost": 400000,
                    "currentValue": 500000,
                    "acquisitionCosts": [{"description": "Stamp duty", "amount": 20000}],
                    "rentals": [
                        {
                            "id": "r1",
                            "tenantName": "Sam",
                            "amount": 700,
                            "frequency": "weekly",
                            "leaseStartDate": "2024-01-01",
                            "reminderDate": "2024-07-20",
                        }
                    ],
                },
                {"id": "p2", "name": "Unit 2", "currentValue": 200000},
            ],
            "loans": [
                {
                    "id": "l1",
                    "propertyId": "p1",
                    "originalAmount": 300000,
                    "currentBalance": 250000,
                    "interestRate": 6,
                    "regularPaymentAmount": 1800,
                    "frequency": "monthly",
                    "startDate": "2023-01-01",
                },
                {
                    "id": "l-old",
                    "propertyId": "p2",
                    "originalAmount": 100000,
                    "status": "paid_off",
                },
            ],
            "transactions": [
                {
                    "id": "t1",
                    "propertyId": "p1",
                    "type": "expense",
                    "category": "Repairs",
                    "description": "Roof",
                    "amount": 1000,
                    "date": "2024-07-10",
                    "reminderDate": "2024-07-16",
                },
                {
                    "id": "t2",
                    "propertyId": "p2",
                    "type": "insurance",
                    "amount": 300,
                    "date": "2024-05-01",
                    "reminderDate": "2024-09-01",
                },
            ],
        }
    )


def test_purchase_price_adds_acquisition_costs():
    prop = Property(
        id="p1",
        purchase_price=400000,
        acquisition_costs=(
            AcquisitionCost("Stamp duty", 15000),
            AcquisitionCost("Legal", 2500),
        ),
    )
    assert purchase_price(prop) == 417500.0
    assert purchase_price(Property(id="p2")) == 0.0


def test_active_rentals_and_annual_income():
    rentals = [
        Rental("r1", "p1", "Sam", 700, "weekly", date(2024, 1, 1)),
        Rental("r2", "p1", "Kim", 1000, "monthly", date(2024, 1, 1), date(2024, 3, 31)),
        Rental("r3", "p1", "Lee", 500, "weekly", None),
    ]
    on = date(2024, 7, 1)
    assert [r.id for r in active_rentals(rentals, on)] == ["r1"]
    assert annual_rental_income(rentals, on) == pytest.approx(36500.0)


def test_active_loans():
    loans = [
        Loan(id="a", property_id="p1"),
        Loan(id="b", property_id="p1", status=LoanStatus.PAID_OFF),
        Loan(id="c", property_id="p1", end_date=date(2024, 1, 1)),
    ]
    assert [ln.id for ln in active_loans(loans, date(2024, 7, 1))] == ["a"]


class TestPropertyMetrics:
    def test_cash_flow_agrees_with_ledger(self):
        portfolio = _make_portfolio()
        m = property_metrics(portfolio, "p1", today=TODAY, **JULY)
        rows = Ledger.from_portfolio(portfolio).list(LedgerQuery(property_id="p1", **JULY))

        assert m.income == pytest.approx(3500.0)
        assert m.income == pytest.approx(rows.totals.income)
        assert m.expenses == pytest.approx(rows.totals.expense)
        assert m.expenses > 1000.0  # repairs plus loan interest
        assert m.net_cash_flow == pytest.approx(rows.totals.net)

    def test_balance_sheet_figures(self):
        m = property_metrics(_make_portfolio(), "p1", today=TODAY, **JULY)
        assert m.purchase_price == 420000.0
        assert m.yield_pct == pytest.approx(3500.0 / 420000.0 * 100)
        assert m.total_loan_amount == 250000.0
        assert m.equity == 250000.0
        assert m.total_repayment == pytest.approx(1800.0 * 12)
        assert m.loan_count == 1

    def test_unpriced_property_has_zero_yield(self):
        m = property_metrics(_make_portfolio(), "p2", today=TODAY, **JULY)
        assert m.yield_pct == 0.0
        assert m.loan_count == 0

    def test_unknown_property(self):
        with pytest.raises(KeyError):
            property_metrics(_make_portfolio(), "nope")


def test_portfolio_metrics():
    m = portfolio_metrics(_make_portfolio(), today=TODAY, **JULY)
    assert m.property_count == 2
    assert m.total_value == 700000.0
    assert m.total_purchase_price == 420000.0
    assert m.total_income == pytest.approx(3500.0)
    assert m.average_yield_pct == pytest.approx(3500.0 / 420000.0 * 100)
    assert m.active_loan_count == 1
    assert m.properties_with_loans == 1
    assert m.net_cash_flow == pytest.approx(m.total_income - m.total_expenses)


def test_portfolio_frame():
    df = portfolio_frame(_make_portfolio(), today=TODAY, **JULY)
    assert list(df.index) == ["p1", "p2"]
    assert df.loc["p2", "label"] == "Unit 2"
    assert df.loc["p1", "income"] == pytest.approx(3500.0)


def test_empty_portfolio_metrics():
    m = portfolio_metrics(load_portfolio({}), today=TODAY)
    assert m.property_count == 0
    assert m.average_yield_pct == 0.0
    assert m.total_income == 0.0


def test_upcoming_reminders():
    reminders = upcoming_reminders(_make_portfolio(), today=TODAY)
    assert [(r.kind, r.record_id) for r in reminders] == [
        ("transaction", "t1"),
        ("rental", "r1"),
    ]
    assert reminders[1].description == "Sam"
    assert upcoming_reminders(_make_portfolio(), today=TODAY, days=3) == reminders[:1]


def test_portfolio_totals_include_rows_without_listed_property():
    portfolio = load_portfolio(
        {
            "properties": [{"id": "p1", "address": "1 High St"}],
            "transactions": [
                {"id": "t1", "propertyId": "p1", "type": "expense", "amount": 200, "date": "2024-08-01"},
                {"id": "t2", "propertyId": "ghost", "type": "income", "amount": 1000, "date": "2024-09-01"},
                {"id": "t3", "type": "income", "amount": 500, "date": "2024-10-01"},
            ],
        }
    )
    window = {"date_from": date(2024, 7, 1), "date_to": date(2025, 6, 30)}
    m = portfolio_metrics(portfolio, today=TODAY, **window)
    totals = Ledger.from_portfolio(portfolio).list(LedgerQuery(**window)).totals

    assert m.total_income == pytest.approx(1500.0)
    assert m.total_expenses == pytest.approx(200.0)
    assert (m.total_income, m.total_expenses, m.net_cash_flow) == pytest.approx(
        (totals.income, totals.expense, totals.net)
    )
    assert m.property_count == 1
