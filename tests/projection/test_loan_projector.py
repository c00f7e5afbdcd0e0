"""
Tests for loan amortization projection.
"""

from datetime import date

import pytest
from proplab.core.dates import DateWindow
from proplab.core.interfaces import Granularity, IProjector
from proplab.core.records import Loan, LoanStatus, Property
from proplab.core.sign import signed_amount
from proplab.projection.loan import (
    SCHEDULE_COLUMNS,
    LoanAmortizationProjector,
    annuity_payment,
)


def _make_loan(**kw) -> Loan:
    base = dict(
        id="l1",
        property_id="p1",
        lender="Bank",
        original_amount=10000.0,
        interest_rate=12.0,
        payment_amount=500.0,
        frequency="monthly",
        start_date=date(2024, 1, 1),
    )
    base.update(kw)
    return Loan(**base)


def test_satisfies_projector_protocol():
    assert isinstance(LoanAmortizationProjector(), IProjector)


def test_annuity_payment():
    assert annuity_payment(100_000, 0.06 / 12, 360) == pytest.approx(599.55, abs=0.01)
    assert annuity_payment(12_000, 0.0, 12) == pytest.approx(1000.0)
    assert annuity_payment(12_000, 0.01, 0) == 0.0


class TestSchedule:
    def test_balance_is_monotone_and_reaches_zero(self):
        df = LoanAmortizationProjector().schedule(_make_loan())
        assert list(df.columns) == SCHEDULE_COLUMNS
        closing = list(df["closing_balance"])
        assert all(b >= a for a, b in zip(closing[1:], closing[:-1]))
        assert closing[-1] == pytest.approx(0.0, abs=0.005)
        assert len(df) == 23
        assert df["date"].iloc[0] == date(2024, 2, 1)
        assert df["date"].iloc[-1] == date(2025, 12, 1)

    def test_first_period_split(self):
        df = LoanAmortizationProjector().schedule(_make_loan())
        first = df.iloc[0]
        assert first["opening_balance"] == pytest.approx(10000.0)
        assert first["interest"] == pytest.approx(100.0)
        assert first["principal"] == pytest.approx(400.0)
        assert first["closing_balance"] == pytest.approx(9600.0)

    def test_principal_never_exceeds_balance(self):
        df = LoanAmortizationProjector().schedule(_make_loan())
        assert (df["principal"] <= df["opening_balance"] + 1e-9).all()
        assert df["principal"].sum() == pytest.approx(10000.0, abs=0.01)

    def test_payment_derived_from_term(self):
        loan = _make_loan(
            original_amount=1200, interest_rate=0, payment_amount=0, term_years=1
        )
        projector = LoanAmortizationProjector()
        assert projector.periodic_payment(loan) == pytest.approx(100.0)
        df = projector.schedule(loan)
        assert len(df) == 12
        assert df["closing_balance"].iloc[-1] == pytest.approx(0.0, abs=0.005)

    def test_annuity_term_repays_within_term(self):
        loan = _make_loan(
            original_amount=300000, interest_rate=6, payment_amount=0, term_years=30
        )
        df = LoanAmortizationProjector().schedule(loan)
        assert len(df) <= 360
        assert df["closing_balance"].iloc[-1] == pytest.approx(0.0, abs=0.01)

    def test_schedule_stops_at_until(self):
        df = LoanAmortizationProjector().schedule(_make_loan(), until=date(2024, 4, 1))
        assert list(df["date"]) == [date(2024, 2, 1), date(2024, 3, 1), date(2024, 4, 1)]

    def test_unprojectable_loan_has_empty_schedule(self):
        df = LoanAmortizationProjector().schedule(_make_loan(start_date=None))
        assert df.empty
        assert list(df.columns) == SCHEDULE_COLUMNS


class TestProjection:
    window = DateWindow(date(2024, 6, 1), date(2024, 6, 30))

    def test_only_rows_inside_window(self):
        projector = LoanAmortizationProjector()
        rows = projector.project_loan(_make_loan(), self.window)
        assert {t.date for t in rows} == {date(2024, 6, 1)}
        assert sorted(t.type for t in rows) == ["interest", "principal"]

        june = projector.schedule(_make_loan()).set_index("date").loc[date(2024, 6, 1)]
        interest = next(t for t in rows if t.type == "interest")
        assert interest.amount == pytest.approx(june["interest"])

    def test_principal_rows_do_not_count(self):
        rows = LoanAmortizationProjector().project_loan(_make_loan(), self.window)
        principal = next(t for t in rows if t.type == "principal")
        assert principal.amount > 0
        assert signed_amount(principal) == 0.0

    def test_fee_rows(self):
        rows = LoanAmortizationProjector().project_loan(
            _make_loan(fee_amount=10), self.window
        )
        fee = next(t for t in rows if t.type == "fees")
        assert fee.amount == 10.0
        assert signed_amount(fee) == -10.0

    def test_no_rows_after_payoff(self):
        rows = LoanAmortizationProjector().project_loan(
            _make_loan(), DateWindow(date(2026, 1, 1), date(2026, 12, 31))
        )
        assert rows == []

    def test_end_date_bounds_projection(self):
        loan = _make_loan(end_date=date(2024, 3, 15))
        rows = LoanAmortizationProjector().project_loan(
            loan, DateWindow(date(2024, 1, 1), date(2024, 12, 31))
        )
        assert sorted({t.date for t in rows}) == [date(2024, 2, 1), date(2024, 3, 1)]

    @pytest.mark.parametrize("status", [LoanStatus.PAID_OFF, LoanStatus.REFINANCED])
    def test_closed_loan_without_end_is_not_projected(self, status):
        rows = LoanAmortizationProjector().project_loan(
            _make_loan(status=status), self.window
        )
        assert rows == []

    def test_closed_loan_with_end_projects_up_to_it(self):
        loan = _make_loan(status=LoanStatus.PAID_OFF, end_date=date(2024, 6, 15))
        rows = LoanAmortizationProjector().project_loan(loan, self.window)
        assert {t.date for t in rows} == {date(2024, 6, 1)}

    def test_daily_rows_spread_each_payment(self):
        loan = _make_loan(
            original_amount=100000, interest_rate=0, payment_amount=365
        )
        rows = LoanAmortizationProjector().project_loan(
            loan, DateWindow(date(2024, 2, 10), date(2024, 2, 12)), Granularity.DAY
        )
        assert [t.date for t in rows] == [
            date(2024, 2, 10),
            date(2024, 2, 11),
            date(2024, 2, 12),
        ]
        assert all(t.type == "principal" for t in rows)
        assert all(t.amount == pytest.approx(12.0) for t in rows)
        assert all(t.original_amount == pytest.approx(365.0) for t in rows)

    def test_rows_are_labelled_with_property(self):
        rows = LoanAmortizationProjector().project(
            [Property(id="p1", address="1 High St")], [], [_make_loan()], self.window
        )
        assert all("1 High St" in t.description for t in rows)
        assert all(t.is_auto_generated and t.source_id == "l1" for t in rows)

    def test_loan_without_property_is_still_projected(self):
        rows = LoanAmortizationProjector().project([], [], [_make_loan()], self.window)
        assert len(rows) == 2
