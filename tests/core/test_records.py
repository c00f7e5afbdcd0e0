"""
Tests for record construction from loosely typed mappings.
"""

from datetime import date

import pytest
from proplab.core.errors import ProplabWarning
from proplab.core.records import (
    Loan,
    LoanStatus,
    Property,
    Rental,
    Transaction,
)


class TestRental:
    def test_camel_case_fields(self):
        rental = Rental.from_dict(
            {
                "id": "r1",
                "propertyId": "p1",
                "tenantName": "Sam",
                "monthlyRent": "$2,000",
                "frequency": "monthly",
                "leaseStartDate": "2024-01-01",
                "managementFeePercentage": "8",
            }
        )
        assert rental.property_id == "p1"
        assert rental.amount == 2000.0
        assert rental.start_date == date(2024, 1, 1)
        assert rental.end_date is None
        assert rental.management_fee_percentage == 8.0

    def test_snake_case_fields(self):
        rental = Rental.from_dict(
            {
                "id": "r2",
                "property_id": "p1",
                "tenant_name": "Kim",
                "monthly_rent": 1500,
                "lease_start": date(2024, 2, 1),
                "lease_end": "2025-01-31",
                "room_description": "Room 2",
            }
        )
        assert rental.amount == 1500.0
        assert rental.end_date == date(2025, 1, 31)
        assert rental.label == "Kim (Room 2)"

    def test_conflicting_aliases_warn_and_first_wins(self):
        with pytest.warns(ProplabWarning, match="monthlyRent"):
            rental = Rental.from_dict(
                {"id": "r-clash", "amount": 500, "monthlyRent": 600}
            )
        assert rental.amount == 500.0

    def test_bad_values_fail_soft(self):
        rental = Rental.from_dict(
            {"id": "r3", "amount": "n/a", "leaseStartDate": "someday"}
        )
        assert rental.amount == 0.0
        assert rental.start_date is None
        assert rental.tenant_name == "Tenant"


class TestProperty:
    def test_nested_rentals_inherit_property_id(self):
        prop = Property.from_dict(
            {
                "id": "p1",
                "address": "1 High St",
                "basePropertyCost": 400000,
                "acquisitionCosts": [
                    {"description": "Stamp duty", "amount": 15000},
                    {"name": "Legal", "amount": "2,500"},
                ],
                "rentals": [{"id": "r1", "amount": 500, "startDate": "2024-01-01"}],
            }
        )
        assert prop.purchase_price == 400000.0
        assert [c.amount for c in prop.acquisition_costs] == [15000.0, 2500.0]
        assert prop.acquisition_costs[1].description == "Legal"
        assert prop.rentals[0].property_id == "p1"
        assert prop.label == "1 High St"

    def test_label_fallbacks(self):
        assert Property(id="p9", name="Unit 9").label == "Unit 9"
        assert Property(id="p9").label == "Property p9"


class TestLoan:
    def test_camel_case_rate_is_percent(self):
        loan = Loan.from_dict(
            {
                "id": "l1",
                "propertyId": "p1",
                "originalAmount": 300000,
                "interestRate": 5.5,
                "regularPaymentAmount": 1800,
                "startDate": "2023-01-01",
            }
        )
        assert loan.interest_rate == 5.5
        assert loan.payment_amount == 1800.0
        assert loan.frequency == "monthly"
        assert loan.status is LoanStatus.ACTIVE

    def test_snake_case_rate_is_decimal(self):
        loan = Loan.from_dict(
            {
                "id": "l2",
                "property_id": "p1",
                "amount": 200000,
                "interest_rate": 0.055,
                "monthly_payment": 1200,
                "term_years": 25,
                "status": "paid_off",
            }
        )
        assert loan.interest_rate == pytest.approx(5.5)
        assert loan.original_amount == 200000.0
        assert loan.term_years == 25.0
        assert loan.status is LoanStatus.PAID_OFF

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("Paid Off", LoanStatus.PAID_OFF),
            ("refinanced", LoanStatus.REFINANCED),
            (None, LoanStatus.ACTIVE),
            ("mystery", LoanStatus.ACTIVE),
        ],
    )
    def test_status_parsing(self, raw, expected):
        assert LoanStatus.parse(raw) is expected


class TestTransaction:
    def test_from_dict_fails_soft(self):
        txn = Transaction.from_dict(
            {
                "id": "t1",
                "propertyId": "p1",
                "type": " expense ",
                "amount": "oops",
                "date": "not a date",
            }
        )
        assert txn.type == "expense"
        assert txn.amount == 0.0
        assert txn.date is None
        assert txn.is_auto_generated is False

    def test_to_dict_uses_iso_dates(self):
        txn = Transaction(
            id="t2",
            property_id="p1",
            type="income",
            amount=10.0,
            date=date(2024, 3, 4),
            reminder_date=date(2024, 3, 10),
        )
        data = txn.to_dict()
        assert data["date"] == "2024-03-04"
        assert data["reminder_date"] == "2024-03-10"
        assert data["original_amount"] is None
