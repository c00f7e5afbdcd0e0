"""
Tests for the sign normalization precedence table.
"""

from datetime import date

import pytest
from hypothesis import given
from hypothesis import strategies as st
from proplab.core.kinds import K
from proplab.core.records import Transaction
from proplab.core.sign import (
    EXPENSE_TYPES,
    INCOME_TYPES,
    TxnClass,
    classify,
    signed_amount,
    split_signed,
)


def _make_txn(type_: str, amount) -> Transaction:
    return Transaction(
        id="t", property_id="p1", type=type_, amount=amount, date=date(2024, 1, 1)
    )


def test_expense_sign_is_idempotent():
    assert signed_amount({"type": "expense", "amount": 150}) == -150.0
    assert signed_amount({"type": "expense", "amount": -150}) == -150.0


def test_income_is_always_positive():
    assert signed_amount({"type": "income", "amount": -200}) == 200.0
    assert signed_amount({"type": "rent", "amount": 200}) == 200.0


def test_principal_is_ignored():
    assert signed_amount({"type": "principal", "amount": 900}) == 0.0
    assert signed_amount({"type": "principal", "amount": -900}) == 0.0


def test_unclassified_keeps_raw_sign():
    assert signed_amount({"type": "refund", "amount": -20}) == -20.0
    assert signed_amount({"type": "refund", "amount": 20}) == 20.0
    assert signed_amount({"type": "refund", "amount": 0}) == 0.0


def test_type_is_trimmed_and_case_insensitive():
    assert signed_amount({"type": "  Expense ", "amount": 150}) == -150.0
    assert classify("INTEREST") is TxnClass.EXPENSE


def test_amount_strings_are_parsed():
    assert signed_amount({"type": "rent", "amount": "$1,200"}) == 1200.0
    assert signed_amount({"type": "rent", "amount": "abc"}) == 0.0


def test_records_and_missing_values():
    assert signed_amount(_make_txn("maintenance", 80)) == -80.0
    assert signed_amount(None) == 0.0
    assert signed_amount({"amount": 15}) == 15.0


@pytest.mark.parametrize(
    "txn_type,expected",
    [
        (K.PRINCIPAL, TxnClass.IGNORE),
        (K.OTHER_INCOME, TxnClass.INCOME),
        (K.RENTAL, TxnClass.INCOME),
        (K.MANAGEMENT_FEE, TxnClass.EXPENSE),
        (K.TAX, TxnClass.EXPENSE),
        ("transfer", TxnClass.UNCLASSIFIED),
        (None, TxnClass.UNCLASSIFIED),
    ],
)
def test_classify(txn_type, expected):
    assert classify(txn_type) is expected


def test_split_signed():
    assert split_signed(12.5) == (12.5, 0.0)
    assert split_signed(-3.0) == (0.0, 3.0)
    assert split_signed(0.0) == (0.0, 0.0)


amounts = st.floats(
    min_value=-1e9, max_value=1e9, allow_nan=False, allow_infinity=False
)


@given(
    txn_type=st.sampled_from(sorted(INCOME_TYPES | EXPENSE_TYPES)), amount=amounts
)
def test_classified_types_ignore_stored_sign(txn_type, amount):
    assert signed_amount({"type": txn_type, "amount": amount}) == signed_amount(
        {"type": txn_type, "amount": -amount}
    )


@given(txn_type=st.sampled_from(sorted(K.all_kinds()) + ["other", ""]), amount=amounts)
def test_magnitude_is_preserved_unless_ignored(txn_type, amount):
    value = signed_amount({"type": txn_type, "amount": amount})
    if classify(txn_type) is TxnClass.IGNORE:
        assert value == 0.0
    else:
        assert abs(value) == abs(amount)
