"""
Record types consumed and produced by the PropLab engine.

Records arrive from an external persistence layer as loosely typed mappings
with a mix of camelCase and snake_case keys. ``from_dict`` on each record
accepts the known aliases and never raises on bad values: unparseable numbers
become 0, unparseable dates become None, and the projectors treat those as
"nothing to project".
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from datetime import date
from enum import Enum
from typing import Any, Mapping

from .dates import parse_date
from .errors import warn_once
from .money import to_number

logger = logging.getLogger(__name__)

_MISSING = object()


def _pick(data: Mapping[str, Any], *keys: str, record_id: str = "?", default=None):
    """
    Return the first present, non-empty value among ``keys``.

    When several aliases carry different values the first one wins and a
    warning is issued once per (record, alias set).
    """
    found = [(k, data[k]) for k in keys if data.get(k, _MISSING) not in (_MISSING, None, "")]
    if not found:
        return default
    first_key, first_value = found[0]
    for other_key, other_value in found[1:]:
        if other_value != first_value:
            warn_once(
                "ALIAS_CLASH_" + first_key.upper(),
                record_id,
                f"[{record_id}] '{other_key}' ignored because '{first_key}' is set "
                f"(precedence: {first_key}).",
            )
            break
    return first_value


def _str_or_none(value) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _record_id(data: Mapping[str, Any]) -> str:
    return str(data.get("id") or "")


class LoanStatus(str, Enum):
    """Lifecycle state of a loan."""

    ACTIVE = "active"
    PAID_OFF = "paid_off"
    REFINANCED = "refinanced"

    @classmethod
    def parse(cls, value) -> LoanStatus:
        if isinstance(value, LoanStatus):
            return value
        if value is None or str(value).strip() == "":
            return cls.ACTIVE
        key = str(value).strip().lower().replace(" ", "_").replace("-", "_")
        if key in ("paidoff", "paid"):
            key = cls.PAID_OFF.value
        try:
            return cls(key)
        except ValueError:
            logger.warning("Unknown loan status %r treated as active", value)
            return cls.ACTIVE


@dataclass(frozen=True)
class AcquisitionCost:
    """One acquisition cost line item (stamp duty, legal fees, ...)."""

    description: str
    amount: float

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> AcquisitionCost:
        return cls(
            description=str(
                _pick(data, "description", "name", "category", default="") or ""
            ),
            amount=to_number(data.get("amount")),
        )


@dataclass(frozen=True)
class Rental:
    """
    A lease on a property, or on one room/unit of it.

    Attributes:
        amount: Rent per period (in ``frequency`` units)
        frequency: Raw frequency label as recorded; canonicalized at projection
        start_date: Lease start (required for projection)
        end_date: Lease end, None when open-ended
        management_fee_percentage: Fee as a percentage of rent (10 means 10%)
    """

    id: str
    property_id: str | None
    tenant_name: str
    amount: float
    frequency: str | None
    start_date: date | None
    end_date: date | None = None
    management_fee_percentage: float = 0.0
    room_description: str | None = None
    reminder_date: date | None = None

    @property
    def label(self) -> str:
        if self.room_description:
            return f"{self.tenant_name} ({self.room_description})"
        return self.tenant_name

    @classmethod
    def from_dict(
        cls, data: Mapping[str, Any], property_id: str | None = None
    ) -> Rental:
        rid = _record_id(data)
        return cls(
            id=rid,
            property_id=_str_or_none(
                _pick(data, "propertyId", "property_id", record_id=rid)
            )
            or property_id,
            tenant_name=str(
                _pick(data, "tenantName", "tenant_name", record_id=rid, default="")
                or "Tenant"
            ),
            amount=to_number(
                _pick(data, "amount", "monthlyRent", "monthly_rent", "rent", record_id=rid)
            ),
            frequency=_str_or_none(data.get("frequency")),
            start_date=parse_date(
                _pick(
                    data,
                    "leaseStartDate",
                    "startDate",
                    "lease_start",
                    "start_date",
                    record_id=rid,
                )
            ),
            end_date=parse_date(
                _pick(
                    data, "leaseEndDate", "endDate", "lease_end", "end_date", record_id=rid
                )
            ),
            management_fee_percentage=to_number(
                _pick(
                    data,
                    "managementFeePercentage",
                    "management_fee_percentage",
                    record_id=rid,
                )
            ),
            room_description=_str_or_none(
                _pick(data, "roomDescription", "room_description", record_id=rid)
            ),
            reminder_date=parse_date(
                _pick(data, "reminderDate", "reminder_date", record_id=rid)
            ),
        )


@dataclass(frozen=True)
class Property:
    """
    An investment property.

    Attributes:
        purchase_price: Base property cost, before acquisition costs
        acquisition_costs: Line items added on top of the base cost
        rentals: Leases attached directly to the property record
    """

    id: str
    name: str = ""
    address: str = ""
    purchase_price: float = 0.0
    current_value: float = 0.0
    purchase_date: date | None = None
    acquisition_costs: tuple[AcquisitionCost, ...] = ()
    rentals: tuple[Rental, ...] = ()

    @property
    def label(self) -> str:
        return self.address or self.name or f"Property {self.id}"

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Property:
        pid = _record_id(data)
        costs = _pick(data, "acquisitionCosts", "acquisition_costs", record_id=pid) or []
        rentals = data.get("rentals") or []
        return cls(
            id=pid,
            name=str(data.get("name") or ""),
            address=str(data.get("address") or ""),
            purchase_price=to_number(
                _pick(
                    data,
                    "basePropertyCost",
                    "purchasePrice",
                    "base_property_cost",
                    "purchase_price",
                    record_id=pid,
                )
            ),
            current_value=to_number(
                _pick(data, "currentValue", "current_value", record_id=pid)
            ),
            purchase_date=parse_date(
                _pick(data, "purchaseDate", "purchase_date", record_id=pid)
            ),
            acquisition_costs=tuple(
                AcquisitionCost.from_dict(c) for c in costs if isinstance(c, Mapping)
            ),
            rentals=tuple(
                Rental.from_dict(r, property_id=pid)
                for r in rentals
                if isinstance(r, Mapping)
            ),
        )


@dataclass(frozen=True)
class Loan:
    """
    A loan secured against one property.

    Attributes:
        original_amount: Principal at ``start_date``; seeds the amortization walk
        interest_rate: Annual rate in percent (5.5 means 5.5%)
        payment_amount: Regular payment per ``frequency`` period (0 = derive from term)
        term_years: Amortization term, used only when no payment is recorded
        fee_amount: Optional fee charged with every payment
    """

    id: str
    property_id: str | None
    lender: str = ""
    original_amount: float = 0.0
    current_balance: float | None = None
    interest_rate: float = 0.0
    payment_amount: float = 0.0
    frequency: str | None = "monthly"
    term_years: float | None = None
    start_date: date | None = None
    end_date: date | None = None
    status: LoanStatus = LoanStatus.ACTIVE
    fee_amount: float = 0.0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Loan:
        lid = _record_id(data)
        if data.get("interestRate") not in (None, ""):
            rate = to_number(data.get("interestRate"))
        else:
            # persisted column stores a decimal fraction
            rate = to_number(data.get("interest_rate")) * 100.0

        balance = _pick(data, "currentBalance", "current_balance", record_id=lid)
        term = _pick(data, "loanTerm", "termYears", "term_years", record_id=lid)
        return cls(
            id=lid,
            property_id=_str_or_none(
                _pick(data, "propertyId", "property_id", record_id=lid)
            ),
            lender=str(data.get("lender") or ""),
            original_amount=to_number(
                _pick(data, "originalAmount", "original_amount", "amount", record_id=lid)
            ),
            current_balance=None if balance is None else to_number(balance),
            interest_rate=rate,
            payment_amount=to_number(
                _pick(
                    data,
                    "regularPaymentAmount",
                    "monthlyPayment",
                    "regular_payment_amount",
                    "monthly_payment",
                    record_id=lid,
                )
            ),
            frequency=_str_or_none(data.get("frequency")) or "monthly",
            term_years=None if term is None else to_number(term),
            start_date=parse_date(_pick(data, "startDate", "start_date", record_id=lid)),
            end_date=parse_date(_pick(data, "endDate", "end_date", record_id=lid)),
            status=LoanStatus.parse(data.get("status")),
            fee_amount=to_number(_pick(data, "feeAmount", "fee_amount", record_id=lid)),
        )


@dataclass(frozen=True)
class Transaction:
    """
    A cash-flow row, either stored (real) or projected (synthetic).

    ``amount`` keeps whatever sign the source used; use
    :func:`proplab.core.sign.signed_amount` to get the canonical signed value.
    Synthetic rows carry ``is_auto_generated=True`` plus their provenance.
    """

    id: str
    property_id: str | None
    type: str
    category: str = ""
    description: str = ""
    amount: float = 0.0
    date: date | None = None
    payee: str | None = None
    reminder_date: date | None = None
    is_auto_generated: bool = False
    original_amount: float | None = None
    original_frequency: str | None = None
    daily_equivalent: float | None = None
    source_id: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Transaction:
        tid = _record_id(data)
        return cls(
            id=tid,
            property_id=_str_or_none(
                _pick(data, "propertyId", "property_id", record_id=tid)
            ),
            type=str(data.get("type") or "").strip(),
            category=str(data.get("category") or ""),
            description=str(data.get("description") or ""),
            amount=to_number(data.get("amount")),
            date=parse_date(data.get("date")),
            payee=_str_or_none(data.get("payee")),
            reminder_date=parse_date(
                _pick(data, "reminderDate", "reminder_date", record_id=tid)
            ),
        )

    def to_dict(self) -> dict[str, Any]:
        """Plain mapping with ISO dates, for JSON output."""
        out: dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, date):
                value = value.isoformat()
            out[f.name] = value
        return out


__all__ = [
    "AcquisitionCost",
    "Loan",
    "LoanStatus",
    "Property",
    "Rental",
    "Transaction",
]
