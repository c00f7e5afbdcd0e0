"""
Ledger: merge stored and projected transactions into filtered views.

The ledger is the only place where rows become figures. Every total it
reports is computed from the exact row set (or day buckets) it returns, using
:func:`proplab.core.sign.signed_amount`, so a displayed total always equals the
sum of the displayed rows.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field, replace
from datetime import date
from enum import Enum
from typing import Any, NamedTuple

import pandas as pd

from .dates import DateWindow, financial_year_window, parse_date
from .interfaces import Granularity, IProjector
from .records import Loan, Property, Rental, Transaction
from .settings import DEFAULT_SETTINGS, EngineSettings
from .sign import signed_amount, split_signed

logger = logging.getLogger(__name__)

_ALL = "all"


class ViewMode(str, Enum):
    """Shape of a ledger result."""

    LIST = "list"
    DAILY = "daily"


class SortField(str, Enum):
    """Sort keys supported by the list view."""

    DATE = "date"
    AMOUNT = "amount"
    CATEGORY = "category"
    DESCRIPTION = "description"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


def _filter_value(value) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    if not text or text.lower() == _ALL:
        return None
    return text


@dataclass(frozen=True)
class LedgerQuery:
    """
    Filters, window and presentation of one ledger request.

    Attributes:
        property_id: Only rows of this property ("all"/None for every property)
        type: Only rows of this declared type, case-insensitive
        category: Only rows of this category, case-insensitive
        date_from: Window start; defaults to the current financial year
        date_to: Window end; defaults to the current financial year
        view: List of rows or per-day buckets
        sort_by: Sort key (list view; the daily view always sorts by date)
        direction: Ascending or descending
        include_projections: Merge rental and loan projections with stored rows

    String values are coerced on construction, so ``LedgerQuery(view="daily",
    date_from="2024-07-01")`` is accepted.
    """

    property_id: str | None = None
    type: str | None = None
    category: str | None = None
    date_from: date | None = None
    date_to: date | None = None
    view: ViewMode = ViewMode.LIST
    sort_by: SortField = SortField.DATE
    direction: SortDirection = SortDirection.DESC
    include_projections: bool = True

    def __post_init__(self):
        object.__setattr__(self, "property_id", _filter_value(self.property_id))
        object.__setattr__(self, "type", _filter_value(self.type))
        object.__setattr__(self, "category", _filter_value(self.category))
        object.__setattr__(self, "date_from", parse_date(self.date_from))
        object.__setattr__(self, "date_to", parse_date(self.date_to))
        object.__setattr__(self, "view", ViewMode(self.view))
        object.__setattr__(self, "sort_by", SortField(self.sort_by))
        object.__setattr__(self, "direction", SortDirection(self.direction))


class Totals(NamedTuple):
    """Income and expense magnitudes plus their difference."""

    income: float
    expense: float
    net: float

    @classmethod
    def of(cls, signed_values) -> Totals:
        income = expense = 0.0
        for value in signed_values:
            inc, exp = split_signed(value)
            income += inc
            expense += exp
        return cls(income, expense, income - expense)

    def as_dict(self) -> dict[str, float]:
        return self._asdict()


@dataclass(frozen=True)
class LedgerRows:
    """List-view result: the visible rows and the totals over exactly them."""

    window: DateWindow
    rows: tuple[Transaction, ...]
    totals: Totals

    def __len__(self) -> int:
        return len(self.rows)

    def __iter__(self) -> Iterator[Transaction]:
        return iter(self.rows)

    def to_frame(self) -> pd.DataFrame:
        """One DataFrame row per ledger row, including the signed amount."""
        columns = [
            "date",
            "property_id",
            "type",
            "category",
            "description",
            "amount",
            "signed_amount",
            "payee",
            "is_auto_generated",
            "original_amount",
            "original_frequency",
            "source_id",
            "id",
        ]
        records = []
        for t in self.rows:
            record = t.to_dict()
            record["date"] = t.date
            record["signed_amount"] = signed_amount(t)
            records.append(record)
        return pd.DataFrame(records, columns=columns)


@dataclass(frozen=True)
class DailyLedgerEntry:
    """All rows sharing one date, with their signed amounts split by sign."""

    date: date
    income: float
    expenses: float
    transactions: tuple[Transaction, ...] = ()

    @property
    def net(self) -> float:
        return self.income - self.expenses


@dataclass(frozen=True)
class DailyLedger:
    """Daily-view result: one entry per date present in the filtered rows."""

    window: DateWindow
    entries: tuple[DailyLedgerEntry, ...]
    totals: Totals

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[DailyLedgerEntry]:
        return iter(self.entries)

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(
            [
                {
                    "date": e.date,
                    "income": e.income,
                    "expenses": e.expenses,
                    "net": e.net,
                    "count": len(e.transactions),
                }
                for e in self.entries
            ],
            columns=["date", "income", "expenses", "net", "count"],
        )


@dataclass(frozen=True)
class RangeTooLarge:
    """
    Policy signal: the daily view refuses windows longer than the cap.

    Returned instead of a ledger, never raised.
    """

    window: DateWindow
    span_days: int
    cap_days: int

    @property
    def message(self) -> str:
        return (
            f"Date range too large for the daily view: {self.span_days} days "
            f"(maximum {self.cap_days}). Narrow the date range."
        )

    def __bool__(self) -> bool:
        return False


LedgerResult = LedgerRows | DailyLedger | RangeTooLarge


def _sort_key(sort_by: SortField):
    if sort_by is SortField.AMOUNT:
        return signed_amount
    if sort_by is SortField.CATEGORY:
        return lambda t: (t.category or "").casefold()
    if sort_by is SortField.DESCRIPTION:
        return lambda t: (t.description or "").casefold()
    return lambda t: t.date


@dataclass
class Ledger:
    """
    Merger/reconciler over one set of portfolio records.

    **Use Cases:**
        - Transaction table: ``ledger.list(query)``
        - Daily cash-flow view and CSV export: ``ledger.daily(query)``
        - Filter vocabularies: ``ledger.categories()``

    **Example:**
        ```python
        ledger = Ledger(properties, rentals, loans, transactions)
        result = ledger.list(LedgerQuery(date_from="2024-07-01", date_to="2024-07-31"))
        assert result.totals.net == sum(signed_amount(r) for r in result)
        ```

    Queries are pure: the same records and query always produce the same rows
    and totals, and the input records are never modified.
    """

    properties: Sequence[Property] = ()
    rentals: Sequence[Rental] = ()
    loans: Sequence[Loan] = ()
    transactions: Sequence[Transaction] = ()
    settings: EngineSettings = DEFAULT_SETTINGS
    projectors: Sequence[IProjector] | None = field(default=None)

    def __post_init__(self):
        if self.projectors is None:
            from proplab.projection import default_projectors

            self.projectors = default_projectors(self.settings)

    @classmethod
    def from_portfolio(cls, portfolio: Any, projectors=None) -> Ledger:
        """Build a ledger from anything exposing the portfolio record tuples."""
        return cls(
            properties=portfolio.properties,
            rentals=portfolio.rentals,
            loans=portfolio.loans,
            transactions=portfolio.transactions,
            settings=portfolio.settings,
            projectors=projectors,
        )

    # ---- window ---------------------------------------------------------

    def resolve_window(self, query: LedgerQuery, today: date | None = None) -> DateWindow:
        """
        Effective inclusive window of ``query``.

        Explicit bounds win. A lone bound is completed with the financial year
        containing it; with no bounds the financial year containing ``today``
        is used.
        """
        fy_start = self.settings.fy_start_month_day()
        start, end = query.date_from, query.date_to
        if start is None and end is None:
            return financial_year_window(today or date.today(), fy_start)
        if start is None:
            start = financial_year_window(end, fy_start).start
        if end is None:
            end = financial_year_window(start, fy_start).end
        return DateWindow(start, end)

    # ---- collection -----------------------------------------------------

    def _scope(self, property_id: str | None):
        properties = list(self.properties)
        known = {p.id for p in properties}
        # leases and loans may point at properties absent from the property list
        for pid in [r.property_id for r in self.rentals] + [
            ln.property_id for ln in self.loans
        ]:
            if pid and pid not in known:
                known.add(pid)
                properties.append(Property(id=pid))

        if property_id is None:
            return properties, list(self.rentals), list(self.loans)
        return (
            [p for p in properties if p.id == property_id],
            [r for r in self.rentals if r.property_id == property_id],
            [ln for ln in self.loans if ln.property_id == property_id],
        )

    def _real_rows(self, window: DateWindow) -> list[Transaction]:
        rows = []
        for index, t in enumerate(self.transactions):
            if not t.id:
                logger.warning(
                    "Transaction %r has no id; using txn-%d", t.description, index
                )
                t = replace(t, id=f"txn-{index}")
            if t.date is None:
                logger.warning("Dropping transaction %s without a usable date", t.id)
                continue
            if window.contains(t.date):
                rows.append(t)
        return rows

    def _projected_rows(
        self, query: LedgerQuery, window: DateWindow, granularity: Granularity
    ) -> list[Transaction]:
        properties, rentals, loans = self._scope(query.property_id)
        rows: list[Transaction] = []
        for projector in self.projectors:
            rows.extend(
                projector.project(properties, rentals, loans, window, granularity)
            )
        return rows

    def _matches(self, t: Transaction, query: LedgerQuery) -> bool:
        if query.property_id is not None and t.property_id != query.property_id:
            return False
        if query.type is not None and t.type.strip().lower() != query.type.lower():
            return False
        if (
            query.category is not None
            and (t.category or "").strip().casefold() != query.category.casefold()
        ):
            return False
        return True

    def collect(
        self,
        query: LedgerQuery,
        window: DateWindow,
        granularity: Granularity = Granularity.PERIOD,
    ) -> list[Transaction]:
        """Filtered, unsorted rows (stored rows first, then projections)."""
        rows = self._real_rows(window)
        if query.include_projections:
            rows.extend(
                t
                for t in self._projected_rows(query, window, granularity)
                if window.contains(t.date)
            )
        return [t for t in rows if self._matches(t, query)]

    # ---- views ----------------------------------------------------------

    def list(self, query: LedgerQuery | None = None, today: date | None = None) -> LedgerRows:
        """Flat, sorted rows of ``query`` and their totals."""
        query = query or LedgerQuery()
        window = self.resolve_window(query, today)
        rows = self.collect(query, window, Granularity.PERIOD)
        rows.sort(
            key=_sort_key(query.sort_by),
            reverse=query.direction is SortDirection.DESC,
        )
        totals = Totals.of(signed_amount(t) for t in rows)
        logger.debug("List view %s..%s: %d rows", window.start, window.end, len(rows))
        return LedgerRows(window, tuple(rows), totals)

    def daily(
        self, query: LedgerQuery | None = None, today: date | None = None
    ) -> DailyLedger | RangeTooLarge:
        """
        Per-day buckets of ``query``, or :class:`RangeTooLarge`.

        The window cap is checked before anything is projected.
        """
        query = query or LedgerQuery(view=ViewMode.DAILY)
        window = self.resolve_window(query, today)
        cap = self.settings.daily_view_cap_days
        if window.span_days > cap:
            logger.info(
                "Daily view refused: %d days exceeds cap %d", window.span_days, cap
            )
            return RangeTooLarge(window, window.span_days, cap)

        buckets: dict[date, list[Transaction]] = {}
        for t in self.collect(query, window, Granularity.DAY):
            buckets.setdefault(t.date, []).append(t)

        entries = []
        for d in sorted(buckets, reverse=query.direction is SortDirection.DESC):
            income = expenses = 0.0
            for t in buckets[d]:
                inc, exp = split_signed(signed_amount(t))
                income += inc
                expenses += exp
            entries.append(DailyLedgerEntry(d, income, expenses, tuple(buckets[d])))

        income = sum(e.income for e in entries)
        expense = sum(e.expenses for e in entries)
        return DailyLedger(window, tuple(entries), Totals(income, expense, income - expense))

    def run(self, query: LedgerQuery, today: date | None = None) -> LedgerResult:
        """Dispatch on ``query.view``."""
        if query.view is ViewMode.DAILY:
            return self.daily(query, today)
        return self.list(query, today)

    def categories(self) -> list[str]:
        """Sorted distinct categories of stored transactions."""
        return sorted({t.category for t in self.transactions if t.category})

    def types(self) -> list[str]:
        """Sorted distinct declared types of stored transactions."""
        return sorted({t.type for t in self.transactions if t.type})


__all__ = [
    "DailyLedger",
    "DailyLedgerEntry",
    "Ledger",
    "LedgerQuery",
    "LedgerResult",
    "LedgerRows",
    "RangeTooLarge",
    "SortDirection",
    "SortField",
    "Totals",
    "ViewMode",
]
