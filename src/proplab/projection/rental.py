"""
Rental income projection.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from datetime import date

from proplab.core.dates import DateWindow, clip_window, day_range
from proplab.core.frequency import (
    Frequency,
    daily_amount,
    first_step_on_or_after,
    normalize_frequency,
    step_date,
)
from proplab.core.interfaces import Granularity
from proplab.core.kinds import K
from proplab.core.money import to_number
from proplab.core.records import Loan, Property, Rental, Transaction
from proplab.core.settings import DEFAULT_SETTINGS, EngineSettings

logger = logging.getLogger(__name__)


def _merge_rentals(
    prop: Property, rentals: Iterable[Rental]
) -> list[Rental]:
    """Nested leases first, then loose leases for the property; each id once."""
    seen: set[str] = set()
    merged: list[Rental] = []
    nested = [r for r in prop.rentals if r.property_id in (None, prop.id)]
    loose = [r for r in rentals if r.property_id == prop.id]
    for rental in nested + loose:
        key = rental.id or f"#{id(rental)}"
        if key in seen:
            continue
        seen.add(key)
        merged.append(rental)
    return merged


class RentalProjector:
    """
    Expand leases into synthetic rent rows (kind: rental projection).

    Each lease is clipped to ``[max(lease start, window start),
    min(lease end or open-end sentinel, window end)]`` and stepped either at
    its native frequency, anchored to the lease start, or one row per calendar
    day at its daily-equivalent amount.

    **Fee leg:** when ``management_fee_percentage`` is positive every rent row
    is followed by an ``expense`` row for ``rent * pct / 100`` on the same date.

    **Example:**
        ```python
        projector = RentalProjector()
        rows = projector.project_property(
            prop, [rental], DateWindow(date(2024, 7, 1), date(2024, 7, 31))
        )
        ```

    Note:
        Overlapping leases on one property are projected independently; their
        rows are never merged.
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
        rows: list[Transaction] = []
        for prop in properties:
            rows.extend(
                self.project_property(prop, rentals, window, granularity)
            )
        return rows

    def project_property(
        self,
        prop: Property,
        rentals: Iterable[Rental] = (),
        window: DateWindow | None = None,
        granularity: Granularity = Granularity.PERIOD,
    ) -> list[Transaction]:
        """
        Project every lease of one property into ``window``.

        Args:
            prop: Owning property; its nested ``rentals`` are included
            rentals: Extra leases; those belonging to another property are skipped
            window: Inclusive query window
            granularity: Native periods or calendar days

        Returns:
            Rows sorted by date; rows on the same date keep lease order
        """
        if window is None or window.is_empty:
            return []
        rows: list[Transaction] = []
        for rental in _merge_rentals(prop, rentals):
            rows.extend(self.project_rental(prop, rental, window, granularity))
        rows.sort(key=lambda t: t.date)
        return rows

    def project_rental(
        self,
        prop: Property,
        rental: Rental,
        window: DateWindow,
        granularity: Granularity = Granularity.PERIOD,
    ) -> list[Transaction]:
        """Project a single lease; bad leases yield no rows."""
        amount = to_number(rental.amount)
        if rental.start_date is None:
            logger.warning("Rental %s has no usable start date; skipped", rental.id)
            return []
        if amount <= 0:
            logger.warning(
                "Rental %s has non-positive amount %r; skipped", rental.id, rental.amount
            )
            return []

        end = rental.end_date or self.settings.open_end_date
        if end < rental.start_date:
            logger.debug("Rental %s ends before it starts", rental.id)
            return []

        span = clip_window(rental.start_date, end, window)
        if span.is_empty:
            return []

        freq = normalize_frequency(rental.frequency, self.settings.default_frequency)
        fee_pct = max(to_number(rental.management_fee_percentage), 0.0)

        if granularity is Granularity.DAY:
            per_day = daily_amount(amount, freq, self.settings.days_per_year)
            dates = day_range(span)
            row_amount = per_day
        else:
            dates = list(self._period_dates(rental.start_date, freq, span))
            row_amount = amount

        rows: list[Transaction] = []
        for d in dates:
            rows.append(
                self._rent_row(prop, rental, d, row_amount, amount, freq, granularity)
            )
            if fee_pct > 0:
                rows.append(
                    self._fee_row(
                        prop, rental, d, row_amount, amount, fee_pct, freq, granularity
                    )
                )
        logger.debug(
            "Rental %s: %d rows in %s..%s", rental.id, len(rows), span.start, span.end
        )
        return rows

    @staticmethod
    def _period_dates(anchor: date, freq: Frequency, span: DateWindow):
        k = first_step_on_or_after(anchor, freq, span.start)
        d = step_date(anchor, freq, k)
        while d <= span.end:
            yield d
            k += 1
            d = step_date(anchor, freq, k)

    def _rent_row(
        self,
        prop: Property,
        rental: Rental,
        d: date,
        row_amount: float,
        original: float,
        freq: Frequency,
        granularity: Granularity,
    ) -> Transaction:
        return Transaction(
            id=f"rental-{rental.id}-{d.isoformat()}",
            property_id=prop.id,
            type=K.INCOME,
            category=self.settings.rent_category,
            description=f"Rent - {rental.label}",
            amount=row_amount,
            date=d,
            payee=rental.tenant_name,
            is_auto_generated=True,
            original_amount=original,
            original_frequency=freq.value,
            daily_equivalent=row_amount if granularity is Granularity.DAY else None,
            source_id=rental.id,
        )

    def _fee_row(
        self,
        prop: Property,
        rental: Rental,
        d: date,
        row_amount: float,
        original: float,
        fee_pct: float,
        freq: Frequency,
        granularity: Granularity,
    ) -> Transaction:
        fee = row_amount * fee_pct / 100.0
        return Transaction(
            id=f"rental-{rental.id}-fee-{d.isoformat()}",
            property_id=prop.id,
            type=K.EXPENSE,
            category=self.settings.management_fee_category,
            description=f"Management fee ({fee_pct:g}%) - {rental.label}",
            amount=fee,
            date=d,
            is_auto_generated=True,
            original_amount=original * fee_pct / 100.0,
            original_frequency=freq.value,
            daily_equivalent=fee if granularity is Granularity.DAY else None,
            source_id=rental.id,
        )


__all__ = ["RentalProjector"]
