"""
Projector interface protocol for PropLab.
Defines the contract that every recurring-event projector satisfies.
"""

from __future__ import annotations

from collections.abc import Sequence
from enum import Enum
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from .dates import DateWindow
    from .records import Loan, Property, Rental, Transaction


class Granularity(str, Enum):
    """Step size for synthetic rows."""

    PERIOD = "period"  # one row per native payment period
    DAY = "day"  # one row per calendar day at the daily-equivalent amount


@runtime_checkable
class IProjector(Protocol):
    """
    Contract for recurring-event projectors.
    Responsibilities: expand schedules into synthetic transactions inside a window.
    """

    def project(
        self,
        properties: Sequence[Property],
        rentals: Sequence[Rental],
        loans: Sequence[Loan],
        window: DateWindow,
        granularity: Granularity = Granularity.PERIOD,
    ) -> list[Transaction]:
        """
        Produce synthetic rows dated inside ``window``.

        Must be pure: no mutation of the inputs and no dependence on anything
        but the arguments and the projector's settings. Bad records yield no
        rows rather than raising.
        """
        ...


__all__ = ["Granularity", "IProjector"]
