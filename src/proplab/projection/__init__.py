"""
Recurring-event projectors for PropLab.

Projectors turn schedules (leases, loans) into synthetic transactions dated
inside a query window. Every projector satisfies
:class:`proplab.core.interfaces.IProjector`, so the ledger can run any list of
them without knowing what they project.
"""

from __future__ import annotations

from proplab.core.interfaces import IProjector
from proplab.core.settings import DEFAULT_SETTINGS, EngineSettings

from .loan import AmortizationPeriod, LoanAmortizationProjector, annuity_payment
from .rental import RentalProjector


def default_projectors(
    settings: EngineSettings = DEFAULT_SETTINGS,
) -> list[IProjector]:
    """Rental and loan projectors sharing one set of settings."""
    return [RentalProjector(settings), LoanAmortizationProjector(settings)]


__all__ = [
    "AmortizationPeriod",
    "LoanAmortizationProjector",
    "RentalProjector",
    "annuity_payment",
    "default_projectors",
]
