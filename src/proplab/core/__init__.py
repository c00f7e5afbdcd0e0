"""
Core module for PropLab.

This module contains the records, normalizers and the ledger that every
projection and view is built on.
"""

from .dates import DateWindow, financial_year_window, parse_date
from .errors import ConfigError, PortfolioError, ProplabWarning
from .frequency import Frequency, NormalizedAmount, normalize, normalize_frequency
from .interfaces import Granularity, IProjector
from .kinds import K
from .ledger import (
    DailyLedger,
    DailyLedgerEntry,
    Ledger,
    LedgerQuery,
    LedgerRows,
    RangeTooLarge,
    SortDirection,
    SortField,
    Totals,
    ViewMode,
)
from .money import format_amount, quantize, to_number
from .portfolio_loader import Portfolio, load_portfolio
from .records import AcquisitionCost, Loan, LoanStatus, Property, Rental, Transaction
from .settings import DEFAULT_SETTINGS, EngineSettings
from .sign import TxnClass, classify, signed_amount

__all__ = [
    "AcquisitionCost",
    "ConfigError",
    "DEFAULT_SETTINGS",
    "DailyLedger",
    "DailyLedgerEntry",
    "DateWindow",
    "EngineSettings",
    "Frequency",
    "Granularity",
    "IProjector",
    "K",
    "Ledger",
    "LedgerQuery",
    "LedgerRows",
    "Loan",
    "LoanStatus",
    "NormalizedAmount",
    "Portfolio",
    "PortfolioError",
    "ProplabWarning",
    "Property",
    "RangeTooLarge",
    "Rental",
    "SortDirection",
    "SortField",
    "Totals",
    "Transaction",
    "TxnClass",
    "ViewMode",
    "classify",
    "financial_year_window",
    "format_amount",
    "load_portfolio",
    "normalize",
    "normalize_frequency",
    "parse_date",
    "quantize",
    "signed_amount",
    "to_number",
]
