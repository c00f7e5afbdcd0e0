"""
PropLab - Recurring cash-flow projection and reconciliation for property portfolios

PropLab turns a portfolio of investment properties (leases, loans and
hand-entered transactions) into one date-bounded ledger. Leases and loans are
expanded into synthetic rows at their own payment frequency, merged with the
stored rows, filtered, and summed so that every displayed total is exactly the
sum of the displayed rows.

Key Features:
- **Frequency Normalization**: Loose labels ("pw", "pcm", "per fortnight") become closed enums
- **Rental Projection**: Leases clipped to the query window, with a management-fee leg
- **Loan Amortization**: Interest, principal and fee rows from the true loan start
- **Single Sign Policy**: One function decides income vs expense for every figure
- **Daily View**: Per-day buckets with a window cap, exportable to CSV

Quick Start:
    ```python
    from proplab import Ledger, LedgerQuery, load_portfolio

    portfolio = load_portfolio("portfolio.yaml")
    ledger = Ledger.from_portfolio(portfolio)

    rows = ledger.list(LedgerQuery(date_from="2024-07-01", date_to="2025-06-30"))
    print(rows.totals)

    daily = ledger.daily(LedgerQuery(view="daily", date_from="2024-07-01",
                                     date_to="2024-09-30"))
    ```

Projectors:
    - RentalProjector: rent rows (income) and management fee rows (expense)
    - LoanAmortizationProjector: interest (expense), principal (excluded
      from profit/loss) and fee rows
"""

__version__ = "0.1.0"

from .core import (
    DEFAULT_SETTINGS,
    AcquisitionCost,
    ConfigError,
    DailyLedger,
    DailyLedgerEntry,
    DateWindow,
    EngineSettings,
    Frequency,
    Granularity,
    IProjector,
    K,
    Ledger,
    LedgerQuery,
    LedgerRows,
    Loan,
    LoanStatus,
    Portfolio,
    PortfolioError,
    ProplabWarning,
    Property,
    RangeTooLarge,
    Rental,
    Transaction,
    ViewMode,
    load_portfolio,
    normalize,
    signed_amount,
)
from .projection import (
    LoanAmortizationProjector,
    RentalProjector,
    default_projectors,
)

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
    "LoanAmortizationProjector",
    "LoanStatus",
    "Portfolio",
    "PortfolioError",
    "ProplabWarning",
    "Property",
    "RangeTooLarge",
    "Rental",
    "RentalProjector",
    "Transaction",
    "ViewMode",
    "default_projectors",
    "load_portfolio",
    "normalize",
    "signed_amount",
    "__version__",
]
