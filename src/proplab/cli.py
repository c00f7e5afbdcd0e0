"""
Command-line interface for PropLab.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import asdict
from datetime import date

from proplab import __version__
from proplab.core.kinds import K
from proplab.core.ledger import (
    DailyLedger,
    Ledger,
    LedgerQuery,
    RangeTooLarge,
    SortDirection,
    SortField,
    ViewMode,
)
from proplab.core.money import format_amount
from proplab.core.portfolio_loader import load_portfolio
from proplab.core.sign import signed_amount
from proplab.export import daily_export_filename, write_daily_csv
from proplab.metrics import portfolio_frame, portfolio_metrics

EXIT_RANGE_TOO_LARGE = 2


def _iso_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"invalid date {value!r} (YYYY-MM-DD)") from e


class _DateEncoder(json.JSONEncoder):
    """JSON encoder that writes dates as ISO strings."""

    def default(self, obj):
        if isinstance(obj, date):
            return obj.isoformat()
        return super().default(obj)


def _dump(data) -> None:
    json.dump(data, sys.stdout, indent=2, cls=_DateEncoder)
    sys.stdout.write("\n")


def _query_from_args(args, view: ViewMode) -> LedgerQuery:
    return LedgerQuery(
        property_id=args.property,
        type=args.type,
        category=args.category,
        date_from=args.date_from,
        date_to=args.date_to,
        view=view,
        sort_by=getattr(args, "sort", SortField.DATE.value),
        direction=getattr(args, "direction", SortDirection.DESC.value),
        include_projections=not args.no_projections,
    )


def _print_list(result, currency: str) -> None:
    for t in result.rows:
        marker = "*" if t.is_auto_generated else " "
        print(
            f"{t.date.isoformat()} {marker} {t.type:<12} {t.category[:20]:<20} "
            f"{t.description[:40]:<40} {format_amount(signed_amount(t), currency):>12}"
        )
    _print_totals(result.totals, currency)


def _print_daily(result: DailyLedger, currency: str) -> None:
    for e in result.entries:
        print(
            f"{e.date.isoformat()}  income {format_amount(e.income, currency):>12}  "
            f"expenses {format_amount(e.expenses, currency):>12}  "
            f"net {format_amount(e.net, currency):>12}  ({len(e.transactions)} rows)"
        )
    _print_totals(result.totals, currency)


def _print_totals(totals, currency: str) -> None:
    print(
        f"Totals: income {format_amount(totals.income, currency)}, "
        f"expenses {format_amount(totals.expense, currency)}, "
        f"net {format_amount(totals.net, currency)}"
    )


def cmd_example(_) -> int:
    """Print a minimal working portfolio JSON."""
    example = {
        "settings": {"financial_year_start": "07-01", "currency": "AUD"},
        "properties": [
            {
                "id": "oak",
                "name": "Oak Street",
                "address": "12 Oak Street",
                "basePropertyCost": 500000,
                "currentValue": 560000,
                "purchaseDate": "2023-03-15",
                "acquisitionCosts": [
                    {"description": "Stamp duty", "amount": 18000},
                    {"description": "Legal fees", "amount": 2000},
                ],
                "rentals": [
                    {
                        "id": "lease-1",
                        "tenantName": "A. Tenant",
                        "amount": 550,
                        "frequency": "weekly",
                        "leaseStartDate": "2023-04-01",
                        "managementFeePercentage": 7.5,
                    }
                ],
            }
        ],
        "loans": [
            {
                "id": "oak-loan",
                "propertyId": "oak",
                "lender": "Example Bank",
                "originalAmount": 400000,
                "interestRate": 6.1,
                "regularPaymentAmount": 2424,
                "frequency": "monthly",
                "startDate": "2023-03-15",
                "status": "active",
            }
        ],
        "transactions": [
            {
                "id": "t-1",
                "propertyId": "oak",
                "type": "insurance",
                "category": "Insurance",
                "description": "Landlord insurance",
                "amount": 1450,
                "date": "2024-08-01",
            }
        ],
    }
    _dump(example)
    return 0


def cmd_ledger(args) -> int:
    """Print ledger rows and totals for a window."""
    try:
        portfolio = load_portfolio(args.input)
        ledger = Ledger.from_portfolio(portfolio)
        result = ledger.run(_query_from_args(args, ViewMode(args.view)))
        if isinstance(result, RangeTooLarge):
            print(result.message, file=sys.stderr)
            return EXIT_RANGE_TOO_LARGE

        currency = portfolio.settings.currency
        if args.json:
            payload = {
                "window": {"from": result.window.start, "to": result.window.end},
                "totals": result.totals.as_dict(),
            }
            if isinstance(result, DailyLedger):
                payload["entries"] = [
                    {
                        "date": e.date,
                        "income": e.income,
                        "expenses": e.expenses,
                        "net": e.net,
                        "transactions": [t.to_dict() for t in e.transactions],
                    }
                    for e in result.entries
                ]
            else:
                payload["rows"] = [
                    {**t.to_dict(), "signed_amount": signed_amount(t)}
                    for t in result.rows
                ]
            _dump(payload)
        elif isinstance(result, DailyLedger):
            _print_daily(result, currency)
        else:
            _print_list(result, currency)
        return 0

    except Exception as e:
        print(f"Error building ledger: {e}", file=sys.stderr)
        return 1


def cmd_export_daily(args) -> int:
    """Write the daily ledger CSV."""
    try:
        portfolio = load_portfolio(args.input)
        ledger = Ledger.from_portfolio(portfolio)
        result = ledger.daily(_query_from_args(args, ViewMode.DAILY))
        if isinstance(result, RangeTooLarge):
            print(result.message, file=sys.stderr)
            return EXIT_RANGE_TOO_LARGE

        output = args.output
        if output is None:
            prop = portfolio.property(args.property) if args.property else None
            label = prop.label if prop is not None else args.property
            output = daily_export_filename(label, result.window.start, result.window.end)
        write_daily_csv(result, output, portfolio.settings.currency)
        print(f"Daily ledger saved to {output}")
        return 0

    except Exception as e:
        print(f"Error exporting daily ledger: {e}", file=sys.stderr)
        return 1


def cmd_summary(args) -> int:
    """Print portfolio metrics for a window."""
    try:
        portfolio = load_portfolio(args.input)
        metrics = portfolio_metrics(portfolio, args.date_from, args.date_to)
        if args.json:
            _dump(asdict(metrics))
            return 0

        currency = portfolio.settings.currency
        print(f"Properties:        {metrics.property_count}")
        print(f"Total value:       {format_amount(metrics.total_value, currency)}")
        print(f"Purchase price:    {format_amount(metrics.total_purchase_price, currency)}")
        print(f"Income:            {format_amount(metrics.total_income, currency)}")
        print(f"Expenses:          {format_amount(metrics.total_expenses, currency)}")
        print(f"Net cash flow:     {format_amount(metrics.net_cash_flow, currency)}")
        print(f"Average yield:     {metrics.average_yield_pct:.2f}%")
        print(f"Loan balances:     {format_amount(metrics.total_loan_amount, currency)}")
        print(f"Annual repayments: {format_amount(metrics.total_repayment, currency)}")
        print(
            f"Active loans:      {metrics.active_loan_count} "
            f"across {metrics.properties_with_loans} properties"
        )
        if args.by_property and metrics.property_count:
            print()
            print(portfolio_frame(portfolio, args.date_from, args.date_to).to_string())
        return 0

    except Exception as e:
        print(f"Error computing summary: {e}", file=sys.stderr)
        return 1


def cmd_validate(args) -> int:
    """Load a portfolio file and report what it contains."""
    try:
        portfolio = load_portfolio(args.input)
        for section, count in portfolio.counts().items():
            print(f"{section}: {count}")
        known = set(K.all_kinds())
        unknown = sorted(
            {
                t.type
                for t in portfolio.transactions
                if t.type and t.type.strip().lower() not in known
            }
        )
        if unknown:
            print(
                "Unrecognized transaction types (signed by amount): "
                + ", ".join(unknown)
            )
        print(f"{portfolio.source} is valid")
        return 0

    except Exception as e:
        print(f"Validation failed: {e}", file=sys.stderr)
        return 1


def _add_filters(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-i", "--input", required=True, help="Input portfolio file (YAML or JSON)"
    )
    parser.add_argument(
        "--from", dest="date_from", type=_iso_date, help="Window start (YYYY-MM-DD)"
    )
    parser.add_argument(
        "--to", dest="date_to", type=_iso_date, help="Window end (YYYY-MM-DD)"
    )
    parser.add_argument("--property", help="Only this property id (default: all)")
    parser.add_argument("--type", help="Only this transaction type")
    parser.add_argument("--category", help="Only this category")
    parser.add_argument(
        "--no-projections",
        action="store_true",
        help="Exclude projected rent and loan rows",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="proplab",
        description="PropLab - Property portfolio cash-flow ledger",
    )
    parser.add_argument("--version", action="version", version=f"PropLab {__version__}")
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )

    subparsers = parser.add_subparsers(
        dest="cmd", required=True, help="Available commands"
    )

    # Example command
    example_parser = subparsers.add_parser(
        "example", help="Print a minimal working portfolio JSON"
    )
    example_parser.set_defaults(func=cmd_example)

    # Ledger command
    ledger_parser = subparsers.add_parser(
        "ledger", help="Print ledger rows (or daily buckets) with totals"
    )
    _add_filters(ledger_parser)
    ledger_parser.add_argument(
        "--view", choices=[v.value for v in ViewMode], default=ViewMode.LIST.value
    )
    ledger_parser.add_argument(
        "--sort", choices=[s.value for s in SortField], default=SortField.DATE.value
    )
    ledger_parser.add_argument(
        "--direction",
        choices=[d.value for d in SortDirection],
        default=SortDirection.DESC.value,
    )
    ledger_parser.add_argument(
        "--json", action="store_true", help="Output in JSON format"
    )
    ledger_parser.epilog = """
Exit codes:
  0  success
  1  error reading the portfolio
  2  daily view window longer than the daily cap (400 days by default)
    """
    ledger_parser.set_defaults(func=cmd_ledger)

    # Export command
    export_parser = subparsers.add_parser(
        "export-daily", help="Write the daily ledger CSV"
    )
    _add_filters(export_parser)
    export_parser.add_argument(
        "-o", "--output", help="Output CSV file (default: DailyLedger_<...>.csv)"
    )
    export_parser.set_defaults(func=cmd_export_daily)

    # Summary command
    summary_parser = subparsers.add_parser("summary", help="Print portfolio metrics")
    summary_parser.add_argument(
        "-i", "--input", required=True, help="Input portfolio file (YAML or JSON)"
    )
    summary_parser.add_argument("--from", dest="date_from", type=_iso_date)
    summary_parser.add_argument("--to", dest="date_to", type=_iso_date)
    summary_parser.add_argument(
        "--by-property", action="store_true", help="Also print one row per property"
    )
    summary_parser.add_argument(
        "--json", action="store_true", help="Output in JSON format"
    )
    summary_parser.set_defaults(func=cmd_summary)

    # Validate command
    validate_parser = subparsers.add_parser(
        "validate", help="Validate a portfolio file"
    )
    validate_parser.add_argument(
        "-i", "--input", required=True, help="Input portfolio file (YAML or JSON)"
    )
    validate_parser.set_defaults(func=cmd_validate)

    return parser


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    sys.exit(args.func(args))


if __name__ == "__main__":
    main()
