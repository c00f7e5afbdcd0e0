"""Utilities for loading portfolios from YAML/JSON sources."""

from __future__ import annotations

import json
from collections.abc import Mapping
from copy import deepcopy
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .errors import PortfolioError, reset_warnings
from .records import Loan, Property, Rental, Transaction
from .settings import EngineSettings

__all__ = [
    "Portfolio",
    "load_portfolio",
]

_SECTIONS = ("properties", "rentals", "loans", "transactions")


@dataclass(slots=True)
class Portfolio:
    """Structured representation of a portfolio file."""

    properties: tuple[Property, ...] = ()
    rentals: tuple[Rental, ...] = ()
    loans: tuple[Loan, ...] = ()
    transactions: tuple[Transaction, ...] = ()
    settings: EngineSettings = field(default_factory=EngineSettings)
    source: str = "<memory>"

    def property(self, property_id: str) -> Property | None:
        for prop in self.properties:
            if prop.id == property_id:
                return prop
        return None

    def rentals_for(self, property_id: str) -> list[Rental]:
        """Nested and top-level leases of one property, each id once."""
        out: list[Rental] = []
        seen: set[str] = set()
        prop = self.property(property_id)
        nested = prop.rentals if prop is not None else ()
        for rental in (*nested, *self.rentals):
            if rental.property_id != property_id or rental.id in seen:
                continue
            seen.add(rental.id)
            out.append(rental)
        return out

    def loans_for(self, property_id: str) -> list[Loan]:
        return [ln for ln in self.loans if ln.property_id == property_id]

    def all_rentals(self) -> list[Rental]:
        """Every lease in the portfolio, nested ones included."""
        out: list[Rental] = []
        seen: set[str] = set()
        for rental in (*(r for p in self.properties for r in p.rentals), *self.rentals):
            if rental.id in seen:
                continue
            seen.add(rental.id)
            out.append(rental)
        return out

    def counts(self) -> dict[str, int]:
        return {
            "properties": len(self.properties),
            "rentals": len(self.all_rentals()),
            "loans": len(self.loans),
            "transactions": len(self.transactions),
        }


def load_portfolio(
    source: str | Path | Mapping[str, Any], *, format: str | None = None
) -> Portfolio:
    """
    Parse a portfolio from YAML/JSON/mapping into records.

    Structural problems (a section that is not a list, an entry that is not a
    mapping, an unreadable file) raise :class:`PortfolioError`; individual
    field values are fail-soft and handled by each record's ``from_dict``.

    **Example:**
        ```python
        portfolio = load_portfolio("portfolio.yaml")
        ledger = Ledger.from_portfolio(portfolio)
        ```
    """

    reset_warnings()
    mapping, label = _read_source(source, format=format)
    entries = {name: _ensure_entries(mapping.get(name), f"{label}::{name}") for name in _SECTIONS}
    settings_raw = mapping.get("settings")
    if settings_raw is not None and not isinstance(settings_raw, Mapping):
        raise PortfolioError(f"{label}::settings must be a mapping")

    return Portfolio(
        properties=tuple(Property.from_dict(d) for d in entries["properties"]),
        rentals=tuple(Rental.from_dict(d) for d in entries["rentals"]),
        loans=tuple(Loan.from_dict(d) for d in entries["loans"]),
        transactions=tuple(Transaction.from_dict(d) for d in entries["transactions"]),
        settings=EngineSettings.from_dict(dict(settings_raw or {})),
        source=label,
    )


def _read_source(
    source: str | Path | Mapping[str, Any], *, format: str | None
) -> tuple[dict[str, Any], str]:
    if isinstance(source, Mapping):
        return deepcopy(dict(source)), "<mapping>"

    path = Path(source)
    if not path.exists():
        raise FileNotFoundError(path)

    fmt = (format or path.suffix.lstrip(".")).lower()
    text = path.read_text(encoding="utf-8")
    try:
        if fmt in {"yaml", "yml", ""}:
            data = yaml.safe_load(text)
        elif fmt == "json":
            data = json.loads(text)
        else:
            raise PortfolioError(f"Unsupported portfolio format '{fmt}' for {path}")
    except (yaml.YAMLError, json.JSONDecodeError) as exc:
        raise PortfolioError(f"Could not parse {path}: {exc}") from exc

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise PortfolioError(f"Portfolio root must be a mapping (source={path})")
    return data, str(path)


def _ensure_entries(value: Any, ctx: str) -> list[Mapping[str, Any]]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise PortfolioError(f"{ctx} must be a list")
    for idx, entry in enumerate(value):
        if not isinstance(entry, Mapping):
            raise PortfolioError(f"{ctx}[{idx}] must be a mapping")
    return value
