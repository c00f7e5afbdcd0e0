"""
Engine settings for PropLab.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, fields, replace
from datetime import date
from typing import Any

from .errors import ConfigError, warn_once
from .frequency import Frequency

_FY_START = re.compile(r"^(\d{2})-(\d{2})$")


@dataclass(frozen=True)
class EngineSettings:
    """
    Tunables shared by every projector and the reconciler.

    Attributes:
        daily_view_cap_days: Largest inclusive day span the daily view expands
        open_end_date: Sentinel used for open-ended leases and loans
        financial_year_start: "MM-DD" start of the financial year (default window)
        days_per_year: Day-count basis for daily-equivalent amounts
        default_frequency: Fallback for unrecognized frequency labels
        balance_tolerance: Loan balance at or below this is treated as repaid
        rent_category: Category stamped on projected rent rows
        management_fee_category: Category stamped on projected fee rows
        currency: Display currency (never converted)
    """

    daily_view_cap_days: int = 400
    open_end_date: date = date(2099, 12, 31)
    financial_year_start: str = "07-01"
    days_per_year: int = 365
    default_frequency: Frequency = Frequency.WEEKLY
    balance_tolerance: float = 0.005
    rent_category: str = "Rent"
    management_fee_category: str = "Management Fees"
    currency: str = "USD"

    def __post_init__(self):
        if self.daily_view_cap_days <= 0:
            raise ConfigError("daily_view_cap_days must be > 0")
        if self.days_per_year <= 0:
            raise ConfigError("days_per_year must be > 0")
        if self.balance_tolerance < 0:
            raise ConfigError("balance_tolerance must be >= 0")
        self.fy_start_month_day()

    def fy_start_month_day(self) -> tuple[int, int]:
        """Return (month, day) of the financial year start."""
        match = _FY_START.match(str(self.financial_year_start))
        if not match:
            raise ConfigError(
                f"financial_year_start must be 'MM-DD', got {self.financial_year_start!r}"
            )
        month, day = int(match.group(1)), int(match.group(2))
        try:
            date(2001, month, day)
        except ValueError as e:
            raise ConfigError(
                f"financial_year_start {self.financial_year_start!r} is not a valid date"
            ) from e
        return month, day

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> EngineSettings:
        """Build settings from a mapping, ignoring (and warning on) unknown keys."""
        if not data:
            return cls()
        if not isinstance(data, dict):
            raise ConfigError(f"settings must be a mapping, got {type(data).__name__}")

        known = {f.name for f in fields(cls)}
        kwargs: dict[str, Any] = {}
        for key, value in data.items():
            if key not in known:
                warn_once("UNKNOWN_SETTING", key, f"Ignoring unknown setting '{key}'.")
                continue
            kwargs[key] = value

        if "open_end_date" in kwargs and not isinstance(kwargs["open_end_date"], date):
            try:
                kwargs["open_end_date"] = date.fromisoformat(str(kwargs["open_end_date"]))
            except ValueError as e:
                raise ConfigError(f"open_end_date: {e}") from e
        if "default_frequency" in kwargs:
            try:
                kwargs["default_frequency"] = Frequency(kwargs["default_frequency"])
            except ValueError as e:
                raise ConfigError(f"default_frequency: {e}") from e
        for key in ("daily_view_cap_days", "days_per_year"):
            if key in kwargs:
                try:
                    kwargs[key] = int(kwargs[key])
                except (TypeError, ValueError) as e:
                    raise ConfigError(f"{key} must be an integer") from e
        if "balance_tolerance" in kwargs:
            try:
                kwargs["balance_tolerance"] = float(kwargs["balance_tolerance"])
            except (TypeError, ValueError) as e:
                raise ConfigError("balance_tolerance must be a number") from e

        return cls(**kwargs)

    def with_overrides(self, **overrides: Any) -> EngineSettings:
        """Return a copy with selected fields replaced."""
        return replace(self, **overrides)


DEFAULT_SETTINGS = EngineSettings()
