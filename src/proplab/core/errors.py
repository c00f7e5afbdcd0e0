"""
Error classes for PropLab.

This module defines the exception and warning classes raised at the edges of the
engine: loading portfolio files and validating engine settings. Projection and
reconciliation never raise on bad records; they degrade to safe defaults and log.
"""

from __future__ import annotations

import warnings


class ConfigError(Exception):
    """
    Configuration error while building engine settings.

    **Common Causes:**
    - Non-positive daily view cap
    - Malformed financial year start (expected "MM-DD")
    - Unparseable open-end sentinel date

    **Example Usage:**
        ```python
        from proplab.core.errors import ConfigError
        from proplab.core.settings import EngineSettings

        try:
            EngineSettings.from_dict({"daily_view_cap_days": 0})
        except ConfigError as e:
            print(f"Configuration error: {e}")
        ```
    """

    pass


class PortfolioError(ValueError):
    """Raised when a portfolio file cannot be parsed or is structurally invalid."""


class ProplabWarning(UserWarning):
    """Warning for recoverable but ambiguous portfolio input."""


# Tracks (record_id, code) pairs already reported
_warned: set[tuple[str, str]] = set()


def warn_once(code: str, record_id: str, msg: str, *, category=ProplabWarning):
    """Warn once per (record_id, code) to avoid spam."""
    key = (record_id, code)
    if key not in _warned:
        _warned.add(key)
        warnings.warn(msg, category, stacklevel=3)


def reset_warnings() -> None:
    """Forget which (record_id, code) pairs were reported."""
    _warned.clear()
