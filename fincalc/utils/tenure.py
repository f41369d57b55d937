"""
utils/tenure.py -- Years + months tenure handling for FD and RD.

years_months_to_years(2, 6)   -> 2.5
years_months_to_months(2, 6)  -> 30
normalize_years_months(0, 15) -> (1, 3)
legacy_to_years_months(18, "months") -> (1, 6)
format_tenure(2, 6)           -> "2 years 6 months"
validate_years_months(y, m, max_months=None) -> error message or None
"""
from __future__ import annotations

import math
from typing import Any

from fincalc import config
from fincalc.models import TenureUnit

MSG_YEARS_NEGATIVE = "Years cannot be negative"
MSG_MONTHS_NEGATIVE = "Months cannot be negative"
MSG_MONTHS_RANGE = f"Months must be between 0 and {config.MAX_MONTHS_FIELD}"
MSG_TENURE_EMPTY = "Please enter at least 1 month"


def _as_int(value: Any) -> int:
    """Form inputs may be missing or strings; anything unparsable counts as 0."""
    if value is None or value == "":
        return 0
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return 0


def years_months_to_years(years: Any, months: Any) -> float:
    return _as_int(years) + _as_int(months) / 12.0


def years_months_to_months(years: Any, months: Any) -> int:
    return _as_int(years) * 12 + _as_int(months)


def normalize_years_months(years: Any, months: Any) -> tuple[int, int]:
    """Roll surplus months into years: (0, 15) -> (1, 3)."""
    return divmod(years_months_to_months(years, months), 12)


def legacy_to_years_months(tenure: float | None, unit: TenureUnit | str | None) -> tuple[int, int]:
    """
    Convert the old single-field tenure.
      months: rounded, then split        (18 months -> 1y 6m)
      years:  whole years + rounded rest (2.5 years -> 2y 6m)
    """
    if not tenure or tenure <= 0:
        return 0, 0
    if unit is not None and TenureUnit(unit) is TenureUnit.MONTHS:
        return divmod(int(round(tenure)), 12)
    years = math.floor(tenure)
    months = int(round((tenure - years) * 12))
    return years, (0 if months >= 12 else months)


def format_tenure(years: Any, months: Any) -> str:
    years, months = _as_int(years), _as_int(months)
    if years == 0 and months == 0:
        return "0 months"
    months_str = "1 month" if months == 1 else f"{months} months"
    years_str = "1 year" if years == 1 else f"{years} years"
    if years == 0:
        return months_str
    if months == 0:
        return years_str
    return f"{years_str} {months_str}"


def max_tenure_message(max_months: int) -> str:
    years, months = divmod(max_months, 12)
    return f"Maximum tenure is {format_tenure(years, months)} ({max_months} months)"


def validate_years_months(years: Any, months: Any, max_months: int | None = None) -> str | None:
    """First failing rule as a message, None when the tenure is usable."""
    years, months = _as_int(years), _as_int(months)
    if years < 0:
        return MSG_YEARS_NEGATIVE
    if months < 0:
        return MSG_MONTHS_NEGATIVE
    if months > config.MAX_MONTHS_FIELD:
        return MSG_MONTHS_RANGE
    if years == 0 and months == 0:
        return MSG_TENURE_EMPTY
    if max_months is not None and years * 12 + months > max_months:
        return max_tenure_message(max_months)
    return None


def resolve_fd_tenure(data: dict[str, Any]) -> tuple[int, int] | None:
    """
    (years, months) for FD-style input: tenureYears/tenureMonths first
    (normalised), then the legacy tenure + tenureUnit pair. None when the
    input carries no tenure at all.
    """
    if data.get("tenureYears") is not None or data.get("tenureMonths") is not None:
        return normalize_years_months(data.get("tenureYears"), data.get("tenureMonths"))
    if data.get("tenure") is not None and data.get("tenureUnit"):
        return legacy_to_years_months(float(data["tenure"]), data["tenureUnit"])
    return None
