"""
utils/inflation.py -- Real (inflation-adjusted) rates and values.

real_rate(nominal, inflation)          -> (1 + n) / (1 + i) - 1
real_value(value, inflation, years)    -> value / (1 + i)^years
real_figures(...)                      -> the four real fields of a result

The nominal maturity is deflated directly; it is never re-compounded at
the real rate. The real rate is reported for display only, so a positive
real rate does not imply the real maturity exceeds the amount invested.
"""
from __future__ import annotations

from typing import Any

import numpy as np

from fincalc.models import _round2


def real_rate(nominal_rate: float, inflation_rate: float) -> float:
    """Fisher relation, both arguments and the result as decimals."""
    return (1.0 + nominal_rate) / (1.0 + inflation_rate) - 1.0


def real_value(value: float, inflation_rate: float, years: float) -> float:
    """Today's purchasing power of `value` received after `years`."""
    if inflation_rate == 0 or years <= 0:
        return value
    return value / (1.0 + inflation_rate) ** years


def real_values(values: list[float], inflation_rate: float, years: float) -> list[float]:
    """Vectorised real_value for several amounts sharing one horizon."""
    if not values:
        return []
    arr = np.asarray(values, dtype=np.float64)
    if inflation_rate == 0 or years <= 0:
        return arr.tolist()
    return (arr / (1.0 + inflation_rate) ** years).tolist()


def real_figures(
    maturity: float,
    invested: float,
    post_tax: float,
    nominal_rate: float,
    inflation_rate: float,
    years: float,
) -> dict[str, Any]:
    """
    Real counterparts of a calculator result:
      realReturnRate      -- % p.a., from real_rate
      realMaturityAmount  -- maturity deflated over the tenure
      realReturns         -- realMaturityAmount - invested
      actualSpendingPower -- post-tax amount deflated over the tenure
    """
    real_maturity, spending_power = real_values([maturity, post_tax], inflation_rate, years)
    return {
        "realReturnRate": _round2(real_rate(nominal_rate, inflation_rate) * 100),
        "realMaturityAmount": _round2(real_maturity),
        "realReturns": _round2(real_maturity - invested),
        "actualSpendingPower": _round2(spending_power),
    }
