"""
utils/growth.py -- Maturity formulas for every instrument.

All rates are decimals (0.071 for 7.1%). Every function returns 0.0 when a
required input is missing or non-positive, so a half-filled form never
raises; callers decide whether a zero means "no result yet".

compound_interest(P, r, t, f)          -> P * (1 + r/f)^(f*t)
sip_future_value(M, r, months)         -> M * ((1+i)^n - 1)/i * (1+i), i = r/12
step_up_sip_future_value(M, s, months, r)
ppf_future_value(Y, r, years)          -> Y * ((1+r)^n - 1)/r * (1+r)
step_up_ppf_future_value(Y, s, r, years, cap)
fd_maturity(P, r, years, frequency)    -> compounding per CompoundingFrequency
rd_monthly_rate(r, frequency), rd_maturity(M, r, months, frequency)
nsc_maturity, scss_maturity, pomis_maturity  -> fixed-schedule formulas
sgb_components / sgb_maturity          -> gold leg + semi-annual 2.5% coupon
nps_equity_cap, cap_allocation, nps_weighted_return, nps_rate
reits_maturity                         -> dividend + appreciation reinvested
cagr(begin, end, years)

Deposits are made at the start of each period (annuity-due): the first
monthly SIP instalment compounds for the full tenure.
"""
from __future__ import annotations

import math

import numpy as np

from fincalc import config
from fincalc.models import CompoundingFrequency

# Compounding periods per year for FD payouts
FD_PERIODS: dict[CompoundingFrequency, int] = {
    CompoundingFrequency.QUARTERLY: 4,
    CompoundingFrequency.MONTHLY: 12,
    CompoundingFrequency.ANNUALLY: 1,
}

NPS_BUCKETS = ("equity", "corporateBonds", "governmentBonds", "alternative")


# ---------------------------------------------------------------------------
# Building blocks
# ---------------------------------------------------------------------------

def compound_interest(principal: float, rate: float, years: float, frequency: int = 1) -> float:
    """A = P * (1 + r/f)^(f*t)."""
    if not principal or principal <= 0 or years <= 0 or frequency <= 0:
        return 0.0
    return principal * (1.0 + rate / frequency) ** (frequency * years)


def annuity_due(payment: float, period_rate: float, periods: float) -> float:
    """
    Future value of `periods` equal payments made at the start of each period.

      FV = PMT * ((1+i)^n - 1) / i * (1+i)      (i > 0)
      FV = PMT * n                              (i == 0)
    """
    if not payment or payment <= 0 or periods <= 0:
        return 0.0
    if period_rate == 0:
        return payment * periods
    growth = (1.0 + period_rate) ** periods
    return payment * (growth - 1.0) / period_rate * (1.0 + period_rate)


def project_value(current_value: float, rate: float, years: float) -> float:
    """Grow an existing holding at an annual rate; non-positive years keep it as is."""
    if not current_value or current_value <= 0:
        return 0.0
    if years <= 0:
        return current_value
    return current_value * (1.0 + rate) ** years


def step_up_schedule(base: float, step_up: float, years: int, cap: float | None = None) -> np.ndarray:
    """
    Contribution for each year: base * (1 + step_up)^k, k = 0..years-1.
    Optional per-year cap (SSY allows at most 1.5L a year).
    """
    if years <= 0 or not base or base <= 0:
        return np.zeros(0, dtype=np.float64)
    schedule = base * (1.0 + step_up) ** np.arange(years, dtype=np.float64)
    if cap is not None:
        schedule = np.minimum(schedule, cap)
    return schedule


def cagr(begin: float, end: float, years: float) -> float:
    """(end/begin)^(1/years) - 1; 0.0 when undefined."""
    if not begin or begin <= 0 or not end or end <= 0 or years <= 0:
        return 0.0
    return (end / begin) ** (1.0 / years) - 1.0


# ---------------------------------------------------------------------------
# Periodic deposits -- SIP, PPF, SSY, RD
# ---------------------------------------------------------------------------

def sip_future_value(monthly: float, annual_rate: float, months: float) -> float:
    """SIP maturity with the nominal annual rate split evenly across months (r/12)."""
    return annuity_due(monthly, annual_rate / 12.0, months)


def step_up_sip_future_value(monthly: float, step_up: float, months: int, annual_rate: float) -> float:
    """
    SIP whose instalment grows by `step_up` every 12 months.

    Instalments are paid at the start of each month (annuity-due), the same
    convention as sip_future_value, so a zero step-up gives the plain SIP.

    Block k (12 instalments of monthly*(1+s)^k, the last block may be short)
    is accumulated as an annuity-due and then compounded to maturity.
    """
    months = int(months)
    if not monthly or monthly <= 0 or months <= 0:
        return 0.0
    i = annual_rate / 12.0
    blocks = math.ceil(months / 12)
    amounts = step_up_schedule(monthly, step_up, blocks)
    starts = np.arange(blocks) * 12
    sizes = np.minimum(12, months - starts)
    if i == 0:
        return float(np.sum(amounts * sizes))
    block_fv = amounts * ((1.0 + i) ** sizes - 1.0) / i * (1.0 + i)
    remaining = months - starts - sizes
    return float(np.sum(block_fv * (1.0 + i) ** remaining))


def ppf_future_value(yearly: float, rate: float, years: int) -> float:
    """PPF / SSY maturity: yearly deposit at the start of each year, annual compounding."""
    return annuity_due(yearly, rate, years)


def step_up_ppf_future_value(
    yearly: float,
    step_up: float,
    rate: float,
    years: int,
    cap: float | None = None,
) -> float:
    """Each year's (capped) deposit compounds for the years left, including its own."""
    schedule = step_up_schedule(yearly, step_up, int(years), cap)
    if schedule.size == 0:
        return 0.0
    exponents = np.arange(int(years), 0, -1, dtype=np.float64)
    return float(np.sum(schedule * (1.0 + rate) ** exponents))


def rd_monthly_rate(rate: float, frequency: CompoundingFrequency | str) -> float:
    """
    Effective monthly rate for a recurring deposit.

      monthly / cumulative -> r/12
      quarterly            -> (1 + r/4)^(1/3) - 1
      annually             -> (1 + r)^(1/12) - 1
    """
    frequency = CompoundingFrequency(frequency)
    if frequency is CompoundingFrequency.QUARTERLY:
        return (1.0 + rate / 4.0) ** (1.0 / 3.0) - 1.0
    if frequency is CompoundingFrequency.ANNUALLY:
        return (1.0 + rate) ** (1.0 / 12.0) - 1.0
    return rate / 12.0


def rd_maturity(monthly: float, rate: float, months: int, frequency: CompoundingFrequency | str) -> float:
    """Every deposit compounds from its own month to maturity at the effective monthly rate."""
    return annuity_due(monthly, rd_monthly_rate(rate, frequency), months)


# ---------------------------------------------------------------------------
# Lumpsum deposits -- FD, NSC, SCSS, POMIS, 54EC
# ---------------------------------------------------------------------------

def fd_maturity(
    principal: float,
    rate: float,
    years: float,
    frequency: CompoundingFrequency | str = CompoundingFrequency.QUARTERLY,
) -> float:
    """
    FD maturity value.

    cumulative pays everything at maturity: simple interest for deposits
    under a year, yearly compounding from one year onwards.
    """
    if not principal or principal <= 0 or years <= 0:
        return 0.0
    frequency = CompoundingFrequency(frequency)
    if frequency is CompoundingFrequency.CUMULATIVE:
        if years < 1:
            return principal * (1.0 + rate * years)
        return compound_interest(principal, rate, years, 1)
    return compound_interest(principal, rate, years, FD_PERIODS[frequency])


def nsc_maturity(principal: float, rate: float, years: float = config.NSC_TENURE) -> float:
    return compound_interest(principal, rate, years, 1)


def payout_interest(principal: float, rate: float, payouts_per_year: int) -> float:
    """Interest paid out each period; it is never added back to the principal."""
    if not principal or principal <= 0:
        return 0.0
    return principal * rate / payouts_per_year


def scss_maturity(principal: float, rate: float, years: float) -> float:
    """Principal + quarterly payouts over the whole term."""
    if not principal or principal <= 0 or years <= 0:
        return 0.0
    return principal + payout_interest(principal, rate, 4) * years * 4


def pomis_maturity(principal: float, rate: float, years: float = config.POMIS_TENURE) -> float:
    """Principal + monthly payouts over the whole term."""
    if not principal or principal <= 0 or years <= 0:
        return 0.0
    return principal + payout_interest(principal, rate, 12) * years * 12


# ---------------------------------------------------------------------------
# Market-linked -- SGB, NPS, REITs
# ---------------------------------------------------------------------------

def sgb_components(
    principal: float,
    gold_rate: float,
    years: float,
    fixed_rate: float = config.SGB_CONFIG["fixed_rate"] / 100.0,
) -> tuple[float, float]:
    """
    Returns (gold_value, coupon_amount):
      gold_value    = P * (1 + g)^t
      coupon_amount = P * ((1 + f/2)^(2t) - 1)
    """
    if not principal or principal <= 0 or years <= 0:
        return 0.0, 0.0
    gold_value = principal * (1.0 + gold_rate) ** years
    coupon = principal * ((1.0 + fixed_rate / 2.0) ** (2.0 * years) - 1.0)
    return gold_value, coupon


def sgb_maturity(
    principal: float,
    gold_rate: float,
    years: float,
    fixed_rate: float = config.SGB_CONFIG["fixed_rate"] / 100.0,
) -> float:
    gold_value, coupon = sgb_components(principal, gold_rate, years, fixed_rate)
    return gold_value + coupon


def nps_equity_cap(age: int) -> float:
    """
    Highest equity share allowed at `age`:
      age <= 35  -> 1.00
      36 .. 50   -> max(0.75, 1.00 - (age - 35) * 0.025)
      > 50       -> max(0.50, 0.75 - (age - 50) * 0.025)
    Rounded up to whole percentage points.
    """
    path = config.NPS_GLIDE_PATH
    cap = 1.0
    if path["full_equity_age"] < age <= path["mid_age"]:
        cap = max(path["mid_cap"], 1.0 - (age - path["full_equity_age"]) * path["yearly_step"])
    elif age > path["mid_age"]:
        cap = max(path["floor_cap"], path["mid_cap"] - (age - path["mid_age"]) * path["yearly_step"])
    return math.ceil(round(cap * 100, 6)) / 100


def cap_allocation(allocation: dict[str, float], age: int) -> dict[str, float]:
    """
    Clamp equity to the age cap and spread the excess over the other buckets
    in proportion to their weights (all to government bonds if they are empty).
    """
    capped = dict(allocation)
    limit = nps_equity_cap(age)
    if capped.get("equity", 0.0) <= limit:
        return capped
    excess = capped["equity"] - limit
    capped["equity"] = limit
    others = [b for b in NPS_BUCKETS if b != "equity"]
    total_other = sum(capped.get(b, 0.0) for b in others)
    if total_other > 0:
        for bucket in others:
            capped[bucket] = capped.get(bucket, 0.0) + excess * (capped.get(bucket, 0.0) / total_other)
    else:
        capped["governmentBonds"] = capped.get("governmentBonds", 0.0) + excess
    return capped


def nps_weighted_return(allocation: dict[str, float], returns: dict[str, float]) -> float:
    """Sum of allocation * return across the four buckets (all decimals)."""
    return sum(allocation.get(b, 0.0) * returns.get(b, 0.0) for b in NPS_BUCKETS)


def nps_rate(
    allocation: dict[str, float],
    returns: dict[str, float],
    age: int,
    years: int,
    use_age_caps: bool = False,
) -> tuple[float, dict[str, float]]:
    """
    Blended NPS rate and the allocation in force today.

    Without age caps the rate is the weighted return of the capped allocation.
    With age caps the allocation walks the glide path year by year and the
    rate is the average of the yearly weighted returns.
    """
    current = cap_allocation(allocation, age)
    if not use_age_caps or years <= 0:
        return nps_weighted_return(current, returns), current
    walking = dict(current)
    yearly = np.empty(int(years), dtype=np.float64)
    for year in range(int(years)):
        walking = cap_allocation(walking, age + year)
        yearly[year] = nps_weighted_return(walking, returns)
    return float(yearly.mean()), current


def nps_future_value(monthly: float, rate: float, years: float) -> float:
    return sip_future_value(monthly, rate, years * 12)


def reits_maturity(amount: float, dividend_yield: float, appreciation: float, years: int) -> float:
    """Dividends and price appreciation are both reinvested every year."""
    if not amount or amount <= 0 or years <= 0:
        return 0.0
    return amount * (1.0 + dividend_yield + appreciation) ** years
