"""
utils/evolution.py -- Period-by-period ledgers for every instrument.

Each generator replays the same rule used in utils/growth.py one period at
a time, so the last closing balance equals the closed-form maturity.

Rows are yearly. A tenure under 12 months switches to monthly rows, and
only those rows carry a label ("Month N").

Rounding: opening, contribution and closing are rounded to 2 dp and the
row's interest is derived from those rounded figures, so
  sum(contribution) + sum(interest) == final closing balance
holds exactly, and every closing balance is the next row's opening.
"""
from __future__ import annotations

import math

from fincalc.models import CompoundingFrequency, Period, _round2
from fincalc.utils import growth


def _row(
    period: int,
    opening: float,
    contribution: float,
    closing: float,
    label: str | None = None,
    breakdown: dict[str, float] | None = None,
) -> Period:
    opening = _round2(opening)
    contribution = _round2(contribution)
    closing = _round2(closing)
    return Period(
        period=period,
        label=label,
        openingBalance=opening,
        contribution=contribution,
        interest=round(closing - opening - contribution, 2),
        closingBalance=closing,
        breakdown=breakdown,
    )


def _month_label(month: int) -> str:
    return f"Month {month}"


# ---------------------------------------------------------------------------
# Lumpsum instruments
# ---------------------------------------------------------------------------

def lumpsum_evolution(principal: float, rate: float, years: int) -> list[Period]:
    """Annual compounding of a one-time investment (NSC, 54EC, equity/ELSS/fund lumpsum)."""
    if not principal or principal <= 0 or years <= 0:
        return []
    rows: list[Period] = []
    opening = 0.0
    for year in range(1, int(years) + 1):
        closing = growth.compound_interest(principal, rate, year, 1)
        rows.append(_row(year, opening, principal if year == 1 else 0.0, closing))
        opening = rows[-1].closingBalance
    return rows


def fd_evolution(
    principal: float,
    rate: float,
    years: float,
    frequency: CompoundingFrequency | str = CompoundingFrequency.QUARTERLY,
) -> list[Period]:
    """
    FD ledger. Under a year -> one row per month. Otherwise one row per year,
    the last row covering any leftover months (2y 6m -> rows 1, 2, 3).
    """
    if not principal or principal <= 0 or years <= 0:
        return []
    rows: list[Period] = []
    opening = 0.0
    if years < 1:
        months = max(1, round(years * 12))
        for month in range(1, months + 1):
            closing = growth.fd_maturity(principal, rate, month / 12.0, frequency)
            rows.append(_row(month, opening, principal if month == 1 else 0.0, closing,
                             label=_month_label(month)))
            opening = rows[-1].closingBalance
        return rows

    for year in range(1, math.ceil(round(years, 9)) + 1):
        closing = growth.fd_maturity(principal, rate, min(float(year), years), frequency)
        rows.append(_row(year, opening, principal if year == 1 else 0.0, closing))
        opening = rows[-1].closingBalance
    return rows


def payout_evolution(principal: float, rate: float, years: int, payouts_per_year: int) -> list[Period]:
    """
    SCSS / POMIS ledger. Interest is paid out, but the closing balance is shown
    as principal + interest received to date.
    """
    if not principal or principal <= 0 or years <= 0:
        return []
    yearly_interest = growth.payout_interest(principal, rate, payouts_per_year) * payouts_per_year
    rows: list[Period] = []
    opening = 0.0
    for year in range(1, int(years) + 1):
        closing = principal + yearly_interest * year
        rows.append(_row(year, opening, principal if year == 1 else 0.0, closing))
        opening = rows[-1].closingBalance
    return rows


def sgb_evolution(principal: float, gold_rate: float, years: int, fixed_rate: float) -> list[Period]:
    """Each row splits the year's gain into gold appreciation and the coupon."""
    if not principal or principal <= 0 or years <= 0:
        return []
    rows: list[Period] = []
    opening = 0.0
    prev_gold = principal
    for year in range(1, int(years) + 1):
        gold_value, coupon = growth.sgb_components(principal, gold_rate, year, fixed_rate)
        row = _row(year, opening, principal if year == 1 else 0.0, gold_value + coupon)
        gold_gain = _round2(gold_value - prev_gold)
        row.breakdown = {
            "goldAppreciation": gold_gain,
            "coupon": round(row.interest - gold_gain, 2),
        }
        rows.append(row)
        opening = row.closingBalance
        prev_gold = gold_value
    return rows


def reits_evolution(amount: float, dividend_yield: float, appreciation: float, years: int) -> list[Period]:
    """Dividend and capital gain both computed on the opening value, then reinvested."""
    if not amount or amount <= 0 or years <= 0:
        return []
    rows: list[Period] = []
    value = amount
    opening = 0.0
    for year in range(1, int(years) + 1):
        dividend = value * dividend_yield
        gain = value * appreciation
        value = value + dividend + gain
        row = _row(year, opening, amount if year == 1 else 0.0, value)
        dividend_r = _round2(dividend)
        row.breakdown = {"dividend": dividend_r, "capitalGain": round(row.interest - dividend_r, 2)}
        rows.append(row)
        opening = row.closingBalance
    return rows


def ipo_evolution(initial: float, listing_value: float, rate: float, years: float) -> list[Period]:
    """
    Period 0 is the listing day (allotment cost -> listing value); after that
    the listing value compounds yearly at the expected CAGR.
    """
    if not initial or initial <= 0 or listing_value <= 0:
        return []
    rows = [_row(0, 0.0, initial, listing_value)]
    if years <= 0 or rate <= 0:
        return rows
    opening = rows[0].closingBalance
    for year in range(1, math.ceil(years) + 1):
        closing = growth.compound_interest(listing_value, rate, min(float(year), years), 1)
        rows.append(_row(year, opening, 0.0, closing))
        opening = rows[-1].closingBalance
    return rows


# ---------------------------------------------------------------------------
# Periodic deposits
# ---------------------------------------------------------------------------

def deposit_evolution(
    monthly: float,
    period_rate: float,
    months: int,
    step_up: float = 0.0,
) -> list[Period]:
    """
    Monthly deposits at the start of each month: balance = (balance + deposit) * (1 + i).
    The deposit steps up by `step_up` every 12 months.
    Used for SIP, RD, NPS and fund SIPs; `period_rate` is already monthly.
    """
    months = int(months)
    if not monthly or monthly <= 0 or months <= 0:
        return []
    rows: list[Period] = []
    balance = 0.0
    opening = 0.0
    deposited = 0.0
    monthly_rows = months < 12
    for month in range(1, months + 1):
        deposit = monthly * (1.0 + step_up) ** ((month - 1) // 12)
        balance = (balance + deposit) * (1.0 + period_rate)
        deposited += deposit
        if monthly_rows:
            rows.append(_row(month, opening, deposit, balance, label=_month_label(month)))
            opening = rows[-1].closingBalance
        elif month % 12 == 0 or month == months:
            rows.append(_row(math.ceil(month / 12), opening, deposited, balance))
            opening = rows[-1].closingBalance
            deposited = 0.0
    return rows


def annual_deposit_evolution(
    yearly: float,
    rate: float,
    years: int,
    step_up: float = 0.0,
    cap: float | None = None,
) -> list[Period]:
    """PPF / SSY: the year's deposit earns a full year of interest."""
    schedule = growth.step_up_schedule(yearly, step_up, int(years), cap)
    rows: list[Period] = []
    balance = 0.0
    opening = 0.0
    for index, deposit in enumerate(schedule, start=1):
        balance = (balance + float(deposit)) * (1.0 + rate)
        rows.append(_row(index, opening, float(deposit), balance))
        opening = rows[-1].closingBalance
    return rows
