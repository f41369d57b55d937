"""
utils/indexation.py -- Cost Inflation Index (CII) for indexed capital gains.

Base year FY 2001-02 = 100, as notified by CBDT. Years past the table are
projected at 4% a year; years before the base year use the base value.
A financial year is named by its starting calendar year (2024 == FY 2024-25).
"""
from __future__ import annotations

from datetime import date
from typing import Any

from fincalc import config
from fincalc.models import _round2

CII_VALUES: dict[int, int] = {
    2001: 100,
    2002: 105,
    2003: 109,
    2004: 113,
    2005: 117,
    2006: 122,
    2007: 129,
    2008: 137,
    2009: 148,
    2010: 167,
    2011: 184,
    2012: 200,
    2013: 220,
    2014: 240,
    2015: 254,
    2016: 264,
    2017: 272,
    2018: 280,
    2019: 289,
    2020: 301,
    2021: 317,
    2022: 331,
    2023: 348,
    2024: 363,
    2025: 378,  # projected
    2026: 393,  # projected
}

CII_PROJECTION_RATE = 0.04
_FIRST_YEAR = min(CII_VALUES)
_LAST_YEAR = max(CII_VALUES)


def cii_for_year(financial_year: int) -> int:
    if financial_year in CII_VALUES:
        return CII_VALUES[financial_year]
    if financial_year < _FIRST_YEAR:
        return CII_VALUES[_FIRST_YEAR]
    diff = financial_year - _LAST_YEAR
    return round(CII_VALUES[_LAST_YEAR] * (1.0 + CII_PROJECTION_RATE) ** diff)


def current_financial_year(today: date | None = None) -> int:
    """April starts a new financial year."""
    today = today or date.today()
    return today.year if today.month >= 4 else today.year - 1


def indexed_cost(original_cost: float, purchase_year: int, sale_year: int) -> dict[str, Any]:
    purchase_cii = cii_for_year(purchase_year)
    sale_cii = cii_for_year(sale_year)
    factor = sale_cii / purchase_cii
    return {
        "purchaseCII": purchase_cii,
        "saleCII": sale_cii,
        "indexationFactor": round(factor, 4),
        "indexedCost": _round2(original_cost * factor),
    }


def tax_with_indexation(
    principal: float,
    maturity_amount: float,
    purchase_year: int,
    sale_year: int,
) -> dict[str, Any]:
    """
    20% LTCG on the gain over the indexed cost, and what indexation saves
    compared with 20% on the plain gain.
    """
    indexation = indexed_cost(principal, purchase_year, sale_year)
    taxable = max(0.0, maturity_amount - indexation["indexedCost"])
    tax = taxable * config.INDEXED_LTCG_RATE
    tax_without = max(0.0, maturity_amount - principal) * config.INDEXED_LTCG_RATE
    return {
        **indexation,
        "principal": _round2(principal),
        "maturityAmount": _round2(maturity_amount),
        "taxableGains": _round2(taxable),
        "taxAmount": _round2(tax),
        "taxWithoutIndexation": _round2(tax_without),
        "savings": _round2(tax_without - tax),
    }
