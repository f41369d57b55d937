"""
fincalc/config.py -- Default rates, statutory limits and tax thresholds.

Rates are stored as a user would enter them (7.1 means 7.1% p.a.).
Tax rates and the income-tax slab are decimals (0.30 means 30%).

Small-savings rates follow the government notification for Nov 2025;
market-linked defaults are long-run planning assumptions.
"""
from __future__ import annotations

from typing import Any

# ---------------------------------------------------------------------------
# Default rates (% p.a.)
# ---------------------------------------------------------------------------

DEFAULT_RATES: dict[str, float] = {
    "ppf": 7.1,
    "nsc": 7.7,
    "ssy": 8.2,
    "scss": 8.2,
    "pomis": 7.4,
    "fd": 6.5,
    "rd": 6.5,
    "bonds54EC": 5.75,
}

SGB_CONFIG: dict[str, Any] = {"fixed_rate": 2.5, "gold_appreciation": 8.0, "tenure": 8}
REITS_CONFIG: dict[str, Any] = {"dividend_yield": 7.0, "appreciation": 6.0, "unit_price": 100.0}

# Used when the gold price feed is unavailable (INR per gram)
FALLBACK_GOLD_PRICE = 6500.0

# ---------------------------------------------------------------------------
# Fixed terms (years)
# ---------------------------------------------------------------------------

PPF_TENURE = 15
NSC_TENURE = 5
POMIS_TENURE = 5
SCSS_MAX_TENURE = 5
BONDS_54EC_TENURE = 5
SSY_MATURITY_AGE = 21
SSY_MAX_OPENING_AGE = 9

# Longest tenure an instrument can run for (None = open ended)
MAX_TENURE: dict[str, int | None] = {
    "ppf": PPF_TENURE,
    "nsc": NSC_TENURE,
    "scss": SCSS_MAX_TENURE,
    "pomis": POMIS_TENURE,
    "bonds54EC": BONDS_54EC_TENURE,
    "ssy": SSY_MATURITY_AGE,
}

# Instruments that are usually bought once and held (corpus simulator default)
BUY_AND_HOLD = frozenset({"sgb", "nsc", "scss"})

# ---------------------------------------------------------------------------
# Deposit limits (INR)
# ---------------------------------------------------------------------------

MIN_RATE = 0.1

FD_MIN_PRINCIPAL = 1_000
# Months field of a years + months tenure (FD, RD)
MAX_MONTHS_FIELD = 11
RD_MIN_DEPOSIT = 500
RD_MAX_YEARS = 10
PPF_MIN_YEARLY = 500
PPF_MAX_YEARLY = 150_000
SSY_MIN_YEARLY = 250
SSY_MAX_YEARLY = 150_000
SIP_MIN_MONTHLY = 500
NSC_MIN_PRINCIPAL = 1_000
SCSS_MIN_PRINCIPAL = 1_000
SCSS_MAX_PRINCIPAL = 3_000_000
SCSS_MIN_AGE = 60
SCSS_MIN_AGE_DEFENSE = 55
POMIS_MIN_PRINCIPAL = 1_000
POMIS_MAX_SINGLE = 900_000
POMIS_MAX_JOINT = 1_500_000
SGB_MIN_GRAMS = 1
NPS_MIN_MONTHLY = 500
NPS_ALLOCATION_TOLERANCE = 0.01
ELSS_MIN_AMOUNT = 500
ELSS_LOCK_IN = 3
FUND_MIN_AMOUNT = 500
REITS_MIN_AMOUNT = 1_000
BONDS_54EC_MIN_AMOUNT = 1_000

# ---------------------------------------------------------------------------
# NPS equity glide path (PFRDA, effective 1 Oct 2025)
# ---------------------------------------------------------------------------

NPS_GLIDE_PATH: dict[str, float] = {
    "full_equity_age": 35,      # 100% equity allowed up to this age
    "mid_age": 50,              # 75% floor reached here
    "mid_cap": 0.75,
    "floor_cap": 0.50,
    "yearly_step": 0.025,
}

# ---------------------------------------------------------------------------
# Tax thresholds
# ---------------------------------------------------------------------------

DEFAULT_TAX_SLAB = 0.30
DEFAULT_INFLATION_RATE = 6.0

LTCG_RATE = 0.10
LTCG_EXEMPTION = 100_000.0
STCG_RATE = 0.15
INDEXED_LTCG_RATE = 0.20
INDEXATION_PROXY = 0.06
NPS_TAXABLE_PORTION = 0.40
SGB_TAX_FREE_AFTER = 5
INTEREST_FALLBACK_RATIO = 0.30
BONDS_54EC_INTEREST_FALLBACK_RATIO = 0.25
BONDS_54EC_MAX_EXEMPTION = 5_000_000.0
BONDS_54EC_LTCG_RATE = 0.20

# Crude annual yield used when tax is paid every year during accumulation
ACCUMULATION_INTEREST_ESTIMATE = 0.08

# ---------------------------------------------------------------------------
# Purchasing power
# ---------------------------------------------------------------------------

# Category inflation (% p.a.); categories without an entry use "general"
CATEGORY_INFLATION_RATES: dict[str, float] = {
    "education": 10.0,
    "healthcare": 8.0,
    "realEstate": 7.0,
    "luxuryGoods": 6.0,
    "consumerGoodsWholesale": 4.0,
    "consumerGoodsRetail": 5.0,
    "general": DEFAULT_INFLATION_RATE,
}

# Which rate each example category inflates at
CATEGORY_RATE_KEYS: dict[str, str] = {
    "education": "education",
    "healthcare": "healthcare",
    "realEstate": "realEstate",
    "luxuryGoods": "luxuryGoods",
    "consumerGoods": "consumerGoodsRetail",
}

CITY_TIERS: dict[str, str] = {
    "new-delhi": "metro",
    "mumbai": "metro",
    "chennai": "metro",
    "kolkata": "metro",
    "bangalore": "tier1",
    "pune": "tier1",
    "hyderabad": "tier1",
    "ahmedabad": "tier1",
    "indore": "tier2",
    "guwahati": "tier2",
}

# Today's prices (INR). "price" is the same everywhere; otherwise one price per city tier.
PURCHASING_POWER_EXAMPLES: dict[str, dict[str, dict[str, Any]]] = {
    "education": {
        "school-fees-1year": {"label": "School Fees (1 Year)", "unit": "per year",
                              "metro": 500_000, "tier1": 300_000, "tier2": 200_000},
        "engineering-college-4years": {"label": "Engineering College (4 Years)", "unit": "total",
                                       "metro": 2_000_000, "tier1": 1_500_000, "tier2": 1_000_000},
        "mba-tuition": {"label": "MBA Tuition", "unit": "total",
                        "metro": 2_500_000, "tier1": 2_000_000, "tier2": 1_500_000},
    },
    "realEstate": {
        "2bhk-apartment": {"label": "2BHK Apartment", "unit": "per unit",
                           "metro": 15_000_000, "tier1": 8_000_000, "tier2": 4_000_000},
        "plot-500sqyd": {"label": "Plot (500 sq yd)", "unit": "per plot",
                         "metro": 10_000_000, "tier1": 5_000_000, "tier2": 2_500_000},
    },
    "luxuryGoods": {
        "bmw-m3": {"label": "BMW M3", "unit": "per car", "price": 15_000_000},
        "iphone-15-pro-max": {"label": "iPhone 15 Pro Max", "unit": "per phone", "price": 150_000},
        "tv-55-oled": {"label": '55" OLED TV', "unit": "per TV", "price": 150_000},
    },
    "healthcare": {
        "health-insurance-annual": {"label": "Annual Health Insurance Premium", "unit": "per year",
                                    "price": 50_000},
        "heart-surgery": {"label": "Heart Surgery", "unit": "per surgery",
                          "metro": 500_000, "tier1": 350_000, "tier2": 250_000},
        "icu-stay-1week": {"label": "ICU Stay (1 Week)", "unit": "per week",
                           "metro": 200_000, "tier1": 150_000, "tier2": 100_000},
    },
    "consumerGoods": {
        "monthly-grocery-family4": {"label": "Monthly Grocery (Family of 4)", "unit": "per month",
                                    "price": 15_000},
        "petrol-per-liter": {"label": "Petrol (per Liter)", "unit": "per liter", "price": 100},
        "gold-per-gram": {"label": "Gold (per Gram)", "unit": "per gram", "price": 13_000},
    },
}
