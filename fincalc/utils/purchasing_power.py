"""
utils/purchasing_power.py -- What a corpus buys after inflation.

future_price(price, inflation, years)     -> price * (1 + i)^years
affordability(corpus, future_price)       -> {canAfford, unitsAffordable, percentageAffordable}
category_rates(overrides)                 -> inflation % per rate key
purchasing_power(corpus, years, city, ...) -> PurchasingPower | None

Example prices live in config.PURCHASING_POWER_EXAMPLES; city-dependent
items are priced by the city's tier. Inflation rates are percentages.
"""
from __future__ import annotations

import logging
import math
from typing import Any, Mapping

import numpy as np

from fincalc import config
from fincalc.models import AffordableItem, PurchasingPower, PurchasingPowerSummary, _round2

logger = logging.getLogger(__name__)


def future_price(current_price: float, inflation_rate: float, years: float) -> float:
    """inflation_rate as a decimal."""
    if not current_price or current_price <= 0:
        return 0.0
    if not inflation_rate or years <= 0:
        return current_price
    return current_price * (1.0 + inflation_rate) ** years


def affordability(corpus: float, price: float) -> dict[str, Any]:
    if not corpus or corpus <= 0 or not price or price <= 0:
        return {"canAfford": False, "unitsAffordable": 0, "percentageAffordable": 0.0}
    units = math.floor(corpus / price)
    return {
        "canAfford": units > 0,
        "unitsAffordable": units,
        "percentageAffordable": _round2(min(100.0, corpus / price * 100)),
    }


def example_price(category: str, key: str, city: str) -> float | None:
    """Today's price of one example item, None when unknown."""
    example = config.PURCHASING_POWER_EXAMPLES.get(category, {}).get(key)
    if example is None:
        return None
    if "price" in example:
        return float(example["price"])
    tier = config.CITY_TIERS.get(city)
    if tier is None or tier not in example:
        return None
    return float(example[tier])


def category_rates(overrides: Mapping[str, float] | None = None, general: float | None = None) -> dict[str, float]:
    """Default category rates, then the general rate, then explicit overrides."""
    rates = dict(config.CATEGORY_INFLATION_RATES)
    if general is not None:
        rates["general"] = general
    for key, rate in (overrides or {}).items():
        if rate is not None:
            rates[key] = rate
    return rates


def _category_items(
    corpus: float,
    category: str,
    city: str,
    rate: float,
    years: float,
) -> list[AffordableItem]:
    keyed = [
        (key, example, example_price(category, key, city))
        for key, example in config.PURCHASING_POWER_EXAMPLES[category].items()
    ]
    keyed = [(key, example, price) for key, example, price in keyed if price]
    if not keyed:
        return []

    prices = np.array([price for _, _, price in keyed], dtype=np.float64)
    futures = prices * (1.0 + rate / 100.0) ** max(years, 0.0)
    units = np.floor(corpus / futures).astype(int)
    shares = np.minimum(100.0, corpus / futures * 100.0)

    return [
        AffordableItem(
            key=key,
            label=example["label"],
            unit=example["unit"],
            currentPrice=_round2(price),
            futurePrice=_round2(float(futures[i])),
            inflationRate=round(rate, 1),
            canAfford=bool(units[i] > 0),
            unitsAffordable=int(units[i]),
            percentageAffordable=_round2(float(shares[i])),
        )
        for i, (key, example, price) in enumerate(keyed)
    ]


def summarize(categories: Mapping[str, list[AffordableItem]]) -> PurchasingPowerSummary:
    summary = PurchasingPowerSummary()
    for items in categories.values():
        for item in items:
            summary.totalExamples += 1
            if item.canAfford:
                summary.affordableExamples += 1
            elif item.percentageAffordable > 0:
                summary.partiallyAffordableExamples += 1
            else:
                summary.unaffordableExamples += 1
    if summary.totalExamples:
        summary.affordabilityRate = _round2(summary.affordableExamples / summary.totalExamples * 100)
    return summary


def purchasing_power(
    corpus: float,
    years: float,
    city: str,
    inflation_rates: Mapping[str, float] | None = None,
    categories: list[str] | None = None,
) -> PurchasingPower | None:
    """
    Affordability of every example item at the horizon, by category.

    None when there is no corpus, no horizon or the city is unknown.
    Unknown category names are skipped.
    """
    if not corpus or corpus <= 0 or not years or years <= 0:
        return None
    if city not in config.CITY_TIERS:
        logger.debug("No price tier for city %r; skipping purchasing power", city)
        return None

    rates = category_rates(inflation_rates)
    wanted = categories if categories is not None else list(config.PURCHASING_POWER_EXAMPLES)
    result = PurchasingPower(city=city, years=years)
    for category in wanted:
        if category not in config.PURCHASING_POWER_EXAMPLES:
            continue
        rate = rates[config.CATEGORY_RATE_KEYS.get(category, "general")]
        result.categories[category] = _category_items(corpus, category, city, rate, years)
    result.summary = summarize(result.categories)
    return result
