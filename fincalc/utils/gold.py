"""
utils/gold.py -- Gold price per gram for SGB calculations.

The live price comes from an injected provider (any object with
get_price_per_gram(force_refresh) -> float). When no provider is set, or
it fails, the configured fallback price is used and the quote is marked
as not real-time.
"""
from __future__ import annotations

import logging
from typing import Protocol

from fincalc import config
from fincalc.models import GoldPriceQuote

logger = logging.getLogger(__name__)


class GoldPriceProvider(Protocol):
    def get_price_per_gram(self, force_refresh: bool = False) -> float: ...


def fallback_quote() -> GoldPriceQuote:
    return GoldPriceQuote(pricePerGram=config.FALLBACK_GOLD_PRICE, isRealTime=False)


def quote_gold_price(provider: GoldPriceProvider | None, force_refresh: bool = False) -> GoldPriceQuote:
    if provider is None:
        return fallback_quote()
    try:
        price = float(provider.get_price_per_gram(force_refresh))
    except Exception:
        logger.warning("Gold price provider failed, using fallback %.2f", config.FALLBACK_GOLD_PRICE,
                       exc_info=True)
        return fallback_quote()
    if price <= 0:
        logger.warning("Gold price provider returned %r, using fallback %.2f",
                       price, config.FALLBACK_GOLD_PRICE)
        return fallback_quote()
    return GoldPriceQuote(pricePerGram=price, isRealTime=True)
