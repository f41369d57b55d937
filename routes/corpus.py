"""
routes/corpus.py -- Corpus simulator endpoints
  POST /corpus          -- aggregate corpus at the withdrawal horizon
  POST /corpus:validate -- missing fields per selected instrument

Both take the same body; validation is separate so a partially filled
portfolio can still be projected. /corpus adds a purchasing-power view
when the body names a city.
"""
from __future__ import annotations

from fastapi import APIRouter

from fincalc.corpus import aggregate_corpus, validate_portfolio
from fincalc.models import CorpusRequest, CorpusResult, PortfolioCheckResponse
from fincalc.utils.purchasing_power import category_rates, purchasing_power

router = APIRouter()


@router.post("/corpus", response_model=CorpusResult)
def corpus(body: CorpusRequest) -> CorpusResult:
    result = aggregate_corpus(body.selectedInstruments, body.investments, body.timeHorizon, body.preferences)
    if body.city:
        # general inflation follows the preferences unless overridden per category
        rates = category_rates(body.categoryInflationRates, general=body.preferences.defaultInflationRate)
        result.purchasingPower = purchasing_power(
            result.nominalCorpus, body.timeHorizon, body.city, rates, body.purchasingPowerCategories,
        )
    return result


@router.post("/corpus:validate", response_model=PortfolioCheckResponse)
def corpus_validate(body: CorpusRequest) -> PortfolioCheckResponse:
    errors = validate_portfolio(body.selectedInstruments, body.investments)
    return PortfolioCheckResponse(valid=not errors, errors=errors)
