"""
routes/calculators.py -- Calculator endpoint
  POST /calculators/{instrument} -- maturity, tax and inflation figures

Invalid parameters are not an HTTP error: the response carries
result=null and the list of violated constraints.
SGB requests get the gold price from app.state.gold_price_provider.
"""
from __future__ import annotations

from fastapi import APIRouter, Request

from fincalc.models import CalculatorRequest, CalculatorResponse, InstrumentType, parse_instrument
from fincalc.pipeline import evaluate
from fincalc.utils.gold import quote_gold_price

router = APIRouter()


@router.post("/calculators/{instrument}", response_model=CalculatorResponse)
def calculate(instrument: str, body: CalculatorRequest, request: Request) -> CalculatorResponse:
    # Unknown tags raise UnknownInstrumentError -> 404
    kind = parse_instrument(instrument)
    gold_quote = None
    if kind is InstrumentType.SGB:
        gold_quote = quote_gold_price(getattr(request.app.state, "gold_price_provider", None))
    result, errors = evaluate(kind, body.params, body.preferences, gold_quote)
    return CalculatorResponse(result=result, errors=errors)
