"""
pipeline.py -- Instrument-keyed entry points over the calculators.

parse_params(instrument, data)            -> parameter model
run_calculator(instrument, params, prefs) -> CalculationResult | None
evaluate(instrument, params, prefs)       -> (result, errors)
compute_growth(instrument, params)        -> maturity amount (0.0 when invalid)
compute_evolution(instrument, params)     -> list[Period] ([] when invalid)

`params` may be a parameter model or a plain dict; dicts are parsed with
the instrument's model first. An unknown instrument raises
UnknownInstrumentError; invalid values never raise.
"""
from __future__ import annotations

from typing import Any, Callable, Mapping

from pydantic import ValidationError

from fincalc import calculators
from fincalc.models import (
    PARAM_MODELS,
    CalculationResult,
    GoldPriceQuote,
    InstrumentType,
    InvestmentParams,
    Period,
    Preferences,
    SGBParams,
    parse_instrument,
)
from fincalc.utils.validator import validate_params

CALCULATORS: dict[InstrumentType, Callable[..., CalculationResult | None]] = {
    InstrumentType.PPF: calculators.calculate_ppf,
    InstrumentType.FD: calculators.calculate_fd,
    InstrumentType.RD: calculators.calculate_rd,
    InstrumentType.SIP: calculators.calculate_sip,
    InstrumentType.SSY: calculators.calculate_ssy,
    InstrumentType.NSC: calculators.calculate_nsc,
    InstrumentType.SCSS: calculators.calculate_scss,
    InstrumentType.POMIS: calculators.calculate_pomis,
    InstrumentType.SGB: calculators.calculate_sgb,
    InstrumentType.NPS: calculators.calculate_nps,
    InstrumentType.EQUITY: calculators.calculate_equity,
    InstrumentType.ELSS: calculators.calculate_elss,
    InstrumentType.IPO: calculators.calculate_ipo,
    InstrumentType.ETF: calculators.calculate_etf,
    InstrumentType.DEBT_MUTUAL_FUND: calculators.calculate_debt_mutual_fund,
    InstrumentType.REITS: calculators.calculate_reits,
    InstrumentType.BONDS_54EC: calculators.calculate_bonds_54ec,
}

for _table_name, _table in (("PARAM_MODELS", PARAM_MODELS), ("CALCULATORS", CALCULATORS)):
    _missing = set(InstrumentType) - set(_table)
    if _missing:
        raise RuntimeError(f"{_table_name} has no entry for {sorted(m.value for m in _missing)}")


def parse_params(instrument: InstrumentType | str, data: Mapping[str, Any] | InvestmentParams) -> InvestmentParams:
    instrument = parse_instrument(instrument)
    if isinstance(data, InvestmentParams):
        return data
    return PARAM_MODELS[instrument].model_validate(dict(data or {}))


def field_errors(exc: ValidationError) -> list[str]:
    """Pydantic errors as "field: message" strings, without the "Value error, " prefix."""
    messages = []
    for err in exc.errors():
        msg = err.get("msg", "Invalid value")
        if msg.startswith("Value error, "):
            msg = msg[len("Value error, "):]
        field = ".".join(str(part) for part in err.get("loc", ()))
        messages.append(f"{field}: {msg}" if field else msg)
    return messages


def _with_gold_price(params: InvestmentParams, gold_quote: GoldPriceQuote | None) -> InvestmentParams:
    """Fill the SGB gold price from the injected quote when the form left it empty."""
    if (gold_quote is not None and isinstance(params, SGBParams)
            and params.goldPricePerGram is None and params.gramsOfGold is not None):
        return params.model_copy(update={"goldPricePerGram": gold_quote.pricePerGram})
    return params


def evaluate(
    instrument: InstrumentType | str,
    params: Mapping[str, Any] | InvestmentParams,
    prefs: Preferences | None = None,
    gold_quote: GoldPriceQuote | None = None,
) -> tuple[CalculationResult | None, list[str]]:
    """
    Result together with the violated constraints.

    Exactly one side is meaningful: (result, []) on success,
    (None, messages) when the parameters are invalid.
    """
    instrument = parse_instrument(instrument)
    try:
        model = _with_gold_price(parse_params(instrument, params), gold_quote)
    except ValidationError as exc:
        return None, field_errors(exc)
    errors = validate_params(instrument, model)
    if errors:
        return None, errors
    result = CALCULATORS[instrument](model, prefs)
    if result is not None and instrument is InstrumentType.SGB and gold_quote is not None:
        result.details["goldPriceIsRealTime"] = gold_quote.isRealTime
    return result, []


def run_calculator(
    instrument: InstrumentType | str,
    params: Mapping[str, Any] | InvestmentParams,
    prefs: Preferences | None = None,
    gold_quote: GoldPriceQuote | None = None,
) -> CalculationResult | None:
    result, _ = evaluate(instrument, params, prefs, gold_quote)
    return result


def _project(instrument: InstrumentType | str, params: Mapping[str, Any] | InvestmentParams):
    instrument = parse_instrument(instrument)
    try:
        model = parse_params(instrument, params)
    except ValidationError:
        return None
    return calculators.project(instrument, model)


def compute_growth(instrument: InstrumentType | str, params: Mapping[str, Any] | InvestmentParams) -> float:
    """Gross maturity amount, before tax and inflation."""
    projection = _project(instrument, params)
    return projection.maturity if projection is not None else 0.0


def compute_evolution(instrument: InstrumentType | str, params: Mapping[str, Any] | InvestmentParams) -> list[Period]:
    projection = _project(instrument, params)
    return projection.evolution if projection is not None else []
