"""
corpus.py -- Corpus simulator: aggregate projected values across instruments.

aggregate_corpus(selected, investments, horizon) -> CorpusResult
instrument_corpus(instrument, data, horizon)     -> CorpusLegs

Each instrument contributes two legs:
  existing -- a holding the investor already has (currentValue today),
              grown to the withdrawal horizon
  future   -- new contributions, only when planToInvestMore, run for
              min(tenure, horizon) years with the instrument's own formula

returns = (existingFV - currentValue) + (futureFV - invested)

Percentages are assigned in a second pass once the total is known.
"""
from __future__ import annotations

import logging
import math
from typing import Any, Callable, Mapping

from pydantic import ValidationError

from fincalc import config
from fincalc.models import (
    PARAM_MODELS,
    CompoundingFrequency,
    CorpusLegs,
    CorpusResult,
    ExistingInvestment,
    InstrumentCorpus,
    InstrumentType,
    InvestmentMode,
    InvestmentParams,
    Preferences,
    TenureUnit,
    _round2,
    parse_instrument,
)
from fincalc.utils import growth
from fincalc.utils import tenure as tenure_utils
from fincalc.utils.inflation import real_value
from fincalc.utils.validator import resolve_listing_price

logger = logging.getLogger(__name__)

INSTRUMENT_NAMES: dict[InstrumentType, str] = {
    InstrumentType.PPF: "PPF",
    InstrumentType.FD: "Fixed Deposit",
    InstrumentType.RD: "Recurring Deposit",
    InstrumentType.SIP: "SIP",
    InstrumentType.SSY: "SSY",
    InstrumentType.NSC: "NSC",
    InstrumentType.SCSS: "SCSS",
    InstrumentType.POMIS: "POMIS",
    InstrumentType.SGB: "SGB",
    InstrumentType.NPS: "NPS",
    InstrumentType.EQUITY: "Equity",
    InstrumentType.ELSS: "ELSS",
    InstrumentType.IPO: "IPO",
    InstrumentType.ETF: "ETF",
    InstrumentType.DEBT_MUTUAL_FUND: "Debt Mutual Fund",
    InstrumentType.REITS: "REITs",
    InstrumentType.BONDS_54EC: "54EC Bonds",
}

MSG_NO_INSTRUMENTS = "Please select at least one investment instrument"

_TENURE_HINTS = {
    InstrumentType.PPF: "You can extend PPF in blocks of 5 years after maturity.",
    InstrumentType.NSC: "NSC has a fixed 5-year tenure.",
    InstrumentType.SCSS: "SCSS maximum tenure is 5 years.",
}


def _pct(value: float | None) -> float:
    return (value or 0.0) / 100.0


def _step_up(p: Any) -> float:
    return _pct(p.stepUpPercentage) if getattr(p, "stepUpEnabled", False) else 0.0


# ---------------------------------------------------------------------------
# Defaults and limits
# ---------------------------------------------------------------------------

def default_plan_to_invest_more(instrument: InstrumentType | str) -> bool:
    """One-time purchases (SGB, NSC, SCSS) default to False, recurring ones to True."""
    return parse_instrument(instrument).value not in config.BUY_AND_HOLD


def plan_to_invest_more(instrument: InstrumentType, params: InvestmentParams) -> bool:
    if params.planToInvestMore is None:
        return default_plan_to_invest_more(instrument)
    return params.planToInvestMore


def check_tenure_limit(instrument: InstrumentType | str, years_invested: float) -> dict[str, Any]:
    """
    Whether a holding has already run for its instrument's full term.
    Returns {exceeds, maxTenure, message}; open-ended instruments never exceed.
    """
    instrument = parse_instrument(instrument)
    max_tenure = config.MAX_TENURE.get(instrument.value)
    if max_tenure is None or years_invested < max_tenure:
        return {"exceeds": False, "maxTenure": max_tenure, "message": None}
    message = f"Maximum tenure of {max_tenure} years reached for {INSTRUMENT_NAMES[instrument]}."
    hint = _TENURE_HINTS.get(instrument)
    if hint:
        message = f"{message} {hint}"
    return {"exceeds": True, "maxTenure": max_tenure, "message": message}


# ---------------------------------------------------------------------------
# Per-instrument tenure, rate and future leg
# ---------------------------------------------------------------------------

def _fd_years(p: Any) -> float:
    years, months = tenure_utils.resolve_fd_tenure(p.model_dump()) or (0, 0)
    return tenure_utils.years_months_to_years(years, months)


def _ssy_years(p: Any) -> float:
    if p.girlsAge is None:
        return config.SSY_MATURITY_AGE
    return config.SSY_MATURITY_AGE - p.girlsAge


def _sip_years(p: Any) -> float:
    if not p.tenure:
        return 0.0
    return p.tenure / 12.0 if p.tenureUnit is TenureUnit.MONTHS else float(p.tenure)


def _nps_rate(p: Any) -> float:
    if p.currentAge is None:
        return growth.nps_weighted_return(p.allocation(), p.bucket_returns())
    rate, _ = growth.nps_rate(p.allocation(), p.bucket_returns(), int(p.currentAge),
                              int(p.tenure or 0), p.useAgeBasedCaps)
    return rate


def _sgb_principal(p: Any) -> float:
    if p.principal:
        return p.principal
    if p.gramsOfGold and p.goldPricePerGram:
        return p.gramsOfGold * p.goldPricePerGram
    return 0.0


def _yearly_deposits(yearly: float | None, rate: float, years: float, step_up: float) -> tuple[float, float]:
    n = int(years)
    if not yearly or yearly <= 0 or n <= 0:
        return 0.0, 0.0
    invested = float(growth.step_up_schedule(yearly, step_up, n).sum())
    if step_up:
        return invested, growth.step_up_ppf_future_value(yearly, step_up, rate, n)
    return invested, growth.ppf_future_value(yearly, rate, n)


def _monthly_deposits(monthly: float | None, annual_rate: float, years: float, step_up: float = 0.0) -> tuple[float, float]:
    months = int(round(years * 12))
    if not monthly or monthly <= 0 or months <= 0:
        return 0.0, 0.0
    blocks = math.ceil(months / 12)
    schedule = growth.step_up_schedule(monthly, step_up, blocks)
    invested = float(sum(amount * min(12, months - k * 12) for k, amount in enumerate(schedule)))
    if step_up:
        return invested, growth.step_up_sip_future_value(monthly, step_up, months, annual_rate)
    return invested, growth.sip_future_value(monthly, annual_rate, months)


def _lumpsum(amount: float | None, maturity: float) -> tuple[float, float]:
    if not amount or amount <= 0 or maturity <= 0:
        return 0.0, 0.0
    return amount, maturity


def _fund(p: Any, amount: float | None, rate: float, years: float) -> tuple[float, float]:
    if p.investmentType is InvestmentMode.LUMPSUM:
        return _lumpsum(amount, growth.compound_interest(amount, rate, years, 1))
    return _monthly_deposits(amount, rate, years, _step_up(p))


def _fd_future(p: Any, years: float) -> tuple[float, float]:
    frequency = p.compoundingFrequency or CompoundingFrequency.QUARTERLY
    return _lumpsum(p.principal, growth.fd_maturity(p.principal, _pct(p.rate), years, frequency))


def _rd_future(p: Any, years: float) -> tuple[float, float]:
    months = int(round(years * 12))
    if not p.monthlyDeposit or months <= 0:
        return 0.0, 0.0
    return p.monthlyDeposit * months, growth.rd_maturity(p.monthlyDeposit, _pct(p.rate), months,
                                                       p.compoundingFrequency)


def _sgb_future(p: Any, years: float) -> tuple[float, float]:
    principal = _sgb_principal(p)
    return _lumpsum(principal, growth.sgb_maturity(principal, _pct(p.goldAppreciationRate), years,
                                                   _pct(p.fixedRate)))


def _nps_future(p: Any, years: float) -> tuple[float, float]:
    if not p.monthlyContribution or years <= 0:
        return 0.0, 0.0
    return p.monthlyContribution * 12 * years, growth.nps_future_value(p.monthlyContribution, _nps_rate(p), years)


def _ipo_future(p: Any, years: float) -> tuple[float, float]:
    if not p.sharesAllotted or not p.issuePrice:
        return 0.0, 0.0
    listing_value = p.sharesAllotted * resolve_listing_price(p)
    rate = _pct(p.expectedCAGR)
    final = growth.compound_interest(listing_value, rate, years, 1) if rate > 0 else listing_value
    return _lumpsum(p.sharesAllotted * p.issuePrice, final)


# instrument -> (tenure in years, projection rate as decimal, future leg)
CORPUS_RULES: dict[InstrumentType, tuple[Callable, Callable, Callable]] = {
    InstrumentType.PPF: (
        lambda p: p.tenure or config.PPF_TENURE,
        lambda p: _pct(p.rate),
        lambda p, t: _yearly_deposits(p.yearlyInvestment, _pct(p.rate), t, _step_up(p)),
    ),
    InstrumentType.SSY: (
        _ssy_years,
        lambda p: _pct(p.rate),
        lambda p, t: _yearly_deposits(p.yearlyInvestment, _pct(p.rate), t, _step_up(p)),
    ),
    InstrumentType.FD: (_fd_years, lambda p: _pct(p.rate), _fd_future),
    InstrumentType.RD: (
        lambda p: tenure_utils.years_months_to_years(p.tenureYears, p.tenureMonths),
        lambda p: _pct(p.rate),
        _rd_future,
    ),
    InstrumentType.SIP: (
        _sip_years,
        lambda p: _pct(p.expectedReturn),
        lambda p, t: _monthly_deposits(p.monthlySIP, _pct(p.expectedReturn), t, _step_up(p)),
    ),
    InstrumentType.NSC: (
        lambda p: config.NSC_TENURE,
        lambda p: _pct(p.rate),
        lambda p, t: _lumpsum(p.principal, growth.nsc_maturity(p.principal, _pct(p.rate), t)),
    ),
    InstrumentType.SCSS: (
        lambda p: p.tenure or config.SCSS_MAX_TENURE,
        lambda p: _pct(p.rate),
        lambda p, t: _lumpsum(p.principal, growth.scss_maturity(p.principal, _pct(p.rate), t)),
    ),
    InstrumentType.POMIS: (
        lambda p: config.POMIS_TENURE,
        lambda p: _pct(p.rate),
        lambda p, t: _lumpsum(p.principal, growth.pomis_maturity(p.principal, _pct(p.rate), t)),
    ),
    InstrumentType.SGB: (lambda p: p.tenure or 0, lambda p: _pct(p.goldAppreciationRate), _sgb_future),
    InstrumentType.NPS: (lambda p: p.tenure or 0, _nps_rate, _nps_future),
    InstrumentType.EQUITY: (
        lambda p: p.tenure or 0,
        lambda p: _pct(p.expectedCAGR),
        lambda p, t: _fund(p, p.amount, _pct(p.expectedCAGR), t),
    ),
    InstrumentType.ELSS: (
        lambda p: p.tenure or 0,
        lambda p: _pct(p.expectedReturn),
        lambda p, t: _fund(p, p.amount, _pct(p.expectedReturn), t),
    ),
    InstrumentType.ETF: (
        lambda p: p.tenure or 0,
        lambda p: _pct(p.expectedCAGR) - _pct(p.expenseRatio),
        lambda p, t: _fund(p, p.amount, _pct(p.expectedCAGR) - _pct(p.expenseRatio), t),
    ),
    InstrumentType.DEBT_MUTUAL_FUND: (
        lambda p: p.tenure or 0,
        lambda p: _pct(p.expectedReturn),
        lambda p, t: _fund(p, p.amount, _pct(p.expectedReturn), t),
    ),
    InstrumentType.IPO: (lambda p: p.holdingPeriod or 0, lambda p: _pct(p.expectedCAGR), _ipo_future),
    InstrumentType.REITS: (
        lambda p: p.tenure or 0,
        lambda p: _pct(p.dividendYield) + _pct(p.appreciationRate),
        lambda p, t: _lumpsum(
            p.investmentAmount,
            growth.reits_maturity(p.investmentAmount, _pct(p.dividendYield), _pct(p.appreciationRate), int(t)),
        ),
    ),
    InstrumentType.BONDS_54EC: (
        lambda p: config.BONDS_54EC_TENURE,
        lambda p: _pct(p.rate),
        lambda p, t: _lumpsum(p.investmentAmount, growth.compound_interest(p.investmentAmount, _pct(p.rate), t, 1)),
    ),
}

_missing = set(InstrumentType) - set(CORPUS_RULES)
if _missing:
    raise RuntimeError(f"CORPUS_RULES has no entry for {sorted(m.value for m in _missing)}")


# ---------------------------------------------------------------------------
# Existing holdings
# ---------------------------------------------------------------------------

def existing_current_value(instrument: InstrumentType | str, existing: ExistingInvestment | Mapping[str, Any] | None) -> float:
    """
    Today's value of a holding. An entered currentValue wins; otherwise it is
    estimated from what was originally put in over yearsInvested.
    """
    instrument = parse_instrument(instrument)
    if existing is None:
        return 0.0
    if not isinstance(existing, ExistingInvestment):
        existing = ExistingInvestment.model_validate(dict(existing))
    if existing.currentValue and existing.currentValue > 0:
        return existing.currentValue
    years = existing.yearsInvested or 0.0
    initial = existing.initialInvestment or 0.0
    if years <= 0:
        return initial
    rate = _pct(existing.rate or existing.currentReturnRate or existing.expectedReturnRate
                or config.DEFAULT_RATES.get(instrument.value))
    step_up = _pct(existing.stepUpPercentage) if existing.stepUpEnabled else 0.0

    if instrument in (InstrumentType.PPF, InstrumentType.SSY):
        if existing.yearlyContribution:
            return _yearly_deposits(existing.yearlyContribution, rate, years, step_up)[1]
        return growth.compound_interest(initial, rate, years, 1)
    if instrument is InstrumentType.FD:
        frequency = existing.compoundingFrequency or CompoundingFrequency.QUARTERLY
        return growth.fd_maturity(initial, rate, years, frequency)
    if instrument in (InstrumentType.SIP, InstrumentType.NPS) and existing.monthlyContribution:
        return _monthly_deposits(existing.monthlyContribution, rate, years, step_up)[1]
    if instrument is InstrumentType.NSC:
        return growth.nsc_maturity(initial, rate, min(years, config.NSC_TENURE))
    if instrument is InstrumentType.SCSS:
        return growth.scss_maturity(initial, rate, min(years, config.SCSS_MAX_TENURE))
    if instrument is InstrumentType.SGB:
        gold_rate = _pct(existing.goldAppreciationRate or existing.rate)
        fixed = _pct(existing.fixedRate or config.SGB_CONFIG["fixed_rate"])
        return growth.sgb_maturity(initial, gold_rate, years, fixed)
    return growth.compound_interest(initial, rate, years, 1) or initial


def _grow_existing(
    instrument: InstrumentType,
    current: float,
    years: float,
    rate: float,
    gold_rate: float | None = None,
    fixed_rate: float | None = None,
) -> float:
    if years <= 0:
        return current
    if instrument is InstrumentType.SGB:
        return growth.sgb_maturity(current, gold_rate, years, fixed_rate)
    return growth.project_value(current, rate, years)


# ---------------------------------------------------------------------------
# Aggregation
# ---------------------------------------------------------------------------

def _parse(instrument: InstrumentType, data: Mapping[str, Any] | InvestmentParams | None) -> InvestmentParams | None:
    if data is None:
        return None
    if isinstance(data, InvestmentParams):
        return data
    try:
        return PARAM_MODELS[instrument].model_validate(dict(data))
    except ValidationError as exc:
        logger.warning("Skipping %s in corpus: %s", instrument.value, exc.errors()[0].get("msg"))
        return None


def instrument_corpus(
    instrument: InstrumentType | str,
    data: Mapping[str, Any] | InvestmentParams | None,
    horizon: float = 0.0,
) -> CorpusLegs:
    """Existing and future legs of one instrument at the withdrawal horizon."""
    instrument = parse_instrument(instrument)
    params = _parse(instrument, data)
    if params is None:
        return CorpusLegs()

    tenure_of, rate_of, future_of = CORPUS_RULES[instrument]
    tenure = float(tenure_of(params) or 0.0)
    effective = min(tenure, horizon) if horizon > 0 else tenure
    invest_more = plan_to_invest_more(instrument, params)
    existing = params.existingInvestment if params.hasExistingInvestment else None
    current = existing_current_value(instrument, existing) if existing is not None else 0.0

    legs = CorpusLegs(current_value=current)

    if current > 0:
        years_invested = existing.yearsInvested or 0.0
        if horizon <= 0:
            legs.existing_value = current
        elif invest_more and effective > 0:
            years = max(0.0, min(effective, horizon - years_invested))
            legs.existing_value = _grow_existing(
                instrument, current, years, rate_of(params),
                gold_rate=_pct(params.goldAppreciationRate) if instrument is InstrumentType.SGB else None,
                fixed_rate=_pct(params.fixedRate) if instrument is InstrumentType.SGB else None,
            )
        else:
            years = max(0.0, horizon - years_invested)
            own_rate = existing.expectedReturnRate or existing.currentReturnRate or existing.rate
            rate = _pct(own_rate) if own_rate else rate_of(params)
            gold_rate = fixed_rate = None
            if instrument is InstrumentType.SGB:
                gold_rate = _pct(existing.goldAppreciationRate or params.goldAppreciationRate)
                fixed_rate = _pct(existing.fixedRate or config.SGB_CONFIG["fixed_rate"])
            legs.existing_value = _grow_existing(instrument, current, years, rate, gold_rate, fixed_rate)

    if invest_more and effective > 0:
        legs.invested, legs.future_value = future_of(params, effective)

    # NPS keeps contributing past the withdrawal horizon; report the full-tenure figures too
    if instrument is InstrumentType.NPS and horizon > 0 and tenure > horizon:
        legs.projected_beyond = True
        if invest_more:
            legs.projected_invested, legs.projected_future_value = future_of(params, tenure)
            if current > 0:
                years = max(0.0, tenure - (existing.yearsInvested or 0.0))
                legs.projected_future_value += growth.project_value(current, rate_of(params), years) - current

    logger.debug(
        "Corpus %s: invested=%.2f existing=%.2f future=%.2f",
        instrument.value, legs.invested, legs.existing_value, legs.future_value,
    )
    return legs


def _lookup(mapping: Mapping[Any, Any] | None, instrument: InstrumentType) -> Any:
    if not mapping:
        return None
    if instrument in mapping:
        return mapping[instrument]
    return mapping.get(instrument.value)


def aggregate_corpus(
    selected: list[InstrumentType | str],
    investments: Mapping[Any, Mapping[str, Any] | InvestmentParams],
    horizon: float = 0.0,
    prefs: Preferences | None = None,
) -> CorpusResult:
    """
    Sum the corpus over every selected instrument. Instruments without data
    contribute zero; percentages of the nominal corpus are filled in last.
    realCorpus deflates the nominal corpus over the horizon at
    prefs.defaultInflationRate.
    """
    prefs = prefs or Preferences()
    result = CorpusResult()
    total_invested = total_returns = total_corpus = total_existing = 0.0

    for raw in selected or []:
        instrument = parse_instrument(raw)
        legs = instrument_corpus(instrument, _lookup(investments, instrument), horizon)
        entry = InstrumentCorpus(
            investedAmount=_round2(legs.invested),
            maturityValue=_round2(legs.maturity),
            returns=_round2(legs.returns),
            existingInvestmentValue=_round2(legs.existing_value),
            futureInvestmentValue=_round2(legs.future_value),
            existingCurrentValue=_round2(legs.current_value),
            isProjectedBeyondHorizon=legs.projected_beyond,
        )
        if legs.projected_beyond:
            projected_maturity = legs.existing_value + legs.projected_future_value
            entry.projectedInvestedAmount = _round2(legs.projected_invested)
            entry.projectedFutureInvestmentValue = _round2(legs.projected_future_value)
            entry.projectedMaturityValue = _round2(projected_maturity)
            entry.projectedReturns = _round2(projected_maturity - legs.current_value - legs.projected_invested)

        result.byInstrument[instrument.value] = entry
        total_invested += legs.invested
        total_returns += legs.returns
        total_corpus += legs.maturity
        total_existing += legs.current_value

    # Second pass -- share of the nominal corpus
    for entry in result.byInstrument.values():
        entry.percentage = _round2(entry.maturityValue / total_corpus * 100) if total_corpus > 0 else 0.0

    result.totalInvested = _round2(total_invested)
    result.totalReturns = _round2(total_returns)
    result.nominalCorpus = _round2(total_corpus)
    result.realCorpus = _round2(real_value(total_corpus, prefs.inflation_decimal, horizon))
    result.totalExistingValue = _round2(total_existing)
    result.totalFutureInvested = _round2(total_invested)

    logger.info(
        "Corpus over %s years for %d instruments: invested=%.2f corpus=%.2f real=%.2f",
        horizon, len(result.byInstrument), result.totalInvested, result.nominalCorpus, result.realCorpus,
    )
    return result


# ---------------------------------------------------------------------------
# Portfolio form validation
# ---------------------------------------------------------------------------

def _missing_existing_fields(existing: Mapping[str, Any], invest_more: bool) -> list[str]:
    missing = []
    if not existing.get("currentValue") or existing["currentValue"] <= 0:
        missing.append("Current Investment Value")
    if existing.get("yearsInvested") is None or existing["yearsInvested"] < 0:
        missing.append("Years Already Invested")
    if not existing.get("currentReturnRate") and not existing.get("rate"):
        missing.append("Current Return Rate")
    if (not invest_more and not existing.get("expectedReturnRate")
            and not existing.get("currentReturnRate") and not existing.get("rate")):
        missing.append("Expected Return Rate (for projection)")
    return missing


def _positive(data: Mapping[str, Any], key: str) -> bool:
    value = data.get(key)
    return isinstance(value, (int, float)) and value > 0


# instrument -> [(field, label)] that must be positive for a future investment
_FUTURE_FIELDS: dict[InstrumentType, list[tuple[str, str]]] = {
    InstrumentType.PPF: [("yearlyInvestment", "Yearly Investment"), ("tenure", "Tenure"), ("rate", "Interest Rate")],
    InstrumentType.SSY: [("yearlyInvestment", "Yearly Investment"), ("rate", "Interest Rate")],
    InstrumentType.FD: [("principal", "Principal Amount"), ("rate", "Interest Rate")],
    InstrumentType.RD: [("monthlyDeposit", "Monthly Deposit"), ("rate", "Interest Rate")],
    InstrumentType.SIP: [("monthlySIP", "Monthly SIP Amount"), ("tenure", "Tenure"), ("expectedReturn", "Expected Return")],
    InstrumentType.NSC: [("principal", "Principal Amount"), ("rate", "Interest Rate")],
    InstrumentType.SCSS: [("principal", "Principal Amount"), ("tenure", "Tenure"), ("rate", "Interest Rate")],
    InstrumentType.POMIS: [("principal", "Principal Amount"), ("rate", "Interest Rate")],
    InstrumentType.SGB: [("principal", "Investment Amount (Principal)")],
    InstrumentType.NPS: [("monthlyContribution", "Monthly Contribution"), ("tenure", "Tenure")],
    InstrumentType.EQUITY: [("tenure", "Tenure")],
    InstrumentType.ELSS: [("tenure", "Tenure")],
    InstrumentType.ETF: [("tenure", "Tenure")],
    InstrumentType.DEBT_MUTUAL_FUND: [("tenure", "Tenure")],
    InstrumentType.IPO: [("sharesAllotted", "Shares Allotted"), ("issuePrice", "Issue Price"),
                         ("holdingPeriod", "Holding Period")],
    InstrumentType.REITS: [("investmentAmount", "Investment Amount"), ("tenure", "Tenure")],
    InstrumentType.BONDS_54EC: [("investmentAmount", "Investment Amount"), ("rate", "Interest Rate")],
}

_EXPECTED_RETURN_FIELD = {
    InstrumentType.EQUITY: "expectedCAGR",
    InstrumentType.ETF: "expectedCAGR",
    InstrumentType.ELSS: "expectedReturn",
    InstrumentType.DEBT_MUTUAL_FUND: "expectedReturn",
}


def _missing_future_fields(instrument: InstrumentType, data: Mapping[str, Any]) -> list[str]:
    missing = []
    if instrument in _EXPECTED_RETURN_FIELD and not _positive(data, "amount"):
        lumpsum = data.get("investmentType") == InvestmentMode.LUMPSUM.value
        missing.append("Investment Amount" if lumpsum else "Monthly SIP Amount")
    missing.extend(label for key, label in _FUTURE_FIELDS[instrument] if not _positive(data, key))

    if instrument in _EXPECTED_RETURN_FIELD:
        if not (_positive(data, "expectedReturn") or _positive(data, "expectedCAGR")):
            missing.append("Expected Return")
    elif instrument in (InstrumentType.FD, InstrumentType.RD):
        if instrument is InstrumentType.FD:
            resolved = tenure_utils.resolve_fd_tenure(data)
            years, months = resolved if resolved is not None else (None, None)
        else:
            years, months = data.get("tenureYears"), data.get("tenureMonths")
        if years is None and months is None:
            missing.append("Tenure")
        elif tenure_utils.validate_years_months(years, months):
            missing.append("Tenure (Years and/or Months)")
    elif instrument is InstrumentType.SGB:
        rate = data.get("goldAppreciationRate")
        if rate is None or rate < 0:
            missing.append("Gold Appreciation Rate")
    elif instrument is InstrumentType.NPS:
        total = sum(data.get(key) or 0 for key in (
            "equityAllocation", "corporateBondsAllocation", "governmentBondsAllocation", "alternativeAllocation"))
        if abs(total - 100) > config.NPS_ALLOCATION_TOLERANCE:
            missing.append("NPS Asset Allocation (must sum to 100%)")
    return missing


def validate_portfolio(
    selected: list[InstrumentType | str],
    investments: Mapping[Any, Mapping[str, Any]],
) -> list[str]:
    """
    Missing or unusable fields per selected instrument, one message each:
    "PPF: Yearly Investment, Tenure". An empty list means the portfolio is complete.
    """
    if not selected:
        return [MSG_NO_INSTRUMENTS]
    errors = []
    for raw in selected:
        instrument = parse_instrument(raw)
        data = _lookup(investments, instrument) or {}
        has_existing = bool(data.get("hasExistingInvestment"))
        invest_more = data.get("planToInvestMore")
        if invest_more is None:
            invest_more = default_plan_to_invest_more(instrument)

        missing: list[str] = []
        if has_existing:
            missing.extend(_missing_existing_fields(data.get("existingInvestment") or {}, invest_more))
        if invest_more or not has_existing:
            missing.extend(_missing_future_fields(instrument, data))
        if missing:
            errors.append(f"{INSTRUMENT_NAMES[instrument]}: {', '.join(missing)}")
    return errors
