"""
calculators.py -- One orchestrator per instrument.

calculate_<instrument>(params, prefs=None) -> CalculationResult | None

Every orchestrator runs the same steps through _run():
  1. validate   -- any violated constraint -> None (see utils/validator.py)
  2. project    -- _project_<instrument>: invested, maturity, evolution, details
  3. tax        -- utils/tax.compute_tax on the maturity amount
  4. inflation  -- real figures only when prefs.adjustInflation is on

The per-instrument part is only step 2; PROJECTORS maps each instrument to
its projector and is checked at import to cover every InstrumentType.
"""
from __future__ import annotations

import logging
import math
from typing import Callable

import numpy as np

from fincalc import config
from fincalc.models import (
    Bonds54ECParams,
    CalculationResult,
    DebtMutualFundParams,
    ELSSParams,
    EquityParams,
    ETFParams,
    FDParams,
    InstrumentType,
    InvestmentMode,
    IPOParams,
    NPSParams,
    NSCParams,
    Period,
    POMISParams,
    PPFParams,
    Preferences,
    Projection,
    RDParams,
    REITsParams,
    SCSSParams,
    SGBParams,
    SIPParams,
    SSYParams,
    TenureUnit,
    _round2,
    check_params,
    parse_instrument,
)
from fincalc.utils import evolution, growth
from fincalc.utils import tenure as tenure_utils
from fincalc.utils.indexation import tax_with_indexation
from fincalc.utils.inflation import real_figures
from fincalc.utils.tax import compute_tax
from fincalc.utils.validator import resolve_listing_price, validate_params

logger = logging.getLogger(__name__)


def _pct(value: float | None) -> float:
    """Form percentage -> decimal (7.1 -> 0.071)."""
    return (value or 0.0) / 100.0


def _step_up(enabled: bool, percentage: float | None) -> float:
    return _pct(percentage) if enabled else 0.0


# ---------------------------------------------------------------------------
# Shared legs
# ---------------------------------------------------------------------------

def _monthly_leg(monthly: float, period_rate: float, months: int, step_up: float = 0.0) -> tuple[float, float, list[Period]]:
    """
    Monthly deposits at the start of each month.
    Returns (invested, maturity, evolution); the maturity is the closed form
    and the evolution replays it month by month.
    """
    months = int(months)
    blocks = math.ceil(months / 12)
    sizes = np.minimum(12, months - np.arange(blocks) * 12)
    amounts = growth.step_up_schedule(monthly, step_up, blocks)
    invested = float(np.sum(amounts * sizes))
    if step_up:
        # step_up_sip_future_value takes the nominal annual rate
        maturity = growth.step_up_sip_future_value(monthly, step_up, months, period_rate * 12.0)
    else:
        maturity = growth.annuity_due(monthly, period_rate, months)
    return invested, maturity, evolution.deposit_evolution(monthly, period_rate, months, step_up)


def _fund_leg(
    mode: InvestmentMode | None,
    amount: float,
    rate: float,
    years: int,
    step_up: float = 0.0,
) -> tuple[float, float, list[Period]]:
    """SIP (monthly, optional yearly step-up) or lumpsum (annual compounding)."""
    if mode is InvestmentMode.LUMPSUM:
        return amount, growth.compound_interest(amount, rate, years, 1), evolution.lumpsum_evolution(amount, rate, years)
    return _monthly_leg(amount, rate / 12.0, years * 12, step_up)


# ---------------------------------------------------------------------------
# Projectors -- gross outcome per instrument
# ---------------------------------------------------------------------------

def _project_fd(p: FDParams, prefs: Preferences) -> Projection:
    years, months = tenure_utils.resolve_fd_tenure(p.model_dump()) or (0, 0)
    tenure = tenure_utils.years_months_to_years(years, months)
    rate = _pct(p.rate)
    maturity = growth.fd_maturity(p.principal, rate, tenure, p.compoundingFrequency)
    return Projection(
        invested=p.principal,
        maturity=maturity,
        years=tenure,
        rate=rate,
        evolution=evolution.fd_evolution(p.principal, rate, tenure, p.compoundingFrequency),
        details={
            "tenureYears": years,
            "tenureMonths": months,
            "tenureDisplay": tenure_utils.format_tenure(years, months),
            "compoundingFrequency": p.compoundingFrequency.value,
        },
    )


def _project_rd(p: RDParams, prefs: Preferences) -> Projection:
    months = tenure_utils.years_months_to_months(p.tenureYears, p.tenureMonths)
    rate = _pct(p.rate)
    monthly_rate = growth.rd_monthly_rate(rate, p.compoundingFrequency)
    invested, maturity, rows = _monthly_leg(p.monthlyDeposit, monthly_rate, months)
    return Projection(
        invested=invested,
        maturity=maturity,
        years=months / 12.0,
        rate=rate,
        evolution=rows,
        details={
            "totalMonths": months,
            "tenureDisplay": tenure_utils.format_tenure(*divmod(months, 12)),
            "effectiveMonthlyRatePercent": round(monthly_rate * 100, 4),
            "compoundingFrequency": p.compoundingFrequency.value,
        },
    )


def _yearly_deposit_projection(
    yearly: float,
    rate: float,
    years: int,
    step_up: float,
    cap: float | None = None,
) -> Projection:
    schedule = growth.step_up_schedule(yearly, step_up, years, cap)
    if step_up:
        maturity = growth.step_up_ppf_future_value(yearly, step_up, rate, years, cap)
    else:
        maturity = growth.ppf_future_value(yearly, rate, years)
    return Projection(
        invested=float(schedule.sum()),
        maturity=maturity,
        years=years,
        rate=rate,
        evolution=evolution.annual_deposit_evolution(yearly, rate, years, step_up, cap),
    )


def _project_ppf(p: PPFParams, prefs: Preferences) -> Projection:
    return _yearly_deposit_projection(
        p.yearlyInvestment, _pct(p.rate), int(p.tenure), _step_up(p.stepUpEnabled, p.stepUpPercentage)
    )


def _project_ssy(p: SSYParams, prefs: Preferences) -> Projection:
    """Deposits run until the girl turns 21; stepped-up deposits are capped at 1.5L a year."""
    years = config.SSY_MATURITY_AGE - p.girlsAge
    projection = _yearly_deposit_projection(
        p.yearlyInvestment,
        _pct(p.rate),
        years,
        _step_up(p.stepUpEnabled, p.stepUpPercentage),
        cap=config.SSY_MAX_YEARLY,
    )
    projection.details = {"yearsTillMaturity": years, "maturityYear": p.startYear + years}
    return projection


def _project_sip(p: SIPParams, prefs: Preferences) -> Projection:
    months = int(p.tenure) if p.tenureUnit is TenureUnit.MONTHS else int(p.tenure) * 12
    rate = _pct(p.expectedReturn)
    invested, maturity, rows = _monthly_leg(
        p.monthlySIP, rate / 12.0, months, _step_up(p.stepUpEnabled, p.stepUpPercentage)
    )
    return Projection(invested=invested, maturity=maturity, years=months / 12.0, rate=rate,
                      evolution=rows, details={"totalMonths": months})


def _project_nsc(p: NSCParams, prefs: Preferences) -> Projection:
    rate = _pct(p.rate)
    return Projection(
        invested=p.principal,
        maturity=growth.nsc_maturity(p.principal, rate),
        years=config.NSC_TENURE,
        rate=rate,
        evolution=evolution.lumpsum_evolution(p.principal, rate, config.NSC_TENURE),
    )


def _project_scss(p: SCSSParams, prefs: Preferences) -> Projection:
    rate = _pct(p.rate)
    years = int(p.tenure)
    quarterly = growth.payout_interest(p.principal, rate, 4)
    return Projection(
        invested=p.principal,
        maturity=growth.scss_maturity(p.principal, rate, years),
        years=years,
        rate=rate,
        evolution=evolution.payout_evolution(p.principal, rate, years, 4),
        details={
            "quarterlyInterest": _round2(quarterly),
            "annualInterest": _round2(quarterly * 4),
            "totalInterest": _round2(quarterly * 4 * years),
        },
    )


def _project_pomis(p: POMISParams, prefs: Preferences) -> Projection:
    rate = _pct(p.rate)
    monthly = growth.payout_interest(p.principal, rate, 12)
    return Projection(
        invested=p.principal,
        maturity=growth.pomis_maturity(p.principal, rate),
        years=config.POMIS_TENURE,
        rate=rate,
        evolution=evolution.payout_evolution(p.principal, rate, config.POMIS_TENURE, 12),
        details={
            "monthlyInterest": _round2(monthly),
            "annualInterest": _round2(monthly * 12),
            "totalInterest": _round2(monthly * 12 * config.POMIS_TENURE),
            "maxInvestment": config.POMIS_MAX_JOINT if p.isJointAccount else config.POMIS_MAX_SINGLE,
        },
    )


def _project_sgb(p: SGBParams, prefs: Preferences) -> Projection:
    if p.gramsOfGold is not None:
        principal = p.gramsOfGold * p.goldPricePerGram
    else:
        principal = p.principal
    gold_rate = _pct(p.goldAppreciationRate)
    fixed_rate = _pct(p.fixedRate)
    years = int(p.tenure)
    gold_value, coupon = growth.sgb_components(principal, gold_rate, years, fixed_rate)
    maturity = gold_value + coupon
    return Projection(
        invested=principal,
        maturity=maturity,
        years=years,
        # gold and coupon legs grow differently; the blended rate drives the real return
        rate=growth.cagr(principal, maturity, years),
        evolution=evolution.sgb_evolution(principal, gold_rate, years, fixed_rate),
        details={
            "principal": _round2(principal),
            "gramsOfGold": p.gramsOfGold,
            "goldPricePerGram": p.goldPricePerGram,
            "goldAppreciatedValue": _round2(gold_value),
            "fixedInterestAmount": _round2(coupon),
        },
    )


def _project_nps(p: NPSParams, prefs: Preferences) -> Projection:
    years = int(p.tenure)
    rate, current = growth.nps_rate(
        p.allocation(), p.bucket_returns(), int(p.currentAge), years, p.useAgeBasedCaps
    )
    invested, maturity, rows = _monthly_leg(p.monthlyContribution, rate / 12.0, years * 12)
    return Projection(
        invested=invested,
        maturity=maturity,
        years=years,
        rate=rate,
        evolution=rows,
        details={
            "weightedReturnPercent": round(rate * 100, 4),
            "equityCapPercent": round(growth.nps_equity_cap(int(p.currentAge)) * 100, 2),
            "allocation": {bucket: round(share * 100, 2) for bucket, share in current.items()},
            "useAgeBasedCaps": p.useAgeBasedCaps,
        },
    )


def _project_elss(p: ELSSParams, prefs: Preferences) -> Projection:
    rate = _pct(p.expectedReturn)
    years = int(p.tenure)
    invested, maturity, rows = _fund_leg(p.investmentType, p.amount, rate, years)
    return Projection(invested=invested, maturity=maturity, years=years, rate=rate, evolution=rows,
                      details={"lockInYears": config.ELSS_LOCK_IN, "investmentType": p.investmentType.value})


def _project_equity(p: EquityParams, prefs: Preferences) -> Projection:
    rate = _pct(p.expectedCAGR)
    years = int(p.tenure)
    invested, maturity, rows = _fund_leg(
        p.investmentType, p.amount, rate, years, _step_up(p.stepUpEnabled, p.stepUpPercentage)
    )
    return Projection(invested=invested, maturity=maturity, years=years, rate=rate, evolution=rows)


def _expense_paid(rows: list[Period], expense_ratio: float) -> float:
    """Expense ratio charged on the average of each year's start (after deposits) and end balance."""
    if not rows or not expense_ratio:
        return 0.0
    start = np.array([r.openingBalance + r.contribution for r in rows], dtype=np.float64)
    end = np.array([r.closingBalance for r in rows], dtype=np.float64)
    return float(np.sum((start + end) / 2.0) * expense_ratio)


def _project_etf(p: ETFParams, prefs: Preferences) -> Projection:
    gross = _pct(p.expectedCAGR)
    expense = _pct(p.expenseRatio)
    net = gross - expense
    years = int(p.tenure)
    invested, maturity, rows = _fund_leg(
        p.investmentType, p.amount, net, years, _step_up(p.stepUpEnabled, p.stepUpPercentage)
    )
    return Projection(
        invested=invested,
        maturity=maturity,
        years=years,
        rate=net,
        evolution=rows,
        details={
            "etfType": p.etfType.value,
            "netRatePercent": round(net * 100, 4),
            "expenseRatio": p.expenseRatio,
            "totalExpensePaid": _round2(_expense_paid(rows, expense)),
        },
        tax_options={"etf_type": p.etfType},
    )


def _project_debt_fund(p: DebtMutualFundParams, prefs: Preferences) -> Projection:
    rate = _pct(p.expectedReturn)
    years = int(p.tenure)
    invested, maturity, rows = _fund_leg(
        p.investmentType, p.amount, rate, years, _step_up(p.stepUpEnabled, p.stepUpPercentage)
    )
    details: dict = {"fundType": p.fundType}
    if p.purchaseYear is not None:
        details["indexation"] = tax_with_indexation(invested, maturity, p.purchaseYear, p.purchaseYear + years)
    return Projection(invested=invested, maturity=maturity, years=years, rate=rate, evolution=rows,
                      details=details)


def _project_ipo(p: IPOParams, prefs: Preferences) -> Projection:
    listing_price = resolve_listing_price(p)
    initial = p.sharesAllotted * p.issuePrice
    listing_value = p.sharesAllotted * listing_price
    rate = _pct(p.expectedCAGR)
    years = p.holdingPeriod
    final = growth.compound_interest(listing_value, rate, years, 1) if rate > 0 else listing_value
    return Projection(
        invested=initial,
        maturity=final,
        years=years,
        rate=rate,
        evolution=evolution.ipo_evolution(initial, listing_value, rate, years),
        details={
            "listingPrice": _round2(listing_price),
            "listingValue": _round2(listing_value),
            "listingGain": _round2(listing_value - initial),
            "listingGainPercent": _round2((listing_value - initial) / initial * 100),
            "postListingReturns": _round2(final - listing_value),
        },
    )


def _project_reits(p: REITsParams, prefs: Preferences) -> Projection:
    amount = p.investmentAmount
    dividend_yield = _pct(p.dividendYield)
    appreciation = _pct(p.appreciationRate)
    years = int(p.tenure)
    rows = evolution.reits_evolution(amount, dividend_yield, appreciation, years)
    if p.numberOfUnits:
        units, unit_price = p.numberOfUnits, amount / p.numberOfUnits
    else:
        unit_price = config.REITS_CONFIG["unit_price"]
        units = math.floor(amount / unit_price)
    return Projection(
        invested=amount,
        maturity=growth.reits_maturity(amount, dividend_yield, appreciation, years),
        years=years,
        rate=dividend_yield + appreciation,
        evolution=rows,
        details={
            "numberOfUnits": units,
            "unitPrice": _round2(unit_price),
            "totalDividendIncome": _round2(sum(r.breakdown["dividend"] for r in rows)),
            "totalCapitalGain": _round2(amount * ((1.0 + appreciation) ** years - 1.0)),
        },
    )


def _project_bonds_54ec(p: Bonds54ECParams, prefs: Preferences) -> Projection:
    """
    Interest compounds yearly over the 5-year lock-in. The benefit is the
    LTCG avoided on the exempted gain (20%, capped at 50L invested per FY),
    less slab tax on the interest.
    """
    rate = _pct(p.rate)
    years = config.BONDS_54EC_TENURE
    amount = p.investmentAmount
    maturity = growth.compound_interest(amount, rate, years, 1)
    exempted = min(amount, p.capitalGain, config.BONDS_54EC_MAX_EXEMPTION)
    tax_saved = exempted * config.BONDS_54EC_LTCG_RATE
    tax_on_interest = (maturity - amount) * prefs.incomeTaxSlab
    return Projection(
        invested=amount,
        maturity=maturity,
        years=years,
        rate=rate,
        evolution=evolution.lumpsum_evolution(amount, rate, years),
        details={
            "capitalGain": _round2(p.capitalGain),
            "exemptedCapitalGain": _round2(exempted),
            "taxSaved": _round2(tax_saved),
            "taxOnInterest": _round2(tax_on_interest),
            "netTaxBenefit": _round2(tax_saved - tax_on_interest),
        },
    )


PROJECTORS: dict[InstrumentType, Callable[..., Projection]] = {
    InstrumentType.PPF: _project_ppf,
    InstrumentType.FD: _project_fd,
    InstrumentType.RD: _project_rd,
    InstrumentType.SIP: _project_sip,
    InstrumentType.SSY: _project_ssy,
    InstrumentType.NSC: _project_nsc,
    InstrumentType.SCSS: _project_scss,
    InstrumentType.POMIS: _project_pomis,
    InstrumentType.SGB: _project_sgb,
    InstrumentType.NPS: _project_nps,
    InstrumentType.EQUITY: _project_equity,
    InstrumentType.ELSS: _project_elss,
    InstrumentType.IPO: _project_ipo,
    InstrumentType.ETF: _project_etf,
    InstrumentType.DEBT_MUTUAL_FUND: _project_debt_fund,
    InstrumentType.REITS: _project_reits,
    InstrumentType.BONDS_54EC: _project_bonds_54ec,
}

_missing = set(InstrumentType) - set(PROJECTORS)
if _missing:
    raise RuntimeError(f"PROJECTORS has no entry for {sorted(m.value for m in _missing)}")


# ---------------------------------------------------------------------------
# Shared orchestration
# ---------------------------------------------------------------------------

def project(instrument: InstrumentType | str, params: object, prefs: Preferences | None = None) -> Projection | None:
    """Validated gross projection, or None when params violate a constraint."""
    instrument = parse_instrument(instrument)
    errors = validate_params(instrument, params)
    if errors:
        logger.debug("Rejected %s params: %s", instrument.value, "; ".join(errors))
        return None
    return PROJECTORS[instrument](params, prefs or Preferences())


def _run(instrument: InstrumentType, params: object, prefs: Preferences | None) -> CalculationResult | None:
    prefs = prefs or Preferences()
    check_params(instrument, params)
    projection = project(instrument, params, prefs)
    if projection is None:
        return None

    invested = projection.invested
    maturity = projection.maturity
    returns = maturity - invested
    tax = compute_tax(
        maturity,
        instrument,
        projection.years,
        income_tax_slab=prefs.incomeTaxSlab,
        principal=invested,
        returns=returns,
        **projection.tax_options,
    )

    result = CalculationResult(
        instrument=instrument,
        investedAmount=_round2(invested),
        maturityAmount=_round2(maturity),
        returns=_round2(returns),
        returnPercentage=_round2(returns / invested * 100) if invested else 0.0,
        cagr=_round2(growth.cagr(invested, maturity, projection.years) * 100),
        taxAmount=tax.taxAmount,
        postTaxAmount=tax.postTaxCorpus,
        effectiveTaxRatePercent=tax.effectiveTaxRatePercent,
        taxNote=tax.notes,
        evolution=projection.evolution,
        details=projection.details,
    )
    if prefs.adjustInflation:
        figures = real_figures(
            maturity, invested, tax.postTaxCorpus, projection.rate, prefs.inflation_decimal, projection.years
        )
        result = result.model_copy(update=figures)
    return result


# ---------------------------------------------------------------------------
# Public orchestrators
# ---------------------------------------------------------------------------

def calculate_fd(params: FDParams, prefs: Preferences | None = None) -> CalculationResult | None:
    """Fixed deposit; tenure as years + months, compounding per params.compoundingFrequency."""
    return _run(InstrumentType.FD, params, prefs)


def calculate_rd(params: RDParams, prefs: Preferences | None = None) -> CalculationResult | None:
    return _run(InstrumentType.RD, params, prefs)


def calculate_ppf(params: PPFParams, prefs: Preferences | None = None) -> CalculationResult | None:
    return _run(InstrumentType.PPF, params, prefs)


def calculate_ssy(params: SSYParams, prefs: Preferences | None = None) -> CalculationResult | None:
    return _run(InstrumentType.SSY, params, prefs)


def calculate_sip(params: SIPParams, prefs: Preferences | None = None) -> CalculationResult | None:
    return _run(InstrumentType.SIP, params, prefs)


def calculate_nsc(params: NSCParams, prefs: Preferences | None = None) -> CalculationResult | None:
    return _run(InstrumentType.NSC, params, prefs)


def calculate_scss(params: SCSSParams, prefs: Preferences | None = None) -> CalculationResult | None:
    return _run(InstrumentType.SCSS, params, prefs)


def calculate_pomis(params: POMISParams, prefs: Preferences | None = None) -> CalculationResult | None:
    """Monthly income scheme; details carry the monthly payout."""
    return _run(InstrumentType.POMIS, params, prefs)


def calculate_sgb(params: SGBParams, prefs: Preferences | None = None) -> CalculationResult | None:
    """Sovereign gold bond. goldPricePerGram must already be filled in (see pipeline.run_calculator)."""
    return _run(InstrumentType.SGB, params, prefs)


def calculate_nps(params: NPSParams, prefs: Preferences | None = None) -> CalculationResult | None:
    return _run(InstrumentType.NPS, params, prefs)


def calculate_elss(params: ELSSParams, prefs: Preferences | None = None) -> CalculationResult | None:
    return _run(InstrumentType.ELSS, params, prefs)


def calculate_equity(params: EquityParams, prefs: Preferences | None = None) -> CalculationResult | None:
    return _run(InstrumentType.EQUITY, params, prefs)


def calculate_etf(params: ETFParams, prefs: Preferences | None = None) -> CalculationResult | None:
    """ETF at CAGR net of the expense ratio; tax follows the ETF type."""
    return _run(InstrumentType.ETF, params, prefs)


def calculate_debt_mutual_fund(params: DebtMutualFundParams, prefs: Preferences | None = None) -> CalculationResult | None:
    return _run(InstrumentType.DEBT_MUTUAL_FUND, params, prefs)


def calculate_ipo(params: IPOParams, prefs: Preferences | None = None) -> CalculationResult | None:
    return _run(InstrumentType.IPO, params, prefs)


def calculate_reits(params: REITsParams, prefs: Preferences | None = None) -> CalculationResult | None:
    return _run(InstrumentType.REITS, params, prefs)


def calculate_bonds_54ec(params: Bonds54ECParams, prefs: Preferences | None = None) -> CalculationResult | None:
    return _run(InstrumentType.BONDS_54EC, params, prefs)
