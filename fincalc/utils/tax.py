"""
utils/tax.py -- Tax rule table and tax-on-withdrawal dispatcher.

compute_tax(corpus, instrument, tenure, ...)   -> TaxResult
tax_during_accumulation(...)                   -> AccumulationTax
tax_both(...)                                  -> TaxComparison
tax_for_instruments(...)                       -> PortfolioTax

Rule variants (TaxRule.variant):
  exempt               -- PPF, SSY: no tax
  ltcg                 -- held >= min period: 10% on gains above the unused
                          1L exemption; otherwise 15% STCG on the FULL corpus
  ltcg_indexed         -- held >= 3y: 20% on corpus - principal * 1.06^t;
                          otherwise gains at the income-tax slab
  partial              -- NPS: 40% of corpus taxed at slab
  conditional          -- SGB: exempt from 5 years, else 15% of corpus
  interest             -- interest taxed at slab
  capital_gains_exempt -- 54EC: only the interest leg, at slab

The STCG branch taxes principal + gains. That is how the calculators have
always reported it; tests lock it in.
"""
from __future__ import annotations

import logging
from typing import Any, Callable

from fincalc import config
from fincalc.models import (
    AccumulationTax,
    AccumulationYear,
    EtfType,
    InstrumentType,
    PortfolioTax,
    PortfolioTaxEntry,
    TaxComparison,
    TaxMethod,
    TaxResult,
    TaxRule,
    TaxVariant,
    _round2,
    parse_instrument,
)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Rule table
# ---------------------------------------------------------------------------

_EEE = TaxRule(variant=TaxVariant.EXEMPT, rate=0.0, notes="Tax-free (EEE - Exempt, Exempt, Exempt)")


def _equity_rule(min_holding: float, notes: str) -> TaxRule:
    return TaxRule(
        variant=TaxVariant.LTCG,
        rate=config.LTCG_RATE,
        exemptionLimit=config.LTCG_EXEMPTION,
        minHoldingPeriod=min_holding,
        stcgRate=config.STCG_RATE,
        notes=notes,
    )


def _indexed_rule(notes: str) -> TaxRule:
    return TaxRule(
        variant=TaxVariant.LTCG_INDEXED,
        rate=config.INDEXED_LTCG_RATE,
        minHoldingPeriod=3,
        indexationRate=config.INDEXATION_PROXY,
        notes=notes,
    )


def _interest_rule(notes: str) -> TaxRule:
    return TaxRule(
        variant=TaxVariant.INTEREST,
        fallbackInterestRatio=config.INTEREST_FALLBACK_RATIO,
        notes=notes,
    )


_EQUITY_NOTES = "LTCG: 10% above 1L exemption (held > 1 year). STCG: 15% (held < 1 year)"

TAX_RULES: dict[InstrumentType, TaxRule] = {
    InstrumentType.PPF: _EEE,
    InstrumentType.SSY: _EEE,
    InstrumentType.FD: _interest_rule(
        "Interest taxed annually as per income slab. TDS applicable if interest > 40,000 "
        "(50,000 for senior citizens)"
    ),
    InstrumentType.RD: _interest_rule("Interest taxed as per income slab, TDS as for FDs"),
    InstrumentType.NSC: _interest_rule(
        "Interest taxable as per income slab. Reinvested interest qualifies for 80C"
    ),
    InstrumentType.SCSS: _interest_rule("Interest taxable quarterly as per income slab"),
    InstrumentType.POMIS: _interest_rule("Monthly interest taxable as per income slab"),
    InstrumentType.EQUITY: _equity_rule(1, _EQUITY_NOTES),
    InstrumentType.SIP: _equity_rule(1, _EQUITY_NOTES),
    InstrumentType.ELSS: _equity_rule(
        config.ELSS_LOCK_IN,
        "LTCG: 10% above 1L exemption (held > 3 years). STCG: 15% (held < 3 years)",
    ),
    InstrumentType.IPO: _equity_rule(1, _EQUITY_NOTES + ". Listing gains taxable"),
    InstrumentType.REITS: _equity_rule(
        1,
        "Dividend income taxable as per slab. LTCG: 10% above 1L exemption (held > 1 year). "
        "STCG: 15% (held < 1 year). No indexation benefit",
    ),
    InstrumentType.ETF: _equity_rule(1, "Equity ETFs: " + _EQUITY_NOTES),
    InstrumentType.DEBT_MUTUAL_FUND: _indexed_rule(
        "LTCG: 20% with indexation after 3 years. STCG: taxed as per income slab"
    ),
    InstrumentType.NPS: TaxRule(
        variant=TaxVariant.PARTIAL,
        taxablePortion=config.NPS_TAXABLE_PORTION,
        notes="60% tax-free, 40% taxable as per income slab",
    ),
    InstrumentType.SGB: TaxRule(
        variant=TaxVariant.CONDITIONAL,
        rate=0.0,
        minHoldingPeriod=config.SGB_TAX_FREE_AFTER,
        stcgRate=config.STCG_RATE,
        notes="Capital gains exempt if held till maturity (5/8 years). Interest (2.5%) taxable annually",
    ),
    InstrumentType.BONDS_54EC: TaxRule(
        variant=TaxVariant.CAPITAL_GAINS_EXEMPT,
        fallbackInterestRatio=config.BONDS_54EC_INTEREST_FALLBACK_RATIO,
        notes="Exempts LTCG on property sale (up to 50L per FY). Interest taxable as per income slab",
    ),
}

ETF_TAX_RULES: dict[EtfType, TaxRule] = {
    EtfType.EQUITY: TAX_RULES[InstrumentType.ETF],
    EtfType.INTERNATIONAL: _equity_rule(1, "International ETFs: " + _EQUITY_NOTES),
    EtfType.DEBT: _indexed_rule("Debt ETFs: LTCG 20% with indexation after 3 years"),
    EtfType.GOLD: _indexed_rule("Gold ETFs: LTCG 20% with indexation after 3 years"),
}

_missing = set(InstrumentType) - set(TAX_RULES)
if _missing:
    raise RuntimeError(f"TAX_RULES has no entry for {sorted(m.value for m in _missing)}")


def tax_rule_for(instrument: InstrumentType | str, etf_type: EtfType | str | None = None) -> TaxRule:
    """Rule for an instrument; ETFs resolve through their sub-type."""
    instrument = parse_instrument(instrument)
    if instrument is InstrumentType.ETF and etf_type is not None:
        return ETF_TAX_RULES[EtfType(etf_type)]
    return TAX_RULES[instrument]


# ---------------------------------------------------------------------------
# Variant handlers -- each returns the tax amount before rounding
# ---------------------------------------------------------------------------

def _interest_earned(corpus: float, principal: float | None, returns: float | None) -> float | None:
    """Explicit returns first, then corpus - principal; None when neither is usable."""
    if returns is not None and returns > 0:
        return returns
    if principal is not None and principal > 0 and corpus > principal:
        return corpus - principal
    return None


def _tax_exempt(corpus: float, tenure: float, rule: TaxRule, ctx: dict[str, Any]) -> float:
    return 0.0


def _tax_ltcg(corpus: float, tenure: float, rule: TaxRule, ctx: dict[str, Any]) -> float:
    if tenure < rule.minHoldingPeriod:
        # Short term -- full corpus, not just the gain
        return corpus * (rule.stcgRate or config.STCG_RATE)
    if ctx["returns"] is not None:
        gains = ctx["returns"]
    elif ctx["principal"] is not None:
        gains = corpus - ctx["principal"]
    else:
        gains = corpus
    available = max(0.0, rule.exemptionLimit - ctx["ltcg_exemption_used"])
    return max(0.0, gains - available) * (rule.rate or 0.0)


def _tax_ltcg_indexed(corpus: float, tenure: float, rule: TaxRule, ctx: dict[str, Any]) -> float:
    principal = ctx["principal"]
    if principal is None:
        returns = ctx["returns"]
        principal = corpus - returns if returns is not None and returns > 0 else corpus * 0.7
    if tenure >= rule.minHoldingPeriod:
        indexed_cost = principal * (1.0 + rule.indexationRate) ** tenure
        return max(0.0, corpus - indexed_cost) * (rule.rate or 0.0)
    return max(0.0, corpus - principal) * ctx["income_tax_slab"]


def _tax_partial(corpus: float, tenure: float, rule: TaxRule, ctx: dict[str, Any]) -> float:
    return corpus * rule.taxablePortion * ctx["income_tax_slab"]


def _tax_conditional(corpus: float, tenure: float, rule: TaxRule, ctx: dict[str, Any]) -> float:
    if tenure >= rule.minHoldingPeriod:
        # Coupon is taxed as it is received, so nothing is due at redemption
        return 0.0
    return corpus * (rule.stcgRate or config.STCG_RATE)


def _tax_interest(corpus: float, tenure: float, rule: TaxRule, ctx: dict[str, Any]) -> float:
    interest = _interest_earned(corpus, ctx["principal"], ctx["returns"])
    if interest is None:
        logger.warning(
            "No principal or returns given for %s tax; estimating interest as %.0f%% of corpus",
            rule.variant.value, rule.fallbackInterestRatio * 100,
        )
        interest = corpus * rule.fallbackInterestRatio
    return interest * ctx["income_tax_slab"]


_VARIANT_HANDLERS: dict[TaxVariant, Callable[[float, float, TaxRule, dict[str, Any]], float]] = {
    TaxVariant.EXEMPT: _tax_exempt,
    TaxVariant.LTCG: _tax_ltcg,
    TaxVariant.LTCG_INDEXED: _tax_ltcg_indexed,
    TaxVariant.PARTIAL: _tax_partial,
    TaxVariant.CONDITIONAL: _tax_conditional,
    TaxVariant.INTEREST: _tax_interest,
    TaxVariant.CAPITAL_GAINS_EXEMPT: _tax_interest,
}


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def compute_tax(
    corpus: float,
    instrument: InstrumentType | str,
    tenure: float,
    income_tax_slab: float = config.DEFAULT_TAX_SLAB,
    principal: float | None = None,
    returns: float | None = None,
    ltcg_exemption_used: float = 0.0,
    etf_type: EtfType | str | None = None,
) -> TaxResult:
    """
    Tax due when the corpus is withdrawn.

    Raises UnknownInstrumentError for an instrument outside the rule table;
    every numeric edge case (zero corpus, missing principal) returns a result.
    """
    rule = tax_rule_for(instrument, etf_type)
    if not corpus or corpus <= 0:
        return TaxResult(
            taxAmount=0.0,
            postTaxCorpus=_round2(corpus or 0.0),
            effectiveTaxRatePercent=0.0,
            variant=rule.variant,
            notes=rule.notes,
        )

    ctx = {
        "income_tax_slab": income_tax_slab,
        "principal": principal,
        "returns": returns,
        "ltcg_exemption_used": ltcg_exemption_used or 0.0,
    }
    tax = _VARIANT_HANDLERS[rule.variant](corpus, tenure, rule, ctx)
    return TaxResult(
        taxAmount=_round2(tax),
        postTaxCorpus=_round2(corpus - tax),
        effectiveTaxRatePercent=_round2(tax / corpus * 100),
        variant=rule.variant,
        notes=rule.notes,
    )


def tax_during_accumulation(
    investment: dict[str, Any],
    instrument: InstrumentType | str,
    tenure: float,
    income_tax_slab: float = config.DEFAULT_TAX_SLAB,
) -> AccumulationTax:
    """
    Tax paid every year instead of at withdrawal.

    Only interest-taxed instruments pay tax while accumulating. Interest is
    estimated at a flat 8% a year on the running post-tax corpus.
    """
    rule = tax_rule_for(instrument)
    if not investment or not tenure or tenure <= 0 or rule.variant is not TaxVariant.INTEREST:
        return AccumulationTax()

    corpus = float(investment.get("principal") or investment.get("yearlyInvestment") or 0.0)
    total_tax = 0.0
    breakdown: list[AccumulationYear] = []
    for year in range(1, int(tenure) + 1):
        interest = corpus * config.ACCUMULATION_INTEREST_ESTIMATE
        tax = interest * income_tax_slab
        total_tax += tax
        corpus += interest - tax
        breakdown.append(
            AccumulationYear(
                year=year,
                interestEarned=_round2(interest),
                taxPaid=_round2(tax),
                netCorpus=_round2(corpus),
            )
        )
    return AccumulationTax(
        totalTaxPaid=_round2(total_tax),
        finalCorpus=_round2(corpus),
        annualTaxBreakdown=breakdown,
    )


def tax_both(
    corpus: float,
    investment: dict[str, Any],
    instrument: InstrumentType | str,
    tenure: float,
    income_tax_slab: float = config.DEFAULT_TAX_SLAB,
    **options: Any,
) -> TaxComparison:
    """Withdrawal vs accumulation, with the post-tax difference."""
    withdrawal = compute_tax(corpus, instrument, tenure, income_tax_slab=income_tax_slab, **options)
    accumulation = tax_during_accumulation(investment, instrument, tenure, income_tax_slab)
    more_beneficial = (
        TaxMethod.WITHDRAWAL
        if withdrawal.postTaxCorpus > accumulation.finalCorpus
        else TaxMethod.ACCUMULATION
    )
    return TaxComparison(
        withdrawal=withdrawal,
        accumulation=accumulation,
        difference=_round2(withdrawal.postTaxCorpus - accumulation.finalCorpus),
        moreBeneficial=more_beneficial,
    )


def tax_for_instruments(
    corpus_by_instrument: dict[Any, float],
    investments: dict[Any, dict[str, Any]],
    instruments: list[InstrumentType | str],
    method: TaxMethod | str = TaxMethod.WITHDRAWAL,
    income_tax_slab: float = config.DEFAULT_TAX_SLAB,
) -> PortfolioTax:
    """
    Tax across a portfolio. Tenure for each instrument is read from its
    investment data ("tenure"); missing data counts as a zero corpus.
    """
    method = TaxMethod(method)
    result = PortfolioTax()
    total_tax = 0.0
    total_post_tax = 0.0

    for raw in instruments or []:
        instrument = parse_instrument(raw)
        corpus = float(_lookup(corpus_by_instrument, instrument) or 0.0)
        data = _lookup(investments, instrument) or {}
        tenure = float(data.get("tenure") or 0.0)

        if method is TaxMethod.ACCUMULATION:
            acc = tax_during_accumulation(data, instrument, tenure, income_tax_slab)
            entry = PortfolioTaxEntry(taxAmount=acc.totalTaxPaid, postTaxCorpus=acc.finalCorpus)
        elif method is TaxMethod.BOTH:
            comparison = tax_both(corpus, data, instrument, tenure, income_tax_slab)
            entry = PortfolioTaxEntry(
                taxAmount=comparison.withdrawal.taxAmount,
                postTaxCorpus=comparison.withdrawal.postTaxCorpus,
                comparison=comparison,
            )
        else:
            tax = compute_tax(corpus, instrument, tenure, income_tax_slab=income_tax_slab)
            entry = PortfolioTaxEntry(taxAmount=tax.taxAmount, postTaxCorpus=tax.postTaxCorpus)

        result.byInstrument[instrument.value] = entry
        total_tax += entry.taxAmount
        total_post_tax += entry.postTaxCorpus

    result.totalTaxAmount = _round2(total_tax)
    result.totalPostTaxCorpus = _round2(total_post_tax)
    return result


def _lookup(mapping: dict[Any, Any], instrument: InstrumentType) -> Any:
    """Mappings may be keyed by the enum or by its string value."""
    if not mapping:
        return None
    if instrument in mapping:
        return mapping[instrument]
    return mapping.get(instrument.value)
