# Test type: unit
# Validation: withdrawal tax per rule variant, accumulation tax, portfolio tax
# Command: pytest test/test_tax.py -v

import pytest

from fincalc.models import (
    EtfType,
    InstrumentType,
    TaxMethod,
    TaxVariant,
    UnknownInstrumentError,
)
from fincalc.utils.tax import (
    TAX_RULES,
    compute_tax,
    tax_both,
    tax_during_accumulation,
    tax_for_instruments,
    tax_rule_for,
)


# ---------------------------------------------------------------------------
# Rule table
# ---------------------------------------------------------------------------

class TestRuleTable:
    def test_every_instrument_has_a_rule(self):
        assert set(TAX_RULES) == set(InstrumentType)

    @pytest.mark.parametrize(
        "instrument, variant",
        [
            ("ppf", TaxVariant.EXEMPT),
            ("ssy", TaxVariant.EXEMPT),
            ("fd", TaxVariant.INTEREST),
            ("rd", TaxVariant.INTEREST),
            ("pomis", TaxVariant.INTEREST),
            ("sip", TaxVariant.LTCG),
            ("elss", TaxVariant.LTCG),
            ("debtMutualFund", TaxVariant.LTCG_INDEXED),
            ("nps", TaxVariant.PARTIAL),
            ("sgb", TaxVariant.CONDITIONAL),
            ("bonds54EC", TaxVariant.CAPITAL_GAINS_EXEMPT),
        ],
    )
    def test_variant(self, instrument, variant):
        assert tax_rule_for(instrument).variant is variant

    def test_etf_sub_types(self):
        assert tax_rule_for("etf", EtfType.EQUITY).variant is TaxVariant.LTCG
        assert tax_rule_for("etf", "international").variant is TaxVariant.LTCG
        assert tax_rule_for("etf", "gold").variant is TaxVariant.LTCG_INDEXED
        assert tax_rule_for("etf", EtfType.DEBT).variant is TaxVariant.LTCG_INDEXED

    def test_etf_without_sub_type_is_equity(self):
        assert tax_rule_for("etf").variant is TaxVariant.LTCG

    def test_unknown_instrument_raises(self):
        with pytest.raises(UnknownInstrumentError):
            compute_tax(100000, "crypto", 5)


# ---------------------------------------------------------------------------
# Withdrawal tax
# ---------------------------------------------------------------------------

class TestWithdrawalTax:
    def test_zero_corpus(self):
        result = compute_tax(0, "sip", 5)
        assert result.taxAmount == 0.0
        assert result.postTaxCorpus == 0.0
        assert result.effectiveTaxRatePercent == 0.0

    def test_exempt(self):
        result = compute_tax(271000, "ppf", 15)
        assert result.taxAmount == 0.0
        assert result.postTaxCorpus == 271000

    def test_sip_long_term_scenario(self):
        # 11L gains, 1L exempt -> 10% of 10L
        result = compute_tax(1600000, "sip", 10, returns=1100000)
        assert result.taxAmount == pytest.approx(100000.0)
        assert result.postTaxCorpus == pytest.approx(1500000.0)
        assert result.effectiveTaxRatePercent == pytest.approx(6.25)

    def test_ltcg_at_exemption_threshold(self):
        assert compute_tax(600000, "equity", 5, returns=100000).taxAmount == 0.0

    def test_ltcg_one_rupee_above_threshold(self):
        assert compute_tax(600001, "equity", 5, returns=100001).taxAmount == pytest.approx(0.1)

    def test_ltcg_exemption_already_used(self):
        result = compute_tax(700000, "equity", 5, returns=200000, ltcg_exemption_used=50000)
        assert result.taxAmount == pytest.approx(15000.0)

    def test_ltcg_gains_from_principal(self):
        result = compute_tax(400000, "equity", 5, principal=200000)
        assert result.taxAmount == pytest.approx(10000.0)

    def test_short_term_taxes_full_corpus(self):
        result = compute_tax(110000, "equity", 0.5, returns=10000)
        assert result.taxAmount == pytest.approx(16500.0)

    def test_elss_short_term_below_lock_in(self):
        result = compute_tax(200000, "elss", 2, returns=50000)
        assert result.taxAmount == pytest.approx(30000.0)

    def test_interest_from_principal(self):
        result = compute_tax(141477.82, "fd", 5, income_tax_slab=0.30, principal=100000)
        assert result.taxAmount == pytest.approx(12443.35, abs=0.01)

    def test_interest_fallback_estimate(self):
        # no principal or returns: 30% of the corpus is treated as interest
        result = compute_tax(100000, "fd", 5, income_tax_slab=0.30)
        assert result.taxAmount == pytest.approx(9000.0)

    def test_nps_partial(self):
        result = compute_tax(1000000, "nps", 20, income_tax_slab=0.30)
        assert result.taxAmount == pytest.approx(120000.0)

    def test_sgb_held_to_maturity(self):
        assert compute_tax(200000, "sgb", 8).taxAmount == 0.0

    def test_sgb_early_exit(self):
        assert compute_tax(200000, "sgb", 3).taxAmount == pytest.approx(30000.0)

    def test_debt_fund_indexed(self):
        result = compute_tax(150000, "debtMutualFund", 5, principal=100000)
        assert result.taxAmount == pytest.approx(3235.49, abs=0.01)

    def test_debt_fund_short_term_at_slab(self):
        result = compute_tax(110000, "debtMutualFund", 2, income_tax_slab=0.30, principal=100000)
        assert result.taxAmount == pytest.approx(3000.0)

    def test_54ec_interest_only(self):
        result = compute_tax(127000, "bonds54EC", 5, income_tax_slab=0.30, principal=100000)
        assert result.taxAmount == pytest.approx(8100.0)

    def test_54ec_fallback(self):
        assert compute_tax(100000, "bonds54EC", 5, income_tax_slab=0.30).taxAmount == pytest.approx(7500.0)

    def test_gold_etf_uses_indexation(self):
        result = compute_tax(150000, "etf", 5, principal=100000, etf_type="gold")
        assert result.variant is TaxVariant.LTCG_INDEXED
        assert result.taxAmount == pytest.approx(3235.49, abs=0.01)


# ---------------------------------------------------------------------------
# Accumulation and comparison
# ---------------------------------------------------------------------------

class TestAccumulation:
    def test_interest_instrument(self):
        acc = tax_during_accumulation({"principal": 100000}, "fd", 2, 0.30)
        assert [y.interestEarned for y in acc.annualTaxBreakdown] == pytest.approx([8000.0, 8448.0])
        assert acc.totalTaxPaid == pytest.approx(4934.4)
        assert acc.finalCorpus == pytest.approx(111513.6)

    def test_non_interest_instrument_pays_nothing(self):
        acc = tax_during_accumulation({"yearlyInvestment": 10000}, "ppf", 15, 0.30)
        assert acc.totalTaxPaid == 0.0
        assert acc.annualTaxBreakdown == []

    def test_zero_tenure(self):
        assert tax_during_accumulation({"principal": 100000}, "fd", 0).annualTaxBreakdown == []

    def test_both_picks_higher_post_tax(self):
        comparison = tax_both(114490, {"principal": 100000}, "fd", 2, 0.30, principal=100000)
        assert comparison.withdrawal.taxAmount == pytest.approx(4347.0)
        assert comparison.moreBeneficial is TaxMethod.ACCUMULATION
        assert comparison.difference == pytest.approx(110143.0 - 111513.6, abs=0.01)


class TestPortfolioTax:
    def test_withdrawal(self):
        result = tax_for_instruments(
            {"ppf": 200000, "sip": 1600000},
            {"ppf": {"tenure": 15}, "sip": {"tenure": 10}},
            ["ppf", "sip"],
        )
        # no principal for the SIP -> the whole corpus counts as gains
        assert result.byInstrument["ppf"].taxAmount == 0.0
        assert result.byInstrument["sip"].taxAmount == pytest.approx(150000.0)
        assert result.totalTaxAmount == pytest.approx(150000.0)
        assert result.totalPostTaxCorpus == pytest.approx(1650000.0)

    def test_enum_keys_accepted(self):
        result = tax_for_instruments(
            {InstrumentType.NPS: 1000000},
            {InstrumentType.NPS: {"tenure": 20}},
            [InstrumentType.NPS],
        )
        assert result.byInstrument["nps"].taxAmount == pytest.approx(120000.0)

    def test_missing_corpus_counts_as_zero(self):
        result = tax_for_instruments({}, {}, ["fd"])
        assert result.byInstrument["fd"].taxAmount == 0.0
        assert result.totalPostTaxCorpus == 0.0

    def test_both_attaches_comparison(self):
        result = tax_for_instruments(
            {"fd": 114490}, {"fd": {"principal": 100000, "tenure": 2}}, ["fd"], method="both",
        )
        entry = result.byInstrument["fd"]
        assert entry.comparison is not None
        assert entry.comparison.accumulation.finalCorpus == pytest.approx(111513.6)

    def test_accumulation(self):
        result = tax_for_instruments(
            {"fd": 114490}, {"fd": {"principal": 100000, "tenure": 2}}, ["fd"], method=TaxMethod.ACCUMULATION,
        )
        assert result.totalTaxAmount == pytest.approx(4934.4)
