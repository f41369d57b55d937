# Test type: unit + integration
# Validation: instrument-keyed dispatch, dict parsing, error reporting, gold price injection
# Command: pytest test/test_pipeline.py -v

import pytest

from fincalc.models import (
    GoldPriceQuote,
    InstrumentType,
    NSCParams,
    PARAM_MODELS,
    Preferences,
    UnknownInstrumentError,
)
from fincalc.pipeline import (
    CALCULATORS,
    compute_evolution,
    compute_growth,
    evaluate,
    parse_params,
    run_calculator,
)

FD = {"principal": 100000, "rate": 7, "tenureYears": 5}


# ---------------------------------------------------------------------------
# Dispatch tables
# ---------------------------------------------------------------------------

class TestDispatch:
    def test_tables_cover_every_instrument(self):
        assert set(CALCULATORS) == set(InstrumentType)
        assert set(PARAM_MODELS) == set(InstrumentType)

    def test_unknown_instrument(self):
        with pytest.raises(UnknownInstrumentError):
            evaluate("lottery", {})
        with pytest.raises(UnknownInstrumentError):
            compute_growth("lottery", {})

    def test_parse_passes_models_through(self):
        params = NSCParams(principal=100000)
        assert parse_params("nsc", params) is params

    def test_parse_dict(self):
        params = parse_params("nsc", {"principal": "100000"})
        assert isinstance(params, NSCParams)
        assert params.principal == 100000.0

    def test_blank_strings_are_missing(self):
        assert parse_params("fd", {"principal": ""}).principal is None


# ---------------------------------------------------------------------------
# evaluate / run_calculator
# ---------------------------------------------------------------------------

class TestEvaluate:
    def test_success(self):
        result, errors = evaluate("fd", FD)
        assert errors == []
        assert result.instrument is InstrumentType.FD
        assert result.maturityAmount == pytest.approx(141477.82, abs=0.01)

    def test_constraint_violation(self):
        result, errors = evaluate("fd", dict(FD, principal=500))
        assert result is None
        assert errors == ["Principal amount must be at least 1,000"]

    def test_type_error_becomes_message(self):
        result, errors = evaluate("fd", dict(FD, principal="lots"))
        assert result is None
        assert len(errors) == 1
        assert errors[0].startswith("principal: ")

    def test_preferences_forwarded(self):
        result, _ = evaluate("fd", FD, Preferences(incomeTaxSlab=0.0))
        assert result.taxAmount == 0.0

    def test_run_calculator(self):
        assert run_calculator("nsc", {"principal": 100000}).maturityAmount == pytest.approx(144903.38, abs=0.01)
        assert run_calculator("nsc", {"principal": 10}) is None


class TestGoldPrice:
    def test_quote_fills_missing_price(self):
        quote = GoldPriceQuote(pricePerGram=7000, isRealTime=True)
        result, errors = evaluate("sgb", {"gramsOfGold": 10}, gold_quote=quote)
        assert errors == []
        assert result.investedAmount == 70000
        assert result.details["goldPriceIsRealTime"] is True

    def test_entered_price_wins(self):
        quote = GoldPriceQuote(pricePerGram=7000, isRealTime=False)
        result, _ = evaluate("sgb", {"gramsOfGold": 10, "goldPricePerGram": 6000}, gold_quote=quote)
        assert result.investedAmount == 60000
        assert result.details["goldPriceIsRealTime"] is False

    def test_without_quote_price_is_required(self):
        result, errors = evaluate("sgb", {"gramsOfGold": 10})
        assert result is None
        assert errors == ["Gold price per gram is required"]


# ---------------------------------------------------------------------------
# Growth / evolution helpers
# ---------------------------------------------------------------------------

class TestHelpers:
    def test_growth_is_gross(self):
        assert compute_growth("fd", FD) == pytest.approx(141477.82, abs=0.01)

    def test_growth_invalid_is_zero(self):
        assert compute_growth("fd", {"principal": 10}) == 0.0
        assert compute_growth("fd", {"principal": "x"}) == 0.0

    def test_evolution_invalid_is_empty(self):
        assert compute_evolution("ppf", {}) == []

    def test_evolution(self):
        rows = compute_evolution("fd", FD)
        assert len(rows) == 5
