# Test type: unit
# Validation: per-instrument parameter constraints and their messages
# Command: pytest test/test_validator.py -v

import pytest

from fincalc.models import (
    Bonds54ECParams,
    ETFParams,
    FDParams,
    InstrumentType,
    IPOParams,
    NPSParams,
    NSCParams,
    POMISParams,
    PPFParams,
    RDParams,
    SCSSParams,
    SGBParams,
    SIPParams,
    SSYParams,
    UnknownInstrumentError,
)
from fincalc.utils.validator import (
    MSG_ALLOCATION,
    MSG_EXCEEDS_GAIN,
    MSG_LISTING,
    MSG_STEP_UP,
    VALIDATORS,
    resolve_listing_price,
    validate_params,
)


def _fd(**kwargs) -> FDParams:
    base = {"principal": 100000, "rate": 7, "tenureYears": 5}
    base.update(kwargs)
    return FDParams(**base)


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------

class TestDispatch:
    def test_every_instrument_has_a_validator(self):
        assert set(VALIDATORS) == set(InstrumentType)

    def test_unknown_instrument(self):
        with pytest.raises(UnknownInstrumentError):
            validate_params("gold", _fd())

    def test_wrong_model_is_a_programmer_error(self):
        with pytest.raises(TypeError):
            validate_params("ppf", _fd())

    def test_string_instrument_accepted(self):
        assert validate_params("fd", _fd()) == []


# ---------------------------------------------------------------------------
# Deposits
# ---------------------------------------------------------------------------

class TestFixedDeposit:
    def test_valid(self):
        assert validate_params(InstrumentType.FD, _fd()) == []

    def test_empty_form(self):
        assert validate_params("fd", FDParams()) == [
            "Principal amount is required",
            "Please enter at least 1 month",
        ]

    def test_principal_minimum(self):
        assert validate_params("fd", _fd(principal=500)) == ["Principal amount must be at least 1,000"]

    def test_collects_every_violation(self):
        errors = validate_params("fd", _fd(principal=10, rate=0))
        assert errors == ["Principal amount must be at least 1,000", "Interest rate must be at least 0.1%"]

    def test_months_out_of_range(self):
        assert validate_params("fd", _fd(tenureYears=1, tenureMonths=12)) == ["Months must be between 0 and 11"]

    def test_legacy_tenure(self):
        params = FDParams(principal=100000, rate=7, tenure=18, tenureUnit="months")
        assert validate_params("fd", params) == []

    def test_no_upper_tenure_limit(self):
        assert validate_params("fd", _fd(tenureYears=25)) == []


class TestRecurringDeposit:
    def test_valid(self):
        assert validate_params("rd", RDParams(monthlyDeposit=1000, tenureYears=3, tenureMonths=4)) == []

    def test_years_out_of_range(self):
        errors = validate_params("rd", RDParams(monthlyDeposit=1000, tenureYears=11))
        assert errors == ["Years must be between 0 and 10"]

    def test_maximum_tenure(self):
        errors = validate_params("rd", RDParams(monthlyDeposit=1000, tenureYears=10, tenureMonths=1))
        assert errors == ["Maximum tenure is 10 years (120 months)"]

    def test_deposit_minimum(self):
        errors = validate_params("rd", RDParams(monthlyDeposit=100, tenureYears=1))
        assert errors == ["Monthly deposit must be at least 500"]


class TestSmallSavings:
    def test_ppf_yearly_ceiling(self):
        errors = validate_params("ppf", PPFParams(yearlyInvestment=200000))
        assert errors == ["Yearly investment cannot exceed 150,000"]

    def test_ppf_tenure(self):
        errors = validate_params("ppf", PPFParams(yearlyInvestment=10000, tenure=0))
        assert errors == ["Tenure must be at least 1 year"]

    def test_step_up_needs_percentage(self):
        errors = validate_params("ppf", PPFParams(yearlyInvestment=10000, stepUpEnabled=True))
        assert errors == [MSG_STEP_UP]

    def test_ssy_age(self):
        errors = validate_params("ssy", SSYParams(yearlyInvestment=10000, girlsAge=12, startYear=2024))
        assert errors == ["Girl's age must be between 0 and 9"]

    def test_ssy_start_year_required(self):
        errors = validate_params("ssy", SSYParams(yearlyInvestment=10000, girlsAge=2))
        assert errors == ["Start year is required"]

    def test_nsc_minimum(self):
        assert validate_params("nsc", NSCParams(principal=999)) == ["Investment amount must be at least 1,000"]

    def test_scss_age(self):
        errors = validate_params("scss", SCSSParams(principal=500000, currentAge=58))
        assert errors == ["Minimum age for SCSS is 60 years"]

    def test_scss_defense_personnel_from_55(self):
        params = SCSSParams(principal=500000, currentAge=58, isDefensePersonnel=True)
        assert validate_params("scss", params) == []

    def test_scss_tenure_cap(self):
        errors = validate_params("scss", SCSSParams(principal=500000, currentAge=62, tenure=6))
        assert errors == ["Tenure cannot exceed 5 years"]

    def test_pomis_single_vs_joint(self):
        assert validate_params("pomis", POMISParams(principal=1200000)) == [
            "Investment amount cannot exceed 900,000"
        ]
        assert validate_params("pomis", POMISParams(principal=1200000, isJointAccount=True)) == []


# ---------------------------------------------------------------------------
# Market-linked
# ---------------------------------------------------------------------------

class TestMarketLinked:
    def test_sip_month_tenure_message(self):
        errors = validate_params("sip", SIPParams(monthlySIP=1000, expectedReturn=12, tenure=0, tenureUnit="months"))
        assert errors == ["Tenure must be at least 1 month"]

    def test_sgb_grams(self):
        errors = validate_params("sgb", SGBParams(gramsOfGold=0.5, goldPricePerGram=6000))
        assert errors == ["Gold amount (grams) must be at least 1"]

    def test_sgb_principal_instead_of_grams(self):
        assert validate_params("sgb", SGBParams(principal=60000)) == []

    def test_sgb_missing_price(self):
        assert validate_params("sgb", SGBParams(gramsOfGold=10)) == ["Gold price per gram is required"]

    def test_nps_allocation(self):
        params = NPSParams(monthlyContribution=5000, tenure=20, currentAge=30, governmentBondsAllocation=10)
        assert validate_params("nps", params) == [MSG_ALLOCATION.format(total=90.0)]
        assert MSG_ALLOCATION.format(total=90.0) == "Asset allocation must sum to 100% (currently 90%)"

    def test_etf_negative_expense(self):
        params = ETFParams(amount=5000, tenure=5, expectedCAGR=12, expenseRatio=-1)
        assert validate_params("etf", params) == ["Expense ratio cannot be negative"]

    def test_ipo_needs_listing(self):
        params = IPOParams(sharesAllotted=100, issuePrice=500, holdingPeriod=1)
        assert validate_params("ipo", params) == [MSG_LISTING]

    def test_ipo_listing_from_gain_percent(self):
        params = IPOParams(sharesAllotted=100, issuePrice=500, listingGainPercent=20, holdingPeriod=1)
        assert validate_params("ipo", params) == []
        assert resolve_listing_price(params) == pytest.approx(600.0)

    def test_ipo_explicit_listing_price_wins(self):
        params = IPOParams(sharesAllotted=100, issuePrice=500, listingPrice=550, listingGainPercent=20)
        assert resolve_listing_price(params) == 550

    def test_54ec_cannot_exceed_gain(self):
        params = Bonds54ECParams(investmentAmount=600000, capitalGain=500000)
        assert validate_params("bonds54EC", params) == [MSG_EXCEEDS_GAIN]
