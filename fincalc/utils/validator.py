"""
utils/validator.py -- Parameter validation for every calculator.

validate_params(instrument, params) -> list[str]
  Every failing constraint adds one message; an empty list means the
  calculator can run. Missing values produce "<field> is required".
  Messages are built from the MSG_* templates below so tests can compare
  against them directly.

The limits themselves live in fincalc/config.py.
"""
from __future__ import annotations

from typing import Callable

from fincalc import config
from fincalc.models import (
    Bonds54ECParams,
    DebtMutualFundParams,
    ELSSParams,
    EquityParams,
    ETFParams,
    FDParams,
    InstrumentType,
    IPOParams,
    NPSParams,
    NSCParams,
    POMISParams,
    PPFParams,
    RDParams,
    REITsParams,
    SCSSParams,
    SGBParams,
    SIPParams,
    SSYParams,
    check_params,
    parse_instrument,
)
from fincalc.utils import tenure as tenure_utils

MSG_REQUIRED = "{field} is required"
MSG_MIN = "{field} must be at least {limit}"
MSG_MAX = "{field} cannot exceed {limit}"
MSG_RANGE = "{field} must be between {low} and {high}"
MSG_POSITIVE = "{field} must be greater than 0"
MSG_NON_NEGATIVE = "{field} cannot be negative"
MSG_STEP_UP = "Step-up percentage is required when step-up is enabled"
MSG_ALLOCATION = "Asset allocation must sum to 100% (currently {total:g}%)"
MSG_SCSS_AGE = "Minimum age for SCSS is {age} years"
MSG_EXCEEDS_GAIN = "Investment amount cannot exceed capital gain amount"
MSG_LISTING = "Listing price or listing gain percentage is required"
MSG_LISTING_POSITIVE = "Listing price must be greater than 0"


def _amount(value: float) -> str:
    return f"{value:,.0f}"


def _percent(value: float) -> str:
    return f"{value:g}%"


# ---------------------------------------------------------------------------
# Field checks -- each appends at most one message
# ---------------------------------------------------------------------------

def _require(errors: list[str], value: object, field: str) -> bool:
    if value is None:
        errors.append(MSG_REQUIRED.format(field=field))
        return False
    return True


def _at_least(errors: list[str], value: float | None, minimum: float, field: str,
              fmt: Callable[[float], str] = _amount) -> None:
    if _require(errors, value, field) and value < minimum:
        errors.append(MSG_MIN.format(field=field, limit=fmt(minimum)))


def _between(errors: list[str], value: float | None, low: float, high: float, field: str,
             fmt: Callable[[float], str] = _amount) -> None:
    if not _require(errors, value, field):
        return
    if value < low:
        errors.append(MSG_MIN.format(field=field, limit=fmt(low)))
    elif value > high:
        errors.append(MSG_MAX.format(field=field, limit=fmt(high)))


def _positive(errors: list[str], value: float | None, field: str) -> None:
    if _require(errors, value, field) and value <= 0:
        errors.append(MSG_POSITIVE.format(field=field))


def _rate(errors: list[str], value: float | None, field: str = "Interest rate") -> None:
    _at_least(errors, value, config.MIN_RATE, field, fmt=_percent)


def _years(value: float) -> str:
    return f"{value:g} year" if value == 1 else f"{value:g} years"


def _tenure_years(errors: list[str], value: float | None, minimum: int = 1, maximum: int | None = None) -> None:
    if maximum is None:
        _at_least(errors, value, minimum, "Tenure", fmt=_years)
    else:
        _between(errors, value, minimum, maximum, "Tenure", fmt=_years)


def _step_up(errors: list[str], enabled: bool, percentage: float | None) -> None:
    if not enabled:
        return
    if percentage is None:
        errors.append(MSG_STEP_UP)
    elif percentage < 0:
        errors.append(MSG_NON_NEGATIVE.format(field="Step-up percentage"))


# ---------------------------------------------------------------------------
# Per-instrument rules
# ---------------------------------------------------------------------------

def _validate_fd(p: FDParams) -> list[str]:
    errors: list[str] = []
    _at_least(errors, p.principal, config.FD_MIN_PRINCIPAL, "Principal amount")
    _rate(errors, p.rate)
    if p.tenureYears is None and p.tenureMonths is None and p.tenure is not None:
        years, months = tenure_utils.legacy_to_years_months(p.tenure, p.tenureUnit)
    else:
        years, months = p.tenureYears, p.tenureMonths
    message = tenure_utils.validate_years_months(years, months)
    if message:
        errors.append(message)
    return errors


def _validate_rd(p: RDParams) -> list[str]:
    errors: list[str] = []
    _at_least(errors, p.monthlyDeposit, config.RD_MIN_DEPOSIT, "Monthly deposit")
    _rate(errors, p.rate)
    if p.tenureYears is not None and not 0 <= p.tenureYears <= config.RD_MAX_YEARS:
        errors.append(MSG_RANGE.format(field="Years", low=0, high=config.RD_MAX_YEARS))
        return errors
    message = tenure_utils.validate_years_months(
        p.tenureYears, p.tenureMonths, max_months=config.RD_MAX_YEARS * 12
    )
    if message:
        errors.append(message)
    return errors


def _validate_ppf(p: PPFParams) -> list[str]:
    errors: list[str] = []
    _between(errors, p.yearlyInvestment, config.PPF_MIN_YEARLY, config.PPF_MAX_YEARLY, "Yearly investment")
    _tenure_years(errors, p.tenure)
    _rate(errors, p.rate)
    _step_up(errors, p.stepUpEnabled, p.stepUpPercentage)
    return errors


def _validate_ssy(p: SSYParams) -> list[str]:
    errors: list[str] = []
    _between(errors, p.yearlyInvestment, config.SSY_MIN_YEARLY, config.SSY_MAX_YEARLY, "Yearly investment")
    if _require(errors, p.girlsAge, "Girl's age") and not 0 <= p.girlsAge <= config.SSY_MAX_OPENING_AGE:
        errors.append(MSG_RANGE.format(field="Girl's age", low=0, high=config.SSY_MAX_OPENING_AGE))
    _require(errors, p.startYear, "Start year")
    _rate(errors, p.rate)
    _step_up(errors, p.stepUpEnabled, p.stepUpPercentage)
    return errors


def _validate_sip(p: SIPParams) -> list[str]:
    errors: list[str] = []
    _at_least(errors, p.monthlySIP, config.SIP_MIN_MONTHLY, "Monthly SIP amount")
    # tenure counts in tenureUnit; 1 month is the shortest SIP
    _at_least(errors, p.tenure, 1, "Tenure", fmt=lambda v: f"{v:g} {p.tenureUnit.value.rstrip('s')}")
    _rate(errors, p.expectedReturn, "Expected return")
    _step_up(errors, p.stepUpEnabled, p.stepUpPercentage)
    return errors


def _validate_nsc(p: NSCParams) -> list[str]:
    errors: list[str] = []
    _at_least(errors, p.principal, config.NSC_MIN_PRINCIPAL, "Investment amount")
    _rate(errors, p.rate)
    return errors


def _validate_scss(p: SCSSParams) -> list[str]:
    errors: list[str] = []
    _between(errors, p.principal, config.SCSS_MIN_PRINCIPAL, config.SCSS_MAX_PRINCIPAL, "Investment amount")
    _tenure_years(errors, p.tenure, 1, config.SCSS_MAX_TENURE)
    min_age = config.SCSS_MIN_AGE_DEFENSE if p.isDefensePersonnel else config.SCSS_MIN_AGE
    if _require(errors, p.currentAge, "Age") and p.currentAge < min_age:
        errors.append(MSG_SCSS_AGE.format(age=min_age))
    _rate(errors, p.rate)
    return errors


def _validate_pomis(p: POMISParams) -> list[str]:
    errors: list[str] = []
    ceiling = config.POMIS_MAX_JOINT if p.isJointAccount else config.POMIS_MAX_SINGLE
    _between(errors, p.principal, config.POMIS_MIN_PRINCIPAL, ceiling, "Investment amount")
    _rate(errors, p.rate)
    return errors


def _validate_sgb(p: SGBParams) -> list[str]:
    errors: list[str] = []
    if p.principal is None or p.gramsOfGold is not None:
        _at_least(errors, p.gramsOfGold, config.SGB_MIN_GRAMS, "Gold amount (grams)", fmt=lambda v: f"{v:g}")
        _positive(errors, p.goldPricePerGram, "Gold price per gram")
    else:
        _positive(errors, p.principal, "Investment amount")
    _rate(errors, p.goldAppreciationRate, "Gold appreciation rate")
    _tenure_years(errors, p.tenure)
    return errors


def _validate_nps(p: NPSParams) -> list[str]:
    errors: list[str] = []
    _at_least(errors, p.monthlyContribution, config.NPS_MIN_MONTHLY, "Monthly contribution")
    _tenure_years(errors, p.tenure)
    _require(errors, p.currentAge, "Current age")
    total = sum(
        v or 0.0
        for v in (p.equityAllocation, p.corporateBondsAllocation,
                  p.governmentBondsAllocation, p.alternativeAllocation)
    )
    if abs(total - 100.0) > config.NPS_ALLOCATION_TOLERANCE:
        errors.append(MSG_ALLOCATION.format(total=round(total, 2)))
    return errors


def _validate_elss(p: ELSSParams) -> list[str]:
    errors: list[str] = []
    _require(errors, p.investmentType, "Investment type")
    _at_least(errors, p.amount, config.ELSS_MIN_AMOUNT, "Investment amount")
    _tenure_years(errors, p.tenure, config.ELSS_LOCK_IN)
    _rate(errors, p.expectedReturn, "Expected return")
    return errors


def _validate_fund(amount: float | None, tenure: float | None, rate: float | None, rate_field: str) -> list[str]:
    errors: list[str] = []
    _at_least(errors, amount, config.FUND_MIN_AMOUNT, "Investment amount")
    _tenure_years(errors, tenure)
    _positive(errors, rate, rate_field)
    return errors


def _validate_equity(p: EquityParams) -> list[str]:
    errors = _validate_fund(p.amount, p.tenure, p.expectedCAGR, "Expected CAGR")
    _step_up(errors, p.stepUpEnabled, p.stepUpPercentage)
    return errors


def _validate_etf(p: ETFParams) -> list[str]:
    errors = _validate_fund(p.amount, p.tenure, p.expectedCAGR, "Expected CAGR")
    if p.expenseRatio is not None and p.expenseRatio < 0:
        errors.append(MSG_NON_NEGATIVE.format(field="Expense ratio"))
    _step_up(errors, p.stepUpEnabled, p.stepUpPercentage)
    return errors


def _validate_debt_fund(p: DebtMutualFundParams) -> list[str]:
    errors = _validate_fund(p.amount, p.tenure, p.expectedReturn, "Expected return")
    _step_up(errors, p.stepUpEnabled, p.stepUpPercentage)
    return errors


def _validate_ipo(p: IPOParams) -> list[str]:
    errors: list[str] = []
    _at_least(errors, p.sharesAllotted, 1, "Shares allotted", fmt=lambda v: f"{v:g}")
    _positive(errors, p.issuePrice, "Issue price")
    _positive(errors, p.holdingPeriod, "Holding period")
    if p.listingPrice is None and p.listingGainPercent is None:
        errors.append(MSG_LISTING)
    elif resolve_listing_price(p) <= 0:
        errors.append(MSG_LISTING_POSITIVE)
    return errors


def _validate_reits(p: REITsParams) -> list[str]:
    errors: list[str] = []
    _at_least(errors, p.investmentAmount, config.REITS_MIN_AMOUNT, "Investment amount")
    _tenure_years(errors, p.tenure)
    _positive(errors, p.dividendYield, "Dividend yield")
    _positive(errors, p.appreciationRate, "Capital appreciation")
    return errors


def _validate_bonds_54ec(p: Bonds54ECParams) -> list[str]:
    errors: list[str] = []
    _at_least(errors, p.investmentAmount, config.BONDS_54EC_MIN_AMOUNT, "Investment amount")
    _positive(errors, p.capitalGain, "Capital gain amount")
    if (p.investmentAmount is not None and p.capitalGain is not None
            and p.investmentAmount > p.capitalGain):
        errors.append(MSG_EXCEEDS_GAIN)
    _rate(errors, p.rate)
    return errors


def resolve_listing_price(p: IPOParams) -> float:
    """Explicit listing price, else issue price grown by the listing gain %."""
    if p.listingPrice is not None:
        return p.listingPrice
    if p.issuePrice is None or p.listingGainPercent is None:
        return 0.0
    return p.issuePrice * (1.0 + p.listingGainPercent / 100.0)


VALIDATORS: dict[InstrumentType, Callable] = {
    InstrumentType.FD: _validate_fd,
    InstrumentType.RD: _validate_rd,
    InstrumentType.PPF: _validate_ppf,
    InstrumentType.SSY: _validate_ssy,
    InstrumentType.SIP: _validate_sip,
    InstrumentType.NSC: _validate_nsc,
    InstrumentType.SCSS: _validate_scss,
    InstrumentType.POMIS: _validate_pomis,
    InstrumentType.SGB: _validate_sgb,
    InstrumentType.NPS: _validate_nps,
    InstrumentType.ELSS: _validate_elss,
    InstrumentType.EQUITY: _validate_equity,
    InstrumentType.ETF: _validate_etf,
    InstrumentType.DEBT_MUTUAL_FUND: _validate_debt_fund,
    InstrumentType.IPO: _validate_ipo,
    InstrumentType.REITS: _validate_reits,
    InstrumentType.BONDS_54EC: _validate_bonds_54ec,
}

_missing = set(InstrumentType) - set(VALIDATORS)
if _missing:
    raise RuntimeError(f"VALIDATORS has no entry for {sorted(m.value for m in _missing)}")


def validate_params(instrument: InstrumentType | str, params: object) -> list[str]:
    """
    Messages for every violated constraint ([] when valid).

    Raises UnknownInstrumentError for an unknown instrument and TypeError when
    params is not that instrument's model.
    """
    instrument = parse_instrument(instrument)
    check_params(instrument, params)
    return VALIDATORS[instrument](params)
