"""
Pydantic models for the investment calculators.

Parameter models mirror the calculator forms. Every numeric field is
optional so a half-filled form still parses; range checks live in
utils/validator.py and produce a message list instead of an exception.
Percentages are kept as entered (7.1 == 7.1% p.a.).
All output amounts are rounded to 2 decimal places.
"""
from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from fincalc import config


def _round2(v: float) -> float:
    return round(float(v), 2)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class InstrumentType(str, Enum):
    PPF = "ppf"
    FD = "fd"
    RD = "rd"
    SIP = "sip"
    SSY = "ssy"
    NSC = "nsc"
    SCSS = "scss"
    POMIS = "pomis"
    SGB = "sgb"
    NPS = "nps"
    EQUITY = "equity"
    ELSS = "elss"
    IPO = "ipo"
    ETF = "etf"
    DEBT_MUTUAL_FUND = "debtMutualFund"
    REITS = "reits"
    BONDS_54EC = "bonds54EC"


class CompoundingFrequency(str, Enum):
    QUARTERLY = "quarterly"
    MONTHLY = "monthly"
    ANNUALLY = "annually"
    CUMULATIVE = "cumulative"


class InvestmentMode(str, Enum):
    SIP = "sip"
    LUMPSUM = "lumpsum"


class TenureUnit(str, Enum):
    YEARS = "years"
    MONTHS = "months"


class EtfType(str, Enum):
    EQUITY = "equity"
    DEBT = "debt"
    GOLD = "gold"
    INTERNATIONAL = "international"


class TaxVariant(str, Enum):
    EXEMPT = "exempt"
    LTCG = "ltcg"
    LTCG_INDEXED = "ltcg_indexed"
    PARTIAL = "partial"
    CONDITIONAL = "conditional"
    INTEREST = "interest"
    CAPITAL_GAINS_EXEMPT = "capital_gains_exempt"


class TaxMethod(str, Enum):
    WITHDRAWAL = "withdrawal"
    ACCUMULATION = "accumulation"
    BOTH = "both"


class UnknownInstrumentError(ValueError):
    """Raised when a dispatch table is asked for an instrument it does not know."""

    def __init__(self, instrument: object) -> None:
        super().__init__(f"Unknown instrument type: {instrument!r}")
        self.instrument = instrument


def parse_instrument(value: object) -> InstrumentType:
    """Coerce a string tag to InstrumentType or raise UnknownInstrumentError."""
    if isinstance(value, InstrumentType):
        return value
    try:
        return InstrumentType(value)
    except ValueError:
        raise UnknownInstrumentError(value) from None


# ---------------------------------------------------------------------------
# Configuration passed into every calculator
# ---------------------------------------------------------------------------

class Preferences(BaseModel):
    """User preferences -- tax slab as a decimal, inflation as a percentage."""
    incomeTaxSlab: float = config.DEFAULT_TAX_SLAB
    adjustInflation: bool = False
    defaultInflationRate: float = config.DEFAULT_INFLATION_RATE

    @field_validator("incomeTaxSlab", mode="before")
    @classmethod
    def check_slab(cls, v: object) -> float:
        if v is None:
            return config.DEFAULT_TAX_SLAB
        val = float(v)
        if val < 0 or val > 1:
            raise ValueError("Income tax slab must be a decimal between 0 and 1")
        return val

    @field_validator("defaultInflationRate", mode="before")
    @classmethod
    def check_inflation(cls, v: object) -> float:
        if v is None:
            return config.DEFAULT_INFLATION_RATE
        val = float(v)
        if val < 0:
            raise ValueError("Inflation rate must be non-negative")
        return val

    @property
    def inflation_decimal(self) -> float:
        return self.defaultInflationRate / 100.0


class GoldPriceQuote(BaseModel):
    pricePerGram: float
    isRealTime: bool = False


# ---------------------------------------------------------------------------
# Input models
# ---------------------------------------------------------------------------

class ExistingInvestment(BaseModel):
    """Holding the investor already has, used by the corpus simulator."""
    model_config = ConfigDict(extra="ignore")

    currentValue: Optional[float] = None
    yearsInvested: Optional[float] = None
    expectedReturnRate: Optional[float] = None
    currentReturnRate: Optional[float] = None
    rate: Optional[float] = None
    goldAppreciationRate: Optional[float] = None
    fixedRate: Optional[float] = None
    # Only needed when currentValue is unknown and has to be estimated
    initialInvestment: Optional[float] = None
    yearlyContribution: Optional[float] = None
    monthlyContribution: Optional[float] = None
    stepUpEnabled: bool = False
    stepUpPercentage: Optional[float] = None
    compoundingFrequency: Optional[CompoundingFrequency] = None

    @field_validator("*", mode="before")
    @classmethod
    def blank_to_none(cls, v: object) -> object:
        if isinstance(v, str) and not v.strip():
            return None
        return v


class InvestmentParams(BaseModel):
    """Fields shared by every instrument's parameters."""
    model_config = ConfigDict(extra="ignore")

    hasExistingInvestment: bool = False
    existingInvestment: Optional[ExistingInvestment] = None
    planToInvestMore: Optional[bool] = None

    @field_validator("*", mode="before")
    @classmethod
    def blank_to_none(cls, v: object) -> object:
        # Empty form inputs arrive as "" -- treat as "not entered yet"
        if isinstance(v, str) and not v.strip():
            return None
        return v


class FDParams(InvestmentParams):
    principal: Optional[float] = None
    rate: Optional[float] = config.DEFAULT_RATES["fd"]
    tenureYears: Optional[int] = None
    tenureMonths: Optional[int] = None
    compoundingFrequency: CompoundingFrequency = CompoundingFrequency.QUARTERLY
    # Legacy single-field tenure, converted when tenureYears/tenureMonths are absent
    tenure: Optional[float] = None
    tenureUnit: Optional[TenureUnit] = None


class RDParams(InvestmentParams):
    monthlyDeposit: Optional[float] = None
    rate: Optional[float] = config.DEFAULT_RATES["rd"]
    tenureYears: Optional[int] = None
    tenureMonths: Optional[int] = None
    compoundingFrequency: CompoundingFrequency = CompoundingFrequency.QUARTERLY


class PPFParams(InvestmentParams):
    yearlyInvestment: Optional[float] = None
    rate: Optional[float] = config.DEFAULT_RATES["ppf"]
    tenure: Optional[int] = config.PPF_TENURE
    stepUpEnabled: bool = False
    stepUpPercentage: Optional[float] = None


class SSYParams(InvestmentParams):
    yearlyInvestment: Optional[float] = None
    girlsAge: Optional[int] = None
    startYear: Optional[int] = None
    rate: Optional[float] = config.DEFAULT_RATES["ssy"]
    stepUpEnabled: bool = False
    stepUpPercentage: Optional[float] = None


class SIPParams(InvestmentParams):
    monthlySIP: Optional[float] = None
    expectedReturn: Optional[float] = None
    tenure: Optional[int] = None
    tenureUnit: TenureUnit = TenureUnit.YEARS
    stepUpEnabled: bool = False
    stepUpPercentage: Optional[float] = None


class NSCParams(InvestmentParams):
    principal: Optional[float] = None
    rate: Optional[float] = config.DEFAULT_RATES["nsc"]


class SCSSParams(InvestmentParams):
    principal: Optional[float] = None
    rate: Optional[float] = config.DEFAULT_RATES["scss"]
    tenure: Optional[int] = config.SCSS_MAX_TENURE
    currentAge: Optional[int] = None
    isDefensePersonnel: bool = False


class POMISParams(InvestmentParams):
    principal: Optional[float] = None
    rate: Optional[float] = config.DEFAULT_RATES["pomis"]
    isJointAccount: bool = False


class SGBParams(InvestmentParams):
    gramsOfGold: Optional[float] = None
    goldPricePerGram: Optional[float] = None
    # Corpus simulator enters the rupee amount directly
    principal: Optional[float] = None
    goldAppreciationRate: Optional[float] = config.SGB_CONFIG["gold_appreciation"]
    tenure: Optional[int] = config.SGB_CONFIG["tenure"]
    fixedRate: Optional[float] = config.SGB_CONFIG["fixed_rate"]


class NPSParams(InvestmentParams):
    monthlyContribution: Optional[float] = None
    tenure: Optional[int] = None
    currentAge: Optional[int] = None
    equityAllocation: Optional[float] = 50.0
    corporateBondsAllocation: Optional[float] = 30.0
    governmentBondsAllocation: Optional[float] = 20.0
    alternativeAllocation: Optional[float] = 0.0
    equityReturn: Optional[float] = 12.0
    corporateBondsReturn: Optional[float] = 9.0
    governmentBondsReturn: Optional[float] = 8.0
    alternativeReturn: Optional[float] = 7.0
    useAgeBasedCaps: bool = False

    def allocation(self) -> dict[str, float]:
        """Allocation as decimals keyed by bucket."""
        return {
            "equity": (self.equityAllocation or 0.0) / 100.0,
            "corporateBonds": (self.corporateBondsAllocation or 0.0) / 100.0,
            "governmentBonds": (self.governmentBondsAllocation or 0.0) / 100.0,
            "alternative": (self.alternativeAllocation or 0.0) / 100.0,
        }

    def bucket_returns(self) -> dict[str, float]:
        return {
            "equity": (self.equityReturn or 0.0) / 100.0,
            "corporateBonds": (self.corporateBondsReturn or 0.0) / 100.0,
            "governmentBonds": (self.governmentBondsReturn or 0.0) / 100.0,
            "alternative": (self.alternativeReturn or 0.0) / 100.0,
        }


class ELSSParams(InvestmentParams):
    investmentType: Optional[InvestmentMode] = InvestmentMode.SIP
    amount: Optional[float] = None
    tenure: Optional[int] = None
    expectedReturn: Optional[float] = None


class EquityParams(InvestmentParams):
    investmentType: Optional[InvestmentMode] = InvestmentMode.SIP
    amount: Optional[float] = None
    tenure: Optional[int] = None
    expectedCAGR: Optional[float] = None
    stepUpEnabled: bool = False
    stepUpPercentage: Optional[float] = None


class ETFParams(InvestmentParams):
    investmentType: Optional[InvestmentMode] = InvestmentMode.SIP
    amount: Optional[float] = None
    etfType: EtfType = EtfType.EQUITY
    tenure: Optional[int] = None
    expectedCAGR: Optional[float] = None
    expenseRatio: Optional[float] = 0.0
    stepUpEnabled: bool = False
    stepUpPercentage: Optional[float] = None


class DebtMutualFundParams(InvestmentParams):
    investmentType: Optional[InvestmentMode] = InvestmentMode.SIP
    amount: Optional[float] = None
    tenure: Optional[int] = None
    fundType: Optional[str] = None
    expectedReturn: Optional[float] = None
    stepUpEnabled: bool = False
    stepUpPercentage: Optional[float] = None
    # Financial year of purchase, enables the CII indexation breakdown
    purchaseYear: Optional[int] = None


class IPOParams(InvestmentParams):
    sharesAllotted: Optional[int] = None
    issuePrice: Optional[float] = None
    listingPrice: Optional[float] = None
    listingGainPercent: Optional[float] = None
    holdingPeriod: Optional[float] = None
    expectedCAGR: Optional[float] = None


class REITsParams(InvestmentParams):
    investmentAmount: Optional[float] = None
    numberOfUnits: Optional[int] = None
    dividendYield: Optional[float] = config.REITS_CONFIG["dividend_yield"]
    appreciationRate: Optional[float] = config.REITS_CONFIG["appreciation"]
    tenure: Optional[int] = None


class Bonds54ECParams(InvestmentParams):
    capitalGain: Optional[float] = None
    investmentAmount: Optional[float] = None
    rate: Optional[float] = config.DEFAULT_RATES["bonds54EC"]


PARAM_MODELS: Dict[InstrumentType, type] = {
    InstrumentType.PPF: PPFParams,
    InstrumentType.FD: FDParams,
    InstrumentType.RD: RDParams,
    InstrumentType.SIP: SIPParams,
    InstrumentType.SSY: SSYParams,
    InstrumentType.NSC: NSCParams,
    InstrumentType.SCSS: SCSSParams,
    InstrumentType.POMIS: POMISParams,
    InstrumentType.SGB: SGBParams,
    InstrumentType.NPS: NPSParams,
    InstrumentType.EQUITY: EquityParams,
    InstrumentType.ELSS: ELSSParams,
    InstrumentType.IPO: IPOParams,
    InstrumentType.ETF: ETFParams,
    InstrumentType.DEBT_MUTUAL_FUND: DebtMutualFundParams,
    InstrumentType.REITS: REITsParams,
    InstrumentType.BONDS_54EC: Bonds54ECParams,
}


def check_params(instrument: InstrumentType, params: object) -> None:
    """Programmer error guard: params must be the model registered for the instrument."""
    expected = PARAM_MODELS[instrument]
    if not isinstance(params, expected):
        raise TypeError(
            f"{instrument.value} expects {expected.__name__}, got {type(params).__name__}"
        )


# ---------------------------------------------------------------------------
# Request bodies
# ---------------------------------------------------------------------------

class CalculatorRequest(BaseModel):
    params: Dict[str, Any] = Field(default_factory=dict)
    preferences: Preferences = Field(default_factory=Preferences)


class TaxRequest(BaseModel):
    corpus: Optional[float] = Field(default=None, validate_default=True)
    instrument: InstrumentType
    tenure: Optional[float] = Field(default=None, validate_default=True)
    incomeTaxSlab: float = config.DEFAULT_TAX_SLAB
    principal: Optional[float] = None
    returns: Optional[float] = None
    ltcgExemptionUsed: float = 0.0
    etfType: Optional[EtfType] = None

    @field_validator("corpus", mode="before")
    @classmethod
    def check_corpus(cls, v: object) -> float:
        if v is None:
            raise ValueError("Corpus is required")
        return float(v)

    @field_validator("tenure", mode="before")
    @classmethod
    def check_tenure(cls, v: object) -> float:
        if v is None:
            raise ValueError("Tenure is required")
        val = float(v)
        if val < 0:
            raise ValueError("Tenure must be non-negative")
        return val

    @field_validator("incomeTaxSlab", mode="before")
    @classmethod
    def check_slab(cls, v: object) -> float:
        val = float(v)
        if val < 0 or val > 1:
            raise ValueError("Income tax slab must be a decimal between 0 and 1")
        return val


class PortfolioTaxRequest(BaseModel):
    instruments: List[InstrumentType]
    corpusByInstrument: Dict[InstrumentType, float] = Field(default_factory=dict)
    investments: Dict[InstrumentType, Dict[str, Any]] = Field(default_factory=dict)
    method: TaxMethod = TaxMethod.WITHDRAWAL
    incomeTaxSlab: float = config.DEFAULT_TAX_SLAB


class CorpusRequest(BaseModel):
    selectedInstruments: List[InstrumentType]
    investments: Dict[InstrumentType, Dict[str, Any]] = Field(default_factory=dict)
    timeHorizon: Optional[float] = Field(default=None, validate_default=True)
    preferences: Preferences = Field(default_factory=Preferences)
    # Purchasing power is reported only when a known city is given
    city: Optional[str] = None
    categoryInflationRates: Dict[str, float] = Field(default_factory=dict)
    purchasingPowerCategories: Optional[List[str]] = None

    @field_validator("timeHorizon", mode="before")
    @classmethod
    def check_horizon(cls, v: object) -> float:
        if v is None:
            raise ValueError("Time horizon is required")
        val = float(v)
        if val < 0:
            raise ValueError("Time horizon must be non-negative")
        return val

    @field_validator("categoryInflationRates")
    @classmethod
    def check_category_rates(cls, v: Dict[str, float]) -> Dict[str, float]:
        for rate in v.values():
            if rate < 0 or rate > 100:
                raise ValueError("Inflation rate must be between 0 and 100")
        return v


# ---------------------------------------------------------------------------
# Response / output models
# ---------------------------------------------------------------------------

class Period(BaseModel):
    """One row of an evolution schedule. label is set only for month rows."""
    period: int
    label: Optional[str] = None
    openingBalance: float
    contribution: float
    interest: float
    closingBalance: float
    breakdown: Optional[Dict[str, float]] = None


class TaxRule(BaseModel):
    model_config = ConfigDict(frozen=True)

    variant: TaxVariant
    rate: Optional[float] = None
    exemptionLimit: float = 0.0
    minHoldingPeriod: float = 0.0
    stcgRate: Optional[float] = None
    taxablePortion: float = 1.0
    indexationRate: float = 0.0
    fallbackInterestRatio: float = 0.0
    notes: str = ""


class TaxResult(BaseModel):
    taxAmount: float
    postTaxCorpus: float
    effectiveTaxRatePercent: float
    variant: TaxVariant
    notes: str = ""


class AccumulationYear(BaseModel):
    year: int
    interestEarned: float
    taxPaid: float
    netCorpus: float


class AccumulationTax(BaseModel):
    totalTaxPaid: float = 0.0
    finalCorpus: float = 0.0
    annualTaxBreakdown: List[AccumulationYear] = Field(default_factory=list)


class TaxComparison(BaseModel):
    withdrawal: TaxResult
    accumulation: AccumulationTax
    difference: float
    moreBeneficial: TaxMethod


class PortfolioTaxEntry(BaseModel):
    taxAmount: float
    postTaxCorpus: float
    comparison: Optional[TaxComparison] = None


class PortfolioTax(BaseModel):
    byInstrument: Dict[str, PortfolioTaxEntry] = Field(default_factory=dict)
    totalTaxAmount: float = 0.0
    totalPostTaxCorpus: float = 0.0


class CalculationResult(BaseModel):
    instrument: InstrumentType
    investedAmount: float
    maturityAmount: float
    returns: float
    returnPercentage: float
    cagr: float
    taxAmount: float
    postTaxAmount: float
    effectiveTaxRatePercent: float
    taxNote: str = ""
    realReturnRate: Optional[float] = None
    realMaturityAmount: Optional[float] = None
    realReturns: Optional[float] = None
    actualSpendingPower: Optional[float] = None
    evolution: List[Period] = Field(default_factory=list)
    details: Dict[str, Any] = Field(default_factory=dict)


class CalculatorResponse(BaseModel):
    result: Optional[CalculationResult] = None
    errors: List[str] = Field(default_factory=list)


class InstrumentCorpus(BaseModel):
    investedAmount: float = 0.0
    maturityValue: float = 0.0
    returns: float = 0.0
    existingInvestmentValue: float = 0.0
    futureInvestmentValue: float = 0.0
    existingCurrentValue: float = 0.0
    percentage: float = 0.0
    projectedInvestedAmount: float = 0.0
    projectedFutureInvestmentValue: float = 0.0
    projectedMaturityValue: float = 0.0
    projectedReturns: float = 0.0
    isProjectedBeyondHorizon: bool = False


class AffordableItem(BaseModel):
    key: str
    label: str
    unit: str
    currentPrice: float
    futurePrice: float
    inflationRate: float
    canAfford: bool
    unitsAffordable: int
    percentageAffordable: float


class PurchasingPowerSummary(BaseModel):
    totalExamples: int = 0
    affordableExamples: int = 0
    partiallyAffordableExamples: int = 0
    unaffordableExamples: int = 0
    affordabilityRate: float = 0.0


class PurchasingPower(BaseModel):
    """What the corpus buys at the horizon, per category of today's prices."""
    city: str
    years: float
    categories: Dict[str, List[AffordableItem]] = Field(default_factory=dict)
    summary: PurchasingPowerSummary = Field(default_factory=PurchasingPowerSummary)


class CorpusResult(BaseModel):
    totalInvested: float = 0.0
    totalReturns: float = 0.0
    nominalCorpus: float = 0.0
    # nominalCorpus in today's money, deflated at the preference inflation rate
    realCorpus: float = 0.0
    totalExistingValue: float = 0.0
    totalFutureInvested: float = 0.0
    byInstrument: Dict[str, InstrumentCorpus] = Field(default_factory=dict)
    purchasingPower: Optional[PurchasingPower] = None


class PortfolioCheckResponse(BaseModel):
    valid: bool
    errors: List[str] = Field(default_factory=list)


class PerformanceResponse(BaseModel):
    time: str
    memory: str
    threads: int


# ---------------------------------------------------------------------------
# Internal data containers (not Pydantic, for speed inside the calculators)
# ---------------------------------------------------------------------------

class Projection:
    """Gross outcome of one instrument before tax and inflation are applied."""

    __slots__ = ("invested", "maturity", "years", "rate", "evolution", "details", "tax_options")

    def __init__(
        self,
        invested: float,
        maturity: float,
        years: float,
        rate: float,
        evolution: list[Period] | None = None,
        details: dict[str, Any] | None = None,
        tax_options: dict[str, Any] | None = None,
    ) -> None:
        self.invested = invested
        self.maturity = maturity
        self.years = years
        self.rate = rate
        self.evolution = evolution or []
        self.details = details or {}
        self.tax_options = tax_options or {}


class CorpusLegs:
    """Mutable accumulator for one instrument inside the corpus engine."""

    __slots__ = (
        "invested",
        "existing_value",
        "future_value",
        "current_value",
        "projected_invested",
        "projected_future_value",
        "projected_beyond",
    )

    def __init__(self, current_value: float = 0.0) -> None:
        self.invested = 0.0
        self.existing_value = 0.0
        self.future_value = 0.0
        self.current_value = current_value
        self.projected_invested = 0.0
        self.projected_future_value = 0.0
        self.projected_beyond = False

    @property
    def maturity(self) -> float:
        return self.existing_value + self.future_value

    @property
    def returns(self) -> float:
        return (self.existing_value - self.current_value) + (self.future_value - self.invested)
