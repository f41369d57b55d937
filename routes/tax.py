"""
routes/tax.py -- Withdrawal tax endpoints
  POST /tax           -- tax on one instrument's corpus
  POST /tax:portfolio -- tax across instruments (withdrawal, accumulation or both)
"""
from __future__ import annotations

from fastapi import APIRouter

from fincalc.models import PortfolioTax, PortfolioTaxRequest, TaxRequest, TaxResult
from fincalc.utils.tax import compute_tax, tax_for_instruments

router = APIRouter()


@router.post("/tax", response_model=TaxResult)
def tax(body: TaxRequest) -> TaxResult:
    return compute_tax(
        body.corpus,
        body.instrument,
        body.tenure,
        income_tax_slab=body.incomeTaxSlab,
        principal=body.principal,
        returns=body.returns,
        ltcg_exemption_used=body.ltcgExemptionUsed,
        etf_type=body.etfType,
    )


@router.post("/tax:portfolio", response_model=PortfolioTax)
def tax_portfolio(body: PortfolioTaxRequest) -> PortfolioTax:
    """Tenure per instrument is read from investments[instrument]["tenure"]."""
    return tax_for_instruments(
        body.corpusByInstrument,
        body.investments,
        body.instruments,
        method=body.method,
        income_tax_slab=body.incomeTaxSlab,
    )
