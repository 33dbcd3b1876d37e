"""
Financial calculation API endpoints.

These endpoints accept a property record and return calculated results.
They are stateless: rates are resolved from settings here and passed
explicitly into the engine.
"""

from dataclasses import asdict, replace
from datetime import date
from typing import List, Optional, Tuple

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from app.calculations import (
    amortization,
    cashflow,
    inflation,
    irr,
    metrics,
    portfolio,
    projection,
    scenarios,
    tax_benefits,
)
from app.calculations.models import (
    ExpenseBreakdown,
    PropertyFacts,
    RateConfig,
)
from app.config import get_rate_config, get_rates_by_country, get_settings

router = APIRouter()


class ExpenseBreakdownInput(BaseModel):
    """Itemized expenses."""

    monthly_mortgage: float = 0.0
    monthly_escrow: float = 0.0
    monthly_management_fees: float = 0.0
    monthly_association_fees: float = 0.0
    monthly_maintenance: float = 0.0
    monthly_heloc: float = 0.0
    monthly_other: float = 0.0
    annual_insurance: float = 0.0
    annual_property_taxes: float = 0.0


class PropertyInput(BaseModel):
    """Property record as stored by the portfolio."""

    name: str = ""
    property_type: str = "single-family"
    country: Optional[str] = None
    purchase_date: Optional[date] = None

    # Acquisition
    purchase_price: float = Field(ge=0)
    current_value: float = 0.0
    down_payment: float = 0.0
    cost_basis: Optional[float] = None

    # Financing
    loan_amount: float = 0.0
    outstanding_balance: float = 0.0
    annual_interest_rate: float = 0.0
    loan_term_months: int = 0
    monthly_mortgage: float = 0.0
    months_elapsed: Optional[int] = None

    # Income and expenses
    monthly_rent: float = 0.0
    monthly_rent_potential: float = 0.0
    is_investment_property: bool = True
    monthly_expenses: float = 0.0
    monthly_escrow: float = 0.0
    expense_breakdown: Optional[ExpenseBreakdownInput] = None

    # Assumptions
    avg_appreciation_rate: Optional[float] = None
    tax_benefit_override: Optional[float] = None

    def to_facts(self) -> PropertyFacts:
        data = self.model_dump(exclude={"expense_breakdown"})
        breakdown = (
            ExpenseBreakdown(**self.expense_breakdown.model_dump())
            if self.expense_breakdown
            else None
        )
        return PropertyFacts(expense_breakdown=breakdown, **data)


class RateOverrides(BaseModel):
    """Per-request replacements for configured country rates."""

    appreciation_rate: Optional[float] = None
    inflation_rate: Optional[float] = None
    selling_cost_rate: Optional[float] = None
    capital_gains_tax_rate: Optional[float] = None
    mortgage_rate: Optional[float] = None


class PropertyRequest(BaseModel):
    """A property plus the rate context to evaluate it in."""

    property: PropertyInput
    country: Optional[str] = None
    rates: Optional[RateOverrides] = None
    as_of: Optional[date] = None


def _resolve(request: PropertyRequest) -> Tuple[PropertyFacts, RateConfig]:
    try:
        facts = request.property.to_facts()
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    rates = get_rate_config(request.country or facts.country)
    if request.rates:
        rates = replace(rates, **request.rates.model_dump(exclude_none=True))

    return facts, rates


class BalanceInput(BaseModel):
    """Input for outstanding balance calculation."""

    loan_amount: float
    annual_rate: float
    term_months: int
    elapsed_months: int


@router.post("/balance")
async def calculate_balance(inputs: BalanceInput):
    """Outstanding balance and level payment for a loan."""
    return {
        "monthly_payment": amortization.calculate_payment(
            inputs.loan_amount, inputs.annual_rate, inputs.term_months
        ),
        "outstanding_balance": amortization.calculate_outstanding_balance(
            inputs.loan_amount,
            inputs.annual_rate,
            inputs.term_months,
            inputs.elapsed_months,
        ),
    }


class AmortizationInput(BaseModel):
    """Input for amortization calculation."""

    principal: float
    annual_rate: float
    term_months: int = 360
    start_date: Optional[date] = None


@router.post("/amortization")
async def calculate_amortization(inputs: AmortizationInput):
    """Generate loan amortization schedule."""
    schedule = amortization.generate_amortization_schedule(
        principal=inputs.principal,
        annual_rate=inputs.annual_rate,
        term_months=inputs.term_months,
        start_date=inputs.start_date,
    )

    return {
        "schedule": schedule,
        "total_interest": sum(row["interest"] for row in schedule),
        "total_principal": sum(row["principal"] for row in schedule),
    }


class IRRInput(BaseModel):
    """Input for IRR calculation."""

    cash_flows: List[float]
    discount_rate: float = 8.0  # percent


class IRRResponse(BaseModel):
    """Response with IRR calculation."""

    irr: float
    npv: float
    npv_index: float
    multiple: float
    profit: float


@router.post("/irr", response_model=IRRResponse)
async def calculate_irr_endpoint(inputs: IRRInput):
    """Calculate IRR and NPV for given cash flows."""
    if len(inputs.cash_flows) < 2:
        raise HTTPException(status_code=400, detail="At least 2 cash flows required")

    npv = irr.calculate_npv(inputs.cash_flows, inputs.discount_rate)
    initial = abs(inputs.cash_flows[0]) if inputs.cash_flows[0] < 0 else 0.0

    return IRRResponse(
        irr=irr.safe_irr(inputs.cash_flows),
        npv=npv,
        npv_index=irr.calculate_npv_index(npv, initial),
        multiple=irr.calculate_multiple(inputs.cash_flows),
        profit=irr.calculate_profit(inputs.cash_flows),
    )


@router.post("/tax-benefits")
async def calculate_tax_benefits_endpoint(request: PropertyRequest):
    """Annual tax benefits, 1031 eligibility and holding-period comparison."""
    facts, rates = _resolve(request)
    benefits = tax_benefits.calculate_tax_benefits(facts, request.as_of)

    return {
        "tax_benefits": asdict(benefits),
        "annual_tax_savings": tax_benefits.calculate_tax_savings(
            benefits.total, rates.capital_gains_tax_rate
        ),
        "exchange_opportunity": asdict(
            tax_benefits.calculate_1031_exchange_opportunity(facts, request.as_of)
        ),
        "holding_periods": [
            asdict(r)
            for r in tax_benefits.analyze_holding_periods(facts, rates, as_of=request.as_of)
        ],
    }


class CashFlowRequest(PropertyRequest):
    """Property plus holding period for cash-flow analysis."""

    years: int = Field(default=10, ge=0, le=100)
    discount_rate: Optional[float] = None  # percent


@router.post("/cashflows")
async def calculate_cashflows(request: CashFlowRequest):
    """Annual cash flows, IRR/NPV, and the standard horizon comparison."""
    facts, rates = _resolve(request)
    discount_rate = (
        request.discount_rate
        if request.discount_rate is not None
        else get_settings().default_discount_rate
    )

    series = cashflow.generate_cash_flows(facts, rates, request.years, request.as_of)
    npv = irr.calculate_npv(series.flows, discount_rate)

    # Monthly MIRR: finance and reinvest at the discount rate
    monthly_rate = irr.annual_to_periodic_rate(discount_rate / 100)
    mirr = irr.calculate_mirr(
        cashflow.generate_projected_monthly_cash_flows(
            facts,
            request.years,
            facts.appreciation_rate(rates),
            cashflow.rent_growth_rate(rates),
        ),
        finance_rate=monthly_rate,
        reinvest_rate=monthly_rate,
    )

    return {
        "cash_flows": list(series.flows),
        "irr": irr.safe_irr(series.flows),
        "npv": npv,
        "npv_index": irr.calculate_npv_index(npv, series.initial_investment),
        "mirr": asdict(mirr),
        "horizons": [
            asdict(h)
            for h in cashflow.analyze_time_horizons(
                facts, rates, discount_rate=discount_rate, as_of=request.as_of
            )
        ],
    }


@router.post("/scenarios")
async def calculate_scenarios(request: PropertyRequest):
    """Side-by-side what-if scenarios for a property."""
    facts, rates = _resolve(request)
    results = scenarios.build_scenarios(facts, rates, request.as_of)
    return {"scenarios": [asdict(s) for s in results]}


class ProjectionRequest(PropertyRequest):
    """Property plus projection options."""

    horizon_years: Optional[int] = Field(default=None, ge=0, le=100)
    present_value_mode: bool = True
    include_financing_variants: bool = False


@router.post("/projection")
async def calculate_projection(request: ProjectionRequest):
    """Year-by-year projection ledger."""
    facts, rates = _resolve(request)
    horizon = (
        request.horizon_years
        if request.horizon_years is not None
        else get_settings().default_horizon_years
    )

    rows = projection.project(
        facts, rates, horizon, request.present_value_mode, request.as_of
    )
    response = {
        "country": rates.country,
        "rows": [asdict(row) for row in rows],
    }

    if request.include_financing_variants:
        response["financing_variants"] = {
            kind: [asdict(row) for row in variant_rows]
            for kind, variant_rows in projection.project_financing_variants(
                facts, rates, horizon, request.present_value_mode, request.as_of
            ).items()
        }

    return response


@router.post("/kpis")
async def calculate_kpis(request: PropertyRequest):
    """Headline metrics for a property card."""
    facts, rates = _resolve(request)
    response = {"kpis": asdict(metrics.calculate_kpis(facts, rates, request.as_of))}

    if facts.purchase_date is not None:
        current_year = (request.as_of or date.today()).year
        response["real_appreciation"] = asdict(
            inflation.calculate_real_appreciation_metrics(
                facts.purchase_price,
                facts.market_value,
                facts.purchase_date,
                current_year,
            )
        )
        response["true_roi"] = asdict(inflation.calculate_true_roi(facts, current_year))

    return response


class PortfolioRequest(BaseModel):
    """Every property in a portfolio, each tagged with its country."""

    properties: List[PropertyInput]
    horizon_years: Optional[int] = Field(default=None, ge=0, le=100)
    present_value_mode: bool = True
    as_of: Optional[date] = None


@router.post("/portfolio")
def calculate_portfolio(request: PortfolioRequest):
    """Portfolio totals and a projection ledger per property."""
    try:
        properties = [p.to_facts() for p in request.properties]
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    rates_by_country = get_rates_by_country()
    default_rates = get_rate_config()
    horizon = (
        request.horizon_years
        if request.horizon_years is not None
        else get_settings().default_horizon_years
    )

    summary = portfolio.summarize_portfolio(
        properties, rates_by_country, default_rates, request.as_of
    )
    projections = portfolio.project_portfolio(
        properties,
        rates_by_country,
        default_rates,
        horizon,
        request.present_value_mode,
        request.as_of,
    )

    return {
        "summary": asdict(summary),
        "projections": [
            {"name": facts.name, "rows": [asdict(row) for row in rows]}
            for facts, rows in zip(properties, projections)
        ],
    }
