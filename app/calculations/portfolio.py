"""
Portfolio Calculations

Aggregates and batch projections across many properties. Each property is
resolved to its jurisdiction's rates by the caller-supplied mapping; the
engine never looks rates up on its own.
"""

import concurrent.futures
import logging
import multiprocessing
from typing import List, Mapping, Optional, Sequence
from dataclasses import dataclass
from datetime import date

from app.calculations.amortization import current_balance
from app.calculations.metrics import calculate_kpis
from app.calculations.models import PropertyFacts, RateConfig
from app.calculations.projection import ProjectionRow, project

logger = logging.getLogger(__name__)

PARALLEL_THRESHOLD = 10


def resolve_rates(
    facts: PropertyFacts,
    rates_by_country: Mapping[str, RateConfig],
    default_rates: RateConfig,
) -> RateConfig:
    """Rates for the property's country tag, or the default set."""
    if facts.country and facts.country in rates_by_country:
        return rates_by_country[facts.country]
    return default_rates


@dataclass(frozen=True)
class PortfolioSummary:
    """Totals across a portfolio as of a valuation date."""

    property_count: int
    total_market_value: float
    total_purchase_price: float
    total_debt: float
    total_after_tax_net_equity: float
    total_monthly_rent: float
    total_monthly_expenses: float
    total_annual_net_yield: float
    total_annual_cash_at_hand: float
    total_annual_tax_benefits: float
    portfolio_cap_rate: float
    loan_to_value: float


def summarize_portfolio(
    properties: Sequence[PropertyFacts],
    rates_by_country: Mapping[str, RateConfig],
    default_rates: RateConfig,
    as_of: Optional[date] = None,
) -> PortfolioSummary:
    """
    Sum headline metrics over a portfolio.

    Rent totals count only rent actually collected; potential rent on
    non-investment properties is excluded.
    """
    kpis = [
        calculate_kpis(facts, resolve_rates(facts, rates_by_country, default_rates), as_of)
        for facts in properties
    ]

    total_value = sum(k.market_value for k in kpis)
    total_debt = sum(current_balance(p, as_of) for p in properties)
    total_net_yield = sum(k.annual_net_yield for k in kpis)

    return PortfolioSummary(
        property_count=len(properties),
        total_market_value=total_value,
        total_purchase_price=sum(p.purchase_price for p in properties),
        total_debt=total_debt,
        total_after_tax_net_equity=sum(k.after_tax_net_equity for k in kpis),
        total_monthly_rent=sum(p.actual_monthly_rent for p in properties),
        total_monthly_expenses=sum(p.total_monthly_expenses for p in properties),
        total_annual_net_yield=total_net_yield,
        total_annual_cash_at_hand=sum(k.annual_cash_at_hand for k in kpis),
        total_annual_tax_benefits=sum(k.total_tax_benefits for k in kpis),
        portfolio_cap_rate=total_net_yield / total_value if total_value > 0 else 0.0,
        loan_to_value=total_debt / total_value if total_value > 0 else 0.0,
    )


def project_portfolio(
    properties: Sequence[PropertyFacts],
    rates_by_country: Mapping[str, RateConfig],
    default_rates: RateConfig,
    horizon_years: int,
    present_value_mode: bool = True,
    as_of: Optional[date] = None,
    parallel: bool = True,
    max_workers: Optional[int] = None,
) -> List[List[ProjectionRow]]:
    """
    Project every property to the horizon.

    Properties are independent, so large portfolios are fanned out over a
    thread pool. Results keep the input order.
    """

    def _project(facts: PropertyFacts) -> List[ProjectionRow]:
        rates = resolve_rates(facts, rates_by_country, default_rates)
        return project(facts, rates, horizon_years, present_value_mode, as_of)

    if parallel and len(properties) > PARALLEL_THRESHOLD:
        max_workers = max_workers or min(multiprocessing.cpu_count(), 8)
        logger.debug(
            f"Projecting {len(properties)} properties on {max_workers} workers"
        )
        with concurrent.futures.ThreadPoolExecutor(max_workers=max_workers) as executor:
            return list(executor.map(_project, properties))

    return [_project(facts) for facts in properties]
