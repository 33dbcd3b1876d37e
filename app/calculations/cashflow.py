"""
Cash Flow Calculations

Builds annual investment cash-flow series for a property and evaluates
them over a range of holding horizons.

The mortgage balance at sale comes from the same amortization schedule
used by the time-series projection, so both consumers agree on how much
debt is repaid from sale proceeds.
"""

from typing import List, Optional, Sequence
from dataclasses import dataclass
from datetime import date

from app.calculations import irr
from app.calculations.amortization import (
    balance_after_years,
    current_balance,
    monthly_payment_for,
)
from app.calculations.models import CashFlowSeries, PropertyFacts, RateConfig
from app.calculations.tax_benefits import calculate_tax_benefits, calculate_tax_savings

CLOSING_COST_RATE = 0.03
MIN_RENT_GROWTH = 0.02
RENT_GROWTH_INFLATION_SPREAD = 0.02

TIME_HORIZONS = (5, 10, 15, 20, 25, 30)
DEFAULT_DISCOUNT_RATE = 8.0


def rent_growth_rate(rates: RateConfig) -> float:
    """Annual rent growth: inflation less 2 points, never below 2%."""
    return max(MIN_RENT_GROWTH, rates.inflation_rate - RENT_GROWTH_INFLATION_SPREAD)


def calculate_initial_outlay(facts: PropertyFacts) -> float:
    """Down payment plus closing costs, as a negative cash flow."""
    return -(facts.down_payment + facts.purchase_price * CLOSING_COST_RATE)


def calculate_sale_proceeds(
    facts: PropertyFacts,
    rates: RateConfig,
    years: int,
    as_of: Optional[date] = None,
) -> dict:
    """
    Net proceeds from selling at the end of a holding period.

    Returns:
        Dict with sale_price, mortgage_balance, selling_costs,
        capital_gains_tax and net_proceeds
    """
    sale_price = facts.market_value * (1 + facts.appreciation_rate(rates)) ** years
    mortgage_balance = balance_after_years(facts, years, as_of)
    selling_costs = sale_price * rates.selling_cost_rate
    capital_gains_tax = (
        max(0.0, sale_price - facts.purchase_price) * rates.capital_gains_tax_rate
    )

    return {
        "sale_price": sale_price,
        "mortgage_balance": mortgage_balance,
        "selling_costs": selling_costs,
        "capital_gains_tax": capital_gains_tax,
        "net_proceeds": sale_price - mortgage_balance - selling_costs - capital_gains_tax,
    }


def generate_cash_flows(
    facts: PropertyFacts,
    rates: RateConfig,
    years: int,
    as_of: Optional[date] = None,
) -> CashFlowSeries:
    """
    Generate annual cash flows for holding a property and selling it.

    Period 0 is the down payment plus 3% closing costs. Each following
    year nets rent against operating expenses, mortgage payments and the
    cash value of tax benefits. The final year also receives the net
    sale proceeds.

    Rent grows at max(2%, inflation - 2%) and expenses at inflation.
    Mortgage payments stop in the first year that starts with the loan
    already repaid.

    Args:
        facts: Property facts
        rates: Jurisdiction rate assumptions
        years: Holding period in years
        as_of: Valuation date used to derive elapsed loan months

    Returns:
        CashFlowSeries with years + 1 entries
    """
    flows = [calculate_initial_outlay(facts)]

    if years <= 0:
        return CashFlowSeries(tuple(flows))

    annual_rent = facts.effective_monthly_rent * 12
    annual_expenses = facts.operating_monthly_expenses * 12
    annual_mortgage = monthly_payment_for(facts) * 12
    rent_growth = rent_growth_rate(rates)

    tax_savings = calculate_tax_savings(
        calculate_tax_benefits(facts, as_of).total, rates.capital_gains_tax_rate
    )

    opening_balance = current_balance(facts, as_of)

    for year in range(1, years + 1):
        rent = annual_rent * (1 + rent_growth) ** (year - 1)
        expenses = annual_expenses * (1 + rates.inflation_rate) ** (year - 1)
        mortgage = annual_mortgage if opening_balance > 0 else 0.0

        net_cash_flow = rent - expenses - mortgage + tax_savings

        if year == years:
            net_cash_flow += calculate_sale_proceeds(facts, rates, years, as_of)[
                "net_proceeds"
            ]

        flows.append(net_cash_flow)
        opening_balance = balance_after_years(facts, year, as_of)

    return CashFlowSeries(tuple(flows))


@dataclass(frozen=True)
class HorizonAnalysis:
    """Return metrics for one holding horizon."""

    time_horizon: int
    irr: float
    npv: float
    npv_index: float
    total_cash_flow: float
    final_value: float
    cumulative_return: float


def analyze_time_horizons(
    facts: PropertyFacts,
    rates: RateConfig,
    horizons: Sequence[int] = TIME_HORIZONS,
    discount_rate: float = DEFAULT_DISCOUNT_RATE,
    as_of: Optional[date] = None,
) -> List[HorizonAnalysis]:
    """
    Evaluate IRR and NPV of holding a property for each horizon.

    Args:
        discount_rate: Required return in percent

    Returns:
        One HorizonAnalysis per horizon. IRR is in percent and falls back
        to 0 when the solver finds no usable root.
    """
    results = []

    for years in horizons:
        series = generate_cash_flows(facts, rates, years, as_of)
        npv = irr.calculate_npv(series.flows, discount_rate)
        initial = series.initial_investment
        total_cash_flow = sum(series.flows[1:])

        results.append(
            HorizonAnalysis(
                time_horizon=years,
                irr=irr.safe_irr(series.flows),
                npv=npv,
                npv_index=irr.calculate_npv_index(npv, initial),
                total_cash_flow=total_cash_flow,
                final_value=series.flows[-1],
                cumulative_return=(total_cash_flow / initial - 1) if initial > 0 else 0.0,
            )
        )

    return results


def generate_projected_monthly_cash_flows(
    facts: PropertyFacts,
    years: int,
    appreciation_rate: float,
    rent_growth: float,
) -> List[float]:
    """
    Monthly cash flows from buying at today's value and selling after N years.

    Month 0 is the current market value as an outflow; the last month adds
    the appreciated value. Used for MIRR.
    """
    months = years * 12
    flows = [-facts.market_value]

    monthly_cash_flow = (
        facts.effective_monthly_rent
        - facts.operating_monthly_expenses
        - monthly_payment_for(facts)
    )
    monthly_rent_growth = irr.annual_to_periodic_rate(rent_growth)
    monthly_appreciation = irr.annual_to_periodic_rate(appreciation_rate)

    for month in range(1, months + 1):
        flow = monthly_cash_flow * (1 + monthly_rent_growth) ** month
        if month == months:
            flow += facts.market_value * (1 + monthly_appreciation) ** months
        flows.append(flow)

    return flows


def generate_historical_monthly_cash_flows(
    facts: PropertyFacts, as_of: Optional[date] = None
) -> List[float]:
    """
    Monthly cash flows from purchase until today, closing at current value.

    Used for MIRR. At least one month is assumed.
    """
    months_held = max(1, int(facts.years_held(as_of) * 12))
    monthly_cash_flow = (
        facts.effective_monthly_rent
        - facts.operating_monthly_expenses
        - monthly_payment_for(facts)
    )

    flows = [-facts.purchase_price]
    flows.extend([monthly_cash_flow] * (months_held - 1))
    flows.append(monthly_cash_flow + facts.market_value)
    return flows
