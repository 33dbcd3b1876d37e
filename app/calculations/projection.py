"""
Time-Series Projection

Produces the per-year ledger behind the projections table, the charts and
the scenario comparisons. Every consumer reads these rows instead of
re-deriving values, so tables and charts always agree.

Rows are built by a forward-only recurrence: row y depends on year y and
on sums over years 1..y carried forward, never on a later row.
"""

from typing import Dict, List, Optional
from dataclasses import dataclass
from datetime import date

from app.calculations.amortization import (
    balance_after_years,
    current_balance,
    monthly_payment_for,
)
from app.calculations.metrics import (
    calculate_after_tax_net_equity,
    calculate_capital_gains_tax,
    calculate_selling_costs,
)
from app.calculations.models import PropertyFacts, RateConfig
from app.calculations.scenarios import create_financing_variants

# Rent tracks property appreciation at 70%; expenses grow at a flat 2%
RENT_GROWTH_SHARE_OF_APPRECIATION = 0.7
EXPENSE_GROWTH_RATE = 0.02


@dataclass(frozen=True)
class ProjectionRow:
    """One year of the projection ledger. Year 0 is today."""

    year: int
    market_value: float
    market_value_pv: float
    outstanding_balance: float
    remaining_term_months: int
    capital_gains_tax: float
    selling_costs: float
    net_equity_nominal: float
    net_equity_pv: float
    annual_net_yield: float
    cumulative_net_yield: float
    annual_mortgage: float
    cumulative_mortgage_pv: float
    cumulative_principal_paid: float
    net_gain: float


def present_value_factor(inflation_rate: float, year: int) -> float:
    """Discount factor converting year-N dollars into today's dollars."""
    return (1 + inflation_rate) ** (-year)


def project(
    facts: PropertyFacts,
    rates: RateConfig,
    horizon_years: int,
    present_value_mode: bool = True,
    as_of: Optional[date] = None,
) -> List[ProjectionRow]:
    """
    Project a property year by year from today to the horizon.

    With present_value_mode enabled, cumulative net yield, cumulative
    mortgage payments and the equity used for net gain are discounted by
    inflation; otherwise they stay nominal. net_equity_pv is always the
    discounted figure.

    A year's mortgage payments count only if the loan was outstanding at
    the start of that year.

    Args:
        facts: Property facts
        rates: Jurisdiction rate assumptions
        horizon_years: Last year to project (inclusive)
        present_value_mode: Discount flows to today's dollars
        as_of: Valuation date used to derive elapsed loan months

    Returns:
        horizon_years + 1 rows, year 0 first
    """
    appreciation_rate = facts.appreciation_rate(rates)
    rent_growth = appreciation_rate * RENT_GROWTH_SHARE_OF_APPRECIATION

    monthly_rent = facts.effective_monthly_rent
    monthly_expenses = facts.operating_monthly_expenses
    annual_mortgage_payment = monthly_payment_for(facts) * 12
    elapsed = facts.elapsed_months(as_of)

    opening_balance = current_balance(facts, as_of)
    previous_balance = opening_balance
    cumulative_net_yield = 0.0
    cumulative_mortgage = 0.0

    rows = []

    for year in range(max(0, horizon_years) + 1):
        pv_factor = present_value_factor(rates.inflation_rate, year)
        flow_factor = pv_factor if present_value_mode else 1.0

        market_value = facts.market_value * (1 + appreciation_rate) ** year
        balance = opening_balance if year == 0 else balance_after_years(facts, year, as_of)

        capital_gains_tax = calculate_capital_gains_tax(
            market_value, facts.purchase_price, rates.capital_gains_tax_rate
        )
        selling_costs = calculate_selling_costs(market_value, rates.selling_cost_rate)
        net_equity = calculate_after_tax_net_equity(
            market_value, balance, selling_costs, capital_gains_tax
        )

        annual_net_yield = 0.0
        annual_mortgage = 0.0
        if year > 0:
            rent = monthly_rent * 12 * (1 + rent_growth) ** year
            expenses = monthly_expenses * 12 * (1 + EXPENSE_GROWTH_RATE) ** year
            annual_net_yield = rent - expenses
            cumulative_net_yield += annual_net_yield * flow_factor

            if previous_balance > 0:
                annual_mortgage = annual_mortgage_payment
                cumulative_mortgage += annual_mortgage * flow_factor

        equity_for_gain = net_equity * pv_factor if present_value_mode else net_equity

        remaining = 0
        if facts.loan_term_months > 0:
            remaining = max(0, facts.loan_term_months - (elapsed + 12 * year))

        rows.append(
            ProjectionRow(
                year=year,
                market_value=market_value,
                market_value_pv=market_value * pv_factor,
                outstanding_balance=balance,
                remaining_term_months=remaining,
                capital_gains_tax=capital_gains_tax,
                selling_costs=selling_costs,
                net_equity_nominal=net_equity,
                net_equity_pv=net_equity * pv_factor,
                annual_net_yield=annual_net_yield,
                cumulative_net_yield=cumulative_net_yield,
                annual_mortgage=annual_mortgage,
                cumulative_mortgage_pv=cumulative_mortgage,
                cumulative_principal_paid=max(0.0, opening_balance - balance),
                net_gain=equity_for_gain + cumulative_net_yield - cumulative_mortgage,
            )
        )

        previous_balance = balance

    return rows


def net_gain_at(
    facts: PropertyFacts,
    rates: RateConfig,
    year: int,
    present_value_mode: bool = True,
    as_of: Optional[date] = None,
) -> float:
    """Net gain for a single year, read from the same ledger as the table."""
    return project(facts, rates, year, present_value_mode, as_of)[-1].net_gain


def project_financing_variants(
    facts: PropertyFacts,
    rates: RateConfig,
    horizon_years: int,
    present_value_mode: bool = True,
    as_of: Optional[date] = None,
) -> Dict[str, List[ProjectionRow]]:
    """Projection ledgers for the current, max-debt and all-cash variants."""
    return {
        variant.kind.value: project(
            variant.facts, rates, horizon_years, present_value_mode, as_of
        )
        for variant in create_financing_variants(facts, rates)
    }
