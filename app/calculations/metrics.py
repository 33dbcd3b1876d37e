"""
Property Metrics

Single-period investment metrics shared by the scenario table, the
projection ledger and the portfolio summary. Ratios are returned as
decimals and every denominator that can be zero resolves to 0.
"""

from typing import Optional
from dataclasses import dataclass
from datetime import date

from app.calculations.amortization import (
    current_balance,
    monthly_payment_for,
    split_mortgage_payment,
)
from app.calculations.models import PropertyFacts, RateConfig
from app.calculations.tax_benefits import calculate_tax_benefits

MIN_ANNUALIZED_YEARS = 1.0


def calculate_net_yield(monthly_rent: float, monthly_expenses: float) -> float:
    """Annual net rent: (rent - operating expenses) x 12."""
    return (monthly_rent - monthly_expenses) * 12


def calculate_net_yield_ratio(net_yield: float, market_value: float) -> float:
    """Net yield as a share of market value."""
    if market_value <= 0:
        return 0.0
    return net_yield / market_value


def calculate_cash_at_hand(net_yield: float, annual_mortgage_payment: float) -> float:
    """Net yield left after mortgage payments."""
    return net_yield - annual_mortgage_payment


def calculate_appreciation(market_value: float, appreciation_rate: float) -> float:
    return market_value * appreciation_rate


def calculate_selling_costs(market_value: float, selling_cost_rate: float) -> float:
    return market_value * selling_cost_rate


def calculate_capital_gains_tax(
    market_value: float, purchase_price: float, capital_gains_tax_rate: float
) -> float:
    """Tax on the gain over purchase price; no tax on a loss."""
    return max(0.0, market_value - purchase_price) * capital_gains_tax_rate


def calculate_after_tax_net_equity(
    market_value: float,
    loan_balance: float,
    selling_costs: float,
    capital_gains_tax: float,
) -> float:
    """What the owner keeps after selling, repaying the loan and paying tax."""
    return market_value - loan_balance - (selling_costs + capital_gains_tax)


def calculate_cash_on_cash_return(
    annual_cash_flow: float, cash_invested: float
) -> float:
    if cash_invested <= 0:
        return 0.0
    return annual_cash_flow / cash_invested


def calculate_cap_rate(net_operating_income: float, market_value: float) -> float:
    if market_value <= 0:
        return 0.0
    return net_operating_income / market_value


def calculate_net_value(
    net_yield: float,
    mortgage_interest: float,
    appreciation: float,
    total_tax_benefits: float,
) -> float:
    """Net yield - interest + appreciation + tax benefits."""
    return net_yield - mortgage_interest + appreciation + total_tax_benefits


@dataclass(frozen=True)
class PropertyKPIs:
    """Headline metrics for one property as of a valuation date."""

    market_value: float
    years_held: float
    total_appreciation: float
    annualized_return: float
    selling_costs: float
    capital_gains_tax: float
    after_tax_net_equity: float
    annual_net_yield: float
    annual_mortgage_payment: float
    annual_cash_at_hand: float
    annual_interest: float
    annual_principal_paydown: float
    annual_appreciation: float
    total_tax_benefits: float
    net_return: float
    net_value: float
    cap_rate: float
    cash_on_cash_return: float
    equity_cash_on_cash_return: float
    net_roi: float


def calculate_kpis(
    facts: PropertyFacts, rates: RateConfig, as_of: Optional[date] = None
) -> PropertyKPIs:
    """
    Calculate the headline metrics shown on a property card.

    Interest and principal for the next twelve months are approximated
    from the split of one payment at the current balance.
    """
    value = facts.market_value
    years = facts.years_held(as_of)

    total_appreciation = 0.0
    annualized_return = 0.0
    if facts.purchase_price > 0 and facts.current_value > 0:
        total_appreciation = (facts.current_value - facts.purchase_price) / facts.purchase_price
        # Shorter holds are not annualized
        if years >= MIN_ANNUALIZED_YEARS:
            annualized_return = (facts.current_value / facts.purchase_price) ** (1 / years) - 1

    selling_costs = calculate_selling_costs(value, rates.selling_cost_rate)
    capital_gains_tax = calculate_capital_gains_tax(
        value, facts.purchase_price, rates.capital_gains_tax_rate
    )
    balance = current_balance(facts, as_of)
    equity = calculate_after_tax_net_equity(
        value, balance, selling_costs, capital_gains_tax
    )

    net_yield = calculate_net_yield(
        facts.effective_monthly_rent, facts.operating_monthly_expenses
    )
    monthly_payment = monthly_payment_for(facts) if balance > 0 else 0.0
    annual_mortgage = monthly_payment * 12
    cash_at_hand = calculate_cash_at_hand(net_yield, annual_mortgage)

    split = split_mortgage_payment(
        balance, facts.annual_interest_rate, monthly_payment
    )
    annual_interest = split.interest * 12
    annual_principal = split.principal * 12
    annual_appreciation = calculate_appreciation(value, facts.appreciation_rate(rates))
    tax_benefits = calculate_tax_benefits(facts, as_of).total

    net_return = cash_at_hand + annual_principal + annual_appreciation

    return PropertyKPIs(
        market_value=value,
        years_held=years,
        total_appreciation=total_appreciation,
        annualized_return=annualized_return,
        selling_costs=selling_costs,
        capital_gains_tax=capital_gains_tax,
        after_tax_net_equity=equity,
        annual_net_yield=net_yield,
        annual_mortgage_payment=annual_mortgage,
        annual_cash_at_hand=cash_at_hand,
        annual_interest=annual_interest,
        annual_principal_paydown=annual_principal,
        annual_appreciation=annual_appreciation,
        total_tax_benefits=tax_benefits,
        net_return=net_return,
        net_value=calculate_net_value(
            net_yield, annual_interest, annual_appreciation, tax_benefits
        ),
        cap_rate=calculate_cap_rate(net_yield, value),
        cash_on_cash_return=calculate_cash_on_cash_return(cash_at_hand, facts.down_payment),
        equity_cash_on_cash_return=calculate_cash_on_cash_return(cash_at_hand, equity),
        net_roi=calculate_cash_on_cash_return(net_return, equity),
    )
