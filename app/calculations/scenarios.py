"""
Scenario Comparisons

Named what-if variants of a property. Each variant is a pure transform of
the base inputs (market value, debt, gross yield); every derived metric is
then computed with the same formulas as the base case.
"""

from typing import Callable, Dict, List, Optional
from dataclasses import dataclass, replace
from datetime import date
from enum import Enum

from app.calculations.amortization import calculate_payment, current_balance
from app.calculations.metrics import (
    calculate_after_tax_net_equity,
    calculate_capital_gains_tax,
    calculate_selling_costs,
)
from app.calculations.models import PropertyFacts, RateConfig

APPRECIATION_MULTIPLIER = 1.5
RENT_MULTIPLIER = 1.5
ADDITIONAL_DEBT_RATIO = 0.25

MAX_DEBT_LTV = 0.8
DEFAULT_LOAN_TERM_MONTHS = 360


class ScenarioName(str, Enum):
    """What-if variants shown side by side in the comparison table."""

    base = "Base"
    accelerated_appreciation = "Accelerated appreciation (1.5x)"
    full_mortgage_paid = "Full mortgage paid"
    increased_debt = "Increased debt (+25%)"
    rent_appreciation = "Rent appreciation (1.5x)"
    rent_and_value_appreciation = "Rent & value appreciation"


@dataclass(frozen=True)
class ScenarioInputs:
    """The inputs a scenario is allowed to change."""

    market_value: float
    debt: float
    gross_yield: float
    annual_expenses: float

    @property
    def net_yield(self) -> float:
        return self.gross_yield - self.annual_expenses


@dataclass(frozen=True)
class ScenarioResult:
    """Metrics of one scenario."""

    name: ScenarioName
    market_value: float
    debt: float
    selling_costs: float
    capital_gains_tax: float
    gross_yield: float
    net_yield: float
    after_tax_net_equity: float
    net_yield_asset_efficiency: float
    coc_investment_performance: float


SCENARIO_TRANSFORMS: Dict[ScenarioName, Callable[[ScenarioInputs], ScenarioInputs]] = {
    ScenarioName.base: lambda s: s,
    ScenarioName.accelerated_appreciation: lambda s: replace(
        s, market_value=s.market_value * APPRECIATION_MULTIPLIER
    ),
    ScenarioName.full_mortgage_paid: lambda s: replace(s, debt=0.0),
    ScenarioName.increased_debt: lambda s: replace(
        s, debt=s.debt + s.market_value * ADDITIONAL_DEBT_RATIO
    ),
    ScenarioName.rent_appreciation: lambda s: replace(
        s, gross_yield=s.gross_yield * RENT_MULTIPLIER
    ),
    ScenarioName.rent_and_value_appreciation: lambda s: replace(
        s,
        market_value=s.market_value * APPRECIATION_MULTIPLIER,
        gross_yield=s.gross_yield * RENT_MULTIPLIER,
    ),
}


def base_inputs(facts: PropertyFacts, as_of: Optional[date] = None) -> ScenarioInputs:
    return ScenarioInputs(
        market_value=facts.market_value,
        debt=current_balance(facts, as_of),
        gross_yield=facts.effective_monthly_rent * 12,
        annual_expenses=facts.operating_monthly_expenses * 12,
    )


def evaluate_scenario(
    name: ScenarioName,
    inputs: ScenarioInputs,
    purchase_price: float,
    rates: RateConfig,
) -> ScenarioResult:
    """Compute equity and yield ratios for already-transformed inputs."""
    selling_costs = calculate_selling_costs(inputs.market_value, rates.selling_cost_rate)
    capital_gains_tax = calculate_capital_gains_tax(
        inputs.market_value, purchase_price, rates.capital_gains_tax_rate
    )
    equity = calculate_after_tax_net_equity(
        inputs.market_value, inputs.debt, selling_costs, capital_gains_tax
    )
    net_yield = inputs.net_yield

    return ScenarioResult(
        name=name,
        market_value=inputs.market_value,
        debt=inputs.debt,
        selling_costs=selling_costs,
        capital_gains_tax=capital_gains_tax,
        gross_yield=inputs.gross_yield,
        net_yield=net_yield,
        after_tax_net_equity=equity,
        net_yield_asset_efficiency=(
            net_yield / inputs.market_value if inputs.market_value > 0 else 0.0
        ),
        coc_investment_performance=net_yield / equity if equity > 0 else 0.0,
    )


def build_scenarios(
    facts: PropertyFacts, rates: RateConfig, as_of: Optional[date] = None
) -> List[ScenarioResult]:
    """Evaluate every named scenario for a property, Base first."""
    base = base_inputs(facts, as_of)
    return [
        evaluate_scenario(name, transform(base), facts.purchase_price, rates)
        for name, transform in SCENARIO_TRANSFORMS.items()
    ]


class FinancingKind(str, Enum):
    current = "current"
    max_debt = "max_debt"
    zero_debt = "zero_debt"


@dataclass(frozen=True)
class FinancingVariant:
    """A property re-financed a different way, ready for projection."""

    kind: FinancingKind
    label: str
    facts: PropertyFacts


def create_financing_variants(
    facts: PropertyFacts, rates: RateConfig
) -> List[FinancingVariant]:
    """
    The property as held, refinanced to 80% LTV, and owned outright.

    The max-debt loan uses the property's own rate (or the jurisdiction's
    mortgage rate when it has none) and restarts the loan term.
    """
    value = facts.market_value

    max_debt_loan = value * MAX_DEBT_LTV
    max_debt_rate = facts.annual_interest_rate or rates.mortgage_rate
    max_debt_term = facts.loan_term_months or DEFAULT_LOAN_TERM_MONTHS

    max_debt = replace(
        facts,
        loan_amount=max_debt_loan,
        outstanding_balance=max_debt_loan,
        down_payment=value * (1 - MAX_DEBT_LTV),
        annual_interest_rate=max_debt_rate,
        loan_term_months=max_debt_term,
        monthly_mortgage=calculate_payment(max_debt_loan, max_debt_rate, max_debt_term),
        months_elapsed=0,
    )

    zero_debt = replace(
        facts,
        loan_amount=0.0,
        outstanding_balance=0.0,
        down_payment=value,
        annual_interest_rate=0.0,
        loan_term_months=0,
        monthly_mortgage=0.0,
        months_elapsed=0,
    )

    return [
        FinancingVariant(FinancingKind.current, "Current", facts),
        FinancingVariant(FinancingKind.max_debt, "Max Debt (80% LTV)", max_debt),
        FinancingVariant(FinancingKind.zero_debt, "0 Debt (All Cash)", zero_debt),
    ]
