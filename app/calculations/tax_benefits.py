"""
Tax Benefit Calculations

Depreciation, deductions, depreciation recapture and 1031 exchange
analysis for rental property.

The mortgage-interest deduction is approximated from one month's interest
at the current balance, annualized. It is not a sum of the next twelve
months of actual interest, so it slightly overstates the deduction on an
amortizing loan.
"""

from typing import List, Optional, Sequence
from dataclasses import dataclass
from datetime import date

from app.calculations.amortization import (
    balance_after_years,
    calculate_payment,
    current_balance,
    monthly_payment_for,
    split_mortgage_payment,
)
from app.calculations.models import (
    ExchangeOpportunity,
    PropertyFacts,
    PropertyType,
    RateConfig,
    TaxBenefitResult,
)

RESIDENTIAL_DEPRECIATION_YEARS = 27.5
COMMERCIAL_DEPRECIATION_YEARS = 39
RECAPTURE_TAX_RATE = 0.25
DEFAULT_TAX_SAVINGS_RATE = 0.25
ESCROW_PROPERTY_TAX_SHARE = 0.7
LONG_TERM_GAINS_DISCOUNT = 0.8

HOLDING_PERIODS = (1, 2, 5, 10, 15, 20)

EXCHANGE_COSTS = 15000.0
REPLACEMENT_LOAN_RATE = 0.065
REPLACEMENT_LOAN_TERM_MONTHS = 360
REPLACEMENT_MONTHLY_EXPENSES = 300.0


def depreciation_divisor(property_type) -> float:
    """
    Recovery period in years for a property type.

    Raises:
        UnknownPropertyType: If the type has no depreciation schedule
    """
    if PropertyType.parse(property_type).is_commercial:
        return COMMERCIAL_DEPRECIATION_YEARS
    return RESIDENTIAL_DEPRECIATION_YEARS


def calculate_tax_benefits(
    facts: PropertyFacts, as_of: Optional[date] = None
) -> TaxBenefitResult:
    """
    Calculate the annual tax benefits of holding a property.

    A positive manual override replaces the whole calculation and is
    reported as the total with every component zeroed.
    """
    if facts.tax_benefit_override and facts.tax_benefit_override > 0:
        return TaxBenefitResult(total=facts.tax_benefit_override, is_override=True)

    annual_depreciation = facts.effective_cost_basis / depreciation_divisor(
        facts.property_type
    )

    mortgage_interest_deduction = 0.0
    balance = current_balance(facts, as_of)
    if balance > 0:
        split = split_mortgage_payment(
            balance,
            facts.annual_interest_rate,
            monthly_payment_for(facts),
        )
        mortgage_interest_deduction = split.interest * 12

    breakdown = facts.expense_breakdown

    if breakdown is not None and breakdown.annual_property_taxes:
        property_tax_deduction = breakdown.annual_property_taxes
    else:
        escrow = facts.monthly_escrow or (breakdown.monthly_escrow if breakdown else 0.0)
        property_tax_deduction = escrow * 12 * ESCROW_PROPERTY_TAX_SHARE

    # Management, association and other fees are not deductible as repairs
    maintenance_deductions = 0.0
    if breakdown is not None and breakdown.monthly_maintenance:
        maintenance_deductions = breakdown.monthly_maintenance * 12

    total = (
        annual_depreciation
        + mortgage_interest_deduction
        + property_tax_deduction
        + maintenance_deductions
    )

    return TaxBenefitResult(
        annual_depreciation=annual_depreciation,
        mortgage_interest_deduction=mortgage_interest_deduction,
        property_tax_deduction=property_tax_deduction,
        maintenance_deductions=maintenance_deductions,
        total=total,
    )


def calculate_tax_savings(
    tax_benefits: float, tax_rate: float = DEFAULT_TAX_SAVINGS_RATE
) -> float:
    """Cash value of deductions at a marginal tax rate."""
    return tax_benefits * tax_rate


def calculate_depreciation_recapture(
    facts: PropertyFacts, years_held: float, sale_price: float
) -> float:
    """
    Tax owed on depreciation taken while the property was held.

    The recapture rate is fixed at 25% regardless of jurisdiction. The sale
    price does not cap the recapture.
    """
    rate = 1 / depreciation_divisor(facts.property_type)
    total_depreciation = facts.effective_cost_basis * rate * max(0.0, years_held)
    return total_depreciation * RECAPTURE_TAX_RATE


def calculate_1031_exchange_opportunity(
    facts: PropertyFacts, as_of: Optional[date] = None
) -> ExchangeOpportunity:
    """Whether a like-kind exchange applies and how much must be replaced."""
    current_value = facts.market_value
    return ExchangeOpportunity(
        eligible=(
            facts.property_type is not PropertyType.single_family
            or facts.monthly_rent > 0
        ),
        deferred_gains=max(0.0, current_value - facts.purchase_price),
        minimum_replacement=current_value - current_balance(facts, as_of),
    )


@dataclass(frozen=True)
class HoldingPeriodResult:
    """Outcome of selling after holding for a number of years."""

    years: int
    future_value: float
    capital_gains: float
    capital_gains_tax: float
    depreciation_recapture: float
    total_taxes: float
    net_proceeds: float
    total_tax_savings: float
    effective_return: float
    annualized_return: float


def analyze_holding_periods(
    facts: PropertyFacts,
    rates: RateConfig,
    periods: Sequence[int] = HOLDING_PERIODS,
    as_of: Optional[date] = None,
) -> List[HoldingPeriodResult]:
    """
    Compare selling after each holding period.

    Gains on holds of a year or more are taxed at 80% of the configured
    capital-gains rate. Annualized return is measured on the down payment.
    """
    appreciation_rate = facts.appreciation_rate(rates)
    annual_savings = calculate_tax_savings(
        calculate_tax_benefits(facts, as_of).total, rates.capital_gains_tax_rate
    )

    results = []
    for years in periods:
        future_value = facts.market_value * (1 + appreciation_rate) ** years
        capital_gains = max(0.0, future_value - facts.purchase_price)

        tax_rate = rates.capital_gains_tax_rate
        if years >= 1:
            tax_rate *= LONG_TERM_GAINS_DISCOUNT
        capital_gains_tax = capital_gains * tax_rate

        recapture = calculate_depreciation_recapture(facts, years, future_value)
        total_taxes = capital_gains_tax + recapture

        net_proceeds = (
            future_value
            - balance_after_years(facts, years, as_of)
            - future_value * rates.selling_cost_rate
            - total_taxes
        )
        total_tax_savings = annual_savings * years

        annualized_return = 0.0
        growth = (net_proceeds + total_tax_savings) / facts.down_payment if facts.down_payment > 0 else 0.0
        if growth > 0 and years > 0:
            annualized_return = growth ** (1 / years) - 1

        results.append(
            HoldingPeriodResult(
                years=years,
                future_value=future_value,
                capital_gains=capital_gains,
                capital_gains_tax=capital_gains_tax,
                depreciation_recapture=recapture,
                total_taxes=total_taxes,
                net_proceeds=net_proceeds,
                total_tax_savings=total_tax_savings,
                effective_return=net_proceeds + total_tax_savings - facts.down_payment,
                annualized_return=annualized_return,
            )
        )

    return results


@dataclass(frozen=True)
class ExchangeAnalysis:
    """Selling outright versus rolling proceeds into a replacement property."""

    proceeds_without_exchange: float
    total_taxes: float
    proceeds_with_exchange: float
    taxes_deferred: float
    exchange_costs: float
    replacement_equity: float
    replacement_loan_amount: float
    replacement_monthly_cash_flow: float
    replacement_annual_cash_flow: float
    additional_cash: float
    leverage_advantage: float


def analyze_1031_exchange(
    facts: PropertyFacts,
    rates: RateConfig,
    sale_price: float,
    replacement_price: float,
    replacement_monthly_rent: float,
    as_of: Optional[date] = None,
) -> Optional[ExchangeAnalysis]:
    """
    Compare a taxable sale with a 1031 exchange into a replacement property.

    Returns None when either price is missing. The replacement is assumed
    to be financed at 6.5% over 30 years with $300/month of expenses.
    """
    if sale_price <= 0 or replacement_price <= 0:
        return None

    capital_gains = max(0.0, sale_price - facts.purchase_price)
    capital_gains_tax = (
        capital_gains * rates.capital_gains_tax_rate * LONG_TERM_GAINS_DISCOUNT
    )
    recapture = calculate_depreciation_recapture(
        facts, facts.years_held(as_of), sale_price
    )
    total_taxes = capital_gains_tax + recapture

    selling_costs = sale_price * rates.selling_cost_rate
    proceeds_before_tax = sale_price - current_balance(facts, as_of) - selling_costs
    proceeds_without_exchange = proceeds_before_tax - total_taxes

    available = proceeds_before_tax - EXCHANGE_COSTS
    replacement_loan = replacement_price - available
    replacement_payment = calculate_payment(
        replacement_loan, REPLACEMENT_LOAN_RATE, REPLACEMENT_LOAN_TERM_MONTHS
    )
    monthly_cash_flow = (
        replacement_monthly_rent - replacement_payment - REPLACEMENT_MONTHLY_EXPENSES
    )

    return ExchangeAnalysis(
        proceeds_without_exchange=proceeds_without_exchange,
        total_taxes=total_taxes,
        proceeds_with_exchange=available,
        taxes_deferred=total_taxes,
        exchange_costs=EXCHANGE_COSTS,
        replacement_equity=available,
        replacement_loan_amount=replacement_loan,
        replacement_monthly_cash_flow=monthly_cash_flow,
        replacement_annual_cash_flow=monthly_cash_flow * 12,
        additional_cash=available - proceeds_without_exchange,
        leverage_advantage=replacement_price - proceeds_without_exchange,
    )
