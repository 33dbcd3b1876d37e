"""
Inflation Adjustments

Converts historical purchase prices into today's dollars using annual
US CPI inflation, and separates real appreciation from inflation.
"""

from typing import Dict, Optional
from dataclasses import dataclass
from datetime import date

from app.calculations.amortization import monthly_payment_for
from app.calculations.models import PropertyFacts

DEFAULT_INFLATION_RATE = 0.025

# Annual CPI inflation, decimal
HISTORICAL_INFLATION: Dict[int, float] = {
    1950: 0.013, 1951: 0.079, 1952: 0.019, 1953: 0.008, 1954: 0.007,
    1955: -0.004, 1956: 0.015, 1957: 0.033, 1958: 0.028, 1959: 0.007,
    1960: 0.017, 1961: 0.010, 1962: 0.010, 1963: 0.013, 1964: 0.013,
    1965: 0.016, 1966: 0.029, 1967: 0.031, 1968: 0.042, 1969: 0.055,
    1970: 0.057, 1971: 0.044, 1972: 0.032, 1973: 0.062, 1974: 0.110,
    1975: 0.092, 1976: 0.058, 1977: 0.065, 1978: 0.076, 1979: 0.113,
    1980: 0.135, 1981: 0.103, 1982: 0.062, 1983: 0.032, 1984: 0.043,
    1985: 0.036, 1986: 0.019, 1987: 0.036, 1988: 0.041, 1989: 0.048,
    1990: 0.054, 1991: 0.042, 1992: 0.030, 1993: 0.030, 1994: 0.026,
    1995: 0.028, 1996: 0.030, 1997: 0.023, 1998: 0.016, 1999: 0.022,
    2000: 0.034, 2001: 0.028, 2002: 0.016, 2003: 0.023, 2004: 0.027,
    2005: 0.034, 2006: 0.032, 2007: 0.028, 2008: 0.038, 2009: -0.004,
    2010: 0.016, 2011: 0.031, 2012: 0.021, 2013: 0.015, 2014: 0.001,
    2015: 0.001, 2016: 0.013, 2017: 0.021, 2018: 0.024, 2019: 0.018,
    2020: 0.012, 2021: 0.047, 2022: 0.080, 2023: 0.041, 2024: 0.032,
}


def inflation_for_year(year: int) -> Optional[float]:
    return HISTORICAL_INFLATION.get(year)


def calculate_cumulative_inflation(purchase_year: int, current_year: int) -> float:
    """
    Compound inflation from the year after purchase through current_year.

    Years missing from the table are assumed at 2.5%.

    Returns:
        Cumulative factor (e.g., 1.5 means prices rose 50%)
    """
    factor = 1.0
    for year in range(purchase_year + 1, current_year + 1):
        factor *= 1 + HISTORICAL_INFLATION.get(year, DEFAULT_INFLATION_RATE)
    return factor


def inflation_adjusted_price(
    original_price: float, purchase_date: date, current_year: Optional[int] = None
) -> float:
    """Purchase price expressed in current-year dollars."""
    current_year = current_year or date.today().year
    return original_price * calculate_cumulative_inflation(purchase_date.year, current_year)


@dataclass(frozen=True)
class RealAppreciation:
    """Nominal versus inflation-adjusted appreciation since purchase."""

    nominal_roi: float
    inflation_adjusted_price: float
    real_roi: float
    real_appreciation_rate: float
    inflation_factor: float
    total_inflation: float


def calculate_real_appreciation_metrics(
    original_price: float,
    current_value: float,
    purchase_date: date,
    current_year: Optional[int] = None,
) -> RealAppreciation:
    """Appreciation since purchase, with and without inflation."""
    current_year = current_year or date.today().year
    years_held = current_year - purchase_date.year

    if years_held <= 0 or original_price <= 0:
        return RealAppreciation(0.0, original_price, 0.0, 0.0, 1.0, 0.0)

    factor = calculate_cumulative_inflation(purchase_date.year, current_year)
    adjusted = original_price * factor

    return RealAppreciation(
        nominal_roi=(current_value - original_price) / original_price,
        inflation_adjusted_price=adjusted,
        real_roi=(current_value - adjusted) / adjusted,
        real_appreciation_rate=(
            (current_value / adjusted) ** (1 / years_held) - 1 if current_value > 0 else 0.0
        ),
        inflation_factor=factor,
        total_inflation=factor - 1,
    )


@dataclass(frozen=True)
class TrueROI:
    """Return since purchase from appreciation plus cash flow."""

    total_roi: float
    annualized_roi: float
    total_cash_flow: float
    appreciation_return: float
    cash_flow_return: float


def calculate_true_roi(
    facts: PropertyFacts, current_year: Optional[int] = None
) -> TrueROI:
    """
    Total and annualized return on the purchase price since purchase.

    Cash flow is the current monthly figure (rent less expenses and
    mortgage) assumed constant over the holding period.
    """
    current_year = current_year or date.today().year
    if facts.purchase_date is None:
        return TrueROI(0.0, 0.0, 0.0, 0.0, 0.0)

    years_held = current_year - facts.purchase_date.year
    original_price = facts.purchase_price

    if years_held <= 0 or original_price <= 0:
        return TrueROI(0.0, 0.0, 0.0, 0.0, 0.0)

    monthly_cash_flow = (
        facts.effective_monthly_rent
        - facts.operating_monthly_expenses
        - monthly_payment_for(facts)
    )
    total_cash_flow = monthly_cash_flow * years_held * 12
    appreciation = facts.market_value - original_price
    total_return = appreciation + total_cash_flow

    growth = (total_return + original_price) / original_price
    annualized = growth ** (1 / years_held) - 1 if growth > 0 else 0.0

    return TrueROI(
        total_roi=total_return / original_price,
        annualized_roi=annualized,
        total_cash_flow=total_cash_flow,
        appreciation_return=appreciation / original_price,
        cash_flow_return=total_cash_flow / original_price,
    )
