"""
IRR and NPV Calculations

Implements IRR using Newton-Raphson over periodic cash flows. Discount
rates passed to NPV and the IRR result are expressed in percent so that
calculate_npv(flows, calculate_irr(flows)) is close to zero.
"""

import logging
import math
from dataclasses import dataclass
from typing import List, Sequence

import numpy as np

logger = logging.getLogger(__name__)

MAX_ITERATIONS = 1000
TOLERANCE = 1e-7
DEFAULT_GUESS = 0.1

# IRR results outside this band (percent) are treated as "no real solution"
MIN_REASONABLE_IRR = -100.0
MAX_REASONABLE_IRR = 1000.0


def _discount_factors(rate: float, periods: int) -> np.ndarray:
    return (1 + rate) ** np.arange(periods, dtype=float)


def calculate_npv(cash_flows: Sequence[float], discount_rate: float) -> float:
    """
    Calculate NPV (Net Present Value) of cash flows.

    Args:
        cash_flows: Array of cash flows (negative = outflow, positive = inflow),
            index 0 undiscounted
        discount_rate: Discount rate per period in percent (e.g., 8 for 8%)

    Returns:
        NPV value
    """
    flows = np.asarray(cash_flows, dtype=float)
    if flows.size == 0:
        return 0.0
    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        return float(np.sum(flows / _discount_factors(discount_rate / 100, flows.size)))


def _npv_at(flows: np.ndarray, rate: float) -> float:
    return float(np.sum(flows / _discount_factors(rate, flows.size)))


def _npv_derivative(flows: np.ndarray, rate: float) -> float:
    """Calculate derivative of NPV with respect to rate (for Newton-Raphson)."""
    periods = np.arange(flows.size, dtype=float)
    return float(np.sum(-periods[1:] * flows[1:] / (1 + rate) ** (periods[1:] + 1)))


def calculate_irr(cash_flows: Sequence[float], guess: float = DEFAULT_GUESS) -> float:
    """
    Calculate IRR (Internal Rate of Return) using Newton-Raphson method.

    Stops when |NPV| falls below the tolerance, or early when the
    derivative is too flat to divide by. There is no convergence
    guarantee for flows with several sign changes; callers should use
    safe_irr when a displayable number is required.

    Args:
        cash_flows: Array of periodic cash flows
        guess: Initial guess for rate as decimal (default 0.1 = 10%)

    Returns:
        IRR in percent; NaN when the flows cannot have a real IRR
    """
    flows = np.asarray(cash_flows, dtype=float)

    if flows.size < 2 or not (np.any(flows > 0) and np.any(flows < 0)):
        logger.debug("IRR undefined: flows need both inflows and outflows")
        return float("nan")

    rate = guess

    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        for _ in range(MAX_ITERATIONS):
            npv = _npv_at(flows, rate)

            if abs(npv) < TOLERANCE:
                return rate * 100

            dnpv = _npv_derivative(flows, rate)

            if abs(dnpv) < TOLERANCE:
                break

            rate = rate - npv / dnpv

            if not math.isfinite(rate):
                break

    return rate * 100


def safe_irr(
    cash_flows: Sequence[float], guess: float = DEFAULT_GUESS, sentinel: float = 0.0
) -> float:
    """IRR in percent, or the sentinel when it is non-finite or out of range."""
    result = calculate_irr(cash_flows, guess)
    if not math.isfinite(result) or not (
        MIN_REASONABLE_IRR <= result <= MAX_REASONABLE_IRR
    ):
        logger.warning(
            f"IRR did not produce a usable result ({result}); substituting {sentinel}"
        )
        return sentinel
    return result


def calculate_npv_index(npv: float, initial_investment: float) -> float:
    """(NPV + initial investment) / initial investment; 0 without an investment."""
    if initial_investment <= 0:
        return 0.0
    index = (npv + initial_investment) / initial_investment
    return index if math.isfinite(index) else 0.0


@dataclass(frozen=True)
class MIRRResult:
    """Modified IRR of a cash-flow stream."""

    mirr_periodic: float
    mirr_annual: float
    pv_negative: float
    fv_positive: float
    is_valid: bool


def calculate_mirr(
    cash_flows: Sequence[float],
    finance_rate: float,
    reinvest_rate: float,
    periods_per_year: int = 12,
) -> MIRRResult:
    """
    Calculate MIRR (Modified Internal Rate of Return).

    Outflows are discounted at the finance rate and inflows compounded
    to the final period at the reinvestment rate.

    Args:
        cash_flows: Periodic cash flows, index 0 undiscounted
        finance_rate: Per-period financing rate as decimal
        reinvest_rate: Per-period reinvestment rate as decimal
        periods_per_year: Periods per year for annualizing

    Returns:
        MIRRResult; is_valid is False when either side of the stream is empty
    """
    flows = np.asarray(cash_flows, dtype=float)
    n = flows.size - 1

    if n <= 0:
        return MIRRResult(0.0, 0.0, 0.0, 0.0, False)

    periods = np.arange(flows.size, dtype=float)
    negatives = np.minimum(flows, 0.0)
    positives = np.maximum(flows, 0.0)

    pv_negative = float(np.sum(negatives / (1 + finance_rate) ** periods))
    fv_positive = float(np.sum(positives * (1 + reinvest_rate) ** (n - periods)))

    if pv_negative == 0 or fv_positive == 0:
        return MIRRResult(0.0, 0.0, pv_negative, fv_positive, False)

    mirr_periodic = abs(fv_positive / pv_negative) ** (1 / n) - 1
    mirr_annual = periodic_to_annual_rate(mirr_periodic, periods_per_year)

    return MIRRResult(
        mirr_periodic=mirr_periodic,
        mirr_annual=mirr_annual,
        pv_negative=pv_negative,
        fv_positive=fv_positive,
        is_valid=math.isfinite(mirr_periodic),
    )


def calculate_multiple(cash_flows: List[float]) -> float:
    """
    Calculate equity multiple.

    Args:
        cash_flows: Array of cash flows (investments are negative)

    Returns:
        Multiple (e.g., 2.0 = 2.0x return); 0 when nothing was invested
    """
    total_inflows = sum(cf for cf in cash_flows if cf > 0)
    total_outflows = abs(sum(cf for cf in cash_flows if cf < 0))

    if total_outflows == 0:
        return 0.0

    return total_inflows / total_outflows


def calculate_profit(cash_flows: List[float]) -> float:
    """Calculate profit (total inflows minus total outflows)."""
    return sum(cash_flows)


def periodic_to_annual_rate(periodic_rate: float, periods_per_year: int = 12) -> float:
    """Compound a per-period rate to an annual rate."""
    return ((1 + periodic_rate) ** periods_per_year) - 1


def annual_to_periodic_rate(annual_rate: float, periods_per_year: int = 12) -> float:
    """Convert an annual rate to the equivalent per-period rate."""
    return ((1 + annual_rate) ** (1 / periods_per_year)) - 1
