"""
Loan Amortization Calculations

Implements level-payment mortgage arithmetic: the annuity payment,
period-by-period balance simulation, and the interest/principal split
of a single payment. Zero-rate loans repay principal in equal installments.
"""

from typing import List, Dict, Optional
from dataclasses import dataclass
from datetime import date
from dateutil.relativedelta import relativedelta


@dataclass(frozen=True)
class PaymentSplit:
    """Interest and principal portions of one monthly payment."""

    interest: float
    principal: float


def calculate_payment(
    principal: float, annual_rate: float, term_months: int
) -> float:
    """
    Calculate the level monthly payment.

    Standard annuity formula P*r(1+r)^n / ((1+r)^n - 1).

    Args:
        principal: Loan principal amount
        annual_rate: Annual interest rate as decimal (e.g., 0.05 for 5%)
        term_months: Total amortization period in months

    Returns:
        Monthly payment amount (positive number)
    """
    if principal <= 0:
        return 0.0
    if term_months <= 0:
        return 0.0

    monthly_rate = annual_rate / 12

    if monthly_rate == 0:
        return principal / term_months

    growth = (1 + monthly_rate) ** term_months
    return principal * monthly_rate * growth / (growth - 1)


def calculate_outstanding_balance(
    loan_amount: float,
    annual_rate: float,
    term_months: int,
    elapsed_months: int,
) -> float:
    """
    Calculate the remaining balance after a number of scheduled payments.

    Simulates amortization period by period with the level payment for
    the full term rather than using the closed-form balance formula.

    Args:
        loan_amount: Original loan principal
        annual_rate: Annual interest rate as decimal
        term_months: Loan term in months
        elapsed_months: Payments made since loan start

    Returns:
        Remaining principal, never negative
    """
    if elapsed_months <= 0:
        return loan_amount
    if elapsed_months >= term_months or loan_amount <= 0:
        return 0.0

    monthly_rate = annual_rate / 12
    payment = calculate_payment(loan_amount, annual_rate, term_months)

    balance = loan_amount
    for _ in range(int(elapsed_months)):
        interest = balance * monthly_rate
        balance -= payment - interest

    return max(0.0, balance)


def split_mortgage_payment(
    balance: float, annual_rate: float, payment_amount: float
) -> PaymentSplit:
    """Split a monthly payment into interest on the balance and principal."""
    interest = balance * (annual_rate / 12)
    principal = max(0.0, payment_amount - interest)
    return PaymentSplit(interest=interest, principal=principal)


def simulate_balance(
    balance: float, annual_rate: float, monthly_payment: float, months: int
) -> Dict[str, float]:
    """
    Run a known monthly payment against a starting balance.

    Used when only the current balance and payment are known (no original
    loan terms). Stops once the balance reaches zero.

    Returns:
        Dict with ending "balance", "principal_paid" and "interest_paid"
    """
    principal_paid = 0.0
    interest_paid = 0.0

    for _ in range(max(0, int(months))):
        if balance <= 0:
            break
        split = split_mortgage_payment(balance, annual_rate, monthly_payment)
        principal = min(split.principal, balance)
        balance -= principal
        principal_paid += principal
        interest_paid += split.interest

    return {
        "balance": max(0.0, balance),
        "principal_paid": principal_paid,
        "interest_paid": interest_paid,
    }


def monthly_payment_for(facts) -> float:
    """Recorded monthly mortgage, or the annuity payment implied by the loan terms."""
    if facts.monthly_mortgage and facts.monthly_mortgage > 0:
        return facts.monthly_mortgage
    return calculate_payment(
        facts.loan_amount, facts.annual_interest_rate, facts.loan_term_months
    )


def _follows_schedule(facts) -> bool:
    if facts.loan_amount <= 0 or facts.loan_term_months <= 0:
        return False
    # No recorded balance: assume the loan has just started
    return facts.loan_age_known or facts.outstanding_balance <= 0


def balance_after_years(facts, years: int, as_of: Optional[date] = None) -> float:
    """
    Outstanding balance of a property's loan a number of years from now.

    Uses the exact schedule of the original loan when its terms and age
    are known. Otherwise the recorded balance is today's balance and the
    recorded payment is run against it.
    """
    if _follows_schedule(facts):
        return calculate_outstanding_balance(
            facts.loan_amount,
            facts.annual_interest_rate,
            facts.loan_term_months,
            facts.elapsed_months(as_of) + 12 * years,
        )
    if facts.outstanding_balance <= 0:
        return 0.0
    if years <= 0:
        return facts.outstanding_balance
    return simulate_balance(
        facts.outstanding_balance,
        facts.annual_interest_rate,
        monthly_payment_for(facts),
        12 * years,
    )["balance"]


def current_balance(facts, as_of: Optional[date] = None) -> float:
    """Today's loan balance. Every consumer reads the balance from here."""
    return balance_after_years(facts, 0, as_of)


def generate_amortization_schedule(
    principal: float,
    annual_rate: float,
    term_months: int,
    start_date: Optional[date] = None,
) -> List[Dict]:
    """
    Generate a full amortization schedule.

    Args:
        principal: Loan principal amount
        annual_rate: Annual interest rate as decimal
        term_months: Loan term in months
        start_date: Date of first payment

    Returns:
        List of amortization rows
    """
    schedule = []
    balance = principal
    payment = calculate_payment(principal, annual_rate, term_months)

    if start_date is None:
        start_date = date.today()

    for period in range(1, term_months + 1):
        period_date = start_date + relativedelta(months=period - 1)

        split = split_mortgage_payment(balance, annual_rate, payment)
        principal_pmt = min(split.principal, balance)

        # Final payment clears any rounding residue
        if period == term_months:
            principal_pmt = balance

        ending_balance = balance - principal_pmt

        schedule.append(
            {
                "period": period,
                "date": period_date.isoformat(),
                "beginning_balance": round(balance, 2),
                "payment": round(split.interest + principal_pmt, 2),
                "interest": round(split.interest, 2),
                "principal": round(principal_pmt, 2),
                "ending_balance": round(max(0, ending_balance), 2),
            }
        )

        balance = max(0.0, ending_balance)

        if balance == 0:
            break

    return schedule
