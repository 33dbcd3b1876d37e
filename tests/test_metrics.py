"""
Tests for single-period property metrics.
"""

import pytest
from datetime import date

from app.calculations.amortization import calculate_payment
from app.calculations.metrics import (
    calculate_after_tax_net_equity,
    calculate_cap_rate,
    calculate_capital_gains_tax,
    calculate_cash_at_hand,
    calculate_cash_on_cash_return,
    calculate_kpis,
    calculate_net_value,
    calculate_net_yield,
    calculate_net_yield_ratio,
)
from app.calculations.models import ExpenseBreakdown, PropertyFacts, RateConfig


class TestMetricFormulas:
    """Test the individual formulas."""

    def test_net_yield(self):
        assert calculate_net_yield(2500, 600) == pytest.approx(22800)
        assert calculate_net_yield_ratio(22800, 0) == 0.0

    def test_cash_at_hand(self):
        assert calculate_cash_at_hand(22800, 15000) == pytest.approx(7800)

    def test_capital_gains_tax_on_loss(self):
        assert calculate_capital_gains_tax(250000, 300000, 0.25) == 0.0
        assert calculate_capital_gains_tax(350000, 300000, 0.25) == pytest.approx(12500)

    def test_after_tax_net_equity(self):
        assert calculate_after_tax_net_equity(350000, 220000, 21000, 12500) == pytest.approx(
            96500
        )

    def test_zero_denominators(self):
        assert calculate_cash_on_cash_return(1000, 0) == 0.0
        assert calculate_cash_on_cash_return(1000, -5) == 0.0
        assert calculate_cap_rate(1000, 0) == 0.0

    def test_net_value(self):
        assert calculate_net_value(20000, 11000, 12000, 10000) == pytest.approx(31000)


class TestOperatingExpenses:
    """Test expense aggregation on the property record."""

    def test_breakdown_total(self):
        breakdown = ExpenseBreakdown(
            monthly_mortgage=1200,
            monthly_management_fees=200,
            monthly_maintenance=100,
            annual_insurance=1200,
            annual_property_taxes=2400,
        )
        facts = PropertyFacts(purchase_price=300000, expense_breakdown=breakdown)
        assert facts.total_monthly_expenses == pytest.approx(1200 + 200 + 100 + 300)
        assert facts.operating_monthly_expenses == pytest.approx(200 + 100 + 300)

    def test_effective_rent_for_owner_occupied(self):
        facts = PropertyFacts(
            purchase_price=300000,
            monthly_rent=0,
            monthly_rent_potential=2200,
            is_investment_property=False,
        )
        assert facts.effective_monthly_rent == 2200
        assert facts.actual_monthly_rent == 0.0


class TestKPIs:
    """Test the property card metrics."""

    def test_equity_and_yield(self, rental_property, rates):
        kpis = calculate_kpis(rental_property, rates, as_of=date(2025, 1, 1))
        assert kpis.market_value == 350000
        assert kpis.after_tax_net_equity == pytest.approx(96111.04)
        assert kpis.annual_net_yield == pytest.approx(22800)
        assert kpis.annual_mortgage_payment == pytest.approx(
            calculate_payment(240000, 0.05, 360) * 12
        )

    def test_interest_principal_split(self, rental_property, rates):
        kpis = calculate_kpis(rental_property, rates, as_of=date(2025, 1, 1))
        assert kpis.annual_interest == pytest.approx(220388.96 * 0.05)
        assert kpis.annual_interest + kpis.annual_principal_paydown == pytest.approx(
            kpis.annual_mortgage_payment
        )

    def test_returns(self, rental_property, rates):
        kpis = calculate_kpis(rental_property, rates, as_of=date(2025, 1, 1))
        assert kpis.total_appreciation == pytest.approx(50000 / 300000)
        assert kpis.annualized_return > 0
        assert kpis.net_return == pytest.approx(
            kpis.annual_cash_at_hand
            + kpis.annual_principal_paydown
            + kpis.annual_appreciation
        )
        assert kpis.net_roi == pytest.approx(kpis.net_return / kpis.after_tax_net_equity)
        assert kpis.cap_rate == pytest.approx(22800 / 350000)

    def test_paid_off_property(self, all_cash_property, rates):
        kpis = calculate_kpis(all_cash_property, rates)
        assert kpis.annual_mortgage_payment == 0.0
        assert kpis.annual_interest == 0.0
        assert kpis.annual_cash_at_hand == pytest.approx(kpis.annual_net_yield)
        # No current value recorded
        assert kpis.total_appreciation == 0.0

    def test_recent_purchase_is_not_annualized(self):
        facts = PropertyFacts(
            purchase_price=20000, current_value=200000, purchase_date=date(2025, 1, 1)
        )
        kpis = calculate_kpis(facts, RateConfig(), as_of=date(2025, 1, 2))
        assert kpis.annualized_return == 0.0
        assert kpis.total_appreciation == pytest.approx(9.0)
