"""
Tests for inflation adjustments.
"""

import pytest
from datetime import date

from app.calculations.inflation import (
    calculate_cumulative_inflation,
    calculate_real_appreciation_metrics,
    calculate_true_roi,
    inflation_adjusted_price,
    inflation_for_year,
)
from app.calculations.models import PropertyFacts


class TestCumulativeInflation:
    """Test compounding of the CPI table."""

    def test_same_year(self):
        assert calculate_cumulative_inflation(2020, 2020) == 1.0

    def test_compounds_table_years(self):
        assert calculate_cumulative_inflation(2020, 2022) == pytest.approx(1.047 * 1.080)

    def test_missing_years_use_default(self):
        assert inflation_for_year(2026) is None
        assert calculate_cumulative_inflation(2024, 2026) == pytest.approx(1.025 ** 2)

    def test_adjusted_price(self):
        price = inflation_adjusted_price(100000, date(2020, 6, 1), current_year=2022)
        assert price == pytest.approx(100000 * 1.047 * 1.080)


class TestRealAppreciation:
    """Test nominal versus real appreciation."""

    def test_same_year_purchase(self):
        result = calculate_real_appreciation_metrics(200000, 250000, date(2024, 3, 1), 2024)
        assert result.nominal_roi == 0.0
        assert result.inflation_factor == 1.0

    def test_real_return_below_nominal(self):
        result = calculate_real_appreciation_metrics(200000, 260000, date(2020, 1, 1), 2022)
        assert result.nominal_roi == pytest.approx(0.3)
        assert result.real_roi < result.nominal_roi
        assert result.total_inflation == pytest.approx(1.047 * 1.080 - 1)


class TestTrueROI:
    """Test return including cash flow."""

    def test_without_purchase_date(self):
        facts = PropertyFacts(purchase_price=200000, current_value=250000)
        assert calculate_true_roi(facts, 2025).total_roi == 0.0

    def test_appreciation_plus_cash_flow(self):
        facts = PropertyFacts(
            purchase_price=200000,
            current_value=250000,
            monthly_rent=1500,
            monthly_expenses=500,
            purchase_date=date(2020, 1, 1),
        )
        result = calculate_true_roi(facts, 2025)
        assert result.total_cash_flow == pytest.approx(60000)
        assert result.appreciation_return == pytest.approx(0.25)
        assert result.total_roi == pytest.approx(0.55)
        assert result.annualized_roi == pytest.approx(1.55 ** (1 / 5) - 1)
