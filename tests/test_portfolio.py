"""
Tests for portfolio aggregation and batch projection.
"""

import pytest
from dataclasses import replace

from app.calculations.models import PropertyFacts, RateConfig
from app.calculations.portfolio import (
    project_portfolio,
    resolve_rates,
    summarize_portfolio,
)
from app.calculations.projection import project


@pytest.fixture
def rates_by_country():
    return {
        "USA": RateConfig(country="USA"),
        "Turkey": RateConfig(country="Turkey", appreciation_rate=0.12, inflation_rate=0.15),
    }


class TestResolveRates:
    """Test per-property rate lookup."""

    def test_known_country(self, rental_property, rates_by_country):
        facts = replace(rental_property, country="Turkey")
        assert resolve_rates(facts, rates_by_country, RateConfig()).country == "Turkey"

    def test_unknown_country_uses_default(self, rental_property, rates_by_country):
        default = RateConfig(country="Default")
        facts = replace(rental_property, country="Atlantis")
        assert resolve_rates(facts, rates_by_country, default) is default


class TestSummary:
    """Test portfolio totals."""

    def test_totals(self, rental_property, all_cash_property, rates_by_country):
        summary = summarize_portfolio(
            [rental_property, all_cash_property], rates_by_country, RateConfig()
        )
        assert summary.property_count == 2
        assert summary.total_market_value == pytest.approx(450000)
        assert summary.total_purchase_price == pytest.approx(400000)
        assert summary.total_debt == pytest.approx(220388.96)
        assert summary.total_monthly_rent == pytest.approx(3500)
        assert summary.loan_to_value == pytest.approx(220388.96 / 450000)

    def test_potential_rent_not_counted(self, rates_by_country):
        home = PropertyFacts(
            purchase_price=300000,
            monthly_rent_potential=2000,
            is_investment_property=False,
        )
        summary = summarize_portfolio([home], rates_by_country, RateConfig())
        assert summary.total_monthly_rent == 0.0

    def test_empty_portfolio(self, rates_by_country):
        summary = summarize_portfolio([], rates_by_country, RateConfig())
        assert summary.property_count == 0
        assert summary.portfolio_cap_rate == 0.0
        assert summary.loan_to_value == 0.0


class TestProjectPortfolio:
    """Test batch projection."""

    def test_uses_each_property_country(self, rental_property, rates_by_country):
        turkish = replace(rental_property, country="Turkey")
        ledgers = project_portfolio(
            [rental_property, turkish], rates_by_country, RateConfig(), 5
        )
        assert ledgers[0] == project(rental_property, rates_by_country["USA"], 5)
        assert ledgers[1] == project(turkish, rates_by_country["Turkey"], 5)

    @pytest.mark.slow
    def test_parallel_matches_serial(self, rental_property, rates_by_country):
        properties = [
            replace(rental_property, current_value=300000 + 10000 * i, name=f"Unit {i}")
            for i in range(15)
        ]
        parallel = project_portfolio(
            properties, rates_by_country, RateConfig(), 10, max_workers=4
        )
        serial = project_portfolio(
            properties, rates_by_country, RateConfig(), 10, parallel=False
        )
        assert parallel == serial
        assert [rows[0].market_value for rows in parallel] == [
            300000 + 10000 * i for i in range(15)
        ]
