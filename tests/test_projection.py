"""
Tests for the year-by-year projection ledger.
"""

import pytest
from dataclasses import replace

from app.calculations.amortization import calculate_outstanding_balance
from app.calculations.metrics import calculate_kpis
from app.calculations.models import RateConfig
from app.calculations.portfolio import summarize_portfolio
from app.calculations.projection import (
    net_gain_at,
    present_value_factor,
    project,
    project_financing_variants,
)
from app.calculations.scenarios import build_scenarios


class TestProjection:
    """Test projection rows."""

    def test_row_count(self, rental_property, rates):
        assert len(project(rental_property, rates, 30)) == 31
        assert len(project(rental_property, rates, 0)) == 1

    def test_year_zero_is_today(self, rental_property, rates):
        row = project(rental_property, rates, 5)[0]
        assert row.year == 0
        assert row.market_value == 350000
        assert row.market_value_pv == 350000
        assert row.outstanding_balance == pytest.approx(
            calculate_outstanding_balance(240000, 0.05, 360, 60)
        )
        assert row.annual_net_yield == 0.0
        assert row.annual_mortgage == 0.0
        assert row.cumulative_principal_paid == 0.0
        assert row.net_gain == pytest.approx(row.net_equity_nominal)

    def test_remaining_term(self, rental_property, rates):
        rows = project(rental_property, rates, 30)
        assert rows[0].remaining_term_months == 300
        assert rows[1].remaining_term_months == 288
        assert rows[30].remaining_term_months == 0

    def test_appreciation_and_discounting(self, rental_property):
        rates = RateConfig(appreciation_rate=0.04, inflation_rate=0.03)
        row = project(rental_property, rates, 10)[10]
        assert row.market_value == pytest.approx(350000 * 1.04 ** 10)
        assert row.market_value_pv == pytest.approx(row.market_value / 1.03 ** 10)
        assert row.net_equity_pv == pytest.approx(row.net_equity_nominal / 1.03 ** 10)

    def test_forward_only_recurrence(self, rental_property, rates):
        short = project(rental_property, rates, 5)
        long = project(rental_property, rates, 10)
        assert long[:6] == short

    def test_net_gain_matches_ledger(self, rental_property, rates):
        rows = project(rental_property, rates, 10)
        assert net_gain_at(rental_property, rates, 5) == pytest.approx(rows[5].net_gain)

    def test_nominal_mode(self, rental_property, rates):
        for row in project(rental_property, rates, 10, present_value_mode=False):
            assert row.net_gain == pytest.approx(
                row.net_equity_nominal + row.cumulative_net_yield - row.cumulative_mortgage_pv
            )

    def test_principal_paid_accumulates(self, rental_property, rates):
        paid = [r.cumulative_principal_paid for r in project(rental_property, rates, 30)]
        assert paid == sorted(paid)
        assert paid[-1] == pytest.approx(
            calculate_outstanding_balance(240000, 0.05, 360, 60)
        )

    def test_mortgage_stops_after_payoff(self, rental_property, rates):
        facts = replace(rental_property, loan_term_months=84, months_elapsed=60)
        rows = project(facts, rates, 4)
        assert rows[1].annual_mortgage > 0
        assert rows[2].annual_mortgage > 0
        # Loan is repaid at month 84, so year 3 starts with no balance
        assert rows[2].outstanding_balance == 0.0
        assert rows[3].annual_mortgage == 0.0
        assert rows[4].annual_mortgage == 0.0

    def test_rent_tracks_appreciation(self, rental_property):
        rates = RateConfig(appreciation_rate=0.05)
        row = project(rental_property, rates, 1)[1]
        expected = 2500 * 12 * (1 + 0.05 * 0.7) - 600 * 12 * 1.02
        assert row.annual_net_yield == pytest.approx(expected)

    def test_present_value_factor(self):
        assert present_value_factor(0.025, 0) == 1.0
        assert present_value_factor(0.1, 1) == pytest.approx(1 / 1.1)


class TestFinancingProjection:
    """Test projections of the financing variants."""

    def test_variant_keys(self, rental_property, rates):
        ledgers = project_financing_variants(rental_property, rates, 5)
        assert set(ledgers) == {"current", "max_debt", "zero_debt"}
        assert all(len(rows) == 6 for rows in ledgers.values())

    def test_zero_debt_has_no_mortgage(self, rental_property, rates):
        rows = project_financing_variants(rental_property, rates, 5)["zero_debt"]
        assert all(r.outstanding_balance == 0.0 for r in rows)
        assert all(r.annual_mortgage == 0.0 for r in rows)

    def test_max_debt_starts_at_80_percent(self, rental_property, rates):
        rows = project_financing_variants(rental_property, rates, 5)["max_debt"]
        assert rows[0].outstanding_balance == pytest.approx(280000)
        assert rows[0].remaining_term_months == 360


class TestBalanceConsistency:
    """Every consumer starts from the same loan balance."""

    def _equities(self, facts, rates):
        return (
            project(facts, rates, 5)[0].net_equity_nominal,
            build_scenarios(facts, rates)[0].after_tax_net_equity,
            calculate_kpis(facts, rates).after_tax_net_equity,
        )

    def test_scheduled_loan(self, rental_property, rates):
        ledger, scenario, kpi = self._equities(rental_property, rates)
        assert ledger == pytest.approx(scenario)
        assert ledger == pytest.approx(kpi)

        summary = summarize_portfolio([rental_property], {}, rates)
        assert summary.total_debt == pytest.approx(
            project(rental_property, rates, 0)[0].outstanding_balance
        )

    def test_recorded_balance_without_loan_age(self, rental_property, rates):
        facts = replace(
            rental_property,
            outstanding_balance=200000,
            months_elapsed=None,
            purchase_date=None,
        )
        # 350k - 200k debt - 21k selling costs - 12.5k tax on 50k gain
        for equity in self._equities(facts, rates):
            assert equity == pytest.approx(116500)

        assert project(facts, rates, 0)[0].outstanding_balance == 200000
        summary = summarize_portfolio([facts], {}, rates)
        assert summary.total_debt == 200000
