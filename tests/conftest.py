"""
Pytest configuration and shared fixtures.
"""

import pytest
import sys
import os
from datetime import date

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.calculations.models import PropertyFacts, RateConfig


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "slow: marks tests as slow")
    config.addinivalue_line("markers", "integration: marks integration tests")


@pytest.fixture
def rates():
    """Default USA assumptions."""
    return RateConfig()


@pytest.fixture
def rental_property():
    """Leveraged single-family rental five years into a 30-year loan."""
    return PropertyFacts(
        name="Maple St",
        purchase_price=300000,
        current_value=350000,
        down_payment=60000,
        loan_amount=240000,
        outstanding_balance=220388.96,
        annual_interest_rate=0.05,
        loan_term_months=360,
        months_elapsed=60,
        monthly_rent=2500,
        monthly_expenses=600,
        property_type="single-family",
        purchase_date=date(2020, 1, 1),
        country="USA",
    )


@pytest.fixture
def all_cash_property():
    """Unleveraged commercial unit with no depreciable basis and flat value."""
    return PropertyFacts(
        name="Cash Unit",
        purchase_price=100000,
        down_payment=100000,
        monthly_rent=1000,
        monthly_expenses=200,
        avg_appreciation_rate=0.0,
        property_type="commercial",
        cost_basis=0.0,
    )


@pytest.fixture
def property_payload():
    """JSON body for a property, as posted to the API."""
    return {
        "name": "Maple St",
        "property_type": "single-family",
        "purchase_price": 300000,
        "current_value": 350000,
        "down_payment": 60000,
        "loan_amount": 240000,
        "outstanding_balance": 220388.96,
        "annual_interest_rate": 0.05,
        "loan_term_months": 360,
        "months_elapsed": 60,
        "monthly_rent": 2500,
        "monthly_expenses": 600,
        "purchase_date": "2020-01-01",
        "country": "USA",
    }
