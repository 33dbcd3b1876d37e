"""
Financial Projection Engine

Pure calculation modules that turn a property's static facts and a
jurisdiction's rate assumptions into investment metrics and time series.
No module holds state, performs I/O or formats output.
"""

from app.calculations import (
    amortization,
    tax_benefits,
    irr,
    cashflow,
    scenarios,
    projection,
    metrics,
    inflation,
    portfolio,
)

__all__ = [
    "amortization",
    "tax_benefits",
    "irr",
    "cashflow",
    "scenarios",
    "projection",
    "metrics",
    "inflation",
    "portfolio",
]
