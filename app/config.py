"""
Application configuration using Pydantic Settings.
"""

import logging
import os
from functools import lru_cache
from typing import Dict, Optional
from pydantic_settings import BaseSettings

from app.calculations.models import RateConfig

logger = logging.getLogger(__name__)


def get_env_file() -> str:
    """Determine which env file to use based on environment."""
    env = os.getenv("APP_ENV", "development")
    if env == "production":
        return ".env.production"
    return ".env.development"


# Rates are decimals. Override with a JSON COUNTRY_RATES environment variable.
DEFAULT_COUNTRY_RATES: Dict[str, Dict[str, float]] = {
    "USA": {
        "appreciation_rate": 0.035,
        "inflation_rate": 0.025,
        "selling_cost_rate": 0.06,
        "capital_gains_tax_rate": 0.25,
        "mortgage_rate": 0.065,
    },
    "Turkey": {
        "appreciation_rate": 0.12,
        "inflation_rate": 0.15,
        "selling_cost_rate": 0.05,
        "capital_gains_tax_rate": 0.20,
        "mortgage_rate": 0.45,
    },
    "Canada": {
        "appreciation_rate": 0.04,
        "inflation_rate": 0.02,
        "selling_cost_rate": 0.06,
        "capital_gains_tax_rate": 0.25,
        "mortgage_rate": 0.055,
    },
    "UK": {
        "appreciation_rate": 0.03,
        "inflation_rate": 0.025,
        "selling_cost_rate": 0.03,
        "capital_gains_tax_rate": 0.28,
        "mortgage_rate": 0.05,
    },
}


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # App settings
    app_name: str = "RE Portfolio Tracker"
    debug: bool = False
    log_level: str = "INFO"
    app_env: str = "development"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    # Projection defaults
    default_country: str = "USA"
    default_horizon_years: int = 30
    default_discount_rate: float = 8.0  # percent

    # Market assumptions per country
    country_rates: Dict[str, Dict[str, float]] = DEFAULT_COUNTRY_RATES

    class Config:
        env_file = get_env_file()
        env_file_encoding = "utf-8"
        extra = "ignore"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def get_rate_config(
    country: Optional[str] = None, settings: Optional[Settings] = None
) -> RateConfig:
    """
    Resolve the rate assumptions for a country.

    Unknown or missing countries fall back to the default country.
    """
    settings = settings or get_settings()
    name = country or settings.default_country

    if name not in settings.country_rates:
        logger.warning(
            f"No rates configured for country {name!r}; using {settings.default_country}"
        )
        name = settings.default_country

    return RateConfig(country=name, **settings.country_rates.get(name, {}))


def get_rates_by_country(settings: Optional[Settings] = None) -> Dict[str, RateConfig]:
    """Every configured country's rates, keyed by country name."""
    settings = settings or get_settings()
    return {
        name: RateConfig(country=name, **values)
        for name, values in settings.country_rates.items()
    }
