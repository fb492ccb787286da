"""Shared pytest fixtures for options_analytics tests."""

import pytest

from options_analytics.dividends import DividendYieldTable
from options_analytics.enums import ExerciseType, OptionType
from options_analytics.valuation import MonteCarloParams, PricingRequest

from options_analytics.tests.helpers import make_request


# ---------------------------------------------------------------------------
# Scalar constants
# ---------------------------------------------------------------------------

SPOT = 100.0
STRIKE = 100.0
RATE = 0.05
VOL = 0.20
TTM = 1.0


@pytest.fixture()
def spot() -> float:
    return SPOT


@pytest.fixture()
def strike() -> float:
    return STRIKE


@pytest.fixture()
def risk_free_rate() -> float:
    return RATE


@pytest.fixture()
def vol() -> float:
    return VOL


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


@pytest.fixture()
def euro_call() -> PricingRequest:
    """ATM one-year European call, no dividends."""
    return make_request()


@pytest.fixture()
def euro_put() -> PricingRequest:
    return make_request(option_type=OptionType.PUT)


@pytest.fixture()
def american_put() -> PricingRequest:
    return make_request(option_type=OptionType.PUT, exercise_type=ExerciseType.AMERICAN)


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


@pytest.fixture()
def mc_params() -> MonteCarloParams:
    """Seeded, moderately sized Monte Carlo configuration."""
    return MonteCarloParams(num_simulations=40_000, random_seed=42)


@pytest.fixture()
def small_dividend_table() -> DividendYieldTable:
    return DividendYieldTable(
        yields={"ACME": 0.02, "ZERO": 0.0, "brk.b": 0.01},
        default_yield=0.005,
        categories={"Test": ("ACME", "ZERO", "MISSING")},
    )
