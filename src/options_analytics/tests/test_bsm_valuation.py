"""Tests for Black-Scholes-Merton valuation and the normal CDF approximation."""

import numpy as np
import pytest
from scipy.stats import norm

from options_analytics.enums import ExerciseType, OptionType
from options_analytics.valuation import (
    bsm_d_values,
    bsm_greeks,
    bsm_price,
    normal_cdf,
    normal_pdf,
)
from options_analytics.tests.helpers import make_request


class TestNormalDistribution:
    def test_cdf_matches_scipy(self):
        """A&S 7.1.26 stays within its documented error bound of the exact CDF."""
        x = np.linspace(-8.0, 8.0, 2001)
        assert np.max(np.abs(normal_cdf(x) - norm.cdf(x))) < 2.0e-7

    def test_cdf_scalar_returns_float(self):
        assert isinstance(normal_cdf(0.3), float)
        assert normal_cdf(0.0) == pytest.approx(0.5, abs=1e-9)

    def test_cdf_symmetry(self):
        x = np.array([0.1, 0.7, 1.5, 3.2])
        assert np.allclose(normal_cdf(x) + normal_cdf(-x), 1.0, atol=1e-12)

    def test_pdf(self):
        assert normal_pdf(0.0) == pytest.approx(1.0 / np.sqrt(2.0 * np.pi))


class TestBSMValuation:
    def test_reference_call(self):
        """S=100, K=100, T=0.25, r=5%, sigma=20% call is approximately 4.615."""
        request = make_request(time_to_expiry=0.25)
        assert bsm_price(request) == pytest.approx(4.615, abs=1e-3)

    def test_one_year_atm_call(self, euro_call):
        assert bsm_price(euro_call) == pytest.approx(10.4506, abs=1e-3)

    @pytest.mark.parametrize("q", [0.0, 0.03])
    @pytest.mark.parametrize("strike", [80.0, 100.0, 125.0])
    def test_put_call_parity(self, strike, q):
        call = make_request(strike=strike, dividend_yield=q)
        put = call.replace(option_type=OptionType.PUT)
        lhs = bsm_price(call) - bsm_price(put)
        rhs = 100.0 * np.exp(-q) - strike * np.exp(-0.05)
        assert np.isclose(lhs, rhs, atol=1e-5)

    def test_exercise_type_ignored(self, euro_put):
        american = euro_put.replace(exercise_type=ExerciseType.AMERICAN)
        assert bsm_price(american) == bsm_price(euro_put)

    def test_d_values(self, euro_call):
        d1, d2 = bsm_d_values(euro_call)
        assert d1 == pytest.approx(0.35, abs=1e-12)
        assert d2 == pytest.approx(0.15, abs=1e-12)


class TestBSMGreeks:
    def test_atm_call_ranges(self, euro_call):
        greeks = bsm_greeks(euro_call)
        assert 0.3 < greeks.delta < 0.8
        assert greeks.gamma > 0
        assert greeks.vega > 0
        assert greeks.theta < 0
        assert greeks.rho > 0

    def test_known_values(self, euro_call):
        greeks = bsm_greeks(euro_call)
        assert greeks.delta == pytest.approx(0.6368, abs=1e-3)
        assert greeks.gamma == pytest.approx(0.018762, abs=1e-4)
        # per vol point, per calendar day, per rate point
        assert greeks.vega == pytest.approx(0.37524, abs=1e-3)
        assert greeks.theta == pytest.approx(-6.414 / 365, abs=1e-4)
        assert greeks.rho == pytest.approx(0.53232, abs=1e-3)

    def test_put_delta_relation(self, euro_call):
        put = euro_call.replace(option_type=OptionType.PUT, dividend_yield=0.02)
        call = euro_call.replace(dividend_yield=0.02)
        diff = bsm_greeks(call).delta - bsm_greeks(put).delta
        assert diff == pytest.approx(np.exp(-0.02), abs=1e-6)

    def test_as_dict(self, euro_call):
        assert set(bsm_greeks(euro_call).as_dict()) == {"delta", "gamma", "theta", "vega", "rho"}
