"""Input validation and boundary behaviour shared by all pricers."""

from dataclasses import FrozenInstanceError

import numpy as np
import pytest

from options_analytics.enums import ExerciseType, OptionType
from options_analytics.exceptions import (
    ArbitrageError,
    ConfigurationError,
    NumericalError,
    OptionsAnalyticsError,
    SimulationCancelledError,
    ValidationError,
)
from options_analytics.utils import intrinsic_value, vanilla_payoff
from options_analytics.valuation import (
    MAX_LATTICE_STEPS,
    LatticeParams,
    binomial_price,
    bsm_price,
    jump_diffusion_price,
    trinomial_price,
)
from options_analytics.tests.helpers import make_request


class TestPricingRequestValidation:
    @pytest.mark.parametrize(
        "field, value",
        [
            ("spot", 0.0),
            ("spot", -10.0),
            ("strike", 0.0),
            ("time_to_expiry", 0.0),
            ("time_to_expiry", -0.5),
            ("volatility", 0.0),
            ("dividend_yield", -0.01),
            ("spot", np.nan),
            ("risk_free_rate", np.inf),
        ],
    )
    def test_invalid_values(self, field, value):
        with pytest.raises(ValidationError):
            make_request(**{field: value})

    @pytest.mark.parametrize("value", ["abc", None, True, [100.0]])
    def test_non_numeric(self, value):
        with pytest.raises(ConfigurationError):
            make_request(spot=value)

    def test_ints_and_numpy_scalars_are_coerced(self):
        request = make_request(spot=100, strike=np.float32(95.0))
        assert isinstance(request.spot, float)
        assert isinstance(request.strike, float)

    def test_negative_rate_allowed(self):
        assert bsm_price(make_request(risk_free_rate=-0.01)) > 0

    def test_enum_coercion(self):
        request = make_request(option_type="PUT", exercise_type=" American ")
        assert request.option_type is OptionType.PUT
        assert request.exercise_type is ExerciseType.AMERICAN

    @pytest.mark.parametrize("value", ["straddle", 1, None])
    def test_invalid_option_type(self, value):
        with pytest.raises(ValidationError):
            make_request(option_type=value)

    def test_frozen(self, euro_call):
        with pytest.raises(FrozenInstanceError):
            euro_call.spot = 90.0

    def test_replace_revalidates(self, euro_call):
        with pytest.raises(ValidationError):
            euro_call.replace(volatility=-0.2)
        assert euro_call.replace(spot=90.0).spot == 90.0
        assert euro_call.spot == 100.0


class TestLatticeParamsBounds:
    @pytest.mark.parametrize("steps", [0, MAX_LATTICE_STEPS + 1])
    def test_out_of_range(self, steps):
        with pytest.raises(ValidationError):
            LatticeParams(num_steps=steps)

    @pytest.mark.parametrize("steps", [2.5, "100", True])
    def test_non_integer(self, steps):
        with pytest.raises(ValidationError):
            LatticeParams(num_steps=steps)


class TestBoundaryBehaviour:
    @pytest.mark.parametrize("pricer", [bsm_price, binomial_price, trinomial_price])
    def test_deep_otm_call_near_zero(self, pricer):
        request = make_request(strike=400.0, time_to_expiry=0.1)
        assert 0.0 <= pricer(request) < 1e-8

    @pytest.mark.parametrize("pricer", [bsm_price, binomial_price, trinomial_price])
    def test_deep_itm_call_near_forward_intrinsic(self, pricer):
        request = make_request(strike=20.0, time_to_expiry=0.1)
        expected = 100.0 - 20.0 * np.exp(-0.05 * 0.1)
        assert pricer(request) == pytest.approx(expected, abs=1e-3)

    def test_short_expiry_converges_to_intrinsic(self):
        request = make_request(spot=105.0, time_to_expiry=1e-6)
        assert bsm_price(request) == pytest.approx(5.0, abs=1e-3)

    def test_tiny_volatility_rejected_by_lattice(self):
        request = make_request(volatility=1e-4)
        with pytest.raises(NumericalError):
            binomial_price(request)

    def test_jump_diffusion_ignores_exercise(self, euro_put):
        american = euro_put.replace(exercise_type=ExerciseType.AMERICAN)
        assert jump_diffusion_price(american) == jump_diffusion_price(euro_put)


class TestPayoffHelpers:
    def test_vectorised_payoff(self):
        spots = np.array([80.0, 100.0, 120.0])
        assert np.allclose(vanilla_payoff(OptionType.CALL, 100.0, spots), [0.0, 0.0, 20.0])
        assert np.allclose(vanilla_payoff(OptionType.PUT, 100.0, spots), [20.0, 0.0, 0.0])

    def test_intrinsic_value_is_float(self):
        assert intrinsic_value(OptionType.PUT, 90.0, 100.0) == 10.0
        assert isinstance(intrinsic_value(OptionType.CALL, 90.0, 100.0), float)


@pytest.mark.parametrize(
    "exc",
    [ValidationError, ConfigurationError, ArbitrageError, NumericalError, SimulationCancelledError],
)
def test_exception_hierarchy(exc):
    assert issubclass(exc, OptionsAnalyticsError)
