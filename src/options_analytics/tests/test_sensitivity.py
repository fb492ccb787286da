"""Tests for scenario sensitivity grids."""

import numpy as np
import pytest

from options_analytics.exceptions import ConfigurationError, ValidationError
from options_analytics.valuation import bsm_price, sensitivity_analysis
from options_analytics.tests.helpers import make_request


class TestSensitivityAnalysis:
    def test_default_grid(self, euro_call):
        report = sensitivity_analysis(bsm_price, euro_call)
        assert report.base_price == pytest.approx(bsm_price(euro_call))
        assert list(report.spot.columns) == ["multiplier", "spot", "price", "change", "pct_change"]
        assert list(report.volatility.columns[:2]) == ["shift", "volatility"]
        assert list(report.time_decay.columns[:2]) == ["days", "time_to_expiry"]
        assert len(report.spot) == len(report.volatility) == len(report.time_decay) == 5

    def test_call_monotone_in_spot_and_vol(self, euro_call):
        report = sensitivity_analysis(bsm_price, euro_call)
        assert report.spot["price"].is_monotonic_increasing
        assert report.volatility["price"].is_monotonic_increasing

    def test_time_decay_reduces_value(self, euro_call):
        report = sensitivity_analysis(bsm_price, euro_call)
        assert report.time_decay["price"].is_monotonic_decreasing
        assert report.time_decay["change"].iloc[0] == 0.0

    def test_changes_relative_to_base(self, euro_call):
        report = sensitivity_analysis(bsm_price, euro_call, spot_multipliers=(1.1,))
        row = report.spot.iloc[0]
        assert row["spot"] == pytest.approx(110.0)
        assert row["change"] == pytest.approx(row["price"] - report.base_price)
        assert row["pct_change"] == pytest.approx(row["change"] / report.base_price * 100)

    def test_floors(self):
        request = make_request(time_to_expiry=0.01, volatility=0.02)
        report = sensitivity_analysis(
            bsm_price, request, vol_shifts=(-0.05,), decay_days=(30,)
        )
        assert report.volatility["volatility"].iloc[0] == 0.001
        assert report.time_decay["time_to_expiry"].iloc[0] == 0.001

    def test_zero_base_price_gives_nan_pct_change(self, euro_call):
        report = sensitivity_analysis(lambda request: 0.0, euro_call)
        assert report.spot["pct_change"].isna().all()

    def test_custom_day_count(self, euro_call):
        report = sensitivity_analysis(bsm_price, euro_call, decay_days=(63,), day_count=252)
        assert report.time_decay["time_to_expiry"].iloc[0] == pytest.approx(0.75)

    def test_non_callable(self, euro_call):
        with pytest.raises(ConfigurationError):
            sensitivity_analysis(None, euro_call)

    @pytest.mark.parametrize(
        "kwargs",
        [{"spot_multipliers": (0.0,)}, {"decay_days": (-1,)}, {"day_count": 0}],
    )
    def test_invalid_inputs(self, euro_call, kwargs):
        with pytest.raises(ValidationError):
            sensitivity_analysis(bsm_price, euro_call, **kwargs)

    def test_put_gains_when_spot_falls(self, euro_put):
        report = sensitivity_analysis(bsm_price, euro_put, spot_multipliers=(0.9,))
        assert np.all(report.spot["change"] > 0)
