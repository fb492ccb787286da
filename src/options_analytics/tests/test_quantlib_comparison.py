"""Compare closed-form and lattice prices against QuantLib for reference."""

from __future__ import annotations
import logging
from typing import TYPE_CHECKING

import pytest

from options_analytics.enums import ExerciseType, OptionType
from options_analytics.valuation import LatticeParams, binomial_price, bsm_price, trinomial_price
from options_analytics.tests.helpers import make_request

if TYPE_CHECKING:
    import QuantLib as ql_typing

ql = pytest.importorskip("QuantLib")


logger = logging.getLogger(__name__)

SPOT = 100.0
RISK_FREE = 0.05
DIVIDEND = 0.02
VOL = 0.25
DAYS = 365

LATTICE_CFG = LatticeParams(num_steps=1000)


def _ql_process() -> ql_typing.BlackScholesMertonProcess:
    today = ql.Date(1, 1, 2025)
    ql.Settings.instance().evaluationDate = today
    day_count = ql.Actual365Fixed()
    spot_handle = ql.QuoteHandle(ql.SimpleQuote(SPOT))
    rf = ql.YieldTermStructureHandle(ql.FlatForward(today, RISK_FREE, day_count))
    div = ql.YieldTermStructureHandle(ql.FlatForward(today, DIVIDEND, day_count))
    vol = ql.BlackVolTermStructureHandle(
        ql.BlackConstantVol(today, ql.NullCalendar(), VOL, day_count)
    )
    return ql.BlackScholesMertonProcess(spot_handle, div, rf, vol)


def _ql_price(strike: float, option_type: OptionType, exercise_type: ExerciseType) -> float:
    process = _ql_process()
    today = ql.Settings.instance().evaluationDate
    maturity = today + DAYS
    ql_type = ql.Option.Call if option_type is OptionType.CALL else ql.Option.Put
    payoff = ql.PlainVanillaPayoff(ql_type, strike)

    if exercise_type is ExerciseType.EUROPEAN:
        option = ql.VanillaOption(payoff, ql.EuropeanExercise(maturity))
        option.setPricingEngine(ql.AnalyticEuropeanEngine(process))
    else:
        option = ql.VanillaOption(payoff, ql.AmericanExercise(today, maturity))
        option.setPricingEngine(ql.FdBlackScholesVanillaEngine(process, 800, 800))
    return float(option.NPV())


def _request(strike: float, option_type: OptionType, exercise_type: ExerciseType):
    return make_request(
        spot=SPOT,
        strike=strike,
        time_to_expiry=DAYS / 365.0,
        risk_free_rate=RISK_FREE,
        volatility=VOL,
        dividend_yield=DIVIDEND,
        option_type=option_type,
        exercise_type=exercise_type,
    )


@pytest.mark.parametrize("strike", [80.0, 100.0, 120.0])
@pytest.mark.parametrize("option_type", [OptionType.CALL, OptionType.PUT])
def test_bsm_vs_quantlib(strike, option_type):
    ours = bsm_price(_request(strike, option_type, ExerciseType.EUROPEAN))
    ref = _ql_price(strike, option_type, ExerciseType.EUROPEAN)
    logger.info("BSM K=%s %s ours=%.6f ql=%.6f", strike, option_type.value, ours, ref)
    assert ours == pytest.approx(ref, abs=1e-4)


@pytest.mark.parametrize("pricer", [binomial_price, trinomial_price])
@pytest.mark.parametrize("strike", [90.0, 110.0])
@pytest.mark.parametrize("option_type", [OptionType.CALL, OptionType.PUT])
def test_american_lattice_vs_quantlib(pricer, strike, option_type):
    ours = pricer(_request(strike, option_type, ExerciseType.AMERICAN), LATTICE_CFG)
    ref = _ql_price(strike, option_type, ExerciseType.AMERICAN)
    logger.info("American K=%s %s ours=%.6f ql=%.6f", strike, option_type.value, ours, ref)
    assert ours == pytest.approx(ref, abs=2e-2)
