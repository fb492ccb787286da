from options_analytics.enums import ExerciseType, OptionType
from options_analytics.valuation import PricingRequest


def make_request(
    *,
    spot: float = 100.0,
    strike: float = 100.0,
    time_to_expiry: float = 1.0,
    risk_free_rate: float = 0.05,
    volatility: float = 0.2,
    dividend_yield: float = 0.0,
    option_type: OptionType = OptionType.CALL,
    exercise_type: ExerciseType = ExerciseType.EUROPEAN,
) -> PricingRequest:
    """PricingRequest with ATM one-year defaults; override any field by keyword."""
    return PricingRequest(
        spot=spot,
        strike=strike,
        time_to_expiry=time_to_expiry,
        risk_free_rate=risk_free_rate,
        volatility=volatility,
        dividend_yield=dividend_yield,
        option_type=option_type,
        exercise_type=exercise_type,
    )
