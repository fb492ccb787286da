from .enums import AssetClass, ExerciseType, Moneyness, OptionType, PricingModel
from .exceptions import (
    ArbitrageError,
    ConfigurationError,
    NumericalError,
    OptionsAnalyticsError,
    SimulationCancelledError,
    ValidationError,
)
from .dividends import DEFAULT_DIVIDEND_YIELD, DividendYieldTable
from .option import (
    OPTIMAL_PARAMETERS,
    OptionSummary,
    VanillaOption,
    analyze_option,
    analyze_portfolio,
    price_option,
)


__all__ = [
    "AssetClass",
    "ExerciseType",
    "Moneyness",
    "OptionType",
    "PricingModel",
    "OptionsAnalyticsError",
    "ValidationError",
    "ConfigurationError",
    "ArbitrageError",
    "NumericalError",
    "SimulationCancelledError",
    "DEFAULT_DIVIDEND_YIELD",
    "DividendYieldTable",
    "OPTIMAL_PARAMETERS",
    "OptionSummary",
    "VanillaOption",
    "analyze_option",
    "analyze_portfolio",
    "price_option",
]
