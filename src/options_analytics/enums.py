"""Enums for option valuation."""

from enum import Enum

__all__ = [
    "OptionType",
    "ExerciseType",
    "PricingModel",
    "Moneyness",
    "AssetClass",
]


class OptionType(Enum):
    CALL = "call"
    PUT = "put"


class ExerciseType(Enum):
    EUROPEAN = "european"
    AMERICAN = "american"


class PricingModel(Enum):
    BLACK_SCHOLES = "black_scholes"
    BINOMIAL = "binomial"
    TRINOMIAL = "trinomial"
    JUMP_DIFFUSION = "jump_diffusion"
    MONTE_CARLO = "monte_carlo"


class Moneyness(Enum):
    ITM = "itm"
    ATM = "atm"
    OTM = "otm"


class AssetClass(Enum):
    EQUITY = "equity"
    FX = "fx"
    COMMODITY = "commodity"
    INDEX = "index"
