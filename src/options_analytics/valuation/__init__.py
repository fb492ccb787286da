"""Option valuation and pricing engines.

This module provides pure-function pricers for vanilla calls and puts:
Black-Scholes-Merton analytical formulas, binomial and trinomial trees,
Merton jump diffusion and Monte Carlo simulation, plus model-agnostic
finite-difference Greeks, implied volatility and scenario analysis.

Public API
----------
Core classes:
    PricingRequest: Validated, immutable valuation inputs
    GreeksResult: delta, gamma, theta, vega, rho

Pricers (PricingRequest -> float unless noted):
    bsm_price, binomial_price, trinomial_price, jump_diffusion_price
    monte_carlo_price / adaptive_monte_carlo_price (-> MonteCarloResult)

Parameter classes:
    LatticeParams: Configuration for binomial / trinomial trees
    MonteCarloParams: Configuration for Monte Carlo pricing
    JumpDiffusionParams: Configuration for jump diffusion
    GreeksParams: Bump sizes for finite-difference Greeks
    ImpliedVolatilityParams: Bisection bracket and tolerance
    ValuationParams: Union type for the per-model parameter classes
"""

from .core import GreeksResult, PricingRequest
from .params import (
    MAX_LATTICE_STEPS,
    GreeksParams,
    ImpliedVolatilityParams,
    JumpDiffusionParams,
    LatticeParams,
    MonteCarloParams,
    ValuationParams,
)
from .bsm import bsm_d_values, bsm_greeks, bsm_price, normal_cdf, normal_pdf
from .binomial import binomial_price, lattice_min_volatility
from .trinomial import trinomial_price
from .greeks import finite_difference_greeks
from .jump_diffusion import (
    POISSON_WEIGHT_EPSILON,
    JumpSensitivities,
    default_jump_params,
    jump_diffusion_greeks,
    jump_diffusion_price,
    jump_sensitivities,
)
from .monte_carlo import (
    AdaptiveMonteCarloResult,
    ConfidenceInterval,
    MonteCarloDiagnostics,
    MonteCarloResult,
    RunningMoments,
    adaptive_monte_carlo_price,
    monte_carlo_greeks,
    monte_carlo_price,
    simulate_batch,
)
from .implied_volatility import ImpliedVolResult, implied_volatility
from .sensitivity import SensitivityReport, sensitivity_analysis

__all__ = [
    # Core classes
    "PricingRequest",
    "GreeksResult",
    # Parameter classes
    "MAX_LATTICE_STEPS",
    "LatticeParams",
    "MonteCarloParams",
    "JumpDiffusionParams",
    "GreeksParams",
    "ImpliedVolatilityParams",
    "ValuationParams",
    # Analytic
    "normal_cdf",
    "normal_pdf",
    "bsm_d_values",
    "bsm_price",
    "bsm_greeks",
    # Lattice
    "binomial_price",
    "trinomial_price",
    "lattice_min_volatility",
    # Jump diffusion
    "POISSON_WEIGHT_EPSILON",
    "JumpSensitivities",
    "jump_diffusion_price",
    "jump_diffusion_greeks",
    "jump_sensitivities",
    "default_jump_params",
    # Monte Carlo
    "RunningMoments",
    "ConfidenceInterval",
    "MonteCarloDiagnostics",
    "MonteCarloResult",
    "AdaptiveMonteCarloResult",
    "simulate_batch",
    "monte_carlo_price",
    "adaptive_monte_carlo_price",
    "monte_carlo_greeks",
    # Model-agnostic tools
    "finite_difference_greeks",
    "ImpliedVolResult",
    "implied_volatility",
    "SensitivityReport",
    "sensitivity_analysis",
]
