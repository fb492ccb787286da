"""Valuation of European and American options using the binomial option pricing model of
Cox-Ross-Rubinstein
"""

from __future__ import annotations
import logging
import numpy as np

from ..enums import ExerciseType
from ..exceptions import ConfigurationError, NumericalError
from ..utils import log_timing, vanilla_payoff
from .core import PricingRequest
from .params import LatticeParams

logger = logging.getLogger(__name__)

__all__ = ["binomial_price", "lattice_min_volatility"]


def _resolve_params(params: LatticeParams | None) -> LatticeParams:
    if params is None:
        return LatticeParams()
    if not isinstance(params, LatticeParams):
        raise ConfigurationError(
            f"lattice pricing requires LatticeParams, got {type(params).__name__}"
        )
    return params


def _crr_parameters(request: PricingRequest, num_steps: int) -> tuple[float, float, float, float]:
    """Return ``(delta_t, u, d, p)`` for a CRR tree.

    Raises NumericalError if the risk-neutral probability falls outside [0, 1],
    which signals that sigma is too small relative to |r - q| for this step size.
    """
    delta_t = request.time_to_expiry / num_steps
    u = float(np.exp(request.volatility * np.sqrt(delta_t)))
    d = 1.0 / u
    growth = float(np.exp((request.risk_free_rate - request.dividend_yield) * delta_t))
    p = (growth - d) / (u - d)

    if p < 0.0 or p > 1.0:
        raise NumericalError(
            f"Invalid risk-neutral probability p={p:.6f} with dt={delta_t:.6e}, "
            f"u={u:.6f}, d={d:.6f}. Check (r - q), sigma, or num_steps."
        )
    return delta_t, u, d, p


def lattice_min_volatility(request: PricingRequest, num_steps: int) -> float:
    """Smallest volatility for which the CRR probability stays inside [0, 1].

    d <= exp((r - q) dt) <= u  holds iff  sigma >= |r - q| * sqrt(dt).
    The same bound also keeps the trinomial middle probability non-negative.
    """
    delta_t = request.time_to_expiry / num_steps
    drift = request.risk_free_rate - request.dividend_yield
    return float(abs(drift) * np.sqrt(delta_t))


def binomial_price(request: PricingRequest, params: LatticeParams | None = None) -> float:
    """Price a vanilla option on a CRR binomial tree.

    Node ``i`` at level ``t`` carries spot ``S0 * u**(2i - t)`` (i up-moves).
    Only one level of option values (the LatticeState) is held at a time,
    so memory is O(num_steps) and time O(num_steps^2).

    Parameters
    ==========
    request: PricingRequest
        Option and market inputs; ``exercise_type`` selects early exercise.
    params: LatticeParams, optional
        Tree configuration. Defaults to ``LatticeParams()``.

    Returns
    =======
    float
        Option value at the root of the tree.
    """
    params = _resolve_params(params)
    num_steps = params.num_steps
    delta_t, u, _, p = _crr_parameters(request, num_steps)
    discount = float(np.exp(-request.risk_free_rate * delta_t))
    american = request.exercise_type is ExerciseType.AMERICAN

    logger.debug(
        "Binomial %s num_steps=%d dt=%.6g u=%.6g p=%.6g",
        request.exercise_type.value,
        num_steps,
        delta_t,
        u,
        p,
    )

    with log_timing(logger, "Binomial present_value", params.log_timings):
        exponents = 2 * np.arange(num_steps + 1) - num_steps
        terminal_spots = request.spot * u ** exponents.astype(float)
        values = vanilla_payoff(request.option_type, request.strike, terminal_spots)

        # Backward induction
        for t in range(num_steps - 1, -1, -1):
            values = discount * (p * values[1 : t + 2] + (1.0 - p) * values[: t + 1])
            if american:
                spots = request.spot * u ** (2 * np.arange(t + 1) - t).astype(float)
                values = np.maximum(
                    values, vanilla_payoff(request.option_type, request.strike, spots)
                )

    return float(values[0])
