"""Valuation of European and American options on a log-space trinomial tree."""

from __future__ import annotations
import logging
import numpy as np

from ..enums import ExerciseType
from ..exceptions import NumericalError
from ..utils import log_timing, vanilla_payoff
from .binomial import _resolve_params
from .core import PricingRequest
from .params import LatticeParams

logger = logging.getLogger(__name__)

__all__ = ["trinomial_price"]


def _trinomial_parameters(
    request: PricingRequest, num_steps: int
) -> tuple[float, float, float, float, float]:
    """Return ``(delta_t, dx, pu, pm, pd)`` from moment matching in log space."""
    sigma = request.volatility
    delta_t = request.time_to_expiry / num_steps
    dx = sigma * np.sqrt(3.0 * delta_t)
    nu = request.risk_free_rate - request.dividend_yield - 0.5 * sigma * sigma

    second_moment = (sigma * sigma * delta_t + nu * nu * delta_t * delta_t) / (dx * dx)
    drift_term = nu * delta_t / dx
    pu = 0.5 * (second_moment + drift_term)
    pd = 0.5 * (second_moment - drift_term)
    pm = 1.0 - pu - pd

    for name, prob in (("pu", pu), ("pm", pm), ("pd", pd)):
        if prob < 0.0 or prob > 1.0:
            raise NumericalError(
                f"Invalid trinomial probability {name}={prob:.6f} "
                f"(pu={pu:.6f}, pm={pm:.6f}, pd={pd:.6f}) with dt={delta_t:.6e}, "
                f"dx={dx:.6f}. Check (r - q), sigma, or num_steps."
            )
    return delta_t, float(dx), float(pu), float(pm), float(pd)


def trinomial_price(request: PricingRequest, params: LatticeParams | None = None) -> float:
    """Price a vanilla option on a trinomial tree with nodes ``S0 * exp(j * dx)``.

    At level ``t`` the index ``j`` runs over ``-t..t`` (2t + 1 nodes); the
    continuation value of node ``j`` is the discounted expectation of nodes
    ``j - 1``, ``j`` and ``j + 1`` one level later.
    """
    params = _resolve_params(params)
    num_steps = params.num_steps
    delta_t, dx, pu, pm, pd = _trinomial_parameters(request, num_steps)
    discount = float(np.exp(-request.risk_free_rate * delta_t))
    american = request.exercise_type is ExerciseType.AMERICAN

    logger.debug(
        "Trinomial %s num_steps=%d dt=%.6g dx=%.6g pu=%.6g pm=%.6g pd=%.6g",
        request.exercise_type.value,
        num_steps,
        delta_t,
        dx,
        pu,
        pm,
        pd,
    )

    with log_timing(logger, "Trinomial present_value", params.log_timings):
        offsets = np.arange(-num_steps, num_steps + 1, dtype=float)
        values = vanilla_payoff(
            request.option_type, request.strike, request.spot * np.exp(offsets * dx)
        )

        for t in range(num_steps - 1, -1, -1):
            width = 2 * t + 1
            values = discount * (
                pd * values[:width] + pm * values[1 : width + 1] + pu * values[2 : width + 2]
            )
            if american:
                spots = request.spot * np.exp(np.arange(-t, t + 1, dtype=float) * dx)
                values = np.maximum(
                    values, vanilla_payoff(request.option_type, request.strike, spots)
                )

    return float(values[0])
