"""Finite-difference Greeks over any pricer callable."""

from __future__ import annotations

from collections.abc import Callable
import logging

from ..exceptions import ConfigurationError, ValidationError
from .core import GreeksResult, PricingRequest
from .params import GreeksParams

logger = logging.getLogger(__name__)

__all__ = ["PricerFn", "finite_difference_greeks", "theta_time_bump"]

PricerFn = Callable[[PricingRequest], float]


def theta_time_bump(request: PricingRequest, params: GreeksParams) -> float:
    """Time bump in years used for theta: min(1 day, 1% of T) unless overridden."""
    if params.time_bump is None:
        return min(1.0 / 365.0, 0.01 * request.time_to_expiry)
    if params.time_bump >= request.time_to_expiry:
        raise ValidationError(
            f"time_bump ({params.time_bump}) must be smaller than "
            f"time_to_expiry ({request.time_to_expiry})"
        )
    return params.time_bump


def finite_difference_greeks(
    pricer_fn: PricerFn,
    request: PricingRequest,
    params: GreeksParams | None = None,
) -> GreeksResult:
    """Bump-and-revalue Greeks for an arbitrary pricer.

    Parameters
    ==========
    pricer_fn: Callable[[PricingRequest], float]
        Any pricer. Bind model configuration with ``functools.partial``.
    request: PricingRequest
        Base valuation inputs.
    params: GreeksParams, optional
        Bump sizes. Defaults to ``GreeksParams()``.

    Returns
    =======
    GreeksResult
        delta and gamma from central differences on a relative spot bump;
        vega (per vol point), theta (per calendar day) and rho (per rate
        point) from forward differences.
    """
    if not callable(pricer_fn):
        raise ConfigurationError(
            f"pricer_fn must be callable, got {type(pricer_fn).__name__}"
        )
    if params is None:
        params = GreeksParams()

    base = pricer_fn(request)

    # Delta / gamma: central differences on spot
    spot_h = request.spot * params.spot_bump
    value_up = pricer_fn(request.replace(spot=request.spot + spot_h))
    value_down = pricer_fn(request.replace(spot=request.spot - spot_h))
    delta = (value_up - value_down) / (2.0 * spot_h)
    gamma = (value_up - 2.0 * base + value_down) / (spot_h * spot_h)

    vol_h = params.vol_bump
    value_vol = pricer_fn(request.replace(volatility=request.volatility + vol_h))
    vega = (value_vol - base) / vol_h / 100.0

    # Theta: value after time passes, so the bumped expiry is T - h
    time_h = theta_time_bump(request, params)
    value_later = pricer_fn(request.replace(time_to_expiry=request.time_to_expiry - time_h))
    theta = (value_later - base) / time_h / 365.0

    rate_h = params.rate_bump
    value_rate = pricer_fn(request.replace(risk_free_rate=request.risk_free_rate + rate_h))
    rho = (value_rate - base) / rate_h / 100.0

    logger.debug(
        "FD greeks spot_h=%.6g vol_h=%.6g time_h=%.6g rate_h=%.6g",
        spot_h,
        vol_h,
        time_h,
        rate_h,
    )
    return GreeksResult(
        delta=float(delta),
        gamma=float(gamma),
        theta=float(theta),
        vega=float(vega),
        rho=float(rho),
    )
