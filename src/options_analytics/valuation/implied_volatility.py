"""Implied volatility by bisection over any pricer callable."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
import logging

import numpy as np

from ..exceptions import ArbitrageError, ConfigurationError, ValidationError
from .core import PricingRequest
from .params import ImpliedVolatilityParams

logger = logging.getLogger(__name__)

__all__ = ["ImpliedVolResult", "implied_volatility"]


@dataclass(frozen=True, slots=True)
class ImpliedVolResult:
    """Result container for implied volatility calculation.

    ``saturated`` is True when the target lies outside the prices spanned by
    the bracket and the nearest bound was returned.
    """

    implied_vol: float
    iterations: int
    converged: bool
    saturated: bool = False


def _bisection(
    *,
    f: Callable[[float], float],
    low: float,
    high: float,
    tol: float,
    max_iter: int,
) -> ImpliedVolResult:
    """Run bisection on the implied-vol residual function (price(vol) - target)."""
    vol = 0.5 * (low + high)
    for i in range(max_iter):
        f_mid = f(vol)
        if abs(f_mid) < tol:
            return ImpliedVolResult(implied_vol=vol, iterations=i + 1, converged=True)
        if f_mid > 0:
            high = vol
        else:
            low = vol
        vol = 0.5 * (low + high)

    return ImpliedVolResult(implied_vol=vol, iterations=max_iter, converged=False)


def implied_volatility(
    market_price: float,
    request: PricingRequest,
    pricer_fn: Callable[[PricingRequest], float],
    params: ImpliedVolatilityParams | None = None,
) -> ImpliedVolResult:
    """Solve pricer_fn(request with vol) == market_price for vol.

    Parameters
    ----------
    market_price
        Observed option price. Must be positive, finite and at least the
        intrinsic value of ``request``.
    request
        Valuation inputs; ``request.volatility`` is ignored.
    pricer_fn
        Any pricer. The price is assumed non-decreasing in volatility.
    params
        Search bracket, tolerance and iteration cap.

    Returns
    -------
    ImpliedVolResult
        ``implied_vol`` always lies inside ``[min_vol, max_vol]``. Targets
        outside the bracket's price range saturate to the nearest bound with
        ``saturated=True``; running out of iterations returns the last
        bracket midpoint with ``converged=False``.
    """
    if not callable(pricer_fn):
        raise ConfigurationError(
            f"pricer_fn must be callable, got {type(pricer_fn).__name__}"
        )
    if params is None:
        params = ImpliedVolatilityParams()
    if isinstance(market_price, bool):
        raise ConfigurationError("market_price must be numeric, got bool")
    try:
        target = float(market_price)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError("market_price must be numeric") from exc
    if not np.isfinite(target):
        raise ValidationError("market_price must be finite")
    if target <= 0:
        raise ValidationError(f"market_price must be positive, got {target}")

    intrinsic = request.intrinsic_value
    if target < intrinsic:
        raise ArbitrageError(
            f"market_price {target:.6g} is below intrinsic value {intrinsic:.6g}"
        )

    low, high = params.min_vol, params.max_vol

    def f(vol: float) -> float:
        return pricer_fn(request.replace(volatility=vol)) - target

    f_low = f(low)
    if f_low >= 0:
        # Also covers an exact hit at the lower bound
        saturated = f_low > params.tolerance
        if saturated:
            logger.warning(
                "Implied vol saturated at min_vol=%.6g (price at bound exceeds target by %.6g)",
                low,
                f_low,
            )
        return ImpliedVolResult(
            implied_vol=low, iterations=0, converged=not saturated, saturated=saturated
        )

    f_high = f(high)
    if f_high <= 0:
        saturated = -f_high > params.tolerance
        if saturated:
            logger.warning(
                "Implied vol saturated at max_vol=%.6g (price at bound below target by %.6g)",
                high,
                -f_high,
            )
        return ImpliedVolResult(
            implied_vol=high, iterations=0, converged=not saturated, saturated=saturated
        )

    result = _bisection(
        f=f, low=low, high=high, tol=params.tolerance, max_iter=params.max_iterations
    )
    if not result.converged:
        logger.warning(
            "Implied vol did not converge in %d iterations; returning %.6g",
            result.iterations,
            result.implied_vol,
        )
    logger.debug(
        "Implied vol %.6g iterations=%d converged=%s",
        result.implied_vol,
        result.iterations,
        result.converged,
    )
    return result
