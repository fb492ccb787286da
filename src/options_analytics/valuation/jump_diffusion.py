"""Merton (1976) jump-diffusion valuation as a Poisson-weighted series of BSM prices."""

from __future__ import annotations

from dataclasses import dataclass, replace as dc_replace
from functools import partial
import logging
import numpy as np
from scipy.stats import poisson

from ..enums import AssetClass
from ..exceptions import ConfigurationError, ValidationError
from .bsm import bsm_price
from .core import GreeksResult, PricingRequest
from .greeks import finite_difference_greeks
from .params import GreeksParams, JumpDiffusionParams

logger = logging.getLogger(__name__)

__all__ = [
    "POISSON_WEIGHT_EPSILON",
    "TRUNCATION_WARN_WEIGHT",
    "JumpSensitivities",
    "jump_diffusion_price",
    "jump_diffusion_greeks",
    "jump_sensitivities",
    "default_jump_params",
]

POISSON_WEIGHT_EPSILON = 1.0e-10
TRUNCATION_WARN_WEIGHT = 1.0e-6

# Floors applied to the downward bump in jump_sensitivities
_MIN_JUMP_INTENSITY = 0.0
_MIN_JUMP_STD = 0.01

_DEFAULT_JUMP_PARAMS: dict[AssetClass, JumpDiffusionParams] = {
    AssetClass.EQUITY: JumpDiffusionParams(jump_intensity=0.1, jump_mean=-0.05, jump_std=0.15),
    AssetClass.FX: JumpDiffusionParams(jump_intensity=0.05, jump_mean=0.0, jump_std=0.10),
    AssetClass.COMMODITY: JumpDiffusionParams(jump_intensity=0.15, jump_mean=0.02, jump_std=0.20),
    AssetClass.INDEX: JumpDiffusionParams(jump_intensity=0.08, jump_mean=-0.03, jump_std=0.12),
}


@dataclass(frozen=True, slots=True)
class JumpSensitivities:
    """Price sensitivities to the jump parameters (per unit change).

    Attributes
    ==========
    intensity:
        dV / d(lambda)
    jump_mean:
        dV / d(mu_J)
    jump_std:
        dV / d(sigma_J)
    """

    intensity: float
    jump_mean: float
    jump_std: float


def _resolve_params(params: JumpDiffusionParams | None) -> JumpDiffusionParams:
    if params is None:
        return JumpDiffusionParams()
    if not isinstance(params, JumpDiffusionParams):
        raise ConfigurationError(
            f"jump-diffusion pricing requires JumpDiffusionParams, got {type(params).__name__}"
        )
    return params


def jump_diffusion_price(
    request: PricingRequest, params: JumpDiffusionParams | None = None
) -> float:
    """Merton jump-diffusion value of a European option.

    With k = E[J] - 1 = exp(mu_J + sigma_J^2 / 2) - 1 and lambda' = lambda (1 + k),
    the value is sum_n w_n * BSM(sigma_n, r_n) where w_n is the Poisson(lambda' T)
    pmf, sigma_n^2 = sigma^2 + n sigma_J^2 / T and r_n = r - lambda k + n ln(1 + k) / T.

    The series runs for at most ``max_terms`` terms. It stops early once the
    weight drops below POISSON_WEIGHT_EPSILON past the Poisson mode, where
    the remaining weights only decrease. A warning is logged when more than
    TRUNCATION_WARN_WEIGHT of the Poisson weight is left unsummed.

    ``request.exercise_type`` is not consulted.
    """
    params = _resolve_params(params)
    lam = params.jump_intensity
    mu_j = params.jump_mean
    sigma_j = params.jump_std
    ttm = request.time_to_expiry

    k = float(np.exp(mu_j + 0.5 * sigma_j * sigma_j) - 1.0)
    lam_prime = lam * (1.0 + k)
    poisson_mean = lam_prime * ttm
    log_jump_growth = float(np.log1p(k))

    if poisson_mean == 0.0:
        # No jumps: the n = 0 term carries all the weight
        return bsm_price(request)

    value = 0.0
    total_weight = 0.0
    terms = 0
    for n in range(params.max_terms):
        weight = float(poisson.pmf(n, poisson_mean))
        if weight < POISSON_WEIGHT_EPSILON and n >= poisson_mean:
            break
        sigma_n = float(np.sqrt(request.volatility**2 + n * sigma_j * sigma_j / ttm))
        r_n = request.risk_free_rate - lam * k + n * log_jump_growth / ttm
        value += weight * bsm_price(request.replace(volatility=sigma_n, risk_free_rate=r_n))
        total_weight += weight
        terms += 1

    logger.debug(
        "Jump diffusion lambda=%.6g mu_J=%.6g sigma_J=%.6g k=%.6g terms=%d weight=%.12f",
        lam,
        mu_j,
        sigma_j,
        k,
        terms,
        total_weight,
    )
    if 1.0 - total_weight > TRUNCATION_WARN_WEIGHT:
        logger.warning(
            "Jump diffusion series truncated at max_terms=%d with Poisson weight %.6f "
            "unsummed (lambda' T=%.4g); price is biased low",
            params.max_terms,
            1.0 - total_weight,
            poisson_mean,
        )
    return float(value)


def jump_diffusion_greeks(
    request: PricingRequest,
    params: JumpDiffusionParams | None = None,
    greeks_params: GreeksParams | None = None,
) -> GreeksResult:
    """Finite-difference Greeks of the jump-diffusion price."""
    pricer = partial(jump_diffusion_price, params=_resolve_params(params))
    return finite_difference_greeks(pricer, request, greeks_params)


def jump_sensitivities(
    request: PricingRequest,
    params: JumpDiffusionParams | None = None,
    shift: float = 0.01,
) -> JumpSensitivities:
    """Central-difference sensitivities to lambda, mu_J and sigma_J.

    Downward bumps are floored (lambda >= 0, sigma_J >= 0.01); each derivative
    divides by the distance actually bumped.
    """
    params = _resolve_params(params)
    if shift <= 0:
        raise ValidationError(f"shift must be positive, got {shift}")

    def central(field: str, floor: float | None) -> float:
        centre = getattr(params, field)
        up = centre + shift
        down = centre - shift if floor is None else max(centre - shift, floor)
        value_up = jump_diffusion_price(request, dc_replace(params, **{field: up}))
        value_down = jump_diffusion_price(request, dc_replace(params, **{field: down}))
        return (value_up - value_down) / (up - down)

    return JumpSensitivities(
        intensity=float(central("jump_intensity", _MIN_JUMP_INTENSITY)),
        jump_mean=float(central("jump_mean", None)),
        jump_std=float(central("jump_std", _MIN_JUMP_STD)),
    )


def default_jump_params(asset_class: AssetClass | str) -> JumpDiffusionParams:
    """Preset jump parameters for an asset class ("equity", "fx", "commodity", "index")."""
    if isinstance(asset_class, str):
        try:
            asset_class = AssetClass(asset_class.strip().lower())
        except ValueError as exc:
            allowed = ", ".join(repr(m.value) for m in AssetClass)
            raise ValidationError(
                f"asset_class must be one of {allowed}, got {asset_class!r}"
            ) from exc
    if not isinstance(asset_class, AssetClass):
        raise ValidationError(
            f"asset_class must be AssetClass or str, got {type(asset_class).__name__}"
        )
    return _DEFAULT_JUMP_PARAMS[asset_class]
