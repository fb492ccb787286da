"""Scenario grids: option value under spot, volatility and time-decay shifts."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
import logging

import numpy as np
import pandas as pd

from ..exceptions import ConfigurationError, ValidationError
from .core import PricingRequest

logger = logging.getLogger(__name__)

__all__ = [
    "DEFAULT_SPOT_MULTIPLIERS",
    "DEFAULT_VOL_SHIFTS",
    "DEFAULT_DECAY_DAYS",
    "SensitivityReport",
    "sensitivity_analysis",
]

DEFAULT_SPOT_MULTIPLIERS = (0.95, 0.975, 1.0, 1.025, 1.05)
DEFAULT_VOL_SHIFTS = (-0.05, -0.025, 0.0, 0.025, 0.05)
DEFAULT_DECAY_DAYS = (0, 1, 7, 14, 30)

MIN_TIME_TO_EXPIRY = 0.001
MIN_VOLATILITY = 0.001


@dataclass(frozen=True, slots=True)
class SensitivityReport:
    """Base price plus one DataFrame per scenario axis.

    Every table carries ``price``, ``change`` (vs. base) and
    ``pct_change`` (in percent) columns.
    """

    base_price: float
    spot: pd.DataFrame
    volatility: pd.DataFrame
    time_decay: pd.DataFrame


def _with_changes(rows: list[dict], base_price: float) -> pd.DataFrame:
    df = pd.DataFrame(rows)
    df["change"] = df["price"] - base_price
    if base_price != 0.0:
        df["pct_change"] = df["change"] / base_price * 100.0
    else:
        df["pct_change"] = np.nan
    return df


def sensitivity_analysis(
    pricer_fn: Callable[[PricingRequest], float],
    request: PricingRequest,
    spot_multipliers: Sequence[float] = DEFAULT_SPOT_MULTIPLIERS,
    vol_shifts: Sequence[float] = DEFAULT_VOL_SHIFTS,
    decay_days: Sequence[float] = DEFAULT_DECAY_DAYS,
    day_count: int = 365,
) -> SensitivityReport:
    """Reprice ``request`` across spot, volatility and time-decay scenarios.

    Parameters
    ==========
    pricer_fn:
        Any pricer callable.
    request:
        Base scenario.
    spot_multipliers:
        Spot is set to ``spot * multiplier``.
    vol_shifts:
        Absolute shifts added to volatility (floored at 0.001).
    decay_days:
        Days elapsed; T becomes ``max(T - days / day_count, 0.001)``.
    day_count:
        Days per year for the decay axis. Default: 365.
    """
    if not callable(pricer_fn):
        raise ConfigurationError(
            f"pricer_fn must be callable, got {type(pricer_fn).__name__}"
        )
    if day_count <= 0:
        raise ValidationError(f"day_count must be positive, got {day_count}")
    if any(m <= 0 for m in spot_multipliers):
        raise ValidationError("spot_multipliers must all be positive")
    if any(d < 0 for d in decay_days):
        raise ValidationError("decay_days must all be non-negative")

    base_price = float(pricer_fn(request))

    spot_rows = []
    for multiplier in spot_multipliers:
        spot = request.spot * multiplier
        spot_rows.append(
            {
                "multiplier": multiplier,
                "spot": spot,
                "price": pricer_fn(request.replace(spot=spot)),
            }
        )

    vol_rows = []
    for shift in vol_shifts:
        vol = max(request.volatility + shift, MIN_VOLATILITY)
        vol_rows.append(
            {
                "shift": shift,
                "volatility": vol,
                "price": pricer_fn(request.replace(volatility=vol)),
            }
        )

    decay_rows = []
    for days in decay_days:
        ttm = max(request.time_to_expiry - days / day_count, MIN_TIME_TO_EXPIRY)
        decay_rows.append(
            {
                "days": days,
                "time_to_expiry": ttm,
                "price": pricer_fn(request.replace(time_to_expiry=ttm)),
            }
        )

    logger.debug(
        "Sensitivity grid spot=%d vol=%d decay=%d base_price=%.6g",
        len(spot_rows),
        len(vol_rows),
        len(decay_rows),
        base_price,
    )
    return SensitivityReport(
        base_price=base_price,
        spot=_with_changes(spot_rows, base_price),
        volatility=_with_changes(vol_rows, base_price),
        time_decay=_with_changes(decay_rows, base_price),
    )
