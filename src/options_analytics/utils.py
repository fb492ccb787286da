"""Helper functions shared by the pricing engines."""

from __future__ import annotations

from contextlib import contextmanager
from collections.abc import Iterator
import time
import numpy as np

from .enums import OptionType

__all__ = [
    "log_timing",
    "vanilla_payoff",
    "intrinsic_value",
]


@contextmanager
def log_timing(logger, label: str, enabled: bool) -> Iterator[None]:
    """Log timing for a code block when enabled is True."""
    if not enabled:
        yield
        return
    start = time.perf_counter()
    try:
        yield
    finally:
        elapsed = time.perf_counter() - start
        logger.debug("Timing %s: %.6fs", label, elapsed)


def vanilla_payoff(
    option_type: OptionType, strike: float, spot: np.ndarray | float
) -> np.ndarray:
    """Vectorized vanilla payoff: max(S-K,0) for calls, max(K-S,0) for puts."""
    spot = np.asarray(spot, dtype=float)
    if option_type is OptionType.CALL:
        return np.maximum(spot - strike, 0.0)
    return np.maximum(strike - spot, 0.0)


def intrinsic_value(option_type: OptionType, spot: float, strike: float) -> float:
    """Scalar intrinsic value of a vanilla option exercised immediately."""
    return float(vanilla_payoff(option_type, strike, spot))
