"""Parameter classes for model-specific valuation configuration.

Each pricing model (lattice, Monte Carlo, jump diffusion) and each generic
numerical utility (finite-difference Greeks, implied volatility) has its own
parameter class that explicitly documents its configuration options and
defaults.
"""

from dataclasses import dataclass

from ..exceptions import ValidationError

MAX_LATTICE_STEPS = 5000


def _require_int(value, name: str) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{name} must be an integer, got {type(value).__name__}")


@dataclass(frozen=True, slots=True)
class LatticeParams:
    """Parameters for binomial / trinomial tree valuation.

    Attributes
    ==========
    num_steps:
        Number of time steps in the tree. More steps increase accuracy at
        O(num_steps^2) cost. Must lie in [1, MAX_LATTICE_STEPS]. Default: 50.
    log_timings:
        Emit a debug timing log line for each valuation. Default: False.
    """

    num_steps: int = 50
    log_timings: bool = False

    def __post_init__(self):
        _require_int(self.num_steps, "num_steps")
        if not 1 <= self.num_steps <= MAX_LATTICE_STEPS:
            raise ValidationError(
                f"num_steps must be in [1, {MAX_LATTICE_STEPS}], got {self.num_steps}"
            )


@dataclass(frozen=True, slots=True)
class MonteCarloParams:
    """Parameters for Monte Carlo option valuation.

    Attributes
    ==========
    num_simulations:
        Number of simulated paths (>= 2). With antithetic sampling this is
        rounded down to an even number of paths (pairs). Default: 100_000.
    time_steps:
        Number of GBM steps per path. Default: 1 (exact terminal sampling).
    antithetic:
        Pair every draw Z with -Z. Default: True.
    control_variate:
        Use the discounted terminal price as control variate. Default: True.
    random_seed:
        Random seed for reproducibility. If None, uses fresh OS entropy.
    chunk_size:
        Paths simulated per vectorized chunk; bounds memory and sets the
        granularity of cancellation checks. Default: 50_000.
    std_error_warn_ratio:
        If set, log a warning when standard_error / |price| exceeds it.
    log_timings:
        Emit a debug timing log line for each valuation. Default: False.
    """

    num_simulations: int = 100_000
    time_steps: int = 1
    antithetic: bool = True
    control_variate: bool = True
    random_seed: int | None = None
    chunk_size: int = 50_000
    std_error_warn_ratio: float | None = None
    log_timings: bool = False

    def __post_init__(self):
        _require_int(self.num_simulations, "num_simulations")
        _require_int(self.time_steps, "time_steps")
        _require_int(self.chunk_size, "chunk_size")
        if self.num_simulations < 2:
            raise ValidationError(
                f"num_simulations must be >= 2, got {self.num_simulations}"
            )
        if self.time_steps < 1:
            raise ValidationError(f"time_steps must be >= 1, got {self.time_steps}")
        if self.chunk_size < 2:
            raise ValidationError(f"chunk_size must be >= 2, got {self.chunk_size}")
        if self.random_seed is not None:
            _require_int(self.random_seed, "random_seed")
            if self.random_seed < 0:
                raise ValidationError(
                    f"random_seed must be non-negative, got {self.random_seed}"
                )
        if self.std_error_warn_ratio is not None and self.std_error_warn_ratio <= 0:
            raise ValidationError(
                f"std_error_warn_ratio must be positive, got {self.std_error_warn_ratio}"
            )


@dataclass(frozen=True, slots=True)
class JumpDiffusionParams:
    """Parameters for the Merton jump-diffusion model.

    Attributes
    ==========
    jump_intensity:
        Expected number of jumps per year, lambda (>= 0). Default: 0.1.
    jump_mean:
        Mean of the log jump size, mu_J. Default: -0.1.
    jump_std:
        Volatility of the log jump size, sigma_J (> 0). Default: 0.15.
    max_terms:
        Maximum number of Poisson series terms. Default: 20.
    """

    jump_intensity: float = 0.1
    jump_mean: float = -0.1
    jump_std: float = 0.15
    max_terms: int = 20

    def __post_init__(self):
        if self.jump_intensity < 0:
            raise ValidationError(
                f"jump_intensity must be non-negative, got {self.jump_intensity}"
            )
        if self.jump_std <= 0:
            raise ValidationError(f"jump_std must be positive, got {self.jump_std}")
        _require_int(self.max_terms, "max_terms")
        if self.max_terms < 1:
            raise ValidationError(f"max_terms must be >= 1, got {self.max_terms}")


@dataclass(frozen=True, slots=True)
class GreeksParams:
    """Bump sizes for finite-difference Greeks.

    Attributes
    ==========
    spot_bump:
        Relative spot bump for delta/gamma central differences. Default: 0.01.
    vol_bump:
        Absolute volatility bump for the vega forward difference. Default: 0.01.
    rate_bump:
        Absolute rate bump for the rho forward difference. Default: 0.01.
    time_bump:
        Time bump in years for theta. None means min(1 day, 1% of T),
        which keeps the bumped expiry positive. Default: None.
    """

    spot_bump: float = 0.01
    vol_bump: float = 0.01
    rate_bump: float = 0.01
    time_bump: float | None = None

    def __post_init__(self):
        if not 0 < self.spot_bump < 1:
            raise ValidationError(f"spot_bump must be in (0, 1), got {self.spot_bump}")
        if self.vol_bump <= 0:
            raise ValidationError(f"vol_bump must be positive, got {self.vol_bump}")
        if self.rate_bump <= 0:
            raise ValidationError(f"rate_bump must be positive, got {self.rate_bump}")
        if self.time_bump is not None and self.time_bump <= 0:
            raise ValidationError(f"time_bump must be positive, got {self.time_bump}")


@dataclass(frozen=True, slots=True)
class ImpliedVolatilityParams:
    """Search configuration for the bisection implied-volatility solver.

    Attributes
    ==========
    min_vol, max_vol:
        Volatility search bracket. Default: [0.001, 5.0].
    tolerance:
        Absolute price tolerance. Default: 1e-6.
    max_iterations:
        Maximum bisection iterations. Default: 100.
    """

    min_vol: float = 0.001
    max_vol: float = 5.0
    tolerance: float = 1.0e-6
    max_iterations: int = 100

    def __post_init__(self):
        if self.min_vol <= 0 or self.max_vol <= 0 or self.min_vol >= self.max_vol:
            raise ValidationError(
                "volatility bracket must be positive and satisfy min_vol < max_vol, "
                f"got [{self.min_vol}, {self.max_vol}]"
            )
        if self.tolerance <= 0:
            raise ValidationError(f"tolerance must be positive, got {self.tolerance}")
        _require_int(self.max_iterations, "max_iterations")
        if self.max_iterations < 1:
            raise ValidationError(
                f"max_iterations must be >= 1, got {self.max_iterations}"
            )


# Type alias for per-model pricing parameters
ValuationParams = LatticeParams | MonteCarloParams | JumpDiffusionParams
