"""Monte Carlo Simulation option valuation with variance reduction."""

from __future__ import annotations

from dataclasses import dataclass, replace as dc_replace
from functools import partial
import logging
import threading
import time
import numpy as np

from ..exceptions import ConfigurationError, SimulationCancelledError, ValidationError
from ..utils import log_timing, vanilla_payoff
from .core import GreeksResult, PricingRequest
from .greeks import finite_difference_greeks
from .params import GreeksParams, MonteCarloParams

logger = logging.getLogger(__name__)

__all__ = [
    "RunningMoments",
    "ConfidenceInterval",
    "MonteCarloDiagnostics",
    "MonteCarloResult",
    "AdaptiveMonteCarloResult",
    "simulate_batch",
    "monte_carlo_price",
    "adaptive_monte_carlo_price",
    "monte_carlo_greeks",
]

CONFIDENCE_Z = 1.96
_MIN_UNIFORM = 1.0e-300


# ──────────────────────────────────────────────────────────────────────
# Result containers
# ──────────────────────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class RunningMoments:
    """Raw sums of payoff samples x and control samples c.

    Batches are combined only by adding sums (``merge``); every statistic is
    derived from the merged totals, so per-batch errors are never averaged.
    """

    n: int = 0
    sum_x: float = 0.0
    sum_x2: float = 0.0
    sum_c: float = 0.0
    sum_c2: float = 0.0
    sum_xc: float = 0.0

    @classmethod
    def from_samples(cls, x: np.ndarray, c: np.ndarray) -> "RunningMoments":
        return cls(
            n=int(x.size),
            sum_x=float(np.sum(x)),
            sum_x2=float(np.dot(x, x)),
            sum_c=float(np.sum(c)),
            sum_c2=float(np.dot(c, c)),
            sum_xc=float(np.dot(x, c)),
        )

    def merge(self, other: "RunningMoments") -> "RunningMoments":
        return RunningMoments(
            n=self.n + other.n,
            sum_x=self.sum_x + other.sum_x,
            sum_x2=self.sum_x2 + other.sum_x2,
            sum_c=self.sum_c + other.sum_c,
            sum_c2=self.sum_c2 + other.sum_c2,
            sum_xc=self.sum_xc + other.sum_xc,
        )

    def _centered(self, sum_a: float, sum_b: float, sum_ab: float) -> float:
        if self.n < 2:
            return 0.0
        return (sum_ab - sum_a * sum_b / self.n) / (self.n - 1)

    @property
    def mean(self) -> float:
        return self.sum_x / self.n if self.n else 0.0

    @property
    def control_mean(self) -> float:
        return self.sum_c / self.n if self.n else 0.0

    @property
    def variance(self) -> float:
        """Sample variance of x (ddof=1), floored at zero against round-off."""
        return max(self._centered(self.sum_x, self.sum_x, self.sum_x2), 0.0)

    @property
    def control_variance(self) -> float:
        return max(self._centered(self.sum_c, self.sum_c, self.sum_c2), 0.0)

    @property
    def covariance(self) -> float:
        return self._centered(self.sum_x, self.sum_c, self.sum_xc)

    @property
    def standard_error(self) -> float:
        if self.n < 2:
            return float("inf")
        return float(np.sqrt(self.variance / self.n))

    @property
    def beta(self) -> float:
        var_c = self.control_variance
        return self.covariance / var_c if var_c > 0.0 else 0.0

    @property
    def correlation(self) -> float:
        denom = np.sqrt(self.variance * self.control_variance)
        if denom <= 0.0:
            return 0.0
        return float(np.clip(self.covariance / denom, -1.0, 1.0))


@dataclass(frozen=True, slots=True)
class ConfidenceInterval:
    lower: float
    upper: float
    width: float


@dataclass(frozen=True, slots=True)
class MonteCarloDiagnostics:
    """Run statistics.

    ``variance`` is the per-sample variance of the estimator actually used
    (after control variate adjustment); ``plain_variance`` is the variance
    without it. ``efficiency`` is their ratio, ``convergence_rate`` the
    sample standard deviation.
    """

    num_paths: int
    num_samples: int
    variance: float
    plain_variance: float
    beta: float
    correlation: float
    antithetic: bool
    control_variate: bool
    time_steps: int
    convergence_rate: float
    efficiency: float


@dataclass(frozen=True, slots=True)
class MonteCarloResult:
    price: float
    standard_error: float
    confidence_interval: ConfidenceInterval
    diagnostics: MonteCarloDiagnostics


@dataclass(frozen=True, slots=True)
class AdaptiveMonteCarloResult(MonteCarloResult):
    """MonteCarloResult plus the stopping state of an adaptive run.

    ``stop_reason`` is one of "converged", "budget_exhausted", "cancelled"
    or "deadline".
    """

    converged: bool
    total_simulations: int
    target_error: float
    batches: int
    stop_reason: str


# ──────────────────────────────────────────────────────────────────────
# Path simulation
# ──────────────────────────────────────────────────────────────────────


def _resolve_params(params: MonteCarloParams | None) -> MonteCarloParams:
    if params is None:
        return MonteCarloParams()
    if not isinstance(params, MonteCarloParams):
        raise ConfigurationError(
            f"Monte Carlo valuation requires MonteCarloParams, got {type(params).__name__}"
        )
    return params


def _standard_normals(rng: np.random.Generator, size: int) -> np.ndarray:
    """Box-Muller transform of two uniform draws (cosine branch)."""
    u1 = np.maximum(rng.random(size), _MIN_UNIFORM)
    u2 = rng.random(size)
    return np.sqrt(-2.0 * np.log(u1)) * np.cos(2.0 * np.pi * u2)


def _samples_for_paths(num_paths: int, antithetic: bool) -> int:
    """Number of estimator samples: antithetic pairs count as one sample."""
    return num_paths // 2 if antithetic else num_paths


def _simulate_chunk(
    request: PricingRequest,
    params: MonteCarloParams,
    rng: np.random.Generator,
    num_samples: int,
) -> tuple[np.ndarray, np.ndarray]:
    """Return discounted payoff samples x and control samples c = e^{-rT} S_T.

    In antithetic mode each sample is the average over the path driven by Z
    and its mirror driven by -Z from the same draw.
    """
    ttm = request.time_to_expiry
    dt = ttm / params.time_steps
    drift = (request.risk_free_rate - request.dividend_yield - 0.5 * request.volatility**2) * dt
    vol_step = request.volatility * np.sqrt(dt)
    discount = float(np.exp(-request.risk_free_rate * ttm))

    log_s = np.zeros(num_samples)
    log_s_mirror = np.zeros(num_samples) if params.antithetic else None
    for _ in range(params.time_steps):
        z = _standard_normals(rng, num_samples)
        log_s += drift + vol_step * z
        if log_s_mirror is not None:
            log_s_mirror += drift - vol_step * z

    s_t = request.spot * np.exp(log_s)
    x = vanilla_payoff(request.option_type, request.strike, s_t)
    c = s_t
    if log_s_mirror is not None:
        s_t_mirror = request.spot * np.exp(log_s_mirror)
        x = 0.5 * (x + vanilla_payoff(request.option_type, request.strike, s_t_mirror))
        c = 0.5 * (s_t + s_t_mirror)
    return discount * x, discount * c


def _check_interrupt(
    cancel_event: threading.Event | None, deadline: float | None
) -> str | None:
    if cancel_event is not None and cancel_event.is_set():
        return "cancelled"
    if deadline is not None and time.monotonic() >= deadline:
        return "deadline"
    return None


def _accumulate(
    request: PricingRequest,
    params: MonteCarloParams,
    rng: np.random.Generator,
    num_samples: int,
    cancel_event: threading.Event | None = None,
    deadline: float | None = None,
) -> RunningMoments:
    """Simulate ``num_samples`` samples in chunks, checking for interruption between chunks."""
    chunk = max(_samples_for_paths(params.chunk_size, params.antithetic), 1)
    moments = RunningMoments()
    remaining = num_samples
    while remaining > 0:
        reason = _check_interrupt(cancel_event, deadline)
        if reason is not None:
            raise SimulationCancelledError(
                f"Monte Carlo run {reason} after {moments.n} of {num_samples} samples"
            )
        size = min(chunk, remaining)
        x, c = _simulate_chunk(request, params, rng, size)
        moments = moments.merge(RunningMoments.from_samples(x, c))
        remaining -= size
    return moments


def simulate_batch(
    request: PricingRequest,
    params: MonteCarloParams | None,
    num_simulations: int,
    seed_sequence: np.random.SeedSequence | int | None,
) -> RunningMoments:
    """Simulate one independent batch and return its raw moments.

    This is the unit of work for parallel drivers: give each worker its own
    ``SeedSequence`` and combine the returned moments with ``merge``.
    """
    params = _resolve_params(params)
    if isinstance(num_simulations, bool) or not isinstance(num_simulations, int):
        raise ValidationError("num_simulations must be an integer")
    if num_simulations < 1:
        raise ValidationError(f"num_simulations must be >= 1, got {num_simulations}")
    rng = np.random.default_rng(seed_sequence)
    return _accumulate(request, params, rng, _samples_for_paths(num_simulations, params.antithetic))


# ──────────────────────────────────────────────────────────────────────
# Estimation
# ──────────────────────────────────────────────────────────────────────


def _warn_if_high_std_error(
    *,
    std_error: float,
    price: float,
    num_paths: int,
    params: MonteCarloParams,
    label: str,
) -> None:
    """Emit a warning log if MC standard error is high relative to the price estimate."""
    if params.std_error_warn_ratio is None:
        return
    scale = max(abs(price), 1.0e-12)
    ratio = std_error / scale
    logger.debug(
        "MC %s std_error=%.6g ratio=%.6g paths=%d",
        label,
        std_error,
        ratio,
        num_paths,
    )
    if ratio > params.std_error_warn_ratio:
        logger.warning(
            "MC %s standard error high: std_error=%.6g ratio=%.6g (>%.3g) paths=%d",
            label,
            std_error,
            ratio,
            params.std_error_warn_ratio,
            num_paths,
        )


def _estimate(
    request: PricingRequest,
    params: MonteCarloParams,
    moments: RunningMoments,
) -> tuple[float, float, MonteCarloDiagnostics]:
    """Return ``(price, standard_error, diagnostics)`` from accumulated moments."""
    plain_variance = moments.variance
    beta = moments.beta
    rho = moments.correlation

    if params.control_variate:
        expected_control = request.spot * float(
            np.exp(-request.dividend_yield * request.time_to_expiry)
        )
        price = moments.mean - beta * (moments.control_mean - expected_control)
        variance = plain_variance * (1.0 - rho * rho)
    else:
        price = moments.mean
        variance = plain_variance

    n = moments.n
    standard_error = float(np.sqrt(variance / n)) if n >= 2 else float("inf")
    if variance > 0.0:
        efficiency = plain_variance / variance
    else:
        efficiency = float("inf") if plain_variance > 0.0 else 1.0

    num_paths = 2 * n if params.antithetic else n
    diagnostics = MonteCarloDiagnostics(
        num_paths=num_paths,
        num_samples=n,
        variance=float(variance),
        plain_variance=float(plain_variance),
        beta=float(beta),
        correlation=float(rho),
        antithetic=params.antithetic,
        control_variate=params.control_variate,
        time_steps=params.time_steps,
        convergence_rate=float(np.sqrt(variance)),
        efficiency=float(efficiency),
    )
    return float(price), standard_error, diagnostics


def _confidence_interval(price: float, standard_error: float) -> ConfidenceInterval:
    half_width = CONFIDENCE_Z * standard_error
    return ConfidenceInterval(
        lower=price - half_width,
        upper=price + half_width,
        width=2.0 * half_width,
    )


def monte_carlo_price(
    request: PricingRequest,
    params: MonteCarloParams | None = None,
    *,
    cancel_event: threading.Event | None = None,
    deadline: float | None = None,
) -> MonteCarloResult:
    """Monte Carlo value of a European vanilla option under GBM.

    Parameters
    ==========
    request: PricingRequest
        Valuation inputs. ``exercise_type`` is not consulted.
    params: MonteCarloParams, optional
        Simulation configuration. A fixed ``random_seed`` gives bit-identical
        results across calls.
    cancel_event: threading.Event, optional
        Checked between chunks; raises SimulationCancelledError once set.
    deadline: float, optional
        Absolute ``time.monotonic()`` value after which the run is abandoned
        with SimulationCancelledError.

    Returns
    =======
    MonteCarloResult
    """
    params = _resolve_params(params)
    num_samples = _samples_for_paths(params.num_simulations, params.antithetic)
    rng = np.random.default_rng(params.random_seed)

    with log_timing(logger, "MC present_value", params.log_timings):
        moments = _accumulate(request, params, rng, num_samples, cancel_event, deadline)
        price, standard_error, diagnostics = _estimate(request, params, moments)

    logger.debug(
        "MC paths=%d samples=%d time_steps=%d antithetic=%s control_variate=%s beta=%.6g",
        diagnostics.num_paths,
        diagnostics.num_samples,
        params.time_steps,
        params.antithetic,
        params.control_variate,
        diagnostics.beta,
    )
    _warn_if_high_std_error(
        std_error=standard_error,
        price=price,
        num_paths=diagnostics.num_paths,
        params=params,
        label="European",
    )
    return MonteCarloResult(
        price=price,
        standard_error=standard_error,
        confidence_interval=_confidence_interval(price, standard_error),
        diagnostics=diagnostics,
    )


def adaptive_monte_carlo_price(
    request: PricingRequest,
    params: MonteCarloParams | None = None,
    *,
    target_error: float = 0.01,
    max_simulations: int = 1_000_000,
    batch_size: int = 10_000,
    cancel_event: threading.Event | None = None,
    deadline: float | None = None,
) -> AdaptiveMonteCarloResult:
    """Run independent batches until the global standard error reaches ``target_error``.

    Batch ``i`` draws from ``SeedSequence(seed, spawn_key=(i,))``. All batches
    feed one RunningMoments, and the standard error is recomputed from the
    merged sums after every batch. The last batch is shrunk so that
    ``total_simulations`` never exceeds ``max_simulations``.

    Stopping without convergence (budget, cancellation, deadline) is reported
    through ``converged`` / ``stop_reason`` and a warning log, not an
    exception. Only an interruption before the first batch raises
    SimulationCancelledError, since there is no estimate to return.
    ``params.num_simulations`` is not used here.
    """
    params = _resolve_params(params)
    if not np.isfinite(target_error) or target_error <= 0:
        raise ValidationError(f"target_error must be positive, got {target_error}")
    for name, value in (("max_simulations", max_simulations), ("batch_size", batch_size)):
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValidationError(f"{name} must be an integer")
        if value < 4:
            raise ValidationError(f"{name} must be >= 4, got {value}")

    root = np.random.SeedSequence(params.random_seed)
    min_batch = 2 if params.antithetic else 1

    moments = RunningMoments()
    total_simulations = 0
    batches = 0
    stop_reason = "budget_exhausted"

    with log_timing(logger, "MC adaptive present_value", params.log_timings):
        while True:
            reason = _check_interrupt(cancel_event, deadline)
            if reason is not None:
                if batches == 0:
                    raise SimulationCancelledError(
                        f"Adaptive Monte Carlo run {reason} before the first batch"
                    )
                stop_reason = reason
                break

            this_batch = min(batch_size, max_simulations - total_simulations)
            if params.antithetic:
                this_batch -= this_batch % 2
            if this_batch < min_batch:
                stop_reason = "budget_exhausted"
                break

            seed_seq = np.random.SeedSequence(root.entropy, spawn_key=(batches,))
            moments = moments.merge(simulate_batch(request, params, this_batch, seed_seq))
            total_simulations += this_batch
            batches += 1

            price, standard_error, diagnostics = _estimate(request, params, moments)
            logger.debug(
                "MC adaptive batch=%d total=%d price=%.6g std_error=%.6g",
                batches,
                total_simulations,
                price,
                standard_error,
            )
            if standard_error <= target_error:
                stop_reason = "converged"
                break

    price, standard_error, diagnostics = _estimate(request, params, moments)
    converged = stop_reason == "converged"
    if not converged:
        logger.warning(
            "MC adaptive stopped without convergence (%s): std_error=%.6g target=%.3g "
            "simulations=%d batches=%d",
            stop_reason,
            standard_error,
            target_error,
            total_simulations,
            batches,
        )

    return AdaptiveMonteCarloResult(
        price=price,
        standard_error=standard_error,
        confidence_interval=_confidence_interval(price, standard_error),
        diagnostics=diagnostics,
        converged=converged,
        total_simulations=total_simulations,
        target_error=float(target_error),
        batches=batches,
        stop_reason=stop_reason,
    )


def _monte_carlo_value(request: PricingRequest, params: MonteCarloParams | None = None) -> float:
    return monte_carlo_price(request, params).price


def monte_carlo_greeks(
    request: PricingRequest,
    params: MonteCarloParams | None = None,
    greeks_params: GreeksParams | None = None,
) -> GreeksResult:
    """Finite-difference Greeks on Monte Carlo prices with common random numbers.

    Every bumped valuation reuses the same seed; when ``params.random_seed`` is
    None one is drawn once and fixed for the whole calculation.
    """
    params = _resolve_params(params)
    if params.random_seed is None:
        seed = int(np.random.SeedSequence().generate_state(1)[0])
        params = dc_replace(params, random_seed=seed)

    pricer = partial(_monte_carlo_value, params=params)
    return finite_difference_greeks(pricer, request, greeks_params)
