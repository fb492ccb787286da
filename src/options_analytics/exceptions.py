"""Custom exception hierarchy for the options_analytics library.

All library-specific exceptions inherit from :class:`OptionsAnalyticsError`,
enabling callers to catch *any* library error with a single ``except`` clause::

    try:
        pv = binomial_price(request, LatticeParams(num_steps=200))
    except OptionsAnalyticsError as exc:
        log.error("Library error: %s", exc)

Non-convergence (bisection running out of iterations, adaptive Monte Carlo
exhausting its budget) is never an exception: results carry explicit
``converged`` / ``saturated`` flags instead.
"""

from __future__ import annotations


class OptionsAnalyticsError(Exception):
    """Base exception for all library errors."""


# ── Input validation ────────────────────────────────────────────────


class ValidationError(OptionsAnalyticsError):
    """Invalid input values (non-positive spot/strike/time/vol, unknown option type, etc.)."""


class ConfigurationError(OptionsAnalyticsError):
    """Wrong types passed to a public API (e.g. a non-callable pricer or mismatched params)."""


# ── Pricing / numerical issues ──────────────────────────────────────


class ArbitrageError(OptionsAnalyticsError):
    """Observed option price violates a static no-arbitrage bound (e.g. below intrinsic value)."""


class NumericalError(OptionsAnalyticsError):
    """Model parameters are numerically incompatible (e.g. lattice probability outside [0, 1])."""


# ── Execution control ───────────────────────────────────────────────


class SimulationCancelledError(OptionsAnalyticsError):
    """A Monte Carlo run was cancelled or passed its deadline before completing."""
