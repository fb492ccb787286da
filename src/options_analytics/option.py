"""High-level option object with convenient pricing, Greeks and summaries."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field, replace as dc_replace
from functools import partial
from types import MappingProxyType
import logging

import pandas as pd

from .dividends import DEFAULT_DIVIDEND_YIELD, DividendYieldTable
from .enums import ExerciseType, Moneyness, OptionType, PricingModel
from .exceptions import ConfigurationError, ValidationError
from .valuation.binomial import binomial_price, lattice_min_volatility
from .valuation.bsm import bsm_greeks, bsm_price
from .valuation.core import GreeksResult, PricingRequest, _coerce_enum, _coerce_float
from .valuation.greeks import finite_difference_greeks
from .valuation.implied_volatility import ImpliedVolResult, implied_volatility
from .valuation.jump_diffusion import (
    JumpSensitivities,
    jump_diffusion_greeks,
    jump_diffusion_price,
    jump_sensitivities,
)
from .valuation.monte_carlo import (
    AdaptiveMonteCarloResult,
    MonteCarloResult,
    _monte_carlo_value,
    adaptive_monte_carlo_price,
    monte_carlo_greeks,
    monte_carlo_price,
)
from .valuation.params import (
    GreeksParams,
    ImpliedVolatilityParams,
    JumpDiffusionParams,
    LatticeParams,
    MonteCarloParams,
)
from .valuation.sensitivity import SensitivityReport, sensitivity_analysis
from .valuation.trinomial import trinomial_price

logger = logging.getLogger(__name__)

__all__ = [
    "OPTIMAL_PARAMETERS",
    "OptionSummary",
    "VanillaOption",
    "price_option",
    "analyze_option",
    "analyze_portfolio",
]

OPTIMAL_PARAMETERS = MappingProxyType(
    {
        "risk_free_rate": 0.04,
        "day_count": 252,
        "steps": 50,
        "exercise_type": ExerciseType.AMERICAN,
        "tolerance": 1.0e-6,
        "max_iterations": 100,
    }
)

ATM_BAND = 0.025
SUMMARY_GREEKS_STEPS = 100
IMPLIED_VOL_STEPS = 100

_PricerFactory = Callable[[int, JumpDiffusionParams | None], Callable[[PricingRequest], float]]

# ── Pricer registry ─────────────────────────────────────────────────
# Maps PricingModel → factory(num_steps, jump_params) returning a pricer callable.
_PRICER_REGISTRY: dict[PricingModel, _PricerFactory] = {
    PricingModel.BLACK_SCHOLES: lambda steps, jump_params: bsm_price,
    PricingModel.BINOMIAL: lambda steps, jump_params: partial(
        binomial_price, params=LatticeParams(num_steps=steps)
    ),
    PricingModel.TRINOMIAL: lambda steps, jump_params: partial(
        trinomial_price, params=LatticeParams(num_steps=steps)
    ),
    PricingModel.JUMP_DIFFUSION: lambda steps, jump_params: partial(
        jump_diffusion_price, params=jump_params
    ),
    PricingModel.MONTE_CARLO: lambda steps, jump_params: _monte_carlo_value,
}

_LATTICE_MODELS = (PricingModel.BINOMIAL, PricingModel.TRINOMIAL)


def _pricer_for(
    model: PricingModel | str,
    steps: int,
    jump_params: JumpDiffusionParams | None = None,
) -> Callable[[PricingRequest], float]:
    """Pricer for ``model``; ``jump_params`` is used by the jump-diffusion model only."""
    model = _coerce_enum(model, PricingModel, "model")
    return _PRICER_REGISTRY[model](steps, jump_params)


@dataclass(frozen=True, slots=True)
class OptionSummary:
    """Snapshot of an option's prices, characteristics and (binomial) Greeks."""

    symbol: str
    option_type: OptionType
    exercise_type: ExerciseType
    parameters: Mapping[str, float]
    binomial_price: float
    black_scholes_price: float
    intrinsic_value: float
    time_value: float
    moneyness: float
    is_itm: bool
    is_atm: bool
    is_otm: bool
    classification: Moneyness
    greeks: GreeksResult

    def to_record(self) -> dict[str, object]:
        """Flat dict suitable for one DataFrame row."""
        record: dict[str, object] = {
            "symbol": self.symbol,
            "option_type": self.option_type.value,
            "exercise_type": self.exercise_type.value,
        }
        record.update(self.parameters)
        record.update(
            {
                "binomial_price": self.binomial_price,
                "black_scholes_price": self.black_scholes_price,
                "intrinsic_value": self.intrinsic_value,
                "time_value": self.time_value,
                "moneyness": self.moneyness,
                "classification": self.classification.value,
            }
        )
        record.update(self.greeks.as_dict())
        return record


@dataclass(frozen=True, slots=True)
class VanillaOption:
    """A vanilla equity option quoted in days to expiry.

    Attributes
    ==========
    spot, strike:
        Underlying price and strike (> 0).
    days_to_expiry:
        Days until expiry (> 0); ``time_to_expiry = days_to_expiry / day_count``.
    volatility:
        Annualized volatility (> 0).
    option_type:
        "call" / "put" or OptionType.
    risk_free_rate:
        Continuously compounded rate. Default: 0.04.
    dividend_yield:
        Explicit yield. When None, the yield is looked up by ``symbol`` in
        ``dividend_table`` (the bundled table if none is given), falling back
        to 1.5%.
    symbol:
        Optional ticker, used only for the dividend lookup and reporting.
    day_count:
        Days per year. Default: 252 (trading days).
    exercise_type:
        Default: AMERICAN.
    dividend_table:
        Injected read-only dividend table.
    """

    spot: float
    strike: float
    days_to_expiry: float
    volatility: float
    option_type: OptionType | str
    risk_free_rate: float = OPTIMAL_PARAMETERS["risk_free_rate"]
    dividend_yield: float | None = None
    symbol: str | None = None
    day_count: int = OPTIMAL_PARAMETERS["day_count"]
    exercise_type: ExerciseType | str = OPTIMAL_PARAMETERS["exercise_type"]
    dividend_table: DividendYieldTable | None = field(
        default=None, repr=False, compare=False, hash=False
    )

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "option_type", _coerce_enum(self.option_type, OptionType, "option_type")
        )
        object.__setattr__(
            self,
            "exercise_type",
            _coerce_enum(self.exercise_type, ExerciseType, "exercise_type"),
        )
        object.__setattr__(
            self, "days_to_expiry", _coerce_float(self.days_to_expiry, "days_to_expiry")
        )
        if self.days_to_expiry <= 0:
            raise ValidationError(f"days_to_expiry must be positive, got {self.days_to_expiry}")
        if isinstance(self.day_count, bool) or not isinstance(self.day_count, int):
            raise ValidationError(f"day_count must be an integer, got {self.day_count!r}")
        if self.day_count <= 0:
            raise ValidationError(f"day_count must be positive, got {self.day_count}")
        if self.symbol is not None and not isinstance(self.symbol, str):
            raise ConfigurationError(f"symbol must be str, got {type(self.symbol).__name__}")
        if self.dividend_table is not None and not isinstance(
            self.dividend_table, DividendYieldTable
        ):
            raise ConfigurationError(
                f"dividend_table must be DividendYieldTable, got "
                f"{type(self.dividend_table).__name__}"
            )

        if self.dividend_yield is None:
            if self.symbol:
                table = self.dividend_table or DividendYieldTable.default()
                resolved = table.get_yield(self.symbol)
            else:
                resolved = DEFAULT_DIVIDEND_YIELD
            object.__setattr__(self, "dividend_yield", resolved)

        # Validates the remaining market inputs
        request = self.to_request()
        for name in ("spot", "strike", "volatility", "risk_free_rate", "dividend_yield"):
            object.__setattr__(self, name, getattr(request, name))

    # ── derived inputs ──────────────────────────────────────────────

    @property
    def time_to_expiry(self) -> float:
        return self.days_to_expiry / self.day_count

    def to_request(self, exercise_type: ExerciseType | None = None) -> PricingRequest:
        """PricingRequest for this option (optionally overriding exercise style)."""
        return PricingRequest(
            spot=self.spot,
            strike=self.strike,
            time_to_expiry=self.time_to_expiry,
            risk_free_rate=self.risk_free_rate,
            volatility=self.volatility,
            dividend_yield=self.dividend_yield,
            option_type=self.option_type,
            exercise_type=exercise_type or self.exercise_type,
        )

    def replace(self, **kwargs: object) -> "VanillaOption":
        return dc_replace(self, **kwargs)

    # ── pricing ─────────────────────────────────────────────────────

    def black_scholes_price(self) -> float:
        """European closed-form value (exercise style ignored)."""
        return bsm_price(self.to_request())

    def analytic_greeks(self) -> GreeksResult:
        return bsm_greeks(self.to_request())

    def binomial_price(self, steps: int = OPTIMAL_PARAMETERS["steps"]) -> float:
        return binomial_price(self.to_request(), LatticeParams(num_steps=steps))

    def trinomial_price(self, steps: int = OPTIMAL_PARAMETERS["steps"]) -> float:
        return trinomial_price(self.to_request(), LatticeParams(num_steps=steps))

    def jump_diffusion_price(self, params: JumpDiffusionParams | None = None) -> float:
        return jump_diffusion_price(self.to_request(), params)

    def jump_diffusion_greeks(
        self,
        params: JumpDiffusionParams | None = None,
        greeks_params: GreeksParams | None = None,
    ) -> GreeksResult:
        return jump_diffusion_greeks(self.to_request(), params, greeks_params)

    def jump_sensitivities(
        self, params: JumpDiffusionParams | None = None, shift: float = 0.01
    ) -> JumpSensitivities:
        """Sensitivities of the jump-diffusion value to lambda, mu_J and sigma_J."""
        return jump_sensitivities(self.to_request(), params, shift)

    def monte_carlo_price(
        self, params: MonteCarloParams | None = None, **kwargs
    ) -> MonteCarloResult:
        """Monte Carlo value; keyword arguments (cancel_event, deadline) are passed through."""
        return monte_carlo_price(self.to_request(), params, **kwargs)

    def adaptive_monte_carlo_price(
        self, params: MonteCarloParams | None = None, **kwargs
    ) -> AdaptiveMonteCarloResult:
        return adaptive_monte_carlo_price(self.to_request(), params, **kwargs)

    def price(
        self,
        model: PricingModel | str = PricingModel.BINOMIAL,
        steps: int = OPTIMAL_PARAMETERS["steps"],
        jump_params: JumpDiffusionParams | None = None,
    ) -> float:
        """Value under ``model``.

        ``steps`` applies to the lattice models and ``jump_params`` to jump
        diffusion; both are ignored otherwise.
        """
        return float(_pricer_for(model, steps, jump_params)(self.to_request()))

    def greeks(
        self,
        model: PricingModel | str = PricingModel.BINOMIAL,
        steps: int = SUMMARY_GREEKS_STEPS,
        greeks_params: GreeksParams | None = None,
        jump_params: JumpDiffusionParams | None = None,
    ) -> GreeksResult:
        """Greeks under ``model``: closed form for Black-Scholes, finite differences otherwise."""
        model = _coerce_enum(model, PricingModel, "model")
        request = self.to_request()
        if model is PricingModel.BLACK_SCHOLES:
            return bsm_greeks(request)
        if model is PricingModel.JUMP_DIFFUSION:
            return jump_diffusion_greeks(request, jump_params, greeks_params)
        if model is PricingModel.MONTE_CARLO:
            return monte_carlo_greeks(request, greeks_params=greeks_params)
        return finite_difference_greeks(_pricer_for(model, steps), request, greeks_params)

    def implied_volatility(
        self,
        market_price: float,
        model: PricingModel | str = PricingModel.BINOMIAL,
        steps: int = IMPLIED_VOL_STEPS,
        params: ImpliedVolatilityParams | None = None,
        jump_params: JumpDiffusionParams | None = None,
    ) -> ImpliedVolResult:
        """Volatility that reproduces ``market_price`` under ``model``.

        Lattice models raise the lower bracket to just above the smallest
        volatility for which the tree probabilities stay valid.
        """
        model = _coerce_enum(model, PricingModel, "model")
        if model is PricingModel.MONTE_CARLO:
            raise ValidationError("implied volatility requires a deterministic pricing model")
        if params is None:
            params = ImpliedVolatilityParams(
                tolerance=OPTIMAL_PARAMETERS["tolerance"],
                max_iterations=OPTIMAL_PARAMETERS["max_iterations"],
            )
        request = self.to_request()

        if model in _LATTICE_MODELS:
            sigma_min = lattice_min_volatility(request, steps) * 1.01
            if sigma_min > params.min_vol:
                params = dc_replace(params, min_vol=sigma_min)

        pricer = _pricer_for(model, steps, jump_params)
        return implied_volatility(market_price, request, pricer, params)

    def sensitivity_analysis(
        self, steps: int = OPTIMAL_PARAMETERS["steps"], **kwargs
    ) -> SensitivityReport:
        """Binomial scenario grid; keyword arguments go to ``valuation.sensitivity``."""
        pricer = _pricer_for(PricingModel.BINOMIAL, steps)
        return sensitivity_analysis(pricer, self.to_request(), **kwargs)

    # ── characteristics ─────────────────────────────────────────────

    @property
    def intrinsic_value(self) -> float:
        return self.to_request().intrinsic_value

    @property
    def moneyness(self) -> float:
        return self.spot / self.strike

    def time_value(self, steps: int = OPTIMAL_PARAMETERS["steps"]) -> float:
        return self.binomial_price(steps) - self.intrinsic_value

    @property
    def is_itm(self) -> bool:
        return self.intrinsic_value > 0

    @property
    def is_atm(self) -> bool:
        return 1.0 - ATM_BAND <= self.moneyness <= 1.0 + ATM_BAND

    @property
    def is_otm(self) -> bool:
        return not self.is_itm and not self.is_atm

    @property
    def classification(self) -> Moneyness:
        if self.is_atm:
            return Moneyness.ATM
        if self.is_itm:
            return Moneyness.ITM
        return Moneyness.OTM

    def summary(self) -> OptionSummary:
        binomial = self.binomial_price()
        intrinsic = self.intrinsic_value
        return OptionSummary(
            symbol=self.symbol or "UNKNOWN",
            option_type=self.option_type,
            exercise_type=self.exercise_type,
            parameters=MappingProxyType(
                {
                    "spot": self.spot,
                    "strike": self.strike,
                    "days_to_expiry": self.days_to_expiry,
                    "time_to_expiry": self.time_to_expiry,
                    "volatility": self.volatility,
                    "risk_free_rate": self.risk_free_rate,
                    "dividend_yield": self.dividend_yield,
                    "day_count": self.day_count,
                }
            ),
            binomial_price=binomial,
            black_scholes_price=self.black_scholes_price(),
            intrinsic_value=intrinsic,
            time_value=binomial - intrinsic,
            moneyness=self.moneyness,
            is_itm=self.is_itm,
            is_atm=self.is_atm,
            is_otm=self.is_otm,
            classification=self.classification,
            greeks=self.greeks(PricingModel.BINOMIAL, steps=SUMMARY_GREEKS_STEPS),
        )


# ── module-level helpers ────────────────────────────────────────────


def price_option(steps: int = OPTIMAL_PARAMETERS["steps"], **kwargs) -> float:
    """Binomial price of ``VanillaOption(**kwargs)``."""
    return VanillaOption(**kwargs).binomial_price(steps)


def analyze_option(**kwargs) -> OptionSummary:
    return VanillaOption(**kwargs).summary()


def analyze_portfolio(options: Iterable[VanillaOption | Mapping[str, object]]) -> pd.DataFrame:
    """One summary row per option.

    Portfolio totals are plain column sums, e.g.
    ``df[["binomial_price", "delta", "vega"]].sum()``.
    """
    rows = []
    for item in options:
        if isinstance(item, VanillaOption):
            option = item
        elif isinstance(item, Mapping):
            option = VanillaOption(**item)
        else:
            raise ConfigurationError(
                f"portfolio entries must be VanillaOption or mappings, got {type(item).__name__}"
            )
        rows.append(option.summary().to_record())
    logger.debug("Analyzed portfolio of %d options", len(rows))
    return pd.DataFrame(rows)

