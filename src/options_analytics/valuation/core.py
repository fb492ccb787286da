from dataclasses import asdict, dataclass, replace as dc_replace
import numpy as np

from ..enums import ExerciseType, OptionType
from ..exceptions import ConfigurationError, ValidationError
from ..utils import intrinsic_value


def _coerce_enum(value, enum_cls, field_name: str):
    """Accept an enum member or its (case-insensitive) string value."""
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        try:
            return enum_cls(value.strip().lower())
        except ValueError as exc:
            allowed = ", ".join(repr(m.value) for m in enum_cls)
            raise ValidationError(
                f"{field_name} must be one of {allowed}, got {value!r}"
            ) from exc
    raise ValidationError(
        f"{field_name} must be {enum_cls.__name__} or str, got {type(value).__name__}"
    )


def _coerce_float(value, field_name: str) -> float:
    if isinstance(value, bool):
        raise ConfigurationError(f"{field_name} must be numeric, got bool")
    try:
        out = float(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"{field_name} must be numeric") from exc
    if not np.isfinite(out):
        raise ValidationError(f"{field_name} must be finite, got {value!r}")
    return out


@dataclass(frozen=True, slots=True)
class PricingRequest:
    """Inputs for a single vanilla option valuation.

    Constructed fresh per call and never mutated; pricers derive bumped
    requests through :meth:`replace`, which re-runs validation.

    Attributes
    ==========
    spot:
        Current underlying price S (> 0).
    strike:
        Strike price K (> 0).
    time_to_expiry:
        Time to expiry T in years (> 0).
    risk_free_rate:
        Continuously compounded risk-free rate r.
    volatility:
        Annualized volatility sigma (> 0).
    dividend_yield:
        Continuous dividend yield q (>= 0). Default: 0.
    option_type:
        OptionType.CALL / OptionType.PUT (or "call" / "put").
    exercise_type:
        ExerciseType.EUROPEAN / ExerciseType.AMERICAN. Default: EUROPEAN.
        Only the lattice pricers honour early exercise.
    """

    spot: float
    strike: float
    time_to_expiry: float
    risk_free_rate: float
    volatility: float
    dividend_yield: float = 0.0
    option_type: OptionType = OptionType.CALL
    exercise_type: ExerciseType = ExerciseType.EUROPEAN

    def __post_init__(self) -> None:
        for name in (
            "spot",
            "strike",
            "time_to_expiry",
            "risk_free_rate",
            "volatility",
            "dividend_yield",
        ):
            object.__setattr__(self, name, _coerce_float(getattr(self, name), name))

        if self.spot <= 0.0:
            raise ValidationError(f"spot must be positive, got {self.spot}")
        if self.strike <= 0.0:
            raise ValidationError(f"strike must be positive, got {self.strike}")
        if self.time_to_expiry <= 0.0:
            raise ValidationError(
                f"time_to_expiry must be positive, got {self.time_to_expiry}"
            )
        if self.volatility <= 0.0:
            raise ValidationError(f"volatility must be positive, got {self.volatility}")
        if self.dividend_yield < 0.0:
            raise ValidationError(
                f"dividend_yield must be non-negative, got {self.dividend_yield}"
            )

        object.__setattr__(
            self, "option_type", _coerce_enum(self.option_type, OptionType, "option_type")
        )
        object.__setattr__(
            self,
            "exercise_type",
            _coerce_enum(self.exercise_type, ExerciseType, "exercise_type"),
        )

    def replace(self, **kwargs: object) -> "PricingRequest":
        """Create a new PricingRequest with modified fields.

        This is used for bump-and-revalue calculations (Greeks, jump series
        terms, implied volatility) without mutating the original object.
        """
        return dc_replace(self, **kwargs)

    @property
    def is_call(self) -> bool:
        return self.option_type is OptionType.CALL

    @property
    def intrinsic_value(self) -> float:
        return intrinsic_value(self.option_type, self.spot, self.strike)


@dataclass(frozen=True, slots=True)
class GreeksResult:
    """Option sensitivities.

    theta is per calendar day, vega per 1 volatility point and rho per
    1 percentage point of the risk-free rate.
    """

    delta: float
    gamma: float
    theta: float
    vega: float
    rho: float

    def as_dict(self) -> dict[str, float]:
        return asdict(self)
