"""Read-only table of continuous dividend yields by ticker symbol."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
import logging

import numpy as np
import pandas as pd

from .exceptions import ValidationError

logger = logging.getLogger(__name__)

__all__ = [
    "DEFAULT_DIVIDEND_YIELD",
    "DividendStats",
    "DividendYieldTable",
    "normalize_symbol",
]

DEFAULT_DIVIDEND_YIELD = 0.015

# Annual yields, mid-2024 snapshot
_BUNDLED_YIELDS = {
    # Index / ETF
    "SPY": 0.0133, "QQQ": 0.0065, "IWM": 0.0120, "DIA": 0.0165, "EFA": 0.0280, "EEM": 0.0310,
    # Technology
    "AAPL": 0.0045, "MSFT": 0.0072, "GOOGL": 0.0000, "GOOG": 0.0000, "AMZN": 0.0000,
    "META": 0.0045, "TSLA": 0.0000, "NVDA": 0.0035, "NFLX": 0.0000, "CRM": 0.0000,
    "ORCL": 0.0130, "ADBE": 0.0000, "INTC": 0.0049, "CSCO": 0.0280, "IBM": 0.0475,
    # Financials
    "JPM": 0.0260, "BAC": 0.0280, "WFC": 0.0290, "GS": 0.0260, "MS": 0.0340, "C": 0.0380,
    "BRK.B": 0.0000, "AXP": 0.0200, "BLK": 0.0230, "SCHW": 0.0190, "USB": 0.0420,
    "PNC": 0.0580,
    # Healthcare
    "JNJ": 0.0290, "PFE": 0.0580, "UNH": 0.0150, "MRK": 0.0280, "CVS": 0.0380,
    "ABBV": 0.0350, "TMO": 0.0030, "DHR": 0.0030, "BMY": 0.0540, "GILD": 0.0380,
    "AMGN": 0.0280, "VRTX": 0.0000,
    # Consumer
    "KO": 0.0310, "PEP": 0.0280, "WMT": 0.0230, "PG": 0.0240, "MCD": 0.0200, "NKE": 0.0120,
    "SBUX": 0.0230, "TGT": 0.0280, "HD": 0.0240, "LOW": 0.0180, "COST": 0.0070,
    # Industrial
    "BA": 0.0220, "CAT": 0.0220, "GE": 0.0350, "MMM": 0.0590, "HON": 0.0200, "UPS": 0.0380,
    "RTX": 0.0240, "LMT": 0.0260, "NOC": 0.0150, "FDX": 0.0150, "DE": 0.0200, "EMR": 0.0320,
    # Energy
    "XOM": 0.0340, "CVX": 0.0310, "COP": 0.0200, "EOG": 0.0240, "SLB": 0.0170, "MPC": 0.0540,
    "VLO": 0.0590, "PSX": 0.0350, "HES": 0.0100, "OXY": 0.0130, "DVN": 0.0100, "FANG": 0.0040,
    # Utilities
    "NEE": 0.0280, "SO": 0.0390, "DUK": 0.0380, "AEP": 0.0320, "EXC": 0.0340, "XEL": 0.0270,
    "PCG": 0.0000, "ED": 0.0370, "ETR": 0.0380, "ES": 0.0270, "FE": 0.0370, "AES": 0.0320,
    # REITs
    "VNO": 0.0650, "PLD": 0.0310, "AMT": 0.0280, "CCI": 0.0320, "EQIX": 0.0190, "SPG": 0.0580,
    "O": 0.0440, "WELL": 0.0330, "PSA": 0.0350, "EXR": 0.0240, "AVB": 0.0320, "UDR": 0.0360,
}

_BUNDLED_CATEGORIES = {
    "tech": ("AAPL", "MSFT", "GOOGL", "GOOG", "AMZN", "META", "TSLA", "NVDA", "NFLX", "CRM",
             "ORCL", "ADBE", "INTC", "CSCO", "IBM"),
    "finance": ("JPM", "BAC", "WFC", "GS", "MS", "C", "BRK.B", "AXP", "BLK", "SCHW", "USB",
                "PNC"),
    "healthcare": ("JNJ", "PFE", "UNH", "MRK", "CVS", "ABBV", "TMO", "DHR", "BMY", "GILD",
                   "AMGN", "VRTX"),
    "consumer": ("KO", "PEP", "WMT", "PG", "MCD", "NKE", "SBUX", "TGT", "HD", "LOW", "COST"),
    "industrial": ("BA", "CAT", "GE", "MMM", "HON", "UPS", "RTX", "LMT", "NOC", "FDX", "DE",
                   "EMR"),
    "energy": ("XOM", "CVX", "COP", "EOG", "SLB", "MPC", "VLO", "PSX", "HES", "OXY", "DVN",
               "FANG"),
    "utilities": ("NEE", "SO", "DUK", "AEP", "EXC", "XEL", "PCG", "ED", "ETR", "ES", "FE",
                  "AES"),
    "reits": ("VNO", "PLD", "AMT", "CCI", "EQIX", "SPG", "O", "WELL", "PSA", "EXR", "AVB",
              "UDR"),
}


def normalize_symbol(symbol: str) -> str:
    """Drop any share-class / exchange suffix after '.', then upper-case and strip."""
    return symbol.split(".")[0].upper().strip()


@dataclass(frozen=True, slots=True)
class DividendStats:
    """Summary of a dividend table; averages and minimum cover non-zero yields only."""

    total_symbols: int
    symbols_with_dividends: int
    symbols_without_dividends: int
    average_yield: float
    median_yield: float
    max_yield: float
    min_yield: float
    default_yield: float


@dataclass(frozen=True, slots=True)
class DividendYieldTable:
    """Immutable symbol -> dividend yield mapping with a flat fallback.

    Keys are normalised with :func:`normalize_symbol` on construction, so
    ``"brk.b"`` and ``"BRK"`` resolve to the same entry. The table is safe to
    share between threads.

    Attributes
    ==========
    yields:
        Mapping of symbol to annual continuous yield (>= 0).
    default_yield:
        Yield returned by ``get_yield`` for unknown symbols.
    categories:
        Optional mapping of sector name to member symbols.
    """

    yields: Mapping[str, float]
    default_yield: float = DEFAULT_DIVIDEND_YIELD
    categories: Mapping[str, tuple[str, ...]] = field(default_factory=dict)

    def __post_init__(self):
        cleaned: dict[str, float] = {}
        for symbol, value in self.yields.items():
            if not isinstance(symbol, str):
                raise ValidationError(f"symbols must be str, got {type(symbol).__name__}")
            value = float(value)
            if not np.isfinite(value) or value < 0:
                raise ValidationError(f"dividend yield for {symbol!r} must be >= 0, got {value}")
            cleaned[normalize_symbol(symbol)] = value
        if not np.isfinite(self.default_yield) or self.default_yield < 0:
            raise ValidationError(f"default_yield must be >= 0, got {self.default_yield}")

        groups = {
            name.lower(): tuple(normalize_symbol(s) for s in members)
            for name, members in self.categories.items()
        }
        object.__setattr__(self, "yields", MappingProxyType(cleaned))
        object.__setattr__(self, "default_yield", float(self.default_yield))
        object.__setattr__(self, "categories", MappingProxyType(groups))

    @classmethod
    def default(cls) -> "DividendYieldTable":
        """The bundled mid-2024 snapshot of large-cap US yields."""
        return cls(yields=_BUNDLED_YIELDS, categories=_BUNDLED_CATEGORIES)

    def lookup(self, symbol: str | None) -> float | None:
        """Yield for ``symbol``, or None if unknown."""
        if not symbol or not isinstance(symbol, str):
            return None
        return self.yields.get(normalize_symbol(symbol))

    def get_yield(self, symbol: str | None) -> float:
        found = self.lookup(symbol)
        if found is None:
            logger.debug("No dividend data for %r; using default %.4f", symbol, self.default_yield)
            return self.default_yield
        return found

    def has_symbol(self, symbol: str | None) -> bool:
        return self.lookup(symbol) is not None

    def symbols(self) -> list[str]:
        return sorted(self.yields)

    def by_category(self, sector: str) -> pd.Series:
        """Yields of a sector's known members, highest first."""
        members = self.categories.get(sector.lower())
        if members is None:
            available = ", ".join(self.categories)
            raise ValidationError(f"Unknown sector: {sector}. Available: {available}")
        data = {s: self.yields[s] for s in members if s in self.yields}
        series = pd.Series(data, dtype=float, name="dividend_yield")
        return series.sort_values(ascending=False, kind="stable")

    def stats(self) -> DividendStats:
        values = np.fromiter(self.yields.values(), dtype=float)
        paying = np.sort(values[values > 0])
        if paying.size:
            average = float(paying.mean())
            median = float(paying[paying.size // 2])
            minimum = float(paying[0])
        else:
            average = median = minimum = 0.0
        return DividendStats(
            total_symbols=int(values.size),
            symbols_with_dividends=int(paying.size),
            symbols_without_dividends=int(values.size - paying.size),
            average_yield=average,
            median_yield=median,
            max_yield=float(values.max()) if values.size else 0.0,
            min_yield=minimum,
            default_yield=self.default_yield,
        )
