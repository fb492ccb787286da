"""Tests for the dividend yield table."""

import pandas as pd
import pytest

from options_analytics.dividends import (
    DEFAULT_DIVIDEND_YIELD,
    DividendYieldTable,
    normalize_symbol,
)
from options_analytics.exceptions import ValidationError


@pytest.fixture(scope="module")
def bundled() -> DividendYieldTable:
    return DividendYieldTable.default()


@pytest.mark.parametrize(
    "raw, expected",
    [("AAPL", "AAPL"), ("aapl", "AAPL"), ("BRK.B", "BRK"), (" ko ", "KO"), ("msft.o", "MSFT")],
)
def test_normalize_symbol(raw, expected):
    assert normalize_symbol(raw) == expected


class TestBundledTable:
    def test_lookup(self, bundled):
        assert bundled.lookup("KO") == pytest.approx(0.031)
        assert bundled.lookup("ko") == pytest.approx(0.031)
        assert bundled.lookup("TSLA") == 0.0
        assert bundled.lookup("NOPE") is None
        assert bundled.lookup(None) is None
        assert bundled.lookup("") is None

    def test_get_yield_falls_back(self, bundled):
        assert bundled.get_yield("NOPE") == DEFAULT_DIVIDEND_YIELD
        assert bundled.get_yield("VNO") == pytest.approx(0.065)
        # A known zero is not replaced by the default
        assert bundled.get_yield("AMZN") == 0.0

    def test_has_symbol(self, bundled):
        assert bundled.has_symbol("brk.b")
        assert not bundled.has_symbol("NOPE")

    def test_symbols_sorted(self, bundled):
        symbols = bundled.symbols()
        assert symbols == sorted(symbols)
        assert "BRK" in symbols

    def test_stats(self, bundled):
        stats = bundled.stats()
        assert stats.total_symbols == 104
        assert stats.symbols_with_dividends == 94
        assert stats.symbols_without_dividends == 10
        assert stats.max_yield == pytest.approx(0.065)
        assert stats.min_yield == pytest.approx(0.003)
        assert 0.003 <= stats.median_yield <= 0.065
        assert stats.min_yield <= stats.average_yield <= stats.max_yield
        assert stats.default_yield == DEFAULT_DIVIDEND_YIELD

    def test_by_category(self, bundled):
        reits = bundled.by_category("REITs")
        assert isinstance(reits, pd.Series)
        assert reits.index[0] == "VNO"
        assert reits.is_monotonic_decreasing
        assert len(reits) == 12

    def test_unknown_category(self, bundled):
        with pytest.raises(ValidationError, match="Unknown sector"):
            bundled.by_category("crypto")

    def test_read_only(self, bundled):
        with pytest.raises(TypeError):
            bundled.yields["KO"] = 0.5


class TestCustomTable:
    def test_keys_normalised(self, small_dividend_table):
        assert small_dividend_table.lookup("BRK") == 0.01
        assert small_dividend_table.lookup("brk.a") == 0.01

    def test_default_yield(self, small_dividend_table):
        assert small_dividend_table.get_yield("OTHER") == 0.005

    def test_category_skips_unknown_members(self, small_dividend_table):
        series = small_dividend_table.by_category("test")
        assert list(series.index) == ["ACME", "ZERO"]

    def test_source_mapping_is_copied(self):
        source = {"XYZ": 0.01}
        table = DividendYieldTable(yields=source)
        source["XYZ"] = 0.5
        assert table.lookup("XYZ") == 0.01

    def test_stats_with_no_payers(self):
        stats = DividendYieldTable(yields={"A": 0.0}).stats()
        assert stats.symbols_with_dividends == 0
        assert stats.average_yield == 0.0

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"yields": {"A": -0.01}},
            {"yields": {"A": float("nan")}},
            {"yields": {1: 0.01}},
            {"yields": {}, "default_yield": -0.1},
        ],
    )
    def test_invalid(self, kwargs):
        with pytest.raises(ValidationError):
            DividendYieldTable(**kwargs)
