"""Unit tests for Bollinger Bands, true range, ATR and Parabolic SAR."""

import numpy as np
import pytest

from signal_engine.data.models import PriceArrays
from signal_engine.errors import ConfigurationError
from signal_engine.indicators import (
    calculate_atr,
    calculate_bollinger_bands,
    calculate_psar,
    calculate_true_range,
)


class TestBollingerBands:
    """Test band construction."""

    def test_band_ordering(self) -> None:
        """upper >= middle >= lower wherever defined."""
        rng = np.random.default_rng(5)
        closes = 100 + np.cumsum(rng.normal(0, 1, 120))
        bands = calculate_bollinger_bands(closes, 20, 2.0)
        defined = ~np.isnan(bands.middle)

        assert np.count_nonzero(defined) == 101
        assert (bands.upper[defined] >= bands.middle[defined]).all()
        assert (bands.middle[defined] >= bands.lower[defined]).all()

    def test_population_std(self) -> None:
        """Band offset uses the population standard deviation."""
        bands = calculate_bollinger_bands([1.0, 2.0, 3.0, 4.0], 4, 2.0)
        std = np.std([1.0, 2.0, 3.0, 4.0])

        assert bands.middle[-1] == pytest.approx(2.5)
        assert bands.upper[-1] == pytest.approx(2.5 + 2 * std)
        assert bands.lower[-1] == pytest.approx(2.5 - 2 * std)

    def test_constant_series_has_zero_width(self) -> None:
        """Bands collapse onto the middle for a flat series."""
        bands = calculate_bollinger_bands([50.0] * 30, 20, 2.0)

        assert np.allclose(bands.width[19:], 0.0)

    def test_negative_multiplier_rejected(self) -> None:
        """std_dev must be non-negative."""
        with pytest.raises(ConfigurationError):
            calculate_bollinger_bands([1.0] * 30, 20, -1.0)


class TestTrueRange:
    """Test true range per bar."""

    def test_gap_uses_previous_close(self) -> None:
        """A gap over the previous close widens the range."""
        tr = calculate_true_range([10.0, 12.0], [9.0, 11.0], [9.5, 11.5])

        assert tr[0] == pytest.approx(1.0)
        assert tr[1] == pytest.approx(2.5)


class TestATR:
    """Test the Wilder-smoothed average true range."""

    def test_steady_trend(self, rising_candles) -> None:
        """A unit-step trend settles at a true range of 2."""
        atr = calculate_atr(rising_candles, 14)

        assert np.isnan(atr[:13]).all()
        assert atr[13] == pytest.approx(27.0 / 14.0)
        assert atr[-1] == pytest.approx(2.0, abs=1e-2)

    def test_accepts_price_arrays(self, rising_candles) -> None:
        """Candles and their column view give the same result."""
        from_candles = calculate_atr(rising_candles, 14)
        from_arrays = calculate_atr(PriceArrays.from_candles(rising_candles), 14)

        assert np.allclose(from_candles[13:], from_arrays[13:])

    def test_empty_input(self) -> None:
        """No candles, no ATR."""
        assert len(calculate_atr([], 14)) == 0

    def test_flat_market_is_zero(self, flat_candles) -> None:
        """Bars without range have zero ATR."""
        assert calculate_atr(flat_candles, 14)[-1] == 0.0


class TestParabolicSAR:
    """Test the stop-and-reverse series."""

    def test_sustained_uptrend_ends_long(self, rising_candles) -> None:
        """In a steady rise the SAR trails below the lows."""
        arrays = PriceArrays.from_candles(rising_candles)
        psar = calculate_psar(arrays.highs, arrays.lows)

        assert psar.trend[-1] == 1.0
        assert psar.sar[-1] < arrays.lows[-1]

    def test_trend_values(self, noisy_candles) -> None:
        """Trend is always +1 or -1 once defined."""
        arrays = PriceArrays.from_candles(noisy_candles)
        psar = calculate_psar(arrays.highs, arrays.lows, 0.02, 0.2)

        assert set(np.unique(psar.trend)) <= {1.0, -1.0}
        assert not np.isnan(psar.sar).any()

    def test_single_bar_is_undefined(self) -> None:
        """At least two bars are needed to pick a direction."""
        psar = calculate_psar([10.0], [9.0])

        assert np.isnan(psar.sar).all()
        assert np.isnan(psar.trend).all()
