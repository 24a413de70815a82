"""Unit tests for candle resampling and multi-timeframe aggregation."""

import numpy as np
import pytest

from signal_engine.analysis import analyze_multiple_timeframes, analyze_timeframe, resample_candles
from signal_engine.config.defaults import TimeframeParams
from signal_engine.errors import ConfigurationError
from signal_engine.models import Direction


class TestResampleCandles:
    """Test bucketing of consecutive candles."""

    def test_full_buckets(self, candle_factory) -> None:
        """Each bucket takes first open, extreme high/low, last close and summed volume."""
        candles = candle_factory([100.0, 102.0, 101.0, 105.0, 103.0, 104.0], volumes=[1, 2, 3, 4, 5, 6])
        resampled = resample_candles(candles, 3)

        assert len(resampled) == 2
        first = resampled[0]
        assert first.open_time == candles[0].open_time
        assert first.close_time == candles[2].close_time
        assert first.open == candles[0].open
        assert first.high == max(c.high for c in candles[:3])
        assert first.low == min(c.low for c in candles[:3])
        assert first.close == 101.0
        assert first.volume == 6.0
        assert resampled[1].volume == 15.0

    def test_partial_last_bucket(self, candle_factory) -> None:
        """A trailing partial bucket is kept."""
        candles = candle_factory([100.0 + i for i in range(12)])
        resampled = resample_candles(candles, 5)

        assert len(resampled) == 3
        assert resampled[-1].close == candles[-1].close
        assert resampled[-1].close_time == candles[-1].close_time

    def test_multiplier_one_copies(self, rising_candles) -> None:
        """Resampling by one keeps every candle."""
        resampled = resample_candles(rising_candles, 1)

        assert resampled == list(rising_candles)
        assert resampled is not rising_candles

    def test_numpy_integer_multiplier(self, candle_factory) -> None:
        """Numpy integers are accepted like ints."""
        candles = candle_factory([100.0, 102.0, 101.0, 105.0, 103.0, 104.0, 106.0])

        assert resample_candles(candles, np.int64(3)) == resample_candles(candles, 3)

    @pytest.mark.parametrize("multiplier", [0, -2, 1.5, True, np.int64(0)])
    def test_invalid_multiplier(self, rising_candles, multiplier) -> None:
        """Multipliers must be positive integers."""
        with pytest.raises(ConfigurationError):
            resample_candles(rising_candles, multiplier)


class TestAnalyzeTimeframe:
    """Test the per-timeframe vote."""

    def test_uptrend(self, rising_candles) -> None:
        """Price above its averages with positive momentum votes UP."""
        vote = analyze_timeframe(rising_candles)

        assert vote.direction == Direction.UP
        assert vote.predicted_change > 0

    def test_downtrend(self, falling_candles) -> None:
        """The mirror image votes DOWN."""
        vote = analyze_timeframe(falling_candles)

        assert vote.direction == Direction.DOWN
        assert vote.predicted_change < 0


class TestAnalyzeMultipleTimeframes:
    """Test the weighted timeframe vote."""

    def test_short_base_series(self, candle_factory) -> None:
        """Fewer than min_base_bars candles give an empty analysis."""
        analysis = analyze_multiple_timeframes(candle_factory([100.0 + i for i in range(150)]))

        assert analysis.dominant_direction == Direction.NEUTRAL
        assert analysis.alignment_score == 0.0
        assert analysis.timeframe_directions == {}

    def test_aligned_uptrend(self, candle_factory) -> None:
        """Every usable timeframe agreeing gives full alignment."""
        candles = candle_factory([100.0 + i for i in range(300)])
        analysis = analyze_multiple_timeframes(candles)

        assert analysis.dominant_direction == Direction.UP
        assert analysis.alignment_score == 100.0
        assert analysis.timeframe_directions == {"1m": Direction.UP, "5m": Direction.UP}
        assert analysis.weighted_confidence > 50.0
        assert analysis.weighted_predicted_change > 0

    def test_too_few_usable_timeframes(self, candle_factory) -> None:
        """Requiring more timeframes than the series supports gives an empty analysis."""
        candles = candle_factory([100.0 + i for i in range(300)])
        analysis = analyze_multiple_timeframes(candles, TimeframeParams(min_timeframes=3))

        assert analysis.dominant_direction == Direction.NEUTRAL
        assert analysis.alignment_score == 0.0

    def test_custom_timeframes(self, candle_factory) -> None:
        """The timeframe list is configurable."""
        candles = candle_factory([300.0 - i for i in range(240)])
        params = TimeframeParams(timeframes=(("base", 1, 1.0), ("x2", 2, 1.0), ("x4", 4, 2.0)))
        analysis = analyze_multiple_timeframes(candles, params)

        assert analysis.dominant_direction == Direction.DOWN
        assert set(analysis.timeframe_directions) == {"base", "x2", "x4"}
