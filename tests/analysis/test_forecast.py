"""Unit tests for the momentum forecaster and its noise extension."""

import numpy as np
import pytest

from signal_engine.analysis import (
    MomentumForecaster,
    create_random_source,
    extend_with_noise,
    predict_price_movement,
)
from signal_engine.config.defaults import ForecastParams
from signal_engine.indicators import DivergenceReport
from signal_engine.models import Direction, MarketPhase, MarketRegime, RegimeType, SignalType, TimeframeAnalysis


class TestPredictPriceMovement:
    """Test the single-pass momentum estimate."""

    def test_insufficient_bars(self) -> None:
        """Fewer than min_bars closes give a zero-confidence NEUTRAL."""
        closes = np.arange(100.0, 120.0)
        result = predict_price_movement(closes, np.ones(20))

        assert result.direction == Direction.NEUTRAL
        assert result.confidence == 0.0
        assert result.predicted_change == 0.0

    def test_flat_series_is_neutral(self) -> None:
        """No momentum, acceleration or volume change predicts nothing."""
        result = predict_price_movement(np.full(40, 100.0), np.full(40, 500.0))

        assert result.direction == Direction.NEUTRAL
        assert result.confidence == 0.0
        assert result.predicted_change == 0.0

    def test_rising_series_is_up(self) -> None:
        """Steady gains predict a positive move above the dead zone."""
        result = predict_price_movement(np.arange(100.0, 140.0), np.full(40, 500.0))

        assert result.direction == Direction.UP
        assert result.predicted_change > 0.08
        assert 50.0 < result.confidence <= 100.0

    def test_falling_series_is_down(self) -> None:
        """Steady losses predict a negative move."""
        result = predict_price_movement(np.arange(140.0, 100.0, -1.0), np.full(40, 500.0))

        assert result.direction == Direction.DOWN
        assert result.predicted_change < -0.08

    def test_volume_drying_up_opposes_momentum(self) -> None:
        """Zero recent volume pulls the estimate fully against the trend."""
        closes = np.arange(100.0, 140.0)
        steady = predict_price_movement(closes, np.full(40, 500.0))
        volumes = np.full(40, 500.0)
        volumes[-3:] = 0.0
        dried_up = predict_price_movement(closes, volumes)

        assert dried_up.predicted_change == pytest.approx(steady.predicted_change - 20.0, abs=0.02)
        assert dried_up.direction == Direction.DOWN

    def test_confidence_is_integer_valued(self) -> None:
        """Confidence is rounded to whole points."""
        rng = np.random.default_rng(9)
        closes = 100 + np.cumsum(rng.normal(0, 1, 60))
        result = predict_price_movement(closes, 1000 + rng.random(60) * 100)

        assert result.confidence == round(result.confidence)
        assert 0.0 <= result.confidence <= 100.0


class TestExtendWithNoise:
    """Test synthetic bar generation."""

    def test_draw_order_and_shape(self, rising_candles, fixed_random) -> None:
        """Five bars with four draws each; a midpoint draw keeps the close."""
        rng = fixed_random(0.5)
        extended = extend_with_noise(rising_candles, rng)
        last = rising_candles[-1]
        synthetic = extended[len(rising_candles):]

        assert len(extended) == len(rising_candles) + 5
        assert rng.draws == 20
        for i, candle in enumerate(synthetic, start=1):
            assert candle.close == pytest.approx(last.close)
            assert candle.high == pytest.approx(last.close * 1.005)
            assert candle.low == pytest.approx(last.close * 0.995)
            assert candle.volume == pytest.approx(last.volume)
            assert candle.open_time == last.open_time + 60_000 * i

    def test_input_is_not_modified(self, rising_candles, fixed_random) -> None:
        """The input series is copied, not extended in place."""
        snapshot = list(rising_candles)
        extend_with_noise(rising_candles, fixed_random(0.9))

        assert rising_candles == snapshot

    def test_synthetic_bars_are_consistent(self, noisy_candles) -> None:
        """Every synthetic bar keeps low <= open/close <= high."""
        extended = extend_with_noise(noisy_candles, create_random_source(1))

        for candle in extended[-5:]:
            assert candle.low <= min(candle.open, candle.close)
            assert max(candle.open, candle.close) <= candle.high

    def test_no_noise_bars(self, rising_candles, fixed_random) -> None:
        """noise_bars of zero returns a plain copy."""
        rng = fixed_random()
        extended = extend_with_noise(rising_candles, rng, ForecastParams(noise_bars=0))

        assert extended == list(rising_candles)
        assert rng.draws == 0


class TestMomentumForecaster:
    """Test the combined forecaster."""

    def test_rising_series_forecasts_buy(self, rising_candles, fixed_random) -> None:
        """Both horizons agree on an uptrend."""
        forecast = MomentumForecaster().forecast(rising_candles, rng=fixed_random(0.5))

        assert forecast.prediction == SignalType.BUY
        assert forecast.short_term == Direction.UP
        assert forecast.medium_term == Direction.UP
        assert forecast.explanation.startswith("Strong upward momentum")
        assert forecast.predicted_change_percent > 0

    def test_short_series_skips_noise(self, candle_factory, fixed_random) -> None:
        """Series up to medium_min_bars never touch the random source."""
        rng = fixed_random()
        MomentumForecaster().forecast(candle_factory([100.0 + i for i in range(40)]), rng=rng)

        assert rng.draws == 0

    def test_seeded_source_is_reproducible(self, noisy_candles) -> None:
        """Equal seeds give equal forecasts."""
        forecaster = MomentumForecaster()
        first = forecaster.forecast(noisy_candles, rng=create_random_source(42))
        second = forecaster.forecast(noisy_candles, rng=create_random_source(42))

        assert first == second

    def test_params_seed_is_used_without_rng(self, noisy_candles) -> None:
        """A configured seed makes the default source deterministic."""
        forecaster = MomentumForecaster(params=ForecastParams(seed=5))

        assert forecaster.forecast(noisy_candles) == forecaster.forecast(noisy_candles)

    def test_bullish_divergence_overrides(self, falling_candles, fixed_random) -> None:
        """A bullish divergence turns a weak forecast into BUY with a confidence floor."""
        forecast = MomentumForecaster().forecast(
            falling_candles,
            rng=fixed_random(0.5),
            divergence=DivergenceReport(bullish_divergence=True),
        )

        assert forecast.prediction == SignalType.BUY
        assert forecast.explanation.startswith("Bullish divergence detected")
        assert forecast.confidence >= 60.0

    def test_timeframe_override(self, falling_candles, fixed_random) -> None:
        """Strong aligned higher-timeframe momentum replaces the verdict."""
        timeframes = TimeframeAnalysis(
            dominant_direction=Direction.UP,
            alignment_score=80.0,
            weighted_confidence=75.0,
            weighted_predicted_change=1.0,
        )
        forecast = MomentumForecaster().forecast(falling_candles, rng=fixed_random(0.5), timeframes=timeframes)

        assert forecast.prediction == SignalType.BUY
        assert forecast.confidence == 75.0
        assert forecast.explanation == "Multi-timeframe momentum is bullish"

    def test_regime_suffix(self, rising_candles, fixed_random) -> None:
        """The regime is appended to the explanation."""
        regime = MarketRegime(RegimeType.TRENDING, 60.0, Direction.UP, 50.0, MarketPhase.MIDDLE)
        forecast = MomentumForecaster().forecast(rising_candles, rng=fixed_random(0.5), regime=regime)

        assert forecast.explanation.endswith("[trending up market]")
        assert 0.0 <= forecast.confidence <= 100.0
