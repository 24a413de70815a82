"""Unit tests for the signal engine coordinator."""

from dataclasses import replace

import pytest

from signal_engine import SignalEngine
from signal_engine.analysis import create_random_source
from signal_engine.config import get_default_config
from signal_engine.config.defaults import IndicatorParams
from signal_engine.errors import ConfigurationError
from signal_engine.models import SignalSummary, SignalType


def seeded_engine(seed: int = 3) -> SignalEngine:
    return SignalEngine(rng_factory=lambda: create_random_source(seed))


class TestSignalEngineSetup:
    """Test engine construction."""

    def test_defaults(self) -> None:
        """An engine without arguments uses the default configuration."""
        engine = SignalEngine()

        assert engine.config == get_default_config()

    def test_invalid_config_fails_fast(self) -> None:
        """Invalid parameters are rejected at construction."""
        config = replace(get_default_config(), indicators=IndicatorParams(rsi_period=0))

        with pytest.raises(ConfigurationError):
            SignalEngine(config)

    def test_for_symbol_applies_overrides(self) -> None:
        """for_symbol merges the bundled symbol overrides."""
        engine = SignalEngine.for_symbol("BTCUSDT")

        assert engine.config.forecast.seed == 42
        assert engine.config.targets.stop_atr_multiplier == 2.5


class TestEvaluate:
    """Test single-series evaluation."""

    def test_insufficient_data_is_neutral(self, candle_factory) -> None:
        """Series shorter than min_bars give the neutral summary."""
        summary = SignalEngine().evaluate(candle_factory([100.0 + i for i in range(49)]))

        assert summary == SignalSummary.neutral()
        assert summary.indicators == {}
        assert summary.price_targets is None

    def test_summary_shape(self, rising_candles) -> None:
        """The combined verdict leads the explanations and every category votes."""
        summary = seeded_engine().evaluate(rising_candles)

        assert summary.signals[0].indicator == "Combined Strategy"
        assert summary.signals[0].signal == summary.overall_signal
        assert {
            "EMA Cross", "SMA Cross", "ADX", "RSI", "MACD", "Stochastic",
            "PSAR", "Bollinger", "VWAP", "Volume Flow", "Support/Resistance",
        } <= set(summary.indicators)
        assert "Market Regime" in [s.indicator for s in summary.signals]
        assert 0.0 <= summary.confidence <= 100.0
        assert summary.regime is not None
        assert summary.forecast is not None

    def test_short_series_has_no_timeframes(self, rising_candles) -> None:
        """Multi-timeframe analysis needs min_base_bars candles."""
        summary = seeded_engine().evaluate(rising_candles)

        assert summary.timeframes is None

    def test_long_series_has_timeframes(self, candle_factory) -> None:
        """A long enough series adds the timeframe analysis."""
        summary = seeded_engine().evaluate(candle_factory([100.0 + 0.5 * i for i in range(300)]))

        assert summary.timeframes is not None
        assert summary.timeframes.alignment_score > 0

    def test_uptrend_is_buy(self, rising_candles) -> None:
        """A steady uptrend produces a BUY with ordered targets."""
        summary = seeded_engine().evaluate(rising_candles)
        targets = summary.price_targets

        assert summary.overall_signal == SignalType.BUY
        assert summary.confidence > 50.0
        assert targets.stop_loss < targets.entry_price < targets.target1

    def test_injected_rng_is_reproducible(self, noisy_candles) -> None:
        """Equal random sources give identical summaries."""
        engine = SignalEngine()

        first = engine.evaluate(noisy_candles, rng=create_random_source(11))
        second = engine.evaluate(noisy_candles, rng=create_random_source(11))

        assert first.to_json() == second.to_json()

    def test_configured_seed_is_reproducible(self, noisy_candles) -> None:
        """A symbol with a configured seed evaluates deterministically."""
        engine = SignalEngine.for_symbol("BTCUSDT")

        assert engine.evaluate(noisy_candles).to_json() == engine.evaluate(noisy_candles).to_json()

    def test_input_is_not_modified(self, rising_candles) -> None:
        """Evaluation only reads the candles."""
        snapshot = list(rising_candles)

        seeded_engine().evaluate(rising_candles)

        assert rising_candles == snapshot


class TestEvaluateMany:
    """Test concurrent evaluation of several series."""

    def test_empty_input(self) -> None:
        """No series, no summaries."""
        assert SignalEngine().evaluate_many({}) == {}

    def test_matches_individual_evaluation(self, rising_candles, falling_candles, noisy_candles) -> None:
        """Each key gets the summary a single evaluation would produce."""
        engine = seeded_engine(5)
        series = {
            "UP:1m": rising_candles,
            "DOWN:1m": falling_candles,
            "WALK:1m": noisy_candles,
        }

        results = engine.evaluate_many(series, max_workers=3)

        assert list(results) == list(series)
        for key, candles in series.items():
            expected = engine.evaluate(candles, rng=create_random_source(5))
            assert results[key].to_json() == expected.to_json()

    def test_short_series_in_batch(self, rising_candles, candle_factory) -> None:
        """Short series are neutral without affecting the others."""
        results = seeded_engine().evaluate_many({
            "SHORT": candle_factory([100.0] * 10),
            "LONG": rising_candles,
        })

        assert results["SHORT"] == SignalSummary.neutral()
        assert results["LONG"].overall_signal == SignalType.BUY
