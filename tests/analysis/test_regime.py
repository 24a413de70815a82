"""Unit tests for market regime detection and regime-aware confidence."""

import pytest

from signal_engine.analysis import adjust_for_regime, detect_market_regime
from signal_engine.config.defaults import RegimeParams
from signal_engine.data.models import PriceArrays
from signal_engine.models import Direction, MarketPhase, MarketRegime, RegimeType, SignalType


class TestDetectMarketRegime:
    """Test regime classification."""

    def test_steady_uptrend(self, rising_candles) -> None:
        """One-sided movement is a late-stage trend once RSI is exhausted."""
        regime = detect_market_regime(rising_candles)

        assert regime.regime == RegimeType.TRENDING
        assert regime.direction == Direction.UP
        assert regime.strength == 100.0
        assert regime.phase == MarketPhase.LATE
        assert regime.volatility == pytest.approx(50.0, abs=1.0)

    def test_steady_downtrend(self, falling_candles) -> None:
        """The mirror image trends down."""
        regime = detect_market_regime(falling_candles)

        assert regime.regime == RegimeType.TRENDING
        assert regime.direction == Direction.DOWN
        assert regime.phase == MarketPhase.LATE

    def test_flat_market_is_ranging(self, flat_candles) -> None:
        """No movement at all is a range without direction or phase."""
        regime = detect_market_regime(flat_candles)

        assert regime.regime == RegimeType.RANGING
        assert regime.direction == Direction.NEUTRAL
        assert regime.phase is None
        assert regime.volatility == 0.0

    def test_short_series_is_undefined(self, candle_factory) -> None:
        """Fewer than min_bars candles cannot be classified."""
        regime = detect_market_regime(candle_factory([100.0 + i for i in range(30)]))

        assert regime == MarketRegime.undefined()

    def test_accepts_price_arrays(self, rising_candles) -> None:
        """Candles and their column view classify identically."""
        arrays = PriceArrays.from_candles(rising_candles)

        assert detect_market_regime(arrays) == detect_market_regime(rising_candles)

    def test_volatility_spike(self, candle_factory) -> None:
        """A final bar far wider than recent bars makes the market volatile."""
        closes = [100.0 + (0.2 if i % 2 else -0.2) for i in range(79)] + [112.0]
        regime = detect_market_regime(candle_factory(closes, spread=0.1))

        assert regime.regime == RegimeType.VOLATILE
        assert regime.volatility > 70.0


class TestAdjustForRegime:
    """Test confidence rescaling by regime."""

    def test_trend_aligned_boost(self) -> None:
        """Aligned signals gain more in the middle of a trend."""
        regime = MarketRegime(RegimeType.TRENDING, 80.0, Direction.UP, 50.0, MarketPhase.MIDDLE)

        assert adjust_for_regime(SignalType.BUY, 60.0, regime) == (SignalType.BUY, 90.0)

    def test_counter_trend_damp(self) -> None:
        """Counter-trend signals are damped."""
        regime = MarketRegime(RegimeType.TRENDING, 75.0, Direction.UP, 50.0, MarketPhase.MIDDLE)

        assert adjust_for_regime(SignalType.SELL, 60.0, regime) == (SignalType.SELL, 30.0)

    def test_late_phase_fades_boost(self) -> None:
        """A late trend boosts aligned signals less."""
        regime = MarketRegime(RegimeType.TRENDING, 80.0, Direction.UP, 50.0, MarketPhase.LATE)

        assert adjust_for_regime(SignalType.BUY, 60.0, regime) == (SignalType.BUY, 78.0)

    def test_confidence_is_capped(self) -> None:
        """Boosted confidence never exceeds 100."""
        regime = MarketRegime(RegimeType.TRENDING, 100.0, Direction.UP, 50.0, MarketPhase.MIDDLE)

        assert adjust_for_regime(SignalType.BUY, 90.0, regime) == (SignalType.BUY, 100.0)

    def test_strong_range_turns_weak_signals_into_hold(self) -> None:
        """A directional signal damped below 50 in a strong range becomes HOLD."""
        regime = MarketRegime(RegimeType.RANGING, 75.0, Direction.NEUTRAL, 40.0)

        signal, confidence = adjust_for_regime(SignalType.BUY, 60.0, regime)

        assert signal == SignalType.HOLD
        assert confidence == 70.0

    def test_extreme_volatility_forces_hold(self) -> None:
        """Above the forced-hold threshold directional signals become HOLD."""
        regime = MarketRegime(RegimeType.VOLATILE, 90.0, Direction.UP, 90.0)

        assert adjust_for_regime(SignalType.SELL, 80.0, regime) == (SignalType.HOLD, 68.0)

    def test_custom_forced_hold_threshold(self) -> None:
        """The threshold comes from the regime parameters."""
        regime = MarketRegime(RegimeType.VOLATILE, 90.0, Direction.UP, 90.0)
        params = RegimeParams(forced_hold_volatility=95.0)

        signal, _ = adjust_for_regime(SignalType.SELL, 80.0, regime, params)

        assert signal == SignalType.SELL

    def test_accumulation_favours_buy(self) -> None:
        """Accumulation boosts BUY and damps SELL."""
        regime = MarketRegime(RegimeType.ACCUMULATION, 60.0, Direction.UP, 40.0)

        assert adjust_for_regime(SignalType.BUY, 50.0, regime) == (SignalType.BUY, 65.0)
        assert adjust_for_regime(SignalType.SELL, 50.0, regime) == (SignalType.SELL, 30.0)

    def test_undefined_regime_is_neutral(self) -> None:
        """Without a regime the verdict is unchanged."""
        assert adjust_for_regime(SignalType.BUY, 55.5, MarketRegime.undefined()) == (SignalType.BUY, 55.5)
