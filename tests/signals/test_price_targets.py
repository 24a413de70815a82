"""Unit tests for ATR-based price targets."""

import pytest

from signal_engine.config.defaults import TargetParams
from signal_engine.data.models import PriceArrays
from signal_engine.indicators import SupportResistance
from signal_engine.models import SignalType
from signal_engine.signals import calculate_price_targets


class TestCalculatePriceTargets:
    """Test stop and target placement."""

    def test_buy_ladder(self, rising_candles) -> None:
        """BUY targets climb above the entry in 1.5/3/5 risk steps."""
        arrays = PriceArrays.from_candles(rising_candles)
        targets = calculate_price_targets(arrays, SignalType.BUY)
        risk = targets.entry_price - targets.stop_loss

        assert targets.entry_price == 179.0
        assert risk == pytest.approx(4.0, abs=0.02)
        assert targets.stop_loss < targets.entry_price < targets.target1 < targets.target2 < targets.target3
        assert targets.target1 == pytest.approx(targets.entry_price + 1.5 * risk)
        assert targets.target3 == pytest.approx(targets.entry_price + 5.0 * risk)
        assert targets.risk_reward_ratio == 3.0

    def test_sell_ladder(self, falling_candles) -> None:
        """SELL targets descend below the entry."""
        arrays = PriceArrays.from_candles(falling_candles)
        targets = calculate_price_targets(arrays, SignalType.SELL)

        assert targets.stop_loss > targets.entry_price > targets.target1 > targets.target2 > targets.target3

    @pytest.mark.parametrize("signal", [SignalType.HOLD, SignalType.NEUTRAL])
    def test_non_directional_has_no_targets(self, rising_candles, signal) -> None:
        """Only BUY and SELL carry targets."""
        arrays = PriceArrays.from_candles(rising_candles)

        assert calculate_price_targets(arrays, signal) is None

    def test_zero_atr_has_no_targets(self, flat_candles) -> None:
        """A market without range cannot place a stop."""
        arrays = PriceArrays.from_candles(flat_candles)

        assert calculate_price_targets(arrays, SignalType.BUY) is None

    def test_stop_tightens_to_significant_support(self, rising_candles) -> None:
        """A significant support between stop and entry replaces the ATR stop."""
        arrays = PriceArrays.from_candles(rising_candles)
        levels = SupportResistance(
            support=(170.0, 176.0),
            resistance=(185.0,),
            significant_support=(170.0, 176.0),
        )
        targets = calculate_price_targets(arrays, SignalType.BUY, levels)

        assert targets.stop_loss == 176.0
        assert targets.target1 == pytest.approx(179.0 + 1.5 * 3.0)

    def test_fallback_levels_do_not_move_the_stop(self, rising_candles) -> None:
        """Percentile fallback levels are not significant."""
        arrays = PriceArrays.from_candles(rising_candles)
        levels = SupportResistance(support=(176.0,), resistance=(185.0,))
        plain = calculate_price_targets(arrays, SignalType.BUY)

        assert calculate_price_targets(arrays, SignalType.BUY, levels) == plain

    def test_custom_multiples(self, rising_candles) -> None:
        """Stop multiplier and target multiples are configurable."""
        arrays = PriceArrays.from_candles(rising_candles)
        params = TargetParams(stop_atr_multiplier=1.0, target_multiples=(1.0, 2.0, 3.0), risk_reward_ratio=2.0)
        targets = calculate_price_targets(arrays, SignalType.BUY, params=params)
        risk = targets.entry_price - targets.stop_loss

        assert risk == pytest.approx(2.0, abs=0.01)
        assert targets.target2 == pytest.approx(targets.entry_price + 2.0 * risk)
        assert targets.risk_reward_ratio == 2.0
