"""Unit tests for signal and market models."""

import orjson
import pytest

from signal_engine.models import (
    Direction,
    IndicatorSignal,
    MarketPhase,
    MarketRegime,
    MomentumForecast,
    PriceTargets,
    RegimeType,
    SignalSummary,
    SignalType,
    SignalWeights,
    TimeframeAnalysis,
    TradingSignal,
)


class TestIndicatorSignal:
    """Test the weighted vote."""

    @pytest.mark.parametrize("weight", [0, -1.5])
    def test_weight_must_be_positive(self, weight) -> None:
        """Zero and negative weights are rejected."""
        with pytest.raises(ValueError):
            IndicatorSignal(SignalType.BUY, weight, 50)

    @pytest.mark.parametrize("confidence", [-1, 101])
    def test_confidence_bounds(self, confidence) -> None:
        """Confidence must lie in [0, 100]."""
        with pytest.raises(ValueError):
            IndicatorSignal(SignalType.SELL, 1, confidence)

    def test_scaled(self) -> None:
        """Scaling changes only the weight."""
        vote = IndicatorSignal(SignalType.BUY, 2.0, 65)
        scaled = vote.scaled(1.5)

        assert scaled == IndicatorSignal(SignalType.BUY, 3.0, 65)
        assert vote.weight == 2.0

    def test_to_dict(self) -> None:
        """Signal values serialize as strings."""
        assert IndicatorSignal(SignalType.HOLD, 3, 70).to_dict() == {
            "signal": "HOLD",
            "weight": 3,
            "confidence": 70,
        }


class TestSignalWeights:
    """Test weight sums."""

    def test_total_and_share(self) -> None:
        """Shares are fractions of the total."""
        weights = SignalWeights(buy=3, sell=1)

        assert weights.total == 4
        assert weights.share(weights.buy) == 0.75

    def test_empty_share(self) -> None:
        """An empty vote has zero shares."""
        assert SignalWeights().share(0.0) == 0.0

    def test_to_dict_includes_total(self) -> None:
        """The serialized form carries the total."""
        assert SignalWeights(hold=2, neutral=1).to_dict()["total"] == 3


class TestSignalSummary:
    """Test the consensus summary."""

    def build(self) -> SignalSummary:
        return SignalSummary(
            overall_signal=SignalType.BUY,
            confidence=72.5,
            indicators={"RSI": IndicatorSignal(SignalType.BUY, 2, 65)},
            signals=[TradingSignal("Combined Strategy", SignalType.BUY, "Overall", 5)],
            price_targets=PriceTargets(100.0, 96.0, 106.0, 112.0, 120.0, 3.0),
            regime=MarketRegime(RegimeType.TRENDING, 60.0, Direction.UP, 45.0, MarketPhase.MIDDLE),
            forecast=MomentumForecast(SignalType.BUY, 68.0, 0.8, Direction.UP, Direction.UP, "Up"),
            timeframes=TimeframeAnalysis(Direction.UP, 80.0, {"1m": Direction.UP}, 60.0, 0.5),
        )

    def test_neutral(self) -> None:
        """The neutral summary has no votes and zero confidence."""
        summary = SignalSummary.neutral()

        assert summary.overall_signal == SignalType.NEUTRAL
        assert summary.confidence == 0.0
        assert summary.indicators == {}
        assert summary.signals == ()
        assert summary.price_targets is None

    def test_indicators_are_read_only(self) -> None:
        """The vote mapping cannot be modified after construction."""
        summary = self.build()

        with pytest.raises(TypeError):
            summary.indicators["MACD"] = IndicatorSignal(SignalType.SELL, 1, 50)

    def test_signals_become_tuple(self) -> None:
        """Explanations are stored as a tuple."""
        assert isinstance(self.build().signals, tuple)

    def test_input_mapping_is_copied(self) -> None:
        """Later changes to the caller's dict do not leak into the summary."""
        votes = {"RSI": IndicatorSignal(SignalType.BUY, 2, 65)}
        summary = SignalSummary(SignalType.BUY, 60.0, indicators=votes)
        votes["MACD"] = IndicatorSignal(SignalType.SELL, 1, 50)

        assert set(summary.indicators) == {"RSI"}

    def test_to_dict(self) -> None:
        """Nested models serialize to plain values."""
        data = self.build().to_dict()

        assert data["overall_signal"] == "BUY"
        assert data["indicators"]["RSI"]["signal"] == "BUY"
        assert data["signals"][0]["indicator"] == "Combined Strategy"
        assert data["price_targets"]["target3"] == 120.0
        assert data["regime"]["phase"] == "MIDDLE"
        assert data["forecast"]["short_term"] == "UP"
        assert data["timeframes"]["timeframe_directions"] == {"1m": "UP"}

    def test_to_json(self) -> None:
        """JSON bytes decode to the dict form."""
        summary = self.build()

        assert orjson.loads(summary.to_json()) == summary.to_dict()

    def test_neutral_to_dict(self) -> None:
        """Optional sections serialize as null."""
        data = SignalSummary.neutral().to_dict()

        assert data["price_targets"] is None
        assert data["regime"] is None
        assert data["forecast"] is None
        assert data["timeframes"] is None


class TestMarketRegime:
    """Test the regime model."""

    def test_undefined(self) -> None:
        """The undefined regime has no strength or direction."""
        regime = MarketRegime.undefined()

        assert regime.regime == RegimeType.UNDEFINED
        assert regime.direction == Direction.NEUTRAL
        assert regime.to_dict()["phase"] is None


class TestTimeframeAnalysis:
    """Test the multi-timeframe model."""

    def test_directions_are_read_only(self) -> None:
        """The per-timeframe directions cannot be modified after construction."""
        analysis = TimeframeAnalysis(Direction.UP, 80.0, {"1m": Direction.UP})

        with pytest.raises(TypeError):
            analysis.timeframe_directions["5m"] = Direction.DOWN

        assert analysis.to_dict()["timeframe_directions"] == {"1m": "UP"}

    def test_input_mapping_is_copied(self) -> None:
        """Later changes to the caller's dict do not leak into the analysis."""
        directions = {"1m": Direction.UP}
        analysis = TimeframeAnalysis(Direction.UP, 80.0, directions)
        directions["5m"] = Direction.DOWN

        assert dict(analysis.timeframe_directions) == {"1m": Direction.UP}

    def test_default_is_empty(self) -> None:
        """Without votes the mapping is empty."""
        assert len(TimeframeAnalysis(Direction.NEUTRAL, 0.0).timeframe_directions) == 0
