"""
Main evaluation engine coordinator.

Orchestrates the signal pipeline for one candle series:
Candles → Indicators → {Regime, Forecast, Timeframes, Generators} → Decision
"""

from collections.abc import Callable, Mapping
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any, Optional, Sequence

import structlog

from .analysis import (
    MomentumForecaster,
    RandomSource,
    analyze_multiple_timeframes,
    create_random_source,
    detect_market_regime,
)
from .config import ConfigLoader, EngineConfig, ensure_valid_config, get_default_config
from .data.models import Candle, PriceArrays
from .indicators import detect_divergences_and_fractals, find_support_resistance
from .models import (
    Direction,
    MarketRegime,
    MomentumForecast,
    SignalSummary,
    SignalType,
    TimeframeAnalysis,
    TradingSignal,
)
from .signals import (
    FORECAST_KEY,
    TIMEFRAME_KEY,
    SignalGroup,
    build_forecast_vote,
    build_timeframe_vote,
    calculate_price_targets,
    compute_signal_weights,
    determine_overall_signal,
    generate_early_detection_signals,
    generate_moving_average_signals,
    generate_oscillator_signals,
    generate_support_resistance_signals,
    generate_volatility_signals,
    generate_volume_signals,
)

logger = structlog.get_logger(__name__)

DIRECTION_TO_SIGNAL = {
    Direction.UP: SignalType.BUY,
    Direction.DOWN: SignalType.SELL,
    Direction.NEUTRAL: SignalType.NEUTRAL,
}


def _forecast_message(forecast: MomentumForecast) -> str:
    if forecast.explanation:
        return forecast.explanation
    change = forecast.predicted_change_percent
    return f"Momentum forecast expects a {change:+.2f}% move."


def _forecast_strength(confidence: float) -> int:
    if confidence > 70:
        return 6
    if confidence > 50:
        return 5
    return 4


class SignalEngine:
    """
    Consensus signal engine for a single candle series.

    Every call to evaluate() is independent: no state survives between
    calls, so one engine may serve many series and threads. The only
    non-deterministic input is the random source of the forecaster's
    medium-term step, which callers may inject for reproducible output.
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        rng_factory: Optional[Callable[[], RandomSource]] = None,
    ) -> None:
        """
        Initialize the engine.

        Args:
            config: Engine configuration, defaults when omitted
            rng_factory: Builds a fresh random source per evaluation; defaults
                to a numpy Generator seeded with `config.forecast.seed`

        Raises:
            ConfigurationError: If the configuration is invalid
        """
        self.logger = logger
        self.config = ensure_valid_config(config or get_default_config())
        self.rng_factory = rng_factory or (lambda: create_random_source(self.config.forecast.seed))
        self.forecaster = MomentumForecaster(params=self.config.forecast, regime_params=self.config.regime)

    @classmethod
    def for_symbol(
        cls,
        symbol: str,
        config_dir: Optional[Path] = None,
        overrides: Optional[dict[str, Any]] = None,
        rng_factory: Optional[Callable[[], RandomSource]] = None,
    ) -> "SignalEngine":
        """Build an engine from defaults merged with the symbol's YAML overrides."""
        config = ConfigLoader.create(config_dir).load(symbol, overrides)
        return cls(config=config, rng_factory=rng_factory)

    def evaluate(self, candles: Sequence[Candle], rng: Optional[RandomSource] = None) -> SignalSummary:
        """
        Evaluate a candle series into a consensus summary.

        Args:
            candles: Time-ordered candles, oldest first
            rng: Random source for the forecaster; a fresh one from
                `rng_factory` when omitted

        Returns:
            SignalSummary; NEUTRAL with zero confidence and no indicators
            when the series is shorter than `config.min_bars`
        """
        cfg = self.config
        if len(candles) < cfg.min_bars:
            self.logger.debug("insufficient_data", bars=len(candles), required=cfg.min_bars)
            return SignalSummary.neutral()

        arrays = PriceArrays.from_candles(candles)
        ind = cfg.indicators

        regime = detect_market_regime(arrays, cfg.regime, ind)
        levels = find_support_resistance(
            arrays.highs, arrays.lows, arrays.closes,
            lookback=ind.sr_lookback,
            window=ind.sr_window,
            tolerance=ind.sr_tolerance,
            merge_distance=ind.sr_merge_distance,
            max_levels=ind.sr_max_levels,
        )

        group = SignalGroup()
        group.merge(generate_moving_average_signals(arrays, ind))
        group.merge(generate_oscillator_signals(arrays, ind))
        group.merge(generate_volatility_signals(arrays, ind))
        group.merge(generate_volume_signals(arrays, ind))
        group.merge(generate_support_resistance_signals(levels, arrays.last_price))
        group.merge(generate_early_detection_signals(arrays, ind))
        group.signals.append(self._regime_signal(regime))

        timeframes = None
        if len(candles) >= cfg.timeframes.min_base_bars:
            timeframes = analyze_multiple_timeframes(candles, cfg.timeframes, ind, cfg.forecast)

        divergence = detect_divergences_and_fractals(arrays.highs, arrays.lows, arrays.closes, rsi_period=ind.rsi_period)
        forecast = self.forecaster.forecast(
            candles,
            rng=rng or self.rng_factory(),
            regime=regime,
            timeframes=timeframes,
            divergence=divergence,
        )
        self._add_forecast(group, forecast)
        if timeframes is not None:
            self._add_timeframes(group, timeframes)

        weights = compute_signal_weights(group.indicators, regime, cfg.decision)
        overall, confidence = determine_overall_signal(weights, regime, forecast, cfg.decision, cfg.regime)

        combined = TradingSignal(
            indicator="Combined Strategy",
            signal=overall,
            message=f"Overall signal based on technical indicators and momentum forecast with {confidence:.0f}% confidence.",
            strength=5,
        )
        targets = calculate_price_targets(arrays, overall, levels, cfg.targets, ind.atr_period)

        summary = SignalSummary(
            overall_signal=overall,
            confidence=confidence,
            indicators=group.indicators,
            signals=[combined, *group.signals],
            price_targets=targets,
            regime=regime,
            forecast=forecast,
            timeframes=timeframes,
        )
        self.logger.info(
            "signal_evaluated",
            bars=len(candles),
            signal=overall.value,
            confidence=confidence,
            regime=regime.regime.value,
            votes=len(group.indicators),
        )
        return summary

    def evaluate_many(
        self,
        series_by_key: Mapping[str, Sequence[Candle]],
        max_workers: Optional[int] = None,
    ) -> dict[str, SignalSummary]:
        """
        Evaluate several independent series concurrently.

        Each key gets its own random source from `rng_factory`, so results do
        not depend on scheduling order.

        Args:
            series_by_key: Candle series keyed by e.g. "SYMBOL:interval"
            max_workers: Thread pool size, executor default when omitted

        Returns:
            Summaries keyed like the input
        """
        if not series_by_key:
            return {}

        sources = {key: self.rng_factory() for key in series_by_key}
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            futures = {
                key: executor.submit(self.evaluate, candles, sources[key])
                for key, candles in series_by_key.items()
            }
            results = {key: future.result() for key, future in futures.items()}

        self.logger.info("batch_evaluated", series=len(results))
        return results

    def _regime_signal(self, regime: MarketRegime) -> TradingSignal:
        return TradingSignal(
            indicator="Market Regime",
            signal=DIRECTION_TO_SIGNAL[regime.direction],
            message=f"Market is in {regime.regime.value.lower()} mode with {regime.strength:.0f}% strength.",
            strength=3,
        )

    def _add_forecast(self, group: SignalGroup, forecast: MomentumForecast) -> None:
        group.signals.append(TradingSignal(
            indicator=FORECAST_KEY,
            signal=forecast.prediction,
            message=_forecast_message(forecast),
            strength=_forecast_strength(forecast.confidence),
        ))
        vote = build_forecast_vote(forecast, self.config.decision)
        if vote is not None:
            group.indicators[FORECAST_KEY] = vote

    def _add_timeframes(self, group: SignalGroup, timeframes: TimeframeAnalysis) -> None:
        vote = build_timeframe_vote(timeframes, self.config.decision)
        if vote is None:
            return
        group.signals.append(TradingSignal(
            indicator=TIMEFRAME_KEY,
            signal=vote.signal,
            message=(
                f"{timeframes.alignment_score:.0f}% alignment across timeframes "
                f"with dominant {timeframes.dominant_direction.value.lower()} trend."
            ),
            strength=5 if timeframes.alignment_score > 70 else 3,
        ))
        group.indicators[TIMEFRAME_KEY] = vote
