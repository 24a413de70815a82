"""
Momentum forecaster.

A deterministic heuristic that blends recency-weighted momentum, price
acceleration and a volume-surge factor into a predicted percent change. The
medium-term variant re-runs the estimator on a series extended with
volatility-scaled synthetic bars; the noise comes from an injected random
source so seeded evaluations are reproducible.
"""

import math
from dataclasses import dataclass, field
from typing import Optional, Protocol, Sequence

import numpy as np
import structlog

from ..config.defaults import ForecastParams, RegimeParams
from ..data.models import Candle, PriceArrays
from ..indicators import DivergenceReport
from ..models import (
    Direction,
    ForecastResult,
    MarketRegime,
    MomentumForecast,
    SignalType,
    TimeframeAnalysis,
)
from ..utils.time import infer_interval_ms
from .regime import adjust_for_regime

logger = structlog.get_logger(__name__)


class RandomSource(Protocol):
    """Anything with a random() method returning a float in [0, 1)."""

    def random(self) -> float:
        ...


def create_random_source(seed: Optional[int] = None) -> RandomSource:
    """Default random source: a numpy Generator, seeded when `seed` is given."""
    return np.random.default_rng(seed)


def _safe_returns(prices: np.ndarray, lag: int = 1) -> np.ndarray:
    prior = prices[:-lag]
    with np.errstate(divide="ignore", invalid="ignore"):
        return np.where(prior != 0, (prices[lag:] - prior) / prior, 0.0)


def predict_price_movement(
    closes: np.ndarray,
    volumes: np.ndarray,
    params: Optional[ForecastParams] = None,
) -> ForecastResult:
    """
    Estimate the next move from the trailing `params.window` bars.

    Args:
        closes: Close prices
        volumes: Volumes aligned with closes
        params: Forecaster parameters

    Returns:
        ForecastResult; NEUTRAL with zero confidence below `params.min_bars`
    """
    params = params or ForecastParams()
    closes = np.asarray(closes, dtype=np.float64)
    volumes = np.asarray(volumes, dtype=np.float64)
    if len(closes) < max(params.min_bars, 6):
        return ForecastResult(direction=Direction.NEUTRAL, confidence=0.0, predicted_change=0.0)

    prices = closes[-params.window:]
    vols = volumes[-params.window:]

    # Recency-weighted 3-bar momentum
    three_bar = _safe_returns(prices, 3)
    weights = np.arange(3, len(prices), dtype=np.float64) ** 1.5
    momentum = float((three_bar * weights).sum() / weights.sum())

    very_recent_volume = float(vols[-3:].mean())
    recent_volume = float(vols[-5:].mean())
    volume_surge = very_recent_volume / recent_volume if recent_volume > 0 else 1.0

    # Linearly weighted second difference of returns
    accelerations = np.diff(_safe_returns(prices))
    acc_weights = np.arange(1, len(accelerations) + 1, dtype=np.float64)
    acceleration = float((accelerations * acc_weights).sum() / acc_weights.sum())

    acceleration_factor = math.copysign(min(1.0, abs(acceleration) * 20), acceleration) if acceleration else 0.0
    if volume_surge > 0:
        volume_factor = min(1.0, max(-1.0, math.log(volume_surge) * 2)) * float(np.sign(momentum))
    else:
        # log(0) saturates at the lower clamp
        volume_factor = -float(np.sign(momentum))

    combined = (
        momentum * params.momentum_weight
        + acceleration_factor * params.acceleration_weight
        + volume_factor * params.volume_weight
    )
    predicted_change = combined * 100

    if abs(predicted_change) < params.dead_zone_pct:
        direction = Direction.NEUTRAL
        confidence = min(100.0, abs(predicted_change) / params.dead_zone_pct * 100)
    else:
        direction = Direction.UP if predicted_change > 0 else Direction.DOWN
        confidence = min(100.0, 50 + abs(predicted_change) * params.confidence_scale)

    if abs(acceleration) > params.acceleration_threshold:
        confidence = min(100.0, confidence * params.acceleration_boost)

    if volume_surge > params.surge_threshold and momentum != 0:
        confidence = min(100.0, confidence * params.surge_boost)
        if (momentum > 0 and direction == Direction.UP) or (momentum < 0 and direction == Direction.DOWN):
            confidence = min(100.0, confidence * params.surge_alignment_boost)

    return ForecastResult(
        direction=direction,
        confidence=float(round(confidence)),
        predicted_change=round(predicted_change, 2),
    )


def extend_with_noise(
    candles: Sequence[Candle],
    rng: RandomSource,
    params: Optional[ForecastParams] = None,
) -> list[Candle]:
    """
    Append `params.noise_bars` synthetic bars around the last close.

    Each bar draws four values from `rng` in a fixed order (close change,
    high wick, low wick, volume) so a seeded source reproduces the series.
    Close changes are uniform in +/- the population standard deviation of
    recent returns times the last close.
    """
    params = params or ForecastParams()
    extended = list(candles)
    if not extended or params.noise_bars == 0:
        return extended

    last = extended[-1]
    recent_closes = np.array([c.close for c in extended[-params.noise_lookback:]], dtype=np.float64)
    returns = _safe_returns(recent_closes) if len(recent_closes) > 1 else np.zeros(0)
    volatility = float(returns.std()) if returns.size else 0.0

    duration = last.close_time - last.open_time
    interval = infer_interval_ms([c.open_time for c in extended[-2:]]) or duration + 1

    for i in range(params.noise_bars):
        change = (rng.random() - 0.5) * volatility * 2 * last.close
        close = max(0.0, last.close + change)
        high = max(close * (1 + rng.random() * 0.01), close, last.close)
        low = min(close * (1 - rng.random() * 0.01), close, last.close)
        volume = last.volume * (0.8 + rng.random() * 0.4)
        open_time = last.open_time + interval * (i + 1)
        extended.append(Candle(
            open_time=open_time,
            close_time=open_time + duration,
            open=last.close,
            high=high,
            low=low,
            close=close,
            volume=volume,
        ))
    return extended


@dataclass
class MomentumForecaster:
    """Combines short and medium term estimates with early reversal cues."""
    params: ForecastParams = field(default_factory=ForecastParams)
    regime_params: RegimeParams = field(default_factory=RegimeParams)

    def forecast(
        self,
        candles: Sequence[Candle],
        rng: Optional[RandomSource] = None,
        regime: Optional[MarketRegime] = None,
        timeframes: Optional[TimeframeAnalysis] = None,
        divergence: Optional[DivergenceReport] = None,
    ) -> MomentumForecast:
        """
        Produce a BUY/SELL/HOLD forecast for the candle series.

        Args:
            candles: Candle series
            rng: Random source for the medium-term noise step; a fresh
                generator seeded with `params.seed` is used when omitted
            regime: Market regime for the final confidence rescaling
            timeframes: Multi-timeframe vote for confirmation/override
            divergence: Divergence and fractal cues

        Returns:
            MomentumForecast
        """
        p = self.params
        arrays = PriceArrays.from_candles(candles)
        short = predict_price_movement(arrays.closes, arrays.volumes, p)

        if len(candles) > p.medium_min_bars:
            extended = PriceArrays.from_candles(
                extend_with_noise(candles, rng or create_random_source(p.seed), p)
            )
            medium = predict_price_movement(extended.closes, extended.volumes, p)
        else:
            medium = predict_price_movement(arrays.closes, arrays.volumes, p)

        prediction, confidence, explanation = self._combine(short, medium)

        if divergence is not None:
            prediction, confidence, explanation = self._apply_divergence(
                prediction, confidence, explanation, divergence
            )

        if timeframes is not None:
            prediction, confidence, explanation = self._apply_timeframes(
                prediction, confidence, explanation, timeframes
            )

        if regime is not None:
            prediction, confidence = adjust_for_regime(prediction, confidence, regime, self.regime_params)
            explanation = f"{explanation} [{regime.regime.value.lower()} {regime.direction.value.lower()} market]"

        result = MomentumForecast(
            prediction=prediction,
            confidence=float(min(100, round(confidence))),
            predicted_change_percent=short.predicted_change,
            short_term=short.direction,
            medium_term=medium.direction,
            explanation=explanation,
        )
        logger.debug(
            "momentum_forecast",
            prediction=result.prediction.value,
            confidence=result.confidence,
            predicted_change=result.predicted_change_percent,
            short_term=short.direction.value,
            medium_term=medium.direction.value,
        )
        return result

    def _combine(self, short: ForecastResult, medium: ForecastResult) -> tuple[SignalType, float, str]:
        p = self.params
        up, down, flat = Direction.UP, Direction.DOWN, Direction.NEUTRAL

        if short.direction == up and medium.direction == up:
            blended = short.confidence * p.short_term_share + medium.confidence * (1 - p.short_term_share)
            return SignalType.BUY, blended, "Strong upward momentum across short and medium term"
        if short.direction == down and medium.direction == down:
            blended = short.confidence * p.short_term_share + medium.confidence * (1 - p.short_term_share)
            return SignalType.SELL, blended, "Strong downward momentum across short and medium term"
        if medium.direction == up and short.direction != down:
            return SignalType.BUY, medium.confidence * p.medium_only_share, "Medium-term uptrend without short-term weakness"
        if medium.direction == down and short.direction != up:
            return SignalType.SELL, medium.confidence * p.medium_only_share, "Medium-term downtrend without short-term strength"
        if short.direction == flat and medium.direction == flat:
            return SignalType.HOLD, (short.confidence + medium.confidence) / 2, "No significant trend in either horizon"
        return SignalType.HOLD, 40.0, "Mixed short and medium-term momentum"

    def _apply_divergence(
        self,
        prediction: SignalType,
        confidence: float,
        explanation: str,
        divergence: DivergenceReport,
    ) -> tuple[SignalType, float, str]:
        p = self.params

        if divergence.bullish_divergence and confidence < p.override_ceiling:
            if prediction != SignalType.BUY:
                prediction = SignalType.BUY
                explanation = "Bullish divergence detected"
            confidence = max(confidence, p.divergence_confidence_floor)
        elif divergence.bearish_divergence and confidence < p.override_ceiling:
            if prediction != SignalType.SELL:
                prediction = SignalType.SELL
                explanation = "Bearish divergence detected"
            confidence = max(confidence, p.divergence_confidence_floor)

        if divergence.upper_fractal and prediction == SignalType.BUY and confidence < p.override_ceiling:
            confidence = max(0.0, confidence - p.fractal_penalty)
            explanation += "; upper fractal formed"
        elif divergence.lower_fractal and prediction == SignalType.SELL and confidence < p.override_ceiling:
            confidence = max(0.0, confidence - p.fractal_penalty)
            explanation += "; lower fractal formed"

        return prediction, confidence, explanation

    def _apply_timeframes(
        self,
        prediction: SignalType,
        confidence: float,
        explanation: str,
        timeframes: TimeframeAnalysis,
    ) -> tuple[SignalType, float, str]:
        p = self.params
        alignment = timeframes.alignment_score
        dominant = timeframes.dominant_direction

        if alignment > p.mtf_confirm_alignment:
            confirms = (
                (prediction == SignalType.BUY and dominant == Direction.UP)
                or (prediction == SignalType.SELL and dominant == Direction.DOWN)
            )
            conflicts = (
                (prediction == SignalType.BUY and dominant == Direction.DOWN)
                or (prediction == SignalType.SELL and dominant == Direction.UP)
            )
            if confirms:
                confidence = min(100.0, confidence * (1 + alignment / 200))
                explanation += " with multi-timeframe confirmation"
            elif conflicts:
                confidence = max(0.0, confidence * (1 - alignment / 150))
                explanation += " but conflicts with higher timeframes"

        change = timeframes.weighted_predicted_change
        if abs(change) > p.mtf_override_change and alignment > p.mtf_override_alignment:
            if change > 0 and prediction != SignalType.BUY:
                prediction = SignalType.BUY
                confidence = min(p.mtf_override_cap, timeframes.weighted_confidence)
                explanation = "Multi-timeframe momentum is bullish"
            elif change < 0 and prediction != SignalType.SELL:
                prediction = SignalType.SELL
                confidence = min(p.mtf_override_cap, timeframes.weighted_confidence)
                explanation = "Multi-timeframe momentum is bearish"

        return prediction, confidence, explanation
