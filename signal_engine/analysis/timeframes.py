"""
Multi-timeframe aggregation.

The base series is bucketed into synthetic coarser candles, each timeframe is
scored on its own, and a length-weighted vote decides the dominant direction.
"""

from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np
import structlog

from ..config.defaults import ForecastParams, IndicatorParams, TimeframeParams
from ..data.models import Candle, PriceArrays
from ..indicators import calculate_ema, calculate_macd, calculate_rsi, calculate_sma
from ..indicators.base import require_period
from ..models import Direction, TimeframeAnalysis
from .forecast import predict_price_movement

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class TimeframeVote:
    """Outcome of scoring a single timeframe."""
    direction: Direction
    confidence: float
    predicted_change: float


def resample_candles(candles: Sequence[Candle], multiplier: int) -> list[Candle]:
    """
    Aggregate consecutive runs of `multiplier` candles into one.

    The last bucket may be partial. A multiplier of 1 returns a copy of the
    input.

    Raises:
        ConfigurationError: If multiplier is not a positive integer
    """
    require_period(multiplier, "multiplier")
    if multiplier == 1:
        return list(candles)

    resampled = []
    for start in range(0, len(candles), multiplier):
        bucket = candles[start:start + multiplier]
        resampled.append(Candle(
            open_time=bucket[0].open_time,
            close_time=bucket[-1].close_time,
            open=bucket[0].open,
            high=max(c.high for c in bucket),
            low=min(c.low for c in bucket),
            close=bucket[-1].close,
            volume=sum(c.volume for c in bucket),
        ))
    return resampled


def analyze_timeframe(
    candles: Sequence[Candle],
    indicator_params: Optional[IndicatorParams] = None,
    forecast_params: Optional[ForecastParams] = None,
) -> TimeframeVote:
    """
    Score one timeframe with a small indicator vote.

    Close vs SMA20 and close vs EMA9 each vote bull or bear, RSI votes bull
    when oversold and bear when overbought, MACD votes by its side of the
    signal line and the momentum estimate counts twice. The timeframe is UP
    when bull votes exceed bear votes by more than one, DOWN on the mirror.
    """
    ind = indicator_params or IndicatorParams()
    arrays = PriceArrays.from_candles(candles)
    closes = arrays.closes
    close = float(closes[-1])

    sma = float(calculate_sma(closes, ind.sma_fast)[-1])
    ema = float(calculate_ema(closes, ind.ema_fast)[-1])
    rsi = float(calculate_rsi(closes, ind.rsi_period)[-1])
    macd = calculate_macd(closes, ind.macd_fast, ind.macd_slow, ind.macd_signal)
    macd_value, macd_signal = float(macd.macd[-1]), float(macd.signal[-1])

    prediction = predict_price_movement(closes, arrays.volumes, forecast_params)

    bull = bear = 0
    if close > sma:
        bull += 1
    else:
        bear += 1

    if close > ema:
        bull += 1
    else:
        bear += 1

    if rsi < 30:
        bull += 1
    elif rsi > 70:
        bear += 1

    if macd_value > macd_signal:
        bull += 1
    elif macd_value < macd_signal:
        bear += 1

    if prediction.direction == Direction.UP:
        bull += 2
    elif prediction.direction == Direction.DOWN:
        bear += 2

    if bull > bear + 1:
        direction = Direction.UP
    elif bear > bull + 1:
        direction = Direction.DOWN
    else:
        direction = Direction.NEUTRAL

    return TimeframeVote(
        direction=direction,
        confidence=prediction.confidence,
        predicted_change=prediction.predicted_change,
    )


def _empty_analysis() -> TimeframeAnalysis:
    return TimeframeAnalysis(dominant_direction=Direction.NEUTRAL, alignment_score=0.0)


def analyze_multiple_timeframes(
    candles: Sequence[Candle],
    params: Optional[TimeframeParams] = None,
    indicator_params: Optional[IndicatorParams] = None,
    forecast_params: Optional[ForecastParams] = None,
) -> TimeframeAnalysis:
    """
    Vote across the configured timeframes.

    Args:
        candles: Base (finest) candle series
        params: Timeframe list and thresholds
        indicator_params: Indicator periods used per timeframe
        forecast_params: Momentum estimator parameters

    Returns:
        TimeframeAnalysis; NEUTRAL with zero alignment when the base series or
        the number of usable timeframes is too small
    """
    params = params or TimeframeParams()
    if len(candles) < params.min_base_bars:
        return _empty_analysis()

    votes: dict[str, tuple[TimeframeVote, float]] = {}
    for label, multiplier, weight in params.timeframes:
        resampled = resample_candles(candles, multiplier)
        if len(resampled) < params.min_resampled_bars:
            continue
        votes[label] = (analyze_timeframe(resampled, indicator_params, forecast_params), weight)

    if len(votes) < params.min_timeframes:
        logger.debug("timeframe_analysis_skipped", usable_timeframes=len(votes))
        return _empty_analysis()

    weights = np.array([w for _, w in votes.values()], dtype=np.float64)
    total = float(weights.sum())
    bucket = {direction: 0.0 for direction in Direction}
    for vote, weight in votes.values():
        bucket[vote.direction] += weight

    up_share = bucket[Direction.UP] / total
    down_share = bucket[Direction.DOWN] / total
    if up_share > down_share and up_share > params.dominant_share:
        dominant = Direction.UP
    elif down_share > up_share and down_share > params.dominant_share:
        dominant = Direction.DOWN
    else:
        dominant = Direction.NEUTRAL

    confidences = np.array([v.confidence for v, _ in votes.values()], dtype=np.float64)
    changes = np.array([v.predicted_change for v, _ in votes.values()], dtype=np.float64)

    analysis = TimeframeAnalysis(
        dominant_direction=dominant,
        alignment_score=round(max(bucket.values()) / total * 100, 2),
        timeframe_directions={label: vote.direction for label, (vote, _) in votes.items()},
        weighted_confidence=round(float((confidences * weights).sum()) / total, 2),
        weighted_predicted_change=round(float((changes * weights).sum()) / total, 4),
    )
    logger.debug(
        "timeframe_analysis",
        dominant=dominant.value,
        alignment=analysis.alignment_score,
        timeframes=list(votes),
    )
    return analysis
