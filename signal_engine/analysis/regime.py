"""
Market regime classification and regime-aware confidence adjustment.
"""

from typing import Optional, Sequence, Union

import numpy as np
import structlog

from ..config.defaults import IndicatorParams, RegimeParams
from ..data.models import Candle, PriceArrays
from ..indicators import (
    calculate_adx,
    calculate_atr,
    calculate_bollinger_bands,
    calculate_ema,
    calculate_rsi,
    calculate_sma,
)
from ..models import Direction, MarketPhase, MarketRegime, RegimeType, SignalType

logger = structlog.get_logger(__name__)


def _recent_mean(values: np.ndarray, count: int) -> float:
    recent = values[-count:]
    recent = recent[~np.isnan(recent)]
    return float(recent.mean()) if recent.size else float("nan")


def _direction(close: float, sma_slow: float, ema_fast: float, ema_slow: float) -> Direction:
    if close > sma_slow and ema_fast > ema_slow:
        return Direction.UP
    if close < sma_slow and ema_fast < ema_slow:
        return Direction.DOWN
    if close > ema_fast > ema_slow:
        return Direction.UP
    if close < ema_fast < ema_slow:
        return Direction.DOWN
    return Direction.NEUTRAL


def _bars_since_cross(fast: np.ndarray, slow: np.ndarray, direction: Direction) -> Optional[int]:
    """
    Bars since the fast average crossed the slow one in `direction`.

    Returns 0 if the cross has not happened yet (fast still on the wrong
    side), None if fast has been on the trend side for the whole defined
    history.
    """
    diff = fast - slow
    defined = np.flatnonzero(~np.isnan(diff))
    if defined.size == 0:
        return None
    diff = diff[defined[0]:]
    wrong_side = diff <= 0 if direction == Direction.UP else diff >= 0
    if wrong_side[-1]:
        return 0
    opposite = np.flatnonzero(wrong_side)
    if opposite.size == 0:
        return None
    return int(len(diff) - 1 - opposite[-1])


def _phase(
    direction: Direction,
    rsi: float,
    fast: np.ndarray,
    slow: np.ndarray,
    params: RegimeParams,
) -> Optional[MarketPhase]:
    if direction == Direction.NEUTRAL:
        return None

    exhausted = rsi > params.exhaustion_rsi_high if direction == Direction.UP else rsi < params.exhaustion_rsi_low
    if exhausted:
        return MarketPhase.LATE

    since = _bars_since_cross(fast, slow, direction)
    if since is not None and since <= params.early_phase_bars:
        return MarketPhase.EARLY
    return MarketPhase.MIDDLE


def detect_market_regime(
    candles: Union[Sequence[Candle], PriceArrays],
    params: Optional[RegimeParams] = None,
    indicator_params: Optional[IndicatorParams] = None,
) -> MarketRegime:
    """
    Classify the current market regime from the latest window.

    Checks run in order and the first match wins: VOLATILE, ACCUMULATION,
    DISTRIBUTION, TRENDING, RANGING, then a tie-break on ADX and the
    Bollinger squeeze state.

    Args:
        candles: Candle series (at least `params.min_bars` long)
        params: Regime thresholds
        indicator_params: Indicator periods

    Returns:
        MarketRegime; UNDEFINED with zero strength for short series
    """
    params = params or RegimeParams()
    ind = indicator_params or IndicatorParams()
    arrays = candles if isinstance(candles, PriceArrays) else PriceArrays.from_candles(candles)
    n = len(arrays)
    if n < params.min_bars:
        return MarketRegime.undefined()

    closes, highs, lows, volumes = arrays.closes, arrays.highs, arrays.lows, arrays.volumes
    close = float(closes[-1])

    adx = float(calculate_adx(highs, lows, closes, ind.adx_period).adx[-1])
    atr = calculate_atr(arrays, ind.atr_period)
    sma_fast = calculate_sma(closes, ind.sma_fast)
    sma_slow = calculate_sma(closes, ind.sma_slow)
    sma_long = calculate_sma(closes, ind.sma_long)
    ema_fast = calculate_ema(closes, ind.ema_regime)
    ema_slow = calculate_ema(closes, ind.ema_slow)
    rsi = float(calculate_rsi(closes, ind.rsi_period)[-1])
    width = calculate_bollinger_bands(closes, ind.bollinger_period, ind.bollinger_std).width

    # Volatility: current ATR against its recent mean, 50 = average
    atr_average = _recent_mean(atr, params.average_period)
    if np.isnan(atr_average) or atr_average <= 0 or np.isnan(atr[-1]):
        volatility = 0.0
    else:
        volatility = min(100.0, float(atr[-1]) / atr_average * 50.0)

    width_average = _recent_mean(width, params.average_period)
    squeeze = bool(
        not np.isnan(width[-1]) and not np.isnan(width_average)
        and width[-1] < width_average * params.squeeze_ratio
    )

    volume_average = float(calculate_sma(volumes, ind.sma_fast)[-1])
    volume_ratio = float(volumes[-1]) / volume_average if volume_average > 0 else 0.0

    direction = _direction(close, float(sma_slow[-1]), float(ema_fast[-1]), float(ema_slow[-1]))

    is_volatile = volatility > params.volatile_threshold
    trend_strength = min(100.0, adx * 2.0)
    quiet_trend = adx < params.adx_trending and not is_volatile
    volume_surge = volume_ratio > params.volume_surge_ratio
    early_uptrend = ema_fast[-1] > ema_slow[-1] and close > sma_fast[-1] and sma_fast[-1] <= sma_slow[-1]
    early_downtrend = ema_fast[-1] < ema_slow[-1] and close < sma_fast[-1] and sma_fast[-1] >= sma_slow[-1]

    if is_volatile:
        regime, strength = RegimeType.VOLATILE, volatility
    elif quiet_trend and volume_surge and (rsi < params.oversold_rsi or early_uptrend):
        regime, strength = RegimeType.ACCUMULATION, min(100.0, volume_ratio * 50.0)
    elif quiet_trend and volume_surge and (rsi > params.overbought_rsi or early_downtrend):
        regime, strength = RegimeType.DISTRIBUTION, min(100.0, volume_ratio * 50.0)
    elif adx > params.adx_trending:
        regime, strength = RegimeType.TRENDING, trend_strength
    elif adx < params.adx_ranging and not squeeze and not is_volatile:
        regime, strength = RegimeType.RANGING, max(0.0, 100.0 - trend_strength)
    elif adx > params.adx_tiebreak and not squeeze:
        regime, strength = RegimeType.TRENDING, 50.0
    else:
        regime, strength = RegimeType.RANGING, 50.0

    if n >= ind.sma_long and not np.isnan(sma_long[-1]):
        fast_line, slow_line = sma_slow, sma_long
    else:
        fast_line, slow_line = sma_fast, sma_slow
    phase = _phase(direction, rsi, fast_line, slow_line, params)

    result = MarketRegime(
        regime=regime,
        strength=round(strength, 2),
        direction=direction,
        volatility=round(volatility, 2),
        phase=phase,
    )
    logger.debug(
        "market_regime_detected",
        regime=regime.value,
        strength=result.strength,
        direction=direction.value,
        volatility=result.volatility,
        phase=phase.value if phase else None,
        adx=round(adx, 2),
    )
    return result


def adjust_for_regime(
    signal: SignalType,
    confidence: float,
    regime: MarketRegime,
    params: Optional[RegimeParams] = None,
) -> tuple[SignalType, float]:
    """
    Rescale a verdict's confidence for the market regime.

    TRENDING boosts trend-aligned signals (more in the MIDDLE phase, less when
    LATE) and damps counter-trend signals (more in the EARLY phase).
    ACCUMULATION and DISTRIBUTION favour BUY and SELL respectively. RANGING
    damps BUY/SELL and may turn them into HOLD; VOLATILE damps everything and
    forces HOLD above the extreme volatility threshold.

    Returns:
        Tuple of (signal, confidence) with confidence in [0, 100]
    """
    params = params or RegimeParams()
    adjusted = confidence
    strength = regime.strength
    directional = signal in (SignalType.BUY, SignalType.SELL)

    if regime.regime == RegimeType.TRENDING:
        aligned = (
            (signal == SignalType.BUY and regime.direction == Direction.UP)
            or (signal == SignalType.SELL and regime.direction == Direction.DOWN)
        )
        opposed = (
            (signal == SignalType.BUY and regime.direction == Direction.DOWN)
            or (signal == SignalType.SELL and regime.direction == Direction.UP)
        )
        if aligned:
            boost = strength / params.aligned_boost_divisor
            if regime.phase == MarketPhase.MIDDLE:
                boost *= params.phase_emphasis
            elif regime.phase == MarketPhase.LATE:
                boost *= params.phase_fade
            adjusted = confidence * (1 + boost)
        elif opposed:
            damp = strength / params.counter_damp_divisor
            if regime.phase == MarketPhase.EARLY:
                damp *= params.phase_emphasis
            elif regime.phase == MarketPhase.LATE:
                damp *= params.phase_fade
            adjusted = confidence * max(0.0, 1 - damp)

    elif regime.regime in (RegimeType.ACCUMULATION, RegimeType.DISTRIBUTION):
        favoured = SignalType.BUY if regime.regime == RegimeType.ACCUMULATION else SignalType.SELL
        if signal == favoured:
            adjusted = confidence * (1 + strength / params.aligned_boost_divisor)
        elif directional:
            adjusted = confidence * max(0.0, 1 - strength / params.counter_damp_divisor)

    elif regime.regime == RegimeType.RANGING:
        if directional:
            adjusted = confidence * max(0.0, 1 - strength / params.counter_damp_divisor)
            if adjusted < 50 and strength > params.ranging_hold_strength:
                signal = SignalType.HOLD
                adjusted = 55 + strength / 5
        elif signal == SignalType.HOLD:
            adjusted = confidence * (1 + strength / params.aligned_boost_divisor)

    elif regime.regime == RegimeType.VOLATILE:
        adjusted = confidence * max(0.0, 1 - regime.volatility / params.counter_damp_divisor)
        if regime.volatility > params.forced_hold_volatility and directional:
            signal = SignalType.HOLD
            adjusted = 50 + regime.volatility / 5

    return signal, round(min(100.0, max(0.0, adjusted)), 2)
