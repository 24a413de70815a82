"""
Moving-average and trend-strength signals.
"""

from typing import Optional

import numpy as np

from ..config.defaults import IndicatorParams
from ..data.models import PriceArrays
from ..indicators import calculate_adx, calculate_ema, calculate_sma
from ..models import SignalType
from .base import SignalGroup

ADX_TREND_THRESHOLD = 25.0


def _recent_slope(values: np.ndarray, bars: int = 5) -> float:
    """Sum of the last `bars - 1` increments, i.e. last minus first of the window."""
    window = values[-bars:]
    if len(window) < 2:
        return 0.0
    return float(window[-1] - window[0])


def _last_cross(fast: np.ndarray, slow: np.ndarray, lookback: int) -> tuple[Optional[SignalType], int]:
    """
    Most recent cross of `fast` over `slow` within the last `lookback` bars.

    Returns:
        (BUY for a cross above, SELL for a cross below or None, bars ago)
    """
    diff = (fast - slow)[-(lookback + 1):]
    for offset in range(1, len(diff)):
        prev, cur = diff[-offset - 1], diff[-offset]
        if np.isnan(prev) or np.isnan(cur):
            break
        if prev <= 0 < cur:
            return SignalType.BUY, offset - 1
        if prev >= 0 > cur:
            return SignalType.SELL, offset - 1
    return None, 0


def _ema_cross(group: SignalGroup, ema_fast: np.ndarray, ema_slow: np.ndarray, slope: float) -> None:
    fast, slow = ema_fast[-1], ema_slow[-1]
    prev_fast, prev_slow = ema_fast[-2], ema_slow[-2]

    if fast > slow and prev_fast <= prev_slow:
        group.add("EMA Cross", SignalType.BUY, 4, 75,
                  "Short-term EMA crossed above long-term EMA, indicating potential uptrend.")
    elif fast < slow and prev_fast >= prev_slow:
        group.add("EMA Cross", SignalType.SELL, 4, 75,
                  "Short-term EMA crossed below long-term EMA, indicating potential downtrend.")
    elif fast > slow * 1.01:
        group.add("EMA Cross", SignalType.BUY if slope > 0 else SignalType.HOLD, 3, 70,
                  "In an uptrend, short-term EMA above long-term EMA.")
    elif fast < slow * 0.99:
        group.add("EMA Cross", SignalType.SELL if slope < 0 else SignalType.HOLD, 3, 70,
                  "In a downtrend, short-term EMA below long-term EMA.")
    else:
        group.add("EMA Cross", SignalType.NEUTRAL, 1, 50,
                  "No significant trend detected between short and long-term EMAs.")


def _trend_consistency(group: SignalGroup, ema_fast: float, ema_slow: float, sma: float, slope: float) -> None:
    bullish_stack = ema_fast > ema_slow > sma
    bearish_stack = ema_fast < ema_slow < sma

    if bullish_stack and slope > 0:
        group.add("Trend Consistency", SignalType.BUY, 3, 75,
                  "All moving averages aligned in bullish direction with positive momentum.")
    elif bearish_stack and slope < 0:
        group.add("Trend Consistency", SignalType.SELL, 3, 75,
                  "All moving averages aligned in bearish direction with negative momentum.")
    elif bullish_stack or bearish_stack:
        signal = SignalType.BUY if ema_fast > sma else SignalType.SELL
        tone = "bullish" if signal == SignalType.BUY else "bearish"
        group.add("Trend Consistency", signal, 2, 70, f"All moving averages aligned in {tone} direction.")
    else:
        group.add("Trend Consistency", SignalType.NEUTRAL, 1, 50,
                  "Moving averages not aligned, mixed trend signals.")


def _sma_cross(group: SignalGroup, sma_fast: np.ndarray, sma_slow: np.ndarray, lookback: int) -> None:
    cross, bars_ago = _last_cross(sma_fast, sma_slow, lookback)
    spread = sma_fast[-1] - sma_slow[-1]

    if cross == SignalType.BUY and spread > 0:
        group.add("SMA Cross", SignalType.BUY, 3, 75,
                  f"Golden cross: fast SMA moved above slow SMA {bars_ago} bars ago.")
    elif cross == SignalType.SELL and spread < 0:
        group.add("SMA Cross", SignalType.SELL, 3, 75,
                  f"Death cross: fast SMA moved below slow SMA {bars_ago} bars ago.")
    elif spread > 0:
        group.add("SMA Cross", SignalType.BUY, 2, 60, "Fast SMA holding above slow SMA.")
    elif spread < 0:
        group.add("SMA Cross", SignalType.SELL, 2, 60, "Fast SMA holding below slow SMA.")
    else:
        group.add("SMA Cross", SignalType.NEUTRAL, 1, 50, "Simple moving averages are not separated.")


def _adx_trend(group: SignalGroup, adx: float, plus_di: float, minus_di: float) -> None:
    if adx > ADX_TREND_THRESHOLD and plus_di > minus_di:
        group.add("ADX", SignalType.BUY, 2, 65,
                  f"Strong trend (ADX {adx:.1f}) with buyers in control.", label="ADX Trend")
    elif adx > ADX_TREND_THRESHOLD and minus_di > plus_di:
        group.add("ADX", SignalType.SELL, 2, 65,
                  f"Strong trend (ADX {adx:.1f}) with sellers in control.", label="ADX Trend")
    else:
        group.add("ADX", SignalType.NEUTRAL, 1, 50,
                  "No strong directional trend according to ADX.", label="ADX Trend")


def generate_moving_average_signals(arrays: PriceArrays, params: Optional[IndicatorParams] = None) -> SignalGroup:
    """
    EMA cross, trend consistency, SMA cross and ADX trend votes.

    Args:
        arrays: Price columns of the series
        params: Indicator periods

    Returns:
        SignalGroup with the "EMA Cross", "Trend Consistency", "SMA Cross"
        and "ADX" votes
    """
    params = params or IndicatorParams()
    closes = arrays.closes
    ema_fast = calculate_ema(closes, params.ema_fast)
    ema_slow = calculate_ema(closes, params.ema_slow)
    sma_fast = calculate_sma(closes, params.sma_fast)
    sma_slow = calculate_sma(closes, params.sma_slow)
    adx = calculate_adx(arrays.highs, arrays.lows, closes, params.adx_period)

    group = SignalGroup()
    if len(closes) < 2:
        return group

    slope = _recent_slope(ema_fast)
    _ema_cross(group, ema_fast, ema_slow, slope)
    _trend_consistency(group, ema_fast[-1], ema_slow[-1], sma_slow[-1], slope)
    _sma_cross(group, sma_fast, sma_slow, params.sma_cross_lookback)
    _adx_trend(group, adx.adx[-1], adx.plus_di[-1], adx.minus_di[-1])
    return group
