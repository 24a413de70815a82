"""
Oscillator signals: RSI, MACD, stochastic, momentum and rate of change.
"""

from typing import Optional

from ..config.defaults import IndicatorParams
from ..data.models import PriceArrays
from ..indicators import (
    MACDResult,
    StochasticResult,
    calculate_macd,
    calculate_momentum,
    calculate_roc,
    calculate_rsi,
    calculate_stochastic,
)
from ..models import SignalType
from .base import SignalGroup


def _rsi_signal(group: SignalGroup, last: float, prev: float) -> None:
    if last < 30 and prev <= last:
        group.add("RSI", SignalType.BUY, 2, 65,
                  "RSI below 30 and turning up, indicating potential oversold condition.")
    elif last > 70 and prev >= last:
        group.add("RSI", SignalType.SELL, 2, 65,
                  "RSI above 70 and turning down, indicating potential overbought condition.")
    else:
        group.add("RSI", SignalType.NEUTRAL, 2, 50,
                  "RSI in neutral zone, no strong overbought or oversold signal.")


def _macd_signal(group: SignalGroup, macd: MACDResult) -> None:
    line, signal = macd.macd, macd.signal
    histogram, prev_histogram = macd.histogram[-1], macd.histogram[-2]

    if line[-1] > signal[-1] and line[-2] <= signal[-2]:
        group.add("MACD", SignalType.BUY, 3, 65,
                  "MACD line crossed above signal line, indicating bullish momentum.")
    elif line[-1] < signal[-1] and line[-2] >= signal[-2]:
        group.add("MACD", SignalType.SELL, 3, 65,
                  "MACD line crossed below signal line, indicating bearish momentum.")
    elif histogram > 0 and histogram > prev_histogram:
        group.add("MACD", SignalType.HOLD, 3, 65,
                  "MACD histogram increasing in positive territory, bullish momentum continuing.")
    elif histogram < 0 and histogram < prev_histogram:
        group.add("MACD", SignalType.HOLD, 3, 65,
                  "MACD histogram decreasing in negative territory, bearish momentum continuing.")
    else:
        group.add("MACD", SignalType.NEUTRAL, 1, 50, "No clear MACD signal at this time.")


def _stochastic_signal(group: SignalGroup, stochastic: StochasticResult) -> None:
    k, d = stochastic.k[-1], stochastic.d[-1]
    prev_k, prev_d = stochastic.k[-2], stochastic.d[-2]

    if k < 20 and k > d and prev_k <= prev_d:
        group.add("Stochastic", SignalType.BUY, 2, 60, "Stochastic %K crossed above %D in oversold territory.")
    elif k > 80 and k < d and prev_k >= prev_d:
        group.add("Stochastic", SignalType.SELL, 2, 60, "Stochastic %K crossed below %D in overbought territory.")
    else:
        group.add("Stochastic", SignalType.NEUTRAL, 2, 50, "No clear stochastic signal at this time.")


def _threshold_signal(
    group: SignalGroup,
    name: str,
    value: float,
    threshold: float,
    weight: float,
    messages: tuple[str, str, str],
) -> None:
    bullish, bearish, flat = messages
    if value > threshold:
        group.add(name, SignalType.BUY, weight, 60, bullish)
    elif value < -threshold:
        group.add(name, SignalType.SELL, weight, 60, bearish)
    else:
        group.add(name, SignalType.NEUTRAL, weight, 50, flat)


def generate_oscillator_signals(arrays: PriceArrays, params: Optional[IndicatorParams] = None) -> SignalGroup:
    """
    Overbought/oversold and momentum votes.

    Returns:
        SignalGroup with the "RSI", "MACD", "Stochastic", "Momentum" and
        "ROC" votes
    """
    params = params or IndicatorParams()
    closes = arrays.closes
    group = SignalGroup()
    if len(closes) < 2:
        return group

    rsi = calculate_rsi(closes, params.rsi_period)
    macd = calculate_macd(closes, params.macd_fast, params.macd_slow, params.macd_signal)
    stochastic = calculate_stochastic(arrays.highs, arrays.lows, closes, params.stochastic_k, params.stochastic_d)
    momentum = calculate_momentum(closes, params.momentum_period)
    roc = calculate_roc(closes, params.roc_period)

    _rsi_signal(group, rsi[-1], rsi[-2])
    _macd_signal(group, macd)
    _stochastic_signal(group, stochastic)
    _threshold_signal(group, "Momentum", momentum[-1], 5.0, 2, (
        "Strong positive momentum detected.",
        "Strong negative momentum detected.",
        "Momentum is relatively flat.",
    ))
    _threshold_signal(group, "ROC", roc[-1], 3.0, 1, (
        "Rate of Change shows strong positive momentum.",
        "Rate of Change shows strong negative momentum.",
        "Rate of Change indicates relatively stable price action.",
    ))
    return group
