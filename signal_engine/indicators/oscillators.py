"""
Momentum oscillators: RSI, MACD, Stochastic, ROC and Momentum.
"""

from dataclasses import dataclass

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view

from ..errors import ConfigurationError
from .base import ArrayLike, as_series, nan_series, require_period, require_same_length
from .moving_averages import calculate_ema, calculate_sma


@dataclass(frozen=True)
class MACDResult:
    """MACD line, signal line and histogram, each aligned with the input."""
    macd: np.ndarray
    signal: np.ndarray
    histogram: np.ndarray


@dataclass(frozen=True)
class StochasticResult:
    """Stochastic %K and %D lines."""
    k: np.ndarray
    d: np.ndarray


def _rsi_from_averages(avg_gain: float, avg_loss: float) -> float:
    if avg_loss == 0:
        return 100.0 if avg_gain > 0 else 50.0
    rs = avg_gain / avg_loss
    return 100.0 - 100.0 / (1.0 + rs)


def calculate_rsi(data: ArrayLike, period: int = 14) -> np.ndarray:
    """
    Relative Strength Index using Wilder-smoothed average gain and loss.

    The first value is defined at index `period` (it needs `period` price
    changes). RSI is 100 when the average loss is zero and some gain exists,
    and 50 for a completely flat window.

    Args:
        data: Close prices
        period: Smoothing period

    Returns:
        RSI series in [0, 100]
    """
    require_period(period)
    values = as_series(data)
    result = nan_series(len(values))
    if len(values) <= period:
        return result

    deltas = np.diff(values)
    gains = np.clip(deltas, 0.0, None)
    losses = np.clip(-deltas, 0.0, None)

    avg_gain = float(gains[:period].mean())
    avg_loss = float(losses[:period].mean())
    result[period] = _rsi_from_averages(avg_gain, avg_loss)

    for i in range(period + 1, len(values)):
        avg_gain = (avg_gain * (period - 1) + gains[i - 1]) / period
        avg_loss = (avg_loss * (period - 1) + losses[i - 1]) / period
        result[i] = _rsi_from_averages(avg_gain, avg_loss)

    return result


def calculate_macd(
    data: ArrayLike,
    fast_period: int = 12,
    slow_period: int = 26,
    signal_period: int = 9,
) -> MACDResult:
    """
    Moving Average Convergence Divergence.

    The signal line is the EMA of the MACD line taken over its defined
    values only, so it first appears at index slow + signal - 2.

    Raises:
        ConfigurationError: If fast_period is not smaller than slow_period
    """
    require_period(fast_period, "fast_period")
    require_period(slow_period, "slow_period")
    require_period(signal_period, "signal_period")
    if fast_period >= slow_period:
        raise ConfigurationError(
            f"fast_period ({fast_period}) must be smaller than slow_period ({slow_period})",
            field="fast_period",
            value=fast_period,
        )

    values = as_series(data)
    macd = calculate_ema(values, fast_period) - calculate_ema(values, slow_period)
    signal = calculate_ema(macd, signal_period)
    return MACDResult(macd=macd, signal=signal, histogram=macd - signal)


def calculate_stochastic(
    highs: ArrayLike,
    lows: ArrayLike,
    closes: ArrayLike,
    k_period: int = 14,
    d_period: int = 3,
) -> StochasticResult:
    """
    Stochastic oscillator.

    %K = 100 * (close - lowest low) / (highest high - lowest low), or 50 when
    the window has zero range. %D is the SMA of the defined %K values.
    """
    require_period(k_period, "k_period")
    require_period(d_period, "d_period")
    h, l, c = as_series(highs), as_series(lows), as_series(closes)
    n = require_same_length(h, l, c)

    k = nan_series(n)
    if n >= k_period:
        highest = sliding_window_view(h, k_period).max(axis=1)
        lowest = sliding_window_view(l, k_period).min(axis=1)
        span = highest - lowest
        last = c[k_period - 1:]
        with np.errstate(divide="ignore", invalid="ignore"):
            raw = np.where(span > 0, 100.0 * (last - lowest) / span, 50.0)
        k[k_period - 1:] = np.clip(raw, 0.0, 100.0)

    return StochasticResult(k=k, d=calculate_sma(k, d_period))


def _percent_change(values: np.ndarray, period: int) -> np.ndarray:
    result = nan_series(len(values))
    if len(values) <= period:
        return result
    current = values[period:]
    prior = values[:-period]
    with np.errstate(divide="ignore", invalid="ignore"):
        change = np.where(prior != 0, (current - prior) / prior * 100.0, 0.0)
    result[period:] = change
    return result


def calculate_roc(data: ArrayLike, period: int = 9) -> np.ndarray:
    """Rate of change in percent versus the price `period` bars earlier."""
    require_period(period)
    return _percent_change(as_series(data), period)


def calculate_momentum(data: ArrayLike, period: int = 10) -> np.ndarray:
    """
    Momentum as price / price[period bars ago] * 100 - 100.

    Zero when the earlier price is zero.
    """
    require_period(period)
    return _percent_change(as_series(data), period)
