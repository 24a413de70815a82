"""
Simple, exponential and Wilder moving averages.

All functions return an array of the input length with NaN in the
positions where the lookback window has not filled yet.
"""

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view

from .base import ArrayLike, as_series, first_valid_index, nan_series, require_period


def calculate_sma(data: ArrayLike, period: int) -> np.ndarray:
    """
    Trailing arithmetic mean.

    A NaN-prefixed input (e.g. another indicator) is averaged from its first
    defined value onwards.

    Args:
        data: Input series
        period: Window length

    Returns:
        SMA series aligned with the input
    """
    require_period(period)
    values = as_series(data)
    result = nan_series(len(values))

    start = first_valid_index(values)
    if start is None or len(values) - start < period:
        return result

    windows = sliding_window_view(values[start:], period)
    result[start + period - 1:] = windows.mean(axis=1)
    return result


def _recursive_average(values: np.ndarray, period: int, alpha: float) -> np.ndarray:
    """Seed with the mean of the first window, then s = s + alpha * (v - s)."""
    result = nan_series(len(values))
    start = first_valid_index(values)
    if start is None or len(values) - start < period:
        return result

    seed_end = start + period
    smoothed = float(values[start:seed_end].mean())
    result[seed_end - 1] = smoothed
    for i in range(seed_end, len(values)):
        smoothed = (values[i] - smoothed) * alpha + smoothed
        result[i] = smoothed
    return result


def calculate_ema(data: ArrayLike, period: int) -> np.ndarray:
    """
    Exponential moving average seeded by the SMA of the first window.

    ema[i] = (price[i] - ema[i-1]) * 2 / (period + 1) + ema[i-1]
    """
    require_period(period)
    return _recursive_average(as_series(data), period, 2.0 / (period + 1))


def wilder_smooth(data: ArrayLike, period: int) -> np.ndarray:
    """
    Wilder smoothing: s[i] = (s[i-1] * (period - 1) + v[i]) / period.

    Seeded by the mean of the first `period` defined values.
    """
    require_period(period)
    return _recursive_average(as_series(data), period, 1.0 / period)
