"""
Volume indicators: rolling VWAP, Chaikin Money Flow and relative volume.
"""

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view

from .base import ArrayLike, as_series, nan_series, require_period, require_same_length
from .moving_averages import calculate_sma


def calculate_vwap(
    highs: ArrayLike,
    lows: ArrayLike,
    closes: ArrayLike,
    volumes: ArrayLike,
    period: int = 14,
) -> np.ndarray:
    """
    Rolling volume-weighted average of the typical price (h + l + c) / 3.

    Falls back to the bar close when the window carries no volume.
    """
    require_period(period)
    h, l, c, v = as_series(highs), as_series(lows), as_series(closes), as_series(volumes)
    n = require_same_length(h, l, c, v)

    result = nan_series(n)
    if n < period:
        return result

    typical = (h + l + c) / 3.0
    weighted = sliding_window_view(typical * v, period).sum(axis=1)
    total_volume = sliding_window_view(v, period).sum(axis=1)
    with np.errstate(divide="ignore", invalid="ignore"):
        result[period - 1:] = np.where(total_volume > 0, weighted / total_volume, c[period - 1:])
    return result


def calculate_cmf(
    highs: ArrayLike,
    lows: ArrayLike,
    closes: ArrayLike,
    volumes: ArrayLike,
    period: int = 20,
) -> np.ndarray:
    """
    Chaikin Money Flow.

    Sum of money-flow volume over the window divided by the window volume,
    where the multiplier is ((c - l) - (h - c)) / (h - l). Zero-range bars are
    skipped entirely; a window without usable volume yields 0.
    """
    require_period(period)
    h, l, c, v = as_series(highs), as_series(lows), as_series(closes), as_series(volumes)
    n = require_same_length(h, l, c, v)

    result = nan_series(n)
    if n < period:
        return result

    span = h - l
    usable = span > 0
    with np.errstate(divide="ignore", invalid="ignore"):
        multiplier = np.where(usable, ((c - l) - (h - c)) / span, 0.0)
    flow_volume = multiplier * v
    counted_volume = np.where(usable, v, 0.0)

    flow = sliding_window_view(flow_volume, period).sum(axis=1)
    total = sliding_window_view(counted_volume, period).sum(axis=1)
    with np.errstate(divide="ignore", invalid="ignore"):
        result[period - 1:] = np.where(total > 0, flow / total, 0.0)
    return result


def calculate_rvol(volumes: ArrayLike, period: int = 20) -> np.ndarray:
    """
    Relative volume: current volume divided by its trailing SMA.

    NaN where the average is undefined or zero.
    """
    require_period(period)
    v = as_series(volumes)
    average = calculate_sma(v, period)
    with np.errstate(divide="ignore", invalid="ignore"):
        return np.where(average > 0, v / average, np.nan)
