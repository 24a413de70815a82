"""
Volatility indicators: Bollinger Bands, True Range, ATR and Parabolic SAR.
"""

from dataclasses import dataclass
from typing import Sequence, Union

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view

from ..data.models import Candle, PriceArrays
from .base import (
    ArrayLike,
    as_series,
    nan_series,
    require_non_negative,
    require_period,
    require_same_length,
)
from .moving_averages import wilder_smooth


@dataclass(frozen=True)
class BollingerBands:
    """Upper, middle and lower bands aligned with the input."""
    upper: np.ndarray
    middle: np.ndarray
    lower: np.ndarray

    @property
    def width(self) -> np.ndarray:
        """Band width relative to the middle band."""
        with np.errstate(divide="ignore", invalid="ignore"):
            return np.where(self.middle != 0, (self.upper - self.lower) / self.middle, np.nan)


@dataclass(frozen=True)
class PSARResult:
    """SAR values and trend (+1 up, -1 down, NaN undefined)."""
    sar: np.ndarray
    trend: np.ndarray


def calculate_bollinger_bands(data: ArrayLike, period: int = 20, std_dev: float = 2.0) -> BollingerBands:
    """
    Bollinger Bands using the population standard deviation of the window.

    Args:
        data: Close prices
        period: SMA window
        std_dev: Band multiplier (non-negative)

    Returns:
        BollingerBands with upper >= middle >= lower wherever defined
    """
    require_period(period)
    require_non_negative(std_dev, "std_dev")
    values = as_series(data)
    n = len(values)

    middle = nan_series(n)
    spread = nan_series(n)
    if n >= period:
        windows = sliding_window_view(values, period)
        middle[period - 1:] = windows.mean(axis=1)
        spread[period - 1:] = windows.std(axis=1) * std_dev

    return BollingerBands(upper=middle + spread, middle=middle, lower=middle - spread)


def calculate_true_range(highs: ArrayLike, lows: ArrayLike, closes: ArrayLike) -> np.ndarray:
    """
    True range per bar: max(high - low, |high - prev close|, |low - prev close|).

    The first bar has no previous close and uses high - low.
    """
    h, l, c = as_series(highs), as_series(lows), as_series(closes)
    n = require_same_length(h, l, c)
    tr = h - l
    if n > 1:
        prev_close = c[:-1]
        tr[1:] = np.maximum.reduce([
            h[1:] - l[1:],
            np.abs(h[1:] - prev_close),
            np.abs(l[1:] - prev_close),
        ])
    return tr


def calculate_atr(candles: Union[Sequence[Candle], PriceArrays], period: int = 14) -> np.ndarray:
    """
    Average True Range as the Wilder-smoothed true range.

    Args:
        candles: Candle sequence or its column view
        period: Smoothing period

    Returns:
        ATR series, first defined at index period - 1
    """
    require_period(period)
    arrays = candles if isinstance(candles, PriceArrays) else PriceArrays.from_candles(candles)
    if len(arrays) == 0:
        return nan_series(0)
    return wilder_smooth(calculate_true_range(arrays.highs, arrays.lows, arrays.closes), period)


def calculate_psar(
    highs: ArrayLike,
    lows: ArrayLike,
    acceleration: float = 0.02,
    max_acceleration: float = 0.2,
) -> PSARResult:
    """
    Parabolic Stop-And-Reverse.

    The initial trend is up when the second high exceeds the first. Each bar
    the SAR moves toward the extreme point by the acceleration factor; a new
    extreme raises the factor by `acceleration` up to `max_acceleration`. When
    price crosses the SAR the trend flips, the factor resets and the SAR jumps
    to the most extreme opposite price of the last three bars.
    """
    require_non_negative(acceleration, "acceleration")
    require_non_negative(max_acceleration, "max_acceleration")
    h, l = as_series(highs), as_series(lows)
    n = require_same_length(h, l)

    sar = nan_series(n)
    trend = nan_series(n)
    if n < 2:
        return PSARResult(sar=sar, trend=trend)

    uptrend = bool(h[1] > h[0])
    extreme = h[0] if uptrend else l[0]
    sar[0] = l[0] if uptrend else h[0]
    trend[0] = 1.0 if uptrend else -1.0
    factor = acceleration

    for i in range(1, n):
        current = sar[i - 1] + factor * (extreme - sar[i - 1])
        recent = slice(max(0, i - 2), i + 1)

        if uptrend:
            if current > l[i]:
                uptrend = False
                current = float(h[recent].max())
                extreme = l[i]
                factor = acceleration
            elif h[i] > extreme:
                extreme = h[i]
                factor = min(factor + acceleration, max_acceleration)
        else:
            if current < h[i]:
                uptrend = True
                current = float(l[recent].min())
                extreme = h[i]
                factor = acceleration
            elif l[i] < extreme:
                extreme = l[i]
                factor = min(factor + acceleration, max_acceleration)

        sar[i] = current
        trend[i] = 1.0 if uptrend else -1.0

    return PSARResult(sar=sar, trend=trend)
