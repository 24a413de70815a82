"""
Directional movement: ADX with +DI and -DI.
"""

from dataclasses import dataclass

import numpy as np

from .base import ArrayLike, as_series, nan_series, require_period, require_same_length
from .moving_averages import wilder_smooth
from .volatility import calculate_true_range


@dataclass(frozen=True)
class ADXResult:
    """ADX, +DI and -DI series aligned with the input."""
    adx: np.ndarray
    plus_di: np.ndarray
    minus_di: np.ndarray


def calculate_adx(highs: ArrayLike, lows: ArrayLike, closes: ArrayLike, period: int = 14) -> ADXResult:
    """
    Average Directional Index.

    True range and directional movement are Wilder-smoothed; the first bar
    carries zero directional movement. DI values are 0 when the smoothed true
    range is 0 and DX is 0 when both DI values are 0. +DI/-DI are defined from
    index period - 1 and ADX from index 2 * period - 2.
    """
    require_period(period)
    h, l, c = as_series(highs), as_series(lows), as_series(closes)
    n = require_same_length(h, l, c)
    if n == 0:
        empty = nan_series(0)
        return ADXResult(adx=empty, plus_di=empty, minus_di=empty)

    up_move = np.zeros(n)
    down_move = np.zeros(n)
    up_move[1:] = h[1:] - h[:-1]
    down_move[1:] = l[:-1] - l[1:]

    plus_dm = np.where((up_move > down_move) & (up_move > 0), up_move, 0.0)
    minus_dm = np.where((down_move > up_move) & (down_move > 0), down_move, 0.0)

    smoothed_tr = wilder_smooth(calculate_true_range(h, l, c), period)
    smoothed_plus = wilder_smooth(plus_dm, period)
    smoothed_minus = wilder_smooth(minus_dm, period)

    with np.errstate(divide="ignore", invalid="ignore"):
        plus_di = np.where(smoothed_tr > 0, 100.0 * smoothed_plus / smoothed_tr, 0.0)
        minus_di = np.where(smoothed_tr > 0, 100.0 * smoothed_minus / smoothed_tr, 0.0)
        di_sum = plus_di + minus_di
        dx = np.where(di_sum > 0, 100.0 * np.abs(plus_di - minus_di) / di_sum, 0.0)

    undefined = np.isnan(smoothed_tr)
    plus_di[undefined] = np.nan
    minus_di[undefined] = np.nan
    dx[undefined] = np.nan

    return ADXResult(adx=wilder_smooth(dx, period), plus_di=plus_di, minus_di=minus_di)
