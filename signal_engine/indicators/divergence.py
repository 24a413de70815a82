"""
RSI/price divergence and five-bar fractal detection.
"""

from dataclasses import dataclass

import numpy as np

from .base import ArrayLike, as_series, require_period, require_same_length
from .oscillators import calculate_rsi


@dataclass(frozen=True)
class DivergenceReport:
    """Early reversal cues found at the end of a series."""
    bullish_divergence: bool = False
    bearish_divergence: bool = False
    upper_fractal: bool = False
    lower_fractal: bool = False


def detect_divergences_and_fractals(
    highs: ArrayLike,
    lows: ArrayLike,
    closes: ArrayLike,
    rsi_period: int = 14,
    lookback: int = 10,
    min_bars: int = 30,
    bullish_rsi: float = 40.0,
    bearish_rsi: float = 60.0,
) -> DivergenceReport:
    """
    Scan the end of the series for divergences and fractals.

    Bullish divergence: the last close undercuts every close of the previous
    `lookback - 1` bars while RSI stays above its minimum over the same bars
    and is below `bullish_rsi`. Bearish divergence mirrors this with highs and
    `bearish_rsi`. An upper (lower) fractal is a high (low) three bars from the
    end that exceeds (undercuts) the two bars on either side.

    Returns an empty report for fewer than `min_bars` bars.
    """
    require_period(rsi_period, "rsi_period")
    require_period(lookback, "lookback")
    h, l, c = as_series(highs), as_series(lows), as_series(closes)
    n = require_same_length(h, l, c)
    if n < max(min_bars, lookback + 1):
        return DivergenceReport()

    rsi = calculate_rsi(c, rsi_period)
    last_close = c[-1]
    last_rsi = rsi[-1]
    prior_closes = c[-lookback:-1]
    prior_rsi = rsi[-lookback:-1]

    bullish = bearish = False
    if not np.isnan(last_rsi) and not np.isnan(prior_rsi).any():
        bullish = bool(
            last_close < prior_closes.min()
            and last_rsi > prior_rsi.min()
            and last_rsi < bullish_rsi
        )
        bearish = bool(
            last_close > prior_closes.max()
            and last_rsi < prior_rsi.max()
            and last_rsi > bearish_rsi
        )

    pivot_high = h[-3]
    pivot_low = l[-3]
    upper = bool(np.all(pivot_high > h[[-5, -4, -2, -1]]))
    lower = bool(np.all(pivot_low < l[[-5, -4, -2, -1]]))

    return DivergenceReport(
        bullish_divergence=bullish,
        bearish_divergence=bearish,
        upper_fractal=upper,
        lower_fractal=lower,
    )
