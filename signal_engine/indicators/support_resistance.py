"""
Support and resistance levels from local extrema of recent bars.
"""

from dataclasses import dataclass

import numpy as np

from .base import ArrayLike, as_series, require_period, require_same_length


@dataclass(frozen=True)
class SupportResistance:
    """
    Support and resistance levels sorted ascending.

    `support` holds at most the lowest `max_levels` supports and `resistance`
    at most the highest `max_levels` resistances. The `significant_*` tuples
    contain only pivot levels confirmed by repeated touches, without the
    percentile fallback.
    """
    support: tuple[float, ...]
    resistance: tuple[float, ...]
    significant_support: tuple[float, ...] = ()
    significant_resistance: tuple[float, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.support or not self.resistance


def _pivot_levels(values: np.ndarray, window: int, tolerance: float,
                  merge_distance: float, find_max: bool) -> list[float]:
    levels: list[float] = []
    for i in range(window, len(values) - window):
        neighbourhood = values[i - window:i + window + 1]
        extreme = neighbourhood.max() if find_max else neighbourhood.min()
        if values[i] != extreme or extreme <= 0:
            continue

        touches = int(np.count_nonzero(np.abs(values - extreme) / extreme < tolerance))
        if touches < 2:
            continue
        if any(abs(level - extreme) / extreme < merge_distance for level in levels):
            continue
        levels.append(float(extreme))
    return levels


def find_support_resistance(
    highs: ArrayLike,
    lows: ArrayLike,
    closes: ArrayLike,
    lookback: int = 50,
    window: int = 5,
    tolerance: float = 0.005,
    merge_distance: float = 0.01,
    max_levels: int = 3,
) -> SupportResistance:
    """
    Find support and resistance over the trailing `lookback` bars.

    A bar is a pivot when it is the extreme of the +/- `window` bars around
    it. A pivot is significant when at least two bars (itself included) lie
    within `tolerance` of it; pivots within `merge_distance` of an accepted
    level are dropped. With fewer than two significant levels on a side the
    10th/25th percentile lows (support) or 75th/90th percentile highs
    (resistance) are added.
    """
    require_period(lookback, "lookback")
    require_period(window, "window")
    require_period(max_levels, "max_levels")
    h, l, c = as_series(highs), as_series(lows), as_series(closes)
    require_same_length(h, l, c)

    recent_highs = h[-lookback:]
    recent_lows = l[-lookback:]
    if len(recent_highs) == 0:
        return SupportResistance(support=(), resistance=())

    significant_support = _pivot_levels(recent_lows, window, tolerance, merge_distance, find_max=False)
    significant_resistance = _pivot_levels(recent_highs, window, tolerance, merge_distance, find_max=True)

    support = list(significant_support)
    resistance = list(significant_resistance)

    if len(support) < 2:
        ordered = np.sort(recent_lows)
        support.append(float(ordered[int(len(ordered) * 0.10)]))
        support.append(float(ordered[int(len(ordered) * 0.25)]))

    if len(resistance) < 2:
        ordered = np.sort(recent_highs)
        resistance.append(float(ordered[int(len(ordered) * 0.75)]))
        resistance.append(float(ordered[int(len(ordered) * 0.90)]))

    support.sort()
    resistance.sort()

    return SupportResistance(
        support=tuple(support[:max_levels]),
        resistance=tuple(resistance[-max_levels:]),
        significant_support=tuple(sorted(significant_support)),
        significant_resistance=tuple(sorted(significant_resistance)),
    )
