"""
Early detection signals that anticipate a move before the lagging votes.
"""

from typing import Optional

import numpy as np

from ..config.defaults import IndicatorParams
from ..data.models import PriceArrays
from ..indicators import calculate_macd, calculate_rsi
from ..models import SignalType
from .base import SignalGroup

# Second differences smaller than this fraction of price are treated as flat
ACCELERATION_TOLERANCE = 1e-4


def _volume_accelerating(volumes: np.ndarray) -> bool:
    changes = np.abs(np.diff(volumes[-4:]))
    return len(changes) == 3 and bool(np.all(changes[1:] > changes[:-1]))


def generate_early_detection_signals(arrays: PriceArrays, params: Optional[IndicatorParams] = None) -> SignalGroup:
    """
    One-bar divergence, imminent MACD cross, volume accumulation and price
    acceleration votes.

    Each vote is only emitted when its condition holds, so the group may be
    empty.
    """
    params = params or IndicatorParams()
    closes, volumes = arrays.closes, arrays.volumes
    group = SignalGroup()
    if len(closes) < 5:
        return group

    rsi = calculate_rsi(closes, params.rsi_period)
    last_rsi, prev_rsi = rsi[-1], rsi[-2]
    price_down_rsi_up = closes[-1] < closes[-2] and last_rsi > prev_rsi
    price_up_rsi_down = closes[-1] > closes[-2] and last_rsi < prev_rsi

    if price_down_rsi_up and last_rsi < 35:
        group.add("Early Bullish Divergence", SignalType.BUY, 1.5, 65,
                  "Potential bullish divergence detected - price falling while RSI rising.",
                  strength=4, label="Early Detection")
    if price_up_rsi_down and last_rsi > 65:
        group.add("Early Bearish Divergence", SignalType.SELL, 1.5, 65,
                  "Potential bearish divergence detected - price rising while RSI falling.",
                  strength=4, label="Early Detection")

    macd = calculate_macd(closes, params.macd_fast, params.macd_slow, params.macd_signal)
    line, signal = macd.macd[-1], macd.signal[-1]
    histogram, prev_histogram = macd.histogram[-1], macd.histogram[-2]
    converging = abs(line - signal) < abs(prev_histogram) * 0.5

    if line < signal and histogram > prev_histogram and converging:
        group.add("Early MACD Buy", SignalType.BUY, 1.2, 60,
                  "MACD approaching signal from below - potential buy signal imminent.",
                  strength=4, label="Early MACD")
    if line > signal and histogram < prev_histogram and converging:
        group.add("Early MACD Sell", SignalType.SELL, 1.2, 60,
                  "MACD approaching signal from above - potential sell signal imminent.",
                  strength=4, label="Early MACD")

    rising_volume = _volume_accelerating(volumes) and volumes[-1] > volumes[-2]
    if rising_volume and price_down_rsi_up:
        group.add("Volume Accumulation", SignalType.BUY, 1.4, 70,
                  "Rising volume on price dip suggests accumulation phase.",
                  strength=4, label="Volume Analysis")
    elif rising_volume and price_up_rsi_down:
        group.add("Volume Distribution", SignalType.SELL, 1.4, 70,
                  "Rising volume on price rise with weakening momentum suggests distribution phase.",
                  strength=4, label="Volume Analysis")

    accelerations = np.diff(closes[-5:], n=2)
    tolerance = ACCELERATION_TOLERANCE * abs(closes[-1])
    if accelerations[-1] > tolerance and accelerations[-1] > accelerations[-2]:
        group.add("Price Acceleration", SignalType.BUY, 1.3, 65,
                  "Price momentum is accelerating positively - early trend indication.", strength=4)
    elif accelerations[-1] < -tolerance and accelerations[-1] < accelerations[-2]:
        group.add("Price Acceleration", SignalType.SELL, 1.3, 65,
                  "Price momentum is accelerating negatively - early trend indication.", strength=4)
    return group
