"""
Volume signals: VWAP position, Chaikin money flow and volume surges.
"""

from typing import Optional

from ..config.defaults import IndicatorParams
from ..data.models import PriceArrays
from ..indicators import calculate_cmf, calculate_vwap
from ..models import SignalType
from .base import SignalGroup

VWAP_BAND = 0.01
CMF_THRESHOLD = 0.1
SURGE_RATIO = 1.5


def generate_volume_signals(arrays: PriceArrays, params: Optional[IndicatorParams] = None) -> SignalGroup:
    """
    VWAP, money-flow and volume-surge votes.

    Returns:
        SignalGroup with the "VWAP", "Volume Flow" and "Volume Surge" votes
    """
    params = params or IndicatorParams()
    group = SignalGroup()
    if len(arrays) == 0:
        return group

    price = arrays.last_price
    vwap = calculate_vwap(arrays.highs, arrays.lows, arrays.closes, arrays.volumes, params.vwap_period)[-1]
    if price > vwap * (1 + VWAP_BAND):
        group.add("VWAP", SignalType.BUY, 4, 80, "Price trading significantly above VWAP, showing bullish strength.")
    elif price < vwap * (1 - VWAP_BAND):
        group.add("VWAP", SignalType.SELL, 4, 80, "Price trading significantly below VWAP, showing bearish pressure.")
    else:
        group.add("VWAP", SignalType.NEUTRAL, 1, 50, "Price trading near VWAP, no strong directional bias.")

    cmf = calculate_cmf(arrays.highs, arrays.lows, arrays.closes, arrays.volumes, params.cmf_period)[-1]
    if cmf > CMF_THRESHOLD:
        group.add("Volume Flow", SignalType.BUY, 1, 60,
                  "Chaikin Money Flow shows strong buying pressure.", label="CMF")
    elif cmf < -CMF_THRESHOLD:
        group.add("Volume Flow", SignalType.SELL, 1, 60,
                  "Chaikin Money Flow shows strong selling pressure.", label="CMF")
    else:
        group.add("Volume Flow", SignalType.NEUTRAL, 1, 50,
                  "Chaikin Money Flow near neutral, no strong volume pressure.", label="CMF")

    volumes = arrays.volumes
    average = float(volumes[-params.volume_average_period:].mean())
    surge = volumes[-1] > average * SURGE_RATIO
    if surge and arrays.closes[-1] > arrays.opens[-1]:
        group.add("Volume Surge", SignalType.BUY, 1, 60, "High volume bullish candle detected.")
    elif surge and arrays.closes[-1] < arrays.opens[-1]:
        group.add("Volume Surge", SignalType.SELL, 1, 60, "High volume bearish candle detected.")
    else:
        group.add("Volume Surge", SignalType.NEUTRAL, 1, 50, "No significant volume surge detected.")
    return group
