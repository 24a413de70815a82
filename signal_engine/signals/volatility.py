"""
Volatility signals: Bollinger squeeze/expansion and Parabolic SAR.
"""

from typing import Optional

from ..config.defaults import IndicatorParams
from ..data.models import PriceArrays
from ..indicators import calculate_bollinger_bands, calculate_psar
from ..models import SignalType
from .base import SignalGroup

SQUEEZE_WIDTH = 0.03
EXPANSION_WIDTH = 0.04


def generate_volatility_signals(arrays: PriceArrays, params: Optional[IndicatorParams] = None) -> SignalGroup:
    """
    Bollinger band and PSAR votes.

    A narrowing band below 3% width is a squeeze (NEUTRAL); a widening band
    above 4% with price outside it is a breakout. A PSAR flip is directional,
    an unchanged PSAR trend is a HOLD.

    Returns:
        SignalGroup with the "Bollinger" and (when defined) "PSAR" votes
    """
    params = params or IndicatorParams()
    closes = arrays.closes
    group = SignalGroup()
    if len(closes) < 2:
        return group

    bands = calculate_bollinger_bands(closes, params.bollinger_period, params.bollinger_std)
    width = bands.width
    price = closes[-1]
    squeezing = width[-1] < width[-2] and width[-1] < SQUEEZE_WIDTH
    expanding = width[-1] > width[-2] and width[-1] > EXPANSION_WIDTH

    if squeezing:
        group.add("Bollinger", SignalType.NEUTRAL, 1, 50,
                  "Bollinger Bands squeezing, potential volatility ahead.", label="BB Squeeze")
    elif expanding and price > bands.upper[-1]:
        group.add("Bollinger", SignalType.BUY, 2, 60,
                  "Price breaking above upper Bollinger Band with expanding volatility.", label="BB Squeeze")
    elif expanding and price < bands.lower[-1]:
        group.add("Bollinger", SignalType.SELL, 2, 60,
                  "Price breaking below lower Bollinger Band with expanding volatility.", label="BB Squeeze")
    else:
        group.add("Bollinger", SignalType.NEUTRAL, 1, 50,
                  "Price within Bollinger Bands, no strong volatility signal.", label="BB Squeeze")

    psar = calculate_psar(arrays.highs, arrays.lows, params.psar_step, params.psar_max)
    trend, prev_trend = psar.trend[-1], psar.trend[-2]
    if trend > 0 > prev_trend:
        group.add("PSAR", SignalType.BUY, 3, 70, "Parabolic SAR flipped to bullish trend.")
    elif trend < 0 < prev_trend:
        group.add("PSAR", SignalType.SELL, 3, 70, "Parabolic SAR flipped to bearish trend.")
    elif trend > 0:
        group.add("PSAR", SignalType.HOLD, 3, 70, "Parabolic SAR confirms ongoing uptrend.")
    elif trend < 0:
        group.add("PSAR", SignalType.HOLD, 3, 70, "Parabolic SAR confirms ongoing downtrend.")
    return group
