"""
Support/resistance signals: bounce, rejection, breakout and breakdown.
"""

from ..indicators import SupportResistance
from ..models import SignalType
from .base import SignalGroup

PROXIMITY = 0.01


def generate_support_resistance_signals(levels: SupportResistance, price: float) -> SignalGroup:
    """
    Vote on the price position relative to the nearest levels.

    A close beyond every resistance (support) is a breakout (breakdown).
    Within 1% above the closest support is a bounce BUY, within 1% below the
    closest resistance a rejection SELL; otherwise HOLD.

    Args:
        levels: Levels from find_support_resistance
        price: Last close

    Returns:
        SignalGroup with the "Support/Resistance" vote
    """
    group = SignalGroup()
    name = "Support/Resistance"
    if levels.is_empty or price <= 0:
        group.add(name, SignalType.NEUTRAL, 1, 50, "No clear support/resistance levels detected.")
        return group

    closest_support = min(levels.support, key=lambda level: abs(level - price))
    closest_resistance = min(levels.resistance, key=lambda level: abs(level - price))
    support_distance = abs(price - closest_support) / price
    resistance_distance = abs(closest_resistance - price) / price

    if price > max(levels.resistance):
        group.add(name, SignalType.BUY, 2, 60, f"Price broke out above resistance at {max(levels.resistance):.2f}.")
    elif price < min(levels.support):
        group.add(name, SignalType.SELL, 2, 60, f"Price broke down below support at {min(levels.support):.2f}.")
    elif support_distance < PROXIMITY and price > closest_support:
        group.add(name, SignalType.BUY, 2, 65, f"Price bouncing off support at {closest_support:.2f}.")
    elif resistance_distance < PROXIMITY and price < closest_resistance:
        group.add(name, SignalType.SELL, 2, 65, f"Price rejected at resistance of {closest_resistance:.2f}.")
    elif resistance_distance < support_distance:
        group.add(name, SignalType.HOLD, 2, 65,
                  f"Price closer to resistance at {closest_resistance:.2f} than support at {closest_support:.2f}.")
    else:
        group.add(name, SignalType.HOLD, 2, 65,
                  f"Price closer to support at {closest_support:.2f} than resistance at {closest_resistance:.2f}.")
    return group
