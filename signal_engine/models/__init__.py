"""
Domain models produced by the analysis and decision layers.
"""
from .market import (
    Direction,
    ForecastResult,
    MarketPhase,
    MarketRegime,
    MomentumForecast,
    RegimeType,
    TimeframeAnalysis,
)
from .signals import IndicatorSignal, PriceTargets, SignalSummary, SignalType, SignalWeights, TradingSignal

__all__ = [
    "Direction",
    "ForecastResult",
    "MarketPhase",
    "MarketRegime",
    "MomentumForecast",
    "RegimeType",
    "TimeframeAnalysis",
    "IndicatorSignal",
    "PriceTargets",
    "SignalSummary",
    "SignalType",
    "SignalWeights",
    "TradingSignal",
]
