"""
Market context analysis: regime classification, momentum forecasting and
multi-timeframe voting.
"""
from .forecast import (
    MomentumForecaster,
    RandomSource,
    create_random_source,
    extend_with_noise,
    predict_price_movement,
)
from .regime import adjust_for_regime, detect_market_regime
from .timeframes import TimeframeVote, analyze_multiple_timeframes, analyze_timeframe, resample_candles

__all__ = [
    "MomentumForecaster",
    "RandomSource",
    "create_random_source",
    "extend_with_noise",
    "predict_price_movement",
    "adjust_for_regime",
    "detect_market_regime",
    "TimeframeVote",
    "analyze_multiple_timeframes",
    "analyze_timeframe",
    "resample_candles",
]
