"""
Stateless indicator library over price and volume series.

Every series function returns a float64 array with the input's length,
NaN while its lookback window fills. Short input never raises; invalid
periods raise ConfigurationError.
"""

from .divergence import DivergenceReport, detect_divergences_and_fractals
from .moving_averages import calculate_ema, calculate_sma, wilder_smooth
from .oscillators import (
    MACDResult,
    StochasticResult,
    calculate_macd,
    calculate_momentum,
    calculate_roc,
    calculate_rsi,
    calculate_stochastic,
)
from .support_resistance import SupportResistance, find_support_resistance
from .trend import ADXResult, calculate_adx
from .volatility import (
    BollingerBands,
    PSARResult,
    calculate_atr,
    calculate_bollinger_bands,
    calculate_psar,
    calculate_true_range,
)
from .volume import calculate_cmf, calculate_rvol, calculate_vwap

__all__ = [
    "calculate_sma",
    "calculate_ema",
    "wilder_smooth",
    "calculate_rsi",
    "calculate_macd",
    "calculate_stochastic",
    "calculate_roc",
    "calculate_momentum",
    "MACDResult",
    "StochasticResult",
    "calculate_bollinger_bands",
    "calculate_true_range",
    "calculate_atr",
    "calculate_psar",
    "BollingerBands",
    "PSARResult",
    "calculate_adx",
    "ADXResult",
    "calculate_vwap",
    "calculate_cmf",
    "calculate_rvol",
    "find_support_resistance",
    "SupportResistance",
    "detect_divergences_and_fractals",
    "DivergenceReport",
]
