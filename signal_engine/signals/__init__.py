"""
Per-category signal generators and the weighted decision engine.
"""
from .aggregator import (
    FORECAST_KEY,
    TIMEFRAME_KEY,
    build_forecast_vote,
    build_timeframe_vote,
    calculate_confidence,
    calculate_price_targets,
    compute_signal_weights,
    determine_overall_signal,
    modulate_weights,
    regime_thresholds,
)
from .base import SignalGroup
from .early_detection import generate_early_detection_signals
from .moving_average import generate_moving_average_signals
from .oscillator import generate_oscillator_signals
from .support_resistance import generate_support_resistance_signals
from .volatility import generate_volatility_signals
from .volume import generate_volume_signals

__all__ = [
    "FORECAST_KEY",
    "TIMEFRAME_KEY",
    "SignalGroup",
    "build_forecast_vote",
    "build_timeframe_vote",
    "calculate_confidence",
    "calculate_price_targets",
    "compute_signal_weights",
    "determine_overall_signal",
    "modulate_weights",
    "regime_thresholds",
    "generate_early_detection_signals",
    "generate_moving_average_signals",
    "generate_oscillator_signals",
    "generate_support_resistance_signals",
    "generate_volatility_signals",
    "generate_volume_signals",
]
