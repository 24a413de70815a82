"""
Consensus signal engine for OHLCV candle series.

Computes technical indicators, classifies the market regime, runs the
momentum forecaster and multi-timeframe vote, and folds everything into a
single SignalSummary with optional ATR-based price targets.
"""

from .engine import SignalEngine

__version__ = "0.1.0"

__all__ = ["SignalEngine", "__version__"]
