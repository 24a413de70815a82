"""
Canonical data models for candle series.

This module defines immutable data structures that represent clean, validated
OHLCV bars after normalization from raw provider formats, plus a columnar
numpy view used by the indicator library.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Sequence

import numpy as np

from ..utils.time import ms_to_datetime


@dataclass(frozen=True)
class Candle:
    """Normalized OHLCV bar with epoch-millisecond timestamps."""
    open_time: int      # Bar open, epoch ms UTC
    close_time: int     # Bar close, epoch ms UTC
    open: float
    high: float
    low: float
    close: float
    volume: float

    @property
    def open_datetime(self) -> datetime:
        """Bar open as a UTC datetime."""
        return ms_to_datetime(self.open_time)

    @property
    def is_bullish(self) -> bool:
        """True when the bar closed above its open."""
        return self.close > self.open


def _readonly(values: np.ndarray) -> np.ndarray:
    values.setflags(write=False)
    return values


@dataclass(frozen=True)
class PriceArrays:
    """Column view of a candle series as read-only numpy arrays."""
    open_times: np.ndarray
    close_times: np.ndarray
    opens: np.ndarray
    highs: np.ndarray
    lows: np.ndarray
    closes: np.ndarray
    volumes: np.ndarray

    @classmethod
    def from_candles(cls, candles: Sequence[Candle]) -> "PriceArrays":
        """Build float64 price columns and int64 time columns."""
        return cls(
            open_times=_readonly(np.array([c.open_time for c in candles], dtype=np.int64)),
            close_times=_readonly(np.array([c.close_time for c in candles], dtype=np.int64)),
            opens=_readonly(np.array([c.open for c in candles], dtype=np.float64)),
            highs=_readonly(np.array([c.high for c in candles], dtype=np.float64)),
            lows=_readonly(np.array([c.low for c in candles], dtype=np.float64)),
            closes=_readonly(np.array([c.close for c in candles], dtype=np.float64)),
            volumes=_readonly(np.array([c.volume for c in candles], dtype=np.float64)),
        )

    def __len__(self) -> int:
        return len(self.closes)

    @property
    def last_price(self) -> float:
        return float(self.closes[-1])
