"""Pytest configuration and shared fixtures."""

from typing import Callable, Optional, Sequence

import numpy as np
import pytest

from signal_engine.data.models import Candle

BASE_TIME = 1_700_000_000_000  # 2023-11-14T22:13:20Z
ONE_MINUTE = 60_000


def make_candles(
    closes: Sequence[float],
    volumes: Optional[Sequence[float]] = None,
    spread: float = 0.5,
    first_open: Optional[float] = None,
    interval: int = ONE_MINUTE,
) -> list[Candle]:
    """
    Build a consistent candle series from closes.

    Each bar opens at the previous close; high and low sit `spread` beyond
    the larger and smaller of open and close.
    """
    volumes = volumes if volumes is not None else [1000.0] * len(closes)
    candles = []
    previous = closes[0] if first_open is None else first_open
    for i, (close, volume) in enumerate(zip(closes, volumes)):
        open_time = BASE_TIME + i * interval
        candles.append(Candle(
            open_time=open_time,
            close_time=open_time + interval - 1,
            open=float(previous),
            high=float(max(previous, close) + spread),
            low=float(min(previous, close) - spread),
            close=float(close),
            volume=float(volume),
        ))
        previous = close
    return candles


def v_shaped_closes(count: int = 100) -> list[float]:
    """Falls for 50 bars from 150 to 100, then climbs 0.35 per bar."""
    return [150.0 - i if i <= 50 else 100.0 + 0.35 * (i - 50) for i in range(count)]


def v_shaped_volumes(count: int = 100) -> list[float]:
    """Flat volume that starts rising 40 per bar from bar 60."""
    return [1000.0 if i < 60 else 1000.0 + 40.0 * (i - 59) for i in range(count)]


@pytest.fixture
def candle_factory() -> Callable[..., list[Candle]]:
    """The make_candles helper as a fixture."""
    return make_candles


@pytest.fixture
def rising_candles() -> list[Candle]:
    """Steady uptrend: close = 100 + i over 80 bars."""
    return make_candles([100.0 + i for i in range(80)])


@pytest.fixture
def falling_candles() -> list[Candle]:
    """Steady downtrend: close = 200 - i over 80 bars."""
    return make_candles([200.0 - i for i in range(80)])


@pytest.fixture
def flat_candles() -> list[Candle]:
    """Constant price and volume over 80 bars."""
    return make_candles([100.0] * 80, spread=0.0)


@pytest.fixture
def reversal_candles() -> list[Candle]:
    """Downtrend followed by a steady recovery on rising volume."""
    return make_candles(v_shaped_closes(), v_shaped_volumes(), spread=0.3, first_open=151.0)


@pytest.fixture
def noisy_candles() -> list[Candle]:
    """Seeded random walk of 260 bars."""
    rng = np.random.default_rng(7)
    steps = rng.normal(0.0, 0.6, 260)
    closes = 100.0 + np.cumsum(steps)
    volumes = 1000.0 + rng.random(260) * 500.0
    return make_candles(closes.tolist(), volumes.tolist(), spread=0.4)


class FixedRandom:
    """Random source returning a fixed value and counting draws."""

    def __init__(self, value: float = 0.5):
        self.value = value
        self.draws = 0

    def random(self) -> float:
        self.draws += 1
        return self.value


@pytest.fixture
def fixed_random() -> type:
    """The FixedRandom class; instantiate with the value to return."""
    return FixedRandom
