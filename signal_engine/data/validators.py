"""
Series validation for candle snapshots handed to the engine.

The engine itself only reads candles; this check is applied at the boundary
where provider data is normalized.
"""

from typing import Sequence

from ..errors import MalformedDataError, TemporalDataError
from .models import Candle


def validate_candle(candle: Candle) -> None:
    """
    Validate the OHLC and timestamp invariants of a single candle.

    Raises:
        TemporalDataError: If close_time is not after open_time
        MalformedDataError: If prices violate low <= open/close <= high
    """
    if candle.close_time <= candle.open_time:
        raise TemporalDataError(
            f"close_time {candle.close_time} must be after open_time {candle.open_time}",
            timestamp=candle.close_time,
            expected_timestamp=candle.open_time,
        )

    if not (candle.low <= min(candle.open, candle.close) <= max(candle.open, candle.close) <= candle.high):
        raise MalformedDataError(
            f"OHLC invariant violated at {candle.open_time}",
            context={"open": candle.open, "high": candle.high, "low": candle.low, "close": candle.close},
        )

    if candle.volume < 0:
        raise MalformedDataError(
            f"Negative volume at {candle.open_time}",
            context={"volume": candle.volume},
        )


def validate_series(candles: Sequence[Candle]) -> None:
    """
    Validate a candle series: every candle is well formed and open times
    strictly increase (which also rules out duplicate bars).

    Raises:
        TemporalDataError: On ordering or duplicate problems
        MalformedDataError: On invalid candle contents
    """
    previous = None
    for candle in candles:
        validate_candle(candle)
        if previous is not None and candle.open_time <= previous.open_time:
            kind = "Duplicate" if candle.open_time == previous.open_time else "Out-of-order"
            raise TemporalDataError(
                f"{kind} candle at {candle.open_time}",
                timestamp=candle.open_time,
                expected_timestamp=previous.open_time,
            )
        previous = candle
