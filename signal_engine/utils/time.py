"""
Epoch-millisecond helpers for candle timestamps.

Candle times are carried as integer epoch milliseconds (UTC). These helpers
convert them for display and infer the bar interval of a series.
"""

from datetime import UTC, datetime, timedelta
from typing import Optional, Sequence

EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


def ms_to_datetime(timestamp_ms: int) -> datetime:
    """
    Convert epoch milliseconds to an aware UTC datetime.

    Args:
        timestamp_ms: Milliseconds since the Unix epoch

    Returns:
        UTC datetime
    """
    return EPOCH + timedelta(milliseconds=timestamp_ms)


def datetime_to_ms(ts: datetime) -> int:
    """Convert a datetime to epoch milliseconds, treating naive values as UTC."""
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=UTC)
    return (ts - EPOCH) // timedelta(milliseconds=1)


def infer_interval_ms(open_times: Sequence[int]) -> Optional[int]:
    """
    Infer the bar interval of a series as the smallest positive step.

    Returns:
        Interval in milliseconds, or None when fewer than two bars are given
    """
    steps = [b - a for a, b in zip(open_times, open_times[1:]) if b > a]
    if not steps:
        return None
    return min(steps)
