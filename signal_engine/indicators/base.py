"""Shared argument checks and array helpers for the indicator library."""

from typing import Optional, Sequence, Union

import numpy as np

from ..errors import ConfigurationError

ArrayLike = Union[Sequence[float], np.ndarray]


def as_series(data: ArrayLike) -> np.ndarray:
    """Return the input as a 1-D float64 array."""
    values = np.asarray(data, dtype=np.float64)
    if values.ndim != 1:
        raise ConfigurationError("Indicator input must be one-dimensional", value=values.shape)
    return values


def nan_series(length: int) -> np.ndarray:
    """Array of NaN used while a lookback window fills."""
    return np.full(length, np.nan, dtype=np.float64)


def require_period(period: int, name: str = "period") -> None:
    """
    Raises:
        ConfigurationError: If the period is not a positive integer
    """
    if isinstance(period, bool) or not isinstance(period, (int, np.integer)) or period <= 0:
        raise ConfigurationError(f"{name} must be a positive integer, got {period!r}", field=name, value=period)


def require_non_negative(value: float, name: str) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value < 0:
        raise ConfigurationError(f"{name} must be a non-negative number, got {value!r}", field=name, value=value)


def require_same_length(*arrays: np.ndarray) -> int:
    """Return the common length of the arrays."""
    lengths = {len(a) for a in arrays}
    if len(lengths) > 1:
        raise ConfigurationError(f"Input series lengths differ: {sorted(lengths)}", value=sorted(lengths))
    return lengths.pop() if lengths else 0


def first_valid_index(values: np.ndarray) -> Optional[int]:
    """Index of the first non-NaN value, or None."""
    valid = np.flatnonzero(~np.isnan(values))
    return int(valid[0]) if valid.size else None
