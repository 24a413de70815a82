"""
Kline payload parsers for converting raw provider formats to Candle objects.

This module handles the loosely typed kline payloads returned by market-data
providers (Binance-style array rows or keyed objects with string numbers)
and turns them into validated Candle instances. Nothing here performs I/O;
the caller hands over an already fetched payload.
"""

import math
from typing import Any, Sequence, Union

import orjson
import structlog

from ..errors import MalformedDataError
from .models import Candle
from .validators import validate_series

logger = structlog.get_logger(__name__)

# Positions in a Binance REST kline row
_ROW_FIELDS = ("open_time", "open", "high", "low", "close", "volume", "close_time")
_KEY_ALIASES = {
    "open_time": ("open_time", "openTime", "t"),
    "close_time": ("close_time", "closeTime", "T"),
    "open": ("open", "o"),
    "high": ("high", "h"),
    "low": ("low", "l"),
    "close": ("close", "c"),
    "volume": ("volume", "v"),
}


class ParseError(MalformedDataError):
    """Raised when parsing fails due to invalid data format."""
    pass


class InvalidPriceError(ParseError):
    """Raised when price data is invalid."""
    pass


class InvalidTimestampError(ParseError):
    """Raised when timestamp data is invalid."""
    pass


class InvalidVolumeError(ParseError):
    """Raised when volume data is invalid."""
    pass


class OHLCConsistencyError(ParseError):
    """Raised when OHLC prices are inconsistent."""
    pass


def _to_float(value: Any, name: str) -> float:
    if isinstance(value, bool):
        raise InvalidPriceError(f"Invalid {name}: {value!r}", raw_data=repr(value))
    try:
        result = float(value)
    except (TypeError, ValueError) as e:
        raise InvalidPriceError(f"Invalid {name}: {value!r}", raw_data=repr(value)) from e
    if not math.isfinite(result):
        raise InvalidPriceError(f"Non-finite {name}: {value!r}", raw_data=repr(value))
    return result


def _to_timestamp(value: Any, name: str) -> int:
    if isinstance(value, bool):
        raise InvalidTimestampError(f"Invalid {name}: {value!r}", raw_data=repr(value))
    try:
        result = int(value)
    except (TypeError, ValueError) as e:
        raise InvalidTimestampError(f"Invalid {name}: {value!r}", raw_data=repr(value)) from e
    if result < 0:
        raise InvalidTimestampError(f"Negative {name}: {value!r}", raw_data=repr(value))
    return result


def _extract_fields(raw: Any) -> dict[str, Any]:
    """Map an array row or keyed object onto canonical field names."""
    if isinstance(raw, (list, tuple)):
        if len(raw) < len(_ROW_FIELDS):
            raise ParseError(
                f"Kline row must have at least {len(_ROW_FIELDS)} fields, got {len(raw)}",
                raw_data=repr(raw),
                expected_format="[openTime, open, high, low, close, volume, closeTime, ...]",
            )
        return dict(zip(_ROW_FIELDS, raw))

    if isinstance(raw, dict):
        fields = {}
        for name, aliases in _KEY_ALIASES.items():
            for alias in aliases:
                if alias in raw:
                    fields[name] = raw[alias]
                    break
            else:
                raise ParseError(
                    f"Missing kline field: {name}",
                    raw_data=repr(raw),
                    expected_format="{openTime, open, high, low, close, volume, closeTime}",
                )
        return fields

    raise ParseError(f"Unsupported kline entry type: {type(raw).__name__}", raw_data=repr(raw))


def _parse_single_candle(raw: Any) -> Candle:
    """
    Parse a single kline entry into a Candle.

    Raises:
        ParseError: If the entry is malformed or internally inconsistent
    """
    fields = _extract_fields(raw)

    open_time = _to_timestamp(fields["open_time"], "open_time")
    close_time = _to_timestamp(fields["close_time"], "close_time")
    if close_time <= open_time:
        raise InvalidTimestampError(
            f"close_time {close_time} must be after open_time {open_time}",
            timestamp=close_time,
            expected_timestamp=open_time,
        )

    open_ = _to_float(fields["open"], "open")
    high = _to_float(fields["high"], "high")
    low = _to_float(fields["low"], "low")
    close = _to_float(fields["close"], "close")
    if min(open_, high, low, close) < 0:
        raise InvalidPriceError(f"Negative price in kline at {open_time}", raw_data=repr(raw))

    try:
        volume = float(fields["volume"])
    except (TypeError, ValueError) as e:
        raise InvalidVolumeError(f"Invalid volume: {fields['volume']!r}", raw_data=repr(raw)) from e
    if not math.isfinite(volume) or volume < 0:
        raise InvalidVolumeError(f"Invalid volume: {fields['volume']!r}", raw_data=repr(raw))

    if not (low <= min(open_, close) and max(open_, close) <= high):
        raise OHLCConsistencyError(
            f"OHLC inconsistent at {open_time}: o={open_} h={high} l={low} c={close}",
            raw_data=repr(raw),
        )

    return Candle(
        open_time=open_time,
        close_time=close_time,
        open=open_,
        high=high,
        low=low,
        close=close,
        volume=volume,
    )


def parse_klines(rows: Sequence[Any]) -> list[Candle]:
    """
    Parse a kline payload into a validated, time-ordered candle list.

    Args:
        rows: Sequence of array rows or keyed objects

    Returns:
        Candles in payload order

    Raises:
        ParseError: If any entry is malformed
        TemporalDataError: If the series is out of order or has duplicate bars
    """
    if not isinstance(rows, (list, tuple)):
        raise ParseError("Kline payload must be a list", raw_data=repr(rows)[:200])

    candles = []
    for index, raw in enumerate(rows):
        try:
            candles.append(_parse_single_candle(raw))
        except ParseError as e:
            logger.warning("kline_parse_failed", index=index, error=str(e))
            raise

    validate_series(candles)
    logger.debug("klines_parsed", count=len(candles))
    return candles


def parse_kline_json(payload: Union[str, bytes]) -> list[Candle]:
    """
    Decode a JSON kline payload and parse it.

    Raises:
        ParseError: If the text is not valid JSON or any entry is malformed
    """
    try:
        rows = orjson.loads(payload)
    except orjson.JSONDecodeError as e:
        raise ParseError(f"Invalid JSON payload: {e}", raw_data=str(payload)[:200]) from e
    return parse_klines(rows)
