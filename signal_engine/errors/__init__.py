"""
Error classification for the signal engine.

Configuration errors fail fast at the call boundary. Data quality errors are
raised only while normalizing provider payloads into candles; the indicator
and signal layers never raise on short or degenerate input.
"""

from .configuration import ConfigurationError
from .data_quality import (
    DataQualityError,
    MalformedDataError,
    TemporalDataError,
)

__all__ = [
    "ConfigurationError",
    "DataQualityError",
    "MalformedDataError",
    "TemporalDataError",
]
