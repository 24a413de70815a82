"""
Data quality error classifications for candle normalization.

These exceptions categorize problems found in raw provider payloads before
they are turned into Candle objects.
"""

from typing import Any, Optional


class DataQualityError(Exception):
    """Base class for data quality issues that can be handled gracefully."""

    def __init__(self, message: str, context: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}
        self.recoverable = True


class TemporalDataError(DataQualityError):
    """Timestamp or sequencing issues in a candle series."""

    def __init__(self, message: str, timestamp: Optional[int] = None,
                 expected_timestamp: Optional[int] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.timestamp = timestamp
        self.expected_timestamp = expected_timestamp


class MalformedDataError(DataQualityError):
    """Data exists but is in incorrect format."""

    def __init__(self, message: str, raw_data: Optional[str] = None,
                 expected_format: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.raw_data = raw_data
        self.expected_format = expected_format
