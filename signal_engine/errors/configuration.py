"""Configuration error raised before any computation runs."""

from typing import Any, Optional


class ConfigurationError(ValueError):
    """Invalid period, multiplier or threshold parameter."""

    def __init__(self, message: str, field: Optional[str] = None,
                 value: Any = None, errors: Optional[list] = None):
        super().__init__(message)
        self.field = field
        self.value = value
        self.errors = errors or []
        self.recoverable = False
