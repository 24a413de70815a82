"""
Centralized logging configuration for the signal engine.

This module provides standardized logging configuration using structlog
for all components. Library code obtains loggers through get_logger and
never configures output itself; applications call configure_logging once.
"""
import logging
import sys
from typing import Any, Optional

import structlog
from structlog.types import FilteringBoundLogger


def configure_logging(
    level: str = "INFO",
    format_json: bool = False,
    include_timestamp: bool = True,
    include_caller: bool = False,
    extra_processors: Optional[list] = None
) -> None:
    """
    Configure structlog for the entire application.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_json: If True, output JSON format; otherwise human-readable
        include_timestamp: Include timestamp in log output
        include_caller: Include caller information (filename, line number)
        extra_processors: Additional structlog processors to include
    """
    log_level = getattr(logging, level.upper())

    logging.basicConfig(
        level=log_level,
        stream=sys.stdout,
        format="%(message)s"
    )

    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if include_timestamp:
        processors.append(structlog.processors.TimeStamper(fmt="iso"))

    if include_caller:
        processors.append(structlog.processors.CallsiteParameterAdder(
            parameters=[structlog.processors.CallsiteParameter.FILENAME,
                        structlog.processors.CallsiteParameter.LINENO]
        ))

    if extra_processors:
        processors.extend(extra_processors)

    if format_json:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> FilteringBoundLogger:
    """
    Get a configured structlog logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger instance
    """
    return structlog.get_logger(name)


def get_decision_logger(name: str) -> FilteringBoundLogger:
    """
    Get a logger bound for consensus decisions.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Structlog logger carrying the decision subsystem context
    """
    return get_logger(name).bind(
        subsystem="decision",
        audit_trail=True
    )


def log_signal_decision(
    logger: FilteringBoundLogger,
    signal: str,
    confidence: float,
    weights: dict[str, float],
    regime: Optional[str] = None,
    context: Optional[dict[str, Any]] = None
) -> None:
    """
    Log a consensus verdict with standardized format.

    Args:
        logger: Structlog logger instance
        signal: Final signal value (BUY, SELL, HOLD, NEUTRAL)
        confidence: Final confidence score
        weights: Summed buy/sell/hold/neutral/total weights
        regime: Market regime label, if one was classified
        context: Additional context data
    """
    bound_logger = logger.bind(
        signal=signal,
        confidence=round(confidence, 2),
        weights={key: round(value, 4) for key, value in weights.items()},
        regime=regime,
    )

    if context:
        bound_logger = bound_logger.bind(context=context)

    if signal in ("BUY", "SELL"):
        bound_logger.info("signal_decision")
    else:
        bound_logger.debug("signal_decision")
