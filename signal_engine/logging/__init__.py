"""
Logging configuration and utilities for the signal engine.
"""
from .config import configure_logging, get_decision_logger, get_logger, log_signal_decision

__all__ = ["configure_logging", "get_logger", "get_decision_logger", "log_signal_decision"]
