"""
Validation of serialized engine output.
"""
from .summary_schema import SUMMARY_SCHEMA, SummaryValidationError, SummaryValidator, validate_summary

__all__ = ["SUMMARY_SCHEMA", "SummaryValidationError", "SummaryValidator", "validate_summary"]
