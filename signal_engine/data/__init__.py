"""
Candle data models and boundary normalization.
"""
from .models import Candle, PriceArrays
from .parsers import ParseError, parse_kline_json, parse_klines
from .validators import validate_series

__all__ = ["Candle", "PriceArrays", "ParseError", "parse_klines", "parse_kline_json", "validate_series"]
