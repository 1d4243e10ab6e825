"""工具模块"""

from stockpulse.utils.helpers import (
    normalize_symbol,
    safe_float,
    safe_int,
    parse_percent
)
from stockpulse.utils.log_config import setup_logging

__all__ = [
    "normalize_symbol",
    "safe_float",
    "safe_int",
    "parse_percent",
    "setup_logging"
]
