"""
通用工具函数
"""

from typing import Any, Optional

# Alpha Vantage 用这些字符串表示缺失值
_MISSING_VALUES = ('-', 'None', 'N/A', '', 'null')


def normalize_symbol(symbol: str) -> str:
    """
    标准化股票代码

    Args:
        symbol: 股票代码，如 " aapl "

    Returns:
        去除空白并转为大写，如 "AAPL"
    """
    return symbol.strip().upper()


def safe_float(value: Any, default: Optional[float] = None) -> Optional[float]:
    """安全地将值转换为浮点数，处理 '-', 'None', '' 等无效值"""
    if value is None:
        return default
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        value = value.strip()
        if value in _MISSING_VALUES:
            return default
        try:
            return float(value)
        except ValueError:
            return default
    return default


def safe_int(value: Any, default: int = 0) -> int:
    """安全转换整数（成交量字段）"""
    number = safe_float(value)
    if number is None:
        return default
    return int(number)


def parse_percent(value: Any, default: float = 0.0) -> float:
    """解析百分比字符串，如 "-1.2345%" -> -1.2345"""
    if isinstance(value, str):
        value = value.strip().rstrip('%')
    number = safe_float(value)
    return default if number is None else number
