"""
行情数据采集模块
从 Alpha Vantage 获取实时报价和走势数据，并转换为内部模型

- GLOBAL_QUOTE: 实时报价
- TIME_SERIES_INTRADAY (5min): 当日分时
- TIME_SERIES_DAILY: 日线

不做缓存和重试，上游失败直接抛给调用方
"""

from typing import Any, Dict, List, Optional

import httpx
from loguru import logger

from stockpulse.errors import ChartUnavailable, SymbolNotFound, UpstreamError
from stockpulse.models.stock import ChartPoint, Quote
from stockpulse.utils.helpers import normalize_symbol, parse_percent, safe_float, safe_int

# Alpha Vantage 在出错或限速时返回的标记字段
_ERROR_MARKERS = ("Error Message", "Note", "Information")

# 各周期保留的最新数据点数量，None 表示全部
RANGE_WINDOWS: Dict[str, Optional[int]] = {
    "1D": 50,
    "1W": 7,
    "1M": 30,
    "3M": 90,
    "1Y": 252,
    "ALL": None,
}

INTRADAY_RANGE = "1D"
INTRADAY_INTERVAL = "5min"
INTRADAY_KEY = f"Time Series ({INTRADAY_INTERVAL})"
DAILY_KEY = "Time Series (Daily)"


class DataFetcher:
    """
    Alpha Vantage 数据采集器

    http_client 可由外部注入（测试时使用 MockTransport），
    否则自行创建并在 aclose() 时关闭
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://www.alphavantage.co/query",
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = 30.0,
        proxy: Optional[str] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url
        self._owns_client = http_client is None
        self.http_client = http_client or httpx.AsyncClient(
            timeout=timeout,
            proxy=proxy if proxy else None
        )

        if api_key == "demo":
            logger.warning("Alpha Vantage使用demo key，功能受限")

    async def aclose(self) -> None:
        if self._owns_client:
            await self.http_client.aclose()

    async def _query(self, params: Dict[str, str]) -> Dict[str, Any]:
        """发起请求并解析JSON，传输层错误统一转换为 UpstreamError"""
        params = {**params, "apikey": self.api_key}
        try:
            response = await self.http_client.get(self.base_url, params=params)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as e:
            logger.error(f"Alpha Vantage请求失败: {params.get('function')} {params.get('symbol')}, 错误: {e}")
            raise UpstreamError() from e
        except ValueError as e:
            logger.error(f"Alpha Vantage返回非JSON数据: {params.get('symbol')}")
            raise UpstreamError() from e

        if not isinstance(data, dict):
            raise UpstreamError("Unexpected response from market data provider")
        return data

    @staticmethod
    def _find_marker(data: Dict[str, Any]) -> Optional[str]:
        for key in _ERROR_MARKERS:
            if data.get(key):
                return key
        return None

    # ==================== 实时报价 ====================

    async def fetch_quote(self, symbol: str) -> Quote:
        """
        获取实时报价

        Args:
            symbol: 股票代码

        Raises:
            SymbolNotFound: 代码无效、被限速或缺少价格字段
            UpstreamError: 网络或响应格式错误
        """
        symbol = normalize_symbol(symbol)
        data = await self._query({"function": "GLOBAL_QUOTE", "symbol": symbol})

        marker = self._find_marker(data)
        if marker:
            logger.warning(f"Alpha Vantage {marker}: {symbol}, {str(data[marker])[:120]}")
            raise SymbolNotFound()

        quote = data.get("Global Quote") or {}
        price = safe_float(quote.get("05. price"))
        if price is None:
            logger.warning(f"Alpha Vantage无报价数据: {symbol}")
            raise SymbolNotFound("Invalid stock symbol or no data available")

        return Quote(
            symbol=quote.get("01. symbol") or symbol,
            name=symbol,
            price=price,
            change=safe_float(quote.get("09. change"), 0.0),
            change_percent=parse_percent(quote.get("10. change percent")),
            open=safe_float(quote.get("02. open"), 0.0),
            high=safe_float(quote.get("03. high"), 0.0),
            low=safe_float(quote.get("04. low"), 0.0),
            volume=safe_int(quote.get("06. volume")),
            previous_close=safe_float(quote.get("08. previous close"), 0.0),
        )

    # ==================== 走势数据 ====================

    async def fetch_chart_series(self, symbol: str, range_: str) -> List[ChartPoint]:
        """
        获取走势图数据，按时间从旧到新排列

        Args:
            symbol: 股票代码
            range_: 1D / 1W / 1M / 3M / 1Y / ALL，其他值视为 ALL

        Raises:
            ChartUnavailable: 数据源返回错误或限速
        """
        symbol = normalize_symbol(symbol)
        range_ = range_.strip().upper()
        intraday = range_ == INTRADAY_RANGE

        if intraday:
            params = {
                "function": "TIME_SERIES_INTRADAY",
                "symbol": symbol,
                "interval": INTRADAY_INTERVAL,
            }
            series_key = INTRADAY_KEY
        else:
            params = {"function": "TIME_SERIES_DAILY", "symbol": symbol}
            series_key = DAILY_KEY

        data = await self._query(params)

        marker = self._find_marker(data)
        if marker:
            logger.warning(f"Alpha Vantage {marker}: {symbol} ({range_})")
            raise ChartUnavailable()

        time_series = data.get(series_key)
        if not time_series:
            logger.info(f"Alpha Vantage无走势数据: {symbol} ({range_})")
            return []

        # 时间戳字符串可直接按字典序排序，取最近的 N 条
        timestamps = sorted(time_series.keys(), reverse=True)
        window = RANGE_WINDOWS.get(range_)
        if window is not None:
            timestamps = timestamps[:window]

        points = []
        for ts in reversed(timestamps):
            price = safe_float(time_series[ts].get("4. close"))
            if price is None:
                continue
            label = ts.split(" ")[1] if intraday and " " in ts else ts
            points.append(ChartPoint(date=label, price=price))

        logger.debug(f"获取 {symbol} 走势数据: {len(points)} 条 (周期: {range_})")
        return points
