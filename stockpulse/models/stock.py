"""
行情、图表和预测数据模型

接口返回驼峰字段名（changePercent, previousClose, targetPrice ...）
"""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """驼峰别名基类，同时接受下划线字段名"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Quote(CamelModel):
    """实时报价快照（不缓存，每次请求重新获取）"""
    symbol: str = Field(..., description="股票代码，如AAPL")
    name: str = Field(default="", description="显示名称")
    price: float
    change: float = Field(default=0.0, description="涨跌额")
    change_percent: float = Field(default=0.0, description="涨跌幅(%)")
    open: float = 0.0
    high: float = 0.0
    low: float = 0.0
    volume: int = 0
    previous_close: float = 0.0
    market_cap: Optional[float] = None


class WatchlistItem(Quote):
    """自选股条目：报价 + 拉取时间"""
    added_at: str


class ChartPoint(CamelModel):
    """走势图数据点"""
    date: str  # 日线为 YYYY-MM-DD，分时为 HH:MM:SS
    price: float


class Recommendation(str, Enum):
    """预测结论"""
    BUY = "BUY"
    SELL = "SELL"
    HOLD = "HOLD"


class PredictionMetrics(CamelModel):
    rsi: int
    macd: str  # Bullish / Bearish / Neutral
    trend: str  # Upward / Downward / Sideways


class Prediction(CamelModel):
    """预测结果"""
    symbol: str
    prediction: Recommendation
    confidence: int = Field(..., ge=0, le=100)
    target_price: float
    reasoning: str
    metrics: PredictionMetrics
