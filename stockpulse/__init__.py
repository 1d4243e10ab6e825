"""StockPulse - 股票报价、自选股、评论与预测 API"""

__version__ = "1.0.0"
