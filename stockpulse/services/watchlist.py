"""
自选股管理服务
负责自选股的增删以及附带实时报价的列表查询
"""

import asyncio
from datetime import datetime, timezone
from typing import List, Optional

from loguru import logger

from stockpulse.database.store import DataStore
from stockpulse.errors import AlreadyPresent, NotFoundError, StockPulseError, ValidationError
from stockpulse.models.stock import WatchlistItem
from stockpulse.services.data_fetcher import DataFetcher
from stockpulse.utils.helpers import normalize_symbol


class WatchlistService:
    """
    自选股管理服务

    功能：
    1. 添加自选股（不允许重复）
    2. 删除自选股（不存在时视为成功）
    3. 获取自选股列表并附带实时报价
    """

    def __init__(self, store: DataStore, fetcher: DataFetcher):
        self.store = store
        self.fetcher = fetcher

    def _get_symbols(self, user_id: str) -> List[str]:
        user = self.store.get_user_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return list(user.watchlist)

    def add_stock(self, user_id: str, symbol: str) -> str:
        """
        添加股票到自选股列表

        Returns:
            标准化后的股票代码
        """
        std_symbol = normalize_symbol(symbol)
        if not std_symbol:
            raise ValidationError("Symbol is required")

        symbols = self._get_symbols(user_id)
        if std_symbol in symbols:
            raise AlreadyPresent()

        symbols.append(std_symbol)
        if not self.store.set_watchlist(user_id, symbols):
            raise NotFoundError("User not found")

        logger.info(f"添加自选股: {user_id} -> {std_symbol}")
        return std_symbol

    def remove_stock(self, user_id: str, symbol: str) -> bool:
        """
        从自选股列表删除股票

        Returns:
            是否实际删除了该股票
        """
        std_symbol = normalize_symbol(symbol)
        symbols = self._get_symbols(user_id)
        if std_symbol not in symbols:
            return False

        self.store.set_watchlist(user_id, [s for s in symbols if s != std_symbol])
        logger.info(f"删除自选股: {user_id} -> {std_symbol}")
        return True

    async def _fetch_item(self, symbol: str, added_at: str) -> Optional[WatchlistItem]:
        try:
            quote = await self.fetcher.fetch_quote(symbol)
        except StockPulseError as e:
            logger.warning(f"自选股报价获取失败，跳过: {symbol}, 错误: {e.message}")
            return None
        return WatchlistItem(**quote.model_dump(), added_at=added_at)

    async def get_items(self, user_id: str) -> List[WatchlistItem]:
        """获取自选股列表，单只股票报价失败时从结果中剔除"""
        user = self.store.get_user_by_id(user_id)
        if user is None or not user.watchlist:
            return []

        added_at = datetime.now(timezone.utc).isoformat()
        items = await asyncio.gather(
            *(self._fetch_item(symbol, added_at) for symbol in user.watchlist)
        )
        return [item for item in items if item is not None]
