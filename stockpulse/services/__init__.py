"""业务服务模块"""

from stockpulse.services.auth import AuthService, TokenIdentity
from stockpulse.services.data_fetcher import DataFetcher
from stockpulse.services.predictor import Predictor
from stockpulse.services.watchlist import WatchlistService

__all__ = [
    "AuthService",
    "TokenIdentity",
    "DataFetcher",
    "Predictor",
    "WatchlistService"
]
