"""数据模型模块"""

from stockpulse.models.stock import (
    Quote,
    WatchlistItem,
    ChartPoint,
    Recommendation,
    PredictionMetrics,
    Prediction,
)
from stockpulse.models.user import User, UserPublic, Review, ReviewWithUser

__all__ = [
    "Quote",
    "WatchlistItem",
    "ChartPoint",
    "Recommendation",
    "PredictionMetrics",
    "Prediction",
    "User",
    "UserPublic",
    "Review",
    "ReviewWithUser"
]
