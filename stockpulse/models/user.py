"""
用户、评论数据模型及请求体定义
"""

from datetime import datetime
from typing import List
from pydantic import EmailStr, Field, StrictInt, field_validator

from stockpulse.models.stock import CamelModel


class User(CamelModel):
    """用户（含密码哈希，仅在服务内部使用）"""
    id: str
    name: str
    email: str
    password_hash: str
    watchlist: List[str] = Field(default_factory=list)
    created_at: datetime

    def to_public(self) -> "UserPublic":
        return UserPublic(
            id=self.id,
            name=self.name,
            email=self.email,
            watchlist=list(self.watchlist),
            created_at=self.created_at,
        )


class UserPublic(CamelModel):
    """对外返回的用户信息（不含密码哈希）"""
    id: str
    name: str
    email: str
    watchlist: List[str] = Field(default_factory=list)
    created_at: datetime


class Review(CamelModel):
    """股票评论"""
    id: str
    user_id: str
    stock_symbol: str
    rating: int = Field(..., ge=1, le=5)
    comment: str
    created_at: datetime


class ReviewWithUser(Review):
    user_name: str


class AuthResponse(CamelModel):
    token: str
    user: UserPublic


class MessageResponse(CamelModel):
    message: str


# ==================== 请求体 ====================

class RegisterRequest(CamelModel):
    name: str = Field(..., min_length=1)
    email: EmailStr
    password: str = Field(..., min_length=6, description="Password must be at least 6 characters")

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Name is required")
        return value


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=1, description="Password is required")


class ReviewCreate(CamelModel):
    stock_symbol: str = Field(..., min_length=1)
    rating: StrictInt = Field(..., ge=1, le=5)  # 不接受 "5" 或 true
    comment: str = Field(..., min_length=10, description="Review must be at least 10 characters")

    @field_validator("stock_symbol")
    @classmethod
    def _normalize_symbol(cls, value: str) -> str:
        value = value.strip().upper()
        if not value:
            raise ValueError("Stock symbol is required")
        return value


class WatchlistAdd(CamelModel):
    symbol: str = Field(..., min_length=1, description="Symbol is required")
