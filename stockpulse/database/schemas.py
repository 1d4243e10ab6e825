"""
数据库表结构定义
使用SQLAlchemy ORM
"""

import uuid
from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, Text, JSON, Index
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def _new_id() -> str:
    return str(uuid.uuid4())


class UserDB(Base):
    """用户表"""
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=_new_id)
    name = Column(Text, nullable=False)
    email = Column(String(320), unique=True, nullable=False, index=True)
    password_hash = Column(Text, nullable=False)
    watchlist = Column(JSON, nullable=False, default=list)  # 有序股票代码列表
    created_at = Column(DateTime, nullable=False, default=datetime.now)

    def __repr__(self):
        return f"<User(id={self.id}, email={self.email})>"


class ReviewDB(Base):
    """股票评论表"""
    __tablename__ = "reviews"

    id = Column(String(36), primary_key=True, default=_new_id)
    # 仅引用用户ID，不做级联删除
    user_id = Column(String(36), nullable=False, index=True)
    stock_symbol = Column(String(20), nullable=False)
    rating = Column(Integer, nullable=False)
    comment = Column(Text, nullable=False)
    created_at = Column(DateTime, nullable=False, default=datetime.now)

    __table_args__ = (
        Index('idx_review_symbol_date', 'stock_symbol', 'created_at'),
    )

    def __repr__(self):
        return f"<Review(id={self.id}, symbol={self.stock_symbol}, rating={self.rating})>"
