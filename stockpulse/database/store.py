"""
数据存储
负责用户和评论的增删改查

所有操作在独立会话中执行，并由可重入锁串行化，
保证多线程部署时同一时间只有一个写入者
"""

import threading
from contextlib import contextmanager
from datetime import datetime
from typing import Generator, List, Optional

from loguru import logger
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from stockpulse.database.db import DatabaseManager
from stockpulse.database.schemas import UserDB, ReviewDB
from stockpulse.errors import DuplicateEmail, InternalError
from stockpulse.models.user import User, Review, ReviewWithUser

UNKNOWN_USER = "Unknown User"


def _to_user(row: UserDB) -> User:
    return User(
        id=row.id,
        name=row.name,
        email=row.email,
        password_hash=row.password_hash,
        watchlist=list(row.watchlist or []),
        created_at=row.created_at,
    )


def _to_review(row: ReviewDB) -> Review:
    return Review(
        id=row.id,
        user_id=row.user_id,
        stock_symbol=row.stock_symbol,
        rating=row.rating,
        comment=row.comment,
        created_at=row.created_at,
    )


class DataStore:
    """用户与评论存储"""

    def __init__(self, db_manager: DatabaseManager):
        self.db_manager = db_manager
        self._lock = threading.RLock()

    @contextmanager
    def _session(self) -> Generator[Session, None, None]:
        with self._lock:
            try:
                with self.db_manager.get_session() as session:
                    yield session
            except IntegrityError:
                raise
            except SQLAlchemyError as e:
                raise InternalError(f"Storage failure: {e.__class__.__name__}") from e

    def ping(self) -> bool:
        return self.db_manager.ping()

    def close(self) -> None:
        """应用停止时释放连接"""
        with self._lock:
            self.db_manager.dispose()

    # ==================== 用户 ====================

    def create_user(self, name: str, email: str, password_hash: str) -> User:
        """创建用户，邮箱重复时抛出 DuplicateEmail"""
        try:
            with self._session() as session:
                row = UserDB(
                    name=name,
                    email=email,
                    password_hash=password_hash,
                    watchlist=[],
                    created_at=datetime.now(),
                )
                session.add(row)
                session.flush()
                user = _to_user(row)
        except IntegrityError as e:
            raise DuplicateEmail() from e

        logger.info(f"创建用户: {user.id} ({email})")
        return user

    def get_user_by_id(self, user_id: str) -> Optional[User]:
        with self._session() as session:
            row = session.get(UserDB, user_id)
            return _to_user(row) if row else None

    def get_user_by_email(self, email: str) -> Optional[User]:
        with self._session() as session:
            row = session.query(UserDB).filter(UserDB.email == email).first()
            return _to_user(row) if row else None

    def set_watchlist(self, user_id: str, symbols: List[str]) -> bool:
        """
        覆盖用户的自选股列表

        Returns:
            用户不存在时返回 False（不做任何修改）
        """
        with self._session() as session:
            row = session.get(UserDB, user_id)
            if row is None:
                return False
            # JSON列需要整体赋新列表才会被识别为变更
            row.watchlist = list(symbols)
            return True

    # ==================== 评论 ====================

    def create_review(self, user_id: str, stock_symbol: str, rating: int, comment: str) -> Review:
        with self._session() as session:
            row = ReviewDB(
                user_id=user_id,
                stock_symbol=stock_symbol,
                rating=rating,
                comment=comment,
                created_at=datetime.now(),
            )
            session.add(row)
            session.flush()
            review = _to_review(row)

        logger.info(f"新增评论: {review.id} ({stock_symbol}, {rating}星)")
        return review

    def get_review_by_id(self, review_id: str) -> Optional[Review]:
        with self._session() as session:
            row = session.get(ReviewDB, review_id)
            return _to_review(row) if row else None

    def list_reviews(self) -> List[ReviewWithUser]:
        """全部评论（最新在前），附带作者昵称"""
        with self._session() as session:
            rows = (
                session.query(ReviewDB, UserDB.name)
                .outerjoin(UserDB, UserDB.id == ReviewDB.user_id)
                .order_by(ReviewDB.created_at.desc())
                .all()
            )
            return [
                ReviewWithUser(
                    **_to_review(review).model_dump(),
                    user_name=user_name or UNKNOWN_USER,
                )
                for review, user_name in rows
            ]

    def list_reviews_by_user(self, user_id: str) -> List[Review]:
        with self._session() as session:
            rows = (
                session.query(ReviewDB)
                .filter(ReviewDB.user_id == user_id)
                .order_by(ReviewDB.created_at.desc())
                .all()
            )
            return [_to_review(row) for row in rows]

    def delete_review(self, review_id: str) -> None:
        """删除评论（不存在时忽略）"""
        with self._session() as session:
            row = session.get(ReviewDB, review_id)
            if row is not None:
                session.delete(row)
                logger.info(f"删除评论: {review_id}")
