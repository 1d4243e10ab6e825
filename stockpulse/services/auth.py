"""
认证服务
负责密码哈希校验、注册登录以及JWT令牌的签发与验证
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple

import bcrypt
import jwt
from loguru import logger

from stockpulse.database.store import DataStore
from stockpulse.errors import DuplicateEmail, InvalidCredentials, InvalidOrExpiredToken
from stockpulse.models.user import User

JWT_ALGORITHM = "HS256"
# bcrypt 只使用前72字节
_BCRYPT_MAX_BYTES = 72


def _encode_password(raw_password: str) -> bytes:
    return raw_password.encode("utf-8")[:_BCRYPT_MAX_BYTES]


def hash_password(raw_password: str, rounds: int = 10) -> str:
    """加盐单向哈希"""
    hashed = bcrypt.hashpw(_encode_password(raw_password), bcrypt.gensalt(rounds=rounds))
    return hashed.decode("utf-8")


def verify_password(raw_password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(_encode_password(raw_password), password_hash.encode("utf-8"))
    except ValueError:
        # 存储的哈希格式损坏
        return False


@dataclass(frozen=True)
class TokenIdentity:
    """令牌中携带的身份"""
    user_id: str
    email: str


class AuthService:
    """
    认证服务

    令牌验证是无状态的，只检查签名和有效期
    """

    def __init__(
        self,
        store: DataStore,
        secret: str,
        expire_days: int = 7,
        bcrypt_rounds: int = 10,
    ):
        self.store = store
        self.secret = secret
        self.expire_days = expire_days
        self.bcrypt_rounds = bcrypt_rounds

    def register(self, name: str, email: str, raw_password: str) -> User:
        if self.store.get_user_by_email(email) is not None:
            raise DuplicateEmail()

        password_hash = hash_password(raw_password, rounds=self.bcrypt_rounds)
        user = self.store.create_user(name=name, email=email, password_hash=password_hash)
        logger.info(f"新用户注册: {email}")
        return user

    def authenticate(self, email: str, raw_password: str) -> User:
        user = self.store.get_user_by_email(email)
        if user is None or not verify_password(raw_password, user.password_hash):
            logger.info(f"登录失败: {email}")
            raise InvalidCredentials()
        return user

    def issue_token(self, user_id: str, email: str, now: Optional[datetime] = None) -> str:
        """签发有效期 expire_days 天的令牌"""
        issued_at = now or datetime.now(timezone.utc)
        payload = {
            "userId": user_id,
            "email": email,
            "iat": issued_at,
            "exp": issued_at + timedelta(days=self.expire_days),
        }
        return jwt.encode(payload, self.secret, algorithm=JWT_ALGORITHM)

    def verify_token(self, token: str) -> TokenIdentity:
        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[JWT_ALGORITHM],
                options={"require": ["exp", "userId", "email"]},
            )
        except jwt.PyJWTError as e:
            logger.debug(f"令牌验证失败: {e}")
            raise InvalidOrExpiredToken() from e

        user_id = payload.get("userId")
        email = payload.get("email")
        if not isinstance(user_id, str) or not isinstance(email, str):
            raise InvalidOrExpiredToken()
        return TokenIdentity(user_id=user_id, email=email)

    def login(self, email: str, raw_password: str) -> Tuple[str, User]:
        """校验凭据并签发令牌"""
        user = self.authenticate(email, raw_password)
        return self.issue_token(user.id, user.email), user
