"""
FastAPI 依赖注入

所有协作对象挂在 app.state 上，由 create_app() 创建或由调用方注入
"""

from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from stockpulse.config import Settings
from stockpulse.database.store import DataStore
from stockpulse.errors import AuthError, InvalidOrExpiredToken
from stockpulse.models.user import User
from stockpulse.services.auth import AuthService
from stockpulse.services.data_fetcher import DataFetcher
from stockpulse.services.predictor import Predictor
from stockpulse.services.watchlist import WatchlistService

bearer_scheme = HTTPBearer(auto_error=False)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request) -> DataStore:
    return request.app.state.store


def get_fetcher(request: Request) -> DataFetcher:
    return request.app.state.fetcher


def get_predictor(request: Request) -> Predictor:
    return request.app.state.predictor


def get_auth_service(
    store: DataStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> AuthService:
    return AuthService(
        store,
        secret=settings.session_secret,
        expire_days=settings.token_expire_days,
        bcrypt_rounds=settings.bcrypt_rounds,
    )


def get_watchlist_service(
    store: DataStore = Depends(get_store),
    fetcher: DataFetcher = Depends(get_fetcher),
) -> WatchlistService:
    return WatchlistService(store, fetcher)


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    auth: AuthService = Depends(get_auth_service),
) -> User:
    """解析 Bearer 令牌并加载当前用户"""
    if credentials is None or not credentials.credentials:
        raise AuthError("No token provided")

    identity = auth.verify_token(credentials.credentials)
    user = auth.store.get_user_by_id(identity.user_id)
    if user is None:
        raise InvalidOrExpiredToken()
    return user
