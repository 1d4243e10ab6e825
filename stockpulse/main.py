"""
FastAPI 主入口
提供RESTful API接口
"""

import time
from contextlib import asynccontextmanager
from datetime import datetime
from typing import List, Optional

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from stockpulse.config import Settings, settings as default_settings
from stockpulse.database import DataStore, create_db_manager
from stockpulse.dependencies import (
    get_auth_service,
    get_current_user,
    get_fetcher,
    get_predictor,
    get_settings,
    get_store,
    get_watchlist_service,
)
from stockpulse.errors import ForbiddenError, NotFoundError, StockPulseError
from stockpulse.models.stock import ChartPoint, Prediction, Quote, WatchlistItem
from stockpulse.models.user import (
    AuthResponse,
    LoginRequest,
    MessageResponse,
    RegisterRequest,
    Review,
    ReviewCreate,
    ReviewWithUser,
    User,
    UserPublic,
    WatchlistAdd,
)
from stockpulse.services.auth import AuthService
from stockpulse.services.data_fetcher import DataFetcher
from stockpulse.services.predictor import Predictor
from stockpulse.services.watchlist import WatchlistService
from stockpulse.utils.helpers import normalize_symbol
from stockpulse.utils.log_config import setup_logging


def _validation_message(exc: RequestValidationError) -> str:
    """取第一条校验错误作为提示信息"""
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid value")
    return f"{field}: {message}" if field else message


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(StockPulseError)
    async def stockpulse_error_handler(request: Request, exc: StockPulseError):
        return JSONResponse(status_code=exc.status_code, content={"message": exc.message})

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"message": _validation_message(exc)})

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception(f"未处理的异常: {request.method} {request.url.path}")
        return JSONResponse(status_code=500, content={"message": "Internal Server Error"})


def _register_routes(app: FastAPI) -> None:

    @app.get("/")
    async def root(settings: Settings = Depends(get_settings)):
        """根路由"""
        return {
            "name": settings.app_name,
            "version": settings.app_version,
            "status": "running",
            "docs": "/docs"
        }

    @app.get("/health")
    def health_check(store: DataStore = Depends(get_store)):
        """健康检查"""
        return {
            "status": "healthy",
            "database": "connected" if store.ping() else "disconnected",
            "timestamp": datetime.now().isoformat()
        }

    @app.get("/api/about")
    async def about(settings: Settings = Depends(get_settings)):
        """应用信息"""
        return {
            "name": settings.app_name,
            "version": settings.app_version,
            "description": "Stock quotes, watchlists, reviews and heuristic BUY/SELL/HOLD predictions.",
            "environment": "development" if settings.app_debug else "production",
        }

    # ==================== 认证 ====================

    @app.post("/api/auth/register", response_model=AuthResponse)
    def register(body: RegisterRequest, auth: AuthService = Depends(get_auth_service)):
        """注册新用户并返回令牌"""
        user = auth.register(body.name, body.email, body.password)
        token = auth.issue_token(user.id, user.email)
        return AuthResponse(token=token, user=user.to_public())

    @app.post("/api/auth/login", response_model=AuthResponse)
    def login(body: LoginRequest, auth: AuthService = Depends(get_auth_service)):
        """登录"""
        token, user = auth.login(body.email, body.password)
        return AuthResponse(token=token, user=user.to_public())

    @app.get("/api/auth/me", response_model=UserPublic)
    def current_user(user: User = Depends(get_current_user)):
        return user.to_public()

    # ==================== 行情与预测 ====================

    @app.get("/api/stocks/quote/{symbol}", response_model=Quote)
    async def get_quote(
        symbol: str,
        user: User = Depends(get_current_user),
        fetcher: DataFetcher = Depends(get_fetcher),
    ):
        """
        获取实时报价

        - **symbol**: 股票代码，如 AAPL
        """
        return await fetcher.fetch_quote(normalize_symbol(symbol))

    @app.get("/api/stocks/chart/{symbol}/{range_}", response_model=List[ChartPoint])
    async def get_chart(
        symbol: str,
        range_: str,
        user: User = Depends(get_current_user),
        fetcher: DataFetcher = Depends(get_fetcher),
    ):
        """
        获取走势数据

        - **symbol**: 股票代码
        - **range_**: 1D, 1W, 1M, 3M, 1Y, ALL
        """
        return await fetcher.fetch_chart_series(normalize_symbol(symbol), range_)

    @app.get("/api/predict/{symbol}", response_model=Prediction)
    async def get_prediction(
        symbol: str,
        user: User = Depends(get_current_user),
        fetcher: DataFetcher = Depends(get_fetcher),
        predictor: Predictor = Depends(get_predictor),
    ):
        """获取报价并生成预测"""
        quote = await fetcher.fetch_quote(normalize_symbol(symbol))
        return predictor.predict(quote)

    # ==================== 自选股 ====================

    @app.get("/api/watchlist", response_model=List[WatchlistItem])
    async def get_watchlist(
        user: User = Depends(get_current_user),
        service: WatchlistService = Depends(get_watchlist_service),
    ):
        return await service.get_items(user.id)

    @app.post("/api/watchlist")
    def add_to_watchlist(
        body: WatchlistAdd,
        user: User = Depends(get_current_user),
        service: WatchlistService = Depends(get_watchlist_service),
    ):
        symbol = service.add_stock(user.id, body.symbol)
        return {"message": "Added to watchlist", "symbol": symbol}

    @app.delete("/api/watchlist/{symbol}", response_model=MessageResponse)
    def remove_from_watchlist(
        symbol: str,
        user: User = Depends(get_current_user),
        service: WatchlistService = Depends(get_watchlist_service),
    ):
        service.remove_stock(user.id, symbol)
        return MessageResponse(message="Removed from watchlist")

    # ==================== 评论 ====================

    @app.get("/api/reviews", response_model=List[ReviewWithUser])
    def list_reviews(
        user: User = Depends(get_current_user),
        store: DataStore = Depends(get_store),
    ):
        return store.list_reviews()

    @app.get("/api/reviews/mine", response_model=List[Review])
    def list_my_reviews(
        user: User = Depends(get_current_user),
        store: DataStore = Depends(get_store),
    ):
        return store.list_reviews_by_user(user.id)

    @app.post("/api/reviews", response_model=Review)
    def create_review(
        body: ReviewCreate,
        user: User = Depends(get_current_user),
        store: DataStore = Depends(get_store),
    ):
        return store.create_review(
            user_id=user.id,
            stock_symbol=body.stock_symbol,
            rating=body.rating,
            comment=body.comment,
        )

    @app.delete("/api/reviews/{review_id}", response_model=MessageResponse)
    def delete_review(
        review_id: str,
        user: User = Depends(get_current_user),
        store: DataStore = Depends(get_store),
    ):
        review = store.get_review_by_id(review_id)
        if review is None:
            raise NotFoundError("Review not found")
        if review.user_id != user.id:
            raise ForbiddenError("Not authorized to delete this review")

        store.delete_review(review_id)
        return MessageResponse(message="Review deleted")


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[DataStore] = None,
    fetcher: Optional[DataFetcher] = None,
    predictor: Optional[Predictor] = None,
) -> FastAPI:
    """
    创建FastAPI应用

    未传入的协作对象按配置创建
    """
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """启动时配置日志，停止时关闭行情客户端和数据库连接"""
        setup_logging(settings, log_to_file=settings.log_to_file)
        logger.info(f"{settings.app_name} API 启动中...")
        yield
        await app.state.fetcher.aclose()
        app.state.store.close()
        logger.info(f"{settings.app_name} API 已停止")

    app = FastAPI(
        title="StockPulse API",
        description="股票报价、自选股、评论与预测",
        version=settings.app_version,
        lifespan=lifespan
    )

    app.state.settings = settings
    app.state.store = store or DataStore(create_db_manager(settings.database_url))
    app.state.fetcher = fetcher or DataFetcher(
        api_key=settings.alpha_vantage_api_key,
        base_url=settings.alpha_vantage_base_url,
        timeout=settings.http_timeout,
        proxy=settings.proxy_url,
    )
    app.state.predictor = predictor or Predictor()

    # 配置CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """每个 /api 请求记录一行摘要"""
        start = time.perf_counter()
        status_code = 500  # 未处理异常时 call_next 直接抛出
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            path = request.url.path
            if path.startswith("/api"):
                duration = (time.perf_counter() - start) * 1000
                logger.info(f"{request.method} {path} {status_code} in {duration:.0f}ms")

    _register_error_handlers(app)
    _register_routes(app)
    return app


def run() -> None:
    """命令行入口"""
    import uvicorn
    uvicorn.run(
        "stockpulse.main:create_app",
        factory=True,
        host=default_settings.host,
        port=default_settings.port,
        reload=default_settings.app_debug
    )


if __name__ == "__main__":
    run()
