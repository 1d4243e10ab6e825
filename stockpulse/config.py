"""
配置管理模块
使用pydantic-settings管理环境变量和应用配置
"""

from pathlib import Path
from typing import Optional
from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """应用配置类"""

    # 行情数据源
    alpha_vantage_api_key: str = Field(default="demo", alias="ALPHA_VANTAGE_API_KEY")
    alpha_vantage_base_url: str = Field(
        default="https://www.alphavantage.co/query", alias="ALPHA_VANTAGE_BASE_URL"
    )
    http_timeout: float = Field(default=30.0, alias="HTTP_TIMEOUT")

    # 认证配置
    session_secret: str = Field(default="your-secret-key-change-in-production", alias="SESSION_SECRET")
    token_expire_days: int = Field(default=7, alias="TOKEN_EXPIRE_DAYS")
    bcrypt_rounds: int = Field(default=10, alias="BCRYPT_ROUNDS")

    # 数据库配置（默认进程内SQLite，重启即清空）
    database_url: str = Field(default="sqlite://", alias="DATABASE_URL")

    # 应用配置
    app_name: str = "StockPulse Predictor"
    app_version: str = "1.0.0"
    host: str = Field(default="0.0.0.0", alias="HOST")
    port: int = Field(default=5000, alias="PORT")
    app_debug: bool = Field(default=False, alias="APP_DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_to_file: bool = Field(default=True, alias="LOG_TO_FILE")

    # 代理配置（可选，用于访问Alpha Vantage）
    http_proxy: Optional[str] = Field(default=None, alias="HTTP_PROXY")
    https_proxy: Optional[str] = Field(default=None, alias="HTTPS_PROXY")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"
        populate_by_name = True

    @property
    def proxy_url(self) -> Optional[str]:
        """行情请求使用的代理"""
        return self.https_proxy or self.http_proxy

    @property
    def logs_dir(self) -> Path:
        """日志目录"""
        path = Path("./logs")
        path.mkdir(exist_ok=True)
        return path


# 全局配置实例（进程启动时读取一次）
settings = Settings()
