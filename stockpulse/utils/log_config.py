"""
日志配置
"""

import sys
from loguru import logger

from stockpulse.config import Settings

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"
)


def setup_logging(settings: Settings, log_to_file: bool = True) -> None:
    """配置控制台和按天滚动的文件日志"""
    logger.remove()
    logger.add(sys.stdout, format=LOG_FORMAT, level=settings.log_level)
    if log_to_file:
        logger.add(
            settings.logs_dir / "app_{time:YYYY-MM-DD}.log",
            rotation="1 day",
            retention="30 days",
            level="DEBUG"
        )
