"""
数据库连接和管理
"""

from pathlib import Path
from typing import Generator
from contextlib import contextmanager

from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from loguru import logger

from stockpulse.database.schemas import Base


class DatabaseManager:
    """数据库管理器"""

    def __init__(self, database_url: str, echo: bool = False):
        self.database_url = database_url
        in_memory = database_url in ("sqlite://", "sqlite:///:memory:")

        # 确保数据目录存在
        if database_url.startswith("sqlite") and not in_memory:
            db_path = database_url.replace("sqlite:///", "")
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)

        engine_kwargs = {"echo": echo}
        if database_url.startswith("sqlite"):
            engine_kwargs["connect_args"] = {"check_same_thread": False}
        if in_memory:
            # 内存库只有一个连接，所有会话共享同一份数据
            engine_kwargs["poolclass"] = StaticPool

        self.engine = create_engine(database_url, **engine_kwargs)

        self.SessionLocal = sessionmaker(
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
            bind=self.engine
        )

        logger.info(f"数据库连接初始化完成: {database_url}")

    def init_db(self) -> None:
        """初始化数据库，创建所有表"""
        Base.metadata.create_all(bind=self.engine)
        logger.info("数据库表创建完成")

    def ping(self) -> bool:
        """检查数据库是否可用"""
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.error(f"数据库连接检查失败: {e}")
            return False

    @contextmanager
    def get_session(self) -> Generator[Session, None, None]:
        """获取数据库会话的上下文管理器"""
        session = self.SessionLocal()
        try:
            yield session
            session.commit()
        except Exception as e:
            session.rollback()
            logger.error(f"数据库操作失败: {e}")
            raise
        finally:
            session.close()

    def dispose(self) -> None:
        """释放连接池"""
        self.engine.dispose()


def create_db_manager(database_url: str, echo: bool = False) -> DatabaseManager:
    """创建数据库管理器并建表"""
    manager = DatabaseManager(database_url, echo=echo)
    manager.init_db()
    return manager
