"""数据库模块"""

from stockpulse.database.db import DatabaseManager, create_db_manager
from stockpulse.database.schemas import Base, UserDB, ReviewDB
from stockpulse.database.store import DataStore

__all__ = [
    "DatabaseManager",
    "create_db_manager",
    "Base",
    "UserDB",
    "ReviewDB",
    "DataStore"
]
