from .base import Base
from .session import Database, engine_options, get_db_session

__all__ = ["Base", "Database", "engine_options", "get_db_session"]
