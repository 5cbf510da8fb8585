from ledger.database.base import Base
from ledger.database.engine import create_db_engine, get_engine

__all__ = ["Base", "create_db_engine", "get_engine"]
