import logging
import sqlite3
from functools import lru_cache
from typing import Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.pool import StaticPool

from ledger.config import get_settings

logger = logging.getLogger(__name__)

_SQLITE_BUSY_TIMEOUT_SECONDS = 30
_SQLITE_BUSY_TIMEOUT_MS = _SQLITE_BUSY_TIMEOUT_SECONDS * 1000


def _is_sqlite_memory(url) -> bool:
    database = url.database
    if database in (None, "", ":memory:"):
        return True
    return url.query.get("mode") == "memory"


def _install_sqlite_pragmas(engine: Engine, *, in_memory: bool) -> None:
    @event.listens_for(engine, "connect")
    def _set_sqlite_pragmas(dbapi_connection, _connection_record):
        cursor = dbapi_connection.cursor()
        try:
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.execute(f"PRAGMA busy_timeout={_SQLITE_BUSY_TIMEOUT_MS}")
            if not in_memory:
                try:
                    cursor.execute("PRAGMA journal_mode=WAL")
                    cursor.execute("PRAGMA synchronous=NORMAL")
                except sqlite3.DatabaseError:
                    logger.warning("Could not switch SQLite database to WAL mode.")
        finally:
            cursor.close()


def create_db_engine(
    database_url: Optional[str] = None,
    *,
    pool_size: Optional[int] = None,
    echo: Optional[bool] = None,
) -> Engine:
    """Build the connection pool shared by every ledger component.

    The engine is created once per process and handed to each component;
    components never open engines of their own.
    """
    settings = get_settings()
    database_url = database_url or settings.DATABASE_URL
    pool_size = pool_size if pool_size is not None else settings.DATABASE_POOL_SIZE
    echo = settings.DATABASE_ECHO if echo is None else echo

    url = make_url(database_url)
    is_sqlite = url.get_backend_name() == "sqlite"
    in_memory = is_sqlite and _is_sqlite_memory(url)

    connect_args = {}
    engine_kwargs: dict[str, object] = dict(pool_pre_ping=True, echo=echo)
    if is_sqlite:
        connect_args = {"check_same_thread": False, "timeout": _SQLITE_BUSY_TIMEOUT_SECONDS}
    if in_memory:
        # Every connection to ":memory:" is a separate database.
        engine_kwargs.update(poolclass=StaticPool)
    else:
        engine_kwargs.update(pool_size=max(1, int(pool_size)))

    engine = create_engine(database_url, connect_args=connect_args, **engine_kwargs)
    if is_sqlite:
        _install_sqlite_pragmas(engine, in_memory=in_memory)
    logger.debug("Created database engine for %s", url.render_as_string(hide_password=True))
    return engine


@lru_cache
def get_engine() -> Engine:
    """Process-wide engine built from settings."""
    return create_db_engine()


__all__ = ["create_db_engine", "get_engine"]
