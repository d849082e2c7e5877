"""Database configuration for the Taskboard service."""
from typing import Optional

from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlmodel import create_engine

from taskboard.config import get_settings


def build_engine(database_url: str, echo: bool = False) -> Engine:
    """Create an engine, installing the SQLite pragmas when needed."""
    is_sqlite = database_url.startswith("sqlite")
    # SQLite connections are shared between the request thread and worker threads
    connect_args = {"check_same_thread": False} if is_sqlite else {}
    new_engine = create_engine(database_url, echo=echo, connect_args=connect_args)

    if is_sqlite:
        @event.listens_for(new_engine, "connect")
        def set_sqlite_pragma(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            # Enable foreign keys and WAL mode for better concurrency
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute("PRAGMA busy_timeout=5000")
            cursor.close()

    return new_engine


_engine: Optional[Engine] = None


def get_engine() -> Engine:
    """Process-wide engine built from DATABASE_URL on first use."""
    global _engine
    if _engine is None:
        _engine = build_engine(get_settings().database_url)
    return _engine

