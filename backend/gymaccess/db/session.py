"""Database engine and session management.

The engine is created once per process from settings; ``dispose_engine`` is
called from the application lifespan on shutdown. Request handlers receive a
session through the ``DbSession`` dependency and never open one themselves.
"""

import logging
from collections.abc import Generator
from typing import Annotated

from fastapi import Depends
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from gymaccess.core.config import settings

logger = logging.getLogger(__name__)


def build_engine(database_url: str) -> Engine:
    """Create an engine, handling SQLite specially for check_same_thread."""
    connect_args = {}

    if database_url.startswith("sqlite"):
        connect_args = {"check_same_thread": False}
        pool_config = {
            "pool_pre_ping": True,
        }
    else:
        # PostgreSQL/MySQL connection pooling configuration
        pool_config = {
            "pool_size": 10,          # Number of connections to keep open
            "max_overflow": 20,       # Additional connections allowed beyond pool_size
            "pool_pre_ping": True,    # Test connections before using them
            "pool_recycle": 3600,     # Recycle connections after 1 hour
        }

    new_engine = create_engine(
        database_url,
        connect_args=connect_args,
        echo=settings.sql_echo,
        **pool_config,
    )

    # Enable foreign key enforcement for SQLite
    if database_url.startswith("sqlite"):
        @event.listens_for(new_engine, "connect")
        def set_sqlite_pragma(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return new_engine


def _ensure_sqlite_dir(database_url: str) -> None:
    """Create the parent directory of a file-based SQLite database."""
    prefix = "sqlite:///"
    if database_url.startswith(prefix) and ":memory:" not in database_url:
        from pathlib import Path
        Path(database_url[len(prefix):]).parent.mkdir(parents=True, exist_ok=True)


_ensure_sqlite_dir(settings.database_url)
engine = build_engine(settings.database_url)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """Get database session dependency."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def dispose_engine() -> None:
    """Close pooled connections at shutdown."""
    engine.dispose()
    logger.info("Database engine disposed")


# Type alias for dependency injection
DbSession = Annotated[Session, Depends(get_db)]
