"""
Database Configuration and Connection Management

Provides database setup, connection pooling, and session management for
the email record store.

Design Considerations:
- Connection pooling for concurrent request handling
- SQLAlchemy session lifecycle with commit/rollback
- SQLite by default, any SQLAlchemy URL through DATABASE_URL
"""

import os
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import QueuePool

from triage.storage.models import Base

logger = logging.getLogger(__name__)

# Database configuration
DB_PATH = os.getenv("DATABASE_URL", "sqlite:///data/triage.db")
DB_POOL_SIZE = int(os.getenv("DB_POOL_SIZE", "5"))
DB_MAX_OVERFLOW = int(os.getenv("DB_MAX_OVERFLOW", "10"))
DB_POOL_TIMEOUT = int(os.getenv("DB_POOL_TIMEOUT", "30"))

# Initialize engine with connection pooling
engine = create_engine(
    DB_PATH,
    poolclass=QueuePool,
    pool_size=DB_POOL_SIZE,
    max_overflow=DB_MAX_OVERFLOW,
    pool_timeout=DB_POOL_TIMEOUT,
    connect_args={"check_same_thread": False} if DB_PATH.startswith("sqlite") else {},
    echo=os.getenv("SQL_ECHO", "False").lower() == "true"
)

# Create session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)


def _ensure_sqlite_directory(url: str) -> None:
    parsed = make_url(url)
    if parsed.get_backend_name() != "sqlite" or not parsed.database or parsed.database == ":memory:":
        return
    Path(parsed.database).parent.mkdir(parents=True, exist_ok=True)


def init_db() -> None:
    """
    Create the schema if it does not exist yet.

    Raises:
        RuntimeError: If the schema cannot be created
    """
    try:
        logger.info("Initializing database schema")
        _ensure_sqlite_directory(DB_PATH)
        Base.metadata.create_all(bind=engine)
        logger.info("Database schema initialized successfully")
    except Exception as e:
        logger.error(f"Database initialization failed: {str(e)}")
        raise RuntimeError(f"Failed to initialize database: {str(e)}")


@contextmanager
def get_db_session() -> Generator[Session, None, None]:
    """
    Provide a database session with commit on success and rollback on error.

    Yields:
        SQLAlchemy session for database operations
    """
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception as e:
        session.rollback()
        logger.error(f"Database session error: {str(e)}")
        raise
    finally:
        session.close()
