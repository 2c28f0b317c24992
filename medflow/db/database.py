"""Database engine and session management."""

from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import NullPool

from medflow.config import get_settings
from medflow.structlog_config import get_logger

logger = get_logger(__name__)

# Global engine instance
_engine = None
_SessionLocal = None


def get_engine():
    """Get or create the global database engine."""
    global _engine
    if _engine is None:
        settings = get_settings()
        # NullPool opens a connection per session; the index is read once per request
        _engine = create_engine(
            settings.get_active_database_url(),
            poolclass=NullPool,
            echo=False,
        )
        logger.info("Created database engine", operation="db_engine_init", pool="NullPool")
    return _engine


def get_session_factory():
    """Get or create the global session factory."""
    global _SessionLocal
    if _SessionLocal is None:
        _SessionLocal = sessionmaker(
            autocommit=False, autoflush=False, bind=get_engine()
        )
        logger.info("Created session factory", operation="db_session_factory_init")
    return _SessionLocal


def get_db() -> Generator[Session, None, None]:
    """
    Dependency that provides a database session.
    Ensures proper cleanup after use.
    """
    SessionLocal = get_session_factory()
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
