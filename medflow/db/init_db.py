"""
Database initialization for local development and tests.

Production schema is owned by the dashboard; this only mirrors the tables
the storage service reads.
"""

from sqlalchemy.engine import Engine

from medflow.models import Base
from medflow.structlog_config import get_logger

logger = get_logger(__name__)


def init_db(engine: Engine) -> None:
    """Create any missing tables on ``engine``."""
    logger.info("Initializing database...", operation="init_db")
    Base.metadata.create_all(bind=engine)
    logger.info("Database initialization complete.", operation="init_db")
