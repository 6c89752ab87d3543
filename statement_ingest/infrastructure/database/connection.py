"""Database connection management."""

from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import Engine, create_engine, text
from sqlalchemy.orm import Session, sessionmaker

from statement_ingest.core.config import get_database_settings
from statement_ingest.shared.utils.logging_config import get_logger

logger = get_logger(__name__)

# Global engine instance
_engine: Optional[Engine] = None
_session_factory: Optional[sessionmaker] = None


def get_engine(url: Optional[str] = None) -> Engine:
    """Get or create the database engine (``url`` overrides settings on first call)."""
    global _engine

    if _engine is None:
        db_settings = get_database_settings()
        database_url = url or db_settings.url
        logger.info(f"Creating database engine ({database_url.split('://', 1)[0]})")
        _engine = create_engine(database_url, echo=db_settings.echo, pool_pre_ping=True)

    return _engine


def get_session_factory() -> sessionmaker:
    """Get or create the session factory."""
    global _session_factory

    if _session_factory is None:
        _session_factory = sessionmaker(
            get_engine(),
            class_=Session,
            expire_on_commit=False,
            autoflush=False,
        )
        logger.info("Session factory created")

    return _session_factory


def init_db(create_tables: bool = True) -> None:
    """Verify connectivity and create missing tables."""
    # Import all models to register them with Base
    from statement_ingest.infrastructure.database import models  # noqa: F401
    from statement_ingest.infrastructure.database.base import Base

    engine = get_engine()
    with engine.begin() as conn:
        conn.execute(text("SELECT 1"))
        if create_tables:
            Base.metadata.create_all(conn)

    logger.info("Database connection initialized successfully")


def close_db() -> None:
    """Dispose of the engine and forget the session factory."""
    global _engine, _session_factory

    if _engine is not None:
        logger.info("Closing database connections...")
        _engine.dispose()
        _engine = None
        _session_factory = None


@contextmanager
def get_db_context() -> Iterator[Session]:
    """Session context manager that commits on success and rolls back on error."""
    session = get_session_factory()()
    try:
        yield session
        session.commit()
    except Exception as e:
        logger.error(f"Database session error: {e}")
        session.rollback()
        raise
    finally:
        session.close()
