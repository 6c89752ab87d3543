"""Database infrastructure module."""

from statement_ingest.infrastructure.database.connection import (
    get_engine,
    get_session_factory,
    init_db,
    close_db,
    get_db_context,
)
from statement_ingest.infrastructure.database.base import Base, TimestampMixin

__all__ = [
    "get_engine",
    "get_session_factory",
    "init_db",
    "close_db",
    "get_db_context",
    "Base",
    "TimestampMixin",
]
