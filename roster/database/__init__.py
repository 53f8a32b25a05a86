"""Database package."""

from roster.database.session import (
    engine,
    SessionLocal,
    create_db_engine,
    create_session_factory,
    get_db_context,
    create_all_tables,
    drop_all_tables,
)
from roster.database.instrumentation import StatementCounter

__all__ = [
    "engine",
    "SessionLocal",
    "create_db_engine",
    "create_session_factory",
    "get_db_context",
    "create_all_tables",
    "drop_all_tables",
    "StatementCounter",
]
