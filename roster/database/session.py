"""
Database Session Management
============================

Handles database connections and the unit-of-work lifecycle.
"""

import os
from contextlib import contextmanager
from typing import Generator, Optional
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from roster.config import settings


def create_db_engine(database_url: Optional[str] = None, echo: Optional[bool] = None) -> Engine:
    """
    Create and configure the database engine.

    Args:
        database_url: Overrides settings.database_url
        echo: Overrides settings.app_debug (SQL echo)
    """
    database_url = database_url or settings.database_url
    echo = settings.app_debug if echo is None else echo

    # SQLite-specific configuration
    if database_url.startswith("sqlite"):
        # Ensure data directory exists
        if ":///" in database_url:
            db_path = database_url.split(":///")[1]
            if not db_path.startswith(":memory:"):
                db_dir = os.path.dirname(db_path)
                if db_dir and not os.path.exists(db_dir):
                    os.makedirs(db_dir, exist_ok=True)

        engine = create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
            echo=echo
        )

        # Foreign keys are off by default in SQLite; teams must not be
        # deletable while members still point at them.
        @event.listens_for(engine, "connect")
        def set_sqlite_pragma(dbapi_conn, connection_record):
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.close()

    else:
        engine = create_engine(database_url, echo=echo, pool_pre_ping=True)

    return engine


def create_session_factory(engine_instance: Engine) -> sessionmaker:
    """Session factory bound to ``engine_instance``."""
    return sessionmaker(bind=engine_instance, autoflush=True)


# Create global engine and session factory
engine = create_db_engine()
SessionLocal = create_session_factory(engine)


@contextmanager
def get_db_context(session_factory: Optional[sessionmaker] = None) -> Generator[Session, None, None]:
    """
    Context manager for one unit of work.

    Commits when the block exits normally, rolls back on any exception
    and always closes the session.

    Usage:
        with get_db_context() as db:
            MemberRepository(db).save(Member("member1"))
    """
    db = (session_factory or SessionLocal)()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def create_all_tables(engine_instance=None):
    """Create all tables in the database."""
    from roster.models.base import Base
    import roster.models  # noqa: F401  registers Member and Team

    if engine_instance is None:
        engine_instance = engine

    Base.metadata.create_all(bind=engine_instance)


def drop_all_tables(engine_instance=None):
    """Drop all tables in the database."""
    from roster.models.base import Base
    import roster.models  # noqa: F401

    if engine_instance is None:
        engine_instance = engine

    Base.metadata.drop_all(bind=engine_instance)
