"""
Test infrastructure: in-memory SQLite engine, session and repository fixtures.

Each test gets a fresh in-memory database (StaticPool keeps the single
connection alive), so nothing leaks between tests.
"""

import os

# must be set before roster.config is imported
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest

from roster.database import (
    StatementCounter,
    create_all_tables,
    create_db_engine,
    create_session_factory,
)
from roster.repositories import MemberRepository, TeamRepository


@pytest.fixture
def engine():
    """Fresh in-memory database with the schema created."""
    eng = create_db_engine("sqlite://", echo=False)
    create_all_tables(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture
def db(session_factory):
    """Session for one test; rolled back afterwards."""
    session = session_factory()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def member_repository(db):
    return MemberRepository(db)


@pytest.fixture
def team_repository(db):
    return TeamRepository(db)


@pytest.fixture
def statement_counter(engine):
    """Not yet listening; use it as a context manager around the measured call."""
    return StatementCounter(engine)
