"""QueryExecutor tests: lock clauses, lock failure translation, entity graphs."""

import pytest
from sqlalchemy import select
from sqlalchemy.dialects import postgresql
from sqlalchemy.exc import OperationalError

from roster.core.constants import LockMode
from roster.core.exceptions import LockingFailureError, QueryDefinitionError
from roster.models import Member, Team
from roster.query import QueryExecutor, is_lock_failure


class _PgError(Exception):
    def __init__(self, message, pgcode):
        super().__init__(message)
        self.pgcode = pgcode


@pytest.fixture
def executor(db):
    return QueryExecutor(db, Member)


def pg_sql(stmt) -> str:
    return str(stmt.compile(dialect=postgresql.dialect()))


class TestPrepare:
    """Eager loads and lock clauses added to a select."""

    def test_write_lock(self, executor):
        stmt = executor.prepare(select(Member), lock=LockMode.PESSIMISTIC_WRITE)

        assert pg_sql(stmt).endswith("FOR UPDATE")

    def test_read_lock(self, executor):
        stmt = executor.prepare(select(Member), lock=LockMode.PESSIMISTIC_READ)

        assert pg_sql(stmt).endswith("FOR SHARE")

    def test_no_lock(self, executor):
        stmt = executor.prepare(select(Member))

        assert "FOR " not in pg_sql(stmt)

    def test_nowait(self, executor, monkeypatch):
        monkeypatch.setattr("roster.query.executor.settings.lock_nowait", True)

        stmt = executor.prepare(select(Member), lock=LockMode.PESSIMISTIC_WRITE)

        assert pg_sql(stmt).endswith("FOR UPDATE NOWAIT")

    def test_unknown_association(self, executor):
        with pytest.raises(QueryDefinitionError, match="No association 'club'"):
            executor.prepare(select(Member), entity_graph=("club",))

    def test_nested_path(self, db, executor, team_repository):
        team = team_repository.save(Team("teamA"))
        db.add_all([Member("member1", 10, team), Member("member2", 20, team)])
        db.flush()
        db.expunge_all()

        members = executor.fetch_all(select(Member).order_by(Member.id), entity_graph=("team.members",))
        db.expunge_all()

        assert sorted(m.username for m in members[0].team.members) == ["member1", "member2"]


class TestLockFailures:
    """Store lock errors become LockingFailureError, others propagate."""

    def test_sqlite_busy(self):
        exc = OperationalError("SELECT 1", {}, Exception("database is locked"))

        assert is_lock_failure(exc)

    def test_postgres_lock_not_available(self):
        exc = OperationalError("SELECT 1", {}, _PgError("could not obtain lock on row", "55P03"))

        assert is_lock_failure(exc)

    def test_other_operational_error(self):
        exc = OperationalError("SELECT 1", {}, Exception("no such table: players"))

        assert not is_lock_failure(exc)

    def test_execute_translates(self, db, executor, monkeypatch):
        def locked(*args, **kwargs):
            raise OperationalError("SELECT", {}, Exception("database is locked"))

        monkeypatch.setattr(db, "execute", locked)

        with pytest.raises(LockingFailureError, match="Member"):
            executor.fetch_all(select(Member), lock=LockMode.PESSIMISTIC_WRITE)

    def test_execute_propagates_other_errors(self, db, executor, monkeypatch):
        def broken(*args, **kwargs):
            raise OperationalError("SELECT", {}, Exception("disk I/O error"))

        monkeypatch.setattr(db, "execute", broken)

        with pytest.raises(OperationalError):
            executor.fetch_all(select(Member))

    def test_find_lock_by_username_translates(self, db, member_repository, monkeypatch):
        def deadlock(*args, **kwargs):
            raise OperationalError("SELECT", {}, _PgError("deadlock detected", "40P01"))

        monkeypatch.setattr(db, "execute", deadlock)

        with pytest.raises(LockingFailureError):
            member_repository.find_lock_by_username("member1")


class TestSnapshot:
    """Read-only snapshots are detached copies."""

    def test_copy_is_detached(self, db, executor):
        member = Member("member1", 10)
        db.add(member)
        db.flush()

        copy = executor.snapshot(member)

        assert copy is not member
        assert copy.id == member.id
        assert copy.username == "member1"
        assert copy not in db
