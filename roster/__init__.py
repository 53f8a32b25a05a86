"""
Roster
======

Member/Team persistence-access layer built on SQLAlchemy.

Repositories expose derived finders, named and literal queries,
projections, pagination, bulk updates, fetch joins, entity graphs,
read-only hints and pessimistic locks over a caller-owned unit of work.

Usage:
    from roster.database import get_db_context
    from roster.repositories import MemberRepository

    with get_db_context() as db:
        members = MemberRepository(db)
        page = members.find_by_age(10, PageRequest.of(0, 3))
"""

__version__ = "0.1.0"
