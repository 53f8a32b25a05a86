"""
Repository for Member model operations.

Finders come in the styles below; all of them run through QueryExecutor:

- derived: a Criteria of tagged predicates (``find_by_username_and_age_greater_than``)
- named / literal: SQL text with named parameters, checked when this module
  is imported and verified against the database at startup (``find_user``)
- hinted: the same shapes with an entity graph, read-only snapshot or row
  lock applied per call
"""

import logging
from typing import Collection, List, Optional

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session, contains_eager

from roster.core.constants import LockMode, MEMBER_FIND_BY_USERNAME
from roster.core.pagination import Page, PageRequest, Slice, Sort
from roster.models.member import Member
from roster.query.criteria import Criteria, Equals, GreaterThan
from roster.query.literal import named_queries
from roster.repositories.base import BaseRepository
from roster.repositories.member_custom import MemberRepositoryCustom
from roster.schemas.member import MemberDto

logger = logging.getLogger(__name__)

_MEMBER_COLUMNS = (
    "m.member_id AS member_id, m.username AS username, m.age AS age, m.team_id AS team_id"
)

# ========================================
# Named Queries
# ========================================

FIND_BY_USERNAME = named_queries.define(
    MEMBER_FIND_BY_USERNAME,
    f"SELECT {_MEMBER_COLUMNS} FROM members m WHERE m.username = :username",
    params=("username",),
)

FIND_USER = named_queries.define(
    "Member.findUser",
    f"SELECT {_MEMBER_COLUMNS} FROM members m WHERE m.username = :username AND m.age = :age",
    params=("username", "age"),
)

FIND_USERNAME_LIST = named_queries.define(
    "Member.findUsernameList",
    "SELECT m.username FROM members m",
)

# inner join: members without a team are not part of the result
FIND_MEMBER_DTO = named_queries.define(
    "Member.findMemberDto",
    "SELECT m.member_id AS id, m.username AS username, t.name AS team_name "
    "FROM members m JOIN teams t ON m.team_id = t.team_id",
)

FIND_BY_NAMES = named_queries.define(
    "Member.findByNames",
    f"SELECT {_MEMBER_COLUMNS} FROM members m WHERE m.username IN :names",
    params=("names",),
    expanding=("names",),
)

TEAM_GRAPH = ("team",)


class MemberRepository(MemberRepositoryCustom, BaseRepository[Member]):
    """
    Repository for Member database operations.

    Example:
        with get_db_context() as db:
            members = MemberRepository(db)
            members.save(Member("AAA", 20))
            members.find_by_username_and_age_greater_than("AAA", 15)
    """

    def __init__(self, db: Session):
        super().__init__(db, Member)

    # ========================================
    # Derived Queries
    # ========================================

    def find_by_username_and_age_greater_than(self, username: str, age: int) -> List[Member]:
        return self.find_by(Criteria.all_of(
            Equals("username", username),
            GreaterThan("age", age),
        ))

    # ========================================
    # Named / Literal Queries
    # ========================================

    def find_by_username(self, username: str) -> List[Member]:
        """Served by the named query ``Member.findByUsername``."""
        return self.query.fetch_literal(FIND_BY_USERNAME, FIND_BY_USERNAME.bind(username=username))

    def find_user(self, username: str, age: int) -> List[Member]:
        return self.query.fetch_literal(FIND_USER, FIND_USER.bind(username, age))

    def find_username_list(self) -> List[str]:
        return self.query.fetch_literal_scalars(FIND_USERNAME_LIST, FIND_USERNAME_LIST.bind())

    def find_member_dto(self) -> List[MemberDto]:
        """
        Member id/username with the team name, built straight from columns.

        Members without a team are excluded (inner join).
        """
        return self.query.fetch_literal_rows(FIND_MEMBER_DTO, FIND_MEMBER_DTO.bind(), MemberDto)

    def find_by_names(self, names: Collection[str]) -> List[Member]:
        """Members whose username is in ``names``; empty ``names`` matches nothing."""
        return self.query.fetch_literal(FIND_BY_NAMES, FIND_BY_NAMES.bind(names=names))

    # ========================================
    # Return Types
    # ========================================

    def find_list_by_username(self, username: str) -> List[Member]:
        """Collection form: an empty list when nothing matches, never None."""
        return self.find_by(Criteria.all_of(Equals("username", username)))

    def find_member_by_username(self, username: str) -> Optional[Member]:
        """
        Singular form: None when nothing matches.

        Raises:
            IncorrectResultSizeError: several members share the username
        """
        return self.find_one_by(Criteria.all_of(Equals("username", username)))

    def find_optional_by_username(self, username: str) -> Optional[Member]:
        """Singular form for callers that treat "no result" as a value; same rules."""
        return self.find_one_by(Criteria.all_of(Equals("username", username)))

    # ========================================
    # Pagination
    # ========================================

    def find_by_age(self, age: int, pageable: PageRequest) -> Page:
        return self.find_page_by(Criteria.all_of(Equals("age", age)), pageable)

    def find_slice_by_age(self, age: int, pageable: PageRequest) -> Slice:
        """Page content plus has_next; never runs a count query."""
        return self.find_slice_by(Criteria.all_of(Equals("age", age)), pageable)

    def find_list_by_age(self, age: int, pageable: PageRequest) -> List[Member]:
        return self.find_list_page_by(Criteria.all_of(Equals("age", age)), pageable)

    def find_count_query_separate_by_age(self, age: int, pageable: PageRequest) -> Page:
        """
        Same page as ``find_by_age``, counted by a separate query.

        The content query left-joins the team; the total is computed by a
        plain ``count(member_id)`` over members that skips the join.
        """
        stmt = select(Member).outerjoin(Member.team).where(Member.age == age)
        count_stmt = select(func.count(Member.id)).where(Member.age == age)
        return self.query.fetch_page(stmt, pageable, count_stmt=count_stmt)

    # ========================================
    # Bulk Update
    # ========================================

    def bulk_age_plus(self, age: int) -> int:
        """
        Add one to the age of every member aged ``age`` or older.

        Runs as a single UPDATE. Pending changes are flushed first and the
        column values of every member in the session are expired afterwards,
        so members already loaded show the new ages on their next attribute
        access. Teams loaded with them stay readable.

        Returns:
            int: Number of updated rows
        """
        stmt = update(Member).where(Member.age >= age).values(age=Member.age + 1)
        affected = self.query.execute_modifying(stmt, clear_automatically=True)
        logger.info("Bulk age update for age >= %s touched %s members", age, affected)
        return affected

    # ========================================
    # Fetch Join / Entity Graph
    # ========================================

    def find_member_fetch_join(self) -> List[Member]:
        """Every member with its team (left join), one statement."""
        stmt = select(Member).outerjoin(Member.team).options(contains_eager(Member.team))
        return self.query.fetch_all(stmt)

    def find_all(self, sort: Optional[Sort] = None) -> List[Member]:
        """Every member with its team loaded through the entity graph."""
        stmt = select(Member)
        if sort is not None:
            stmt = self.query.apply_sort(stmt, sort)
        return self.query.fetch_all(stmt, entity_graph=TEAM_GRAPH)

    def find_member_entity_graph(self) -> List[Member]:
        return self.query.fetch_all(select(Member), entity_graph=TEAM_GRAPH)

    def find_entity_graph_by_username(self, username: str) -> List[Member]:
        return self.find_by(Criteria.all_of(Equals("username", username)), entity_graph=TEAM_GRAPH)

    # ========================================
    # Hints / Locks
    # ========================================

    def find_read_only_by_username(self, username: str) -> Optional[Member]:
        """
        Detached snapshot of the member, or None.

        Changes made to the returned object are never written back.
        """
        return self.find_one_by(Criteria.all_of(Equals("username", username)), read_only=True)

    def find_lock_by_username(self, username: str) -> List[Member]:
        """
        Members with this username, locked FOR UPDATE until the unit of work ends.

        Raises:
            LockingFailureError: the lock could not be acquired
        """
        return self.find_by(
            Criteria.all_of(Equals("username", username)),
            lock=LockMode.PESSIMISTIC_WRITE,
        )
