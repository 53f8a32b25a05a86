"""
Repository for Team model operations.
"""

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session, contains_eager

from roster.models.team import Team
from roster.query.criteria import Criteria, Equals
from roster.repositories.base import BaseRepository


class TeamRepository(BaseRepository[Team]):
    """
    Repository for Team database operations.

    Generic CRUD comes from BaseRepository. Deleting a team that still has
    members raises the store's IntegrityError; move or delete the members
    first.
    """

    def __init__(self, db: Session):
        super().__init__(db, Team)

    def find_by_name(self, name: str) -> Optional[Team]:
        return self.find_one_by(Criteria.all_of(Equals("name", name)))

    def find_all_fetch_members(self) -> List[Team]:
        """
        Every team with its members loaded in one statement.

        The join returns one row per member; each team is returned once.
        Teams without members are included with an empty collection.
        """
        stmt = (
            select(Team)
            .outerjoin(Team.members)
            .options(contains_eager(Team.members))
            .order_by(Team.id)
        )
        return self.query.fetch_all(stmt)
