"""
Team model.

A Team owns nothing in the database: the ``team_id`` foreign key lives on
``members``. ``Team.members`` is the inverse side of ``Member.team`` and is
kept in sync by ``Member.change_team``.
"""

from typing import List, TYPE_CHECKING
from sqlalchemy import String, Integer
from sqlalchemy.orm import Mapped, mapped_column, relationship

from roster.models.base import Base, SerializationMixin

if TYPE_CHECKING:
    from roster.models.member import Member


class Team(SerializationMixin, Base):
    """
    A team of members.

    Attributes:
        id: Generated primary key (column ``team_id``)
        name: Team name
        members: Members whose ``team`` points here (inverse side)

    The members collection is never loaded implicitly: ask for it with
    ``TeamRepository.find_all_fetch_members()``. Deleting a team that still
    has members fails with the store's foreign key violation.
    """

    __tablename__ = "teams"

    id: Mapped[int] = mapped_column(
        "team_id",
        Integer,
        primary_key=True,
        autoincrement=True,
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    members: Mapped[List["Member"]] = relationship(
        back_populates="team",
        lazy="raise_on_sql",
        # leave member.team_id alone on delete; the FK decides
        passive_deletes="all",
    )

    def __init__(self, name: str):
        # an empty collection counts as loaded, so a fresh team never
        # needs SQL to read its members
        super().__init__(name=name, members=[])

    def __repr__(self) -> str:
        return f"<Team(id={self.id}, name='{self.name}')>"
