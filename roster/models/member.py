"""
Member model.

Member is the owning side of the Member -> Team association: the
``team_id`` foreign key is stored on ``members``.
"""

from typing import Optional, TYPE_CHECKING
from sqlalchemy import String, Integer, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column, object_session, relationship

from roster.models.base import Base, SerializationMixin

if TYPE_CHECKING:
    from roster.models.team import Team


class Member(SerializationMixin, Base):
    """
    A member, optionally belonging to one team.

    Attributes:
        id: Generated primary key (column ``member_id``), assigned on first flush
        username: Login name, not unique
        age: Age in years, defaults to 0
        team_id: Foreign key to ``teams.team_id`` (nullable)
        team: The associated Team, or None

    Example:
        team = Team("teamA")
        member = Member("member1", 10, team)
        assert member in team.members

    ``team`` is never loaded behind the caller's back. Reading it on an
    instance loaded without a fetch join or entity graph raises
    ``sqlalchemy.exc.InvalidRequestError`` unless the team is already in
    the session.
    """

    __tablename__ = "members"

    # ========================================
    # Columns
    # ========================================

    id: Mapped[int] = mapped_column(
        "member_id",
        Integer,
        primary_key=True,
        autoincrement=True,
    )

    username: Mapped[str] = mapped_column(String(255), nullable=False)

    age: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    team_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("teams.team_id"),
        nullable=True,
    )

    team: Mapped[Optional["Team"]] = relationship(
        back_populates="members",
        lazy="raise_on_sql",
    )

    __table_args__ = (
        Index("ix_members_username", "username"),
        Index("ix_members_age", "age"),
    )

    def __init__(self, username: str, age: int = 0, team: Optional["Team"] = None):
        super().__init__(username=username, age=age)
        if team is not None:
            self.change_team(team)

    # ========================================
    # Association
    # ========================================

    def change_team(self, team: "Team") -> None:
        """
        Move this member to ``team``, updating both sides of the association.

        After the call ``self.team is team`` and ``self in team.members``;
        the member is also removed from its previous team's collection.
        Both sides are updated by the ``back_populates`` pairing in a single
        attribute set, so neither side is ever left stale.

        When ``team`` already belongs to a session, this member joins that
        session too, before it is appended to ``team.members``.
        """
        if team is None:
            raise ValueError("team must not be None; use leave_team() to clear it")
        session = object_session(team)
        if session is not None and self not in session:
            session.add(self)
        self.team = team

    def leave_team(self) -> None:
        """Clear the association on both sides."""
        self.team = None

    def __repr__(self) -> str:
        return f"<Member(id={self.id}, username='{self.username}', age={self.age})>"
