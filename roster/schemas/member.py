"""Member projections."""

from typing import Optional

from pydantic import BaseModel, ConfigDict


class MemberDto(BaseModel):
    """
    Flattened member view: identity and username plus the team name.

    Built by ``MemberRepository.find_member_dto()`` straight from the
    selected columns, or from a loaded entity with ``Page.map``.

    Attributes:
        id: Member identifier
        username: Member username
        team_name: Name of the member's team, None when it has none
    """

    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: int
    username: str
    team_name: Optional[str] = None

    @classmethod
    def from_member(cls, member, team_name: Optional[str] = None) -> "MemberDto":
        """Project an already loaded Member; the team is never touched."""
        return cls(id=member.id, username=member.username, team_name=team_name)
