"""Member / Team model tests: association bookkeeping and serialization."""

import pytest

from roster.models import Member, Team


class TestAssociation:
    """Both sides of Member.team / Team.members stay in sync."""

    def test_constructor_sets_both_sides(self):
        team = Team("teamA")
        member = Member("member1", 10, team)

        assert member.team is team
        assert member in team.members

    def test_change_team_moves_member(self):
        team_a = Team("teamA")
        team_b = Team("teamB")
        member = Member("member1", 10, team_a)

        member.change_team(team_b)

        assert member.team is team_b
        assert member in team_b.members
        assert member not in team_a.members

    def test_change_team_to_none_rejected(self):
        member = Member("member1")

        with pytest.raises(ValueError):
            member.change_team(None)

    def test_leave_team(self):
        team = Team("teamA")
        member = Member("member1", 10, team)

        member.leave_team()

        assert member.team is None
        assert team.members == []

    @pytest.mark.filterwarnings("error::sqlalchemy.exc.SAWarning")
    def test_member_joins_session_of_saved_team(self, db, team_repository):
        """A member built for an already saved team is added to that team's session."""
        team = team_repository.save(Team("teamA"))

        member = Member("member1", 10, team)

        assert member in db
        assert member in team.members
        db.flush()
        assert member.team_id == team.id

    def test_defaults(self):
        member = Member("member1")

        assert member.age == 0
        assert member.team is None


class TestRepresentation:
    """repr and to_dict never include associations."""

    def test_repr(self):
        team = Team("teamA")
        member = Member("member1", 10, team)

        assert repr(member) == "<Member(id=None, username='member1', age=10)>"
        assert repr(team) == "<Team(id=None, name='teamA')>"

    def test_to_dict(self, member_repository):
        team = Team("teamA")
        member = member_repository.save(Member("member1", 10, team))

        assert member.to_dict() == {
            "id": member.id,
            "username": "member1",
            "age": 10,
            "team_id": team.id,
        }
        assert member.to_dict(exclude={"team_id", "id"}) == {"username": "member1", "age": 10}
