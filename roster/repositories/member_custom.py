"""
Hand-written Member queries.

Queries that do not fit the criteria builder or a literal query are written
here against the session directly and mixed into MemberRepository.
"""

from typing import List

from sqlalchemy import select

from roster.models.member import Member


class MemberRepositoryCustom:
    """Mixin for MemberRepository; expects ``self.db``."""

    def find_member_custom(self) -> List[Member]:
        """Every member, ordered by identifier."""
        return list(self.db.scalars(select(Member).order_by(Member.id)).all())
