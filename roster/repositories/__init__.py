"""
Data access layer (Repository pattern).

Repositories handle all database queries,
isolating business logic from SQL.
"""

from roster.repositories.base import BaseRepository
from roster.repositories.member_custom import MemberRepositoryCustom
from roster.repositories.member_repository import MemberRepository
from roster.repositories.team_repository import TeamRepository

__all__ = [
    "BaseRepository",
    "MemberRepositoryCustom",
    "MemberRepository",
    "TeamRepository",
]
