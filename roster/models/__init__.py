"""
Database models package.

Contains all SQLAlchemy ORM models.
"""

from roster.models.base import Base, SerializationMixin
from roster.models.team import Team
from roster.models.member import Member

__all__ = [
    "Base",
    "SerializationMixin",
    "Team",
    "Member",
]
