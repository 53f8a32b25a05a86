"""
Projection schemas.

Read-only shapes built directly from query columns, never persisted.
"""

from roster.schemas.member import MemberDto

__all__ = ["MemberDto"]
