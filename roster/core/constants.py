"""
Application-wide constants.

Centralize the enumerations that repositories and the query layer share.
"""

from enum import Enum


# ========================================
# Sorting
# ========================================

class SortDirection(str, Enum):
    """
    Direction of a single sort order.

    Inherits from str so the value can be passed around as plain text:

        SortDirection("desc") is SortDirection.DESC  # True
    """

    ASC = "asc"
    DESC = "desc"

    @classmethod
    def from_string(cls, value: str) -> "SortDirection":
        """Parse a direction case-insensitively ("DESC", "desc", "Desc")."""
        try:
            return cls(value.lower())
        except ValueError:
            raise ValueError(
                f"Invalid sort direction '{value}'; expected 'asc' or 'desc'"
            ) from None


# ========================================
# Locking
# ========================================

class LockMode(str, Enum):
    """
    Row lock requested by a finder.

    PESSIMISTIC_READ maps to a shared lock (FOR SHARE), PESSIMISTIC_WRITE
    to an exclusive one (FOR UPDATE). Dialects without row locks (SQLite)
    render neither.
    """

    NONE = "none"
    PESSIMISTIC_READ = "pessimistic_read"
    PESSIMISTIC_WRITE = "pessimistic_write"


# ========================================
# Named Queries
# ========================================

MEMBER_FIND_BY_USERNAME = "Member.findByUsername"
