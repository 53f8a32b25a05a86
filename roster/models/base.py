"""
Base Model
==========

Provides common functionality for all database models.
"""

from typing import Any, Dict, Optional, Set
from sqlalchemy import inspect
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""
    pass


class SerializationMixin:
    """Mixin that adds to_dict() serialization method."""

    def to_dict(self, exclude: Optional[Set[str]] = None) -> Dict[str, Any]:
        """
        Convert model instance to a dictionary of its column attributes.

        Keys are attribute names, not column names (``id`` rather than
        ``member_id``). Relationships are never included, so calling this
        does not load associations.
        """
        exclude = exclude or set()
        result = {}
        for attr in inspect(type(self)).column_attrs:
            if attr.key in exclude:
                continue
            result[attr.key] = getattr(self, attr.key)
        return result
