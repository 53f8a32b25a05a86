"""
Base repository pattern implementation for database operations.

This module provides a generic repository that specific model repositories
extend. It covers CRUD and the generic finder shapes (list, single, page,
slice) that derived queries are built from, and delegates execution to
QueryExecutor.

Every repository works on the caller's session: nothing here commits. The
enclosing ``get_db_context()`` block decides commit or rollback.
"""

import logging
from typing import Any, Generic, Iterable, List, Optional, Type, TypeVar

from sqlalchemy import func, inspect, select
from sqlalchemy.orm import Session

from roster.core.exceptions import EntityNotFoundError
from roster.core.pagination import Page, PageRequest, Slice, Sort
from roster.models.base import Base
from roster.query.criteria import Criteria
from roster.query.executor import QueryExecutor, is_read_only

# Type variable for the model
T = TypeVar('T', bound=Base)

logger = logging.getLogger(__name__)


class BaseRepository(Generic[T]):
    """
    Generic repository for database operations.

    Attributes:
        db (Session): Session of the caller's unit of work
        model (Type[T]): SQLAlchemy model class
        query (QueryExecutor): Executor bound to ``db`` and ``model``
    """

    def __init__(self, db: Session, model: Type[T]):
        """
        Initialize the repository with a database session and model class.

        Args:
            db (Session): SQLAlchemy database session
            model (Type[T]): SQLAlchemy model class
        """
        self.db = db
        self.model = model
        self.query = QueryExecutor(db, model)

        mapper = inspect(model)
        self._id_column = mapper.primary_key[0]
        self._id_attribute = mapper.get_property_by_column(self._id_column).key

    # ========================================
    # Identity
    # ========================================

    def get_id(self, entity: T) -> Any:
        """Identifier of ``entity``, None while it has never been flushed."""
        return getattr(entity, self._id_attribute)

    def _id_clause(self, id: Any):
        return getattr(self.model, self._id_attribute) == id

    # ========================================
    # Create / Update
    # ========================================

    def save(self, entity: T) -> T:
        """
        Insert or update an entity.

        - no identifier: inserted, the flush assigns the identifier
        - already in this session: pending changes are flushed
        - identifier set but not in this session: merged, which updates
          the row with that identifier or inserts it when absent
        - read-only snapshot: nothing is written, the managed row is
          returned unchanged

        Args:
            entity (T): Entity to persist

        Returns:
            T: The managed instance. Same object as ``entity`` unless it
            had to be merged or is a read-only snapshot.
        """
        if is_read_only(entity):
            logger.debug("Ignoring save of read-only %r", entity)
            return self.db.get(self.model, self.get_id(entity))

        if entity in self.db:
            self.db.flush()
            return entity

        if self.get_id(entity) is None:
            self.db.add(entity)
            self.db.flush()
            logger.debug("Inserted %r", entity)
            return entity

        merged = self.db.merge(entity)
        self.db.flush()
        logger.debug("Merged %r", merged)
        return merged

    def save_all(self, entities: Iterable[T]) -> List[T]:
        """Save each entity in order and return the managed instances."""
        return [self.save(entity) for entity in entities]

    # ========================================
    # Read
    # ========================================

    def find_by_id(self, id: Any, entity_graph: Iterable[str] = ()) -> Optional[T]:
        """
        Get a record by ID.

        Args:
            id (Any): Primary key value
            entity_graph: Associations to load in the same statement

        Returns:
            Optional[T]: Model instance if found, None otherwise
        """
        entity_graph = tuple(entity_graph)
        if not entity_graph:
            return self.db.get(self.model, id)
        return self.query.fetch_one(
            select(self.model).where(self._id_clause(id)),
            entity_graph=entity_graph,
        )

    def find_all(self, sort: Optional[Sort] = None) -> List[T]:
        """All rows, optionally sorted."""
        stmt = select(self.model)
        if sort is not None:
            stmt = self.query.apply_sort(stmt, sort)
        return self.query.fetch_all(stmt)

    def find_by(self, criteria: Criteria, sort: Optional[Sort] = None, **options) -> List[T]:
        """
        Rows matching ``criteria``; an empty list when nothing matches.

        ``options`` are passed to QueryExecutor.fetch_all (entity_graph,
        read_only, lock).
        """
        stmt = criteria.apply(select(self.model), self.model)
        if sort is not None:
            stmt = self.query.apply_sort(stmt, sort)
        return self.query.fetch_all(stmt, **options)

    def find_one_by(self, criteria: Criteria, **options) -> Optional[T]:
        """
        The single row matching ``criteria``, or None.

        Raises:
            IncorrectResultSizeError: more than one row matched
        """
        return self.query.fetch_one(criteria.apply(select(self.model), self.model), **options)

    def find_page_by(self, criteria: Criteria, pageable: PageRequest, **options) -> Page:
        return self.query.fetch_page(criteria.apply(select(self.model), self.model), pageable, **options)

    def find_slice_by(self, criteria: Criteria, pageable: PageRequest, **options) -> Slice:
        return self.query.fetch_slice(criteria.apply(select(self.model), self.model), pageable, **options)

    def find_list_page_by(self, criteria: Criteria, pageable: PageRequest, **options) -> List[T]:
        return self.query.fetch_list_page(criteria.apply(select(self.model), self.model), pageable, **options)

    def count(self) -> int:
        """Total number of rows."""
        return self.query.count(select(func.count()).select_from(self.model))

    def count_by(self, criteria: Criteria) -> int:
        stmt = criteria.apply(select(func.count()).select_from(self.model), self.model)
        return self.query.count(stmt)

    def exists_by_id(self, id: Any) -> bool:
        stmt = select(func.count()).select_from(self.model).where(self._id_clause(id))
        return self.query.count(stmt) > 0

    # ========================================
    # Delete
    # ========================================

    def delete(self, entity: T) -> None:
        """
        Delete the row with ``entity``'s identifier.

        An entity that was never saved, or whose row is already gone, is
        ignored.
        """
        id = self.get_id(entity)
        if id is None:
            logger.debug("Ignoring delete of unsaved %s", self.model.__name__)
            return

        existing = self.db.get(self.model, id)
        if existing is None:
            logger.debug("Ignoring delete of missing %s id=%s", self.model.__name__, id)
            return

        self.db.delete(existing)
        self.db.flush()
        logger.debug("Deleted %s id=%s", self.model.__name__, id)

    def delete_by_id(self, id: Any) -> None:
        """
        Delete a record by ID.

        Raises:
            EntityNotFoundError: no row has this identifier
        """
        existing = self.db.get(self.model, id)
        if existing is None:
            raise EntityNotFoundError(self.model.__name__, id)
        self.db.delete(existing)
        self.db.flush()
        logger.debug("Deleted %s id=%s", self.model.__name__, id)

    # ========================================
    # Unit of work
    # ========================================

    def flush(self) -> None:
        """Write pending changes to the database without committing."""
        self.db.flush()

    def clear(self) -> None:
        """Detach every instance from the session; later reads hit the database."""
        self.db.expunge_all()
