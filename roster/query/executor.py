"""
Query execution.

QueryExecutor takes a statement built by a repository (criteria select,
literal query, bulk update) and runs it on the repository's session,
applying the per-call options the repository asks for:

- entity_graph: relationship paths loaded in the same statement (joinedload)
- read_only: return detached snapshots whose changes are never flushed
- lock: row lock held until the unit of work ends (FOR UPDATE / FOR SHARE)

Entity results always go through ``Result.unique()`` so a joined eager load
of a collection returns each parent once, not once per child row.
"""

import logging
from typing import Any, Callable, Dict, Iterable, List, Optional

from sqlalchemy import func, inspect, select
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, joinedload, make_transient_to_detached
from sqlalchemy.orm.attributes import set_committed_value

from roster.config import settings
from roster.core.constants import LockMode
from roster.core.exceptions import (
    IncorrectResultSizeError,
    LockingFailureError,
    QueryDefinitionError,
)
from roster.core.pagination import Page, PageRequest, Slice, Sort
from roster.query.criteria import resolve_column
from roster.query.literal import LiteralQuery

logger = logging.getLogger(__name__)

_LOCK_FAILURE_MARKERS = (
    "database is locked",
    "database table is locked",
    "lock timeout",
    "lock wait timeout",
    "could not obtain lock",
    "lock not available",
    "deadlock",
)
# lock_not_available, deadlock_detected
_LOCK_FAILURE_PGCODES = ("55P03", "40P01")

_READ_ONLY = "roster.read_only"


def is_lock_failure(exc: OperationalError) -> bool:
    """Whether a store error means a row lock could not be acquired."""
    if getattr(exc.orig, "pgcode", None) in _LOCK_FAILURE_PGCODES:
        return True
    message = str(exc.orig).lower()
    return any(marker in message for marker in _LOCK_FAILURE_MARKERS)


def is_read_only(instance) -> bool:
    """Whether ``instance`` is a snapshot returned for a read-only finder."""
    return inspect(instance).info.get(_READ_ONLY, False)


class QueryExecutor:
    """
    Runs statements for one mapped class on one session.

    Args:
        db: Session of the caller's unit of work
        model: Mapped class whose rows are returned by the entity methods
    """

    def __init__(self, db: Session, model):
        self.db = db
        self.model = model

    # ========================================
    # Statement preparation
    # ========================================

    def prepare(self, stmt, entity_graph: Iterable[str] = (), lock: LockMode = LockMode.NONE):
        """Attach eager-load options and the lock clause to a select."""
        for path in entity_graph:
            stmt = stmt.options(self._eager_load(path))
        if lock is LockMode.PESSIMISTIC_WRITE:
            stmt = stmt.with_for_update(nowait=settings.lock_nowait)
        elif lock is LockMode.PESSIMISTIC_READ:
            stmt = stmt.with_for_update(read=True, nowait=settings.lock_nowait)
        return stmt

    def _eager_load(self, path: str):
        """joinedload option for a dotted relationship path ("team", "team.members")."""
        current = self.model
        loader = None
        for key in path.split("."):
            relationships = inspect(current).relationships
            if key not in relationships.keys():
                raise QueryDefinitionError(
                    f"No association '{key}' found for type '{inspect(current).class_.__name__}'"
                )
            attribute = getattr(current, key)
            loader = joinedload(attribute) if loader is None else loader.joinedload(attribute)
            current = relationships[key].mapper.class_
        return loader

    def apply_sort(self, stmt, sort: Sort):
        for order in sort.orders:
            column = resolve_column(self.model, order.attribute)
            stmt = stmt.order_by(column.asc() if order.is_ascending else column.desc())
        return stmt

    # ========================================
    # Execution
    # ========================================

    def execute(self, stmt, params: Optional[Dict[str, Any]] = None):
        """Execute on the session, translating lock failures."""
        try:
            return self.db.execute(stmt, params)
        except OperationalError as exc:
            if is_lock_failure(exc):
                logger.warning("Lock acquisition failed for %s: %s", self.model.__name__, exc.orig)
                raise LockingFailureError(
                    f"Could not lock {self.model.__name__} rows: {exc.orig}"
                ) from exc
            raise

    def fetch_all(
        self,
        stmt,
        entity_graph: Iterable[str] = (),
        read_only: bool = False,
        lock: LockMode = LockMode.NONE,
    ) -> List[Any]:
        """All entities matched by ``stmt`` (empty list when none)."""
        stmt = self.prepare(stmt, entity_graph, lock)
        items = self.execute(stmt).scalars().unique().all()
        if read_only:
            return [self.snapshot(item) for item in items]
        return list(items)

    def fetch_one(self, stmt, **options) -> Optional[Any]:
        """
        The single entity matched by ``stmt``, or None.

        Raises:
            IncorrectResultSizeError: more than one row matched
        """
        items = self.fetch_all(stmt, **options)
        if len(items) > 1:
            raise IncorrectResultSizeError(1, len(items))
        return items[0] if items else None

    def count(self, stmt) -> int:
        """Row count of an arbitrary select, or the value of a count select."""
        return self.execute(stmt).scalar() or 0

    # ========================================
    # Pagination
    # ========================================

    def fetch_list_page(self, stmt, pageable: PageRequest, **options) -> List[Any]:
        """Content of one page, no metadata and no count query."""
        stmt = self.apply_sort(stmt, pageable.sort)
        stmt = stmt.offset(pageable.offset).limit(pageable.size)
        return self.fetch_all(stmt, **options)

    def fetch_slice(self, stmt, pageable: PageRequest, **options) -> Slice:
        """
        One page plus a has-next flag.

        Reads ``size + 1`` rows; the extra row only decides ``has_next``
        and is dropped. No count query is issued.
        """
        stmt = self.apply_sort(stmt, pageable.sort)
        stmt = stmt.offset(pageable.offset).limit(pageable.size + 1)
        items = self.fetch_all(stmt, **options)
        has_next = len(items) > pageable.size
        return Slice(content=items[:pageable.size], pageable=pageable, has_next=has_next)

    def fetch_page(self, stmt, pageable: PageRequest, count_stmt=None, **options) -> Page:
        """
        One page plus the total element count.

        Args:
            stmt: Content query, unsorted and unpaged
            pageable: Page to read
            count_stmt: Select returning the total; defaults to counting the
                rows of ``stmt``. Pass a cheaper query when ``stmt`` joins
                tables that do not change the count.

        The count query is skipped when the content alone determines the
        total: a first page shorter than the page size, or a non-empty last
        page.
        """
        content = self.fetch_list_page(stmt, pageable, **options)
        total = self._total(content, pageable, lambda: self.count(
            count_stmt if count_stmt is not None else self._count_of(stmt)
        ))
        return Page(content=content, pageable=pageable, total_elements=total)

    @staticmethod
    def _total(content: List[Any], pageable: PageRequest, count_supplier: Callable[[], int]) -> int:
        if pageable.offset == 0:
            if pageable.size > len(content):
                return len(content)
            return count_supplier()
        if content and pageable.size > len(content):
            return pageable.offset + len(content)
        return count_supplier()

    @staticmethod
    def _count_of(stmt):
        return select(func.count()).select_from(stmt.order_by(None).subquery())

    # ========================================
    # Literal queries
    # ========================================

    def fetch_literal(self, query: LiteralQuery, params: Dict[str, Any]) -> List[Any]:
        """Entities mapped from a literal query's rows (matched by column name)."""
        stmt = select(self.model).from_statement(query.statement)
        return list(self.execute(stmt, params).scalars().unique().all())

    def fetch_literal_scalars(self, query: LiteralQuery, params: Dict[str, Any]) -> List[Any]:
        return list(self.execute(query.statement, params).scalars().all())

    def fetch_literal_rows(self, query: LiteralQuery, params: Dict[str, Any], row_factory: Callable[..., Any]) -> List[Any]:
        """
        Call ``row_factory`` with each row's columns as keyword arguments.

        This is the constructor projection: no entity is materialized.
        """
        return [row_factory(**row._mapping) for row in self.execute(query.statement, params)]

    # ========================================
    # Modifying statements
    # ========================================

    def execute_modifying(
        self,
        stmt,
        params: Optional[Dict[str, Any]] = None,
        flush_automatically: bool = True,
        clear_automatically: bool = False,
    ) -> int:
        """
        Run a set-based UPDATE/DELETE and return the affected row count.

        The statement goes straight to the database, bypassing the objects
        held by the session.

        Args:
            flush_automatically: Flush pending changes first so the
                statement sees them
            clear_automatically: Expire the column values of every
                instance of the model held by the session, so the next
                attribute access reloads them from the database. Loaded
                associations are left alone.
        """
        if flush_automatically:
            self.db.flush()
        result = self.execute(stmt.execution_options(synchronize_session=False), params)
        affected = result.rowcount
        if clear_automatically:
            self.expire_columns()
        return affected

    def expire_columns(self) -> None:
        """Expire the column attributes of every session instance of the model."""
        keys = [attr.key for attr in inspect(self.model).column_attrs]
        for instance in list(self.db.identity_map.values()):
            if isinstance(instance, self.model):
                self.db.expire(instance, keys)

    # ========================================
    # Read-only snapshots
    # ========================================

    @staticmethod
    def snapshot(instance):
        """
        Detached copy of a loaded entity.

        Column values and already loaded associations are copied; the copy
        belongs to no session and is marked read-only, so repositories
        refuse to write it back (see ``is_read_only``).
        """
        state = inspect(instance)
        mapper = state.mapper
        copy = mapper.class_manager.new_instance()
        for attr in mapper.column_attrs:
            set_committed_value(copy, attr.key, getattr(instance, attr.key))
        for rel in mapper.relationships:
            if rel.key in state.dict:
                set_committed_value(copy, rel.key, state.dict[rel.key])
        make_transient_to_detached(copy)
        inspect(copy).info[_READ_ONLY] = True
        return copy
