"""
Literal and named queries.

A LiteralQuery is hand-written SQL with ``:name`` placeholders. It is
checked when it is defined, not when it is first called:

- every placeholder must be a declared parameter and vice versa
- expanding parameters (``IN :names``) must be declared parameters

Named queries live in a NamedQueryRegistry; ``verify`` asks the database
to EXPLAIN each of them so a bad table or column name fails at startup.
"""

import logging
import re
from typing import Any, Dict, Iterable, Iterator, Optional, Tuple

from sqlalchemy import bindparam, text
from sqlalchemy.exc import DBAPIError
from sqlalchemy.sql.elements import TextClause

from roster.core.exceptions import QueryDefinitionError

logger = logging.getLogger(__name__)

# ':name' but not the second colon of a '::type' cast
_PLACEHOLDER = re.compile(r"(?<![:\w]):([A-Za-z_]\w*)")


class LiteralQuery:
    """
    SQL text with named parameters, validated on construction.

    Args:
        name: Identifier used in logs and in the named query registry
        sql: Statement text using ``:param`` placeholders
        params: Declared parameter names, in call order
        expanding: Parameters bound to a collection (``IN :names``)

    Raises:
        QueryDefinitionError: declared and used parameters differ

    Example:
        query = LiteralQuery(
            "Member.findUser",
            "SELECT * FROM members WHERE username = :username AND age = :age",
            params=("username", "age"),
        )
    """

    def __init__(self, name: str, sql: str, params: Iterable[str] = (), expanding: Iterable[str] = ()):
        self.name = name
        self.sql = sql.strip()
        self.params: Tuple[str, ...] = tuple(params)
        self.expanding: Tuple[str, ...] = tuple(expanding)

        if not self.sql:
            raise QueryDefinitionError(f"Query '{name}' has no SQL text")

        used = set(_PLACEHOLDER.findall(self.sql))
        declared = set(self.params)
        if used != declared:
            raise QueryDefinitionError(
                f"Query '{name}': placeholders {sorted(used)} do not match "
                f"declared parameters {sorted(declared)}"
            )
        unknown_expanding = set(self.expanding) - declared
        if unknown_expanding:
            raise QueryDefinitionError(
                f"Query '{name}': expanding parameters {sorted(unknown_expanding)} are not declared"
            )

        self.statement: TextClause = self._build(self.sql)

    def _build(self, sql: str) -> TextClause:
        stmt = text(sql)
        if self.expanding:
            stmt = stmt.bindparams(*[bindparam(p, expanding=True) for p in self.expanding])
        return stmt

    def bind(self, *args: Any, **kwargs: Any) -> Dict[str, Any]:
        """
        Map call arguments onto parameter names.

        Positional arguments are matched to ``params`` in order, keyword
        arguments by name; each parameter must be given exactly once.
        """
        if len(args) > len(self.params):
            raise QueryDefinitionError(
                f"Query '{self.name}' takes {len(self.params)} parameters, got {len(args)}"
            )
        bound = dict(zip(self.params, args))
        for key, value in kwargs.items():
            if key not in self.params:
                raise QueryDefinitionError(f"Query '{self.name}' has no parameter '{key}'")
            if key in bound:
                raise QueryDefinitionError(f"Query '{self.name}' got parameter '{key}' twice")
            bound[key] = value
        missing = [p for p in self.params if p not in bound]
        if missing:
            raise QueryDefinitionError(f"Query '{self.name}' is missing parameters {missing}")
        for key in self.expanding:
            bound[key] = list(bound[key])
        return bound

    def explain_statement(self) -> Tuple[TextClause, Dict[str, Any]]:
        """EXPLAIN form of the query with every parameter bound to NULL."""
        params = {p: ([None] if p in self.expanding else None) for p in self.params}
        return self._build(f"EXPLAIN {self.sql}"), params

    def __repr__(self) -> str:
        return f"<LiteralQuery(name='{self.name}', params={self.params})>"


class NamedQueryRegistry:
    """Named queries looked up by name (``Member.findByUsername``)."""

    def __init__(self):
        self._queries: Dict[str, LiteralQuery] = {}

    def register(self, query: LiteralQuery) -> LiteralQuery:
        if query.name in self._queries:
            raise QueryDefinitionError(f"Named query '{query.name}' is already registered")
        self._queries[query.name] = query
        return query

    def define(self, name: str, sql: str, params: Iterable[str] = (), expanding: Iterable[str] = ()) -> LiteralQuery:
        """Build a LiteralQuery and register it in one step."""
        return self.register(LiteralQuery(name, sql, params, expanding))

    def get(self, name: str) -> LiteralQuery:
        try:
            return self._queries[name]
        except KeyError:
            raise QueryDefinitionError(f"No named query '{name}'") from None

    def find(self, name: str) -> Optional[LiteralQuery]:
        return self._queries.get(name)

    def __contains__(self, name: str) -> bool:
        return name in self._queries

    def __iter__(self) -> Iterator[LiteralQuery]:
        return iter(self._queries.values())

    def __len__(self) -> int:
        return len(self._queries)

    def verify(self, connection) -> None:
        """
        Prepare every registered query against the database.

        Raises:
            QueryDefinitionError: the database rejected a query
        """
        for query in self:
            stmt, params = query.explain_statement()
            try:
                connection.execute(stmt, params)
            except DBAPIError as exc:
                raise QueryDefinitionError(
                    f"Named query '{query.name}' failed verification: {exc.orig}"
                ) from exc
            logger.debug("Verified named query %s", query.name)


named_queries = NamedQueryRegistry()
