"""
Criteria builder for derived queries.

A derived finder is spelled out as a tree of tagged predicates instead of
being parsed out of a method name:

    find_by_username_and_age_greater_than(username, age)
        == Criteria.all_of(Equals("username", username), GreaterThan("age", age))

Each predicate compiles to a SQLAlchemy clause against a mapped class.
Attribute names are checked against the mapper when the clause is built,
so a typo fails with QueryDefinitionError instead of an AttributeError deep
inside SQLAlchemy.
"""

from dataclasses import dataclass
from typing import Any, Collection, Tuple, Union

from sqlalchemy import and_, inspect, or_
from sqlalchemy.sql.elements import ColumnElement

from roster.core.exceptions import QueryDefinitionError


def resolve_column(model, attribute: str):
    """Return the mapped column attribute ``model.<attribute>``."""
    mapper = inspect(model)
    if attribute not in mapper.column_attrs.keys():
        raise QueryDefinitionError(
            f"No property '{attribute}' found for type '{mapper.class_.__name__}'"
        )
    return getattr(model, attribute)


@dataclass(frozen=True)
class Predicate:
    """A condition on a single attribute."""

    attribute: str

    def to_clause(self, model) -> ColumnElement:
        raise NotImplementedError

    def _column(self, model):
        return resolve_column(model, self.attribute)


@dataclass(frozen=True)
class Equals(Predicate):
    value: Any

    def to_clause(self, model) -> ColumnElement:
        column = self._column(model)
        if self.value is None:
            return column.is_(None)
        return column == self.value


@dataclass(frozen=True)
class NotEquals(Predicate):
    value: Any

    def to_clause(self, model) -> ColumnElement:
        column = self._column(model)
        if self.value is None:
            return column.is_not(None)
        return column != self.value


@dataclass(frozen=True)
class GreaterThan(Predicate):
    value: Any

    def to_clause(self, model) -> ColumnElement:
        return self._column(model) > self.value


@dataclass(frozen=True)
class GreaterThanEqual(Predicate):
    value: Any

    def to_clause(self, model) -> ColumnElement:
        return self._column(model) >= self.value


@dataclass(frozen=True)
class LessThan(Predicate):
    value: Any

    def to_clause(self, model) -> ColumnElement:
        return self._column(model) < self.value


@dataclass(frozen=True)
class LessThanEqual(Predicate):
    value: Any

    def to_clause(self, model) -> ColumnElement:
        return self._column(model) <= self.value


@dataclass(frozen=True)
class In(Predicate):
    values: Collection[Any]

    def to_clause(self, model) -> ColumnElement:
        # an empty IN renders as a false expression, never as invalid SQL
        return self._column(model).in_(list(self.values))


@dataclass(frozen=True)
class Like(Predicate):
    pattern: str

    def to_clause(self, model) -> ColumnElement:
        return self._column(model).like(self.pattern)


@dataclass(frozen=True)
class IsNull(Predicate):

    def to_clause(self, model) -> ColumnElement:
        return self._column(model).is_(None)


@dataclass(frozen=True)
class Criteria:
    """
    Predicates joined with AND (``all_of``) or OR (``any_of``).

    Criteria nest, so ``all_of(Equals(...), any_of(...))`` works.
    """

    predicates: Tuple[Union[Predicate, "Criteria"], ...]
    conjunction: str = "and"

    @classmethod
    def all_of(cls, *predicates: Union[Predicate, "Criteria"]) -> "Criteria":
        return cls(predicates=tuple(predicates), conjunction="and")

    @classmethod
    def any_of(cls, *predicates: Union[Predicate, "Criteria"]) -> "Criteria":
        return cls(predicates=tuple(predicates), conjunction="or")

    def to_clause(self, model) -> ColumnElement:
        clauses = [p.to_clause(model) for p in self.predicates]
        if self.conjunction == "or":
            return or_(*clauses)
        return and_(*clauses)

    def apply(self, stmt, model):
        """Add this criteria as a WHERE clause; empty criteria match everything."""
        if not self.predicates:
            return stmt
        return stmt.where(self.to_clause(model))
