"""
Query layer.

Criteria builder for derived queries, literal/named queries, and the
executor that runs both against a session.
"""

from roster.query.criteria import (
    Criteria,
    Predicate,
    Equals,
    NotEquals,
    GreaterThan,
    GreaterThanEqual,
    LessThan,
    LessThanEqual,
    In,
    Like,
    IsNull,
    resolve_column,
)
from roster.query.literal import LiteralQuery, NamedQueryRegistry, named_queries
from roster.query.executor import QueryExecutor, is_lock_failure, is_read_only

__all__ = [
    "Criteria",
    "Predicate",
    "Equals",
    "NotEquals",
    "GreaterThan",
    "GreaterThanEqual",
    "LessThan",
    "LessThanEqual",
    "In",
    "Like",
    "IsNull",
    "resolve_column",
    "LiteralQuery",
    "NamedQueryRegistry",
    "named_queries",
    "QueryExecutor",
    "is_lock_failure",
    "is_read_only",
]
