"""
Exception hierarchy for the persistence layer.

Store-level failures (IntegrityError and friends) are not wrapped here:
they propagate from SQLAlchemy unchanged. Only the conditions this layer
itself detects, plus lock failures, get a dedicated type.
"""


class RosterError(Exception):
    """Base exception for persistence-layer errors."""
    pass


class EntityNotFoundError(RosterError):
    """Raised when an operation requires a row that does not exist."""

    def __init__(self, entity_name: str, entity_id):
        self.entity_name = entity_name
        self.entity_id = entity_id
        super().__init__(f"No {entity_name} entity with id {entity_id!r} exists")


class IncorrectResultSizeError(RosterError):
    """Raised when a singular finder matches more than one row."""

    def __init__(self, expected: int, actual: int):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Incorrect result size: expected {expected}, actual {actual}"
        )


class QueryDefinitionError(RosterError):
    """
    Raised when a query is malformed.

    Covers literal queries whose placeholders do not match their declared
    parameters, references to unknown attributes or sort properties, and
    named queries that fail startup verification.
    """
    pass


class LockingFailureError(RosterError):
    """
    Raised when a row lock cannot be acquired (timeout, conflict, deadlock).

    The originating store exception is kept as ``__cause__``. Callers are
    expected to retry after a backoff.
    """
    pass
