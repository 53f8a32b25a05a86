"""
Statement instrumentation.

Counts the SQL statements an engine sends to the database, which is how
round-trip bounds are checked: a fetch join must load N members and their
teams in one statement, and a Slice must never issue a count query.

Usage:
    with StatementCounter(engine) as counter:
        repository.find_member_fetch_join()
    assert counter.count == 1
"""

import re
from typing import List

from sqlalchemy import event
from sqlalchemy.engine import Engine

_COUNT_PATTERN = re.compile(r"\bcount\s*\(", re.IGNORECASE)


class StatementCounter:
    """Records every statement executed on an engine while active."""

    def __init__(self, engine: Engine):
        self.engine = engine
        self.statements: List[str] = []

    def _before_cursor_execute(self, conn, cursor, statement, parameters, context, executemany):
        self.statements.append(statement)

    def __enter__(self) -> "StatementCounter":
        event.listen(self.engine, "before_cursor_execute", self._before_cursor_execute)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        event.remove(self.engine, "before_cursor_execute", self._before_cursor_execute)

    def reset(self) -> None:
        self.statements.clear()

    @property
    def count(self) -> int:
        return len(self.statements)

    @property
    def select_count(self) -> int:
        return sum(1 for s in self.statements if s.lstrip().upper().startswith("SELECT"))

    @property
    def count_query_count(self) -> int:
        """Number of statements that compute a COUNT(...)."""
        return sum(1 for s in self.statements if _COUNT_PATTERN.search(s))
