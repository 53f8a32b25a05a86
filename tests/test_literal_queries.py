"""Literal / named query tests: definition-time checks, binding, startup verification."""

import pytest

from roster.core.constants import MEMBER_FIND_BY_USERNAME
from roster.core.exceptions import QueryDefinitionError
from roster.query import LiteralQuery, NamedQueryRegistry, named_queries
import roster.repositories  # noqa: F401  registers the Member named queries


class TestLiteralQueryDefinition:
    """Placeholders and declared parameters must agree."""

    def test_valid_definition(self):
        query = LiteralQuery(
            "q", "SELECT * FROM members WHERE username = :username AND age = :age",
            params=("username", "age"),
        )

        assert query.params == ("username", "age")

    def test_undeclared_placeholder(self):
        with pytest.raises(QueryDefinitionError, match="do not match"):
            LiteralQuery("q", "SELECT * FROM members WHERE username = :username")

    def test_unused_parameter(self):
        with pytest.raises(QueryDefinitionError):
            LiteralQuery("q", "SELECT * FROM members", params=("username",))

    def test_undeclared_expanding(self):
        with pytest.raises(QueryDefinitionError, match="expanding"):
            LiteralQuery(
                "q", "SELECT * FROM members WHERE username IN :names",
                params=("names",), expanding=("ids",),
            )

    def test_empty_sql(self):
        with pytest.raises(QueryDefinitionError):
            LiteralQuery("q", "   ")

    def test_cast_is_not_a_placeholder(self):
        query = LiteralQuery("q", "SELECT age::text FROM members WHERE age = :age", params=("age",))

        assert query.params == ("age",)


class TestBinding:
    """Call arguments map onto parameter names."""

    @pytest.fixture
    def query(self):
        return LiteralQuery(
            "q", "SELECT * FROM members WHERE username = :username AND age = :age",
            params=("username", "age"),
        )

    def test_positional(self, query):
        assert query.bind("AAA", 10) == {"username": "AAA", "age": 10}

    def test_keyword(self, query):
        assert query.bind(age=10, username="AAA") == {"username": "AAA", "age": 10}

    def test_missing(self, query):
        with pytest.raises(QueryDefinitionError, match="missing"):
            query.bind("AAA")

    def test_unknown(self, query):
        with pytest.raises(QueryDefinitionError, match="no parameter"):
            query.bind("AAA", 10, nickname="x")

    def test_twice(self, query):
        with pytest.raises(QueryDefinitionError, match="twice"):
            query.bind("AAA", username="BBB", age=1)

    def test_too_many(self, query):
        with pytest.raises(QueryDefinitionError):
            query.bind("AAA", 10, 20)

    def test_expanding_becomes_list(self):
        query = LiteralQuery(
            "q", "SELECT * FROM members WHERE username IN :names",
            params=("names",), expanding=("names",),
        )

        assert query.bind(names={"AAA"}) == {"names": ["AAA"]}


class TestNamedQueryRegistry:
    """Registration, lookup and startup verification."""

    def test_member_queries_registered(self):
        assert MEMBER_FIND_BY_USERNAME in named_queries
        assert named_queries.get(MEMBER_FIND_BY_USERNAME).params == ("username",)

    def test_duplicate_name(self):
        registry = NamedQueryRegistry()
        registry.define("q", "SELECT 1")

        with pytest.raises(QueryDefinitionError, match="already registered"):
            registry.define("q", "SELECT 2")

    def test_unknown_name(self):
        registry = NamedQueryRegistry()

        assert registry.find("missing") is None
        with pytest.raises(QueryDefinitionError):
            registry.get("missing")

    def test_verify_registered_queries(self, engine):
        with engine.connect() as connection:
            named_queries.verify(connection)

    def test_verify_rejects_unknown_column(self, engine):
        registry = NamedQueryRegistry()
        registry.define("Member.broken", "SELECT m.nickname FROM members m WHERE m.age = :age", params=("age",))

        with engine.connect() as connection:
            with pytest.raises(QueryDefinitionError, match="Member.broken"):
                registry.verify(connection)

    def test_verify_rejects_unknown_table(self, engine):
        registry = NamedQueryRegistry()
        registry.define("Member.noTable", "SELECT * FROM players")

        with engine.connect() as connection:
            with pytest.raises(QueryDefinitionError):
                registry.verify(connection)
