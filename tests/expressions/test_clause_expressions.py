"""Tests for recordism.expressions: Where, Order, Join rendering and operator validation."""

import pytest

from recordism.errors import ValidationError
from recordism.expressions import (
    Connective,
    Join,
    JoinType,
    Order,
    Where,
    normalize_direction,
    normalize_operator,
)


class TestWhere:

    def test_binds_value(self):
        where = Where(column="users.id", operator="=", value=1)
        assert where.sql == "users.id = ?"
        assert where.values == (1,)
        assert where.connective is Connective.AND

    def test_in_renders_one_placeholder_per_item(self):
        where = Where(column="id", operator="in", value=[1, 2, 3])
        assert where.sql == "id IN (?, ?, ?)"
        assert where.values == (1, 2, 3)

    def test_empty_in_is_constant(self):
        assert Where(column="id", operator="in", value=[]).sql == "1 = 0"
        assert Where(column="id", operator="not in", value=[]).sql == "1 = 1"
        assert Where(column="id", operator="in", value=[]).values == ()

    @pytest.mark.parametrize("operator, expected", [
        ("=", "name IS NULL"),
        ("is", "name IS NULL"),
        ("!=", "name IS NOT NULL"),
        ("is not", "name IS NOT NULL"),
    ])
    def test_none_renders_null_checks(self, operator, expected):
        where = Where(column="name", operator=operator, value=None)
        assert where.sql == expected
        assert where.values == ()

    def test_like_is_upper_cased(self):
        where = Where(column="name", operator="not like", value="a%")
        assert where.sql == "name NOT LIKE ?"

    def test_value_never_reaches_sql(self):
        where = Where(column="name", operator="=", value="x'; DROP TABLE users; --")
        assert "DROP" not in where.sql
        assert where.values == ("x'; DROP TABLE users; --",)


class TestOperators:

    @pytest.mark.parametrize("operator, expected", [
        ("=", "="),
        ("LIKE", "like"),
        ("Not   In", "not in"),
        ("is not", "is not"),
    ])
    def test_normalize(self, operator, expected):
        assert normalize_operator(operator) == expected

    @pytest.mark.parametrize("operator", ["==", "; DROP", "", "between", 3])
    def test_rejects_unknown(self, operator):
        with pytest.raises(ValidationError):
            normalize_operator(operator)


class TestOrder:

    def test_sql(self):
        assert Order(column="id").sql == "id ASC"
        assert Order(column="id", direction="DESC").sql == "id DESC"

    def test_normalize_direction(self):
        assert normalize_direction(None) == "ASC"
        assert normalize_direction("desc") == "DESC"
        with pytest.raises(ValidationError, match="asc.*desc"):
            normalize_direction("sideways")


class TestJoin:

    def test_sql_per_kind(self):
        join = Join(table="posts", local_key="posts.user_id", foreign_key="users.id")
        assert join.sql == "INNER JOIN posts ON posts.user_id = users.id"
        join = Join(table="posts", local_key="posts.user_id", foreign_key="users.id", kind=JoinType.LEFT)
        assert join.sql.startswith("LEFT JOIN posts")
        assert join.values == ()
