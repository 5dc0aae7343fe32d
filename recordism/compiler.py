"""Compile Builder state into parameterized SQL statements.

One routine per statement kind. Only identifiers and keywords are written
into the SQL text; every value is bound through a ``?`` placeholder and
returned in ``Statement.values``, in placeholder order.
"""

from __future__ import annotations

from typing import Any, Iterable, TYPE_CHECKING

from pydantic import BaseModel, Field

from .errors import ConfigurationError, ValidationError
from .expressions import Where

if TYPE_CHECKING:
    from .query import Builder


class Statement(BaseModel):
    """A compiled statement: SQL text with ``?`` placeholders and the values bound to them."""

    sql: str
    values: tuple[Any, ...] = Field(default_factory=tuple)

    def __str__(self) -> str:
        return self.sql


def _sql_conditions(wheres: Iterable[Where]) -> tuple[str, tuple[Any, ...]]:
    """Join conditions left to right by their connectives; the first connective is dropped."""
    parts: list[str] = []
    values: list[Any] = []
    for where in wheres:
        if parts:
            parts.append(where.connective.value)
        parts.append(where.sql)
        values.extend(where.values)
    return " ".join(parts), tuple(values)


class Compiler:
    """Stateless translator from Builder state to a Statement."""

    def _require_table(self, builder: "Builder") -> str:
        if not builder.from_table:
            raise ConfigurationError("Cannot compile a query without a source table; call from_() or set_model()")
        return builder.from_table

    def _sql_from_join_where(self, builder: "Builder") -> tuple[str, tuple[Any, ...]]:
        """FROM, JOIN and WHERE clauses shared by selects and counts."""
        sql = f"FROM {self._require_table(builder)}"
        for join in builder.joins:
            sql += f"\n{join.sql}"
        values: tuple[Any, ...] = ()
        if builder.wheres:
            conditions, values = _sql_conditions(builder.wheres)
            sql += f"\nWHERE {conditions}"
        return sql, values

    def _sql_group_having(self, builder: "Builder") -> tuple[str, tuple[Any, ...]]:
        sql = ""
        values: tuple[Any, ...] = ()
        if builder.groups:
            sql += "\nGROUP BY " + ", ".join(builder.groups)
        if builder.havings:
            conditions, values = _sql_conditions(builder.havings)
            sql += f"\nHAVING {conditions}"
        return sql, values

    def _sql_columns(self, builder: "Builder") -> str:
        columns = list(builder.selects) + list(builder.raw_selects)
        distinct = "DISTINCT " if builder.is_distinct else ""
        return distinct + (", ".join(columns) if columns else "*")

    def compile_select(self, builder: "Builder", count: bool = False) -> Statement:
        """Compile a SELECT, or with ``count=True`` a ``COUNT(*) AS count`` over the same FROM/JOIN/WHERE.

        Clause order: columns, FROM, JOINs, WHERE, GROUP BY, HAVING, ORDER BY, LIMIT/OFFSET.
        Counting a DISTINCT, grouped or HAVING-filtered query wraps it in a subquery so the
        result is one row that agrees with get().
        """
        from_join_where, where_values = self._sql_from_join_where(builder)
        group_having, having_values = self._sql_group_having(builder)

        if count:
            if builder.is_distinct or builder.groups or builder.havings:
                inner = f"SELECT {self._sql_columns(builder)}\n{from_join_where}{group_having}"
                sql = f"SELECT COUNT(*) AS count FROM (\n{inner}\n) AS aggregate"
                return Statement(sql=sql, values=where_values + having_values)
            sql = f"SELECT COUNT(*) AS count\n{from_join_where}"
            return Statement(sql=sql, values=where_values)

        sql = f"SELECT {self._sql_columns(builder)}\n{from_join_where}{group_having}"
        if builder.orders:
            sql += "\nORDER BY " + ", ".join(order.sql for order in builder.orders)
        if builder.limits is not None:
            sql += f"\nLIMIT {builder.limits}"
        elif builder.offsets is not None:
            # SQLite only accepts OFFSET after a LIMIT
            sql += "\nLIMIT -1"
        if builder.offsets is not None:
            sql += f"\nOFFSET {builder.offsets}"
        return Statement(sql=sql, values=where_values + having_values)

    def compile_insert(self, builder: "Builder", rows: list[dict[str, Any]]) -> Statement:
        """Compile one INSERT carrying every row; all rows must share the first row's columns."""
        table = self._require_table(builder)
        if not rows:
            raise ValidationError("Cannot insert an empty list of rows")
        columns = list(rows[0])
        if not columns:
            if len(rows) > 1:
                raise ValidationError("Cannot insert several rows without columns")
            return Statement(sql=f"INSERT INTO {table} DEFAULT VALUES")
        values: list[Any] = []
        tuples: list[str] = []
        for index, row in enumerate(rows):
            if set(row) != set(columns):
                raise ValidationError(
                    f"Row {index} has columns {sorted(row)}, expected {sorted(columns)}"
                )
            values.extend(row[column] for column in columns)
            tuples.append("(" + ", ".join("?" for _ in columns) + ")")
        sql = (
            f"INSERT INTO {table} ({', '.join(columns)})\n"
            f"VALUES {', '.join(tuples)}"
        )
        return Statement(sql=sql, values=tuple(values))

    def compile_update(self, builder: "Builder", updates: dict[str, Any]) -> Statement:
        """Compile an UPDATE of the given columns, scoped by the builder's WHERE clauses."""
        table = self._require_table(builder)
        if not updates:
            raise ValidationError("Cannot compile an UPDATE without columns")
        sql = f"UPDATE {table}\nSET " + ", ".join(f"{column} = ?" for column in updates)
        values = tuple(updates.values())
        if builder.wheres:
            conditions, where_values = _sql_conditions(builder.wheres)
            sql += f"\nWHERE {conditions}"
            values += where_values
        return Statement(sql=sql, values=values)

    def compile_delete(self, builder: "Builder") -> Statement:
        """Compile a DELETE scoped by the builder's WHERE clauses."""
        sql = f"DELETE FROM {self._require_table(builder)}"
        values: tuple[Any, ...] = ()
        if builder.wheres:
            conditions, values = _sql_conditions(builder.wheres)
            sql += f"\nWHERE {conditions}"
        return Statement(sql=sql, values=values)
