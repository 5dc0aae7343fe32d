"""Fluent, mutable query builder.

Clause methods (``select``, ``where``, ``join``, ``order_by``, ``limit``, ...)
mutate the builder and return it, so calls chain. Terminal methods (``get``,
``first``, ``count``, ``insert``, ``insert_many``, ``update``, ``delete``,
``paginate``) compile the accumulated state with ``Compiler`` and await the
connection adapter. A builder bound to a model type with ``set_model()``
returns rows as instances of that model; an unbound builder returns dicts.

A builder is not safe for concurrent mutation: use one per logical query.
"""

from __future__ import annotations

from collections import abc
from typing import Any, ClassVar, Iterable, Optional, TYPE_CHECKING

from pydantic import BaseModel, Field

from .compiler import Compiler, Statement
from .connection import Result, get_adapter
from .errors import ValidationError
from .expressions import (
    Connective,
    Join,
    JoinType,
    Order,
    Where,
    normalize_direction,
    normalize_operator,
)
from .registry import registry
from .relations import Relation

if TYPE_CHECKING:
    from .pagination import Page


def _check_non_negative_int(name: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{name} must be an integer: {value!r}")
    if value < 0:
        raise ValidationError(f"{name} must not be negative: {value!r}")
    return value


class Builder(BaseModel):
    """Mutable accumulator of SELECT / INSERT / UPDATE / DELETE clause state."""

    model_config = {"arbitrary_types_allowed": True}

    _compiler: ClassVar[Compiler] = Compiler()

    model: Optional[str] = None
    """Registered model type name; when set, fetched rows are wrapped into that model."""
    from_table: str = ""
    """The base table of the query. All other tables are appended via joins."""
    selects: list[str] = Field(default_factory=list)
    raw_selects: list[str] = Field(default_factory=list)
    is_distinct: bool = False
    is_first: bool = False
    """Limits the query to 1 and returns at most one result if True."""
    joins: list[Join] = Field(default_factory=list)
    wheres: list[Where] = Field(default_factory=list)
    groups: list[str] = Field(default_factory=list)
    havings: list[Where] = Field(default_factory=list)
    orders: list[Order] = Field(default_factory=list)
    limits: Optional[int] = None
    offsets: Optional[int] = None
    updates: dict[str, Any] = Field(default_factory=dict)
    connection_name: Optional[str] = None
    """Connection to run on; defaults to the bound model's connection, then ``default``."""
    relation: Optional[Relation] = None
    """Set on builders returned by relation accessors."""

    # --- clause methods ---

    def set_model(self, model: str) -> Builder:
        """Bind to a registered model type and select from its table."""
        entry = registry.get_model(model)
        self.model = model
        if self.connection_name is None:
            self.connection_name = getattr(entry.constructor, "_CONNECTION_NAME", None)
        return self.from_(entry.table)

    def from_(self, table: str) -> Builder:
        """Set the source table; an empty select list defaults to ``<table>.*``."""
        self.from_table = table
        if not self.selects:
            self.selects.append(f"{table}.*")
        return self

    def select(self, *columns: str | Iterable[str]) -> Builder:
        """Replace the select list. Accepts ``select('id', 'name')`` or ``select(['id', 'name'])``."""
        if len(columns) == 1 and not isinstance(columns[0], str):
            columns = tuple(columns[0])
        self.selects = list(columns)
        return self

    def select_raw(self, expression: str) -> Builder:
        """Append a raw SQL expression (e.g. ``COUNT(posts.id) AS posts_count``) to the select list."""
        self.raw_selects.append(expression)
        return self

    def distinct(self) -> Builder:
        self.is_distinct = True
        return self

    def set_is_first(self, is_first: bool) -> Builder:
        self.is_first = is_first
        if is_first:
            self.limit(1)
        return self

    def _join(self, kind: JoinType, table: str, local_key: str, operator: str, foreign_key: str) -> Builder:
        self.joins.append(Join(
            table=table,
            local_key=local_key,
            operator=normalize_operator(operator),
            foreign_key=foreign_key,
            kind=kind,
        ))
        return self

    def join(self, table: str, local_key: str, operator: str, foreign_key: str) -> Builder:
        return self._join(JoinType.INNER, table, local_key, operator, foreign_key)

    def left_join(self, table: str, local_key: str, operator: str, foreign_key: str) -> Builder:
        return self._join(JoinType.LEFT, table, local_key, operator, foreign_key)

    def right_join(self, table: str, local_key: str, operator: str, foreign_key: str) -> Builder:
        return self._join(JoinType.RIGHT, table, local_key, operator, foreign_key)

    def _where(self, column: str, operator: str, value: Any, connective: Connective) -> Where:
        operator = normalize_operator(operator)
        if operator in ("in", "not in"):
            if isinstance(value, (str, bytes)) or not isinstance(value, abc.Iterable):
                raise ValidationError(f"`{operator}` expects a sequence of values, got {value!r}")
            value = list(value)
        return Where(column=column, operator=operator, value=value, connective=connective)

    def where(self, column: str, operator: str, value: Any) -> Builder:
        self.wheres.append(self._where(column, operator, value, Connective.AND))
        return self

    def or_where(self, column: str, operator: str, value: Any) -> Builder:
        self.wheres.append(self._where(column, operator, value, Connective.OR))
        return self

    def where_in(self, column: str, values: Iterable[Any]) -> Builder:
        self.wheres.append(self._where(column, "in", values, Connective.AND))
        return self

    def where_not_in(self, column: str, values: Iterable[Any]) -> Builder:
        self.wheres.append(self._where(column, "not in", values, Connective.AND))
        return self

    def where_null(self, column: str) -> Builder:
        self.wheres.append(self._where(column, "is", None, Connective.AND))
        return self

    def where_not_null(self, column: str) -> Builder:
        self.wheres.append(self._where(column, "is not", None, Connective.AND))
        return self

    def group_by(self, *groups: str | Iterable[str]) -> Builder:
        if len(groups) == 1 and not isinstance(groups[0], str):
            groups = tuple(groups[0])
        self.groups = list(groups)
        return self

    def having(self, column: str, operator: str, value: Any) -> Builder:
        self.havings.append(self._where(column, operator, value, Connective.AND))
        return self

    def order_by(self, column: str, direction: Optional[str] = None) -> Builder:
        self.orders.append(Order(column=column, direction=normalize_direction(direction)))
        return self

    def limit(self, limit: int) -> Builder:
        self.limits = _check_non_negative_int("Limit", limit)
        return self

    def offset(self, offset: int) -> Builder:
        self.offsets = _check_non_negative_int("Offset", offset)
        return self

    def clone(self) -> Builder:
        """Return an independent copy of this builder's state."""
        return self.model_copy(deep=True)

    # --- compilation ---

    def to_statement(self) -> Statement:
        """Compile this builder as a SELECT without executing it."""
        return self._compiler.compile_select(self)

    @property
    def sql(self) -> str:
        """SELECT statement for the current state, with ``?`` placeholders."""
        return self.to_statement().sql

    @property
    def values(self) -> tuple[Any, ...]:
        """Values bound to the placeholders of ``sql``, in order."""
        return self.to_statement().values

    # --- execution ---

    async def _execute(self, statement: Statement) -> Result:
        adapter = await get_adapter(self.connection_name or "default")
        return await adapter.execute(statement.sql, statement.values)

    def _transform_rows(self, rows: list[dict[str, Any]]) -> list[Any]:
        if not self.model:
            return rows
        constructor = registry.get_model(self.model).constructor
        return [constructor(row, exists=True) for row in rows]

    async def get(self) -> list[Any]:
        """Run the SELECT; rows become model instances when bound. At most one item when ``is_first``."""
        result = await self._execute(self._compiler.compile_select(self))
        rows = self._transform_rows(result.rows)
        if self.is_first:
            return rows[:1]
        return rows

    async def first(self) -> Optional[Any]:
        """Return the first matching row (or record), or None when nothing matches."""
        rows = await self.set_is_first(True).get()
        return rows[0] if rows else None

    async def count(self) -> int:
        """Count matching rows, ignoring the select list, ordering and limits."""
        result = await self._execute(self._compiler.compile_select(self, count=True))
        return int(result.rows[0]["count"])

    async def insert(self, attributes: dict[str, Any]) -> Any:
        """Insert one row and return the identifier generated for it."""
        result = await self._execute(self._compiler.compile_insert(self, [dict(attributes)]))
        return result.insert_id

    async def insert_many(self, rows: Iterable[dict[str, Any]]) -> Result:
        """Insert every row with one statement; all rows must share the same columns."""
        result = await self._execute(self._compiler.compile_insert(self, [dict(row) for row in rows]))
        return result

    async def update(self, updates: dict[str, Any]) -> int:
        """Update rows matched by the WHERE clauses; return the affected row count."""
        self.updates = dict(updates)
        if not self.updates:
            return 0
        result = await self._execute(self._compiler.compile_update(self, self.updates))
        return result.row_count

    async def delete(self, attributes: Optional[dict[str, Any]] = None) -> int:
        """Delete rows matched by the WHERE clauses plus ``column = value`` for each given attribute."""
        for column, value in (attributes or {}).items():
            self.where(column, "=", value)
        result = await self._execute(self._compiler.compile_delete(self))
        return result.row_count

    async def paginate(self, page: int = 1, per_page: int = 15) -> "Page":
        from .pagination import paginate
        return await paginate(self, page=page, per_page=per_page)
