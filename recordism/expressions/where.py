"""WHERE / HAVING condition."""

from enum import Enum
from typing import Any

from ._bases import Expression


class Connective(str, Enum):
    """How a condition attaches to the one before it."""

    AND = "AND"
    OR = "OR"


_NULL_OPERATORS = {
    "=": "IS NULL",
    "is": "IS NULL",
    "!=": "IS NOT NULL",
    "<>": "IS NOT NULL",
    "is not": "IS NOT NULL",
}


class Where(Expression):
    """One condition: ``column operator value``, joined to the previous one by ``connective``.

    ``operator`` is expected in the lower-case form returned by
    ``normalize_operator()``. ``in`` / ``not in`` take a sequence and render one
    placeholder per item; an empty sequence renders a constant condition. A
    ``None`` value with an equality operator renders ``IS NULL`` / ``IS NOT NULL``.
    """

    column: str
    operator: str = "="
    value: Any = None
    connective: Connective = Connective.AND

    @property
    def _is_list(self) -> bool:
        return self.operator in ("in", "not in")

    @property
    def _is_null_check(self) -> bool:
        return self.value is None and self.operator in _NULL_OPERATORS

    @property
    def sql(self) -> str:
        if self._is_list:
            items = list(self.value)
            if not items:
                return "1 = 0" if self.operator == "in" else "1 = 1"
            placeholders = ", ".join("?" for _ in items)
            return f"{self.column} {self.operator.upper()} ({placeholders})"
        if self._is_null_check:
            return f"{self.column} {_NULL_OPERATORS[self.operator]}"
        return f"{self.column} {self.operator.upper()} ?"

    @property
    def values(self) -> tuple[Any, ...]:
        if self._is_list:
            return tuple(self.value)
        if self._is_null_check:
            return ()
        return (self.value,)
