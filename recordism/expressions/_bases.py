"""Base expression type for SQL clause fragments."""

from __future__ import annotations
from typing import Any

from pydantic import BaseModel

from ..errors import ValidationError

OPERATORS: frozenset[str] = frozenset({
    "=", "!=", "<>", "<", "<=", ">", ">=",
    "like", "not like", "in", "not in", "is", "is not",
})
"""Comparison operators accepted in WHERE, HAVING and JOIN ... ON clauses."""


def normalize_operator(operator: str) -> str:
    """Return the lower-cased operator, or raise ValidationError if it is not supported."""
    if not isinstance(operator, str):
        raise ValidationError(f"Operator must be a string: {operator!r}")
    normalized = " ".join(operator.lower().split())
    if normalized not in OPERATORS:
        raise ValidationError(f"Unsupported operator: {operator!r}")
    return normalized


class Expression(BaseModel):
    """Base type for all SQL clause fragments.

    Subclasses must implement the ``sql`` property. The default ``values``
    is an empty tuple; fragments that contain literals override it
    to return the bound values in the same order as ``?`` placeholders in ``sql``.
    """

    model_config = {"arbitrary_types_allowed": True}

    @property
    def sql(self) -> str:
        """SQL fragment for this expression, with ``?`` for bound parameters."""
        raise NotImplementedError("Subclasses must implement `sql` property")

    @property
    def values(self) -> tuple[Any, ...]:
        """Bound values for placeholders in ``sql``, in order."""
        return ()
