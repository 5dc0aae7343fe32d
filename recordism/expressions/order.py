"""ORDER BY expression."""

from typing import Literal, Optional

from ..errors import ValidationError
from ._bases import Expression


def normalize_direction(direction: Optional[str]) -> str:
    """Return ``ASC`` or ``DESC`` for a case-insensitive direction, or raise ValidationError."""
    if direction is None:
        return "ASC"
    if not isinstance(direction, str) or direction.upper() not in ("ASC", "DESC"):
        raise ValidationError(f"Order direction must be 'asc' or 'desc': {direction!r}")
    return direction.upper()


class Order(Expression):
    """ORDER BY spec: one column and ascending or descending."""

    column: str
    direction: Literal["ASC", "DESC"] = "ASC"

    @property
    def sql(self) -> str:
        """Column with ``ASC`` or ``DESC`` suffix."""
        return f"{self.column} {self.direction}"
