"""Page-based slicing of a query's results."""

from __future__ import annotations

from typing import Any, TYPE_CHECKING

from pydantic import BaseModel, Field

from .errors import ValidationError

if TYPE_CHECKING:
    from .query import Builder


class Page(BaseModel):
    """One page of results plus the numbers needed to navigate the others."""

    model_config = {"arbitrary_types_allowed": True}

    data: list[Any] = Field(default_factory=list)
    current_page: int
    per_page: int
    total: int
    last_page: int
    from_item: int | None = None
    """1-based position of the first item on this page, None when the page is empty."""
    to_item: int | None = None

    @property
    def has_next(self) -> bool:
        return self.current_page < self.last_page

    @property
    def has_prev(self) -> bool:
        return self.current_page > 1


def _check_positive_int(name: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ValidationError(f"{name} must be a positive integer: {value!r}")
    return value


async def paginate(builder: "Builder", page: int = 1, per_page: int = 15) -> Page:
    """Count the builder's matches, then fetch one page of them.

    The builder itself is left untouched; both statements run on clones.
    """
    page = _check_positive_int("page", page)
    per_page = _check_positive_int("per_page", per_page)
    total = await builder.clone().count()
    offset = (page - 1) * per_page
    query = builder.clone()
    query.is_first = False
    data = await query.limit(per_page).offset(offset).get()
    return Page(
        data=data,
        current_page=page,
        per_page=per_page,
        total=total,
        last_page=max((total + per_page - 1) // per_page, 1),
        from_item=offset + 1 if data else None,
        to_item=offset + len(data) if data else None,
    )
