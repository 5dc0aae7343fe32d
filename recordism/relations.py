"""Relation descriptors attached to the builders returned by relation accessors."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel


class RelationKind(str, Enum):
    HAS_ONE = "has_one"
    HAS_MANY = "has_many"
    BELONGS_TO = "belongs_to"
    BELONGS_TO_MANY = "belongs_to_many"

    @property
    def is_single(self) -> bool:
        """True when the relation resolves to at most one record."""
        return self in (RelationKind.HAS_ONE, RelationKind.BELONGS_TO)


class Relation(BaseModel):
    """How one model type relates to another.

    For ``belongs_to_many``, ``foreign_key`` is the pivot column holding the
    parent's key and ``related_key`` the pivot column holding the related key.
    """

    kind: RelationKind
    related: str
    """Registered name of the related model type."""
    foreign_key: str
    local_key: str
    pivot: Optional[str] = None
    related_key: Optional[str] = None
