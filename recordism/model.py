"""Active-record base class: attribute tracking, persistence lifecycle, and relations."""

from __future__ import annotations

import asyncio
import datetime
import logging
import re
from typing import Any, ClassVar, Iterable, Optional, TypeVar

from .attributes import AttributeStore
from .connection import Result
from .errors import ConfigurationError
from .events import (
    MODEL_CREATED,
    MODEL_CREATING,
    MODEL_DELETED,
    MODEL_DELETING,
    MODEL_SAVED,
    MODEL_SAVING,
    MODEL_UPDATED,
    MODEL_UPDATING,
    emitter,
)
from .pagination import Page
from .query import Builder
from .registry import registry
from .relations import Relation, RelationKind

logger = logging.getLogger("recordism")

M = TypeVar("M", bound="Model")


def _snake_case(name: str) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "_", name).lower()


def _model_name(related: str | type) -> str:
    return related if isinstance(related, str) else related.__name__


class Model:
    """Base class for records.

    A record wraps an AttributeStore and is either transient (``exists`` is
    False) or persisted. Subclasses are configured with class keyword
    arguments and must be registered with ``@model`` before they are queried::

        @model
        class User(Model, table="users", timestamps=True):
            def get_full_name_attribute(self, attributes):
                return f"{attributes['first_name']} {attributes['last_name']}"

            @relation
            def posts(self):
                return self.has_many("Post", "user_id")

    Field values are read and written only through ``get_attribute()`` and
    ``set_attribute()``. A ``get_<key>_attribute(attributes)`` method defines a
    computed accessor for ``key``.
    """

    table: ClassVar[str] = ""
    primary_key: ClassVar[str] = "id"
    timestamps: ClassVar[bool] = False
    CREATED_AT: ClassVar[str] = "created_at"
    UPDATED_AT: ClassVar[str] = "updated_at"
    hidden: ClassVar[tuple[str, ...]] = ()
    """Attributes left out of to_dict()."""
    appends: ClassVar[tuple[str, ...]] = ()
    """Computed accessors added to to_dict()."""
    _CONNECTION_NAME: ClassVar[Optional[str]] = None

    def __init_subclass__(cls,
                          table: Optional[str] = None,
                          primary_key: Optional[str] = None,
                          timestamps: Optional[bool] = None,
                          connection_name: Optional[str] = None,
                          **kwargs):
        super().__init_subclass__(**kwargs)
        if table is not None:
            cls.table = table
        elif "table" not in vars(cls):
            cls.table = ""
        if primary_key is not None:
            cls.primary_key = primary_key
        if timestamps is not None:
            cls.timestamps = timestamps
        if connection_name is not None:
            cls._CONNECTION_NAME = connection_name

    def __init__(self, attributes: Optional[dict[str, Any]] = None, exists: bool = False):
        self._store = AttributeStore(owner=self)
        self._store.fill_attributes(attributes or {})
        self._exists = bool(exists)
        self._persisted_key = self.get_key() if self._exists else None
        self._hidden = list(self.hidden)
        self._save_lock = asyncio.Lock()

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.primary_key}={self.get_key()!r} exists={self._exists}>"

    def __eq__(self, other: Any) -> bool:
        """Records are equal when they have the same class and the same non-null primary key."""
        if not isinstance(other, Model):
            return NotImplemented
        return self.equals(other)

    def __hash__(self):
        key = self.get_key()
        if key is None:
            raise TypeError(
                f"Cannot hash {type(self).__name__} instance without a primary key value"
            )
        return hash((self.__class__, key))

    def equals(self, other: "Model") -> bool:
        return (
            type(self) is type(other)
            and self.get_key() is not None
            and self.get_key() == other.get_key()
        )

    @classmethod
    def _get_table_name(cls) -> str:
        """Return the SQL table name: the ``table`` option, else the lower-cased class name."""
        return cls.table or cls.__name__.lower()

    # --- attributes ---

    @property
    def exists(self) -> bool:
        """True once the record has been inserted or when it was loaded from the database."""
        return self._exists

    def get_attribute(self, key: str) -> Any:
        return self._store.get_attribute(key)

    def set_attribute(self, key: str, value: Any) -> None:
        self._store.set_attribute(key, value)

    def fill_attributes(self, attributes: dict[str, Any]) -> None:
        self._store.fill_attributes(attributes)

    def get_attributes(self) -> dict[str, Any]:
        """Return a copy of the raw attribute map."""
        return dict(self._store.get_attributes())

    def has_attribute(self, key: str) -> bool:
        return self._store.has_attribute(key)

    def get_dirty_attributes(self) -> dict[str, Any]:
        return self._store.get_dirty_attributes()

    def is_dirty(self) -> bool:
        return self._store.is_dirty()

    def clear_changed_attributes(self) -> None:
        self._store.clear_changed_attributes()

    def get_key(self) -> Any:
        """Raw primary key value, or None for a record that has none yet."""
        return self._store.get_attributes().get(self.primary_key)

    def get_hidden(self) -> list[str]:
        return list(self._hidden)

    def set_hidden(self, keys: Iterable[str]) -> None:
        self._hidden = list(keys)

    def to_dict(self) -> dict[str, Any]:
        """Attributes without the hidden ones, plus the appended computed accessors."""
        data = {
            key: value
            for key, value in self._store.get_attributes().items()
            if key not in self._hidden
        }
        for key in self.appends:
            if key not in self._hidden:
                data[key] = self.get_attribute(key)
        return data

    # --- timestamps ---

    @staticmethod
    def _fresh_timestamp() -> str:
        return datetime.datetime.now(datetime.timezone.utc).isoformat()

    def set_created_at(self, timestamp: str) -> None:
        self.set_attribute(self.CREATED_AT, timestamp)

    def set_updated_at(self, timestamp: str) -> None:
        self.set_attribute(self.UPDATED_AT, timestamp)

    # --- queries ---

    @classmethod
    def query(cls) -> Builder:
        """Return a new Builder bound to this model type."""
        return Builder().set_model(cls.__name__)

    @classmethod
    async def find_by_id(cls: type[M], id: Any) -> Optional[M]:
        """Return the record whose primary key equals id, or None."""
        return await cls.query().set_is_first(True).where(cls.primary_key, "=", id).first()

    @classmethod
    async def all(cls: type[M]) -> list[M]:
        return await cls.query().get()

    @classmethod
    def select(cls, *columns: str | Iterable[str]) -> Builder:
        return cls.query().select(*columns)

    @classmethod
    def where(cls, column: str, operator: str, value: Any) -> Builder:
        return cls.query().where(column, operator, value)

    @classmethod
    def or_where(cls, column: str, operator: str, value: Any) -> Builder:
        return cls.query().or_where(column, operator, value)

    @classmethod
    def where_in(cls, column: str, values: Iterable[Any]) -> Builder:
        return cls.query().where_in(column, values)

    @classmethod
    async def paginate(cls, page: int = 1, per_page: int = 15) -> Page:
        return await cls.query().paginate(page=page, per_page=per_page)

    @classmethod
    async def save_many(cls, rows: Iterable[dict[str, Any]]) -> Result:
        """Insert several rows with a single statement; no lifecycle events are fired."""
        return await cls.query().insert_many(rows)

    @classmethod
    async def create(cls: type[M], attributes: Optional[dict[str, Any]] = None) -> M:
        """Build a record from attributes and save it."""
        instance = cls(attributes)
        await instance.save()
        return instance

    # --- persistence ---

    async def _perform_insert(self, query: Builder) -> bool:
        if self.timestamps:
            now = self._fresh_timestamp()
            if self._store.get_attributes().get(self.CREATED_AT) is None:
                self.set_created_at(now)
            self.set_updated_at(now)
        insert_id = await query.insert(self._store.get_attributes())
        if insert_id is not None and self.get_key() is None:
            self.set_attribute(self.primary_key, insert_id)
        self._exists = True
        self._persisted_key = self.get_key()
        logger.debug("Inserted %r", self)
        emitter.fire(MODEL_CREATED, self)
        return True

    def _require_persisted_key(self) -> Any:
        """Primary key value of the stored row, as it was when loaded or last saved."""
        if self._persisted_key is None:
            raise ConfigurationError(
                f"{type(self).__name__} record was loaded without its `{self.primary_key}` column; "
                "it cannot be updated or deleted"
            )
        return self._persisted_key

    async def _perform_update(self, query: Builder, key: Any) -> bool:
        if self.timestamps:
            self.set_updated_at(self._fresh_timestamp())
        query.where(self.primary_key, "=", key)
        await query.update(self.get_dirty_attributes())
        self._persisted_key = self.get_key()
        logger.debug("Updated %r", self)
        emitter.fire(MODEL_UPDATED, self)
        return True

    async def save(self) -> bool:
        """Insert or update the record; return False when there was nothing to persist.

        Fires ``model-saving``, then ``model-updating``/``model-updated`` or
        ``model-creating``/``model-created``, then ``model-saved``. Concurrent
        calls on the same instance run one after the other.
        """
        async with self._save_lock:
            emitter.fire(MODEL_SAVING, self)

            success = False
            query = self.query()

            if self._exists and self.is_dirty():
                key = self._require_persisted_key()
                emitter.fire(MODEL_UPDATING, self)
                success = await self._perform_update(query, key)
            elif self.is_dirty():
                emitter.fire(MODEL_CREATING, self)
                success = await self._perform_insert(query)

            if success:
                self.clear_changed_attributes()
                emitter.fire(MODEL_SAVED, self)

            return success

    async def delete(self) -> int:
        """Delete the row of a persisted record and return the affected row count.

        A transient record is left alone and False is returned. ``exists``
        keeps its value after a delete.
        """
        if not self._exists:
            return False
        key = self._require_persisted_key()
        emitter.fire(MODEL_DELETING, self)
        deleted = await self.query().delete({self.primary_key: key})
        logger.debug("Deleted %r", self)
        emitter.fire(MODEL_DELETED, self)
        return deleted

    # --- relations ---

    def _relation_query(self, related: str | type, relation: Relation) -> Builder:
        builder = Builder().set_model(_model_name(related))
        builder.relation = relation
        return builder

    def has_one(self, related: str | type, foreign_key: Optional[str] = None,
                local_key: Optional[str] = None) -> Builder:
        """Related record whose ``foreign_key`` equals this record's ``local_key`` (default: primary key)."""
        return self._has(RelationKind.HAS_ONE, related, foreign_key, local_key).set_is_first(True)

    def has_many(self, related: str | type, foreign_key: Optional[str] = None,
                 local_key: Optional[str] = None) -> Builder:
        """Related records whose ``foreign_key`` equals this record's ``local_key`` (default: primary key)."""
        return self._has(RelationKind.HAS_MANY, related, foreign_key, local_key)

    def _has(self, kind: RelationKind, related: str | type,
             foreign_key: Optional[str], local_key: Optional[str]) -> Builder:
        name = _model_name(related)
        foreign_key = foreign_key or f"{_snake_case(type(self).__name__)}_id"
        local_key = local_key or self.primary_key
        relation = Relation(kind=kind, related=name, foreign_key=foreign_key, local_key=local_key)
        builder = self._relation_query(name, relation)
        return builder.where(f"{builder.from_table}.{foreign_key}", "=", self.get_attribute(local_key))

    def belongs_to(self, related: str | type, foreign_key: Optional[str] = None,
                   owner_key: Optional[str] = None) -> Builder:
        """Related record whose ``owner_key`` (default: its primary key) equals this record's ``foreign_key``."""
        name = _model_name(related)
        owner_key = owner_key or registry.get_model(name).constructor.primary_key
        foreign_key = foreign_key or f"{_snake_case(name)}_id"
        relation = Relation(kind=RelationKind.BELONGS_TO, related=name,
                            foreign_key=foreign_key, local_key=owner_key)
        builder = self._relation_query(name, relation)
        builder.where(f"{builder.from_table}.{owner_key}", "=", self.get_attribute(foreign_key))
        return builder.set_is_first(True)

    def belongs_to_many(self, related: str | type, pivot: str,
                        foreign_pivot_key: Optional[str] = None,
                        related_pivot_key: Optional[str] = None) -> Builder:
        """Related records linked to this one through rows of the ``pivot`` table."""
        name = _model_name(related)
        related_primary_key = registry.get_model(name).constructor.primary_key
        foreign_pivot_key = foreign_pivot_key or f"{_snake_case(type(self).__name__)}_id"
        related_pivot_key = related_pivot_key or f"{_snake_case(name)}_id"
        relation = Relation(kind=RelationKind.BELONGS_TO_MANY, related=name,
                            foreign_key=foreign_pivot_key, local_key=self.primary_key,
                            pivot=pivot, related_key=related_pivot_key)
        builder = self._relation_query(name, relation)
        builder.join(pivot, f"{pivot}.{related_pivot_key}", "=", f"{builder.from_table}.{related_primary_key}")
        return builder.where(f"{pivot}.{foreign_pivot_key}", "=", self.get_key())

    async def related(self, name: str) -> Any:
        """Run the registered relation accessor ``name`` and return its record(s).

        Single relations return a record or None, the others a list. Nothing is
        cached: every call runs the query again.
        """
        if name not in registry.get_relations(type(self).__name__):
            raise ConfigurationError(
                f"No relation `{name}` registered for {type(self).__name__}"
            )
        builder = getattr(self, name)()
        single = builder.relation.kind.is_single if builder.relation is not None else builder.is_first
        if single:
            return await builder.first()
        return await builder.get()
