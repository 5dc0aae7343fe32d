"""Named database connections and the adapter that executes compiled statements."""

import asyncio
import logging
import urllib.parse
from abc import ABC, abstractmethod
from typing import Any, Callable, Optional, Union

import aiosqlite
from pydantic import BaseModel, Field

from .dialects import get_dialect_for_scheme
from .errors import AdapterError, ConfigurationError

logger = logging.getLogger("recordism")


class Result(BaseModel):
    """Outcome of one executed statement."""

    rows: list[dict[str, Any]] = Field(default_factory=list)
    """Fetched rows as column name to value mappings (empty for writes)."""
    insert_id: Optional[Any] = None
    """Identifier generated by an INSERT, if any."""
    row_count: int = 0
    """Rows affected by a write, or rows fetched by a read."""


class ConnectionAdapter(ABC):
    """Executes SQL with bound parameters; transactions are driven by the caller."""

    @abstractmethod
    async def execute(self, sql: str, parameters: tuple[Any, ...] | list[Any] = ()) -> Result:
        """Run one statement. Failures are raised as AdapterError."""

    async def begin_transaction(self) -> None:
        await self.execute("BEGIN")

    async def commit(self) -> None:
        await self.execute("COMMIT")

    async def rollback(self) -> None:
        await self.execute("ROLLBACK")

    async def close(self) -> None:
        pass


class SqliteAdapter(ConnectionAdapter):
    """Adapter over an ``aiosqlite.Connection`` opened in autocommit mode."""

    def __init__(self, connection: aiosqlite.Connection):
        if not isinstance(connection, aiosqlite.Connection):
            raise TypeError("connection must be an instance of aiosqlite.Connection")
        self._connection = connection

    @classmethod
    async def open(cls, url: str) -> "SqliteAdapter":
        dialect = get_dialect_for_scheme(urllib.parse.urlparse(url).scheme)
        return cls(await dialect.connect(url))

    async def execute(self, sql: str, parameters: tuple[Any, ...] | list[Any] = ()) -> Result:
        parameters = tuple(parameters)
        logger.debug("%s %r", sql, parameters)
        try:
            cursor = await self._connection.execute(sql, parameters)
            try:
                rows = [dict(row) for row in await cursor.fetchall()]
                is_insert = sql.lstrip().upper().startswith("INSERT")
                return Result(
                    rows=rows,
                    insert_id=cursor.lastrowid if is_insert else None,
                    row_count=len(rows) if cursor.rowcount < 0 else cursor.rowcount,
                )
            finally:
                await cursor.close()
        except aiosqlite.Error as error:
            raise AdapterError(f"{error} (while executing: {sql})") from error

    async def close(self) -> None:
        logger.info("Closing SQLite connection")
        await self._connection.close()


DatabaseSpec = Union[str, Callable[[], str], ConnectionAdapter]

_databases: dict[str, DatabaseSpec] = {}
_adapters: dict[str, ConnectionAdapter] = {}
_opening: dict[str, asyncio.Lock] = {}


def connect(database: DatabaseSpec, name: str = "default") -> None:
    """Register a database under a connection name.

    ``database`` is a URL (``sqlite:///path/to/file.sqlite3``, ``sqlite:///:memory:``),
    a callable returning a URL (resolved when the adapter is first opened), or an
    already-built ConnectionAdapter. A name whose adapter is open must be
    released with ``disconnect()`` before it is registered again.
    """
    name = name or "default"
    if not isinstance(database, (str, ConnectionAdapter)) and not callable(database):
        raise ValueError(
            "database_url must be a str, a ConnectionAdapter, or a method returning a str; "
            f"got {type(database).__name__}"
        )
    if name in _adapters:
        raise ConfigurationError(
            f"Connection `{name}` is open; call disconnect() before registering it again"
        )
    _databases[name] = database


async def get_adapter(name: str = "default") -> ConnectionAdapter:
    """Return the adapter for a connection name, opening it on first use."""
    name = name or "default"
    if name in _adapters:
        return _adapters[name]
    try:
        database = _databases[name]
    except KeyError as error:
        raise ConfigurationError(f"No connection configured with name=`{name}`") from error
    async with _opening.setdefault(name, asyncio.Lock()):
        # another task may have opened it while this one waited
        if name in _adapters:
            return _adapters[name]
        if isinstance(database, ConnectionAdapter):
            adapter = database
        else:
            url = database() if callable(database) else database
            adapter = await SqliteAdapter.open(url)
        _adapters[name] = adapter
    return adapter


async def disconnect(name: str = "default") -> None:
    """Close the adapter opened for a connection name, if any; the registration is kept."""
    name = name or "default"
    _opening.pop(name, None)
    adapter = _adapters.pop(name, None)
    if adapter is not None:
        await adapter.close()
