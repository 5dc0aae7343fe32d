"""SQLite dialect."""

import logging
import urllib.parse
from typing import ClassVar

import aiosqlite

from .base import Dialect

logger = logging.getLogger("recordism")


class SqliteDialect(Dialect):
    """Dialect for SQLite (scheme sqlite), through aiosqlite."""

    SUPPORTED_SCHEMA: ClassVar[tuple[str, ...]] = ("sqlite",)

    @staticmethod
    def database_path(url: str) -> str:
        """Return the database path of a ``sqlite:///path`` URL (``:memory:`` when empty)."""
        parsed = urllib.parse.urlparse(url)
        return (parsed.path or "")[1:] or parsed.hostname or ":memory:"

    async def connect(self, url: str) -> aiosqlite.Connection:
        path = self.database_path(url)
        logger.info("Connecting to SQLite database %s", path)
        # autocommit; transactions are opened explicitly by the caller
        connection = await aiosqlite.connect(path, isolation_level=None)
        connection.row_factory = aiosqlite.Row
        await connection.execute("PRAGMA foreign_keys = ON")
        return connection
