"""Tests for recordism.dialects: scheme lookup and SQLite URL parsing."""

import pytest

from recordism.dialects import Dialect, SqliteDialect, get_dialect_for_scheme
from recordism.errors import ConfigurationError


class TestGetDialectForScheme:

    @pytest.mark.parametrize("scheme", ["sqlite", "SQLITE", "sqlite+aiosqlite"])
    def test_sqlite(self, scheme):
        assert isinstance(get_dialect_for_scheme(scheme), SqliteDialect)

    @pytest.mark.parametrize("scheme", ["mysql", "postgresql", "", None])
    def test_unsupported(self, scheme):
        with pytest.raises(ConfigurationError):
            get_dialect_for_scheme(scheme)

    def test_dialect_is_abstract(self):
        with pytest.raises(TypeError):
            Dialect()


class TestSqliteDialect:

    @pytest.mark.parametrize("url, expected", [
        ("sqlite:///:memory:", ":memory:"),
        ("sqlite://", ":memory:"),
        ("sqlite:///relative.db", "relative.db"),
        ("sqlite:////tmp/absolute.db", "/tmp/absolute.db"),
    ])
    def test_database_path(self, url, expected):
        assert SqliteDialect.database_path(url) == expected

    @pytest.mark.asyncio
    async def test_connect_enables_foreign_keys(self, tmp_path):
        connection = await SqliteDialect().connect(f"sqlite:///{tmp_path / 'fk.sqlite3'}")
        try:
            cursor = await connection.execute("PRAGMA foreign_keys")
            row = await cursor.fetchone()
            assert row[0] == 1
            assert connection.isolation_level is None
        finally:
            await connection.close()
