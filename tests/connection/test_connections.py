"""Tests for recordism.connection: named connections and the SQLite adapter."""

import asyncio

import pytest

from recordism.connection import (
    SqliteAdapter,
    connect,
    disconnect,
    get_adapter,
)
from recordism.errors import AdapterError, ConfigurationError


class TestConnect:

    def test_rejects_unsupported_database_type(self):
        with pytest.raises(ValueError, match="database_url must be a str"):
            connect(42)

    @pytest.mark.asyncio
    async def test_unknown_name(self):
        with pytest.raises(ConfigurationError):
            await get_adapter("never-configured")

    @pytest.mark.asyncio
    async def test_callable_url_is_resolved_lazily(self, tmp_path):
        calls = []

        def database_url():
            calls.append(True)
            return f"sqlite:///{tmp_path / 'lazy.sqlite3'}"

        connect(database_url, name="lazy")
        assert calls == []
        try:
            adapter = await get_adapter("lazy")
            assert calls == [True]
            assert await get_adapter("lazy") is adapter
            assert calls == [True]
        finally:
            await disconnect("lazy")

    @pytest.mark.asyncio
    async def test_adapter_instance(self, tmp_path):
        adapter = await SqliteAdapter.open(f"sqlite:///{tmp_path / 'direct.sqlite3'}")
        connect(adapter, name="direct")
        try:
            assert await get_adapter("direct") is adapter
        finally:
            await disconnect("direct")

    @pytest.mark.asyncio
    async def test_unsupported_scheme(self):
        connect("postgresql://localhost/db", name="pg")
        with pytest.raises(ConfigurationError):
            await get_adapter("pg")

    @pytest.mark.asyncio
    async def test_reconnect_while_open_is_refused(self, setup_db):
        adapter = await get_adapter()
        with pytest.raises(ConfigurationError):
            connect("sqlite:///:memory:")
        assert await get_adapter() is adapter
        await disconnect()
        connect(f"sqlite:///{setup_db}")
        assert await get_adapter() is not adapter

    @pytest.mark.asyncio
    async def test_concurrent_first_use_opens_one_adapter(self, tmp_path):
        connect(f"sqlite:///{tmp_path / 'shared.sqlite3'}", name="shared")
        try:
            first, second = await asyncio.gather(get_adapter("shared"), get_adapter("shared"))
            assert first is second
        finally:
            await disconnect("shared")

    def test_adapter_requires_aiosqlite_connection(self):
        with pytest.raises(TypeError):
            SqliteAdapter(object())


class TestSqliteAdapter:

    @pytest.mark.asyncio
    async def test_execute_with_bound_values(self, setup_db):
        adapter = await get_adapter()
        await adapter.execute("CREATE TABLE things (id INTEGER PRIMARY KEY, name TEXT)")
        result = await adapter.execute("INSERT INTO things (name) VALUES (?), (?)", ("a", "b"))
        assert result.insert_id == 2
        assert result.row_count == 2
        result = await adapter.execute("SELECT id, name FROM things WHERE name = ?", ["b"])
        assert result.rows == [{"id": 2, "name": "b"}]
        assert result.row_count == 1
        assert result.insert_id is None

    @pytest.mark.asyncio
    async def test_update_row_count(self, setup_db):
        adapter = await get_adapter()
        await adapter.execute("CREATE TABLE things (id INTEGER PRIMARY KEY, name TEXT)")
        await adapter.execute("INSERT INTO things (name) VALUES ('a'), ('b'), ('c')")
        result = await adapter.execute("UPDATE things SET name = ? WHERE id > ?", ("z", 1))
        assert result.row_count == 2

    @pytest.mark.asyncio
    async def test_errors_are_wrapped(self, setup_db):
        adapter = await get_adapter()
        with pytest.raises(AdapterError) as info:
            await adapter.execute("SELECT * FROM missing_table")
        assert "missing_table" in str(info.value)
        assert info.value.__cause__ is not None

    @pytest.mark.asyncio
    async def test_disconnect_keeps_registration(self, setup_db):
        first = await get_adapter()
        await disconnect()
        second = await get_adapter()
        assert second is not first
