import os
import pytest
import pytest_asyncio
from recordism.connection import connect, disconnect, get_adapter
from recordism.events import emitter
from recordism.query import Builder


@pytest_asyncio.fixture(scope="function")
async def setup_db(request):
    """Setup a temporary file SQLite database for each test."""
    os.makedirs("/tmp/recordism-tests", exist_ok=True)
    path = f"/tmp/recordism-tests/test-{request.function.__module__}-{request.function.__name__}.sqlite3"
    try:
        os.remove(path)
    except FileNotFoundError:
        pass
    connect(f"sqlite:///{path}")
    yield path
    await disconnect()


@pytest_asyncio.fixture(scope="function")
async def users_table(setup_db):
    """A `users` table holding the rows {id: 1, first_name: 'test1'} and {id: 2, first_name: 'test2'}."""
    adapter = await get_adapter()
    await adapter.execute(
        "CREATE TABLE users ("
        "id INTEGER PRIMARY KEY, first_name VARCHAR(255), last_name VARCHAR(255), "
        "password VARCHAR(255), created_at TEXT, updated_at TEXT)"
    )
    await Builder().from_("users").insert_many([
        {"id": 1, "first_name": "test1"},
        {"id": 2, "first_name": "test2"},
    ])
    yield adapter


@pytest.fixture(autouse=True)
def clean_listeners():
    """Drop every event listener registered by a test."""
    yield
    emitter.remove_all_listeners()
